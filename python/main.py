#!/usr/bin/env python3
import logging
import math
import sys
import time
from collections import namedtuple

from monte_carlo import ConcurrentEstimator, SequentialEstimator
from sim_config import (
    LOG_LEVEL,
    NUM_TASKS,
    SAMPLE_SIZES,
    THREAD_COUNTS,
    TRIALS,
    InvalidConfig,
    SimulationConfig,
    check_positive,
)
from trials import run_trials

logger = logging.getLogger(__name__)

MODES = ("trials", "timing")

TimingResult = namedtuple("TimingResult", "estimate error elapsed speedup")


class ConsoleReporter:
    def __init__(self, out=None):
        self.out = out or sys.stdout

    def _print(self, line=""):
        print(line, file=self.out)

    def begin_size(self, total_points, mode):
        self._print(f"Total points N = {total_points}")
        self._print()
        if mode == "trials":
            self._print(f"{'Version':<10} {'Threads':<8} {'MeanEst':<15} {'StdDevEst':<15} "
                        f"{'MeanError':<15} {'StdDevError':<15} {'MinEst':<12} {'MaxEst':<12}")
            self._print("-" * 106)
        else:
            self._print(f"{'Version':<10} {'Threads':<8} {'Estimate':<10} {'Error':<10} "
                        f"{'Time(ms)':<10} {'Speedup':<10}")
            self._print("-" * 60)

    def trial_row(self, label, threads, stats):
        self._print(f"{label:<10} {threads:<8d} {stats.mean_estimate:<15.8f} {stats.std_dev_estimate:<15.8f} "
                    f"{stats.mean_error:<15.8f} {stats.std_dev_error:<15.8f} "
                    f"{stats.min_estimate:<12.6f} {stats.max_estimate:<12.6f}")

    def timing_row(self, label, threads, result):
        speedup = f"{result.speedup:.2f}x"
        self._print(f"{label:<10} {threads:<8d} {result.estimate:<10.6f} {result.error:<10.6g} "
                    f"{result.elapsed * 1000:<10.2f} {speedup:<10}")

    def end_size(self):
        self._print()
        self._print("=" * 80)
        self._print()


def run_trial_sweep(sample_sizes=SAMPLE_SIZES, thread_counts=THREAD_COUNTS, num_tasks=NUM_TASKS,
                    trials=TRIALS, reporter=None, sequential=None, concurrent=None):
    reporter = reporter or ConsoleReporter()
    sequential = sequential or SequentialEstimator()
    concurrent = concurrent or ConcurrentEstimator()
    check_positive("trials", trials)

    results = []
    for total_points in sample_sizes:
        reporter.begin_size(total_points, "trials")

        stats = run_trials(SimulationConfig(total_points, num_tasks, 1), sequential, trials)
        reporter.trial_row(sequential.name, 1, stats)
        results.append((sequential.name, total_points, 1, stats))

        for threads in thread_counts:
            stats = run_trials(SimulationConfig(total_points, num_tasks, threads), concurrent, trials)
            reporter.trial_row(concurrent.name, threads, stats)
            results.append((concurrent.name, total_points, threads, stats))

        reporter.end_size()
    return results


def timed_estimate(estimator, config):
    start_time = time.time()
    estimate = estimator.estimate(config)
    elapsed = time.time() - start_time
    return estimate, elapsed


def compute_speedup(baseline, elapsed):
    if elapsed <= 0:
        return math.inf
    return baseline / elapsed


def run_timing_sweep(sample_sizes=SAMPLE_SIZES, thread_counts=THREAD_COUNTS, num_tasks=NUM_TASKS,
                     reporter=None, sequential=None, concurrent=None):
    reporter = reporter or ConsoleReporter()
    sequential = sequential or SequentialEstimator()
    concurrent = concurrent or ConcurrentEstimator()

    results = []
    for total_points in sample_sizes:
        reporter.begin_size(total_points, "timing")

        estimate, seq_time = timed_estimate(sequential, SimulationConfig(total_points, num_tasks, 1))
        result = TimingResult(estimate, abs(math.pi - estimate), seq_time, 1.0)
        reporter.timing_row(sequential.name, 1, result)
        results.append((sequential.name, total_points, 1, result))

        for threads in thread_counts:
            estimate, par_time = timed_estimate(concurrent, SimulationConfig(total_points, num_tasks, threads))
            result = TimingResult(estimate, abs(math.pi - estimate), par_time,
                                  compute_speedup(seq_time, par_time))
            reporter.timing_row(concurrent.name, threads, result)
            results.append((concurrent.name, total_points, threads, result))

        reporter.end_size()
    return results


def parse_counts(text):
    try:
        values = [int(v) for v in text.split(",") if v.strip()]
    except ValueError:
        raise InvalidConfig(f"expected comma-separated integers, got {text!r}") from None
    if not values:
        raise InvalidConfig(f"expected at least one value, got {text!r}")
    for v in values:
        check_positive("count", v)
    return values


def parse_single(name, text):
    values = parse_counts(text)
    if len(values) != 1:
        raise InvalidConfig(f"{name} takes a single value, got {text!r}")
    return values[0]


def resolve_log_level(name):
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    print(f"Unknown log level {name!r}, using WARNING")
    return logging.WARNING


def parse_args(argv):
    mode = argv[0].lower()
    if mode not in MODES:
        raise InvalidConfig(f"unknown mode: {mode}")
    sample_sizes = parse_counts(argv[1]) if len(argv) > 1 else list(SAMPLE_SIZES)
    thread_counts = parse_counts(argv[2]) if len(argv) > 2 else list(THREAD_COUNTS)
    num_tasks = parse_single("num_tasks", argv[3]) if len(argv) > 3 else NUM_TASKS
    trials = parse_single("trials", argv[4]) if len(argv) > 4 else TRIALS
    return mode, sample_sizes, thread_counts, num_tasks, trials


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=resolve_log_level(LOG_LEVEL), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if not 1 <= len(argv) <= 5:
        print(f"Usage: {sys.argv[0]} <mode> [sample_sizes] [thread_counts] [num_tasks] [trials]")
        print("Modes: trials, timing")
        sys.exit(1)

    try:
        mode, sample_sizes, thread_counts, num_tasks, trials = parse_args(argv)
    except InvalidConfig as exc:
        print(f"Invalid arguments: {exc}")
        sys.exit(1)

    start_time = time.time()
    if mode == "trials":
        print("Multi-trial pi experiment\n")
        run_trial_sweep(sample_sizes, thread_counts, num_tasks, trials)
    else:
        print("Pi experiment results\n")
        run_timing_sweep(sample_sizes, thread_counts, num_tasks)
    logger.info("sweep finished in %.2fs", time.time() - start_time)


if __name__ == "__main__":
    main()
