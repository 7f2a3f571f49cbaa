import logging
from collections import namedtuple
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import numpy as np

from sim_config import BACKEND, BATCH_SIZE, REMAINDER_POLICY, InvalidConfig, SimulationConfig

logger = logging.getLogger(__name__)

REMAINDER_POLICIES = ("drop", "distribute")
EXECUTORS = {"process": ProcessPoolExecutor, "thread": ThreadPoolExecutor}

ChunkResult = namedtuple("ChunkResult", "inside_count sampled")


class WorkUnitFailure(RuntimeError):
    """A work unit of the concurrent estimator raised; the whole estimate is aborted."""

    def __init__(self, unit, cause):
        super().__init__(f"work unit {unit} failed: {cause!r}")
        self.unit = unit
        self.cause = cause


def as_config(config):
    # rebuilt even for SimulationConfig instances, tuple.__new__ skips validation
    if isinstance(config, SimulationConfig):
        return SimulationConfig(*config)
    try:
        return SimulationConfig(config.total_points, config.num_tasks,
                                config.num_threads, getattr(config, "seed", None))
    except AttributeError:
        raise InvalidConfig(f"not a simulation config: {config!r}") from None


def count_inside(samples, rng, batch_size=BATCH_SIZE):
    """Draw ``samples`` points uniformly on [-1, 1]^2 and count those in the unit circle."""
    inside = 0
    remaining = samples
    while remaining > 0:
        n = min(remaining, batch_size)
        x = rng.uniform(-1.0, 1.0, n)
        y = rng.uniform(-1.0, 1.0, n)
        inside += int(np.count_nonzero(x * x + y * y <= 1.0))
        remaining -= n
    return inside


def monte_carlo_worker(args):
    samples, seed = args
    rng = np.random.default_rng(seed)
    return ChunkResult(count_inside(samples, rng), samples)


def partition(config, policy=REMAINDER_POLICY):
    """Split ``total_points`` into exactly ``num_tasks`` sample counts.

    "drop" gives every unit ``points_per_task`` and discards the remainder;
    "distribute" hands one extra sample to each of the first ``remainder`` units.
    """
    if policy not in REMAINDER_POLICIES:
        raise ValueError(f"unknown remainder policy: {policy!r}")
    counts = [config.points_per_task] * config.num_tasks
    if policy == "distribute":
        for i in range(config.remainder):
            counts[i] += 1
    elif config.remainder:
        logger.debug("dropping %d of %d points", config.remainder, config.total_points)
    return counts


def _gather(executor_class, worker, tasks, num_workers):
    results = []
    with executor_class(max_workers=num_workers) as executor:
        futures = [executor.submit(worker, task) for task in tasks]
        for i, future in enumerate(futures):
            try:
                results.append(future.result())
            except Exception as exc:
                # a worker process that dies outright surfaces here as BrokenProcessPool
                for other in futures[i + 1:]:
                    other.cancel()
                logger.error("work unit %d of %d failed: %r", i, len(tasks), exc)
                raise WorkUnitFailure(i, exc) from exc
    return results


class SequentialEstimator:
    name = "Seq"

    def estimate(self, config):
        config = as_config(config)
        rng = np.random.default_rng(config.seed)
        inside = count_inside(config.total_points, rng)
        return 4.0 * inside / config.total_points


class ConcurrentEstimator:
    """Fork-join estimator: ``num_tasks`` independent units on a pool of ``num_threads`` workers.

    Each unit samples against its own child SeedSequence. The pool lives only
    for the duration of one call. A failing unit aborts the call with
    WorkUnitFailure; no partial sum is ever returned.
    """

    name = "Par"

    def __init__(self, backend=BACKEND, remainder=REMAINDER_POLICY, worker=monte_carlo_worker):
        if backend not in EXECUTORS:
            raise ValueError(f"unknown backend: {backend!r}")
        if remainder not in REMAINDER_POLICIES:
            raise ValueError(f"unknown remainder policy: {remainder!r}")
        self.backend = backend
        self.remainder = remainder
        self.worker = worker

    def run_chunks(self, config):
        config = as_config(config)
        counts = partition(config, self.remainder)
        seeds = np.random.SeedSequence(config.seed).spawn(len(counts))
        tasks = list(zip(counts, seeds))

        logger.debug("dispatching %d units of ~%d points on %d %s workers",
                     len(tasks), config.points_per_task, config.num_threads, self.backend)
        return _gather(EXECUTORS[self.backend], self.worker, tasks, config.num_threads)

    def estimate(self, config):
        config = as_config(config)
        chunks = self.run_chunks(config)
        total_inside = sum(chunk.inside_count for chunk in chunks)
        # denominator is total_points even when the remainder was dropped
        return 4.0 * total_inside / config.total_points
