import numbers
import os
from collections import namedtuple

# Sweep defaults
SAMPLE_SIZES = (100_000, 1_000_000, 5_000_000)
THREAD_COUNTS = (1, 2, 4, 8)
NUM_TASKS = 4
TRIALS = 5  # independent runs per configuration

# Engine defaults
BATCH_SIZE = 1 << 18  # points drawn per numpy call, bounds memory per worker
REMAINDER_POLICY = "drop"  # "drop" or "distribute"
BACKEND = "process"  # "process" or "thread"

LOG_LEVEL = os.environ.get("MC_PI_LOG_LEVEL", "WARNING").upper()


class InvalidConfig(ValueError):
    pass


def check_positive(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise InvalidConfig(f"{name} must be a positive integer, got {value!r}")
    return value


class SimulationConfig(namedtuple("SimulationConfig", "total_points num_tasks num_threads seed")):
    """One estimation run: how many points, how finely to split them, how many workers.

    ``seed`` is optional; leave it as None for fresh entropy on every call.
    """

    __slots__ = ()

    def __new__(cls, total_points, num_tasks=1, num_threads=1, seed=None):
        check_positive("total_points", total_points)
        check_positive("num_tasks", num_tasks)
        check_positive("num_threads", num_threads)
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, numbers.Integral) or seed < 0):
            raise InvalidConfig(f"seed must be a non-negative integer or None, got {seed!r}")
        return super().__new__(cls, total_points, num_tasks, num_threads, seed)

    @classmethod
    def _make(cls, iterable):
        return cls(*iterable)

    @property
    def points_per_task(self):
        return self.total_points // self.num_tasks

    @property
    def remainder(self):
        return self.total_points % self.num_tasks

    def fresh(self):
        return SimulationConfig(*self)
