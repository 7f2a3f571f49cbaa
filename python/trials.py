import logging
import math
from collections import namedtuple

import numpy as np

from sim_config import InvalidConfig, check_positive

logger = logging.getLogger(__name__)

TrialSample = namedtuple("TrialSample", "estimate error")


class ConfigStatistics(namedtuple("ConfigStatistics",
                                  "mean_estimate std_dev_estimate mean_error std_dev_error samples")):
    __slots__ = ()

    @property
    def trials(self):
        return len(self.samples)

    @property
    def min_estimate(self):
        return min(s.estimate for s in self.samples)

    @property
    def max_estimate(self):
        return max(s.estimate for s in self.samples)


def sample_std(values):
    # n-1 denominator; a single observation has no spread
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def summarize(samples):
    samples = tuple(samples)
    if not samples:
        raise InvalidConfig("at least one trial is required")
    estimates = np.array([s.estimate for s in samples], dtype=np.float64)
    errors = np.array([s.error for s in samples], dtype=np.float64)
    return ConfigStatistics(
        mean_estimate=float(estimates.mean()),
        std_dev_estimate=sample_std(estimates),
        mean_error=float(errors.mean()),
        std_dev_error=sample_std(errors),
        samples=samples,
    )


def run_trials(config, estimator, trials):
    """Run ``estimator`` ``trials`` times on copies of ``config`` and reduce the results.

    Trials run one after another; any parallelism lives inside the estimator.
    """
    check_positive("trials", trials)
    samples = []
    for i in range(trials):
        estimate = estimator.estimate(config.fresh())
        samples.append(TrialSample(estimate, abs(estimate - math.pi)))
        logger.debug("trial %d/%d of %s: %.6f", i + 1, trials, config, estimate)
    return summarize(samples)
