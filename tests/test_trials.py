import math

import pytest

from monte_carlo import ConcurrentEstimator, SequentialEstimator
from sim_config import InvalidConfig, SimulationConfig
from trials import ConfigStatistics, TrialSample, run_trials, sample_std, summarize


class ScriptedEstimator:
    """Returns canned estimates and records the configs it was handed."""

    name = "Fake"

    def __init__(self, values):
        self.values = list(values)
        self.seen = []

    def estimate(self, config):
        self.seen.append(config)
        return self.values[len(self.seen) - 1]


class TestSummarize:
    def test_mean_and_sample_std(self):
        stats = summarize([TrialSample(v, abs(v - math.pi)) for v in (3.0, 3.2, 3.1)])
        assert stats.mean_estimate == pytest.approx(3.1)
        assert stats.std_dev_estimate == pytest.approx(0.1)
        assert stats.trials == 3

    def test_error_statistics(self):
        stats = summarize([TrialSample(0.0, 1.0), TrialSample(0.0, 3.0)])
        assert stats.mean_error == pytest.approx(2.0)
        assert stats.std_dev_error == pytest.approx(math.sqrt(2.0))

    def test_single_sample_has_no_spread(self):
        stats = summarize([TrialSample(3.0, 0.14)])
        assert stats.std_dev_estimate == 0.0
        assert stats.std_dev_error == 0.0

    def test_empty_rejected(self):
        with pytest.raises(InvalidConfig):
            summarize([])

    def test_sample_std_uses_n_minus_one(self):
        assert sample_std([1.0, 3.0]) == pytest.approx(math.sqrt(2.0))
        assert sample_std([5.0]) == 0.0


class TestRunTrials:
    def test_each_trial_gets_a_fresh_config(self):
        config = SimulationConfig(100, 2, 2)
        estimator = ScriptedEstimator([3.0, 3.1, 3.2])
        run_trials(config, estimator, 3)
        assert len(estimator.seen) == 3
        assert all(seen == config for seen in estimator.seen)
        assert all(seen is not config for seen in estimator.seen)
        assert len({id(seen) for seen in estimator.seen}) == 3

    def test_errors_are_absolute(self):
        stats = run_trials(SimulationConfig(10, 1, 1), ScriptedEstimator([3.0, 3.3]), 2)
        assert [s.error for s in stats.samples] == pytest.approx([math.pi - 3.0, 3.3 - math.pi])

    def test_one_trial_has_zero_spread(self):
        stats = run_trials(SimulationConfig(10_000, 2, 2), SequentialEstimator(), 1)
        assert isinstance(stats, ConfigStatistics)
        assert stats.std_dev_estimate == 0.0
        assert stats.std_dev_error == 0.0

    @pytest.mark.parametrize("trials", [0, -1, 2.5])
    def test_invalid_trial_count(self, trials):
        with pytest.raises(InvalidConfig):
            run_trials(SimulationConfig(10, 1, 1), SequentialEstimator(), trials)

    def test_mean_within_trial_range(self):
        stats = run_trials(SimulationConfig(1000, 4, 2), ConcurrentEstimator(backend="thread"), 5)
        assert stats.trials == 5
        assert stats.min_estimate - 1e-12 <= stats.mean_estimate <= stats.max_estimate + 1e-12

    def test_estimator_errors_propagate(self):
        class Broken:
            def estimate(self, config):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            run_trials(SimulationConfig(10, 1, 1), Broken(), 3)
