"""
Unit tests for posterior summaries
"""

import numpy as np
import pandas as pd
import pytest

from gompertz_tails.model import PosteriorSamples
from gompertz_tails.summary import (
    fraction_below, posterior_median, prior_tail_probability,
    summarize_posterior, predictive_interval, nu_comparison_table,
)


class TestFractionBelow:

    def test_known_example(self):
        assert fraction_below([3, 8, 12, 25], 10) == 0.5

    def test_strictly_below(self):
        assert fraction_below([10, 10, 9], 10) == pytest.approx(1 / 3)

    def test_bounds(self, reset_seeds):
        draws = np.random.standard_t(3, size=1000)
        for threshold in (-100, -1, 0, 1, 100):
            frac = fraction_below(draws, threshold)
            assert 0.0 <= frac <= 1.0
        assert fraction_below(draws, -1e9) == 0.0
        assert fraction_below(draws, 1e9) == 1.0

    def test_deterministic(self):
        draws = np.linspace(0, 50, 101)
        assert fraction_below(draws, 10) == fraction_below(draws, 10)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            fraction_below([], 10)


def test_posterior_median():
    assert posterior_median([1, 5, 2, 100]) == 3.5


class TestPriorTailProbability:

    def test_matches_closed_form(self):
        rate, threshold = 0.1, 10.0
        expected = 1 - np.exp(-rate * (threshold - 2.0))
        assert prior_tail_probability(rate, threshold) == pytest.approx(expected)

    def test_below_lower_bound_is_zero(self):
        assert prior_tail_probability(0.5, 2.0) == 0.0
        assert prior_tail_probability(0.5, 1.0) == 0.0

    def test_stronger_prior_more_mass_below(self):
        assert prior_tail_probability(0.5, 10) > prior_tail_probability(0.01, 10)

    def test_invalid_rate_raises(self):
        with pytest.raises(ValueError):
            prior_tail_probability(0.0, 10)


class TestSummarizePosterior:

    def test_fields(self):
        samples = PosteriorSamples({'nu': np.arange(1, 101, dtype=float),
                                    'b': np.zeros(100),
                                    'pred': np.zeros((100, 3))})

        summary = summarize_posterior(samples, credible_interval=0.9)

        assert set(summary) == {'nu', 'b'}
        assert summary['nu']['mean'] == pytest.approx(50.5)
        assert summary['nu']['median'] == pytest.approx(50.5)
        assert summary['nu']['ci_lower'] < summary['nu']['median'] < summary['nu']['ci_upper']
        assert summary['b']['std'] == 0.0

    def test_invalid_interval_raises(self):
        with pytest.raises(ValueError):
            summarize_posterior({'nu': np.ones(5)}, credible_interval=1.5)


def test_predictive_interval_shapes():
    pred = np.tile(np.arange(4, dtype=float), (200, 1))
    pred += np.random.default_rng(0).normal(0, 1, pred.shape)

    lower, median, upper = predictive_interval({'pred': pred}, 0.8)

    assert lower.shape == median.shape == upper.shape == (4,)
    assert np.all(lower < median) and np.all(median < upper)


class TestNuComparisonTable:

    def test_one_row_per_fit(self):
        fits = {
            ('a', 0.01): PosteriorSamples({'nu': [3, 8, 12, 25]}),
            ('a', 0.5): PosteriorSamples({'nu': [3, 4, 5, 6]}),
            ('b', 0.01): PosteriorSamples({'nu': [50, 60, 70, 80]}),
        }

        table = nu_comparison_table(fits, threshold=10)

        assert isinstance(table, pd.DataFrame)
        assert list(table['dataset']) == ['a', 'a', 'b']
        assert list(table['nu_rate']) == [0.01, 0.5, 0.01]
        assert list(table['posterior_prob_below']) == [0.5, 1.0, 0.0]
        assert table.loc[0, 'prior_prob_below'] == pytest.approx(prior_tail_probability(0.01, 10))
        assert table.loc[1, 'posterior_median'] == 4.5
        assert table.attrs['threshold'] == 10

    def test_prior_median(self):
        table = nu_comparison_table({('a', 0.1): PosteriorSamples({'nu': [5.0]})})
        assert table.loc[0, 'prior_median'] == pytest.approx(2.0 + np.log(2) / 0.1)
