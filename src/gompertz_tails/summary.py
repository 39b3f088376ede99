"""
Posterior summaries for the Gompertz Tails workshop.

Everything here is a pure function of a sample collection: tail
probabilities, medians, credible intervals, and the prior-vs-posterior
comparison table for nu.
"""
from typing import Dict, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from .model import NU_LOWER_BOUND, SCALAR_PARAMS


def fraction_below(samples: Sequence[float], threshold: float) -> float:
    """Fraction of draws strictly below `threshold`.

    Used as a posterior tail-probability estimate, e.g. Pr(nu < 10).
    """
    values = np.asarray(samples, dtype=np.float64).ravel()
    if values.size == 0:
        raise ValueError("Cannot summarize an empty sample sequence")
    return float(np.count_nonzero(values < threshold)) / values.size


def posterior_median(samples: Sequence[float]) -> float:
    values = np.asarray(samples, dtype=np.float64).ravel()
    if values.size == 0:
        raise ValueError("Cannot summarize an empty sample sequence")
    return float(np.median(values))


def prior_tail_probability(nu_rate: float, threshold: float,
                           lower: float = NU_LOWER_BOUND) -> float:
    """Prior Pr(nu < threshold) for nu = lower + Exponential(nu_rate)."""
    if not nu_rate > 0:
        raise ValueError(f"nu_rate must be positive, got {nu_rate}")
    return float(stats.expon.cdf(threshold, loc=lower, scale=1.0 / nu_rate))


def summarize_posterior(samples: Mapping[str, np.ndarray],
                        credible_interval: float = 0.95) -> Dict[str, Dict[str, float]]:
    """Generate summary statistics for the scalar parameters.

    Args:
        samples: PosteriorSamples (or any name -> draws mapping)
        credible_interval: Equal-tailed interval width (0.95 = 95% CI)

    Returns:
        Dict with mean, median, std, CI bounds for each parameter
    """
    if not 0.0 < credible_interval < 1.0:
        raise ValueError(f"credible_interval must be in (0, 1), got {credible_interval}")

    alpha = (1.0 - credible_interval) / 2.0
    summary = {}
    for name in SCALAR_PARAMS:
        if name not in samples:
            continue
        values = np.asarray(samples[name], dtype=np.float64).ravel()
        lo, hi = np.quantile(values, [alpha, 1.0 - alpha])
        summary[name] = {
            'mean': float(values.mean()),
            'median': float(np.median(values)),
            'std': float(values.std(ddof=1)) if values.size > 1 else 0.0,
            'ci_lower': float(lo),
            'ci_upper': float(hi),
        }
    return summary


def predictive_interval(samples: Mapping[str, np.ndarray],
                        credible_interval: float = 0.95) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Per-time-step (lower, median, upper) of the predicted observations."""
    pred = np.asarray(samples['pred'], dtype=np.float64)
    alpha = (1.0 - credible_interval) / 2.0
    lower, median, upper = np.quantile(pred, [alpha, 0.5, 1.0 - alpha], axis=0)
    return lower, median, upper


def nu_comparison_table(fits: Mapping[Tuple[str, float], Mapping[str, np.ndarray]],
                        threshold: float = 10.0) -> pd.DataFrame:
    """Compare the prior and posterior of nu for every (dataset, nu_rate) fit.

    Args:
        fits: {(dataset name, nu_rate): samples}
        threshold: nu below this counts as heavy-tailed

    Returns:
        DataFrame with one row per fit, in the order given
    """
    rows = []
    for (dataset, nu_rate), samples in fits.items():
        nu = samples['nu']
        rows.append({
            'dataset': dataset,
            'nu_rate': nu_rate,
            'prior_prob_below': prior_tail_probability(nu_rate, threshold),
            'posterior_prob_below': fraction_below(nu, threshold),
            'prior_median': NU_LOWER_BOUND + np.log(2.0) / nu_rate,
            'posterior_median': posterior_median(nu),
        })

    columns = ['dataset', 'nu_rate', 'prior_prob_below', 'posterior_prob_below',
               'prior_median', 'posterior_median']
    table = pd.DataFrame(rows, columns=columns)
    table.attrs['threshold'] = threshold
    return table


def print_comparison_table(table: pd.DataFrame):
    """Console report of nu_comparison_table() output."""
    threshold = table.attrs.get('threshold', 10.0)
    print(f"\n[Summary] Pr(nu < {threshold:g}): prior vs posterior")
    print(f"{'Dataset':<20} {'nu_rate':>8} {'Prior':>8} {'Posterior':>10} {'Median nu':>10}")
    print("-" * 60)
    for _, row in table.iterrows():
        print(f"{row['dataset']:<20} {row['nu_rate']:>8g} "
              f"{row['prior_prob_below']:>8.3f} {row['posterior_prob_below']:>10.3f} "
              f"{row['posterior_median']:>10.2f}")
