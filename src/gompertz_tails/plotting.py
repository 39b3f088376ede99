"""
Diagnostic plots for Gompertz Tails fits.

Creates:
1. Prior vs posterior of nu
2. Observed vs predicted log abundance (distribution + time series)
3. ArviZ trace plots
"""
from typing import Optional

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from scipy import stats

from .abundance_data import log_abundance
from .model import NU_LOWER_BOUND, SCALAR_PARAMS, PosteriorSamples
from .summary import predictive_interval

sns.set_style('whitegrid')


def _finish(fig, save_path: Optional[str], show: bool):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
    if show:
        plt.show()


def plot_nu_prior_posterior(samples: PosteriorSamples,
                            nu_rate: float,
                            title: Optional[str] = None,
                            nu_max: Optional[float] = None,
                            save_path: Optional[str] = None,
                            show: bool = False):
    """Histogram of posterior nu with the prior density overlaid."""
    nu = np.asarray(samples['nu'])
    if nu_max is None:
        nu_max = float(np.quantile(nu, 0.99))

    fig, ax = plt.subplots(figsize=(7, 4))
    sns.histplot(nu[nu <= nu_max], bins=40, stat='density', color='steelblue',
                 alpha=0.6, label='Posterior', ax=ax)

    grid = np.linspace(NU_LOWER_BOUND, nu_max, 400)
    prior = stats.expon.pdf(grid, loc=NU_LOWER_BOUND, scale=1.0 / nu_rate)
    ax.plot(grid, prior, color='darkred', lw=2, label=f'Prior (rate={nu_rate:g})')

    ax.set_xlabel('nu')
    ax.set_ylabel('Density')
    ax.set_title(title or 'nu: prior vs posterior')
    ax.legend()

    _finish(fig, save_path, show)
    return fig


def plot_observed_vs_predicted(series: pd.DataFrame,
                               samples: PosteriorSamples,
                               credible_interval: float = 0.95,
                               title: Optional[str] = None,
                               save_path: Optional[str] = None,
                               show: bool = False):
    """Observed log abundance against posterior-predictive draws.

    Left: distribution of observed values vs pooled predicted values.
    Right: time series with the predictive interval.
    """
    y = log_abundance(series)
    years = series['year'].to_numpy()
    pred = np.asarray(samples['pred'])
    lower, median, upper = predictive_interval(samples, credible_interval)

    fig, (ax_dist, ax_ts) = plt.subplots(1, 2, figsize=(12, 4))

    sns.kdeplot(pred[:, 1:].ravel(), ax=ax_dist, color='steelblue',
                fill=True, alpha=0.3, label='Predicted')
    sns.histplot(y, ax=ax_dist, stat='density', color='black', alpha=0.4,
                 label='Observed')
    ax_dist.set_xlabel('log abundance')
    ax_dist.legend()

    ax_ts.fill_between(years, lower, upper, color='steelblue', alpha=0.3,
                       label=f'{credible_interval:.0%} predictive')
    ax_ts.plot(years, median, color='steelblue', lw=1.5, label='Predicted median')
    ax_ts.plot(years, y, 'o-', color='black', ms=3, lw=1, label='Observed')
    ax_ts.set_xlabel('Year')
    ax_ts.set_ylabel('log abundance')
    ax_ts.legend()

    if title:
        fig.suptitle(title)

    _finish(fig, save_path, show)
    return fig


def plot_trace(samples: PosteriorSamples,
               save_path: Optional[str] = None,
               show: bool = False):
    """ArviZ trace plot for the scalar parameters."""
    if samples.inference_data is None:
        raise ValueError("Trace plot needs inference data from a PyMC fit")

    axes = az.plot_trace(samples.inference_data, var_names=SCALAR_PARAMS,
                         compact=True, figsize=(12, 8))
    fig = axes.ravel()[0].figure
    _finish(fig, save_path, show)
    return fig
