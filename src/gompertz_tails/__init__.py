"""
Gompertz Tails - Heavy-Tailed Population Dynamics Workshop

Fits a Gompertz state-space model with Student-t process error to
ecological abundance series and compares the posterior of the
tail-heaviness parameter nu with its prior across data sets and
prior strengths.
"""

__version__ = "0.1.0"

# Data loading
from .abundance_data import (
    AbundanceDataLoader,
    log_abundance,
    series_records,
)

# Model and sampling
from .model import (
    GompertzConfig,
    PosteriorSamples,
    PyMCSampler,
    ConvergenceWarning,
    build_gompertz_model,
    make_model_data,
    fit_gompertz,
    check_convergence,
    simulate_gompertz,
)

# Summaries
from .summary import (
    fraction_below,
    posterior_median,
    prior_tail_probability,
    summarize_posterior,
    nu_comparison_table,
)

# Workflow
from .workflow import run_nu_comparison, NuComparisonResult, DEFAULT_NU_RATES

__all__ = [
    "AbundanceDataLoader",
    "log_abundance",
    "series_records",
    "GompertzConfig",
    "PosteriorSamples",
    "PyMCSampler",
    "ConvergenceWarning",
    "build_gompertz_model",
    "make_model_data",
    "fit_gompertz",
    "check_convergence",
    "simulate_gompertz",
    "fraction_below",
    "posterior_median",
    "prior_tail_probability",
    "summarize_posterior",
    "nu_comparison_table",
    "run_nu_comparison",
    "NuComparisonResult",
    "DEFAULT_NU_RATES",
]
