"""
Gompertz Tails — Heavy-Tailed Gompertz State-Space Model
=========================================================
Fits a Gompertz population-growth model with Student-t process error to a
log-abundance series via MCMC.

Model (on log abundance y):
    y[t] ~ StudentT(nu, lambda + b * y[t-1], sigma_proc)

    lambda      ~ Normal(0, 10)            growth rate
    b           ~ Uniform(-1, 1)           density dependence (autocorrelation)
    sigma_proc  ~ HalfStudentT(3, 3)       process-noise scale
    nu - 2      ~ Exponential(nu_rate)     tail heaviness, bounded below at 2

Small nu = heavy tails ("black swan" population jumps). Large nu approaches
a normal process error. nu_rate sets how strongly the prior pulls nu toward
small values: a larger rate is a stronger prior.

The sampler itself (NUTS) is PyMC's. This module only packages data, calls
it, and hands back a named mapping of draws.

Usage:
    from gompertz_tails import AbundanceDataLoader, fit_gompertz, GompertzConfig

    series = AbundanceDataLoader('data').load_abundance_csv('wood_mouse.csv')
    samples = fit_gompertz(series, nu_rate=0.01,
                           config=GompertzConfig(n_chains=4, n_draws=1000))
    samples['nu']        # 1D array of draws
    samples['pred']      # [draws, N] predicted observations

License: MIT
"""

import json
import os
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, asdict, field
from typing import Callable, Dict, Iterator, List, Optional

import numpy as np
import pandas as pd
import pymc as pm
import arviz as az
import xarray as xr

from .abundance_data import log_abundance


SCALAR_PARAMS = ['lambda', 'b', 'sigma_proc', 'nu']
NU_LOWER_BOUND = 2.0


class ConvergenceWarning(UserWarning):
    """Emitted when MCMC diagnostics cross their configured thresholds."""


# ═══════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════

@dataclass
class GompertzConfig:
    """Configuration for MCMC sampling of the Gompertz model."""
    n_chains: int = 4              # Number of MCMC chains
    n_draws: int = 2000            # Samples per chain (post-tuning)
    n_tune: int = 1000             # Tuning steps per chain
    target_accept: float = 0.95    # Target acceptance rate (NUTS)

    # Computational
    cores: int = field(default_factory=lambda: os.cpu_count() or 1)  # hint passed to PyMC
    progressbar: bool = True       # Show sampler progress bar
    random_seed: Optional[int] = 42

    # Diagnostics
    check_convergence: bool = True
    rhat_threshold: float = 1.01   # R-hat convergence threshold
    max_divergences: int = 0       # Divergent transitions tolerated silently

    verbose: bool = True

    def __post_init__(self):
        for name in ('n_chains', 'n_draws', 'cores'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.n_tune < 0:
            raise ValueError(f"n_tune must be >= 0, got {self.n_tune}")
        if not 0.0 < self.target_accept < 1.0:
            raise ValueError(f"target_accept must be in (0, 1), got {self.target_accept}")

    def to_json(self, filepath: str):
        """Save configuration to a JSON file."""
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def from_json(cls, filepath: str) -> 'GompertzConfig':
        """Load configuration from a JSON file written by to_json()."""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls(**config_dict)


# ═══════════════════════════════════════════════════════════════
# Model definition
# ═══════════════════════════════════════════════════════════════

def make_model_data(series: pd.DataFrame, nu_rate: float) -> Dict:
    """Package an abundance series into the model's input payload.

    Returns:
        {'N': record count, 'y': log abundance (copy), 'nu_rate': prior rate}
    """
    if not nu_rate > 0:
        raise ValueError(f"nu_rate must be positive, got {nu_rate}")
    y = log_abundance(series)
    return {'N': int(len(y)), 'y': y, 'nu_rate': float(nu_rate)}


def build_gompertz_model(data: Dict) -> pm.Model:
    """Build the heavy-tailed Gompertz model from an input payload.

    Args:
        data: {'N', 'y', 'nu_rate'} as produced by make_model_data()

    Returns:
        PyMC model ready for sampling
    """
    y = np.asarray(data['y'], dtype=np.float64)
    n = int(data['N'])
    if n != len(y):
        raise ValueError(f"N={n} does not match length of y ({len(y)})")
    if n < 2:
        raise ValueError(f"Need at least 2 observations, got {n}")
    if not data['nu_rate'] > 0:
        raise ValueError(f"nu_rate must be positive, got {data['nu_rate']}")

    with pm.Model() as model:
        lambda_ = pm.Normal('lambda', mu=0.0, sigma=10.0)
        b = pm.Uniform('b', lower=-1.0, upper=1.0)
        sigma_proc = pm.HalfStudentT('sigma_proc', nu=3.0, sigma=3.0)

        # Exponential truncated at 2 == 2 + Exponential (memoryless)
        nu_excess = pm.Exponential('nu_excess', lam=data['nu_rate'])
        nu = pm.Deterministic('nu', NU_LOWER_BOUND + nu_excess)

        pm.StudentT('y_next',
                    nu=nu,
                    mu=lambda_ + b * y[:-1],
                    sigma=sigma_proc,
                    observed=y[1:])

    return model


MODEL_BUILDERS: Dict[str, Callable[[Dict], pm.Model]] = {
    'gompertz_t': build_gompertz_model,
}


def simulate_gompertz(n_years: int,
                      lambda_: float,
                      b: float,
                      sigma_proc: float,
                      nu: float,
                      y0: Optional[float] = None,
                      seed: Optional[int] = None) -> np.ndarray:
    """Simulate a log-abundance series from the heavy-tailed Gompertz process.

    y0 defaults to the stationary mean lambda / (1 - b).
    """
    if n_years < 2:
        raise ValueError(f"n_years must be >= 2, got {n_years}")
    if sigma_proc <= 0 or nu <= 0:
        raise ValueError("sigma_proc and nu must be positive")
    if y0 is None:
        if abs(b) >= 1:
            raise ValueError("y0 is required when |b| >= 1 (no stationary mean)")
        y0 = lambda_ / (1.0 - b)

    rng = np.random.default_rng(seed)
    y = np.empty(n_years)
    y[0] = y0
    for t in range(1, n_years):
        y[t] = lambda_ + b * y[t - 1] + sigma_proc * rng.standard_t(nu)
    return y


# ═══════════════════════════════════════════════════════════════
# Posterior sample collection
# ═══════════════════════════════════════════════════════════════

class PosteriorSamples(Mapping):
    """Read-only mapping of parameter name -> array of posterior draws.

    Chains are stacked, so scalar parameters are 1D [n_samples] and the
    predicted observations are [n_samples, N].
    """

    def __init__(self,
                 draws: Dict[str, np.ndarray],
                 inference_data: Optional[az.InferenceData] = None):
        self._draws = {}
        for name, values in draws.items():
            arr = np.array(values, dtype=np.float64)
            arr.setflags(write=False)
            self._draws[name] = arr
        self.inference_data = inference_data

    def __getitem__(self, name: str) -> np.ndarray:
        return self._draws[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._draws)

    def __len__(self) -> int:
        return len(self._draws)

    def __repr__(self):
        shapes = ', '.join(f"{k}{tuple(v.shape)}" for k, v in self._draws.items())
        return f"PosteriorSamples({shapes})"

    @property
    def n_samples(self) -> int:
        """Number of retained draws (all chains)."""
        if not self._draws:
            return 0
        return len(next(iter(self._draws.values())))

    @classmethod
    def from_inference_data(cls,
                            idata: az.InferenceData,
                            var_names: Optional[List[str]] = None) -> 'PosteriorSamples':
        """Flatten an ArviZ InferenceData into stacked draws.

        Picks up 'pred' from the posterior_predictive group when present.
        """
        if var_names is None:
            var_names = [v for v in SCALAR_PARAMS if v in idata.posterior.data_vars]

        draws = {}
        for var in var_names:
            values = idata.posterior[var].values
            draws[var] = values.reshape((-1,) + values.shape[2:])

        if hasattr(idata, 'posterior_predictive') and 'pred' in idata.posterior_predictive:
            pred = idata.posterior_predictive['pred'].values
            draws['pred'] = pred.reshape((-1,) + pred.shape[2:])

        return cls(draws, inference_data=idata)

    def save(self, filepath: str):
        """Save the underlying trace to NetCDF."""
        if self.inference_data is None:
            raise ValueError("No inference data to save")
        az.to_netcdf(self.inference_data, filepath)
        print(f"[Gompertz] Trace saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> 'PosteriorSamples':
        """Load a trace written by save()."""
        idata = az.from_netcdf(filepath)
        print(f"[Gompertz] Trace loaded from {filepath}")
        return cls.from_inference_data(idata)


# ═══════════════════════════════════════════════════════════════
# Sampler
# ═══════════════════════════════════════════════════════════════

# (model_name, data payload, config) -> posterior samples
Sampler = Callable[[str, Dict, GompertzConfig], PosteriorSamples]


class PyMCSampler:
    """Runs a registered model through PyMC's NUTS sampler.

    Sampling is a blocking call. Chain-level parallelism is left to PyMC
    via the `cores` hint.
    """

    def __init__(self, builders: Optional[Dict[str, Callable[[Dict], pm.Model]]] = None):
        self.builders = builders or MODEL_BUILDERS

    def __call__(self, model_name: str, data: Dict,
                 config: GompertzConfig) -> PosteriorSamples:
        if model_name not in self.builders:
            raise KeyError(f"Unknown model '{model_name}'. "
                           f"Available: {sorted(self.builders)}")

        model = self.builders[model_name](data)

        with model:
            idata = pm.sample(
                draws=config.n_draws,
                tune=config.n_tune,
                chains=config.n_chains,
                cores=config.cores,
                target_accept=config.target_accept,
                progressbar=config.progressbar,
                random_seed=config.random_seed,
                return_inferencedata=True,
            )
            pm.sample_posterior_predictive(
                idata,
                extend_inferencedata=True,
                random_seed=config.random_seed,
                progressbar=config.progressbar,
            )

        idata.posterior_predictive['pred'] = _predicted_observations(
            idata.posterior_predictive['y_next'], data['y'][0]
        )
        return PosteriorSamples.from_inference_data(idata)


def _predicted_observations(y_next: xr.DataArray, y_first: float) -> xr.DataArray:
    """Prepend the first observation to the one-step-ahead predictions."""
    values = y_next.values
    first = np.full(values.shape[:2] + (1,), y_first)
    pred = np.concatenate([first, values], axis=-1)
    return xr.DataArray(
        pred,
        dims=('chain', 'draw', 'time'),
        coords={'chain': y_next['chain'].values,
                'draw': y_next['draw'].values,
                'time': np.arange(pred.shape[-1])},
    )


# ═══════════════════════════════════════════════════════════════
# Invocation wrapper
# ═══════════════════════════════════════════════════════════════

def fit_gompertz(series: pd.DataFrame,
                 nu_rate: float,
                 config: Optional[GompertzConfig] = None,
                 sampler: Optional[Sampler] = None,
                 model_name: str = 'gompertz_t') -> PosteriorSamples:
    """Fit the heavy-tailed Gompertz model to one abundance series.

    Args:
        series: DataFrame from AbundanceDataLoader.load_abundance_csv()
        nu_rate: Rate of the exponential prior on nu (larger = stronger)
        config: MCMC configuration (defaults to GompertzConfig())
        sampler: Sampler callable (defaults to PyMCSampler())
        model_name: Registered model to run

    Returns:
        PosteriorSamples with 'lambda', 'b', 'sigma_proc', 'nu', 'pred'

    Sampler failures propagate; there is no retry.
    """
    config = config or GompertzConfig()
    sampler = sampler or PyMCSampler()
    data = make_model_data(series, nu_rate)

    if config.verbose:
        print(f"[Gompertz] Fitting '{model_name}': N={data['N']}, nu_rate={data['nu_rate']}")
        print(f"  Chains: {config.n_chains}, Draws per chain: {config.n_draws}, "
              f"Tuning steps: {config.n_tune}")

    samples = sampler(model_name, data, config)

    if config.check_convergence:
        check_convergence(samples, config)

    if config.verbose:
        print(f"[Gompertz] Sampling complete ({samples.n_samples} draws)")
    return samples


def check_convergence(samples: PosteriorSamples,
                      config: Optional[GompertzConfig] = None) -> Dict:
    """Report R-hat, effective sample size and divergences.

    Problems are reported with a ConvergenceWarning. Nothing is retried:
    re-running with different settings is the caller's decision.

    Returns:
        dict with 'rhat', 'ess' (per parameter) and 'divergences'
    """
    config = config or GompertzConfig()
    idata = samples.inference_data
    if idata is None:
        if config.verbose:
            print("[Gompertz] No inference data attached, skipping diagnostics")
        return {}

    var_names = [v for v in SCALAR_PARAMS if v in idata.posterior.data_vars]
    rhat = az.rhat(idata, var_names=var_names)
    ess = az.ess(idata, var_names=var_names)
    report = {
        'rhat': {v: float(rhat[v].values) for v in var_names},
        'ess': {v: float(ess[v].values) for v in var_names},
        'divergences': 0,
    }
    if hasattr(idata, 'sample_stats') and 'diverging' in idata.sample_stats:
        report['divergences'] = int(idata.sample_stats['diverging'].values.sum())

    if config.verbose:
        print("\n[Gompertz] Convergence Diagnostics:")
        print(f"  R-hat (target < {config.rhat_threshold}):")
        for var, val in report['rhat'].items():
            if np.isnan(val):
                status = "n/a (single chain)"
            else:
                status = "OK" if val < config.rhat_threshold else "WARNING"
            print(f"    {var}: {val:.4f} {status}")
        print("  Effective Sample Size (ESS):")
        total = samples.n_samples
        for var, val in report['ess'].items():
            print(f"    {var}: {val:.0f} ({val / total:.1%} of {total})")
        print(f"  Divergent transitions: {report['divergences']}")

    undefined_rhat = [v for v, val in report['rhat'].items() if np.isnan(val)]
    bad_rhat = [v for v, val in report['rhat'].items()
                if not np.isnan(val) and not val < config.rhat_threshold]
    if undefined_rhat:
        warnings.warn(f"R-hat undefined for {undefined_rhat}: needs more than one chain",
                      ConvergenceWarning)
    if bad_rhat:
        warnings.warn(f"R-hat above {config.rhat_threshold} for {bad_rhat}",
                      ConvergenceWarning)
    if report['divergences'] > config.max_divergences:
        warnings.warn(f"{report['divergences']} divergent transitions; consider "
                      f"raising target_accept (currently {config.target_accept})",
                      ConvergenceWarning)

    return report
