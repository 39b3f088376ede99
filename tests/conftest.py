"""
Pytest configuration and fixtures for reproducible testing.

This file provides centralized test configuration including:
- Random seed management for reproducibility
- Non-interactive matplotlib backend
- A recording fake sampler for tests that must not run MCMC
"""
import matplotlib
matplotlib.use('Agg')

import pytest
import numpy as np
from pathlib import Path

from gompertz_tails.model import PosteriorSamples


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: runs real MCMC sampling")


@pytest.fixture(scope="session", autouse=True)
def set_random_seeds():
    """Set random seeds at the start of test session for reproducibility."""
    np.random.seed(42)
    yield


@pytest.fixture(scope="function")
def reset_seeds():
    """Reset random seeds before each test function for isolation."""
    np.random.seed(42)
    yield


class RecordingSampler:
    """Stands in for PyMC: records every call and returns fixed draws."""

    def __init__(self, nu_draws=None, n_samples: int = 200):
        self.calls = []
        self.n_samples = n_samples
        self.nu_draws = nu_draws

    def __call__(self, model_name, data, config):
        self.calls.append({'model_name': model_name, 'data': data, 'config': config})
        rng = np.random.default_rng(len(self.calls))
        n = self.n_samples
        nu = self.nu_draws if self.nu_draws is not None else 2.0 + rng.exponential(10.0, n)
        pred = np.tile(data['y'], (len(nu), 1)) + rng.normal(0, 0.1, (len(nu), data['N']))
        pred[:, 0] = data['y'][0]
        return PosteriorSamples({
            'lambda': rng.normal(0.5, 0.1, len(nu)),
            'b': rng.uniform(0.6, 0.9, len(nu)),
            'sigma_proc': np.abs(rng.normal(0.3, 0.05, len(nu))),
            'nu': nu,
            'pred': pred,
        })


@pytest.fixture
def recording_sampler():
    return RecordingSampler()


def _write_abundance_csv(path: Path, rows, header=('sample_year', 'population_untransformed')) -> Path:
    """Write a two-column abundance CSV."""
    with open(path, 'w') as f:
        f.write(','.join(header) + '\n')
        for year, count in rows:
            f.write(f"{year},{count}\n")
    return path


@pytest.fixture
def abundance_dir(tmp_path):
    """Directory with two small abundance files, 'a.csv' and 'b.csv'."""
    _write_abundance_csv(tmp_path / 'a.csv',
                        [(2000 + i, c) for i, c in enumerate([10, 14, 9, 22, 18, 25, 12, 16])])
    _write_abundance_csv(tmp_path / 'b.csv',
                        [(1990 + i, c) for i, c in enumerate([300, 280, 310, 150, 220, 290])])
    return tmp_path
