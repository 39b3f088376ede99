"""
Tests for the prior-comparison workflow using a recording sampler
"""

import pandas as pd
import pytest

from gompertz_tails.model import GompertzConfig
from gompertz_tails.workflow import (
    run_nu_comparison, demo_nu_comparison, DEFAULT_NU_RATES, EXAMPLE_DATASETS,
    DEMO_OUTPUT_DIR,
)
from gompertz_tails.abundance_data import bundled_data_dir


@pytest.fixture
def quiet_config():
    return GompertzConfig(progressbar=False, verbose=False)


def test_every_dataset_under_every_rate(abundance_dir, recording_sampler, quiet_config):
    result = run_nu_comparison({'first': 'a.csv', 'second': 'b.csv'},
                               data_dir=str(abundance_dir),
                               config=quiet_config,
                               sampler=recording_sampler)

    assert len(recording_sampler.calls) == 2 * len(DEFAULT_NU_RATES)
    assert set(result.fits) == {(name, rate) for name in ('first', 'second')
                                for rate in DEFAULT_NU_RATES}
    assert len(result.table) == 6
    assert list(result.table['dataset']) == ['first'] * 3 + ['second'] * 3


def test_prior_rate_does_not_touch_data(abundance_dir, recording_sampler, quiet_config):
    """Only nu_rate differs between the payloads for one data set."""
    result = run_nu_comparison({'first': 'a.csv'}, nu_rates=(0.01, 0.5),
                               data_dir=str(abundance_dir),
                               config=quiet_config, sampler=recording_sampler)

    weak, strong = (c['data'] for c in recording_sampler.calls)
    assert weak['N'] == strong['N'] == len(result.series['first'])
    assert list(weak['y']) == list(strong['y'])
    assert (weak['nu_rate'], strong['nu_rate']) == (0.01, 0.5)


def test_missing_file_fails_before_any_fit(abundance_dir, recording_sampler, quiet_config):
    with pytest.raises(FileNotFoundError):
        run_nu_comparison({'first': 'a.csv', 'missing': 'missing.csv'},
                          data_dir=str(abundance_dir),
                          config=quiet_config, sampler=recording_sampler)

    assert recording_sampler.calls == []


def test_repeated_rate_rejected_before_fitting(abundance_dir, recording_sampler, quiet_config):
    with pytest.raises(ValueError, match="repeat"):
        run_nu_comparison({'first': 'a.csv'}, nu_rates=(0.1, 0.5, 0.1),
                          data_dir=str(abundance_dir),
                          config=quiet_config, sampler=recording_sampler)

    assert recording_sampler.calls == []


def test_demo_writes_to_default_dir(tmp_path, monkeypatch, recording_sampler, quiet_config):
    """Called without arguments (as the console script does), the demo saves its outputs."""
    import gompertz_tails.workflow as workflow

    run = workflow.run_nu_comparison
    monkeypatch.setattr(workflow, 'run_nu_comparison',
                        lambda *args, **kwargs: run(*args, sampler=recording_sampler, **kwargs))
    monkeypatch.setattr(workflow, 'GompertzConfig', lambda **_: quiet_config)
    monkeypatch.chdir(tmp_path)

    workflow.demo_nu_comparison()

    out = tmp_path / DEMO_OUTPUT_DIR
    assert (out / 'nu_comparison.csv').exists()
    assert (out / 'grey_heron_ppc_0.5.png').exists()
    assert len(recording_sampler.calls) == len(EXAMPLE_DATASETS) * len(DEFAULT_NU_RATES)


def test_custom_columns(tmp_path, recording_sampler, quiet_config):
    (tmp_path / 'c.csv').write_text('yr,n\n1,5\n2,6\n3,7\n')

    result = run_nu_comparison({'c': 'c.csv'}, nu_rates=(0.1,),
                               data_dir=str(tmp_path), config=quiet_config,
                               sampler=recording_sampler,
                               csv_kwargs={'year_col': 'yr', 'count_col': 'n'})

    assert isinstance(result.table, pd.DataFrame)
    assert recording_sampler.calls[0]['data']['N'] == 3


def test_example_datasets_are_bundled():
    for filename in EXAMPLE_DATASETS.values():
        assert (bundled_data_dir() / filename).exists()


@pytest.mark.slow
def test_demo_writes_outputs(tmp_path, monkeypatch):
    """Full demo on the bundled data with real sampling."""
    import gompertz_tails.workflow as workflow

    small = GompertzConfig(n_chains=2, n_draws=100, n_tune=100, cores=1,
                           progressbar=False, verbose=False)
    monkeypatch.setattr(workflow, 'GompertzConfig', lambda **_: small)

    result = demo_nu_comparison(output_dir=str(tmp_path))

    assert len(result.table) == len(EXAMPLE_DATASETS) * len(DEFAULT_NU_RATES)
    assert (tmp_path / 'nu_comparison.csv').exists()
    assert (tmp_path / 'wood_mouse_nu_0.01.png').exists()
