import threading
from dataclasses import replace

import numpy as np
import pandas as pd
import pytest

from conftest import TRUE_CONST, TRUE_SIGMA2, TRUE_SLOPES
from gibbs_fan.data import build_design
from gibbs_fan.errors import (
    ConfigurationError,
    NumericalError,
    SamplingCancelledError,
    StationarityError,
)
from gibbs_fan.models import (
    PriorConfig,
    SamplerConfig,
    companion_matrix,
    deterministic_forecast,
    sample,
)
from gibbs_fan.models.gibbs import GibbsState, gibbs_step, ols_variance, posterior_moments


class _CountdownEvent:
    """Reports set after a fixed number of checks."""

    def __init__(self, after: int) -> None:
        self.calls = 0
        self.after = after

    def is_set(self) -> bool:
        self.calls += 1
        return self.calls > self.after


def test_kept_draw_and_path_counts(ar2_series, small_config):
    results = sample(ar2_series, small_config)
    n_kept = small_config.iterations - small_config.burn_in

    assert results.draws.shape == (n_kept, small_config.lags + 2)
    assert results.forecasts.shape == (n_kept, small_config.horizon)
    assert results.companions.shape == (n_kept, 2, 2)
    assert results.spectral_radius.shape == (n_kept,)


def test_zero_burn_in_keeps_every_draw(ar2_series, small_config):
    config = replace(small_config, burn_in=0, iterations=50)
    results = sample(ar2_series, config)
    assert len(results.draws) == 50
    assert len(results.forecasts) == 50


def test_one_step_horizon(ar2_series, small_config):
    results = sample(ar2_series, replace(small_config, horizon=1))
    assert results.forecasts.shape == (small_config.n_kept, 1)


def test_kept_draws_are_stationary(ar2_series, small_config):
    results = sample(ar2_series, small_config)

    for coefs, A, radius in zip(results.coefs, results.companions, results.spectral_radius):
        np.testing.assert_array_equal(A, companion_matrix(coefs))
        recomputed = np.max(np.abs(np.linalg.eigvals(A)))
        assert recomputed <= 1 + 1e-9
        assert np.isclose(recomputed, radius)


def test_variance_draws_positive(ar2_series, small_config):
    results = sample(ar2_series, small_config)
    assert (results.sigma2 > 0).all()


def test_same_seed_reproduces_run(ar2_series, small_config):
    a = sample(ar2_series, small_config)
    b = sample(ar2_series, small_config)
    np.testing.assert_array_equal(a.draws, b.draws)
    np.testing.assert_array_equal(a.forecasts, b.forecasts)


def test_different_seed_changes_run(ar2_series, small_config):
    a = sample(ar2_series, small_config)
    b = sample(ar2_series, replace(small_config, seed=8))
    assert not np.array_equal(a.draws, b.draws)


def test_injected_generator_overrides_seed(ar2_series, small_config):
    a = sample(ar2_series, small_config, rng=np.random.default_rng(99))
    b = sample(ar2_series, replace(small_config, seed=1), rng=np.random.default_rng(99))
    np.testing.assert_array_equal(a.draws, b.draws)


def test_tight_prior_concentrates_on_prior_mean(ar2_series, small_config):
    first = sample(ar2_series, small_config)
    b0 = first.coefs.mean(axis=0)

    prior = PriorConfig(b0=b0, sigma0=np.eye(3) * 1e-6, t0=1, d0=0.1)
    second = sample(ar2_series, small_config, prior=prior)

    np.testing.assert_allclose(second.coefs.mean(axis=0), b0, atol=0.01)
    assert (second.coefs.std(axis=0) < 0.01).all()
    assert (second.coefs.std(axis=0) < first.coefs.std(axis=0)).all()


def test_recovers_known_ar2_coefficients(ar2_series):
    config = SamplerConfig(lags=2, iterations=2000, burn_in=1000, horizon=8, seed=2024)
    results = sample(ar2_series, config, prior=PriorConfig.weak(2))

    mean = results.coefs.mean(axis=0)
    sd = results.coefs.std(axis=0)
    truth = np.array([TRUE_CONST, *TRUE_SLOPES])
    assert (np.abs(mean - truth) < 2 * sd).all()
    assert abs(results.sigma2.mean() - TRUE_SIGMA2) < 0.3

    # median paths follow the noiseless recursion under the true coefficients
    point = deterministic_forecast(truth, results.design.last_obs, config.horizon)
    median = np.median(results.forecasts, axis=0)
    np.testing.assert_allclose(median, point, atol=0.6)


def test_forecast_frame_uses_period_index(ar2_series, small_config):
    results = sample(ar2_series, small_config)
    frame = results.forecast_frame()

    assert isinstance(frame.index, pd.PeriodIndex)
    assert frame.index[0] == ar2_series.index[-1] + 1
    assert frame.shape == (small_config.horizon, small_config.n_kept)
    assert list(results.draws_frame().columns) == ["const", "ar_1", "ar_2", "sigma2"]


def test_accepts_plain_arrays(ar2_series, small_config):
    results = sample(ar2_series.to_numpy(), small_config)
    assert list(results.forecast_frame().index) == [1, 2, 3, 4]


def test_configuration_errors_raised_before_sampling(small_config):
    with pytest.raises(ConfigurationError):
        sample([], small_config)
    with pytest.raises(ConfigurationError):
        sample([1.0, 2.0], small_config)
    with pytest.raises(ConfigurationError):
        sample(np.arange(50.0), replace(small_config, burn_in=small_config.iterations))
    with pytest.raises(ConfigurationError):
        sample(np.arange(50.0), replace(small_config, horizon=0))


def test_singular_prior_rejected(ar2_series, small_config):
    prior = PriorConfig(b0=np.zeros(3), sigma0=np.zeros((3, 3)))
    with pytest.raises(ConfigurationError, match="Singular prior"):
        sample(ar2_series, small_config, prior=prior)


def test_unreachable_stationary_region(explosive_series):
    config = SamplerConfig(
        lags=1, iterations=10, burn_in=0, horizon=2, seed=0,
        max_stationarity_retries=20, sigma2_init=1.0,
    )
    with pytest.raises(StationarityError, match="Stationary region unreachable"):
        sample(explosive_series, config)


def test_numerical_failure_reported():
    design = build_design(np.arange(20.0), lags=2)
    with pytest.raises(NumericalError):
        posterior_moments(design, PriorConfig.weak(2), float("nan"))


def test_cancel_before_start(ar2_series, small_config):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(SamplingCancelledError, match="iteration 0"):
        sample(ar2_series, small_config, cancel=cancel)


def test_cancel_between_iterations(ar2_series, small_config):
    with pytest.raises(SamplingCancelledError, match="iteration 150"):
        sample(ar2_series, small_config, cancel=_CountdownEvent(after=150))


def test_gibbs_step_returns_new_state(ar2_series):
    design = build_design(ar2_series, lags=2)
    prior = PriorConfig.weak(2)
    state = GibbsState(coefs=np.zeros(3), sigma2=ols_variance(design))

    new_state, A, radius, rejected = gibbs_step(
        state, design, prior, np.random.default_rng(0), max_retries=100
    )
    assert new_state is not state
    assert new_state.coefs.shape == (3,)
    assert new_state.sigma2 > 0
    assert radius <= 1 + 1e-9
    assert rejected >= 0
    np.testing.assert_array_equal(A, companion_matrix(new_state.coefs))


def test_ols_variance_close_to_truth(ar2_series):
    assert abs(ols_variance(build_design(ar2_series, lags=2)) - 1.0) < 0.3


def test_verbose_progress(ar2_series, small_config, capsys):
    results = sample(ar2_series, replace(small_config, report_every=100), verbose=True)
    out = capsys.readouterr().out
    assert "iteration 300/300" in out

    results.print_summary()
    out = capsys.readouterr().out
    assert "ar_1" in out
    assert "Forecast median" in out
