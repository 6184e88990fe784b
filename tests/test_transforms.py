import numpy as np
import pandas as pd
import pytest

from gibbs_fan.data import build_design, simulate_ar
from gibbs_fan.errors import ConfigurationError


def test_build_design_layout():
    design = build_design([1.0, 2.0, 3.0, 4.0, 5.0], lags=2)

    np.testing.assert_array_equal(design.y, [3.0, 4.0, 5.0])
    np.testing.assert_array_equal(
        design.X,
        [[1.0, 2.0, 1.0], [1.0, 3.0, 2.0], [1.0, 4.0, 3.0]],
    )
    np.testing.assert_allclose(design.xtx, design.X.T @ design.X)
    np.testing.assert_allclose(design.xty, design.X.T @ design.y)
    np.testing.assert_array_equal(design.last_obs, [5.0, 4.0])
    assert design.n_obs == 3
    assert design.lags == 2


@pytest.mark.parametrize(
    "values, lags, message",
    [
        ([], 2, "empty"),
        ([1.0, 2.0], 2, "smaller than the series length"),
        ([1.0, np.nan, 3.0, 4.0], 1, "non-finite"),
        ([1.0, 2.0, 3.0], 0, "Lag order"),
    ],
)
def test_build_design_rejects_bad_input(values, lags, message):
    with pytest.raises(ConfigurationError, match=message):
        build_design(values, lags=lags)


def test_forecast_index_continues_periods():
    series = pd.Series(
        np.arange(8.0), index=pd.period_range("2020Q1", periods=8, freq="Q")
    )
    index = build_design(series, lags=2).forecast_index(3)
    assert list(index) == list(pd.period_range("2022Q1", periods=3, freq="Q"))


def test_forecast_index_defaults_to_steps():
    index = build_design(np.arange(10.0), lags=1).forecast_index(4)
    assert list(index) == [1, 2, 3, 4]


def test_simulate_ar_shape_and_reproducibility():
    a = simulate_ar(0.1, [0.5, 0.2], 1.0, n=50, seed=3, start="2000Q1")
    b = simulate_ar(0.1, [0.5, 0.2], 1.0, n=50, seed=3, start="2000Q1")
    assert len(a) == 50
    assert isinstance(a.index, pd.PeriodIndex)
    pd.testing.assert_series_equal(a, b)


def test_simulate_ar_without_noise_is_deterministic_recursion():
    series = simulate_ar(1.0, [0.5], 0.0, n=5, seed=0, burn=0)
    # starts at the unconditional mean 1 / (1 - 0.5) = 2 and stays there
    np.testing.assert_allclose(series.to_numpy(), 2.0)
