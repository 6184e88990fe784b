import numpy as np
import pytest

from gibbs_fan.data import simulate_ar
from gibbs_fan.models import SamplerConfig

TRUE_CONST = 0.1
TRUE_SLOPES = (0.5, 0.2)
TRUE_SIGMA2 = 1.0


@pytest.fixture(scope="session")
def ar2_series():
    """Quarterly AR(2) series with known coefficients (200 observations)."""
    return simulate_ar(TRUE_CONST, TRUE_SLOPES, TRUE_SIGMA2, n=200, seed=123, start="1975Q1")


@pytest.fixture
def small_config():
    return SamplerConfig(lags=2, iterations=300, burn_in=100, horizon=4, seed=7)


@pytest.fixture
def explosive_series():
    """AR(1) with slope 1.1: the posterior sits outside the stationary region."""
    rng = np.random.default_rng(0)
    y = np.empty(60)
    y[0] = 1.0
    for t in range(1, 60):
        y[t] = 1.1 * y[t - 1] + rng.standard_normal()
    return y
