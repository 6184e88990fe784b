"""Synthetic AR(p) series with known coefficients."""

from collections.abc import Sequence

import numpy as np
import pandas as pd


def simulate_ar(
    const: float,
    slopes: Sequence[float],
    sigma2: float,
    n: int,
    seed: int | None = None,
    burn: int = 100,
    start: str | None = None,
    freq: str = "Q",
) -> pd.Series:
    """Generate an AR(p) series y_t = c + sum_i b_i y_{t-i} + e_t.

    Args:
        const: Intercept c
        slopes: Lag coefficients b_1..b_p
        sigma2: Innovation variance
        n: Number of observations returned
        seed: Random seed
        burn: Leading observations simulated then dropped
        start: First period of a PeriodIndex (None = RangeIndex)
        freq: Period frequency when start is given

    Returns:
        Series of length n

    """
    rng = np.random.default_rng(seed)
    slopes = np.asarray(slopes, dtype=float)
    p = len(slopes)

    # start at the unconditional mean when it exists
    persistence = 1 - slopes.sum()
    mean = const / persistence if abs(persistence) > 1e-8 else 0.0

    total = n + burn
    y = np.full(total + p, mean)
    shocks = rng.standard_normal(total) * np.sqrt(sigma2)
    for t in range(p, total + p):
        y[t] = const + slopes @ y[t - p:t][::-1] + shocks[t - p]

    values = y[p + burn:]
    index = pd.period_range(start=start, periods=n, freq=freq) if start else pd.RangeIndex(n)
    return pd.Series(values, index=index, name="y")
