"""Series preparation: lags and the AR(p) regression design."""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from gibbs_fan.errors import ConfigurationError


@dataclass
class ARDesign:
    """Regression form of an AR(p) model.

    Attributes:
        y: Dependent variable, observations p..n-1 (length T = n - p)
        X: Regressors (T x (p+1)): intercept, then lags 1..p
        xtx: Cached X'X
        xty: Cached X'y
        last_obs: Final p observations, most recent first (forecast start state)
        index: Index of the original series
    """

    y: np.ndarray
    X: np.ndarray
    xtx: np.ndarray
    xty: np.ndarray
    last_obs: np.ndarray
    index: pd.Index

    @property
    def n_obs(self) -> int:
        return len(self.y)

    @property
    def lags(self) -> int:
        return self.X.shape[1] - 1

    def forecast_index(self, horizon: int) -> pd.Index:
        """Index for the forecast periods.

        Continues a PeriodIndex (or DatetimeIndex with a frequency) past the
        final observation; otherwise numbers the steps 1..horizon.
        """
        if isinstance(self.index, pd.PeriodIndex):
            return pd.period_range(start=self.index[-1] + 1, periods=horizon, freq=self.index.freq)
        if isinstance(self.index, pd.DatetimeIndex) and self.index.freq is not None:
            return pd.date_range(start=self.index[-1], periods=horizon + 1, freq=self.index.freq)[1:]
        return pd.RangeIndex(1, horizon + 1, name="horizon")


def as_series(values: np.ndarray | pd.Series | list[float]) -> pd.Series:
    """Coerce input observations to a float Series."""
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float).ravel())


def lag(series: pd.Series, periods: int = 1) -> pd.Series:
    """Shift series by specified number of periods.

    Args:
        series: pandas Series
        periods: Number of periods to shift (positive = lag)

    Returns:
        Shifted pandas Series

    """
    return series.shift(periods)


def build_design(series: np.ndarray | pd.Series | list[float], lags: int) -> ARDesign:
    """Build the AR(p) regression design from an observation series.

    Args:
        series: One-dimensional observations in time order
        lags: Lag order p

    Returns:
        ARDesign with y, X and cached cross-products

    Raises:
        ConfigurationError: If the series is empty, has missing or non-finite
            values, or is not longer than the lag order

    """
    s = as_series(series)
    if s.empty:
        raise ConfigurationError("Observation series is empty")
    if not np.isfinite(s.to_numpy()).all():
        raise ConfigurationError("Observation series contains missing or non-finite values")
    if lags < 1:
        raise ConfigurationError(f"Lag order must be >= 1, got {lags}")
    if lags >= len(s):
        raise ConfigurationError(
            f"Lag order ({lags}) must be smaller than the series length ({len(s)})"
        )

    frame = pd.DataFrame({"y": s})
    frame["const"] = 1.0
    for i in range(1, lags + 1):
        frame[f"lag_{i}"] = lag(s, i)
    frame = frame.dropna()

    y = frame["y"].to_numpy()
    X = frame[["const"] + [f"lag_{i}" for i in range(1, lags + 1)]].to_numpy()

    return ARDesign(
        y=y,
        X=X,
        xtx=X.T @ X,
        xty=X.T @ y,
        last_obs=s.to_numpy()[::-1][:lags].copy(),
        index=s.index,
    )
