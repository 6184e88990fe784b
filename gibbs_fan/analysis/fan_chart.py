"""Fan-chart summaries of simulated forecast paths.

Reduces an (n_draws x H) array of forecast paths to per-horizon quantiles
and highest-density intervals. Tables have rows=forecast periods.
"""

from collections.abc import Sequence

import arviz as az
import numpy as np
import pandas as pd

from gibbs_fan.models.gibbs import GibbsResults

DEFAULT_QUANTILES = (0.05, 0.20, 0.35, 0.50, 0.65, 0.80, 0.95)
DEFAULT_HDI_PROBS = (0.30, 0.60, 0.90)


def _check_paths(paths: np.ndarray) -> np.ndarray:
    paths = np.asarray(paths, dtype=float)
    if paths.ndim != 2 or paths.shape[0] == 0 or paths.shape[1] == 0:
        raise ValueError("Forecast paths must be a non-empty (n_draws x horizon) array")
    return paths


def _check_probs(probs: Sequence[float]) -> list[float]:
    probs = list(probs)
    if not probs:
        raise ValueError("At least one probability level is required")
    if not all(0 < p < 1 for p in probs):
        raise ValueError("Probability levels must be between 0 and 1")
    return probs


def _horizon_index(n: int, index: pd.Index | None) -> pd.Index:
    if index is None:
        return pd.RangeIndex(1, n + 1, name="horizon")
    if len(index) != n:
        raise ValueError(f"Index length ({len(index)}) does not match horizon ({n})")
    return index


def forecast_quantiles(
    paths: np.ndarray,
    probs: Sequence[float] = DEFAULT_QUANTILES,
    index: pd.Index | None = None,
) -> pd.DataFrame:
    """Quantiles of the forecast distribution at each horizon.

    Args:
        paths: Forecast paths, shape (n_draws, H)
        probs: Probability levels
        index: Labels for the H forecast periods (1..H if None)

    Returns:
        DataFrame with rows=horizon, columns=probability levels

    """
    paths = _check_paths(paths)
    probs = _check_probs(probs)
    samples = pd.DataFrame(paths.T, index=_horizon_index(paths.shape[1], index))
    return samples.quantile(q=probs, axis=1).T


def forecast_hdi(
    paths: np.ndarray,
    probs: Sequence[float] = DEFAULT_HDI_PROBS,
    index: pd.Index | None = None,
) -> pd.DataFrame:
    """Highest-density intervals of the forecast distribution at each horizon.

    Args:
        paths: Forecast paths, shape (n_draws, H)
        probs: Probability mass of each interval
        index: Labels for the H forecast periods (1..H if None)

    Returns:
        DataFrame with rows=horizon and (prob, "lower"/"upper") columns

    """
    paths = _check_paths(paths)
    probs = _check_probs(probs)

    bands = {}
    for prob in probs:
        intervals = np.array([az.hdi(paths[:, h], hdi_prob=prob) for h in range(paths.shape[1])])
        bands[(prob, "lower")] = intervals[:, 0]
        bands[(prob, "upper")] = intervals[:, 1]

    df = pd.DataFrame(bands, index=_horizon_index(paths.shape[1], index))
    df.columns = pd.MultiIndex.from_tuples(df.columns, names=["prob", "bound"])
    return df


def pooled_paths(results: GibbsResults | Sequence[GibbsResults]) -> np.ndarray:
    """Forecast paths from one run, or stacked across several chains."""
    if isinstance(results, GibbsResults):
        return results.forecasts
    if not results:
        raise ValueError("No results to pool")
    return np.vstack([r.forecasts for r in results])


def fan_chart_table(
    results: GibbsResults | Sequence[GibbsResults],
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    hdi_probs: Sequence[float] = DEFAULT_HDI_PROBS,
) -> pd.DataFrame:
    """Median, quantile bands and HDI bands in one table.

    Columns: "median", "q05", "q20", ... for quantiles, and
    "hdi30_lower", "hdi30_upper", ... for HDI bands. Rows are indexed by
    forecast period when the input series carried a PeriodIndex.
    """
    first = results if isinstance(results, GibbsResults) else results[0]
    paths = pooled_paths(results)
    index = first.forecast_index

    table = pd.DataFrame({"median": np.median(paths, axis=0)}, index=index)

    q = forecast_quantiles(paths, quantiles, index=index)
    for prob in q.columns:
        table[f"q{round(prob * 100):02d}"] = q[prob]

    if hdi_probs:
        hdi = forecast_hdi(paths, hdi_probs, index=index)
        for prob, bound in hdi.columns:
            table[f"hdi{round(prob * 100)}_{bound}"] = hdi[(prob, bound)]

    return table
