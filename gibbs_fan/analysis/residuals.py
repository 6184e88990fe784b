"""Residual checks at the posterior-mean coefficients."""

import pandas as pd
from statsmodels.stats.diagnostic import acorr_ljungbox

from gibbs_fan.models.gibbs import GibbsResults


def posterior_mean_residuals(results: GibbsResults) -> pd.Series:
    """In-sample residuals y - X·E[b], indexed like the observations."""
    design = results.design
    coefs = results.coefs.mean(axis=0)
    resid = design.y - design.X @ coefs
    return pd.Series(resid, index=design.index[design.lags:], name="residual")


def residual_autocorrelation(
    results: GibbsResults,
    lags: int = 10,
    alpha: float = 0.05,
) -> pd.DataFrame:
    """Ljung-Box test for autocorrelation left in the residuals.

    Args:
        results: Gibbs sampler output
        lags: Number of lags tested
        alpha: Significance level for the warning

    Returns:
        DataFrame with lb_stat and lb_pvalue for the requested lag

    Raises:
        ValueError: Fewer than two residuals to test

    """
    residuals = posterior_mean_residuals(results)
    if len(residuals) < 2:
        raise ValueError(
            f"Ljung-Box test needs at least 2 residuals, got {len(residuals)}"
        )
    lags = min(lags, len(residuals) - 1)
    lb_test = acorr_ljungbox(residuals, lags=[lags], return_df=True)
    p_value = lb_test["lb_pvalue"].to_numpy()[0]
    if p_value <= alpha:
        print(
            f"*** WARNING: AR({results.config.lags}) residuals are autocorrelated "
            f"(Ljung-Box p={p_value:.4f}) ***"
        )
    return lb_test
