"""Post-sampling analysis utilities.

Includes:
- Fan chart: forecast quantiles and HDI bands
- Diagnostics: MCMC convergence and stationarity checks
- Residuals: Ljung-Box check at the posterior mean
"""

from gibbs_fan.analysis.diagnostics import (
    check_for_zero_coeffs,
    check_model_diagnostics,
    stationarity_report,
)
from gibbs_fan.analysis.fan_chart import (
    DEFAULT_HDI_PROBS,
    DEFAULT_QUANTILES,
    fan_chart_table,
    forecast_hdi,
    forecast_quantiles,
    pooled_paths,
)
from gibbs_fan.analysis.residuals import posterior_mean_residuals, residual_autocorrelation

__all__ = [
    "DEFAULT_HDI_PROBS",
    "DEFAULT_QUANTILES",
    "check_for_zero_coeffs",
    "check_model_diagnostics",
    "fan_chart_table",
    "forecast_hdi",
    "forecast_quantiles",
    "pooled_paths",
    "posterior_mean_residuals",
    "residual_autocorrelation",
    "stationarity_report",
]
