"""MCMC diagnostics for Gibbs sampler output."""

import arviz as az
import numpy as np
import pandas as pd

from gibbs_fan.models.gibbs import GibbsResults


def _warn(w: bool) -> str:
    return "--- THERE BE DRAGONS ---> " if w else ""


def check_model_diagnostics(trace: az.InferenceData) -> pd.DataFrame:
    """Check the inference data for potential problems.

    Diagnostics applied (to scalar parameters only):
    - R-hat (Gelman-Rubin): Compares between-chain and within-chain variance.
      Values > 1.01 suggest chains have not converged to the same distribution.
      Needs at least two chains.
    - ESS (Effective Sample Size): Estimates independent samples accounting for
      autocorrelation. Low ESS (< 400) indicates high autocorrelation or short chains.
    - MCSE/sd ratio: Monte Carlo standard error relative to posterior sd.
      Ratios > 5% suggest insufficient samples for reliable posterior mean estimates.

    Returns:
        The arviz summary table the checks were based on.
    """
    scalar_vars = [
        name for name, var in trace.posterior.data_vars.items()
        if set(var.dims) == {"chain", "draw"}
    ]
    summary = az.summary(trace, var_names=scalar_vars)

    # check model convergence
    max_r_hat = 1.01
    if trace.posterior.sizes["chain"] > 1:
        statistic = summary.r_hat.max()
        print(
            f"{_warn(statistic > max_r_hat)}Maximum R-hat convergence diagnostic: {statistic}"
        )
    else:
        print("R-hat check skipped (single chain).")

    # check effective sample size
    min_ess = 400
    statistic = summary[["ess_tail", "ess_bulk"]].min().min()
    print(
        f"{_warn(statistic < min_ess)}Minimum effective sample size (ESS) estimate: {int(statistic)}"
    )

    # check MCSE ratio (should be < 5% of posterior sd)
    max_mcse_ratio = 0.05
    statistic = (summary["mcse_mean"] / summary["sd"]).max()
    print(
        f"{_warn(statistic > max_mcse_ratio)}Maximum MCSE/sd ratio: {statistic:0.3f}"
    )

    return summary


def stationarity_report(results: GibbsResults) -> dict[str, float]:
    """Summarise the stationarity rejection step.

    Returns:
        Dict with rejection rate (rejected / proposed candidates over the whole
        run) and the largest spectral radius among kept draws.
    """
    iterations = results.config.iterations
    proposed = iterations + results.rejections
    report = {
        "rejections": float(results.rejections),
        "rejection_rate": results.rejections / proposed,
        "max_spectral_radius": float(results.spectral_radius.max()),
    }

    max_rejection_rate = 0.5
    print(
        f"{_warn(report['rejection_rate'] > max_rejection_rate)}Non-stationary candidates "
        f"rejected: {results.rejections}/{proposed} ({report['rejection_rate']:.2%})"
    )
    print(f"Maximum spectral radius of kept draws: {report['max_spectral_radius']:0.4f}")
    return report


def check_for_zero_coeffs(
    results: GibbsResults,
    critical_params: list[str] | None = None,
) -> pd.DataFrame:
    """Check AR coefficients for values indistinguishable from zero.

    Shows quantiles and flags parameters whose posterior straddles zero.

    Args:
        results: Gibbs sampler output
        critical_params: List of parameter names that are critical (warn if any
            quantile crosses zero). If None, uses default threshold of 2+ crossings.

    Returns:
        DataFrame with quantiles and significance markers.

    """
    if critical_params is None:
        critical_params = []

    q = [0.01, 0.05, 0.10, 0.25, 0.50]
    q_tail = [1 - x for x in q[:-1]][::-1]
    q = q + q_tail

    coefs = pd.DataFrame(results.coefs, columns=results.coef_names)
    df = coefs.quantile(q).T

    # quantiles on the minority side of zero
    problem_intensity = np.minimum(df.lt(0).sum(axis=1), df.ge(0).sum(axis=1)).astype(int)
    df["Check Significance"] = ["*" * n for n in problem_intensity]

    for param, stars in problem_intensity.items():
        if (stars > 0 if param in critical_params else stars > 2):
            print(
                f"*** WARNING: Parameter '{param}' may be indistinguishable from zero "
                f"({stars} stars). Check model specification! ***"
            )

    return df
