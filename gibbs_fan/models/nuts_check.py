"""Cross-check the Gibbs posterior against NUTS on the same model in PyMC.

The PyMC model uses identical Normal–Inverse-Gamma priors but no
stationarity truncation, so the two posteriors should agree closely when
the data sit well inside the stationary region.
"""

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm

from gibbs_fan.data.transforms import ARDesign
from gibbs_fan.errors import ConfigurationError
from gibbs_fan.models.base import PriorConfig, SamplerConfig
from gibbs_fan.models.gibbs import GibbsResults


def build_ar_model(design: ARDesign, prior: PriorConfig) -> pm.Model:
    """AR(p) regression with the sampler's priors, as a PyMC model."""
    if prior.t0 <= 0 or prior.d0 <= 0:
        raise ConfigurationError("NUTS cross-check needs a proper variance prior (T0 > 0, D0 > 0)")

    names = ["const"] + [f"ar_{i}" for i in range(1, design.lags + 1)]
    with pm.Model(coords={"coef": names}) as model:
        coefs = pm.MvNormal("coefs", mu=prior.b0, cov=prior.sigma0, dims="coef")
        sigma2 = pm.InverseGamma("sigma2", alpha=prior.t0 / 2, beta=prior.d0 / 2)
        pm.Normal(
            "y",
            mu=pm.math.dot(design.X, coefs),
            sigma=pm.math.sqrt(sigma2),
            observed=design.y,
        )
    return model


def sample_nuts(
    model: pm.Model,
    config: SamplerConfig,
    tune: int = 1_000,
    target_accept: float = 0.9,
) -> az.InferenceData:
    """Draw a NUTS sample sized to match a Gibbs run.

    Each NUTS chain keeps as many draws as a Gibbs chain (R - B) and uses
    the Gibbs chain count, worker count and seed, so the two posteriors are
    compared on equal footing.

    Args:
        model: Output of build_ar_model
        config: Settings of the Gibbs run being checked
        tune: NUTS adaptation steps per chain (discarded)
        target_accept: Step-size adaptation target

    Returns:
        InferenceData holding "coefs" (dims chain, draw, coef) and "sigma2"

    """
    with model:
        return pm.sample(
            draws=config.n_kept,
            tune=tune,
            chains=config.chains,
            cores=config.cores,
            target_accept=target_accept,
            random_seed=config.seed,
            progressbar=False,
        )


def compare_posteriors(results: GibbsResults, trace: az.InferenceData) -> pd.DataFrame:
    """Posterior means and standard deviations from both samplers side by side."""
    coefs = az.extract(trace, var_names="coefs").transpose("sample", ...).to_numpy()
    sigma2 = az.extract(trace, var_names="sigma2").to_numpy()
    nuts = np.column_stack([coefs, sigma2])

    df = pd.DataFrame(
        {
            "gibbs_mean": results.draws.mean(axis=0),
            "nuts_mean": nuts.mean(axis=0),
            "gibbs_sd": results.draws.std(axis=0),
            "nuts_sd": nuts.std(axis=0),
        },
        index=results.param_names,
    )
    df["difference"] = df["gibbs_mean"] - df["nuts_mean"]
    return df
