"""Gibbs sampler for a Bayesian AR(p) model with a stationarity restriction.

Model:
    y_t = c + b_1 y_{t-1} + ... + b_p y_{t-p} + e_t,   e_t ~ N(0, σ²)

Priors:
    [c, b_1, ..., b_p] ~ N(B0, Σ0)
    σ² ~ Inverse-Gamma(T0/2, D0/2)

Each iteration draws the coefficients conditional on the current σ², with
draws outside the stationary region rejected and redrawn, then draws σ²
conditional on the new coefficients. After burn-in every draw is kept and
used to simulate one forecast path.
"""

import threading
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import linalg

from gibbs_fan.data.transforms import ARDesign, as_series, build_design
from gibbs_fan.errors import (
    NumericalError,
    SamplingCancelledError,
    StationarityError,
)
from gibbs_fan.models.base import PriorConfig, SamplerConfig, validate
from gibbs_fan.models.companion import STATIONARITY_TOL, companion_matrix, spectral_radius
from gibbs_fan.models.forecast import simulate_forecast_path


@dataclass(frozen=True)
class GibbsState:
    """Current (coefficients, variance) pair carried between iterations."""

    coefs: np.ndarray
    sigma2: float


@dataclass
class GibbsResults:
    """Container for one sampling run.

    Attributes:
        draws: Kept draws, shape (R-B, p+2): intercept, p slopes, variance
        forecasts: Forecast paths, shape (R-B, H); row i uses draw i
        companions: Companion matrix of each kept draw, shape (R-B, p, p)
        spectral_radius: Largest eigenvalue modulus of each kept draw
        rejections: Non-stationary candidates rejected over the whole run
        config: Sampler settings used
        prior: Prior used
        design: Regression design built from the observations
    """

    draws: np.ndarray
    forecasts: np.ndarray
    companions: np.ndarray
    spectral_radius: np.ndarray
    rejections: int
    config: SamplerConfig
    prior: PriorConfig
    design: ARDesign

    @property
    def coef_names(self) -> list[str]:
        return ["const"] + [f"ar_{i}" for i in range(1, self.config.lags + 1)]

    @property
    def param_names(self) -> list[str]:
        return self.coef_names + ["sigma2"]

    @property
    def coefs(self) -> np.ndarray:
        return self.draws[:, :-1]

    @property
    def sigma2(self) -> np.ndarray:
        return self.draws[:, -1]

    @property
    def forecast_index(self) -> pd.Index:
        return self.design.forecast_index(self.config.horizon)

    def draws_frame(self) -> pd.DataFrame:
        """Kept draws as a DataFrame (rows=draws, cols=parameters)."""
        return pd.DataFrame(self.draws, columns=self.param_names)

    def forecast_frame(self) -> pd.DataFrame:
        """Forecast paths with rows=forecast periods, cols=draws."""
        return pd.DataFrame(self.forecasts.T, index=self.forecast_index)

    def posterior_mean(self) -> pd.Series:
        return self.draws_frame().mean()

    def posterior_std(self) -> pd.Series:
        return self.draws_frame().std()

    def print_summary(self) -> None:
        """Print posterior moments and the forecast median."""
        n_kept = len(self.draws)
        print(f"AR({self.config.lags}) Gibbs sampler: {n_kept} kept draws "
              f"({self.config.iterations} iterations, {self.config.burn_in} burn-in)")
        summary = pd.DataFrame({
            "mean": self.posterior_mean(),
            "sd": self.posterior_std(),
            "5%": self.draws_frame().quantile(0.05),
            "95%": self.draws_frame().quantile(0.95),
        })
        print(summary.round(4).to_string())
        print(f"Rejected non-stationary candidates: {self.rejections}")
        print("Forecast median:")
        print(self.forecast_frame().median(axis=1).round(4).to_string())


def ols_variance(design: ARDesign) -> float:
    """OLS residual variance, used as the starting value for σ².

    Falls back to 1.0 when the regression leaves no residual degrees of
    freedom or fits the data exactly.
    """
    if design.n_obs <= design.X.shape[1]:
        return 1.0
    results = sm.OLS(design.y, design.X).fit()
    sigma2 = float(results.mse_resid)
    return sigma2 if np.isfinite(sigma2) and sigma2 > 0 else 1.0


def posterior_moments(
    design: ARDesign,
    prior: PriorConfig,
    sigma2: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Conditional posterior of the coefficients given σ².

    V = X'X/σ² + Σ0⁻¹ and M = V⁻¹(X'y/σ² + Σ0⁻¹B0).

    Returns:
        (M, L) where L is the lower Cholesky factor of V⁻¹

    Raises:
        NumericalError: If V or V⁻¹ cannot be factorised

    """
    precision = design.xtx / sigma2 + prior.sigma0_inv
    try:
        factor = linalg.cho_factor(precision, lower=True)
        cov = linalg.cho_solve(factor, np.eye(len(precision)))
        mean = cov @ (design.xty / sigma2 + prior.sigma0_inv @ prior.b0)
        chol = linalg.cholesky(cov, lower=True)
    except (linalg.LinAlgError, ValueError) as exc:
        raise NumericalError(
            f"Posterior precision could not be factorised (sigma2={sigma2:.6g}): {exc}"
        ) from exc
    return mean, chol


def draw_coefficients(
    mean: np.ndarray,
    chol: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    """One candidate draw from N(M, V⁻¹)."""
    return mean + chol @ rng.standard_normal(len(mean))


def draw_stationary_coefficients(
    mean: np.ndarray,
    chol: np.ndarray,
    rng: np.random.Generator,
    max_retries: int,
) -> tuple[np.ndarray, np.ndarray, float, int]:
    """Redraw until the companion matrix has spectral radius <= 1.

    Returns:
        (coefs, companion, spectral radius, number of rejected candidates)

    Raises:
        StationarityError: If max_retries candidates are all non-stationary

    """
    for attempt in range(max_retries):
        coefs = draw_coefficients(mean, chol, rng)
        A = companion_matrix(coefs)
        radius = spectral_radius(A)
        if radius <= 1 + STATIONARITY_TOL:
            return coefs, A, radius, attempt
    raise StationarityError(
        f"Stationary region unreachable: {max_retries} consecutive candidate draws "
        f"were non-stationary (posterior mean {np.round(mean, 4).tolist()})"
    )


def draw_variance(
    design: ARDesign,
    prior: PriorConfig,
    coefs: np.ndarray,
    rng: np.random.Generator,
) -> float:
    """Draw σ² ~ IG((T0+T)/2, (D0 + e'e)/2) as scale / sum of squared normals."""
    resid = design.y - design.X @ coefs
    scale = prior.d0 + resid @ resid
    z = rng.standard_normal(int(prior.t0) + design.n_obs)
    sigma2 = scale / (z @ z)
    if not (np.isfinite(sigma2) and sigma2 > 0):
        raise NumericalError(f"Variance draw is not positive (scale={scale:.6g})")
    return float(sigma2)


def gibbs_step(
    state: GibbsState,
    design: ARDesign,
    prior: PriorConfig,
    rng: np.random.Generator,
    max_retries: int,
) -> tuple[GibbsState, np.ndarray, float, int]:
    """One Gibbs iteration: coefficients | σ², then σ² | coefficients.

    Returns:
        (new state, companion matrix, spectral radius, rejected candidates)

    """
    mean, chol = posterior_moments(design, prior, state.sigma2)
    coefs, A, radius, rejected = draw_stationary_coefficients(mean, chol, rng, max_retries)
    sigma2 = draw_variance(design, prior, coefs, rng)
    return GibbsState(coefs=coefs, sigma2=sigma2), A, radius, rejected


def sample(
    series: np.ndarray | pd.Series | list[float],
    config: SamplerConfig | None = None,
    prior: PriorConfig | None = None,
    rng: np.random.Generator | None = None,
    cancel: threading.Event | None = None,
    verbose: bool = False,
) -> GibbsResults:
    """Run the Gibbs sampler and simulate a forecast path per kept draw.

    Args:
        series: Observations in time order (PeriodIndex carried to forecasts)
        config: Sampler settings (uses defaults if None)
        prior: Prior hyperparameters (weak prior if None)
        rng: Random number generator (seeded from config.seed if None)
        cancel: Event checked between iterations; when set the run stops
        verbose: Print progress

    Returns:
        GibbsResults with R-B draws and R-B forecast paths

    Raises:
        ConfigurationError: Invalid settings, detected before sampling
        NumericalError: Factorisation failure inside an iteration
        StationarityError: Retry limit exceeded in the rejection step
        SamplingCancelledError: cancel was set during the run

    """
    if config is None:
        config = SamplerConfig()
    if prior is None:
        prior = PriorConfig.weak(config.lags)

    s = as_series(series)
    validate(config, prior, len(s))
    design = build_design(s, config.lags)

    if rng is None:
        rng = np.random.default_rng(config.seed)

    sigma2 = config.sigma2_init if config.sigma2_init is not None else ols_variance(design)
    state = GibbsState(coefs=prior.b0.copy(), sigma2=sigma2)

    p, h, n_kept = config.lags, config.horizon, config.n_kept
    draws = np.empty((n_kept, p + 2))
    forecasts = np.empty((n_kept, h))
    companions = np.empty((n_kept, p, p))
    radii = np.empty(n_kept)
    rejections = 0

    if verbose:
        print(f"Sampling AR({p}): {config.iterations} iterations, "
              f"{config.burn_in} burn-in, T={design.n_obs}")

    for i in range(config.iterations):
        if cancel is not None and cancel.is_set():
            raise SamplingCancelledError(f"Sampling cancelled at iteration {i}")

        state, A, radius, rejected = gibbs_step(
            state, design, prior, rng, config.max_stationarity_retries
        )
        rejections += rejected

        if i >= config.burn_in:
            j = i - config.burn_in
            draws[j, :-1] = state.coefs
            draws[j, -1] = state.sigma2
            companions[j] = A
            radii[j] = radius
            forecasts[j] = simulate_forecast_path(
                state.coefs, state.sigma2, design.last_obs, h, rng, companion=A
            )

        if verbose and (i + 1) % config.report_every == 0:
            print(f"  iteration {i + 1}/{config.iterations} "
                  f"(rejected candidates so far: {rejections})")

    return GibbsResults(
        draws=draws,
        forecasts=forecasts,
        companions=companions,
        spectral_radius=radii,
        rejections=rejections,
        config=config,
        prior=prior,
        design=design,
    )
