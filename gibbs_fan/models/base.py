"""Configuration records for the Gibbs sampler."""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from scipy import linalg

from gibbs_fan.errors import ConfigurationError


@dataclass
class SamplerConfig:
    """Configuration for the AR(p) Gibbs sampler.

    Attributes:
        lags: AR lag order p
        iterations: Total Gibbs iterations R (including burn-in)
        burn_in: Number of initial iterations discarded B
        horizon: Forecast horizon H (steps ahead)
        seed: Random seed for reproducibility
        max_stationarity_retries: Candidate draws allowed per iteration before
            the stationary region is declared unreachable
        sigma2_init: Starting innovation variance (None = OLS estimate)
        chains: Number of independent chains (see sample_chains)
        cores: Worker threads used when running several chains
        report_every: Progress print interval when verbose
    """

    lags: int = 2
    iterations: int = 2_000
    burn_in: int = 1_000
    horizon: int = 8
    seed: int | None = 42
    max_stationarity_retries: int = 1_000
    sigma2_init: float | None = None
    chains: int = 1
    cores: int = 1
    report_every: int = 500

    @property
    def n_kept(self) -> int:
        """Number of retained draws per chain."""
        return self.iterations - self.burn_in

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> tuple["SamplerConfig", "PriorConfig"]:
        """Build sampler and prior settings from a flat configuration record.

        Recognised keys: p, B, R, H, B0, Sigma0, T0, D0, seed. Any other key
        that matches a SamplerConfig attribute name is passed through.

        Example:
            config, prior = SamplerConfig.from_dict(
                {"p": 2, "R": 2000, "B": 1000, "H": 8, "seed": 1}
            )
        """
        aliases = {"p": "lags", "R": "iterations", "B": "burn_in", "H": "horizon"}
        prior_keys = {"B0", "Sigma0", "T0", "D0"}

        kwargs = {}
        for key, value in record.items():
            if key in prior_keys:
                continue
            name = aliases.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ConfigurationError(f"Unknown configuration key: {key}")
            kwargs[name] = value

        config = cls(**kwargs)
        default = PriorConfig.weak(config.lags)
        prior = PriorConfig(
            b0=record.get("B0", default.b0),
            sigma0=record.get("Sigma0", default.sigma0),
            t0=record.get("T0", default.t0),
            d0=record.get("D0", default.d0),
        )
        return config, prior


@dataclass
class PriorConfig:
    """Normal–Inverse-Gamma prior for an AR(p) regression.

    Attributes:
        b0: Prior mean of [intercept, lag 1, ..., lag p]
        sigma0: Prior covariance of the coefficients ((p+1) x (p+1))
        t0: Prior degrees of freedom for the innovation variance
        d0: Prior scale for the innovation variance
    """

    b0: np.ndarray
    sigma0: np.ndarray
    t0: int = 1
    d0: float = 0.1
    _sigma0_inv: np.ndarray | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.b0 = np.asarray(self.b0, dtype=float).ravel()
        self.sigma0 = np.atleast_2d(np.asarray(self.sigma0, dtype=float))

    @classmethod
    def weak(cls, lags: int, scale: float = 1e4) -> "PriorConfig":
        """Diffuse prior centred on zero with a large diagonal covariance."""
        k = lags + 1
        return cls(b0=np.zeros(k), sigma0=np.eye(k) * scale, t0=1, d0=0.1)

    @property
    def n_coefs(self) -> int:
        return len(self.b0)

    @property
    def sigma0_inv(self) -> np.ndarray:
        """Prior precision, computed once via a Cholesky factorisation."""
        if self._sigma0_inv is None:
            try:
                factor = linalg.cho_factor(self.sigma0, lower=True)
            except linalg.LinAlgError as exc:
                raise ConfigurationError(
                    "Singular prior: Sigma0 is not positive definite"
                ) from exc
            self._sigma0_inv = linalg.cho_solve(factor, np.eye(self.n_coefs))
        return self._sigma0_inv


def validate(config: SamplerConfig, prior: PriorConfig, n_obs: int) -> None:
    """Fail fast on configuration errors before sampling starts.

    Args:
        config: Sampler settings
        prior: Prior hyperparameters
        n_obs: Length of the observation series

    Raises:
        ConfigurationError: On any invalid setting

    """
    if n_obs == 0:
        raise ConfigurationError("Observation series is empty")
    if config.lags < 1:
        raise ConfigurationError(f"Lag order must be >= 1, got {config.lags}")
    if config.lags >= n_obs:
        raise ConfigurationError(
            f"Lag order ({config.lags}) must be smaller than the series length ({n_obs})"
        )
    if config.iterations < 1:
        raise ConfigurationError(f"Iterations must be >= 1, got {config.iterations}")
    if not 0 <= config.burn_in < config.iterations:
        raise ConfigurationError(
            f"Burn-in must satisfy 0 <= B < R, got B={config.burn_in}, R={config.iterations}"
        )
    if config.horizon < 1:
        raise ConfigurationError(f"Forecast horizon must be >= 1, got {config.horizon}")
    if config.max_stationarity_retries < 1:
        raise ConfigurationError("max_stationarity_retries must be >= 1")
    if config.chains < 1 or config.cores < 1:
        raise ConfigurationError("chains and cores must be >= 1")
    if config.sigma2_init is not None and not config.sigma2_init > 0:
        raise ConfigurationError(f"sigma2_init must be positive, got {config.sigma2_init}")

    k = config.lags + 1
    if prior.b0.shape != (k,):
        raise ConfigurationError(f"B0 must have length {k}, got {prior.b0.shape}")
    if prior.sigma0.shape != (k, k):
        raise ConfigurationError(f"Sigma0 must be {k}x{k}, got {prior.sigma0.shape}")
    if not (np.isfinite(prior.b0).all() and np.isfinite(prior.sigma0).all()):
        raise ConfigurationError("B0 and Sigma0 must be finite")
    if not (np.isfinite(prior.t0) and np.isfinite(prior.d0)):
        raise ConfigurationError(f"T0 and D0 must be finite, got T0={prior.t0}, D0={prior.d0}")
    if not np.allclose(prior.sigma0, prior.sigma0.T):
        raise ConfigurationError("Singular prior: Sigma0 is not symmetric")
    if int(prior.t0) != prior.t0 or prior.t0 < 0:
        raise ConfigurationError(f"T0 must be a non-negative integer, got {prior.t0}")
    if prior.d0 < 0:
        raise ConfigurationError(f"D0 must be non-negative, got {prior.d0}")

    # forces the Cholesky check
    _ = prior.sigma0_inv
