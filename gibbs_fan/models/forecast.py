"""Recursive AR(p) forecasting from a single parameter draw."""

import numpy as np

from gibbs_fan.models.companion import companion_matrix


def simulate_forecast_path(
    coefs: np.ndarray,
    sigma2: float,
    last_obs: np.ndarray,
    horizon: int,
    rng: np.random.Generator,
    companion: np.ndarray | None = None,
) -> np.ndarray:
    """Simulate one forecast path with fresh innovations.

    Iterates Y_{t+1} = C + A·Y_t + [sqrt(sigma2)·z, 0, ..., 0]' starting
    from the last p observations.

    Args:
        coefs: [intercept, b_1, ..., b_p]
        sigma2: Innovation variance for this draw
        last_obs: Final p observations, most recent first
        horizon: Number of steps ahead
        rng: Random number generator
        companion: Precomputed companion matrix (built from coefs if None)

    Returns:
        Array of length horizon with the simulated values

    """
    A = companion_matrix(coefs) if companion is None else companion
    const = coefs[0]
    sigma = np.sqrt(sigma2)

    state = np.asarray(last_obs, dtype=float).copy()
    path = np.empty(horizon)
    shocks = rng.standard_normal(horizon)
    for h in range(horizon):
        state = A @ state
        state[0] += const + sigma * shocks[h]
        path[h] = state[0]
    return path


def deterministic_forecast(
    coefs: np.ndarray,
    last_obs: np.ndarray,
    horizon: int,
) -> np.ndarray:
    """Point forecast: the recursion with all future innovations set to zero."""
    A = companion_matrix(coefs)
    state = np.asarray(last_obs, dtype=float).copy()
    path = np.empty(horizon)
    for h in range(horizon):
        state = A @ state
        state[0] += coefs[0]
        path[h] = state[0]
    return path
