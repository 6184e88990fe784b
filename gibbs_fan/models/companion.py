"""Companion form of an AR(p) process and the stationarity check.

For y_t = c + b_1 y_{t-1} + ... + b_p y_{t-p} + e_t, the state vector
Y_t = [y_t, ..., y_{t-p+1}]' evolves as

    Y_{t+1} = C + A · Y_t + [e_{t+1}, 0, ..., 0]'

with A the p x p companion matrix (top row = slopes, identity on the
sub-diagonal) and C = [c, 0, ..., 0]'. The process is stationary when every
eigenvalue of A lies inside the unit circle.
"""

import numpy as np

# Numerical slack when comparing the spectral radius to one
STATIONARITY_TOL = 1e-9


def companion_matrix(coefs: np.ndarray) -> np.ndarray:
    """Companion matrix from [intercept, b_1, ..., b_p].

    The intercept is not part of the matrix; it enters the recursion as a
    constant on the first equation.
    """
    slopes = np.asarray(coefs, dtype=float)[1:]
    p = len(slopes)
    A = np.zeros((p, p))
    A[0, :] = slopes
    if p > 1:
        A[1:, :-1] = np.eye(p - 1)
    return A


def spectral_radius(matrix: np.ndarray) -> float:
    """Largest eigenvalue modulus."""
    return float(np.max(np.abs(np.linalg.eigvals(matrix))))


def is_stationary(coefs: np.ndarray, tol: float = STATIONARITY_TOL) -> bool:
    """True when the companion matrix has no eigenvalue outside the unit circle."""
    return spectral_radius(companion_matrix(coefs)) <= 1 + tol
