"""Exception types raised by the Gibbs sampler.

Every error aborts the current sampling run. Nothing drawn before the
failure is returned to the caller.
"""


class GibbsError(Exception):
    """Base class for sampler failures."""


class ConfigurationError(GibbsError, ValueError):
    """Inputs or settings are invalid (detected before any iteration runs)."""


class NumericalError(GibbsError):
    """Cholesky factorisation or inversion failed during an iteration."""


class StationarityError(GibbsError):
    """No stationary coefficient draw found within the retry limit."""


class SamplingCancelledError(GibbsError):
    """The run was cancelled between iterations."""
