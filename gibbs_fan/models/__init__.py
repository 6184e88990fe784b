"""Bayesian AR(p) sampling and forecast simulation.

Models:
- gibbs: Gibbs sampler with stationarity rejection, forecast paths per draw
- chains: independent chains and ArviZ packaging
- nuts_check: PyMC NUTS cross-check (imported on demand, needs pymc)
"""

from gibbs_fan.models.base import PriorConfig, SamplerConfig, validate
from gibbs_fan.models.chains import sample_chains, to_inference_data
from gibbs_fan.models.companion import companion_matrix, is_stationary, spectral_radius
from gibbs_fan.models.forecast import deterministic_forecast, simulate_forecast_path
from gibbs_fan.models.gibbs import GibbsResults, GibbsState, gibbs_step, sample

__all__ = [
    "GibbsResults",
    "GibbsState",
    "PriorConfig",
    "SamplerConfig",
    "companion_matrix",
    "deterministic_forecast",
    "gibbs_step",
    "is_stationary",
    "sample",
    "sample_chains",
    "simulate_forecast_path",
    "spectral_radius",
    "to_inference_data",
    "validate",
]
