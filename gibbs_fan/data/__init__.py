"""Observation series preparation and synthetic data."""

from gibbs_fan.data.simulate import simulate_ar
from gibbs_fan.data.transforms import ARDesign, as_series, build_design, lag

__all__ = [
    "ARDesign",
    "as_series",
    "build_design",
    "lag",
    "simulate_ar",
]
