"""Independent Gibbs chains and conversion to ArviZ InferenceData."""

import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import replace

import arviz as az
import numpy as np
import pandas as pd

from gibbs_fan.data.transforms import as_series
from gibbs_fan.errors import SamplingCancelledError
from gibbs_fan.models.base import PriorConfig, SamplerConfig, validate
from gibbs_fan.models.gibbs import GibbsResults, sample


class _StopSignal:
    """Set when either the caller's event or the internal abort flag is set."""

    def __init__(self, *events: threading.Event | None) -> None:
        self._events = [e for e in events if e is not None]

    def is_set(self) -> bool:
        return any(e.is_set() for e in self._events)


def sample_chains(
    series: np.ndarray | pd.Series | list[float],
    config: SamplerConfig | None = None,
    prior: PriorConfig | None = None,
    cancel: threading.Event | None = None,
    verbose: bool = False,
) -> list[GibbsResults]:
    """Run config.chains independent chains.

    Each chain draws from its own generator spawned from
    numpy.random.SeedSequence(config.seed), so results do not depend on the
    number of worker threads. If any chain fails the others are stopped at
    their next iteration boundary and the failing chain's error is re-raised;
    SamplingCancelledError is raised only when no chain failed otherwise.

    Args:
        series: Observations in time order
        config: Sampler settings (uses defaults if None)
        prior: Prior hyperparameters (weak prior if None)
        cancel: Event checked between iterations in every chain
        verbose: Print progress

    Returns:
        List of GibbsResults, one per chain, in chain order

    """
    if config is None:
        config = SamplerConfig()
    if prior is None:
        prior = PriorConfig.weak(config.lags)

    s = as_series(series)
    validate(config, prior, len(s))

    children = np.random.SeedSequence(config.seed).spawn(config.chains)
    abort = threading.Event()
    stop = _StopSignal(cancel, abort)

    def run_chain(chain: int) -> GibbsResults:
        if verbose:
            print(f"Starting chain {chain}")
        try:
            return sample(
                s,
                config=replace(config, seed=None),
                prior=prior,
                rng=np.random.default_rng(children[chain]),
                cancel=stop,
                verbose=verbose,
            )
        except Exception:
            abort.set()
            raise

    with ThreadPoolExecutor(max_workers=config.cores) as pool:
        futures = [pool.submit(run_chain, chain) for chain in range(config.chains)]
        wait(futures)

    # chains stopped by the abort flag report a cancellation; surface the cause
    errors = [f.exception() for f in futures if f.exception() is not None]
    for error in errors:
        if not isinstance(error, SamplingCancelledError):
            raise error
    if errors:
        raise errors[0]
    return [future.result() for future in futures]


def to_inference_data(chains: list[GibbsResults]) -> az.InferenceData:
    """Package chains as InferenceData with dims (chain, draw).

    Posterior variables: one per coefficient (const, ar_1, ...), sigma2,
    spectral_radius and forecast (extra dimension "horizon").
    """
    if not chains:
        raise ValueError("No chains to convert")

    first = chains[0]
    posterior = {
        name: np.stack([c.draws[:, i] for c in chains])
        for i, name in enumerate(first.param_names)
    }
    posterior["spectral_radius"] = np.stack([c.spectral_radius for c in chains])
    posterior["forecast"] = np.stack([c.forecasts for c in chains])

    horizon = [str(period) for period in first.forecast_index]
    return az.from_dict(
        posterior=posterior,
        coords={"horizon": horizon},
        dims={"forecast": ["horizon"]},
    )
