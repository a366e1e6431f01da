"""
Contract with the external multilevel HMM sampler.

The sampler itself (Gibbs/Metropolis estimation of the mHMM posterior) lives
outside this package. Any callable with the signature of `MHMMSampler` can be
plugged in, either directly or through a "package.module:function" target
in the settings.
"""

from __future__ import annotations

import importlib
import logging
import time
from typing import Any, Dict, List, Optional, Protocol

import numpy as np

from ..invariant_runtime import ConfigurationError, SamplerError


class MHMMSampler(Protocol):
    def __call__(
        self,
        data_matrix: np.ndarray,
        initial_transition_matrix: np.ndarray,
        initial_emission_params: List[np.ndarray],
        model_shape: Dict[str, int],
        hyperprior_means: List[np.ndarray],
        seed: int,
        *,
        iterations: int,
        burn_in: int,
        order_data: bool = False,
        show_progress: bool = False,
    ) -> Any:
        ...


def resolve_sampler(target: Optional[str]) -> MHMMSampler:
    """Import a sampler callable from a "package.module:function" target."""

    if not target:
        raise ConfigurationError("sampler_target", "No sampler configured; pass --sampler module:function.")
    module_name, sep, attr = str(target).partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError("sampler_target", f"Sampler target must look like 'module:function', got '{target}'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError("sampler_target", f"Cannot import sampler module '{module_name}': {exc}") from exc
    fn = getattr(module, attr, None)
    if not callable(fn):
        raise ConfigurationError("sampler_target", f"'{target}' is not a callable.")
    return fn


def run_sampler(
    sampler: MHMMSampler,
    data_matrix: np.ndarray,
    initial_transition_matrix: np.ndarray,
    initial_emission_params: List[np.ndarray],
    model_shape: Dict[str, int],
    hyperprior_means: List[np.ndarray],
    seed: int,
    iterations: int,
    burn_in: int,
    logger: Optional[logging.Logger] = None,
) -> Any:
    """Call the sampler once; any failure becomes a SamplerError, never retried."""

    log = logger or logging.getLogger(__name__)
    t0 = time.time()
    log.info(
        "Sampler start (rows=%d, iterations=%d, burn_in=%d, seed=%d)",
        data_matrix.shape[0],
        iterations,
        burn_in,
        seed,
    )
    try:
        fitted = sampler(
            data_matrix,
            initial_transition_matrix,
            initial_emission_params,
            model_shape,
            hyperprior_means,
            seed,
            iterations=iterations,
            burn_in=burn_in,
            order_data=False,
            show_progress=False,
        )
    except SamplerError:
        raise
    except Exception as exc:
        raise SamplerError(f"Sampler failed: {exc}") from exc
    log.info("Sampler end: elapsed=%.2fs", time.time() - t0)
    return fitted
