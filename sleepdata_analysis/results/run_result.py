"""
Result artifact of one chain.

The full run record (seed, initial values, priors, variable order, budget
and fitted model) is written with joblib to
`<output_dir>/model_<unique_id>.joblib`, one file per run, never overwritten.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

import joblib
import numpy as np

from ..mcmc.initial_state import InitialState
from ..priors.hyperprior_means import HyperpriorMeans

RESULT_PREFIX = "model_"
RESULT_SUFFIX = ".joblib"


@dataclass(frozen=True)
class RunResult:
    unique_id: str
    seed: int
    initial_values: InitialState
    priors: HyperpriorMeans
    variables: Tuple[str, ...]
    iterations: int
    burn_in: int
    fitted_model: Any

    # Array-backed fields; equality only.
    __hash__ = None


def result_path(output_dir: str, unique_id: str) -> Path:
    return Path(output_dir) / f"{RESULT_PREFIX}{unique_id}{RESULT_SUFFIX}"


def save_run_result(
    result: RunResult,
    output_dir: str,
    logger: Optional[logging.Logger] = None,
) -> Path:
    log = logger or logging.getLogger(__name__)
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    path = result_path(output_dir, result.unique_id)
    # Dump to a hidden temp file first; only a complete dump is linked into place.
    fd, tmp_path = tempfile.mkstemp(dir=output_dir, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            joblib.dump(result, f)
        # Exclusive create: an existing file for this id is an error, not overwritten.
        os.link(tmp_path, path)
    finally:
        os.unlink(tmp_path)
    log.info("Saved run result %s (%d bytes)", path, os.path.getsize(path))
    return path


def load_run_result(path: str) -> RunResult:
    result = joblib.load(path)
    if not isinstance(result, RunResult):
        raise TypeError(f"{path} does not contain a RunResult")
    return result


def summarize_run_result(result: RunResult) -> dict:
    """JSON-friendly summary of a run, without the fitted model."""

    return {
        "unique_id": result.unique_id,
        "seed": result.seed,
        "variables": list(result.variables),
        "iterations": result.iterations,
        "burn_in": result.burn_in,
        "initial_transition_matrix": np.asarray(result.initial_values.transition_matrix).tolist(),
        "initial_emission_params": [b.tolist() for b in result.initial_values.emission_params.as_list()],
        "hyperprior_means": [r.tolist() for r in result.priors.as_list()],
    }
