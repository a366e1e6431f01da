"""
Run parameters for a single chain and their sanity checks.

The variable universe holds four signal-derived features. The two EEG
Fpz-Cz features are alternates of the same channel and may not be used
together in one run.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..invariant_runtime import ConfigurationError

EEG_MEAN_THETA = "EEG_Fpz_Cz_mean_theta"
EEG_MEAN_BETA = "EEG_Fpz_Cz_mean_beta"
EOG_MIN_BETA = "EOG_min_beta"
EOG_MEDIAN_THETA = "EOG_median_theta"

EXCLUSIVE_ALTERNATES: Tuple[str, str] = (EEG_MEAN_THETA, EEG_MEAN_BETA)
VARIABLE_UNIVERSE: Tuple[str, ...] = (EEG_MEAN_THETA, EOG_MIN_BETA, EOG_MEDIAN_THETA, EEG_MEAN_BETA)
DEFAULT_VARIABLES: Tuple[str, str, str] = (EEG_MEAN_THETA, EOG_MIN_BETA, EOG_MEDIAN_THETA)
N_REQUESTED_VARIABLES = 3


@dataclass(frozen=True)
class RunConfig:
    iterations: int
    burn_in: int
    requested_variables: Tuple[str, ...]


def validate_run_config(iterations: int, burn_in: int, variables: Sequence[str]) -> RunConfig:
    """Check iterations, burn-in and requested variables; raise on the first failure."""

    for name, value in (("iterations", iterations), ("burn_in", burn_in)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ConfigurationError("integer_budget", f"{name} must be an integer, got {value!r}.")
    iterations = int(iterations)
    burn_in = int(burn_in)
    if iterations <= 0:
        raise ConfigurationError("iterations_positive", "Number of iterations must be larger than 0.")
    if burn_in <= 0:
        raise ConfigurationError("burn_in_positive", "Number of burn-in samples must be larger than 0.")
    if burn_in >= iterations:
        raise ConfigurationError(
            "burn_in_below_iterations",
            "Number of iterations must be larger than the number of burn-in samples.",
        )
    requested = tuple(str(v) for v in variables)
    if len(requested) != N_REQUESTED_VARIABLES:
        raise ConfigurationError(
            "variable_count",
            f"Exactly {N_REQUESTED_VARIABLES} variables are expected, got {len(requested)}.",
        )
    if all(alt in requested for alt in EXCLUSIVE_ALTERNATES):
        raise ConfigurationError(
            "exclusive_alternates",
            f"Cannot use both '{EEG_MEAN_THETA}' and '{EEG_MEAN_BETA}' in analysis.",
        )
    unknown = [v for v in requested if v not in VARIABLE_UNIVERSE]
    if unknown:
        raise ConfigurationError(
            "known_variables",
            f"Variables must match three of {', '.join(repr(v) for v in VARIABLE_UNIVERSE)} exactly; "
            f"got unknown {unknown}.",
        )
    return RunConfig(iterations=iterations, burn_in=burn_in, requested_variables=requested)
