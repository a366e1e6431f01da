"""
Canonical ordering of the dependent variables.

Only the choice of EEG alternate matters: the two EOG features are part of
every run in a fixed position, whatever else was requested.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .run_config import EEG_MEAN_BETA, EEG_MEAN_THETA, EOG_MEDIAN_THETA, EOG_MIN_BETA

ORDERING_THETA: Tuple[str, str, str] = (EEG_MEAN_THETA, EOG_MIN_BETA, EOG_MEDIAN_THETA)
ORDERING_BETA: Tuple[str, str, str] = (EEG_MEAN_BETA, EOG_MIN_BETA, EOG_MEDIAN_THETA)


def canonicalize_variables(
    requested: Sequence[str],
    logger: Optional[logging.Logger] = None,
) -> Tuple[str, str, str]:
    log = logger or logging.getLogger(__name__)
    canonical = ORDERING_THETA if EEG_MEAN_THETA in requested else ORDERING_BETA
    if set(requested) != set(canonical):
        log.debug("Requested variables %s replaced by canonical set %s", list(requested), list(canonical))
    return canonical
