"""
Hyperprior means for the emission distributions.

The prior mean of each dependent variable in each latent state is taken
from the empirical between-subject means in the summary statistics table,
so the sampler starts from data-driven priors rather than flat ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..data.resources import MEAN_COLUMN, select_variable_rows


@dataclass(frozen=True, eq=False)
class HyperpriorMeans:
    variables: tuple
    values: np.ndarray  # (n_dep, m)

    def __post_init__(self):
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] != len(self.variables):
            raise ValueError(f"hyperprior means must have shape (n_dep, m), got {values.shape}")
        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "variables", tuple(self.variables))

    def as_list(self) -> List[np.ndarray]:
        return [row.copy() for row in self.values]

    def __eq__(self, other) -> bool:
        if not isinstance(other, HyperpriorMeans):
            return NotImplemented
        return self.variables == other.variables and np.array_equal(self.values, other.values)


def build_hyperprior_means(
    variables: Sequence[str],
    summary_statistics: pd.DataFrame,
    m: int,
    logger: Optional[logging.Logger] = None,
) -> HyperpriorMeans:
    log = logger or logging.getLogger(__name__)
    values = select_variable_rows(summary_statistics, variables, MEAN_COLUMN, m)
    means = HyperpriorMeans(variables=tuple(variables), values=values)
    for var, row in zip(means.variables, means.values):
        log.debug("Hyperprior means %s: %s", var, row.tolist())
    return means
