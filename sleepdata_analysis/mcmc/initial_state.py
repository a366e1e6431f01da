"""
Randomized starting values for one mHMM chain.

All randomness after the seed draw comes from one generator seeded with the
run seed, so the transition matrix and emission starting values of any run
can be rebuilt from the seed recorded in its result file.

Draw order (fixed, part of the reproducibility contract):
1) diagonal of the transition probability matrix ~ U[diag_low, diag_high]
2) emission jitter ~ U[-jitter, jitter], variable by variable, state by
   state, mean before variance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config.settings import ModelShape
from ..data.resources import MEAN_COLUMN, VARIANCE_COLUMN, select_variable_rows
from ..invariant_runtime import require_invariant

ROW_SUM_TOL = 1e-9
SEED_MIN = 1


@dataclass(frozen=True, eq=False)
class InitialEmissionParams:
    variables: tuple
    values: np.ndarray  # (n_dep, m, 2): mean, variance per state

    def __post_init__(self):
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim != 3 or values.shape[0] != len(self.variables) or values.shape[2] != 2:
            raise ValueError(f"emission params must have shape (n_dep, m, 2), got {values.shape}")
        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "variables", tuple(self.variables))

    def as_list(self) -> List[np.ndarray]:
        return [block.copy() for block in self.values]

    def __eq__(self, other) -> bool:
        if not isinstance(other, InitialEmissionParams):
            return NotImplemented
        return self.variables == other.variables and np.array_equal(self.values, other.values)


@dataclass(frozen=True, eq=False)
class InitialState:
    seed: int
    transition_matrix: np.ndarray
    emission_params: InitialEmissionParams

    def __eq__(self, other) -> bool:
        if not isinstance(other, InitialState):
            return NotImplemented
        return (
            self.seed == other.seed
            and np.array_equal(self.transition_matrix, other.transition_matrix)
            and self.emission_params == other.emission_params
        )


def draw_run_seed(rng: Optional[np.random.Generator] = None, seed_max: int = 10_000_000) -> int:
    """Draw the run seed uniformly from [1, seed_max]; unseeded entropy by default."""

    source = rng if rng is not None else np.random.default_rng()
    return int(source.integers(SEED_MIN, seed_max, endpoint=True))


def make_run_rng(seed: int) -> np.random.Generator:
    return np.random.default_rng(int(seed))


def build_transition_matrix(
    rng: np.random.Generator,
    m: int,
    diag_low: float = 0.6,
    diag_high: float = 0.8,
) -> np.ndarray:
    """Diagonal-dominant TPM with the remaining mass spread evenly off the diagonal."""

    diag_value = float(rng.uniform(diag_low, diag_high))
    gamma = np.full((m, m), (1.0 - diag_value) / (m - 1), dtype=np.float64)
    np.fill_diagonal(gamma, diag_value)

    row_sums = gamma.sum(axis=1)
    require_invariant(
        bool(np.all(np.abs(row_sums - 1.0) <= ROW_SUM_TOL)),
        invariant_id="TPM-ROWSUM",
        message="Initial values for the TPM do not sum to 1 on all states",
        tolerance=ROW_SUM_TOL,
        data={"row_sums": row_sums.tolist(), "diag_value": diag_value},
    )
    require_invariant(
        bool(np.all(gamma >= 0.0)),
        invariant_id="TPM-NONNEG",
        message="Initial TPM entries nonnegative",
        data={"diag_value": diag_value},
    )
    gamma.setflags(write=False)
    return gamma


def build_emission_params(
    rng: np.random.Generator,
    variables: Sequence[str],
    summary_statistics: pd.DataFrame,
    total_variance: pd.DataFrame,
    m: int,
    jitter: float = 0.05,
) -> InitialEmissionParams:
    means = select_variable_rows(summary_statistics, variables, MEAN_COLUMN, m)
    variances = select_variable_rows(total_variance, variables, VARIANCE_COLUMN, m)
    base = np.stack([means, variances], axis=-1)  # (n_dep, m, 2)
    noise = rng.uniform(-jitter, jitter, size=base.shape)
    return InitialEmissionParams(variables=tuple(variables), values=base + noise)


def generate_initial_state(
    seed: int,
    shape: ModelShape,
    variables: Sequence[str],
    summary_statistics: pd.DataFrame,
    total_variance: pd.DataFrame,
    diag_low: float = 0.6,
    diag_high: float = 0.8,
    jitter: float = 0.05,
    rng: Optional[np.random.Generator] = None,
    logger: Optional[logging.Logger] = None,
) -> InitialState:
    """Build TPM and emission starting values; `rng` defaults to one seeded with `seed`."""

    log = logger or logging.getLogger(__name__)
    if len(variables) != shape.n_dep:
        raise ValueError(f"expected {shape.n_dep} variables, got {len(variables)}")
    gen = rng if rng is not None else make_run_rng(seed)
    gamma = build_transition_matrix(gen, shape.m, diag_low=diag_low, diag_high=diag_high)
    emission = build_emission_params(gen, variables, summary_statistics, total_variance, shape.m, jitter=jitter)
    log.info("Initial values built (seed=%d, tpm_diag=%.4f)", seed, float(gamma[0, 0]))
    return InitialState(seed=int(seed), transition_matrix=gamma, emission_params=emission)
