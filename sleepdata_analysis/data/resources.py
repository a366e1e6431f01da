"""
Loaders for the three tabular input resources of a run.

Assumptions:
- `signal_data` holds one row per epoch with a subject `id`, the four
  candidate variables and the `sleep_state` label.
- `summary_statistics` holds one row per (variable, state) with the
  between-subject mean in `mmvar`.
- `total_variance` holds one row per (variable, state) with the total
  variance in `tvar`.
- Rows of both aggregate tables are ordered by state within a variable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config.run_config import VARIABLE_UNIVERSE
from ..config.settings import Settings
from ..invariant_runtime import DataShapeError

ID_COLUMN = "id"
LABEL_COLUMN = "sleep_state"
VARIABLE_COLUMN = "variable"
MEAN_COLUMN = "mmvar"
VARIANCE_COLUMN = "tvar"

SIGNAL_FIELDS = [ID_COLUMN, *VARIABLE_UNIVERSE]
SUMMARY_FIELDS = [VARIABLE_COLUMN, MEAN_COLUMN]
VARIANCE_FIELDS = [VARIABLE_COLUMN, VARIANCE_COLUMN]


@dataclass(frozen=True)
class RunResources:
    signal_data: pd.DataFrame
    summary_statistics: pd.DataFrame
    total_variance: pd.DataFrame


def read_table(
    path: Path,
    required_fields: Iterable[str],
    logger: Optional[logging.Logger] = None,
) -> pd.DataFrame:
    """Read a CSV or Parquet table and check that the required columns exist."""

    log = logger or logging.getLogger(__name__)
    path = Path(path)
    if not path.exists():
        raise DataShapeError(f"Resource file not found: {path}")
    if path.suffix.lower() == ".parquet":
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path)

    missing: List[str] = [f for f in required_fields if f not in df.columns]
    if missing:
        raise DataShapeError(f"{path.name} missing required fields: {missing}")
    log.info("Loaded %d rows from %s. Columns: %s", len(df), path, list(df.columns))
    return df


def load_resources(settings: Settings, logger: Optional[logging.Logger] = None) -> RunResources:
    return RunResources(
        signal_data=read_table(settings.resource_path("signal_data"), SIGNAL_FIELDS, logger),
        summary_statistics=read_table(settings.resource_path("summary_statistics"), SUMMARY_FIELDS, logger),
        total_variance=read_table(settings.resource_path("total_variance"), VARIANCE_FIELDS, logger),
    )


def select_variable_rows(
    table: pd.DataFrame,
    variables: Sequence[str],
    value_column: str,
    m: int,
) -> np.ndarray:
    """
    Project an aggregate table onto the canonical variables.

    Returns a `(len(variables), m)` array of values rounded to 2 decimals,
    one row per variable in the given order with states in table row order.
    """

    subset = table[table[VARIABLE_COLUMN].isin(variables)]
    expected = len(variables) * m
    if len(subset) != expected:
        raise DataShapeError(
            f"Expected {expected} rows in '{value_column}' table for {list(variables)}, found {len(subset)}"
        )
    blocks = []
    for var in variables:
        block = subset.loc[subset[VARIABLE_COLUMN] == var, value_column]
        if len(block) != m:
            raise DataShapeError(f"Variable '{var}' has {len(block)} rows in '{value_column}' table, expected {m}")
        blocks.append(block.to_numpy(dtype=np.float64))
    return np.round(np.vstack(blocks), 2)


def project_signal_data(
    signal_data: pd.DataFrame,
    variables: Sequence[str],
    logger: Optional[logging.Logger] = None,
) -> np.ndarray:
    """Keep the subject id and the canonical variables, in that column order."""

    log = logger or logging.getLogger(__name__)
    columns = [ID_COLUMN, *variables]
    missing = [c for c in columns if c not in signal_data.columns]
    if missing:
        raise DataShapeError(f"Signal data missing columns: {missing}")
    non_numeric = [c for c in columns if not pd.api.types.is_numeric_dtype(signal_data[c])]
    if non_numeric:
        raise DataShapeError(f"Signal data columns must be numeric: {non_numeric}")
    dropped = [c for c in signal_data.columns if c not in columns]
    log.debug("Dropping signal data columns: %s", dropped)
    return signal_data[columns].to_numpy(dtype=np.float64)
