import logging

import numpy as np
import pandas as pd
import pytest

from sleepdata_analysis.config.run_config import VARIABLE_UNIVERSE
from sleepdata_analysis.config.settings import Settings

STATES = ["Awake", "NREM", "REM"]


def _aggregate_table(value_column: str, offset: float) -> pd.DataFrame:
    rows = []
    for v_idx, var in enumerate(VARIABLE_UNIVERSE):
        for s_idx, state in enumerate(STATES):
            # Distinct, non-round values so misalignment shows up.
            rows.append({"variable": var, "state": state, value_column: offset + 10 * v_idx + s_idx + 0.1234})
    return pd.DataFrame(rows)


class FakeSampler:
    """Records the call and returns a small picklable 'fitted model'."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def __call__(self, data_matrix, gamma, emission, model_shape, prior_means, seed, **kwargs):
        self.calls.append(
            {
                "data_matrix": data_matrix,
                "gamma": gamma,
                "emission": emission,
                "model_shape": model_shape,
                "prior_means": prior_means,
                "seed": seed,
                **kwargs,
            }
        )
        if self.fail:
            raise RuntimeError("chain diverged")
        return {"seed": seed, "iterations": kwargs["iterations"], "n_rows": int(data_matrix.shape[0])}


@pytest.fixture
def summary_statistics() -> pd.DataFrame:
    return _aggregate_table("mmvar", 0.0)


@pytest.fixture
def total_variance() -> pd.DataFrame:
    return _aggregate_table("tvar", 1.0)


@pytest.fixture
def signal_data() -> pd.DataFrame:
    rng = np.random.default_rng(7)
    n = 12
    data = {"id": np.repeat([1, 2, 3], n // 3)}
    for var in VARIABLE_UNIVERSE:
        data[var] = rng.normal(size=n)
    data["sleep_state"] = rng.integers(1, 4, size=n)
    return pd.DataFrame(data)


@pytest.fixture
def settings(tmp_path, summary_statistics, total_variance, signal_data) -> Settings:
    data_dir = tmp_path / "app"
    data_dir.mkdir()
    signal_data.to_csv(data_dir / "sleep_data_subset.csv", index=False)
    summary_statistics.to_csv(data_dir / "summary_statistics.csv", index=False)
    total_variance.to_csv(data_dir / "total_variance.csv", index=False)
    return Settings(data_dir=str(data_dir), output_dir=str(tmp_path / "out"))


@pytest.fixture
def fake_sampler() -> FakeSampler:
    return FakeSampler()


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("sleepdata_analysis.tests")
