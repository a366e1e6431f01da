import dataclasses
import json
import threading

import pytest

from sleepdata_analysis.config.settings import ModelShape
from sleepdata_analysis.config.variables import ORDERING_THETA
from sleepdata_analysis.mcmc.initial_state import generate_initial_state
from sleepdata_analysis.priors.hyperprior_means import build_hyperprior_means
from sleepdata_analysis.results.run_result import (
    RunResult,
    load_run_result,
    result_path,
    save_run_result,
    summarize_run_result,
)


@pytest.fixture
def run_result(summary_statistics, total_variance):
    initial = generate_initial_state(
        1234, ModelShape(), ORDERING_THETA, summary_statistics, total_variance
    )
    return RunResult(
        unique_id="0000-fixed-id",
        seed=1234,
        initial_values=initial,
        priors=build_hyperprior_means(ORDERING_THETA, summary_statistics, 3),
        variables=ORDERING_THETA,
        iterations=100,
        burn_in=10,
        fitted_model={"gamma_int_bar": [[0.7, 0.15, 0.15]], "label": "fake"},
    )


def test_round_trip(tmp_path, run_result):
    path = save_run_result(run_result, str(tmp_path))
    assert path == result_path(str(tmp_path), "0000-fixed-id")
    assert path.name == "model_0000-fixed-id.joblib"
    loaded = load_run_result(str(path))
    assert loaded == run_result
    assert loaded.seed == 1234
    assert loaded.variables == ORDERING_THETA
    assert loaded.fitted_model == run_result.fitted_model


def test_existing_file_not_overwritten(tmp_path, run_result):
    save_run_result(run_result, str(tmp_path))
    with pytest.raises(FileExistsError):
        save_run_result(run_result, str(tmp_path))
    assert len(list(tmp_path.iterdir())) == 1


def test_summary_is_json_serializable(run_result):
    summary = summarize_run_result(run_result)
    payload = json.loads(json.dumps(summary))
    assert payload["seed"] == 1234
    assert len(payload["hyperprior_means"]) == 3
    assert len(payload["initial_emission_params"][0]) == 3
    assert "fitted_model" not in payload


def test_failed_dump_leaves_no_file(tmp_path, run_result):
    unpicklable = dataclasses.replace(run_result, fitted_model={"lock": threading.Lock()})
    with pytest.raises(TypeError):
        save_run_result(unpicklable, str(tmp_path))
    assert list(tmp_path.iterdir()) == []
    # The id is still free for a later, complete dump.
    path = save_run_result(run_result, str(tmp_path))
    assert [p.name for p in tmp_path.iterdir()] == [path.name]


def test_run_result_is_unhashable(run_result):
    with pytest.raises(TypeError):
        hash(run_result)
    assert run_result == dataclasses.replace(run_result)
