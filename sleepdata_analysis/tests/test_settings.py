import pytest
import yaml

from sleepdata_analysis.config.settings import load_settings
from sleepdata_analysis.invariant_runtime import ConfigurationError


def _write(tmp_path, cfg):
    path = tmp_path / "settings.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f)
    return str(path)


def test_packaged_defaults():
    s = load_settings()
    assert s.shape.m == 3 and s.shape.n_dep == 3
    assert s.output_dir == "/var/sleepsimr_sleepdata_analysis"
    assert (s.diag_low, s.diag_high, s.jitter) == (0.6, 0.8, 0.05)
    assert s.sampler_target is None
    assert s.resource_path("summary_statistics").name == "summary_statistics.csv"


def test_partial_file_keeps_defaults(tmp_path):
    s = load_settings(_write(tmp_path, {"logging": {"level": "debug"}, "sampler": {"target": "pkg.mod:fit"}}))
    assert s.log_level == "DEBUG"
    assert s.sampler_target == "pkg.mod:fit"
    assert s.seed_max == 10_000_000


@pytest.mark.parametrize(
    "cfg,check_id",
    [
        ({"model": {"m": 1}}, "model_states"),
        ({"model": {"n_dep": 4}}, "model_n_dep"),
        ({"initial_values": {"diag_low": 0.9, "diag_high": 0.8}}, "diag_bounds"),
        ({"initial_values": {"jitter": -0.1}}, "jitter"),
        ({"logging": {"level": "LOUD"}}, "log_level"),
    ],
)
def test_invalid_settings(tmp_path, cfg, check_id):
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(_write(tmp_path, cfg))
    assert excinfo.value.check_id == check_id


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(str(tmp_path / "nope.yaml"))


def test_empty_sections_keep_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("resources:\nmodel:\ninitial_values:\nsampler:\nlogging:\n", encoding="utf-8")
    s = load_settings(str(path))
    assert s.shape.m == 3 and s.shape.n_dep == 3
    assert s.data_dir == "app"
    assert s.sampler_target is None
    assert s.log_level == "INFO"


@pytest.mark.parametrize("cfg", [{"resources": 5}, {"model": [3, 3]}, {"logging": "DEBUG"}])
def test_non_mapping_section_rejected(tmp_path, cfg):
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(_write(tmp_path, cfg))
    assert excinfo.value.check_id == "settings_section"


def test_non_mapping_file_rejected(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(str(path))
    assert excinfo.value.check_id == "settings_file"
