"""
Application settings loaded from YAML.

Settings cover where the input resources live, where results go, the model
shape, the ranges used for randomized initial values, which sampler to call
and the log level. Run parameters (iterations, burn-in, variables) are not
settings; they come from the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

import yaml

from ..invariant_runtime import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default_run.yaml")
LOGGER_NAME = "sleepdata_analysis"


@dataclass(frozen=True)
class ModelShape:
    m: int = 3
    n_dep: int = 3

    def as_dict(self) -> Dict[str, int]:
        return {"m": self.m, "n_dep": self.n_dep}


@dataclass(frozen=True)
class Settings:
    data_dir: str = "app"
    signal_data: str = "sleep_data_subset.csv"
    summary_statistics: str = "summary_statistics.csv"
    total_variance: str = "total_variance.csv"
    output_dir: str = "/var/sleepsimr_sleepdata_analysis"
    shape: ModelShape = ModelShape()
    diag_low: float = 0.6
    diag_high: float = 0.8
    jitter: float = 0.05
    seed_max: int = 10_000_000
    sampler_target: Optional[str] = None
    log_level: str = "INFO"

    def resource_path(self, name: str) -> Path:
        return Path(self.data_dir) / getattr(self, name)

    def with_overrides(self, **overrides) -> "Settings":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _section(raw: Dict, name: str) -> Dict:
    # An empty section ("resources:" with no value) loads as None.
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError("settings_section", f"Settings section '{name}' must be a mapping.")
    return section


def load_settings(path: Optional[str] = None) -> Settings:
    """Read a settings YAML file; missing keys fall back to the defaults."""

    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise ConfigurationError("settings_file", f"Settings file not found: {cfg_path}")
    with open(cfg_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError("settings_file", f"Settings file must hold a mapping: {cfg_path}")

    resources = _section(raw, "resources")
    model = _section(raw, "model")
    init = _section(raw, "initial_values")
    defaults = Settings()
    settings = Settings(
        data_dir=str(resources.get("data_dir", defaults.data_dir)),
        signal_data=str(resources.get("signal_data", defaults.signal_data)),
        summary_statistics=str(resources.get("summary_statistics", defaults.summary_statistics)),
        total_variance=str(resources.get("total_variance", defaults.total_variance)),
        output_dir=str(_section(raw, "output").get("dir", defaults.output_dir)),
        shape=ModelShape(m=int(model.get("m", 3)), n_dep=int(model.get("n_dep", 3))),
        diag_low=float(init.get("diag_low", defaults.diag_low)),
        diag_high=float(init.get("diag_high", defaults.diag_high)),
        jitter=float(init.get("jitter", defaults.jitter)),
        seed_max=int(init.get("seed_max", defaults.seed_max)),
        sampler_target=_section(raw, "sampler").get("target"),
        log_level=str(_section(raw, "logging").get("level", defaults.log_level)).upper(),
    )
    check_settings(settings)
    return settings


def check_settings(settings: Settings) -> None:
    if settings.shape.m < 2:
        raise ConfigurationError("model_states", "Model needs at least 2 latent states.")
    if settings.shape.n_dep != 3:
        raise ConfigurationError("model_n_dep", "Model is defined for exactly 3 dependent variables.")
    if not 0.0 < settings.diag_low <= settings.diag_high < 1.0:
        raise ConfigurationError("diag_bounds", "Diagonal bounds must satisfy 0 < low <= high < 1.")
    if settings.jitter < 0.0:
        raise ConfigurationError("jitter", "Jitter must be nonnegative.")
    if settings.seed_max < 1:
        raise ConfigurationError("seed_max", "seed_max must be positive.")
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise ConfigurationError("log_level", f"Unknown log level: {settings.log_level}")


def configure_logging(level: str = "INFO") -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not log.handlers:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        log.addHandler(ch)
    return log
