from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from bodygraph.boot import configure_logging
from bodygraph.boot.logging import level_for_verbosity
from bodygraph.config import (
    BatchCfg,
    EphemerisCfg,
    Settings,
    SettingsError,
    SolverCfg,
    config_path,
    default_settings,
    get_config_home,
    load_settings,
    save_settings,
)


def test_config_home_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BODYGRAPH_HOME", str(tmp_path / "home"))
    assert get_config_home() == tmp_path / "home"
    assert config_path() == tmp_path / "home" / "config.yaml"
    assert (tmp_path / "home").is_dir()


def test_load_settings_creates_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BODYGRAPH_HOME", str(tmp_path))
    settings = load_settings()
    assert settings == default_settings()
    stored = yaml.safe_load((tmp_path / "config.yaml").read_text(encoding="utf-8"))
    assert stored["solver"]["arc_degrees"] == 88.0
    assert stored["ephemeris"]["node"] == "mean"


def test_round_trip(tmp_path: Path) -> None:
    settings = Settings(
        solver=SolverCfg(tolerance_deg=1e-6),
        ephemeris=EphemerisCfg(node="true", prefer_moshier=True),
        batch=BatchCfg(workers=4),
    )
    target = save_settings(settings, tmp_path / "custom.yaml")
    assert load_settings(target) == settings


def test_unversioned_payload_is_upgraded(tmp_path: Path) -> None:
    target = tmp_path / "config.yaml"
    target.write_text("batch:\n  workers: 3\n", encoding="utf-8")
    settings = load_settings(target)
    assert settings.batch.workers == 3
    assert yaml.safe_load(target.read_text(encoding="utf-8"))["schema_version"] == 1


def test_values_are_capped() -> None:
    assert BatchCfg(workers=64).workers == 8
    assert BatchCfg(workers=0).workers == 1
    assert SolverCfg(max_iterations=10_000).max_iterations == 1000
    assert SolverCfg(tolerance_deg=5).tolerance_deg == 0.1


def test_invalid_sections_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SolverCfg(window_min_days=120.0)
    with pytest.raises(ValidationError):
        SolverCfg(arc_degrees=400.0)
    with pytest.raises(ValidationError):
        EphemerisCfg(node="osculating")
    with pytest.raises(ValidationError):
        EphemerisCfg(min_year=2500, max_year=2000)


def test_configure_logging_levels(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert configure_logging() == logging.WARNING
    assert configure_logging(level="debug") == logging.DEBUG
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert configure_logging() == logging.ERROR
    monkeypatch.setenv("LOG_LEVEL", "bogus")
    assert configure_logging() == logging.WARNING
    assert configure_logging(level=15) == 15


def test_level_for_verbosity() -> None:
    assert level_for_verbosity(0) == logging.WARNING
    assert level_for_verbosity(1) == logging.INFO
    assert level_for_verbosity(3) == logging.DEBUG


@pytest.mark.parametrize(
    "content",
    [
        "schema_version: 2\n",
        "schema_version: one\n",
        "- solver\n- batch\n",
        "solver: [unclosed\n",
        "solver:\n  window_min_days: 120\n",
    ],
)
def test_unreadable_files_raise_settings_error(tmp_path: Path, content: str) -> None:
    target = tmp_path / "config.yaml"
    target.write_text(content, encoding="utf-8")
    with pytest.raises(SettingsError) as excinfo:
        load_settings(target)
    assert excinfo.value.path == target
    # A rejected file is left untouched.
    assert target.read_text(encoding="utf-8") == content


def test_empty_file_loads_defaults(tmp_path: Path) -> None:
    target = tmp_path / "config.yaml"
    target.write_text("", encoding="utf-8")
    assert load_settings(target) == default_settings()
