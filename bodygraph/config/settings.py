"""Configuration models and helpers for bodygraph settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

LOG = logging.getLogger(__name__)

CURRENT_SETTINGS_SCHEMA_VERSION = 1

# -------------------- Settings Schema --------------------


class SolverCfg(BaseModel):
    """Design instant search parameters."""

    arc_degrees: float = 88.0
    tolerance_deg: float = 1e-4
    window_min_days: float = 60.0
    window_max_days: float = 100.0
    max_iterations: int = 64
    samples: int = 16

    @field_validator("tolerance_deg", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        return max(1e-9, min(0.1, float(value)))

    @field_validator("max_iterations", mode="before")
    @classmethod
    def _cap_iterations(cls, value: int) -> int:
        return max(1, min(1000, int(value)))

    @field_validator("samples", mode="before")
    @classmethod
    def _cap_samples(cls, value: int) -> int:
        return max(1, min(512, int(value)))

    @model_validator(mode="after")
    def _check_window(self) -> SolverCfg:
        if not 0.0 < self.arc_degrees < 360.0:
            raise ValueError("arc_degrees must be within (0, 360)")
        if not 0.0 < self.window_min_days < self.window_max_days:
            raise ValueError("window_min_days must be positive and below window_max_days")
        return self


class EphemerisCfg(BaseModel):
    """Ephemeris source configuration."""

    path: Optional[str] = None
    node: Literal["mean", "true"] = "mean"
    prefer_moshier: bool = False
    min_year: int = 1800
    max_year: int = 2399

    @model_validator(mode="after")
    def _check_years(self) -> EphemerisCfg:
        if self.min_year > self.max_year:
            raise ValueError("min_year must not exceed max_year")
        return self


class TablesCfg(BaseModel):
    """Constant data bundle location (packaged bundle when unset)."""

    path: Optional[str] = None


class BatchCfg(BaseModel):
    """Worker pool options for batch chart computation."""

    workers: int = 1

    @field_validator("workers", mode="before")
    @classmethod
    def _cap_workers(cls, value: int) -> int:
        return max(1, min(8, int(value)))


class Settings(BaseModel):
    """Top-level settings model persisted on disk."""

    schema_version: int = Field(
        default=CURRENT_SETTINGS_SCHEMA_VERSION,
        ge=1,
        description="Version marker for persisted configuration payloads.",
    )
    solver: SolverCfg = Field(default_factory=SolverCfg)
    ephemeris: EphemerisCfg = Field(default_factory=EphemerisCfg)
    tables: TablesCfg = Field(default_factory=TablesCfg)
    batch: BatchCfg = Field(default_factory=BatchCfg)


# -------------------- I/O Helpers --------------------

CONFIG_FILENAME = "config.yaml"
CONFIG_HOME_ENV = "BODYGRAPH_HOME"


class SettingsError(ValueError):
    """Raised when a settings file cannot be read into :class:`Settings`."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


def get_config_home() -> Path:
    """Return the settings directory (``$BODYGRAPH_HOME`` or ``~/.bodygraph``)."""

    override = os.environ.get(CONFIG_HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".bodygraph"


def config_path() -> Path:
    """Return the default settings file, creating its directory."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Write ``settings`` as YAML and return the file written."""

    target = Path(path) if path else config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return target


def _migrate(payload: dict[str, Any], *, path: Path) -> tuple[dict[str, Any], bool]:
    """Bring a stored payload up to the current schema.

    Schema 1 is the first bodygraph layout, so the only migration is stamping
    files written without a ``schema_version`` marker. Files from a newer
    release are refused rather than read with fields silently dropped.
    """

    raw_version = payload.get("schema_version")
    if raw_version is None:
        migrated = dict(payload)
        migrated["schema_version"] = CURRENT_SETTINGS_SCHEMA_VERSION
        return migrated, True
    if isinstance(raw_version, bool) or not isinstance(raw_version, int):
        raise SettingsError(
            f"{path}: schema_version must be an integer, got {raw_version!r}", path=path
        )
    if raw_version > CURRENT_SETTINGS_SCHEMA_VERSION:
        raise SettingsError(
            f"{path}: schema_version {raw_version} is newer than this release supports "
            f"({CURRENT_SETTINGS_SCHEMA_VERSION})",
            path=path,
        )
    return payload, False


def load_settings(path: Optional[Path] = None) -> Settings:
    """Read settings from ``path`` (or the default file), writing defaults when absent.

    Unreadable YAML, a non-mapping document, an unsupported schema version or
    values rejected by the models raise :class:`SettingsError`.
    """

    source = Path(path) if path else config_path()
    if not source.exists():
        settings = default_settings()
        save_settings(settings, source)
        LOG.info("Wrote default settings to %s", source)
        return settings

    try:
        document = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsError(f"{source}: invalid YAML: {exc}", path=source) from exc
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise SettingsError(
            f"{source}: expected a mapping at the top level, got {type(document).__name__}",
            path=source,
        )

    payload, migrated = _migrate(document, path=source)
    try:
        settings = Settings.model_validate(payload)
    except ValidationError as exc:
        raise SettingsError(f"{source}: {exc}", path=source) from exc
    if migrated:
        save_settings(settings, source)
        LOG.info("Stamped %s with schema_version %d", source, CURRENT_SETTINGS_SCHEMA_VERSION)
    return settings
