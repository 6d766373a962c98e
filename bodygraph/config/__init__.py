"""Configuration helpers exposed at :mod:`bodygraph.config`."""

from __future__ import annotations

from .settings import (
    BatchCfg,
    EphemerisCfg,
    Settings,
    SettingsError,
    SolverCfg,
    TablesCfg,
    config_path,
    default_settings,
    get_config_home,
    load_settings,
    save_settings,
)

__all__ = [
    "BatchCfg",
    "EphemerisCfg",
    "Settings",
    "SettingsError",
    "SolverCfg",
    "TablesCfg",
    "config_path",
    "default_settings",
    "get_config_home",
    "load_settings",
    "save_settings",
]
