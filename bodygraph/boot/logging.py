"""Logging setup for the bodygraph command line and batch runners.

Chart payloads are written to stdout, so log records always go to stderr
unless the caller passes its own handlers.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

__all__ = ["configure_logging", "level_for_verbosity"]

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _coerce_level(value: str | int | None, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    candidate = value.strip()
    if not candidate:
        return default
    if candidate.isdigit():
        return int(candidate)
    resolved = logging.getLevelName(candidate.upper())
    if isinstance(resolved, int):
        return resolved
    return default


def level_for_verbosity(verbose: int) -> int:
    """Map a ``-v`` count onto a level: none=WARNING, one=INFO, more=DEBUG."""

    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(
    *, level: str | int | None = None, default: int = logging.WARNING, **kwargs: Any
) -> int:
    """Configure the root logger and return the effective level.

    ``level`` wins over the ``LOG_LEVEL`` environment variable, which wins
    over ``default``. Remaining ``kwargs`` go to :func:`logging.basicConfig`.
    """

    raw = level if level is not None else os.environ.get("LOG_LEVEL")
    effective_level = _coerce_level(raw, default)
    if "handlers" not in kwargs:
        kwargs.setdefault("stream", sys.stderr)
    logging.basicConfig(
        level=effective_level,
        format=kwargs.pop("format", _DEFAULT_FORMAT),
        datefmt=kwargs.pop("datefmt", _DEFAULT_DATEFMT),
        force=kwargs.pop("force", True),
        **kwargs,
    )
    return effective_level
