"""Core primitives shared across bodygraph: bodies, angles and time."""

from __future__ import annotations

from .angles import forward_arc, normalize_degrees, signed_delta
from .bodies import BODY_ORDER, DERIVED_BODIES, SWISS_BODY_CODES, Body
from .time import (
    BirthInput,
    InputValidationError,
    ensure_utc,
    jd_to_datetime,
    julian_day,
    parse_utc_offset,
)

__all__ = [
    "BODY_ORDER",
    "BirthInput",
    "Body",
    "DERIVED_BODIES",
    "InputValidationError",
    "SWISS_BODY_CODES",
    "ensure_utc",
    "forward_arc",
    "jd_to_datetime",
    "julian_day",
    "normalize_degrees",
    "parse_utc_offset",
    "signed_delta",
]
