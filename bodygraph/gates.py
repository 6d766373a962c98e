"""Map ecliptic longitudes onto the 64-gate wheel.

The wheel divides the ecliptic into 64 gates of 5.625° each, every gate into
six lines of 0.9375°. Lines are further divided into colors, tones and bases.
The mapping is total and deterministic: every finite longitude resolves to one
gate/line pair and boundaries always belong to the segment that starts there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .core.angles import normalize_degrees
from .tables import (
    BASE_WIDTH,
    BASES_PER_TONE,
    COLOR_WIDTH,
    COLORS_PER_LINE,
    GATE_COUNT,
    GATE_WIDTH,
    LINE_WIDTH,
    LINES_PER_GATE,
    TONE_WIDTH,
    TONES_PER_COLOR,
    GateWheel,
    get_tables,
)

__all__ = [
    "GatePosition",
    "SIGNS",
    "ZodiacPosition",
    "gate_span",
    "line_span",
    "resolve",
    "zodiac_position",
]

DEGREES_PER_SIGN = 30.0
SIGNS = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)


@dataclass(frozen=True, slots=True)
class GatePosition:
    """Gate, line and sub-divisions for a single longitude."""

    longitude: float
    gate: int
    line: int
    color: int
    tone: int
    base: int

    @property
    def label(self) -> str:
        return f"{self.gate}.{self.line}"

    def to_payload(self) -> dict[str, Any]:
        return {
            "longitude": self.longitude,
            "gate": self.gate,
            "line": self.line,
            "color": self.color,
            "tone": self.tone,
            "base": self.base,
        }


@dataclass(frozen=True, slots=True)
class ZodiacPosition:
    sign: str
    degree: float


def _wheel(wheel: GateWheel | None) -> GateWheel:
    return wheel if wheel is not None else get_tables().wheel


def _split(value: float, width: float, count: int) -> tuple[int, float]:
    # Clamped so float rounding can never produce an index past the last slot.
    index = min(max(int(value // width), 0), count - 1)
    return index, max(value - index * width, 0.0)


def resolve(longitude: float, *, wheel: GateWheel | None = None) -> GatePosition:
    """Resolve ``longitude`` (degrees) into a :class:`GatePosition`.

    Raises
    ------
    ValueError
        If ``longitude`` is NaN or infinite.
    """

    lon = normalize_degrees(longitude)
    active = _wheel(wheel)
    offset = normalize_degrees(lon - active.start_degree)
    gate_index, within_gate = _split(offset, GATE_WIDTH, GATE_COUNT)
    line_index, within_line = _split(within_gate, LINE_WIDTH, LINES_PER_GATE)
    color_index, within_color = _split(within_line, COLOR_WIDTH, COLORS_PER_LINE)
    tone_index, within_tone = _split(within_color, TONE_WIDTH, TONES_PER_COLOR)
    base_index, _ = _split(within_tone, BASE_WIDTH, BASES_PER_TONE)
    return GatePosition(
        longitude=lon,
        gate=active.gate_at(gate_index),
        line=line_index + 1,
        color=color_index + 1,
        tone=tone_index + 1,
        base=base_index + 1,
    )


def gate_span(gate: int, *, wheel: GateWheel | None = None) -> tuple[float, float]:
    """Return the ``[start, end)`` longitudes covered by ``gate``.

    ``start`` is greater than ``end`` for the gate that straddles 0°.
    """

    start = _wheel(wheel).start_of(gate)
    return start, normalize_degrees(start + GATE_WIDTH)


def line_span(gate: int, line: int, *, wheel: GateWheel | None = None) -> tuple[float, float]:
    """Return the ``[start, end)`` longitudes covered by ``gate``/``line``."""

    if not 1 <= line <= LINES_PER_GATE:
        raise ValueError(f"Line must be between 1 and {LINES_PER_GATE}, got {line}")
    gate_start, _ = gate_span(gate, wheel=wheel)
    start = normalize_degrees(gate_start + (line - 1) * LINE_WIDTH)
    return start, normalize_degrees(start + LINE_WIDTH)


def zodiac_position(longitude: float) -> ZodiacPosition:
    """Return the tropical sign and degree within the sign for ``longitude``."""

    lon = normalize_degrees(longitude)
    index = min(int(lon // DEGREES_PER_SIGN), len(SIGNS) - 1)
    return ZodiacPosition(sign=SIGNS[index], degree=lon - index * DEGREES_PER_SIGN)
