"""Shared fixtures and synthetic position providers for the test suite."""

from __future__ import annotations

import math
from collections.abc import Mapping

import pytest

from bodygraph.core.angles import normalize_degrees
from bodygraph.core.bodies import Body
from bodygraph.core.time import BirthInput
from bodygraph.gates import line_span
from bodygraph.providers import PositionUnavailable
from bodygraph.tables import LINE_WIDTH, ConstantTables, get_tables

# 2000-01-01 12:00 UT
BIRTH_JD = 2451545.0
SUN_RATE = 0.9856
# Sun at 302.5 puts the personality Sun in 41.1 and the design Sun in 28.3.
BIRTH_SUN = 302.5


def longitude_for(gate: int, line: int = 1) -> float:
    """Return the middle of ``gate``/``line`` on the default wheel."""

    start, _ = line_span(gate, line)
    return normalize_degrees(start + LINE_WIDTH / 2.0)


class ScriptedProvider:
    """Sun moves at a steady rate; other bodies sit at scripted longitudes.

    ``personality`` longitudes apply near the birth instant and ``design``
    longitudes apply more than 30 days before it. Unscripted bodies park in
    gate 41 (birth) or gate 28 (design) so they never complete a channel.
    """

    def __init__(
        self,
        *,
        birth_sun: float = BIRTH_SUN,
        birth_jd: float = BIRTH_JD,
        rate: float = SUN_RATE,
        wobble: float = 0.0,
        personality: Mapping[Body, float] | None = None,
        design: Mapping[Body, float] | None = None,
        fail: Mapping[Body, str] | None = None,
    ) -> None:
        self.birth_sun = birth_sun
        self.birth_jd = birth_jd
        self.rate = rate
        self.wobble = wobble
        self.personality = dict(personality or {})
        self.design = dict(design or {})
        self.fail = dict(fail or {})
        self.calls: list[tuple[Body, float]] = []

    def _is_design(self, julian_day: float) -> bool:
        return julian_day < self.birth_jd - 30.0

    def sun(self, julian_day: float) -> float:
        elapsed = julian_day - self.birth_jd
        return normalize_degrees(
            self.birth_sun + self.rate * elapsed + self.wobble * math.sin(elapsed / 5.0)
        )

    def longitude(self, body: Body, julian_day: float) -> float:
        self.calls.append((body, julian_day))
        phase = "design" if self._is_design(julian_day) else "personality"
        if self.fail.get(body) in (phase, "always"):
            raise PositionUnavailable(
                f"{body.value} unavailable", body=body, julian_day=julian_day, reason="scripted"
            )
        if body is Body.SUN:
            return self.sun(julian_day)
        if body is Body.EARTH:
            return normalize_degrees(self.sun(julian_day) + 180.0)
        if phase == "design":
            return self.design.get(body, longitude_for(28, 3))
        return self.personality.get(body, longitude_for(41, 1))


@pytest.fixture
def tables() -> ConstantTables:
    return get_tables()


@pytest.fixture
def birth() -> BirthInput:
    return BirthInput.parse(date="2000-01-01", time="12:00", utc_offset="0")


@pytest.fixture
def provider_factory():
    return ScriptedProvider
