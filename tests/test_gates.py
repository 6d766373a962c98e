from __future__ import annotations

import math

import pytest

from bodygraph.gates import gate_span, line_span, resolve, zodiac_position
from bodygraph.tables import GATE_WIDTH, LINE_WIDTH, get_tables


@pytest.mark.parametrize(
    ("longitude", "gate", "line"),
    [
        (0.0, 25, 2),
        (3.875, 17, 1),
        (54.009, 23, 6),
        (302.0, 41, 1),
        (302.5, 41, 1),
        (122.5, 31, 1),
        (214.5, 28, 3),
        (34.5, 27, 3),
    ],
)
def test_reference_longitudes(longitude: float, gate: int, line: int) -> None:
    position = resolve(longitude)
    assert (position.gate, position.line) == (gate, line)


def test_wheel_wraps_inside_gate_25() -> None:
    assert resolve(360.0 - 1e-9).label == "25.2"
    assert resolve(-1e-9).label == "25.2"
    assert resolve(360.0).label == resolve(0.0).label


def test_gate_boundaries_resolve_to_line_one() -> None:
    wheel = get_tables().wheel
    for index, gate in enumerate(wheel.gate_order):
        boundary = wheel.start_degree + index * GATE_WIDTH
        position = resolve(boundary)
        assert (position.gate, position.line) == (gate, 1)
        before = resolve(boundary - 1e-7)
        assert before.gate == wheel.gate_order[index - 1]
        assert before.line == 6


def test_line_boundaries_belong_to_following_line() -> None:
    start, _ = gate_span(1)
    for line in range(1, 7):
        assert resolve(start + (line - 1) * LINE_WIDTH).line == line


def test_sub_divisions_span_the_line() -> None:
    start, end = line_span(41, 1)
    first = resolve(start)
    assert (first.color, first.tone, first.base) == (1, 1, 1)
    last = resolve(end - 1e-9)
    assert (last.gate, last.line) == (41, 1)
    assert (last.color, last.tone, last.base) == (6, 6, 5)


def test_line_spans_tile_the_circle() -> None:
    wheel = get_tables().wheel
    starts = sorted(line_span(gate, line)[0] for gate in wheel.gate_order for line in range(1, 7))
    assert len(starts) == 384
    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert all(math.isclose(gap, LINE_WIDTH, abs_tol=1e-9) for gap in gaps)
    assert math.isclose(starts[0] + 360.0 - starts[-1], LINE_WIDTH, abs_tol=1e-9)


def test_gate_span_wraps_through_zero() -> None:
    start, end = gate_span(25)
    assert start == pytest.approx(358.25)
    assert end == pytest.approx(3.875)


def test_invalid_inputs_raise() -> None:
    with pytest.raises(ValueError):
        resolve(float("nan"))
    with pytest.raises(ValueError):
        resolve(float("inf"))
    with pytest.raises(ValueError):
        gate_span(65)
    with pytest.raises(ValueError):
        line_span(1, 7)


def test_zodiac_position() -> None:
    position = zodiac_position(302.5)
    assert position.sign == "Aquarius"
    assert position.degree == pytest.approx(2.5)
    assert zodiac_position(-0.5).sign == "Pisces"
