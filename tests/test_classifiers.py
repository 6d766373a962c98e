from __future__ import annotations

import pytest

from bodygraph.activations import Activation, ActivationKind, ActivationSet
from bodygraph.classifiers import (
    MOTOR_TO_THROAT,
    TYPE_RULES,
    calculate_profile,
    classify_authority,
    classify_type,
    resolve_cross,
    strategy_for,
)
from bodygraph.core.bodies import BODY_ORDER, Body
from bodygraph.structure import Structure, active_channels
from bodygraph.vocabulary import Authority, Center, CrossAngle, HDType

from .conftest import longitude_for


def _structure(tables, *gates: int) -> Structure:
    return Structure.from_channels(active_channels(gates, tables.channels))


def _set(kind: ActivationKind, sun: tuple[int, int], earth: tuple[int, int]) -> ActivationSet:
    placements = {Body.SUN: sun, Body.EARTH: earth}
    activations = tuple(
        Activation.from_longitude(body, longitude_for(*placements.get(body, (41, 1))))
        for body in BODY_ORDER
    )
    return ActivationSet(kind=kind, julian_day=2451545.0, activations=activations)


@pytest.mark.parametrize(
    ("gates", "expected_type", "expected_authority"),
    [
        ((), HDType.REFLECTOR, Authority.NONE),
        ((21, 45), HDType.MANIFESTOR, Authority.EGO),
        ((12, 22), HDType.MANIFESTOR, Authority.EMOTIONAL),
        ((21, 45, 27, 50), HDType.MANIFESTING_GENERATOR, Authority.SACRAL),
        ((27, 50), HDType.GENERATOR, Authority.SACRAL),
        ((6, 59), HDType.GENERATOR, Authority.EMOTIONAL),
        ((7, 31), HDType.PROJECTOR, Authority.SELF_PROJECTED),
        ((25, 51), HDType.PROJECTOR, Authority.EGO),
        ((26, 44), HDType.PROJECTOR, Authority.SPLENIC),
        ((4, 63), HDType.PROJECTOR, Authority.MENTAL),
        ((1, 8, 4, 63), HDType.PROJECTOR, Authority.SELF_PROJECTED),
    ],
)
def test_type_and_authority(tables, gates, expected_type, expected_authority) -> None:
    structure = _structure(tables, *gates)
    assert classify_type(structure) is expected_type
    assert classify_authority(structure, tables) is expected_authority


def test_sacral_to_throat_alone_is_generator(tables) -> None:
    # Only heart, solar plexus and root count as motors feeding the throat.
    structure = _structure(tables, 20, 34)
    assert classify_type(structure) is HDType.GENERATOR


def test_type_rule_list_is_total(tables) -> None:
    assert TYPE_RULES[0].result is HDType.REFLECTOR
    assert TYPE_RULES[-1].result is HDType.PROJECTOR
    for gates in [(), (4, 63), (27, 50), (21, 45), (21, 45, 27, 50)]:
        classify_type(_structure(tables, *gates))


def test_strategy_labels(tables) -> None:
    assert strategy_for(HDType.GENERATOR, tables) == "To Respond"
    assert strategy_for(HDType.PROJECTOR, tables) == "Wait for the Invitation"
    assert strategy_for(HDType.REFLECTOR, tables) == "Wait a Lunar Cycle"


def test_profile_and_cross(tables) -> None:
    personality = _set(ActivationKind.PERSONALITY, (41, 1), (31, 1))
    design = _set(ActivationKind.DESIGN, (28, 3), (27, 3))
    profile = calculate_profile(personality, design)
    assert profile.label == "1/3"
    cross = resolve_cross(personality, design, tables)
    assert cross.gates == (41, 31, 28, 27)
    assert cross.angle is CrossAngle.RIGHT_ANGLE
    assert cross.label == "Right Angle Cross (41/31 | 28/27)"


@pytest.mark.parametrize(
    ("personality_line", "design_line", "angle"),
    [
        (4, 1, CrossAngle.JUXTAPOSITION),
        (5, 1, CrossAngle.LEFT_ANGLE),
        (6, 2, CrossAngle.LEFT_ANGLE),
        (2, 4, CrossAngle.RIGHT_ANGLE),
        (3, 3, CrossAngle.RIGHT_ANGLE),
    ],
)
def test_cross_angle_from_line_pair(tables, personality_line, design_line, angle) -> None:
    personality = _set(ActivationKind.PERSONALITY, (41, personality_line), (31, personality_line))
    design = _set(ActivationKind.DESIGN, (28, design_line), (27, design_line))
    cross = resolve_cross(personality, design, tables)
    assert cross.angle is angle
    assert calculate_profile(personality, design).label == f"{personality_line}/{design_line}"


def test_motor_to_throat_excludes_sacral() -> None:
    assert MOTOR_TO_THROAT == (
        (Center.HEART, Center.THROAT),
        (Center.SOLAR_PLEXUS, Center.THROAT),
        (Center.ROOT, Center.THROAT),
    )
