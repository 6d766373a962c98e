"""Type, authority, profile and incarnation cross classification.

Type and authority are first-match rule lists over :class:`~bodygraph.rules.CenterFacts`.
The type rules are fixed here; the authority rules are constant data loaded
with the rest of the bundle so the precedence can be revised without code
changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .activations import ActivationSet
from .rules import Rule, first_match
from .structure import Structure
from .tables import ConstantTables
from .vocabulary import CENTER_ORDER, MOTOR_CENTERS, Authority, Center, CrossAngle, HDType

__all__ = [
    "GENERATOR_RULE",
    "IncarnationCross",
    "MANIFESTING_GENERATOR_RULE",
    "MANIFESTOR_RULE",
    "MOTOR_TO_THROAT",
    "PROJECTOR_RULE",
    "Profile",
    "REFLECTOR_RULE",
    "TYPE_RULES",
    "calculate_profile",
    "classify_authority",
    "classify_type",
    "resolve_cross",
    "strategy_for",
]

# Sacral reaching the throat alone does not make a Manifestor.
MOTOR_TO_THROAT: tuple[tuple[Center, Center], ...] = tuple(
    (center, Center.THROAT)
    for center in CENTER_ORDER
    if center in MOTOR_CENTERS and center is not Center.SACRAL
)

REFLECTOR_RULE: Rule[HDType] = Rule(HDType.REFLECTOR, defined_any=False)
MANIFESTOR_RULE: Rule[HDType] = Rule(
    HDType.MANIFESTOR,
    undefined=frozenset({Center.SACRAL}),
    connected_any=MOTOR_TO_THROAT,
)
MANIFESTING_GENERATOR_RULE: Rule[HDType] = Rule(
    HDType.MANIFESTING_GENERATOR,
    defined=frozenset({Center.SACRAL}),
    connected_any=MOTOR_TO_THROAT,
)
GENERATOR_RULE: Rule[HDType] = Rule(HDType.GENERATOR, defined=frozenset({Center.SACRAL}))
PROJECTOR_RULE: Rule[HDType] = Rule(HDType.PROJECTOR, defined_any=True)

TYPE_RULES: tuple[Rule[HDType], ...] = (
    REFLECTOR_RULE,
    MANIFESTOR_RULE,
    MANIFESTING_GENERATOR_RULE,
    GENERATOR_RULE,
    PROJECTOR_RULE,
)


def classify_type(structure: Structure) -> HDType:
    return first_match(TYPE_RULES, structure.facts())


def classify_authority(structure: Structure, tables: ConstantTables) -> Authority:
    return first_match(tables.authority_rules, structure.facts())


def strategy_for(hd_type: HDType, tables: ConstantTables) -> str:
    return tables.strategies[hd_type]


@dataclass(frozen=True, slots=True)
class Profile:
    """Personality and design Sun lines, written ``p/d``."""

    personality_line: int
    design_line: int

    @property
    def label(self) -> str:
        return f"{self.personality_line}/{self.design_line}"

    def to_payload(self) -> dict[str, Any]:
        return {
            "personality_line": self.personality_line,
            "design_line": self.design_line,
            "label": self.label,
        }


def calculate_profile(personality: ActivationSet, design: ActivationSet) -> Profile:
    return Profile(personality_line=personality.sun.line, design_line=design.sun.line)


@dataclass(frozen=True, slots=True)
class IncarnationCross:
    """The four Sun/Earth gates plus the cross angle."""

    personality_sun: int
    personality_earth: int
    design_sun: int
    design_earth: int
    angle: CrossAngle
    angle_label: str

    @property
    def gates(self) -> tuple[int, int, int, int]:
        return (self.personality_sun, self.personality_earth, self.design_sun, self.design_earth)

    @property
    def label(self) -> str:
        return (
            f"{self.angle_label} Cross ({self.personality_sun}/{self.personality_earth}"
            f" | {self.design_sun}/{self.design_earth})"
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "angle": self.angle.value,
            "gates": list(self.gates),
            "label": self.label,
        }


def resolve_cross(
    personality: ActivationSet, design: ActivationSet, tables: ConstantTables
) -> IncarnationCross:
    angle = tables.cross_angle(personality.sun.line, design.sun.line)
    return IncarnationCross(
        personality_sun=personality.sun.gate,
        personality_earth=personality.earth.gate,
        design_sun=design.sun.gate,
        design_earth=design.earth.gate,
        angle=angle,
        angle_label=tables.angle_labels[angle],
    )
