"""Enumerated tags shared by the constant tables, rules and classifiers."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "Authority",
    "CENTER_ORDER",
    "Center",
    "CrossAngle",
    "Definition",
    "HDType",
    "MOTOR_CENTERS",
]


class Center(StrEnum):
    """The nine structural centers of the bodygraph."""

    HEAD = "head"
    AJNA = "ajna"
    THROAT = "throat"
    G = "g"
    HEART = "heart"
    SACRAL = "sacral"
    SOLAR_PLEXUS = "solar_plexus"
    SPLEEN = "spleen"
    ROOT = "root"


CENTER_ORDER: Final[tuple[Center, ...]] = tuple(Center)

MOTOR_CENTERS: Final[frozenset[Center]] = frozenset(
    {Center.HEART, Center.SACRAL, Center.SOLAR_PLEXUS, Center.ROOT}
)


class HDType(StrEnum):
    REFLECTOR = "reflector"
    MANIFESTOR = "manifestor"
    MANIFESTING_GENERATOR = "manifesting_generator"
    GENERATOR = "generator"
    PROJECTOR = "projector"


class Authority(StrEnum):
    EMOTIONAL = "emotional"
    SACRAL = "sacral"
    SPLENIC = "splenic"
    EGO = "ego"
    SELF_PROJECTED = "self_projected"
    MENTAL = "mental"
    NONE = "none"


class CrossAngle(StrEnum):
    RIGHT_ANGLE = "right_angle"
    LEFT_ANGLE = "left_angle"
    JUXTAPOSITION = "juxtaposition"


class Definition(StrEnum):
    """Number of disconnected groups formed by the defined centers."""

    NONE = "none"
    SINGLE = "single"
    SPLIT = "split"
    TRIPLE_SPLIT = "triple_split"
    QUADRUPLE_SPLIT = "quadruple_split"

    @classmethod
    def from_groups(cls, groups: int) -> Definition:
        ordered = (cls.NONE, cls.SINGLE, cls.SPLIT, cls.TRIPLE_SPLIT, cls.QUADRUPLE_SPLIT)
        if groups < 0:
            raise ValueError("group count must be non-negative")
        return ordered[min(groups, len(ordered) - 1)]
