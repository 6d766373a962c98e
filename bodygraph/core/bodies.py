"""Body catalogue for the thirteen tracked chart references."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Final

__all__ = [
    "BODY_ORDER",
    "Body",
    "DERIVED_BODIES",
    "SWISS_BODY_CODES",
]


class Body(StrEnum):
    """Celestial references activated in every chart."""

    SUN = "sun"
    EARTH = "earth"
    MOON = "moon"
    NORTH_NODE = "north_node"
    SOUTH_NODE = "south_node"
    MERCURY = "mercury"
    VENUS = "venus"
    MARS = "mars"
    JUPITER = "jupiter"
    SATURN = "saturn"
    URANUS = "uranus"
    NEPTUNE = "neptune"
    PLUTO = "pluto"


# Canonical reporting order; activation sets are always laid out this way.
BODY_ORDER: Final[tuple[Body, ...]] = tuple(Body)

# Swiss Ephemeris body indexes (Sun=0 … Pluto=9). Nodes are resolved by the
# provider because the mean/true variant is configurable.
SWISS_BODY_CODES: Mapping[Body, int] = MappingProxyType(
    {
        Body.SUN: 0,
        Body.MOON: 1,
        Body.MERCURY: 2,
        Body.VENUS: 3,
        Body.MARS: 4,
        Body.JUPITER: 5,
        Body.SATURN: 6,
        Body.URANUS: 7,
        Body.NEPTUNE: 8,
        Body.PLUTO: 9,
    }
)

# Points that sit exactly opposite another body: derived body -> source body.
DERIVED_BODIES: Mapping[Body, Body] = MappingProxyType(
    {
        Body.EARTH: Body.SUN,
        Body.SOUTH_NODE: Body.NORTH_NODE,
    }
)
