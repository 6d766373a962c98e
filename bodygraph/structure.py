"""Derive active channels and defined centers from the two activation sets."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .activations import ActivationSet
from .rules import CenterFacts
from .tables import ChannelDef, ConstantTables
from .vocabulary import CENTER_ORDER, Center, Definition

__all__ = [
    "Structure",
    "active_channels",
    "count_groups",
    "defined_centers",
    "resolve_structure",
]


def active_channels(gates: Iterable[int], channels: Sequence[ChannelDef]) -> tuple[ChannelDef, ...]:
    """Return the channels whose two gates are both present in ``gates``."""

    present = frozenset(gates)
    return tuple(
        channel
        for channel in channels
        if channel.gates[0] in present and channel.gates[1] in present
    )


def defined_centers(channels: Iterable[ChannelDef]) -> frozenset[Center]:
    return frozenset(center for channel in channels for center in channel.centers)


def count_groups(channels: Iterable[ChannelDef]) -> int:
    """Count connected groups of centers joined by ``channels`` (union-find)."""

    parent: dict[Center, Center] = {}

    def find(center: Center) -> Center:
        root = center
        while parent[root] is not root:
            root = parent[root]
        while parent[center] is not root:
            parent[center], center = root, parent[center]
        return root

    for channel in channels:
        first, second = channel.centers
        parent.setdefault(first, first)
        parent.setdefault(second, second)
        root_a, root_b = find(first), find(second)
        if root_a is not root_b:
            parent[root_b] = root_a
    return len({find(center) for center in parent})


@dataclass(frozen=True)
class Structure:
    """Active channels plus the centers they define."""

    channels: tuple[ChannelDef, ...]
    defined_centers: frozenset[Center]

    @classmethod
    def from_channels(cls, channels: Sequence[ChannelDef]) -> Structure:
        channels = tuple(channels)
        return cls(channels=channels, defined_centers=defined_centers(channels))

    @property
    def open_centers(self) -> tuple[Center, ...]:
        return tuple(center for center in CENTER_ORDER if center not in self.defined_centers)

    @property
    def ordered_defined_centers(self) -> tuple[Center, ...]:
        return tuple(center for center in CENTER_ORDER if center in self.defined_centers)

    @property
    def definition(self) -> Definition:
        return Definition.from_groups(count_groups(self.channels))

    def facts(self) -> CenterFacts:
        return CenterFacts.from_pairs(channel.centers for channel in self.channels)

    def to_payload(self) -> dict[str, Any]:
        return {
            "channels": [channel.to_payload() for channel in self.channels],
            "defined_centers": [center.value for center in self.ordered_defined_centers],
            "open_centers": [center.value for center in self.open_centers],
            "definition": self.definition.value,
        }


def resolve_structure(
    activation_sets: Iterable[ActivationSet], tables: ConstantTables
) -> Structure:
    """Combine every activation in ``activation_sets`` into a :class:`Structure`."""

    gates = [activation.gate for activation_set in activation_sets for activation in activation_set]
    return Structure.from_channels(active_channels(gates, tables.channels))
