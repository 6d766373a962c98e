from __future__ import annotations

from bodygraph.activations import Activation, ActivationKind, ActivationSet
from bodygraph.core.bodies import BODY_ORDER, Body
from bodygraph.structure import (
    Structure,
    active_channels,
    count_groups,
    defined_centers,
    resolve_structure,
)
from bodygraph.vocabulary import CENTER_ORDER, Center, Definition

from .conftest import longitude_for


def _set(kind: ActivationKind, gates: dict[Body, int]) -> ActivationSet:
    activations = tuple(
        Activation.from_longitude(body, longitude_for(gates.get(body, 41)))
        for body in BODY_ORDER
    )
    return ActivationSet(kind=kind, julian_day=2451545.0, activations=activations)


def test_channel_needs_both_gates(tables) -> None:
    assert active_channels([27], tables.channels) == ()
    (channel,) = active_channels([27, 50], tables.channels)
    assert channel.key == "27-50"


def test_shared_gate_activates_every_matching_channel(tables) -> None:
    keys = {channel.key for channel in active_channels([10, 20, 34, 57], tables.channels)}
    assert keys == {"10-20", "10-34", "10-57", "20-34", "20-57", "34-57"}


def test_defined_centers_are_channel_endpoints(tables) -> None:
    channels = active_channels([21, 45, 27, 50], tables.channels)
    assert defined_centers(channels) == {Center.HEART, Center.THROAT, Center.SACRAL, Center.SPLEEN}
    assert defined_centers(()) == frozenset()


def test_definition_counts_connected_groups(tables) -> None:
    assert count_groups(()) == 0
    single = active_channels([21, 45, 12, 22], tables.channels)
    assert Structure.from_channels(single).definition is Definition.SINGLE
    split = active_channels([21, 45, 27, 50], tables.channels)
    assert Structure.from_channels(split).definition is Definition.SPLIT
    triple = active_channels([21, 45, 27, 50, 4, 63], tables.channels)
    assert Structure.from_channels(triple).definition is Definition.TRIPLE_SPLIT
    assert Structure.from_channels(()).definition is Definition.NONE


def test_resolve_structure_combines_both_sets(tables) -> None:
    personality = _set(ActivationKind.PERSONALITY, {Body.MOON: 27})
    design = _set(ActivationKind.DESIGN, {Body.MARS: 50})
    structure = resolve_structure((personality, design), tables)
    assert [channel.key for channel in structure.channels] == ["27-50"]
    assert structure.ordered_defined_centers == (Center.SACRAL, Center.SPLEEN)
    assert set(structure.open_centers) | structure.defined_centers == set(CENTER_ORDER)
    payload = structure.to_payload()
    assert payload["defined_centers"] == ["sacral", "spleen"]
    assert payload["definition"] == "single"


def test_open_centers_keep_canonical_order(tables) -> None:
    structure = Structure.from_channels(active_channels([4, 63], tables.channels))
    assert structure.open_centers == tuple(
        center for center in CENTER_ORDER if center not in (Center.HEAD, Center.AJNA)
    )
