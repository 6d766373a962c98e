"""Constant data bundle: gate wheel, centers, channels and rule tables.

The bundle ships as ``bodygraph/data/tables.yaml`` and is parsed into frozen
structures exactly once per process (see :func:`get_tables`). Validation is
exhaustive: a bundle with a missing gate, an overlapping center assignment, an
inconsistent channel or a non-total rule table is refused as a whole with a
:class:`ConstantTableError` listing every problem found.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final

import yaml

from .core.angles import normalize_degrees
from .rules import CenterFacts, Rule, parse_rule
from .vocabulary import CENTER_ORDER, Authority, Center, CrossAngle, HDType

LOG = logging.getLogger(__name__)

__all__ = [
    "BASES_PER_TONE",
    "BASE_WIDTH",
    "COLORS_PER_LINE",
    "COLOR_WIDTH",
    "ChannelDef",
    "ConstantTableError",
    "ConstantTables",
    "GATE_COUNT",
    "GATE_WIDTH",
    "GateWheel",
    "LINES_PER_GATE",
    "LINE_WIDTH",
    "TONES_PER_COLOR",
    "TONE_WIDTH",
    "get_tables",
    "load_tables",
    "parse_tables",
]

GATE_COUNT: Final[int] = 64
LINES_PER_GATE: Final[int] = 6
COLORS_PER_LINE: Final[int] = 6
TONES_PER_COLOR: Final[int] = 6
BASES_PER_TONE: Final[int] = 5

GATE_WIDTH: Final[float] = 360.0 / GATE_COUNT
LINE_WIDTH: Final[float] = GATE_WIDTH / LINES_PER_GATE
COLOR_WIDTH: Final[float] = LINE_WIDTH / COLORS_PER_LINE
TONE_WIDTH: Final[float] = COLOR_WIDTH / TONES_PER_COLOR
BASE_WIDTH: Final[float] = TONE_WIDTH / BASES_PER_TONE

CHANNEL_COUNT: Final[int] = 36
BUNDLE_SCHEMA_VERSION: Final[int] = 1

_DEFAULT_RESOURCE: Final[str] = "tables.yaml"


class ConstantTableError(RuntimeError):
    """Raised when the constant data bundle is missing or incomplete."""

    def __init__(self, message: str, *, problems: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.problems:
            return base
        return base + "\n" + "\n".join(f"  - {problem}" for problem in self.problems)


@dataclass(frozen=True, slots=True)
class GateWheel:
    """Gate order around the ecliptic starting at ``start_degree``."""

    start_degree: float
    gate_order: tuple[int, ...]

    def index_of(self, gate: int) -> int:
        try:
            return self.gate_order.index(gate)
        except ValueError:
            raise ValueError(f"Gate must be between 1 and {GATE_COUNT}, got {gate}") from None

    def gate_at(self, index: int) -> int:
        return self.gate_order[index]

    def start_of(self, gate: int) -> float:
        """Return the ecliptic longitude at which ``gate`` begins."""

        return normalize_degrees(self.start_degree + self.index_of(gate) * GATE_WIDTH)


@dataclass(frozen=True, slots=True)
class ChannelDef:
    """Channel joining two gates (and hence two centers)."""

    gates: tuple[int, int]
    centers: tuple[Center, Center]
    name: str

    @property
    def key(self) -> str:
        low, high = sorted(self.gates)
        return f"{low}-{high}"

    def to_payload(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "gates": list(self.gates),
            "centers": [center.value for center in self.centers],
            "name": self.name,
        }


@dataclass(frozen=True)
class ConstantTables:
    """Validated, immutable view of the constant data bundle."""

    schema_version: int
    wheel: GateWheel
    gate_centers: Mapping[int, Center]
    channels: tuple[ChannelDef, ...]
    cross_angles: Mapping[tuple[int, int], CrossAngle]
    authority_rules: tuple[Rule[Authority], ...]
    type_labels: Mapping[HDType, str]
    strategies: Mapping[HDType, str]
    authority_labels: Mapping[Authority, str]
    angle_labels: Mapping[CrossAngle, str]
    gate_names: Mapping[int, str]
    source: str | None = field(default=None, compare=False)

    def center_of(self, gate: int) -> Center:
        try:
            return self.gate_centers[gate]
        except KeyError:
            raise ValueError(f"Gate must be between 1 and {GATE_COUNT}, got {gate}") from None

    def gates_of(self, center: Center) -> tuple[int, ...]:
        return tuple(gate for gate in self.wheel.gate_order if self.gate_centers[gate] is center)

    def gate_name(self, gate: int) -> str:
        return self.gate_names[gate]

    def cross_angle(self, personality_line: int, design_line: int) -> CrossAngle:
        return self.cross_angles[(personality_line, design_line)]

    def channel(self, key: str) -> ChannelDef:
        for channel in self.channels:
            if channel.key == key:
                return channel
        raise KeyError(f"unknown channel '{key}'")

    def summary(self) -> dict[str, Any]:
        """Return counts describing the bundle (used by ``bodygraph tables``)."""

        return {
            "schema_version": self.schema_version,
            "source": self.source,
            "start_degree": self.wheel.start_degree,
            "gates": len(self.wheel.gate_order),
            "centers": {
                center.value: len(self.gates_of(center)) for center in CENTER_ORDER
            },
            "channels": len(self.channels),
            "cross_angles": len(self.cross_angles),
            "authority_rules": [rule.result.value for rule in self.authority_rules],
        }


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _parse_wheel(payload: Any, problems: list[str]) -> GateWheel | None:
    if not isinstance(payload, Mapping):
        problems.append("'wheel' must be a mapping")
        return None
    start = payload.get("start_degree")
    if isinstance(start, bool) or not isinstance(start, (int, float)):
        problems.append("'wheel.start_degree' must be a number")
        return None
    order = payload.get("gate_order")
    if not isinstance(order, Sequence) or isinstance(order, str):
        problems.append("'wheel.gate_order' must be a list of gates")
        return None
    gates = [_as_int(item) for item in order]
    if any(gate is None for gate in gates):
        problems.append("'wheel.gate_order' must contain integers only")
        return None
    expected = set(range(1, GATE_COUNT + 1))
    if len(gates) != GATE_COUNT or set(gates) != expected:
        missing = sorted(expected - set(gates))
        duplicates = sorted({gate for gate in gates if gates.count(gate) > 1})
        problems.append(
            "'wheel.gate_order' must be a permutation of gates 1..64"
            f" (missing={missing}, duplicates={duplicates})"
        )
        return None
    return GateWheel(start_degree=normalize_degrees(float(start)), gate_order=tuple(gates))


def _parse_centers(payload: Any, problems: list[str]) -> dict[int, Center]:
    if not isinstance(payload, Mapping):
        problems.append("'centers' must be a mapping of center -> gates")
        return {}
    mapping: dict[int, Center] = {}
    for raw_center, raw_gates in payload.items():
        try:
            center = Center(str(raw_center))
        except ValueError:
            problems.append(f"unknown center '{raw_center}'")
            continue
        for raw_gate in raw_gates or ():
            gate = _as_int(raw_gate)
            if gate is None or not 1 <= gate <= GATE_COUNT:
                problems.append(f"center '{center}' lists invalid gate {raw_gate!r}")
                continue
            previous = mapping.get(gate)
            if previous is not None:
                problems.append(f"gate {gate} assigned to both '{previous}' and '{center}'")
                continue
            mapping[gate] = center
    missing_centers = [center.value for center in CENTER_ORDER if center.value not in payload]
    if missing_centers:
        problems.append(f"centers missing from bundle: {missing_centers}")
    missing_gates = sorted(set(range(1, GATE_COUNT + 1)) - set(mapping))
    if missing_gates:
        problems.append(f"gates without a center: {missing_gates}")
    return mapping


def _parse_channels(
    payload: Any,
    gate_centers: Mapping[int, Center],
    problems: list[str],
) -> tuple[ChannelDef, ...]:
    if not isinstance(payload, Sequence) or isinstance(payload, str):
        problems.append("'channels' must be a list")
        return ()
    channels: list[ChannelDef] = []
    seen: set[str] = set()
    for idx, entry in enumerate(payload):
        if not isinstance(entry, Mapping):
            problems.append(f"channels[{idx}] must be a mapping")
            continue
        raw_gates = list(entry.get("gates") or ())
        raw_centers = list(entry.get("centers") or ())
        name = entry.get("name")
        gates = [_as_int(gate) for gate in raw_gates]
        if len(gates) != 2 or any(g is None or not 1 <= g <= GATE_COUNT for g in gates):
            problems.append(f"channels[{idx}] must name two gates between 1 and 64")
            continue
        if gates[0] == gates[1]:
            problems.append(f"channels[{idx}] joins gate {gates[0]} to itself")
            continue
        try:
            centers = tuple(Center(str(center)) for center in raw_centers)
        except ValueError:
            problems.append(f"channels[{idx}] references an unknown center: {raw_centers}")
            continue
        if len(centers) != 2:
            problems.append(f"channels[{idx}] must name two centers")
            continue
        if not isinstance(name, str) or not name.strip():
            problems.append(f"channels[{idx}] must have a name")
            continue
        channel = ChannelDef(
            gates=(gates[0], gates[1]),  # type: ignore[arg-type]
            centers=(centers[0], centers[1]),
            name=name.strip(),
        )
        if channel.key in seen:
            problems.append(f"channel {channel.key} is listed more than once")
            continue
        seen.add(channel.key)
        for gate, center in zip(channel.gates, channel.centers):
            actual = gate_centers.get(gate)
            if actual is not None and actual is not center:
                problems.append(
                    f"channel {channel.key} places gate {gate} in '{center}' but the gate belongs to '{actual}'"
                )
        if channel.centers[0] is channel.centers[1]:
            problems.append(f"channel {channel.key} must join two different centers")
        channels.append(channel)
    if len(channels) != CHANNEL_COUNT:
        problems.append(f"expected {CHANNEL_COUNT} channels, found {len(channels)}")
    return tuple(channels)


def _parse_cross_angles(payload: Any, problems: list[str]) -> dict[tuple[int, int], CrossAngle]:
    if not isinstance(payload, Mapping):
        problems.append("'cross_angles' must be a mapping of 'p/d' -> angle")
        return {}
    table: dict[tuple[int, int], CrossAngle] = {}
    for raw_key, raw_angle in payload.items():
        parts = str(raw_key).split("/")
        try:
            pair = (int(parts[0]), int(parts[1])) if len(parts) == 2 else None
        except ValueError:
            pair = None
        if pair is None or not all(1 <= line <= LINES_PER_GATE for line in pair):
            problems.append(f"invalid cross angle key '{raw_key}'")
            continue
        try:
            table[pair] = CrossAngle(str(raw_angle))
        except ValueError:
            problems.append(f"cross angle '{raw_key}' has unknown angle '{raw_angle}'")
    missing = [
        f"{p}/{d}"
        for p in range(1, LINES_PER_GATE + 1)
        for d in range(1, LINES_PER_GATE + 1)
        if (p, d) not in table
    ]
    if missing:
        problems.append(f"cross angle table is missing line pairs: {missing}")
    return table


def _parse_authority_rules(payload: Any, problems: list[str]) -> tuple[Rule[Authority], ...]:
    if not isinstance(payload, Sequence) or isinstance(payload, str):
        problems.append("'authority_rules' must be a list")
        return ()
    rules: list[Rule[Authority]] = []
    for idx, entry in enumerate(payload):
        if not isinstance(entry, Mapping):
            problems.append(f"authority_rules[{idx}] must be a mapping")
            continue
        try:
            rules.append(parse_rule(entry, result_key="authority", convert=Authority))
        except ValueError as exc:
            problems.append(f"authority_rules[{idx}]: {exc}")
    if rules:
        empty = CenterFacts(defined=frozenset(), connections=frozenset())
        if not any(rule.matches(empty) for rule in rules):
            problems.append("authority_rules has no rule for a chart without defined centers")
        if not any(rule.is_catch_all(empty=False) for rule in rules):
            problems.append("authority_rules has no catch-all rule for charts with defined centers")
    return tuple(rules)


def _parse_labels(
    payload: Any,
    enum_type: type[Any],
    *,
    section: str,
    problems: list[str],
) -> dict[Any, str]:
    if not isinstance(payload, Mapping):
        problems.append(f"'labels.{section}' must be a mapping")
        return {}
    labels: dict[Any, str] = {}
    for member in enum_type:
        value = payload.get(member.value)
        if not isinstance(value, str) or not value.strip():
            problems.append(f"'labels.{section}' is missing '{member.value}'")
            continue
        labels[member] = value.strip()
    return labels


def _parse_gate_names(payload: Any, problems: list[str]) -> dict[int, str]:
    if not isinstance(payload, Mapping):
        problems.append("'gate_names' must be a mapping of gate -> name")
        return {}
    names = {
        gate: str(name)
        for gate, name in ((_as_int(key), value) for key, value in payload.items())
        if gate is not None
    }
    missing = sorted(set(range(1, GATE_COUNT + 1)) - set(names))
    if missing:
        problems.append(f"gate_names is missing gates: {missing}")
    return names


def parse_tables(document: Any, *, source: str | None = None) -> ConstantTables:
    """Validate a loaded bundle document and return :class:`ConstantTables`."""

    if not isinstance(document, Mapping):
        raise ConstantTableError(
            "Constant table bundle must be a mapping", problems=[f"source={source}"]
        )
    problems: list[str] = []
    version = document.get("schema_version")
    if version != BUNDLE_SCHEMA_VERSION:
        problems.append(
            f"unsupported schema_version {version!r}; expected {BUNDLE_SCHEMA_VERSION}"
        )
    wheel = _parse_wheel(document.get("wheel"), problems)
    gate_centers = _parse_centers(document.get("centers"), problems)
    channels = _parse_channels(document.get("channels"), gate_centers, problems)
    cross_angles = _parse_cross_angles(document.get("cross_angles"), problems)
    authority_rules = _parse_authority_rules(document.get("authority_rules"), problems)
    labels = document.get("labels")
    if not isinstance(labels, Mapping):
        problems.append("'labels' must be a mapping")
        labels = {}
    type_labels = _parse_labels(labels.get("types"), HDType, section="types", problems=problems)
    strategies = _parse_labels(
        labels.get("strategies"), HDType, section="strategies", problems=problems
    )
    authority_labels = _parse_labels(
        labels.get("authorities"), Authority, section="authorities", problems=problems
    )
    angle_labels = _parse_labels(
        labels.get("angles"), CrossAngle, section="angles", problems=problems
    )
    gate_names = _parse_gate_names(document.get("gate_names"), problems)

    if problems or wheel is None:
        raise ConstantTableError(
            f"Constant table bundle {source or '<memory>'} failed validation",
            problems=problems,
        )

    tables = ConstantTables(
        schema_version=BUNDLE_SCHEMA_VERSION,
        wheel=wheel,
        gate_centers=MappingProxyType(dict(sorted(gate_centers.items()))),
        channels=channels,
        cross_angles=MappingProxyType(cross_angles),
        authority_rules=authority_rules,
        type_labels=MappingProxyType(type_labels),
        strategies=MappingProxyType(strategies),
        authority_labels=MappingProxyType(authority_labels),
        angle_labels=MappingProxyType(angle_labels),
        gate_names=MappingProxyType(dict(sorted(gate_names.items()))),
        source=source,
    )
    LOG.debug(
        "Loaded constant tables from %s (%d channels, %d authority rules)",
        source,
        len(channels),
        len(authority_rules),
    )
    return tables


def _read_bundle(path: str | Path | None) -> tuple[str, str]:
    if path is not None:
        bundle = Path(path).expanduser()
        try:
            return bundle.read_text(encoding="utf-8"), str(bundle)
        except OSError as exc:
            raise ConstantTableError(f"Unable to read constant tables from {bundle}: {exc}") from exc
    resource = resources.files("bodygraph.data").joinpath(_DEFAULT_RESOURCE)
    try:
        return resource.read_text(encoding="utf-8"), f"bodygraph.data/{_DEFAULT_RESOURCE}"
    except FileNotFoundError as exc:  # pragma: no cover - packaging error
        raise ConstantTableError(f"Constant table bundle missing: {resource}") from exc


def load_tables(path: str | Path | None = None) -> ConstantTables:
    """Load and validate the constant bundle (packaged default when ``path`` is ``None``)."""

    text, source = _read_bundle(path)
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConstantTableError(f"Constant table bundle {source} is not valid YAML: {exc}") from exc
    return parse_tables(document, source=source)


@lru_cache(maxsize=8)
def get_tables(path: str | None = None) -> ConstantTables:
    """Return the process-wide validated tables for ``path`` (cached)."""

    return load_tables(path)
