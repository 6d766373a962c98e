"""Ordered first-match rule lists evaluated over center facts.

Both the type and authority classifiers are expressed as an ordered tuple of
:class:`Rule` values. A rule only states the conditions it needs; precedence
comes from the position of the rule in its list. Rules can therefore be unit
tested one at a time while :func:`first_match` preserves the precedence
contract.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from .vocabulary import Center

__all__ = [
    "CenterFacts",
    "Rule",
    "first_match",
    "parse_rule",
]

T = TypeVar("T")


@dataclass(frozen=True)
class CenterFacts:
    """Defined centers plus the center pairs joined by active channels."""

    defined: frozenset[Center]
    connections: frozenset[frozenset[Center]]

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[Center, Center]],
    ) -> CenterFacts:
        connections = frozenset(frozenset(pair) for pair in pairs)
        defined = frozenset(center for pair in connections for center in pair)
        return cls(defined=defined, connections=connections)

    @property
    def is_empty(self) -> bool:
        return not self.defined

    def is_defined(self, center: Center) -> bool:
        return center in self.defined

    def connects(self, first: Center, second: Center) -> bool:
        """Return ``True`` when an active channel joins ``first`` and ``second`` directly."""

        return frozenset((first, second)) in self.connections


@dataclass(frozen=True)
class Rule(Generic[T]):
    """Single decision-table row.

    Attributes
    ----------
    result:
        Tag returned when the rule matches.
    defined / undefined:
        Centers that must (respectively must not) be defined.
    connected_any:
        When non-empty, at least one listed center pair must be joined
        directly by an active channel.
    defined_any:
        ``True`` requires at least one defined center, ``False`` requires
        none, ``None`` places no constraint.
    """

    result: T
    defined: frozenset[Center] = frozenset()
    undefined: frozenset[Center] = frozenset()
    connected_any: tuple[tuple[Center, Center], ...] = ()
    defined_any: bool | None = None

    def matches(self, facts: CenterFacts) -> bool:
        if self.defined_any is True and facts.is_empty:
            return False
        if self.defined_any is False and not facts.is_empty:
            return False
        if not self.defined <= facts.defined:
            return False
        if self.undefined & facts.defined:
            return False
        if self.connected_any and not any(
            facts.connects(first, second) for first, second in self.connected_any
        ):
            return False
        return True

    def is_catch_all(self, *, empty: bool) -> bool:
        """Return ``True`` when the rule matches every structure of the given emptiness."""

        if self.connected_any:
            return False
        if empty:
            return self.defined_any in (None, False) and not self.defined
        return self.defined_any in (None, True) and not self.defined and not self.undefined


def first_match(rules: Sequence[Rule[T]], facts: CenterFacts) -> T:
    """Return the result of the first rule in ``rules`` matching ``facts``.

    Rule lists are validated as total when they are built, so running off
    the end is an internal invariant violation rather than a branch.
    """

    for rule in rules:
        if rule.matches(facts):
            return rule.result
    raise LookupError(f"rule list is not total: no rule matched {sorted(facts.defined)}")


def _centers(value: Any, *, field: str) -> frozenset[Center]:
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ValueError(f"'{field}' must be a list of center names")
    return frozenset(Center(str(item)) for item in value)


def _pairs(value: Any) -> tuple[tuple[Center, Center], ...]:
    if value is None:
        return ()
    pairs: list[tuple[Center, Center]] = []
    for entry in value:
        items = list(entry)
        if len(items) != 2:
            raise ValueError(f"'connected_any' entries must be center pairs, got {entry!r}")
        pairs.append((Center(str(items[0])), Center(str(items[1]))))
    return tuple(pairs)


def parse_rule(
    payload: Mapping[str, Any],
    *,
    result_key: str,
    convert: Callable[[str], T],
) -> Rule[T]:
    """Build a :class:`Rule` from a mapping loaded from the constant bundle."""

    if result_key not in payload:
        raise ValueError(f"rule is missing '{result_key}'")
    unknown = set(payload) - {result_key, "defined", "undefined", "connected_any", "defined_any"}
    if unknown:
        raise ValueError(f"rule has unknown keys: {sorted(unknown)}")
    defined_any = payload.get("defined_any")
    if defined_any is not None and not isinstance(defined_any, bool):
        raise ValueError("'defined_any' must be true, false or omitted")
    return Rule(
        result=convert(str(payload[result_key])),
        defined=_centers(payload.get("defined"), field="defined"),
        undefined=_centers(payload.get("undefined"), field="undefined"),
        connected_any=_pairs(payload.get("connected_any")),
        defined_any=defined_any,
    )
