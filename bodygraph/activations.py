"""Build the personality and design activation sets."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .core.bodies import BODY_ORDER, Body
from .gates import resolve, zodiac_position
from .providers import PositionProvider, PositionUnavailable
from .tables import GateWheel

LOG = logging.getLogger(__name__)

__all__ = [
    "Activation",
    "ActivationBuildError",
    "ActivationKind",
    "ActivationSet",
    "build_activation_set",
    "build_activation_sets",
]


class ActivationKind(StrEnum):
    PERSONALITY = "personality"
    DESIGN = "design"


class ActivationBuildError(RuntimeError):
    """Raised when a body position cannot be obtained for an activation set."""

    def __init__(
        self,
        message: str,
        *,
        body: Body,
        julian_day: float,
        kind: ActivationKind | str,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.julian_day = julian_day
        self.kind = ActivationKind(kind)

    @classmethod
    def from_unavailable(
        cls,
        exc: PositionUnavailable,
        *,
        body: Body,
        julian_day: float,
        kind: ActivationKind | str,
    ) -> ActivationBuildError:
        return cls(
            f"{ActivationKind(kind).value} position for {body.value} "
            f"unavailable at JD {julian_day}: {exc}",
            body=body,
            julian_day=julian_day,
            kind=kind,
        )


@dataclass(frozen=True, slots=True)
class Activation:
    """One body's longitude resolved onto the gate wheel."""

    body: Body
    longitude: float
    gate: int
    line: int
    color: int
    tone: int
    base: int

    @classmethod
    def from_longitude(
        cls, body: Body, longitude: float, *, wheel: GateWheel | None = None
    ) -> Activation:
        position = resolve(longitude, wheel=wheel)
        return cls(
            body=body,
            longitude=position.longitude,
            gate=position.gate,
            line=position.line,
            color=position.color,
            tone=position.tone,
            base=position.base,
        )

    @property
    def label(self) -> str:
        return f"{self.gate}.{self.line}"

    def to_payload(self) -> dict[str, Any]:
        zodiac = zodiac_position(self.longitude)
        return {
            "body": self.body.value,
            "longitude": self.longitude,
            "gate": self.gate,
            "line": self.line,
            "color": self.color,
            "tone": self.tone,
            "base": self.base,
            "sign": zodiac.sign,
            "sign_degree": zodiac.degree,
        }


@dataclass(frozen=True, slots=True)
class ActivationSet:
    """Thirteen activations for one instant, laid out in body order."""

    kind: ActivationKind
    julian_day: float
    activations: tuple[Activation, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ActivationKind(self.kind))
        bodies = tuple(activation.body for activation in self.activations)
        if bodies != BODY_ORDER:
            raise ValueError(
                f"ActivationSet requires one activation per body in canonical order, got {bodies}"
            )

    def __iter__(self) -> Iterator[Activation]:
        return iter(self.activations)

    def __len__(self) -> int:
        return len(self.activations)

    def get(self, body: Body) -> Activation:
        return self.activations[BODY_ORDER.index(body)]

    @property
    def sun(self) -> Activation:
        return self.activations[0]

    @property
    def earth(self) -> Activation:
        return self.activations[1]

    @property
    def gates(self) -> frozenset[int]:
        return frozenset(activation.gate for activation in self.activations)

    def to_payload(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "julian_day": self.julian_day,
            "activations": [activation.to_payload() for activation in self.activations],
        }


def build_activation_set(
    kind: ActivationKind | str,
    julian_day: float,
    provider: PositionProvider,
    *,
    wheel: GateWheel | None = None,
) -> ActivationSet:
    """Query ``provider`` once per body at ``julian_day`` and resolve each longitude.

    Raises
    ------
    ActivationBuildError
        When the provider raises :class:`PositionUnavailable` for any body.
    """

    kind = ActivationKind(kind)
    activations: list[Activation] = []
    for body in BODY_ORDER:
        try:
            longitude = provider.longitude(body, julian_day)
        except PositionUnavailable as exc:
            LOG.debug("Provider failed for %s at JD %.6f: %s", body.value, julian_day, exc)
            raise ActivationBuildError.from_unavailable(
                exc, body=body, julian_day=julian_day, kind=kind
            ) from exc
        activations.append(Activation.from_longitude(body, longitude, wheel=wheel))
    return ActivationSet(kind=kind, julian_day=julian_day, activations=tuple(activations))


def build_activation_sets(
    provider: PositionProvider,
    birth_jd: float,
    design_jd: float,
    *,
    wheel: GateWheel | None = None,
) -> tuple[ActivationSet, ActivationSet]:
    """Return ``(personality, design)`` activation sets."""

    personality = build_activation_set(
        ActivationKind.PERSONALITY, birth_jd, provider, wheel=wheel
    )
    design = build_activation_set(ActivationKind.DESIGN, design_jd, provider, wheel=wheel)
    return personality, design
