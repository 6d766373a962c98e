"""Position provider contract consumed by the chart engine."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ..core.bodies import Body

__all__ = [
    "PositionProvider",
    "PositionUnavailable",
]


class PositionUnavailable(RuntimeError):
    """Raised when a provider cannot return a longitude for a body and instant."""

    def __init__(
        self,
        message: str,
        *,
        body: Body,
        julian_day: float,
        reason: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.julian_day = julian_day
        self.reason = reason
        self.context = dict(context or {})


@runtime_checkable
class PositionProvider(Protocol):
    """Provider contract returning geocentric tropical ecliptic longitudes."""

    def longitude(self, body: Body, julian_day: float) -> float:
        """Return the longitude of ``body`` in ``[0, 360)`` degrees at ``julian_day`` (UT)."""

        ...
