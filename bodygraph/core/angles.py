"""Angular utilities shared by the resolver and the design solver.

Comparing ecliptic longitudes with raw modulo arithmetic invites subtle bugs
around the 0°/360° boundary. The helpers here centralise degree normalisation
so every caller shares one wrap-around contract.
"""

from __future__ import annotations

import math

__all__ = [
    "forward_arc",
    "normalize_degrees",
    "signed_delta",
]


def normalize_degrees(angle: float) -> float:
    """Return ``angle`` normalised to the ``[0, 360)`` interval.

    Parameters
    ----------
    angle:
        Value in **degrees**. Non-finite values raise :class:`ValueError`.

    Returns
    -------
    float
        A degree value in ``[0, 360)``. Python's modulo can return exactly
        ``360.0`` for tiny negative inputs; that case is folded back to ``0``.
    """

    value = float(angle)
    if not math.isfinite(value):
        raise ValueError("Longitude must be a finite number of degrees")
    wrapped = value % 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def signed_delta(angle: float) -> float:
    """Return ``angle`` wrapped to the ``[-180, 180)`` interval."""

    wrapped = normalize_degrees(angle)
    if wrapped >= 180.0:
        return wrapped - 360.0
    return wrapped


def forward_arc(start: float, end: float) -> float:
    """Return the eastward arc travelled from ``start`` to ``end`` in ``[0, 360)``."""

    return normalize_degrees(end - start)
