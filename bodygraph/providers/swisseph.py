"""Swiss Ephemeris backed :class:`~bodygraph.providers.PositionProvider`."""

from __future__ import annotations

import datetime as _dt
import importlib
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..core.angles import normalize_degrees
from ..core.bodies import DERIVED_BODIES, SWISS_BODY_CODES, Body
from ..core.time import julian_day
from . import PositionUnavailable

if TYPE_CHECKING:  # pragma: no cover
    from ..config.settings import EphemerisCfg

LOG = logging.getLogger(__name__)

__all__ = ["SwissEphemerisProvider", "load_swisseph"]

NODE_VARIANTS = ("mean", "true")

_swe_mod: Any | None = None
_swe_lock = threading.Lock()


def load_swisseph() -> Any:
    """Import :mod:`swisseph` on first use and return the module."""

    global _swe_mod
    if _swe_mod is None:
        try:
            _swe_mod = importlib.import_module("swisseph")
        except ImportError as exc:  # pragma: no cover - import errors depend on env
            raise RuntimeError(
                "Swiss Ephemeris not available. Install pyswisseph (package: 'pyswisseph') "
                "to compute chart positions."
            ) from exc
    return _swe_mod


def _year_start_jd(year: int) -> float:
    return julian_day(_dt.datetime(year, 1, 1, tzinfo=_dt.UTC))


class SwissEphemerisProvider:
    """Geocentric tropical longitudes from pyswisseph.

    Earth and the South Node are derived as the points opposite the Sun and
    the North Node. Calls into the C library are serialised with a lock so one
    provider instance can be shared by batch worker threads.
    """

    def __init__(
        self,
        *,
        ephemeris_path: str | Path | None = None,
        node: str = "mean",
        prefer_moshier: bool = False,
        min_year: int = 1800,
        max_year: int = 2399,
    ) -> None:
        if node not in NODE_VARIANTS:
            raise ValueError(f"node must be one of {NODE_VARIANTS}, got '{node}'")
        if min_year > max_year:
            raise ValueError("min_year must not exceed max_year")
        self._swe = load_swisseph()
        if ephemeris_path is not None:
            self._swe.set_ephe_path(str(Path(ephemeris_path).expanduser()))
        self._flags = self._swe.FLG_MOSEPH if prefer_moshier else self._swe.FLG_SWIEPH
        self._node_code = self._swe.MEAN_NODE if node == "mean" else self._swe.TRUE_NODE
        self.node = node
        self.min_year = min_year
        self.max_year = max_year
        self._min_jd = _year_start_jd(min_year)
        self._max_jd = _year_start_jd(max_year + 1)

    @classmethod
    def from_settings(cls, cfg: EphemerisCfg) -> SwissEphemerisProvider:
        return cls(
            ephemeris_path=cfg.path,
            node=cfg.node,
            prefer_moshier=cfg.prefer_moshier,
            min_year=cfg.min_year,
            max_year=cfg.max_year,
        )

    def _code_for(self, body: Body) -> int:
        if body is Body.NORTH_NODE:
            return int(self._node_code)
        return SWISS_BODY_CODES[body]

    def longitude(self, body: Body, julian_day: float) -> float:
        if not self._min_jd <= julian_day < self._max_jd:
            raise PositionUnavailable(
                f"JD {julian_day} is outside the supported range "
                f"{self.min_year}-{self.max_year}",
                body=body,
                julian_day=julian_day,
                reason="out_of_range",
            )
        source = DERIVED_BODIES.get(body)
        if source is not None:
            return normalize_degrees(self.longitude(source, julian_day) + 180.0)

        code = self._code_for(body)
        with _swe_lock:
            try:
                values, ret_flag = self._swe.calc_ut(julian_day, code, self._flags)
            except Exception as exc:  # pyswisseph raises its own error type
                raise PositionUnavailable(
                    f"Swiss ephemeris failed for {body.value} at JD {julian_day}: {exc}",
                    body=body,
                    julian_day=julian_day,
                    reason="ephemeris_error",
                    context={"code": code, "flags": self._flags},
                ) from exc
        if ret_flag < 0:
            raise PositionUnavailable(
                f"Swiss ephemeris returned error code {ret_flag} for {body.value}",
                body=body,
                julian_day=julian_day,
                reason="ephemeris_error",
            )
        LOG.debug("%s at JD %.6f -> %.6f", body.value, julian_day, values[0])
        return normalize_degrees(values[0])
