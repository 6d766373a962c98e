"""Locate the design instant: when the Sun stood 88° of arc before birth.

The search runs over a bounded window before birth. The window is sampled to
check the provider moves forward monotonically and to bracket the target
longitude, then a secant step with bisection fallback refines the instant
until the Sun's residual drops below the angular tolerance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .core.angles import forward_arc, normalize_degrees, signed_delta
from .observability import DESIGN_SOLVER_ITERATIONS

if TYPE_CHECKING:  # pragma: no cover
    from .config.settings import SolverCfg

LOG = logging.getLogger(__name__)

__all__ = [
    "ConvergenceError",
    "DEFAULT_ARC_DEGREES",
    "DesignOffsetSolver",
    "DesignSolution",
    "SunLongitude",
]

DEFAULT_ARC_DEGREES = 88.0

SunLongitude = Callable[[float], float]


class ConvergenceError(RuntimeError):
    """Raised when the design instant cannot be located within tolerance."""

    def __init__(
        self,
        message: str,
        *,
        birth_jd: float,
        target_longitude: float,
        reason: str,
        iterations: int = 0,
    ) -> None:
        super().__init__(message)
        self.birth_jd = birth_jd
        self.target_longitude = target_longitude
        self.reason = reason
        self.iterations = iterations


@dataclass(frozen=True, slots=True)
class DesignSolution:
    """Refined design instant.

    Attributes
    ----------
    julian_day:
        Design instant (UT), always earlier than the birth instant.
    target_longitude:
        Sun longitude the solver aimed for (birth Sun minus the arc).
    longitude:
        Sun longitude actually reported by the provider at ``julian_day``.
    residual_deg:
        Signed difference ``longitude - target_longitude`` in degrees.
    iterations:
        Refinement iterations executed after bracketing.
    """

    julian_day: float
    target_longitude: float
    longitude: float
    residual_deg: float
    iterations: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "julian_day": self.julian_day,
            "target_longitude": self.target_longitude,
            "longitude": self.longitude,
            "residual_deg": self.residual_deg,
            "iterations": self.iterations,
        }


class DesignOffsetSolver:
    """Find ``t < birth`` with ``sun(t) == sun(birth) - arc`` (mod 360)."""

    def __init__(
        self,
        *,
        arc_degrees: float = DEFAULT_ARC_DEGREES,
        tolerance_deg: float = 1e-4,
        window_min_days: float = 60.0,
        window_max_days: float = 100.0,
        max_iterations: int = 64,
        samples: int = 16,
    ) -> None:
        if not 0.0 < arc_degrees < 360.0:
            raise ValueError("arc_degrees must be within (0, 360)")
        if tolerance_deg <= 0.0:
            raise ValueError("tolerance_deg must be positive")
        if not 0.0 < window_min_days < window_max_days:
            raise ValueError("window must satisfy 0 < window_min_days < window_max_days")
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if samples < 1:
            raise ValueError("samples must be at least 1")
        self.arc_degrees = float(arc_degrees)
        self.tolerance_deg = float(tolerance_deg)
        self.window_min_days = float(window_min_days)
        self.window_max_days = float(window_max_days)
        self.max_iterations = int(max_iterations)
        self.samples = int(samples)

    @classmethod
    def from_settings(cls, cfg: SolverCfg) -> DesignOffsetSolver:
        return cls(
            arc_degrees=cfg.arc_degrees,
            tolerance_deg=cfg.tolerance_deg,
            window_min_days=cfg.window_min_days,
            window_max_days=cfg.window_max_days,
            max_iterations=cfg.max_iterations,
            samples=cfg.samples,
        )

    def target_for(self, birth_longitude: float) -> float:
        return normalize_degrees(birth_longitude - self.arc_degrees)

    def _fail(
        self, message: str, *, birth_jd: float, target: float, reason: str, iterations: int = 0
    ) -> ConvergenceError:
        LOG.debug("Design solve failed (%s) for JD %.6f: %s", reason, birth_jd, message)
        return ConvergenceError(
            message,
            birth_jd=birth_jd,
            target_longitude=target,
            reason=reason,
            iterations=iterations,
        )

    def _bracket(
        self, birth_jd: float, sun: SunLongitude, target: float
    ) -> tuple[float, float, float, float]:
        start = birth_jd - self.window_max_days
        step = (self.window_max_days - self.window_min_days) / self.samples
        times = [start + idx * step for idx in range(self.samples + 1)]
        longitudes = [normalize_degrees(sun(t)) for t in times]

        for idx in range(self.samples):
            motion = forward_arc(longitudes[idx], longitudes[idx + 1])
            if not 0.0 < motion < 180.0:
                raise self._fail(
                    f"Sun longitude is not increasing between JD {times[idx]:.6f} and "
                    f"{times[idx + 1]:.6f} (moved {motion:.6f} deg)",
                    birth_jd=birth_jd,
                    target=target,
                    reason="non_monotonic",
                )

        deltas = [signed_delta(lon - target) for lon in longitudes]
        for idx in range(self.samples):
            lo, hi = deltas[idx], deltas[idx + 1]
            # Skip the +180/-180 wrap; a real crossing moves from <=0 to >=0.
            if lo <= 0.0 <= hi and hi - lo < 180.0:
                return times[idx], times[idx + 1], lo, hi
        raise self._fail(
            f"Target longitude {target:.6f} is not reached between "
            f"{self.window_min_days:g} and {self.window_max_days:g} days before birth",
            birth_jd=birth_jd,
            target=target,
            reason="no_bracket",
        )

    def solve(self, birth_jd: float, sun: SunLongitude) -> DesignSolution:
        """Return the design instant for ``birth_jd`` using ``sun`` longitudes.

        Raises
        ------
        ConvergenceError
            When the provider is not monotonic over the window, the target is
            not bracketed, or refinement exceeds ``max_iterations``.
        """

        target = self.target_for(sun(birth_jd))
        t_lo, t_hi, f_lo, f_hi = self._bracket(birth_jd, sun, target)

        def _solution(t: float, lon: float, delta: float, iterations: int) -> DesignSolution:
            DESIGN_SOLVER_ITERATIONS.observe(iterations)
            LOG.debug(
                "Design instant for JD %.6f is JD %.6f after %d iterations (residual %.2e deg)",
                birth_jd,
                t,
                iterations,
                delta,
            )
            return DesignSolution(
                julian_day=t,
                target_longitude=target,
                longitude=lon,
                residual_deg=delta,
                iterations=iterations,
            )

        if abs(f_lo) <= self.tolerance_deg:
            return _solution(t_lo, normalize_degrees(target + f_lo), f_lo, 0)
        if abs(f_hi) <= self.tolerance_deg:
            return _solution(t_hi, normalize_degrees(target + f_hi), f_hi, 0)

        last_side = 0
        for iterations in range(1, self.max_iterations + 1):
            denom = f_hi - f_lo
            if denom != 0.0:
                t_new = t_hi - f_hi * (t_hi - t_lo) / denom
            else:
                t_new = 0.5 * (t_lo + t_hi)
            if not (t_lo < t_new < t_hi):
                t_new = 0.5 * (t_lo + t_hi)
            lon = normalize_degrees(sun(t_new))
            delta = signed_delta(lon - target)

            if not f_lo <= delta <= f_hi:
                raise self._fail(
                    f"Sun longitude {lon:.6f} at JD {t_new:.6f} falls outside the bracket",
                    birth_jd=birth_jd,
                    target=target,
                    reason="non_monotonic",
                    iterations=iterations,
                )
            if abs(delta) <= self.tolerance_deg:
                return _solution(t_new, lon, delta, iterations)

            side = -1 if delta < 0.0 else 1
            if side < 0:
                t_lo, f_lo = t_new, delta
            else:
                t_hi, f_hi = t_new, delta
            if side == last_side:
                # Same end moved twice; bisect so the bracket keeps shrinking.
                mid = 0.5 * (t_lo + t_hi)
                mid_lon = normalize_degrees(sun(mid))
                mid_delta = signed_delta(mid_lon - target)
                if not f_lo <= mid_delta <= f_hi:
                    raise self._fail(
                        f"Sun longitude {mid_lon:.6f} at JD {mid:.6f} falls outside the bracket",
                        birth_jd=birth_jd,
                        target=target,
                        reason="non_monotonic",
                        iterations=iterations,
                    )
                if abs(mid_delta) <= self.tolerance_deg:
                    return _solution(mid, mid_lon, mid_delta, iterations)
                if mid_delta < 0.0:
                    t_lo, f_lo = mid, mid_delta
                else:
                    t_hi, f_hi = mid, mid_delta
                last_side = 0
            else:
                last_side = side

        raise self._fail(
            f"Design solver did not converge within {self.max_iterations} iterations",
            birth_jd=birth_jd,
            target=target,
            reason="max_iterations",
            iterations=self.max_iterations,
        )
