from __future__ import annotations

import pytest

from bodygraph.config import SolverCfg
from bodygraph.core.angles import normalize_degrees, signed_delta
from bodygraph.design import ConvergenceError, DesignOffsetSolver

from .conftest import BIRTH_JD, ScriptedProvider


def _linear(rate: float, start: float = 302.5):
    def sun(jd: float) -> float:
        return normalize_degrees(start + rate * (jd - BIRTH_JD))

    return sun


def test_solves_linear_sun() -> None:
    solver = DesignOffsetSolver()
    solution = solver.solve(BIRTH_JD, _linear(0.9856))
    assert solution.target_longitude == pytest.approx(214.5)
    assert abs(solution.residual_deg) <= solver.tolerance_deg
    assert solution.julian_day < BIRTH_JD
    assert BIRTH_JD - solution.julian_day == pytest.approx(88.0 / 0.9856, abs=1e-3)


def test_solves_non_uniform_sun_within_tolerance() -> None:
    provider = ScriptedProvider(wobble=0.4)
    solver = DesignOffsetSolver()
    solution = solver.solve(BIRTH_JD, provider.sun)
    residual = signed_delta(provider.sun(solution.julian_day) - solution.target_longitude)
    assert abs(residual) <= solver.tolerance_deg
    assert solution.longitude == pytest.approx(provider.sun(solution.julian_day))
    assert solution.iterations >= 1


def test_target_crossing_zero_degrees() -> None:
    # Birth Sun at 40 puts the target at 312, across the 0/360 seam from birth.
    solution = DesignOffsetSolver().solve(BIRTH_JD, _linear(0.9856, start=40.0))
    assert solution.target_longitude == pytest.approx(312.0)
    assert abs(solution.residual_deg) <= 1e-4


def test_custom_arc_and_window() -> None:
    solver = DesignOffsetSolver(arc_degrees=30.0, window_min_days=20.0, window_max_days=40.0)
    solution = solver.solve(BIRTH_JD, _linear(1.0))
    assert BIRTH_JD - solution.julian_day == pytest.approx(30.0, abs=1e-3)


def test_stationary_provider_is_non_monotonic() -> None:
    with pytest.raises(ConvergenceError) as excinfo:
        DesignOffsetSolver().solve(BIRTH_JD, lambda jd: 120.0)
    assert excinfo.value.reason == "non_monotonic"


def test_retrograde_provider_is_non_monotonic() -> None:
    with pytest.raises(ConvergenceError) as excinfo:
        DesignOffsetSolver().solve(BIRTH_JD, _linear(-0.9856))
    assert excinfo.value.reason == "non_monotonic"


def test_target_outside_window_is_not_bracketed() -> None:
    with pytest.raises(ConvergenceError) as excinfo:
        DesignOffsetSolver().solve(BIRTH_JD, _linear(0.5))
    error = excinfo.value
    assert error.reason == "no_bracket"
    assert error.birth_jd == BIRTH_JD
    assert error.target_longitude == pytest.approx(214.5)


def test_refined_sample_outside_bracket_is_rejected() -> None:
    linear = _linear(0.9856)
    grid_start = BIRTH_JD - 100.0

    def jumpy(jd: float) -> float:
        # Correct on the sampling grid, 20 degrees behind everywhere else.
        steps = (jd - grid_start) / 2.5
        if abs(steps - round(steps)) < 1e-9:
            return linear(jd)
        return normalize_degrees(linear(jd) - 20.0)

    with pytest.raises(ConvergenceError) as excinfo:
        DesignOffsetSolver().solve(BIRTH_JD, jumpy)
    assert excinfo.value.reason == "non_monotonic"


def test_iteration_cap_raises_instead_of_approximating() -> None:
    provider = ScriptedProvider(wobble=0.4)
    solver = DesignOffsetSolver(tolerance_deg=1e-12, max_iterations=1)
    with pytest.raises(ConvergenceError) as excinfo:
        solver.solve(BIRTH_JD, provider.sun)
    assert excinfo.value.reason == "max_iterations"
    assert excinfo.value.iterations == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"arc_degrees": 0.0},
        {"tolerance_deg": 0.0},
        {"window_min_days": 100.0, "window_max_days": 60.0},
        {"max_iterations": 0},
        {"samples": 0},
    ],
)
def test_invalid_solver_parameters(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        DesignOffsetSolver(**kwargs)


def test_from_settings() -> None:
    solver = DesignOffsetSolver.from_settings(SolverCfg(tolerance_deg=1e-5, samples=32))
    assert solver.tolerance_deg == 1e-5
    assert solver.samples == 32
    assert solver.arc_degrees == 88.0
