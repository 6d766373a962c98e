"""Prometheus metric definitions shared across bodygraph components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "CHARTS_ASSEMBLED",
    "CHART_ASSEMBLY_DURATION",
    "COMPUTE_ERRORS",
    "DESIGN_SOLVER_ITERATIONS",
    "ensure_metrics_registered",
]


CHARTS_ASSEMBLED = Counter(
    "bodygraph_charts_assembled_total",
    "Total charts assembled, grouped by resulting type.",
    ("type",),
    registry=None,
)

CHART_ASSEMBLY_DURATION = Histogram(
    "bodygraph_chart_assembly_duration_seconds",
    "Duration of full chart assembly including provider lookups.",
    registry=None,
)

DESIGN_SOLVER_ITERATIONS = Histogram(
    "bodygraph_design_solver_iterations",
    "Refinement iterations needed to locate the design instant.",
    buckets=(0, 1, 2, 3, 4, 6, 8, 12, 16, 24, 32, 48, 64),
    registry=None,
)

COMPUTE_ERRORS = Counter(
    "bodygraph_compute_errors_total",
    "Count of chart computation failures.",
    ("component", "error"),
    registry=None,
)


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield CHARTS_ASSEMBLED
    yield CHART_ASSEMBLY_DURATION
    yield DESIGN_SOLVER_ITERATIONS
    yield COMPUTE_ERRORS


def ensure_metrics_registered(
    registry: CollectorRegistry | None = None,
) -> None:
    """Register shared metrics with ``registry`` if not already present."""

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Prometheus raises when a metric name already exists in the registry.
            continue
