"""Compute many charts at once, keeping per-chart failures as values."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Union

from .activations import ActivationBuildError
from .chart import Chart, ChartAssembler
from .core.time import BirthInput, InputValidationError
from .design import ConvergenceError, DesignOffsetSolver
from .providers import PositionProvider
from .tables import ConstantTables

LOG = logging.getLogger(__name__)

__all__ = ["BirthSpec", "ChartOutcome", "compute_charts", "parse_birth"]

BirthSpec = Union[BirthInput, Mapping[str, Any]]

# Failures confined to one chart; anything else is a defect and propagates.
CHART_ERRORS: tuple[type[Exception], ...] = (
    InputValidationError,
    ConvergenceError,
    ActivationBuildError,
)


@dataclass(frozen=True)
class ChartOutcome:
    """Either a chart or the error that prevented it, tagged with its input index."""

    index: int
    chart: Chart | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        if self.chart is not None:
            return {"index": self.index, "ok": True, "chart": self.chart.to_payload()}
        error = self.error
        payload: dict[str, Any] = {
            "index": self.index,
            "ok": False,
            "error": {
                "type": error.__class__.__name__ if error else None,
                "message": str(error) if error else None,
            },
        }
        return payload


def parse_birth(item: BirthSpec) -> BirthInput:
    """Return ``item`` as a :class:`BirthInput` (mappings need date/time/utc_offset)."""

    if isinstance(item, BirthInput):
        return item
    missing = [key for key in ("date", "time", "utc_offset") if key not in item]
    if missing:
        raise InputValidationError(
            f"Birth record is missing {missing}", field=missing[0], value=dict(item)
        )
    return BirthInput.parse(
        date=str(item["date"]), time=str(item["time"]), utc_offset=item["utc_offset"]
    )


def compute_charts(
    births: Iterable[BirthSpec],
    provider: PositionProvider,
    *,
    workers: int | None = None,
    tables: ConstantTables | None = None,
    solver: DesignOffsetSolver | None = None,
) -> tuple[ChartOutcome, ...]:
    """Assemble one chart per entry of ``births``, preserving input order.

    Charts are independent, so ``workers > 1`` runs them on a thread pool.
    Input, convergence and provider failures are returned in the matching
    :class:`ChartOutcome` instead of aborting the batch.
    """

    assembler = ChartAssembler(provider, tables=tables, solver=solver)
    items = list(births)

    def _one(entry: tuple[int, BirthSpec]) -> ChartOutcome:
        index, item = entry
        try:
            chart = assembler.assemble(parse_birth(item))
        except CHART_ERRORS as exc:
            LOG.warning("Chart %d failed: %s", index, exc)
            return ChartOutcome(index=index, error=exc)
        return ChartOutcome(index=index, chart=chart)

    worker_count = max(1, int(workers or 1))
    if worker_count > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=worker_count) as executor:
            return tuple(executor.map(_one, enumerate(items)))
    return tuple(_one(entry) for entry in enumerate(items))
