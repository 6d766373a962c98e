"""Assemble a complete chart from a birth moment and a position provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from .activations import (
    ActivationBuildError,
    ActivationKind,
    ActivationSet,
    build_activation_set,
)
from .classifiers import (
    IncarnationCross,
    Profile,
    calculate_profile,
    classify_authority,
    classify_type,
    resolve_cross,
    strategy_for,
)
from .core.bodies import Body
from .core.time import BirthInput
from .design import DesignOffsetSolver, DesignSolution
from .observability import CHART_ASSEMBLY_DURATION, CHARTS_ASSEMBLED, COMPUTE_ERRORS
from .providers import PositionProvider, PositionUnavailable
from .structure import Structure, resolve_structure
from .tables import ConstantTables, get_tables
from .vocabulary import Authority, Definition, HDType

LOG = logging.getLogger(__name__)

__all__ = ["Chart", "ChartAssembler", "assemble_chart"]


@dataclass(frozen=True)
class Chart:
    """Immutable result of one chart computation."""

    birth: BirthInput
    design: DesignSolution
    personality_activations: ActivationSet
    design_activations: ActivationSet
    structure: Structure
    type: HDType
    authority: Authority
    profile: Profile
    cross: IncarnationCross
    strategy: str
    type_label: str
    authority_label: str

    @property
    def definition(self) -> Definition:
        return self.structure.definition

    @property
    def birth_jd(self) -> float:
        return self.personality_activations.julian_day

    @property
    def design_jd(self) -> float:
        return self.design_activations.julian_day

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable mapping of the chart."""

        return {
            "birth": self.birth.to_payload(),
            "birth_jd": self.birth_jd,
            "design": self.design.to_payload(),
            "type": self.type.value,
            "type_label": self.type_label,
            "strategy": self.strategy,
            "authority": self.authority.value,
            "authority_label": self.authority_label,
            "profile": self.profile.to_payload(),
            "cross": self.cross.to_payload(),
            **self.structure.to_payload(),
            "personality": self.personality_activations.to_payload(),
            "design_activations": self.design_activations.to_payload(),
        }


class ChartAssembler:
    """Run the full pipeline against one provider and one set of tables."""

    def __init__(
        self,
        provider: PositionProvider,
        *,
        tables: ConstantTables | None = None,
        solver: DesignOffsetSolver | None = None,
    ) -> None:
        self.provider = provider
        self.tables = tables if tables is not None else get_tables()
        self.solver = solver if solver is not None else DesignOffsetSolver()

    def _sun_at(self, julian_day: float) -> float:
        try:
            return self.provider.longitude(Body.SUN, julian_day)
        except PositionUnavailable as exc:
            raise ActivationBuildError.from_unavailable(
                exc, body=Body.SUN, julian_day=julian_day, kind=ActivationKind.DESIGN
            ) from exc

    def assemble(self, birth: BirthInput) -> Chart:
        """Compute the chart for ``birth``; the first failure propagates unchanged."""

        start = perf_counter()
        try:
            chart = self._assemble(birth)
        except Exception as exc:
            COMPUTE_ERRORS.labels(component="chart", error=exc.__class__.__name__).inc()
            raise
        finally:
            CHART_ASSEMBLY_DURATION.observe(perf_counter() - start)
        CHARTS_ASSEMBLED.labels(type=chart.type.value).inc()
        return chart

    def _assemble(self, birth: BirthInput) -> Chart:
        tables = self.tables
        wheel = tables.wheel
        birth_jd = birth.julian_day
        personality = build_activation_set(
            ActivationKind.PERSONALITY, birth_jd, self.provider, wheel=wheel
        )
        solution = self.solver.solve(birth_jd, self._sun_at)
        design = build_activation_set(
            ActivationKind.DESIGN, solution.julian_day, self.provider, wheel=wheel
        )
        structure = resolve_structure((personality, design), tables)
        hd_type = classify_type(structure)
        authority = classify_authority(structure, tables)
        profile = calculate_profile(personality, design)
        cross = resolve_cross(personality, design, tables)
        LOG.debug(
            "Chart for %s: %s / %s / %s",
            birth.utc_datetime.isoformat(),
            hd_type.value,
            authority.value,
            profile.label,
        )
        return Chart(
            birth=birth,
            design=solution,
            personality_activations=personality,
            design_activations=design,
            structure=structure,
            type=hd_type,
            authority=authority,
            profile=profile,
            cross=cross,
            strategy=strategy_for(hd_type, tables),
            type_label=tables.type_labels[hd_type],
            authority_label=tables.authority_labels[authority],
        )


def assemble_chart(
    birth: BirthInput,
    provider: PositionProvider,
    *,
    tables: ConstantTables | None = None,
    solver: DesignOffsetSolver | None = None,
) -> Chart:
    return ChartAssembler(provider, tables=tables, solver=solver).assemble(birth)
