"""Human Design chart engine.

Longitudes from a :class:`~bodygraph.providers.PositionProvider` are mapped
onto the 64-gate wheel for the birth instant and the design instant; the
resulting channels and centers drive the type, authority, profile and
incarnation cross classification assembled into a :class:`~bodygraph.chart.Chart`.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _get_version

try:
    __version__ = _get_version("bodygraph")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0"

from .activations import Activation, ActivationBuildError, ActivationSet
from .batch import ChartOutcome, compute_charts
from .chart import Chart, ChartAssembler, assemble_chart
from .core.bodies import Body
from .core.time import BirthInput, InputValidationError
from .design import ConvergenceError, DesignOffsetSolver, DesignSolution
from .gates import GatePosition, resolve
from .providers import PositionProvider, PositionUnavailable
from .tables import ConstantTableError, ConstantTables, get_tables, load_tables
from .vocabulary import Authority, Center, CrossAngle, Definition, HDType

__all__ = [
    "Activation",
    "ActivationBuildError",
    "ActivationSet",
    "Authority",
    "BirthInput",
    "Body",
    "Center",
    "Chart",
    "ChartAssembler",
    "ChartOutcome",
    "ConstantTableError",
    "ConstantTables",
    "ConvergenceError",
    "CrossAngle",
    "Definition",
    "DesignOffsetSolver",
    "DesignSolution",
    "GatePosition",
    "HDType",
    "InputValidationError",
    "PositionProvider",
    "PositionUnavailable",
    "__version__",
    "assemble_chart",
    "compute_charts",
    "get_tables",
    "load_tables",
    "resolve",
]
