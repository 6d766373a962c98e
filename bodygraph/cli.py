"""Typer application for the bodygraph command line.

Every command writes JSON to stdout; diagnostics and failures go to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional

import typer

from .activations import ActivationBuildError
from .batch import compute_charts
from .boot import configure_logging
from .boot.logging import level_for_verbosity
from .chart import ChartAssembler
from .config import Settings, SettingsError, load_settings
from .core.time import BirthInput, InputValidationError
from .design import ConvergenceError, DesignOffsetSolver
from .gates import resolve as resolve_longitude
from .gates import zodiac_position
from .observability import ensure_metrics_registered
from .providers import PositionProvider
from .tables import ConstantTableError, ConstantTables, get_tables, load_tables

LOG = logging.getLogger(__name__)

__all__ = ["app", "build_provider", "main"]

app = typer.Typer(help="Compute Human Design charts from birth data.", no_args_is_help=True)

CHART_ERRORS = (InputValidationError, ConvergenceError, ActivationBuildError)


def build_provider(settings: Settings) -> PositionProvider:
    """Return the position provider configured by ``settings``."""

    from .providers.swisseph import SwissEphemerisProvider

    return SwissEphemerisProvider.from_settings(settings.ephemeris)


def _settings(ctx: typer.Context) -> Settings:
    obj = ctx.obj or {}
    settings = obj.get("settings")
    if settings is None:
        try:
            settings = load_settings(obj.get("config"))
        except SettingsError as exc:
            typer.secho(f"Invalid settings: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1) from exc
        obj["settings"] = settings
        ctx.obj = obj
    return settings


def _tables(settings: Settings) -> ConstantTables:
    try:
        return get_tables(settings.tables.path)
    except ConstantTableError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


def _emit(payload: Any, *, indent: int | None = 2) -> None:
    typer.echo(json.dumps(payload, indent=indent, ensure_ascii=False))


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", help="Settings file (defaults to $BODYGRAPH_HOME/config.yaml)."
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity."),
) -> None:
    configure_logging(level=level_for_verbosity(verbose) if verbose else None)
    ensure_metrics_registered()
    ctx.obj = {"config": config}


@app.command("chart")
def chart_command(
    ctx: typer.Context,
    date: str = typer.Option(..., "--date", "-d", help="Birth date (YYYY-MM-DD)."),
    time: str = typer.Option(..., "--time", "-t", help="Local birth time (HH:MM)."),
    utc: str = typer.Option(..., "--utc", "-u", help="UTC offset in hours, e.g. +3 or -5.5."),
) -> None:
    """Compute one chart and print it as JSON."""

    try:
        birth = BirthInput.parse(date=date, time=time, utc_offset=utc)
    except InputValidationError as exc:
        typer.secho(f"Invalid input: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc

    settings = _settings(ctx)
    tables = _tables(settings)
    assembler = ChartAssembler(
        build_provider(settings),
        tables=tables,
        solver=DesignOffsetSolver.from_settings(settings.solver),
    )
    try:
        chart = assembler.assemble(birth)
    except CHART_ERRORS as exc:
        typer.secho(f"Chart computation failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    _emit(chart.to_payload())


def _read_births(source: Path) -> Iterator[Any]:
    handle = sys.stdin if str(source) == "-" else source.open("r", encoding="utf-8")
    try:
        for number, line in enumerate(handle, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                yield json.loads(text)
            except json.JSONDecodeError as exc:
                raise typer.BadParameter(f"line {number} is not valid JSON: {exc}") from exc
    finally:
        if handle is not sys.stdin:
            handle.close()


@app.command("batch")
def batch_command(
    ctx: typer.Context,
    source: Path = typer.Argument(
        ..., help="JSON Lines file of {date, time, utc_offset} records ('-' for stdin)."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Worker threads (defaults to settings)."
    ),
) -> None:
    """Compute one chart per input line and print one JSON outcome per line."""

    settings = _settings(ctx)
    tables = _tables(settings)
    births = []
    for record in _read_births(source):
        if not isinstance(record, dict):
            raise typer.BadParameter("each line must be a JSON object")
        births.append(record)
    outcomes = compute_charts(
        births,
        build_provider(settings),
        workers=workers or settings.batch.workers,
        tables=tables,
        solver=DesignOffsetSolver.from_settings(settings.solver),
    )
    failures = 0
    for outcome in outcomes:
        _emit(outcome.to_payload(), indent=None)
        if not outcome.ok:
            failures += 1
    if failures:
        typer.secho(f"{failures} of {len(outcomes)} charts failed", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command("resolve")
def resolve_command(
    ctx: typer.Context,
    longitude: float = typer.Argument(..., help="Ecliptic longitude in degrees."),
) -> None:
    """Print the gate, line and sub-divisions for a longitude."""

    tables = _tables(_settings(ctx))
    try:
        position = resolve_longitude(longitude, wheel=tables.wheel)
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    zodiac = zodiac_position(position.longitude)
    payload = position.to_payload()
    payload.update(
        {
            "gate_name": tables.gate_name(position.gate),
            "center": tables.center_of(position.gate).value,
            "sign": zodiac.sign,
            "sign_degree": zodiac.degree,
        }
    )
    _emit(payload)


@app.command("tables")
def tables_command(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None, "--path", help="Validate this bundle instead of the configured one."
    ),
) -> None:
    """Validate the constant data bundle and print a summary."""

    target = str(path) if path is not None else _settings(ctx).tables.path
    try:
        tables = load_tables(target)
    except ConstantTableError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    _emit(tables.summary())


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
