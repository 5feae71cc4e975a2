"""
rilay CLI.

Inspection commands for condition configs stored as JSON:

    rilay evaluate condition.json data.json
    rilay deps fields.json
    rilay graph fields.json --changed country
    rilay check fields.json data.json

A fields file maps field ids to behaviors in config form:

    {"vat": {"visible": {"field": "country", "operator": "in", "value": ["FR", "BE"]}}}
"""

from __future__ import annotations

import json
import logging
import platform
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from rilay._version import get_version
from rilay.core.conditions import (
    ConditionDependencyGraph,
    evaluate,
    evaluate_behaviors,
    extract_all_dependencies,
)
from rilay.core.errors import RilayError
from rilay.core.ir import ConditionalBehavior, condition_from_config
from rilay.core.settings import ConditionSettings, find_settings, load_settings

console = Console()

app = typer.Typer(
    help="rilay – inspect form conditions and their dependency graph.",
    no_args_is_help=True,
)

_BEHAVIOR_SLOTS = ("visible", "disabled", "required", "readonly")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"rilay {get_version()} (Python {platform.python_version()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Settings file (rilay.toml or pyproject.toml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """rilay CLI main callback for global options."""
    try:
        settings = load_settings(config) if config else find_settings()
    except RilayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.logging_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ctx.obj = settings


# =============================================================================
# Loading
# =============================================================================


def _read_json(path: Path) -> Any:
    if not path.exists():
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.echo(f"Error: Invalid JSON in {path}: {e}", err=True)
        raise typer.Exit(code=1)


def _load_behaviors(path: Path, settings: ConditionSettings) -> dict[str, ConditionalBehavior]:
    raw = _read_json(path)
    if not isinstance(raw, dict):
        typer.echo(f"Error: {path} must contain an object of field id -> behavior", err=True)
        raise typer.Exit(code=1)

    behaviors: dict[str, ConditionalBehavior] = {}
    try:
        for field_id, slots in raw.items():
            slots = slots or {}
            if not isinstance(slots, dict):
                typer.echo(f"Error: {path.name}: behavior of {field_id!r} must be an object", err=True)
                raise typer.Exit(code=1)
            behaviors[field_id] = ConditionalBehavior(
                **{
                    slot: condition_from_config(
                        slots[slot],
                        strict=settings.strict_operators,
                        source=f"{path.name}:{field_id}.{slot}",
                    )
                    for slot in _BEHAVIOR_SLOTS
                    if slots.get(slot)
                }
            )
    except RilayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    return behaviors


def _settings(ctx: typer.Context) -> ConditionSettings:
    return ctx.obj if isinstance(ctx.obj, ConditionSettings) else ConditionSettings()


# =============================================================================
# Commands
# =============================================================================


@app.command("evaluate")
def evaluate_command(
    ctx: typer.Context,
    condition_file: Path = typer.Argument(..., help="Condition in config form (JSON)"),
    data_file: Path = typer.Argument(..., help="Data context (JSON object)"),
) -> None:
    """Evaluate one condition against a data context."""
    settings = _settings(ctx)
    try:
        condition = condition_from_config(
            _read_json(condition_file),
            strict=settings.strict_operators,
            source=condition_file.name,
        )
    except RilayError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    data = _read_json(data_file)
    if not isinstance(data, dict):
        typer.echo(f"Error: {data_file} must contain a JSON object", err=True)
        raise typer.Exit(code=1)

    result = evaluate(condition, data)
    typer.echo("true" if result else "false")


@app.command("deps")
def deps_command(
    ctx: typer.Context,
    fields_file: Path = typer.Argument(..., help="Field behaviors (JSON)"),
) -> None:
    """List the data paths each field's conditions read."""
    behaviors = _load_behaviors(fields_file, _settings(ctx))

    table = Table(title="Field dependencies")
    table.add_column("Field", style="bold")
    table.add_column("Depends on")
    for field_id, behavior in behaviors.items():
        table.add_row(field_id, ", ".join(extract_all_dependencies(behavior)) or "-")
    console.print(table)


@app.command("graph")
def graph_command(
    ctx: typer.Context,
    fields_file: Path = typer.Argument(..., help="Field behaviors (JSON)"),
    changed: list[str] = typer.Option(
        [], "--changed", help="Show fields affected by a change to this path (repeatable)"
    ),
) -> None:
    """Show the reverse dependency index, or the fields affected by changes."""
    graph = ConditionDependencyGraph()
    for field_id, behavior in _load_behaviors(fields_file, _settings(ctx)).items():
        graph.add_field(field_id, behavior)

    if changed:
        affected = graph.get_affected_fields_multiple(changed)
        typer.echo("\n".join(affected) if affected else "No fields affected")
        return

    table = Table(title=f"Dependency graph ({graph.size} fields)")
    table.add_column("Path", style="bold")
    table.add_column("Fields")
    for path, field_ids in graph.to_debug_object()["reverseDeps"].items():
        table.add_row(path, ", ".join(field_ids))
    console.print(table)


@app.command("check")
def check_command(
    ctx: typer.Context,
    fields_file: Path = typer.Argument(..., help="Field behaviors (JSON)"),
    data_file: Path = typer.Argument(..., help="Data context (JSON object)"),
) -> None:
    """Evaluate every field's behavior against a data context."""
    behaviors = _load_behaviors(fields_file, _settings(ctx))
    data = _read_json(data_file)
    if not isinstance(data, dict):
        typer.echo(f"Error: {data_file} must contain a JSON object", err=True)
        raise typer.Exit(code=1)

    table = Table(title="Field state")
    table.add_column("Field", style="bold")
    for slot in _BEHAVIOR_SLOTS:
        table.add_column(slot.capitalize())
    for field_id, result in evaluate_behaviors(behaviors, data).items():
        table.add_row(field_id, *("yes" if getattr(result, slot) else "no" for slot in _BEHAVIOR_SLOTS))
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
