"""CLI for flowrank (rebalance, check, position, outline)."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from flowrank.config import DEFAULT_CONFIG, LayoutConfig, load_layout_config
from flowrank.core.layout.position import get_smart_position
from flowrank.core.tree.index import visible_tasks
from flowrank.core.tree.outline import render_outline
from flowrank.core.tree.rebalance import rebalance
from flowrank.importer.json_reader import dump_tasks, parse_tasks
from flowrank.logging_config import configure_logging
from flowrank.models.node import Task

app = typer.Typer(help="flowrank: rebalance task trees and place new tasks on the canvas.")

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="JSON file with layout overrides"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _load_config(path: Path | None) -> LayoutConfig:
    if path is None:
        return DEFAULT_CONFIG
    try:
        return load_layout_config(path)
    except (OSError, ValueError) as e:
        logger.error("Cannot load layout config {}: {}", path, e)
        raise typer.Exit(1) from e


def _load_snapshot(path: Path, config: LayoutConfig) -> tuple[Any, tuple[Task, ...]]:
    """Read a snapshot file, returning the raw JSON and the parsed tasks."""
    if not path.exists():
        logger.error("Snapshot not found: {}", path)
        raise typer.Exit(1)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return data, parse_tasks(data, config=config)
    except ValueError as e:
        logger.error("Invalid snapshot {}: {}", path, e)
        raise typer.Exit(1) from e


@app.command(name="rebalance")
def rebalance_cmd(
    snapshot: Path = typer.Argument(..., help="JSON task list or project file"),
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write here instead of stdout"),
    ] = None,
    config_path: ConfigOption = None,
    strict: bool = typer.Option(False, "--strict", help="Fail without writing on anomalies"),
) -> None:
    """Repair stages and recompute display ids."""
    config = _load_config(config_path)
    data, tasks = _load_snapshot(snapshot, config)
    result = rebalance(tasks, config=config)

    if strict and not result.ok:
        logger.error("{} anomalies found, nothing written", len(result.anomalies))
        raise typer.Exit(1)

    dumped = dump_tasks(result.tasks)
    payload = {**data, "tasks": dumped} if isinstance(data, dict) else dumped
    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    if output is None:
        typer.echo(text, nl=False)
    else:
        output.write_text(text, encoding="utf-8")
        logger.info("Wrote {} tasks to {}", len(dumped), output)


@app.command()
def check(
    snapshot: Path = typer.Argument(..., help="JSON task list or project file"),
    config_path: ConfigOption = None,
) -> None:
    """Report anomalies and tasks whose stage or display id is stale."""
    config = _load_config(config_path)
    _data, tasks = _load_snapshot(snapshot, config)
    result = rebalance(tasks, config=config)

    before = {t.id: t for t in tasks}
    stale = [
        t for t in result.tasks
        if t.stage != before[t.id].stage or t.display_id != before[t.id].display_id
    ]
    for task in stale:
        old = before[task.id]
        typer.echo(
            f"  {task.id}: stage {old.stage} -> {task.stage}, "
            f"display id {old.display_id!r} -> {task.display_id!r}"
        )
    for anomaly in result.anomalies:
        typer.echo(f"  [{anomaly.kind}] {anomaly.message}")

    typer.echo(f"{len(stale)} stale tasks, {len(result.anomalies)} anomalies")
    if stale or result.anomalies:
        raise typer.Exit(1)


@app.command()
def position(
    snapshot: Path = typer.Argument(..., help="JSON task list or project file"),
    depth: int = typer.Option(..., "--depth", "-d", min=1, help="Stage of the new task"),
    index: int = typer.Option(0, "--index", "-i", min=0, help="Index within depth or parent"),
    parent: Annotated[
        str | None,
        typer.Option("--parent", "-p", help="Parent task id"),
    ] = None,
    config_path: ConfigOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Suggest a canvas position for a new task."""
    config = _load_config(config_path)
    _data, tasks = _load_snapshot(snapshot, config)
    point = get_smart_position(depth, index, visible_tasks(tasks), parent, config=config)
    if output_json:
        typer.echo(json.dumps({"x": point.x, "y": point.y}))
    else:
        typer.echo(f"{point.x:g} {point.y:g}")


@app.command()
def outline(
    snapshot: Path = typer.Argument(..., help="JSON task list or project file"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    include_hidden: bool = typer.Option(
        False, "--include-hidden", "-a", help="Show archived and deleted tasks"
    ),
    config_path: ConfigOption = None,
) -> None:
    """Print the rebalanced tree as a markdown outline."""
    config = _load_config(config_path)
    _data, tasks = _load_snapshot(snapshot, config)
    result = rebalance(tasks, config=config)
    typer.echo(
        render_outline(result.tasks, max_depth=max_depth, include_hidden=include_hidden),
        nl=False,
    )
