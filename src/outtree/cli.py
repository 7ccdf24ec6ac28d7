"""Command-line interface for outtree."""

from __future__ import annotations

import asyncio
import importlib
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from outtree import __version__
from outtree.config import ConfigError, load_settings
from outtree.console_logger import ConsoleLogger
from outtree.executor import ExecutionOptions, Executor, NodeState
from outtree.graph import CycleError, build_dependency_tree
from outtree.logging import LogLevel
from outtree.nodes import NodeKind, PrerequisiteNode, TaskDefinitionError, TaskNode

app = typer.Typer(
    help="outtree - run a task graph, skipping tasks whose output already exists",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"outtree version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """outtree - run a task graph, skipping tasks whose output already exists."""


def _load_target(target: str) -> TaskNode | PrerequisiteNode:
    """Import a node from a 'module:attribute' reference.

    The attribute may be a node or a zero-argument callable returning one. The
    current directory is put on sys.path only while the module is imported, so
    local build scripts can be referenced. Imports the script makes lazily,
    after loading, do not see it.

    Raises:
        typer.Exit: If the reference is malformed or doesn't resolve to a node
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        console.print(f"[red]Invalid target '{target}' (expected module:attribute)[/red]")
        raise typer.Exit(1)

    cwd = os.getcwd()
    added_cwd = cwd not in sys.path
    if added_cwd:
        sys.path.insert(0, cwd)

    try:
        obj = importlib.import_module(module_name)
    except ImportError as e:
        console.print(f"[red]Cannot import module '{module_name}': {e}[/red]")
        raise typer.Exit(1)
    except TaskDefinitionError as e:
        console.print(f"[red]Invalid task in '{module_name}': {e}[/red]")
        raise typer.Exit(1)
    finally:
        if added_cwd and cwd in sys.path:
            sys.path.remove(cwd)

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            console.print(f"[red]'{module_name}' has no attribute '{attr_path}'[/red]")
            raise typer.Exit(1)

    if callable(obj) and not isinstance(obj, (TaskNode, PrerequisiteNode)):
        try:
            obj = obj()
        except TaskDefinitionError as e:
            console.print(f"[red]Invalid task from '{target}': {e}[/red]")
            raise typer.Exit(1)

    if not isinstance(obj, (TaskNode, PrerequisiteNode)):
        console.print(f"[red]'{target}' is not a task (got {type(obj).__name__})[/red]")
        raise typer.Exit(1)

    return obj


def _get_settings():
    try:
        return load_settings(Path.cwd())
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _parse_log_level(value: Optional[str], default: LogLevel) -> LogLevel:
    if value is None:
        return default
    try:
        return LogLevel.parse(value)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command("run")
def run_command(
    target: str = typer.Argument(..., help="Task to build, as module:attribute"),
    verbose: Optional[bool] = typer.Option(
        None, "--verbose/--no-verbose", help="Print skip/run lines for every task"
    ),
    dryrun: Optional[bool] = typer.Option(
        None, "--dry-run/--no-dry-run", help="Report what would run without running it"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="fatal, error, warn, info, debug or trace"
    ),
) -> None:
    """Build TARGET and every task it requires."""
    settings = _get_settings()
    options = ExecutionOptions(
        verbose=settings.verbose if verbose is None else verbose,
        dryrun=settings.dryrun if dryrun is None else dryrun,
    )
    logger = ConsoleLogger(console, _parse_log_level(log_level, settings.log_level))
    node = _load_target(target)

    executor = Executor(logger)
    try:
        results = asyncio.run(executor.run(node, options))
    except CycleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]✗ '{target}' failed: {e}[/red]")
        raise typer.Exit(1)

    ran = sum(1 for r in results if r.state is NodeState.SUCCEEDED)
    if options.dryrun:
        would_run = sum(1 for r in results if r.state is NodeState.WOULD_RUN)
        logger.info(f"[yellow]Dry run: {would_run} task(s) would run[/yellow]")
    else:
        logger.info(f"[green]✓ '{target}' completed ({ran} task(s) ran)[/green]")


@app.command("status")
def status_command(
    target: str = typer.Argument(..., help="Task to inspect, as module:attribute"),
) -> None:
    """Show whether each output in TARGET's graph already exists."""
    node = _load_target(target)

    try:
        statuses = asyncio.run(Executor().check_status(node))
    except CycleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Status of {target}")
    table.add_column("Output", style="cyan", no_wrap=True)
    table.add_column("Complete")

    for status in statuses:
        mark = "[green]yes[/green]" if status.complete else "[red]no[/red]"
        table.add_row(status.identity, mark)

    console.print(table)


@app.command("tree")
def tree_command(
    target: str = typer.Argument(..., help="Task to show, as module:attribute"),
) -> None:
    """Show TARGET's dependency tree with completion indicators."""
    node = _load_target(target)

    try:
        statuses = asyncio.run(Executor().check_status(node))
    except CycleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    complete = {status.identity: status.complete for status in statuses}
    console.print(_build_rich_tree(build_dependency_tree(node), complete))


def _build_rich_tree(dep_tree: dict, complete: dict[str, bool]) -> Tree:
    """Build a Rich Tree from a dependency tree and completion flags.

    Args:
        dep_tree: Dependency tree structure
        complete: Output identity to existence

    Returns:
        Rich Tree for display
    """
    name = dep_tree["name"]
    suffix = " (prerequisite)" if dep_tree["kind"] is NodeKind.PREREQUISITE else ""

    if dep_tree.get("cycle"):
        color, label = "magenta", f"{name} (cycle)"
    elif complete.get(name):
        color, label = "green", f"{name}{suffix} (exists)"
    elif dep_tree["kind"] is NodeKind.PREREQUISITE:
        color, label = "red", f"{name}{suffix} (missing)"
    else:
        color, label = "yellow", f"{name} (will run)"

    tree = Tree(f"[{color}]{label}[/{color}]")

    for dep in dep_tree.get("deps", []):
        tree.add(_build_rich_tree(dep, complete))

    return tree


if __name__ == "__main__":
    app()
