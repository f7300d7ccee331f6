"""
CLI: ``cadence config`` — manage persisted ``<TypeName>.sche`` trigger files.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from cadence.cli.utils import console, fail
from cadence.core.errors import CadenceError
from cadence.core.settings import get_settings
from cadence.scheduling.persistence import TriggerConfigStore
from cadence.scheduling.triggers import Trigger

app = typer.Typer(no_args_is_help=True)

_DIR_OPTION = typer.Option(None, "--dir", "-d", help="Config directory (default: CADENCE_CONFIG_DIR)")


def _store(directory: Path | None) -> TriggerConfigStore:
    return TriggerConfigStore(directory or get_settings().config_dir)


@app.command("show")
def show_config(
    key: str | None = typer.Argument(None, help="Task type name; omit to list all"),
    directory: Path | None = _DIR_OPTION,
) -> None:
    """Show one stored trigger, or every stored trigger."""
    store = _store(directory)

    if key is not None:
        text = store.load(key)
        if text is None:
            console.print(f"[dim]No trigger stored for {key}[/dim]")
            raise typer.Exit(1)
        console.print(text.strip())
        return

    keys = store.keys()
    if not keys:
        console.print(f"[dim]No .sche files in {store.directory}[/dim]")
        return
    table = Table(title=str(store.directory))
    table.add_column("Task")
    table.add_column("Trigger")
    table.add_column("Valid")
    for name in keys:
        text = (store.load(name) or "").strip()
        valid = store.load_trigger(name) is not None
        table.add_row(name, text, "[green]yes[/green]" if valid else "[red]no[/red]")
    console.print(table)


@app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Task type name"),
    text: str = typer.Argument(..., help='Trigger text, e.g. "weekly mon 08:30"'),
    directory: Path | None = _DIR_OPTION,
) -> None:
    """Validate and store a trigger for a task type."""
    store = _store(directory)
    try:
        path = store.save_trigger(key, Trigger.parse(text))
    except CadenceError as e:
        fail(e)
    console.print(f"[green]✓[/green] Saved {path}")


@app.command("path")
def config_path(
    key: str = typer.Argument(..., help="Task type name"),
    directory: Path | None = _DIR_OPTION,
) -> None:
    """Print the file a task type's trigger is stored in."""
    try:
        path = _store(directory).path_for(key)
    except CadenceError as e:
        fail(e)
    typer.echo(str(path))


@app.command("delete")
def delete_config(
    key: str = typer.Argument(..., help="Task type name"),
    directory: Path | None = _DIR_OPTION,
) -> None:
    """Remove a stored trigger."""
    try:
        removed = _store(directory).delete(key)
    except CadenceError as e:
        fail(e)
    if removed:
        console.print(f"[green]✓[/green] Deleted {key}")
    else:
        console.print(f"[yellow]Warning:[/yellow] nothing stored for {key}")
