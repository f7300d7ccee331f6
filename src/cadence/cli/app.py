"""
Root Typer application for the cadence CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="cadence",
    help="cadence — run background tasks on a schedule.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from cadence import __version__

        typer.echo(f"cadence {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """cadence CLI — run schedules, preview triggers, manage .sche files."""


# ── Sub-command registration ─────────────────────────────────────────────

from cadence.cli.config import app as config_app  # noqa: E402
from cadence.cli.run import run_command  # noqa: E402
from cadence.cli.trigger import app as trigger_app  # noqa: E402

app.command("run")(run_command)
app.add_typer(trigger_app, name="trigger", help="Trigger previews.")
app.add_typer(config_app, name="config", help="Persisted trigger configuration (.sche files).")
