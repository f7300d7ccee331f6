"""
CLI: ``cadence trigger`` — inspect trigger text without running anything.
"""

from __future__ import annotations

import json

import typer
from rich.table import Table

from cadence.cli.utils import console, fail
from cadence.core.errors import TriggerError
from cadence.core.settings import get_settings
from cadence.scheduling.triggers import Trigger

app = typer.Typer(no_args_is_help=True)


@app.command("next")
def next_fire_times(
    text: str = typer.Argument(..., help='Trigger text, e.g. "daily 08:30"'),
    count: int = typer.Option(5, "--count", "-n", min=1, help="How many fire times to show"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the next fire times of a trigger, starting now."""
    from cadence.core.clock import SystemClock

    try:
        trigger = Trigger.parse(text)
        times = trigger.upcoming(SystemClock(get_settings().tzinfo).now(), count=count)
    except TriggerError as e:
        fail(e)

    if json_out:
        payload = {"trigger": trigger.to_text(), "next": [t.isoformat() for t in times]}
        console.print_json(json.dumps(payload))
        return

    table = Table(title=trigger.to_text())
    table.add_column("#", justify="right")
    table.add_column("Fire time")
    table.add_column("Weekday")
    for i, at in enumerate(times, start=1):
        table.add_row(str(i), at.strftime("%Y-%m-%d %H:%M:%S"), at.strftime("%a"))
    console.print(table)
