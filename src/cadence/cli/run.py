"""
CLI: ``cadence run`` — run one or more tasks in the foreground until Ctrl+C.

Each TARGET is ``module:attr`` naming a task class, a zero-argument factory,
or a task instance. All targets share one trigger, given either as an option
or read per task type from ``<config_dir>/<TypeName>.sche``::

    cadence run myapp.jobs:Cleanup --interval 300
    cadence run myapp.jobs:Report myapp.jobs:Digest --daily 08:30
    cadence run myapp.jobs:Report --from-config
"""

from __future__ import annotations

import time

import typer

from cadence.cli.utils import console, fail, resolve_target
from cadence.core.errors import CadenceError, ConfigError
from cadence.core.logging import configure_logging, get_logger
from cadence.core.settings import get_settings
from cadence.scheduling.persistence import TriggerConfigStore
from cadence.scheduling.registry import ScheduleRegistry
from cadence.scheduling.schedule import Schedule
from cadence.scheduling.triggers import Trigger

logger = get_logger(__name__)


def _split_at(value: str, option: str) -> tuple[str, str]:
    head, sep, tail = value.partition("@")
    if not sep:
        raise ConfigError(f"{option} expects VALUE@HH:MM, got {value!r}")
    return head, tail


def build_trigger(
    *,
    interval: float | None = None,
    hourly: str | None = None,
    daily: str | None = None,
    weekly: str | None = None,
    monthly: str | None = None,
    text: str | None = None,
) -> Trigger | None:
    """Turn the mutually exclusive trigger options into a Trigger (or None)."""
    given = {
        name: value
        for name, value in {
            "--interval": interval,
            "--hourly": hourly,
            "--daily": daily,
            "--weekly": weekly,
            "--monthly": monthly,
            "--trigger": text,
        }.items()
        if value is not None
    }
    if len(given) > 1:
        raise ConfigError(f"trigger options are mutually exclusive: {', '.join(given)}")
    if interval is not None:
        return Trigger.interval(interval)
    if hourly is not None:
        every, _, minute = hourly.partition(":")
        return Trigger.parse(f"hourly {every} :{minute or '0'}")
    if daily is not None:
        return Trigger.parse(f"daily {daily}")
    if weekly is not None:
        day, at = _split_at(weekly, "--weekly")
        return Trigger.parse(f"weekly {day} {at}")
    if monthly is not None:
        day, at = _split_at(monthly, "--monthly")
        return Trigger.parse(f"monthly {day} {at}")
    if text is not None:
        return Trigger.parse(text)
    return None


def run_command(
    targets: list[str] = typer.Argument(..., help="Tasks as module:attr"),
    interval: float | None = typer.Option(None, "--interval", help="Run every N seconds"),
    hourly: str | None = typer.Option(None, "--hourly", help="N:MM, minute MM of every Nth hour"),
    daily: str | None = typer.Option(None, "--daily", help="HH:MM every day"),
    weekly: str | None = typer.Option(None, "--weekly", help="DAY@HH:MM, e.g. mon@08:30"),
    monthly: str | None = typer.Option(None, "--monthly", help="D@HH:MM, e.g. 31@23:00"),
    trigger_text: str | None = typer.Option(None, "--trigger", help='Trigger text, e.g. "interval 60"'),
    from_config: bool = typer.Option(False, "--from-config", help="Read each trigger from its .sche file"),
    duration: float | None = typer.Option(None, "--duration", help="Stop after N seconds instead of waiting for Ctrl+C"),
) -> None:
    """Run tasks on a schedule until interrupted."""
    settings = get_settings()
    configure_logging(settings.log_level, json_format=settings.json_logs)

    try:
        trigger = build_trigger(
            interval=interval,
            hourly=hourly,
            daily=daily,
            weekly=weekly,
            monthly=monthly,
            text=trigger_text,
        )
        if trigger is None and not from_config:
            raise ConfigError("no trigger given; use a trigger option or --from-config")
        store = TriggerConfigStore(settings.config_dir)
        schedules = []
        for target in targets:
            task = resolve_target(target)
            if from_config:
                schedules.append(Schedule.from_config(task, store, default=trigger, settings=settings))
            else:
                schedules.append(Schedule(task, trigger, settings=settings))
    except CadenceError as e:
        fail(e)

    deadline = None if duration is None else time.monotonic() + duration
    with ScheduleRegistry() as registry:
        for schedule in schedules:
            registry.add(schedule)
            console.print(f"[green]▶[/green] {schedule.name}: {schedule.trigger}")
        console.print("[dim]Press Ctrl+C to stop.[/dim]")
        try:
            while deadline is None or time.monotonic() < deadline:
                time.sleep(0.2)
        except KeyboardInterrupt:
            logger.info("run_interrupted")
        console.print("[dim]Stopping...[/dim]")
    console.print(f"[green]✓[/green] Stopped {len(schedules)} schedule(s)")
