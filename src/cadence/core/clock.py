"""
Wall-clock access for trigger evaluation.

Triggers are defined in wall-clock terms ("every day at 08:30"), so the
scheduler reads local time by default, or time in a configured zone.
Everything that asks "what time is it" goes through a :class:`Clock` so tests
can pin the time.

``NEVER`` is the "never run" marker used for ``last_process_time``.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Protocol, runtime_checkable

NEVER = datetime.min


def never_ran(timestamp: datetime) -> bool:
    """True when *timestamp* is the ``NEVER`` marker (naive or aware)."""
    return timestamp.replace(tzinfo=None) == NEVER


@runtime_checkable
class Clock(Protocol):
    """Source of the current wall-clock time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Clock backed by :func:`datetime.now`.

    With ``tz=None`` it returns naive local time; otherwise aware time in *tz*.
    """

    def __init__(self, tz: tzinfo | None = None) -> None:
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def __repr__(self) -> str:
        return f"SystemClock(tz={self.tz!r})"


__all__ = ["NEVER", "never_ran", "Clock", "SystemClock"]
