"""Trigger definitions: the "when" of a schedule.

A :class:`Trigger` is a tagged union: one frozen dataclass with a
:class:`TriggerMode` tag and the parameters that mode needs. There is no
subclass per mode; evaluation dispatches on the tag.

┌──────────────────────────────────────────────────────────────────────────────┐
│  TRIGGER MODES                                                                │
│                                                                               │
│  INTERVAL  seconds                 due when now - last >= seconds             │
│  HOURLY    every_hours, minute     :MM past every Nth hour (from midnight)    │
│  DAILY     hour, minute            HH:MM every day (every_days, weekdays)     │
│  WEEKLY    weekday, hour, minute   HH:MM on one weekday                       │
│  MONTHLY   day, hour, minute       HH:MM on a day of month (clamped)          │
│  CUSTOM    predicate(last)         caller decides; repeat=False → one shot    │
│                                                                               │
│  Calendar modes never fire twice on the same calendar day: the next target   │
│  is searched from the day AFTER the last run. Before the first run the       │
│  target is the first occurrence at or after "now".                            │
│                                                                               │
│  Monthly day overflow: day=31 fires on the last day of shorter months        │
│  (Apr 30, Feb 28/29).                                                         │
└──────────────────────────────────────────────────────────────────────────────┘

Text form (used by ``.sche`` files and the CLI)::

    interval 300
    hourly 2 :15
    daily 08:30 every=2 weekdays=mon,fri
    weekly mon 08:30
    monthly 31 08:30
"""

from __future__ import annotations

import calendar
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from cadence.core.clock import never_ran
from cadence.core.errors import TriggerError

Predicate = Callable[[datetime], bool]

WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

# A calendar search that has not found a date after this many days is a bug.
_MAX_SEARCH_DAYS = 800


class TriggerMode(str, Enum):
    """Trigger kinds."""

    INTERVAL = "interval"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


def parse_weekday(value: int | str) -> int:
    """Return 0 (Monday) .. 6 (Sunday) for an int or a day name."""
    if isinstance(value, bool):
        raise TriggerError(f"invalid weekday: {value!r}")
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise TriggerError(f"weekday must be in 0..6, got {value}")
    key = str(value).strip().lower()[:3]
    if key in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(key)
    raise TriggerError(f"invalid weekday: {value!r}")


def _parse_clock_time(text: str) -> tuple[int, int]:
    try:
        hour_text, minute_text = text.split(":")
        return int(hour_text), int(minute_text)
    except ValueError as e:
        raise TriggerError(f"expected HH:MM, got {text!r}", cause=e) from e


@dataclass(frozen=True)
class Trigger:
    """When a schedule is due.

    Build instances with the classmethod constructors rather than directly::

        Trigger.interval(300)
        Trigger.daily(8, 30)
        Trigger.weekly("mon", 8, 30)
        Trigger.monthly(31, 23, 0)
        Trigger.custom(lambda last: last.date() != date.today())
    """

    mode: TriggerMode
    seconds: float | None = None
    every_hours: int = 1
    every_days: int = 1
    weekdays: tuple[int, ...] = ()
    weekday: int | None = None
    day: int | None = None
    hour: int = 0
    minute: int = 0
    predicate: Predicate | None = None
    repeat: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise TriggerError(f"hour must be in 0..23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise TriggerError(f"minute must be in 0..59, got {self.minute}")

        if self.mode is TriggerMode.INTERVAL:
            if self.seconds is None or self.seconds <= 0:
                raise TriggerError(f"interval seconds must be > 0, got {self.seconds}")
        elif self.mode is TriggerMode.HOURLY:
            if not 1 <= self.every_hours <= 24:
                raise TriggerError(f"every_hours must be in 1..24, got {self.every_hours}")
        elif self.mode is TriggerMode.DAILY:
            if self.every_days < 1:
                raise TriggerError(f"every_days must be >= 1, got {self.every_days}")
            for wd in self.weekdays:
                if not 0 <= wd <= 6:
                    raise TriggerError(f"weekday must be in 0..6, got {wd}")
        elif self.mode is TriggerMode.WEEKLY:
            if self.weekday is None or not 0 <= self.weekday <= 6:
                raise TriggerError(f"weekday must be in 0..6, got {self.weekday}")
        elif self.mode is TriggerMode.MONTHLY:
            if self.day is None or not 1 <= self.day <= 31:
                raise TriggerError(f"day must be in 1..31, got {self.day}")
        elif self.mode is TriggerMode.CUSTOM:
            if not callable(self.predicate):
                raise TriggerError("custom trigger needs a callable predicate")

    # ── Constructors ─────────────────────────────────────────────

    @classmethod
    def interval(cls, seconds: float | timedelta) -> Trigger:
        if isinstance(seconds, timedelta):
            seconds = seconds.total_seconds()
        return cls(TriggerMode.INTERVAL, seconds=seconds)

    @classmethod
    def hourly(cls, every_hours: int = 1, minute: int = 0) -> Trigger:
        return cls(TriggerMode.HOURLY, every_hours=every_hours, minute=minute)

    @classmethod
    def daily(
        cls,
        hour: int,
        minute: int = 0,
        *,
        every_days: int = 1,
        weekdays: Iterable[int | str] | None = None,
    ) -> Trigger:
        days = tuple(sorted({parse_weekday(wd) for wd in weekdays})) if weekdays else ()
        return cls(TriggerMode.DAILY, hour=hour, minute=minute, every_days=every_days, weekdays=days)

    @classmethod
    def weekly(cls, weekday: int | str, hour: int = 0, minute: int = 0) -> Trigger:
        return cls(TriggerMode.WEEKLY, weekday=parse_weekday(weekday), hour=hour, minute=minute)

    @classmethod
    def monthly(cls, day: int, hour: int = 0, minute: int = 0) -> Trigger:
        return cls(TriggerMode.MONTHLY, day=day, hour=hour, minute=minute)

    @classmethod
    def custom(cls, predicate: Predicate, *, repeat: bool = True) -> Trigger:
        return cls(TriggerMode.CUSTOM, predicate=predicate, repeat=repeat)

    @classmethod
    def once(cls, at: datetime) -> Trigger:
        """Run a single time, as soon as wall-clock time reaches *at*."""

        def _due(last_process_time: datetime) -> bool:
            return never_ran(last_process_time) and datetime.now(at.tzinfo) >= at

        return cls.custom(_due, repeat=False)

    # ── Evaluation ───────────────────────────────────────────────

    @property
    def is_custom(self) -> bool:
        return self.mode is TriggerMode.CUSTOM

    def next_fire_time(self, last_process_time: datetime, now: datetime) -> datetime:
        """Target time of the next run.

        A target at or before *now* means the schedule is due. Not defined
        for CUSTOM triggers, whose predicate is opaque.
        """
        if self.mode is TriggerMode.INTERVAL:
            if never_ran(last_process_time):
                return now
            return last_process_time + timedelta(seconds=self.seconds)
        if self.mode is TriggerMode.HOURLY:
            return self._next_hourly(last_process_time, now)
        if self.mode is TriggerMode.DAILY:
            return self._next_on_calendar(last_process_time, now, self._daily_at, step=self.every_days)
        if self.mode is TriggerMode.WEEKLY:
            return self._next_on_calendar(last_process_time, now, self._weekly_at)
        if self.mode is TriggerMode.MONTHLY:
            return self._next_on_calendar(last_process_time, now, self._monthly_at)
        raise TriggerError("custom triggers have no computable fire time").with_context(trigger=str(self))

    def upcoming(self, now: datetime, count: int = 5) -> list[datetime]:
        """The next *count* fire times, assuming each run happens on time."""
        times: list[datetime] = []
        target = self.next_fire_time(datetime.min.replace(tzinfo=now.tzinfo), now)
        while len(times) < count:
            times.append(target)
            target = self.next_fire_time(target, target)
        return times

    def _next_hourly(self, last: datetime, now: datetime) -> datetime:
        first_run = never_ran(last)
        anchor = now if first_run else last
        day = anchor.date()
        for _ in range(_MAX_SEARCH_DAYS):
            for hour in range(0, 24, self.every_hours):
                slot = datetime.combine(day, time(hour, self.minute), tzinfo=now.tzinfo)
                if slot > anchor or (first_run and slot == anchor):
                    return slot
            day += timedelta(days=1)
        raise TriggerError("no hourly slot found").with_context(trigger=str(self))

    def _next_on_calendar(
        self,
        last: datetime,
        now: datetime,
        candidate: Callable[[date, datetime], datetime | None],
        step: int = 1,
    ) -> datetime:
        if never_ran(last):
            day = now.date()
            for _ in range(_MAX_SEARCH_DAYS):
                at = candidate(day, now)
                if at is not None and at >= now:
                    return at
                day += timedelta(days=1)
        else:
            # Step from the slot the last run belonged to; a run may finish after midnight.
            day = self._slot_day(last, now, candidate) + timedelta(days=step)
            for _ in range(_MAX_SEARCH_DAYS):
                at = candidate(day, now)
                if at is not None and at > last:
                    return at
                day += timedelta(days=1)
        raise TriggerError("no calendar date found").with_context(trigger=str(self))

    @staticmethod
    def _slot_day(
        last: datetime,
        now: datetime,
        candidate: Callable[[date, datetime], datetime | None],
    ) -> date:
        day = last.date()
        for _ in range(_MAX_SEARCH_DAYS):
            at = candidate(day, now)
            if at is not None and at <= last:
                return day
            day -= timedelta(days=1)
        return last.date() - timedelta(days=1)

    def _at(self, day: date, now: datetime) -> datetime:
        return datetime.combine(day, time(self.hour, self.minute), tzinfo=now.tzinfo)

    def _daily_at(self, day: date, now: datetime) -> datetime | None:
        if self.weekdays and day.weekday() not in self.weekdays:
            return None
        return self._at(day, now)

    def _weekly_at(self, day: date, now: datetime) -> datetime | None:
        return self._at(day, now) if day.weekday() == self.weekday else None

    def _monthly_at(self, day: date, now: datetime) -> datetime | None:
        last_day = calendar.monthrange(day.year, day.month)[1]
        return self._at(day, now) if day.day == min(self.day, last_day) else None

    # ── Text form ────────────────────────────────────────────────

    def to_text(self) -> str:
        """Serialize to the plain-text form accepted by :meth:`parse`."""
        hhmm = f"{self.hour:02d}:{self.minute:02d}"
        if self.mode is TriggerMode.INTERVAL:
            return f"interval {self.seconds:g}"
        if self.mode is TriggerMode.HOURLY:
            return f"hourly {self.every_hours} :{self.minute:02d}"
        if self.mode is TriggerMode.DAILY:
            parts = ["daily", hhmm]
            if self.every_days != 1:
                parts.append(f"every={self.every_days}")
            if self.weekdays:
                parts.append("weekdays=" + ",".join(WEEKDAY_NAMES[wd] for wd in self.weekdays))
            return " ".join(parts)
        if self.mode is TriggerMode.WEEKLY:
            return f"weekly {WEEKDAY_NAMES[self.weekday]} {hhmm}"
        if self.mode is TriggerMode.MONTHLY:
            return f"monthly {self.day} {hhmm}"
        raise TriggerError("custom triggers cannot be serialized")

    @classmethod
    def parse(cls, text: str) -> Trigger:
        """Parse the text form produced by :meth:`to_text`.

        Raises:
            TriggerError: the text is empty, names an unknown mode, or has
                malformed arguments.
        """
        tokens = text.strip().lower().split()
        if not tokens:
            raise TriggerError("empty trigger text")
        mode, args = tokens[0], tokens[1:]
        try:
            if mode == "interval" and len(args) == 1:
                return cls.interval(float(args[0]))
            if mode == "hourly" and len(args) == 2 and args[1].startswith(":"):
                return cls.hourly(int(args[0]), int(args[1][1:]))
            if mode == "daily" and args:
                hour, minute = _parse_clock_time(args[0])
                options = dict(opt.split("=", 1) for opt in args[1:])
                unknown = set(options) - {"every", "weekdays"}
                if unknown:
                    raise TriggerError(f"unknown daily options: {sorted(unknown)}")
                weekdays = options["weekdays"].split(",") if "weekdays" in options else None
                return cls.daily(hour, minute, every_days=int(options.get("every", 1)), weekdays=weekdays)
            if mode == "weekly" and len(args) == 2:
                hour, minute = _parse_clock_time(args[1])
                return cls.weekly(args[0], hour, minute)
            if mode == "monthly" and len(args) == 2:
                hour, minute = _parse_clock_time(args[1])
                return cls.monthly(int(args[0]), hour, minute)
        except TriggerError:
            raise
        except ValueError as e:
            raise TriggerError(f"invalid trigger text: {text!r}", cause=e) from e
        raise TriggerError(f"invalid trigger text: {text!r}")

    def __str__(self) -> str:
        if self.is_custom:
            name = getattr(self.predicate, "__qualname__", repr(self.predicate))
            return f"custom {name}" + ("" if self.repeat else " once")
        return self.to_text()


__all__ = ["Trigger", "TriggerMode", "Predicate", "WEEKDAY_NAMES", "parse_weekday"]
