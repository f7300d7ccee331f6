"""
Test support utilities for cadence tests.

Task doubles and a controllable clock that don't fit as pytest fixtures
but are shared by several test modules.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta


class FakeClock:
    """Manually advanced clock. Thread-safe."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 4, 1, 12, 0, 0)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> datetime:
        with self._lock:
            self._now += timedelta(seconds=seconds)
            return self._now

    def set(self, when: datetime) -> None:
        with self._lock:
            self._now = when

    def waiter(self):
        """A policy ``wait`` callable that advances this clock instead of sleeping."""
        waits: list[float] = []

        def _wait(seconds: float) -> bool:
            waits.append(seconds)
            self.advance(seconds)
            return False

        _wait.waits = waits
        return _wait


class RecordingTask:
    """Counts starts across all instances; records stop hints and releases."""

    starts = 0
    stops = 0
    closes = 0
    lock = threading.Lock()

    @classmethod
    def reset(cls) -> None:
        with cls.lock:
            cls.starts = cls.stops = cls.closes = 0

    def start(self) -> None:
        with type(self).lock:
            type(self).starts += 1

    def stop(self) -> None:
        with type(self).lock:
            type(self).stops += 1

    def close(self) -> None:
        with type(self).lock:
            type(self).closes += 1


class SleepingTask:
    """Sleeps for ``duration`` seconds; ends early when hinted if ``cooperative``."""

    def __init__(self, duration: float = 2.0, cooperative: bool = False) -> None:
        self.duration = duration
        self.cooperative = cooperative
        self.started = threading.Event()
        self.finished = threading.Event()
        self.hinted = threading.Event()
        self.runs = 0

    def start(self) -> None:
        self.runs += 1
        self.started.set()
        if self.cooperative:
            self.hinted.wait(self.duration)
        else:
            time.sleep(self.duration)
        self.finished.set()

    def stop(self) -> None:
        self.hinted.set()


class FailingTask:
    """Raises on every run."""

    def __init__(self) -> None:
        self.runs = 0

    def start(self) -> None:
        self.runs += 1
        raise RuntimeError(f"boom #{self.runs}")


def wait_until(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    """Poll *predicate* until it is true or *timeout* expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
