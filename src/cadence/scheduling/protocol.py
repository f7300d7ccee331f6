"""Task and lifecycle protocols.

┌──────────────────────────────────────────────────────────────────────────────┐
│  CONTRACTS                                                                    │
│                                                                               │
│  BackgroundTask  (implemented by user code, consumed by ProcessRunner)       │
│  ┌─────────────────────────────────────────────────────────────────────┐     │
│  │  start()    required: one unit of work, invoked once per due cycle  │     │
│  │  stop()     optional: hint sent when shutdown is requested while    │     │
│  │             start() is running; the task must honor it itself       │     │
│  │  close() / __exit__()  optional: release hook after start() returns │     │
│  └─────────────────────────────────────────────────────────────────────┘     │
│                                                                               │
│  Lifecycle  (exposed by Schedule, consumed by ScheduleRegistry/List)         │
│  ┌─────────────────────────────────────────────────────────────────────┐     │
│  │  start()        idempotent; spawns the worker                       │     │
│  │  stop()         blocking graceful stop                              │     │
│  │  stop_async()   non-blocking; returns a Future                      │     │
│  │  abort()        prompt; cancels cooperatively then detaches         │     │
│  └─────────────────────────────────────────────────────────────────────┘     │
│                                                                               │
│  All lifecycle calls are safe from any thread except the worker itself.     │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from typing import Protocol, runtime_checkable


@runtime_checkable
class BackgroundTask(Protocol):
    """A unit of periodic work.

    Only ``start`` is required. ``stop`` and a release hook (``close`` or the
    context-manager protocol) are discovered at run time.

    Example:
        >>> class Cleanup:
        ...     def __init__(self):
        ...         self._cancel = threading.Event()
        ...     def start(self):
        ...         for path in stale_files():
        ...             if self._cancel.is_set():
        ...                 return
        ...             path.unlink()
        ...     def stop(self):
        ...         self._cancel.set()
    """

    def start(self) -> None:
        ...


TaskFactory = Callable[[], BackgroundTask]


@runtime_checkable
class Lifecycle(Protocol):
    """Start/stop contract shared by schedules and anything that wraps them."""

    def start(self) -> bool:
        ...

    def stop(self) -> None:
        ...

    def stop_async(self) -> Future[None]:
        ...

    def abort(self, timeout: float | None = None) -> bool:
        ...


__all__ = ["BackgroundTask", "TaskFactory", "Lifecycle"]
