"""Process runner: executes one unit of work.

┌──────────────────────────────────────────────────────────────────────────────┐
│  ProcessRunner.execute()                                                      │
│                                                                               │
│   ExitStack ──────────────────────────────────────────────────────┐          │
│   │  acquire   factory() → new task      (owned, released)         │          │
│   │            or the shared instance    (not released)            │          │
│   │  enter     task.__enter__()  if it is a context manager        │          │
│   │            else register task.close() / task.dispose()         │          │
│   │  run       task.start()                                        │          │
│   └─ release   on every exit path, including when start() raises ─┘          │
│                                                                               │
│   Any Exception from acquire/run/release is logged, recorded in the           │
│   ExecutionResult and discarded: a failing task never stops a schedule.      │
│                                                                               │
│   request_stop() (from another thread) forwards task.stop() to the           │
│   in-flight instance once. It is a hint, not an interruption.                │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import functools
import threading
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from cadence.core.clock import Clock, SystemClock
from cadence.core.errors import TaskError, categorize_error
from cadence.core.logging import get_logger

from .protocol import BackgroundTask, TaskFactory

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one execution attempt."""

    started_at: datetime
    finished_at: datetime
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def duration(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


def _describe(obj: Any) -> str:
    """Qualified name of a task type, factory function, or instance."""
    while isinstance(obj, functools.partial):
        obj = obj.func
    target = obj if hasattr(obj, "__qualname__") else type(obj)
    return f"{target.__module__}.{target.__qualname__}"


class ProcessRunner:
    """Runs a task once per call to :meth:`execute`.

    Use :meth:`from_factory` to build a fresh, released instance per run, or
    :meth:`from_instance` to reuse one shared instance that the caller owns.
    """

    def __init__(
        self,
        *,
        factory: TaskFactory | None = None,
        instance: BackgroundTask | None = None,
        clock: Clock | None = None,
    ) -> None:
        if (factory is None) == (instance is None):
            raise TaskError("provide exactly one of factory or instance")
        if factory is not None and not callable(factory):
            raise TaskError(f"task factory is not callable: {factory!r}")
        if instance is not None and not callable(getattr(instance, "start", None)):
            raise TaskError(f"task has no start() method: {instance!r}")
        self._factory = factory
        self._instance = instance
        self.clock = clock or SystemClock()
        self.task_name = _describe(factory if factory is not None else instance)

        self._lock = threading.Lock()
        self._current: BackgroundTask | None = None
        self._hinted: BackgroundTask | None = None
        self._stop_requested = False

    @classmethod
    def from_factory(cls, factory: TaskFactory, clock: Clock | None = None) -> ProcessRunner:
        return cls(factory=factory, clock=clock)

    @classmethod
    def from_instance(cls, instance: BackgroundTask, clock: Clock | None = None) -> ProcessRunner:
        return cls(instance=instance, clock=clock)

    @property
    def owns_instances(self) -> bool:
        """True when each run creates and releases its own task instance."""
        return self._factory is not None

    @property
    def stop_requested(self) -> bool:
        with self._lock:
            return self._stop_requested

    def execute(self) -> ExecutionResult:
        """Run the task once. Never raises ``Exception``."""
        started_at = self.clock.now()
        error: BaseException | None = None
        try:
            with ExitStack() as stack:
                task = self._acquire(stack)
                with self._lock:
                    self._current = task
                    hint_now = self._stop_requested
                try:
                    if hint_now:
                        self._send_stop(task)
                    task.start()
                finally:
                    with self._lock:
                        self._current = None
                        if self.owns_instances:
                            self._hinted = None
        except Exception as e:
            error = e
            logger.warning(
                "task_failed",
                task=self.task_name,
                category=categorize_error(e).value,
                error=repr(e),
                exc_info=True,
            )
        return ExecutionResult(started_at=started_at, finished_at=self.clock.now(), error=error)

    def request_stop(self) -> bool:
        """Ask the in-flight task to stop. Returns True if a task was running."""
        with self._lock:
            self._stop_requested = True
            task = self._current
        if task is None:
            return False
        self._send_stop(task)
        return True

    def _acquire(self, stack: ExitStack) -> BackgroundTask:
        if self._factory is None:
            return self._instance

        task = self._factory()
        if not callable(getattr(task, "start", None)):
            raise TaskError(f"factory returned an object without start(): {task!r}").with_context(
                task=self.task_name
            )
        if hasattr(task, "__enter__") and hasattr(task, "__exit__"):
            stack.enter_context(task)
        else:
            release = getattr(task, "close", None) or getattr(task, "dispose", None)
            if callable(release):
                stack.callback(release)
        return task

    def _send_stop(self, task: BackgroundTask) -> None:
        with self._lock:
            if self._hinted is task or self._current is not task:
                return
            self._hinted = task
        hook = getattr(task, "stop", None)
        if not callable(hook):
            return
        try:
            hook()
        except Exception as e:
            logger.warning("task_stop_hook_failed", task=self.task_name, error=repr(e))


__all__ = ["ProcessRunner", "ExecutionResult"]
