"""Schedule: the public lifecycle controller.

Manifesto:
    A periodic job needs exactly four verbs: start it, stop it politely,
    stop it without waiting, and get rid of it when it hangs. ``Schedule``
    offers those verbs on top of one dedicated worker thread, with the
    guarantees callers actually rely on: a second ``start`` never spawns a
    second worker, ``stop`` never returns while the task is still running,
    and ``abort`` always returns promptly.

┌──────────────────────────────────────────────────────────────────────────────┐
│  LIFECYCLE CONTRACT                                                           │
│                                                                               │
│   start()       check-and-set under the worker lock; no-op if ever started   │
│   stop()        STOP_REQUESTED → wake policy wait → task.stop() hint →       │
│                 block (bounded polls) until the worker reports COMPLETED     │
│   stop_async()  stop() on a helper thread; returns a concurrent Future       │
│   abort()       ABORTED → wake → hint → join(timeout) → detach if still      │
│                 running. Never kills a thread.                               │
│                                                                               │
│   Instances are single-use: start once, stop/abort once, discard.            │
└──────────────────────────────────────────────────────────────────────────────┘

Examples:
    >>> from cadence import Schedule, Trigger
    >>>
    >>> class Report:
    ...     def start(self):
    ...         build_report()
    >>>
    >>> schedule = Schedule(Report, Trigger.daily(8, 30))
    >>> schedule.start()
    True
    >>> # ... later ...
    >>> schedule.stop()

    A factory with arguments replaces reflection-based construction:

    >>> schedule = Schedule.create(Report, Trigger.interval(300), "weekly", recipients=["ops"])

Tags:
    cadence, scheduling, lifecycle, worker-thread, graceful-shutdown

Doc-Types:
    api-reference, architecture-diagram
"""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable
from concurrent.futures import Future
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from cadence.core.clock import Clock, SystemClock, never_ran
from cadence.core.errors import ConfigError, TriggerError
from cadence.core.logging import get_logger
from cadence.core.settings import CadenceSettings, get_settings

from .policy import TriggerPolicy
from .protocol import BackgroundTask, TaskFactory
from .runner import ProcessRunner
from .state import RunState
from .triggers import Trigger
from .worker import ScheduleStats, ScheduleWorker

if TYPE_CHECKING:
    from .health import ScheduleHealth
    from .persistence import TriggerConfigStore

logger = get_logger(__name__)

T = TypeVar("T")


def run_in_thread(fn: Callable[[], T], name: str) -> Future[T]:
    """Run *fn* on a new daemon thread; its outcome resolves the returned Future."""
    future: Future[T] = Future()

    def _target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    threading.Thread(target=_target, name=name, daemon=True).start()
    return future


def _is_instance(task: Any) -> bool:
    return not isinstance(task, type) and callable(getattr(task, "start", None))


def task_key(task: Any) -> str:
    """Name used for logs and ``.sche`` files: the task's type name."""
    while isinstance(task, functools.partial):
        task = task.func
    if _is_instance(task):
        return type(task).__name__
    return getattr(task, "__name__", type(task).__name__)


class Schedule:
    """Runs a task whenever its trigger says so, on a dedicated thread.

    Args:
        task: A task factory (a class, function, or ``functools.partial``)
            called once per run, or a task instance shared by all runs. An
            object with a ``start`` method that is not a class counts as an
            instance; instances are never released by the schedule.
        trigger: When to run.
        name: Used for the thread name and logs. Defaults to the task type name.
        settings: Timing knobs. Defaults to :func:`get_settings`.
        clock: Wall-clock source. Defaults to ``SystemClock(settings.tzinfo)``.
    """

    def __init__(
        self,
        task: TaskFactory | BackgroundTask,
        trigger: Trigger,
        *,
        name: str | None = None,
        settings: CadenceSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        if not isinstance(trigger, Trigger):
            raise TriggerError(f"expected a Trigger, got {type(trigger).__name__}")
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.tzinfo)
        self.trigger = trigger
        self.name = name or task_key(task)

        if _is_instance(task):
            runner = ProcessRunner.from_instance(task, clock=self.clock)
        else:
            runner = ProcessRunner.from_factory(task, clock=self.clock)

        policy = TriggerPolicy(
            trigger,
            self.clock,
            poll_quantum=self.settings.poll_quantum_seconds,
            poll_threshold=self.settings.poll_threshold_seconds,
            custom_poll=self.settings.custom_poll_seconds,
        )
        self._worker = ScheduleWorker(self.name, policy, runner, self.clock, repeat=trigger.repeat)

    @classmethod
    def create(
        cls,
        factory: TaskFactory,
        trigger: Trigger,
        *args: Any,
        name: str | None = None,
        settings: CadenceSettings | None = None,
        clock: Clock | None = None,
        **kwargs: Any,
    ) -> Schedule:
        """Schedule ``factory(*args, **kwargs)``, built fresh for every run."""
        bound = functools.partial(factory, *args, **kwargs)
        return cls(bound, trigger, name=name or task_key(factory), settings=settings, clock=clock)

    @classmethod
    def from_config(
        cls,
        task: TaskFactory | BackgroundTask,
        store: TriggerConfigStore,
        *,
        default: Trigger | None = None,
        **options: Any,
    ) -> Schedule:
        """Build a schedule whose trigger is read from ``<TypeName>.sche``.

        Falls back to *default* when the file is missing or unreadable.

        Raises:
            ConfigError: no persisted trigger and no default.
        """
        key = task_key(task)
        trigger = store.load_trigger(key) or default
        if trigger is None:
            raise ConfigError(f"no trigger configured for {key}").with_context(path=str(store.path_for(key)))
        return cls(task, trigger, **options)

    # ── Lifecycle ────────────────────────────────────────────────

    def start(self) -> bool:
        """Spawn the worker. Returns False (and does nothing) if already started."""
        started = self._worker.spawn()
        if started:
            logger.info("schedule_started", schedule=self.name, trigger=str(self.trigger))
        else:
            logger.debug("schedule_start_ignored", schedule=self.name, state=self.state.value)
        return started

    def stop(self) -> None:
        """Stop gracefully, blocking until the worker has exited.

        An in-flight execution is allowed to finish; its task receives the
        ``stop()`` hint. A no-op when the schedule is not running.
        """
        state = self._worker.request_stop()
        if not state.is_active:
            logger.debug("schedule_stop_ignored", schedule=self.name, state=state.value)
            return
        logger.info("schedule_stop_requested", schedule=self.name, executing=self.executing)
        if self._worker.on_worker_thread:
            return
        self._worker.wait_finished(poll=self.settings.stop_poll_seconds)
        logger.info("schedule_stopped", schedule=self.name)

    def stop_async(self) -> Future[None]:
        """Stop without blocking the caller.

        Returns:
            A :class:`concurrent.futures.Future` resolved once the worker has
            exited. ``asyncio.wrap_future`` makes it awaitable.
        """
        return run_in_thread(self.stop, name=f"cadence-{self.name}-stop")

    def abort(self, timeout: float | None = None) -> bool:
        """Force the schedule to end, returning within *timeout* seconds.

        The worker is cancelled cooperatively (wait interrupted, task hinted).
        If it has not exited when the timeout expires it is abandoned: left to
        finish on its own as a daemon thread, untracked, and never allowed to
        update this schedule again.

        Returns:
            True if the worker thread exited in time.
        """
        timeout = self.settings.abort_timeout_seconds if timeout is None else timeout
        exited = self._worker.abort(timeout)
        logger.info("schedule_aborted", schedule=self.name, exited=exited)
        return exited

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker to exit on its own. True if it has."""
        return self._worker.wait_finished(poll=self.settings.stop_poll_seconds, timeout=timeout)

    # ── Observation ──────────────────────────────────────────────

    @property
    def state(self) -> RunState:
        return self._worker.state

    @property
    def executing(self) -> bool:
        return self._worker.executing

    @property
    def last_process_time(self) -> datetime:
        return self._worker.last_process_time

    @property
    def last_alive_time(self) -> datetime | None:
        return self._worker.last_alive_time

    @property
    def has_run(self) -> bool:
        return not never_ran(self.last_process_time)

    @property
    def is_alive(self) -> bool:
        return self._worker.is_alive

    @property
    def stats(self) -> ScheduleStats:
        return self._worker.stats

    @property
    def failure(self) -> TriggerError | None:
        """The trigger failure that ended the worker, if any."""
        return self._worker.failure

    @property
    def detached(self) -> bool:
        """True if an abort gave up waiting for the worker thread."""
        return self._worker.detached

    @property
    def task_name(self) -> str:
        return self._worker.runner.task_name

    def seconds_until_due(self) -> float | None:
        return self._worker.policy.seconds_until_due(self.last_process_time)

    def health(self, max_heartbeat_age: float | None = None) -> ScheduleHealth:
        from .health import check_schedule_health

        return check_schedule_health(self, max_heartbeat_age=max_heartbeat_age)

    def __enter__(self) -> Schedule:
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"Schedule(name={self.name!r}, trigger={str(self.trigger)!r}, state={self.state.value})"


__all__ = ["Schedule", "task_key", "run_in_thread"]
