"""Schedule worker: the dedicated thread that drives one schedule.

┌──────────────────────────────────────────────────────────────────────────────┐
│  WORKER LOOP                                                                  │
│                                                                               │
│   spawn()  NOT_STARTED → RUNNING, daemon thread "cadence-<name>"             │
│      │                                                                        │
│      ▼                                                                        │
│   ┌─────────────────────────────────────────────────────────────────┐        │
│   │  while state is RUNNING:                                        │        │
│   │      last_alive_time = now()              (heartbeat)           │        │
│   │      due = policy.should_run_now(last, wait)   (may block)      │        │
│   │      if due and still RUNNING:                                  │        │
│   │          executing = True                                       │        │
│   │          runner.execute()                 (never raises)        │        │
│   │          executing = False                                      │        │
│   │          last_process_time = now()                              │        │
│   │      if trigger is one-shot: break                              │        │
│   └─────────────────────────────────────────────────────────────────┘        │
│      │                                                                        │
│      ▼                                                                        │
│   RUNNING | STOP_REQUESTED → COMPLETED      (ABORTED stays ABORTED)          │
│                                                                               │
│  All shared fields live behind one Condition. The wake Event cuts policy     │
│  waits short on stop/abort. A policy exception ends the worker; it is        │
│  recorded as ``failure`` and logged, never re-raised on another thread.      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime

from cadence.core.clock import NEVER, Clock
from cadence.core.errors import TriggerError
from cadence.core.logging import LogContext, get_logger

from .policy import TriggerPolicy
from .runner import ExecutionResult, ProcessRunner
from .state import RunState, check_transition

logger = get_logger(__name__)


@dataclass
class ScheduleStats:
    """Counters for one schedule."""

    iterations: int = 0
    runs: int = 0
    failures: int = 0
    last_error: str | None = None
    last_duration: float | None = None

    @property
    def failure_rate(self) -> float:
        """Failed runs as a percentage of all runs."""
        if self.runs == 0:
            return 0.0
        return (self.failures / self.runs) * 100


class ScheduleWorker:
    """Owns the worker thread, the run state, and the timestamps."""

    def __init__(
        self,
        name: str,
        policy: TriggerPolicy,
        runner: ProcessRunner,
        clock: Clock,
        *,
        repeat: bool = True,
    ) -> None:
        self.name = name
        self.policy = policy
        self.runner = runner
        self.clock = clock
        self.repeat = repeat

        self._cond = threading.Condition(threading.RLock())
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._state = RunState.NOT_STARTED
        self._executing = False
        self._last_process_time: datetime = NEVER
        self._last_alive_time: datetime | None = None
        self._stats = ScheduleStats()
        self._failure: TriggerError | None = None
        self._detached = False

    # ── Snapshot accessors ───────────────────────────────────────

    @property
    def state(self) -> RunState:
        with self._cond:
            return self._state

    @property
    def executing(self) -> bool:
        with self._cond:
            return self._executing

    @property
    def last_process_time(self) -> datetime:
        with self._cond:
            return self._last_process_time

    @property
    def last_alive_time(self) -> datetime | None:
        with self._cond:
            return self._last_alive_time

    @property
    def stats(self) -> ScheduleStats:
        with self._cond:
            return replace(self._stats)

    @property
    def failure(self) -> TriggerError | None:
        with self._cond:
            return self._failure

    @property
    def detached(self) -> bool:
        with self._cond:
            return self._detached

    @property
    def is_alive(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def on_worker_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    # ── Control (called from other threads) ──────────────────────

    def spawn(self) -> bool:
        """Start the worker thread. Returns False if it was ever started before."""
        with self._cond:
            if self._state is not RunState.NOT_STARTED:
                return False
            self._transition(RunState.RUNNING)
            self._thread = threading.Thread(target=self._run, name=f"cadence-{self.name}", daemon=True)
            self._thread.start()
        return True

    def request_stop(self) -> RunState:
        """Ask the loop to exit after the current iteration. Returns the resulting state."""
        with self._cond:
            if self._state is RunState.RUNNING:
                self._transition(RunState.STOP_REQUESTED)
            state = self._state
        if state is RunState.STOP_REQUESTED:
            self._wake.set()
            self.runner.request_stop()
        return state

    def wait_finished(self, poll: float, timeout: float | None = None) -> bool:
        """Block until the loop has exited. Polls every *poll* seconds at most."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._state.is_active:
                wait_for = poll
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    wait_for = min(poll, remaining)
                self._cond.wait(wait_for)
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(poll)
        return True

    def abort(self, timeout: float) -> bool:
        """Cancel cooperatively, wait up to *timeout*, then abandon the thread.

        Returns True if the worker thread has exited (or never existed).
        """
        with self._cond:
            if not self._state.is_active:
                return not self.is_alive
            self._transition(RunState.ABORTED)
            thread = self._thread
        self._wake.set()
        self.runner.request_stop()

        if thread is threading.current_thread():
            return False
        thread.join(timeout)
        if thread.is_alive():
            with self._cond:
                self._detached = True
            logger.warning("schedule_abandoned", schedule=self.name, timeout=timeout)
            return False
        return True

    # ── Worker thread ────────────────────────────────────────────

    def _transition(self, target: RunState) -> None:
        check_transition(self._state, target)
        previous, self._state = self._state, target
        self._cond.notify_all()
        logger.debug("schedule_state_changed", schedule=self.name, previous=previous.value, state=target.value)

    def _wait(self, seconds: float) -> bool:
        return self._wake.wait(max(0.0, seconds))

    def _run(self) -> None:
        with LogContext(schedule=self.name):
            self._run_bound()

    def _run_bound(self) -> None:
        logger.info("worker_started", trigger=str(self.policy.trigger), task=self.runner.task_name)
        try:
            self._loop()
        except Exception as e:
            failure = TriggerError("trigger evaluation failed", cause=e).with_context(
                schedule=self.name, trigger=str(self.policy.trigger)
            )
            logger.error("worker_failed", error=repr(e), exc_info=True)
            with self._cond:
                self._failure = failure
        finally:
            with self._cond:
                self._executing = False
                if self._state.is_active:
                    self._transition(RunState.COMPLETED)
                self._cond.notify_all()
                final = self._state
            logger.info("worker_exited", state=final.value)

    def _loop(self) -> None:
        while True:
            with self._cond:
                if self._state is not RunState.RUNNING:
                    return
                self._last_alive_time = self.clock.now()
                self._stats.iterations += 1
                last = self._last_process_time

            if not self.policy.should_run_now(last, self._wait):
                continue

            with self._cond:
                if self._state is not RunState.RUNNING:
                    return
                self._executing = True

            result: ExecutionResult | None = None
            try:
                result = self.runner.execute()
            finally:
                with self._cond:
                    self._executing = False
                    if self._state is not RunState.ABORTED:
                        self._last_process_time = self.clock.now()
                        self._record(result)
                    self._cond.notify_all()
            # release per-iteration references before the next wait
            del result

            if not self.repeat:
                return

    def _record(self, result: ExecutionResult | None) -> None:
        self._stats.runs += 1
        if result is None:
            return
        self._stats.last_duration = result.duration
        if not result.succeeded:
            self._stats.failures += 1
            self._stats.last_error = repr(result.error)


__all__ = ["ScheduleWorker", "ScheduleStats"]
