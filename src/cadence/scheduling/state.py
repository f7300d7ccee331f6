"""Run states of a schedule and the transitions between them.

States:
    NOT_STARTED: Constructed, no worker yet
    RUNNING: Worker loop active
    STOP_REQUESTED: Graceful stop asked for; an execution may still be in flight
    ABORTED: Forced stop; the worker was cancelled or abandoned
    COMPLETED: Worker loop exited

Transitions only move forward::

    NOT_STARTED ──► RUNNING ──► STOP_REQUESTED ──► COMPLETED
                       │               │
                       ├──► COMPLETED  └──► ABORTED
                       └──► ABORTED
"""

from __future__ import annotations

from enum import Enum

from cadence.core.errors import LifecycleError


class RunState(str, Enum):
    """Schedule run states."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    ABORTED = "aborted"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.ABORTED, RunState.COMPLETED)

    @property
    def is_active(self) -> bool:
        return self in (RunState.RUNNING, RunState.STOP_REQUESTED)


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.NOT_STARTED: frozenset({RunState.RUNNING}),
    RunState.RUNNING: frozenset({RunState.STOP_REQUESTED, RunState.COMPLETED, RunState.ABORTED}),
    RunState.STOP_REQUESTED: frozenset({RunState.COMPLETED, RunState.ABORTED}),
    RunState.ABORTED: frozenset(),
    RunState.COMPLETED: frozenset(),
}


def can_transition(current: RunState, target: RunState) -> bool:
    return target in _TRANSITIONS[current]


def check_transition(current: RunState, target: RunState) -> None:
    """Raise :class:`LifecycleError` unless *current* → *target* is allowed."""
    if not can_transition(current, target):
        raise LifecycleError(
            f"cannot move from {current.value} to {target.value}",
            current=current.value,
            target=target.value,
        )


__all__ = ["RunState", "can_transition", "check_transition"]
