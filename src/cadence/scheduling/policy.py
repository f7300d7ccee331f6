"""Trigger policy: decides whether a schedule is due, waiting if it is not.

The policy answers one question for the worker loop::

    should_run_now(last_process_time, wait) -> bool

It never writes timestamps. When the target time has not arrived it blocks
the worker through *wait*, in bounded slices, so the loop neither spins nor
oversleeps a stop request:

    remaining > poll_threshold  →  wait(poll_quantum)
    remaining <= poll_threshold →  wait(remaining)

*wait* returns True when it was interrupted by a stop or abort; the policy
then reports "not due" and the loop notices the stop flag.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from cadence.core.clock import Clock
from cadence.core.logging import get_logger

from .triggers import Trigger

logger = get_logger(__name__)

Wait = Callable[[float], bool]


class TriggerPolicy:
    """Evaluates a :class:`Trigger` against the clock.

    Args:
        trigger: What to evaluate.
        clock: Source of "now".
        poll_quantum: Wait slice while the target is far away.
        poll_threshold: Remaining time below which the wait is exact.
        custom_poll: Pause after a custom predicate answers False.
    """

    def __init__(
        self,
        trigger: Trigger,
        clock: Clock,
        *,
        poll_quantum: float = 10.0,
        poll_threshold: float = 60.0,
        custom_poll: float = 1.0,
    ) -> None:
        self.trigger = trigger
        self.clock = clock
        self.poll_quantum = poll_quantum
        self.poll_threshold = poll_threshold
        self.custom_poll = custom_poll

    def should_run_now(self, last_process_time: datetime, wait: Wait) -> bool:
        if self.trigger.is_custom:
            if self.trigger.predicate(last_process_time):
                return True
            wait(self.custom_poll)
            return False

        now = self.clock.now()
        target = self.trigger.next_fire_time(last_process_time, now)
        if now >= target:
            return True

        remaining = (target - now).total_seconds()
        slice_ = self.poll_quantum if remaining > self.poll_threshold else remaining
        logger.debug("trigger_waiting", target=target.isoformat(), remaining=remaining, wait=slice_)
        if wait(slice_):
            return False
        return self.clock.now() >= target

    def seconds_until_due(self, last_process_time: datetime) -> float | None:
        """Seconds until the next target (0 when due), None for custom triggers."""
        if self.trigger.is_custom:
            return None
        now = self.clock.now()
        target = self.trigger.next_fire_time(last_process_time, now)
        return max(0.0, (target - now).total_seconds())


__all__ = ["TriggerPolicy", "Wait"]
