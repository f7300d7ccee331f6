"""Schedule registry: keyed bookkeeping for many running schedules.

The registry is an ordinary object with its own lifecycle, not process-wide
state::

    registry = ScheduleRegistry()          # create
    job_id = registry.add(schedule)        # register (starts it)
    registry.is_stopped(job_id)            # observe
    registry.stop_all()                    # stop everything
    # drop the registry

``ScheduleList`` groups ids added through it so a subset can be stopped
together.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from concurrent.futures import Future, wait
from typing import Any
from uuid import UUID, uuid4

from cadence.core.logging import get_logger

from .schedule import Schedule, run_in_thread

logger = get_logger(__name__)


class ScheduleRegistry:
    """Assigns ids to schedules, starts them, and stops them by id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._schedules: dict[UUID, Schedule] = {}

    def add(self, schedule: Schedule) -> UUID:
        """Register and start *schedule*. Returns its id."""
        with self._lock:
            job_id = uuid4()
            while job_id in self._schedules:
                job_id = uuid4()
            self._schedules[job_id] = schedule
        schedule.start()
        logger.info("schedule_registered", id=str(job_id), schedule=schedule.name)
        return job_id

    def add_async(self, schedule: Schedule) -> Future[UUID]:
        return run_in_thread(lambda: self.add(schedule), name=f"cadence-register-{schedule.name}")

    def get(self, job_id: UUID) -> Schedule | None:
        with self._lock:
            return self._schedules.get(job_id)

    def stop(self, job_id: UUID) -> None:
        """Unregister and gracefully stop. Unknown ids are ignored."""
        with self._lock:
            schedule = self._schedules.pop(job_id, None)
        if schedule is None:
            return
        schedule.stop()
        logger.info("schedule_unregistered", id=str(job_id), schedule=schedule.name)

    def stop_async(self, job_id: UUID) -> Future[None]:
        return run_in_thread(lambda: self.stop(job_id), name=f"cadence-unregister-{job_id}")

    def stop_all(self) -> None:
        """Stop every registered schedule concurrently and wait for all of them."""
        self.stop_many(self.ids())

    def stop_all_async(self) -> Future[None]:
        return run_in_thread(self.stop_all, name="cadence-stop-all")

    def stop_many(self, job_ids: list[UUID]) -> None:
        futures = [self.stop_async(job_id) for job_id in job_ids]
        done, _ = wait(futures)
        for future in done:
            future.result()

    def is_stopped(self, job_id: UUID) -> bool:
        """True for unknown ids and for schedules whose worker has ended."""
        schedule = self.get(job_id)
        if schedule is None:
            return True
        return schedule.state.is_terminal

    def ids(self) -> list[UUID]:
        with self._lock:
            return list(self._schedules)

    def new_list(self) -> ScheduleList:
        return ScheduleList(self)

    def health(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            items = list(self._schedules.items())
        return {str(job_id): schedule.health().to_dict() for job_id, schedule in items}

    def __len__(self) -> int:
        with self._lock:
            return len(self._schedules)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._schedules

    def __enter__(self) -> ScheduleRegistry:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop_all()


class ScheduleList:
    """Ids of schedules added through this list, stoppable as a group."""

    def __init__(self, registry: ScheduleRegistry) -> None:
        self._registry = registry
        self._lock = threading.Lock()
        self._ids: list[UUID] = []

    def add(self, schedule: Schedule) -> UUID:
        job_id = self._registry.add(schedule)
        with self._lock:
            self._ids.append(job_id)
        return job_id

    def add_async(self, schedule: Schedule) -> Future[UUID]:
        return run_in_thread(lambda: self.add(schedule), name=f"cadence-list-add-{schedule.name}")

    def stop(self) -> None:
        """Stop all schedules in this list concurrently and wait."""
        with self._lock:
            ids = list(self._ids)
        self._registry.stop_many(ids)

    def __iter__(self) -> Iterator[UUID]:
        with self._lock:
            return iter(list(self._ids))

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)


__all__ = ["ScheduleRegistry", "ScheduleList"]
