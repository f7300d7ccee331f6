"""Tests for ScheduleRegistry and ScheduleList."""

from uuid import uuid4

import pytest

from cadence.scheduling.registry import ScheduleRegistry
from cadence.scheduling.schedule import Schedule
from cadence.scheduling.state import RunState
from cadence.scheduling.triggers import Trigger
from tests._support import RecordingTask, SleepingTask

pytestmark = [pytest.mark.slow, pytest.mark.timeout(30)]


def _schedule(settings, task=RecordingTask, trigger=None):
    return Schedule(task, trigger or Trigger.interval(0.05), settings=settings)


class TestScheduleRegistry:
    def test_add_starts_and_assigns_unique_ids(self, fast_settings):
        with ScheduleRegistry() as registry:
            first = registry.add(_schedule(fast_settings))
            second = registry.add(_schedule(fast_settings))
            assert first != second
            assert len(registry) == 2
            assert first in registry
            assert registry.get(first).state is RunState.RUNNING
            assert not registry.is_stopped(first)

    def test_stop_unregisters(self, fast_settings):
        registry = ScheduleRegistry()
        schedule = _schedule(fast_settings)
        job_id = registry.add(schedule)

        registry.stop(job_id)

        assert job_id not in registry
        assert registry.is_stopped(job_id)
        assert schedule.state is RunState.COMPLETED

    def test_unknown_ids(self):
        registry = ScheduleRegistry()
        unknown = uuid4()
        assert registry.is_stopped(unknown)
        assert registry.get(unknown) is None
        registry.stop(unknown)

    def test_is_stopped_after_one_shot_completes(self, fast_settings):
        registry = ScheduleRegistry()
        schedule = _schedule(fast_settings, trigger=Trigger.custom(lambda last: True, repeat=False))
        job_id = registry.add(schedule)
        assert schedule.join(timeout=5)
        assert registry.is_stopped(job_id)
        registry.stop_all()

    def test_stop_all_stops_concurrently(self, fast_settings):
        import time

        tasks = [SleepingTask(duration=0.4) for _ in range(3)]
        registry = ScheduleRegistry()
        schedules = [_schedule(fast_settings, task=t, trigger=Trigger.interval(10)) for t in tasks]
        for schedule in schedules:
            registry.add(schedule)
        for task in tasks:
            assert task.started.wait(2)

        began = time.monotonic()
        registry.stop_all()

        assert time.monotonic() - began < 1.0
        assert len(registry) == 0
        assert all(s.state is RunState.COMPLETED for s in schedules)

    def test_async_variants(self, fast_settings):
        registry = ScheduleRegistry()
        job_id = registry.add_async(_schedule(fast_settings)).result(timeout=5)
        assert job_id in registry
        assert registry.stop_async(job_id).result(timeout=5) is None
        assert registry.is_stopped(job_id)

        registry.add(_schedule(fast_settings))
        registry.stop_all_async().result(timeout=5)
        assert len(registry) == 0

    def test_health_is_keyed_by_id(self, fast_settings):
        with ScheduleRegistry() as registry:
            job_id = registry.add(_schedule(fast_settings))
            report = registry.health()
        assert set(report) == {str(job_id)}
        assert report[str(job_id)]["schedule"] == "RecordingTask"

    def test_registries_are_independent(self, fast_settings):
        a, b = ScheduleRegistry(), ScheduleRegistry()
        job_id = a.add(_schedule(fast_settings))
        assert job_id not in b
        a.stop_all()


class TestScheduleList:
    def test_stop_only_stops_its_members(self, fast_settings):
        registry = ScheduleRegistry()
        group = registry.new_list()
        outsider = registry.add(_schedule(fast_settings))
        members = [group.add(_schedule(fast_settings)), group.add(_schedule(fast_settings))]

        assert len(group) == 2
        assert list(group) == members

        group.stop()

        assert all(registry.is_stopped(m) for m in members)
        assert not registry.is_stopped(outsider)
        registry.stop_all()

    def test_add_async(self, fast_settings):
        registry = ScheduleRegistry()
        group = registry.new_list()
        job_id = group.add_async(_schedule(fast_settings)).result(timeout=5)
        assert list(group) == [job_id]
        group.stop()
        assert registry.is_stopped(job_id)

    def test_stop_twice_is_harmless(self, fast_settings):
        registry = ScheduleRegistry()
        group = registry.new_list()
        group.add(_schedule(fast_settings))
        group.stop()
        group.stop()
        assert len(registry) == 0
