"""Tests for the task and lifecycle protocols."""

from cadence.scheduling.protocol import BackgroundTask, Lifecycle
from cadence.scheduling.schedule import Schedule
from cadence.scheduling.triggers import Trigger
from tests._support import FailingTask, RecordingTask


class TestBackgroundTask:
    def test_tasks_with_start_conform(self):
        assert isinstance(RecordingTask(), BackgroundTask)
        assert isinstance(FailingTask(), BackgroundTask)

    def test_object_without_start_does_not_conform(self):
        assert not isinstance(object(), BackgroundTask)


class TestLifecycle:
    def test_schedule_conforms(self, fast_settings):
        schedule = Schedule(RecordingTask, Trigger.interval(1), settings=fast_settings)
        assert isinstance(schedule, Lifecycle)
