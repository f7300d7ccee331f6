"""Tests for TriggerPolicy waiting behaviour, driven by a fake clock."""

from datetime import datetime

from cadence.core.clock import NEVER
from cadence.scheduling.policy import TriggerPolicy
from cadence.scheduling.triggers import Trigger


def _policy(trigger, clock, **kwargs):
    return TriggerPolicy(trigger, clock, poll_quantum=10, poll_threshold=60, custom_poll=1, **kwargs)


class TestCalendarPolicy:
    def test_due_returns_true_without_waiting(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.daily(8, 0), fake_clock)
        last = datetime(2024, 3, 31, 8, 0)

        assert policy.should_run_now(last, wait) is True
        assert wait.waits == []

    def test_far_target_waits_one_quantum(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.daily(18, 0), fake_clock)

        assert policy.should_run_now(NEVER, wait) is False
        assert wait.waits == [10]

    def test_near_target_waits_exactly_and_is_due(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.daily(12, 0, weekdays=["mon"]), fake_clock)
        fake_clock.set(datetime(2024, 4, 1, 11, 59, 30))

        assert policy.should_run_now(NEVER, wait) is True
        assert wait.waits == [30]

    def test_repeated_calls_converge_on_target(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.daily(12, 2), fake_clock)

        calls = 0
        while not policy.should_run_now(NEVER, wait):
            calls += 1
            assert calls < 100
        assert fake_clock.now() == datetime(2024, 4, 1, 12, 2)
        assert all(w == 10 for w in wait.waits[:-1])
        assert wait.waits[-1] <= 60

    def test_interrupted_wait_is_not_due(self, fake_clock):
        policy = _policy(Trigger.daily(12, 0, weekdays=["mon"]), fake_clock)
        fake_clock.set(datetime(2024, 4, 1, 11, 59, 30))

        assert policy.should_run_now(NEVER, lambda seconds: True) is False

    def test_seconds_until_due(self, fake_clock):
        policy = _policy(Trigger.daily(13, 0), fake_clock)
        assert policy.seconds_until_due(NEVER) == 3600
        assert _policy(Trigger.interval(5), fake_clock).seconds_until_due(NEVER) == 0


class TestIntervalPolicy:
    def test_first_run_is_immediate(self, fake_clock):
        wait = fake_clock.waiter()
        assert _policy(Trigger.interval(300), fake_clock).should_run_now(NEVER, wait) is True
        assert wait.waits == []

    def test_short_interval_waits_remainder(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.interval(5), fake_clock)

        assert policy.should_run_now(fake_clock.now(), wait) is True
        assert wait.waits == [5]


class TestCustomPolicy:
    def test_true_predicate_is_due(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.custom(lambda last: True), fake_clock)
        assert policy.should_run_now(NEVER, wait) is True
        assert wait.waits == []

    def test_false_predicate_pauses(self, fake_clock):
        wait = fake_clock.waiter()
        policy = _policy(Trigger.custom(lambda last: False), fake_clock)
        assert policy.should_run_now(NEVER, wait) is False
        assert wait.waits == [1]

    def test_predicate_receives_last_process_time(self, fake_clock):
        seen = []
        policy = _policy(Trigger.custom(lambda last: seen.append(last) or True), fake_clock)
        last = datetime(2024, 4, 1, 9, 0)
        policy.should_run_now(last, fake_clock.waiter())
        assert seen == [last]

    def test_seconds_until_due_unknown(self, fake_clock):
        assert _policy(Trigger.custom(lambda last: True), fake_clock).seconds_until_due(NEVER) is None
