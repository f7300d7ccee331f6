"""Schedule health checks.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULE HEALTH                                                              │
│                                                                               │
│  Checks:                                                                      │
│  1. Worker running: state is RUNNING/STOP_REQUESTED and the thread is alive  │
│  2. Heartbeat fresh: last_alive_time is recent, OR a task is executing       │
│     (the heartbeat pauses while start() runs)                                │
│  3. No trigger failure recorded                                              │
│                                                                               │
│  Heartbeat threshold:                                                         │
│  The loop refreshes last_alive_time before every policy evaluation, and one  │
│  policy wait lasts at most max(poll_quantum, poll_threshold, custom_poll).   │
│  The default threshold is twice that.                                        │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cadence.core.clock import never_ran

from .state import RunState

if TYPE_CHECKING:
    from .schedule import Schedule


@dataclass
class ScheduleHealth:
    """Health report for one schedule."""

    healthy: bool
    schedule: str
    state: RunState
    checks: dict[str, bool] = field(default_factory=dict)
    executing: bool = False
    heartbeat_age_seconds: float | None = None
    last_process_time: str | None = None
    runs: int = 0
    failures: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "healthy": self.healthy,
            "schedule": self.schedule,
            "state": self.state.value,
            "checks": self.checks,
            "executing": self.executing,
            "heartbeat_age_seconds": self.heartbeat_age_seconds,
            "last_process_time": self.last_process_time,
            "runs": self.runs,
            "failures": self.failures,
            "warnings": self.warnings,
            "errors": self.errors,
        }


def default_heartbeat_age(schedule: Schedule) -> float:
    settings = schedule.settings
    longest_wait = max(
        settings.poll_quantum_seconds,
        settings.poll_threshold_seconds,
        settings.custom_poll_seconds,
    )
    return 2 * longest_wait


def check_schedule_health(
    schedule: Schedule,
    max_heartbeat_age: float | None = None,
) -> ScheduleHealth:
    """Assess one schedule.

    Args:
        schedule: Schedule to check
        max_heartbeat_age: Seconds after which a silent, idle worker is
            reported unhealthy (default: :func:`default_heartbeat_age`)
    """
    threshold = default_heartbeat_age(schedule) if max_heartbeat_age is None else max_heartbeat_age
    state = schedule.state
    stats = schedule.stats
    executing = schedule.executing
    last_process = schedule.last_process_time

    report = ScheduleHealth(
        healthy=True,
        schedule=schedule.name,
        state=state,
        executing=executing,
        last_process_time=None if never_ran(last_process) else last_process.isoformat(),
        runs=stats.runs,
        failures=stats.failures,
    )

    # === Worker ===
    running = state.is_active and schedule.is_alive
    report.checks["worker_running"] = running
    if not running:
        report.healthy = False
        report.errors.append(f"Worker is not running (state={state.value})")

    # === Heartbeat ===
    last_alive = schedule.last_alive_time
    if last_alive is not None:
        age = (schedule.clock.now() - last_alive).total_seconds()
        report.heartbeat_age_seconds = age
        fresh = executing or age <= threshold
        report.checks["heartbeat_fresh"] = fresh
        if not fresh:
            report.healthy = False
            report.errors.append(f"Last heartbeat was {age:.1f}s ago (threshold: {threshold}s)")
    else:
        report.checks["heartbeat_fresh"] = False
        if state is RunState.RUNNING:
            report.warnings.append("No heartbeat recorded yet")

    # === Trigger failure ===
    failure = schedule.failure
    report.checks["trigger_ok"] = failure is None
    if failure is not None:
        report.healthy = False
        report.errors.append(f"Trigger failed: {failure.cause!r}")

    if stats.runs > 10 and stats.failure_rate > 10:
        report.warnings.append(
            f"High failure rate: {stats.failures}/{stats.runs} ({stats.failure_rate:.1f}%)"
        )
    if schedule.detached:
        report.warnings.append("Worker was abandoned by abort and may still be running")

    return report


__all__ = ["ScheduleHealth", "check_schedule_health", "default_heartbeat_age"]
