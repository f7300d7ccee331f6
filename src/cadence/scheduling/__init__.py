"""Scheduling package for cadence.

Manifesto:
    A background job that "runs every five minutes" is usually a
    ``while True: work(); time.sleep(300)`` loop that cannot be stopped
    cleanly, drifts, and dies silently on the first exception. This package
    replaces that loop with a small set of parts that each do one thing:
    a trigger that knows *when*, a policy that knows *how long to wait*, a
    runner that knows *how to run one task*, and a worker that owns the thread.

┌──────────────────────────────────────────────────────────────────────────────┐
│  CADENCE SCHEDULING                                                           │
│                                                                               │
│  Quick Start:                                                                 │
│  ┌──────────────────────────────────────────────────────────────────────┐   │
│  │   from cadence.scheduling import Schedule, ScheduleRegistry, Trigger │   │
│  │                                                                      │   │
│  │   registry = ScheduleRegistry()                                      │   │
│  │   job_id = registry.add(Schedule(Cleanup, Trigger.interval(300)))    │   │
│  │   ...                                                                │   │
│  │   registry.stop_all()                                                │   │
│  └──────────────────────────────────────────────────────────────────────┘   │
│                                                                               │
│  Architecture:                                                                │
│  ┌─────────────────────────────────────────────────────────────────────┐    │
│  │                                                                     │    │
│  │   Schedule ──owns──► ScheduleWorker (thread, RunState, timestamps)  │    │
│  │                           │                 │                       │    │
│  │                           ▼                 ▼                       │    │
│  │                    TriggerPolicy       ProcessRunner                │    │
│  │                    (wait + due?)       (factory / instance)         │    │
│  │                           │                 │                       │    │
│  │                           ▼                 ▼                       │    │
│  │                        Trigger        BackgroundTask.start()        │    │
│  │                                                                     │    │
│  │   ScheduleRegistry / ScheduleList: ids → Schedule, stop by id/group │    │
│  │   TriggerConfigStore: <TypeName>.sche text files                    │    │
│  └─────────────────────────────────────────────────────────────────────┘    │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from .health import ScheduleHealth, check_schedule_health
from .persistence import SUFFIX, TriggerConfigStore
from .policy import TriggerPolicy
from .protocol import BackgroundTask, Lifecycle, TaskFactory
from .registry import ScheduleList, ScheduleRegistry
from .runner import ExecutionResult, ProcessRunner
from .schedule import Schedule, run_in_thread, task_key
from .state import RunState, can_transition
from .triggers import WEEKDAY_NAMES, Trigger, TriggerMode, parse_weekday
from .worker import ScheduleStats, ScheduleWorker

__all__ = [
    # Triggers
    "Trigger",
    "TriggerMode",
    "WEEKDAY_NAMES",
    "parse_weekday",
    # Execution
    "TriggerPolicy",
    "ProcessRunner",
    "ExecutionResult",
    "BackgroundTask",
    "TaskFactory",
    "Lifecycle",
    # Lifecycle
    "Schedule",
    "ScheduleWorker",
    "ScheduleStats",
    "RunState",
    "can_transition",
    "task_key",
    "run_in_thread",
    # Bookkeeping
    "ScheduleRegistry",
    "ScheduleList",
    "TriggerConfigStore",
    "SUFFIX",
    # Health
    "ScheduleHealth",
    "check_schedule_health",
]
