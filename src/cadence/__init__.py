"""
Cadence - periodic background task runner.

Schedules run a task on a dedicated thread whenever a trigger says so, and
can be started, stopped gracefully, stopped asynchronously, or aborted.
"""

__version__ = "0.1.0"

from cadence.core import (
    CadenceError,
    CadenceSettings,
    ConfigError,
    LifecycleError,
    PersistenceError,
    TaskError,
    TriggerError,
    configure_logging,
    get_settings,
)
from cadence.scheduling import (
    BackgroundTask,
    RunState,
    Schedule,
    ScheduleList,
    ScheduleRegistry,
    Trigger,
    TriggerConfigStore,
    TriggerMode,
)

__all__ = [
    "__version__",
    "Schedule",
    "Trigger",
    "TriggerMode",
    "ScheduleRegistry",
    "ScheduleList",
    "TriggerConfigStore",
    "RunState",
    "BackgroundTask",
    "CadenceSettings",
    "get_settings",
    "configure_logging",
    "CadenceError",
    "ConfigError",
    "TriggerError",
    "LifecycleError",
    "TaskError",
    "PersistenceError",
]
