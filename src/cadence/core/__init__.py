"""Cadence Core -- cross-cutting primitives shared by the scheduling package.

Module Map
----------
    errors.py      Structured error hierarchy (CadenceError, TriggerError, ...)
    logging.py     structlog configuration and context helpers
    settings.py    CadenceSettings (pydantic-settings, ``CADENCE_*`` env vars)
    clock.py       Clock protocol, SystemClock, NEVER marker
"""

from .clock import NEVER, Clock, SystemClock, never_ran
from .errors import (
    CadenceError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    LifecycleError,
    PersistenceError,
    TaskError,
    TriggerError,
    categorize_error,
)
from .logging import LogContext, configure_logging, get_logger
from .settings import CadenceSettings, get_settings

__all__ = [
    "NEVER",
    "Clock",
    "SystemClock",
    "never_ran",
    "CadenceError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "LifecycleError",
    "PersistenceError",
    "TaskError",
    "TriggerError",
    "categorize_error",
    "LogContext",
    "configure_logging",
    "get_logger",
    "CadenceSettings",
    "get_settings",
]
