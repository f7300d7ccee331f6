"""
Cadence Errors - Typed failures raised at configuration and lifecycle seams.

Manifesto:
    Errors surface where a caller can act on them: building a trigger,
    reading a ``.sche`` file, resolving a task from the command line. Once a
    schedule is running, task failures are recorded on the schedule's stats
    and logged; they never escape the worker thread.

    - **Categorized:** every error names what went wrong (CONFIG, TRIGGER, ...)
    - **Contextual:** the schedule, trigger text or file path travels along
    - **Chained:** the underlying exception stays reachable via ``cause``

Architecture:
    ::

        CadenceError (category, context, cause)
         ├── ConfigError        CONFIG     settings, CLI targets, missing trigger
         ├── TriggerError       TRIGGER    bad fields, unparseable text, predicate raised
         ├── LifecycleError     LIFECYCLE  illegal RunState move
         ├── TaskError          TASK       task source that cannot run
         └── PersistenceError   STORAGE    .sche file could not be written

Examples:
    >>> error = TriggerError("hour must be in 0..23")
    >>> error.with_context(schedule="nightly-report", trigger="daily 25:00")
    TriggerError('hour must be in 0..23', category=TRIGGER)
    >>> error.context.schedule
    'nightly-report'

Guardrails:
    ❌ DON'T: raise a bare Exception from library code
    ✅ DO: pick the CadenceError subclass and pass ``cause=``

Tags:
    error-handling, exception-hierarchy, cadence

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Coarse classification used in logs and ``to_dict`` output."""

    CONFIG = "CONFIG"
    TRIGGER = "TRIGGER"
    LIFECYCLE = "LIFECYCLE"
    TASK = "TASK"
    STORAGE = "STORAGE"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """What the scheduler knew when the error was raised.

    >>> ErrorContext(schedule="cleanup", state="running").to_dict()
    {'schedule': 'cleanup', 'state': 'running'}
    """

    schedule: str | None = None
    trigger: str | None = None
    task: str | None = None
    state: str | None = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def typed_fields(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "metadata")

    def to_dict(self) -> dict[str, Any]:
        present = {name: getattr(self, name) for name in self.typed_fields() if getattr(self, name) is not None}
        return {**present, **self.metadata}


class CadenceError(Exception):
    """Root of the cadence error hierarchy.

    Subclasses only override ``default_category``; an explicit ``category``
    argument always wins.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CadenceError:
        """Fill context fields in place and return ``self``.

        Unknown keys land in ``context.metadata``::

            raise ConfigError("no trigger stored").with_context(path=str(path), hint="run config set")
        """
        typed = ErrorContext.typed_fields()
        for key, value in kwargs.items():
            if key in typed:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            payload["context"] = context
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


class ConfigError(CadenceError):
    default_category = ErrorCategory.CONFIG


class TriggerError(CadenceError):
    """Bad trigger fields or text, or a custom predicate that raised."""

    default_category = ErrorCategory.TRIGGER


class LifecycleError(CadenceError):
    """Illegal RunState move.

    Public lifecycle calls treat misuse as a no-op; only the state machine
    itself raises this.
    """

    default_category = ErrorCategory.LIFECYCLE

    def __init__(self, message: str, *, current: str | None = None, target: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.current = current
        self.target = target
        if current is not None:
            self.context.state = current
        if target is not None:
            self.context.metadata["target_state"] = target


class TaskError(CadenceError):
    """Raised when a task source cannot be run, e.g. a factory whose product has no start()."""

    default_category = ErrorCategory.TASK


class PersistenceError(CadenceError):
    default_category = ErrorCategory.STORAGE


_BUILTIN_CATEGORIES: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (OSError, ErrorCategory.STORAGE),
    (ValueError, ErrorCategory.CONFIG),
    (TypeError, ErrorCategory.CONFIG),
)


def categorize_error(error: BaseException) -> ErrorCategory:
    """Category of any exception; UNKNOWN when nothing matches."""
    if isinstance(error, CadenceError):
        return error.category
    for exc_type, category in _BUILTIN_CATEGORIES:
        if isinstance(error, exc_type):
            return category
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CadenceError",
    "ConfigError",
    "TriggerError",
    "LifecycleError",
    "TaskError",
    "PersistenceError",
    "categorize_error",
]
