"""
Cadence Logging - Structured events from schedules and their worker threads.

Manifesto:
    A background scheduler is invisible by nature: nothing on screen tells
    you that the 02:00 job fired, or that a task has been failing silently
    for a week. Structured logs are the only window into the worker thread.

    Every event is a snake_case name plus key/value fields. Worker threads
    bind ``schedule=<name>`` once, so every line they emit can be filtered
    back to the schedule that produced it.

Architecture:
    ::

        configure_logging(level, json_format, service)
              │
              ▼
        _build_processors()
          TimeStamper(iso)          (optional)
          merge_contextvars         schedule=..., run=...
          add_log_level / add_logger_name
          _add_thread_name          cadence-<task>
          _ServiceStamp             service=<name>
              │
              ▼
        JSONRenderer  (not a TTY)   |   ConsoleRenderer  (TTY)

Examples:
    >>> from cadence.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", service="reports")
    >>> logger = get_logger(__name__)
    >>> logger.info("schedule_started", schedule="nightly", trigger="daily 02:00")

Guardrails:
    - Context bound on a worker thread stays on that thread (contextvars)
    - ``configure_logging`` may be called again; the last call wins

Tags:
    logging, structlog, observability, cadence

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


class _ServiceStamp:
    """Processor that stamps ``service`` on events that do not carry one."""

    def __init__(self, service: str) -> None:
        self.service = service

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", self.service)
        return event_dict


def _add_thread_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    # Worker threads are named cadence-<task>; the main thread is left out.
    current = threading.current_thread()
    if current is not threading.main_thread():
        event_dict.setdefault("thread", current.name)
    return event_dict


def _build_processors(service: str, *, json_format: bool, add_timestamp: bool) -> list[Processor]:
    chain: list[Processor] = []
    if add_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso"))
    chain += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_thread_name,
        _ServiceStamp(service),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        chain += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return chain


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "cadence",
    add_timestamp: bool = True,
) -> None:
    """Route structlog events through stdlib logging.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_format: True for JSON lines, False for the console renderer,
            None to pick JSON whenever stdout is not a terminal
        service: Value of the ``service`` field on every event
        add_timestamp: Prefix events with an ISO timestamp
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    if json_format is None:
        json_format = not sys.stdout.isatty()

    structlog.configure(
        processors=_build_processors(service, json_format=json_format, add_timestamp=add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every later event emitted from this thread.

    Example:
        bind_context(schedule="nightly-report")
        logger.info("task_started")  # carries schedule="nightly-report"
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind fields for the duration of a ``with`` block.

    Example:
        with LogContext(schedule="nightly", run=3):
            logger.info("task_started")
    """

    def __init__(self, **fields: Any):
        self.fields = fields

    def __enter__(self) -> LogContext:
        bind_context(**self.fields)
        return self

    def __exit__(self, *exc_info) -> None:
        unbind_context(*self.fields)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
