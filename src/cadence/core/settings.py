"""
Centralized settings for cadence.

Manifesto:
    Poll quanta, stop-wait intervals and abort timeouts are the knobs that
    trade wake-up latency against idle CPU. They belong in one validated,
    environment-driven place rather than scattered as magic numbers.

    - **Pydantic validation:** Type-checked at startup, not at the first tick
    - **Environment-driven:** Reads ``CADENCE_*`` env vars and ``.env`` files
    - **Sensible defaults:** Works out of the box for long-running services

Features:
    - **CadenceSettings:** timing knobs, timezone, trigger config directory,
      logging level and format
    - **get_settings():** cached accessor, ``_force_reload`` for tests

Examples:
    >>> from cadence.core.settings import CadenceSettings
    >>> s = CadenceSettings(poll_quantum_seconds=0.05, stop_poll_seconds=0.01)
    >>> s.poll_quantum_seconds
    0.05

Tags:
    settings, configuration, pydantic, environment, cadence

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CadenceSettings(BaseSettings):
    """Cadence configuration.

    Fields
    ──────
    poll_quantum_seconds   : Wait slice used while a target is far away
    poll_threshold_seconds : Remaining wait below which the policy sleeps exactly
    custom_poll_seconds    : Pause after a custom predicate answers "not due"
    stop_poll_seconds      : Bounded wait between Stop's quiescence checks
    abort_timeout_seconds  : How long Abort waits before detaching the worker
    timezone               : IANA zone for wall-clock triggers (None = local)
    config_dir             : Directory holding ``<TypeName>.sche`` files
    log_level              : Structlog log level
    json_logs              : JSON log output (None = auto-detect from TTY)
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Trigger evaluation ───────────────────────────────────────
    poll_quantum_seconds: float = Field(default=10.0, gt=0)
    poll_threshold_seconds: float = Field(default=60.0, ge=0)
    custom_poll_seconds: float = Field(default=1.0, gt=0)

    # ── Lifecycle ────────────────────────────────────────────────
    stop_poll_seconds: float = Field(default=3.0, gt=0)
    abort_timeout_seconds: float = Field(default=1.0, ge=0)

    # ── Clock ────────────────────────────────────────────────────
    timezone: str | None = Field(default=None, description="IANA zone name, e.g. Europe/Berlin")

    # ── Storage ──────────────────────────────────────────────────
    config_dir: Path = Field(default=Path("."), description="Directory for .sche trigger files")

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    json_logs: bool | None = Field(default=None)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value!r}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return value

    @property
    def tzinfo(self) -> tzinfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


_settings_cache: dict[str, CadenceSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CadenceSettings:
    """Load, validate, and cache a :class:`CadenceSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = CadenceSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (tests, or after changing the environment)."""
    _settings_cache.clear()


__all__ = ["CadenceSettings", "get_settings", "clear_settings_cache"]
