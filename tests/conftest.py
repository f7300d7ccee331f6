"""
Shared pytest fixtures and configuration for cadence tests.

This module provides:
- A manually advanced clock
- Settings with short poll intervals so threaded tests finish quickly
- Settings cache and logging-context cleanup for test isolation

Usage:
    Fixtures are auto-discovered by pytest::

        def test_something(fast_settings, fake_clock):
            ...
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure cadence package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cadence.core.logging import clear_context
from cadence.core.settings import CadenceSettings, clear_settings_cache
from tests._support import FakeClock, RecordingTask


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Drop cached settings and CADENCE_* env vars around every test."""
    import os

    for key in list(os.environ):
        if key.startswith("CADENCE_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _clean_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture(autouse=True)
def _reset_recording_task():
    RecordingTask.reset()
    yield
    RecordingTask.reset()


# =============================================================================
# Timing Fixtures
# =============================================================================


@pytest.fixture
def fast_settings(tmp_path) -> CadenceSettings:
    """Settings with millisecond-scale waits."""
    return CadenceSettings(
        poll_quantum_seconds=0.05,
        poll_threshold_seconds=0.1,
        custom_poll_seconds=0.01,
        stop_poll_seconds=0.02,
        abort_timeout_seconds=0.2,
        config_dir=tmp_path,
        _env_file=None,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock fixed at Monday 2024-04-01 12:00:00 until advanced."""
    return FakeClock(datetime(2024, 4, 1, 12, 0, 0))
