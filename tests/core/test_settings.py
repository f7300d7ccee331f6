"""Tests for cadence.core.settings module.

Covers:
- Defaults
- Environment variable override (CADENCE_ prefix)
- Field validation
- get_settings caching
"""

from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from cadence.core.settings import CadenceSettings, clear_settings_cache, get_settings


class TestCadenceSettingsDefaults:
    def test_poll_defaults(self):
        s = CadenceSettings(_env_file=None)
        assert s.poll_quantum_seconds == 10.0
        assert s.poll_threshold_seconds == 60.0
        assert s.custom_poll_seconds == 1.0

    def test_lifecycle_defaults(self):
        s = CadenceSettings(_env_file=None)
        assert s.stop_poll_seconds == 3.0
        assert s.abort_timeout_seconds == 1.0

    def test_misc_defaults(self):
        s = CadenceSettings(_env_file=None)
        assert s.timezone is None
        assert s.tzinfo is None
        assert s.config_dir == Path(".")
        assert s.log_level == "INFO"
        assert s.json_logs is None


class TestCadenceSettingsEnvOverride:
    def test_poll_quantum_from_env(self, monkeypatch):
        monkeypatch.setenv("CADENCE_POLL_QUANTUM_SECONDS", "2.5")
        assert CadenceSettings(_env_file=None).poll_quantum_seconds == 2.5

    def test_config_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CADENCE_CONFIG_DIR", str(tmp_path))
        assert CadenceSettings(_env_file=None).config_dir == tmp_path

    def test_json_logs_from_env(self, monkeypatch):
        monkeypatch.setenv("CADENCE_JSON_LOGS", "true")
        assert CadenceSettings(_env_file=None).json_logs is True

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("POLL_QUANTUM_SECONDS", "99")
        assert CadenceSettings(_env_file=None).poll_quantum_seconds == 10.0


class TestCadenceSettingsValidation:
    def test_non_positive_quantum_rejected(self):
        with pytest.raises(ValidationError):
            CadenceSettings(poll_quantum_seconds=0, _env_file=None)

    def test_negative_abort_timeout_rejected(self):
        with pytest.raises(ValidationError):
            CadenceSettings(abort_timeout_seconds=-1, _env_file=None)

    def test_log_level_uppercased(self):
        assert CadenceSettings(log_level="debug", _env_file=None).log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            CadenceSettings(log_level="chatty", _env_file=None)

    def test_timezone(self):
        s = CadenceSettings(timezone="Europe/Berlin", _env_file=None)
        assert s.tzinfo == ZoneInfo("Europe/Berlin")

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            CadenceSettings(timezone="Mars/Olympus_Mons", _env_file=None)


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("CADENCE_STOP_POLL_SECONDS", "0.5")
        assert get_settings() is first
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.stop_poll_seconds == 0.5

    def test_clear_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
