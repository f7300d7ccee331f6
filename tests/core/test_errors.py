"""Tests for cadence.core.errors module."""

import pytest

from cadence.core.errors import (
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


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.schedule is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_excludes_none_and_merges_metadata(self):
        ctx = ErrorContext(schedule="cleanup", state="running", metadata={"attempt": 2})
        assert ctx.to_dict() == {"schedule": "cleanup", "state": "running", "attempt": 2}


class TestCadenceError:
    """Test the base error."""

    def test_default_category_is_internal(self):
        error = CadenceError("Something went wrong")
        assert error.category == ErrorCategory.INTERNAL
        assert str(error) == "Something went wrong"

    def test_subclass_categories(self):
        assert ConfigError("x").category == ErrorCategory.CONFIG
        assert TriggerError("x").category == ErrorCategory.TRIGGER
        assert LifecycleError("x").category == ErrorCategory.LIFECYCLE
        assert TaskError("x").category == ErrorCategory.TASK
        assert PersistenceError("x").category == ErrorCategory.STORAGE

    def test_explicit_category_overrides_default(self):
        error = TriggerError("x", category=ErrorCategory.CONFIG)
        assert error.category == ErrorCategory.CONFIG

    def test_cause_is_chained(self):
        root = ValueError("bad number")
        error = TriggerError("Cannot parse trigger", cause=root)
        assert error.cause is root
        assert error.__cause__ is root

    def test_with_context_sets_typed_fields_and_metadata(self):
        error = ConfigError("missing").with_context(path="/tmp/Job.sche", hint="create it")
        assert error.context.path == "/tmp/Job.sche"
        assert error.context.metadata == {"hint": "create it"}

    def test_with_context_returns_same_instance(self):
        error = TriggerError("x")
        assert error.with_context(schedule="s") is error

    def test_to_dict(self):
        error = TriggerError("bad hour", cause=ValueError("25")).with_context(trigger="daily 25:00")
        d = error.to_dict()
        assert d["error_type"] == "TriggerError"
        assert d["message"] == "bad hour"
        assert d["category"] == "TRIGGER"
        assert d["context"] == {"trigger": "daily 25:00"}
        assert d["cause"] == "ValueError('25')"

    def test_repr(self):
        assert repr(TriggerError("hour must be in 0..23")) == (
            "TriggerError('hour must be in 0..23', category=TRIGGER)"
        )

    def test_catchable_as_base(self):
        with pytest.raises(CadenceError):
            raise PersistenceError("disk full")


class TestLifecycleError:
    def test_records_states(self):
        error = LifecycleError("bad move", current="completed", target="running")
        assert error.current == "completed"
        assert error.target == "running"
        assert error.context.state == "completed"
        assert error.context.metadata["target_state"] == "running"


class TestCategorizeError:
    def test_cadence_error_reports_own_category(self):
        assert categorize_error(TaskError("x")) == ErrorCategory.TASK

    def test_builtin_mappings(self):
        assert categorize_error(FileNotFoundError()) == ErrorCategory.STORAGE
        assert categorize_error(ValueError()) == ErrorCategory.CONFIG
        assert categorize_error(TypeError()) == ErrorCategory.CONFIG

    def test_unknown(self):
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
