"""
Tests for logging setup, structured events and the exception hierarchy.
"""

import io
import json
import logging
import sys

import pytest

from core.exceptions import (
    ComponentError,
    ConfigurationError,
    KillError,
    LifecycleException,
    Severity,
    StartError,
    StopError,
)
from core.log import FIELDS_ATTR, StructuredFormatter, format_fields, log_event, setup_logging


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


# ============================================================
# LOG EVENT TESTS
# ============================================================

class TestLogEvent:
    """Tests for field-tagged events."""

    def test_format_fields(self):
        assert format_fields("Started", {"a": 1, "b": "x"}) == "Started | a=1 | b=x"
        assert format_fields("", {"action": "stop"}) == "action=stop"

    def test_fields_attached_as_extra(self, caplog):
        logger = logging.getLogger("tests.log_event")

        with caplog.at_level(logging.DEBUG, logger="tests.log_event"):
            log_event(logger, logging.DEBUG, action="start_composite_component", component_index=0)

        record = caplog.records[-1]
        assert record.getMessage() == "action=start_composite_component | component_index=0"
        assert getattr(record, FIELDS_ATTR) == {
            "action": "start_composite_component",
            "component_index": 0,
        }

    def test_disabled_level_emits_nothing(self, caplog):
        logger = logging.getLogger("tests.log_event.quiet")

        with caplog.at_level(logging.WARNING, logger="tests.log_event.quiet"):
            log_event(logger, logging.DEBUG, "hidden", action="noop")

        assert not [r for r in caplog.records if r.name == "tests.log_event.quiet"]


# ============================================================
# SETUP TESTS
# ============================================================

class TestSetupLogging:
    """Tests for process-wide logging setup."""

    def test_json_format(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)

        log_event(logging.getLogger("tests.json"), logging.INFO, "hello", exit_code=0)

        payload = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert payload["level"] == "INFO"
        assert payload["logger"] == "tests.json"
        assert payload["exit_code"] == 0
        assert payload["message"] == "hello | exit_code=0"

    def test_text_format_and_level(self, restore_root_logger):
        stream = io.StringIO()
        root = setup_logging(level="warning", log_format="text", stream=stream)

        logging.getLogger("tests.text").info("dropped")
        logging.getLogger("tests.text").warning("kept")

        assert root.level == logging.WARNING
        assert "dropped" not in stream.getvalue()
        assert "| WARNING  | tests.text | kept" in stream.getvalue()

    def test_replaces_existing_handlers(self, restore_root_logger):
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger().handlers) == 1

    def test_formatter_includes_exception(self):
        formatter = StructuredFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.getLogger("tests").makeRecord(
                "tests", logging.ERROR, __file__, 1, "failed", None,
                exc_info=sys.exc_info(),
            )

        payload = json.loads(formatter.format(record))
        assert "ValueError: boom" in payload["exc_info"]


# ============================================================
# EXCEPTION TESTS
# ============================================================

class TestExceptions:
    """Tests for the lifecycle exception hierarchy."""

    def test_component_error_context(self):
        cause = RuntimeError("disk full")
        error = StartError("Component start failed: db", component_name="db", component_index=2, cause=cause)

        assert isinstance(error, ComponentError)
        assert isinstance(error, LifecycleException)
        assert error.context["phase"] == "start"
        assert error.context["component_name"] == "db"
        assert error.context["component_index"] == 2
        assert error.context["cause_type"] == "RuntimeError"
        assert error.cause is cause

    def test_explicit_phase(self):
        error = ComponentError("failed", phase="drain")

        assert error.phase == "drain"
        assert error.context["phase"] == "drain"

    def test_severity_defaults(self):
        assert KillError("x").severity == Severity.CRITICAL
        assert StopError("x").severity == Severity.HIGH
        assert LifecycleException("x").severity == Severity.MEDIUM
        assert StopError("x", severity=Severity.LOW).severity == Severity.LOW

    def test_aggregated_errors(self):
        errors = [RuntimeError("a"), RuntimeError("b")]
        error = StopError("2 component(s) failed to stop", errors=errors)

        assert error.errors == errors
        assert error.context["error_count"] == 2

    def test_to_dict_and_log_format(self):
        error = ConfigurationError("bad value", config_key="kill_timeout_seconds", actual_value=-1)

        data = error.to_dict()
        assert data["type"] == "ConfigurationError"
        assert data["severity"] == "high"
        assert data["context"]["config_key"] == "kill_timeout_seconds"
        assert error.to_log_format().startswith("[HIGH] ConfigurationError: bad value")
        assert "actual_value=-1" in error.to_log_format()
