"""
Tests for the Log Configuration component.
"""

import io
import json
import logging

import pytest

from core.context import ExecutionContext
from core.exceptions import CommandLineError
from components.log_config import LogConfigComponent
from orchestrator.cli import Command


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def parse(component, argv):
    """Run a root command with component's flags and a no-op subcommand."""
    root = Command("svc", "", component)
    run = Command("run")
    run.run = lambda cmd, args: 0
    root.add_command(run)
    return root.execute(argv)


class TestLogConfigComponent:
    """Tests for flag registration and logging setup."""

    def test_defaults(self):
        component = LogConfigComponent()

        parse(component, ["run"])

        assert component.verbose is False
        assert component.log_format == "text"
        assert component.effective_level == "INFO"

    def test_flags_inherited_by_subcommands(self):
        component = LogConfigComponent()

        parse(component, ["run", "-v", "--log-format", "json"])

        assert component.verbose is True
        assert component.log_format == "json"
        assert component.effective_level == "DEBUG"

    def test_invalid_format_rejected(self):
        with pytest.raises(CommandLineError):
            parse(LogConfigComponent(), ["run", "--log-format", "xml"])

    def test_start_configures_root_logger(self, restore_root_logger):
        stream = io.StringIO()
        component = LogConfigComponent(log_format="json", verbose=True, stream=stream)

        component.start(ExecutionContext.background())
        logging.getLogger("tests.log_config").debug("configured")
        component.stop()
        component.kill()

        assert restore_root_logger.level == logging.DEBUG
        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert any(line["message"] == "configured" for line in lines)
