"""
Tests for component capabilities and SimpleComponent.
"""

from unittest.mock import MagicMock

from core.context import ExecutionContext
from orchestrator.cli import Command
from orchestrator.component import (
    CommandInitializer,
    CommandInitializerFn,
    Component,
    SimpleComponent,
    initialize_command,
)


class TestSimpleComponent:
    """Tests for the struct-of-callables component."""

    def test_missing_callables_are_noops(self):
        component = SimpleComponent()

        component.start(ExecutionContext.background())
        component.stop()
        component.kill()
        component.command_initialize(Command("svc"))

    def test_callables_invoked(self):
        on_start, on_stop, on_kill = MagicMock(), MagicMock(), MagicMock()
        component = SimpleComponent(on_start=on_start, on_stop=on_stop, on_kill=on_kill)
        ctx = ExecutionContext.background()

        component.start(ctx)
        component.stop()
        component.kill()

        on_start.assert_called_once_with(ctx)
        on_stop.assert_called_once_with()
        on_kill.assert_called_once_with()

    def test_command_initialize_delegates_once(self):
        fn = MagicMock()
        component = SimpleComponent(command_initializer=CommandInitializerFn(fn))
        cmd = Command("svc")

        component.command_initialize(cmd)

        fn.assert_called_once_with(cmd)


class TestCapabilities:
    """Tests for runtime capability checks."""

    def test_protocol_checks(self):
        assert isinstance(SimpleComponent(), Component)
        assert isinstance(SimpleComponent(), CommandInitializer)
        assert not isinstance(object(), Component)
        assert not isinstance(CommandInitializerFn(lambda cmd: None), Component)

    def test_initialize_command_skips_incapable_targets(self):
        cmd = Command("svc")

        assert initialize_command(object(), cmd) is False
        assert initialize_command(None, cmd) is False
        assert initialize_command(CommandInitializerFn(lambda c: None), cmd) is True
