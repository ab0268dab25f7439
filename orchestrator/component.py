"""
Orchestrator - Component.

============================================================
RESPONSIBILITY
============================================================
Defines the lifecycle contract every orchestrated unit implements,
plus the optional command-initialization capability.

- start(ctx): bring the component up (may block)
- stop(): orderly shutdown
- kill(): forced teardown, may run while stop() is in flight

============================================================
"""

from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

from core.context import ExecutionContext

if TYPE_CHECKING:
    from .cli import Command


# ============================================================
# CAPABILITIES
# ============================================================

@runtime_checkable
class Component(Protocol):
    """Lifecycle contract for types that can be started and shut down."""

    def start(self, ctx: ExecutionContext) -> None:
        """Raises StartError (or any exception) if startup cannot complete."""
        ...

    def stop(self) -> None:
        """Raises StopError (or any exception) if orderly shutdown fails."""
        ...

    def kill(self) -> None:
        """Raises KillError (or any exception) if forced teardown fails."""
        ...


@runtime_checkable
class CommandInitializer(Protocol):
    """Optional capability: register flags on a command before it runs."""

    def command_initialize(self, cmd: "Command") -> None:
        ...


class CommandInitializerFn:
    """Adapts a plain function to the CommandInitializer capability."""

    def __init__(self, fn: Callable[["Command"], None]):
        self._fn = fn

    def command_initialize(self, cmd: "Command") -> None:
        self._fn(cmd)


# ============================================================
# SIMPLE COMPONENT
# ============================================================

class SimpleComponent:
    """
    Component built inline out of plain callables.

    Any callable left as None is a no-op. Also implements
    CommandInitializer by delegating to the supplied initializer.

    Example:
        component = SimpleComponent(
            on_start=lambda ctx: server.listen(),
            on_stop=server.close,
        )
    """

    def __init__(
        self,
        on_start: Optional[Callable[[ExecutionContext], None]] = None,
        on_stop: Optional[Callable[[], None]] = None,
        on_kill: Optional[Callable[[], None]] = None,
        command_initializer: Optional[CommandInitializer] = None,
    ):
        self.on_start = on_start
        self.on_stop = on_stop
        self.on_kill = on_kill
        self.command_initializer = command_initializer

    def start(self, ctx: ExecutionContext) -> None:
        if self.on_start is not None:
            self.on_start(ctx)

    def stop(self) -> None:
        if self.on_stop is not None:
            self.on_stop()

    def kill(self) -> None:
        if self.on_kill is not None:
            self.on_kill()

    def command_initialize(self, cmd: "Command") -> None:
        if self.command_initializer is not None:
            self.command_initializer.command_initialize(cmd)


def initialize_command(target: object, cmd: "Command") -> bool:
    """Apply target's CommandInitializer capability, if it has one."""
    if isinstance(target, CommandInitializer):
        target.command_initialize(cmd)
        return True
    return False


__all__ = [
    "Component",
    "CommandInitializer",
    "CommandInitializerFn",
    "SimpleComponent",
    "initialize_command",
]
