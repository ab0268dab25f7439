"""
Orchestrator - Composite Component.

============================================================
RESPONSIBILITY
============================================================
Composes multiple components into one.

- start() forwards to children in insertion order
- stop() and kill() forward in reverse insertion order
- The first failure aborts the traversal (fail-fast), unless the
  composite was built with best_effort=True
- Optional capabilities (command initialization) are forwarded to
  the children that implement them

============================================================
"""

import logging
from typing import Callable, List, Optional

from core.context import ExecutionContext
from core.exceptions import (
    ConfigurationError,
    KillError,
    LifecycleException,
    StartError,
    StopError,
)
from core.log import log_event

from .component import Component, initialize_command
from .registry import NamedComponent, NamedComponentList


logger = logging.getLogger(__name__)


CompositeComponentOption = Callable[["CompositeComponent"], None]


class CompositeComponent:
    """
    Component aggregating an ordered list of child components.

    Rollback of already-started children after a start failure is the
    caller's responsibility.
    """

    def __init__(self, best_effort: bool = False):
        """
        Args:
            best_effort: When True, stop()/kill() visit every child and
                raise one aggregated error instead of stopping at the
                first failure.
        """
        self.children = NamedComponentList()
        self.best_effort = best_effort

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    def start(self, ctx: ExecutionContext) -> None:
        for index, child in enumerate(self.children):
            log_event(
                logger, logging.DEBUG,
                action="start_composite_component",
                component_index=index,
                component_name=child.name,
            )
            try:
                child.component.start(ctx)
            except Exception as e:
                log_event(
                    logger, logging.ERROR,
                    "Error during start",
                    action="start_composite_component",
                    component_index=index,
                    component_name=child.name,
                    phase="start",
                    error=e,
                )
                if isinstance(e, LifecycleException):
                    raise
                raise StartError(
                    message=f"Component start failed: {child.name}",
                    component_name=child.name,
                    component_index=index,
                    cause=e,
                ) from e

    def stop(self) -> None:
        self._teardown("stop", StopError, lambda c: c.stop())

    def kill(self) -> None:
        self._teardown("kill", KillError, lambda c: c.kill())

    def _teardown(
        self,
        phase: str,
        error_cls: type,
        operation: Callable[[Component], None],
    ) -> None:
        errors: List[BaseException] = []

        for index in range(len(self.children) - 1, -1, -1):
            child: NamedComponent = self.children[index]
            log_event(
                logger, logging.DEBUG,
                action=f"{phase}_composite_component",
                component_index=index,
                component_name=child.name,
            )
            try:
                operation(child.component)
            except Exception as e:
                if isinstance(e, LifecycleException):
                    error: BaseException = e
                else:
                    error = error_cls(
                        message=f"Component {phase} failed: {child.name}",
                        component_name=child.name,
                        component_index=index,
                        cause=e,
                    )
                if not self.best_effort:
                    log_event(
                        logger, logging.ERROR,
                        f"Error during {phase}",
                        action=f"{phase}_composite_component",
                        component_index=index,
                        component_name=child.name,
                        phase=phase,
                        error=e,
                    )
                    if error is e:
                        raise
                    raise error from e
                log_event(
                    logger, logging.ERROR,
                    f"Error during {phase}, continuing with remaining components",
                    action=f"{phase}_composite_component",
                    component_index=index,
                    component_name=child.name,
                    phase=phase,
                    error=e,
                )
                errors.append(error)

        if errors:
            raise error_cls(
                message=f"{len(errors)} component(s) failed to {phase}",
                errors=errors,
            )

    # --------------------------------------------------------
    # Lookup & capabilities
    # --------------------------------------------------------

    def find_component(self, name: str) -> Optional[Component]:
        return self.children.find_component(name)

    def command_initialize(self, cmd) -> None:
        for child in self.children:
            initialize_command(child.component, cmd)

    def __repr__(self) -> str:
        return f"CompositeComponent(children={self.children.names()!r})"


# ============================================================
# CONSTRUCTION
# ============================================================

def new_composite_component(
    *options: CompositeComponentOption,
    best_effort: bool = False,
) -> CompositeComponent:
    """
    Build a composite by applying options in order.

    Raises:
        ConfigurationError: If any option fails; the partially built
            composite is discarded.
    """
    composite = CompositeComponent(best_effort=best_effort)
    for option in options:
        try:
            option(composite)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                message=f"Composite option failed: {e}",
                cause=e,
            ) from e
    return composite


def with_component(component: Component) -> CompositeComponentOption:
    """Add an anonymous child."""
    def option(composite: CompositeComponent) -> None:
        composite.children.push_back(component)
    return option


def with_named_component(name: str, component: Component) -> CompositeComponentOption:
    """Add a named child."""
    def option(composite: CompositeComponent) -> None:
        composite.children.push_back(component, name)
    return option


__all__ = [
    "CompositeComponent",
    "CompositeComponentOption",
    "new_composite_component",
    "with_component",
    "with_named_component",
]
