"""
Orchestrator Package - Lifecycle Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
This package provides the lifecycle layer for long-running service
processes: a uniform start/stop/kill contract, ordered composition
of components, and a supervisor that runs one component as the
process's main loop.

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                       Service                       |
    |-----------------------------------------------------|
    |  Global          |  started before every command   |
    |  Command tree    |  argparse, flags from components |
    |  Handler binding |  worker thread + exit queue      |
    |  Shutdown        |  stop -> (timeout) -> kill       |
    +-----------------------------------------------------+
                 |
    +-----------------------------------------------------+
    |                 CompositeComponent                  |
    |  start: first -> last     stop/kill: last -> first  |
    +-----------------------------------------------------+

============================================================
USAGE
============================================================
    from orchestrator import (
        service_main, with_global, with_command_handler,
        new_composite_component, with_named_component,
    )

    service_main(
        "my-service", "Does things",
        with_global(new_composite_component(
            with_named_component("log", LogConfigComponent()),
            with_shutdown_watcher(),
        )),
        with_command_handler("serve", "Serve requests", handler),
    )

============================================================
"""

from .component import (
    Component,
    CommandInitializer,
    CommandInitializerFn,
    SimpleComponent,
)
from .registry import NamedComponent, NamedComponentList
from .composite import (
    CompositeComponent,
    new_composite_component,
    with_component,
    with_named_component,
)
from .models import ServiceConfig, ServiceState, ShutdownOutcome
from .cli import Command, new_command
from .core import (
    Service,
    CommandHandlerBinding,
    get_service,
    with_service_context,
    new_service,
    with_command,
    with_long_description,
    with_global,
    with_service_config,
    with_command_handler,
    service_main,
)

__all__ = [
    # Components
    "Component",
    "CommandInitializer",
    "CommandInitializerFn",
    "SimpleComponent",
    "NamedComponent",
    "NamedComponentList",
    "CompositeComponent",
    "new_composite_component",
    "with_component",
    "with_named_component",
    # Models
    "ServiceConfig",
    "ServiceState",
    "ShutdownOutcome",
    # CLI
    "Command",
    "new_command",
    # Service
    "Service",
    "CommandHandlerBinding",
    "get_service",
    "with_service_context",
    "new_service",
    "with_command",
    "with_long_description",
    "with_global",
    "with_service_config",
    "with_command_handler",
    "service_main",
]
