"""
Core Module Package.

This package contains the core infrastructure that every other
package depends on.

Components:
- context: Execution context (cancellation, deadline, values)
- exceptions: Custom exception hierarchy
- constants: Exit codes and defaults
- log: Logging setup and field-tagged events
"""

from .context import ExecutionContext
from .exceptions import (
    Severity,
    LifecycleException,
    ConfigurationError,
    ComponentError,
    StartError,
    HandlerStartError,
    StopError,
    KillError,
    ServiceError,
    CommandLineError,
)
from .log import setup_logging, log_event

__all__ = [
    "ExecutionContext",
    "Severity",
    "LifecycleException",
    "ConfigurationError",
    "ComponentError",
    "StartError",
    "HandlerStartError",
    "StopError",
    "KillError",
    "ServiceError",
    "CommandLineError",
    "setup_logging",
    "log_event",
]
