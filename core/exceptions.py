"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the lifecycle layer.

- Provides clear exception hierarchy
- Records which component and which phase failed
- Supports error categorization for logging
- Includes context for post-mortem diagnosis

============================================================
EXCEPTION HIERARCHY
============================================================
LifecycleException (base)
├── ConfigurationError
├── ComponentError
│   ├── StartError
│   │   └── HandlerStartError
│   ├── StopError
│   └── KillError
└── ServiceError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for logging."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, requires attention."""

    HIGH = "high"
    """Serious issue, aborts the current lifecycle phase."""

    CRITICAL = "critical"
    """Critical issue, the process cannot continue."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class LifecycleException(Exception):
    """
    Base exception for all lifecycle errors.

    All exceptions carry:
    - severity: for log level selection
    - context: for debugging (component, phase, index)
    - cause: the underlying exception, if any
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        text = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        ctx_str = " | ".join(f"{k}={v}" for k, v in self.context.items())
        if ctx_str:
            text = f"{text} | {ctx_str}"
        return text


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(LifecycleException):
    """Error while constructing a service or a composite."""

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


# ============================================================
# COMPONENT ERRORS
# ============================================================

class ComponentError(LifecycleException):
    """Base class for errors raised by a lifecycle operation."""

    default_severity = Severity.HIGH
    phase: str = "unknown"

    def __init__(
        self,
        message: str,
        component_name: Optional[str] = None,
        component_index: Optional[int] = None,
        phase: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if phase is not None:
            self.phase = phase
        context["phase"] = self.phase
        if component_name is not None:
            context["component_name"] = component_name
        if component_index is not None:
            context["component_index"] = component_index

        super().__init__(message, context=context, **kwargs)

        self.component_name = component_name
        self.component_index = component_index


class StartError(ComponentError):
    """A component could not complete initialization."""

    phase = "start"


class HandlerStartError(StartError):
    """The command handler's main start routine failed."""

    phase = "handler_start"


class _TeardownError(ComponentError):
    """Teardown failure, optionally aggregating several child failures."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[BaseException]] = None,
        **kwargs,
    ):
        self.errors: List[BaseException] = list(errors or [])
        if self.errors:
            context = kwargs.pop("context", {})
            context["error_count"] = len(self.errors)
            kwargs["context"] = context
        super().__init__(message, **kwargs)


class StopError(_TeardownError):
    """Orderly shutdown of a component could not complete."""

    phase = "stop"


class KillError(_TeardownError):
    """Forced teardown of a component could not complete."""

    phase = "kill"
    default_severity = Severity.CRITICAL


# ============================================================
# SERVICE ERRORS
# ============================================================

class ServiceError(LifecycleException):
    """Supervising-process-level execution failure."""

    default_severity = Severity.CRITICAL


class CommandLineError(ServiceError):
    """Arguments rejected by the command-line parser."""

    default_severity = Severity.MEDIUM


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
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
]
