"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Defines data models for the service supervisor.

- Service lifecycle states
- Shutdown outcomes
- Configuration dataclass (environment / .env backed)

============================================================
"""

from enum import Enum
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union
import os

from dotenv import load_dotenv

from core.constants import (
    DEFAULT_KILL_TIMEOUT_SECONDS,
    DEFAULT_MEMSTATS_INTERVAL_SECONDS,
    DEFAULT_PROFILE_ADDR,
)
from core.log import LOG_FORMATS


# ============================================================
# SERVICE STATE
# ============================================================

class ServiceState(Enum):
    """
    Per-invocation supervisor state.

    IDLE -> GLOBAL_STARTING -> HANDLER_RUNNING -> STOPPING -> STOPPED
         -> GLOBAL_STOPPING -> IDLE
    """

    IDLE = "idle"
    """No command is running."""

    GLOBAL_STARTING = "global_starting"
    """The process-wide Global component is starting."""

    HANDLER_RUNNING = "handler_running"
    """The handler runs on its worker thread; main thread awaits an exit code."""

    STOPPING = "stopping"
    """An exit code was received; handler stop (and maybe kill) in progress."""

    STOPPED = "stopped"
    """The handler has been stopped or killed."""

    GLOBAL_STOPPING = "global_stopping"
    """The Global component is stopping."""


# ============================================================
# SHUTDOWN OUTCOME
# ============================================================

class ShutdownOutcome(Enum):
    """How the handler's post-run teardown ended."""

    CLEAN = "clean"
    """stop() completed within the kill timeout."""

    STOP_FAILED = "stop_failed"
    """stop() raised within the kill timeout; kill() was not needed."""

    KILLED = "killed"
    """stop() overran the kill timeout and kill() was invoked."""


# ============================================================
# CONFIGURATION
# ============================================================

ENV_PREFIX = "SERVICE_"


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes", "on")


@dataclass
class ServiceConfig:
    """Configuration for a Service and its standard components."""

    kill_timeout_seconds: float = DEFAULT_KILL_TIMEOUT_SECONDS
    """Time to wait for ordered stop before kill."""

    log_level: str = "INFO"
    """Logging level."""

    log_format: str = "text"
    """Logging format (text or json)."""

    profile_server_enabled: bool = False
    """Start the diagnostic HTTP server."""

    profile_server_addr: str = DEFAULT_PROFILE_ADDR
    """Bind address of the diagnostic HTTP server."""

    metrics_interval_seconds: float = DEFAULT_MEMSTATS_INTERVAL_SECONDS
    """Runtime metrics sampling interval."""

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "ServiceConfig":
        """
        Load configuration from environment variables.

        Values from a .env file are loaded first but never override
        variables already present in the environment.
        """
        load_dotenv(dotenv_path=env_file)
        return cls(
            kill_timeout_seconds=float(
                os.getenv(f"{ENV_PREFIX}KILL_TIMEOUT_SECONDS", str(DEFAULT_KILL_TIMEOUT_SECONDS))
            ),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
            log_format=os.getenv(f"{ENV_PREFIX}LOG_FORMAT", "text"),
            profile_server_enabled=_env_bool(f"{ENV_PREFIX}PROFILE_SERVER_ENABLED", False),
            profile_server_addr=os.getenv(f"{ENV_PREFIX}PROFILE_SERVER_ADDR", DEFAULT_PROFILE_ADDR),
            metrics_interval_seconds=float(
                os.getenv(
                    f"{ENV_PREFIX}METRICS_INTERVAL_SECONDS",
                    str(DEFAULT_MEMSTATS_INTERVAL_SECONDS),
                )
            ),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.kill_timeout_seconds <= 0:
            errors.append("kill_timeout_seconds must be positive")

        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"unknown log_level: {self.log_level}")

        if self.metrics_interval_seconds <= 0:
            errors.append("metrics_interval_seconds must be positive")

        return errors


__all__ = [
    "ServiceState",
    "ShutdownOutcome",
    "ServiceConfig",
]
