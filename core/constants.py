"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines all system-wide constants.

- Provides single source of truth for magic values
- Documents the externally observable exit codes
- Prevents hardcoding throughout codebase

============================================================
"""

# ============================================================
# PROCESS EXIT CODES
# ============================================================

EXIT_CODE_CLEAN = 0
"""Clean, signal-triggered shutdown."""

EXIT_CODE_HANDLER_START_FAILURE = -1
"""The command handler's start routine failed."""

EXIT_CODE_SERVICE_FAILURE = -2
"""Service construction or command execution failed."""

# ============================================================
# SHUTDOWN
# ============================================================

DEFAULT_KILL_TIMEOUT_SECONDS = 30.0
"""Time to wait for ordered stop before escalating to kill."""

SHUTDOWN_SIGNAL_NAMES = ("SIGHUP", "SIGTERM", "SIGKILL", "SIGINT")
"""Default signals that trigger the shutdown path."""

SHUTDOWN_WATCHER_NAME = "shutdown-watcher"

# ============================================================
# COMPOSITION
# ============================================================

ANONYMOUS_NAME_PREFIX = "__anonymous"
"""Prefix for names synthesized when a component is added unnamed."""

# ============================================================
# DIAGNOSTICS
# ============================================================

DEFAULT_PROFILE_ADDR = ":8081"
DEFAULT_HTTP_ADDR = ":8080"

DEFAULT_MEMSTATS_INTERVAL_SECONDS = 5.0
DEFAULT_GCSTATS_INTERVAL_SECONDS = 5.0
