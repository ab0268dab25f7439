"""
Components Package.

Ordinary components implementing the lifecycle contract:

- log_config: process logging from command line flags
- signal_watcher: OS signals -> handler callbacks, shutdown watcher
- profile_server: diagnostic HTTP endpoints
- runtime_metrics: periodic runtime statistics
- http_service: aiohttp application built from route handlers
"""

from .log_config import LogConfigComponent
from .signal_watcher import (
    SHUTDOWN_SIGNALS,
    SignalWatcher,
    new_signal_watcher,
    new_shutdown_watcher,
    shutdown_handler,
    with_shutdown_watcher,
)
from .runtime_metrics import MetricsRegistry, RuntimeMetricsComponent
from .profile_server import ProfileServer
from .http_service import (
    HttpServiceComponent,
    RouteHandler,
    new_http_service,
    with_addr,
    with_handler,
)
from .web_runner import ThreadedWebServer, parse_addr

__all__ = [
    "LogConfigComponent",
    "SHUTDOWN_SIGNALS",
    "SignalWatcher",
    "new_signal_watcher",
    "new_shutdown_watcher",
    "shutdown_handler",
    "with_shutdown_watcher",
    "MetricsRegistry",
    "RuntimeMetricsComponent",
    "ProfileServer",
    "HttpServiceComponent",
    "RouteHandler",
    "new_http_service",
    "with_addr",
    "with_handler",
    "ThreadedWebServer",
    "parse_addr",
]
