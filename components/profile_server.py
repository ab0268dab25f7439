"""
Components - Profile Server.

============================================================
RESPONSIBILITY
============================================================
Optional diagnostic HTTP server for a running service.

ENDPOINTS (all read-only):
- GET /health         liveness
- GET /debug/vars     metrics registry snapshot
- GET /debug/threads  current stack of every thread

Disabled unless --profile-server-enable is given.

============================================================
"""

import json
import logging
import sys
import threading
import traceback
from typing import Any, Dict, Optional

from aiohttp import web

from core.constants import DEFAULT_PROFILE_ADDR
from core.context import ExecutionContext
from core.log import log_event
from orchestrator.cli import Command

from .runtime_metrics import MetricsRegistry
from .web_runner import ThreadedWebServer


logger = logging.getLogger(__name__)


def json_response(data: Any, status: int = 200) -> web.Response:
    """Create JSON response."""
    return web.Response(
        text=json.dumps(data, indent=2, default=str),
        status=status,
        content_type="application/json",
    )


# ============================================================
# HANDLERS
# ============================================================

class DiagnosticsAPI:
    """Read-only diagnostic endpoints."""

    def __init__(self, registry: MetricsRegistry):
        self._registry = registry

    async def health(self, request: web.Request) -> web.Response:
        """GET /health"""
        return json_response({"status": "ok"})

    async def debug_vars(self, request: web.Request) -> web.Response:
        """GET /debug/vars"""
        return json_response(self._registry.snapshot())

    async def debug_threads(self, request: web.Request) -> web.Response:
        """GET /debug/threads"""
        names = {t.ident: t.name for t in threading.enumerate()}
        threads: Dict[str, Any] = {}
        for ident, frame in sys._current_frames().items():
            threads[names.get(ident, str(ident))] = traceback.format_stack(frame)
        return json_response({"count": len(threads), "threads": threads})


def create_diagnostics_app(registry: MetricsRegistry) -> web.Application:
    """Create the diagnostic application."""
    api = DiagnosticsAPI(registry)
    app = web.Application()
    app.router.add_get("/health", api.health)
    app.router.add_get("/debug/vars", api.debug_vars)
    app.router.add_get("/debug/threads", api.debug_threads)
    return app


# ============================================================
# COMPONENT
# ============================================================

class ProfileServer:
    """Component serving the diagnostic application when enabled."""

    def __init__(
        self,
        addr: str = "",
        enable: bool = False,
        registry: Optional[MetricsRegistry] = None,
    ):
        self.addr = addr or DEFAULT_PROFILE_ADDR
        self.enable = enable
        self.registry = registry or MetricsRegistry.instance()
        self.server: Optional[ThreadedWebServer] = None

    def command_initialize(self, cmd: Command) -> None:
        cmd.add_argument(
            "--profile-server-enable",
            action="store_true",
            default=self.enable,
            persistent=True,
            bind=lambda value: setattr(self, "enable", value),
            help="If enabled, start an HTTP profile server for diagnostics",
        )
        cmd.add_argument(
            "--profile-server-addr",
            default=self.addr,
            metavar="ADDR",
            persistent=True,
            bind=lambda value: setattr(self, "addr", value),
            help=f"Address to bind the HTTP profile server to, if enabled (default: {self.addr})",
        )

    def start(self, ctx: ExecutionContext) -> None:
        if not self.enable:
            return
        log_event(logger, logging.INFO, action="profile_server", status="start", addr=self.addr)
        self.server = ThreadedWebServer(name="profile")
        self.server.start(create_diagnostics_app(self.registry), self.addr)

    def stop(self) -> None:
        if self.server is not None:
            self.server.stop()
            log_event(logger, logging.INFO, action="profile_server", status="done")

    def kill(self) -> None:
        if self.server is not None:
            self.server.kill()


__all__ = [
    "DiagnosticsAPI",
    "ProfileServer",
    "create_diagnostics_app",
    "json_response",
]
