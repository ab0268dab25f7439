"""
Components - HTTP Service.

============================================================
RESPONSIBILITY
============================================================
Serves an aiohttp application assembled from route handlers.

- Each handler installs its routes via setup_routes(app)
- Handlers that are also components are started before the
  server binds and stopped after it closes (reverse order)
- Handlers that initialize commands get to register flags

============================================================
"""

import logging
from typing import Callable, List, Optional, Protocol, runtime_checkable

from aiohttp import web

from core.constants import DEFAULT_HTTP_ADDR
from core.context import ExecutionContext
from orchestrator.cli import Command
from orchestrator.component import Component, initialize_command

from .web_runner import ThreadedWebServer


logger = logging.getLogger(__name__)


@runtime_checkable
class RouteHandler(Protocol):
    """Anything that can add routes to an aiohttp application."""

    def setup_routes(self, app: web.Application) -> None:
        ...


class HttpServiceComponent:
    """Component serving route handlers on one address."""

    def __init__(self, addr: str = DEFAULT_HTTP_ADDR):
        self.addr = addr
        self.handlers: List[RouteHandler] = []
        self.server: Optional[ThreadedWebServer] = None

    def _components(self) -> List[Component]:
        return [h for h in self.handlers if isinstance(h, Component)]

    def command_initialize(self, cmd: Command) -> None:
        for handler in self.handlers:
            initialize_command(handler, cmd)
        cmd.add_argument(
            "--http-addr",
            default=self.addr,
            metavar="ADDR",
            bind=lambda value: setattr(self, "addr", value),
            help=f"Network address and port to listen for HTTP requests on (default: {self.addr})",
        )

    def build_app(self) -> web.Application:
        app = web.Application()
        for handler in self.handlers:
            handler.setup_routes(app)
        return app

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    def start(self, ctx: ExecutionContext) -> None:
        for component in self._components():
            component.start(ctx)
        self.server = ThreadedWebServer(name="http")
        self.server.start(self.build_app(), self.addr)
        logger.debug(f"HTTP service started | addr={self.addr} | handlers={len(self.handlers)}")

    def stop(self) -> None:
        if self.server is not None:
            self.server.stop()
            logger.debug("HTTP service stopped")
        for component in reversed(self._components()):
            component.stop()

    def kill(self) -> None:
        if self.server is not None:
            self.server.kill()
        for component in reversed(self._components()):
            component.kill()


# ============================================================
# CONSTRUCTION
# ============================================================

HttpServiceOption = Callable[[HttpServiceComponent], None]


def new_http_service(*options: HttpServiceOption) -> HttpServiceComponent:
    service = HttpServiceComponent()
    for option in options:
        option(service)
    return service


def with_handler(handler: RouteHandler) -> HttpServiceOption:
    def option(service: HttpServiceComponent) -> None:
        service.handlers.append(handler)
    return option


def with_addr(addr: str) -> HttpServiceOption:
    def option(service: HttpServiceComponent) -> None:
        service.addr = addr
    return option


__all__ = [
    "RouteHandler",
    "HttpServiceComponent",
    "new_http_service",
    "with_handler",
    "with_addr",
]
