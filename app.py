#!/usr/bin/env python3
"""
Demo Service - Main Application Entry Point.

============================================================
SINGLE ENTRYPOINT
============================================================
Wires the standard components into one supervised service.

- Global: logging, shutdown watcher, profile server, runtime metrics
- `serve` command: HTTP service with a status endpoint

============================================================
USAGE
============================================================
Direct execution:
    python app.py serve --http-addr :8080

With diagnostics:
    python app.py --profile-server-enable serve

Environment-based configuration:
    SERVICE_LOG_FORMAT=json SERVICE_KILL_TIMEOUT_SECONDS=10 python app.py serve

Stop with SIGINT / SIGTERM; exit code 0 on clean shutdown.

============================================================
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from aiohttp import web

from core.context import ExecutionContext
from orchestrator import (
    ServiceConfig,
    get_service,
    new_composite_component,
    service_main,
    with_command_handler,
    with_global,
    with_long_description,
    with_named_component,
)
from components import (
    LogConfigComponent,
    ProfileServer,
    RuntimeMetricsComponent,
    new_http_service,
    with_handler,
    with_shutdown_watcher,
)
from components.profile_server import json_response


logger = logging.getLogger(__name__)


SERVICE_NAME = "demo-service"


# ============================================================
# STATUS HANDLER
# ============================================================

class StatusHandler:
    """
    Serves GET /status.

    Also a component: start() records when the service came up and
    which Service is running it.
    """

    def __init__(self):
        self.started_at: Optional[float] = None
        self.service_name: Optional[str] = None

    def setup_routes(self, app: web.Application) -> None:
        app.router.add_get("/status", self.status)

    async def status(self, request: web.Request) -> web.Response:
        uptime = time.monotonic() - self.started_at if self.started_at else 0.0
        return json_response({
            "service": self.service_name,
            "status": "running",
            "uptime_seconds": round(uptime, 3),
        })

    def start(self, ctx: ExecutionContext) -> None:
        self.started_at = time.monotonic()
        svc = get_service(ctx)
        self.service_name = svc.name if svc is not None else None

    def stop(self) -> None:
        logger.info("Status handler stopped")

    def kill(self) -> None:
        pass


# ============================================================
# MAIN
# ============================================================

def main() -> None:
    config = ServiceConfig.from_env()

    global_component = new_composite_component(
        with_named_component(
            "log-config",
            LogConfigComponent(level=config.log_level, log_format=config.log_format),
        ),
        with_shutdown_watcher(),
        with_named_component(
            "profile-server",
            ProfileServer(addr=config.profile_server_addr, enable=config.profile_server_enabled),
        ),
        with_named_component(
            "runtime-metrics",
            RuntimeMetricsComponent(
                memstats_interval=config.metrics_interval_seconds,
                gcstats_interval=config.metrics_interval_seconds,
            ),
        ),
    )

    service_main(
        SERVICE_NAME,
        "Demo service supervised by the lifecycle layer",
        with_long_description(
            "Runs an HTTP service as the main loop. The process-wide components "
            "(logging, signal handling, diagnostics) start before every command."
        ),
        with_global(global_component),
        with_command_handler(
            "serve",
            "Serve HTTP requests until signaled",
            new_http_service(with_handler(StatusHandler())),
        ),
        config=config,
    )


if __name__ == "__main__":
    main()
