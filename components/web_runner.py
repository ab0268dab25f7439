"""
Components - Threaded Web Server.

============================================================
RESPONSIBILITY
============================================================
Runs an aiohttp application on a private event loop in a daemon
thread, so HTTP components fit the synchronous lifecycle contract.

- start() returns once the socket is bound (or raises StartError)
- stop() closes connections gracefully and joins the thread
- kill() stops the loop without waiting, and may run while a
  stop() is still in flight

============================================================
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import List, Optional, Tuple

from aiohttp import web

from core.exceptions import StartError


logger = logging.getLogger(__name__)


BIND_TIMEOUT_SECONDS = 10.0


def parse_addr(addr: str) -> Tuple[str, int]:
    """
    Split a `host:port` address.

    An empty host binds every interface: ":8081" -> ("0.0.0.0", 8081).
    """
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid address (expected host:port): {addr}")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


class ThreadedWebServer:
    """One aiohttp application served from its own thread."""

    def __init__(self, name: str = "web"):
        self.name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._runner: Optional[web.AppRunner] = None
        self._thread: Optional[threading.Thread] = None
        self._stopping: Optional[concurrent.futures.Future] = None
        self.addresses: List[Tuple] = []

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> Optional[int]:
        """First bound port, useful when binding port 0."""
        if not self.addresses:
            return None
        return self.addresses[0][1]

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    def start(self, app: web.Application, addr: str) -> None:
        host, port = parse_addr(addr)
        ready = threading.Event()
        errors: List[BaseException] = []

        def serve() -> None:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._loop = loop
            try:
                runner = web.AppRunner(app)
                loop.run_until_complete(runner.setup())
                site = web.TCPSite(runner, host, port)
                loop.run_until_complete(site.start())
                self._runner = runner
                self.addresses = list(runner.addresses)
                ready.set()
                loop.run_forever()
            except Exception as e:
                errors.append(e)
                ready.set()
            finally:
                loop.close()
                logger.debug(f"Web server loop closed | server={self.name}")

        self._thread = threading.Thread(target=serve, name=f"{self.name}-server", daemon=True)
        self._thread.start()

        if not ready.wait(BIND_TIMEOUT_SECONDS):
            raise StartError(
                message=f"Timed out binding {addr}",
                component_name=self.name,
            )
        if errors:
            raise StartError(
                message=f"Failed to bind {addr}: {errors[0]}",
                component_name=self.name,
                cause=errors[0],
            ) from errors[0]

        logger.info(f"Web server listening | server={self.name} | addresses={self.addresses}")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Close gracefully and wait for the server thread to finish."""
        loop, runner = self._loop, self._runner
        if loop is None or runner is None or not self.running:
            return

        self._stopping = asyncio.run_coroutine_threadsafe(runner.cleanup(), loop)
        try:
            self._stopping.result(timeout)
        except concurrent.futures.CancelledError:
            logger.warning(f"Web server stop interrupted by kill | server={self.name}")
        finally:
            self._stopping = None
            self._halt(loop)

        if self._thread is not None:
            self._thread.join(timeout)

    def kill(self) -> None:
        """Stop the event loop immediately without draining connections."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        stopping = self._stopping
        if stopping is not None:
            stopping.cancel()
        self._halt(loop)

    @staticmethod
    def _halt(loop: asyncio.AbstractEventLoop) -> None:
        try:
            loop.call_soon_threadsafe(loop.stop)
        except RuntimeError:
            # Loop already closed.
            pass


__all__ = [
    "ThreadedWebServer",
    "parse_addr",
]
