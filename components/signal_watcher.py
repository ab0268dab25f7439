"""
Components - Signal Watcher.

============================================================
RESPONSIBILITY
============================================================
Bridges OS signals into the component model.

- start() installs handlers for a set of signals and launches a
  listener thread that calls handler(ctx, signal) for each delivery
- The default shutdown watcher asks the bound Service to exit with
  code 0, or hard-exits the process when no Service is bound

============================================================
THREADING
============================================================
Python delivers signals to the main thread only, so start() must
run there (a Global component, or any composite started from the
main thread). The OS-level handler only enqueues; the handler
callback runs on the listener thread.

============================================================
"""

import functools
import logging
import os
import queue
import signal
import threading
from typing import Callable, Dict, List, Optional

from core.constants import (
    EXIT_CODE_CLEAN,
    SHUTDOWN_SIGNAL_NAMES,
    SHUTDOWN_WATCHER_NAME,
)
from core.context import ExecutionContext
from core.exceptions import StartError
from core.log import log_event
from orchestrator.composite import CompositeComponentOption, with_named_component
from orchestrator.core import get_service


logger = logging.getLogger(__name__)


SignalHandler = Callable[[ExecutionContext, signal.Signals], None]

_STOP = object()


def resolve_signals(names) -> List[signal.Signals]:
    """Map signal names to the signals this platform defines."""
    resolved = []
    for name in names:
        sig = getattr(signal, name, None)
        if sig is not None:
            resolved.append(signal.Signals(sig))
    return resolved


SHUTDOWN_SIGNALS: List[signal.Signals] = resolve_signals(SHUTDOWN_SIGNAL_NAMES)


# ============================================================
# SIGNAL WATCHER
# ============================================================

class SignalWatcher:
    """
    Component invoking a handler for every delivery of a set of signals.

    By default the listener lives as long as the process and stop()/kill()
    are no-ops. With stoppable=True, stop()/kill() restore the previous
    signal dispositions and end the listener.
    """

    def __init__(self, handler: SignalHandler, *signals: signal.Signals, stoppable: bool = False):
        self.handler = handler
        self.signals: List[signal.Signals] = list(signals) or list(SHUTDOWN_SIGNALS)
        self.stoppable = stoppable
        self.installed: List[signal.Signals] = []

        # SimpleQueue.put is reentrant, so it is safe inside a signal handler.
        self._queue: "queue.SimpleQueue[object]" = queue.SimpleQueue()
        self._previous: Dict[signal.Signals, object] = {}
        self._listener: Optional[threading.Thread] = None

    def _on_signal(self, signum: int, frame: object) -> None:
        self._queue.put(signum)

    def start(self, ctx: ExecutionContext) -> None:
        if threading.current_thread() is not threading.main_thread():
            raise StartError(
                message="Signal handlers can only be installed from the main thread",
                component_name="signal-watcher",
            )

        for sig in self.signals:
            try:
                self._previous[sig] = signal.signal(sig, self._on_signal)
                self.installed.append(sig)
            except (OSError, RuntimeError, ValueError) as e:
                # SIGKILL and friends cannot be trapped.
                log_event(
                    logger, logging.DEBUG,
                    "Signal cannot be trapped, skipping",
                    action="signal_install",
                    signal=sig.name,
                    error=e,
                )

        self._listener = threading.Thread(
            target=self._listen,
            args=(ctx,),
            name="signal-watcher",
            daemon=True,
        )
        self._listener.start()

        logger.debug(f"Signal watcher started | signals={[s.name for s in self.installed]}")

    def _listen(self, ctx: ExecutionContext) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            sig = signal.Signals(item)
            log_event(logger, logging.DEBUG, "Trapped signal", action="signal", signal=sig.name)
            try:
                self.handler(ctx, sig)
            except Exception as e:
                log_event(
                    logger, logging.ERROR,
                    "Signal handler failed",
                    action="signal",
                    signal=sig.name,
                    error=e,
                    exc_info=True,
                )

    def stop(self) -> None:
        if self.stoppable:
            self._release(wait=True)

    def kill(self) -> None:
        if self.stoppable:
            self._release(wait=False)

    def _release(self, wait: bool) -> None:
        if threading.current_thread() is threading.main_thread():
            for sig, previous in self._previous.items():
                signal.signal(sig, previous)
        else:
            logger.warning("Signal dispositions not restored: not on the main thread")
        self._previous = {}
        self.installed = []

        listener, self._listener = self._listener, None
        if listener is not None:
            self._queue.put(_STOP)
            if wait:
                listener.join()


def new_signal_watcher(handler: SignalHandler, *signals: signal.Signals) -> SignalWatcher:
    return SignalWatcher(handler, *signals)


# ============================================================
# SHUTDOWN WATCHER
# ============================================================

def shutdown_handler(
    ctx: ExecutionContext,
    sig: signal.Signals,
    hard_exit: Callable[[int], None] = os._exit,
) -> None:
    """Request exit from the bound Service; hard-exit if there is none."""
    log_event(
        logger, logging.INFO,
        "Initiating shutdown",
        action="shutdown_signal",
        status="signaled",
        signal=sig.name,
    )
    svc = get_service(ctx)
    if svc is not None:
        svc.exit(EXIT_CODE_CLEAN)
    else:
        log_event(
            logger, logging.WARNING,
            "No bound Service instance, performing hard exit",
            action="shutdown_signal",
            status="no_service",
        )
        hard_exit(EXIT_CODE_CLEAN)


def new_shutdown_watcher(
    hard_exit: Callable[[int], None] = os._exit,
    stoppable: bool = False,
) -> SignalWatcher:
    """Watcher that triggers service shutdown on SHUTDOWN_SIGNALS."""
    return SignalWatcher(
        functools.partial(shutdown_handler, hard_exit=hard_exit),
        *SHUTDOWN_SIGNALS,
        stoppable=stoppable,
    )


def with_shutdown_watcher(
    hard_exit: Callable[[int], None] = os._exit,
) -> CompositeComponentOption:
    """Composite option adding a shutdown watcher named `shutdown-watcher`."""
    return with_named_component(SHUTDOWN_WATCHER_NAME, new_shutdown_watcher(hard_exit=hard_exit))


__all__ = [
    "SHUTDOWN_SIGNALS",
    "SignalHandler",
    "SignalWatcher",
    "resolve_signals",
    "new_signal_watcher",
    "shutdown_handler",
    "new_shutdown_watcher",
    "with_shutdown_watcher",
]
