"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
The Service: root command and supervisor of a service process.

- Starts the process-wide Global component before every command
  and stops it afterwards
- Runs a command handler's blocking start() on a worker thread
  while the main thread waits for an exit code
- Drives ordered stop with a timeout, escalating to kill
- Is bound into every execution context it creates, so nested
  components can find it and request an exit

============================================================
STATE MACHINE (per command invocation)
============================================================
    IDLE -> GLOBAL_STARTING -> HANDLER_RUNNING -> STOPPING
         -> STOPPED -> GLOBAL_STOPPING -> IDLE

============================================================
"""

import argparse
import logging
import queue
import sys
import threading
from typing import Callable, List, Optional, Sequence

from core.constants import (
    EXIT_CODE_CLEAN,
    EXIT_CODE_HANDLER_START_FAILURE,
    EXIT_CODE_SERVICE_FAILURE,
)
from core.context import ExecutionContext
from core.exceptions import (
    ConfigurationError,
    HandlerStartError,
    LifecycleException,
    ServiceError,
)
from core.log import log_event

from .cli import Command
from .component import Component, initialize_command
from .composite import CompositeComponent
from .models import ServiceConfig, ServiceState, ShutdownOutcome


logger = logging.getLogger(__name__)


# ============================================================
# CONTEXT BINDING
# ============================================================

_SERVICE_KEY = object()


def with_service_context(ctx: ExecutionContext, svc: "Service") -> ExecutionContext:
    """Return a derived context with svc bound as a value."""
    return ctx.with_value(_SERVICE_KEY, svc)


def get_service(ctx: Optional[ExecutionContext]) -> Optional["Service"]:
    """Return the Service bound to ctx, or None if none is bound."""
    if ctx is None:
        return None
    svc = ctx.value(_SERVICE_KEY)
    return svc if isinstance(svc, Service) else None


# ============================================================
# SERVICE
# ============================================================

class Service:
    """
    Root command and entry point for a persistent service process.

    One Service per process; several may coexist in tests because
    the only way to reach one is through an execution context.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        config: Optional[ServiceConfig] = None,
    ):
        """
        Args:
            name: Identifier used in command line help and logging
            description: One-line description for help output
            config: Service configuration (default: built-in defaults)
        """
        self.name = name
        self.command = Command(name, description)
        self.config = config or ServiceConfig()
        self.global_component: Optional[Component] = None
        self.exit_code: Optional[int] = None

        # Single slot: a second request blocks until the first is consumed.
        self._exit: "queue.Queue[int]" = queue.Queue(maxsize=1)
        self._state = ServiceState.IDLE
        self._state_lock = threading.Lock()

        self.command.persistent_pre_run = self._persistent_pre_run
        self.command.persistent_post_run = self._persistent_post_run

    # --------------------------------------------------------
    # Properties
    # --------------------------------------------------------

    @property
    def state(self) -> ServiceState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: ServiceState) -> None:
        with self._state_lock:
            previous, self._state = self._state, state
        logger.debug(f"Service state: {previous.value} -> {state.value} | service={self.name}")

    def context(self, parent: Optional[ExecutionContext] = None) -> ExecutionContext:
        """Return an execution context bound to this service."""
        return with_service_context(parent or ExecutionContext.background(), self)

    # --------------------------------------------------------
    # Global component
    # --------------------------------------------------------

    def start(self, ctx: ExecutionContext) -> None:
        """Start the Global component, if any."""
        if self.global_component is not None:
            log_event(logger, logging.DEBUG, action="service_start", status="starting_global")
            self.global_component.start(ctx)

    def stop(self) -> None:
        """Stop the Global component, if any."""
        if self.global_component is not None:
            log_event(logger, logging.DEBUG, action="service_stop", status="stopping_global")
            self.global_component.stop()

    def find_component(self, name: str) -> Optional[Component]:
        """Look up a named child of a composite Global component."""
        if isinstance(self.global_component, CompositeComponent):
            return self.global_component.find_component(name)
        return None

    def _persistent_pre_run(self, cmd: Command, args: argparse.Namespace) -> None:
        self._set_state(ServiceState.GLOBAL_STARTING)
        try:
            self.start(self.context())
        except Exception as e:
            log_event(
                logger, logging.ERROR,
                "Error starting global component",
                action="service_global_start",
                status="error",
                error=e,
            )
            self._set_state(ServiceState.IDLE)
            raise

    def _persistent_post_run(self, cmd: Command, args: argparse.Namespace) -> None:
        self._set_state(ServiceState.GLOBAL_STOPPING)
        try:
            self.stop()
        except Exception as e:
            log_event(
                logger, logging.ERROR,
                "Error stopping global component",
                action="service_global_stop",
                status="error",
                error=e,
            )
            raise
        finally:
            self._set_state(ServiceState.IDLE)

    # --------------------------------------------------------
    # Exit channel
    # --------------------------------------------------------

    def exit(self, code: int) -> None:
        """
        Request process exit with code.

        Blocks while an earlier request has not been consumed yet;
        treat it as an at-most-once action per invocation.
        """
        self._exit.put(code)

    def wait_for_exit(self, timeout: Optional[float] = None) -> int:
        """
        Block until an exit code is posted and return it.

        Raises:
            queue.Empty: If timeout elapses first
        """
        return self._exit.get(timeout=timeout)

    # --------------------------------------------------------
    # Execution
    # --------------------------------------------------------

    def execute(self, argv: Optional[Sequence[str]] = None) -> int:
        """
        Run the command line; return the command's exit code.

        Raises:
            LifecycleException: Unchanged, if a hook raised one
            ServiceError: Wrapping any other failure
        """
        self.exit_code = None
        try:
            code = self.command.execute(argv)
        except LifecycleException:
            raise
        except Exception as e:
            raise ServiceError(
                message=f"Command execution failed: {e}",
                context={"service": self.name},
                cause=e,
            ) from e
        if self.exit_code is None:
            self.exit_code = code
        return self.exit_code

    def __repr__(self) -> str:
        return f"Service(name={self.name!r}, state={self.state.value})"


# ============================================================
# COMMAND HANDLER BINDING
# ============================================================

class CommandHandlerBinding:
    """
    Binds a handler component to a command as its main loop.

    run(): start the handler on a worker thread, block for an exit code.
    post_run(): stop the handler; kill it if stop overruns the timeout.
    """

    def __init__(self, svc: Service, handler: Component, kill_timeout: float):
        self.svc = svc
        self.handler = handler
        self.kill_timeout = kill_timeout
        self.worker: Optional[threading.Thread] = None
        self.stopper: Optional[threading.Thread] = None

    def set_kill_timeout(self, seconds: Optional[float]) -> None:
        if seconds is not None:
            self.kill_timeout = seconds

    def _run_handler(self, ctx: ExecutionContext) -> None:
        try:
            self.handler.start(ctx)
        except Exception as e:
            error = e if isinstance(e, LifecycleException) else HandlerStartError(
                message=f"Command handler start failed: {e}",
                cause=e,
            )
            log_event(
                logger, logging.ERROR,
                "Error starting command handler",
                action="command_handler",
                status="start_error",
                error=error.to_log_format(),
            )
            self.svc.exit(EXIT_CODE_HANDLER_START_FAILURE)

    def run(self, cmd: Command, args: argparse.Namespace) -> int:
        log_event(logger, logging.INFO, action="command_handler", status="start", command=cmd.name)

        self.svc._set_state(ServiceState.HANDLER_RUNNING)
        ctx = self.svc.context()
        self.worker = threading.Thread(
            target=self._run_handler,
            args=(ctx,),
            name=f"{cmd.name}-handler",
            daemon=True,
        )
        self.worker.start()

        code = self.svc.wait_for_exit()
        self.svc.exit_code = code
        self.svc._set_state(ServiceState.STOPPING)

        log_event(logger, logging.INFO, action="command_handler", status="done", exit_code=code)
        return code

    def _stop_handler(self, done: threading.Event, failed: List[BaseException]) -> None:
        try:
            self.handler.stop()
        except Exception as e:
            failed.append(e)
            log_event(
                logger, logging.ERROR,
                "Error stopping command handler",
                action="command_handler",
                status="stop_error",
                error=e,
            )
        finally:
            done.set()

    def post_run(self, cmd: Optional[Command] = None, args: Optional[argparse.Namespace] = None) -> ShutdownOutcome:
        if self.svc.state != ServiceState.STOPPING:
            self.svc._set_state(ServiceState.STOPPING)

        done = threading.Event()
        failed: List[BaseException] = []
        self.stopper = threading.Thread(
            target=self._stop_handler,
            args=(done, failed),
            name="handler-stop",
            daemon=True,
        )
        self.stopper.start()

        if done.wait(self.kill_timeout):
            outcome = ShutdownOutcome.STOP_FAILED if failed else ShutdownOutcome.CLEAN
        else:
            log_event(
                logger, logging.WARNING,
                "Ordered stop timed out, killing",
                action="command_handler",
                status="stop_timeout",
                timeout=self.kill_timeout,
            )
            try:
                self.handler.kill()
            except Exception as e:
                log_event(
                    logger, logging.ERROR,
                    "Error killing command handler",
                    action="command_handler",
                    status="kill_error",
                    error=e,
                )
            outcome = ShutdownOutcome.KILLED

        self.svc._set_state(ServiceState.STOPPED)
        return outcome


# ============================================================
# SERVICE OPTIONS
# ============================================================

ServiceOption = Callable[[Service], None]


def new_service(
    name: str,
    description: str,
    *options: ServiceOption,
    config: Optional[ServiceConfig] = None,
) -> Service:
    """
    Construct a Service and apply options in order.

    Raises:
        ConfigurationError: If the configuration is invalid or an
            option fails
    """
    svc = Service(name, description, config=config)

    for option in options:
        try:
            option(svc)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                message=f"Service option failed: {e}",
                context={"service": name},
                cause=e,
            ) from e

    errors = svc.config.validate()
    if errors:
        raise ConfigurationError(
            message=f"Invalid configuration: {', '.join(errors)}",
            context={"service": name},
        )

    initialize_command(svc.global_component, svc.command)

    return svc


def with_command(*cmds: Command) -> ServiceOption:
    def option(svc: Service) -> None:
        svc.command.add_command(*cmds)
    return option


def with_long_description(description: str) -> ServiceOption:
    def option(svc: Service) -> None:
        svc.command.long_description = description
    return option


def with_global(component: Component) -> ServiceOption:
    def option(svc: Service) -> None:
        svc.global_component = component
    return option


def with_service_config(config: ServiceConfig) -> ServiceOption:
    def option(svc: Service) -> None:
        svc.config = config
    return option


def positive_seconds(value: str) -> float:
    """argparse type for durations that must be greater than zero."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    if not seconds > 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value!r}")
    return seconds


def with_command_handler(
    name: str,
    description: str,
    handler: Component,
    kill_timeout: Optional[float] = None,
) -> ServiceOption:
    """
    Add a command whose main loop is handler.start().

    handler.start() runs on a worker thread and may block (e.g. a
    network server). The main thread waits for an exit code, then the
    post-run phase calls handler.stop(), escalating to handler.kill()
    if stop does not finish within the kill timeout.
    """
    def option(svc: Service) -> None:
        if kill_timeout is not None and not kill_timeout > 0:
            raise ConfigurationError(
                message=f"Kill timeout must be greater than zero for command {name}",
                config_key="kill_timeout",
                actual_value=kill_timeout,
            )
        timeout = kill_timeout if kill_timeout is not None else svc.config.kill_timeout_seconds
        binding = CommandHandlerBinding(svc, handler, timeout)

        cmd = Command(name, description, handler)
        cmd.add_argument(
            "--service-kill-timeout",
            type=positive_seconds,
            default=timeout,
            metavar="SECONDS",
            bind=binding.set_kill_timeout,
            help="Time to wait for ordered shutdown to complete before hard exit "
                 f"(default: {timeout:g})",
        )
        cmd.run = binding.run
        cmd.post_run = binding.post_run

        svc.command.add_command(cmd)
    return option


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def service_main(
    name: str,
    description: str,
    *options: ServiceOption,
    argv: Optional[Sequence[str]] = None,
    config: Optional[ServiceConfig] = None,
) -> None:
    """
    Build a service, run its command line and exit the process.

    Exit codes: 0 clean shutdown, -1 handler start failure,
    -2 construction or execution failure.

    Without an explicit config, ServiceConfig.from_env() is used.
    """
    try:
        svc = new_service(
            name,
            description,
            *options,
            config=config or ServiceConfig.from_env(),
        )
    except Exception as e:
        log_event(
            logger, logging.ERROR,
            "Failed to initialize service",
            action="main",
            status="error",
            error=e,
        )
        sys.exit(EXIT_CODE_SERVICE_FAILURE)

    try:
        code = svc.execute(argv)
    except Exception as e:
        log_event(
            logger, logging.ERROR,
            "Error executing service",
            action="main",
            status="service_error",
            error=e,
        )
        sys.exit(EXIT_CODE_SERVICE_FAILURE)

    log_event(logger, logging.INFO, action="main", status="exit", exit_code=code)
    sys.exit(code if code is not None else EXIT_CODE_CLEAN)


__all__ = [
    "Service",
    "CommandHandlerBinding",
    "ServiceOption",
    "get_service",
    "with_service_context",
    "new_service",
    "with_command",
    "with_long_description",
    "with_global",
    "with_service_config",
    "with_command_handler",
    "positive_seconds",
    "service_main",
]
