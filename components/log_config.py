"""
Components - Log Configuration.

Global component that configures process logging from command line
flags before any command handler runs.
"""

import logging
from typing import Optional, TextIO

from core.context import ExecutionContext
from core.log import LOG_FORMATS, setup_logging
from orchestrator.cli import Command


logger = logging.getLogger(__name__)


class LogConfigComponent:
    """
    Adds persistent -v/--log-verbose and --log-format flags; start()
    applies them.
    """

    def __init__(
        self,
        level: str = "INFO",
        log_format: str = "text",
        verbose: bool = False,
        stream: Optional[TextIO] = None,
    ):
        self.level = level
        self.log_format = log_format
        self.verbose = verbose
        self.stream = stream

    def command_initialize(self, cmd: Command) -> None:
        cmd.add_argument(
            "-v", "--log-verbose",
            action="store_true",
            default=self.verbose,
            persistent=True,
            bind=lambda value: setattr(self, "verbose", value),
            help="Set logging level to verbose (debug)",
        )
        cmd.add_argument(
            "--log-format",
            choices=list(LOG_FORMATS),
            default=self.log_format,
            persistent=True,
            bind=lambda value: setattr(self, "log_format", value),
            help=f"Logging format (default: {self.log_format})",
        )

    @property
    def effective_level(self) -> str:
        return "DEBUG" if self.verbose else self.level

    def start(self, ctx: ExecutionContext) -> None:
        setup_logging(level=self.effective_level, log_format=self.log_format, stream=self.stream)
        logger.debug(f"Logging configured | level={self.effective_level} | format={self.log_format}")

    def stop(self) -> None:
        pass

    def kill(self) -> None:
        pass


__all__ = ["LogConfigComponent"]
