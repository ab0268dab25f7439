"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command tree for service processes, built on argparse.

- A Command owns arguments, sub-commands and run hooks
- Components register flags through the CommandInitializer
  capability before anything starts
- Persistent arguments are inherited by every sub-command

============================================================
HOOK ORDER
============================================================
    persistent_pre_run   (nearest, walking up from the target)
    pre_run
    run
    post_run
    persistent_post_run  (nearest, walking up from the target)

An exception raised by a hook aborts the remaining hooks and
propagates out of execute(). Rejected arguments raise
CommandLineError; --help prints usage and returns 0.

============================================================
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from core.exceptions import CommandLineError

from .component import initialize_command


logger = logging.getLogger(__name__)


Hook = Callable[["Command", argparse.Namespace], Optional[int]]

_COMMAND_DEST = "_command"


class _CommandParser(argparse.ArgumentParser):
    """ArgumentParser that raises on bad input instead of exiting."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        raise CommandLineError(
            message=f"{self.prog}: {message}",
            context={"prog": self.prog},
        )


@dataclass
class _Argument:
    flags: Tuple[str, ...]
    kwargs: Dict[str, Any]
    persistent: bool = False
    bind: Optional[Callable[[Any], None]] = None
    dest: Optional[str] = field(default=None)


class Command:
    """
    A named command with optional sub-commands.

    Example:
        cmd = Command("serve", "Run the HTTP service", http_component)
        cmd.add_argument("--workers", type=int, default=4,
                         bind=lambda v: setattr(http_component, "workers", v))
        root.add_command(cmd)
        root.execute(["serve", "--workers", "8"])
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *initializers: object,
        long_description: Optional[str] = None,
    ):
        self.name = name
        self.description = description
        self.long_description = long_description
        self.parent: Optional["Command"] = None
        self.commands: List["Command"] = []

        self.persistent_pre_run: Optional[Hook] = None
        self.pre_run: Optional[Hook] = None
        self.run: Optional[Hook] = None
        self.post_run: Optional[Hook] = None
        self.persistent_post_run: Optional[Hook] = None

        self._arguments: List[_Argument] = []
        self._parser: Optional[argparse.ArgumentParser] = None

        for initializer in initializers:
            initialize_command(initializer, self)

    # --------------------------------------------------------
    # Composition
    # --------------------------------------------------------

    def add_argument(
        self,
        *flags: str,
        persistent: bool = False,
        bind: Optional[Callable[[Any], None]] = None,
        **kwargs: Any,
    ) -> None:
        """
        Register an argument.

        Args:
            flags: argparse option strings
            persistent: Inherit the argument in every sub-command
            bind: Called with the parsed value before any hook runs
            kwargs: Passed through to argparse
        """
        self._arguments.append(_Argument(flags=flags, kwargs=kwargs, persistent=persistent, bind=bind))

    def add_command(self, *cmds: "Command") -> None:
        for cmd in cmds:
            cmd.parent = self
            self.commands.append(cmd)

    def find_command(self, name: str) -> Optional["Command"]:
        for cmd in self.commands:
            if cmd.name == name:
                return cmd
        return None

    def lineage(self) -> List["Command"]:
        """Commands from the root down to self."""
        chain = []
        cmd: Optional[Command] = self
        while cmd is not None:
            chain.append(cmd)
            cmd = cmd.parent
        return list(reversed(chain))

    def _inherited_arguments(self) -> List[_Argument]:
        inherited = []
        for ancestor in self.lineage()[:-1]:
            inherited.extend(a for a in ancestor._arguments if a.persistent)
        return inherited

    # --------------------------------------------------------
    # Parser
    # --------------------------------------------------------

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the argparse parser tree rooted at this command."""
        parser = _CommandParser(
            prog=self.name,
            description=self.long_description or self.description,
        )
        self._populate(parser)
        return parser

    def _populate(self, parser: argparse.ArgumentParser) -> None:
        self._parser = parser
        parser.set_defaults(**{_COMMAND_DEST: self})

        for argument in self._arguments:
            action = parser.add_argument(*argument.flags, **argument.kwargs)
            argument.dest = action.dest

        # Inherited persistent arguments must not clobber values parsed
        # at an ancestor's level.
        for argument in self._inherited_arguments():
            kwargs = dict(argument.kwargs)
            kwargs["default"] = argparse.SUPPRESS
            parser.add_argument(*argument.flags, **kwargs)

        if self.commands:
            subparsers = parser.add_subparsers(title="commands", metavar="COMMAND")
            for cmd in self.commands:
                subparser = subparsers.add_parser(
                    cmd.name,
                    help=cmd.description,
                    description=cmd.long_description or cmd.description,
                )
                cmd._populate(subparser)

    # --------------------------------------------------------
    # Execution
    # --------------------------------------------------------

    def execute(self, argv: Optional[Sequence[str]] = None) -> int:
        """
        Parse argv, bind values and run the selected command.

        Returns:
            Exit code returned by the command's run hook (default 0)

        Raises:
            CommandLineError: If argv is rejected by the parser
        """
        parser = self.build_parser()
        try:
            args = parser.parse_args(argv)
        except SystemExit as e:
            # --help and --version exit cleanly after printing.
            if e.code in (0, None):
                return 0
            raise
        target: Command = getattr(args, _COMMAND_DEST, self)

        for cmd in target.lineage():
            for argument in cmd._arguments:
                if argument.bind is not None and hasattr(args, argument.dest):
                    argument.bind(getattr(args, argument.dest))

        if target.run is None:
            (target._parser or parser).print_help()
            return 0

        logger.debug(f"Executing command: {target.name}")

        hook = target._nearest("persistent_pre_run")
        if hook is not None:
            hook(target, args)
        if target.pre_run is not None:
            target.pre_run(target, args)

        code = target.run(target, args)

        if target.post_run is not None:
            target.post_run(target, args)
        hook = target._nearest("persistent_post_run")
        if hook is not None:
            hook(target, args)

        return code if code is not None else 0

    def _nearest(self, attr: str) -> Optional[Hook]:
        cmd: Optional[Command] = self
        while cmd is not None:
            hook = getattr(cmd, attr)
            if hook is not None:
                return hook
            cmd = cmd.parent
        return None

    def __repr__(self) -> str:
        return f"Command({self.name!r}, commands={[c.name for c in self.commands]!r})"


def new_command(name: str, description: str, *initializers: object) -> Command:
    """Create a command and apply each initializer's flags to it."""
    return Command(name, description, *initializers)


__all__ = [
    "Command",
    "Hook",
    "new_command",
]
