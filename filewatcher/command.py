"""
Parsing and running the user command.

The command string is split with POSIX shell rules and run directly,
without a shell, in the project root. The child inherits stdout and
stderr so build output streams straight to the terminal.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from filewatcher.errors import CommandParseError, CommandSpawnError, EmptyCommand

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitOutcome:
    """Result of one finished command run."""

    returncode: Optional[int]
    signal: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        if self.success:
            return "succeeded"
        if self.returncode is None:
            if self.signal is not None:
                return f"was terminated by signal {self.signal}"
            return "was terminated abnormally"
        return f"exited with code {self.returncode}"

    @classmethod
    def from_returncode(cls, returncode: int) -> "ExitOutcome":
        # Popen reports death by signal N as -N on POSIX.
        if returncode < 0:
            return cls(returncode=None, signal=-returncode)
        return cls(returncode=returncode)


def split_command(command: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Split a shell-style command string into program and arguments.

    Raises:
        CommandParseError: On unbalanced quotes or a trailing escape.
        EmptyCommand: If the string holds no words.
    """
    try:
        parts = shlex.split(command, posix=True)
    except ValueError as e:
        raise CommandParseError(command, str(e)) from e
    if not parts:
        raise EmptyCommand()
    return parts[0], tuple(parts[1:])


def execute(program: str, args: Sequence[str], working_dir) -> ExitOutcome:
    """
    Run ``program`` with ``args`` in ``working_dir`` and wait for it.

    Output is not captured. Blocks until the child exits.

    Raises:
        CommandSpawnError: If the process cannot be started.
    """
    try:
        proc = subprocess.Popen([program, *args], cwd=working_dir)
    except OSError as e:
        raise CommandSpawnError(program, e) from e
    return ExitOutcome.from_returncode(proc.wait())


@dataclass(frozen=True)
class CommandSpec:
    """A parsed command: program name plus ordered arguments."""

    program: str
    args: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, command: str) -> "CommandSpec":
        program, args = split_command(command)
        return cls(program, args)

    @property
    def argv(self) -> Tuple[str, ...]:
        return (self.program, *self.args)

    def execute(self, working_dir) -> ExitOutcome:
        log.debug(f"Spawning {self.argv} in {working_dir}")
        return execute(self.program, self.args, working_dir)

    def __str__(self):
        return shlex.join(self.argv)
