"""
Process executor for meshprobe.

Runs a CLI command to completion and hands back stdout and stderr
separately, together with the failure (if any) as a value, so callers can
build diagnostics out of all three.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from meshprobe.errors import CommandError, CommandExitError, CommandStartError


@dataclass(frozen=True)
class CommandInvocation:
    """An executable, its arguments and optional stdin text."""

    executable: str
    args: Tuple[str, ...] = ()
    stdin: str = ""

    @classmethod
    def of(cls, executable: str, *args: str, stdin: str = "") -> "CommandInvocation":
        return cls(executable=executable, args=tuple(args), stdin=stdin)

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.args]

    def with_prefix(self, prefix: Sequence[str]) -> "CommandInvocation":
        """Return a copy with global flags inserted before the arguments."""
        return CommandInvocation(self.executable, tuple(prefix) + self.args, self.stdin)


@dataclass(frozen=True)
class CommandResult:
    """Output of a finished command. Check ``error`` before trusting stdout."""

    stdout: str
    stderr: str
    error: Optional[CommandError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "CommandResult":
        """Raise the stored failure, if any; otherwise return self."""
        if self.error is not None:
            raise self.error
        return self


def run_command(
    invocation: CommandInvocation, logger: Optional[logging.Logger] = None
) -> CommandResult:
    """
    Run a command and wait for it to exit.

    Args:
        invocation: What to run; ``stdin`` is written to the process when non-empty
        logger: Where to log the call (default: the ``meshprobe.process`` logger)

    Returns:
        CommandResult. A non-zero exit or a failure to start is reported in
        ``error``; stdout and stderr are returned either way.
    """
    log = logger or logging.getLogger("meshprobe.process")
    argv = invocation.argv
    log.debug(f"Running: {' '.join(argv)}")

    kwargs = {"capture_output": True, "text": True}
    if invocation.stdin:
        kwargs["input"] = invocation.stdin
    else:
        kwargs["stdin"] = subprocess.DEVNULL

    try:
        process = subprocess.run(argv, **kwargs)
    except OSError as e:
        log.debug(f"Failed to start {invocation.executable}: {e}")
        return CommandResult(
            stdout="",
            stderr="",
            error=CommandStartError(f"Failed to start {invocation.executable}: {e}"),
        )

    stdout = process.stdout or ""
    stderr = process.stderr or ""

    if process.returncode != 0:
        log.debug(f"{invocation.executable} exited with {process.returncode}")
        return CommandResult(
            stdout=stdout,
            stderr=stderr,
            error=CommandExitError(argv, process.returncode, stdout, stderr),
        )

    return CommandResult(stdout=stdout, stderr=stderr)


class ProcessExecutor:
    """Runs one executable, always prepending the same global flags."""

    def __init__(
        self,
        executable: str,
        global_args: Sequence[str] = (),
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize executor.

        Args:
            executable: Path of the binary to run
            global_args: Flags inserted before every call's own arguments
            logger: Logger for every call this executor makes
        """
        self.executable = executable
        self.global_args = tuple(global_args)
        self.logger = logger

    def invocation(self, *args: str, stdin: str = "") -> CommandInvocation:
        return CommandInvocation.of(self.executable, *args, stdin=stdin).with_prefix(
            self.global_args
        )

    def run(self, *args: str, stdin: str = "") -> CommandResult:
        return run_command(self.invocation(*args, stdin=stdin), logger=self.logger)
