"""
Exception hierarchy for the meshprobe harness.

Startup failures are fatal to a single call. Execution failures are what the
retry engine is meant to absorb. Shape and decode failures mean the output
does not have the structure the caller expected and are never worth retrying.
"""

from typing import List, Optional


class HarnessError(Exception):
    """Base class for every error raised by meshprobe."""


# Process and stream errors


class CommandError(HarnessError):
    """A one-shot command did not complete successfully."""

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class CommandStartError(CommandError):
    """The executable could not be started at all."""


class CommandExitError(CommandError):
    """The command ran but exited with a non-zero status."""

    def __init__(self, argv: List[str], returncode: int, stdout: str = "", stderr: str = ""):
        super().__init__(
            f"Command {' '.join(argv)} exited with status {returncode}", stdout, stderr
        )
        self.argv = argv
        self.returncode = returncode


class StreamStartupError(HarnessError):
    """A streamed command exited before its grace period elapsed."""

    def __init__(self, argv: List[str], returncode: Optional[int], stderr: str = ""):
        super().__init__(f"Process exited: {' '.join(argv)} (exit status {returncode})\n{stderr}")
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr


class StreamReadError(HarnessError):
    """Fewer lines than requested could be read from a stream."""

    def __init__(self, expected: int, lines: List[str], reason: str):
        super().__init__(
            f"Expected [{expected}] lines from stream, got [{len(lines)}] ({reason}):\n"
            + "".join(lines)
        )
        self.expected = expected
        self.lines = lines
        self.reason = reason


class StreamClosedError(HarnessError):
    """Operation attempted on a stream that was already stopped."""


# HTTP errors


class HTTPStatusFailure(HarnessError):
    """A GET request returned a status other than 200."""

    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(f"GET request to [{url}] returned status [{status_code}]\n{body}")
        self.url = url
        self.status_code = status_code
        self.body = body


# Shape mismatch errors


class ShapeMismatchError(HarnessError):
    """Output structure does not match what the caller expected."""


class RowCountError(ShapeMismatchError):
    pass


class ColumnCountError(ShapeMismatchError):
    pass


class DuplicateRowError(ShapeMismatchError):
    pass


class NoEventsFoundError(ShapeMismatchError):
    def __init__(self):
        super().__init__("no events found")


# Decode errors


class EventDecodeError(HarnessError):
    """The event envelope, or one item in it, could not be decoded."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class OutputMismatchError(HarnessError):
    """Command output differs from the golden file it is validated against."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Expected:\n{expected}\nActual:\n{actual}")
        self.expected = expected
        self.actual = actual
