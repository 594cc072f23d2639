"""
Streaming command output.

Some CLI subcommands (tap, top, logs -f) never finish on their own; what a
test cares about is that they keep printing. ``start_stream`` launches such a
command and returns a ``Stream`` whose lines can be consumed while the
process is still running.

Lifecycle: CREATED -> LIVE -> CLOSED. A stream only becomes LIVE after it
survived the grace period; CLOSED is terminal.
"""

import logging
import subprocess
import time
from collections import deque
from enum import Enum
from queue import Empty, Queue
from threading import Thread
from typing import Callable, Iterator, List, Optional

from meshprobe.errors import StreamClosedError, StreamReadError, StreamStartupError
from meshprobe.modules.process import CommandInvocation

DEFAULT_GRACE_PERIOD = 0.5

# Seconds to wait for a terminated process before killing it
STOP_TIMEOUT = 2.0

STDERR_BUFFER_LINES = 200

_EOF = object()


class StreamState(Enum):
    """Lifecycle states of a stream."""

    CREATED = "created"
    LIVE = "live"
    CLOSED = "closed"


class Stream:
    """Owns a running process and the read end of its stdout."""

    def __init__(
        self,
        process: subprocess.Popen,
        argv: List[str],
        logger: Optional[logging.Logger] = None,
    ):
        self.process = process
        self.argv = argv
        self.logger = logger or logging.getLogger("meshprobe.stream")
        self.state = StreamState.CREATED

        self._lines: Queue = Queue()
        self._stderr = deque(maxlen=STDERR_BUFFER_LINES)
        self._eof = False
        self._readers: List[Thread] = []

    # Lifecycle

    def _go_live(self) -> None:
        """Start the background readers. Called once the grace period passed."""
        self._readers = [
            Thread(target=self._pump_stdout, name=f"stream-stdout-{self.process.pid}", daemon=True),
            Thread(target=self._pump_stderr, name=f"stream-stderr-{self.process.pid}", daemon=True),
        ]
        for reader in self._readers:
            reader.start()
        self.state = StreamState.LIVE
        self.logger.debug(f"Stream live: {' '.join(self.argv)} (pid {self.process.pid})")

    def stop(self) -> None:
        """
        Stop the process and release the pipes.

        Safe to call more than once; a stopped stream stays CLOSED.
        """
        if self.state == StreamState.CLOSED:
            return

        if self.process.poll() is None:
            # a process whose output already ended is left to exit by itself
            if not self._output_ended():
                self.process.terminate()
            try:
                self.process.wait(timeout=STOP_TIMEOUT)
            except subprocess.TimeoutExpired:
                self.logger.warning(f"Process {self.process.pid} did not exit, killing it")
                self.process.kill()
                self.process.wait()

        for reader in self._readers:
            reader.join(timeout=STOP_TIMEOUT)

        for pipe in (self.process.stdout, self.process.stderr):
            if pipe is not None:
                pipe.close()

        self.state = StreamState.CLOSED
        self.logger.debug(f"Stream closed: {' '.join(self.argv)} (exit status {self.process.returncode})")

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # Liveness

    def is_running(self) -> bool:
        return self.process.poll() is None

    @property
    def returncode(self) -> Optional[int]:
        return self.process.poll()

    @property
    def stderr(self) -> str:
        """The most recent stderr lines the process wrote."""
        return "".join(self._stderr)

    # Reading

    def readline(self, timeout: Optional[float] = None) -> str:
        """
        Return the next stdout line, or "" once the output has ended.

        Args:
            timeout: Seconds to wait for a line; None waits indefinitely

        Raises:
            StreamReadError: No line arrived within ``timeout``
            StreamClosedError: The stream was never started or was stopped
        """
        self._ensure_live()
        if self._eof:
            return ""

        try:
            item = self._lines.get(timeout=timeout)
        except Empty:
            raise StreamReadError(1, [], f"no output within {timeout}s")

        if item is _EOF:
            self._eof = True
            return ""
        return item

    def read_until(self, line_count: int, timeout: float) -> List[str]:
        """
        Read exactly ``line_count`` lines within ``timeout`` seconds.

        Raises:
            StreamReadError: The deadline passed or the output ended first;
                the lines read so far are attached to the error.
        """
        deadline = time.monotonic() + timeout
        lines: List[str] = []

        while len(lines) < line_count:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise StreamReadError(line_count, lines, f"timed out after {timeout}s")
            try:
                line = self.readline(timeout=remaining)
            except StreamReadError:
                raise StreamReadError(line_count, lines, f"timed out after {timeout}s")
            if line == "":
                raise StreamReadError(line_count, lines, "output ended")
            lines.append(line)

        return lines

    def __iter__(self) -> Iterator[str]:
        """Yield stdout lines until the output ends; the stream is stopped afterwards."""
        try:
            while True:
                line = self.readline()
                if line == "":
                    return
                yield line
        finally:
            self.stop()

    def _output_ended(self) -> bool:
        return self._eof or (bool(self._readers) and not self._readers[0].is_alive())

    def _ensure_live(self) -> None:
        if self.state != StreamState.LIVE:
            raise StreamClosedError(f"Stream is {self.state.value}: {' '.join(self.argv)}")

    def _pump_stdout(self) -> None:
        try:
            for line in self.process.stdout:
                self._lines.put(line)
        except ValueError:
            # stdout was closed by stop()
            pass
        finally:
            self._lines.put(_EOF)

    def _pump_stderr(self) -> None:
        try:
            for line in self.process.stderr:
                self._stderr.append(line)
        except ValueError:
            pass


def start_stream(
    invocation: CommandInvocation,
    grace_period: float = DEFAULT_GRACE_PERIOD,
    sleep: Callable[[float], None] = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> Stream:
    """
    Start a long-lived command and return a live stream of its stdout.

    Args:
        invocation: Command to run; stdin is not used
        grace_period: Seconds the process must survive to count as started
        logger: Logger for the stream (default: the ``meshprobe.stream`` logger)

    Returns:
        Stream in the LIVE state

    Raises:
        StreamStartupError: The process could not be started, or exited
            before the grace period elapsed
    """
    log = logger or logging.getLogger("meshprobe.stream")
    argv = invocation.argv
    log.debug(f"Starting stream: {' '.join(argv)}")

    try:
        process = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except OSError as e:
        raise StreamStartupError(argv, None, str(e)) from e

    stream = Stream(process, argv, logger=log)

    sleep(grace_period)

    if process.poll() is not None:
        try:
            _, stderr = process.communicate(timeout=STOP_TIMEOUT)
        except subprocess.TimeoutExpired:
            # a child of the exited process still holds the pipes open
            stderr = ""
        stream.stop()
        log.debug(f"Process exited during grace period with {process.returncode}")
        raise StreamStartupError(argv, process.returncode, stderr or "")

    stream._go_live()
    return stream
