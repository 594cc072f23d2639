"""
Test helper for mesh integration tests.

Bundles the harness pieces behind one object configured from a
HarnessConfig: CLI execution with the global flags every call needs,
streamed CLI output, convergence polling over commands and HTTP, and
validation of output against golden files.
"""

import os
import time
from typing import Callable, List, Optional, TypeVar

from meshprobe.config import EnvConfigProvider, HarnessConfig
from meshprobe.errors import OutputMismatchError
from meshprobe.logging_config import harness_logger
from meshprobe.modules.events import Event, EventLister, parse_events
from meshprobe.modules.polling import HTTPPoller
from meshprobe.modules.process import CommandResult, ProcessExecutor
from meshprobe.modules.retry import Retrier
from meshprobe.modules.stream import Stream, start_stream

T = TypeVar("T")


def read_file(path: str) -> str:
    """Read a file from disk and return its contents."""
    with open(path, "r") as f:
        return f.read()


class TestHelper:
    """Entry point used by integration tests."""

    __test__ = False

    def __init__(
        self,
        config: HarnessConfig,
        retrier: Optional[Retrier] = None,
        poller: Optional[HTTPPoller] = None,
        event_lister: Optional[EventLister] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize test helper.

        Args:
            config: Harness configuration
            retrier: Retry engine (default: one built from config.retry_interval)
            poller: HTTP poller (default: one built from the config timeouts)
            event_lister: Source of raw event JSON, needed by fetch_events()
            sleep: Sleep function used for the stream grace period

        The helper logs through its own logger, at DEBUG when
        ``config.verbose`` is set; other helpers in the process are unaffected.
        """
        self.config = config
        self.logger = harness_logger(config.verbose)
        self.retrier = retrier or Retrier(
            interval=config.retry_interval, logger=self.logger.getChild("retry")
        )
        self.poller = poller or HTTPPoller(
            request_timeout=config.http_timeout,
            retry_timeout=config.http_retry_timeout,
            retrier=self.retrier,
            logger=self.logger.getChild("polling"),
        )
        self.event_lister = event_lister
        self._sleep = sleep
        self.executor = ProcessExecutor(
            config.cli_path, self.global_args(), logger=self.logger.getChild("process")
        )

    @classmethod
    def from_config(
        cls, config: HarnessConfig, event_lister: Optional[EventLister] = None
    ) -> "TestHelper":
        """Build a helper, with retry and HTTP timeouts taken from ``config``."""
        helper = cls(config, event_lister=event_lister)
        helper.logger.info(f"Test helper ready for {config.cli_path} (namespace: {config.namespace})")
        return helper

    @classmethod
    def from_env(cls, event_lister: Optional[EventLister] = None) -> "TestHelper":
        return cls.from_config(EnvConfigProvider().get_harness_config(), event_lister)

    def close(self) -> None:
        self.poller.close()

    def __enter__(self) -> "TestHelper":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Namespaces

    def get_namespace(self) -> str:
        return self.config.namespace

    def get_test_namespace(self, test_name: str) -> str:
        """Namespace for a single test, prefixed with the control-plane namespace."""
        return f"{self.config.namespace}-{test_name}"

    def get_multicluster_namespace(self) -> str:
        return f"{self.config.namespace}-multicluster"

    def get_cluster_domain(self) -> str:
        return self.config.cluster_domain

    # CLI

    def global_args(self) -> List[str]:
        """Flags prepended to every CLI call."""
        args = ["--linkerd-namespace", self.config.namespace]
        if self.config.k8s_context:
            args.append(f"--context={self.config.k8s_context}")
        return args

    def cli_run(self, *args: str) -> CommandResult:
        """Run the CLI with the global flags and wait for it to exit."""
        return self.executor.run(*args)

    def pipe_to_cli_run(self, stdin: str, *args: str) -> CommandResult:
        """Run the CLI with ``stdin`` written to its standard input."""
        return self.executor.run(*args, stdin=stdin)

    def cli_run_stream(self, *args: str) -> Stream:
        """Start a CLI command whose output is read while it keeps running."""
        return start_stream(
            self.executor.invocation(*args),
            grace_period=self.config.stream_grace_period,
            sleep=self._sleep,
            logger=self.logger.getChild("stream"),
        )

    # Convergence

    def retry_for(self, timeout: float, fn: Callable[[], T]) -> T:
        """Retry ``fn`` until it stops raising; re-raises its last failure on timeout."""
        return self.retrier.retry_for(timeout, fn)

    def http_get_url(self, url: str) -> str:
        """GET ``url`` until it answers 200 and return the body."""
        return self.poller.get_url(url)

    # Validation

    def validate_output(self, out: str, fixture_file: str) -> None:
        """
        Compare output with a golden file from the testdata directory.

        Raises:
            OutputMismatchError: The output differs from the file contents
        """
        expected = read_file(os.path.join(self.config.testdata_dir, fixture_file))
        if out != expected:
            raise OutputMismatchError(expected, out)

    def fetch_events(self, namespace: str) -> List[Event]:
        """
        Fetch and parse the events of ``namespace``.

        Raises:
            ValueError: No event lister was configured
            NoEventsFoundError: The namespace has no events
            EventDecodeError: The payload could not be decoded
        """
        if self.event_lister is None:
            raise ValueError("fetch_events needs an event lister")
        return parse_events(self.event_lister.list_events_json(namespace))
