"""
Shared pytest fixtures for meshprobe tests.

This module provides common fixtures including:
- CommandMocker: Mock CLI subprocess calls with canned responses
- FakeClock: Deterministic clock and sleep for the retry engine
- Harness config and TestHelper wired to both
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence, Union
from unittest.mock import MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from meshprobe.config import HarnessConfig
from meshprobe.helper import TestHelper
from meshprobe.modules.retry import Retrier

FAKE_CLI = "/usr/local/bin/linkerd"

_REAL_SUBPROCESS_RUN = subprocess.run


# =============================================================================
# CLI Mocking Infrastructure
# =============================================================================

@dataclass
class CommandResponse:
    """Represents a mocked CLI command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    def to_completed_process(self) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        result = MagicMock()
        result.stdout = self.stdout
        result.stderr = self.stderr
        result.returncode = self.returncode
        return result


@dataclass
class CommandCall:
    """Record of a CLI call made during testing."""
    command: List[str]
    full_command_str: str
    stdin: Optional[str] = None
    matched_pattern: Optional[str] = None
    response: Optional[CommandResponse] = None


@dataclass
class _Registration:
    pattern: Union[str, Pattern]
    responses: List[CommandResponse]
    priority: int = 0
    served: int = field(default=0)

    def next_response(self) -> CommandResponse:
        """Serve responses in order; the last one repeats forever."""
        response = self.responses[min(self.served, len(self.responses) - 1)]
        self.served += 1
        return response


class CommandMocker:
    """
    Mock CLI subprocess calls with pattern-matched responses.

    Registering a list of responses for one pattern simulates a cluster
    that converges over time: each call gets the next response and the
    last one keeps being returned.

    Usage:
        def test_stat(command_mocker):
            command_mocker.register("stat deploy", [
                CommandResponse(stderr="not ready", returncode=1),
                CommandResponse(stdout=STAT_OUTPUT),
            ])
    """

    def __init__(self, executable: str = FAKE_CLI):
        self.executable = executable
        self._registrations: List[_Registration] = []
        self._call_history: List[CommandCall] = []
        self._default_response = CommandResponse(
            stderr="Error: mock not configured for this command",
            returncode=1
        )

    def register(
        self,
        pattern: Union[str, Pattern],
        response: Union[CommandResponse, Sequence[CommandResponse]],
        priority: int = 0
    ) -> "CommandMocker":
        """
        Register responses for commands matching the pattern.

        Args:
            pattern: String (substring match) or regex pattern
            response: A response, or a sequence served one call at a time
            priority: Higher priority patterns are checked first

        Returns:
            self for chaining
        """
        responses = [response] if isinstance(response, CommandResponse) else list(response)
        self._registrations.append(_Registration(pattern, responses, priority))
        self._registrations.sort(key=lambda r: r.priority, reverse=True)
        return self

    def register_scenario(self, scenario_name: str) -> "CommandMocker":
        """Register all responses for a named scenario."""
        from fixtures.cli_outputs import SCENARIOS

        if scenario_name not in SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario_name}. "
                f"Available: {list(SCENARIOS.keys())}"
            )

        for pattern, response in SCENARIOS[scenario_name].items():
            self.register(pattern, response)

        return self

    def set_default_response(self, response: CommandResponse) -> "CommandMocker":
        """Set the default response for unmatched commands."""
        self._default_response = response
        return self

    def mock_run(self, cmd: List[str], **kwargs) -> MagicMock:
        """
        Mock implementation of subprocess.run for CLI commands.

        Commands for other executables go to the real subprocess.run.
        """
        if cmd[0] != self.executable:
            return _REAL_SUBPROCESS_RUN(cmd, **kwargs)

        cmd_str = " ".join(cmd)
        args_str = " ".join(cmd[1:])
        matched_pattern = None
        response = self._default_response

        for registration in self._registrations:
            pattern = registration.pattern
            if isinstance(pattern, str):
                matched = pattern in args_str
            else:  # Compiled regex
                matched = pattern.search(args_str) is not None
            if matched:
                matched_pattern = pattern if isinstance(pattern, str) else pattern.pattern
                response = registration.next_response()
                break

        self._call_history.append(CommandCall(
            command=list(cmd),
            full_command_str=cmd_str,
            stdin=kwargs.get("input"),
            matched_pattern=matched_pattern,
            response=response
        ))

        return response.to_completed_process()

    @property
    def calls(self) -> List[CommandCall]:
        """Get all CLI calls made during the test."""
        return self._call_history

    @property
    def call_count(self) -> int:
        """Get the number of CLI calls made."""
        return len(self._call_history)

    def was_called_with(self, pattern: str) -> bool:
        """Check if any call contained the given pattern."""
        return any(pattern in call.full_command_str for call in self._call_history)

    def get_calls_matching(self, pattern: str) -> List[CommandCall]:
        """Get all calls containing the given pattern."""
        return [c for c in self._call_history if pattern in c.full_command_str]


@pytest.fixture
def command_mocker():
    """
    Fixture that provides a CommandMocker with subprocess.run patched.

    Usage:
        def test_something(command_mocker):
            command_mocker.register("stat", CommandResponse(stdout="..."))
            # Your test code that calls the CLI
            assert command_mocker.was_called_with("stat")
    """
    mocker = CommandMocker()
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# Clock Infrastructure
# =============================================================================

class FakeClock:
    """Monotonic clock that only moves when something sleeps."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def retrier(fake_clock):
    """Retrier on a one-second cadence driven by the fake clock."""
    return Retrier(interval=1.0, clock=fake_clock, sleep=fake_clock.sleep)


# =============================================================================
# Harness Fixtures
# =============================================================================

@pytest.fixture
def harness_config(tmp_path):
    """Config pointing at the mocked CLI, with golden files under tmp_path."""
    testdata = tmp_path / "testdata"
    testdata.mkdir()
    return HarnessConfig(
        cli_path=FAKE_CLI,
        namespace="linkerd",
        k8s_context="kind-meshprobe",
        testdata_dir=str(testdata),
    )


@pytest.fixture
def helper(harness_config, retrier, fake_clock):
    """TestHelper whose retries and grace periods run on the fake clock."""
    with TestHelper(harness_config, retrier=retrier, sleep=fake_clock.sleep) as test_helper:
        yield test_helper


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() so caplog sees records in later tests."""
    yield
    for name in ("meshprobe", "httpx"):
        log = logging.getLogger(name)
        log.handlers.clear()
        log.propagate = True
        log.setLevel(logging.NOTSET)


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "command_mock: Tests using mocked CLI subprocess calls"
    )
    config.addinivalue_line(
        "markers", "subprocess: Tests that start real short-lived processes"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that wire several modules together"
    )
