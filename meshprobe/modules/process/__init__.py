"""
Process Module - Black Box Interface

Purpose: Run an external command to completion and capture its output
Interface: run_command(), ProcessExecutor.run(), CommandInvocation, CommandResult
Hidden: subprocess handling, stdin piping, error classification

No retries and no timeout. Callers bound the command themselves.
"""

from .executor import CommandInvocation, CommandResult, ProcessExecutor, run_command

__all__ = ["CommandInvocation", "CommandResult", "ProcessExecutor", "run_command"]
