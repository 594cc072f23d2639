"""
Retry Module - Black Box Interface

Purpose: Poll an idempotent check until it succeeds or a deadline passes
Interface: retry_for(), Retrier
Hidden: tick scheduling, deadline arithmetic

On timeout the last failure raised by the check is re-raised unchanged.
"""

from .retry import DEFAULT_INTERVAL, Retrier, retry_for

__all__ = ["DEFAULT_INTERVAL", "Retrier", "retry_for"]
