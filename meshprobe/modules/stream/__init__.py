"""
Stream Module - Black Box Interface

Purpose: Start a long-lived command and read its stdout while it still runs
Interface: start_stream(), Stream, StreamState
Hidden: reader threads, line queue, process reaping

A process that exits within the grace period is reported as a startup
failure instead of being handed back as a stream.
"""

from .stream import DEFAULT_GRACE_PERIOD, Stream, StreamState, start_stream

__all__ = ["DEFAULT_GRACE_PERIOD", "Stream", "StreamState", "start_stream"]
