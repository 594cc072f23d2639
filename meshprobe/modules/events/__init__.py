"""
Events Module - Black Box Interface

Purpose: Decode a Kubernetes event list into typed Event records
Interface: parse_events(), Event, EventLister
Hidden: envelope decoding, per-item validation

An empty list is an error: callers only parse events when they expect some.
"""

from .models import Event, EventList, EventLister, InvolvedObject, ObjectMeta
from .parser import parse_events

__all__ = ["Event", "EventList", "EventLister", "InvolvedObject", "ObjectMeta", "parse_events"]
