"""Lifecycle events and the sinks that receive them."""

from .models import Event, EventType
from .sinks import ConsoleSink, EventManager, EventSink, LoggingSink, NullSink

__all__ = [
    "ConsoleSink",
    "Event",
    "EventManager",
    "EventSink",
    "EventType",
    "LoggingSink",
    "NullSink",
]
