"""Event sinks.

Sinks are fire-and-forget: they never block or raise into the code that
records an event. Each sink suppresses its own failures.
"""
from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, TextIO

from moneytransfer.events.models import Event, EventType
from moneytransfer.utils.logging import get_logger

logger = get_logger(__name__)


class EventSink(ABC):
    """Receives structured lifecycle events."""

    @abstractmethod
    def record(self, event_name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        """Record an event. Must not raise."""

    def record_error(
        self, event_name: str, error: BaseException, attributes: Optional[Dict[str, Any]] = None
    ) -> None:
        self.record(f"{event_name}_Error", attributes)

    def track_event(self, event: Event) -> None:
        if event.type is EventType.SEVERE and event.error is not None:
            self.record_error(event.name, event.error, event.attributes)
        else:
            self.record(event.name, event.attributes)


class NullSink(EventSink):
    def record(self, event_name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        return None


class ConsoleSink(EventSink):
    """Writes events to a diagnostic stream, for debugging."""

    def __init__(self, stream: Optional[TextIO] = None, print_parameters: bool = True):
        self._stream = stream
        self.print_parameters = print_parameters

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so redirected stderr (pytest capture) is honoured
        return self._stream if self._stream is not None else sys.stderr

    def _write(self, line: str) -> None:
        try:
            self.stream.write(line + "\n")
            self.stream.flush()
        except (OSError, ValueError):
            # Closed or broken stream
            pass

    def record(self, event_name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        if self.print_parameters and attributes:
            self._write(f"[EVENT] {event_name}: {attributes}")
        else:
            self._write(f"[EVENT] {event_name}")

    def record_error(
        self, event_name: str, error: BaseException, attributes: Optional[Dict[str, Any]] = None
    ) -> None:
        if self.print_parameters and attributes:
            self._write(f"[ERROR] {event_name}: {error} with parameters: {attributes}")
        else:
            self._write(f"[ERROR] {event_name}: {error}")


class LoggingSink(EventSink):
    """Forwards events to the logging tree."""

    def __init__(self, logger_name: str = "moneytransfer.events"):
        self._logger = logging.getLogger(logger_name)

    def record(self, event_name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        self._logger.info(event_name, extra={"event": event_name, "attributes": attributes or {}})

    def record_error(
        self, event_name: str, error: BaseException, attributes: Optional[Dict[str, Any]] = None
    ) -> None:
        self._logger.error(
            f"{event_name}: {error}",
            extra={"event": event_name, "attributes": attributes or {}},
        )

    def track_event(self, event: Event) -> None:
        if event.type is EventType.SEVERE and event.error is not None:
            self.record_error(event.name, event.error, event.attributes)
        elif event.type is EventType.WARNING:
            self._logger.warning(
                event.name, extra={"event": event.name, "attributes": event.attributes or {}}
            )
        else:
            self.record(event.name, event.attributes)


class EventManager(EventSink):
    """Fans events out to several sinks.

    A sink that raises anyway is logged and skipped; the caller never sees it.
    """

    def __init__(self, sinks: Iterable[EventSink] = ()):
        self.sinks: List[EventSink] = list(sinks)

    def add_sink(self, sink: EventSink) -> None:
        self.sinks.append(sink)

    def record(self, event_name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        for sink in self.sinks:
            try:
                sink.record(event_name, attributes)
            except Exception as e:
                logger.warning(f"Event sink {sink.__class__.__name__} failed on {event_name}: {e}")

    def record_error(
        self, event_name: str, error: BaseException, attributes: Optional[Dict[str, Any]] = None
    ) -> None:
        for sink in self.sinks:
            try:
                sink.record_error(event_name, error, attributes)
            except Exception as e:
                logger.warning(f"Event sink {sink.__class__.__name__} failed on {event_name}: {e}")

    def track_event(self, event: Event) -> None:
        for sink in self.sinks:
            try:
                sink.track_event(event)
            except Exception as e:
                logger.warning(f"Event sink {sink.__class__.__name__} failed on {event.name}: {e}")
