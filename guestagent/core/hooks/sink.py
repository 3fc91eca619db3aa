"""
Event sinks for hook discovery.

Discovery never raises for missing or invalid hooks; what it skipped
and why is only observable through the sink it was given.
"""

import logging
from collections import deque
from typing import Protocol

from guestagent.core.hooks.events import DiscoveryEventKind
from guestagent.core.hooks.models import DiscoveryEvent

logger = logging.getLogger(__name__)

# Maximum recent events a RecordingEventSink keeps
MAX_RECENT_EVENTS = 50


class EventSink(Protocol):
    def emit(self, event: DiscoveryEvent) -> None:
        ...


class LoggingEventSink:
    """Writes discovery events to a logger, with structured fields in `extra`."""

    _LEVELS = {
        DiscoveryEventKind.HOOK_TYPE_SKIPPED: logging.INFO,
        DiscoveryEventKind.HOOK_SKIPPED: logging.WARNING,
        DiscoveryEventKind.HOOK_ADDED: logging.INFO,
        DiscoveryEventKind.HOOKS_COUNTED: logging.INFO,
    }

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def emit(self, event: DiscoveryEvent) -> None:
        extra = {"oci_hook_type": event.hook_type}
        if event.hook_name is not None:
            extra["oci_hook_name"] = event.hook_name
        if event.error is not None:
            extra["error"] = event.error

        kind = event.kind
        if kind == DiscoveryEventKind.HOOK_TYPE_SKIPPED:
            msg = f"Skipping hook type {event.hook_type}: {event.error}"
        elif kind == DiscoveryEventKind.HOOK_SKIPPED:
            msg = f"Skipping hook {event.hook_name}: {event.error}"
        elif kind == DiscoveryEventKind.HOOK_ADDED:
            msg = f"Adding hook {event.hook_name} ({event.hook_type})"
        else:
            msg = f"Added {event.count} hooks for {event.hook_type}"

        self.log.log(self._LEVELS[kind], msg, extra=extra)


class RecordingEventSink:
    """Keeps the most recent discovery events in memory."""

    def __init__(self, maxlen: int = MAX_RECENT_EVENTS):
        self._events: deque[DiscoveryEvent] = deque(maxlen=maxlen)

    def emit(self, event: DiscoveryEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> list[DiscoveryEvent]:
        return list(self._events)

    def of_kind(self, kind: DiscoveryEventKind) -> list[DiscoveryEvent]:
        return [e for e in self._events if e.kind == kind]

    def clear(self) -> None:
        self._events.clear()

    def to_dicts(self) -> list[dict]:
        """Return recorded events for display."""
        return [e.to_dict() for e in self._events]
