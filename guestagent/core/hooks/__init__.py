"""
Guest OCI hook discovery.

Finds executable hook scripts under <hook_root>/<hook_type>/ and turns
them into hook descriptors for the runtime to invoke.
"""

from guestagent.core.hooks.discovery import (
    HookDiscoverer,
    add_guest_hooks,
    find_hooks,
    scan_guest_hooks,
)
from guestagent.core.hooks.events import DiscoveryEventKind, HookType
from guestagent.core.hooks.models import DiscoveryEvent, HookDescriptor
from guestagent.core.hooks.sink import EventSink, LoggingEventSink, RecordingEventSink
from guestagent.core.hooks.validator import is_valid_hook, validate_hook

__all__ = [
    "DiscoveryEvent",
    "DiscoveryEventKind",
    "EventSink",
    "HookDescriptor",
    "HookDiscoverer",
    "HookType",
    "LoggingEventSink",
    "RecordingEventSink",
    "add_guest_hooks",
    "find_hooks",
    "is_valid_hook",
    "scan_guest_hooks",
    "validate_hook",
]
