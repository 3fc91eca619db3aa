"""
Guest hook discovery.

Hooks are executables placed by the host under a hook root, one
subdirectory per hook type:

    <hook_root>/prestart/10-setup-gpu
    <hook_root>/poststop/cleanup

Each acceptable file becomes a hook invoked as `<path> <name> <hook_type>`.
Hooks run in directory listing order; nothing is sorted here.

A hook type whose directory cannot be listed is skipped, as is any entry
the validator rejects. Neither is an error for the caller: guest hooks
are optional.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from guestagent.core.hooks.events import GUEST_HOOK_TYPES, DiscoveryEventKind, HookType
from guestagent.core.hooks.models import DiscoveryEvent, HookDescriptor
from guestagent.core.hooks.sink import EventSink, LoggingEventSink
from guestagent.core.hooks.validator import is_valid_hook
from guestagent.lib.fs import FileSystem, get_filesystem
from guestagent.models.spec import Hooks, Spec

logger = logging.getLogger(__name__)


class HookDiscoverer:
    """Lists a hook-type directory and builds hook descriptors for valid entries."""

    def __init__(self, fs: Optional[FileSystem] = None, sink: Optional[EventSink] = None):
        self.fs = fs or get_filesystem()
        self.sink = sink or LoggingEventSink()

    def discover(
        self, hook_root: Union[str, Path], hook_type: Union[str, HookType]
    ) -> list[HookDescriptor]:
        """Return hooks found in `hook_root/hook_type`, in listing order."""
        type_name = hook_type.value if isinstance(hook_type, HookType) else hook_type
        hooks_path = Path(hook_root) / type_name

        try:
            entries = self.fs.list_dir(hooks_path)
        except OSError as e:
            self.sink.emit(DiscoveryEvent(
                kind=DiscoveryEventKind.HOOK_TYPE_SKIPPED,
                hook_type=type_name,
                error=str(e),
            ))
            return []

        found: list[HookDescriptor] = []
        for entry in entries:
            ok, reason = is_valid_hook(entry)
            if not ok:
                self.sink.emit(DiscoveryEvent(
                    kind=DiscoveryEventKind.HOOK_SKIPPED,
                    hook_type=type_name,
                    hook_name=entry.name,
                    error=str(reason),
                ))
                continue

            self.sink.emit(DiscoveryEvent(
                kind=DiscoveryEventKind.HOOK_ADDED,
                hook_type=type_name,
                hook_name=entry.name,
            ))
            found.append(HookDescriptor(
                path=str(hooks_path / entry.name),
                args=(entry.name, type_name),
            ))

        self.sink.emit(DiscoveryEvent(
            kind=DiscoveryEventKind.HOOKS_COUNTED,
            hook_type=type_name,
            count=len(found),
        ))
        return found


def find_hooks(
    hook_root: Union[str, Path],
    hook_type: Union[str, HookType],
    *,
    fs: Optional[FileSystem] = None,
    sink: Optional[EventSink] = None,
) -> list[HookDescriptor]:
    """Discover hooks of one type under `hook_root`."""
    return HookDiscoverer(fs=fs, sink=sink).discover(hook_root, hook_type)


def scan_guest_hooks(
    hook_root: Union[str, Path],
    *,
    fs: Optional[FileSystem] = None,
    sink: Optional[EventSink] = None,
) -> Hooks:
    """Discover prestart, poststart and poststop hooks under `hook_root`."""
    discoverer = HookDiscoverer(fs=fs, sink=sink)
    found = {
        hook_type.value: [d.to_hook() for d in discoverer.discover(hook_root, hook_type)]
        for hook_type in GUEST_HOOK_TYPES
    }
    guest_hooks = Hooks.model_validate(found)
    logger.info(f"Scanned guest hooks in {hook_root}: {guest_hooks.count()} total")
    return guest_hooks


def add_guest_hooks(spec: Spec, guest_hooks: Optional[Hooks]) -> Spec:
    """Append guest hooks to a spec's own hooks, after the ones already present."""
    if guest_hooks is None:
        return spec

    if spec.hooks is None:
        spec.hooks = Hooks()

    for hook_type in GUEST_HOOK_TYPES:
        extra = guest_hooks.for_type(hook_type.value)
        if extra:
            spec.hooks.for_type(hook_type.value).extend(h.model_copy(deep=True) for h in extra)

    return spec
