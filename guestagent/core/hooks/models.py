"""
Hook discovery models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from guestagent.core.hooks.events import DiscoveryEventKind
from guestagent.models.spec import Hook


@dataclass(frozen=True)
class HookDescriptor:
    """A discovered hook, ready for the runtime to invoke.

    args[0] is the bare file name and args[1] the hook type.
    """

    path: str
    args: tuple[str, ...]

    @property
    def name(self) -> str:
        return self.args[0]

    @property
    def hook_type(self) -> str:
        return self.args[1]

    def to_hook(self) -> Hook:
        """Convert to an OCI spec hook entry."""
        return Hook(path=self.path, args=list(self.args))

    def to_dict(self) -> dict:
        return {"path": self.path, "args": list(self.args)}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class DiscoveryEvent:
    """Record of one observation made while discovering hooks."""

    kind: DiscoveryEventKind
    hook_type: str
    hook_name: Optional[str] = None
    error: Optional[str] = None
    count: Optional[int] = None
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "hook_type": self.hook_type,
            "timestamp": self.timestamp,
        }
        if self.hook_name is not None:
            d["hook_name"] = self.hook_name
        if self.error is not None:
            d["error"] = self.error
        if self.count is not None:
            d["count"] = self.count
        return d
