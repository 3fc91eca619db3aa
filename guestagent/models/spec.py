"""
OCI runtime specification models.

Only the fields this agent reasons about are typed. Everything else in
an incoming config.json is kept as extra data so that persisting a spec
writes back what was received.
"""

import json
from pathlib import Path
from typing import Any, NewType, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from guestagent.lib.typed_errors import InvalidSpec

ContainerId = NewType("ContainerId", str)


class _OCIModel(BaseModel):
    """Base for OCI models: camelCase JSON keys, unknown keys preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Root(_OCIModel):
    """The container's root filesystem. The bundle is its parent directory."""

    path: str = Field(default="", description="Path to the rootfs")
    readonly: Optional[bool] = Field(default=None, description="Mount rootfs read-only")


class Hook(_OCIModel):
    """A single OCI hook: an executable and the argv it is invoked with."""

    path: str = Field(description="Absolute path of the executable")
    args: list[str] = Field(default_factory=list)
    env: Optional[list[str]] = None
    timeout: Optional[int] = None


class Hooks(_OCIModel):
    """Hooks grouped by lifecycle point."""

    prestart: list[Hook] = Field(default_factory=list)
    create_runtime: list[Hook] = Field(default_factory=list, alias="createRuntime")
    create_container: list[Hook] = Field(default_factory=list, alias="createContainer")
    start_container: list[Hook] = Field(default_factory=list, alias="startContainer")
    poststart: list[Hook] = Field(default_factory=list)
    poststop: list[Hook] = Field(default_factory=list)

    def for_type(self, hook_type: str) -> list[Hook]:
        """Return the hook list for an OCI hook type name (e.g. "createRuntime")."""
        for name, field in type(self).model_fields.items():
            if hook_type in (name, field.alias):
                return getattr(self, name)
        raise KeyError(hook_type)

    def count(self) -> int:
        return sum(len(getattr(self, name)) for name in type(self).model_fields)


class Process(_OCIModel):
    args: list[str] = Field(default_factory=list)
    env: list[str] = Field(default_factory=list)
    cwd: str = "/"
    terminal: Optional[bool] = None


class Spec(_OCIModel):
    """OCI runtime spec (config.json)."""

    oci_version: str = Field(default="1.0.2", alias="ociVersion")
    hostname: Optional[str] = None
    root: Optional[Root] = None
    process: Optional[Process] = None
    mounts: Optional[list[dict[str, Any]]] = None
    hooks: Optional[Hooks] = None
    annotations: Optional[dict[str, str]] = None
    linux: Optional[dict[str, Any]] = None

    @classmethod
    def from_json(cls, text: str) -> "Spec":
        """Parse a config.json document. Raises InvalidSpec on malformed input."""
        try:
            return cls.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise InvalidSpec(f"invalid OCI spec: {e}") from e

    @classmethod
    def from_file(cls, path: Path) -> "Spec":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

    def to_json(self) -> str:
        """Encode as config.json content (OCI key names, nulls omitted)."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
