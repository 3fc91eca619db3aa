"""
Typed errors for OCI bookkeeping and hook validation.

Bundle errors (invalid spec, missing persisted config, I/O failure) are
raised to the caller. Hook rejections are raised by the validator and
contained by discovery, which reports them to its event sink instead.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Error codes for programmatic handling."""

    # Bundle errors
    INVALID_SPEC = "invalid_spec"
    INVALID_BUNDLE = "invalid_bundle"
    INVALID_CONTAINER_ID = "invalid_container_id"
    IO_FAILURE = "io_failure"

    # Hook rejections
    NOT_A_FILE = "not_a_file"
    IS_SYMLINK = "is_symlink"
    NOT_EXECUTABLE = "not_executable"


class GuestAgentError(Exception):
    """Base class for all errors raised by this package."""

    code: ErrorCode

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message}


# --- Bundle errors ---


class BundleError(GuestAgentError):
    """Error surfaced by spec persistence or the bundle switch.

    `previous_cwd` is the working directory captured before the failed
    operation, so the caller can restore it.
    """

    def __init__(self, message: str, previous_cwd: Optional[Path] = None):
        super().__init__(message)
        self.previous_cwd = previous_cwd

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        if self.previous_cwd is not None:
            d["previous_cwd"] = str(self.previous_cwd)
        return d


class InvalidSpec(BundleError):
    code = ErrorCode.INVALID_SPEC


class InvalidBundle(BundleError):
    code = ErrorCode.INVALID_BUNDLE


class IOFailure(BundleError):
    """Underlying read/write/create/chdir failure. The OSError is the __cause__."""

    code = ErrorCode.IO_FAILURE


class InvalidContainerId(GuestAgentError, ValueError):
    code = ErrorCode.INVALID_CONTAINER_ID


# --- Hook rejections ---


class HookRejected(GuestAgentError):
    """A directory entry that cannot be used as a hook."""

    def __init__(self, message: str, hook_name: str = ""):
        super().__init__(message)
        self.hook_name = hook_name

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["hook_name"] = self.hook_name
        return d


class NotAFile(HookRejected):
    code = ErrorCode.NOT_A_FILE


class IsSymlink(HookRejected):
    code = ErrorCode.IS_SYMLINK


class NotExecutable(HookRejected):
    code = ErrorCode.NOT_EXECUTABLE
