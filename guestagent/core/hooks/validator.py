"""
Decides whether a directory entry is acceptable as a hook.

A hook must be a regular file, not a symbolic link, with at least one
execute bit set. Symlinks are refused because they could point outside
the hook root.
"""

from typing import Optional

from guestagent.lib.fs import DirEntry
from guestagent.lib.typed_errors import HookRejected, IsSymlink, NotAFile, NotExecutable

_EXEC_BITS = 0o111


def validate_hook(entry: DirEntry) -> None:
    """Raise a HookRejected subclass if `entry` cannot be used as a hook."""
    if entry.is_dir:
        raise NotAFile("is a directory", hook_name=entry.name)

    if entry.is_symlink:
        raise IsSymlink("is a symbolic link", hook_name=entry.name)

    if entry.mode & _EXEC_BITS == 0:
        raise NotExecutable("is not executable", hook_name=entry.name)


def is_valid_hook(entry: DirEntry) -> tuple[bool, Optional[HookRejected]]:
    """Return (True, None) for an acceptable hook, else (False, reason)."""
    try:
        validate_hook(entry)
    except HookRejected as e:
        return False, e
    return True, None
