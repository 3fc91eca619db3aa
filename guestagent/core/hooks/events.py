"""
Hook types and discovery event taxonomy.
"""

from enum import Enum


class HookType(str, Enum):
    """OCI lifecycle points that hooks can be attached to.

    The value is also the name of the subdirectory under the guest hook
    root that holds hooks of that type.
    """

    PRESTART = "prestart"
    CREATE_RUNTIME = "createRuntime"
    CREATE_CONTAINER = "createContainer"
    START_CONTAINER = "startContainer"
    POSTSTART = "poststart"
    POSTSTOP = "poststop"


# Hook types scanned from the guest hook root
GUEST_HOOK_TYPES = (HookType.PRESTART, HookType.POSTSTART, HookType.POSTSTOP)


class DiscoveryEventKind(str, Enum):
    """What happened during hook discovery."""

    HOOK_TYPE_SKIPPED = "hook_type_skipped"  # directory could not be listed
    HOOK_SKIPPED = "hook_skipped"  # entry rejected by the validator
    HOOK_ADDED = "hook_added"
    HOOKS_COUNTED = "hooks_counted"  # final count for a hook type
