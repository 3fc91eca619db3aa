"""
OCI runtime-spec models.
"""

from guestagent.models.spec import ContainerId, Hook, Hooks, Process, Root, Spec

__all__ = ["ContainerId", "Hook", "Hooks", "Process", "Root", "Spec"]
