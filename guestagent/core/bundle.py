"""
OCI spec persistence and bundle switching.

A container's spec is persisted once to

    /run/libcontainer/<container-id>/config.json

and that file's existence is what later lets the agent switch into the
container's bundle. The bundle itself (rootfs parent) lives elsewhere:
it is dirname(spec.root.path).

The working directory is process-wide. Callers that change it must be
serialized; `bundle_directory()` does this with a process-wide lock, and
`BundlePathSwitcher.resolve()` avoids the change altogether for callers
that can pass the bundle path on (e.g. as a subprocess `cwd=`).
"""

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from guestagent.lib.fs import FileSystem, get_filesystem
from guestagent.lib.typed_errors import (
    InvalidBundle,
    InvalidContainerId,
    InvalidSpec,
    IOFailure,
)
from guestagent.models.spec import ContainerId, Spec

logger = logging.getLogger(__name__)

OCI_CONFIG_BASE_PATH = Path("/run/libcontainer")
OCI_CONFIG_FILE = "config.json"
OCI_CONFIG_DIR_MODE = 0o700
OCI_CONFIG_FILE_MODE = 0o444

# Serializes working-directory changes across threads
_cwd_lock = threading.RLock()


def _validate_container_id(container_id: str) -> None:
    """Reject ids that would escape the config base directory."""
    if (
        not container_id
        or container_id in (".", "..")
        or "/" in container_id
        or "\\" in container_id
        or "\x00" in container_id
    ):
        raise InvalidContainerId(f"Invalid container id: {container_id!r}")


def canonical_config_path(
    container_id: ContainerId, base_path: Union[str, Path] = OCI_CONFIG_BASE_PATH
) -> Path:
    """Return <base_path>/<container_id>/config.json."""
    _validate_container_id(container_id)
    return Path(base_path) / container_id / OCI_CONFIG_FILE


class SpecPersister:
    """Writes a container's spec to its canonical config.json."""

    def __init__(
        self,
        base_path: Union[str, Path] = OCI_CONFIG_BASE_PATH,
        fs: Optional[FileSystem] = None,
    ):
        self.base_path = Path(base_path)
        self.fs = fs or get_filesystem()

    def config_path(self, container_id: ContainerId) -> Path:
        return canonical_config_path(container_id, self.base_path)

    def persist(self, spec: Spec, container_id: ContainerId) -> Path:
        """Write `spec` for `container_id`, replacing any earlier copy.

        Returns the config path. Raises IOFailure if the spec cannot be
        encoded or written.
        """
        if spec is None:
            raise InvalidSpec("invalid OCI spec: no spec given")

        config_path = self.config_path(container_id)

        try:
            content = spec.to_json()
        except (TypeError, ValueError) as e:
            raise IOFailure(f"Failed to encode spec for {container_id}: {e}") from e

        try:
            self.fs.mkdir_all(config_path.parent, OCI_CONFIG_DIR_MODE)
            with self.fs.open_write(config_path, OCI_CONFIG_FILE_MODE) as f:
                f.write(content)
                f.write("\n")
        except OSError as e:
            raise IOFailure(f"Failed to write {config_path}: {e}") from e

        logger.info(f"Wrote OCI spec for container {container_id} to {config_path}")
        return config_path


def write_spec_to_file(
    spec: Spec,
    container_id: ContainerId,
    base_path: Union[str, Path] = OCI_CONFIG_BASE_PATH,
) -> Path:
    """Persist `spec` to <base_path>/<container_id>/config.json."""
    return SpecPersister(base_path).persist(spec, container_id)


class BundlePathSwitcher:
    """Moves the process into a container's bundle directory.

    The switch is only allowed once the container's spec has been
    persisted: a missing config.json means the caller skipped a
    lifecycle step. The content of config.json is not compared with
    the spec passed in.
    """

    def __init__(
        self,
        base_path: Union[str, Path] = OCI_CONFIG_BASE_PATH,
        fs: Optional[FileSystem] = None,
    ):
        self.base_path = Path(base_path)
        self.fs = fs or get_filesystem()

    def resolve(
        self, spec: Optional[Spec], container_id: ContainerId, previous_cwd: Optional[Path] = None
    ) -> Path:
        """Check `spec` and the persisted config, and return the bundle directory.

        Does not change the working directory.
        """
        if spec is None or spec.root is None or not spec.root.path:
            raise InvalidSpec("invalid OCI spec", previous_cwd=previous_cwd)

        bundle_path = Path(os.path.dirname(spec.root.path))

        try:
            config_path = canonical_config_path(container_id, self.base_path)
        except InvalidContainerId as e:
            raise InvalidBundle("invalid OCI bundle", previous_cwd=previous_cwd) from e

        if not self.fs.exists(config_path):
            raise InvalidBundle("invalid OCI bundle", previous_cwd=previous_cwd)

        return bundle_path

    def enter_bundle(self, spec: Optional[Spec], container_id: ContainerId) -> Path:
        """Change into the bundle directory and return the previous cwd.

        Restoring the returned directory is up to the caller. Every
        BundleError raised here carries the pre-call cwd as `previous_cwd`.
        """
        try:
            cwd = self.fs.getcwd()
        except OSError as e:
            raise IOFailure(f"Failed to get working directory: {e}") from e

        bundle_path = self.resolve(spec, container_id, previous_cwd=cwd)

        try:
            self.fs.chdir(bundle_path)
        except OSError as e:
            raise IOFailure(
                f"Failed to change to bundle {bundle_path}: {e}", previous_cwd=cwd
            ) from e

        logger.debug(f"Changed to bundle {bundle_path} for container {container_id}")
        return cwd

    @contextmanager
    def bundle_directory(self, spec: Optional[Spec], container_id: ContainerId) -> Iterator[Path]:
        """Run a block inside the bundle directory, then restore the old cwd.

        Holds the process-wide cwd lock for the duration of the block.
        Raises IOFailure if the old cwd cannot be restored.
        """
        with _cwd_lock:
            previous = self.enter_bundle(spec, container_id)
            try:
                yield self.fs.getcwd()
            finally:
                try:
                    self.fs.chdir(previous)
                except OSError as e:
                    raise IOFailure(
                        f"Failed to restore working directory {previous}: {e}",
                        previous_cwd=previous,
                    ) from e


def change_to_bundle_path(
    spec: Optional[Spec],
    container_id: ContainerId,
    base_path: Union[str, Path] = OCI_CONFIG_BASE_PATH,
) -> Path:
    """Change the cwd to dirname(spec.root.path) and return the old cwd.

    The cwd lock is only held for the switch itself. Callers that work
    inside the bundle and then restore the old cwd must serialize that
    whole span themselves, or use BundlePathSwitcher.bundle_directory().
    """
    with _cwd_lock:
        return BundlePathSwitcher(base_path).enter_bundle(spec, container_id)
