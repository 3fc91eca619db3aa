"""
Pytest configuration and fixtures.
"""

import io
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path, PurePosixPath

import pytest

# Keep tests away from /etc/guest-agent/config.yaml
os.environ["GUEST_AGENT_CONFIG"] = os.path.join(
    tempfile.mkdtemp(prefix="guestagent-test-"), "config.yaml"
)
os.environ["LOG_LEVEL"] = "WARNING"

from guestagent.lib.fs import DirEntry  # noqa: E402
from guestagent.models.spec import Root, Spec  # noqa: E402


class FakeFileSystem:
    """In-memory FileSystem. Directory listings keep insertion order."""

    def __init__(self, cwd: str = "/"):
        self.dirs: dict[PurePosixPath, list[DirEntry]] = {PurePosixPath("/"): []}
        self.files: dict[PurePosixPath, str] = {}
        self.modes: dict[PurePosixPath, int] = {}
        self.cwd = PurePosixPath(cwd)
        self.chdir_calls: list[PurePosixPath] = []
        self.fail_writes = False

    def _p(self, path) -> PurePosixPath:
        p = PurePosixPath(str(path))
        return p if p.is_absolute() else self.cwd / p

    def _add_entry(self, path: PurePosixPath, entry: DirEntry) -> None:
        self.mkdir_all(path.parent, 0o755)
        siblings = self.dirs[path.parent]
        siblings[:] = [e for e in siblings if e.name != entry.name]
        siblings.append(entry)

    # Seeding helpers

    def add_file(self, path, mode: int = 0o755, content: str = "") -> None:
        p = self._p(path)
        self._add_entry(p, DirEntry(name=p.name, is_dir=False, is_symlink=False, mode=mode))
        self.files[p] = content
        self.modes[p] = mode

    def add_symlink(self, path) -> None:
        p = self._p(path)
        self._add_entry(p, DirEntry(name=p.name, is_dir=False, is_symlink=True, mode=0o777))

    def add_dir(self, path, mode: int = 0o755) -> None:
        self.mkdir_all(path, mode)

    # FileSystem protocol

    def list_dir(self, path):
        p = self._p(path)
        if p in self.files:
            raise NotADirectoryError(20, "Not a directory", str(p))
        if p not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(p))
        return list(self.dirs[p])

    def exists(self, path) -> bool:
        p = self._p(path)
        return p in self.dirs or p in self.files

    def getcwd(self) -> Path:
        return Path(str(self.cwd))

    def chdir(self, path) -> None:
        p = self._p(path)
        if p not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(p))
        self.chdir_calls.append(p)
        self.cwd = p

    def mkdir_all(self, path, mode: int) -> None:
        p = self._p(path)
        for parent in reversed(p.parents):
            self._mkdir_one(parent, mode)
        self._mkdir_one(p, mode)

    def _mkdir_one(self, p: PurePosixPath, mode: int) -> None:
        if p in self.dirs:
            return
        self.dirs[p] = []
        self.modes[p] = mode
        self.dirs[p.parent].append(DirEntry(name=p.name, is_dir=True, is_symlink=False, mode=mode))

    @contextmanager
    def open_write(self, path, mode: int):
        p = self._p(path)
        if self.fail_writes:
            raise PermissionError(13, "Permission denied", str(p))
        if p.parent not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", str(p))
        buf = io.StringIO()
        yield buf
        if p not in self.files:
            self.dirs[p.parent].append(DirEntry(name=p.name, is_dir=False, is_symlink=False, mode=mode))
        self.files[p] = buf.getvalue()
        self.modes[p] = mode


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem()


@pytest.fixture
def sample_spec() -> Spec:
    """A minimal valid spec whose bundle is /bundles/abc."""
    return Spec(hostname="guest", root=Root(path="/bundles/abc/rootfs"))


@pytest.fixture
def restore_cwd():
    """Restore the process working directory after a test that changes it."""
    cwd = os.getcwd()
    yield cwd
    os.chdir(cwd)
