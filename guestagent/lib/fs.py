"""
Narrow filesystem capability used by spec persistence, the bundle switch
and hook discovery.

Everything that touches the OS goes through a `FileSystem` so the
validation and discovery logic can run against an in-memory fake.
"""

import os
import stat
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, ContextManager, Iterator, Protocol, Union

PathLike = Union[str, Path]


@dataclass(frozen=True, slots=True)
class DirEntry:
    """Metadata for one directory entry, as reported by lstat."""

    name: str
    is_dir: bool
    is_symlink: bool
    mode: int  # permission bits only (st_mode & 0o7777)


class FileSystem(Protocol):
    """The filesystem operations this package needs."""

    def list_dir(self, path: PathLike) -> list[DirEntry]:
        """List entries in directory order. Raises OSError if unreadable."""
        ...

    def exists(self, path: PathLike) -> bool:
        ...

    def getcwd(self) -> Path:
        ...

    def chdir(self, path: PathLike) -> None:
        ...

    def mkdir_all(self, path: PathLike, mode: int) -> None:
        ...

    def open_write(self, path: PathLike, mode: int) -> ContextManager[IO[str]]:
        """Open `path` for text writing, replacing any previous content."""
        ...


class OSFileSystem:
    """FileSystem backed by the real OS."""

    def list_dir(self, path: PathLike) -> list[DirEntry]:
        entries = []
        # scandir yields in the order the OS reports; no sorting
        with os.scandir(path) as it:
            for entry in it:
                try:
                    st = entry.stat(follow_symlinks=False)
                except FileNotFoundError:
                    # removed between readdir and lstat
                    continue
                entries.append(
                    DirEntry(
                        name=entry.name,
                        is_dir=stat.S_ISDIR(st.st_mode),
                        is_symlink=stat.S_ISLNK(st.st_mode),
                        mode=stat.S_IMODE(st.st_mode),
                    )
                )
        return entries

    def exists(self, path: PathLike) -> bool:
        try:
            os.stat(path)
        except OSError:
            return False
        return True

    def getcwd(self) -> Path:
        return Path(os.getcwd())

    def chdir(self, path: PathLike) -> None:
        os.chdir(path)

    def mkdir_all(self, path: PathLike, mode: int) -> None:
        """Create `path` and any missing parents, each with `mode`."""
        target = Path(path)
        missing = []
        for p in (target, *target.parents):
            if p.is_dir():
                break
            missing.append(p)

        for p in reversed(missing):
            try:
                os.mkdir(p, mode)
            except FileExistsError:
                if not p.is_dir():
                    raise

    @contextmanager
    def open_write(self, path: PathLike, mode: int) -> Iterator[IO[str]]:
        """Write to a sibling temp file and rename it over `path` on success.

        The target may already exist with a read-only mode, so it is
        replaced rather than reopened.
        """
        target = Path(path)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
        try:
            os.fchmod(fd, mode)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yield f
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise


_default_fs = OSFileSystem()


def get_filesystem() -> FileSystem:
    """Get the process-wide OS filesystem."""
    return _default_fs
