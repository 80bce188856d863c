# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Provider and handle protocols.

Any object satisfying :class:`Fs` can sit behind ``FaultFs``: a host
directory, an in-memory tree, or another decorator. Symlinks, link reading
and ``lstat`` are optional and expressed as separate capability protocols
(:class:`Symlinker`, :class:`LinkReader`, :class:`Lstater`) so a caller can
probe for them with ``isinstance`` instead of poking at attributes.

Implementations:

- ``faultfs.filesystem.MemoryFs``: in-memory tree (implements ``Lstater``)
- ``faultfs.filesystem.OsFs``: host filesystem (implements every capability)
- ``faultfs.FaultFs``: fault-injecting decorator (implements every capability,
  raising ``NotSupportedError`` when the wrapped provider lacks one)

Errors follow :mod:`os`: missing paths raise ``FileNotFoundError``, existing
ones ``FileExistsError``, and so on, always with ``errno`` and ``filename``
populated.
"""

from __future__ import annotations

import os
from datetime import datetime
from types import TracebackType
from typing import Protocol, Self, runtime_checkable

from ._types import FileInfo


@runtime_checkable
class File(Protocol):
    """An open file or directory handle.

    Byte-transferring calls (``read``, ``write`` and their positional
    variants) move the handle's offset the way :func:`os.read` and
    :func:`os.write` do, except ``read_at``/``write_at`` which never move it.
    """

    def name(self) -> str:
        """Return the path the handle was opened with."""
        ...

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes from the current offset.

        A negative ``size`` reads to end of file. Returns ``b""`` at EOF.
        """
        ...

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes at ``offset`` without moving the offset."""
        ...

    def write(self, data: bytes) -> int:
        """Write ``data`` at the current offset and return the byte count."""
        ...

    def write_at(self, data: bytes, offset: int) -> int:
        """Write ``data`` at ``offset`` without moving the offset."""
        ...

    def write_string(self, text: str) -> int:
        """Write ``text`` encoded as UTF-8 and return the byte count."""
        ...

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the offset and return the new absolute position."""
        ...

    def truncate(self, size: int) -> None:
        """Resize the file to ``size`` bytes."""
        ...

    def sync(self) -> None:
        """Flush written data to stable storage."""
        ...

    def close(self) -> None:
        """Release the handle. Further calls raise ``ValueError``."""
        ...

    def stat(self) -> FileInfo:
        """Return metadata for the open file."""
        ...

    def readdir(self, count: int = -1) -> list[FileInfo]:
        """List directory entries.

        With ``count <= 0`` every remaining entry is returned. With a positive
        ``count`` at most that many entries are returned and subsequent calls
        continue where the previous one stopped; ``[]`` marks the end.

        Raises:
            NotADirectoryError: The handle refers to a regular file.
        """
        ...

    def readdirnames(self, count: int = -1) -> list[str]:
        """Like :meth:`readdir` but returns entry names only."""
        ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class Fs(Protocol):
    """Filesystem provider contract.

    Paths are ``/``-separated strings. Providers clean them lexically before
    use, so ``/a/./b`` and ``/a/b`` name the same entry.

    Example::

        def save(fs: Fs, path: str, payload: bytes) -> None:
            with fs.create(path) as handle:
                handle.write(payload)
    """

    def name(self) -> str:
        """Short human-readable provider name."""
        ...

    def create(self, name: str) -> File:
        """Create or truncate ``name`` and open it read-write.

        Raises:
            FileNotFoundError: Parent directory missing (host provider).
            IsADirectoryError: ``name`` is a directory.
        """
        ...

    def open(self, name: str) -> File:
        """Open ``name`` read-only. Directories can be opened for listing.

        Raises:
            FileNotFoundError: Path does not exist.
        """
        ...

    def open_file(self, name: str, flags: int, perm: int) -> File:
        """Open ``name`` with :mod:`os`-style ``flags`` and ``perm`` for creation."""
        ...

    def mkdir(self, name: str, perm: int) -> None:
        """Create a single directory.

        Raises:
            FileExistsError: Path already exists.
            FileNotFoundError: Parent directory missing.
        """
        ...

    def mkdir_all(self, path: str, perm: int) -> None:
        """Create a directory and any missing parents. Existing dirs are fine.

        Raises:
            FileExistsError: ``path`` itself exists and is not a directory.
            NotADirectoryError: A parent component is a file.
        """
        ...

    def remove(self, name: str) -> None:
        """Remove a file or an empty directory.

        Raises:
            FileNotFoundError: Path does not exist.
            OSError: Directory is not empty (``errno.ENOTEMPTY``).
        """
        ...

    def remove_all(self, path: str) -> None:
        """Remove ``path`` and everything below it. Missing paths are fine."""
        ...

    def rename(self, old_name: str, new_name: str) -> None:
        """Move ``old_name`` to ``new_name``, replacing a destination file."""
        ...

    def stat(self, name: str) -> FileInfo:
        """Return metadata, following symlinks."""
        ...

    def chmod(self, name: str, mode: int) -> None:
        """Change permission bits."""
        ...

    def chown(self, name: str, uid: int, gid: int) -> None:
        """Change ownership."""
        ...

    def chtimes(self, name: str, atime: datetime, mtime: datetime) -> None:
        """Change access and modification times."""
        ...


@runtime_checkable
class Symlinker(Protocol):
    """Optional capability: create symbolic links."""

    def symlink(self, old_name: str, new_name: str) -> None:
        """Create ``new_name`` as a symlink pointing at ``old_name``."""
        ...


@runtime_checkable
class LinkReader(Protocol):
    """Optional capability: read symbolic link targets."""

    def readlink(self, name: str) -> str:
        """Return the target of the symlink ``name``."""
        ...


@runtime_checkable
class Lstater(Protocol):
    """Optional capability: stat without following symlinks."""

    def lstat(self, name: str) -> FileInfo:
        """Return metadata for ``name`` itself, not its link target."""
        ...


__all__ = [
    "File",
    "Fs",
    "LinkReader",
    "Lstater",
    "Symlinker",
]
