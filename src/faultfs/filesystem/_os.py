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

"""Host filesystem provider.

This module provides an :class:`Fs` implementation backed by the host
operating system, optionally confined to a root directory.

Example usage::

    from faultfs.filesystem import OsFs

    # Paths are interpreted below /tmp/sandbox
    fs = OsFs(_root="/tmp/sandbox")
    fs.mkdir_all("/logs", 0o755)
    with fs.create("/logs/app.log") as handle:
        handle.write_string("started\\n")

Without a root, paths are handed to :mod:`os` unchanged apart from lexical
cleaning.
"""

from __future__ import annotations

import errno
import os
import shutil
import stat as _stat
from dataclasses import dataclass
from datetime import datetime
from types import TracebackType
from typing import Self

from ._path import SEPARATOR, clean_path
from ._types import DEFAULT_FILE_PERM, O_CREATE, O_RDONLY, O_RDWR, O_TRUNC, FileInfo

__all__ = ["OsFile", "OsFs"]


@dataclass(slots=True, frozen=True)
class OsFs:
    """Filesystem backed by the host, optionally rooted in a sandbox directory.

    When ``_root`` is set every path is resolved lexically below it and
    ``readlink`` reports targets relative to it, so the provider behaves as
    if ``_root`` were ``/``. Paths climbing out of the root raise
    ``PermissionError``.
    """

    _root: str | None = None

    @property
    def root(self) -> str | None:
        """Sandbox root, or ``None`` for unrestricted host access."""
        return self._root

    def name(self) -> str:
        return "OsFs"

    def _resolve_path(self, path: str) -> str:
        """Map a provider path to a host path.

        Raises:
            PermissionError: If the path escapes the root directory.
        """
        cleaned = clean_path(path)
        if self._root is None:
            return cleaned
        if cleaned == ".." or cleaned.startswith(".." + SEPARATOR):
            msg = f"Path escapes root directory: {path}"
            raise PermissionError(errno.EPERM, msg, path)
        relative = cleaned.lstrip(SEPARATOR)
        if not relative or relative == ".":
            return self._root
        return os.path.join(self._root, relative)

    # --- Handles ---

    def create(self, name: str) -> OsFile:
        return self.open_file(name, O_RDWR | O_CREATE | O_TRUNC, DEFAULT_FILE_PERM)

    def open(self, name: str) -> OsFile:
        return self.open_file(name, O_RDONLY, 0)

    def open_file(self, name: str, flags: int, perm: int) -> OsFile:
        resolved = self._resolve_path(name)
        fd = os.open(resolved, flags, perm)
        return OsFile(name, resolved, fd)

    # --- Directories ---

    def mkdir(self, name: str, perm: int) -> None:
        os.mkdir(self._resolve_path(name), perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        os.makedirs(self._resolve_path(path), perm, exist_ok=True)

    # --- Removal ---

    def remove(self, name: str) -> None:
        resolved = self._resolve_path(name)
        if os.path.isdir(resolved) and not os.path.islink(resolved):
            os.rmdir(resolved)
        else:
            os.remove(resolved)

    def remove_all(self, path: str) -> None:
        resolved = self._resolve_path(path)
        if not os.path.lexists(resolved):
            return
        if os.path.isdir(resolved) and not os.path.islink(resolved):
            shutil.rmtree(resolved)
        else:
            os.remove(resolved)

    def rename(self, old_name: str, new_name: str) -> None:
        os.replace(self._resolve_path(old_name), self._resolve_path(new_name))

    # --- Metadata ---

    def stat(self, name: str) -> FileInfo:
        resolved = self._resolve_path(name)
        return FileInfo.from_stat_result(os.path.basename(resolved), os.stat(resolved))

    def lstat(self, name: str) -> FileInfo:
        resolved = self._resolve_path(name)
        return FileInfo.from_stat_result(
            os.path.basename(resolved), os.lstat(resolved)
        )

    def chmod(self, name: str, mode: int) -> None:
        os.chmod(self._resolve_path(name), _stat.S_IMODE(mode))

    def chown(self, name: str, uid: int, gid: int) -> None:
        os.chown(self._resolve_path(name), uid, gid)

    def chtimes(self, name: str, atime: datetime, mtime: datetime) -> None:
        os.utime(self._resolve_path(name), (atime.timestamp(), mtime.timestamp()))

    # --- Links ---

    def symlink(self, old_name: str, new_name: str) -> None:
        os.symlink(self._resolve_path(old_name), self._resolve_path(new_name))

    def readlink(self, name: str) -> str:
        target = os.readlink(self._resolve_path(name))
        if self._root is None:
            return target
        root = self._root.rstrip(SEPARATOR)
        if target == root:
            return SEPARATOR
        if target.startswith(root + SEPARATOR):
            return target[len(root) :]
        return target


class OsFile:
    """Handle onto a host file descriptor."""

    __slots__ = ("_closed", "_dir_offset", "_fd", "_name", "_resolved")

    def __init__(self, name: str, resolved: str, fd: int) -> None:
        self._name = name
        self._resolved = resolved
        self._fd = fd
        self._dir_offset = 0
        self._closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def name(self) -> str:
        return self._name

    def _descriptor(self) -> int:
        if self._closed:
            msg = f"I/O operation on closed file: {self._name}"
            raise ValueError(msg)
        return self._fd

    def read(self, size: int = -1) -> bytes:
        fd = self._descriptor()
        if size >= 0:
            return os.read(fd, size)
        chunks: list[bytes] = []
        while chunk := os.read(fd, 64 * 1024):
            chunks.append(chunk)
        return b"".join(chunks)

    def read_at(self, size: int, offset: int) -> bytes:
        return os.pread(self._descriptor(), size, offset)

    def write(self, data: bytes) -> int:
        fd = self._descriptor()
        view = memoryview(data)
        written = 0
        while written < len(view):
            written += os.write(fd, view[written:])
        return written

    def write_at(self, data: bytes, offset: int) -> int:
        return os.pwrite(self._descriptor(), data, offset)

    def write_string(self, text: str) -> int:
        return self.write(text.encode("utf-8"))

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return os.lseek(self._descriptor(), offset, whence)

    def truncate(self, size: int) -> None:
        os.ftruncate(self._descriptor(), size)

    def sync(self) -> None:
        os.fsync(self._descriptor())

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        os.close(self._fd)

    def stat(self) -> FileInfo:
        return FileInfo.from_stat_result(
            os.path.basename(self._resolved), os.fstat(self._descriptor())
        )

    def readdir(self, count: int = -1) -> list[FileInfo]:
        fd = self._descriptor()
        if not _stat.S_ISDIR(os.fstat(fd).st_mode):
            raise NotADirectoryError(
                errno.ENOTDIR, os.strerror(errno.ENOTDIR), self._name
            )
        names = sorted(os.listdir(self._resolved))[self._dir_offset :]
        batch = names[:count] if count > 0 else names
        self._dir_offset += len(batch)
        return [
            FileInfo.from_stat_result(
                entry, os.lstat(os.path.join(self._resolved, entry))
            )
            for entry in batch
        ]

    def readdirnames(self, count: int = -1) -> list[str]:
        return [info.name for info in self.readdir(count)]
