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

"""In-memory filesystem provider.

This module provides an in-memory implementation of the :class:`Fs`
protocol, suitable as the wrapped provider in tests that should not touch
the host disk.

Example usage::

    from faultfs.filesystem import MemoryFs

    fs = MemoryFs()
    with fs.create("/src/main.py") as handle:
        handle.write(b"print('hello')")
    assert fs.stat("/src/main.py").size_bytes == 14

Relative paths are anchored at ``/``, so ``"notes.txt"`` and
``"/notes.txt"`` name the same file. Missing parent directories are created
implicitly when a file is created. Symlinks are not supported; ``lstat``
behaves like ``stat``.
"""

from __future__ import annotations

import errno
import os
import stat as _stat
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import TracebackType
from typing import Self

from ._path import SEPARATOR, clean_path, is_under
from ._types import (
    DEFAULT_DIR_PERM,
    DEFAULT_FILE_PERM,
    O_APPEND,
    O_CREATE,
    O_EXCL,
    O_RDONLY,
    O_RDWR,
    O_TRUNC,
    O_WRONLY,
    FileInfo,
    base_name,
)

__all__ = ["MemoryFile", "MemoryFs"]


# ---------------------------------------------------------------------------
# Internal Types
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _MemoryNode:
    """Internal representation of a file or directory in memory."""

    is_directory: bool
    perm: int
    data: bytearray = field(default_factory=bytearray)
    modified_at: datetime = field(default_factory=_now)
    accessed_at: datetime = field(default_factory=_now)
    uid: int = -1
    gid: int = -1

    def info(self, name: str) -> FileInfo:
        kind = _stat.S_IFDIR if self.is_directory else _stat.S_IFREG
        return FileInfo(
            name=name,
            size_bytes=0 if self.is_directory else len(self.data),
            mode=kind | self.perm,
            modified_at=self.modified_at,
        )


def _os_error(cls: type[OSError], code: int, name: str) -> OSError:
    return cls(code, os.strerror(code), name)


def _key(name: str) -> str:
    cleaned = clean_path(name)
    if cleaned.startswith(SEPARATOR):
        return cleaned
    return clean_path(SEPARATOR + cleaned)


def _parent(key: str) -> str:
    if key == SEPARATOR:
        return SEPARATOR
    head = key.rsplit(SEPARATOR, 1)[0]
    return head or SEPARATOR


def _empty_nodes() -> dict[str, _MemoryNode]:
    return {SEPARATOR: _MemoryNode(is_directory=True, perm=DEFAULT_DIR_PERM)}


# ---------------------------------------------------------------------------
# MemoryFs Implementation
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MemoryFs:
    """In-memory filesystem implementation.

    All state lives in a single path-keyed dictionary guarded by one
    re-entrant lock, so a ``MemoryFs`` can be shared between threads.
    """

    _nodes: dict[str, _MemoryNode] = field(default_factory=_empty_nodes)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def name(self) -> str:
        return "MemoryFs"

    # --- Handles ---

    def create(self, name: str) -> MemoryFile:
        return self.open_file(name, O_RDWR | O_CREATE | O_TRUNC, DEFAULT_FILE_PERM)

    def open(self, name: str) -> MemoryFile:
        return self.open_file(name, O_RDONLY, 0)

    def open_file(self, name: str, flags: int, perm: int) -> MemoryFile:
        key = _key(name)
        writable = bool(flags & (O_WRONLY | O_RDWR))
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                if not flags & O_CREATE:
                    raise _os_error(FileNotFoundError, errno.ENOENT, name)
                self._ensure_parents(key, name)
                node = _MemoryNode(is_directory=False, perm=_stat.S_IMODE(perm))
                self._nodes[key] = node
            else:
                if flags & O_CREATE and flags & O_EXCL:
                    raise _os_error(FileExistsError, errno.EEXIST, name)
                if node.is_directory and writable:
                    raise _os_error(IsADirectoryError, errno.EISDIR, name)
                if flags & O_TRUNC and writable:
                    node.data.clear()
                    node.modified_at = _now()
            return MemoryFile(self, name, key, node, flags)

    # --- Directories ---

    def mkdir(self, name: str, perm: int) -> None:
        key = _key(name)
        with self._lock:
            if key in self._nodes:
                raise _os_error(FileExistsError, errno.EEXIST, name)
            parent = self._nodes.get(_parent(key))
            if parent is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, name)
            if not parent.is_directory:
                raise _os_error(NotADirectoryError, errno.ENOTDIR, name)
            self._nodes[key] = _MemoryNode(is_directory=True, perm=_stat.S_IMODE(perm))

    def mkdir_all(self, path: str, perm: int) -> None:
        key = _key(path)
        with self._lock:
            existing = self._nodes.get(key)
            if existing is not None:
                if not existing.is_directory:
                    raise _os_error(FileExistsError, errno.EEXIST, path)
                return
            self._ensure_parents(key, path)
            self._nodes[key] = _MemoryNode(is_directory=True, perm=_stat.S_IMODE(perm))

    def _ensure_parents(self, key: str, name: str) -> None:
        """Create every missing ancestor of ``key``. Caller holds the lock."""
        missing: list[str] = []
        current = _parent(key)
        while current not in self._nodes:
            missing.append(current)
            current = _parent(current)
        if not self._nodes[current].is_directory:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, name)
        for ancestor in reversed(missing):
            self._nodes[ancestor] = _MemoryNode(
                is_directory=True, perm=DEFAULT_DIR_PERM
            )

    def _children(self, key: str) -> list[str]:
        """Keys strictly below ``key``. Caller holds the lock."""
        return [k for k in self._nodes if k != key and is_under(k, key)]

    def _entries(self, key: str) -> list[FileInfo]:
        with self._lock:
            names = sorted(k for k in self._nodes if k != key and _parent(k) == key)
            return [self._nodes[k].info(base_name(k)) for k in names]

    # --- Removal ---

    def remove(self, name: str) -> None:
        key = _key(name)
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, name)
            if key == SEPARATOR:
                raise _os_error(OSError, errno.EBUSY, name)
            if node.is_directory and self._children(key):
                raise _os_error(OSError, errno.ENOTEMPTY, name)
            del self._nodes[key]

    def remove_all(self, path: str) -> None:
        key = _key(path)
        with self._lock:
            if key not in self._nodes:
                return
            for child in self._children(key):
                del self._nodes[child]
            if key != SEPARATOR:
                del self._nodes[key]

    def rename(self, old_name: str, new_name: str) -> None:
        old_key = _key(old_name)
        new_key = _key(new_name)
        with self._lock:
            source = self._nodes.get(old_key)
            if source is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, old_name)
            if old_key == new_key:
                return
            if is_under(new_key, old_key):
                raise _os_error(OSError, errno.EINVAL, new_name)
            parent = self._nodes.get(_parent(new_key))
            if parent is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, new_name)
            if not parent.is_directory:
                raise _os_error(NotADirectoryError, errno.ENOTDIR, new_name)
            target = self._nodes.get(new_key)
            if target is not None:
                if target.is_directory and not source.is_directory:
                    raise _os_error(IsADirectoryError, errno.EISDIR, new_name)
                if source.is_directory and not target.is_directory:
                    raise _os_error(NotADirectoryError, errno.ENOTDIR, new_name)
                if target.is_directory and self._children(new_key):
                    raise _os_error(OSError, errno.ENOTEMPTY, new_name)
                del self._nodes[new_key]
            moved = [old_key, *self._children(old_key)]
            for key in moved:
                self._nodes[new_key + key[len(old_key) :]] = self._nodes.pop(key)

    # --- Metadata ---

    def stat(self, name: str) -> FileInfo:
        key = _key(name)
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, name)
            return node.info(base_name(key))

    def lstat(self, name: str) -> FileInfo:
        return self.stat(name)

    def chmod(self, name: str, mode: int) -> None:
        with self._lock:
            self._node(name).perm = _stat.S_IMODE(mode)

    def chown(self, name: str, uid: int, gid: int) -> None:
        with self._lock:
            node = self._node(name)
            node.uid = uid
            node.gid = gid

    def chtimes(self, name: str, atime: datetime, mtime: datetime) -> None:
        with self._lock:
            node = self._node(name)
            node.accessed_at = atime
            node.modified_at = mtime

    def owner(self, name: str) -> tuple[int, int]:
        """Return the ``(uid, gid)`` recorded by :meth:`chown`."""
        with self._lock:
            node = self._node(name)
            return node.uid, node.gid

    def _node(self, name: str) -> _MemoryNode:
        node = self._nodes.get(_key(name))
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, name)
        return node


class MemoryFile:
    """Handle onto a :class:`MemoryFs` node.

    The handle keeps a reference to its node, so it stays usable after the
    path is removed, like an unlinked file on a POSIX host.
    """

    __slots__ = (
        "_closed",
        "_dir_offset",
        "_flags",
        "_fs",
        "_key",
        "_name",
        "_node",
        "_offset",
    )

    def __init__(
        self, fs: MemoryFs, name: str, key: str, node: _MemoryNode, flags: int
    ) -> None:
        self._fs = fs
        self._name = name
        self._key = key
        self._node = node
        self._flags = flags
        self._offset = 0
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

    def _check_open(self) -> None:
        if self._closed:
            msg = f"I/O operation on closed file: {self._name}"
            raise ValueError(msg)

    def _check_readable(self) -> None:
        self._check_open()
        if self._flags & O_WRONLY:
            raise _os_error(OSError, errno.EBADF, self._name)
        if self._node.is_directory:
            raise _os_error(IsADirectoryError, errno.EISDIR, self._name)

    def _check_writable(self) -> None:
        self._check_open()
        if not self._flags & (O_WRONLY | O_RDWR):
            raise _os_error(OSError, errno.EBADF, self._name)

    def read(self, size: int = -1) -> bytes:
        self._check_readable()
        with self._fs._lock:
            data = self._slice(self._offset, size)
            self._offset += len(data)
            return data

    def read_at(self, size: int, offset: int) -> bytes:
        self._check_readable()
        if offset < 0:
            raise _os_error(OSError, errno.EINVAL, self._name)
        with self._fs._lock:
            return self._slice(offset, size)

    def _slice(self, start: int, size: int) -> bytes:
        content = self._node.data
        end = len(content) if size < 0 else start + size
        self._node.accessed_at = _now()
        return bytes(content[start:end])

    def write(self, data: bytes) -> int:
        self._check_writable()
        with self._fs._lock:
            if self._flags & O_APPEND:
                self._offset = len(self._node.data)
            written = self._splice(self._offset, data)
            self._offset += written
            return written

    def write_at(self, data: bytes, offset: int) -> int:
        self._check_writable()
        if offset < 0:
            raise _os_error(OSError, errno.EINVAL, self._name)
        with self._fs._lock:
            return self._splice(offset, data)

    def write_string(self, text: str) -> int:
        return self.write(text.encode("utf-8"))

    def _splice(self, offset: int, data: bytes) -> int:
        content = self._node.data
        if offset > len(content):
            content.extend(bytes(offset - len(content)))
        content[offset : offset + len(data)] = data
        self._node.modified_at = _now()
        return len(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._check_open()
        with self._fs._lock:
            if whence == os.SEEK_SET:
                position = offset
            elif whence == os.SEEK_CUR:
                position = self._offset + offset
            elif whence == os.SEEK_END:
                position = len(self._node.data) + offset
            else:
                raise _os_error(OSError, errno.EINVAL, self._name)
            if position < 0:
                raise _os_error(OSError, errno.EINVAL, self._name)
            self._offset = position
            return position

    def truncate(self, size: int) -> None:
        self._check_writable()
        if size < 0:
            raise _os_error(OSError, errno.EINVAL, self._name)
        with self._fs._lock:
            content = self._node.data
            if size < len(content):
                del content[size:]
            else:
                content.extend(bytes(size - len(content)))
            self._node.modified_at = _now()

    def sync(self) -> None:
        self._check_open()

    def close(self) -> None:
        self._closed = True

    def stat(self) -> FileInfo:
        self._check_open()
        with self._fs._lock:
            return self._node.info(base_name(self._key))

    def readdir(self, count: int = -1) -> list[FileInfo]:
        self._check_open()
        if not self._node.is_directory:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, self._name)
        remaining = self._fs._entries(self._key)[self._dir_offset :]
        batch = remaining[:count] if count > 0 else remaining
        self._dir_offset += len(batch)
        return batch

    def readdirnames(self, count: int = -1) -> list[str]:
        return [info.name for info in self.readdir(count)]
