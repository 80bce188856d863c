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

"""Shared filesystem test helpers.

``ProviderContractSuite`` is a reusable test suite that validates any
implementation of the ``Fs`` protocol. Subclass it with a concrete ``fs``
fixture::

    class TestMyProvider(ProviderContractSuite):
        @pytest.fixture
        def fs(self) -> Fs:
            return MyProvider()

``RecordingFs`` wraps a provider and records every call that reaches it, so
tests can assert that an injected error short-circuited the delegate.
"""

from __future__ import annotations

import errno
import os
from abc import abstractmethod
from datetime import UTC, datetime
from types import TracebackType
from typing import Self

import pytest

from faultfs.filesystem import (
    DEFAULT_DIR_PERM,
    O_APPEND,
    O_CREATE,
    O_EXCL,
    O_RDWR,
    O_WRONLY,
    File,
    FileInfo,
    Fs,
    MemoryFs,
)


class RecordingFile:
    """Handle wrapper appending every call to its provider's log."""

    def __init__(self, source: File, calls: list[tuple[str, str]], path: str) -> None:
        self._source = source
        self._calls = calls
        self._path = path

    def _record(self, operation: str) -> None:
        self._calls.append((f"file.{operation}", self._path))

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
        self._record("name")
        return self._source.name()

    def read(self, size: int = -1) -> bytes:
        self._record("read")
        return self._source.read(size)

    def read_at(self, size: int, offset: int) -> bytes:
        self._record("read_at")
        return self._source.read_at(size, offset)

    def write(self, data: bytes) -> int:
        self._record("write")
        return self._source.write(data)

    def write_at(self, data: bytes, offset: int) -> int:
        self._record("write_at")
        return self._source.write_at(data, offset)

    def write_string(self, text: str) -> int:
        self._record("write_string")
        return self._source.write_string(text)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._record("seek")
        return self._source.seek(offset, whence)

    def truncate(self, size: int) -> None:
        self._record("truncate")
        self._source.truncate(size)

    def sync(self) -> None:
        self._record("sync")
        self._source.sync()

    def close(self) -> None:
        self._record("close")
        self._source.close()

    def stat(self) -> FileInfo:
        self._record("stat")
        return self._source.stat()

    def readdir(self, count: int = -1) -> list[FileInfo]:
        self._record("readdir")
        return self._source.readdir(count)

    def readdirnames(self, count: int = -1) -> list[str]:
        self._record("readdirnames")
        return self._source.readdirnames(count)


class RecordingFs:
    """Provider wrapper logging ``(operation, path)`` for every delegated call.

    Only the required ``Fs`` contract is implemented, so it also serves as a
    provider without optional capabilities.
    """

    def __init__(self, source: Fs | None = None) -> None:
        self._source: Fs = source if source is not None else MemoryFs()
        self.calls: list[tuple[str, str]] = []

    def _record(self, operation: str, path: str) -> None:
        self.calls.append((operation, path))

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def reset(self) -> None:
        self.calls.clear()

    def name(self) -> str:
        return "RecordingFs"

    def create(self, name: str) -> RecordingFile:
        self._record("create", name)
        return RecordingFile(self._source.create(name), self.calls, name)

    def open(self, name: str) -> RecordingFile:
        self._record("open", name)
        return RecordingFile(self._source.open(name), self.calls, name)

    def open_file(self, name: str, flags: int, perm: int) -> RecordingFile:
        self._record("open_file", name)
        return RecordingFile(self._source.open_file(name, flags, perm), self.calls, name)

    def mkdir(self, name: str, perm: int) -> None:
        self._record("mkdir", name)
        self._source.mkdir(name, perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        self._record("mkdir_all", path)
        self._source.mkdir_all(path, perm)

    def remove(self, name: str) -> None:
        self._record("remove", name)
        self._source.remove(name)

    def remove_all(self, path: str) -> None:
        self._record("remove_all", path)
        self._source.remove_all(path)

    def rename(self, old_name: str, new_name: str) -> None:
        self._record("rename", f"{old_name} -> {new_name}")
        self._source.rename(old_name, new_name)

    def stat(self, name: str) -> FileInfo:
        self._record("stat", name)
        return self._source.stat(name)

    def chmod(self, name: str, mode: int) -> None:
        self._record("chmod", name)
        self._source.chmod(name, mode)

    def chown(self, name: str, uid: int, gid: int) -> None:
        self._record("chown", name)
        self._source.chown(name, uid, gid)

    def chtimes(self, name: str, atime: datetime, mtime: datetime) -> None:
        self._record("chtimes", name)
        self._source.chtimes(name, atime, mtime)


class ProviderContractSuite:
    """Abstract test suite for ``Fs`` protocol compliance.

    Subclasses must implement the ``fs`` fixture. The provider should be
    empty at the start of each test. Paths are absolute so the same suite
    runs against rooted host providers and in-memory ones.
    """

    @pytest.fixture
    @abstractmethod
    def fs(self) -> Fs:
        """Provide a fresh, empty provider."""
        ...

    # -------------------------------------------------------------------------
    # Protocol
    # -------------------------------------------------------------------------

    def test_satisfies_fs_protocol(self, fs: Fs) -> None:
        assert isinstance(fs, Fs)

    def test_name_is_non_empty(self, fs: Fs) -> None:
        assert fs.name()

    # -------------------------------------------------------------------------
    # Create / Open
    # -------------------------------------------------------------------------

    def test_create_returns_handle_named_after_path(self, fs: Fs) -> None:
        with fs.create("/file.txt") as handle:
            assert isinstance(handle, File)
            assert handle.name() == "/file.txt"

    def test_write_then_read_back(self, fs: Fs) -> None:
        with fs.create("/file.txt") as handle:
            assert handle.write(b"hello world") == 11
            assert handle.seek(0) == 0
            assert handle.read() == b"hello world"

    def test_open_reads_existing_content(self, fs: Fs) -> None:
        with fs.create("/file.txt") as handle:
            _ = handle.write_string("héllo")
        with fs.open("/file.txt") as handle:
            assert handle.read(1) == b"h"
            assert handle.read().decode("utf-8") == "éllo"

    def test_open_missing_raises(self, fs: Fs) -> None:
        with pytest.raises(FileNotFoundError):
            _ = fs.open("/missing.txt")

    def test_create_truncates_existing(self, fs: Fs) -> None:
        with fs.create("/file.txt") as handle:
            _ = handle.write(b"long content")
        fs.create("/file.txt").close()
        assert fs.stat("/file.txt").size_bytes == 0

    def test_open_file_exclusive_on_existing_raises(self, fs: Fs) -> None:
        fs.create("/file.txt").close()
        with pytest.raises(FileExistsError):
            _ = fs.open_file("/file.txt", O_RDWR | O_CREATE | O_EXCL, 0o644)

    def test_open_file_append_writes_at_end(self, fs: Fs) -> None:
        with fs.create("/log.txt") as handle:
            _ = handle.write(b"one\n")
        with fs.open_file("/log.txt", O_WRONLY | O_APPEND, 0) as handle:
            _ = handle.write(b"two\n")
        with fs.open("/log.txt") as handle:
            assert handle.read() == b"one\ntwo\n"

    def test_positional_read_and_write(self, fs: Fs) -> None:
        with fs.create("/file.bin") as handle:
            _ = handle.write(b"0123456789")
            assert handle.write_at(b"ab", 2) == 2
            assert handle.read_at(4, 1) == b"1ab4"

    def test_truncate_shrinks_file(self, fs: Fs) -> None:
        with fs.create("/file.bin") as handle:
            _ = handle.write(b"0123456789")
            handle.truncate(4)
            handle.sync()
            assert handle.stat().size_bytes == 4

    def test_closed_handle_rejects_io(self, fs: Fs) -> None:
        handle = fs.create("/file.txt")
        handle.close()
        with pytest.raises(ValueError):
            _ = handle.read()

    # -------------------------------------------------------------------------
    # Directories
    # -------------------------------------------------------------------------

    def test_mkdir_creates_directory(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        assert fs.stat("/dir").is_directory

    def test_mkdir_existing_raises(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        with pytest.raises(FileExistsError):
            fs.mkdir("/dir", DEFAULT_DIR_PERM)

    def test_mkdir_missing_parent_raises(self, fs: Fs) -> None:
        with pytest.raises(FileNotFoundError):
            fs.mkdir("/missing/dir", DEFAULT_DIR_PERM)

    def test_mkdir_all_creates_parents_and_is_idempotent(self, fs: Fs) -> None:
        fs.mkdir_all("/a/b/c", DEFAULT_DIR_PERM)
        fs.mkdir_all("/a/b/c", DEFAULT_DIR_PERM)
        assert fs.stat("/a/b").is_directory
        assert fs.stat("/a/b/c").is_directory

    def test_readdirnames_sorted(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        for name in ("c.txt", "a.txt", "b.txt"):
            fs.create(f"/dir/{name}").close()
        with fs.open("/dir") as handle:
            assert handle.readdirnames() == ["a.txt", "b.txt", "c.txt"]

    def test_readdir_in_batches(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        for name in ("a", "b", "c"):
            fs.create(f"/dir/{name}").close()
        with fs.open("/dir") as handle:
            first = handle.readdir(2)
            second = handle.readdir(2)
            assert [info.name for info in first] == ["a", "b"]
            assert [info.name for info in second] == ["c"]
            assert handle.readdir(2) == []

    def test_readdir_on_file_raises(self, fs: Fs) -> None:
        fs.create("/file.txt").close()
        with fs.open("/file.txt") as handle, pytest.raises(NotADirectoryError):
            _ = handle.readdir()

    # -------------------------------------------------------------------------
    # Removal and rename
    # -------------------------------------------------------------------------

    def test_remove_file(self, fs: Fs) -> None:
        fs.create("/file.txt").close()
        fs.remove("/file.txt")
        with pytest.raises(FileNotFoundError):
            _ = fs.stat("/file.txt")

    def test_remove_missing_raises(self, fs: Fs) -> None:
        with pytest.raises(FileNotFoundError):
            fs.remove("/missing.txt")

    def test_remove_non_empty_directory_raises(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        fs.create("/dir/file.txt").close()
        with pytest.raises(OSError) as excinfo:
            fs.remove("/dir")
        assert excinfo.value.errno == errno.ENOTEMPTY

    def test_remove_all_deletes_tree(self, fs: Fs) -> None:
        fs.mkdir_all("/dir/sub", DEFAULT_DIR_PERM)
        fs.create("/dir/sub/file.txt").close()
        fs.remove_all("/dir")
        with pytest.raises(FileNotFoundError):
            _ = fs.stat("/dir")

    def test_remove_all_missing_is_noop(self, fs: Fs) -> None:
        fs.remove_all("/missing")

    def test_rename_moves_content(self, fs: Fs) -> None:
        with fs.create("/old.txt") as handle:
            _ = handle.write(b"payload")
        fs.rename("/old.txt", "/new.txt")
        with fs.open("/new.txt") as handle:
            assert handle.read() == b"payload"
        with pytest.raises(FileNotFoundError):
            _ = fs.stat("/old.txt")

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def test_stat_reports_name_and_size(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        with fs.create("/dir/file.txt") as handle:
            _ = handle.write(b"12345")
        info = fs.stat("/dir/file.txt")
        assert info.name == "file.txt"
        assert info.size_bytes == 5
        assert info.is_file

    def test_stat_cleans_path(self, fs: Fs) -> None:
        fs.mkdir("/dir", DEFAULT_DIR_PERM)
        fs.create("/dir/file.txt").close()
        assert fs.stat("/dir/./sub/../file.txt").name == "file.txt"

    def test_chmod_changes_permissions(self, fs: Fs) -> None:
        fs.create("/file.txt").close()
        fs.chmod("/file.txt", 0o600)
        assert fs.stat("/file.txt").permissions == 0o600

    def test_chtimes_sets_modification_time(self, fs: Fs) -> None:
        fs.create("/file.txt").close()
        moment = datetime(2020, 1, 2, 3, 4, 5, tzinfo=UTC)
        fs.chtimes("/file.txt", moment, moment)
        assert fs.stat("/file.txt").modified_at == moment

    def test_stat_missing_raises(self, fs: Fs) -> None:
        with pytest.raises(FileNotFoundError):
            _ = fs.stat("/missing.txt")


__all__ = [
    "ProviderContractSuite",
    "RecordingFile",
    "RecordingFs",
]
