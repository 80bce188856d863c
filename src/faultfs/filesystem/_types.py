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

"""Core filesystem types shared by providers and the fault layer.

Constants:

- ``O_RDONLY`` .. ``O_EXCL``: open flags, re-exported from :mod:`os` so
  providers and callers agree on one bit layout
- ``WRITE_FLAGS``: the flags that make an ``open_file`` call a write
- ``DEFAULT_FILE_PERM`` / ``DEFAULT_DIR_PERM``: permissions used by
  ``create`` and by callers that don't care
"""

from __future__ import annotations

import os
import stat as _stat
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final

O_RDONLY: Final[int] = os.O_RDONLY
O_WRONLY: Final[int] = os.O_WRONLY
O_RDWR: Final[int] = os.O_RDWR
O_APPEND: Final[int] = os.O_APPEND
O_CREATE: Final[int] = os.O_CREAT
O_TRUNC: Final[int] = os.O_TRUNC
O_EXCL: Final[int] = os.O_EXCL

WRITE_FLAGS: Final[int] = O_WRONLY | O_RDWR | O_APPEND | O_CREATE | O_TRUNC

DEFAULT_FILE_PERM: Final[int] = 0o666
DEFAULT_DIR_PERM: Final[int] = 0o755


@dataclass(slots=True, frozen=True)
class FileInfo:
    """Metadata for a file or directory.

    Returned by ``stat``, ``lstat`` and ``readdir`` on every provider.

    Attributes:
        name: Base name of the entry (e.g. "main.py").
        size_bytes: Size in bytes (0 for directories in memory providers).
        mode: Full ``st_mode`` value including the file type bits.
        modified_at: Last modification time (UTC).

    Example::

        info = fs.stat("/src/main.py")
        if info.is_file and info.size_bytes > 0:
            handle = fs.open("/src/main.py")
    """

    name: str
    size_bytes: int
    mode: int
    modified_at: datetime

    @property
    def is_directory(self) -> bool:
        return _stat.S_ISDIR(self.mode)

    @property
    def is_file(self) -> bool:
        return _stat.S_ISREG(self.mode)

    @property
    def is_symlink(self) -> bool:
        return _stat.S_ISLNK(self.mode)

    @property
    def permissions(self) -> int:
        """Permission bits only (``mode & 0o7777``)."""
        return _stat.S_IMODE(self.mode)

    @classmethod
    def from_stat_result(cls, name: str, result: os.stat_result) -> FileInfo:
        """Build a ``FileInfo`` from an :func:`os.stat` result."""
        return cls(
            name=name,
            size_bytes=result.st_size,
            mode=result.st_mode,
            modified_at=datetime.fromtimestamp(result.st_mtime, tz=UTC),
        )


def base_name(path: str) -> str:
    """Return the last segment of a cleaned path ("/" for root)."""
    if path == "/":
        return "/"
    return path.rstrip("/").rsplit("/", 1)[-1]


__all__ = [
    "DEFAULT_DIR_PERM",
    "DEFAULT_FILE_PERM",
    "O_APPEND",
    "O_CREATE",
    "O_EXCL",
    "O_RDONLY",
    "O_RDWR",
    "O_TRUNC",
    "O_WRONLY",
    "WRITE_FLAGS",
    "FileInfo",
    "base_name",
]
