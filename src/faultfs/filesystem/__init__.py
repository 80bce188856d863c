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

"""Filesystem provider contract and reference providers.

This module provides the `Fs` and `File` protocols that every provider
satisfies, the optional capability protocols, and two providers that can be
wrapped by ``faultfs.FaultFs``.

Example usage::

    from faultfs.filesystem import Fs, MemoryFs

    def touch(fs: Fs, path: str) -> None:
        fs.create(path).close()

    touch(MemoryFs(), "/ready")

Providers:

- ``MemoryFs``: In-memory tree, thread-safe, no symlinks
- ``OsFs``: Host filesystem, optionally confined to a root directory
"""

from __future__ import annotations

from ._memory import MemoryFile, MemoryFs
from ._os import OsFile, OsFs
from ._path import SEPARATOR, clean_path, is_under
from ._protocol import File, Fs, LinkReader, Lstater, Symlinker
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
    WRITE_FLAGS,
    FileInfo,
    base_name,
)

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
    "SEPARATOR",
    "WRITE_FLAGS",
    "File",
    "FileInfo",
    "Fs",
    "LinkReader",
    "Lstater",
    "MemoryFile",
    "MemoryFs",
    "OsFile",
    "OsFs",
    "Symlinker",
    "base_name",
    "clean_path",
    "is_under",
]
