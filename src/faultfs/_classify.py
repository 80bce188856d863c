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

"""Read/write classification of filesystem and handle operations.

Every intercepted call is either a read or a write; the direction selects
which of a path's two error rules applies. Latency rules apply to both.
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import Final

from .errors import InvalidArgumentError
from .filesystem import WRITE_FLAGS


class Direction(StrEnum):
    """Which error rule an operation is subject to."""

    READ = "read"
    WRITE = "write"


OPERATIONS: Final[MappingProxyType[str, Direction]] = MappingProxyType(
    {
        # Provider operations
        "create": Direction.WRITE,
        "mkdir": Direction.WRITE,
        "mkdir_all": Direction.WRITE,
        "remove": Direction.WRITE,
        "remove_all": Direction.WRITE,
        "rename": Direction.WRITE,
        "chmod": Direction.WRITE,
        "chown": Direction.WRITE,
        "chtimes": Direction.WRITE,
        "symlink": Direction.WRITE,
        "open": Direction.READ,
        "stat": Direction.READ,
        "lstat": Direction.READ,
        "readlink": Direction.READ,
        # Handle operations
        "write": Direction.WRITE,
        "write_at": Direction.WRITE,
        "write_string": Direction.WRITE,
        "truncate": Direction.WRITE,
        "sync": Direction.WRITE,
        "close": Direction.WRITE,
        "read": Direction.READ,
        "read_at": Direction.READ,
        "seek": Direction.READ,
        "readdir": Direction.READ,
        "readdirnames": Direction.READ,
        "name": Direction.READ,
    }
)
"""Direction of every operation with a fixed classification.

``open_file`` is absent: its direction depends on the flags, see
:func:`direction_for_flags`. Handle ``stat`` shares the provider entry.
"""


def classify(operation: str) -> Direction:
    """Return the direction of ``operation``.

    Raises:
        InvalidArgumentError: ``operation`` is unknown, or is ``open_file``
            whose direction needs the open flags.
    """
    try:
        return OPERATIONS[operation]
    except KeyError:
        msg = f"Cannot classify operation: {operation!r}"
        raise InvalidArgumentError(msg) from None


def direction_for_flags(flags: int) -> Direction:
    """Classify an ``open_file`` call from its :mod:`os`-style flags.

    Any of write-only, read-write, append, create or truncate makes the open
    a write; everything else is a read.
    """
    if flags & WRITE_FLAGS:
        return Direction.WRITE
    return Direction.READ


__all__ = [
    "OPERATIONS",
    "Direction",
    "classify",
    "direction_for_flags",
]
