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

"""Shared path normalization utilities.

Rules are keyed by the cleaned form of a path so that syntactically different
spellings of one path (``/a/./b``, ``/a//b/``, ``/a/c/../b``) share a single
registry entry. Cleaning is purely lexical: symlinks are never resolved and
the filesystem is never consulted.

Constants:
    SEPARATOR: The path separator used by every provider ("/")

Functions:
    clean_path: Lexically normalize a path
    is_under: Test whether a path equals or sits below another
"""

from __future__ import annotations

from typing import Final

SEPARATOR: Final[str] = "/"


def clean_path(path: str) -> str:
    """Return the shortest lexically equivalent form of ``path``.

    This function:
    - Replaces runs of separators with a single separator
    - Removes "." segments
    - Removes ".." segments together with the segment before them
    - Drops ".." segments at the start of an absolute path
    - Keeps leading ".." segments of a relative path
    - Returns "." for an empty result of a relative path, "/" for root

    Examples:
        >>> clean_path("/foo//bar/")
        '/foo/bar'
        >>> clean_path("foo/../bar")
        'bar'
        >>> clean_path("/../foo")
        '/foo'
        >>> clean_path("../../foo")
        '../../foo'
        >>> clean_path("")
        '.'
    """
    rooted = path.startswith(SEPARATOR)
    result: list[str] = []
    for segment in path.split(SEPARATOR):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if result and result[-1] != "..":
                _ = result.pop()
            elif not rooted:
                result.append(segment)
            continue
        result.append(segment)
    joined = SEPARATOR.join(result)
    if rooted:
        return SEPARATOR + joined
    return joined or "."


def is_under(path: str, root: str) -> bool:
    """Return True if cleaned ``path`` equals ``root`` or is lexically below it.

    Both arguments must already be cleaned. A plain string prefix is not
    enough: ``/data2`` is not under ``/data``.

    Examples:
        >>> is_under("/d/f", "/d")
        True
        >>> is_under("/dx", "/d")
        False
        >>> is_under("/anything", "/")
        True
    """
    if path == root:
        return True
    if root == SEPARATOR:
        return path.startswith(SEPARATOR)
    if root == ".":
        return not path.startswith(SEPARATOR) and not _escapes(path)
    return path.startswith(root + SEPARATOR)


def _escapes(path: str) -> bool:
    return path == ".." or path.startswith(".." + SEPARATOR)


__all__ = [
    "SEPARATOR",
    "clean_path",
    "is_under",
]
