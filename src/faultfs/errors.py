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

"""Base exception hierarchy for :mod:`faultfs`.

Injected errors are deliberately absent from this module: ``FaultFs`` raises
the exact exception instance a harness registered, so nothing here ever wraps
them.
"""

from __future__ import annotations

import errno
import os


class FaultFsError(Exception):
    """Base class for all faultfs exceptions.

    Lets harnesses tell apart a misuse of the fault layer from the faults it
    was asked to inject.

    Example:
        Separating configuration mistakes from injected failures::

            try:
                fs.set_latency("/data", 0)
            except FaultFsError as e:
                logger.error("Bad fault configuration: %s", e)

    Note:
        Subclasses also inherit from a standard exception type so callers can
        catch them with ``ValueError``, ``LookupError`` or ``OSError``.
    """


class InvalidArgumentError(FaultFsError, ValueError):
    """Raised when a rule is registered with an out-of-range value.

    Common causes:
        - Non-positive latency passed to ``RuleRegistry.set_latency``
        - Negative latency passed to ``FaultFile.add_latency``
        - Probability outside ``[0, 1]``
        - An error value that is not an exception instance
    """


class RuleNotFoundError(FaultFsError, LookupError):
    """Raised when querying a rule that was never registered for a path.

    Example::

        registry.clear_write_error("/a")
        try:
            registry.get_write_error("/a")
        except RuleNotFoundError:
            pass  # nothing registered
    """

    def __init__(self, kind: str, path: str) -> None:
        super().__init__(f"no {kind} registered for '{path}'")
        self.kind = kind
        self.path = path


class NotSupportedError(FaultFsError, OSError):
    """Raised when the wrapped provider lacks an optional capability.

    The operation name and the path(s) involved are kept as attributes so
    harnesses can assert on them.

    Attributes:
        op: Operation name (``"symlink"``, ``"readlink"`` or ``"lstat"``).
        path: Primary path of the operation.
        new_path: Second path for two-path operations, otherwise ``None``.
    """

    def __init__(self, op: str, path: str, new_path: str | None = None) -> None:
        super().__init__(errno.ENOTSUP, f"{op}: {os.strerror(errno.ENOTSUP)}", path)
        self.op = op
        self.path = path
        self.new_path = new_path

    def __str__(self) -> str:
        if self.new_path is None:
            return f"{self.op} {self.path}: operation not supported by provider"
        return (
            f"{self.op} {self.path} {self.new_path}: "
            "operation not supported by provider"
        )


__all__ = [
    "FaultFsError",
    "InvalidArgumentError",
    "NotSupportedError",
    "RuleNotFoundError",
]
