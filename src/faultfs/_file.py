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

"""Fault-injecting wrapper around an open file handle.

A :class:`FaultFile` carries its own error and latency state, seeded from the
registry when the handle is opened and never synchronized with it again.
Changing the registry afterwards does not affect handles already open;
changing a handle's state affects that handle only.
"""

from __future__ import annotations

import math
import os
import threading
from types import TracebackType
from typing import Self

from ._classify import Direction, classify
from ._injector import RandomSource, raise_injected
from ._registry import ErrorRule
from .clock import Sleeper
from .errors import InvalidArgumentError
from .filesystem import File, FileInfo


class FaultFile:
    """File handle facade with handle-local fault state.

    Every call classifies itself, sleeps for the handle's latency, then
    raises the handle's error for that direction if it triggers. A raised
    error means the wrapped handle was not touched for that call. ``name()``
    only applies the latency; it is never failed.

    Example::

        handle = fs.open("/data/in.csv")
        handle.add_read_error(OSError(5, "Input/output error"))
        handle.read(10)  # raises the OSError above
        handle.del_read_error()
        handle.read(10)  # reaches the wrapped handle
    """

    __slots__ = (
        "_clock",
        "_latency",
        "_lock",
        "_read_error",
        "_rng",
        "_source",
        "_write_error",
    )

    def __init__(
        self,
        source: File,
        *,
        clock: Sleeper,
        rng: RandomSource,
        write_error: ErrorRule | None = None,
        read_error: ErrorRule | None = None,
        latency: float = 0.0,
    ) -> None:
        self._source = source
        self._clock = clock
        self._rng = rng
        self._write_error = write_error
        self._read_error = read_error
        self._latency = latency
        self._lock = threading.Lock()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # --- Fault state ---

    def add_write_error(self, error: BaseException, probability: float = 1.0) -> None:
        rule = ErrorRule(error=error, probability=probability)
        with self._lock:
            self._write_error = rule

    def del_write_error(self) -> None:
        with self._lock:
            self._write_error = None

    def add_read_error(self, error: BaseException, probability: float = 1.0) -> None:
        rule = ErrorRule(error=error, probability=probability)
        with self._lock:
            self._read_error = rule

    def del_read_error(self) -> None:
        with self._lock:
            self._read_error = None

    def add_latency(self, seconds: float) -> None:
        """Delay every later call on this handle by ``seconds``.

        Zero turns the delay off.

        Raises:
            InvalidArgumentError: ``seconds`` is negative.
        """
        if math.isnan(seconds) or seconds < 0:
            msg = "Latency for I/O operations must not be negative"
            raise InvalidArgumentError(msg)
        with self._lock:
            self._latency = seconds

    def del_latency(self) -> None:
        with self._lock:
            self._latency = 0.0

    def get_latency(self) -> float:
        with self._lock:
            return self._latency

    @property
    def write_error(self) -> ErrorRule | None:
        with self._lock:
            return self._write_error

    @property
    def read_error(self) -> ErrorRule | None:
        with self._lock:
            return self._read_error

    # --- Interception ---

    def _delay(self) -> None:
        with self._lock:
            latency = self._latency
        if latency > 0:
            self._clock.sleep(latency)

    def _intercept(self, operation: str) -> None:
        direction = classify(operation)
        self._delay()
        with self._lock:
            rule = (
                self._write_error
                if direction is Direction.WRITE
                else self._read_error
            )
        if rule is not None and self._rng.random() < rule.probability:
            raise_injected(rule)

    # --- File contract ---

    def name(self) -> str:
        self._delay()
        return self._source.name()

    def read(self, size: int = -1) -> bytes:
        self._intercept("read")
        return self._source.read(size)

    def read_at(self, size: int, offset: int) -> bytes:
        self._intercept("read_at")
        return self._source.read_at(size, offset)

    def write(self, data: bytes) -> int:
        self._intercept("write")
        return self._source.write(data)

    def write_at(self, data: bytes, offset: int) -> int:
        self._intercept("write_at")
        return self._source.write_at(data, offset)

    def write_string(self, text: str) -> int:
        self._intercept("write_string")
        return self._source.write_string(text)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._intercept("seek")
        return self._source.seek(offset, whence)

    def truncate(self, size: int) -> None:
        self._intercept("truncate")
        self._source.truncate(size)

    def sync(self) -> None:
        self._intercept("sync")
        self._source.sync()

    def close(self) -> None:
        self._intercept("close")
        self._source.close()

    def stat(self) -> FileInfo:
        self._intercept("stat")
        return self._source.stat()

    def readdir(self, count: int = -1) -> list[FileInfo]:
        self._intercept("readdir")
        return self._source.readdir(count)

    def readdirnames(self, count: int = -1) -> list[str]:
        self._intercept("readdirnames")
        return self._source.readdirnames(count)


__all__ = ["FaultFile"]
