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

"""Controllable time abstractions for latency injection.

Injected latency blocks the calling thread through a :class:`Sleeper`. The
production :data:`SYSTEM_CLOCK` really sleeps; :class:`FakeClock` advances
instantly so tests can assert on the exact delays a fault layer applied.

Example (production)::

    from faultfs.clock import SYSTEM_CLOCK

    start = SYSTEM_CLOCK.monotonic()
    SYSTEM_CLOCK.sleep(0.01)
    elapsed = SYSTEM_CLOCK.monotonic() - start  # ~0.01

Example (testing)::

    from faultfs.clock import FakeClock

    clock = FakeClock()
    clock.sleep(10)  # Advances instantly, no real delay
    assert clock.monotonic() == 10
    assert clock.sleeps == [10]
"""

from __future__ import annotations

import threading
import time as _time
from dataclasses import dataclass, field
from typing import Final, Protocol, runtime_checkable


@runtime_checkable
class MonotonicClock(Protocol):
    """Protocol for monotonic time measurement.

    The zero point is arbitrary and not related to wall-clock time.
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...


@runtime_checkable
class Sleeper(Protocol):
    """Protocol for synchronous sleep/delay operations.

    Separating sleep from clock allows tests to advance time without
    actually sleeping, while production code uses real delays.
    """

    def sleep(self, seconds: float) -> None:
        """Sleep for the specified duration in seconds."""
        ...


@runtime_checkable
class Clock(MonotonicClock, Sleeper, Protocol):
    """Monotonic time plus sleep."""

    pass


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Production clock delegating to :func:`time.monotonic` and :func:`time.sleep`."""

    def monotonic(self) -> float:
        """Return monotonic time from time.monotonic()."""
        return _time.monotonic()

    def sleep(self, seconds: float) -> None:
        """Sleep using time.sleep()."""
        _time.sleep(seconds)


# Module-level singleton for production use
SYSTEM_CLOCK: Final[Clock] = SystemClock()
"""Default system clock instance.

Used as the default sleeper of ``FaultFs``. Tests can inject FakeClock
instead for deterministic behavior.
"""


@dataclass
class FakeClock:
    """Controllable clock for deterministic testing.

    Sleep operations advance time immediately without blocking and are
    recorded in :attr:`sleeps` in call order.

    Thread-safety:
        All operations are thread-safe. Multiple threads can read and
        advance the clock concurrently.
    """

    _monotonic: float = 0.0
    _sleeps: list[float] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def monotonic(self) -> float:
        """Return current monotonic time."""
        with self._lock:
            return self._monotonic

    def sleep(self, seconds: float) -> None:
        """Advance time immediately without blocking."""
        self.advance(seconds)
        with self._lock:
            self._sleeps.append(seconds)

    def advance(self, seconds: float) -> None:
        """Advance the clock by the given duration.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            msg = "Cannot advance time by negative seconds"
            raise ValueError(msg)
        with self._lock:
            self._monotonic += seconds

    @property
    def sleeps(self) -> list[float]:
        """Durations passed to :meth:`sleep`, oldest first."""
        with self._lock:
            return list(self._sleeps)


__all__ = [
    "SYSTEM_CLOCK",
    "Clock",
    "FakeClock",
    "MonotonicClock",
    "Sleeper",
    "SystemClock",
]
