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

"""Thread-safe per-path registry of error and latency rules.

The registry holds three independent mappings keyed by cleaned path: write
error rules, read error rules and latencies. One :class:`ReadWriteLock`
guards all three, so lookups run concurrently while mutations are exclusive.

Example::

    registry = RuleRegistry()
    registry.set_write_error("/data/out.csv", OSError(28, "No space left"))
    registry.set_latency("/data", 0.05)

    registry.get_write_error("/data/./out.csv")  # same entry
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from ._classify import Direction
from ._rwlock import ReadWriteLock
from .errors import InvalidArgumentError, RuleNotFoundError
from .filesystem import clean_path, is_under
from .logging import (
    RULE_CLEARED,
    RULE_CLONED,
    RULE_SET,
    StructuredLogger,
    get_logger,
)

logger: StructuredLogger = get_logger(__name__, context={"component": "registry"})


@dataclass(slots=True, frozen=True)
class ErrorRule:
    """An error to inject and the chance of injecting it on each check.

    Attributes:
        error: Exception instance raised verbatim when the rule triggers.
        probability: Trigger chance in ``[0, 1]``. ``1`` always triggers,
            ``0`` never does.
    """

    error: BaseException
    probability: float = 1.0

    def __post_init__(self) -> None:
        if not isinstance(self.error, BaseException):
            msg = f"Error rule needs an exception instance, got {self.error!r}"
            raise InvalidArgumentError(msg)
        if math.isnan(self.probability) or not 0.0 <= self.probability <= 1.0:
            msg = f"Probability must be within [0, 1], got {self.probability!r}"
            raise InvalidArgumentError(msg)


@dataclass(slots=True, frozen=True)
class PathRules:
    """Everything registered for one path at one instant."""

    write_error: ErrorRule | None = None
    read_error: ErrorRule | None = None
    latency: float | None = None

    def error_for(self, direction: Direction) -> ErrorRule | None:
        if direction is Direction.WRITE:
            return self.write_error
        return self.read_error


def _validate_latency(seconds: float) -> None:
    if math.isnan(seconds) or seconds <= 0:
        msg = "Latency for I/O operations must be a positive duration"
        raise InvalidArgumentError(msg)


@dataclass
class RuleRegistry:
    """Path-keyed store of write errors, read errors and latencies.

    Every method cleans its path argument first. Setting a rule replaces any
    previous rule for that path and direction; clearing is idempotent.
    Lookups of absent rules raise :class:`RuleNotFoundError` rather than
    returning a sentinel.
    """

    _write_errors: dict[str, ErrorRule] = field(default_factory=dict)
    _read_errors: dict[str, ErrorRule] = field(default_factory=dict)
    _latencies: dict[str, float] = field(default_factory=dict)
    _lock: ReadWriteLock = field(default_factory=ReadWriteLock, repr=False)

    # --- Error rules ---

    def set_write_error(
        self, path: str, error: BaseException, probability: float = 1.0
    ) -> None:
        """Inject ``error`` into write operations on ``path``.

        Raises:
            InvalidArgumentError: ``error`` is not an exception instance or
                ``probability`` is outside ``[0, 1]``. Prior state is kept.
        """
        self._set_error(self._write_errors, Direction.WRITE, path, error, probability)

    def set_read_error(
        self, path: str, error: BaseException, probability: float = 1.0
    ) -> None:
        """Inject ``error`` into read operations on ``path``.

        Raises:
            InvalidArgumentError: ``error`` is not an exception instance or
                ``probability`` is outside ``[0, 1]``. Prior state is kept.
        """
        self._set_error(self._read_errors, Direction.READ, path, error, probability)

    def _set_error(
        self,
        rules: dict[str, ErrorRule],
        direction: Direction,
        path: str,
        error: BaseException,
        probability: float,
    ) -> None:
        key = clean_path(path)
        rule = ErrorRule(error=error, probability=probability)
        with self._lock.write_locked():
            rules[key] = rule
        logger.debug(
            "Registered %s error rule.",
            direction,
            event=RULE_SET,
            context={
                "path": key,
                "direction": str(direction),
                "probability": probability,
                "error_type": type(error).__name__,
            },
        )

    def clear_write_error(self, path: str) -> None:
        self._clear(self._write_errors, "write error", path)

    def clear_read_error(self, path: str) -> None:
        self._clear(self._read_errors, "read error", path)

    def get_write_error(self, path: str) -> BaseException:
        """Return the registered write error for ``path``.

        Raises:
            RuleNotFoundError: No write error is registered.
        """
        return self.get_write_rule(path).error

    def get_read_error(self, path: str) -> BaseException:
        """Return the registered read error for ``path``.

        Raises:
            RuleNotFoundError: No read error is registered.
        """
        return self.get_read_rule(path).error

    def get_write_rule(self, path: str) -> ErrorRule:
        return self._get(self._write_errors, "write error", path)

    def get_read_rule(self, path: str) -> ErrorRule:
        return self._get(self._read_errors, "read error", path)

    def error_rule(self, path: str, direction: Direction) -> ErrorRule | None:
        """Return the rule for an already cleaned ``path``, or ``None``."""
        rules = (
            self._write_errors if direction is Direction.WRITE else self._read_errors
        )
        with self._lock.read_locked():
            return rules.get(path)

    # --- Latency ---

    def set_latency(self, path: str, seconds: float) -> None:
        """Delay every operation on ``path`` by ``seconds``.

        Raises:
            InvalidArgumentError: ``seconds`` is zero or negative. Any prior
                latency for ``path`` is left untouched.
        """
        _validate_latency(seconds)
        key = clean_path(path)
        with self._lock.write_locked():
            self._latencies[key] = seconds
        logger.debug(
            "Registered latency rule.",
            event=RULE_SET,
            context={"path": key, "latency": seconds},
        )

    def clear_latency(self, path: str) -> None:
        self._clear(self._latencies, "latency", path)

    def get_latency(self, path: str) -> float:
        """Return the registered latency for ``path`` in seconds.

        Raises:
            RuleNotFoundError: No latency is registered.
        """
        return self._get(self._latencies, "latency", path)

    def latency(self, path: str) -> float | None:
        """Return the latency for an already cleaned ``path``, or ``None``."""
        with self._lock.read_locked():
            return self._latencies.get(path)

    # --- Snapshots ---

    def rules_for(self, path: str) -> PathRules:
        """Return everything registered for ``path`` under one read lock."""
        key = clean_path(path)
        with self._lock.read_locked():
            return PathRules(
                write_error=self._write_errors.get(key),
                read_error=self._read_errors.get(key),
                latency=self._latencies.get(key),
            )

    def clone_rules(self, source: str, target: str) -> None:
        """Make ``target``'s rules an exact copy of ``source``'s.

        Rules absent on ``source`` are removed from ``target``, so the two
        paths end up indistinguishable to the registry.
        """
        source_key = clean_path(source)
        target_key = clean_path(target)
        with self._lock.write_locked():
            for rules in (self._write_errors, self._read_errors, self._latencies):
                _copy_entry(rules, source_key, target_key)
        logger.debug(
            "Cloned rules onto new path.",
            event=RULE_CLONED,
            context={"path": target_key, "source": source_key},
        )

    def latencies_under(self, root: str) -> list[tuple[str, float]]:
        """Latencies at ``root`` or below it, root first then sorted by path."""
        key = clean_path(root)
        with self._lock.read_locked():
            return _select_under(self._latencies, key)

    def write_errors_under(self, root: str) -> list[tuple[str, ErrorRule]]:
        """Write rules at ``root`` or below it, root first then sorted by path."""
        key = clean_path(root)
        with self._lock.read_locked():
            return _select_under(self._write_errors, key)

    def clear(self) -> None:
        """Remove every rule."""
        with self._lock.write_locked():
            self._write_errors.clear()
            self._read_errors.clear()
            self._latencies.clear()
        logger.debug(
            "Cleared every rule.", event=RULE_CLEARED, context={"path": "*"}
        )

    # --- Helpers ---

    def _clear[V](self, rules: dict[str, V], kind: str, path: str) -> None:
        key = clean_path(path)
        with self._lock.write_locked():
            removed = rules.pop(key, None) is not None
        if removed:
            logger.debug(
                "Cleared %s rule.",
                kind,
                event=RULE_CLEARED,
                context={"path": key, "kind": kind},
            )

    def _get[V](self, rules: Mapping[str, V], kind: str, path: str) -> V:
        key = clean_path(path)
        with self._lock.read_locked():
            try:
                return rules[key]
            except KeyError:
                raise RuleNotFoundError(kind, key) from None


def _copy_entry[V](rules: dict[str, V], source: str, target: str) -> None:
    if source in rules:
        rules[target] = rules[source]
    else:
        _ = rules.pop(target, None)


def _select_under[V](rules: Mapping[str, V], root: str) -> list[tuple[str, V]]:
    return sorted(
        ((path, value) for path, value in rules.items() if is_under(path, root)),
        key=lambda item: (item[0] != root, item[0]),
    )


__all__ = [
    "ErrorRule",
    "PathRules",
    "RuleRegistry",
]
