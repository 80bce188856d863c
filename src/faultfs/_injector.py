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

"""Delay-then-check interception shared by every facade operation.

For a path and a direction the injector first sleeps for the path's
registered latency, whether or not an error will follow, then consults the
error rule for that direction and raises its exception if one uniform draw
falls below the rule's probability. The registry lock is only held while a
rule is read, never while sleeping.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ._classify import Direction
from ._registry import ErrorRule, RuleRegistry
from .clock import SYSTEM_CLOCK, Sleeper


@runtime_checkable
class RandomSource(Protocol):
    """Uniform random numbers in ``[0, 1)``. :class:`random.Random` satisfies it."""

    def random(self) -> float: ...


def raise_injected(rule: ErrorRule) -> None:
    """Raise the rule's exception instance itself, with a fresh traceback.

    The instance is shared by every trigger, so chaining left behind by an
    earlier raise is dropped first.
    """
    err = rule.error
    err.__cause__ = None
    err.__context__ = None
    err.__suppress_context__ = False
    raise err.with_traceback(None)


@dataclass(slots=True)
class FaultInjector:
    """Applies registry rules to intercepted operations.

    Paths handed to the injector must already be cleaned.

    Example::

        injector = FaultInjector(registry, clock=FakeClock(), rng=Random(7))
        injector.check("/data/out.csv", Direction.WRITE)  # may raise
    """

    registry: RuleRegistry
    clock: Sleeper = SYSTEM_CLOCK
    rng: RandomSource = field(default_factory=lambda: random.Random(0))

    def triggers(self, rule: ErrorRule) -> bool:
        """Draw one sample and report whether ``rule`` fires."""
        return self.rng.random() < rule.probability

    def delay(self, path: str) -> None:
        latency = self.registry.latency(path)
        if latency is not None:
            self.clock.sleep(latency)

    def check(self, path: str, direction: Direction) -> None:
        """Sleep for ``path``'s latency, then raise its error if it triggers."""
        self.delay(path)
        rule = self.registry.error_rule(path, direction)
        if rule is not None and self.triggers(rule):
            raise_injected(rule)

    def check_tree(self, root: str) -> None:
        """Apply every rule at ``root`` or below it, for recursive writes.

        Each registered latency in the subtree is slept in turn, root first.
        Then the subtree's write rules are tried in the same order and the
        first one that triggers is raised.
        """
        for _, latency in self.registry.latencies_under(root):
            self.clock.sleep(latency)
        for _, rule in self.registry.write_errors_under(root):
            if self.triggers(rule):
                raise_injected(rule)


__all__ = [
    "FaultInjector",
    "RandomSource",
    "raise_injected",
]
