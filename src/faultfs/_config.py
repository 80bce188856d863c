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

"""Configuration for :class:`faultfs.FaultFs`."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FaultFsConfig:
    """Behavior switches for a fault-injecting filesystem.

    Attributes:
        inherit_latency: When True, handles returned by ``create``, ``open``
            and ``open_file`` start with the latency registered for their
            path at open time. When False they start without latency until
            ``FaultFile.add_latency`` is called.
        seed: Seed of the default random source used for probabilistic
            rules. Ignored when an explicit ``rng`` is passed to ``FaultFs``.

    Example::

        fs = FaultFs(MemoryFs(), config=FaultFsConfig(inherit_latency=False))
    """

    inherit_latency: bool = True
    seed: int = 0


__all__ = ["FaultFsConfig"]
