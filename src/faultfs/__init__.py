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

"""Fault injection for filesystem providers.

Wrap any :class:`~faultfs.filesystem.Fs` in :class:`FaultFs` and register
per-path errors or latency to exercise the failure handling of code under
test without touching that code.

Example usage::

    from faultfs import FaultFs
    from faultfs.filesystem import MemoryFs

    fs = FaultFs(MemoryFs())
    fs.set_read_error("/config.toml", PermissionError(13, "Permission denied"))
    fs.set_latency("/slow", 0.25)
    fs.set_write_error("/flaky.log", OSError(5, "Input/output error"), 0.1)
"""

from __future__ import annotations

from ._classify import OPERATIONS, Direction, classify, direction_for_flags
from ._config import FaultFsConfig
from ._file import FaultFile
from ._fs import FaultFs
from ._injector import FaultInjector, RandomSource
from ._registry import ErrorRule, PathRules, RuleRegistry
from ._rwlock import ReadWriteLock
from .errors import (
    FaultFsError,
    InvalidArgumentError,
    NotSupportedError,
    RuleNotFoundError,
)

__all__ = [
    "OPERATIONS",
    "Direction",
    "ErrorRule",
    "FaultFile",
    "FaultFs",
    "FaultFsConfig",
    "FaultFsError",
    "FaultInjector",
    "InvalidArgumentError",
    "NotSupportedError",
    "PathRules",
    "RandomSource",
    "ReadWriteLock",
    "RuleNotFoundError",
    "RuleRegistry",
    "classify",
    "direction_for_flags",
]
