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

from __future__ import annotations

import pytest

from faultfs import FaultFs, RuleRegistry
from faultfs.clock import FakeClock
from tests.helpers.filesystem import RecordingFs


@pytest.fixture
def fake_clock() -> FakeClock:
    """Return a clock whose sleeps return immediately and are recorded."""

    return FakeClock()


@pytest.fixture
def registry() -> RuleRegistry:
    return RuleRegistry()


@pytest.fixture
def recording_fs() -> RecordingFs:
    """Return an in-memory provider that logs every call reaching it."""

    return RecordingFs()


@pytest.fixture
def fault_fs(
    recording_fs: RecordingFs, registry: RuleRegistry, fake_clock: FakeClock
) -> FaultFs:
    """Return a fault layer over ``recording_fs`` with a fake clock."""

    return FaultFs(recording_fs, registry=registry, clock=fake_clock)
