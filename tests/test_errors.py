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

"""Tests for the faultfs exception hierarchy."""

from __future__ import annotations

import errno

from faultfs import (
    FaultFsError,
    InvalidArgumentError,
    NotSupportedError,
    RuleNotFoundError,
)


class TestHierarchy:
    """Every error is catchable by its family and by a stdlib type."""

    def test_invalid_argument(self) -> None:
        err = InvalidArgumentError("bad")
        assert isinstance(err, FaultFsError)
        assert isinstance(err, ValueError)

    def test_rule_not_found(self) -> None:
        err = RuleNotFoundError("latency", "/a")
        assert isinstance(err, FaultFsError)
        assert isinstance(err, LookupError)
        assert str(err) == "no latency registered for '/a'"
        assert (err.kind, err.path) == ("latency", "/a")

    def test_not_supported(self) -> None:
        err = NotSupportedError("readlink", "/a")
        assert isinstance(err, FaultFsError)
        assert isinstance(err, OSError)
        assert err.errno == errno.ENOTSUP
        assert err.filename == "/a"
        assert err.new_path is None
        assert str(err) == "readlink /a: operation not supported by provider"

    def test_not_supported_two_paths(self) -> None:
        err = NotSupportedError("symlink", "/a", "/b")
        assert str(err) == "symlink /a /b: operation not supported by provider"
        assert (err.op, err.path, err.new_path) == ("symlink", "/a", "/b")
