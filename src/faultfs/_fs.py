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

"""Fault-injecting filesystem decorator.

:class:`FaultFs` satisfies the same :class:`~faultfs.filesystem.Fs` contract
as the provider it wraps, so code under test cannot tell the two apart until
a harness registers a rule.

Example usage::

    from faultfs import FaultFs
    from faultfs.filesystem import MemoryFs

    fs = FaultFs(MemoryFs())
    disk_full = OSError(28, "No space left on device")
    fs.set_write_error("/data/out.csv", disk_full)

    try:
        fs.create("/data/out.csv")
    except OSError as err:
        assert err is disk_full

    fs.clear_write_error("/data/out.csv")
    fs.create("/data/out.csv").close()

Composite operations:

- ``rename`` is checked against the destination path only.
- ``remove_all`` and ``mkdir_all`` apply every rule registered at or below
  their root before delegating.
- ``symlink`` is checked against the link target and, once the provider has
  created the link, copies the target's rules onto the link path.
"""

from __future__ import annotations

import random
from datetime import datetime

from ._classify import classify, direction_for_flags
from ._config import FaultFsConfig
from ._file import FaultFile
from ._injector import FaultInjector, RandomSource
from ._registry import RuleRegistry
from .clock import SYSTEM_CLOCK, Sleeper
from .errors import NotSupportedError
from .filesystem import File, FileInfo, Fs, LinkReader, Lstater, Symlinker, clean_path


class FaultFs:
    """Filesystem facade injecting registered errors and latency.

    Every operation cleans its path(s), classifies itself as a read or a
    write, runs the :class:`FaultInjector` and, if nothing was injected,
    delegates to the wrapped provider with the cleaned path. Handles are
    returned wrapped in :class:`FaultFile`, seeded from the rules registered
    for their path at open time.

    The wrapped provider is never called for an operation whose error was
    injected. Neither injected nor delegated errors are logged, retried or
    wrapped.
    """

    __slots__ = ("_config", "_injector", "_registry", "_source")

    def __init__(
        self,
        source: Fs,
        *,
        config: FaultFsConfig | None = None,
        registry: RuleRegistry | None = None,
        clock: Sleeper = SYSTEM_CLOCK,
        rng: RandomSource | None = None,
    ) -> None:
        self._source = source
        self._config = config if config is not None else FaultFsConfig()
        self._registry = registry if registry is not None else RuleRegistry()
        self._injector = FaultInjector(
            self._registry,
            clock=clock,
            rng=rng if rng is not None else random.Random(self._config.seed),
        )

    @property
    def source(self) -> Fs:
        """The wrapped provider."""
        return self._source

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def config(self) -> FaultFsConfig:
        return self._config

    # --- Administrative interface ---

    def set_write_error(
        self, path: str, error: BaseException, probability: float = 1.0
    ) -> None:
        self._registry.set_write_error(path, error, probability)

    def clear_write_error(self, path: str) -> None:
        self._registry.clear_write_error(path)

    def get_write_error(self, path: str) -> BaseException:
        return self._registry.get_write_error(path)

    def set_read_error(
        self, path: str, error: BaseException, probability: float = 1.0
    ) -> None:
        self._registry.set_read_error(path, error, probability)

    def clear_read_error(self, path: str) -> None:
        self._registry.clear_read_error(path)

    def get_read_error(self, path: str) -> BaseException:
        return self._registry.get_read_error(path)

    def set_latency(self, path: str, seconds: float) -> None:
        self._registry.set_latency(path, seconds)

    def clear_latency(self, path: str) -> None:
        self._registry.clear_latency(path)

    def get_latency(self, path: str) -> float:
        return self._registry.get_latency(path)

    # --- Interception helpers ---

    def _check(self, operation: str, path: str) -> None:
        self._injector.check(path, classify(operation))

    def _wrap(self, path: str, handle: File) -> FaultFile:
        rules = self._registry.rules_for(path)
        latency = 0.0
        if self._config.inherit_latency and rules.latency is not None:
            latency = rules.latency
        return FaultFile(
            handle,
            clock=self._injector.clock,
            rng=self._injector.rng,
            write_error=rules.write_error,
            read_error=rules.read_error,
            latency=latency,
        )

    # --- Fs contract ---

    def name(self) -> str:
        return "FaultFs"

    def create(self, name: str) -> FaultFile:
        path = clean_path(name)
        self._check("create", path)
        return self._wrap(path, self._source.create(path))

    def open(self, name: str) -> FaultFile:
        path = clean_path(name)
        self._check("open", path)
        return self._wrap(path, self._source.open(path))

    def open_file(self, name: str, flags: int, perm: int) -> FaultFile:
        path = clean_path(name)
        self._injector.check(path, direction_for_flags(flags))
        return self._wrap(path, self._source.open_file(path, flags, perm))

    def mkdir(self, name: str, perm: int) -> None:
        path = clean_path(name)
        self._check("mkdir", path)
        self._source.mkdir(path, perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        root = clean_path(path)
        self._injector.check_tree(root)
        self._source.mkdir_all(root, perm)

    def remove(self, name: str) -> None:
        path = clean_path(name)
        self._check("remove", path)
        self._source.remove(path)

    def remove_all(self, path: str) -> None:
        root = clean_path(path)
        self._injector.check_tree(root)
        self._source.remove_all(root)

    def rename(self, old_name: str, new_name: str) -> None:
        old_path = clean_path(old_name)
        new_path = clean_path(new_name)
        self._check("rename", new_path)
        self._source.rename(old_path, new_path)

    def stat(self, name: str) -> FileInfo:
        path = clean_path(name)
        self._check("stat", path)
        return self._source.stat(path)

    def chmod(self, name: str, mode: int) -> None:
        path = clean_path(name)
        self._check("chmod", path)
        self._source.chmod(path, mode)

    def chown(self, name: str, uid: int, gid: int) -> None:
        path = clean_path(name)
        self._check("chown", path)
        self._source.chown(path, uid, gid)

    def chtimes(self, name: str, atime: datetime, mtime: datetime) -> None:
        path = clean_path(name)
        self._check("chtimes", path)
        self._source.chtimes(path, atime, mtime)

    # --- Optional capabilities ---

    def symlink(self, old_name: str, new_name: str) -> None:
        old_path = clean_path(old_name)
        new_path = clean_path(new_name)
        self._check("symlink", old_path)
        source = self._source
        if not isinstance(source, Symlinker):
            raise NotSupportedError("symlink", old_path, new_path)
        source.symlink(old_path, new_path)
        self._registry.clone_rules(old_path, new_path)

    def readlink(self, name: str) -> str:
        path = clean_path(name)
        self._check("readlink", path)
        source = self._source
        if not isinstance(source, LinkReader):
            raise NotSupportedError("readlink", path)
        return source.readlink(path)

    def lstat(self, name: str) -> FileInfo:
        path = clean_path(name)
        self._check("lstat", path)
        source = self._source
        if not isinstance(source, Lstater):
            raise NotSupportedError("lstat", path)
        return source.lstat(path)


__all__ = ["FaultFs"]
