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

"""Structured DEBUG records for rule administration.

Only the rule registry logs. Each record carries two extra attributes:
``event``, one of the ``RULE_*`` names below, and ``context``, a dict that
always holds the cleaned ``path`` the rule applies to. Intercepted filesystem
calls never log, whether they were delegated or failed with an injected
error.

faultfs installs no handlers. Route the ``faultfs`` logger wherever the host
application sends its own records.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, cast, override

__all__ = [
    "RULE_CLEARED",
    "RULE_CLONED",
    "RULE_SET",
    "StructuredLogger",
    "get_logger",
]

RULE_SET = "faultfs.rule.set"
RULE_CLEARED = "faultfs.rule.cleared"
RULE_CLONED = "faultfs.rule.cloned"


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Adapter turning ``event=`` and ``context=`` keywords into record extras.

    Example::

        logger = get_logger(__name__, context={"component": "registry"})
        logger.debug("Registered latency rule.", event=RULE_SET,
                     context={"path": "/data", "latency": 0.05})
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(logger, dict(context or {}))

    @override
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        event = kwargs.pop("event", None)
        if not isinstance(event, str):
            raise TypeError("Structured logs require an 'event' string.")
        inline = kwargs.pop("context", None) or {}
        if not isinstance(inline, Mapping):
            raise TypeError("context must be a mapping when provided.")
        payload = {**cast(Mapping[str, object], self.extra), **inline}
        kwargs["extra"] = {"event": event, "context": payload}
        return msg, kwargs


def get_logger(
    name: str, *, context: Mapping[str, object] | None = None
) -> StructuredLogger:
    """Return a :class:`StructuredLogger` over ``logging.getLogger(name)``."""
    return StructuredLogger(logging.getLogger(name), context=context)
