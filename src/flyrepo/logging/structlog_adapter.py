# Copyright 2026 Firefly Software Solutions Inc.
#
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
"""StructlogAdapter: routes flyrepo's structlog events through the ``flyrepo`` stdlib logger."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from flyrepo.core.config import Config

LIBRARY_LOGGER = "flyrepo"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]

_RENDERERS: dict[str, type[Any]] = {
    "console": structlog.dev.ConsoleRenderer,
    "json": structlog.processors.JSONRenderer,
}


def _to_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class StructlogAdapter:
    """Default :class:`~flyrepo.logging.port.LoggingPort` backed by structlog.

    Configuration keys:

    - ``flyrepo.logging.level.root``: level of the whole ``flyrepo`` hierarchy
    - ``flyrepo.logging.level.<logger>``: per-logger overrides, e.g.
      ``flyrepo.sql: WARNING`` to silence statement logging
    - ``flyrepo.logging.format``: ``console`` (default) or ``json``

    Only the ``flyrepo`` logger gets a handler; the host application's root
    logger and its handlers are left alone.
    """

    def __init__(self, stream: Any = None) -> None:
        self._stream = stream
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}
        self._handler: logging.Handler | None = None

    def configure(self, config: Config) -> None:
        """Configure structlog and the ``flyrepo`` logger from *config*."""
        levels = dict(config.get_section("flyrepo.logging.level"))
        self._root_level = str(levels.pop("root", "INFO")).upper()
        self._module_levels = {name: str(level).upper() for name, level in levels.items()}
        self._format = str(config.get("flyrepo.logging.format", "console")).lower()

        renderer = _RENDERERS.get(self._format, structlog.dev.ConsoleRenderer)
        structlog.configure(
            processors=[*_SHARED_PROCESSORS, renderer()],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self._install_handler()
        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        """Get a structlog BoundLogger by name."""
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the level of one stdlib logger (``flyrepo.sql``, ``flyrepo.data.batch``, ...)."""
        logging.getLogger(name).setLevel(_to_level(level))

    def _install_handler(self) -> None:
        library_logger = logging.getLogger(LIBRARY_LOGGER)
        if self._handler is not None:
            library_logger.removeHandler(self._handler)

        self._handler = logging.StreamHandler(self._stream or sys.stdout)
        self._handler.setFormatter(logging.Formatter("%(message)s"))
        library_logger.addHandler(self._handler)
        library_logger.setLevel(_to_level(self._root_level))
        library_logger.propagate = False
