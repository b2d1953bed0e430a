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
"""Statement logging through SQLAlchemy cursor events.

Example::

    listener = install_query_logger(engine, level=QueryLogLevel.ALL)
    ...
    listener.remove()
"""

from __future__ import annotations

import enum
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

import structlog
from sqlalchemy import event
from sqlalchemy.engine import Connection, ExceptionContext
from sqlalchemy.ext.asyncio import AsyncEngine

_START_TIMES_KEY = "flyrepo_query_start_times"


class QueryLogLevel(enum.Enum):
    """Which statements get logged."""

    QUERY = "query"
    ERROR = "error"
    ALL = "all"


@dataclass(frozen=True)
class QueryLogEvent:
    """One executed (or failed) statement."""

    query: str
    parameters: Any
    duration_ms: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    error: str | None = None


@runtime_checkable
class QueryLogger(Protocol):
    def log(self, event: QueryLogEvent) -> None: ...


class StructlogQueryLogger:
    """Default :class:`QueryLogger` writing to the ``flyrepo.sql`` structlog logger."""

    def __init__(self, name: str = "flyrepo.sql") -> None:
        self._logger = structlog.get_logger(name)

    def log(self, event: QueryLogEvent) -> None:
        if event.error is None:
            self._logger.info(
                "query_executed",
                query=event.query,
                parameters=event.parameters,
                duration_ms=round(event.duration_ms, 2),
            )
        else:
            self._logger.warning(
                "query_failed",
                query=event.query,
                parameters=event.parameters,
                duration_ms=round(event.duration_ms, 2),
                error=event.error,
            )


class QueryLogListener:
    """Cursor event hooks timing each statement and forwarding it to a :class:`QueryLogger`."""

    def __init__(self, engine: AsyncEngine, logger: QueryLogger, level: QueryLogLevel) -> None:
        self._engine = engine
        self._logger = logger
        self._level = level
        self._installed = False

    def install(self) -> QueryLogListener:
        sync_engine = self._engine.sync_engine
        event.listen(sync_engine, "before_cursor_execute", self._before_execute)
        event.listen(sync_engine, "after_cursor_execute", self._after_execute)
        event.listen(sync_engine, "handle_error", self._on_error)
        self._installed = True
        return self

    def remove(self) -> None:
        if not self._installed:
            return
        sync_engine = self._engine.sync_engine
        event.remove(sync_engine, "before_cursor_execute", self._before_execute)
        event.remove(sync_engine, "after_cursor_execute", self._after_execute)
        event.remove(sync_engine, "handle_error", self._on_error)
        self._installed = False

    def _before_execute(
        self,
        conn: Connection,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        conn.info.setdefault(_START_TIMES_KEY, []).append(time.perf_counter())

    def _after_execute(
        self,
        conn: Connection,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        duration_ms = self._elapsed_ms(conn)
        if self._level is QueryLogLevel.ERROR:
            return
        self._logger.log(
            QueryLogEvent(query=statement, parameters=_loggable(parameters), duration_ms=duration_ms)
        )

    def _on_error(self, context: ExceptionContext) -> None:
        duration_ms = self._elapsed_ms(context.connection) if context.connection is not None else 0.0
        if self._level is QueryLogLevel.QUERY:
            return
        self._logger.log(
            QueryLogEvent(
                query=context.statement or "",
                parameters=_loggable(context.parameters),
                duration_ms=duration_ms,
                error=str(context.original_exception),
            )
        )

    @staticmethod
    def _elapsed_ms(conn: Connection) -> float:
        starts: list[float] = conn.info.get(_START_TIMES_KEY, [])
        if not starts:
            return 0.0
        return (time.perf_counter() - starts.pop()) * 1000.0


def _loggable(parameters: Any) -> Any:
    if isinstance(parameters, Sequence) and not isinstance(parameters, (str, bytes)):
        return list(parameters)
    return parameters


def install_query_logger(
    engine: AsyncEngine,
    logger: QueryLogger | None = None,
    level: QueryLogLevel = QueryLogLevel.ALL,
) -> QueryLogListener:
    """Start logging every statement *engine* executes."""
    return QueryLogListener(engine, logger or StructlogQueryLogger(), level).install()
