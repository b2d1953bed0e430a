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
"""Async engine factory and database health probe."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import make_url, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from flyrepo.config.properties.data import DatabaseProperties
from flyrepo.data.relational.sqlalchemy.query_logger import QueryLogLevel, QueryLogger, install_query_logger
from flyrepo.kernel.exceptions import InvalidArgumentException

logger = structlog.get_logger("flyrepo.data.database")


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of :func:`check_database_health`."""

    healthy: bool
    latency_ms: float
    error: str | None = None


def create_database(
    properties: DatabaseProperties,
    *,
    query_logger: QueryLogger | None = None,
) -> AsyncEngine:
    """Create a pooled :class:`AsyncEngine` from *properties*.

    The pool keeps ``pool_min`` connections and grows to ``pool_max``.
    SQLite URLs use SQLAlchemy's own pool choice. When ``properties.log``
    is set, statements are logged at that level.
    """
    if properties.pool_min < 0 or properties.pool_max < max(properties.pool_min, 1):
        raise InvalidArgumentException(
            "Invalid argument: pool_max must be >= pool_min and pool_min must be >= 0",
            context={"argument": "pool", "pool_min": properties.pool_min, "pool_max": properties.pool_max},
        )

    log_level = _log_level(properties.log) if properties.log else None

    url = make_url(properties.url)
    options: dict[str, Any] = {"echo": properties.echo}
    if url.get_backend_name() != "sqlite":
        options["pool_size"] = properties.pool_min
        options["max_overflow"] = properties.pool_max - properties.pool_min

    engine = create_async_engine(url, **options)

    if log_level is not None:
        install_query_logger(engine, query_logger, log_level)

    logger.info(
        "database_created",
        url=url.render_as_string(hide_password=True),
        pool_min=properties.pool_min,
        pool_max=properties.pool_max,
    )
    return engine


def _log_level(value: str) -> QueryLogLevel:
    try:
        return QueryLogLevel(str(value).lower())
    except ValueError:
        raise InvalidArgumentException(
            f"Invalid argument: log must be one of 'query', 'error', 'all', got {value!r}",
            context={"argument": "log", "log": value},
        ) from None


async def check_database_health(engine: AsyncEngine) -> HealthCheckResult:
    """Run ``SELECT 1`` and report latency; failures are returned, not raised."""
    start = time.perf_counter()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        latency_ms = (time.perf_counter() - start) * 1000.0
        logger.warning("database_unhealthy", error=str(exc), latency_ms=round(latency_ms, 2))
        return HealthCheckResult(healthy=False, latency_ms=latency_ms, error=str(exc))

    return HealthCheckResult(healthy=True, latency_ms=(time.perf_counter() - start) * 1000.0)
