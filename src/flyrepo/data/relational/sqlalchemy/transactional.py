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
"""Transaction scopes binding repositories to a single connection."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from flyrepo.config.properties.data import RepositoryProperties

if TYPE_CHECKING:
    from flyrepo.data.repository import Repository

F = TypeVar("F", bound=Callable[..., Any])
R = TypeVar("R")

logger = structlog.get_logger("flyrepo.data.transaction")


class TransactionScope:
    """Repositories sharing one transactional connection.

    Statements from every repository of the scope are serialized on the
    connection, so ``create_many`` chunks run one after another here.
    """

    def __init__(self, connection: AsyncConnection, properties: RepositoryProperties | None = None) -> None:
        self._connection = connection
        self._properties = properties
        self._lock = asyncio.Lock()
        self._repositories: dict[str, Repository] = {}

    @property
    def connection(self) -> AsyncConnection:
        return self._connection

    def get_repository(self, table: Table | str | type) -> Repository:
        """Return the scope's repository for *table*, creating it on first use."""
        from flyrepo.data.repository import create_repository

        key = _table_key(table)
        repository = self._repositories.get(key)
        if repository is None:
            repository = create_repository(
                self._connection,
                table,
                properties=self._properties,
                lock=self._lock,
            )
            self._repositories[key] = repository
        return repository


def _table_key(table: Table | str | type) -> str:
    if isinstance(table, str):
        return table
    if isinstance(table, Table):
        return table.fullname
    return str(getattr(table, "__tablename__", None) or getattr(table, "__name__", table))


async def with_transaction(
    engine: AsyncEngine,
    callback: Callable[[TransactionScope], Awaitable[R]],
    *,
    properties: RepositoryProperties | None = None,
) -> R:
    """Run *callback* inside one transaction.

    Commits when the callback returns, rolls back and re-raises when it
    raises.
    """
    try:
        async with engine.begin() as conn:
            return await callback(TransactionScope(conn, properties))
    except Exception as exc:
        logger.debug("transaction_rolled_back", error=repr(exc))
        raise


def reactive_transactional(engine: AsyncEngine) -> Callable[[F], F]:
    """Decorator for declarative async transaction management.

    The decorated coroutine receives a :class:`TransactionScope` as its
    first argument.

    Usage:
        @reactive_transactional(engine)
        async def register(scope: TransactionScope, email: str) -> dict:
            users = scope.get_repository("users")
            return await users.create({"email": email})
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            async def run(scope: TransactionScope) -> Any:
                return await func(scope, *args, **kwargs)

            return await with_transaction(engine, run)

        return wrapper  # type: ignore[return-value]

    return decorator
