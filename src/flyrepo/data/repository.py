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
"""Repository handle with fixed CRUD operations and name-derived finders.

Usage::

    users = create_repository(engine, "users")

    user = await users.create({"email": "alice@example.com", "status": "ACTIVE"})
    same = await users.findByEmail("alice@example.com")
    page = await users.findAllByStatusOrderByCreatedAtDesc("ACTIVE", {"limit": 20})
    count = await users.invoke("count", {"status": "ACTIVE"})

Any attribute that is not defined on :class:`Repository` is routed through
the :class:`~flyrepo.data.dispatch.DispatchResolver`: camelCase spellings of
the base operations (``findAll``, ``createMany``) return the bound method,
``findBy...``/``findAllBy...`` names return an async finder, and anything
else raises :class:`~flyrepo.kernel.exceptions.MethodNotImplementedException`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, Table
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from flyrepo.config.properties.data import RepositoryProperties
from flyrepo.data.batch import ChunkedBatchExecutor
from flyrepo.data.dispatch import BaseOperation, DispatchResolver
from flyrepo.data.ports.outbound import QueryBackendPort
from flyrepo.data.query_parser import ComparisonOperator
from flyrepo.data.relational.sqlalchemy.backend import SqlAlchemyQueryBackend
from flyrepo.data.resolution import MethodResolutionCache
from flyrepo.data.types import BatchWriteRequest, Condition, CountResult, ReadQuery, Row
from flyrepo.kernel.exceptions import InvalidArgumentException

if TYPE_CHECKING:
    from flyrepo.data.mapped_repository import MappedRepository
    from flyrepo.data.mapper import Transformer


class Repository:
    """CRUD repository over a :class:`QueryBackendPort`.

    Args:
        backend: Backend bound to the repository's table.
        id_column: Primary key column used by ``find_by_id``/``update``/``delete``/``save``.
        chunk_size: Default chunk size for ``create_many``.
        cache: Resolution cache; a private one is created when omitted.
    """

    def __init__(
        self,
        backend: QueryBackendPort,
        *,
        id_column: str = "id",
        chunk_size: int = 1000,
        cache: MethodResolutionCache | None = None,
    ) -> None:
        self._backend = backend
        self._id_column = id_column
        self._chunk_size = chunk_size
        self._batch = ChunkedBatchExecutor(backend)
        self._resolver = DispatchResolver(self, backend, cache or MethodResolutionCache())

    @property
    def table_name(self) -> str:
        return self._backend.table_name

    @property
    def id_column(self) -> str:
        return self._id_column

    @property
    def backend(self) -> QueryBackendPort:
        return self._backend

    @property
    def resolver(self) -> DispatchResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Base operations
    # ------------------------------------------------------------------

    async def find_all(self) -> list[Row]:
        """Return every row of the table."""
        return await self._backend.fetch_all(_ALL_ROWS)

    async def find_by_id(self, id: Any) -> Row | None:
        """Find a row by its primary key."""
        return await self._backend.fetch_first(
            ReadQuery(conditions=(Condition(self._id_column, ComparisonOperator.EQUALS, id),))
        )

    async def create(self, data: Mapping[str, Any]) -> Row:
        """Insert a row and return it as stored."""
        return await self._backend.insert(data)

    async def update(self, id: Any, patch: Mapping[str, Any]) -> Row | None:
        """Apply *patch* to the row with primary key *id*; ``None`` if it does not exist."""
        rows = await self._backend.update({self._id_column: id}, patch)
        return rows[0] if rows else None

    async def delete(self, id: Any) -> bool:
        """Delete the row with primary key *id*. Returns whether a row was removed."""
        return await self._backend.delete({self._id_column: id}) > 0

    async def save(self, data: Mapping[str, Any]) -> Row:
        """Insert *data*, or upsert it on the primary key when the key is set."""
        if data.get(self._id_column) is None:
            return await self.create({k: v for k, v in data.items() if k != self._id_column})
        return await self._backend.upsert(data, self._id_column)

    async def create_many(
        self,
        records: Sequence[Mapping[str, Any]],
        *,
        chunk_size: int | None = None,
        skip_return: bool = False,
    ) -> list[Row] | CountResult:
        """Insert *records* in concurrently executed chunks.

        Returns the inserted rows in input chunk order, or a
        :class:`CountResult` when *skip_return* is set.
        """
        request = BatchWriteRequest(
            records=records,
            chunk_size=self._chunk_size if chunk_size is None else chunk_size,
            skip_return=skip_return,
        )
        return await self._batch.execute(request)

    async def update_many(self, criteria: Mapping[str, Any], patch: Mapping[str, Any]) -> int:
        """Apply *patch* to every row matching *criteria*; returns the affected count."""
        return await self._backend.update_many(criteria, patch)

    async def delete_many(self, criteria: Mapping[str, Any]) -> int:
        """Delete every row matching *criteria*; returns the affected count."""
        return await self._backend.delete(criteria)

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        return await self._backend.count(criteria)

    async def exists(self, criteria: Mapping[str, Any] | None = None) -> bool:
        return await self._backend.exists(criteria)

    def query(self) -> Select[Any]:
        """Composable ``SELECT`` over the table, executable through :meth:`raw`."""
        return self._backend.select()

    async def raw(self, statement: Any, parameters: Mapping[str, Any] | None = None) -> list[Row]:
        """Execute an arbitrary statement (SQLAlchemy construct or SQL text)."""
        return await self._backend.raw(statement, parameters)

    # ------------------------------------------------------------------
    # Dynamic dispatch
    # ------------------------------------------------------------------

    async def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call an operation or derived finder by name."""
        return await self._resolver.invoke(name, args, kwargs)

    def with_mapper(self, mapper: Transformer) -> MappedRepository:
        """Wrap this repository so that it reads and writes DTOs through *mapper*."""
        from flyrepo.data.mapped_repository import MappedRepository

        return MappedRepository(self, mapper)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        resolution = self._resolver.resolve(name)
        if isinstance(resolution, BaseOperation):
            return getattr(self, resolution.attribute)
        return _finder(self._resolver, resolution.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table_name!r})"


_ALL_ROWS = ReadQuery()


def _finder(resolver: DispatchResolver, name: str) -> Callable[..., Coroutine[Any, Any, Any]]:
    async def finder(*args: Any) -> Any:
        return await resolver.invoke(name, args)

    finder.__name__ = finder.__qualname__ = name
    return finder


def create_repository(
    bind: AsyncEngine | AsyncConnection | None,
    table: Table | str | type | None,
    *,
    id_column: str | None = None,
    chunk_size: int | None = None,
    properties: RepositoryProperties | None = None,
    cache: MethodResolutionCache | None = None,
    lock: asyncio.Lock | None = None,
) -> Repository:
    """Create a repository for *table* over an engine or a transactional connection.

    Explicit ``id_column``/``chunk_size`` win over *properties*, which win
    over the :class:`RepositoryProperties` defaults.

    Raises:
        InvalidArgumentException: *bind* is missing, *table* is blank or of
            an unsupported type, or *chunk_size* is not positive.
    """
    if bind is None:
        raise InvalidArgumentException(
            "Invalid argument: bind is required and cannot be None",
            context={"argument": "bind"},
        )

    if isinstance(table, str):
        if not table.strip():
            raise InvalidArgumentException(
                "Invalid argument: table must be a non-empty string",
                context={"argument": "table", "value": table},
            )
    elif not isinstance(table, Table) and not isinstance(getattr(table, "__table__", None), Table):
        raise InvalidArgumentException(
            "Invalid argument: table must be a table name, a Table or a mapped class",
            context={"argument": "table", "value": repr(table)},
        )

    props = properties or RepositoryProperties()
    resolved_chunk_size = props.chunk_size if chunk_size is None else chunk_size
    if isinstance(resolved_chunk_size, bool) or not isinstance(resolved_chunk_size, int) or resolved_chunk_size < 1:
        raise InvalidArgumentException(
            "Invalid argument: chunk_size must be a positive integer",
            context={"argument": "chunk_size", "value": resolved_chunk_size},
        )

    backend = SqlAlchemyQueryBackend(bind, table, lock=lock)
    return Repository(
        backend,
        id_column=id_column or props.id_column,
        chunk_size=resolved_chunk_size,
        cache=cache,
    )
