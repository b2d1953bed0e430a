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
"""SQLAlchemy Core implementation of :class:`~flyrepo.data.ports.outbound.QueryBackendPort`.

Works against a single table given as a :class:`~sqlalchemy.Table`, a
mapped class, or a plain table name (reflected on first use). Bound to an
:class:`AsyncEngine`, every operation checks out its own pooled connection
and commits on exit, so concurrent operations run in parallel. Bound to an
:class:`AsyncConnection` (a transaction), operations share that connection
and are serialized with an :class:`asyncio.Lock`.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import (
    ColumnElement,
    MetaData,
    Select,
    Table,
    delete,
    func,
    insert,
    literal,
    literal_column,
    select,
    table,
    text,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from flyrepo.data.query_parser import ComparisonOperator, SortDirection
from flyrepo.data.types import Condition, ReadQuery, Row

# Dialects offering INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlAlchemyQueryBackend:
    """Query backend for one table over an async engine or connection."""

    def __init__(
        self,
        bind: AsyncEngine | AsyncConnection,
        target: Table | str | type,
        *,
        lock: asyncio.Lock | None = None,
    ) -> None:
        self._bind = bind
        self._table: Table | None
        if isinstance(target, Table):
            self._table = target
        elif isinstance(target, str):
            self._table = None
        else:
            self._table = target.__table__  # type: ignore[union-attr]
        self._table_name = self._table.name if self._table is not None else str(target)
        self._lock = lock or asyncio.Lock()

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def bind(self) -> AsyncEngine | AsyncConnection:
        return self._bind

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[tuple[AsyncConnection, Table]]:
        if isinstance(self._bind, AsyncConnection):
            async with self._lock:
                yield self._bind, await self._resolve_table(self._bind)
        else:
            async with self._bind.begin() as conn:
                yield conn, await self._resolve_table(conn)

    async def _resolve_table(self, conn: AsyncConnection) -> Table:
        if self._table is None:
            name = self._table_name
            self._table = await conn.run_sync(lambda sync_conn: Table(name, MetaData(), autoload_with=sync_conn))
        return self._table

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_all(self, query: ReadQuery) -> list[Row]:
        async with self._connect() as (conn, tbl):
            result = await conn.execute(self._build_select(tbl, query))
            return [dict(row) for row in result.mappings().all()]

    async def fetch_first(self, query: ReadQuery) -> Row | None:
        async with self._connect() as (conn, tbl):
            result = await conn.execute(self._build_select(tbl, query).limit(1))
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        async with self._connect() as (conn, tbl):
            stmt = select(func.count()).select_from(tbl).where(*self._criteria(tbl, criteria))
            result = await conn.execute(stmt)
            return int(result.scalar_one())

    async def exists(self, criteria: Mapping[str, Any] | None = None) -> bool:
        async with self._connect() as (conn, tbl):
            stmt = select(literal(1)).select_from(tbl).where(*self._criteria(tbl, criteria)).limit(1)
            result = await conn.execute(stmt)
            return result.first() is not None

    def select(self) -> Select[Any]:
        """Return a composable ``SELECT *`` for the table."""
        if self._table is not None:
            return select(self._table)
        return select(literal_column("*")).select_from(table(self._table_name))

    async def raw(self, statement: Any, parameters: Mapping[str, Any] | None = None) -> list[Row]:
        """Execute an arbitrary statement; textual SQL is wrapped in :func:`~sqlalchemy.text`."""
        if isinstance(statement, str):
            statement = text(statement)
        async with self._connect() as (conn, _):
            result = await conn.execute(statement, dict(parameters or {}))
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings().all()]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, values: Mapping[str, Any]) -> Row:
        async with self._connect() as (conn, tbl):
            result = await conn.execute(insert(tbl).values(dict(values)).returning(*tbl.c))
            return dict(result.mappings().one())

    async def insert_many(self, rows: Sequence[Mapping[str, Any]], *, returning: bool) -> list[Row] | int:
        """Insert *rows* in one executemany round-trip.

        Returns the inserted rows in parameter order, or the affected-row
        count when *returning* is false.

        Records may carry different keys. Consecutive records sharing a key
        set go out as one executemany, so a missing column takes its
        default exactly as in :meth:`insert`.
        """
        inserted: list[Row] = []
        total = 0
        async with self._connect() as (conn, tbl):
            for params in _key_runs(rows):
                if returning:
                    stmt = insert(tbl).returning(*tbl.c, sort_by_parameter_order=True)
                    result = await conn.execute(stmt, params)
                    inserted.extend(dict(row) for row in result.mappings().all())
                    continue
                result = await conn.execute(insert(tbl), params)
                # Some drivers report -1 for executemany.
                total += result.rowcount if result.rowcount >= 0 else len(params)
        return inserted if returning else total

    async def update(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> list[Row]:
        async with self._connect() as (conn, tbl):
            stmt = update(tbl).where(*self._criteria(tbl, criteria)).values(dict(values)).returning(*tbl.c)
            result = await conn.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    async def update_many(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        async with self._connect() as (conn, tbl):
            stmt = update(tbl).where(*self._criteria(tbl, criteria)).values(dict(values))
            result = await conn.execute(stmt)
            return int(result.rowcount)

    async def delete(self, criteria: Mapping[str, Any]) -> int:
        async with self._connect() as (conn, tbl):
            result = await conn.execute(delete(tbl).where(*self._criteria(tbl, criteria)))
            return int(result.rowcount)

    async def upsert(self, values: Mapping[str, Any], conflict_column: str) -> Row:
        """Insert *values* or update the row sharing its *conflict_column* value."""
        data = dict(values)
        async with self._connect() as (conn, tbl):
            dialect_insert = _UPSERT_INSERTS.get(conn.dialect.name)
            if dialect_insert is not None:
                stmt = (
                    dialect_insert(tbl)
                    .values(data)
                    .on_conflict_do_update(index_elements=[tbl.c[conflict_column]], set_=data)
                    .returning(*tbl.c)
                )
                result = await conn.execute(stmt)
                return dict(result.mappings().one())

            key = tbl.c[conflict_column]
            result = await conn.execute(
                update(tbl).where(key == data[conflict_column]).values(data).returning(*tbl.c)
            )
            row = result.mappings().first()
            if row is None:
                result = await conn.execute(insert(tbl).values(data).returning(*tbl.c))
                row = result.mappings().one()
            return dict(row)

    # ------------------------------------------------------------------
    # Statement helpers
    # ------------------------------------------------------------------

    def _build_select(self, tbl: Table, query: ReadQuery) -> Select[Any]:
        stmt = select(tbl).where(*(self._build_clause(tbl, c) for c in query.conditions))
        if query.ordering is not None:
            col = tbl.c[query.ordering.field]
            stmt = stmt.order_by(col.desc() if query.ordering.direction is SortDirection.DESC else col.asc())
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        if query.offset is not None:
            stmt = stmt.offset(query.offset)
        return stmt

    @staticmethod
    def _build_clause(tbl: Table, condition: Condition) -> ColumnElement[bool]:
        """Build a single SQLAlchemy clause from a bound condition."""
        col = tbl.c[condition.field]
        op = condition.operator
        value = condition.value

        if op is ComparisonOperator.EQUALS:
            return col == value
        if op is ComparisonOperator.GREATER_THAN:
            return col > value
        if op is ComparisonOperator.GREATER_OR_EQUAL:
            return col >= value
        if op is ComparisonOperator.LESS_THAN:
            return col < value
        if op is ComparisonOperator.LESS_OR_EQUAL:
            return col <= value
        if op is ComparisonOperator.IN:
            return col.in_(value)
        if op is ComparisonOperator.LIKE:
            return col.like(value)
        if op is ComparisonOperator.IS_NULL:
            return col.is_(None)
        if op is ComparisonOperator.IS_NOT_NULL:
            return col.is_not(None)

        raise ValueError(f"Unknown operator: {op}")

    @staticmethod
    def _criteria(tbl: Table, criteria: Mapping[str, Any] | None) -> list[ColumnElement[bool]]:
        """Equality clauses for a ``{column: value}`` mapping."""
        return [tbl.c[key] == value for key, value in (criteria or {}).items()]


def _key_runs(rows: Sequence[Mapping[str, Any]]) -> list[list[dict[str, Any]]]:
    """Split *rows* into consecutive runs whose records share one key set."""
    runs: list[list[dict[str, Any]]] = []
    run_keys: frozenset[str] | None = None
    for row in rows:
        params = dict(row)
        keys = frozenset(params)
        if keys != run_keys:
            runs.append([])
            run_keys = keys
        runs[-1].append(params)
    return runs
