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
"""Shared fixtures for data tests: an in-memory QueryBackendPort."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from flyrepo.data.query_parser import ComparisonOperator, SortDirection
from flyrepo.data.types import Condition, ReadQuery, Row


def _like(pattern: str) -> re.Pattern[str]:
    regex = "".join(".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern)
    return re.compile(f"^{regex}$", re.DOTALL)


def _matches(row: Row, condition: Condition) -> bool:
    value = row.get(condition.field)
    op = condition.operator
    if op is ComparisonOperator.EQUALS:
        return value == condition.value
    if op is ComparisonOperator.IS_NULL:
        return value is None
    if op is ComparisonOperator.IS_NOT_NULL:
        return value is not None
    if op is ComparisonOperator.IN:
        return value in condition.value
    if value is None:
        return False
    if op is ComparisonOperator.LIKE:
        return bool(_like(condition.value).match(str(value)))
    if op is ComparisonOperator.GREATER_THAN:
        return value > condition.value
    if op is ComparisonOperator.GREATER_OR_EQUAL:
        return value >= condition.value
    if op is ComparisonOperator.LESS_THAN:
        return value < condition.value
    return value <= condition.value


class InMemoryBackend:
    """Query backend over a list of dicts, recording every call.

    ``insert_delay`` returns the seconds a chunk insert should take and
    ``insert_failure`` returns an exception to raise for a chunk (or None).
    """

    def __init__(self, table_name: str = "users") -> None:
        self.table_name = table_name
        self.rows: list[Row] = []
        self.queries: list[ReadQuery] = []
        self.insert_many_calls: list[list[Row]] = []
        self.completed_chunks: list[list[Row]] = []
        self.insert_delay: Callable[[Sequence[Mapping[str, Any]]], float] | None = None
        self.insert_failure: Callable[[Sequence[Mapping[str, Any]]], Exception | None] | None = None
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = 0
        self._next_id = 1

    def _store(self, values: Mapping[str, Any]) -> Row:
        row = dict(values)
        if row.get("id") is None:
            row["id"] = self._next_id
        self._next_id = max(self._next_id, int(row["id"])) + 1
        self.rows.append(row)
        return dict(row)

    def _where(self, criteria: Mapping[str, Any] | None) -> list[Row]:
        return [r for r in self.rows if all(r.get(k) == v for k, v in (criteria or {}).items())]

    async def fetch_all(self, query: ReadQuery) -> list[Row]:
        self.calls += 1
        self.queries.append(query)
        rows = [r for r in self.rows if all(_matches(r, c) for c in query.conditions)]
        if query.ordering is not None:
            rows.sort(
                key=lambda r: r.get(query.ordering.field),
                reverse=query.ordering.direction is SortDirection.DESC,
            )
        start = query.offset or 0
        end = start + query.limit if query.limit is not None else None
        return [dict(r) for r in rows[start:end]]

    async def fetch_first(self, query: ReadQuery) -> Row | None:
        rows = await self.fetch_all(query)
        return rows[0] if rows else None

    async def insert(self, values: Mapping[str, Any]) -> Row:
        self.calls += 1
        return self._store(values)

    async def insert_many(self, rows: Sequence[Mapping[str, Any]], *, returning: bool) -> list[Row] | int:
        self.calls += 1
        chunk = [dict(r) for r in rows]
        self.insert_many_calls.append(chunk)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.insert_delay(rows) if self.insert_delay else 0)
            failure = self.insert_failure(rows) if self.insert_failure else None
            if failure is not None:
                raise failure
            stored = [self._store(r) for r in chunk]
            self.completed_chunks.append(chunk)
        finally:
            self.in_flight -= 1
        return stored if returning else len(stored)

    async def update(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> list[Row]:
        self.calls += 1
        matched = self._where(criteria)
        for row in matched:
            row.update(values)
        return [dict(r) for r in matched]

    async def update_many(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        return len(await self.update(criteria, values))

    async def delete(self, criteria: Mapping[str, Any]) -> int:
        self.calls += 1
        matched = self._where(criteria)
        self.rows = [r for r in self.rows if r not in matched]
        return len(matched)

    async def upsert(self, values: Mapping[str, Any], conflict_column: str) -> Row:
        self.calls += 1
        existing = self._where({conflict_column: values[conflict_column]})
        if existing:
            existing[0].update(values)
            return dict(existing[0])
        return self._store(values)

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        self.calls += 1
        return len(self._where(criteria))

    async def exists(self, criteria: Mapping[str, Any] | None = None) -> bool:
        return await self.count(criteria) > 0

    def select(self) -> Any:
        return f"SELECT * FROM {self.table_name}"

    async def raw(self, statement: Any, parameters: Mapping[str, Any] | None = None) -> list[Row]:
        self.calls += 1
        return [{"statement": statement, "parameters": dict(parameters or {})}]


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()
