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
"""Outbound port: the query backend a repository executes against."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from flyrepo.data.types import ReadQuery, Row


@runtime_checkable
class QueryBackendPort(Protocol):
    """Abstract relational backend consumed by the repository core.

    Implementations own connection handling; the core only describes what to
    read or write. Errors raised by an implementation propagate unchanged.
    """

    @property
    def table_name(self) -> str: ...

    async def fetch_all(self, query: ReadQuery) -> list[Row]: ...

    async def fetch_first(self, query: ReadQuery) -> Row | None: ...

    async def insert(self, values: Mapping[str, Any]) -> Row: ...

    async def insert_many(self, rows: Sequence[Mapping[str, Any]], *, returning: bool) -> list[Row] | int: ...

    async def update(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> list[Row]: ...

    async def update_many(self, criteria: Mapping[str, Any], values: Mapping[str, Any]) -> int: ...

    async def delete(self, criteria: Mapping[str, Any]) -> int: ...

    async def upsert(self, values: Mapping[str, Any], conflict_column: str) -> Row: ...

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int: ...

    async def exists(self, criteria: Mapping[str, Any] | None = None) -> bool: ...

    def select(self) -> Any: ...

    async def raw(self, statement: Any, parameters: Mapping[str, Any] | None = None) -> list[Row]: ...
