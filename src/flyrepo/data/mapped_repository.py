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
"""Repository decorator converting between stored rows and DTOs."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Coroutine, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select

from flyrepo.data.dispatch import BaseOperation, DerivedFinder
from flyrepo.data.mapper import Transformer
from flyrepo.data.naming import to_snake_case
from flyrepo.data.query_parser import Arity
from flyrepo.data.types import CountResult, Row
from flyrepo.kernel.exceptions import InvalidArgumentException

if TYPE_CHECKING:
    from flyrepo.data.repository import Repository


def _criteria_to_row(criteria: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Rename DTO-style criteria keys to column names."""
    if criteria is None:
        return None
    return {to_snake_case(key): value for key, value in criteria.items()}


class MappedRepository:
    """Wraps a :class:`Repository` so that every read returns DTOs and writes accept DTOs.

    Criteria passed to ``count``/``exists``/``update_many``/``delete_many``
    may use DTO field names; they are converted to snake_case columns.
    ``query()`` and ``raw()`` work on rows and are passed through untouched.

    Usage::

        users = create_repository(engine, "users").with_mapper(AutoMapper(UserDTO))
        dto = await users.findByEmailAddress("a@x.com")
        row = await users.repository.find_by_id(dto.id)
    """

    def __init__(self, repository: Repository, mapper: Transformer) -> None:
        self._repository = repository
        self._mapper = mapper

    @property
    def repository(self) -> Repository:
        """The underlying repository, returning rows."""
        return self._repository

    @property
    def mapper(self) -> Transformer:
        return self._mapper

    def _map_one(self, row: Row | None) -> Any:
        return None if row is None else self._mapper.to_dto(row)

    def _map_all(self, rows: Sequence[Row]) -> list[Any]:
        return [self._mapper.to_dto(row) for row in rows]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_all(self) -> list[Any]:
        return self._map_all(await self._repository.find_all())

    async def find_by_id(self, id: Any) -> Any:
        return self._map_one(await self._repository.find_by_id(id))

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        return await self._repository.count(_criteria_to_row(criteria))

    async def exists(self, criteria: Mapping[str, Any] | None = None) -> bool:
        return await self._repository.exists(_criteria_to_row(criteria))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, dto: Any) -> Any:
        return self._map_one(await self._repository.create(self._mapper.to_row(dto)))

    async def update(self, id: Any, patch: Any) -> Any:
        return self._map_one(await self._repository.update(id, self._mapper.to_row(patch)))

    async def delete(self, id: Any) -> bool:
        return await self._repository.delete(id)

    async def save(self, dto: Any) -> Any:
        return self._map_one(await self._repository.save(self._mapper.to_row(dto)))

    async def create_many(
        self,
        dtos: Sequence[Any],
        *,
        chunk_size: int | None = None,
        skip_return: bool = False,
    ) -> list[Any] | CountResult:
        result = await self._repository.create_many(
            [self._mapper.to_row(dto) for dto in dtos],
            chunk_size=chunk_size,
            skip_return=skip_return,
        )
        if isinstance(result, CountResult):
            return result
        return self._map_all(result)

    async def update_many(self, criteria: Mapping[str, Any], patch: Any) -> int:
        return await self._repository.update_many(_criteria_to_row(criteria) or {}, self._mapper.to_row(patch))

    async def delete_many(self, criteria: Mapping[str, Any]) -> int:
        return await self._repository.delete_many(_criteria_to_row(criteria) or {})

    # ------------------------------------------------------------------
    # Pass-through
    # ------------------------------------------------------------------

    def query(self) -> Select[Any]:
        return self._repository.query()

    async def raw(self, statement: Any, parameters: Mapping[str, Any] | None = None) -> list[Row]:
        return await self._repository.raw(statement, parameters)

    # ------------------------------------------------------------------
    # Dynamic dispatch
    # ------------------------------------------------------------------

    async def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call an operation or derived finder by name, mapping its result."""
        resolution = self._repository.resolver.resolve(name)
        if isinstance(resolution, BaseOperation):
            result = getattr(self, resolution.attribute)(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        if kwargs:
            raise InvalidArgumentException(
                f"Method {name} accepts positional values only",
                context={"method_name": name, "keywords": sorted(kwargs)},
            )
        return await self._find(resolution, args)

    async def _find(self, finder: DerivedFinder, args: Sequence[Any]) -> Any:
        result = await self._repository.resolver.find(finder.intent, args)
        if finder.intent.arity is Arity.COLLECTION:
            return self._map_all(result)
        return self._map_one(result)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        resolution = self._repository.resolver.resolve(name)
        if isinstance(resolution, BaseOperation):
            return getattr(self, resolution.attribute)
        return self._bind_finder(resolution)

    def _bind_finder(self, finder: DerivedFinder) -> Callable[..., Coroutine[Any, Any, Any]]:
        async def mapped_finder(*args: Any) -> Any:
            return await self._find(finder, args)

        mapped_finder.__name__ = mapped_finder.__qualname__ = finder.name
        return mapped_finder

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self._repository.table_name!r})"
