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
"""Dynamic dispatch of repository calls onto base operations or derived finders.

Every call by name goes through :meth:`DispatchResolver.resolve`, which
returns a tagged variant:

* :class:`BaseOperation`: a fixed repository method (``findAll``,
  ``createMany``, ...), delegated to as-is;
* :class:`DerivedFinder`: a ``findBy...`` / ``findAllBy...`` name whose
  parsed :class:`~flyrepo.data.query_parser.MethodIntent` drives a read.

Usage::

    resolver = DispatchResolver(repository, backend, MethodResolutionCache())
    rows = await resolver.invoke("findAllByStatusOrderByNameDesc", ["active", {"limit": 10}])
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from flyrepo.data.ports.outbound import QueryBackendPort
from flyrepo.data.query_parser import Arity, MethodIntent, is_finder_name
from flyrepo.data.resolution import MethodResolutionCache
from flyrepo.data.types import Condition, QueryOptions, ReadQuery
from flyrepo.kernel.exceptions import (
    ArgumentCountMismatchException,
    InvalidArgumentException,
    MethodNotImplementedException,
)

# Caller-facing operation names -> repository attribute names.
BASE_OPERATIONS: dict[str, str] = {
    "findAll": "find_all",
    "findById": "find_by_id",
    "create": "create",
    "update": "update",
    "delete": "delete",
    "save": "save",
    "createMany": "create_many",
    "updateMany": "update_many",
    "deleteMany": "delete_many",
    "count": "count",
    "exists": "exists",
    "query": "query",
    "raw": "raw",
}
BASE_OPERATIONS.update({attr: attr for attr in list(BASE_OPERATIONS.values())})


@dataclass(frozen=True)
class BaseOperation:
    """A fixed repository operation."""

    name: str
    attribute: str


@dataclass(frozen=True)
class DerivedFinder:
    """A finder whose query is derived from its name."""

    intent: MethodIntent

    @property
    def name(self) -> str:
        return self.intent.method_name


Resolution = BaseOperation | DerivedFinder


class DispatchResolver:
    """Single entry point for calls made by name on a repository.

    Args:
        target: Object implementing the base operations (the repository).
        backend: Backend executing derived finder reads.
        cache: Resolution cache owned by the repository scope.
    """

    def __init__(self, target: Any, backend: QueryBackendPort, cache: MethodResolutionCache) -> None:
        self._target = target
        self._backend = backend
        self._cache = cache

    @property
    def cache(self) -> MethodResolutionCache:
        return self._cache

    def resolve(self, name: str) -> Resolution:
        """Classify *name* as a base operation or a derived finder.

        Raises:
            MethodNotImplementedException: *name* is neither.
            InvalidFinderNameException: *name* has a finder prefix but is malformed.
        """
        attribute = BASE_OPERATIONS.get(name)
        if attribute is not None:
            return BaseOperation(name=name, attribute=attribute)

        if is_finder_name(name):
            return DerivedFinder(intent=self._cache.resolve(name))

        raise MethodNotImplementedException(
            f"Method {name} is not implemented on repository for {self._backend.table_name}",
            context={"method_name": name, "table_name": self._backend.table_name},
        )

    async def invoke(
        self,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        """Resolve *name* and execute it with the given arguments."""
        resolution = self.resolve(name)

        if isinstance(resolution, BaseOperation):
            result = getattr(self._target, resolution.attribute)(*args, **(kwargs or {}))
            if inspect.isawaitable(result):
                result = await result
            return result

        if kwargs:
            raise InvalidArgumentException(
                f"Method {name} accepts positional values only",
                context={"method_name": name, "keywords": sorted(kwargs)},
            )
        return await self.find(resolution.intent, args)

    async def find(self, intent: MethodIntent, args: Sequence[Any]) -> Any:
        """Execute a derived finder: one row or ``None`` for single arity, a list otherwise."""
        query = self.build_query(intent, args)
        if intent.arity is Arity.SINGLE:
            return await self._backend.fetch_first(query)
        return await self._backend.fetch_all(query)

    def build_query(self, intent: MethodIntent, args: Sequence[Any]) -> ReadQuery:
        """Bind call-site values to the intent's predicates.

        Raises:
            ArgumentCountMismatchException: the number of values differs from
                the number of value-binding predicates.
        """
        values = list(args)
        options: QueryOptions | None = None
        if intent.arity is Arity.COLLECTION and values and QueryOptions.matches(values[-1]):
            options = QueryOptions.of(values.pop())

        expected = intent.expected_arguments
        if len(values) != expected:
            raise ArgumentCountMismatchException(
                f"Method {intent.method_name} expects {expected} argument(s), but got {len(values)}",
                context={"method_name": intent.method_name, "expected": expected, "received": len(values)},
            )

        bound = iter(values)
        conditions = tuple(
            Condition(
                field=predicate.field,
                operator=predicate.operator,
                value=next(bound) if predicate.operator.binds_value else None,
            )
            for predicate in intent.predicates
        )

        return ReadQuery(
            conditions=conditions,
            ordering=intent.ordering,
            limit=options.limit if options else None,
            offset=options.offset if options else None,
        )
