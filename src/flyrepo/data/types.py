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
"""Call-scoped value types exchanged between the repository core and its backend."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from flyrepo.data.query_parser import ComparisonOperator, Ordering
from flyrepo.kernel.exceptions import InvalidArgumentException

Row = dict[str, Any]

DEFAULT_CHUNK_SIZE = 1000

_OPTION_KEYS = ("limit", "offset")


def _check_non_negative(name: str, value: int | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentException(
            f"Invalid argument: {name} must be a non-negative integer",
            context={"argument": name, "value": value},
        )


@dataclass(frozen=True)
class QueryOptions:
    """Pagination options accepted as the trailing argument of collection finders."""

    limit: int | None = None
    offset: int | None = None

    def __post_init__(self) -> None:
        _check_non_negative("limit", self.limit)
        _check_non_negative("offset", self.offset)

    @staticmethod
    def matches(value: Any) -> bool:
        """Return ``True`` if *value* structurally looks like pagination options.

        Accepts a :class:`QueryOptions` or any mapping carrying a ``limit``
        and/or ``offset`` key whose value is an integer or ``None``.
        """
        if isinstance(value, QueryOptions):
            return True
        if not isinstance(value, Mapping):
            return False
        return any(
            key in value and (value[key] is None or isinstance(value[key], int))
            for key in _OPTION_KEYS
        )

    @classmethod
    def of(cls, value: QueryOptions | Mapping[str, Any]) -> QueryOptions:
        if isinstance(value, QueryOptions):
            return value
        return cls(limit=value.get("limit"), offset=value.get("offset"))


@dataclass(frozen=True)
class BatchWriteRequest:
    """Bulk insert request split into chunks of at most ``chunk_size`` records."""

    records: Sequence[Mapping[str, Any]]
    chunk_size: int = DEFAULT_CHUNK_SIZE
    skip_return: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise InvalidArgumentException(
                "Invalid argument: chunk_size must be a positive integer",
                context={"argument": "chunk_size", "value": self.chunk_size},
            )

    def chunks(self) -> list[Sequence[Mapping[str, Any]]]:
        """Contiguous slices ``[i * chunk_size, (i + 1) * chunk_size)`` in input order."""
        size = self.chunk_size
        return [self.records[i : i + size] for i in range(0, len(self.records), size)]


@dataclass(frozen=True)
class CountResult:
    """Result of a batch write that skipped returning rows."""

    count: int


@dataclass(frozen=True)
class Condition:
    """A predicate bound to its call-site value, ready for the backend."""

    field: str
    operator: ComparisonOperator
    value: Any = None


@dataclass(frozen=True)
class ReadQuery:
    """Backend-neutral description of a filtered, ordered, paginated read."""

    conditions: tuple[Condition, ...] = field(default_factory=tuple)
    ordering: Ordering | None = None
    limit: int | None = None
    offset: int | None = None
