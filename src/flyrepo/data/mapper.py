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
"""Row <-> DTO transformers used by :class:`~flyrepo.data.mapped_repository.MappedRepository`.

Rows use snake_case column names; DTOs use camelCase field names.

Example::

    @dataclass
    class UserDTO:
        id: int
        emailAddress: str

    mapper = AutoMapper(UserDTO)
    mapper.to_dto({"id": 1, "email_address": "a@x.com"})  # UserDTO(id=1, emailAddress="a@x.com")
    mapper.to_row({"emailAddress": "a@x.com"})            # {"email_address": "a@x.com"}

    # With explicit functions
    mapper = CustomMapper(
        to_dto=lambda row: User(row["id"], row["name"].title()),
        to_row=lambda user: {"name": user.name.lower()},
    )
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from flyrepo.data.naming import convert_keys, to_camel_case, to_snake_case
from flyrepo.data.types import Row

D = TypeVar("D")


@runtime_checkable
class Transformer(Protocol):
    """Bidirectional conversion between stored rows and caller-facing DTOs."""

    def to_dto(self, row: Row) -> Any: ...

    def to_row(self, dto: Any) -> dict[str, Any]: ...


class AutoMapper(Generic[D]):
    """Key-casing mapper: camelCase DTO fields, snake_case columns.

    Args:
        dto_type: Optional class built as ``dto_type(**fields)`` by
            :meth:`to_dto`. Without it, DTOs are plain dicts.
    """

    def __init__(self, dto_type: type[D] | None = None) -> None:
        self._dto_type = dto_type

    def to_dto(self, row: Row) -> D | dict[str, Any]:
        converted = convert_keys(row, to_camel_case)
        if self._dto_type is not None:
            return self._dto_type(**converted)
        return converted

    def to_row(self, dto: Any) -> dict[str, Any]:
        return convert_keys(self._extract_fields(dto), to_snake_case)

    @staticmethod
    def _extract_fields(obj: Any) -> Mapping[str, Any]:
        """Extract field values from a mapping, dataclass instance or plain object."""
        if isinstance(obj, Mapping):
            return obj
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        return vars(obj)


class CustomMapper:
    """Transformer built from two explicit functions."""

    def __init__(
        self,
        to_dto: Callable[[Row], Any],
        to_row: Callable[[Any], Mapping[str, Any]],
    ) -> None:
        self._to_dto = to_dto
        self._to_row = to_row

    def to_dto(self, row: Row) -> Any:
        return self._to_dto(row)

    def to_row(self, dto: Any) -> dict[str, Any]:
        return dict(self._to_row(dto))
