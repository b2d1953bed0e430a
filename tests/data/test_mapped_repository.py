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
"""Tests for MappedRepository."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from flyrepo.data.mapped_repository import MappedRepository
from flyrepo.data.mapper import AutoMapper, CustomMapper
from flyrepo.data.repository import Repository
from flyrepo.data.types import CountResult
from flyrepo.kernel.exceptions import (
    InvalidArgumentException,
    InvalidFinderNameException,
    MethodNotImplementedException,
)


@dataclass
class UserDTO:
    id: int | None = None
    emailAddress: str = ""
    accountStatus: str = "ACTIVE"


@pytest.fixture
def repository(backend) -> Repository:
    return Repository(backend, chunk_size=2)


@pytest.fixture
async def users(repository: Repository) -> MappedRepository:
    mapped = repository.with_mapper(AutoMapper(UserDTO))
    await mapped.create_many(
        [
            UserDTO(emailAddress="a@x.com"),
            UserDTO(emailAddress="b@x.com", accountStatus="BANNED"),
            UserDTO(emailAddress="c@x.com"),
        ]
    )
    return mapped


class TestMappedOperations:
    @pytest.mark.asyncio
    async def test_create_maps_both_ways(self, repository: Repository, backend) -> None:
        users = MappedRepository(repository, AutoMapper(UserDTO))

        dto = await users.create(UserDTO(emailAddress="a@x.com"))

        assert dto == UserDTO(id=1, emailAddress="a@x.com", accountStatus="ACTIVE")
        assert backend.rows == [{"id": 1, "email_address": "a@x.com", "account_status": "ACTIVE"}]

    @pytest.mark.asyncio
    async def test_create_many_returns_dtos(self, users: MappedRepository) -> None:
        dtos = await users.find_all()

        assert [d.emailAddress for d in dtos] == ["a@x.com", "b@x.com", "c@x.com"]
        assert all(isinstance(d, UserDTO) for d in dtos)

    @pytest.mark.asyncio
    async def test_create_many_skip_return(self, users: MappedRepository) -> None:
        result = await users.create_many([UserDTO(emailAddress="d@x.com")], skip_return=True)

        assert result == CountResult(count=1)

    @pytest.mark.asyncio
    async def test_find_by_id(self, users: MappedRepository) -> None:
        assert (await users.find_by_id(2)).accountStatus == "BANNED"
        assert await users.find_by_id(99) is None

    @pytest.mark.asyncio
    async def test_update_accepts_partial_dto_mapping(self, users: MappedRepository) -> None:
        dto = await users.update(1, {"accountStatus": "BANNED"})

        assert dto.accountStatus == "BANNED"
        assert await users.update(99, {"accountStatus": "BANNED"}) is None

    @pytest.mark.asyncio
    async def test_save(self, users: MappedRepository) -> None:
        created = await users.save(UserDTO(emailAddress="d@x.com"))
        updated = await users.save(UserDTO(id=1, emailAddress="a@x.com", accountStatus="BANNED"))

        assert created.id == 4
        assert updated.accountStatus == "BANNED"

    @pytest.mark.asyncio
    async def test_criteria_use_dto_names(self, users: MappedRepository) -> None:
        assert await users.count({"accountStatus": "ACTIVE"}) == 2
        assert await users.exists({"emailAddress": "b@x.com"}) is True
        assert await users.update_many({"accountStatus": "ACTIVE"}, {"accountStatus": "PENDING"}) == 2
        assert await users.delete_many({"accountStatus": "PENDING"}) == 2
        assert await users.count() == 1

    @pytest.mark.asyncio
    async def test_delete(self, users: MappedRepository) -> None:
        assert await users.delete(1) is True
        assert await users.delete(1) is False

    @pytest.mark.asyncio
    async def test_query_and_raw_pass_through(self, users: MappedRepository) -> None:
        assert users.query() == "SELECT * FROM users"
        assert await users.raw("SELECT 1", {"x": 1}) == [{"statement": "SELECT 1", "parameters": {"x": 1}}]


class TestMappedFinders:
    @pytest.mark.asyncio
    async def test_single_finder(self, users: MappedRepository) -> None:
        dto = await users.findByEmailAddress("c@x.com")

        assert dto == UserDTO(id=3, emailAddress="c@x.com", accountStatus="ACTIVE")

    @pytest.mark.asyncio
    async def test_single_finder_no_match(self, users: MappedRepository) -> None:
        assert await users.findByEmailAddress("z@x.com") is None

    @pytest.mark.asyncio
    async def test_collection_finder(self, users: MappedRepository) -> None:
        dtos = await users.findAllByAccountStatusOrderByIdDesc("ACTIVE", {"limit": 1})

        assert [d.id for d in dtos] == [3]

    @pytest.mark.asyncio
    async def test_invoke(self, users: MappedRepository) -> None:
        by_finder = await users.invoke("findAllByAccountStatus", "BANNED")
        by_base = await users.invoke("findById", 1)

        assert [d.emailAddress for d in by_finder] == ["b@x.com"]
        assert by_base.emailAddress == "a@x.com"

    @pytest.mark.asyncio
    async def test_invoke_rejects_finder_keywords(self, users: MappedRepository) -> None:
        with pytest.raises(InvalidArgumentException):
            await users.invoke("findByEmailAddress", "a@x.com", limit=1)

    @pytest.mark.asyncio
    async def test_base_operations_by_camel_case(self, users: MappedRepository) -> None:
        assert users.findAll == users.find_all
        assert len(await users.findAll()) == 3

    def test_unknown_name(self, users: MappedRepository) -> None:
        with pytest.raises(MethodNotImplementedException):
            users.dropTable

        assert not hasattr(users, "dropTable")

    def test_malformed_finder_name(self, users: MappedRepository) -> None:
        with pytest.raises(InvalidFinderNameException):
            users.findByEmailAddressAnd

        assert not hasattr(users, "findByEmailAddressAnd")

    def test_finder_shares_repository_cache(self, users: MappedRepository) -> None:
        users.findByEmailAddress

        assert "findByEmailAddress" in users.repository.resolver.cache

    @pytest.mark.asyncio
    async def test_underlying_repository_returns_rows(self, users: MappedRepository) -> None:
        row = await users.repository.findByEmailAddress("a@x.com")

        assert row == {"id": 1, "email_address": "a@x.com", "account_status": "ACTIVE"}


class TestCustomMapped:
    @pytest.mark.asyncio
    async def test_custom_mapper(self, repository: Repository) -> None:
        names = repository.with_mapper(
            CustomMapper(to_dto=lambda row: row["name"].upper(), to_row=lambda name: {"name": name})
        )

        await names.create("alice")

        assert await names.findByName("alice") == "ALICE"
        assert repr(names) == "MappedRepository(table='users')"
