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
"""Tests for identifier case conversion."""

from __future__ import annotations

from datetime import datetime

import pytest

from flyrepo.data.naming import convert_keys, to_camel_case, to_snake_case


class TestToSnakeCase:
    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("Email", "email"),
            ("createdAt", "created_at"),
            ("CreatedAt", "created_at"),
            ("UserID", "user_id"),
            ("APIKey", "api_key"),
            ("userId", "user_id"),
            ("XMLHttpRequest", "xml_http_request"),
            ("myXMLParser", "my_xml_parser"),
            ("URL", "url"),
            ("Address2Line", "address2_line"),
        ],
    )
    def test_converts_mixed_case(self, token: str, expected: str) -> None:
        assert to_snake_case(token) == expected

    def test_snake_case_is_unchanged(self) -> None:
        assert to_snake_case("deleted_at") == "deleted_at"

    def test_empty_token(self) -> None:
        assert to_snake_case("") == ""


class TestToCamelCase:
    def test_converts_snake_case(self) -> None:
        assert to_camel_case("created_at") == "createdAt"
        assert to_camel_case("email_address_line") == "emailAddressLine"

    def test_single_word_is_unchanged(self) -> None:
        assert to_camel_case("id") == "id"


class TestConvertKeys:
    def test_nested_mappings_and_lists(self) -> None:
        value = {"userId": 1, "homeAddress": {"zipCode": "1000"}, "tags": [{"tagName": "a"}]}

        assert convert_keys(value, to_snake_case) == {
            "user_id": 1,
            "home_address": {"zip_code": "1000"},
            "tags": [{"tag_name": "a"}],
        }

    def test_scalars_are_untouched(self) -> None:
        stamp = datetime(2026, 1, 1)
        assert convert_keys({"created_at": stamp, "note": None}, to_camel_case) == {
            "createdAt": stamp,
            "note": None,
        }

    def test_tuples_keep_their_type(self) -> None:
        assert convert_keys(({"a_b": 1},), to_camel_case) == ({"aB": 1},)
