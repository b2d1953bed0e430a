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
"""Identifier casing helpers shared by the finder grammar and the key mapper.

Example::

    to_snake_case("XMLHttpRequest")   # "xml_http_request"
    to_snake_case("UserID")           # "user_id"
    to_camel_case("created_at")       # "createdAt"
    convert_keys({"userId": 1}, to_snake_case)  # {"user_id": 1}
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

# Leading acronym followed by a capitalised word: XMLHttp -> XML_Http
_LEADING_ACRONYM = re.compile(r"^([A-Z]+)([A-Z][a-z])")
# Acronym in the middle of a word: myXMLParser -> my_XML_Parser
_INNER_ACRONYM = re.compile(r"([a-z0-9])([A-Z]+)([A-Z][a-z])")
# Plain word boundary: userId -> user_Id
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def to_snake_case(token: str) -> str:
    """Convert a mixed-case token into a lowercase, underscore-delimited identifier.

    Runs of capitals are kept together as an acronym; when such a run is
    followed by a lowercase letter, its last capital starts the next word.
    Already snake_case input is returned unchanged.
    """
    if not token:
        return token

    result = _LEADING_ACRONYM.sub(r"\1_\2", token, count=1)
    result = _INNER_ACRONYM.sub(r"\1_\2_\3", result)
    result = _WORD_BOUNDARY.sub(r"\1_\2", result)
    return result.lower()


def to_camel_case(identifier: str) -> str:
    """Convert a snake_case identifier into lowerCamelCase."""
    if not identifier:
        return identifier

    head, *rest = identifier.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_keys(value: Any, converter: Callable[[str], str]) -> Any:
    """Recursively rewrite the keys of every mapping nested in *value*.

    Lists and tuples are walked element by element; scalars such as
    ``datetime``, ``Decimal`` or ``None`` are returned untouched.
    """
    if isinstance(value, Mapping):
        return {converter(str(key)): convert_keys(item, converter) for key, item in value.items()}
    if isinstance(value, list):
        return [convert_keys(item, converter) for item in value]
    if isinstance(value, tuple):
        return tuple(convert_keys(item, converter) for item in value)
    return value
