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
"""Derived finder method parser.

Parses method names like ``findAllByStatusOrderByCreatedAtDesc`` into an
immutable :class:`MethodIntent` describing the filters, ordering and result
arity of the query.

Grammar
-------
**Prefixes:** ``findAllBy`` (collection result), ``findBy`` (single result)

**Connector:** ``And``

**Operators (suffix on field name):**
    - *(none)* = equals (default)
    - ``GreaterThan`` = ``>``
    - ``GreaterThanEqual`` = ``>=``
    - ``LessThan`` = ``<``
    - ``LessThanEqual`` = ``<=``
    - ``In`` = IN (takes a sequence)
    - ``Like`` = LIKE
    - ``IsNull`` = IS NULL (no value)
    - ``IsNotNull`` = IS NOT NULL (no value)

**Ordering suffix:** ``OrderBy{Field}[Asc|Desc]`` (ascending by default)

Tokens are located by literal substring scan: the first ``OrderBy`` starts
the ordering segment and every ``And`` splits predicates, so a field whose
camelCase spelling contains ``And`` or ``OrderBy`` cannot be expressed.

Example::

    parser = FinderMethodParser()
    intent = parser.parse("findAllByAgeGreaterThanEqualAndStatusOrderByNameDesc")
    intent.predicates  # (Predicate("age", GREATER_OR_EQUAL), Predicate("status", EQUALS))
    intent.ordering    # Ordering("name", DESC)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from flyrepo.data.naming import to_snake_case
from flyrepo.kernel.exceptions import InvalidFinderNameException


class Arity(enum.Enum):
    """Whether a finder returns one row (or ``None``) or a list of rows."""

    SINGLE = "single"
    COLLECTION = "collection"


class ComparisonOperator(enum.Enum):
    """Closed set of comparisons a derived finder can express."""

    EQUALS = "eq"
    GREATER_THAN = "gt"
    GREATER_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_OR_EQUAL = "lte"
    IN = "in"
    LIKE = "like"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    @property
    def binds_value(self) -> bool:
        """``False`` for null checks, which consume no call-site value."""
        return self not in (ComparisonOperator.IS_NULL, ComparisonOperator.IS_NOT_NULL)


class SortDirection(enum.Enum):
    ASC = "asc"
    DESC = "desc"


PREFIXES: dict[str, Arity] = {
    "findAllBy": Arity.COLLECTION,
    "findBy": Arity.SINGLE,
}

# Operator suffixes ordered longest-first to prevent partial matches.
# E.g., ``GreaterThanEqual`` must be checked before ``GreaterThan``.
OPERATORS: dict[str, ComparisonOperator] = {
    "GreaterThanEqual": ComparisonOperator.GREATER_OR_EQUAL,
    "LessThanEqual": ComparisonOperator.LESS_OR_EQUAL,
    "GreaterThan": ComparisonOperator.GREATER_THAN,
    "LessThan": ComparisonOperator.LESS_THAN,
    "IsNotNull": ComparisonOperator.IS_NOT_NULL,
    "IsNull": ComparisonOperator.IS_NULL,
    "Like": ComparisonOperator.LIKE,
    "In": ComparisonOperator.IN,
}

ORDER_BY_TOKEN = "OrderBy"
AND_TOKEN = "And"

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Predicate:
    """A single field predicate parsed from a method name."""

    field: str
    operator: ComparisonOperator = ComparisonOperator.EQUALS


@dataclass(frozen=True)
class Ordering:
    """The order-by clause of a finder."""

    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class MethodIntent:
    """Result of parsing a derived finder method name."""

    method_name: str
    arity: Arity
    predicates: tuple[Predicate, ...]
    ordering: Ordering | None = None

    @property
    def expected_arguments(self) -> int:
        """Number of positional values the finder binds."""
        return sum(1 for p in self.predicates if p.operator.binds_value)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _match_prefix(method_name: str) -> tuple[str, Arity]:
    for prefix, arity in PREFIXES.items():
        if method_name.startswith(prefix):
            return prefix, arity
    raise InvalidFinderNameException(
        f'Invalid finder method name: {method_name}. Must start with "findBy" or "findAllBy"',
        context={"method_name": method_name},
    )


def is_finder_name(name: str) -> bool:
    """Return ``True`` if *name* carries a derived finder prefix."""
    return any(name.startswith(prefix) for prefix in PREFIXES)


class FinderMethodParser:
    """Parse method names into :class:`MethodIntent` objects.

    Examples::

        parse("findByEmail")                      -> single, email = ?
        parse("findByEmailAndStatus")             -> single, email = ? AND status = ?
        parse("findAllByAgeLessThan")             -> collection, age < ?
        parse("findAllByDeletedAtIsNull")         -> collection, deleted_at IS NULL
        parse("findAllByStatusOrderByNameDesc")   -> collection, status = ? ORDER BY name DESC
    """

    def parse(self, method_name: str) -> MethodIntent:
        """Parse a method name, raising :class:`InvalidFinderNameException` if malformed."""
        prefix, arity = _match_prefix(method_name)

        rest = method_name[len(prefix) :]
        if not rest:
            raise InvalidFinderNameException(
                f'Invalid finder method name: {method_name}. No column specified after "{prefix}"',
                context={"method_name": method_name},
            )

        ordering: Ordering | None = None
        order_index = rest.find(ORDER_BY_TOKEN)
        if order_index != -1:
            order_body = rest[order_index + len(ORDER_BY_TOKEN) :]
            rest = rest[:order_index]
            ordering = self._parse_ordering(method_name, order_body)

        if not rest:
            raise InvalidFinderNameException(
                f'Invalid finder method name: {method_name}. No column specified before "{ORDER_BY_TOKEN}"',
                context={"method_name": method_name},
            )

        parts = rest.split(AND_TOKEN)
        if any(not part for part in parts):
            raise InvalidFinderNameException(
                f"Invalid finder method name: {method_name}. Empty column name detected",
                context={"method_name": method_name},
            )

        predicates = tuple(self._parse_predicate(method_name, part) for part in parts)
        return MethodIntent(method_name=method_name, arity=arity, predicates=predicates, ordering=ordering)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_ordering(method_name: str, order_body: str) -> Ordering:
        """Parse ``CreatedAtDesc`` into an :class:`Ordering`."""
        if not order_body:
            raise InvalidFinderNameException(
                f'Invalid finder method name: {method_name}. No column specified after "{ORDER_BY_TOKEN}"',
                context={"method_name": method_name},
            )

        direction = SortDirection.ASC
        column = order_body
        if order_body.endswith("Desc"):
            direction = SortDirection.DESC
            column = order_body[: -len("Desc")]
        elif order_body.endswith("Asc"):
            column = order_body[: -len("Asc")]

        if not column:
            raise InvalidFinderNameException(
                f'Invalid finder method name: {method_name}. No column specified after "{ORDER_BY_TOKEN}"',
                context={"method_name": method_name},
            )
        return Ordering(field=to_snake_case(column), direction=direction)

    @staticmethod
    def _parse_predicate(method_name: str, part: str) -> Predicate:
        """Parse a single ``Field[Operator]`` segment like ``AgeGreaterThan``."""
        field_name, operator = part, ComparisonOperator.EQUALS
        # Try operators from longest to shortest to avoid partial matches.
        for suffix, op in OPERATORS.items():
            if part.endswith(suffix):
                field_name, operator = part[: -len(suffix)], op
                break

        if not field_name:
            raise InvalidFinderNameException(
                f'Invalid finder method name: {method_name}. No column specified before "{part}"',
                context={"method_name": method_name},
            )
        return Predicate(field=to_snake_case(field_name), operator=operator)


def parse_finder_columns(method_name: str) -> list[str]:
    """Return only the snake_case column names of a finder, in declared order.

    Lightweight variant of :meth:`FinderMethodParser.parse` that ignores
    operators and ordering::

        parse_finder_columns("findByEmailAndStatus")  # ["email", "status"]
    """
    prefix, _ = _match_prefix(method_name)
    rest = method_name[len(prefix) :]
    if not rest:
        raise InvalidFinderNameException(
            f'Invalid finder method name: {method_name}. No column specified after "{prefix}"',
            context={"method_name": method_name},
        )
    return [to_snake_case(part) for part in rest.split(AND_TOKEN)]
