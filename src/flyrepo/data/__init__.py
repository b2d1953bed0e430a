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
"""flyrepo data — repositories with name-derived finders.

Shared abstractions (parser, resolver, batch executor, backend port) are
backend-neutral; :func:`create_repository` binds them to the SQLAlchemy
adapter (``flyrepo.data.relational.sqlalchemy``).
"""

from flyrepo.data.batch import ChunkedBatchExecutor
from flyrepo.data.dispatch import BASE_OPERATIONS, BaseOperation, DerivedFinder, DispatchResolver
from flyrepo.data.mapped_repository import MappedRepository
from flyrepo.data.mapper import AutoMapper, CustomMapper, Transformer
from flyrepo.data.naming import convert_keys, to_camel_case, to_snake_case
from flyrepo.data.ports.outbound import QueryBackendPort
from flyrepo.data.query_parser import (
    Arity,
    ComparisonOperator,
    FinderMethodParser,
    MethodIntent,
    Ordering,
    Predicate,
    SortDirection,
    parse_finder_columns,
)
from flyrepo.data.repository import Repository, create_repository
from flyrepo.data.resolution import MethodResolutionCache
from flyrepo.data.types import BatchWriteRequest, Condition, CountResult, QueryOptions, ReadQuery

__all__ = [
    "Arity",
    "AutoMapper",
    "BASE_OPERATIONS",
    "BaseOperation",
    "BatchWriteRequest",
    "ChunkedBatchExecutor",
    "ComparisonOperator",
    "Condition",
    "CountResult",
    "CustomMapper",
    "DerivedFinder",
    "DispatchResolver",
    "FinderMethodParser",
    "MappedRepository",
    "MethodIntent",
    "MethodResolutionCache",
    "Ordering",
    "Predicate",
    "QueryBackendPort",
    "QueryOptions",
    "ReadQuery",
    "Repository",
    "SortDirection",
    "Transformer",
    "convert_keys",
    "create_repository",
    "parse_finder_columns",
    "to_camel_case",
    "to_snake_case",
]
