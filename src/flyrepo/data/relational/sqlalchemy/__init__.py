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
"""SQLAlchemy adapter — default QueryBackendPort implementation and database collaborators."""

from flyrepo.data.relational.sqlalchemy.backend import SqlAlchemyQueryBackend
from flyrepo.data.relational.sqlalchemy.database import HealthCheckResult, check_database_health, create_database
from flyrepo.data.relational.sqlalchemy.query_logger import (
    QueryLogEvent,
    QueryLogger,
    QueryLogLevel,
    QueryLogListener,
    StructlogQueryLogger,
    install_query_logger,
)
from flyrepo.data.relational.sqlalchemy.transactional import (
    TransactionScope,
    reactive_transactional,
    with_transaction,
)

__all__ = [
    "HealthCheckResult",
    "QueryLogEvent",
    "QueryLogLevel",
    "QueryLogListener",
    "QueryLogger",
    "SqlAlchemyQueryBackend",
    "StructlogQueryLogger",
    "TransactionScope",
    "check_database_health",
    "create_database",
    "install_query_logger",
    "reactive_transactional",
    "with_transaction",
]
