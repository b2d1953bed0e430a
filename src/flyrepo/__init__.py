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
"""flyrepo — repositories whose finders are derived from their method names.

Example::

    from flyrepo import create_repository

    users = create_repository(engine, "users")
    active = await users.findAllByStatusOrderByCreatedAtDesc("ACTIVE", {"limit": 20})
"""

from flyrepo.data import (
    AutoMapper,
    CountResult,
    CustomMapper,
    MappedRepository,
    QueryOptions,
    Repository,
    create_repository,
)
from flyrepo.data.relational.sqlalchemy import (
    check_database_health,
    create_database,
    install_query_logger,
    with_transaction,
)
from flyrepo.kernel.exceptions import (
    ArgumentCountMismatchException,
    FlyRepoException,
    InvalidArgumentException,
    InvalidFinderNameException,
    MethodNotImplementedException,
    RepositoryException,
)

__version__ = "0.1.0"

__all__ = [
    "ArgumentCountMismatchException",
    "AutoMapper",
    "CountResult",
    "CustomMapper",
    "FlyRepoException",
    "InvalidArgumentException",
    "InvalidFinderNameException",
    "MappedRepository",
    "MethodNotImplementedException",
    "QueryOptions",
    "Repository",
    "RepositoryException",
    "check_database_health",
    "create_database",
    "create_repository",
    "install_query_logger",
    "with_transaction",
]
