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
"""Data-access configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from flyrepo.core.config import config_properties


@config_properties(prefix="flyrepo.database")
@dataclass
class DatabaseProperties:
    """Connection pool configuration (flyrepo.database.*).

    ``log`` enables statement logging: ``"query"``, ``"error"`` or ``"all"``.
    """

    url: str = "sqlite+aiosqlite:///flyrepo.db"
    pool_min: int = 2
    pool_max: int = 10
    echo: bool = False
    log: str | None = None


@config_properties(prefix="flyrepo.repository")
class RepositoryProperties(BaseModel):
    """Repository defaults (flyrepo.repository.*)."""

    chunk_size: int = Field(default=1000, ge=1)
    id_column: str = Field(default="id", min_length=1)
