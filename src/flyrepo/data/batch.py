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
"""Chunked, concurrently executed bulk insert.

The input is split into contiguous chunks and one ``insert_many`` call per
chunk is started before any of them is awaited, so backend round-trips
overlap instead of adding up.

Join semantics follow ``asyncio.gather``: the first chunk failure observed
is raised to the caller as-is, while sibling chunks already in flight keep
running to completion and their outcomes are discarded. Chunks are
independent statements; wrap the call in a transaction for all-or-nothing
behaviour (statements on one connection are serialized).
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from flyrepo.data.ports.outbound import QueryBackendPort
from flyrepo.data.types import BatchWriteRequest, CountResult, Row

logger = structlog.get_logger("flyrepo.data.batch")


class ChunkedBatchExecutor:
    """Fan out a :class:`BatchWriteRequest` over a backend and fan the results back in."""

    def __init__(self, backend: QueryBackendPort) -> None:
        self._backend = backend

    async def execute(self, request: BatchWriteRequest) -> list[Row] | CountResult:
        """Insert every record of *request*.

        Returns:
            The inserted rows, concatenated in chunk order, or a
            :class:`CountResult` when ``skip_return`` is set.
        """
        if not request.records:
            return CountResult(count=0) if request.skip_return else []

        chunks = request.chunks()
        returning = not request.skip_return
        logger.debug(
            "batch_write_started",
            table=self._backend.table_name,
            records=len(request.records),
            chunks=len(chunks),
            skip_return=request.skip_return,
        )

        results = await asyncio.gather(
            *(self._insert_chunk(index, chunk, returning) for index, chunk in enumerate(chunks))
        )

        if request.skip_return:
            total = sum(int(result) for result in results)  # type: ignore[arg-type]
            logger.debug("batch_write_completed", table=self._backend.table_name, count=total)
            return CountResult(count=total)

        rows: list[Row] = []
        for chunk_rows in results:
            rows.extend(chunk_rows)  # type: ignore[arg-type]
        logger.debug("batch_write_completed", table=self._backend.table_name, count=len(rows))
        return rows

    async def _insert_chunk(
        self,
        index: int,
        chunk: Sequence[Mapping[str, Any]],
        returning: bool,
    ) -> list[Row] | int:
        try:
            return await self._backend.insert_many(chunk, returning=returning)
        except Exception as exc:
            logger.debug(
                "batch_chunk_failed",
                table=self._backend.table_name,
                chunk=index,
                size=len(chunk),
                error=repr(exc),
            )
            raise
