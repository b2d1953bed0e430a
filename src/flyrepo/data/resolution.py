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
"""Memoization of parsed finder names."""

from __future__ import annotations

import structlog

from flyrepo.data.query_parser import FinderMethodParser, MethodIntent

logger = structlog.get_logger("flyrepo.data.resolution")


class MethodResolutionCache:
    """Append-only cache of :class:`MethodIntent` keyed by the exact method name.

    The key space is bounded by the finder names a program actually calls,
    so entries are never evicted. Two callers missing on the same name may
    both parse it; intents are pure functions of the name, so the last write
    wins harmlessly.

    One cache is created per repository unless a shared one is passed in;
    sharing is safe between repositories bound to the same table.
    """

    def __init__(self, parser: FinderMethodParser | None = None) -> None:
        self._parser = parser or FinderMethodParser()
        self._intents: dict[str, MethodIntent] = {}

    def resolve(self, method_name: str) -> MethodIntent:
        """Return the intent for *method_name*, parsing it on first use."""
        intent = self._intents.get(method_name)
        if intent is None:
            intent = self._parser.parse(method_name)
            self._intents[method_name] = intent
            logger.debug(
                "finder_resolved",
                method_name=method_name,
                arity=intent.arity.value,
                predicates=len(intent.predicates),
            )
        return intent

    def clear(self) -> None:
        self._intents.clear()

    def __contains__(self, method_name: object) -> bool:
        return method_name in self._intents

    def __len__(self) -> int:
        return len(self._intents)
