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
"""Unified exception hierarchy for flyrepo.

All library exceptions inherit from FlyRepoException, enabling unified
error handling. Every repository error carries a stable machine-readable
``code`` and a ``context`` dict so callers never need to match on messages.

Codes:
- INVALID_FINDER_NAME: malformed derived finder method name
- ARGUMENT_COUNT_MISMATCH: wrong number of values passed to a derived finder
- METHOD_NOT_IMPLEMENTED: name is neither a base operation nor a finder
- INVALID_ARGUMENT: invalid construction or call arguments

Backend failures (SQLAlchemy / DBAPI errors) are never wrapped.
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class FlyRepoException(Exception):
    """Base exception for all flyrepo errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "INVALID_FINDER_NAME").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryException(FlyRepoException):
    """Programming errors detected by the repository layer."""

    default_code: str | None = None

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code=self.default_code, context=context)


class InvalidFinderNameException(RepositoryException, AttributeError):
    """The derived finder method name does not follow the grammar.

    Also an ``AttributeError``, so ``hasattr`` on a repository returns false
    for a malformed finder name.
    """

    default_code = "INVALID_FINDER_NAME"


class ArgumentCountMismatchException(RepositoryException):
    """A derived finder received a different number of values than it binds."""

    default_code = "ARGUMENT_COUNT_MISMATCH"


class MethodNotImplementedException(RepositoryException, AttributeError):
    """Name is neither a base operation nor a derived finder.

    Also an ``AttributeError`` so attribute probing (``hasattr``/``getattr``
    with a default) on a repository keeps its usual semantics.
    """

    default_code = "METHOD_NOT_IMPLEMENTED"


class InvalidArgumentException(RepositoryException):
    """Invalid argument passed to a repository factory or operation."""

    default_code = "INVALID_ARGUMENT"
