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
"""Unified exception hierarchy for Stockfly.

All application exceptions inherit from StockflyException so the web layer
can map them to HTTP responses in one place.

Categories:
- BusinessException: Domain rule violations, validation errors, bad requests
- SecurityException: Authentication and authorization errors
- InfrastructureException: Database, cache and rate limiting failures
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class StockflyException(Exception):
    """Base exception for all Stockfly errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "MALFORMED_QUERY").
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
# Business Exceptions
# =============================================================================


class BusinessException(StockflyException):
    """Domain rule violations and business logic errors."""


class ValidationException(BusinessException):
    """Input validation failures."""


class ResourceNotFoundException(BusinessException):
    """Requested resource does not exist."""


class ConflictException(BusinessException):
    """The write conflicts with existing state (e.g. a duplicate unique value)."""


class InvalidRequestException(BusinessException):
    """Request is syntactically valid but semantically incorrect."""


class MalformedQueryException(InvalidRequestException):
    """An OData query parameter violates the supported grammar.

    ``context["parameter"]`` names the offending parameter (``$filter``,
    ``$top``, ...) when it is known.
    """

    def __init__(self, message: str, parameter: str | None = None) -> None:
        context = {"parameter": parameter} if parameter else {}
        super().__init__(message, code="MALFORMED_QUERY", context=context)
        self.parameter = parameter


class UnknownFieldException(InvalidRequestException):
    """A query references a field or relation the entity does not expose."""

    def __init__(self, field: str, parameter: str, allowed: list[str] | None = None) -> None:
        context: dict = {"parameter": parameter, "field": field}
        if allowed is not None:
            context["allowed"] = allowed
        super().__init__(
            f"Unknown field '{field}' in {parameter}",
            code="UNKNOWN_FIELD",
            context=context,
        )
        self.field = field
        self.parameter = parameter


# =============================================================================
# Security Exceptions
# =============================================================================


class SecurityException(StockflyException):
    """Authentication and authorization errors."""


class UnauthorizedException(SecurityException):
    """Authentication is required but was not provided or is invalid."""


class ForbiddenException(SecurityException):
    """Authenticated caller lacks permission to perform the operation."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(StockflyException):
    """Infrastructure failures: database, cache, network."""


class RateLimitException(InfrastructureException):
    """Request rate limit exceeded."""


class CircuitBreakerException(InfrastructureException):
    """A circuit breaker is open and the call was not attempted.

    ``context["retry_after"]`` holds the seconds until a trial call is allowed.
    """
