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
"""Column predicate builders for dynamic specifications.

Each :class:`FilterOperator` method returns a :class:`Specification` for a
single column-level predicate. Values are coerced to the column's Python
type when a string literal is compared against a UUID or datetime column,
so ``idCategory eq '...'`` and ``createdAt gt '2024-01-01'`` work as
expected.

Example::

    spec = FilterOperator.ge("price", 10) & FilterOperator.contains("name", "tric")
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from stockfly.data.specification import Specification
from stockfly.kernel.exceptions import InvalidRequestException


def coerce_value(column: Any, value: Any) -> Any:
    """Convert a string literal into the Python type of *column* where needed."""
    if not isinstance(value, str):
        return value
    try:
        python_type = column.type.python_type
    except (AttributeError, NotImplementedError):
        return value
    try:
        if python_type is uuid.UUID:
            return uuid.UUID(value)
        if python_type is datetime:
            return datetime.fromisoformat(value)
        if python_type is date:
            return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidRequestException(
            f"Value '{value}' is not a valid {python_type.__name__} for '{column.key}'",
            code="INVALID_VALUE",
            context={"field": column.key, "value": value},
        ) from exc
    return value


def _column(root: type[Any], field: str) -> Any:
    return getattr(root, field)


class FilterOperator:
    """Filter operators for building dynamic specifications."""

    @staticmethod
    def eq(field: str, value: Any) -> Specification[Any]:
        """Equal to; ``None`` compiles to IS NULL."""

        def predicate(root, q, _f=field, _v=value):
            col = _column(root, _f)
            if _v is None:
                return q.where(col.is_(None))
            return q.where(col == coerce_value(col, _v))

        return Specification(predicate)

    @staticmethod
    def ne(field: str, value: Any) -> Specification[Any]:
        """Not equal to; ``None`` compiles to IS NOT NULL."""

        def predicate(root, q, _f=field, _v=value):
            col = _column(root, _f)
            if _v is None:
                return q.where(col.isnot(None))
            return q.where(col != coerce_value(col, _v))

        return Specification(predicate)

    @staticmethod
    def gt(field: str, value: Any) -> Specification[Any]:
        """Greater than."""

        def predicate(root, q, _f=field, _v=value):
            col = _column(root, _f)
            return q.where(col > coerce_value(col, _v))

        return Specification(predicate)

    @staticmethod
    def ge(field: str, value: Any) -> Specification[Any]:
        """Greater than or equal."""

        def predicate(root, q, _f=field, _v=value):
            col = _column(root, _f)
            return q.where(col >= coerce_value(col, _v))

        return Specification(predicate)

    @staticmethod
    def lt(field: str, value: Any) -> Specification[Any]:
        """Less than."""

        def predicate(root, q, _f=field, _v=value):
            col = _column(root, _f)
            return q.where(col < coerce_value(col, _v))

        return Specification(predicate)

    @staticmethod
    def le(field: str, value: Any) -> Specification[Any]:
        """Less than or equal."""

        def predicate(root, q, _f=field, _v=value):
            col = _column(root, _f)
            return q.where(col <= coerce_value(col, _v))

        return Specification(predicate)

    @staticmethod
    def contains(field: str, value: Any) -> Specification[Any]:
        """String contains; LIKE wildcards in *value* are escaped."""
        return Specification(
            lambda root, q, _f=field, _v=value: q.where(_column(root, _f).contains(str(_v), autoescape=True))
        )

    @staticmethod
    def startswith(field: str, value: Any) -> Specification[Any]:
        """String starts with."""
        return Specification(
            lambda root, q, _f=field, _v=value: q.where(_column(root, _f).startswith(str(_v), autoescape=True))
        )

    @staticmethod
    def endswith(field: str, value: Any) -> Specification[Any]:
        """String ends with."""
        return Specification(
            lambda root, q, _f=field, _v=value: q.where(_column(root, _f).endswith(str(_v), autoescape=True))
        )
