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
"""OData query intent: the immutable value produced by parsing.

``None`` on any :class:`ODataQuery` field means the parameter was absent
from the request. Defaulting is left to the caller (the translator applies
``default_top``; the resource applies its default sort).
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

FilterValue = str | int | float | bool | None


class FilterOperator(str, Enum):
    """Supported ``$filter`` operators."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"

    @property
    def is_function(self) -> bool:
        """Whether the operator is written as ``op(field, value)``."""
        return self in _FUNCTION_OPERATORS


_FUNCTION_OPERATORS = frozenset({FilterOperator.CONTAINS, FilterOperator.STARTSWITH, FilterOperator.ENDSWITH})


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class FilterClause:
    """A single ``field operator value`` predicate."""

    field: str
    operator: FilterOperator
    value: FilterValue

    def to_expression(self) -> str:
        """Render the clause in canonical ``$filter`` syntax."""
        literal = format_literal(self.value)
        if self.operator.is_function:
            return f"{self.operator.value}({self.field},{literal})"
        return f"{self.field} {self.operator.value} {literal}"


@dataclass(frozen=True)
class OrderByClause:
    """A single ``$orderby`` clause."""

    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class ODataQuery:
    """Structured query intent for a list request.

    ``filter`` and ``orderby`` keep their insertion order; ``select`` is a
    set; ``expand`` keeps the order relations were requested in.
    """

    filter: tuple[FilterClause, ...] | None = None
    orderby: tuple[OrderByClause, ...] | None = None
    top: int | None = None
    skip: int | None = None
    select: frozenset[str] | None = None
    expand: tuple[str, ...] | None = None
    count: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self == ODataQuery()

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation with a stable layout."""
        return {
            "filter": None
            if self.filter is None
            else [
                {"field": c.field, "operator": c.operator.value, "value": c.value, "type": type(c.value).__name__}
                for c in self.filter
            ],
            "orderby": None
            if self.orderby is None
            else [{"field": o.field, "direction": o.direction.value} for o in self.orderby],
            "top": self.top,
            "skip": self.skip,
            "select": None if self.select is None else sorted(self.select),
            "expand": None if self.expand is None else list(self.expand),
            "count": self.count,
        }

    def canonical_json(self) -> str:
        """Serialization independent of how the query was built."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def digest(self) -> str:
        """Short SHA-256 digest of :meth:`canonical_json`."""
        return hashlib.sha256(self.canonical_json().encode("utf-8")).hexdigest()[:32]

    def to_params(self) -> dict[str, str]:
        """Re-serialize into canonical ``$``-parameters.

        Parsing the result with :class:`~stockfly.odata.parser.QueryStringParser`
        yields a query equal to this one.
        """
        params: dict[str, str] = {}
        if self.filter is not None:
            params["$filter"] = " and ".join(c.to_expression() for c in self.filter)
        if self.orderby:
            params["$orderby"] = ",".join(f"{o.field} {o.direction.value.lower()}" for o in self.orderby)
        if self.top is not None:
            params["$top"] = str(self.top)
        if self.skip is not None:
            params["$skip"] = str(self.skip)
        if self.select:
            params["$select"] = ",".join(sorted(self.select))
        if self.expand:
            params["$expand"] = ",".join(self.expand)
        if self.count is not None:
            params["$count"] = "true" if self.count else "false"
        return params


def format_literal(value: FilterValue) -> str:
    """Render a filter value as a ``$filter`` literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return "'" + value.replace("'", "''") + "'"
