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
"""Translate an :class:`ODataQuery` into repository query fragments.

The translator is where the field allow-list is enforced: every name a
client mentions in ``$filter``, ``$orderby``, ``$select`` or ``$expand``
must resolve to a declared field or relation. Names are matched exactly
first, then case-insensitively, and always come out in their declared
spelling.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import String, inspect

from stockfly.data.filter import FilterOperator as ColumnFilter
from stockfly.data.sort import Order, Sort
from stockfly.data.specification import Specification
from stockfly.kernel.exceptions import InvalidRequestException, UnknownFieldException
from stockfly.odata.query import FilterClause, ODataQuery, SortDirection

logger = logging.getLogger(__name__)

FieldMap = Mapping[str, str] | Sequence[str]


@dataclass(frozen=True)
class TranslatedQuery:
    """Repository-ready form of an OData query.

    Attributes:
        specification: AND-chain of the filter clauses, in clause order.
        sort: Requested ordering; unsorted when ``$orderby`` was absent.
        limit: Window size after defaulting and clamping.
        offset: Rows to skip.
        relations: Model attributes to eager-load.
        expand: API names of the expanded relations, parallel to ``relations``.
        projection: API field names to emit (always with ``id``), or ``None`` for all.
        count: Whether a total count was requested.
    """

    specification: Specification[Any]
    sort: Sort
    limit: int
    offset: int
    relations: tuple[str, ...] = ()
    expand: tuple[str, ...] = ()
    projection: tuple[str, ...] | None = None
    count: bool = False


class _NameResolver:
    def __init__(self, names: FieldMap) -> None:
        self._mapping: dict[str, str] = dict(names) if isinstance(names, Mapping) else {n: n for n in names}
        self._folded: dict[str, list[str]] = {}
        for name in self._mapping:
            self._folded.setdefault(name.lower(), []).append(name)

    @property
    def names(self) -> list[str]:
        return sorted(self._mapping)

    def canonical(self, name: str, parameter: str) -> str:
        if name in self._mapping:
            return name
        candidates = self._folded.get(name.lower(), [])
        if len(candidates) == 1:
            return candidates[0]
        raise UnknownFieldException(name, parameter, allowed=self.names)

    def attribute(self, name: str, parameter: str) -> str:
        return self._mapping[self.canonical(name, parameter)]


class QueryTranslator:
    """Build :class:`TranslatedQuery` objects from parsed OData queries.

    Args:
        default_top: Window size used when ``$top`` is absent.
        max_top: Upper bound for the window; larger requests are clamped.
    """

    def __init__(self, default_top: int = 15, max_top: int = 100) -> None:
        if default_top < 0 or max_top < 0:
            raise ValueError("default_top and max_top must be non-negative")
        self._default_top = default_top
        self._max_top = max_top

    @property
    def default_top(self) -> int:
        return self._default_top

    @property
    def max_top(self) -> int:
        return self._max_top

    def translate(
        self,
        query: ODataQuery,
        fields: FieldMap,
        relations: FieldMap | None = None,
        model: type | None = None,
    ) -> TranslatedQuery:
        """Resolve *query* against the allow-lists.

        With a *model*, string functions (``contains``, ``startswith``,
        ``endswith``) are only accepted on string columns.
        """
        field_names = _NameResolver(fields)
        relation_names = _NameResolver(relations or {})

        specification: Specification[Any] = Specification.all()
        for clause in query.filter or ():
            specification = specification & self._clause_spec(clause, field_names, model)

        orders = tuple(
            Order(
                property=field_names.attribute(o.field, "$orderby"),
                direction="desc" if o.direction is SortDirection.DESC else "asc",
            )
            for o in query.orderby or ()
        )

        projection = None
        if query.select is not None:
            selected = {field_names.canonical(name, "$select") for name in query.select}
            selected.add("id")
            projection = tuple(sorted(selected))

        expand = tuple(relation_names.canonical(name, "$expand") for name in query.expand or ())
        attributes = tuple(relation_names.attribute(name, "$expand") for name in expand)

        return TranslatedQuery(
            specification=specification,
            sort=Sort(orders=orders),
            limit=self._limit(query.top),
            offset=query.skip or 0,
            relations=attributes,
            expand=expand,
            projection=projection,
            count=bool(query.count),
        )

    def _limit(self, top: int | None) -> int:
        limit = self._default_top if top is None else top
        if limit > self._max_top:
            logger.debug("$top %d exceeds max_top, clamped to %d", limit, self._max_top)
            return self._max_top
        return limit

    @staticmethod
    def _clause_spec(clause: FilterClause, field_names: _NameResolver, model: type | None) -> Specification[Any]:
        attribute = field_names.attribute(clause.field, "$filter")
        if model is not None and clause.operator.is_function:
            column = inspect(model).columns[attribute]
            if not isinstance(column.type, String):
                raise InvalidRequestException(
                    f"{clause.operator.value}() needs a string field, '{clause.field}' is not one",
                    code="INVALID_FUNCTION_ARGUMENT",
                    context={"parameter": "$filter", "field": clause.field, "function": clause.operator.value},
                )
        build = getattr(ColumnFilter, clause.operator.value)
        return build(attribute, clause.value)
