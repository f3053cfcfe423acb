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
"""Query-string parser for OData ``$``-parameters."""

from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import parse_qsl

from stockfly.kernel.exceptions import MalformedQueryException
from stockfly.odata.filter_parser import FilterExpressionParser
from stockfly.odata.query import ODataQuery, OrderByClause, SortDirection

SUPPORTED_PARAMETERS = frozenset({"$filter", "$orderby", "$top", "$skip", "$select", "$expand", "$count"})

_NON_NEGATIVE_INT = re.compile(r"[0-9]+")


class QueryStringParser:
    """Turn a mapping of query parameters into an :class:`ODataQuery`.

    Only the supported ``$``-parameters are read; anything else in the
    mapping is ignored. Absent parameters stay ``None`` on the result.
    """

    def __init__(self, filter_parser: FilterExpressionParser | None = None) -> None:
        self._filter_parser = filter_parser or FilterExpressionParser()

    @staticmethod
    def has_odata_parameters(params: Mapping[str, str]) -> bool:
        return any(key in SUPPORTED_PARAMETERS for key in params)

    def parse_query_string(self, raw: str) -> ODataQuery:
        """Parse a raw ``a=b&c=d`` query string; later duplicates win."""
        return self.parse(dict(parse_qsl(raw.lstrip("?"), keep_blank_values=True)))

    def parse(self, params: Mapping[str, str]) -> ODataQuery:
        filter_ = None
        if "$filter" in params:
            filter_ = self._filter_parser.parse(params["$filter"])

        return ODataQuery(
            filter=filter_,
            orderby=self._parse_orderby(params.get("$orderby")),
            top=self._parse_non_negative(params.get("$top"), "$top"),
            skip=self._parse_non_negative(params.get("$skip"), "$skip"),
            select=self._parse_select(params.get("$select")),
            expand=self._parse_expand(params.get("$expand")),
            count=self._parse_count(params.get("$count")),
        )

    @staticmethod
    def _parse_non_negative(raw: str | None, parameter: str) -> int | None:
        if raw is None:
            return None
        value = raw.strip()
        if not _NON_NEGATIVE_INT.fullmatch(value):
            raise MalformedQueryException(
                f"{parameter} must be a non-negative integer, got '{raw}'", parameter=parameter
            )
        return int(value)

    @staticmethod
    def _parse_orderby(raw: str | None) -> tuple[OrderByClause, ...] | None:
        if raw is None:
            return None
        clauses: list[OrderByClause] = []
        for segment in _segments(raw):
            parts = segment.split()
            if len(parts) > 2:
                raise MalformedQueryException(f"Invalid $orderby clause '{segment}'", parameter="$orderby")
            direction = SortDirection.ASC
            if len(parts) == 2:
                keyword = parts[1].lower()
                if keyword == "asc":
                    direction = SortDirection.ASC
                elif keyword == "desc":
                    direction = SortDirection.DESC
                else:
                    raise MalformedQueryException(
                        f"Invalid $orderby direction '{parts[1]}'; expected asc or desc", parameter="$orderby"
                    )
            clauses.append(OrderByClause(field=parts[0], direction=direction))
        return tuple(clauses) or None

    @staticmethod
    def _parse_select(raw: str | None) -> frozenset[str] | None:
        if raw is None:
            return None
        fields = frozenset(_segments(raw))
        return fields or None

    @staticmethod
    def _parse_expand(raw: str | None) -> tuple[str, ...] | None:
        if raw is None:
            return None
        # dict.fromkeys drops duplicates but keeps request order
        relations = tuple(dict.fromkeys(_segments(raw)))
        return relations or None

    @staticmethod
    def _parse_count(raw: str | None) -> bool | None:
        if raw is None:
            return None
        value = raw.strip().lower()
        if value == "true":
            return True
        if value == "false":
            return False
        raise MalformedQueryException(f"$count must be true or false, got '{raw}'", parameter="$count")


def _segments(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]
