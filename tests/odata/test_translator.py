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
"""Tests for QueryTranslator: allow-list, defaults, clamping and mapping."""

import pytest
from sqlalchemy import select

from stockfly.data.sort import Order
from stockfly.kernel.exceptions import InvalidRequestException, UnknownFieldException
from stockfly.modules.categories import RESOURCE as CATEGORIES
from stockfly.modules.categories import Category
from stockfly.modules.products import RESOURCE as PRODUCTS
from stockfly.odata.parser import QueryStringParser
from stockfly.odata.query import ODataQuery
from stockfly.odata.translator import QueryTranslator

parser = QueryStringParser()


def translate(raw: str, resource=CATEGORIES, translator: QueryTranslator | None = None):
    translator = translator or QueryTranslator(default_top=15, max_top=100)
    return translator.translate(parser.parse_query_string(raw), resource.fields, resource.relation_attributes)


def compiled_where(translated) -> str:
    stmt = translated.specification.to_predicate(Category, select(Category))
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


class TestWindow:
    def test_default_top_applies_when_absent(self):
        translated = translate("")
        assert (translated.limit, translated.offset) == (15, 0)

    def test_explicit_top_and_skip(self):
        translated = translate("$top=5&$skip=10")
        assert (translated.limit, translated.offset) == (5, 10)

    def test_top_is_clamped(self):
        assert translate("$top=10000").limit == 100

    def test_top_zero_is_kept(self):
        assert translate("$top=0").limit == 0

    def test_invalid_bounds_rejected(self):
        with pytest.raises(ValueError):
            QueryTranslator(default_top=-1)


class TestAllowList:
    @pytest.mark.parametrize(
        "raw, parameter",
        [
            ("$filter=password eq 'x'", "$filter"),
            ("$orderby=password", "$orderby"),
            ("$select=name,password", "$select"),
            ("$expand=owner", "$expand"),
        ],
    )
    def test_unknown_names_are_rejected(self, raw, parameter):
        with pytest.raises(UnknownFieldException) as exc_info:
            translate(raw)
        assert exc_info.value.code == "UNKNOWN_FIELD"
        assert exc_info.value.context["parameter"] == parameter

    def test_error_lists_allowed_fields(self):
        with pytest.raises(UnknownFieldException) as exc_info:
            translate("$filter=password eq 'x'")
        assert "sortOrder" in exc_info.value.context["allowed"]

    def test_names_resolve_case_insensitively(self):
        translated = translate("$select=NAME,SortOrder&$orderby=SORTORDER desc")
        assert translated.projection == ("id", "name", "sortOrder")
        assert translated.sort.orders == (Order("sort_order", "desc"),)


class TestMapping:
    def test_orderby_maps_to_attributes(self):
        translated = translate("$orderby=sortOrder desc,name")
        assert translated.sort.orders == (Order("sort_order", "desc"), Order("name", "asc"))

    def test_no_orderby_is_unsorted(self):
        assert not translate("").sort.is_sorted

    def test_projection_always_includes_id(self):
        assert translate("$select=name").projection == ("id", "name")

    def test_no_select_means_all_fields(self):
        assert translate("").projection is None

    def test_expand_maps_relations(self):
        translated = translate("$expand=Category,company", resource=PRODUCTS)
        assert translated.expand == ("category", "company")
        assert translated.relations == ("category", "company")

    def test_count_flag(self):
        assert translate("$count=true").count is True
        assert translate("").count is False

    def test_filter_compiles_in_clause_order(self):
        sql = compiled_where(translate("$filter=isActive eq true and sortOrder ge 2 and contains(name,'oo')"))
        where = sql.split("WHERE", 1)[1]
        assert where.index("is_active") < where.index("sort_order") < where.index("name")
        assert "LIKE" in where

    def test_null_compiles_to_is_null(self):
        assert "description IS NULL" in compiled_where(translate("$filter=description eq null"))

    def test_empty_filter_has_no_where(self):
        assert "WHERE" not in compiled_where(translate(""))

    def test_translating_an_empty_query(self):
        translated = QueryTranslator().translate(ODataQuery(), CATEGORIES.fields)
        assert translated.relations == ()


class TestStringFunctions:
    def _translate(self, raw: str):
        query = parser.parse_query_string(raw)
        return QueryTranslator().translate(query, CATEGORIES.fields, model=Category)

    @pytest.mark.parametrize("function", ["contains", "startswith", "endswith"])
    def test_rejected_on_non_string_columns(self, function):
        with pytest.raises(InvalidRequestException) as info:
            self._translate(f"$filter={function}(sortOrder,'1')")
        assert info.value.code == "INVALID_FUNCTION_ARGUMENT"
        assert info.value.context == {"parameter": "$filter", "field": "sortOrder", "function": function}

    def test_uuid_column_is_not_a_string(self):
        with pytest.raises(InvalidRequestException):
            self._translate("$filter=contains(id,'ab')")

    def test_accepted_on_string_columns(self):
        sql = compiled_where(self._translate("$filter=contains(shortDescription,'x')"))
        assert "LIKE" in sql

    def test_comparisons_on_non_string_columns_are_unaffected(self):
        self._translate("$filter=sortOrder eq 1")

    def test_without_a_model_nothing_is_checked(self):
        translate("$filter=contains(sortOrder,'1')")
