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
"""Tests for Resource descriptors and the module registry."""

import uuid
from datetime import UTC, datetime

import pytest

from stockfly.modules import RESOURCES, dependents_of, get_resource
from stockfly.modules.categories import Category
from stockfly.modules.products import Product
from stockfly.modules.resource import to_json_value


class TestRegistry:
    def test_names_are_unique(self):
        names = [resource.name for resource in RESOURCES]
        assert len(names) == len(set(names)) == 7

    def test_get_resource(self):
        assert get_resource("products").model is Product
        with pytest.raises(KeyError):
            get_resource("widgets")

    @pytest.mark.parametrize(
        "name, dependents",
        [
            ("categories", ("products",)),
            ("companies", ("customers", "products", "sales")),
            ("products", ("inventory",)),
            ("roles", ()),
        ],
    )
    def test_dependents(self, name, dependents):
        assert dependents_of(name) == dependents

    def test_relations_point_at_registered_resources(self):
        for resource in RESOURCES:
            for relation in resource.relations.values():
                get_resource(relation.target)


class TestFields:
    def test_camel_case_allow_list(self):
        fields = get_resource("products").fields
        assert fields["idCategory"] == "id_category"
        assert fields["isActive"] == "is_active"
        assert "id" in fields and "createdAt" in fields

    def test_relations_are_not_fields(self):
        assert "category" not in get_resource("products").fields


class TestSerialize:
    def test_projection(self):
        category = Category(id=uuid.uuid4(), name="Books", sort_order=2)
        data = get_resource("categories").serialize(category, projection=("id", "name"))
        assert data == {"id": str(category.id), "name": "Books"}

    def test_expand(self):
        category = Category(id=uuid.uuid4(), name="Books")
        product = Product(id=uuid.uuid4(), name="Novel", id_category=category.id, category=category, company=None)
        data = get_resource("products").serialize(product, projection=("id",), expand=("category", "company"))
        assert data["category"]["name"] == "Books"
        assert data["company"] is None

    def test_json_values(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert to_json_value(moment) == "2024-01-02T03:04:05+00:00"
        assert to_json_value(1.5) == 1.5
