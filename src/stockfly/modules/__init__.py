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
"""Stockfly Modules: the inventory and sales resources exposed over HTTP."""

from __future__ import annotations

from stockfly.modules import categories, companies, customers, inventory, products, roles, sales
from stockfly.modules.resource import Relation, Resource, ResourceSchema

RESOURCES: tuple[Resource, ...] = (
    categories.RESOURCE,
    companies.RESOURCE,
    customers.RESOURCE,
    roles.RESOURCE,
    products.RESOURCE,
    sales.RESOURCE,
    inventory.RESOURCE,
)

_BY_NAME = {resource.name: resource for resource in RESOURCES}


def get_resource(name: str) -> Resource:
    """Look up a resource by its URL segment."""
    return _BY_NAME[name]


def dependents_of(name: str) -> tuple[str, ...]:
    """Names of resources with a relation pointing at *name*."""
    return tuple(
        resource.name
        for resource in RESOURCES
        if any(relation.target == name for relation in resource.relations.values())
    )


__all__ = [
    "RESOURCES",
    "Relation",
    "Resource",
    "ResourceSchema",
    "dependents_of",
    "get_resource",
]
