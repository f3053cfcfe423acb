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
"""Product categories."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.resource import Resource, ResourceSchema


class Category(BaseEntity):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(String(5000), nullable=True)
    short_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)


class CategoryRepository(Repository[Category, uuid.UUID]):
    pass


class CreateCategory(ResourceSchema):
    name: str
    description: str | None = None
    short_description: str | None = None
    is_active: bool = True
    sort_order: int = 0


class UpdateCategory(ResourceSchema):
    name: str | None = None
    description: str | None = None
    short_description: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


RESOURCE = Resource(
    name="categories",
    model=Category,
    repository=CategoryRepository,
    create_schema=CreateCategory,
    update_schema=UpdateCategory,
    default_sort=Sort.by("sort_order", "name"),
)
