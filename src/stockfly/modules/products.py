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
"""Products sold by a company, grouped in categories."""

from __future__ import annotations

import uuid

from pydantic import Field
from sqlalchemy import Boolean, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.categories import Category
from stockfly.modules.companies import Company
from stockfly.modules.resource import Relation, Resource, ResourceSchema


class Product(BaseEntity):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(String(5000), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    price: Mapped[float] = mapped_column(Float, default=0.0)
    cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    id_category: Mapped[uuid.UUID] = mapped_column(ForeignKey("categories.id"))
    id_company: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("companies.id"), nullable=True)

    category: Mapped[Category] = relationship(lazy="raise")
    company: Mapped[Company | None] = relationship(lazy="raise")


class ProductRepository(Repository[Product, uuid.UUID]):
    pass


class CreateProduct(ResourceSchema):
    name: str = Field(min_length=1)
    description: str | None = None
    sku: str | None = Field(default=None, max_length=50)
    price: float = Field(default=0.0, ge=0)
    cost: float | None = Field(default=None, ge=0)
    is_active: bool = True
    id_category: uuid.UUID
    id_company: uuid.UUID | None = None


class UpdateProduct(ResourceSchema):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    sku: str | None = Field(default=None, max_length=50)
    price: float | None = Field(default=None, ge=0)
    cost: float | None = Field(default=None, ge=0)
    is_active: bool | None = None
    id_category: uuid.UUID | None = None
    id_company: uuid.UUID | None = None


RESOURCE = Resource(
    name="products",
    model=Product,
    repository=ProductRepository,
    create_schema=CreateProduct,
    update_schema=UpdateProduct,
    relations={
        "category": Relation("category", "categories"),
        "company": Relation("company", "companies"),
    },
    default_sort=Sort.by("name"),
)
