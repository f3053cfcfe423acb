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
"""Customers, optionally attached to a company."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.companies import Company
from stockfly.modules.resource import Relation, Resource, ResourceSchema


class Customer(BaseEntity):
    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(String(255))
    doc_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(String(5000), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    id_company: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("companies.id"), nullable=True)

    company: Mapped[Company | None] = relationship(lazy="raise")


class CustomerRepository(Repository[Customer, uuid.UUID]):
    pass


class CreateCustomer(ResourceSchema):
    name: str
    doc_id: str | None = None
    email: str | None = None
    description: str | None = None
    phone_number: str | None = None
    id_company: uuid.UUID | None = None


class UpdateCustomer(ResourceSchema):
    name: str | None = None
    doc_id: str | None = None
    email: str | None = None
    description: str | None = None
    phone_number: str | None = None
    id_company: uuid.UUID | None = None


RESOURCE = Resource(
    name="customers",
    model=Customer,
    repository=CustomerRepository,
    create_schema=CreateCustomer,
    update_schema=UpdateCustomer,
    relations={"company": Relation("company", "companies")},
    default_sort=Sort.by("name"),
)
