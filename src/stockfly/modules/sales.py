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
"""Sales: a customer's order against a company."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field
from sqlalchemy import DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockfly.data.entity import BaseEntity, utcnow
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.companies import Company
from stockfly.modules.customers import Customer
from stockfly.modules.resource import Relation, Resource, ResourceSchema

SaleStatus = Literal["PENDING", "COMPLETED", "CANCELLED"]


class Sale(BaseEntity):
    __tablename__ = "sales"

    code: Mapped[str] = mapped_column(String(50), unique=True)
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    total: Mapped[float] = mapped_column(Float, default=0.0)
    sale_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    id_customer: Mapped[uuid.UUID] = mapped_column(ForeignKey("customers.id"))
    id_company: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("companies.id"), nullable=True)

    customer: Mapped[Customer] = relationship(lazy="raise")
    company: Mapped[Company | None] = relationship(lazy="raise")


class SaleRepository(Repository[Sale, uuid.UUID]):
    pass


class CreateSale(ResourceSchema):
    code: str = Field(min_length=1, max_length=50)
    status: SaleStatus = "PENDING"
    total: float = Field(default=0.0, ge=0)
    sale_date: datetime | None = None
    id_customer: uuid.UUID
    id_company: uuid.UUID | None = None


class UpdateSale(ResourceSchema):
    status: SaleStatus | None = None
    total: float | None = Field(default=None, ge=0)
    sale_date: datetime | None = None
    id_company: uuid.UUID | None = None


RESOURCE = Resource(
    name="sales",
    model=Sale,
    repository=SaleRepository,
    create_schema=CreateSale,
    update_schema=UpdateSale,
    relations={
        "customer": Relation("customer", "customers"),
        "company": Relation("company", "companies"),
    },
    default_sort=Sort.by("-sale_date"),
)
