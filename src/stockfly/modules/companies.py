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
"""Companies: the tenants that own products, customers and sales."""

from __future__ import annotations

import uuid

from pydantic import Field
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.resource import Resource, ResourceSchema


class Company(BaseEntity):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255))
    doc_id: Mapped[str] = mapped_column(String(50), unique=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(String(5000), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)


class CompanyRepository(Repository[Company, uuid.UUID]):
    pass


class CreateCompany(ResourceSchema):
    name: str = Field(min_length=1)
    doc_id: str = Field(min_length=1, max_length=50)
    email: str | None = None
    description: str | None = None
    phone_number: str | None = None


class UpdateCompany(ResourceSchema):
    name: str | None = Field(default=None, min_length=1)
    doc_id: str | None = Field(default=None, min_length=1, max_length=50)
    email: str | None = None
    description: str | None = None
    phone_number: str | None = None


RESOURCE = Resource(
    name="companies",
    model=Company,
    repository=CompanyRepository,
    create_schema=CreateCompany,
    update_schema=UpdateCompany,
    default_sort=Sort.by("name"),
)
