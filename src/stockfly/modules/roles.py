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
"""User roles."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.resource import Resource, ResourceSchema


class Role(BaseEntity):
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class RoleRepository(Repository[Role, uuid.UUID]):
    pass


class CreateRole(ResourceSchema):
    name: str
    description: str | None = None
    is_active: bool = True


class UpdateRole(ResourceSchema):
    name: str | None = None
    description: str | None = None
    is_active: bool | None = None


RESOURCE = Resource(
    name="roles",
    model=Role,
    repository=RoleRepository,
    create_schema=CreateRole,
    update_schema=UpdateRole,
    default_sort=Sort.by("name"),
)
