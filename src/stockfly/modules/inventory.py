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
"""Inventory movements: every stock change of a product is one row."""

from __future__ import annotations

import uuid
from typing import Literal

from pydantic import Field
from sqlalchemy import Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort
from stockfly.modules.products import Product
from stockfly.modules.resource import Relation, Resource, ResourceSchema

MovementType = Literal["IN", "OUT", "ADJUSTMENT"]
MovementStatus = Literal["PENDING", "CONFIRMED", "CANCELLED"]


class InventoryMovement(BaseEntity):
    __tablename__ = "inventory_movements"

    id_product: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id"))
    movement_type: Mapped[str] = mapped_column(String(20))
    quantity: Mapped[float] = mapped_column(Float)
    previous_quantity: Mapped[float] = mapped_column(Float, default=0.0)
    current_quantity: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    product: Mapped[Product] = relationship(lazy="raise")


class InventoryMovementRepository(Repository[InventoryMovement, uuid.UUID]):
    pass


class CreateInventoryMovement(ResourceSchema):
    id_product: uuid.UUID
    movement_type: MovementType
    quantity: float = Field(gt=0)
    previous_quantity: float = Field(default=0.0, ge=0)
    current_quantity: float = Field(default=0.0, ge=0)
    status: MovementStatus = "PENDING"
    notes: str | None = Field(default=None, max_length=1000)


class UpdateInventoryMovement(ResourceSchema):
    status: MovementStatus | None = None
    notes: str | None = Field(default=None, max_length=1000)


RESOURCE = Resource(
    name="inventory",
    model=InventoryMovement,
    repository=InventoryMovementRepository,
    create_schema=CreateInventoryMovement,
    update_schema=UpdateInventoryMovement,
    relations={"product": Relation("product", "products")},
    default_sort=Sort.by("-created_at"),
)
