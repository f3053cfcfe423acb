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
"""Ordering for repository queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Direction = Literal["asc", "desc"]


@dataclass(frozen=True)
class Order:
    """Sort on one model attribute."""

    property: str
    direction: Direction = "asc"

    @staticmethod
    def asc(property: str) -> Order:
        return Order(property, "asc")

    @staticmethod
    def desc(property: str) -> Order:
        return Order(property, "desc")


@dataclass(frozen=True)
class Sort:
    """Ordered list of :class:`Order` terms; the first term is the primary key."""

    orders: tuple[Order, ...] = ()

    @staticmethod
    def by(*properties: str) -> Sort:
        """Build a sort from attribute names; a leading ``-`` means descending.

        ``Sort.by("sort_order", "name")`` and ``Sort.by("-sale_date")``.
        """
        return Sort(
            tuple(Order.desc(p[1:]) if p.startswith("-") else Order.asc(p) for p in properties)
        )

    @staticmethod
    def unsorted() -> Sort:
        return Sort()

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)
