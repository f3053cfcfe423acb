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
"""Result window for offset/limit queries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Page(Generic[T]):
    """Rows *offset* .. *offset + limit* of a query; *total* only when it was counted."""

    items: list[T]
    offset: int
    limit: int
    total: int | None = None

    @property
    def has_next(self) -> bool:
        """Without a total, a full window is taken to mean more rows follow."""
        if self.total is None:
            return len(self.items) == self.limit
        return self.offset + len(self.items) < self.total

    def map(self, func: Callable[[T], U]) -> Page[U]:
        """Same window, each item passed through *func*."""
        return replace(self, items=[func(item) for item in self.items])  # type: ignore[return-value]
