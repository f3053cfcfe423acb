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
"""Explicit ordering for filter chains.

Classes are ranked by an integer set with :func:`order`; the chain sorts
ascending, so smaller numbers run earlier. Built-in filters sit just above
:data:`HIGHEST_PRECEDENCE` and leave gaps for application filters.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

C = TypeVar("C", bound=type)

HIGHEST_PRECEDENCE = -(2**31)
LOWEST_PRECEDENCE = 2**31 - 1
DEFAULT_ORDER = 0

_ORDER_ATTR = "__stockfly_order__"


def order(rank: int) -> Callable[[C], C]:
    """Class decorator recording *rank* on the class."""

    def mark(cls: C) -> C:
        setattr(cls, _ORDER_ATTR, rank)
        return cls

    return mark


def get_order(cls: type) -> int:
    """Rank recorded by :func:`order`, or :data:`DEFAULT_ORDER`."""
    return getattr(cls, _ORDER_ATTR, DEFAULT_ORDER)
