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
"""Composable query predicates for dynamic SQLAlchemy queries.

A *Specification* wraps a callable that receives an entity class (``root``)
and a ``Select`` statement and returns the statement with a WHERE clause
applied. Specifications combine with ``&``; successive ``.where()`` calls
are ANDed by SQLAlchemy, so the clause order is preserved.

Example::

    active = Specification(lambda root, q: q.where(root.is_active == True))
    named = Specification(lambda root, q: q.where(root.name == "Books"))

    results = await repo.find_all_by_spec(active & named)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from sqlalchemy import Select

T = TypeVar("T")

Predicate = Callable[[type[Any], Select[Any]], Select[Any]]


class Specification(Generic[T]):
    """Composable query predicate applied to a SQLAlchemy ``Select``."""

    def __init__(self, predicate: Predicate) -> None:
        self._predicate = predicate

    def to_predicate(self, root: type[T], query: Select[Any]) -> Select[Any]:
        """Apply this specification's predicate to *query*."""
        return self._predicate(root, query)

    def __and__(self, other: Specification[T]) -> Specification[T]:
        """Combine with AND: the left predicate is applied first."""
        left, right = self._predicate, other._predicate
        return Specification(lambda root, q: right(root, left(root, q)))

    @staticmethod
    def all() -> Specification[Any]:
        """A specification that matches every row."""
        return Specification(lambda root, q: q)
