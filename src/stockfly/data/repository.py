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
"""Async repository over a SQLAlchemy 2.0 session."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar, cast, get_args, get_origin

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stockfly.data.page import Page
from stockfly.data.sort import Sort
from stockfly.data.specification import Specification

T = TypeVar("T")
ID = TypeVar("ID")


class Repository(Generic[T, ID]):
    """CRUD plus the specification-driven window query behind list endpoints.

    The entity type is taken from the generic declaration, so a concrete
    repository is usually a one-liner::

        class ProductRepository(Repository[Product, uuid.UUID]):
            pass

        products = ProductRepository(session=session)

    ``Repository(Model, session)`` works too for ad-hoc use. Writes only
    flush; committing belongs to whoever owns the session.
    """

    _entity_type: type | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = [base for base in getattr(cls, "__orig_bases__", ()) if get_origin(base) is Repository]
        if declared:
            entity = get_args(declared[0])[0]
            if not isinstance(entity, TypeVar):
                cls._entity_type = entity

    def __init__(self, model: type[T] | None = None, session: AsyncSession | None = None) -> None:
        model = model or type(self)._entity_type
        if model is None:
            raise TypeError(f"{type(self).__name__} needs a model: declare Repository[Entity, ID] or pass one in")
        self._model = cast(type[T], model)
        self._session = session

    @property
    def model(self) -> type[T]:
        return self._model

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError(f"No AsyncSession bound to {type(self).__name__}")
        return self._session

    async def save(self, entity: T) -> T:
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    async def find_by_id(self, id: ID, relations: Sequence[str] = ()) -> T | None:
        if not relations:
            return await self.session.get(self._model, id)
        stmt = self._with_relations(select(self._model).where(self._model.id == id), relations)  # type: ignore[attr-defined]
        return (await self.session.execute(stmt)).scalars().first()

    async def find_all_by_spec(self, spec: Specification[T], sort: Sort | None = None) -> list[T]:
        stmt = self._filtered(spec)
        if sort is not None:
            stmt = self._ordered(stmt, sort)
        return list((await self.session.execute(stmt)).scalars())

    async def find_window(
        self,
        spec: Specification[T],
        sort: Sort,
        limit: int,
        offset: int = 0,
        relations: Sequence[str] = (),
    ) -> Page[T]:
        """Rows ``offset .. offset + limit`` of the matches for *spec*, in *sort* order.

        *relations* are eager-loaded with ``selectinload``; the page carries
        no total (see :meth:`count_by_spec`).
        """
        stmt = self._with_relations(self._ordered(self._filtered(spec), sort), relations)
        rows = (await self.session.execute(stmt.offset(offset).limit(limit))).scalars()
        return Page(items=list(rows), offset=offset, limit=limit)

    async def count_by_spec(self, spec: Specification[T]) -> int:
        stmt = select(func.count()).select_from(self._filtered(spec).subquery())
        return (await self.session.execute(stmt)).scalar_one()

    async def count(self) -> int:
        return (await self.session.execute(select(func.count()).select_from(self._model))).scalar_one()

    def _filtered(self, spec: Specification[T]) -> Select[Any]:
        return spec.to_predicate(self._model, select(self._model))

    def _ordered(self, stmt: Select[Any], sort: Sort) -> Select[Any]:
        for order in sort.orders:
            column = getattr(self._model, order.property)
            stmt = stmt.order_by(column.desc() if order.direction == "desc" else column.asc())
        return stmt

    def _with_relations(self, stmt: Select[Any], relations: Sequence[str]) -> Select[Any]:
        if relations:
            stmt = stmt.options(*(selectinload(getattr(self._model, name)) for name in relations))
        return stmt
