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
"""List use case shared by every OData-enabled resource."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stockfly.odata.cache import ODataCacheStore
from stockfly.odata.query import ODataQuery
from stockfly.odata.translator import QueryTranslator

if TYPE_CHECKING:
    from stockfly.modules.resource import Resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ODataResult:
    """Items for one list request.

    ``total`` is only set when ``$count=true`` was requested.
    """

    items: list[dict[str, Any]]
    total: int | None
    cached: bool
    query: ODataQuery


class ListODataUseCase:
    """Translate, consult the cache, then query the store on a miss.

    Translation runs before anything else, so an unknown field fails the
    request without touching the cache or the database. Store failures
    propagate and leave the cache untouched. A page computed while the
    resource was invalidated is returned but not cached.
    """

    def __init__(
        self,
        resource: Resource,
        session_factory: async_sessionmaker[AsyncSession],
        cache: ODataCacheStore,
        translator: QueryTranslator,
        cache_enabled: bool = True,
    ) -> None:
        self._resource = resource
        self._session_factory = session_factory
        self._cache = cache
        self._translator = translator
        self._cache_enabled = cache_enabled

    @property
    def resource(self) -> Resource:
        return self._resource

    async def execute(self, query: ODataQuery | None = None, actor: str | None = None) -> ODataResult:
        if query is None:
            query = ODataQuery()
        resource = self._resource
        translated = self._translator.translate(
            query, resource.fields, resource.relation_attributes, model=resource.model
        )

        if self._cache_enabled:
            entry = await self._cache.get(resource.name, query, actor)
            if entry is not None:
                return ODataResult(items=entry.data["items"], total=entry.data["total"], cached=True, query=query)
        generation = self._cache.generation(resource.name)

        sort = translated.sort if translated.sort.is_sorted else resource.default_sort
        async with self._session_factory() as session:
            repository = resource.repository(session=session)
            page = await repository.find_window(
                translated.specification,
                sort,
                limit=translated.limit,
                offset=translated.offset,
                relations=translated.relations,
            )
            total = await repository.count_by_spec(translated.specification) if translated.count else None
            items = page.map(lambda entity: resource.serialize(entity, translated.projection, translated.expand)).items

        logger.debug(
            "Computed %d %s rows (offset=%d, limit=%d, total=%s)",
            len(items),
            resource.name,
            translated.offset,
            translated.limit,
            total,
        )
        if self._cache_enabled:
            await self._cache.set(
                resource.name,
                query,
                {"items": items, "total": total},
                actor=actor,
                ttl=self._cache.get_optimal_ttl(query),
                generation=generation,
            )
        return ODataResult(items=items, total=total, cached=False, query=query)
