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
"""In-process result cache for OData list queries.

Entries are keyed by entity, actor and the digest of the normalized query,
so two requests that differ only in parameter order or ``$select`` order
share an entry::

    orders:public:3f2a...   # anonymous
    orders:42:3f2a...       # actor 42, same query

Every operation fails open: an internal error is logged as a warning and
the call behaves like a miss (reads) or a no-op (writes).

Each invalidation bumps a generation number for the entity. A writer that
read the generation before querying the database passes it back to
:meth:`ODataCacheStore.set`; if an invalidation happened in between, the
result is discarded instead of cached.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stockfly.config.properties.odata import ODataProperties
from stockfly.odata.query import ODataQuery

logger = logging.getLogger("stockfly.odata.cache")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    """A cached result with the clock readings it was stored under."""

    data: Any
    computed_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters for the cache store."""

    size: int
    max_entries: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
        }


class ODataCacheStore:
    """Bounded TTL cache for serialized OData pages.

    One instance is created at application start and shared by every list
    use case. None of the mutating paths await, so each call runs to
    completion without interleaving on the event loop.

    Args:
        base_ttl: Seconds a simple query stays cached.
        max_entries: Capacity; the oldest entry is evicted when a new key
            arrives at capacity.
        complex_filter_threshold: A query with more filter clauses than this
            is complex.
        complex_skip_threshold: A query skipping more rows than this is complex.
        complex_ttl_multiplier: TTL factor for complex queries.
        count_ttl_multiplier: TTL factor applied when ``$count`` is requested.
        clock: Monotonic time source, in seconds.
    """

    def __init__(
        self,
        base_ttl: float = 300.0,
        max_entries: int = 1000,
        complex_filter_threshold: int = 3,
        complex_skip_threshold: int = 100,
        complex_ttl_multiplier: float = 2.0,
        count_ttl_multiplier: float = 0.5,
        clock: Clock = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if not 0 < count_ttl_multiplier < 1:
            raise ValueError("count_ttl_multiplier must be between 0 and 1 (exclusive)")
        self._base_ttl = base_ttl
        self._max_entries = max_entries
        self._complex_filter_threshold = complex_filter_threshold
        self._complex_skip_threshold = complex_skip_threshold
        self._complex_ttl_multiplier = complex_ttl_multiplier
        self._count_ttl_multiplier = count_ttl_multiplier
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @classmethod
    def from_properties(cls, properties: ODataProperties, clock: Clock = time.monotonic) -> ODataCacheStore:
        return cls(
            base_ttl=properties.cache_ttl,
            max_entries=properties.cache_max_entries,
            complex_filter_threshold=properties.complex_filter_threshold,
            complex_skip_threshold=properties.complex_skip_threshold,
            complex_ttl_multiplier=properties.complex_ttl_multiplier,
            count_ttl_multiplier=properties.count_ttl_multiplier,
            clock=clock,
        )

    @staticmethod
    def make_key(entity: str, query: ODataQuery, actor: str | None = None) -> str:
        return f"{entity}:{actor or 'public'}:{query.digest()}"

    async def get(self, entity: str, query: ODataQuery, actor: str | None = None) -> CacheEntry | None:
        """Return the live entry for the key, or ``None``."""
        try:
            key = self.make_key(entity, query, actor)
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry
        except Exception:
            logger.warning("OData cache GET failed for entity '%s'", entity, exc_info=True)
            return None

    async def set(
        self,
        entity: str,
        query: ODataQuery,
        data: Any,
        actor: str | None = None,
        ttl: float | None = None,
        generation: int | None = None,
    ) -> None:
        """Store *data* under the key, replacing any previous entry.

        When *generation* no longer matches :meth:`generation` for *entity*,
        the data predates an invalidation and is dropped.
        """
        try:
            if generation is not None and generation != self.generation(entity):
                logger.debug("Discarded OData cache SET for '%s': invalidated while computing", entity)
                return
            key = self.make_key(entity, query, actor)
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._evict_oldest()
            now = self._clock()
            lifetime = self.get_optimal_ttl(query) if ttl is None else ttl
            self._entries[key] = CacheEntry(data=data, computed_at=now, expires_at=now + lifetime)
        except Exception:
            logger.warning("OData cache SET failed for entity '%s'", entity, exc_info=True)

    async def invalidate(self, entity: str | None = None) -> int:
        """Drop every entry for *entity*, or everything when no entity is given.

        Returns the number of entries removed.
        """
        try:
            if entity is None:
                self._epoch += 1
                removed = len(self._entries)
                self._entries.clear()
            else:
                self._generations[entity] = self._generations.get(entity, 0) + 1
                prefix = f"{entity}:"
                stale = [key for key in self._entries if key.startswith(prefix)]
                for key in stale:
                    del self._entries[key]
                removed = len(stale)
            if removed:
                logger.debug("Invalidated %d OData cache entries for '%s'", removed, entity or "*")
            return removed
        except Exception:
            logger.warning("OData cache INVALIDATE failed for entity '%s'", entity, exc_info=True)
            return 0

    def generation(self, entity: str) -> int:
        """Changes whenever *entity* (or the whole store) is invalidated."""
        return self._epoch + self._generations.get(entity, 0)

    def is_complex_query(self, query: ODataQuery) -> bool:
        return self._is_complex_without_count(query) or bool(query.count)

    def get_optimal_ttl(self, query: ODataQuery) -> float:
        """Seconds to keep a result for *query*.

        Complex queries live longer; ``$count`` always shortens the lifetime.
        """
        ttl = self._base_ttl
        if self._is_complex_without_count(query):
            ttl *= self._complex_ttl_multiplier
        if query.count:
            ttl *= self._count_ttl_multiplier
        return ttl

    def stats(self) -> CacheStats:
        now = self._clock()
        live = sum(1 for entry in self._entries.values() if not entry.is_expired(now))
        return CacheStats(
            size=live,
            max_entries=self._max_entries,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def _is_complex_without_count(self, query: ODataQuery) -> bool:
        return (
            len(query.filter or ()) > self._complex_filter_threshold
            or bool(query.expand)
            or (query.skip or 0) > self._complex_skip_threshold
        )

    def _evict_oldest(self) -> None:
        oldest = min(self._entries, key=lambda k: self._entries[k].computed_at)
        del self._entries[oldest]
        self._evictions += 1
