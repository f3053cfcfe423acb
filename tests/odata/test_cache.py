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
"""Tests for ODataCacheStore."""

import pytest

from stockfly.config.properties.odata import ODataProperties
from stockfly.odata.cache import ODataCacheStore
from stockfly.odata.query import FilterClause, FilterOperator, ODataQuery


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def clause(field: str, value: object = 1) -> FilterClause:
    return FilterClause(field, FilterOperator.EQ, value)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> ODataCacheStore:
    return ODataCacheStore(base_ttl=60.0, max_entries=3, clock=clock)


class TestKeys:
    def test_key_ignores_construction_order(self):
        a = ODataQuery(top=5, select=frozenset(["name", "id"]), count=True)
        b = ODataQuery(count=True, select=frozenset(["id", "name"]), top=5)
        assert ODataCacheStore.make_key("categories", a) == ODataCacheStore.make_key("categories", b)

    def test_key_layout(self):
        query = ODataQuery(top=1)
        assert ODataCacheStore.make_key("categories", query) == f"categories:public:{query.digest()}"
        assert ODataCacheStore.make_key("categories", query, "u1").startswith("categories:u1:")

    def test_value_types_are_distinguished(self):
        as_int = ODataQuery(filter=(clause("code", 1),))
        as_str = ODataQuery(filter=(clause("code", "1"),))
        as_bool = ODataQuery(filter=(clause("code", True),))
        assert len({as_int.digest(), as_str.digest(), as_bool.digest()}) == 3

    def test_filter_order_is_significant(self):
        ab = ODataQuery(filter=(clause("a"), clause("b")))
        ba = ODataQuery(filter=(clause("b"), clause("a")))
        assert ab.digest() != ba.digest()


class TestGetSet:
    async def test_set_then_get_returns_data_unchanged(self, cache):
        query = ODataQuery(top=2)
        data = {"items": [{"id": "1", "name": "Books"}], "total": None}
        await cache.set("categories", query, data)

        entry = await cache.get("categories", query)
        assert entry is not None
        assert entry.data == data

    async def test_miss_for_other_entity_and_actor(self, cache):
        query = ODataQuery(top=2)
        await cache.set("categories", query, "x", actor="u1")
        assert await cache.get("products", query, actor="u1") is None
        assert await cache.get("categories", query, actor="u2") is None
        assert await cache.get("categories", query) is None

    async def test_entry_expires(self, cache, clock):
        query = ODataQuery()
        await cache.set("categories", query, "x", ttl=10)
        clock.advance(9)
        assert await cache.get("categories", query) is not None
        clock.advance(1)
        assert await cache.get("categories", query) is None
        assert len(cache) == 0

    async def test_default_ttl_comes_from_query(self, cache, clock):
        query = ODataQuery(count=True)
        await cache.set("categories", query, "x")
        entry = await cache.get("categories", query)
        assert entry.expires_at - entry.computed_at == cache.get_optimal_ttl(query)

    async def test_overwrite_keeps_single_entry(self, cache):
        query = ODataQuery()
        await cache.set("categories", query, "old")
        await cache.set("categories", query, "new")
        assert len(cache) == 1
        assert (await cache.get("categories", query)).data == "new"


class TestEviction:
    async def test_oldest_entry_is_evicted_at_capacity(self, cache, clock):
        for top in (1, 2, 3):
            await cache.set("categories", ODataQuery(top=top), top)
            clock.advance(1)

        await cache.set("categories", ODataQuery(top=4), 4)

        assert len(cache) == 3
        assert await cache.get("categories", ODataQuery(top=1)) is None
        assert (await cache.get("categories", ODataQuery(top=4))).data == 4
        assert cache.stats().evictions == 1

    async def test_overwriting_existing_key_does_not_evict(self, cache, clock):
        for top in (1, 2, 3):
            await cache.set("categories", ODataQuery(top=top), top)
            clock.advance(1)

        await cache.set("categories", ODataQuery(top=1), "again")

        assert len(cache) == 3
        assert cache.stats().evictions == 0


class TestInvalidate:
    async def test_invalidate_entity(self, cache):
        query = ODataQuery()
        await cache.set("categories", query, "c")
        await cache.set("categories", query, "c", actor="u1")
        await cache.set("products", query, "p")

        removed = await cache.invalidate("categories")

        assert removed == 2
        assert await cache.get("categories", query) is None
        assert await cache.get("products", query) is not None

    async def test_prefix_does_not_match_longer_entity_names(self, cache):
        await cache.set("sales", ODataQuery(), "s")
        await cache.set("salesreps", ODataQuery(), "r")
        await cache.invalidate("sales")
        assert await cache.get("salesreps", ODataQuery()) is not None

    async def test_invalidate_all(self, cache):
        await cache.set("categories", ODataQuery(), "c")
        await cache.set("products", ODataQuery(), "p")
        assert await cache.invalidate() == 2
        assert len(cache) == 0


class TestGenerations:
    async def test_set_with_current_generation_is_stored(self, cache):
        generation = cache.generation("categories")
        await cache.set("categories", ODataQuery(), "c", generation=generation)
        assert await cache.get("categories", ODataQuery()) is not None

    async def test_set_after_invalidation_is_discarded(self, cache):
        generation = cache.generation("categories")
        await cache.invalidate("categories")
        await cache.set("categories", ODataQuery(), "stale", generation=generation)
        assert await cache.get("categories", ODataQuery()) is None

    async def test_other_entities_keep_their_generation(self, cache):
        generation = cache.generation("products")
        await cache.invalidate("categories")
        assert cache.generation("products") == generation

    async def test_invalidate_all_bumps_every_entity(self, cache):
        products, categories = cache.generation("products"), cache.generation("categories")
        await cache.invalidate()
        assert cache.generation("products") > products
        assert cache.generation("categories") > categories

    async def test_invalidation_with_nothing_cached_still_counts(self, cache):
        generation = cache.generation("roles")
        assert await cache.invalidate("roles") == 0
        assert cache.generation("roles") == generation + 1


class TestComplexity:
    def test_single_clause_is_simple(self, cache):
        assert not cache.is_complex_query(ODataQuery(filter=(clause("name"),)))

    def test_four_clauses_are_complex(self, cache):
        query = ODataQuery(filter=tuple(clause(f"f{i}") for i in range(4)))
        assert cache.is_complex_query(query)

    def test_three_clauses_are_simple(self, cache):
        assert not cache.is_complex_query(ODataQuery(filter=tuple(clause(f"f{i}") for i in range(3))))

    @pytest.mark.parametrize(
        "query",
        [ODataQuery(expand=("company",)), ODataQuery(skip=101), ODataQuery(count=True)],
    )
    def test_other_complexity_triggers(self, cache, query):
        assert cache.is_complex_query(query)

    def test_skip_at_threshold_is_simple(self, cache):
        assert not cache.is_complex_query(ODataQuery(skip=100))


class TestTtl:
    def test_simple_query_uses_base_ttl(self, cache):
        assert cache.get_optimal_ttl(ODataQuery(top=5)) == 60.0

    def test_complex_query_lives_longer(self, cache):
        assert cache.get_optimal_ttl(ODataQuery(expand=("company",))) == 120.0

    @pytest.mark.parametrize(
        "query",
        [
            ODataQuery(),
            ODataQuery(expand=("company",)),
            ODataQuery(filter=tuple(clause(f"f{i}") for i in range(5)), skip=500),
        ],
    )
    def test_count_is_always_shorter(self, cache, query):
        with_count = ODataQuery(
            filter=query.filter, skip=query.skip, expand=query.expand, count=True
        )
        assert cache.get_optimal_ttl(with_count) < cache.get_optimal_ttl(query)

    def test_invalid_count_multiplier_rejected(self):
        with pytest.raises(ValueError):
            ODataCacheStore(count_ttl_multiplier=1.0)


class TestStatsAndFailOpen:
    async def test_hit_rate(self, cache):
        query = ODataQuery()
        await cache.get("categories", query)
        await cache.set("categories", query, "x")
        await cache.get("categories", query)
        await cache.get("categories", query)

        stats = cache.stats()
        assert (stats.hits, stats.misses, stats.size, stats.max_entries) == (2, 1, 1, 3)
        assert stats.hit_rate == pytest.approx(2 / 3)
        assert stats.to_dict()["hit_rate"] == 0.6667

    async def test_empty_stats(self, cache):
        assert cache.stats().hit_rate == 0.0

    async def test_clock_failure_is_a_miss(self, caplog):
        def broken_clock() -> float:
            raise RuntimeError("clock gone")

        store = ODataCacheStore(clock=broken_clock)
        await store.set("categories", ODataQuery(), "x")
        assert await store.get("categories", ODataQuery()) is None
        assert "OData cache SET failed" in caplog.text

    def test_from_properties(self):
        props = ODataProperties(cache_ttl=10.0, cache_max_entries=7, complex_ttl_multiplier=3.0)
        store = ODataCacheStore.from_properties(props)
        assert store.stats().max_entries == 7
        assert store.get_optimal_ttl(ODataQuery(expand=("x",))) == 30.0
