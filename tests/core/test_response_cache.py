"""Tests for ResponseCache — TTL visibility, LRU eviction, invalidation, stats."""

import pytest

from docmost_bridge.core.domain_types import CacheTier
from docmost_bridge.core.response_cache import (
    ResponseCache, TierConfig, build_tier_configs, search_key,
)


def test_get_after_set_returns_value_until_ttl(cache, clock):
    cache.set_spaces({"data": {"items": []}})
    clock.advance(299)
    assert cache.get_spaces() == {"data": {"items": []}}
    clock.advance(2)
    assert cache.get_spaces() is None


def test_search_tier_uses_its_own_ttl(cache, clock):
    cache.set_search("roadmap", None, ["hit"])
    clock.advance(119)
    assert cache.get_search("roadmap") == ["hit"]
    clock.advance(1)
    assert cache.get_search("roadmap") is None


def test_invalidate_clears_tier_regardless_of_ttl(cache):
    cache.set_search("q", None, ["a"])
    cache.set_search("q", "space1", ["b"])
    cache.invalidate(CacheTier.SEARCH)
    assert cache.get_search("q") is None
    assert cache.get_search("q", "space1") is None


def test_invalidate_leaves_other_tiers(cache):
    cache.set_spaces(["s"])
    cache.set_all_pages({"pages": []})
    cache.invalidate(CacheTier.SPACES)
    assert cache.get_all_pages() == {"pages": []}


def test_scoped_and_unscoped_search_keys_never_collide(cache):
    assert search_key("x") != search_key("x", "space1")
    cache.set_search("x", None, ["global"])
    cache.set_search("x", "space1", ["scoped"])
    assert cache.get_search("x") == ["global"]
    assert cache.get_search("x", "space1") == ["scoped"]


def test_search_key_without_scope_is_query():
    assert search_key("hello") == "hello"
    assert search_key("hello", "abc") == "hello:abc"


def test_none_is_never_stored(cache):
    cache.set_spaces(None)
    assert cache.get_spaces() is None
    assert cache.stats().size == 0


def test_lru_eviction_under_capacity_pressure(clock):
    cache = ResponseCache(
        {CacheTier.SEARCH: TierConfig(capacity=2, ttl_seconds=60)}, clock=clock,
    )
    cache.set_search("a", None, 1)
    cache.set_search("b", None, 2)
    assert cache.get_search("a") == 1  # a becomes most recently used
    cache.set_search("c", None, 3)
    assert cache.get_search("b") is None
    assert cache.get_search("a") == 1
    assert cache.get_search("c") == 3


def test_stats_count_hits_and_misses(cache):
    cache.get_spaces()
    cache.set_spaces(["s"])
    cache.get_spaces()
    cache.get_spaces()
    stats = cache.stats()
    assert stats.hits == 2
    assert stats.misses == 1


def test_stats_size_sums_all_tiers(cache):
    cache.set_spaces(["s"])
    cache.set_search("a", None, [1])
    cache.set_search("b", None, [2])
    cache.set_all_pages({"pages": []})
    assert cache.stats().size == 4
    cache.invalidate(CacheTier.SEARCH)
    assert cache.stats().size == 2


def test_stats_size_excludes_expired_entries(cache, clock):
    cache.set_search("a", None, [1])
    clock.advance(121)
    cache.set_spaces(["s"])
    assert cache.stats().size == 1


def test_stats_snapshot_is_a_copy(cache):
    snapshot = cache.stats()
    snapshot.hits = 99
    assert cache.stats().hits == 0
    assert cache.stats().max_size == 100


def test_stats_to_dict_uses_camel_case(cache):
    assert cache.stats().to_dict() == {"hits": 0, "misses": 0, "size": 0, "maxSize": 100}


def test_singleton_tiers_hold_one_entry():
    tiers = build_tier_configs(spaces_ttl=300, search_ttl=120, max_entries=50)
    assert tiers[CacheTier.SPACES].capacity == 1
    assert tiers[CacheTier.ALL_PAGES].capacity == 1
    assert tiers[CacheTier.SEARCH].capacity == 50


def test_all_pages_ttl_defaults_to_spaces_ttl():
    tiers = build_tier_configs(spaces_ttl=300, search_ttl=120, max_entries=50)
    assert tiers[CacheTier.ALL_PAGES].ttl_seconds == 300
    tiers = build_tier_configs(300, 120, 50, all_pages_ttl=900)
    assert tiers[CacheTier.ALL_PAGES].ttl_seconds == 900


def test_unconfigured_tier_raises(clock):
    cache = ResponseCache(
        {CacheTier.SPACES: TierConfig(capacity=1, ttl_seconds=60)}, clock=clock,
    )
    with pytest.raises(ValueError, match="search"):
        cache.get_search("q")
