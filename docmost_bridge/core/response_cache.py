"""Response Cache — three-tier TTL/LRU cache for remote read paths.

Invariants:
    - An entry is visible only while now - inserted_at < tier TTL
    - Capacity pressure evicts least-recently-used entries first
    - Every get() counts exactly one hit or one miss
    - stats.size == sum of live entries across all tiers after every set/invalidate
    - None is never stored: an absent value is indistinguishable from a miss
    - Search keys for (q, None) and (q, space) never collide

Design Decisions:
    - cachetools.TTLCache per tier: TTL and LRU eviction in one structure
    - Tier configuration and clock injected at construction — the cache never
      reads process settings itself
    - Invalidation is caller-driven (gateway decides which tiers a write touches)
"""

import logging
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable

from cachetools import TTLCache

from docmost_bridge.core.domain_types import CacheTier

logger = logging.getLogger(__name__)

SPACES_KEY = "spaces"
ALL_PAGES_KEY = "all-pages"
SEARCH_KEY_SEPARATOR = ":"


@dataclass(frozen=True)
class TierConfig:
    """Capacity (entry count) and TTL for one tier. Eviction is LRU."""
    capacity: int
    ttl_seconds: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    size: int = 0
    max_size: int = 0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "size": self.size,
            "maxSize": self.max_size,
        }


def build_tier_configs(
    spaces_ttl: float, search_ttl: float, max_entries: int,
    all_pages_ttl: float | None = None,
) -> dict[CacheTier, TierConfig]:
    """Default tier layout: singleton spaces, N search entries, singleton aggregate."""
    return {
        CacheTier.SPACES: TierConfig(capacity=1, ttl_seconds=spaces_ttl),
        CacheTier.SEARCH: TierConfig(capacity=max_entries, ttl_seconds=search_ttl),
        CacheTier.ALL_PAGES: TierConfig(
            capacity=1,
            ttl_seconds=spaces_ttl if all_pages_ttl is None else all_pages_ttl,
        ),
    }


def search_key(query: str, space_id: str | None = None) -> str:
    """Cache key for the search tier — scoped and unscoped never collide."""
    if space_id:
        return f"{query}{SEARCH_KEY_SEPARATOR}{space_id}"
    return query


class ResponseCache:
    """Process-wide response cache, constructed once and injected into the gateway."""

    def __init__(
        self,
        tiers: dict[CacheTier, TierConfig],
        max_size: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._tiers: dict[CacheTier, TTLCache] = {
            tier: TTLCache(maxsize=cfg.capacity, ttl=cfg.ttl_seconds, timer=clock)
            for tier, cfg in tiers.items()
        }
        if max_size is None:
            max_size = sum(cfg.capacity for cfg in tiers.values())
        self._stats = CacheStats(max_size=max_size)

    def get(self, tier: CacheTier, key: str) -> Any | None:
        value = self._tier(tier).get(key)
        if value is not None:
            self._stats.hits += 1
            logger.debug("Cache HIT", extra={"tier": tier.value})
            return value
        self._stats.misses += 1
        logger.debug("Cache MISS", extra={"tier": tier.value})
        return None

    def set(self, tier: CacheTier, key: str, value: Any) -> None:
        if value is None:
            logger.debug("Refusing to cache absent value", extra={"tier": tier.value})
            return
        self._tier(tier)[key] = value
        self._update_size()

    def invalidate(self, tier: CacheTier) -> None:
        self._tier(tier).clear()
        self._update_size()
        logger.debug("Cache tier invalidated", extra={"tier": tier.value})

    def stats(self) -> CacheStats:
        """Snapshot copy — callers cannot mutate the live counters."""
        return CacheStats(**asdict(self._stats))

    # ── Tier shortcuts used by the gateway ──

    def get_spaces(self) -> Any | None:
        return self.get(CacheTier.SPACES, SPACES_KEY)

    def set_spaces(self, value: Any) -> None:
        self.set(CacheTier.SPACES, SPACES_KEY, value)

    def get_search(self, query: str, space_id: str | None = None) -> Any | None:
        return self.get(CacheTier.SEARCH, search_key(query, space_id))

    def set_search(self, query: str, space_id: str | None, value: Any) -> None:
        self.set(CacheTier.SEARCH, search_key(query, space_id), value)

    def get_all_pages(self) -> Any | None:
        return self.get(CacheTier.ALL_PAGES, ALL_PAGES_KEY)

    def set_all_pages(self, value: Any) -> None:
        self.set(CacheTier.ALL_PAGES, ALL_PAGES_KEY, value)

    def _tier(self, tier: CacheTier) -> TTLCache:
        try:
            return self._tiers[tier]
        except KeyError:
            raise ValueError(f"Cache tier not configured: {tier.value}") from None

    def _update_size(self) -> None:
        for cache in self._tiers.values():
            cache.expire()
        self._stats.size = sum(len(cache) for cache in self._tiers.values())
