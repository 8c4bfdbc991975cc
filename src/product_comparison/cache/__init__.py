"""In-process cache and provider quota limiting."""

from product_comparison.cache.quota import QuotaLimiter
from product_comparison.cache.store import CacheEntry, TTLCacheStore, make_cache_key


__all__ = ["CacheEntry", "QuotaLimiter", "TTLCacheStore", "make_cache_key"]
