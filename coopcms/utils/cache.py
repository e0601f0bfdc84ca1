"""
Simple in-memory cache for rendered page component listings.
Avoids rebuilding component trees for pages that did not change.
"""
import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Dict, Optional, Tuple

CacheKey = Tuple[int, str]


class PageCache:
    """LRU cache with a per-entry TTL, keyed by page and language."""

    def __init__(self, max_size: int = 200, default_ttl_seconds: int = 3600):
        """
        Args:
            max_size: Maximum number of cached listings
            default_ttl_seconds: TTL used when an entry does not bring its own
        """
        self.cache: OrderedDict[CacheKey, Dict[str, Any]] = OrderedDict()
        self.max_size = max_size
        self.default_ttl_seconds = default_ttl_seconds
        self.hits = 0
        self.misses = 0
        self._lock = Lock()

    def _generate_key(self, page_id: int, language: Optional[str]) -> CacheKey:
        return (page_id, language or "")

    def get(self, page_id: int, language: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Get a cached listing if present and not expired."""
        key = self._generate_key(page_id, language)

        with self._lock:
            cached_data = self.cache.get(key)
            if cached_data is None:
                self.misses += 1
                return None

            if time.time() >= cached_data["expires_at"]:
                del self.cache[key]
                self.misses += 1
                return None

            self.cache.move_to_end(key)
            self.hits += 1
            return cached_data["response"]

    def set(
        self,
        page_id: int,
        language: Optional[str],
        response: Dict[str, Any],
        ttl_seconds: Optional[int] = None,
    ) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return

        key = self._generate_key(page_id, language)
        with self._lock:
            if key not in self.cache and len(self.cache) >= self.max_size:
                self.cache.popitem(last=False)

            self.cache[key] = {
                "response": response,
                "expires_at": time.time() + ttl,
            }
            self.cache.move_to_end(key)

    def invalidate_page(self, page_id: Optional[int]) -> int:
        """Drop every language variant cached for ``page_id``."""
        if page_id is None:
            return 0
        with self._lock:
            stale = [key for key in self.cache if key[0] == page_id]
            for key in stale:
                del self.cache[key]
        return len(stale)

    def clear(self):
        """Clear all cached items."""
        with self._lock:
            self.cache.clear()
            self.hits = 0
            self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0

        return {
            "size": len(self.cache),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "total_requests": total_requests,
            "hit_rate": f"{hit_rate:.2f}%",
            "default_ttl_seconds": self.default_ttl_seconds
        }
