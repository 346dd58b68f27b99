import asyncio
from typing import Dict, Optional, Any

from roadmap_pipeline.models.schemas import ValidationResult
from roadmap_pipeline.utils.clock import Clock, SystemClock

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class ValidationCache:
    """
    Time-bounded cache of URL validation results.

    Shared by single and batch validation so a URL is probed at most once per
    expiry window. Entries are ``{"result", "timestamp_millis"}`` keyed by the
    normalized input URL. Expiry is computed from an injected clock, so tests
    can move time forward without sleeping.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Optional[Clock] = None):
        """
        Initialize validation cache.

        Args:
            ttl_seconds: Lifetime of an entry
            clock: Time source (defaults to the system clock)
        """
        self.ttl_millis = int(ttl_seconds * 1000)
        self.clock = clock or SystemClock()
        self.cache: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0

    def _normalize_url(self, url: str) -> str:
        """Normalize URL for cache key (strip whitespace)."""
        return url.strip()

    def _is_fresh(self, entry: Dict[str, Any]) -> bool:
        return self.clock.timestamp_millis() - entry["timestamp_millis"] < self.ttl_millis

    async def get(self, url: str) -> Optional[ValidationResult]:
        """
        Get cached result for a URL.

        Expired entries are evicted and reported as misses.
        """
        key = self._normalize_url(url)
        async with self._lock:
            entry = self.cache.get(key)
            if entry is None:
                self.misses += 1
                return None
            if not self._is_fresh(entry):
                del self.cache[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry["result"]

    async def set(self, url: str, result: ValidationResult) -> None:
        """Store a final result (valid or invalid) for a URL."""
        key = self._normalize_url(url)
        async with self._lock:
            self.cache[key] = {
                "result": result,
                "timestamp_millis": self.clock.timestamp_millis(),
            }

    async def has(self, url: str) -> bool:
        """Check if a fresh entry exists for the URL."""
        key = self._normalize_url(url)
        async with self._lock:
            entry = self.cache.get(key)
            return entry is not None and self._is_fresh(entry)

    async def clear(self) -> None:
        """Clear all cached results."""
        async with self._lock:
            self.cache.clear()
            self.hits = 0
            self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "cache_size": len(self.cache),
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl_millis // 1000,
        }
