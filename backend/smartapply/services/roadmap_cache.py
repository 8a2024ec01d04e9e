"""Roadmap result cache.

In-memory TTL cache for generated roadmaps and alternative career lists.
Entries are keyed by derive_cache_key() so that requests differing only in
skill order share one entry.

Cache invalidation triggers:
- Entry age reaches the TTL (checked lazily on lookup)
- Manual invalidation via clear()

There is no size-based eviction; the key space is bounded by distinct
request combinations within one TTL window.
"""

import base64
import json
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import structlog

from smartapply.core.scheduler import Scheduler, default_scheduler
from smartapply.schemas.roadmap import RoadmapRequest

logger = structlog.get_logger()

# =============================================================================
# Constants
# =============================================================================

ROADMAP_KEY_PREFIX = "gemini_roadmap_"
ALTERNATIVES_KEY_PREFIX = "alternatives_"

_DEFAULT_TTL = timedelta(hours=24)
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def derive_cache_key(request: RoadmapRequest) -> str:
    """Build a stable cache key for a roadmap request.

    The normalized request (skills sorted and comma-joined) is serialized
    as compact JSON, base64-encoded, and stripped of non-alphanumerics.

    Args:
        request: Roadmap request.

    Returns:
        Key of the form ``gemini_roadmap_<alnum>``.
    """
    key_data = {
        "domain": request.domain,
        "jobRole": request.job_role,
        "experienceLevel": request.experience_level,
        "skills": ",".join(sorted(request.skills)),
        "educationLevel": request.education_level,
    }
    serialized = json.dumps(key_data, separators=(",", ":"), ensure_ascii=False)
    encoded = base64.b64encode(serialized.encode("utf-8")).decode("ascii")
    return ROADMAP_KEY_PREFIX + _NON_ALPHANUMERIC.sub("", encoded)


def derive_alternatives_key(request: RoadmapRequest) -> str:
    return ALTERNATIVES_KEY_PREFIX + derive_cache_key(request)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CacheEntry:
    """Cached value with its creation time."""

    value: Any
    created_at: datetime


@dataclass
class CacheStats:
    """Cache statistics for monitoring.

    Attributes:
        size: Number of entries currently in cache (expired entries not yet
            looked up are still counted).
        hits: Number of cache hits since creation or last clear.
        misses: Number of cache misses since creation or last clear.
        expirations: Number of entries dropped for age.
    """

    size: int
    hits: int
    misses: int
    expirations: int


# =============================================================================
# Roadmap Cache
# =============================================================================


class RoadmapCache:
    """In-memory TTL cache for roadmap results.

    Designed for single-threaded asyncio usage (the FastAPI pattern). Two
    concurrent misses for the same key are not deduplicated; both callers
    write the entry and the last write wins.

    Example:
        >>> cache = RoadmapCache()
        >>> key = derive_cache_key(request)
        >>> cached = cache.get(key)
        >>> if cached is None:
        ...     cached = await generate(request)
        ...     cache.set(key, cached)
    """

    def __init__(
        self,
        ttl: timedelta = _DEFAULT_TTL,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize empty cache.

        Args:
            ttl: Entry lifetime. Must be positive.
            scheduler: Time source. Defaults to the wall clock.
        """
        if ttl <= timedelta(0):
            msg = f"ttl must be positive, got {ttl}"
            raise ValueError(msg)

        self._ttl = ttl
        self._scheduler = scheduler or default_scheduler
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._expirations = 0

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._scheduler.now() - entry.created_at < self._ttl

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired.

        Expired entries are removed as a side effect.
        """
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if not self._is_fresh(entry):
            del self._entries[key]
            self._expirations += 1
            self._misses += 1
            logger.debug("roadmap_cache_expired", cache_key=key)
            return None

        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value stamped with the current time."""
        self._entries[key] = CacheEntry(value=value, created_at=self._scheduler.now())

    def clear(self) -> int:
        """Remove all entries and reset counters.

        Returns:
            Number of entries removed.
        """
        removed = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._expirations = 0
        logger.info("roadmap_cache_cleared", removed=removed)
        return removed

    def keys(self) -> list[str]:
        return list(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            expirations=self._expirations,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
