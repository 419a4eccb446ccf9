"""
Memoization of summaries over record snapshots.

Every pestscan computation is pure, so a summary can be reused as long as
the record collection has not changed. Callers identify a snapshot by a
version token (a storage revision, an ETag, a hash of record ids); the cache
stores one Summary per (version, top_n).
"""

import logging
import os
import threading
from collections import OrderedDict
from typing import Hashable, Optional, Sequence

from .constants import DEFAULT_TOP_N, SUMMARY_CACHE_SIZE
from .domain import DetectionRecord
from .summary import Summary, summarize

logger = logging.getLogger(__name__)

# Environment variable to disable summary caching
DISABLE_CACHE_ENV_VAR = "PESTSCAN_DISABLE_CACHE"


def is_cache_disabled() -> bool:
    """True if PESTSCAN_DISABLE_CACHE is set to a truthy value."""
    return os.environ.get(DISABLE_CACHE_ENV_VAR, "").lower() in ("1", "true", "yes", "on")


class SummaryCache:
    """
    Thread-safe LRU cache of Summary objects.

    Summaries are returned as stored; treat them as read-only.
    """

    def __init__(self, maxsize: int = SUMMARY_CACHE_SIZE):
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self._cache: OrderedDict[tuple, Summary] = OrderedDict()
        self._lock = threading.RLock()
        self._maxsize = maxsize
        self._hits = 0
        self._misses = 0

    def get_summary(
        self, version: Hashable, records: Sequence[DetectionRecord], top_n: int = DEFAULT_TOP_N
    ) -> Summary:
        """
        Return the cached summary for (version, top_n), computing it on a miss.

        Args:
            version: Token that changes whenever `records` changes
            records: The snapshot the version refers to
            top_n: Number of ranked provinces

        Returns:
            Summary for the snapshot
        """
        if is_cache_disabled():
            return summarize(records, top_n=top_n)

        key = (version, top_n)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._hits += 1
                self._cache.move_to_end(key)
                return cached

            self._misses += 1
            summary = summarize(records, top_n=top_n)
            self._cache[key] = summary
            if len(self._cache) > self._maxsize:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted summary for version {evicted[0]!r}")
            return summary

    def invalidate(self, version: Optional[Hashable] = None):
        """Drop entries for `version`, or everything when version is None."""
        with self._lock:
            if version is None:
                self._cache.clear()
                return
            for key in [k for k in self._cache if k[0] == version]:
                del self._cache[key]

    def get_stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._cache),
                "maxsize": self._maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": hit_rate,
            }
