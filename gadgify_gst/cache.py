"""
cache.py: in-memory TTL cache for resolved GST rates.

Key conventions:
  key = normalized HSN code ("8517")   → CacheEntry(ResolvedRate, cached_at)   TTL 24h (86400s)

Design:
  - Explicitly constructed and handed to RateResolver: no module-level global state
  - Clock is injected (seconds since epoch) so tests can advance time
  - Expiry is checked on read only; a stale entry stays until the next set()
    overwrites it. The key space is bounded by the catalog's distinct HSN codes.
  - Single process only. Several app instances each keep their own copy.
  - No locking: concurrent writers store equally valid values, last one wins
"""
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from gadgify_gst.gst.schemas import CacheEntry, CacheStatEntry, CacheStats, ResolvedRate

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# TTL constants (seconds)
# ---------------------------------------------------------------------------
RATE_TTL: int = 86400   # 24 hours

Clock = Callable[[], float]


class RateCache:
    """Memoizes RateResolver results per HSN code for ttl_seconds."""

    def __init__(self, ttl_seconds: int = RATE_TTL, clock: Clock = time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, hsn: str) -> Optional[ResolvedRate]:
        """Return the cached rate, or None if absent or older than the TTL."""
        entry = self._entries.get(hsn)
        if entry is None:
            return None
        if self._clock() - entry.cached_at >= self.ttl_seconds:
            logger.debug("Rate cache stale hsn=%s", hsn)
            return None
        logger.debug("Rate cache hit hsn=%s", hsn)
        return entry.data

    def set(self, hsn: str, data: ResolvedRate) -> None:
        """Store data for hsn, replacing whatever was there."""
        self._entries[hsn] = CacheEntry(data=data, cached_at=self._clock())

    def clear(self) -> None:
        """Drop every entry (tests, forced refresh)."""
        dropped = len(self._entries)
        self._entries.clear()
        logger.info("GST rate cache cleared entries=%d", dropped)

    def stats(self) -> CacheStats:
        """Size and per-entry write times. Includes stale entries not yet overwritten."""
        return CacheStats(
            size=len(self._entries),
            entries=[
                CacheStatEntry(
                    hsn=hsn,
                    cached_at=datetime.fromtimestamp(entry.cached_at, tz=timezone.utc),
                )
                for hsn, entry in self._entries.items()
            ],
        )
