"""
resolver.py: best-available GST rate for an HSN code.

Resolution order for resolve(hsn):
  1. validate format            → ValidationError (the only error callers see)
  2. cache hit (< TTL)          → returned as-is, no I/O
  3. providers, in order        → first success wins; each failure is logged
                                  at WARNING and swallowed, never retried
  4. static HSN table           → cannot fail (unknown codes get 18%)
  5. cache write                → fresh timestamp, then return

Because step 4 always succeeds, the resolver stays available when every
external provider is down; checkout only ever sees a rate.

resolve_many() fans out over distinct codes in fixed-size batches
(asyncio.gather per batch) to bound simultaneous outbound connections.
"""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from gadgify_gst.cache import RateCache
from gadgify_gst.gst import rate_table
from gadgify_gst.gst.errors import ProviderUnavailable
from gadgify_gst.gst.providers import RateProvider
from gadgify_gst.gst.schemas import HSNRateEntry, RateSource, ResolvedRate
from gadgify_gst.gst.validator import validate_hsn

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


class RateResolver:
    """Cache → providers → static table, for one HSN code at a time."""

    def __init__(
        self,
        cache: RateCache,
        providers: Sequence[RateProvider] = (),
        clock: Callable[[], float] = time.time,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.cache = cache
        self.providers: List[RateProvider] = list(providers)
        self._clock = clock
        self.batch_size = batch_size

    def _stamp(
        self,
        entry: HSNRateEntry,
        source: RateSource,
        provider: Optional[str] = None,
    ) -> ResolvedRate:
        return ResolvedRate(
            hsn=entry.hsn,
            rate=entry.rate,
            description=entry.description,
            source=source,
            provider=provider,
            resolved_at=datetime.fromtimestamp(self._clock(), tz=timezone.utc),
        )

    async def _from_providers(self, hsn: str) -> Optional[ResolvedRate]:
        for provider in self.providers:
            try:
                entry = await provider.fetch_rate(hsn)
            except ProviderUnavailable as exc:
                logger.warning("GST provider failed hsn=%s provider=%s reason=%s", hsn, exc.provider, exc.reason)
                continue
            logger.info("GST rate resolved hsn=%s rate=%s provider=%s", hsn, entry.rate, provider.name)
            return self._stamp(entry, "api", provider=provider.name)
        return None

    async def resolve(self, hsn: str) -> ResolvedRate:
        """
        Resolve one HSN code.

        Raises:
            ValidationError: If hsn is not 4–8 digits. Provider faults never raise.
        """
        code = validate_hsn(hsn)

        cached = self.cache.get(code)
        if cached is not None:
            return cached

        result = await self._from_providers(code)
        if result is None:
            if self.providers:
                logger.info("All GST providers unavailable for hsn=%s: using static table", code)
            result = self._stamp(rate_table.lookup(code), "fallback")

        self.cache.set(code, result)
        return result

    async def resolve_many(self, hsn_codes: Iterable[str]) -> Dict[str, ResolvedRate]:
        """
        Resolve distinct codes, at most batch_size at a time.

        Every code is validated before any network call, so one malformed code
        fails the whole request up front instead of after partial I/O.
        """
        codes = list(dict.fromkeys(validate_hsn(code) for code in hsn_codes))
        results: Dict[str, ResolvedRate] = {}
        for start in range(0, len(codes), self.batch_size):
            batch = codes[start:start + self.batch_size]
            resolved = await asyncio.gather(*(self.resolve(code) for code in batch))
            results.update(zip(batch, resolved))
        return results

    async def resolve_category(self, category: Optional[str]) -> ResolvedRate:
        """
        Resolve a storefront category through its mapped HSN code.

        Unmapped categories get the default 18% entry without any lookup and
        without touching the cache.
        """
        hsn = rate_table.find_category_hsn(category)
        if hsn is None:
            logger.info("Unmapped category %r: using default GST rate", category)
            return self._stamp(rate_table.default_entry(), "default")
        resolved = await self.resolve(hsn)
        return resolved.model_copy(update={"description": rate_table.category_description(category)})
