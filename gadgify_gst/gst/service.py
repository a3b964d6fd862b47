"""
service.py: in-process GST facade used by checkout and order creation.

Usage:
    async with httpx.AsyncClient() as client:
        gst = build_gst_service(settings, client)
        rate = await gst.get_gst_rate_by_category("Laptops")     # 18.0
        total = await gst.calculate_order_gst(cart_lines)         # rounded rupees

Each GSTService owns its own cache; nothing is shared at module level.
"""
from __future__ import annotations

import logging
import math
import time
from typing import Callable, Dict, Iterable, Optional, Tuple

import httpx

from gadgify_gst.cache import RateCache
from gadgify_gst.gst import rate_table
from gadgify_gst.gst.aggregator import LineInput, OrderTaxAggregator, line_tax
from gadgify_gst.gst.errors import ValidationError
from gadgify_gst.gst.invoice import (
    GSTCalculation,
    InvoiceLine,
    calculate_cart_item_total,
    calculate_gst,
    format_price,
    generate_invoice_breakdown,
    round_currency,
)
from gadgify_gst.gst.providers import build_providers
from gadgify_gst.gst.resolver import RateResolver
from gadgify_gst.gst.schemas import BreakdownDisplay, CacheStats, InvoiceResponse, OrderLine, ResolvedRate

logger = logging.getLogger(__name__)


class GSTService:
    def __init__(self, resolver: RateResolver, aggregator: Optional[OrderTaxAggregator] = None) -> None:
        self.resolver = resolver
        self.aggregator = aggregator or OrderTaxAggregator(resolver)

    async def resolve(self, hsn_or_category: Optional[str]) -> ResolvedRate:
        """
        Resolve either an HSN code or a category name.

        All-digit input is treated as an HSN code (and validated as one, so
        non-ASCII digits are rejected); anything else is a category. Blank
        input gets the default entry.
        """
        value = hsn_or_category.strip() if isinstance(hsn_or_category, str) else ""
        if value.isdigit():
            return await self.resolver.resolve(value)
        return await self.resolver.resolve_category(value or None)

    async def get_gst_rate_by_category(self, hsn_or_category: Optional[str]) -> float:
        """GST percentage for an HSN code or category; 18.0 when nothing is given."""
        if not hsn_or_category or not hsn_or_category.strip():
            return rate_table.DEFAULT_GST_RATE
        return (await self.resolve(hsn_or_category)).rate

    async def calculate_order_gst(self, lines: Iterable[LineInput]) -> float:
        """Total GST for an order, rounded to 2 decimals for display."""
        breakdown = await self.aggregator.aggregate(lines)
        return round_currency(breakdown.total_tax)

    async def get_gst_breakdown(self, lines: Iterable[LineInput]) -> BreakdownDisplay:
        breakdown = await self.aggregator.aggregate(lines)
        return breakdown.display()

    async def fetch_gst_rates_for_products(self, hsn_codes: Iterable[str]) -> Dict[str, float]:
        """Bulk lookup: {hsn: rate} for every distinct code."""
        resolved = await self.resolver.resolve_many(hsn_codes)
        return {code: entry.rate for code, entry in resolved.items()}

    async def _line_rate(self, line: LineInput) -> Tuple[OrderLine, float]:
        [(order_line, entry)] = await self.aggregator.classify([line])
        return order_line, entry.rate

    async def price_with_gst(self, base_price: float, hsn_or_category: Optional[str]) -> GSTCalculation:
        """GST and final price for one product, at the rate of its HSN code or category."""
        rate = await self.get_gst_rate_by_category(hsn_or_category)
        return calculate_gst(base_price, rate)

    async def cart_item_total(self, line: LineInput) -> InvoiceLine:
        """Subtotal, GST and total for one cart row."""
        order_line, rate = await self._line_rate(line)
        return calculate_cart_item_total(order_line.unit_price, order_line.quantity, rate)

    async def build_invoice(self, lines: Iterable[LineInput]) -> InvoiceResponse:
        """Invoice rows for an order plus totals rounded once from full precision."""
        classified = await self.aggregator.classify(lines)
        rows = [
            generate_invoice_breakdown(line.unit_price, entry.rate, line.quantity)
            for line, entry in classified
        ]
        subtotal = sum(line.unit_price * line.quantity for line, _ in classified)
        gst_amount = sum(line_tax(line, entry.rate) for line, entry in classified)
        if not math.isfinite(subtotal + gst_amount):
            raise ValidationError("Invoice total is out of range")
        total = round_currency(subtotal + gst_amount)
        return InvoiceResponse(
            lines=rows,
            subtotal=round_currency(subtotal),
            gst_amount=round_currency(gst_amount),
            total=total,
            formatted_total=format_price(total),
        )

    def clear_cache(self) -> None:
        self.resolver.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.resolver.cache.stats()


def build_gst_service(
    settings,
    http_client: httpx.AsyncClient,
    clock: Callable[[], float] = time.time,
) -> GSTService:
    """Wire cache, providers, resolver and aggregator from settings."""
    cache = RateCache(ttl_seconds=settings.gst_cache_ttl_seconds, clock=clock)
    resolver = RateResolver(
        cache,
        build_providers(settings, http_client),
        clock=clock,
        batch_size=settings.gst_batch_size,
    )
    return GSTService(resolver)
