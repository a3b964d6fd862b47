"""
aggregator.py: per-rate GST breakdown for a set of order lines.

For every line:
  line_tax = unit_price × quantity × rate / 100
accumulated at full precision into the bucket keyed by rate. Rounding is left
to TaxBreakdown.display(); summing rounded line amounts drifts by a paisa per
few lines and is deliberately avoided.

A line carrying an hsn is resolved by that code; otherwise its category is
mapped to an HSN and resolved. Unmapped categories use the default 18% entry,
so one odd catalog category never fails a checkout. The only error that
escapes is ValidationError: for a malformed hsn (raised before any I/O) or
for amounts too large to represent as a float.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Optional, Tuple, Union

from gadgify_gst.gst import rate_table
from gadgify_gst.gst.errors import ValidationError
from gadgify_gst.gst.resolver import RateResolver
from gadgify_gst.gst.schemas import HSNRateEntry, OrderLine, ResolvedRate, TaxBreakdown
from gadgify_gst.gst.validator import validate_hsn

logger = logging.getLogger(__name__)

LineInput = Union[OrderLine, dict]


def line_tax(line: OrderLine, rate: float) -> float:
    """Unrounded GST for one line."""
    return line.unit_price * line.quantity * rate / 100


def _as_order_line(line: Any) -> OrderLine:
    if isinstance(line, OrderLine):
        return line
    return OrderLine.model_validate(line)


class OrderTaxAggregator:
    """Builds TaxBreakdowns using a shared RateResolver."""

    def __init__(self, resolver: RateResolver) -> None:
        self.resolver = resolver

    @staticmethod
    def _line_hsn(line: OrderLine) -> Optional[str]:
        if line.hsn and line.hsn.strip():
            return validate_hsn(line.hsn)
        return rate_table.find_category_hsn(line.category)

    @staticmethod
    def _entry_for(line: OrderLine, hsn: Optional[str], resolved: ResolvedRate) -> HSNRateEntry:
        if line.hsn and line.hsn.strip():
            return resolved
        return HSNRateEntry(
            hsn=hsn,
            rate=resolved.rate,
            description=rate_table.category_description(line.category) or resolved.description,
        )

    async def classify(self, lines: Iterable[LineInput]) -> List[Tuple[OrderLine, HSNRateEntry]]:
        """
        Pair every line with the rate entry that applies to it, in input order.

        Distinct HSN codes are resolved once, concurrently. Unmapped
        categories get the default 18% entry.
        """
        order_lines: List[OrderLine] = [_as_order_line(line) for line in lines]
        line_codes = [self._line_hsn(line) for line in order_lines]

        resolved = await self.resolver.resolve_many(code for code in line_codes if code)

        classified = []
        for line, code in zip(order_lines, line_codes):
            if code is None:
                logger.debug("Unmapped category %r: default GST rate applied", line.category)
                entry = rate_table.default_entry()
            else:
                entry = self._entry_for(line, code, resolved[code])
            classified.append((line, entry))
        return classified

    async def aggregate(self, lines: Iterable[LineInput]) -> TaxBreakdown:
        classified = await self.classify(lines)

        breakdown = TaxBreakdown()
        for line, entry in classified:
            breakdown.add(entry, line_tax(line, entry.rate))

        if not math.isfinite(breakdown.total_tax):
            raise ValidationError("Order GST total is out of range")

        logger.info(
            "GST aggregated lines=%d buckets=%d total_tax=%.4f",
            len(classified),
            len(breakdown.buckets),
            breakdown.total_tax,
        )
        return breakdown
