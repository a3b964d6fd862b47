"""
invoice.py: price, GST and invoice presentation helpers.

GST is computed on demand and never stored:
  gst_amount  = base_price × rate / 100
  final_price = base_price + gst_amount
Invoices show base price, GST amount and final price separately.

Every function here works at full float precision and rounds exactly once,
at the point a value is handed to the presentation layer (round_currency).
Rounding intermediate values (per line, then again per total) compounds
error and must not be reintroduced.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

from pydantic import BaseModel, ConfigDict

_PAISA = Decimal("0.01")
# enough significant digits to quantize any finite float (max ~1.8e308) to paise
_CURRENCY_PRECISION = 350

STANDARD_GST_RATES = {
    "0%": 0,
    "5%": 5,
    "12%": 12,
    "18%": 18,
    "28%": 28,
}


def _to_paise(value: float) -> Decimal:
    return Decimal(repr(value)).quantize(_PAISA, rounding=ROUND_HALF_UP)


def round_currency(value: float) -> float:
    """Round a rupee amount half-up to 2 decimals (₹179.9982 → 180.0)."""
    if not math.isfinite(value):
        return value
    with localcontext() as ctx:
        ctx.prec = _CURRENCY_PRECISION
        return float(_to_paise(value))


def _group_indian(integer_digits: str) -> str:
    """Group digits the en-IN way: last three, then pairs (1234567 → 12,34,567)."""
    if len(integer_digits) <= 3:
        return integer_digits
    head, tail = integer_digits[:-3], integer_digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_price_number(price: float) -> str:
    """Format an amount with Indian grouping and 2 decimals: 123456.7 → '1,23,456.70'."""
    if not math.isfinite(price):
        raise ValueError(f"Cannot format non-finite amount: {price!r}")
    with localcontext() as ctx:
        ctx.prec = _CURRENCY_PRECISION
        rounded = _to_paise(price)
        sign = "-" if rounded < 0 else ""
        integer_part, _, fraction = f"{abs(rounded):.2f}".partition(".")
    return f"{sign}{_group_indian(integer_part)}.{fraction}"


def format_price(price: float) -> str:
    """Format an amount for display: 1234.5 → '₹1,234.50'."""
    return f"₹{format_price_number(price)}"


# ---------------------------------------------------------------------------
# Calculation results
# ---------------------------------------------------------------------------

class GSTCalculation(BaseModel):
    """GST on a single base amount. Amounts are rounded for display."""
    model_config = ConfigDict(frozen=True)

    base_price: float
    gst_percentage: float
    gst_amount: float
    final_price: float


class InvoiceLine(BaseModel):
    """One invoice row: unit price × quantity plus GST."""
    model_config = ConfigDict(frozen=True)

    item_price: float
    quantity: int
    subtotal: float
    gst_percentage: float
    gst_amount: float
    total: float


def calculate_gst(base_price: float, gst_percentage: Optional[float] = None) -> GSTCalculation:
    """
    Compute GST and final price for a base amount.

    A missing percentage means no GST applies (0%).
    final_price is derived from the unrounded GST amount, then both are
    rounded once.
    """
    rate = gst_percentage if gst_percentage is not None else 0.0
    gst_amount = base_price * rate / 100
    return GSTCalculation(
        base_price=base_price,
        gst_percentage=rate,
        gst_amount=round_currency(gst_amount),
        final_price=round_currency(base_price + gst_amount),
    )


def generate_invoice_breakdown(
    base_price: float,
    gst_percentage: Optional[float] = None,
    quantity: int = 1,
) -> InvoiceLine:
    """Invoice row for order confirmation and printed invoices."""
    subtotal = base_price * quantity
    rate = gst_percentage if gst_percentage is not None else 0.0
    gst_amount = subtotal * rate / 100
    return InvoiceLine(
        item_price=base_price,
        quantity=quantity,
        subtotal=round_currency(subtotal),
        gst_percentage=rate,
        gst_amount=round_currency(gst_amount),
        total=round_currency(subtotal + gst_amount),
    )


def calculate_cart_item_total(
    base_price: float,
    quantity: int,
    gst_percentage: Optional[float] = None,
) -> InvoiceLine:
    """Cart row totals: same arithmetic as an invoice row."""
    return generate_invoice_breakdown(base_price, gst_percentage, quantity)
