"""
schemas.py: GST Pydantic v2 data contracts.

Defines:
  - HSNRateEntry      (one tax classification: hsn, rate, description)
  - ResolvedRate      (HSNRateEntry + where it came from and when)
  - CacheEntry / CacheStats  (memoized resolutions + introspection)
  - OrderLine         (one cart/checkout line fed to the aggregator)
  - TaxBucket / TaxBreakdown  (per-rate accumulation, unrounded)
  - BucketDisplay / BreakdownDisplay  (same, rounded once for presentation)
  - request bodies, InvoiceResponse and the standard error envelope for routes.py

Rates are percentages (18.0 means 18%). All rupee amounts are floats kept at
full precision until BreakdownDisplay.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from gadgify_gst.gst.invoice import InvoiceLine, round_currency

RateSource = Literal["api", "fallback", "default"]


# ---------------------------------------------------------------------------
# Rate entries
# ---------------------------------------------------------------------------

class HSNRateEntry(BaseModel):
    """A single HSN classification and its GST percentage."""
    model_config = ConfigDict(frozen=True)

    hsn: str
    rate: float = Field(ge=0)
    description: str


class ResolvedRate(HSNRateEntry):
    """
    Output of RateResolver.

    source:
      api      : returned by an external provider (provider names which one)
      fallback : every provider failed; value from the static HSN table
      default  : unmapped category; generic 18% entry, no lookup performed
    """
    source: RateSource
    provider: Optional[str] = None
    resolved_at: datetime


class CacheEntry(BaseModel):
    """A memoized resolution. cached_at is in clock seconds (epoch)."""
    data: ResolvedRate
    cached_at: float


class CacheStatEntry(BaseModel):
    hsn: str
    cached_at: datetime


class CacheStats(BaseModel):
    size: int
    entries: List[CacheStatEntry]


# ---------------------------------------------------------------------------
# Order lines
# ---------------------------------------------------------------------------

class OrderLine(BaseModel):
    """
    One cart line. Accepts the storefront's `price` / `qty` spellings too.

    Either hsn or category must be present; hsn wins when both are given.
    """
    model_config = ConfigDict(populate_by_name=True)

    unit_price: float = Field(ge=0, allow_inf_nan=False, validation_alias=AliasChoices("unit_price", "price"))
    quantity: int = Field(ge=1, validation_alias=AliasChoices("quantity", "qty"))
    category: Optional[str] = None
    hsn: Optional[str] = None

    @model_validator(mode="after")
    def _require_classification(self) -> "OrderLine":
        if not (self.hsn and self.hsn.strip()) and not (self.category and self.category.strip()):
            raise ValueError("order line needs an hsn or a category")
        return self


# ---------------------------------------------------------------------------
# Breakdown
# ---------------------------------------------------------------------------

class TaxBucket(BaseModel):
    """Tax accumulated at one rate. amount is never rounded here."""
    rate: float
    amount: float = 0.0
    hsn: str
    description: str


class BucketDisplay(BaseModel):
    model_config = ConfigDict(frozen=True)

    rate: float
    amount: float
    hsn: str
    description: str


class BreakdownDisplay(BaseModel):
    """Presentation form: buckets sorted by rate, amounts rounded to 2 decimals."""
    model_config = ConfigDict(frozen=True)

    buckets: List[BucketDisplay]
    total_tax: float


class TaxBreakdown(BaseModel):
    """
    Per-rate tax buckets for an order.

    Buckets are created lazily on first contribution. total_tax is the sum
    of the raw bucket amounts; display() is the only place anything rounds.
    """
    buckets: Dict[float, TaxBucket] = Field(default_factory=dict)

    def add(self, entry: HSNRateEntry, amount: float) -> None:
        bucket = self.buckets.get(entry.rate)
        if bucket is None:
            bucket = TaxBucket(rate=entry.rate, hsn=entry.hsn, description=entry.description)
            self.buckets[entry.rate] = bucket
        bucket.amount += amount

    @property
    def total_tax(self) -> float:
        return sum(bucket.amount for bucket in self.buckets.values())

    def display(self) -> BreakdownDisplay:
        return BreakdownDisplay(
            buckets=[
                BucketDisplay(
                    rate=bucket.rate,
                    amount=round_currency(bucket.amount),
                    hsn=bucket.hsn,
                    description=bucket.description,
                )
                for _, bucket in sorted(self.buckets.items())
            ],
            total_tax=round_currency(self.total_tax),
        )


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class BulkRateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hsn_codes: List[str] = Field(min_length=1)


class BulkRateResponse(BaseModel):
    rates: Dict[str, float]


class BreakdownRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    lines: List[OrderLine]


class InvoiceResponse(BaseModel):
    """
    Invoice rows plus order totals. Totals are summed from unrounded line
    values and rounded once; they can differ by a paisa from summing rows.
    """
    lines: List[InvoiceLine]
    subtotal: float
    gst_amount: float
    total: float
    formatted_total: str


# ---------------------------------------------------------------------------
# Error envelope: {error: {code, message, details}}
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    field: Optional[str] = None
    issue: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: List[ErrorDetail] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: ErrorBody
