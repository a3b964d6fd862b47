"""
rate_table.py: static HSN → GST rate table (the guaranteed fallback).

Two read-only tables, fixed at import time:
  HSN_RATE_TABLE      hsn → (rate %, description). Authoritative for rates.
  CATEGORY_HSN_TABLE  storefront category → (hsn, description). Only maps a
                      category to a classification; the rate always comes from
                      HSN_RATE_TABLE so the two tables cannot disagree on rates.

Nothing here raises: an unknown HSN or category is a defined default
(18%, "General merchandise"), not an error. Call validate_category_mapping()
to find category rows pointing at HSN codes missing from HSN_RATE_TABLE.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from gadgify_gst.gst.schemas import HSNRateEntry

DEFAULT_GST_RATE = 18.0
DEFAULT_DESCRIPTION = "General merchandise"
# HSN reported for categories with no mapping
DEFAULT_CATEGORY_HSN = "8517"

# ---------------------------------------------------------------------------
# HSN table: rates as of 2026
# ---------------------------------------------------------------------------
HSN_RATE_TABLE: Mapping[str, Tuple[float, str]] = MappingProxyType({
    "8517": (18.0, "Mobile phones, smartphones, tablets"),
    "8471": (18.0, "Laptops and portable computers"),
    "8518": (18.0, "Headphones and audio equipment"),
    "8525": (18.0, "Digital cameras and video equipment"),
    "8516": (18.0, "Home appliances"),
    "6203": (12.0, "Readymade garments"),
    "6403": (12.0, "Footwear"),
    "4901": (0.0, "Printed books"),
    "9503": (12.0, "Toys and games"),
    "9506": (18.0, "Sports equipment"),
    "9403": (18.0, "Furniture"),
    "3304": (18.0, "Beauty and personal care"),
    "2106": (5.0, "Packaged food products"),
    "8703": (28.0, "Automotive parts"),
    "7113": (3.0, "Jewelry"),
    "4820": (12.0, "Stationery"),
})

# ---------------------------------------------------------------------------
# Category table: storefront category names
# ---------------------------------------------------------------------------
CATEGORY_HSN_TABLE: Mapping[str, Tuple[str, str]] = MappingProxyType({
    "Electronics": ("8517", "Mobile phones, tablets, and electronic devices"),
    "Mobiles": ("8517", "Mobile phones and smartphones"),
    "Laptops": ("8471", "Laptops and portable computers"),
    "Computers": ("8471", "Desktop computers and accessories"),
    "Tablets": ("8471", "Tablet computers"),
    "Audio": ("8518", "Headphones, speakers, and audio equipment"),
    "Cameras": ("8525", "Digital cameras and video equipment"),
    "Smartwatches": ("8517", "Smartwatches and wearable devices"),
    "Home Appliances": ("8516", "Home appliances and kitchen equipment"),
    "Kitchen Appliances": ("8516", "Kitchen appliances"),
    "Fashion": ("6203", "Readymade garments and clothing"),
    "Clothing": ("6203", "Clothing and apparel"),
    "Footwear": ("6403", "Footwear"),
    "Books": ("4901", "Printed books and educational materials"),
    "Toys": ("9503", "Toys and games"),
    "Sports": ("9506", "Sports equipment and accessories"),
    "Furniture": ("9403", "Furniture and home furnishings"),
    "Beauty": ("3304", "Beauty and personal care products"),
    "Personal Care": ("3304", "Personal care products"),
    "Grocery": ("2106", "Packaged food products"),
    "Automotive": ("8703", "Automotive parts and accessories"),
    "Jewelry": ("7113", "Jewelry and precious stones"),
    "Stationery": ("4820", "Stationery and office supplies"),
})

_CATEGORY_INDEX = MappingProxyType({name.casefold(): name for name in CATEGORY_HSN_TABLE})


def lookup(hsn: str) -> HSNRateEntry:
    """Table entry for hsn, or the 18% default carrying the input hsn."""
    key = hsn.strip() if isinstance(hsn, str) else ""
    row = HSN_RATE_TABLE.get(key)
    if row is None:
        return HSNRateEntry(hsn=key, rate=DEFAULT_GST_RATE, description=DEFAULT_DESCRIPTION)
    rate, description = row
    return HSNRateEntry(hsn=key, rate=rate, description=description)


def _canonical_category(category: Optional[str]) -> Optional[str]:
    if not isinstance(category, str):
        return None
    return _CATEGORY_INDEX.get(category.strip().casefold())


def find_category_hsn(category: Optional[str]) -> Optional[str]:
    """HSN mapped to a category (case-insensitive), or None if unmapped."""
    name = _canonical_category(category)
    if name is None:
        return None
    return CATEGORY_HSN_TABLE[name][0]


def category_description(category: Optional[str]) -> Optional[str]:
    name = _canonical_category(category)
    if name is None:
        return None
    return CATEGORY_HSN_TABLE[name][1]


def default_entry(hsn: str = DEFAULT_CATEGORY_HSN) -> HSNRateEntry:
    return HSNRateEntry(hsn=hsn, rate=DEFAULT_GST_RATE, description=DEFAULT_DESCRIPTION)


def lookup_by_category(category: Optional[str]) -> HSNRateEntry:
    """
    Rate entry for a storefront category.

    Mapped categories take the rate of their HSN row and the category's own
    description. Unmapped or blank categories get the generic 18% entry.
    """
    name = _canonical_category(category)
    if name is None:
        return default_entry()
    hsn, description = CATEGORY_HSN_TABLE[name]
    return HSNRateEntry(hsn=hsn, rate=lookup(hsn).rate, description=description)


def validate_category_mapping() -> List[str]:
    """
    Return one message per category whose HSN is absent from HSN_RATE_TABLE.

    Such a category silently gets the 18% default for its rate, which is
    rarely what the catalog intended.
    """
    problems = []
    for name, (hsn, _) in CATEGORY_HSN_TABLE.items():
        if hsn not in HSN_RATE_TABLE:
            problems.append(f"category {name!r} maps to HSN {hsn} which has no rate entry")
    return problems
