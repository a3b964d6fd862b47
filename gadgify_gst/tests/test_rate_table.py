"""
Static HSN / category table tests.

The table is the guaranteed fallback, so these are exact-equality checks:
known codes return their configured rate every time, unknown codes get 18%.
"""
from __future__ import annotations

import pytest

from gadgify_gst.gst import rate_table
from gadgify_gst.gst.rate_table import (
    CATEGORY_HSN_TABLE,
    DEFAULT_CATEGORY_HSN,
    HSN_RATE_TABLE,
    lookup,
    lookup_by_category,
    validate_category_mapping,
)


@pytest.mark.parametrize("hsn", sorted(HSN_RATE_TABLE))
def test_lookup_returns_configured_rate(hsn: str) -> None:
    rate, description = HSN_RATE_TABLE[hsn]
    first = lookup(hsn)
    second = lookup(hsn)
    assert first.rate == rate
    assert first.description == description
    assert first.hsn == hsn
    assert first == second


@pytest.mark.parametrize("hsn", ["1234", "000000", "99999999", "8517620"])
def test_lookup_unknown_code_defaults_to_18(hsn: str) -> None:
    entry = lookup(hsn)
    assert entry.rate == 18
    assert entry.description == "General merchandise"
    assert entry.hsn == hsn


def test_lookup_strips_whitespace() -> None:
    assert lookup(" 4901 ").rate == 0
    assert lookup(" 4901 ").hsn == "4901"


def test_spot_check_rates() -> None:
    assert lookup("4901").rate == 0      # printed books
    assert lookup("2106").rate == 5      # packaged food
    assert lookup("7113").rate == 3      # jewelry
    assert lookup("6203").rate == 12     # garments
    assert lookup("8703").rate == 28     # automotive


def test_lookup_by_category_uses_hsn_table_rate() -> None:
    entry = lookup_by_category("Laptops")
    assert entry.hsn == "8471"
    assert entry.rate == 18
    assert entry.description == "Laptops and portable computers"
    assert lookup_by_category("Books").rate == 0


def test_lookup_by_category_is_case_insensitive() -> None:
    assert lookup_by_category("  home appliances ").hsn == "8516"
    assert lookup_by_category("GROCERY").rate == 5


@pytest.mark.parametrize("category", ["Spaceships", "", "   ", None])
def test_lookup_by_category_unmapped_defaults(category) -> None:
    entry = lookup_by_category(category)
    assert entry.rate == 18
    assert entry.hsn == DEFAULT_CATEGORY_HSN
    assert entry.description == "General merchandise"


def test_every_category_maps_to_a_known_hsn() -> None:
    assert validate_category_mapping() == []
    for hsn, _ in CATEGORY_HSN_TABLE.values():
        assert hsn in HSN_RATE_TABLE


def test_validate_category_mapping_reports_orphans(monkeypatch) -> None:
    patched = dict(CATEGORY_HSN_TABLE)
    patched["Drones"] = ("8806", "Unmanned aircraft")
    monkeypatch.setattr(rate_table, "CATEGORY_HSN_TABLE", patched)
    problems = validate_category_mapping()
    assert len(problems) == 1
    assert "Drones" in problems[0] and "8806" in problems[0]


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        HSN_RATE_TABLE["8517"] = (5.0, "cheaper phones")  # type: ignore[index]
