"""
GSTService facade tests: the in-process interface checkout code calls.
"""
from __future__ import annotations

import httpx
import pytest

from gadgify_gst.config import Settings
from gadgify_gst.gst.errors import ValidationError
from gadgify_gst.gst.resolver import RateResolver
from gadgify_gst.gst.service import GSTService, build_gst_service

from conftest import FakeClock, mock_client

CART = [
    {"price": 1000, "qty": 2, "category": "Laptops"},
    {"price": 500, "qty": 1, "category": "Books"},
    {"price": 2499.5, "qty": 1, "hsn": "6403"},
]


@pytest.fixture
def service(offline_resolver: RateResolver) -> GSTService:
    return GSTService(offline_resolver)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "value, expected",
    [
        ("Laptops", 18.0),
        ("books", 0.0),
        ("8703", 28.0),
        (" 7113 ", 3.0),
        ("Unmapped Category", 18.0),
        ("", 18.0),
        (None, 18.0),
    ],
)
async def test_get_gst_rate_by_category(service: GSTService, value, expected: float) -> None:
    assert await service.get_gst_rate_by_category(value) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("value", ["12", "٨٥١٧"])
async def test_digit_input_is_validated_as_hsn(service: GSTService, failing_providers, value: str) -> None:
    with pytest.raises(ValidationError):
        await service.get_gst_rate_by_category(value)
    assert failing_providers[0].calls == []


@pytest.mark.asyncio
async def test_calculate_order_gst(service: GSTService) -> None:
    # 360 + 0 + 2499.5 × 12% (299.94)
    assert await service.calculate_order_gst(CART) == 659.94


@pytest.mark.asyncio
async def test_get_gst_breakdown(service: GSTService) -> None:
    display = await service.get_gst_breakdown(CART)
    amounts = {b.rate: b.amount for b in display.buckets}
    assert amounts == {0.0: 0.0, 12.0: 299.94, 18.0: 360.0}
    assert display.total_tax == 659.94


@pytest.mark.asyncio
async def test_price_with_gst(service: GSTService) -> None:
    gst = await service.price_with_gst(999.99, "Laptops")
    assert gst.gst_percentage == 18.0
    assert gst.gst_amount == 180.0
    assert gst.final_price == 1179.99


@pytest.mark.asyncio
async def test_cart_item_total_uses_resolved_rate(service: GSTService) -> None:
    row = await service.cart_item_total({"price": 1499, "qty": 3, "hsn": "6403"})
    assert row.gst_percentage == 12.0
    assert row.subtotal == 4497.0
    assert row.gst_amount == 539.64
    assert row.total == 5036.64


@pytest.mark.asyncio
async def test_build_invoice(service: GSTService) -> None:
    invoice = await service.build_invoice(CART)

    assert [row.gst_percentage for row in invoice.lines] == [18.0, 0.0, 12.0]
    assert [row.total for row in invoice.lines] == [2360.0, 500.0, 2799.44]
    assert invoice.subtotal == 4999.5
    assert invoice.gst_amount == 659.94
    assert invoice.total == 5659.44
    assert invoice.formatted_total == "₹5,659.44"


@pytest.mark.asyncio
async def test_build_invoice_rejects_malformed_hsn(service: GSTService) -> None:
    with pytest.raises(ValidationError):
        await service.build_invoice([{"price": 10, "qty": 1, "hsn": "٨٥١٧"}])


@pytest.mark.asyncio
async def test_fetch_gst_rates_for_products(service: GSTService) -> None:
    rates = await service.fetch_gst_rates_for_products(["8517", "4901", "2106", "8517"])
    assert rates == {"8517": 18.0, "4901": 0.0, "2106": 5.0}


@pytest.mark.asyncio
async def test_cache_stats_and_clear(service: GSTService, clock: FakeClock) -> None:
    await service.fetch_gst_rates_for_products(["8517", "4901"])
    stats = service.cache_stats()
    assert stats.size == 2
    assert {e.hsn for e in stats.entries} == {"8517", "4901"}

    service.clear_cache()
    assert service.cache_stats().size == 0


@pytest.mark.asyncio
async def test_build_gst_service_wires_settings() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.host)
        return httpx.Response(503)

    settings = Settings(
        gst_providers="shunyatech,amagin",
        shunyatech_base_url="https://shunya.test",
        amagin_base_url="https://amagin.test",
        gst_cache_ttl_seconds=60,
        gst_batch_size=3,
        _env_file=None,
    )
    clock = FakeClock()
    async with mock_client(handler) as client:
        service = build_gst_service(settings, client, clock=clock)
        assert service.resolver.batch_size == 3
        assert service.resolver.cache.ttl_seconds == 60

        assert await service.get_gst_rate_by_category("8525") == 18.0
        assert calls == ["shunya.test", "amagin.test"]

        clock.advance(61)
        await service.get_gst_rate_by_category("8525")
        assert len(calls) == 4
