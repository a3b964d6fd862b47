"""
GST HTTP routes: GET    /api/gst/rate/{hsn}
                 GET    /api/gst/category/{category}
                 POST   /api/gst/rates
                 POST   /api/gst/breakdown
                 POST   /api/gst/invoice
                 GET    /api/gst/cache/stats
                 DELETE /api/gst/cache

Thin wrappers over GSTService (stored on app.state by main.py's lifespan).
A malformed HSN raises ValidationError, which main.py's ValueError handler
turns into the standard 422 VALIDATION_ERROR envelope.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from gadgify_gst.gst.schemas import (
    BreakdownDisplay,
    BreakdownRequest,
    BulkRateRequest,
    BulkRateResponse,
    CacheStats,
    ErrorResponse,
    InvoiceResponse,
    ResolvedRate,
)
from gadgify_gst.gst.service import GSTService

router = APIRouter(
    prefix="/api/gst",
    tags=["gst"],
    responses={
        422: {"model": ErrorResponse, "description": "Malformed HSN code or request body"},
        503: {"model": ErrorResponse, "description": "GST service not initialized"},
    },
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_service(request: Request) -> GSTService:
    service = getattr(request.app.state, "gst_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="GST service not initialized")
    return service


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/rate/{hsn}", response_model=ResolvedRate)
async def get_rate(hsn: str, request: Request) -> ResolvedRate:
    """Best-available GST rate for one HSN code (live provider or static table)."""
    service = _get_service(request)
    return await service.resolver.resolve(hsn)


@router.get("/category/{category}", response_model=ResolvedRate)
async def get_category_rate(category: str, request: Request) -> ResolvedRate:
    """GST rate for a storefront category; unmapped categories get 18%."""
    service = _get_service(request)
    return await service.resolver.resolve_category(category)


@router.post("/rates", response_model=BulkRateResponse)
async def get_rates(body: BulkRateRequest, request: Request) -> BulkRateResponse:
    """Bulk lookup for product listings: {hsn: rate}."""
    service = _get_service(request)
    rates = await service.fetch_gst_rates_for_products(body.hsn_codes)
    logger.info("Bulk GST lookup codes=%d", len(rates))
    return BulkRateResponse(rates=rates)


@router.post("/breakdown", response_model=BreakdownDisplay)
async def get_breakdown(body: BreakdownRequest, request: Request) -> BreakdownDisplay:
    """Checkout summary: per-rate GST buckets and total, rounded to 2 decimals."""
    service = _get_service(request)
    return await service.get_gst_breakdown(body.lines)


@router.post("/invoice", response_model=InvoiceResponse)
async def get_invoice(body: BreakdownRequest, request: Request) -> InvoiceResponse:
    """Order confirmation / printed invoice rows with base price, GST and total per line."""
    service = _get_service(request)
    return await service.build_invoice(body.lines)


@router.get("/cache/stats", response_model=CacheStats)
async def get_cache_stats(request: Request) -> CacheStats:
    return _get_service(request).cache_stats()


@router.delete("/cache", status_code=204)
async def clear_cache(request: Request) -> None:
    """Force the next lookup of every code to hit the providers again."""
    _get_service(request).clear_cache()
