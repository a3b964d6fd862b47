"""
providers.py: external GST rate lookup providers.

Each provider exposes one capability:

    await provider.fetch_rate(hsn) -> HSNRateEntry     (raises ProviderUnavailable)

RateResolver walks an ordered list of providers and stops at the first one
that returns. Providers never retry and never fall back themselves: any
timeout, transport error, non-2xx status, non-JSON body or payload without a
usable rate becomes ProviderUnavailable.

The HTTP client is injected (one shared httpx.AsyncClient per app) so tests
can swap in an httpx.MockTransport.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import httpx

from gadgify_gst.gst.errors import ProviderUnavailable
from gadgify_gst.gst.schemas import HSNRateEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "Gadgify-ecommerce/1.0"
DEFAULT_PROVIDER_DESCRIPTION = "GST applicable product"
MAX_RATE = 100.0


class RateProvider:
    """Base provider with shared HTTP and payload helpers."""

    name = "base"
    # Payload keys that may carry the rate, in preference order
    rate_keys: Tuple[str, ...] = ("gst_rate", "tax_rate")

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent

    async def fetch_rate(self, hsn: str) -> HSNRateEntry:  # pragma: no cover - interface
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url!r})"

    # Shared helpers -----------------------------------------------------

    def _fail(self, reason: str, cause: Optional[BaseException] = None) -> ProviderUnavailable:
        return ProviderUnavailable(self.name, reason, cause)

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        logger.debug("GST provider request provider=%s url=%s params=%s", self.name, url, params)
        try:
            response = await self.client.get(url, params=params, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            raise self._fail("timeout", exc) from exc
        except httpx.HTTPError as exc:
            raise self._fail(f"network_error: {exc}", exc) from exc

        if not response.is_success:
            raise self._fail(f"http_{response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise self._fail("invalid_json", exc) from exc

    def _parse_rate(self, raw: Any) -> float:
        # bool is an int subclass; a True/False "rate" is a schema error
        if isinstance(raw, bool):
            raise self._fail("rate_not_numeric")
        if isinstance(raw, str):
            try:
                raw = float(raw.strip().rstrip("%"))
            except ValueError as exc:
                raise self._fail("rate_not_numeric", exc) from exc
        if not isinstance(raw, (int, float)):
            raise self._fail("rate_not_numeric")
        rate = float(raw)
        if math.isnan(rate) or not 0 <= rate <= MAX_RATE:
            raise self._fail(f"rate_out_of_range: {raw}")
        return rate

    def _entry_from_record(self, hsn: str, record: Any) -> HSNRateEntry:
        if not isinstance(record, dict):
            raise self._fail("malformed_payload")
        raw = next((record[key] for key in self.rate_keys if record.get(key) is not None), None)
        if raw is None:
            raise self._fail("missing_rate")
        description = record.get("description")
        if not isinstance(description, str) or not description.strip():
            description = DEFAULT_PROVIDER_DESCRIPTION
        return HSNRateEntry(hsn=hsn, rate=self._parse_rate(raw), description=description.strip())


class ShunyatechProvider(RateProvider):
    """
    Shunyatech public GST search.

    GET {base}/gst/search?hsn_code=8517
      → {"data": {"gst_rate": "18", "description": "..."}}
    """

    name = "shunyatech"
    rate_keys = ("gst_rate", "tax_rate")

    async def fetch_rate(self, hsn: str) -> HSNRateEntry:
        payload = await self._get_json(f"{self.base_url}/gst/search", params={"hsn_code": hsn})
        if not isinstance(payload, dict):
            raise self._fail("malformed_payload")
        return self._entry_from_record(hsn, payload.get("data"))


class AmaginProvider(RateProvider):
    """
    GST India HSN lookup.

    GET {base}/hsn/8517  → {"gstRate": 18, "description": "..."}
    """

    name = "amagin"
    rate_keys = ("gstRate", "gst_rate", "tax_rate")

    async def fetch_rate(self, hsn: str) -> HSNRateEntry:
        payload = await self._get_json(f"{self.base_url}/hsn/{hsn}")
        return self._entry_from_record(hsn, payload)


PROVIDER_REGISTRY = {
    ShunyatechProvider.name: ShunyatechProvider,
    AmaginProvider.name: AmaginProvider,
}


def build_providers(settings, client: httpx.AsyncClient) -> List[RateProvider]:
    """
    Instantiate the providers named in settings.gst_providers, in order.

    Unknown names are logged and skipped; an empty list means every lookup
    goes straight to the static table.
    """
    base_urls = {
        ShunyatechProvider.name: settings.shunyatech_base_url,
        AmaginProvider.name: settings.amagin_base_url,
    }
    providers: List[RateProvider] = []
    for name in settings.gst_providers_list:
        provider_cls = PROVIDER_REGISTRY.get(name)
        if provider_cls is None:
            logger.warning("Unknown GST provider %r in configuration: skipping", name)
            continue
        providers.append(
            provider_cls(
                client,
                base_urls[name],
                timeout=settings.gst_provider_timeout_seconds,
                user_agent=settings.gst_user_agent,
            )
        )
    logger.info("GST providers configured: %s", [p.name for p in providers] or "none (static table only)")
    return providers
