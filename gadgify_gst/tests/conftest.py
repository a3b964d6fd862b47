"""
Test configuration for Gadgify GST tests.

sys.path is configured so 'from gadgify_gst...' resolves whether or not the
package is installed, and whether pytest runs from the project root or from
gadgify_gst/tests/.

Shared helpers:
  FakeClock    : injectable clock; advance() simulates time passing
  StubProvider : in-process rate provider with a call counter
  mock_client(): httpx.AsyncClient backed by httpx.MockTransport
"""
import asyncio
import sys
from pathlib import Path
from typing import Callable, Optional

_project_root = Path(__file__).parent.parent.parent

if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import httpx
import pytest

from gadgify_gst.cache import RateCache
from gadgify_gst.gst.errors import ProviderUnavailable
from gadgify_gst.gst.resolver import RateResolver
from gadgify_gst.gst.schemas import HSNRateEntry

START_TIME = 1_760_000_000.0


class FakeClock:
    def __init__(self, start: float = START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider:
    """
    Provider double. rates maps hsn → rate; a missing hsn (or fail=True)
    raises ProviderUnavailable. delay > 0 sleeps so concurrency can be observed.
    """

    def __init__(self, name: str, rates: Optional[dict] = None, fail: bool = False, delay: float = 0.0) -> None:
        self.name = name
        self.rates = rates or {}
        self.fail = fail
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_rate(self, hsn: str) -> HSNRateEntry:
        self.calls.append(hsn)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail or hsn not in self.rates:
                raise ProviderUnavailable(self.name, "stubbed failure")
            return HSNRateEntry(hsn=hsn, rate=self.rates[hsn], description=f"{self.name} rate")
        finally:
            self.in_flight -= 1


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose every request is answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> RateCache:
    return RateCache(ttl_seconds=86400, clock=clock)


@pytest.fixture
def failing_providers() -> list:
    return [StubProvider("primary", fail=True), StubProvider("secondary", fail=True)]


@pytest.fixture
def offline_resolver(cache: RateCache, clock: FakeClock, failing_providers: list) -> RateResolver:
    """Resolver whose providers are both down: every lookup ends at the static table."""
    return RateResolver(cache, failing_providers, clock=clock)
