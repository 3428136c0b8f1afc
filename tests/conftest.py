"""Test configuration and common fixtures."""

import httpx
import pytest

from claim_oracle.domain.services.dedup_ledger import NotificationWindow, ProcessedClaims
from claim_oracle.domain.services.fact_check_cycle import FactCheckCycle
from claim_oracle.domain.services.verdict_log import VerdictLog
from claim_oracle.domain.services.verdict_publisher import VerdictPublisher
from claim_oracle.infrastructure.dependencies import build_verifier
from fakes import (
    InMemoryBlobStore,
    InMemoryStateStore,
    RecordingLedger,
    StaticClock,
    StubFeed,
    StubGas,
    StubMarket,
    StubMetrics,
    StubWeather,
    no_sleep,
)


@pytest.fixture
def clock() -> StaticClock:
    return StaticClock()


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def market() -> StubMarket:
    return StubMarket({"ETH": 1857.68, "BTC": 65000.0})


@pytest.fixture
def weather() -> StubWeather:
    return StubWeather([0.1, 0.95, 0.4])


@pytest.fixture
def metrics() -> StubMetrics:
    return StubMetrics([-1.0, 2.0, -4.0])


@pytest.fixture
def gas() -> StubGas:
    return StubGas(wei=12 * 10 ** 9)


@pytest.fixture
def ledger() -> RecordingLedger:
    return RecordingLedger()


@pytest.fixture
def feed() -> StubFeed:
    return StubFeed()


@pytest.fixture
def verifier(market, weather, gas, metrics):
    return build_verifier(market, weather, gas, metrics)


@pytest.fixture
def window(clock) -> NotificationWindow:
    return NotificationWindow(limit=50, window_seconds=3600, clock=clock)


@pytest.fixture
def make_cycle(verifier, ledger, state_store, blob_store, feed, window, clock):
    """Build a cycle over the shared fakes; keyword arguments override parts."""

    def _make(**overrides) -> FactCheckCycle:
        parts = {
            "verifier": verifier,
            "ledger": ledger,
            "processed": ProcessedClaims(state_store),
            "verdict_log": VerdictLog(state_store, blob_store),
            "publisher": VerdictPublisher(feed, window),
            "feed": feed,
            "categories": ["crypto"],
            "courtesy_delay": 2.5,
            "clock": clock,
            "sleep": no_sleep,
        }
        parts.update(overrides)
        return FactCheckCycle(**parts)

    return _make


@pytest.fixture
def mock_client():
    """Build an ``httpx.AsyncClient`` whose requests are answered by ``handler``."""

    def _create(handler, base_url: str = "https://example.test") -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)

    return _create
