"""Dependency injection configuration for hexagonal architecture."""

import logging
import time
from typing import Any, Callable, Dict, Optional

from ..domain.models.claim import ClaimType
from ..domain.ports.oracle_provider import (
    GasPriceProvider,
    MarketDataProvider,
    ProtocolMetricsProvider,
    WeatherProvider,
)
from ..domain.services.dedup_ledger import NotificationWindow, ProcessedClaims
from ..domain.services.fact_check_cycle import FactCheckCycle
from ..domain.services.oracle_verifier import OracleVerifier
from ..domain.services.verdict_log import VerdictLog
from ..domain.services.verdict_publisher import VerdictPublisher
from ..domain.services.verification_strategies import (
    GasPriceStrategy,
    PriceStrategy,
    TvlStrategy,
    WeatherStrategy,
)
from .feed.moltbook_adapter import MoltbookAdapter
from .ledger.verdict_registry_adapter import VerdictRegistryAdapter
from .oracles.factory import OracleProviderFactory
from .settings import AgentSettings
from .storage.json_file_store import JsonFileStore
from .storage.jsonbin_adapter import JsonBinAdapter

logger = logging.getLogger(__name__)


def build_verifier(
    market: MarketDataProvider,
    weather: WeatherProvider,
    gas: GasPriceProvider,
    metrics: ProtocolMetricsProvider,
    default_location: str = "Stockholm",
    decisive_gap: float = 20.0,
) -> OracleVerifier:
    """Wire the strategy chains: gas before TVL for protocol metrics."""
    return OracleVerifier({
        ClaimType.PRICE: [PriceStrategy(market, decisive_gap)],
        ClaimType.WEATHER: [WeatherStrategy(weather, default_location, decisive_gap)],
        ClaimType.PROTOCOL_METRIC: [
            GasPriceStrategy(gas, decisive_gap),
            TvlStrategy(metrics, decisive_gap),
        ],
    })


class ServiceContainer:
    """Service container for dependency injection.

    Stateful objects (processed set, notification window, verdict log) are
    created exactly once here and handed to the services that need them.
    """

    def __init__(self, settings: Optional[AgentSettings] = None, clock: Callable[[], float] = time.time):
        """Initialize service container.

        Args:
            settings: Agent settings, read from the environment when omitted
            clock: Unix-seconds clock shared by the rate window and the cycle
        """
        self.settings = settings or AgentSettings.from_env()
        self.oracle_factory = OracleProviderFactory()
        self._clock = clock
        self._services: Dict[str, Any] = {}

    @property
    def is_initialized(self) -> bool:
        return bool(self._services)

    async def initialize(self) -> None:
        """Create adapters and services."""
        if self.is_initialized:
            return
        logger.info("🔧 Setting up service container...")
        s = self.settings

        market = await self.oracle_factory.create_provider("coingecko", config=s.coingecko_config())
        weather = await self.oracle_factory.create_provider("openweather", config=s.openweather_config())
        metrics = await self.oracle_factory.create_provider("defillama", config=s.defillama_config())
        gas = await self.oracle_factory.create_provider("eth_rpc", config=s.eth_rpc_config())

        feed = MoltbookAdapter(config=s.moltbook_config())
        await feed.initialize()
        ledger = VerdictRegistryAdapter(config=s.ledger_config())
        store = JsonFileStore(s.memory_dir)
        mirror = JsonBinAdapter(config=s.jsonbin_config())

        processed = ProcessedClaims(store)
        window = NotificationWindow(s.notification_limit, s.notification_window_seconds, clock=self._clock)
        verdict_log = VerdictLog(store, mirror, cap=s.verdict_log_cap)
        verifier = build_verifier(market, weather, gas, metrics, s.default_weather_location, s.decisive_gap)
        publisher = VerdictPublisher(feed, window)

        cycle = FactCheckCycle(
            verifier=verifier,
            ledger=ledger,
            processed=processed,
            verdict_log=verdict_log,
            publisher=publisher,
            feed=feed,
            categories=s.submolts,
            courtesy_delay=s.courtesy_delay_seconds,
            clock=self._clock,
        )

        self._services = {
            'market': market,
            'feed': feed,
            'ledger': ledger,
            'mirror': mirror,
            'processed_claims': processed,
            'notification_window': window,
            'verdict_log': verdict_log,
            'verifier': verifier,
            'fact_check_cycle': cycle,
        }
        logger.info("✅ Service container setup completed")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_fact_check_cycle(self) -> FactCheckCycle:
        return self.get('fact_check_cycle')

    def get_verdict_log(self) -> VerdictLog:
        return self.get('verdict_log')

    def get_ledger(self) -> VerdictRegistryAdapter:
        return self.get('ledger')

    async def shutdown(self) -> None:
        """Release network clients."""
        await self.oracle_factory.shutdown_all()
        if self._services:
            await self._services['feed'].shutdown()
            await self._services['mirror'].shutdown()
        self._services = {}
