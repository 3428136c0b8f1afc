"""Port interfaces for the external data sources (oracles) used in verification."""

from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, Field


class OracleError(Exception):
    """Base class for oracle failures."""

    def __init__(self, source_name: str, message: str):
        super().__init__(f"{source_name}: {message}")
        self.source_name = source_name


class OracleUnavailableError(OracleError):
    """Transport failure: non-2xx status, timeout or connection error.

    Recovered locally as an UNVERIFIABLE verdict.
    """


class OracleDecodeError(OracleError):
    """A 2xx response whose body could not be decoded into the expected shape.

    Propagated to the orchestrator as a retryable error.
    """


class ProtocolChange(BaseModel):
    """One protocol entry from a protocol-metrics aggregator."""

    name: Optional[str] = None
    tvl: Optional[float] = Field(None, description="Total value locked, USD")
    change_1d: Optional[float] = Field(None, description="Day-over-day TVL change, percent")


class OracleProvider(ABC):
    """Lifecycle shared by all oracle adapters."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create clients and other resources."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Release resources."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provenance label recorded on verification results."""
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider has been initialized."""
        pass


class MarketDataProvider(OracleProvider):
    """Spot prices for crypto assets."""

    @abstractmethod
    async def get_spot_price(self, asset_symbol: str) -> Optional[float]:
        """Get the current USD price of an asset.

        Returns:
            The price, or None when the source has no price for the asset

        Raises:
            OracleUnavailableError: If the source cannot be reached
            OracleDecodeError: If the response is malformed
        """
        pass

    @property
    @abstractmethod
    def supported_assets(self) -> List[str]:
        """Ticker symbols the provider can price."""
        pass


class WeatherProvider(OracleProvider):
    """Precipitation forecasts."""

    @abstractmethod
    async def get_precipitation_probabilities(self, location: str) -> List[float]:
        """Get precipitation probability samples (0-1) over the forecast window."""
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the source are present."""
        pass


class ProtocolMetricsProvider(OracleProvider):
    """Cross-protocol TVL statistics."""

    @abstractmethod
    async def get_protocol_changes(self) -> List[ProtocolChange]:
        """Get per-protocol TVL and day-over-day change."""
        pass


class GasPriceProvider(OracleProvider):
    """Current network gas price."""

    @abstractmethod
    async def get_gas_price_wei(self) -> int:
        """Get the current gas price in wei."""
        pass
