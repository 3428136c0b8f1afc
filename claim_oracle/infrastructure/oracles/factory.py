"""Factory for creating and managing oracle providers."""

import logging
from typing import Any, Dict, Optional, Type

from ...domain.ports.oracle_provider import OracleProvider
from .coingecko_adapter import CoinGeckoAdapter
from .defillama_adapter import DefiLlamaAdapter
from .eth_rpc_adapter import EthRpcGasAdapter
from .openweather_adapter import OpenWeatherAdapter

logger = logging.getLogger(__name__)


class OracleProviderFactory:
    """Factory for creating and managing oracle providers.

    This factory maintains a registry of available oracle adapters
    and handles their lifecycle (initialization, shutdown).
    """

    def __init__(self):
        """Initialize the factory."""
        self._provider_registry: Dict[str, Type[OracleProvider]] = {}
        self._active_providers: Dict[str, OracleProvider] = {}

        self.register_provider("coingecko", CoinGeckoAdapter)
        self.register_provider("openweather", OpenWeatherAdapter)
        self.register_provider("defillama", DefiLlamaAdapter)
        self.register_provider("eth_rpc", EthRpcGasAdapter)

    def register_provider(self, name: str, provider_class: Type[OracleProvider]) -> None:
        """Register a new oracle provider class.

        Args:
            name: Unique identifier for the provider
            provider_class: The provider class to register
        """
        if name in self._provider_registry:
            raise ValueError(f"Provider {name} already registered")
        self._provider_registry[name] = provider_class

    async def create_provider(self, name: str, **config: Any) -> OracleProvider:
        """Create and initialize a new oracle provider instance.

        Args:
            name: Name of the provider to create
            **config: Provider-specific constructor arguments

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If provider not found
            RuntimeError: If initialization fails
        """
        if name not in self._provider_registry:
            raise ValueError(f"Provider {name} not registered")

        provider = self._provider_registry[name](**config)
        try:
            await provider.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize provider {name}: {e}")
        self._active_providers[name] = provider
        logger.info(f"✅ Oracle provider ready: {provider.provider_name}")
        return provider

    def get_provider(self, name: str) -> Optional[OracleProvider]:
        """Get an active provider instance by name."""
        return self._active_providers.get(name)

    async def shutdown_provider(self, name: str) -> None:
        """Shutdown a specific provider."""
        provider = self._active_providers.pop(name, None)
        if provider:
            await provider.shutdown()

    async def shutdown_all(self) -> None:
        """Shutdown all active providers."""
        for name in list(self._active_providers):
            await self.shutdown_provider(name)

    def list_providers(self) -> Dict[str, bool]:
        """Registered provider names mapped to whether they are active."""
        return {name: name in self._active_providers for name in self._provider_registry}
