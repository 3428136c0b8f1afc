"""CoinGecko implementation of the market-data provider interface."""

import logging
from typing import Dict, List, Optional

import httpx
from cachetools import TTLCache
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ...domain.ports.oracle_provider import MarketDataProvider, OracleDecodeError
from .http_oracle import HttpOracleAdapter

logger = logging.getLogger(__name__)

COINGECKO_IDS = {
    "ETH": "ethereum",
    "BTC": "bitcoin",
    "SOL": "solana",
    "BNB": "binancecoin",
    "MATIC": "matic-network",
    "AVAX": "avalanche-2",
    "DOT": "polkadot",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "AAVE": "aave",
}


class CoinGeckoConfig(BaseModel):
    """Configuration for CoinGecko adapter."""

    api_key: Optional[str] = Field(default=None, description="Demo API key, sent as x-cg-demo-api-key")
    base_url: str = "https://api.coingecko.com/api/v3"
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    cache_ttl: int = Field(default=60, description="Price cache TTL in seconds")
    cache_maxsize: int = Field(default=64, description="Maximum cache size")
    asset_ids: Dict[str, str] = Field(default_factory=lambda: dict(COINGECKO_IDS))


class PriceQuote(BaseModel):
    """One entry of a ``simple/price`` response."""

    usd: Optional[float] = None


_SIMPLE_PRICE = TypeAdapter(Dict[str, PriceQuote])


class CoinGeckoAdapter(HttpOracleAdapter, MarketDataProvider):
    """Spot prices from CoinGecko's ``simple/price`` endpoint.

    Prices are cached briefly so a burst of claims about the same asset in one
    cycle costs a single request.
    """

    def __init__(
        self,
        config: Optional[CoinGeckoConfig] = None,
        provider_name: str = "CoinGecko",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or CoinGeckoConfig()
        headers = {"x-cg-demo-api-key": self._config.api_key} if self._config.api_key else {}
        super().__init__(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            provider_name=provider_name,
            headers=headers,
            client=client,
        )
        self._cache = TTLCache(maxsize=self._config.cache_maxsize, ttl=self._config.cache_ttl)

    @property
    def supported_assets(self) -> List[str]:
        return list(self._config.asset_ids)

    async def get_spot_price(self, asset_symbol: str) -> Optional[float]:
        symbol = asset_symbol.upper()
        coin_id = self._config.asset_ids.get(symbol)
        if coin_id is None:
            return None
        if coin_id in self._cache:
            return self._cache[coin_id]

        data = await self._request_json("GET", "/simple/price", params={"ids": coin_id, "vs_currencies": "usd"})
        try:
            quotes = _SIMPLE_PRICE.validate_python(data)
        except ValidationError as e:
            raise OracleDecodeError(self.provider_name, f"unexpected simple/price shape: {e}")

        quote = quotes.get(coin_id)
        if quote is None or quote.usd is None:
            logger.warning(f"⚠️ {self.provider_name} returned no USD price for {symbol}")
            return None

        self._cache[coin_id] = quote.usd
        return quote.usd
