"""Agent configuration loaded from the environment."""

import logging
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .feed.moltbook_adapter import MoltbookConfig
from .ledger.verdict_registry_adapter import VerdictRegistryConfig
from .oracles.coingecko_adapter import CoinGeckoConfig
from .oracles.defillama_adapter import DefiLlamaConfig
from .oracles.eth_rpc_adapter import EthRpcConfig
from .oracles.openweather_adapter import OpenWeatherConfig
from .storage.jsonbin_adapter import JsonBinConfig

logger = logging.getLogger(__name__)

DEFAULT_SUBMOLTS = ["chainlink-official", "crypto", "defi", "predictions"]


class AgentSettings(BaseModel):
    """Configuration for the fact-check agent."""

    moltbook_api_key: Optional[str] = None
    moltbook_base_url: str = "https://www.moltbook.com/api/v1"
    submolts: List[str] = Field(default_factory=lambda: list(DEFAULT_SUBMOLTS))
    poll_interval_minutes: float = Field(default=10, gt=0)
    courtesy_delay_seconds: float = Field(default=2.5, ge=0)
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    coingecko_api_key: Optional[str] = None
    openweather_api_key: Optional[str] = None
    default_weather_location: str = "Stockholm"
    gas_rpc_url: str = "https://rpc.ankr.com/eth"

    ledger_rpc_url: Optional[str] = None
    private_key: Optional[str] = Field(default=None, repr=False)
    verdict_registry_address: Optional[str] = None
    ledger_chain_id: int = 11155111
    ledger_gas_limit: int = Field(default=200_000, gt=0)
    proof_timeout_seconds: float = Field(default=120.0, gt=0)

    jsonbin_bin_id: Optional[str] = None
    jsonbin_api_key: Optional[str] = Field(default=None, repr=False)
    memory_dir: str = "memory"

    notification_limit: int = Field(default=50, ge=1)
    notification_window_seconds: float = Field(default=3600, gt=0)
    verdict_log_cap: int = Field(default=100, ge=1)
    decisive_gap: float = Field(default=20.0, gt=0)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AgentSettings":
        """Create settings from environment variables.

        Args:
            env: Variables to read instead of ``os.environ``; ``.env`` is only
                loaded when reading the real environment
        """
        if env is None:
            load_dotenv()
            env = os.environ

        values = {}
        for name in cls.model_fields:
            raw = env.get(name.upper())
            if raw is None or raw.strip() == "":
                continue
            values[name] = raw.strip()

        if "submolts" in values:
            values["submolts"] = [s.strip() for s in values["submolts"].split(",") if s.strip()]

        settings = cls.model_validate(values)
        settings.log_status()
        return settings

    def log_status(self) -> None:
        """Log which integrations are configured."""
        if not self.moltbook_api_key:
            logger.warning("⚠️ MOLTBOOK_API_KEY not set - feed cycles will be empty, use --demo")
        if not self.openweather_api_key:
            logger.warning("⚠️ OPENWEATHER_API_KEY not set - weather claims will be UNVERIFIABLE")
        if not (self.private_key and self.verdict_registry_address and self.ledger_rpc_url):
            logger.warning("⚠️ Ledger credentials incomplete - verdicts will be stored without on-chain proof")
        if not (self.jsonbin_bin_id and self.jsonbin_api_key):
            logger.info("📁 JSONBin not configured - verdicts kept locally only")

    def moltbook_config(self) -> MoltbookConfig:
        return MoltbookConfig(
            api_key=self.moltbook_api_key,
            base_url=self.moltbook_base_url,
            timeout=self.http_timeout_seconds,
        )

    def coingecko_config(self) -> CoinGeckoConfig:
        return CoinGeckoConfig(api_key=self.coingecko_api_key, timeout=self.http_timeout_seconds)

    def openweather_config(self) -> OpenWeatherConfig:
        return OpenWeatherConfig(api_key=self.openweather_api_key, timeout=self.http_timeout_seconds)

    def defillama_config(self) -> DefiLlamaConfig:
        return DefiLlamaConfig(timeout=self.http_timeout_seconds)

    def eth_rpc_config(self) -> EthRpcConfig:
        return EthRpcConfig(rpc_url=self.gas_rpc_url, timeout=self.http_timeout_seconds)

    def ledger_config(self) -> VerdictRegistryConfig:
        return VerdictRegistryConfig(
            rpc_url=self.ledger_rpc_url,
            private_key=self.private_key,
            contract_address=self.verdict_registry_address,
            chain_id=self.ledger_chain_id,
            gas_limit=self.ledger_gas_limit,
            receipt_timeout=self.proof_timeout_seconds,
            request_timeout=self.http_timeout_seconds,
        )

    def jsonbin_config(self) -> JsonBinConfig:
        return JsonBinConfig(
            bin_id=self.jsonbin_bin_id,
            api_key=self.jsonbin_api_key,
            timeout=self.http_timeout_seconds,
        )
