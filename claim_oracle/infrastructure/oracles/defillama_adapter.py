"""DeFi Llama implementation of the protocol-metrics provider interface."""

from typing import List, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ...domain.ports.oracle_provider import OracleDecodeError, ProtocolChange, ProtocolMetricsProvider
from .http_oracle import HttpOracleAdapter

_PROTOCOLS = TypeAdapter(List[ProtocolChange])


class DefiLlamaConfig(BaseModel):
    """Configuration for DeFi Llama adapter."""

    base_url: str = "https://api.llama.fi"
    timeout: float = 10.0


class DefiLlamaAdapter(HttpOracleAdapter, ProtocolMetricsProvider):
    """Per-protocol TVL and 24h change from ``/protocols``."""

    def __init__(
        self,
        config: Optional[DefiLlamaConfig] = None,
        provider_name: str = "DeFi Llama",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or DefiLlamaConfig()
        super().__init__(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            provider_name=provider_name,
            client=client,
        )

    async def get_protocol_changes(self) -> List[ProtocolChange]:
        data = await self._request_json("GET", "/protocols")
        try:
            return _PROTOCOLS.validate_python(data)
        except ValidationError as e:
            raise OracleDecodeError(self.provider_name, f"unexpected protocols shape: {e}")
