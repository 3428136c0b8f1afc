"""JSON-RPC gas price source."""

from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ...domain.ports.oracle_provider import GasPriceProvider, OracleDecodeError, OracleUnavailableError
from .http_oracle import HttpOracleAdapter


class EthRpcConfig(BaseModel):
    """Configuration for the gas-price RPC adapter."""

    rpc_url: str = "https://rpc.ankr.com/eth"
    timeout: float = 10.0


class JsonRpcResponse(BaseModel):
    result: Optional[str] = None
    error: Optional[Any] = None


class EthRpcGasAdapter(HttpOracleAdapter, GasPriceProvider):
    """Current gas price via ``eth_gasPrice``."""

    def __init__(
        self,
        config: Optional[EthRpcConfig] = None,
        provider_name: str = "Ethereum RPC",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or EthRpcConfig()
        super().__init__(
            base_url=self._config.rpc_url,
            timeout=self._config.timeout,
            provider_name=provider_name,
            client=client,
        )

    async def get_gas_price_wei(self) -> int:
        data = await self._request_json(
            "POST",
            "",
            json={"jsonrpc": "2.0", "method": "eth_gasPrice", "params": [], "id": 1},
        )
        try:
            reply = JsonRpcResponse.model_validate(data)
        except ValidationError as e:
            raise OracleDecodeError(self.provider_name, f"unexpected JSON-RPC shape: {e}")

        if reply.error is not None:
            raise OracleUnavailableError(self.provider_name, f"RPC error: {reply.error}")
        if reply.result is None:
            raise OracleDecodeError(self.provider_name, "JSON-RPC reply has no result")
        try:
            return int(reply.result, 16)
        except ValueError:
            raise OracleDecodeError(self.provider_name, f"gas price is not hex: {reply.result!r}")
