"""Tests for the DeFi Llama adapter."""

import httpx
import pytest

from claim_oracle.domain.ports.oracle_provider import OracleDecodeError
from claim_oracle.infrastructure.oracles.defillama_adapter import DefiLlamaAdapter


@pytest.mark.asyncio
async def test_protocol_changes(mock_client):
    body = [
        {"name": "Aave V3", "tvl": 12_000_000_000, "change_1d": -1.5, "category": "Lending"},
        {"name": "Lido", "tvl": 30_000_000_000, "change_1d": None},
        {"name": "New", "tvl": 10},
    ]
    adapter = DefiLlamaAdapter(client=mock_client(lambda request: httpx.Response(200, json=body)))

    changes = await adapter.get_protocol_changes()

    assert [c.name for c in changes] == ["Aave V3", "Lido", "New"]
    assert [c.change_1d for c in changes] == [-1.5, None, None]


@pytest.mark.asyncio
async def test_non_list_body_is_decode_error(mock_client):
    adapter = DefiLlamaAdapter(client=mock_client(lambda request: httpx.Response(200, json={"error": "x"})))

    with pytest.raises(OracleDecodeError):
        await adapter.get_protocol_changes()
