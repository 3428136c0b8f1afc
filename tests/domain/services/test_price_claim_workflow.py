"""Tests for the scheduled price-claim workflow."""

import json

import pytest
from pydantic import ValidationError

from claim_oracle.domain.models.claim import ClaimType
from claim_oracle.domain.models.verification import Verdict
from claim_oracle.domain.ports.ledger_provider import ProofSubmissionError
from claim_oracle.domain.ports.oracle_provider import OracleUnavailableError
from claim_oracle.domain.services.claim_extractor import extract
from claim_oracle.domain.services.price_claim_workflow import PriceClaimWorkflow, WorkflowConfig, evaluate
from claim_oracle.domain.services.verdict_hasher import compute_verdict_hash
from fakes import TX_ID, RecordingLedger, StubMarket

CONFIG = {
    "schedule": "0 */10 * * * *",
    "registryAddress": "0x1111111111111111111111111111111111111111",
    "ethThreshold": 3500,
    "postId": "cre-demo-001",
    "evms": [{"chainSelectorName": "ethereum-testnet-sepolia", "gasLimit": "500000"}],
}


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig.model_validate(CONFIG)


@pytest.mark.parametrize(
    "price,expected",
    [
        (1857.68, (Verdict.FALSE, 99)),
        (3600, (Verdict.TRUE, 64)),
        (3500, (Verdict.FALSE, 50)),
        (0, (Verdict.UNVERIFIABLE, 0)),
    ],
)
def test_evaluate(price, expected):
    assert evaluate(price, 3500) == expected


def test_config_parsing(config):
    assert config.eth_threshold == 3500
    assert config.evms[0].gas_limit == 500000
    assert config.claim_text == "ETH will exceed $3,500 by end of week"


def test_claim_text_is_extractable(config):
    claim = extract(config.claim_text)

    assert claim.claim_type == ClaimType.PRICE
    assert claim.extracted_value == config.eth_threshold


@pytest.mark.parametrize(
    "override",
    [{"schedule": "every ten minutes"}, {"evms": []}, {"ethThreshold": 0}],
)
def test_invalid_config(override):
    with pytest.raises(ValidationError):
        WorkflowConfig.model_validate({**CONFIG, **override})


def test_config_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(CONFIG))

    assert WorkflowConfig.from_file(path).post_id == "cre-demo-001"


@pytest.mark.asyncio
async def test_run_records_verdict(config, clock):
    ledger = RecordingLedger()
    workflow = PriceClaimWorkflow(config, StubMarket({"ETH": 1857.68}), ledger, clock=clock)

    result = await workflow.run()

    assert result == f"FALSE|99|{TX_ID}"
    assert ledger.submissions == [
        (compute_verdict_hash("cre-demo-001", "FALSE", 99, int(clock.now)), "FALSE")
    ]


@pytest.mark.asyncio
async def test_run_without_price(config, clock):
    market = StubMarket(error=OracleUnavailableError("CoinGecko", "HTTP 429"))
    workflow = PriceClaimWorkflow(config, market, RecordingLedger(), clock=clock)

    assert (await workflow.run()).startswith("UNVERIFIABLE|0|")


@pytest.mark.asyncio
async def test_ledger_failure_propagates(config, clock):
    ledger = RecordingLedger(error=ProofSubmissionError("reverted"))
    workflow = PriceClaimWorkflow(config, StubMarket({"ETH": 4000}), ledger, clock=clock)

    with pytest.raises(ProofSubmissionError):
        await workflow.run()
