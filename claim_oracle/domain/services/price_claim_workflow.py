"""Scheduled single-claim workflow: is ETH above a fixed threshold?

Runs independently of the feed cycle. It prices ETH, scores the fixed claim,
hashes the verdict with the same layout as the feed cycle and records the
digest on the ledger.
"""

import json
import logging
import time
from pathlib import Path
from typing import Callable, List, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from ..models.verification import MAX_CONFIDENCE, Verdict, round_half_up
from ..ports.ledger_provider import LedgerProvider
from ..ports.oracle_provider import MarketDataProvider, OracleUnavailableError
from .verdict_hasher import compute_verdict_hash

logger = logging.getLogger(__name__)

WORKFLOW_ASSET = "ETH"


class EvmTarget(BaseModel):
    """Target chain of the workflow's ledger write."""

    chain_selector_name: str = Field(..., alias="chainSelectorName")
    gas_limit: int = Field(..., alias="gasLimit", gt=0)

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class WorkflowConfig(BaseModel):
    """Configuration of the scheduled price-claim workflow."""

    schedule: str = Field(..., description="Cron expression, 5 or 6 fields")
    registry_address: str = Field(..., alias="registryAddress")
    eth_threshold: float = Field(..., alias="ethThreshold", gt=0)
    post_id: str = Field(..., alias="postId")
    evms: List[EvmTarget] = Field(..., min_length=1)

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "schedule": "0 */10 * * * *",
                "registryAddress": "0x0000000000000000000000000000000000000000",
                "ethThreshold": 3500,
                "postId": "cre-demo-001",
                "evms": [{"chainSelectorName": "ethereum-testnet-sepolia", "gasLimit": "500000"}],
            }
        }

    @field_validator("schedule")
    @classmethod
    def _check_schedule(cls, value: str) -> str:
        if len(value.split()) not in (5, 6):
            raise ValueError("schedule must have 5 or 6 cron fields")
        return value

    @property
    def claim_text(self) -> str:
        return f"ETH will exceed ${self.eth_threshold:,.0f} by end of week"

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "WorkflowConfig":
        """Load and validate a JSON config file."""
        with open(path, encoding="utf-8") as f:
            return cls.model_validate(json.load(f))


def evaluate(price: float, threshold: float) -> Tuple[Verdict, int]:
    """Score the fixed claim.

    Confidence is ``min(99, round(50 + distance * 500))`` where distance is the
    fractional gap to the threshold. No price means UNVERIFIABLE at 0.
    """
    if not price:
        return Verdict.UNVERIFIABLE, 0
    distance = abs(price - threshold) / threshold
    confidence = min(MAX_CONFIDENCE, round_half_up(50 + distance * 500))
    return (Verdict.TRUE if price > threshold else Verdict.FALSE), confidence


class PriceClaimWorkflow:
    """One run of the scheduled price-claim check."""

    def __init__(
        self,
        config: WorkflowConfig,
        market: MarketDataProvider,
        ledger: LedgerProvider,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self._market = market
        self._ledger = ledger
        self._clock = clock

    async def _fetch_price(self) -> float:
        try:
            price = await self._market.get_spot_price(WORKFLOW_ASSET)
        except OracleUnavailableError as e:
            logger.warning(f"⚠️ ETH price unavailable: {e}")
            return 0.0
        return price or 0.0

    async def run(self) -> str:
        """Price, score, hash and record the claim.

        Returns:
            ``"<VERDICT>|<confidence>|<tx id>"``

        Raises:
            ProofSubmissionError: If the ledger write fails
        """
        config = self.config
        logger.info(f"🔍 Workflow claim: \"{config.claim_text}\" (post {config.post_id})")

        price = await self._fetch_price()
        verdict, confidence = evaluate(price, config.eth_threshold)
        logger.info(f"   ETH/USD ${price:,.2f} vs ${config.eth_threshold:,.2f}: {verdict.value} ({confidence}%)")

        timestamp = int(self._clock())
        digest = compute_verdict_hash(config.post_id, verdict, confidence, timestamp)
        logger.info(f"   Verdict hash 0x{digest.hex()} at {timestamp}")

        tx_id = await self._ledger.submit(digest, verdict.value)
        logger.info(f"✅ Workflow verdict recorded on {config.evms[0].chain_selector_name}: {tx_id}")
        return f"{verdict.value}|{confidence}|{tx_id}"
