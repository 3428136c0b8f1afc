"""Domain models for persisted verdicts and cycle reports."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .claim import ParsedClaim
from .verification import Verdict, VerificationResult


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class VerdictRecord(BaseModel):
    """The persisted unit of the verdict log."""

    claim_id: str
    agent_label: str
    claim_text: str
    verdict: Verdict
    confidence: int = Field(..., ge=0, le=99)
    source_name: str
    observed_value: Optional[float] = None
    proof_tx_id: Optional[str] = Field(None, description="Ledger transaction id, None when proof failed")
    verdict_hash: str = Field(..., description="0x-prefixed Keccak-256 digest")
    created_at: datetime = Field(default_factory=utcnow)
    notification_id: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model

    @classmethod
    def from_verification(
        cls,
        claim: ParsedClaim,
        result: VerificationResult,
        verdict_hash: str,
        proof_tx_id: Optional[str] = None,
        notification_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "VerdictRecord":
        """Build a record from a claim and its verification outcome."""
        return cls(
            claim_id=claim.claim_id,
            agent_label=claim.agent_label,
            claim_text=claim.raw_text,
            verdict=result.verdict,
            confidence=result.confidence,
            source_name=result.source_name,
            observed_value=result.observed_value,
            proof_tx_id=proof_tx_id,
            verdict_hash=verdict_hash,
            created_at=created_at or utcnow(),
            notification_id=notification_id,
        )


@dataclass
class CycleReport:
    """Outcome of one verification cycle."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    fetched_posts: int = 0
    records: List[VerdictRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    def mark_finished(self) -> None:
        """Stamp the completion time."""
        self.finished_at = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to dictionary format for API responses."""
        return {
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
            'fetched_posts': self.fetched_posts,
            'verified': len(self.records),
            'records': [record.model_dump(mode="json") for record in self.records],
            'skipped': self.skipped,
            'failed': self.failed,
        }
