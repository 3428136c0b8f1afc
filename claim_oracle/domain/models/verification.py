"""Domain models for verification results."""

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

MAX_CONFIDENCE = 99


class Verdict(str, Enum):
    """Possible verification outcomes."""

    TRUE = "TRUE"  # Observed data supports the claim
    FALSE = "FALSE"  # Observed data contradicts the claim
    UNVERIFIABLE = "UNVERIFIABLE"  # Too close to call, or no data


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Verdict digests are recomputed outside this process with half-up rounding;
    the built-in ``round`` rounds halves to even.
    """
    return int(math.floor(value + 0.5))


def clamp_confidence(value: float) -> int:
    """Round a raw score and clamp it into the 0-99 confidence range."""
    return max(0, min(MAX_CONFIDENCE, round_half_up(value)))


class VerificationResult(BaseModel):
    """Represents the outcome of checking one claim against an oracle."""

    verdict: Verdict = Field(..., description="Verification outcome")
    confidence: int = Field(..., ge=0, le=MAX_CONFIDENCE, description="Confidence, 0-99")
    source_name: str = Field(..., description="Provenance label of the oracle used")
    observed_value: Optional[float] = Field(None, description="Value reported by the oracle")
    explanation: str = Field(..., description="Observed value, claimed threshold and difference")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "verdict": "FALSE",
                "confidence": 99,
                "source_name": "CoinGecko",
                "observed_value": 1857.68,
                "explanation": "ETH/USD: $1,857.68 | claimed threshold: $3,500 | diff: 46.9%",
            }
        }
