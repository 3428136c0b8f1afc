"""Domain models for feed posts and the claims extracted from them."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_CLAIM_TEXT = 280


class ClaimType(str, Enum):
    """Kinds of measurable claims the pipeline knows how to verify."""

    PRICE = "price"
    WEATHER = "weather"
    PROTOCOL_METRIC = "protocol_metric"
    UNKNOWN = "unknown"


class Comparison(str, Enum):
    """Polarity of a threshold claim."""

    ABOVE = "above"
    BELOW = "below"


class ProtocolMetric(str, Enum):
    """Sub-type of a protocol-metric claim."""

    GAS_PRICE = "gas_price"
    TVL_DROP = "tvl_drop"


class PostAuthor(BaseModel):
    """Author of a feed post."""

    name: Optional[str] = None
    username: Optional[str] = None


class FeedPost(BaseModel):
    """A post as returned by the originating feed."""

    id: str = Field(..., description="Stable post identifier")
    author: PostAuthor = Field(default_factory=PostAuthor)
    content: str = Field(default="", description="Raw post text")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    submolt: Optional[str] = Field(None, description="Feed category the post came from")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value) if isinstance(value, int) else value

    @field_validator("author", mode="before")
    @classmethod
    def _default_author(cls, value):
        return value or {}

    @property
    def agent_label(self) -> str:
        """Display label of the post author."""
        return self.author.name or self.author.username or "unknown"


class ParsedClaim(BaseModel):
    """A typed claim extracted from free text."""

    claim_id: str = Field(..., description="Identifier of the source post")
    claim_type: ClaimType = Field(..., description="Kind of claim")
    raw_text: str = Field(..., max_length=MAX_CLAIM_TEXT, description="Claim text, truncated")
    extracted_value: Optional[float] = Field(None, description="Claimed threshold")
    subject: Optional[str] = Field(None, description="Asset symbol or location")
    agent_label: str = Field(default="unknown", description="Author of the source post")
    comparison: Optional[Comparison] = Field(None, description="Threshold polarity")
    metric: Optional[ProtocolMetric] = Field(None, description="Protocol metric sub-type")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "claim_id": "demo-001",
                "claim_type": "price",
                "raw_text": "ETH will exceed $3,500 by end of week",
                "extracted_value": 3500,
                "subject": "ETH",
                "agent_label": "demo-agent",
                "comparison": "above",
            }
        }

    @model_validator(mode="after")
    def _unknown_has_no_value(self) -> "ParsedClaim":
        is_unknown = self.claim_type == ClaimType.UNKNOWN
        if is_unknown != (self.extracted_value is None):
            raise ValueError("claim_type is unknown if and only if extracted_value is None")
        return self

    @property
    def is_verifiable(self) -> bool:
        """Whether the claim passed extraction."""
        return self.claim_type != ClaimType.UNKNOWN
