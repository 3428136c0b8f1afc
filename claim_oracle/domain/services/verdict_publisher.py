"""Publishing verdicts back to the feed the claim came from."""

import logging
from typing import Optional

from ..models.claim import ClaimType, ParsedClaim
from ..models.verification import VerificationResult
from ..ports.feed_provider import FeedProvider
from .dedup_ledger import NotificationWindow

logger = logging.getLogger(__name__)

COMMENT_CLAIM_CHARS = 120


def shorten_tx(tx_id: str) -> str:
    """Shorten a transaction id to ``0x1234...abcd``."""
    if len(tx_id) <= 12:
        return tx_id
    return f"{tx_id[:6]}...{tx_id[-4:]}"


def _value(claim: ParsedClaim, value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    if claim.claim_type == ClaimType.PRICE:
        return f"${value:,.2f}"
    if claim.claim_type == ClaimType.WEATHER:
        return f"{value:g}%"
    return f"{value:g}"


def format_verdict_comment(
    claim: ParsedClaim,
    result: VerificationResult,
    proof_tx_id: Optional[str],
    network_label: str = "Sepolia",
) -> str:
    """Render the comment text posted under a verified claim."""
    label = claim.subject or "value"
    if result.observed_value is not None:
        value_line = (
            f"Observed {label}: {_value(claim, result.observed_value)} | "
            f"claimed: {_value(claim, claim.extracted_value)}"
        )
    else:
        value_line = result.explanation

    proof_line = (
        f"On-chain proof: {shorten_tx(proof_tx_id)} ({network_label})"
        if proof_tx_id else "On-chain proof: failed"
    )

    return "\n".join([
        "🔍 CRE FACT-CHECK",
        f"Verdict: {result.verdict.value} · {result.confidence}% confidence",
        f"Claim: \"{claim.raw_text[:COMMENT_CLAIM_CHARS]}\"",
        value_line,
        f"Source: {result.source_name}",
        proof_line,
    ])


class VerdictPublisher:
    """Posts verdict comments, gated by the notification window."""

    def __init__(self, feed: FeedProvider, window: NotificationWindow, network_label: str = "Sepolia"):
        self._feed = feed
        self._window = window
        self._network_label = network_label

    async def publish(
        self,
        claim: ParsedClaim,
        result: VerificationResult,
        proof_tx_id: Optional[str],
    ) -> Optional[str]:
        """Post a verdict comment on the claim's source post.

        Returns:
            The comment id, or None when the rate window is full

        Raises:
            NotificationError: If the feed rejected the comment
        """
        if not self._window.can_notify():
            logger.warning(
                f"⚠️ Notification limit reached ({self._window.limit}/window), "
                f"not commenting on {claim.claim_id}"
            )
            return None

        content = format_verdict_comment(claim, result, proof_tx_id, self._network_label)
        comment_id = await self._feed.post_comment(claim.claim_id, content)
        self._window.record_notification()
        logger.info(f"✅ Commented on {claim.claim_id}: {comment_id}")
        return comment_id
