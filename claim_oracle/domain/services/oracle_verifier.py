"""Service dispatching claims to their verification strategies."""

import logging
from typing import Dict, Iterable, List, Optional

from ..models.claim import ClaimType, ParsedClaim
from ..models.verification import VerificationResult
from ..ports.oracle_provider import OracleUnavailableError
from .verification_strategies import VerificationStrategy, unverifiable

logger = logging.getLogger(__name__)


class OracleVerifier:
    """Verify claims against live data sources.

    Strategies are registered per claim type as an ordered fallback chain.
    The first applicable strategy that answers wins; a strategy whose source
    is unreachable hands over to the next one. When every source is down the
    claim is UNVERIFIABLE with the errors captured in the explanation.
    Decode errors are not caught here and reach the caller.
    """

    def __init__(self, strategies: Optional[Dict[ClaimType, Iterable[VerificationStrategy]]] = None):
        """Initialize the verifier.

        Args:
            strategies: Fallback chains keyed by claim type, in priority order
        """
        self._strategies: Dict[ClaimType, List[VerificationStrategy]] = {
            claim_type: list(chain) for claim_type, chain in (strategies or {}).items()
        }

    def register_strategy(self, claim_type: ClaimType, strategy: VerificationStrategy) -> None:
        """Append a strategy to the fallback chain of a claim type."""
        self._strategies.setdefault(claim_type, []).append(strategy)

    def chain_for(self, claim: ParsedClaim) -> List[VerificationStrategy]:
        """Strategies that apply to the claim, in the order they will be tried."""
        return [s for s in self._strategies.get(claim.claim_type, []) if s.applies_to(claim)]

    async def verify(self, claim: ParsedClaim) -> VerificationResult:
        """Verify one claim.

        Args:
            claim: Parsed claim

        Returns:
            Verification result; never raises for source unavailability

        Raises:
            OracleDecodeError: If a source returned a malformed response
        """
        if claim.claim_type == ClaimType.UNKNOWN:
            return unverifiable("N/A", "Unknown claim type", claim)

        chain = self.chain_for(claim)
        if not chain:
            return unverifiable("N/A", f"No oracle registered for {claim.claim_type.value} claims", claim)

        errors: List[str] = []
        for strategy in chain:
            try:
                result = await strategy.verify(claim)
            except OracleUnavailableError as e:
                logger.warning(f"⚠️ {strategy.source_name} unavailable for claim {claim.claim_id}: {e}")
                errors.append(str(e))
                continue
            logger.info(f"🔍 {claim.claim_id} verified by {result.source_name}: {result.verdict.value} ({result.confidence}%)")
            return result

        return unverifiable(chain[-1].source_name, f"All sources failed: {'; '.join(errors)}", claim)
