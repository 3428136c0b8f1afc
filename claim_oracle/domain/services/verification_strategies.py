"""Per-claim-type verification strategies and their scoring rules.

Each strategy asks one oracle for one observation and turns the distance
between the observation and the claimed threshold into a verdict and an
integer confidence in 0-99. Transport failures surface as
``OracleUnavailableError`` so the verifier can fall back to the next strategy.
"""

import logging
from typing import List, Optional, Protocol, Tuple

from ..models.claim import ClaimType, Comparison, ParsedClaim, ProtocolMetric
from ..models.verification import Verdict, VerificationResult, clamp_confidence, round_half_up
from ..ports.oracle_provider import (
    GasPriceProvider,
    MarketDataProvider,
    ProtocolMetricsProvider,
    WeatherProvider,
)

logger = logging.getLogger(__name__)

DECISIVE_GAP = 20.0
UNVERIFIABLE_CONFIDENCE = 55
WEI_PER_GWEI = 10 ** 9


def _fmt(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def unverifiable(
    source_name: str,
    message: str,
    claim: Optional[ParsedClaim] = None,
    observed: Optional[float] = None,
    confidence: int = UNVERIFIABLE_CONFIDENCE,
) -> VerificationResult:
    """Build an UNVERIFIABLE result that still records observed vs claimed."""
    claimed = claim.extracted_value if claim else None
    return VerificationResult(
        verdict=Verdict.UNVERIFIABLE,
        confidence=clamp_confidence(confidence),
        source_name=source_name,
        observed_value=observed,
        explanation=f"{message} | observed: {_fmt(observed)} | claimed: {_fmt(claimed)} | diff: n/a",
    )


def relative_gap_pct(observed: float, threshold: float) -> float:
    """Distance between observation and threshold, as a percentage of the threshold."""
    return abs(observed - threshold) / threshold * 100


def score_price(
    observed: float,
    threshold: float,
    comparison: Comparison = Comparison.ABOVE,
    decisive_gap: float = DECISIVE_GAP,
) -> Tuple[Verdict, int]:
    """Score a price-threshold claim.

    Already past the threshold in the claimed direction is TRUE. More than
    ``decisive_gap`` percent short of it is FALSE. Anything in between is too
    close to call. Confidence grows with the gap and never reaches 100.
    """
    gap = relative_gap_pct(observed, threshold)
    satisfied = observed >= threshold if comparison == Comparison.ABOVE else observed <= threshold

    if satisfied:
        raw = 90 + gap / 10 if gap > decisive_gap else 82
        return Verdict.TRUE, clamp_confidence(raw)
    if gap > decisive_gap:
        return Verdict.FALSE, clamp_confidence(85 + gap * 0.3)
    return Verdict.UNVERIFIABLE, clamp_confidence(60 + gap * 0.8)


def score_gas(observed: float, claimed: float, decisive_gap: float = DECISIVE_GAP) -> Tuple[Verdict, int]:
    """Score a gas-price threshold claim (relative gap)."""
    gap = relative_gap_pct(observed, claimed)
    if gap > decisive_gap:
        verdict = Verdict.TRUE if observed >= claimed else Verdict.FALSE
        return verdict, clamp_confidence(85 + gap / 5)
    return Verdict.UNVERIFIABLE, 65


def score_points(observed: float, claimed: float, decisive_gap: float = DECISIVE_GAP) -> Tuple[Verdict, int]:
    """Score a percentage claim by absolute distance in percentage points."""
    if abs(observed - claimed) > decisive_gap:
        return (Verdict.TRUE if observed >= claimed else Verdict.FALSE), 85
    return Verdict.UNVERIFIABLE, 65


class VerificationStrategy(Protocol):
    """Protocol for one way of verifying a claim against one source."""

    @property
    def source_name(self) -> str:
        """Provenance label recorded on results."""
        ...

    def applies_to(self, claim: ParsedClaim) -> bool:
        """Whether this strategy can check the claim."""
        ...

    async def verify(self, claim: ParsedClaim) -> VerificationResult:
        """Verify the claim.

        Raises:
            OracleUnavailableError: The source could not be reached
            OracleDecodeError: The source answered with a malformed body
        """
        ...


class PriceStrategy:
    """Verify asset-price claims against a market-data source."""

    def __init__(self, market: MarketDataProvider, decisive_gap: float = DECISIVE_GAP):
        self._market = market
        self._decisive_gap = decisive_gap

    @property
    def source_name(self) -> str:
        return self._market.provider_name

    def applies_to(self, claim: ParsedClaim) -> bool:
        return claim.claim_type == ClaimType.PRICE

    async def verify(self, claim: ParsedClaim) -> VerificationResult:
        if not claim.subject or claim.extracted_value is None:
            return unverifiable(self.source_name, "Could not extract price threshold from claim", claim)
        if claim.subject not in self._market.supported_assets:
            return unverifiable(self.source_name, f"Unknown asset: {claim.subject}", claim)

        threshold = claim.extracted_value
        if threshold <= 0:
            return unverifiable(self.source_name, "Claimed threshold must be positive", claim)

        price = await self._market.get_spot_price(claim.subject)
        if price is None:
            return unverifiable(self.source_name, f"Price data unavailable for {claim.subject}", claim)

        comparison = claim.comparison or Comparison.ABOVE
        verdict, confidence = score_price(price, threshold, comparison, self._decisive_gap)
        gap = relative_gap_pct(price, threshold)
        return VerificationResult(
            verdict=verdict,
            confidence=confidence,
            source_name=self.source_name,
            observed_value=price,
            explanation=(
                f"{claim.subject}/USD: ${_fmt(price)} | claimed threshold "
                f"({comparison.value}): ${_fmt(threshold)} | diff: {gap:.1f}%"
            ),
        )


class WeatherStrategy:
    """Verify precipitation-probability claims against a forecast source."""

    def __init__(
        self,
        weather: WeatherProvider,
        default_location: str = "Stockholm",
        decisive_gap: float = DECISIVE_GAP,
    ):
        self._weather = weather
        self._default_location = default_location
        self._decisive_gap = decisive_gap

    @property
    def source_name(self) -> str:
        return self._weather.provider_name

    def applies_to(self, claim: ParsedClaim) -> bool:
        return claim.claim_type == ClaimType.WEATHER

    async def verify(self, claim: ParsedClaim) -> VerificationResult:
        if not self._weather.is_configured:
            return unverifiable(self.source_name, "Weather API key not configured", claim)
        if claim.extracted_value is None:
            return unverifiable(self.source_name, "Could not extract a percentage from claim", claim)

        location = claim.subject or self._default_location
        samples = await self._weather.get_precipitation_probabilities(location)
        if not samples:
            return unverifiable(self.source_name, f"No forecast samples for {location}", claim)

        observed = round_half_up(max(samples) * 100)
        claimed = claim.extracted_value
        verdict, confidence = score_points(observed, claimed, self._decisive_gap)
        return VerificationResult(
            verdict=verdict,
            confidence=confidence,
            source_name=self.source_name,
            observed_value=float(observed),
            explanation=(
                f"Max precipitation probability ({location}, next 48h): {observed}% | "
                f"claimed: {_fmt(claimed)}% | diff: {_fmt(abs(observed - claimed))} pts"
            ),
        )


class GasPriceStrategy:
    """Verify gas-price claims against a chain RPC endpoint."""

    def __init__(self, gas: GasPriceProvider, decisive_gap: float = DECISIVE_GAP):
        self._gas = gas
        self._decisive_gap = decisive_gap

    @property
    def source_name(self) -> str:
        return self._gas.provider_name

    def applies_to(self, claim: ParsedClaim) -> bool:
        return claim.claim_type == ClaimType.PROTOCOL_METRIC and claim.metric == ProtocolMetric.GAS_PRICE

    async def verify(self, claim: ParsedClaim) -> VerificationResult:
        claimed = claim.extracted_value
        if claimed is None or claimed <= 0:
            return unverifiable(self.source_name, "Claimed gas threshold must be positive", claim)

        wei = await self._gas.get_gas_price_wei()
        gwei = wei / WEI_PER_GWEI
        verdict, confidence = score_gas(gwei, claimed, self._decisive_gap)
        gap = relative_gap_pct(gwei, claimed)
        return VerificationResult(
            verdict=verdict,
            confidence=confidence,
            source_name=self.source_name,
            observed_value=round(gwei, 1),
            explanation=f"Gas price: {gwei:.1f} gwei | claimed: {_fmt(claimed)} gwei | diff: {gap:.1f}%",
        )


class TvlStrategy:
    """Verify TVL-drop claims against a protocol-metrics aggregator.

    Applies to every protocol-metric claim, so it also serves as the fallback
    when the gas-price source is down.
    """

    def __init__(self, metrics: ProtocolMetricsProvider, decisive_gap: float = DECISIVE_GAP):
        self._metrics = metrics
        self._decisive_gap = decisive_gap

    @property
    def source_name(self) -> str:
        return self._metrics.provider_name

    def applies_to(self, claim: ParsedClaim) -> bool:
        return claim.claim_type == ClaimType.PROTOCOL_METRIC

    async def verify(self, claim: ParsedClaim) -> VerificationResult:
        if claim.extracted_value is None:
            return unverifiable(self.source_name, "Could not extract claim value for verification", claim)

        protocols = await self._metrics.get_protocol_changes()
        changes: List[float] = [p.change_1d for p in protocols if p.change_1d is not None]
        if not changes:
            return unverifiable(self.source_name, "No protocol reported a 24h TVL change", claim)

        average = sum(changes) / len(changes)
        actual_drop = max(0.0, -average)
        claimed = claim.extracted_value
        verdict, confidence = score_points(actual_drop, claimed, self._decisive_gap)
        return VerificationResult(
            verdict=verdict,
            confidence=confidence,
            source_name=self.source_name,
            observed_value=round(average, 2),
            explanation=(
                f"Avg 24h TVL change across {len(changes)} protocols: {average:.2f}% | "
                f"claimed drop: {_fmt(claimed)}% | actual drop: {actual_drop:.2f}% | "
                f"diff: {abs(actual_drop - claimed):.2f} pts"
            ),
        )
