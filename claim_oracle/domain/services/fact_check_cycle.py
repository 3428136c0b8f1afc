"""Service sequencing one fact-check cycle over the feed."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ..models.claim import FeedPost, ParsedClaim
from ..models.verdict_record import CycleReport, VerdictRecord, utcnow
from ..ports.feed_provider import FeedProvider, FeedUnavailableError, NotificationError
from ..ports.ledger_provider import LedgerProvider, ProofSubmissionError
from .claim_extractor import extract_claims
from .dedup_ledger import ProcessedClaims
from .oracle_verifier import OracleVerifier
from .verdict_hasher import compute_verdict_hash
from .verdict_log import VerdictLog
from .verdict_publisher import VerdictPublisher

logger = logging.getLogger(__name__)

DEFAULT_COURTESY_DELAY = 2.5

DEMO_POSTS = [
    FeedPost(
        id="demo-001",
        author={"name": "AlphaTrader_AI"},
        content="ETH will exceed $3,500 by end of week",
        submolt="crypto",
    ),
    FeedPost(
        id="demo-002",
        author={"name": "WeatherBot_v2"},
        content="Stockholm precipitation probability >70% next 48h",
        submolt="predictions",
    ),
    FeedPost(
        id="demo-003",
        author={"name": "DeFiWatcher"},
        content="Aave V3 TVL dropped 20% in 6h, circuit breaker threshold approaching",
        submolt="defi",
    ),
]


class CycleState(str, Enum):
    """Orchestrator state."""

    IDLE = "idle"
    RUNNING = "running"


class FactCheckCycle:
    """Runs the extract, verify, hash, prove, notify, persist sequence.

    Claims are handled strictly one after another. A failure inside one claim
    is logged and recorded on the report. A claim that failed before its proof
    was attempted stays unprocessed so the next cycle retries it; once the
    proof step has run the claim is never sent to the ledger or feed again.
    """

    def __init__(
        self,
        verifier: OracleVerifier,
        ledger: LedgerProvider,
        processed: ProcessedClaims,
        verdict_log: VerdictLog,
        publisher: Optional[VerdictPublisher] = None,
        feed: Optional[FeedProvider] = None,
        categories: Optional[List[str]] = None,
        courtesy_delay: float = DEFAULT_COURTESY_DELAY,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the cycle.

        Args:
            verifier: Oracle verifier
            ledger: Ledger receiving verdict digests
            processed: Set of claim ids already handled
            verdict_log: Verdict persistence
            publisher: Feed notifier, None to skip notifications
            feed: Source of posts, None to run on demo posts only
            categories: Feed categories fetched each cycle
            courtesy_delay: Seconds to wait between claims
            clock: Unix-seconds clock used for digest timestamps
            sleep: Awaitable used for the courtesy delay
        """
        self.verifier = verifier
        self.ledger = ledger
        self.processed = processed
        self.verdict_log = verdict_log
        self.publisher = publisher
        self.feed = feed
        self.categories = categories or []
        self.courtesy_delay = courtesy_delay
        self._clock = clock
        self._sleep = sleep
        self.state = CycleState.IDLE
        self.last_report: Optional[CycleReport] = None

    @property
    def is_running(self) -> bool:
        return self.state == CycleState.RUNNING

    async def run_cycle(self, demo: bool = False) -> Optional[CycleReport]:
        """Run one cycle.

        Args:
            demo: Use the built-in demo posts instead of the feed

        Returns:
            The cycle report, or None when a cycle was already running
        """
        if self.is_running:
            logger.warning("⚠️ Cycle already running, ignoring trigger")
            return None

        self.state = CycleState.RUNNING
        report = CycleReport(started_at=utcnow())
        logger.info(f"🔍 Starting fact-check cycle{' (demo)' if demo else ''}")
        try:
            posts = await self._load_posts(demo)
            report.fetched_posts = len(posts)
            claims = extract_claims(posts)
            logger.info(f"📝 {len(claims)} verifiable claims in {len(posts)} posts")

            for index, claim in enumerate(claims):
                if self.processed.is_processed(claim.claim_id):
                    logger.info(f"⏭️ Already verified: {claim.claim_id}")
                    report.skipped.append(claim.claim_id)
                    continue
                try:
                    record = await self.process_claim(claim)
                except Exception as e:
                    logger.error(f"❌ Failed to process claim {claim.claim_id}: {e}")
                    report.failed[claim.claim_id] = str(e)
                    continue
                report.records.append(record)
                if index < len(claims) - 1 and self.courtesy_delay > 0:
                    await self._sleep(self.courtesy_delay)
        finally:
            self.state = CycleState.IDLE
            report.mark_finished()
            self.last_report = report

        logger.info(
            f"✅ Cycle complete: {len(report.records)} verified, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed"
        )
        return report

    async def _load_posts(self, demo: bool) -> List[FeedPost]:
        if demo or self.feed is None:
            return list(DEMO_POSTS)
        try:
            return await self.feed.fetch_posts(self.categories)
        except FeedUnavailableError as e:
            logger.error(f"❌ Feed unavailable, ending cycle: {e}")
            return []

    async def process_claim(self, claim: ParsedClaim) -> VerdictRecord:
        """Verify, prove, notify and persist a single claim.

        Raises:
            OracleDecodeError: If an oracle returned a malformed response
            StorageError: If the local verdict log could not be written. The claim
                is already marked processed by then, so the record is lost.
        """
        logger.info(f"🔍 Verifying [{claim.claim_type.value}] {claim.raw_text[:80]}")
        result = await self.verifier.verify(claim)
        logger.info(f"   Verdict: {result.verdict.value} ({result.confidence}%) via {result.source_name}")

        timestamp = int(self._clock())
        digest = compute_verdict_hash(claim.claim_id, result.verdict, result.confidence, timestamp)
        verdict_hash = "0x" + digest.hex()

        proof_tx_id: Optional[str] = None
        try:
            proof_tx_id = await self.ledger.submit(digest, result.verdict.value)
            logger.info(f"✅ Proof recorded: {proof_tx_id}")
        except ProofSubmissionError as e:
            logger.warning(f"⚠️ Proof submission failed ({e.reason.value}): {e}")
        self.processed.mark_processed(claim.claim_id)

        notification_id: Optional[str] = None
        if self.publisher is not None:
            try:
                notification_id = await self.publisher.publish(claim, result, proof_tx_id)
            except NotificationError as e:
                logger.warning(f"⚠️ Could not post verdict for {claim.claim_id}: {e}")

        record = VerdictRecord.from_verification(
            claim,
            result,
            verdict_hash=verdict_hash,
            proof_tx_id=proof_tx_id,
            notification_id=notification_id,
            created_at=datetime.fromtimestamp(timestamp, timezone.utc),
        )
        await self.verdict_log.append(record)
        return record
