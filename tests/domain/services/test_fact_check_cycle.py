"""Tests for the fact-check cycle orchestrator."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from claim_oracle.domain.models.verification import Verdict
from claim_oracle.domain.ports.feed_provider import FeedUnavailableError, NotificationError
from claim_oracle.domain.ports.ledger_provider import ProofFailureReason, ProofSubmissionError
from claim_oracle.domain.ports.oracle_provider import OracleDecodeError
from claim_oracle.domain.services.dedup_ledger import ProcessedClaims
from claim_oracle.domain.services.fact_check_cycle import CycleState
from claim_oracle.domain.services.verdict_hasher import compute_verdict_hash, verdict_hash_hex
from claim_oracle.infrastructure.dependencies import build_verifier
from claim_oracle.infrastructure.ledger.verdict_registry_adapter import (
    VerdictRegistryAdapter,
    VerdictRegistryConfig,
)
from fakes import TX_ID, RecordingLedger, StubMarket, make_post

ETH_CLAIM = "ETH will exceed $3,500 by end of week"
WEATHER_CLAIM = "Stockholm precipitation probability >70% next 48h"


@pytest.mark.asyncio
async def test_end_to_end_false_claim(make_cycle, feed, ledger, state_store, blob_store, clock):
    """A price claim far below spot is FALSE at 99 and proven on the ledger."""
    feed.posts = [make_post("post-1", ETH_CLAIM, author="AlphaTrader_AI")]
    cycle = make_cycle()

    report = await cycle.run_cycle()

    assert report.fetched_posts == 1
    assert len(report.records) == 1
    record = report.records[0]
    assert record.verdict == Verdict.FALSE
    assert record.confidence == 99
    assert record.agent_label == "AlphaTrader_AI"
    assert record.proof_tx_id == TX_ID
    assert record.verdict_hash == verdict_hash_hex("post-1", "FALSE", 99, int(clock.now))
    assert record.notification_id == "comment-1"

    assert ledger.submissions == [(compute_verdict_hash("post-1", "FALSE", 99, int(clock.now)), "FALSE")]
    assert feed.comments[0][0] == "post-1"
    assert state_store.processed == ["post-1"]
    assert state_store.verdicts[0]["claim_id"] == "post-1"
    assert blob_store.writes == 1
    assert cycle.state == CycleState.IDLE


@pytest.mark.asyncio
async def test_second_cycle_skips_processed_claim(make_cycle, feed, ledger, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    cycle = make_cycle()

    await cycle.run_cycle()
    report = await cycle.run_cycle()

    assert report.records == []
    assert report.skipped == ["post-1"]
    assert len(ledger.submissions) == 1
    assert len(state_store.verdicts) == 1


@pytest.mark.asyncio
async def test_restart_does_not_reverify(make_cycle, feed, ledger, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    await make_cycle().run_cycle()

    report = await make_cycle(processed=ProcessedClaims(state_store)).run_cycle()

    assert report.skipped == ["post-1"]
    assert len(ledger.submissions) == 1


@pytest.mark.asyncio
async def test_proof_failure_still_persists(make_cycle, feed, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    failing = RecordingLedger(error=ProofSubmissionError("out of gas", ProofFailureReason.INSUFFICIENT_FUNDS))
    cycle = make_cycle(ledger=failing)

    report = await cycle.run_cycle()

    record = report.records[0]
    assert record.proof_tx_id is None
    assert record.verdict == Verdict.FALSE
    assert record.confidence == 99
    assert state_store.processed == ["post-1"]
    assert "On-chain proof: failed" in feed.comments[0][1]


@pytest.mark.asyncio
async def test_rate_limited_claim_is_still_recorded(make_cycle, feed, ledger, window, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    for _ in range(50):
        window.record_notification()

    report = await make_cycle().run_cycle()

    assert feed.comments == []
    assert report.records[0].notification_id is None
    assert len(ledger.submissions) == 1
    assert state_store.processed == ["post-1"]


@pytest.mark.asyncio
async def test_notification_error_is_not_fatal(make_cycle, feed, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    feed.comment_error = NotificationError("403 Forbidden")

    report = await make_cycle().run_cycle()

    assert report.records[0].notification_id is None
    assert state_store.processed == ["post-1"]


@pytest.mark.asyncio
async def test_failing_claim_does_not_stop_the_cycle(make_cycle, feed, state_store, weather, gas, metrics):
    feed.posts = [make_post("post-1", ETH_CLAIM), make_post("post-2", WEATHER_CLAIM)]
    broken_market = StubMarket(error=OracleDecodeError("CoinGecko", "not JSON"))
    cycle = make_cycle(verifier=build_verifier(broken_market, weather, gas, metrics))

    report = await cycle.run_cycle()

    assert "post-1" in report.failed
    assert "not JSON" in report.failed["post-1"]
    assert [r.claim_id for r in report.records] == ["post-2"]
    assert state_store.processed == ["post-2"]


@pytest.mark.asyncio
async def test_local_storage_failure_still_marks_claim_processed(make_cycle, feed, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    state_store.fail_writes = True

    report = await make_cycle().run_cycle()

    assert "post-1" in report.failed
    assert state_store.processed == ["post-1"]
    assert state_store.verdicts == []


@pytest.mark.asyncio
async def test_local_storage_failure_is_not_proven_twice(make_cycle, feed, ledger, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    state_store.fail_writes = True
    await make_cycle().run_cycle()

    state_store.fail_writes = False
    report = await make_cycle(processed=ProcessedClaims(state_store)).run_cycle()

    assert report.skipped == ["post-1"]
    assert len(ledger.submissions) == 1
    assert len(feed.comments) == 1


@pytest.mark.asyncio
async def test_receipt_polling_error_still_persists(make_cycle, feed, state_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.gas_price = 2_000_000_000
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    w3.eth.wait_for_transaction_receipt.side_effect = ConnectionError("rpc reset while polling")
    adapter = VerdictRegistryAdapter(
        VerdictRegistryConfig(private_key="ab" * 32, contract_address="0x" + "11" * 20), w3=w3
    )

    with patch("claim_oracle.infrastructure.ledger.verdict_registry_adapter.Account") as account_cls:
        account_cls.from_key.return_value.address = "0x" + "22" * 20
        report = await make_cycle(ledger=adapter).run_cycle()

    assert report.failed == {}
    assert report.records[0].proof_tx_id is None
    assert len(state_store.verdicts) == 1
    assert state_store.processed == ["post-1"]
    assert "On-chain proof: failed" in feed.comments[0][1]


@pytest.mark.asyncio
async def test_record_timestamp_matches_hashed_timestamp(make_cycle, feed, clock):
    feed.posts = [make_post("post-1", ETH_CLAIM)]

    record = (await make_cycle().run_cycle()).records[0]

    assert record.created_at == datetime.fromtimestamp(int(clock.now), timezone.utc)
    recomputed = verdict_hash_hex(
        record.claim_id, record.verdict, record.confidence, int(record.created_at.timestamp())
    )
    assert recomputed == record.verdict_hash


@pytest.mark.asyncio
async def test_mirror_failure_is_not_fatal(make_cycle, feed, state_store, blob_store):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    blob_store.fail = True

    report = await make_cycle().run_cycle()

    assert len(report.records) == 1
    assert state_store.processed == ["post-1"]


@pytest.mark.asyncio
async def test_trigger_while_running_is_ignored(make_cycle, feed):
    feed.posts = [make_post("post-1", ETH_CLAIM)]
    cycle = make_cycle()
    cycle.state = CycleState.RUNNING

    assert await cycle.run_cycle() is None


@pytest.mark.asyncio
async def test_courtesy_delay_between_claims(make_cycle, feed):
    feed.posts = [make_post("post-1", ETH_CLAIM), make_post("post-2", WEATHER_CLAIM)]
    sleep = AsyncMock()
    cycle = make_cycle(sleep=sleep)

    await cycle.run_cycle()

    sleep.assert_awaited_once_with(2.5)


@pytest.mark.asyncio
async def test_unknown_posts_are_ignored(make_cycle, feed, ledger):
    feed.posts = [make_post("post-1", "gm frens"), make_post("post-2", "The weather is nice today")]

    report = await make_cycle().run_cycle()

    assert report.fetched_posts == 2
    assert report.records == []
    assert ledger.submissions == []


@pytest.mark.asyncio
async def test_feed_outage_ends_cycle_early(make_cycle, feed, ledger):
    feed.fetch_posts = AsyncMock(side_effect=FeedUnavailableError("MOLTBOOK_API_KEY not set"))
    cycle = make_cycle()

    report = await cycle.run_cycle()

    assert report.fetched_posts == 0
    assert report.records == []
    assert cycle.last_report is report
    assert cycle.state == CycleState.IDLE


@pytest.mark.asyncio
async def test_demo_posts(make_cycle, feed):
    report = await make_cycle().run_cycle(demo=True)

    assert report.fetched_posts == 3
    verdicts = {r.claim_id: r.verdict for r in report.records}
    assert verdicts == {
        "demo-001": Verdict.FALSE,
        "demo-002": Verdict.TRUE,
        "demo-003": Verdict.UNVERIFIABLE,
    }


@pytest.mark.asyncio
async def test_report_to_dict(make_cycle, feed):
    feed.posts = [make_post("post-1", ETH_CLAIM)]

    report = await make_cycle().run_cycle()
    data = report.to_dict()

    assert data["verified"] == 1
    assert data["records"][0]["verdict"] == "FALSE"
    assert data["finished_at"] is not None
