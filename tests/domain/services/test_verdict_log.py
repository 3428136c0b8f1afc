"""Tests for the verdict log."""

import pytest

from claim_oracle.domain.models.verdict_record import VerdictRecord
from claim_oracle.domain.models.verification import Verdict
from claim_oracle.domain.ports.verdict_store import StorageError
from claim_oracle.domain.services.verdict_log import VerdictLog
from fakes import InMemoryBlobStore


def make_record(claim_id: str) -> VerdictRecord:
    return VerdictRecord(
        claim_id=claim_id,
        agent_label="tester",
        claim_text="ETH will exceed $3,500",
        verdict=Verdict.FALSE,
        confidence=99,
        source_name="CoinGecko",
        observed_value=1857.68,
        verdict_hash="0x" + "00" * 32,
    )


@pytest.mark.asyncio
async def test_append_prepends_and_caps(state_store, blob_store):
    log = VerdictLog(state_store, blob_store, cap=3)

    for i in range(5):
        await log.append(make_record(f"c{i}"))

    assert [v["claim_id"] for v in state_store.verdicts] == ["c4", "c3", "c2"]
    assert blob_store.data == state_store.verdicts
    assert blob_store.writes == 5


@pytest.mark.asyncio
async def test_local_failure_propagates(state_store, blob_store):
    state_store.fail_writes = True

    with pytest.raises(StorageError):
        await VerdictLog(state_store, blob_store).append(make_record("c1"))
    assert blob_store.writes == 0


@pytest.mark.asyncio
async def test_unconfigured_mirror_is_skipped(state_store):
    mirror = InMemoryBlobStore(configured=False)

    await VerdictLog(state_store, mirror).append(make_record("c1"))

    assert len(state_store.verdicts) == 1
    assert mirror.data is None


@pytest.mark.asyncio
async def test_recent_reads_local_log(state_store, blob_store):
    log = VerdictLog(state_store, blob_store)
    await log.append(make_record("c1"))
    await log.append(make_record("c2"))

    records = await log.recent(1)

    assert [r.claim_id for r in records] == ["c2"]
    assert records[0].verdict == Verdict.FALSE


@pytest.mark.asyncio
async def test_recent_falls_back_to_mirror(state_store, blob_store):
    blob_store.data = [make_record("remote").model_dump(mode="json"), {"garbage": True}]

    records = await VerdictLog(state_store, blob_store).recent()

    assert [r.claim_id for r in records] == ["remote"]
