"""Bounded, newest-first log of verdict records."""

import logging
from typing import List, Optional

from pydantic import ValidationError

from ..models.verdict_record import VerdictRecord
from ..ports.verdict_store import BlobStore, StateStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_LOG_CAP = 100


class VerdictLog:
    """Verdict log persisted locally and mirrored to a blob store.

    The local store is authoritative: a failing local write propagates to the
    caller. The mirror is best effort.
    """

    def __init__(self, store: StateStore, mirror: Optional[BlobStore] = None, cap: int = DEFAULT_LOG_CAP):
        self._store = store
        self._mirror = mirror
        self.cap = cap

    async def append(self, record: VerdictRecord) -> List[dict]:
        """Prepend a record, trim to the cap and persist.

        Returns:
            The log as written
        """
        entries = [record.model_dump(mode="json")] + self._store.load_verdicts()
        entries = entries[:self.cap]
        self._store.save_verdicts(entries)
        logger.info(f"✅ Persisted verdict for {record.claim_id} ({len(entries)} in log)")
        await self._mirror_entries(entries)
        return entries

    async def _mirror_entries(self, entries: List[dict]) -> None:
        if self._mirror is None or not self._mirror.is_configured:
            logger.warning("⚠️ Verdict mirror not configured, skipping sync")
            return
        try:
            await self._mirror.write_blob(entries)
            logger.info(f"✅ Mirrored {len(entries)} verdicts")
        except StorageError as e:
            logger.warning(f"⚠️ Verdict mirror sync failed: {e}")

    async def recent(self, limit: Optional[int] = None) -> List[VerdictRecord]:
        """Most recent records first, falling back to the mirror when the local log is empty."""
        entries = self._store.load_verdicts()
        if not entries and self._mirror is not None and self._mirror.is_configured:
            try:
                blob = await self._mirror.read_blob()
            except StorageError as e:
                logger.warning(f"⚠️ Could not read verdict mirror: {e}")
                blob = None
            entries = blob if isinstance(blob, list) else []

        records = []
        for entry in entries[:limit] if limit is not None else entries:
            try:
                records.append(VerdictRecord.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping malformed verdict entry: {e}")
        return records
