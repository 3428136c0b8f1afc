"""Dedup and rate bookkeeping for the verification cycle."""

import logging
import time
from collections import deque
from typing import Callable, Deque, List

from ..ports.verdict_store import StateStore

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_LIMIT = 50
DEFAULT_WINDOW_SECONDS = 3600


class ProcessedClaims:
    """Set of claim ids that have been fully handled.

    Loaded from the state store once and written back on every mark, so a
    restarted process never re-verifies a claim it already persisted.
    """

    def __init__(self, store: StateStore):
        self._store = store
        self._order: List[str] = list(dict.fromkeys(store.load_processed_ids()))
        self._ids = set(self._order)
        logger.info(f"✅ Loaded {len(self._ids)} processed claim ids")

    def is_processed(self, claim_id: str) -> bool:
        return claim_id in self._ids

    def mark_processed(self, claim_id: str) -> None:
        if claim_id in self._ids:
            return
        self._ids.add(claim_id)
        self._order.append(claim_id)
        self._store.save_processed_ids(self._order)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, claim_id: object) -> bool:
        return claim_id in self._ids


class NotificationWindow:
    """Sliding-window limit on outbound notifications.

    Timestamps are kept oldest first; entries older than the window are
    pruned from the front whenever the window is consulted.
    """

    def __init__(
        self,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._sent: Deque[float] = deque()

    def _prune(self, now: float) -> None:
        while self._sent and now - self._sent[0] > self.window_seconds:
            self._sent.popleft()

    def can_notify(self) -> bool:
        """Whether another notification fits in the trailing window."""
        self._prune(self._clock())
        return len(self._sent) < self.limit

    def record_notification(self) -> None:
        """Record a notification sent now."""
        now = self._clock()
        self._prune(now)
        self._sent.append(now)

    @property
    def used(self) -> int:
        self._prune(self._clock())
        return len(self._sent)
