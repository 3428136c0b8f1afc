"""Port interface for the append-only ledger that stores verdict proofs."""

from abc import ABC, abstractmethod
from enum import Enum


class ProofFailureReason(str, Enum):
    """Why a proof submission failed."""

    MISSING_CREDENTIALS = "missing_credentials"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SIGNING_FAILED = "signing_failed"
    REJECTED = "rejected"
    REVERTED = "reverted"
    TIMEOUT = "timeout"


class ProofSubmissionError(Exception):
    """Raised when a verdict digest could not be recorded on the ledger."""

    def __init__(self, message: str, reason: ProofFailureReason = ProofFailureReason.REJECTED):
        super().__init__(message)
        self.reason = reason


class LedgerProvider(ABC):
    """Abstract interface for ledgers that record verdict digests.

    Implementations submit ``storeVerdict(digest, verdict)`` and block until
    the ledger reports inclusion or failure.
    """

    @abstractmethod
    async def submit(self, digest: bytes, verdict_label: str) -> str:
        """Record a verdict digest.

        Args:
            digest: 32-byte verdict hash
            verdict_label: TRUE, FALSE or UNVERIFIABLE

        Returns:
            Confirmed transaction id

        Raises:
            ProofSubmissionError: If the submission fails for any reason
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name of the ledger."""
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether signing credentials and the contract address are present."""
        pass
