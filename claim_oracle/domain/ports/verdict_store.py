"""Port interfaces for verdict and dedup-state persistence."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional


class StorageError(Exception):
    """Raised when persisted state cannot be read or written."""


class StateStore(ABC):
    """Process-local store for the verdict log and the processed-claim set."""

    @abstractmethod
    def load_verdicts(self) -> List[dict]:
        """Load the verdict log, newest first. Empty when nothing is stored."""
        pass

    @abstractmethod
    def save_verdicts(self, verdicts: List[dict]) -> None:
        """Replace the stored verdict log."""
        pass

    @abstractmethod
    def load_processed_ids(self) -> List[str]:
        """Load the ids of claims already handled."""
        pass

    @abstractmethod
    def save_processed_ids(self, claim_ids: List[str]) -> None:
        """Replace the stored processed-id list."""
        pass


class BlobStore(ABC):
    """Opaque last-writer-wins blob used to mirror the verdict log."""

    @abstractmethod
    async def read_blob(self) -> Optional[Any]:
        """Read the whole blob. None when not configured or unavailable."""
        pass

    @abstractmethod
    async def write_blob(self, data: Any) -> bool:
        """Overwrite the blob.

        Returns:
            False when the store is not configured

        Raises:
            StorageError: If the write was attempted and failed
        """
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the store are present."""
        pass
