"""Port interface for the feed that supplies claims and receives verdicts."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.claim import FeedPost


class FeedUnavailableError(Exception):
    """Raised when the feed cannot be read at all."""


class NotificationError(Exception):
    """Raised when a verdict could not be posted back to the feed."""


class FeedProvider(ABC):
    """Abstract interface for social feeds carrying claims."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the feed client."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Clean up resources."""
        pass

    @abstractmethod
    async def fetch_posts(self, categories: List[str]) -> List[FeedPost]:
        """Fetch recent posts from the given categories.

        Categories are fetched concurrently; a failing category is skipped.
        Posts are returned in feed order, de-duplicated by id.

        Raises:
            FeedUnavailableError: If the feed cannot be queried at all
        """
        pass

    @abstractmethod
    async def post_comment(self, post_id: str, content: str) -> Optional[str]:
        """Publish a comment on a post.

        Returns:
            The comment id, when the feed returns one

        Raises:
            NotificationError: If the comment could not be posted
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name of the feed."""
        pass
