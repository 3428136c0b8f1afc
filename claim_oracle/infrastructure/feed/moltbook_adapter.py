"""Moltbook implementation of the feed provider interface."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from ...domain.models.claim import FeedPost
from ...domain.ports.feed_provider import FeedProvider, FeedUnavailableError, NotificationError

logger = logging.getLogger(__name__)


class MoltbookConfig(BaseModel):
    """Configuration for Moltbook adapter."""

    api_key: Optional[str] = None
    base_url: str = "https://www.moltbook.com/api/v1"
    timeout: float = 10.0
    page_size: int = Field(default=25, description="Newest posts fetched per submolt")


def _post_items(body: Any) -> List[Any]:
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("posts", "data"):
            if isinstance(body.get(key), list):
                return body[key]
    return []


class MoltbookAdapter(FeedProvider):
    """Reads new posts from submolts and comments verdicts back."""

    def __init__(
        self,
        config: Optional[MoltbookConfig] = None,
        provider_name: str = "Moltbook",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or MoltbookConfig()
        self._name = provider_name
        self._client = client

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={"Authorization": f"Bearer {self._config.api_key or ''}"},
            )

    async def shutdown(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def provider_name(self) -> str:
        return self._name

    async def _fetch_category(self, category: str) -> List[FeedPost]:
        response = await self._client.get(
            "/posts",
            params={"sort": "new", "limit": self._config.page_size, "submolt": category},
        )
        response.raise_for_status()

        posts = []
        for item in _post_items(response.json()):
            try:
                post = FeedPost.model_validate(item)
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping malformed post in {category}: {e}")
                continue
            posts.append(post if post.submolt else post.model_copy(update={"submolt": category}))
        return posts

    async def fetch_posts(self, categories: List[str]) -> List[FeedPost]:
        if not self._config.api_key:
            raise FeedUnavailableError("MOLTBOOK_API_KEY not set")
        if self._client is None:
            await self.initialize()

        results = await asyncio.gather(
            *(self._fetch_category(category) for category in categories),
            return_exceptions=True,
        )

        seen: Dict[str, FeedPost] = {}
        failures = 0
        for category, result in zip(categories, results):
            if isinstance(result, Exception):
                failures += 1
                logger.warning(f"⚠️ Could not fetch m/{category}: {result}")
                continue
            logger.info(f"📥 m/{category}: {len(result)} posts")
            for post in result:
                seen.setdefault(post.id, post)

        if categories and failures == len(categories):
            raise FeedUnavailableError(f"All {failures} submolts failed")
        return list(seen.values())

    async def post_comment(self, post_id: str, content: str) -> Optional[str]:
        if not self._config.api_key:
            raise NotificationError("MOLTBOOK_API_KEY not set")
        if self._client is None:
            await self.initialize()

        try:
            response = await self._client.post(f"/posts/{post_id}/comments", json={"content": content})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(f"Moltbook comment error {e.response.status_code}: {e.response.text}")
        except httpx.HTTPError as e:
            raise NotificationError(f"Moltbook comment failed: {e}")

        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            comment_id = body.get("id") or (body.get("comment") or {}).get("id")
            return str(comment_id) if comment_id is not None else None
        return None
