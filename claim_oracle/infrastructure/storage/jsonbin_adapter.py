"""JSONBin implementation of the blob store used to mirror verdicts."""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from ...domain.ports.verdict_store import BlobStore, StorageError

logger = logging.getLogger(__name__)


class JsonBinConfig(BaseModel):
    """Configuration for JSONBin adapter."""

    bin_id: Optional[str] = None
    api_key: Optional[str] = None
    base_url: str = "https://api.jsonbin.io/v3/b"
    timeout: float = 10.0


class JsonBinAdapter(BlobStore):
    """Whole-document reads and writes against one JSONBin bin."""

    def __init__(self, config: Optional[JsonBinConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self._config = config or JsonBinConfig()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._config.bin_id and self._config.api_key)

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={"X-Master-Key": self._config.api_key or ""},
            )
        return self._client

    async def shutdown(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def read_blob(self) -> Optional[Any]:
        if not self.is_configured:
            return None
        try:
            response = await self._http().get(f"/{self._config.bin_id}/latest")
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"JSONBin read failed: {e}")
        return body.get("record") if isinstance(body, dict) else None

    async def write_blob(self, data: Any) -> bool:
        if not self.is_configured:
            return False
        try:
            response = await self._http().put(f"/{self._config.bin_id}", json=data)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"JSONBin write failed: {e}")
        return True
