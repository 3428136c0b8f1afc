"""Shared httpx plumbing for the JSON-over-HTTP oracle adapters."""

import logging
from typing import Any, Dict, Optional

import httpx

from ...domain.ports.oracle_provider import OracleDecodeError, OracleUnavailableError

logger = logging.getLogger(__name__)


class HttpOracleAdapter:
    """Owns an ``httpx.AsyncClient`` and maps failures onto oracle errors.

    Transport errors, timeouts and non-2xx answers become
    ``OracleUnavailableError``. A 2xx answer whose body is not JSON becomes
    ``OracleDecodeError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float,
        provider_name: str,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._name = provider_name
        self._headers = headers or {}
        self._client = client
        self._initialized = client is not None
        if client is not None:
            client.headers.update(self._headers)

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._headers,
            )
        self._initialized = True

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._initialized = False

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def is_available(self) -> bool:
        return self._initialized

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        if self._client is None:
            await self.initialize()

        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise OracleUnavailableError(self._name, f"request timed out: {e}")
        except httpx.HTTPStatusError as e:
            raise OracleUnavailableError(self._name, f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise OracleUnavailableError(self._name, f"request failed: {e}")

        try:
            return response.json()
        except ValueError as e:
            raise OracleDecodeError(self._name, f"invalid JSON body: {e}")
