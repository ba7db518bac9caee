"""HttpTransport implementation backed by httpx."""

import logging
from typing import Any, Optional

import httpx

from intentcli.domain.interfaces.transport import HttpTransport
from intentcli.domain.models.common import Endpoint, RequestParams

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "intentcli/0.1"


class HttpxTransport(HttpTransport):
    """Plain GET + JSON transport. Timeouts are enforced by the caller."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": DEFAULT_USER_AGENT},
            follow_redirects=True,
            timeout=None,
        )

    async def get_json(self, endpoint: Endpoint, params: Optional[RequestParams] = None) -> Any:
        logger.debug(f"GET {endpoint} params={params}")
        response = await self._client.get(endpoint, params=params)
        # Non-2xx raises httpx.HTTPStatusError
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
