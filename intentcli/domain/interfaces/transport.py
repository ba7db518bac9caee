"""Interface for the HTTP transport primitive used by the request core."""

import abc
from typing import Any, Optional

from ..models.common import Endpoint, RequestParams


class HttpTransport(abc.ABC):
    """Abstract Base Class for issuing GET requests that return JSON."""

    @abc.abstractmethod
    async def get_json(self, endpoint: Endpoint, params: Optional[RequestParams] = None) -> Any:
        """Performs a GET request and decodes the JSON body.

        Raises:
            Exception: On connection errors or non-2xx statuses.
        """
        pass

    @abc.abstractmethod
    async def close(self) -> None:
        """Releases any pooled connections."""
        pass
