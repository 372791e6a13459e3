"""HTTP fetch collaborator built on httpx."""

import logging
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import ValidationError

from fsp_collection.errors import TransportError
from fsp_collection.models import PageResult

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class HttpFetcher:
    """
    Fetch list pages from an HTTP API.

    Issues ``GET {endpoint}?{query}`` against ``base_url`` and parses the
    ``{data, total, total_pages}`` payload. Every failure is mapped to a
    TransportError carrying a user-facing message:

    - non-2xx: the response body, or ``HTTP <status>`` when it is empty
    - network failures: the httpx error message, or ``Network error``
    - a body that is not JSON or not a list page: ``Invalid response body``

    A 401 from any endpoint outside ``/auth/`` also calls ``on_unauthorized``
    so the application can send the user to its login surface.
    """

    def __init__(
        self,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
        on_unauthorized: Optional[Callable[[], None]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize HttpFetcher.

        Args:
            base_url: Prefix of every endpoint
            headers: Headers sent with every request, merged over the JSON defaults
            timeout: Request timeout in seconds
            on_unauthorized: Called when a request is rejected with HTTP 401
            client: Pre-built client (e.g. with a custom transport); base_url,
                headers and timeout are then taken from it
        """
        self.on_unauthorized = on_unauthorized
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url,
                headers={**DEFAULT_HEADERS, **(headers or {})},
                timeout=timeout,
            )
        self.client = client

    async def fetch(self, endpoint: str, query_string: str) -> PageResult[Any]:
        """
        Fetch one page.

        Args:
            endpoint: Endpoint path, relative to the base URL
            query_string: Serialized query, without the leading ``?``

        Returns:
            PageResult: Parsed page

        Raises:
            TransportError: On network failure, non-2xx status or unparsable body
        """
        url = f"{endpoint}?{query_string}" if query_string else endpoint
        logger.debug("GET %s", url)
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(str(e) or "Network error") from e

        if not response.is_success:
            self._handle_error_status(endpoint, response)

        try:
            return PageResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError("Invalid response body", response.status_code) from e

    def _handle_error_status(self, endpoint: str, response: httpx.Response) -> None:
        status_code = response.status_code
        logger.warning("GET %s returned HTTP %d", endpoint, status_code)
        if (
            status_code == httpx.codes.UNAUTHORIZED
            and self.on_unauthorized is not None
            and "/auth/" not in endpoint
        ):
            self.on_unauthorized()
        raise TransportError(response.text or f"HTTP {status_code}", status_code)

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
