"""Shared async HTTP plumbing for the provider REST clients."""

from typing import Any, Self

import httpx

from ..exceptions import VfpipeError
from ..settings import settings
from ..utils.logger import logger


class ProviderHTTPClient:
    """Base for clients talking to the provider's REST API.

    Subclasses set ``error_class`` (raised for HTTP error statuses) and
    ``connection_error_class`` (raised when the request never completes).

    Args:
        base_url: API endpoint (defaults to ``settings.api_endpoint``).
        timeout: Request timeout in seconds (defaults to ``settings.api_timeout``).
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
        log_requests: Log every request/response at DEBUG level.
    """

    error_class: type[VfpipeError] = VfpipeError
    connection_error_class: type[VfpipeError] = VfpipeError

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        log_requests: bool = False,
    ) -> None:
        self.base_url = (base_url or settings.api_endpoint).rstrip("/")
        self.log_requests = log_requests
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.api_timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    def _error_for(self, response: httpx.Response) -> VfpipeError:
        """Build the exception for an HTTP error status."""
        return self.error_class(
            f"{response.request.method} {response.request.url.path} failed: "
            f"{response.status_code} - {response.text}"
        )

    def _json(self, response: httpx.Response) -> Any:
        """Decode a JSON response body.

        Raises:
            error_class: If the body is not valid JSON.
        """
        try:
            return response.json()
        except ValueError as e:
            raise self.error_class(
                f"{response.request.method} {response.request.url.path} "
                f"returned a non-JSON body: {response.text[:200]!r}"
            ) from e

    def _json_object(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a JSON response body that must be an object."""
        data = self._json(response)
        if not isinstance(data, dict):
            raise self.error_class(
                f"{response.request.method} {response.request.url.path} "
                f"returned {type(data).__name__}, expected a JSON object"
            )
        return data

    async def _request(
        self,
        method: str,
        endpoint: str,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request, translating failures into domain errors.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Path relative to the base URL
            raise_for_status: Raise ``error_class`` on HTTP error statuses
            **kwargs: Additional arguments passed to httpx request

        Returns:
            HTTP response
        """
        if self.log_requests:
            logger.debug(f"API Request: {method} {endpoint}")

        try:
            response = await self.client.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as e:
            raise self.connection_error_class(
                f"Request to {self.base_url}{endpoint} timed out"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during request: {e}")
            raise self.connection_error_class(f"Cannot reach {self.base_url}: {e!s}") from e

        if self.log_requests:
            logger.debug(f"API Response: {response.status_code}")

        if raise_for_status and response.status_code >= 400:
            raise self._error_for(response)
        return response
