"""Async HTTP client for the provider's virtual-folder storage."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import StorageError, StorageNotFoundError
from ..models import StorageContainer
from .http import ProviderHTTPClient


class HttpContentStoreClient(ProviderHTTPClient):
    """Content store backed by the provider's ``/folders`` API.

    Every pipeline lives in its own folder; documents, code and logs are
    files inside it.
    """

    error_class = StorageError
    connection_error_class = StorageError

    async def list_containers(self) -> list[StorageContainer]:
        """List all folders visible to the current user."""
        response = await self._request("GET", "/folders")
        payload: Any = self._json(response)
        if isinstance(payload, dict):
            payload = payload.get("items", [])
        if not isinstance(payload, list):
            raise StorageError(f"Unexpected folder listing: {payload!r}")
        try:
            return [StorageContainer.model_validate(item) for item in payload]
        except PydanticValidationError as e:
            raise StorageError(f"Malformed folder listing: {e}") from e

    async def create(self, name: str, host: str) -> None:
        await self._request("POST", "/folders", json={"name": name, "host": host})

    async def mkdir(self, container: str, path: str) -> None:
        await self._request("POST", f"/folders/{container}/mkdir", json={"path": path})

    async def upload(self, path: str, data: bytes, container: str) -> None:
        await self._request(
            "POST",
            f"/folders/{container}/upload",
            files={"src": (path, data, "application/octet-stream")},
        )

    async def download(self, path: str, container: str) -> bytes:
        """Download a file's content.

        Raises:
            StorageNotFoundError: If the file does not exist.
            StorageError: On any other failure.
        """
        response = await self._request(
            "GET",
            f"/folders/{container}/download",
            raise_for_status=False,
            params={"path": path},
        )
        if response.status_code == 404:
            raise StorageNotFoundError(path, container)
        if response.status_code >= 400:
            raise self._error_for(response)
        return response.content
