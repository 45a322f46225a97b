"""
Interfaces of the two remote collaborators the engine talks to.

The store, runner and orchestrator only depend on these protocols; the
HTTP implementations in this package are one way to satisfy them and tests
substitute in-memory fakes.
"""

from typing import Protocol

from ..models import ExecutionMode, ExecutionResult, SessionOptions, StorageContainer
from ..types import ExecutionOptions


class ContentStoreClient(Protocol):
    """Blob storage organized in named containers."""

    async def list_containers(self) -> list[StorageContainer]: ...

    async def create(self, name: str, host: str) -> None: ...

    async def mkdir(self, container: str, path: str) -> None: ...

    async def upload(self, path: str, data: bytes, container: str) -> None: ...

    async def download(self, path: str, container: str) -> bytes:
        """Raises StorageNotFoundError if ``path`` does not exist."""
        ...


class ComputeSessionClient(Protocol):
    """Ephemeral compute sessions that execute code on request."""

    async def create_session(self, image: str, options: SessionOptions) -> str: ...

    async def execute(
        self,
        session_id: str,
        run_id: str | None,
        mode: ExecutionMode,
        code: str,
        options: ExecutionOptions,
    ) -> ExecutionResult: ...

    async def get_logs(self, session_id: str) -> str: ...

    async def destroy_session(self, session_id: str) -> None: ...
