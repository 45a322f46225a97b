"""Async HTTP client for the provider's compute sessions."""

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ProviderConnectionError, ProviderError
from ..models import ConsoleEntry, ExecutionMode, ExecutionResult, SessionOptions
from ..types import ExecutionOptions
from ..utils.logger import logger
from .http import ProviderHTTPClient

# The provider calls the first submission of a run a "query"
_WIRE_MODES = {ExecutionMode.INITIAL: "query", ExecutionMode.CONTINUE: "continue"}


class HttpComputeSessionClient(ProviderHTTPClient):
    """Compute sessions backed by the provider's ``/session`` API.

    Sends code to ``POST /session/{id}`` and returns the parsed poll result.
    """

    error_class = ProviderError
    connection_error_class = ProviderConnectionError

    async def create_session(self, image: str, options: SessionOptions) -> str:
        """Start a session and return its id.

        Args:
            image: ``environment:version`` image reference.
            options: Placement and resources.

        Returns:
            The new session id.
        """
        body: dict[str, Any] = {
            "image": image,
            "domain": options.domain,
            "group": options.group,
            "scalingGroup": options.scaling_group,
            "config": {
                "mounts": options.mounts,
                "resources": {
                    "cpu": options.cpu,
                    "mem": f"{options.mem}g",
                    "fgpu": options.gpu,
                },
            },
        }
        if options.max_wait_seconds is not None:
            body["maxWaitSeconds"] = options.max_wait_seconds

        response = await self._request("POST", "/session", json=body)
        data = self._json_object(response)
        session_id = data.get("sessionId") or data.get("kernelId")
        if not session_id:
            raise ProviderError(f"Session creation returned no session id: {data}")
        return str(session_id)

    async def execute(
        self,
        session_id: str,
        run_id: str | None,
        mode: ExecutionMode,
        code: str,
        options: ExecutionOptions,
    ) -> ExecutionResult:
        """Submit (or continue) code execution and return one poll result."""
        body = {
            "mode": _WIRE_MODES[mode],
            "code": code,
            "runId": run_id,
            "options": options,
        }
        response = await self._request("POST", f"/session/{session_id}", json=body)
        result = self._result(response, session_id)
        if "status" not in result:
            raise ProviderError(f"Malformed execution result from session {session_id}")
        try:
            return ExecutionResult(
                status=result["status"],
                run_id=result.get("runId"),
                options=result.get("options") or {},
                console=self._parse_console(result.get("console") or []),
            )
        except PydanticValidationError as e:
            raise ProviderError(
                f"Malformed execution result from session {session_id}: {e}"
            ) from e

    async def get_logs(self, session_id: str) -> str:
        response = await self._request("GET", f"/session/{session_id}/logs")
        result = self._result(response, session_id)
        return str(result.get("logs", ""))

    async def destroy_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/session/{session_id}")

    def _result(self, response: httpx.Response, session_id: str) -> dict[str, Any]:
        """Return the ``result`` object of a session response."""
        result = self._json_object(response).get("result") or {}
        if not isinstance(result, dict):
            raise ProviderError(f"Malformed result from session {session_id}: {result!r}")
        return result

    @staticmethod
    def _parse_console(items: list[Any]) -> list[ConsoleEntry]:
        """Keep stdout/stderr ``[stream, text]`` pairs, skip other item kinds."""
        if not isinstance(items, list):
            raise ProviderError(f"Malformed console output: {items!r}")
        entries: list[ConsoleEntry] = []
        for item in items:
            if not isinstance(item, list | tuple) or len(item) != 2:
                continue
            stream, text = item
            if stream in ("stdout", "stderr"):
                entries.append(ConsoleEntry(stream=stream, text=str(text)))
            else:
                logger.debug(f"Ignoring console item of kind '{stream}'")
        return entries
