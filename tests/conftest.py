"""Shared fixtures: in-memory content store and scripted compute provider."""

from collections.abc import Generator
from typing import Any

import pytest

from vfpipe.exceptions import StorageNotFoundError
from vfpipe.models import (
    ConsoleEntry,
    ExecutionMode,
    ExecutionResult,
    PipelineComponent,
    PipelineDefinition,
    SessionOptions,
    StorageContainer,
)
from vfpipe.services.pipeline import (
    ComponentRunner,
    PipelineManager,
    PipelineOrchestrator,
    PipelineStore,
)
from vfpipe.settings import Settings
from vfpipe.utils.logger import logger

PIPELINE_ID = "pipeline-test-0badc0de"


class FakeContentStore:
    """In-memory content store keyed by (container, path)."""

    def __init__(self) -> None:
        self.containers: dict[str, StorageContainer] = {}
        self.blobs: dict[tuple[str, str], bytes] = {}
        self.folders: set[tuple[str, str]] = set()
        self.uploads: list[tuple[str, str]] = []
        self.downloads: list[tuple[str, str]] = []
        # path -> exception raised instead of performing the operation
        self.download_errors: dict[str, Exception] = {}
        self.upload_errors: dict[str, Exception] = {}

    async def list_containers(self) -> list[StorageContainer]:
        return list(self.containers.values())

    async def create(self, name: str, host: str) -> None:
        self.containers[name] = StorageContainer(name=name, id=str(len(self.containers)), host=host)

    async def mkdir(self, container: str, path: str) -> None:
        self.folders.add((container, path))

    async def upload(self, path: str, data: bytes, container: str) -> None:
        if path in self.upload_errors:
            raise self.upload_errors[path]
        self.uploads.append((container, path))
        self.blobs[(container, path)] = data

    async def download(self, path: str, container: str) -> bytes:
        self.downloads.append((container, path))
        if path in self.download_errors:
            raise self.download_errors[path]
        try:
            return self.blobs[(container, path)]
        except KeyError:
            raise StorageNotFoundError(path, container) from None

    def text(self, container: str, path: str) -> str:
        return self.blobs[(container, path)].decode("utf-8")


class FakeComputeClient:
    """Compute provider that replays a scripted sequence of poll results."""

    def __init__(self, statuses: list[str] | None = None) -> None:
        self.statuses = list(statuses or ["finished"])
        self.logs = "run log\n"
        self.sessions: list[tuple[str, SessionOptions]] = []
        self.execute_calls: list[dict[str, Any]] = []
        self.destroyed: list[str] = []
        self.create_error: Exception | None = None
        self.execute_error: Exception | None = None
        self.logs_error: Exception | None = None
        self.destroy_error: Exception | None = None

    async def create_session(self, image: str, options: SessionOptions) -> str:
        if self.create_error:
            raise self.create_error
        session_id = f"sess-{len(self.sessions) + 1}"
        self.sessions.append((image, options))
        return session_id

    async def execute(
        self,
        session_id: str,
        run_id: str | None,
        mode: ExecutionMode,
        code: str,
        options: dict[str, Any],
    ) -> ExecutionResult:
        if self.execute_error:
            raise self.execute_error
        poll = len(self.execute_calls)
        self.execute_calls.append(
            {
                "session_id": session_id,
                "run_id": run_id,
                "mode": mode,
                "code": code,
                "options": dict(options),
            }
        )
        status = self.statuses[min(poll, len(self.statuses) - 1)]
        return ExecutionResult(
            status=status,
            run_id=f"run-{poll + 1}",
            options={"poll": poll + 1},
            console=[ConsoleEntry(stream="stdout", text=f"poll {poll + 1}\n")],
        )

    async def get_logs(self, session_id: str) -> str:
        if self.logs_error:
            raise self.logs_error
        return self.logs

    async def destroy_session(self, session_id: str) -> None:
        if self.destroy_error:
            raise self.destroy_error
        self.destroyed.append(session_id)


def make_components(count: int, executed: int = 0) -> list[PipelineComponent]:
    """Create ``count`` components, the first ``executed`` of them executed."""
    return [
        PipelineComponent(
            title=f"Step {i + 1}",
            path=f"{i + 1:03d}-step",
            cpu=1,
            mem=1.0,
            executed=i < executed,
        )
        for i in range(count)
    ]


@pytest.fixture
def test_settings() -> Settings:
    return Settings(domain_name="test-domain", group_name="test-group", max_wait_seconds=5)


@pytest.fixture
def definition() -> PipelineDefinition:
    return PipelineDefinition(
        title="Test pipeline",
        description="",
        environment="cr.example.com/stable/python",
        version="3.12-ubuntu22.04",
        scaling_group="default",
        storage_host="local:volume1",
    )


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def compute() -> FakeComputeClient:
    return FakeComputeClient()


@pytest.fixture
def store(content_store: FakeContentStore, test_settings: Settings) -> PipelineStore:
    return PipelineStore(content_store, test_settings)


@pytest.fixture
def runner(
    store: PipelineStore, compute: FakeComputeClient, test_settings: Settings
) -> ComponentRunner:
    return ComponentRunner(store, compute, test_settings)


@pytest.fixture
def orchestrator(
    store: PipelineStore, runner: ComponentRunner, test_settings: Settings
) -> PipelineOrchestrator:
    return PipelineOrchestrator(store, runner, test_settings)


@pytest.fixture
def manager(
    store: PipelineStore, content_store: FakeContentStore, test_settings: Settings
) -> PipelineManager:
    return PipelineManager(store, content_store, test_settings)


@pytest.fixture
def seed(store: PipelineStore, definition: PipelineDefinition):
    """Write a definition and component list for PIPELINE_ID."""

    async def _seed(components: list[PipelineComponent]) -> None:
        await store.save_definition(PIPELINE_ID, definition)
        await store.save_components(PIPELINE_ID, components)

    return _seed


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)
