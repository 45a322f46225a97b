"""
Pipeline Orchestrator — runs a pipeline's components in order.

Only one run (full or single component) may be active per pipeline; a
second attempt is rejected with PipelineBusyError rather than queued.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from vfpipe.exceptions import (
    ComponentRunError,
    DependencyViolationError,
    PipelineBusyError,
    StorageError,
)
from vfpipe.models import ComponentRunResult, PipelineRunReport, RunState
from vfpipe.settings import Settings, settings as default_settings
from vfpipe.utils.logger import logger

from .gate import ensure_can_run

if TYPE_CHECKING:
    from .runner import ComponentRunner
    from .store import PipelineStore


class PipelineOrchestrator:
    """Runs components through the dependency gate and the component runner.

    Example:
        orchestrator = PipelineOrchestrator(store, runner)
        report = await orchestrator.run_pipeline("pipeline-etl-1a2b3c4d")
        if not report.ok:
            for result in report.failed:
                print(result.error)

    Args:
        store: Pipeline store.
        runner: Component runner.
        config: Settings (``abort_on_violation`` default).
    """

    def __init__(
        self,
        store: PipelineStore,
        runner: ComponentRunner,
        config: Settings | None = None,
    ):
        self.store = store
        self.runner = runner
        self.config = config or default_settings
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, pipeline_id: str) -> asyncio.Lock:
        if pipeline_id not in self._locks:
            self._locks[pipeline_id] = asyncio.Lock()
        return self._locks[pipeline_id]

    def is_running(self, pipeline_id: str) -> bool:
        """Whether a run of ``pipeline_id`` is in progress."""
        lock = self._locks.get(pipeline_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def _run_token(self, pipeline_id: str) -> AsyncIterator[None]:
        """Hold the pipeline's run lock, failing fast if it is taken."""
        lock = self._get_lock(pipeline_id)
        if lock.locked():
            raise PipelineBusyError(pipeline_id)
        try:
            async with lock:
                yield
        finally:
            # Nobody waits on the lock, so an unlocked entry can go
            if not lock.locked():
                self._locks.pop(pipeline_id, None)

    async def run_pipeline(
        self, pipeline_id: str, abort_on_violation: bool | None = None
    ) -> PipelineRunReport:
        """Run every component of a pipeline in order.

        The component list is re-read before each step so the previous
        step's ``executed`` flag is seen by the gate. A denied or failed
        step is recorded and the loop moves on to the next index, unless
        ``abort_on_violation`` stops it at the first denial.

        Args:
            pipeline_id: Pipeline (container) id.
            abort_on_violation: Stop at the first dependency violation
                (defaults to ``settings.abort_on_violation``).

        Returns:
            Report with one result per attempted component.

        Raises:
            PipelineBusyError: If the pipeline is already running.
            PipelineNotFoundError: If the pipeline has no definition.
            StorageError: If the pipeline documents cannot be read.
        """
        if abort_on_violation is None:
            abort_on_violation = self.config.abort_on_violation

        async with self._run_token(pipeline_id):
            definition = await self.store.load_definition(pipeline_id)
            initial = await self.store.load_components(pipeline_id)
            count = len(initial)
            report = PipelineRunReport(pipeline_id=pipeline_id)
            logger.info(f"Starting pipeline '{pipeline_id}' with {count} component(s)")

            for index in range(count):
                try:
                    components = await self.store.load_components(pipeline_id)
                except StorageError as e:
                    path = initial[index].path
                    error = ComponentRunError(
                        pipeline_id, index, path, f"reloading component list: {e}"
                    )
                    error.__cause__ = e
                    logger.error(str(error))
                    report.results.append(
                        ComponentRunResult(
                            pipeline_id=pipeline_id,
                            index=index,
                            path=path,
                            state=RunState.FAILED,
                            error=error,
                        )
                    )
                    continue

                if index >= len(components):
                    logger.warning(
                        f"Pipeline '{pipeline_id}' shrank to {len(components)} component(s) "
                        f"during the run, stopping"
                    )
                    break

                try:
                    ensure_can_run(components, index)
                except DependencyViolationError as e:
                    logger.warning(f"Pipeline '{pipeline_id}': {e}")
                    report.results.append(
                        ComponentRunResult(
                            pipeline_id=pipeline_id,
                            index=index,
                            path=components[index].path,
                            state=RunState.DENIED,
                            error=e,
                        )
                    )
                    if abort_on_violation:
                        report.aborted = True
                        break
                    continue

                report.results.append(
                    await self.runner.run(pipeline_id, definition, components, index)
                )

        logger.info(
            f"Pipeline '{pipeline_id}' done: {len(report.succeeded)} executed, "
            f"{len(report.failed)} failed, {len(report.denied)} denied"
            + (" (aborted)" if report.aborted else "")
        )
        return report

    async def run_single_component(self, pipeline_id: str, index: int) -> ComponentRunResult:
        """Run one component, as the interactive "run this step" action does.

        Raises:
            PipelineBusyError: If the pipeline is already running.
            ValidationError: If ``index`` is out of range.
            DependencyViolationError: If an earlier component is not executed.
        """
        async with self._run_token(pipeline_id):
            definition = await self.store.load_definition(pipeline_id)
            components = await self.store.load_components(pipeline_id)
            ensure_can_run(components, index)
            return await self.runner.run(pipeline_id, definition, components, index)
