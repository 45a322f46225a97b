"""
Component Runner — runs one pipeline component in a fresh compute session.

States: PREPARING -> LAUNCHING -> EXECUTING -> FINALIZING -> COMPLETED,
with any storage or provider error leading to FAILED. A session that was
created is always destroyed, whatever the outcome.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from vfpipe.exceptions import (
    ComponentRunError,
    ExecutionBudgetExceededError,
    StorageNotFoundError,
    VfpipeError,
)
from vfpipe.models import (
    ComponentRunResult,
    ConsoleEntry,
    ConsoleStream,
    ExecutionMode,
    ExecutionSession,
    PipelineComponent,
    PipelineDefinition,
    RunState,
    SessionOptions,
)
from vfpipe.settings import Settings, settings as default_settings
from vfpipe.utils.logger import logger

if TYPE_CHECKING:
    from vfpipe.clients.protocols import ComputeSessionClient

    from .store import PipelineStore


class ComponentRunner:
    """Drives a single component from source code to a logged run.

    Args:
        store: Pipeline store used for code, logs and the component list.
        compute: Compute session client.
        config: Settings (placement defaults, file names).
        max_polls: Optional limit on execute polls per run.
        deadline: Optional limit in seconds on the whole execution phase.
    """

    def __init__(
        self,
        store: PipelineStore,
        compute: ComputeSessionClient,
        config: Settings | None = None,
        max_polls: int | None = None,
        deadline: float | None = None,
    ):
        self.store = store
        self.compute = compute
        self.config = config or default_settings
        self.max_polls = max_polls
        self.deadline = deadline

    async def run(
        self,
        pipeline_id: str,
        definition: PipelineDefinition,
        components: list[PipelineComponent],
        index: int,
    ) -> ComponentRunResult:
        """Run ``components[index]`` and persist its completion.

        Dependency checks are the caller's job. On success the component is
        marked executed in ``components`` and the whole list is saved; on
        failure nothing about the list changes.

        Args:
            pipeline_id: Pipeline (container) id.
            definition: Pipeline definition providing image and placement.
            components: Latest ordered component list.
            index: Position of the component to run.

        Returns:
            COMPLETED or FAILED result. Storage and provider errors are
            reported through the result, not raised.
        """
        component = components[index]
        state = RunState.PREPARING
        session: ExecutionSession | None = None
        destroyed = False
        logger.info(f"Running component {index} ('{component.path}') of pipeline '{pipeline_id}'")

        try:
            code = await self._prepare(pipeline_id, component)

            state = RunState.LAUNCHING
            session_id = await self.compute.create_session(
                definition.image, self._session_options(pipeline_id, definition, component)
            )
            session = ExecutionSession(session_id=session_id)
            logger.debug(f"Created session {session_id} with image {definition.image}")

            state = RunState.EXECUTING
            await self._execute(session, code, component)

            state = RunState.FINALIZING
            try:
                logs = await self.compute.get_logs(session.session_id)
                await self.store.save_log(pipeline_id, component, logs)
            finally:
                destroyed = True
                await self._destroy(session)

            await self._mark_executed(pipeline_id, components, index)

        except VfpipeError as e:
            if session is not None and not destroyed:
                await self._destroy(session)
            error = ComponentRunError(pipeline_id, index, component.path, f"{state.value}: {e}")
            error.__cause__ = e
            logger.error(str(error))
            return ComponentRunResult(
                pipeline_id=pipeline_id,
                index=index,
                path=component.path,
                state=RunState.FAILED,
                error=error,
                console=list(session.console) if session else [],
                polls=session.polls if session else 0,
            )
        except (Exception, asyncio.CancelledError) as e:
            if session is not None and not destroyed:
                logger.warning(
                    f"Run of '{component.path}' interrupted by {type(e).__name__}, "
                    f"destroying {session.session_id}"
                )
                await self._destroy(session)
            raise

        logger.info(
            f"Component {index} ('{component.path}') of pipeline '{pipeline_id}' "
            f"executed in {session.polls} poll(s)"
        )
        return ComponentRunResult(
            pipeline_id=pipeline_id,
            index=index,
            path=component.path,
            state=RunState.COMPLETED,
            console=list(session.console),
            polls=session.polls,
        )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _prepare(self, pipeline_id: str, component: PipelineComponent) -> str:
        """Make sure the component folder and code file exist; return the code."""
        await self.store.ensure_component_folder(pipeline_id, component)
        try:
            return await self.store.load_code(pipeline_id, component)
        except StorageNotFoundError:
            logger.info(f"No code for '{component.path}' yet, uploading an empty file")
            await self.store.save_code(pipeline_id, component, "")
            return ""

    async def _execute(
        self, session: ExecutionSession, code: str, component: PipelineComponent
    ) -> None:
        """Poll until the provider reports ``finished``.

        Each poll waits for the previous response, whose ``run_id`` and
        ``options`` are sent back unchanged.
        """
        try:
            async with asyncio.timeout(self.deadline):
                while not session.finished:
                    if self.max_polls is not None and session.polls >= self.max_polls:
                        raise ExecutionBudgetExceededError(
                            f"'{component.path}' did not finish within {self.max_polls} poll(s)"
                        )
                    result = await self.compute.execute(
                        session.session_id,
                        session.run_id,
                        session.mode,
                        code if session.mode == ExecutionMode.INITIAL else "",
                        session.options,
                    )
                    session.apply(result)
                    self._log_console(component, result.console)
        except TimeoutError as e:
            raise ExecutionBudgetExceededError(
                f"'{component.path}' did not finish within {self.deadline} second(s)"
            ) from e

    async def _mark_executed(
        self, pipeline_id: str, components: list[PipelineComponent], index: int
    ) -> None:
        updated = list(components)
        updated[index] = components[index].model_copy(update={"executed": True})
        await self.store.save_components(pipeline_id, updated)
        components[index] = updated[index]

    async def _destroy(self, session: ExecutionSession) -> None:
        """Destroy a session; failures are only logged."""
        try:
            await self.compute.destroy_session(session.session_id)
        except VfpipeError as e:
            logger.warning(f"Failed to destroy session {session.session_id}: {e}")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _session_options(
        self, pipeline_id: str, definition: PipelineDefinition, component: PipelineComponent
    ) -> SessionOptions:
        resources = component.resources
        return SessionOptions(
            domain=self.config.domain_name,
            group=self.config.group_name,
            scaling_group=definition.scaling_group,
            mounts=[pipeline_id],
            cpu=resources.cpu,
            mem=resources.mem,
            gpu=resources.gpu,
            max_wait_seconds=self.config.max_wait_seconds,
        )

    @staticmethod
    def _log_console(component: PipelineComponent, entries: list[ConsoleEntry]) -> None:
        for entry in entries:
            if entry.stream == ConsoleStream.STDERR:
                logger.warning(f"[{component.path}] {entry.text.rstrip()}")
            else:
                logger.info(f"[{component.path}] {entry.text.rstrip()}")
