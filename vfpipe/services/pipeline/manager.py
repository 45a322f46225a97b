"""
Pipeline Manager — editing operations on pipelines and their components.

Each mutation reads the full component list, changes it and writes it back.
Renaming a component's path does not move its code or logs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from vfpipe.exceptions import StorageNotFoundError, ValidationError, VfpipeError
from vfpipe.models import PipelineComponent, PipelineDefinition, PipelineSummary
from vfpipe.settings import Settings, settings as default_settings
from vfpipe.utils.logger import logger
from vfpipe.utils.validation import slugify, validate_model

if TYPE_CHECKING:
    from vfpipe.clients.protocols import ContentStoreClient

    from .store import PipelineStore


class PipelineManager:
    """Create pipelines and edit their component lists and code.

    Args:
        store: Pipeline store.
        content_store: Content store client (container listing and creation).
        config: Settings (pipeline container prefix).
    """

    def __init__(
        self,
        store: PipelineStore,
        content_store: ContentStoreClient,
        config: Settings | None = None,
    ):
        self.store = store
        self.content_store = content_store
        self.config = config or default_settings

    # ==================== Pipelines ====================

    async def list_pipelines(self) -> list[PipelineSummary]:
        """List pipeline containers with their definitions.

        Containers whose definition cannot be loaded are skipped.
        """
        pipelines: list[PipelineSummary] = []
        for container in await self.content_store.list_containers():
            if not container.name.startswith(self.config.pipeline_prefix):
                continue
            try:
                definition = await self.store.load_definition(container.name)
            except VfpipeError as e:
                logger.warning(f"Skipping pipeline '{container.name}': {e}")
                continue
            pipelines.append(
                PipelineSummary(
                    pipeline_id=container.name, container=container, definition=definition
                )
            )
        return pipelines

    async def create_pipeline(self, definition: PipelineDefinition | dict[str, Any]) -> str:
        """Create a pipeline container with its definition and no components.

        Returns:
            The new pipeline id, ``pipeline-<slug>-<8 hex chars>``.
        """
        definition = validate_model(PipelineDefinition, definition)
        slug = slugify(definition.title) or "untitled"
        pipeline_id = f"{self.config.pipeline_prefix}{slug}-{uuid4().hex[:8]}"

        await self.content_store.create(pipeline_id, definition.storage_host)
        await self.store.save_definition(pipeline_id, definition)
        await self.store.save_components(pipeline_id, [])
        logger.info(f"Created pipeline '{pipeline_id}' on host '{definition.storage_host}'")
        return pipeline_id

    async def update_definition(
        self, pipeline_id: str, definition: PipelineDefinition | dict[str, Any]
    ) -> PipelineDefinition:
        """Replace a pipeline's definition."""
        definition = validate_model(PipelineDefinition, definition)
        await self.store.load_definition(pipeline_id)
        await self.store.save_definition(pipeline_id, definition)
        return definition

    # ==================== Components ====================

    async def add_component(
        self, pipeline_id: str, component: PipelineComponent | dict[str, Any]
    ) -> list[PipelineComponent]:
        """Append a component to the end of the pipeline."""
        new = self._normalize(component)
        components = await self.store.load_components(pipeline_id)
        self._check_unique_path(components, new.path)
        components.append(new)
        await self.store.save_components(pipeline_id, components)
        logger.info(f"Added component '{new.path}' to pipeline '{pipeline_id}'")
        return components

    async def update_component(
        self, pipeline_id: str, index: int, component: PipelineComponent | dict[str, Any]
    ) -> list[PipelineComponent]:
        """Replace the component at ``index``; the replacement is not executed."""
        new = self._normalize(component)
        components = await self.store.load_components(pipeline_id)
        self._check_index(components, index)
        self._check_unique_path(components, new.path, ignore=index)
        if components[index].path != new.path:
            logger.warning(
                f"Component {index} of '{pipeline_id}' renamed from '{components[index].path}' "
                f"to '{new.path}'; existing code and logs stay under the old path"
            )
        components[index] = new
        await self.store.save_components(pipeline_id, components)
        return components

    async def delete_component(self, pipeline_id: str, index: int) -> list[PipelineComponent]:
        """Remove the component at ``index``. Its blobs are left in place."""
        components = await self.store.load_components(pipeline_id)
        self._check_index(components, index)
        removed = components.pop(index)
        await self.store.save_components(pipeline_id, components)
        logger.info(f"Deleted component '{removed.path}' from pipeline '{pipeline_id}'")
        return components

    async def move_component(
        self, pipeline_id: str, source: int, destination: int
    ) -> list[PipelineComponent]:
        """Move a component to another position."""
        components = await self.store.load_components(pipeline_id)
        self._check_index(components, source)
        self._check_index(components, destination)
        components.insert(destination, components.pop(source))
        await self.store.save_components(pipeline_id, components)
        return components

    # ==================== Code ====================

    async def load_code(self, pipeline_id: str, index: int) -> str:
        """Return a component's code, creating an empty file if there is none."""
        components = await self.store.load_components(pipeline_id)
        self._check_index(components, index)
        component = components[index]
        await self.store.ensure_component_folder(pipeline_id, component)
        try:
            return await self.store.load_code(pipeline_id, component)
        except StorageNotFoundError:
            await self.store.save_code(pipeline_id, component, "")
            return ""

    async def save_code(self, pipeline_id: str, index: int, code: str) -> PipelineComponent:
        """Upload new code for a component and mark it as not executed."""
        components = await self.store.load_components(pipeline_id)
        self._check_index(components, index)
        await self.store.save_code(pipeline_id, components[index], code)
        components[index] = components[index].model_copy(update={"executed": False})
        await self.store.save_components(pipeline_id, components)
        return components[index]

    # ==================== Private helpers ====================

    @staticmethod
    def _normalize(component: PipelineComponent | dict[str, Any]) -> PipelineComponent:
        """Validate a component, slugify its path and clear ``executed``."""
        if isinstance(component, PipelineComponent):
            data = component.model_dump()
        else:
            data = dict(component)
        if isinstance(data.get("path"), str):
            data["path"] = slugify(data["path"])
        data["executed"] = False
        return validate_model(PipelineComponent, data)

    @staticmethod
    def _check_index(components: list[PipelineComponent], index: int) -> None:
        if not 0 <= index < len(components):
            raise ValidationError(
                f"Invalid component index {index} for a pipeline of {len(components)} component(s)"
            )

    @staticmethod
    def _check_unique_path(
        components: list[PipelineComponent], path: str, ignore: int | None = None
    ) -> None:
        for position, existing in enumerate(components):
            if position != ignore and existing.path == path:
                raise ValidationError(
                    f"Component path '{path}' is already used at position {position}"
                )
