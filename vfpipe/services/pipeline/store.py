"""
Pipeline Store — durable pipeline documents in the content store.

Every public call is exactly one blob read or one blob write. There is no
merging: callers load the whole document, change it and save it back, and
the last writer wins.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from vfpipe.exceptions import PipelineNotFoundError, StorageError, StorageNotFoundError
from vfpipe.models import PipelineComponent, PipelineDefinition
from vfpipe.settings import Settings, settings as default_settings
from vfpipe.utils.logger import logger
from vfpipe.utils.validation import validate_model

if TYPE_CHECKING:
    from vfpipe.clients.protocols import ContentStoreClient

_COMPONENT_LIST = TypeAdapter(list[PipelineComponent])


class PipelineStore:
    """Reads and writes pipeline documents inside a pipeline's container.

    The container name is the pipeline id.

    Args:
        content_store: Blob storage client.
        config: Settings providing document and file names.
    """

    def __init__(self, content_store: ContentStoreClient, config: Settings | None = None):
        self.content_store = content_store
        self.config = config or default_settings

    # ------------------------------------------------------------------
    # Definition document
    # ------------------------------------------------------------------

    async def load_definition(self, pipeline_id: str) -> PipelineDefinition:
        """Load the pipeline definition.

        Raises:
            PipelineNotFoundError: If the pipeline has no definition document.
            StorageError: If the document cannot be read or is corrupt.
        """
        try:
            raw = await self.content_store.download(self.config.definition_filename, pipeline_id)
        except StorageNotFoundError as e:
            raise PipelineNotFoundError(pipeline_id) from e

        data = self._decode(raw, self.config.definition_filename, pipeline_id)
        try:
            return PipelineDefinition.model_validate(data)
        except PydanticValidationError as e:
            raise StorageError(
                f"Corrupt definition document in pipeline '{pipeline_id}': {e}"
            ) from e

    async def save_definition(self, pipeline_id: str, definition: PipelineDefinition) -> None:
        """Replace the pipeline definition.

        Raises:
            ValidationError: If the definition holds invalid values.
        """
        document = definition.model_dump(by_alias=True, mode="json")
        validate_model(PipelineDefinition, document)
        await self._write(pipeline_id, self.config.definition_filename, document)
        logger.debug(f"Saved definition of pipeline '{pipeline_id}'")

    # ------------------------------------------------------------------
    # Component list document
    # ------------------------------------------------------------------

    async def load_components(self, pipeline_id: str) -> list[PipelineComponent]:
        """Load the ordered component list; empty if none was saved yet.

        Raises:
            StorageError: If the document cannot be read or is corrupt.
        """
        try:
            raw = await self.content_store.download(self.config.components_filename, pipeline_id)
        except StorageNotFoundError:
            logger.debug(f"Pipeline '{pipeline_id}' has no component list yet")
            return []

        data = self._decode(raw, self.config.components_filename, pipeline_id)
        try:
            return _COMPONENT_LIST.validate_python(data)
        except PydanticValidationError as e:
            raise StorageError(
                f"Corrupt component list in pipeline '{pipeline_id}': {e}"
            ) from e

    async def save_components(
        self, pipeline_id: str, components: Sequence[PipelineComponent]
    ) -> None:
        """Replace the whole ordered component list.

        Raises:
            ValidationError: If a component holds invalid values.
        """
        document = [c.model_dump(mode="json") for c in components]
        for item in document:
            validate_model(PipelineComponent, item)
        await self._write(pipeline_id, self.config.components_filename, document)
        logger.debug(f"Saved {len(components)} component(s) of pipeline '{pipeline_id}'")

    # ------------------------------------------------------------------
    # Per-component blobs
    # ------------------------------------------------------------------

    async def ensure_component_folder(self, pipeline_id: str, component: PipelineComponent) -> None:
        """Create the component folder; an existing folder is not an error."""
        try:
            await self.content_store.mkdir(pipeline_id, component.path)
        except StorageError as e:
            logger.debug(f"mkdir '{component.path}' in '{pipeline_id}' skipped: {e}")

    async def load_code(self, pipeline_id: str, component: PipelineComponent) -> str:
        """Read a component's code.

        Raises:
            StorageNotFoundError: If no code was uploaded yet.
        """
        raw = await self.content_store.download(self.config.code_path(component.path), pipeline_id)
        return raw.decode("utf-8")

    async def save_code(self, pipeline_id: str, component: PipelineComponent, code: str) -> None:
        await self.content_store.upload(
            self.config.code_path(component.path), code.encode("utf-8"), pipeline_id
        )

    async def save_log(self, pipeline_id: str, component: PipelineComponent, text: str) -> None:
        await self.content_store.upload(
            self.config.log_path(component.path), text.encode("utf-8"), pipeline_id
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _write(self, pipeline_id: str, filename: str, document: Any) -> None:
        payload = json.dumps(document, indent=2).encode("utf-8")
        await self.content_store.upload(filename, payload, pipeline_id)

    @staticmethod
    def _decode(raw: bytes, filename: str, pipeline_id: str) -> Any:
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"'{filename}' in pipeline '{pipeline_id}' is not valid JSON") from e
