"""Unit tests for PipelineStore against the in-memory content store."""

import json

import pytest

from vfpipe.exceptions import (
    PipelineNotFoundError,
    StorageError,
    StorageNotFoundError,
    ValidationError,
)
from vfpipe.models import PipelineComponent

from tests.conftest import PIPELINE_ID, make_components


class TestDefinitionDocument:
    """Tests for definition load/save."""

    @pytest.mark.asyncio
    async def test_round_trip(self, store, definition):
        """A saved definition loads back equal."""
        await store.save_definition(PIPELINE_ID, definition)
        assert await store.load_definition(PIPELINE_ID) == definition

    @pytest.mark.asyncio
    async def test_written_as_flat_json(self, store, content_store, definition):
        """The document is a flat, indented JSON record at config.json."""
        await store.save_definition(PIPELINE_ID, definition)

        raw = content_store.text(PIPELINE_ID, "config.json")
        assert raw.startswith("{\n  ")
        assert json.loads(raw) == {
            "title": "Test pipeline",
            "description": "",
            "environment": "cr.example.com/stable/python",
            "version": "3.12-ubuntu22.04",
            "scaling_group": "default",
            "folder_host": "local:volume1",
        }

    @pytest.mark.asyncio
    async def test_missing_definition(self, store):
        with pytest.raises(PipelineNotFoundError):
            await store.load_definition(PIPELINE_ID)

    @pytest.mark.asyncio
    async def test_corrupt_definition(self, store, content_store):
        """Unparseable documents are storage errors, not silent defaults."""
        content_store.blobs[(PIPELINE_ID, "config.json")] = b"{not json"
        with pytest.raises(StorageError):
            await store.load_definition(PIPELINE_ID)

    @pytest.mark.asyncio
    async def test_invalid_definition(self, store, content_store):
        content_store.blobs[(PIPELINE_ID, "config.json")] = b'{"title": ""}'
        with pytest.raises(StorageError, match="Corrupt definition"):
            await store.load_definition(PIPELINE_ID)

    @pytest.mark.asyncio
    async def test_one_blob_operation_per_call(self, store, content_store, definition):
        await store.save_definition(PIPELINE_ID, definition)
        await store.load_definition(PIPELINE_ID)

        assert content_store.uploads == [(PIPELINE_ID, "config.json")]
        assert content_store.downloads == [(PIPELINE_ID, "config.json")]


class TestComponentDocument:
    """Tests for component list load/save."""

    @pytest.mark.asyncio
    async def test_missing_list_is_empty(self, store):
        assert await store.load_components(PIPELINE_ID) == []

    @pytest.mark.asyncio
    async def test_round_trip_preserves_order(self, store):
        components = make_components(3, executed=1)
        await store.save_components(PIPELINE_ID, components)

        loaded = await store.load_components(PIPELINE_ID)
        assert loaded == components
        assert [c.path for c in loaded] == ["001-step", "002-step", "003-step"]

    @pytest.mark.asyncio
    async def test_saving_twice_is_idempotent(self, store, content_store):
        components = make_components(2)
        await store.save_components(PIPELINE_ID, components)
        first = content_store.blobs[(PIPELINE_ID, "components.json")]
        await store.save_components(PIPELINE_ID, components)

        assert content_store.blobs[(PIPELINE_ID, "components.json")] == first

    @pytest.mark.asyncio
    async def test_reads_documents_with_string_resources(self, store, content_store):
        """Documents written from form input carry numbers as strings."""
        document = [
            {
                "title": "Load",
                "description": "",
                "path": "001-load",
                "cpu": "2",
                "mem": "1.5",
                "gpu": "0",
                "executed": True,
            }
        ]
        content_store.blobs[(PIPELINE_ID, "components.json")] = json.dumps(document).encode()

        [component] = await store.load_components(PIPELINE_ID)
        assert component == PipelineComponent(
            title="Load", path="001-load", cpu=2, mem=1.5, gpu=0, executed=True
        )

    @pytest.mark.asyncio
    async def test_corrupt_list(self, store, content_store):
        content_store.blobs[(PIPELINE_ID, "components.json")] = b'[{"title": "x"}]'
        with pytest.raises(StorageError, match="Corrupt component list"):
            await store.load_components(PIPELINE_ID)

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, store, content_store):
        content_store.upload_errors["components.json"] = StorageError("disk full")
        with pytest.raises(StorageError, match="disk full"):
            await store.save_components(PIPELINE_ID, make_components(1))


class TestComponentBlobs:
    """Tests for code and log blobs."""

    @pytest.mark.asyncio
    async def test_code_and_log_paths(self, store, content_store):
        [component] = make_components(1)
        await store.save_code(PIPELINE_ID, component, "print('hi')\n")
        await store.save_log(PIPELINE_ID, component, "hi\n")

        assert content_store.text(PIPELINE_ID, "001-step/main.py") == "print('hi')\n"
        assert content_store.text(PIPELINE_ID, "001-step/logs.txt") == "hi\n"
        assert await store.load_code(PIPELINE_ID, component) == "print('hi')\n"

    @pytest.mark.asyncio
    async def test_missing_code(self, store):
        [component] = make_components(1)
        with pytest.raises(StorageNotFoundError):
            await store.load_code(PIPELINE_ID, component)

    @pytest.mark.asyncio
    async def test_ensure_folder_is_idempotent(self, store, content_store):
        [component] = make_components(1)
        await store.ensure_component_folder(PIPELINE_ID, component)
        await store.ensure_component_folder(PIPELINE_ID, component)

        assert content_store.folders == {(PIPELINE_ID, "001-step")}


class TestInvalidDocumentsAreNotWritten:
    """Nothing invalid reaches the content store."""

    @pytest.mark.asyncio
    async def test_invalid_component_is_rejected(self, store, content_store):
        components = make_components(2)
        components[0] = components[0].model_copy(update={"cpu": 0, "mem": 0.0})

        with pytest.raises(ValidationError, match="cpu"):
            await store.save_components(PIPELINE_ID, components)
        assert content_store.uploads == []

    @pytest.mark.asyncio
    async def test_previous_list_stays_loadable(self, store):
        await store.save_components(PIPELINE_ID, make_components(2))
        broken = make_components(2)
        broken[1] = broken[1].model_copy(update={"path": "no spaces allowed"})

        with pytest.raises(ValidationError):
            await store.save_components(PIPELINE_ID, broken)
        assert await store.load_components(PIPELINE_ID) == make_components(2)

    @pytest.mark.asyncio
    async def test_invalid_definition_is_rejected(self, store, content_store, definition):
        with pytest.raises(ValidationError):
            await store.save_definition(
                PIPELINE_ID, definition.model_copy(update={"version": ""})
            )
        assert content_store.uploads == []
