"""
Pipeline document models.

PipelineDefinition is stored as ``config.json`` in the pipeline's container,
the ordered list of PipelineComponent records as ``components.json``.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
ComponentPath = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, pattern=r"^[\w.-]+$")
]


class PipelineDefinition(BaseModel):
    """Execution environment and placement shared by every component.

    Args:
        title: Human readable pipeline name.
        description: Free text, may be empty.
        environment: Image name (e.g. ``cr.backend.ai/stable/python``).
        version: Image tag.
        scaling_group: Resource group sessions are scheduled on.
        storage_host: Storage host the pipeline container lives on.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    title: NonEmptyStr
    description: str = ""
    environment: NonEmptyStr
    version: NonEmptyStr
    scaling_group: NonEmptyStr
    storage_host: NonEmptyStr = Field(alias="folder_host")

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def image(self) -> str:
        """Image reference handed to the compute provider."""
        return f"{self.environment}:{self.version}"


class ResourceRequest(BaseModel):
    """Resources requested for one component's compute session."""

    model_config = ConfigDict(validate_assignment=True)

    cpu: int = Field(default=1, ge=1)
    mem: float = Field(default=1.0, ge=0.1)  # GiB
    gpu: float = Field(default=0, ge=0)


class PipelineComponent(BaseModel):
    """One step of a pipeline.

    The component's position in the pipeline's list is its dependency:
    it may only run once every component before it has ``executed`` set.
    Code lives at ``<path>/main.py`` and the last run's log at
    ``<path>/logs.txt`` inside the pipeline container.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: NonEmptyStr
    description: str = ""
    path: ComponentPath
    cpu: int = Field(default=1, ge=1)
    mem: float = Field(default=1.0, ge=0.1)
    gpu: float = Field(default=0, ge=0)
    executed: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("gpu", mode="before")
    @classmethod
    def blank_gpu_to_zero(cls, value: Any) -> Any:
        """Unset GPU means no GPU."""
        if value is None or value == "":
            return 0
        return value

    @property
    def resources(self) -> ResourceRequest:
        return ResourceRequest(cpu=self.cpu, mem=self.mem, gpu=self.gpu)


class StorageContainer(BaseModel):
    """A container (virtual folder) as listed by the content store."""

    name: str
    id: str
    host: str

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, value: Any) -> Any:
        return str(value) if value is not None else value


class PipelineSummary(BaseModel):
    """A pipeline container together with its definition."""

    pipeline_id: str
    container: StorageContainer
    definition: PipelineDefinition
