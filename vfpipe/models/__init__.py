"""
vfpipe data models.

Persisted pipeline documents and the transient records of a run.
"""

from .pipeline import (
    PipelineComponent,
    PipelineDefinition,
    PipelineSummary,
    ResourceRequest,
    StorageContainer,
)
from .session import (
    FINISHED,
    ComponentRunResult,
    ConsoleEntry,
    ConsoleStream,
    ExecutionMode,
    ExecutionResult,
    ExecutionSession,
    PipelineRunReport,
    RunState,
    SessionOptions,
)

__all__ = [
    "FINISHED",
    "ComponentRunResult",
    "ConsoleEntry",
    "ConsoleStream",
    "ExecutionMode",
    "ExecutionResult",
    "ExecutionSession",
    "PipelineComponent",
    "PipelineDefinition",
    "PipelineRunReport",
    "PipelineSummary",
    "ResourceRequest",
    "RunState",
    "SessionOptions",
    "StorageContainer",
]
