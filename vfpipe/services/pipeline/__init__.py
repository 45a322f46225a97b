"""
Pipeline Service — sequential execution of pipeline components.

A pipeline is an ordered list of components stored in one content-store
container. Each component runs in its own compute session, strictly after
every component before it has been executed.

Example:
    from vfpipe.clients import HttpComputeSessionClient, HttpContentStoreClient
    from vfpipe.services.pipeline import ComponentRunner, PipelineOrchestrator, PipelineStore

    storage = HttpContentStoreClient()
    compute = HttpComputeSessionClient()
    store = PipelineStore(storage)
    orchestrator = PipelineOrchestrator(store, ComponentRunner(store, compute))

    report = await orchestrator.run_pipeline("pipeline-etl-1a2b3c4d")
"""

from .exceptions import (
    ComponentRunError,
    DependencyViolationError,
    ExecutionBudgetExceededError,
    PipelineBusyError,
    PipelineNotFoundError,
)
from .gate import can_run, ensure_can_run, first_blocking_index
from .manager import PipelineManager
from .orchestrator import PipelineOrchestrator
from .runner import ComponentRunner
from .store import PipelineStore

__all__ = [
    "ComponentRunError",
    "ComponentRunner",
    "DependencyViolationError",
    "ExecutionBudgetExceededError",
    "PipelineBusyError",
    "PipelineManager",
    "PipelineNotFoundError",
    "PipelineOrchestrator",
    "PipelineStore",
    "can_run",
    "ensure_can_run",
    "first_blocking_index",
]
