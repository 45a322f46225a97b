"""
Pipeline-specific exceptions re-exported from the domain exception module.

All pipeline exceptions inherit from VfpipeError.
"""

from vfpipe.exceptions.domain import (
    ComponentRunError,
    DependencyViolationError,
    ExecutionBudgetExceededError,
    PipelineBusyError,
    PipelineNotFoundError,
)

__all__ = [
    "ComponentRunError",
    "DependencyViolationError",
    "ExecutionBudgetExceededError",
    "PipelineBusyError",
    "PipelineNotFoundError",
]
