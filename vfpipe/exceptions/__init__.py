"""
Exceptions for vfpipe.

All errors derive from VfpipeError so callers can catch the whole family.
"""

from .domain import (
    BusinessRuleViolationError,
    ComponentRunError,
    DependencyViolationError,
    EntityNotFoundError,
    ExecutionBudgetExceededError,
    PipelineBusyError,
    PipelineNotFoundError,
    ProviderConnectionError,
    ProviderError,
    StorageError,
    StorageNotFoundError,
    ValidationError,
    VfpipeError,
)

__all__ = [
    "BusinessRuleViolationError",
    "ComponentRunError",
    "DependencyViolationError",
    "EntityNotFoundError",
    "ExecutionBudgetExceededError",
    "PipelineBusyError",
    "PipelineNotFoundError",
    "ProviderConnectionError",
    "ProviderError",
    "StorageError",
    "StorageNotFoundError",
    "ValidationError",
    "VfpipeError",
]
