"""
Domain exceptions for the pipeline engine.

These exceptions are used by the store, runner and orchestrator to represent
failures without coupling to the transport used by the provider clients.
"""


class VfpipeError(Exception):
    """Base exception for all vfpipe-specific errors."""


# Base domain exceptions
class EntityNotFoundError(VfpipeError):
    """Raised when an expected document is not found."""

    pass


class ValidationError(VfpipeError):
    """Raised when data validation fails."""

    pass


class BusinessRuleViolationError(VfpipeError):
    """Raised when a business rule is violated."""

    pass


# Storage errors
class StorageError(VfpipeError):
    """Raised when a content store operation fails."""

    pass


class StorageNotFoundError(StorageError):
    """Raised when a blob is not found in a container."""

    def __init__(self, path: str, container: str):
        self.path = path
        self.container = container
        super().__init__(f"'{path}' not found in container '{container}'")


# Pipeline exceptions
class PipelineNotFoundError(EntityNotFoundError):
    """Raised when a pipeline definition document does not exist."""

    def __init__(self, pipeline_id: str):
        self.pipeline_id = pipeline_id
        super().__init__(f"Pipeline '{pipeline_id}' not found")


class DependencyViolationError(BusinessRuleViolationError):
    """Raised when a component is run before all of its predecessors."""

    def __init__(self, index: int, blocking_index: int, blocking_path: str | None = None):
        self.index = index
        self.blocking_index = blocking_index
        self.blocking_path = blocking_path
        name = f" ('{blocking_path}')" if blocking_path else ""
        super().__init__(
            f"Component {index} cannot run: component {blocking_index}{name} "
            f"has not been executed. Run previous component(s) first"
        )


class PipelineBusyError(BusinessRuleViolationError):
    """Raised when a pipeline already has a run in progress."""

    def __init__(self, pipeline_id: str):
        self.pipeline_id = pipeline_id
        super().__init__(f"Pipeline '{pipeline_id}' is already running")


# Provider errors
class ProviderError(VfpipeError):
    """Raised when a compute session operation fails."""

    pass


class ProviderConnectionError(ProviderError):
    """Raised when the compute provider cannot be reached."""

    pass


class ExecutionBudgetExceededError(ProviderError):
    """Raised when a run exceeds its poll budget or deadline."""

    pass


class ComponentRunError(VfpipeError):
    """A component run failure with enough context to show to a user.

    The originating exception is kept as ``__cause__``.
    """

    def __init__(self, pipeline_id: str, index: int, path: str, message: str):
        self.pipeline_id = pipeline_id
        self.index = index
        self.path = path
        self.message = message
        super().__init__(f"Pipeline '{pipeline_id}' component {index} ('{path}'): {message}")
