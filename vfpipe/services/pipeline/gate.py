"""
Dependency Gate.

A component's position is its dependency: it may only run once every
component before it has been executed.
"""

from collections.abc import Sequence

from vfpipe.exceptions import DependencyViolationError, ValidationError
from vfpipe.models import PipelineComponent


def first_blocking_index(components: Sequence[PipelineComponent], index: int) -> int | None:
    """Return the first position before ``index`` that is not executed, if any."""
    for position in range(index):
        if not components[position].executed:
            return position
    return None


def can_run(components: Sequence[PipelineComponent], index: int) -> bool:
    """Check whether the component at ``index`` may start.

    Args:
        components: Ordered component list.
        index: Position of the component to run.

    Returns:
        True iff every component before ``index`` has ``executed`` set.
    """
    return first_blocking_index(components, index) is None


def ensure_can_run(components: Sequence[PipelineComponent], index: int) -> None:
    """Raise unless the component at ``index`` exists and may start.

    Raises:
        ValidationError: If ``index`` is outside the list.
        DependencyViolationError: If an earlier component is not executed.
    """
    if not 0 <= index < len(components):
        raise ValidationError(
            f"Invalid component index {index} for a pipeline of {len(components)} component(s)"
        )
    blocking = first_blocking_index(components, index)
    if blocking is not None:
        raise DependencyViolationError(index, blocking, components[blocking].path)
