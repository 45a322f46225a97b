"""
Models for compute sessions and component runs.

ExecutionSession is the mutable, never-persisted state of a single
component run; ComponentRunResult and PipelineRunReport are what the
runner and orchestrator hand back to callers.
"""

import enum
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from ..types import ExecutionOptions

FINISHED = "finished"


class ExecutionMode(str, enum.Enum):
    """Code submission mode for one poll."""

    INITIAL = "initial"
    CONTINUE = "continue"


class ConsoleStream(str, enum.Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class ConsoleEntry(BaseModel):
    """One chunk of console output returned by a poll."""

    stream: ConsoleStream
    text: str


class SessionOptions(BaseModel):
    """Placement and resources for a new compute session."""

    domain: str
    group: str
    scaling_group: str
    mounts: list[str] = Field(default_factory=list)
    cpu: int
    mem: float
    gpu: float = 0
    max_wait_seconds: int | None = None


class ExecutionResult(BaseModel):
    """Provider response to one execute poll."""

    status: str
    run_id: str | None = None
    options: ExecutionOptions = Field(default_factory=dict)
    console: list[ConsoleEntry] = Field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.status == FINISHED


class RunState(str, enum.Enum):
    """States of the component run state machine."""

    PREPARING = "preparing"
    LAUNCHING = "launching"
    EXECUTING = "executing"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"
    DENIED = "denied"


@dataclass(slots=True)
class ExecutionSession:
    """Live state of one compute session while a component runs.

    ``run_id`` and ``options`` are whatever the provider returned on the
    previous poll and must be sent back unchanged on the next one.
    """

    session_id: str
    run_id: str | None = None
    mode: ExecutionMode = ExecutionMode.INITIAL
    options: ExecutionOptions = field(default_factory=dict)
    console: list[ConsoleEntry] = field(default_factory=list)
    status: str | None = None
    polls: int = 0

    @property
    def finished(self) -> bool:
        return self.status == FINISHED

    def apply(self, result: ExecutionResult) -> None:
        """Fold a poll response into the session and prepare the next poll."""
        self.polls += 1
        self.status = result.status
        self.run_id = result.run_id
        self.options = result.options
        self.console.extend(result.console)
        if not result.finished:
            self.mode = ExecutionMode.CONTINUE


@dataclass(slots=True)
class ComponentRunResult:
    """Terminal outcome of running one component."""

    pipeline_id: str
    index: int
    path: str
    state: RunState
    error: Exception | None = None
    console: list[ConsoleEntry] = field(default_factory=list)
    polls: int = 0

    @property
    def ok(self) -> bool:
        return self.state == RunState.COMPLETED


@dataclass(slots=True)
class PipelineRunReport:
    """Aggregate outcome of a full pipeline run."""

    pipeline_id: str
    results: list[ComponentRunResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> list[ComponentRunResult]:
        return [r for r in self.results if r.state == RunState.COMPLETED]

    @property
    def failed(self) -> list[ComponentRunResult]:
        return [r for r in self.results if r.state == RunState.FAILED]

    @property
    def denied(self) -> list[ComponentRunResult]:
        return [r for r in self.results if r.state == RunState.DENIED]

    @property
    def ok(self) -> bool:
        return not self.aborted and all(r.ok for r in self.results)
