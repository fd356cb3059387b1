"""Workflow data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UpstreamFailurePolicy(str, Enum):
    """What happens to a task whose dependency failed."""

    RUN = "run"  # run anyway; placeholders for the failed task stay literal
    SKIP = "skip"  # record a failed, skipped result without running


class ResultRef(BaseModel):
    """Structured reference to the data of another task's result."""

    model_config = ConfigDict(frozen=True)

    task_id: str


class StateRef(BaseModel):
    """Structured reference to a value in run state."""

    model_config = ConfigDict(frozen=True)

    key: str


class Task(BaseModel):
    """A unit of work executed by a named agent."""

    id: str
    agent_name: str
    description: str = ""
    input: Any = None
    dependencies: list[str] = Field(default_factory=list)


class AgentResult(BaseModel):
    """Value returned by an agent's execute()."""

    success: bool = Field(..., description="Whether the agent succeeded")
    data: Any = Field(None, description="Output passed to downstream tasks")
    error: str | None = Field(None, description="Error message if failed")
    confidence: float | None = Field(None, description="Agent confidence in [0, 1]")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Agent specific details")


class TaskMetadata(BaseModel):
    """Execution details attached to a task result."""

    model_config = ConfigDict(frozen=True)

    execution_time: float = 0.0
    confidence: float | None = None
    agent: str | None = None
    skipped: bool = False
    extra: dict[str, Any] = Field(default_factory=dict)


class TaskResult(BaseModel):
    """Immutable outcome of one task in one run."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    success: bool
    data: Any = None
    error: str | None = None
    metadata: TaskMetadata = Field(default_factory=TaskMetadata)


class WorkflowEvent(BaseModel):
    """Progress notification delivered to listeners."""

    type: str
    task_id: str | None = None
    result: TaskResult | None = None
