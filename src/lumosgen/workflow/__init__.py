"""Dependency-ordered agent workflows."""

from lumosgen.workflow.agents import BaseAgent, ContentAnalyzerAgent, ContentGeneratorAgent
from lumosgen.workflow.context import AgentContext
from lumosgen.workflow.engine import WorkflowEngine
from lumosgen.workflow.errors import WorkflowConfigError, WorkflowError, WorkflowRunningError
from lumosgen.workflow.models import (
    AgentResult,
    ResultRef,
    StateRef,
    Task,
    TaskResult,
    UpstreamFailurePolicy,
    WorkflowEvent,
)
from lumosgen.workflow.pipeline import build_marketing_workflow, run_marketing_workflow

__all__ = [
    "AgentContext",
    "AgentResult",
    "BaseAgent",
    "ContentAnalyzerAgent",
    "ContentGeneratorAgent",
    "ResultRef",
    "StateRef",
    "Task",
    "TaskResult",
    "UpstreamFailurePolicy",
    "WorkflowConfigError",
    "WorkflowEngine",
    "WorkflowError",
    "WorkflowEvent",
    "WorkflowRunningError",
    "build_marketing_workflow",
    "run_marketing_workflow",
]
