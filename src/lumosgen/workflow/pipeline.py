"""Prebuilt marketing content workflow."""

from typing import TYPE_CHECKING

from lumosgen.content.project import ProjectAnalysis
from lumosgen.workflow.agents import ContentAnalyzerAgent, ContentGeneratorAgent
from lumosgen.workflow.engine import WorkflowEngine
from lumosgen.workflow.models import ResultRef, StateRef, Task, TaskResult, UpstreamFailurePolicy

if TYPE_CHECKING:
    from lumosgen.ai.service import AIService

STRATEGY_TASK = "contentStrategy"
GENERATION_TASK = "contentGeneration"
DEFAULT_AUDIENCE = "developers and technical teams"


def build_marketing_workflow(
    ai_service: "AIService",
    target_audience: str = DEFAULT_AUDIENCE,
    tone: str = "professional",
    task_timeout: float = 60.0,
    max_retries: int = 2,
    upstream_failure_policy: UpstreamFailurePolicy = UpstreamFailurePolicy.RUN,
) -> WorkflowEngine:
    """Wire the contentStrategy -> contentGeneration workflow.

    Run state must provide ``projectAnalysis`` and ``contentType``.

    Args:
        ai_service: Orchestrator shared by both agents
        target_audience: Audience the strategy is written for
        tone: Tone for generated content
        task_timeout: Seconds each task may run
        max_retries: Content generator retry budget
        upstream_failure_policy: Behavior when the strategy task fails

    Returns:
        WorkflowEngine ready to execute
    """
    engine = WorkflowEngine(
        ai_service=ai_service,
        task_timeout=task_timeout,
        upstream_failure_policy=upstream_failure_policy,
    )
    engine.add_agent(ContentAnalyzerAgent())
    engine.add_agent(ContentGeneratorAgent(max_retries=max_retries))

    engine.add_task(
        Task(
            id=STRATEGY_TASK,
            agent_name="ContentAnalyzer",
            description="Derive a content strategy from the project analysis",
            input={
                "project_analysis": StateRef(key="projectAnalysis"),
                "target_audience": target_audience,
                "content_type": "{globalState.contentType}",
            },
        )
    )
    engine.add_task(
        Task(
            id=GENERATION_TASK,
            agent_name="ContentGenerator",
            description="Generate a validated page following the strategy",
            input={
                "project_analysis": StateRef(key="projectAnalysis"),
                "content_strategy": ResultRef(task_id=STRATEGY_TASK),
                "content_type": "{globalState.contentType}",
                "tone": tone,
            },
            dependencies=[STRATEGY_TASK],
        )
    )
    return engine


async def run_marketing_workflow(
    engine: WorkflowEngine,
    analysis: ProjectAnalysis,
    content_type: str = "homepage",
) -> dict[str, TaskResult]:
    """Execute a marketing workflow for one page type."""
    return await engine.execute({"projectAnalysis": analysis, "contentType": content_type})
