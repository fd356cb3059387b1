"""Dependency-ordered task execution."""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog

from lumosgen.workflow.context import AgentContext, resolve_input
from lumosgen.workflow.errors import WorkflowConfigError, WorkflowRunningError
from lumosgen.workflow.models import (
    Task,
    TaskMetadata,
    TaskResult,
    UpstreamFailurePolicy,
    WorkflowEvent,
)

if TYPE_CHECKING:
    from lumosgen.ai.service import AIService
    from lumosgen.workflow.agents import BaseAgent

logger = structlog.get_logger()

Listener = Callable[[WorkflowEvent], Awaitable[None] | None]


class WorkflowEngine:
    """Runs registered tasks one at a time in dependency order.

    Results are threaded forward through placeholders and structured
    references. A failing or timed out task produces a failed TaskResult and
    the run continues with the next task.
    """

    def __init__(
        self,
        ai_service: "AIService | None" = None,
        task_timeout: float = 60.0,
        upstream_failure_policy: UpstreamFailurePolicy = UpstreamFailurePolicy.RUN,
    ):
        """Initialize workflow engine.

        Args:
            ai_service: Orchestrator handed to agents through their context
            task_timeout: Seconds a single task may run
            upstream_failure_policy: Behavior for tasks whose dependency failed
        """
        self.ai_service = ai_service
        self.task_timeout = task_timeout
        self.upstream_failure_policy = upstream_failure_policy
        self._agents: dict[str, "BaseAgent"] = {}
        self._tasks: dict[str, Task] = {}
        self._listeners: list[Listener] = []
        self._results: dict[str, TaskResult] = {}
        self._state: dict[str, Any] = {}
        self._running = False

    def add_agent(self, agent: "BaseAgent") -> None:
        self._agents[agent.name] = agent
        logger.debug("workflow_agent_added", agent=agent.name)

    def add_task(self, task: Task) -> None:
        """Register a task.

        Raises:
            WorkflowConfigError: If a task with the same id exists
        """
        if task.id in self._tasks:
            raise WorkflowConfigError(f"Duplicate task id: {task.id}")
        self._tasks[task.id] = task
        logger.debug("workflow_task_added", task_id=task.id, dependencies=task.dependencies)

    def add_listener(self, listener: Listener) -> None:
        """Subscribe to progress events (sync or async callables)."""
        self._listeners.append(listener)

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    @property
    def is_running(self) -> bool:
        return self._running

    def validate(self) -> None:
        """Check the task graph.

        Raises:
            WorkflowConfigError: On unknown dependencies or cycles
        """
        self.topological_sort()

    def topological_sort(self) -> list[Task]:
        """Order tasks so every task follows its dependencies.

        Depth-first from each task in registration order, emitting a task
        after all of its dependencies.

        Returns:
            Tasks in execution order

        Raises:
            WorkflowConfigError: On unknown dependencies or cycles
        """
        ordered: list[Task] = []
        visited: set[str] = set()
        visiting: list[str] = []

        def visit(task_id: str) -> None:
            if task_id in visited:
                return
            if task_id in visiting:
                cycle = visiting[visiting.index(task_id):] + [task_id]
                raise WorkflowConfigError(f"Dependency cycle: {' -> '.join(cycle)}")

            task = self._tasks[task_id]
            visiting.append(task_id)
            for dependency in task.dependencies:
                if dependency not in self._tasks:
                    raise WorkflowConfigError(
                        f"Task {task_id} depends on unknown task {dependency}"
                    )
                visit(dependency)
            visiting.pop()
            visited.add(task_id)
            ordered.append(task)

        for task_id in self._tasks:
            visit(task_id)
        return ordered

    async def execute(self, initial_input: Any = None) -> dict[str, TaskResult]:
        """Run every task once.

        Args:
            initial_input: Stored in run state under ``initialInput``; when it
                is a mapping its keys are also merged into run state

        Returns:
            Task results keyed by task id

        Raises:
            WorkflowRunningError: If a run is already in progress
            WorkflowConfigError: If the task graph is invalid (before any task runs)
        """
        if self._running:
            raise WorkflowRunningError("Workflow is already running")
        self._running = True

        try:
            ordered = self.topological_sort()

            self._results = {}
            self._state = {"initialInput": initial_input}
            if isinstance(initial_input, dict):
                self._state.update(initial_input)

            start = time.perf_counter()
            logger.info("workflow_started", tasks=[task.id for task in ordered])
            await self._emit(WorkflowEvent(type="workflow_started"))

            for task in ordered:
                result = await self._run_task(task)
                self._results[task.id] = result

            logger.info(
                "workflow_completed",
                succeeded=sum(1 for r in self._results.values() if r.success),
                failed=sum(1 for r in self._results.values() if not r.success),
                duration=round(time.perf_counter() - start, 3),
            )
            await self._emit(WorkflowEvent(type="workflow_completed"))
            return dict(self._results)
        finally:
            self._running = False

    async def _run_task(self, task: Task) -> TaskResult:
        failed_upstream = [
            dep for dep in task.dependencies
            if dep in self._results and not self._results[dep].success
        ]
        if failed_upstream and self.upstream_failure_policy is UpstreamFailurePolicy.SKIP:
            result = TaskResult(
                task_id=task.id,
                success=False,
                error=f"Skipped: upstream task(s) failed: {', '.join(failed_upstream)}",
                metadata=TaskMetadata(agent=task.agent_name, skipped=True),
            )
            logger.info("workflow_task_skipped", task_id=task.id, failed_upstream=failed_upstream)
            await self._emit(WorkflowEvent(type="task_skipped", task_id=task.id, result=result))
            return result

        await self._emit(WorkflowEvent(type="task_started", task_id=task.id))
        start = time.perf_counter()

        agent = self._agents.get(task.agent_name)
        if agent is None:
            result = self._failed(task, f"Agent {task.agent_name} not found", start)
        else:
            context = AgentContext(
                task_id=task.id,
                results=MappingProxyType(dict(self._results)),
                state=self._state,
                ai_service=self.ai_service,
            )
            try:
                processed_input = resolve_input(task.input, context)
                agent_result = await asyncio.wait_for(
                    agent.execute(processed_input, context), timeout=self.task_timeout
                )
            except TimeoutError:
                result = self._failed(task, f"Task timed out after {self.task_timeout}s", start)
            except Exception as e:
                logger.exception("workflow_task_error", task_id=task.id, agent=agent.name)
                result = self._failed(task, str(e) or type(e).__name__, start)
            else:
                result = TaskResult(
                    task_id=task.id,
                    success=agent_result.success,
                    data=agent_result.data,
                    error=agent_result.error,
                    metadata=TaskMetadata(
                        execution_time=time.perf_counter() - start,
                        confidence=agent_result.confidence,
                        agent=agent.name,
                        extra=agent_result.metadata,
                    ),
                )

        if result.success:
            logger.info(
                "workflow_task_completed",
                task_id=task.id,
                execution_time=round(result.metadata.execution_time, 3),
            )
            await self._emit(WorkflowEvent(type="task_completed", task_id=task.id, result=result))
        else:
            logger.warning("workflow_task_failed", task_id=task.id, error=result.error)
            await self._emit(WorkflowEvent(type="task_failed", task_id=task.id, result=result))
        return result

    @staticmethod
    def _failed(task: Task, error: str, start: float) -> TaskResult:
        return TaskResult(
            task_id=task.id,
            success=False,
            error=error,
            metadata=TaskMetadata(
                execution_time=time.perf_counter() - start, agent=task.agent_name
            ),
        )

    async def _emit(self, event: WorkflowEvent) -> None:
        for listener in list(self._listeners):
            try:
                outcome = listener(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("workflow_listener_failed", event_type=event.type)

    def get_result(self, task_id: str) -> TaskResult | None:
        """Result of a task from the most recent run."""
        return self._results.get(task_id)

    def get_results(self) -> dict[str, TaskResult]:
        return dict(self._results)

    def get_state(self) -> dict[str, Any]:
        return dict(self._state)

    def reset(self) -> None:
        """Forget the results and state of the previous run.

        Raises:
            WorkflowRunningError: If a run is in progress
        """
        if self._running:
            raise WorkflowRunningError("Cannot reset while the workflow is running")
        self._results = {}
        self._state = {}
