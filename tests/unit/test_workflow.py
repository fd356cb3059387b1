"""Tests for the workflow engine."""

import asyncio
from typing import Any

import pytest

from lumosgen.workflow.agents import BaseAgent
from lumosgen.workflow.context import AgentContext, compact_json, resolve_input
from lumosgen.workflow.engine import WorkflowEngine
from lumosgen.workflow.errors import WorkflowConfigError, WorkflowRunningError
from lumosgen.workflow.models import (
    AgentResult,
    ResultRef,
    StateRef,
    Task,
    TaskResult,
    UpstreamFailurePolicy,
    WorkflowEvent,
)


class RecordingAgent(BaseAgent):
    """Returns a fixed result and records every input it receives."""

    def __init__(self, name: str = "Recorder", result: AgentResult | None = None, delay: float = 0):
        super().__init__(name=name, role="tester", goal="record inputs", background="")
        self.result = result or AgentResult(success=True, data={"x": 1}, confidence=0.9)
        self.delay = delay
        self.inputs: list[Any] = []
        self.order: list[str] = []

    async def execute(self, input: Any, context: AgentContext) -> AgentResult:
        self.inputs.append(input)
        self.order.append(context.task_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.result


class ExplodingAgent(BaseAgent):
    def __init__(self):
        super().__init__(name="Exploder", role="tester", goal="fail", background="")

    async def execute(self, input: Any, context: AgentContext) -> AgentResult:
        raise RuntimeError("agent blew up")


class BlockingAgent(BaseAgent):
    """Waits until released, so a run can be observed in progress."""

    def __init__(self):
        super().__init__(name="Blocker", role="tester", goal="block", background="")
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def execute(self, input: Any, context: AgentContext) -> AgentResult:
        self.started.set()
        await self.release.wait()
        return AgentResult(success=True)


@pytest.fixture
def recorder():
    return RecordingAgent()


@pytest.fixture
def engine(recorder):
    engine = WorkflowEngine(task_timeout=1.0)
    engine.add_agent(recorder)
    return engine


class TestTopologicalSort:
    def test_dependencies_come_first(self, engine):
        engine.add_task(Task(id="T3", agent_name="Recorder", dependencies=["T2"]))
        engine.add_task(Task(id="T1", agent_name="Recorder"))
        engine.add_task(Task(id="T2", agent_name="Recorder", dependencies=["T1"]))

        assert [task.id for task in engine.topological_sort()] == ["T1", "T2", "T3"]

    def test_independent_tasks_keep_registration_order(self, engine):
        for task_id in ("b", "a", "c"):
            engine.add_task(Task(id=task_id, agent_name="Recorder"))

        assert [task.id for task in engine.topological_sort()] == ["b", "a", "c"]

    def test_cycle_detected(self, engine):
        engine.add_task(Task(id="A", agent_name="Recorder", dependencies=["B"]))
        engine.add_task(Task(id="B", agent_name="Recorder", dependencies=["A"]))

        with pytest.raises(WorkflowConfigError, match="cycle"):
            engine.validate()

    def test_self_dependency_is_a_cycle(self, engine):
        engine.add_task(Task(id="A", agent_name="Recorder", dependencies=["A"]))

        with pytest.raises(WorkflowConfigError):
            engine.topological_sort()

    def test_unknown_dependency(self, engine):
        engine.add_task(Task(id="A", agent_name="Recorder", dependencies=["missing"]))

        with pytest.raises(WorkflowConfigError, match="missing"):
            engine.topological_sort()

    def test_duplicate_task_id(self, engine):
        engine.add_task(Task(id="A", agent_name="Recorder"))

        with pytest.raises(WorkflowConfigError, match="Duplicate"):
            engine.add_task(Task(id="A", agent_name="Recorder"))


class TestExecute:
    @pytest.mark.asyncio
    async def test_runs_in_dependency_order(self, engine, recorder):
        engine.add_task(Task(id="T3", agent_name="Recorder", dependencies=["T2"]))
        engine.add_task(Task(id="T2", agent_name="Recorder", dependencies=["T1"]))
        engine.add_task(Task(id="T1", agent_name="Recorder"))

        results = await engine.execute()

        assert recorder.order == ["T1", "T2", "T3"]
        assert all(result.success for result in results.values())
        assert results["T1"].metadata.confidence == 0.9
        assert results["T1"].metadata.agent == "Recorder"

    @pytest.mark.asyncio
    async def test_task_result_placeholder(self, engine, recorder):
        engine.add_task(Task(id="T1", agent_name="Recorder"))
        engine.add_task(
            Task(id="T2", agent_name="Recorder", input="use {taskResult:T1}", dependencies=["T1"])
        )

        await engine.execute()

        assert recorder.inputs[1] == 'use {"x":1}'

    @pytest.mark.asyncio
    async def test_global_state_placeholder(self, engine, recorder):
        engine.add_task(
            Task(
                id="T1",
                agent_name="Recorder",
                input={"page": "{globalState.contentType}", "raw": "{globalState.initialInput}"},
            )
        )

        await engine.execute({"contentType": "faq"})

        assert recorder.inputs[0] == {"page": "faq", "raw": '{"contentType":"faq"}'}
        assert engine.get_state()["initialInput"] == {"contentType": "faq"}

    @pytest.mark.asyncio
    async def test_structured_references(self, engine, recorder):
        engine.add_task(Task(id="T1", agent_name="Recorder"))
        engine.add_task(
            Task(
                id="T2",
                agent_name="Recorder",
                input={"previous": ResultRef(task_id="T1"), "items": [StateRef(key="items")]},
                dependencies=["T1"],
            )
        )

        await engine.execute({"items": [1, 2]})

        assert recorder.inputs[1] == {"previous": {"x": 1}, "items": [[1, 2]]}

    @pytest.mark.asyncio
    async def test_missing_agent_is_task_failure(self, engine):
        engine.add_task(Task(id="T1", agent_name="Nobody"))

        results = await engine.execute()

        assert results["T1"].success is False
        assert "Nobody" in results["T1"].error

    @pytest.mark.asyncio
    async def test_agent_exception_is_task_failure(self, engine, recorder):
        engine.add_agent(ExplodingAgent())
        engine.add_task(Task(id="T1", agent_name="Exploder"))
        engine.add_task(Task(id="T2", agent_name="Recorder"))

        results = await engine.execute()

        assert results["T1"].success is False
        assert results["T1"].error == "agent blew up"
        assert results["T2"].success is True

    @pytest.mark.asyncio
    async def test_task_timeout(self):
        engine = WorkflowEngine(task_timeout=0.01)
        engine.add_agent(RecordingAgent(name="Slow", delay=1.0))
        engine.add_task(Task(id="T1", agent_name="Slow"))

        results = await engine.execute()

        assert results["T1"].success is False
        assert "timed out" in results["T1"].error

    @pytest.mark.asyncio
    async def test_failed_upstream_runs_by_default(self, engine, recorder):
        engine.add_agent(ExplodingAgent())
        engine.add_task(Task(id="T1", agent_name="Exploder"))
        engine.add_task(
            Task(id="T2", agent_name="Recorder", input="{taskResult:T1}", dependencies=["T1"])
        )

        results = await engine.execute()

        assert results["T2"].success is True
        # placeholder for a failed task stays literal
        assert recorder.inputs == ["{taskResult:T1}"]

    @pytest.mark.asyncio
    async def test_failed_upstream_skipped_with_skip_policy(self, recorder):
        engine = WorkflowEngine(upstream_failure_policy=UpstreamFailurePolicy.SKIP)
        engine.add_agent(recorder)
        engine.add_agent(ExplodingAgent())
        engine.add_task(Task(id="T1", agent_name="Exploder"))
        engine.add_task(Task(id="T2", agent_name="Recorder", dependencies=["T1"]))
        engine.add_task(Task(id="T3", agent_name="Recorder", dependencies=["T2"]))

        results = await engine.execute()

        assert results["T2"].success is False
        assert results["T2"].metadata.skipped is True
        assert results["T3"].metadata.skipped is True
        assert recorder.inputs == []

    @pytest.mark.asyncio
    async def test_invalid_graph_runs_nothing(self, engine, recorder):
        engine.add_task(Task(id="T1", agent_name="Recorder"))
        engine.add_task(Task(id="T2", agent_name="Recorder", dependencies=["ghost"]))

        with pytest.raises(WorkflowConfigError):
            await engine.execute()

        assert recorder.inputs == []
        assert engine.is_running is False

    @pytest.mark.asyncio
    async def test_concurrent_execute_rejected(self):
        blocker = BlockingAgent()
        engine = WorkflowEngine()
        engine.add_agent(blocker)
        engine.add_task(Task(id="T1", agent_name="Blocker"))

        run = asyncio.create_task(engine.execute())
        await blocker.started.wait()

        assert engine.is_running
        with pytest.raises(WorkflowRunningError):
            await engine.execute()
        with pytest.raises(WorkflowRunningError):
            engine.reset()

        blocker.release.set()
        results = await run
        assert results["T1"].success is True
        assert engine.is_running is False

    @pytest.mark.asyncio
    async def test_results_and_reset(self, engine):
        engine.add_task(Task(id="T1", agent_name="Recorder"))
        await engine.execute()

        assert isinstance(engine.get_result("T1"), TaskResult)
        assert set(engine.get_results()) == {"T1"}

        engine.reset()

        assert engine.get_result("T1") is None
        assert engine.get_state() == {}


class TestListeners:
    @pytest.mark.asyncio
    async def test_event_sequence(self, engine):
        events: list[WorkflowEvent] = []
        engine.add_listener(events.append)
        engine.add_agent(ExplodingAgent())
        engine.add_task(Task(id="T1", agent_name="Recorder"))
        engine.add_task(Task(id="T2", agent_name="Exploder"))

        await engine.execute()

        assert [(event.type, event.task_id) for event in events] == [
            ("workflow_started", None),
            ("task_started", "T1"),
            ("task_completed", "T1"),
            ("task_started", "T2"),
            ("task_failed", "T2"),
            ("workflow_completed", None),
        ]
        assert events[2].result.success is True

    @pytest.mark.asyncio
    async def test_async_listener_and_listener_errors(self, engine):
        received = []

        async def async_listener(event):
            received.append(event.type)

        def broken_listener(event):
            raise ValueError("listener bug")

        engine.add_listener(broken_listener)
        engine.add_listener(async_listener)
        engine.add_task(Task(id="T1", agent_name="Recorder"))

        results = await engine.execute()

        assert results["T1"].success is True
        assert received[0] == "workflow_started"
        assert received[-1] == "workflow_completed"


class TestResolveInput:
    def make_context(self, results=None, state=None):
        return AgentContext(task_id="T", results=results or {}, state=state or {})

    def test_unknown_placeholders_left_alone(self):
        context = self.make_context()
        assert resolve_input("{taskResult:nope} {globalState.nope}", context) == (
            "{taskResult:nope} {globalState.nope}"
        )

    def test_failed_result_ref_resolves_to_none(self):
        failed = TaskResult(task_id="A", success=False, data={"x": 1}, error="boom")
        context = self.make_context(results={"A": failed})

        assert resolve_input(ResultRef(task_id="A"), context) is None
        assert resolve_input("{taskResult:A}", context) == "{taskResult:A}"

    def test_non_string_values_pass_through(self):
        context = self.make_context()
        assert resolve_input(42, context) == 42
        assert resolve_input(None, context) is None

    def test_compact_json(self):
        assert compact_json({"a": [1, 2], "b": "é"}) == '{"a":[1,2],"b":"é"}'
