"""Run context and task input resolution."""

import json
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from lumosgen.workflow.models import ResultRef, StateRef, TaskResult

if TYPE_CHECKING:
    from lumosgen.ai.service import AIService

TASK_RESULT_PLACEHOLDER = re.compile(r"\{taskResult:(\w+)\}")
STATE_PLACEHOLDER = re.compile(r"\{globalState\.(\w+)\}")


class AgentContext:
    """What an agent sees while executing a task."""

    def __init__(
        self,
        task_id: str,
        results: Mapping[str, TaskResult],
        state: dict[str, Any],
        ai_service: "AIService | None" = None,
    ):
        """Initialize context.

        Args:
            task_id: Task being executed
            results: Results of tasks that already ran in this run
            state: Run state shared by every task
            ai_service: Orchestrator for LLM calls
        """
        self.task_id = task_id
        self.results = results
        self.state = state
        self.ai_service = ai_service


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def compact_json(value: Any) -> str:
    """Serialize without whitespace between separators."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)


def substitute_placeholders(text: str, context: AgentContext) -> str:
    """Replace ``{taskResult:<id>}`` and ``{globalState.<key>}`` in a string.

    Task placeholders are replaced only when that task succeeded. Unknown
    placeholders are left as they are.
    """

    def task_result(match: re.Match) -> str:
        result = context.results.get(match.group(1))
        if result is None or not result.success:
            return match.group(0)
        return compact_json(result.data)

    def state_value(match: re.Match) -> str:
        key = match.group(1)
        if key not in context.state:
            return match.group(0)
        value = context.state[key]
        return value if isinstance(value, str) else compact_json(value)

    text = TASK_RESULT_PLACEHOLDER.sub(task_result, text)
    return STATE_PLACEHOLDER.sub(state_value, text)


def resolve_input(value: Any, context: AgentContext) -> Any:
    """Resolve placeholders and structured references in a task input.

    Strings get placeholder substitution, mappings and lists are resolved
    recursively, and ResultRef/StateRef become the referenced Python objects
    (None when the task did not succeed or the key is missing).
    """
    if isinstance(value, str):
        return substitute_placeholders(value, context)
    if isinstance(value, ResultRef):
        result = context.results.get(value.task_id)
        return result.data if result is not None and result.success else None
    if isinstance(value, StateRef):
        return context.state.get(value.key)
    if isinstance(value, Mapping):
        return {key: resolve_input(item, context) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_input(item, context) for item in value]
    return value
