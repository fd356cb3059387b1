"""Agents executed by the workflow engine."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

import structlog

from lumosgen.ai.types import ChatMessage, GenerationRequest
from lumosgen.content.generator import MarketingContentGenerator
from lumosgen.content.models import ContentGenerationOptions
from lumosgen.content.project import ProjectAnalysis
from lumosgen.workflow.context import AgentContext
from lumosgen.workflow.errors import WorkflowError
from lumosgen.workflow.models import AgentResult

BULLET = re.compile(r"^\s*(?:[-*]|\d+\.)\s+(.+)$", re.MULTILINE)


class BaseAgent(ABC):
    """Base class for workflow agents.

    All agents must implement:
    - execute(): Main execution logic
    """

    def __init__(self, name: str, role: str, goal: str, background: str):
        """Initialize base agent.

        Args:
            name: Unique agent name tasks refer to
            role: Short role description used in the persona
            goal: What the agent tries to achieve
            background: Persona background for the system message
        """
        self.name = name
        self.role = role
        self.goal = goal
        self.background = background
        self.logger = structlog.get_logger(self.__module__)

    @abstractmethod
    async def execute(self, input: Any, context: AgentContext) -> AgentResult:
        """Execute agent logic.

        Args:
            input: Task input with placeholders and references resolved
            context: Run context

        Returns:
            AgentResult passed downstream
        """
        pass

    def persona(self) -> str:
        return f"You are {self.name}, a {self.role}. {self.background}\n\nGoal: {self.goal}"

    async def call_llm(
        self,
        prompt: str,
        context: AgentContext,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        """Send the persona and a prompt to the orchestrator.

        Raises:
            WorkflowError: If the run has no AI service
            AllProvidersFailedError: If no provider could answer
        """
        if context.ai_service is None:
            raise WorkflowError(f"{self.name} requires an AI service")
        request = GenerationRequest(
            messages=[
                ChatMessage(role="system", content=self.persona()),
                ChatMessage(role="user", content=prompt),
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        response = await context.ai_service.generate(request)
        self.logger.debug(
            "agent_llm_call",
            agent=self.name,
            provider=response.provider.value,
            tokens=response.usage.total,
        )
        return response.content


def coerce_analysis(value: Any) -> ProjectAnalysis:
    """Accept a ProjectAnalysis, its dict form or its JSON text."""
    if isinstance(value, ProjectAnalysis):
        return value
    if isinstance(value, str):
        return ProjectAnalysis.model_validate_json(value)
    if isinstance(value, dict):
        return ProjectAnalysis.model_validate(value)
    raise WorkflowError(f"Expected a project analysis, got {type(value).__name__}")


def strategy_text(value: Any) -> str | None:
    """Extract the strategy text from a ContentAnalyzer result in any form."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return value
    if isinstance(value, dict):
        return value.get("strategy")
    return str(value)


class ContentAnalyzerAgent(BaseAgent):
    """Turns a project analysis into a content strategy."""

    def __init__(self):
        super().__init__(
            name="ContentAnalyzer",
            role="Content Strategy Analyst",
            goal="Derive a clear content strategy from the project analysis",
            background=(
                "You are an experienced developer marketer who turns technical "
                "projects into clear positioning and messaging."
            ),
        )

    def build_prompt(self, analysis: ProjectAnalysis, target_audience: str, content_type: str) -> str:
        metadata = analysis.metadata
        features = "\n".join(f"- {feature.name}" for feature in analysis.features[:10])
        tech = ", ".join(
            tech.framework or tech.language for tech in analysis.tech_stack
        ) or "Not specified"
        return (
            f"Analyze this project and propose a content strategy for the {content_type} page.\n\n"
            f"Name: {metadata.name}\n"
            f"Description: {metadata.description or 'Not provided'}\n"
            f"Tech stack: {tech}\n"
            f"Features:\n{features or '- Not specified'}\n\n"
            f"Target audience: {target_audience}\n\n"
            "List the key messages as bullet points, then recommendations."
        )

    async def execute(self, input: Any, context: AgentContext) -> AgentResult:
        input = input or {}
        analysis = coerce_analysis(input.get("project_analysis"))
        target_audience = input.get("target_audience") or "developers and technical teams"
        content_type = input.get("content_type") or "homepage"

        strategy = await self.call_llm(
            self.build_prompt(analysis, target_audience, content_type), context
        )
        key_messages = [match.group(1).strip() for match in BULLET.finditer(strategy)]

        return AgentResult(
            success=bool(strategy.strip()),
            data={
                "strategy": strategy,
                "key_messages": key_messages[:10],
                "target_audience": target_audience,
                "content_type": content_type,
            },
            error=None if strategy.strip() else "Empty content strategy",
            confidence=0.85,
            metadata={"project": analysis.metadata.name},
        )


class ContentGeneratorAgent(BaseAgent):
    """Generates a quality-checked page through the content generator."""

    def __init__(self, max_retries: int = 2):
        super().__init__(
            name="ContentGenerator",
            role="Technical Marketing Writer",
            goal="Produce structured, publication ready marketing pages",
            background=(
                "You write developer-focused marketing content that follows the "
                "requested structure exactly."
            ),
        )
        self.max_retries = max_retries

    async def execute(self, input: Any, context: AgentContext) -> AgentResult:
        if context.ai_service is None:
            raise WorkflowError(f"{self.name} requires an AI service")

        input = input or {}
        analysis = coerce_analysis(input.get("project_analysis"))
        content_type = input.get("content_type") or "homepage"
        options = ContentGenerationOptions(tone=input.get("tone") or "professional")

        strategy = strategy_text(input.get("content_strategy"))

        generator = MarketingContentGenerator(context.ai_service, max_retries=self.max_retries)
        artifact = await generator.generate_with_template(
            content_type, analysis, options, strategy=strategy
        )

        return AgentResult(
            success=True,
            data=artifact.model_dump(mode="json"),
            confidence=artifact.score / 100,
            metadata={
                "score": artifact.score,
                "attempts": artifact.attempts,
                "used_fallback": artifact.used_fallback,
                "strategy_applied": strategy is not None,
            },
        )
