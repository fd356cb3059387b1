"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable

import httpx
import pytest

from lumosgen.ai.monitor import UsageMonitor
from lumosgen.ai.service import AIService
from lumosgen.ai.types import MonitoringConfig, ProviderConfig, ProviderKind, ServiceConfig
from lumosgen.content.project import ProjectAnalysis, ProjectFeature, ProjectMetadata, TechStack


def chat_completion(content: str, prompt_tokens: int = 10, completion_tokens: int = 20) -> dict:
    """Body of a successful chat completion response."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


def json_transport(
    handler: Callable[[httpx.Request], tuple[int, dict | str]],
) -> httpx.MockTransport:
    """MockTransport whose handler returns (status, body)."""

    def respond(request: httpx.Request) -> httpx.Response:
        status, body = handler(request)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, content=json.dumps(body).encode())

    return httpx.MockTransport(respond)


@pytest.fixture
def ok_transport() -> httpx.MockTransport:
    """Transport answering every request with a short completion."""
    return json_transport(lambda request: (200, chat_completion("Hello from the API")))


@pytest.fixture
def mock_only_config() -> ServiceConfig:
    """Service config where only the mock provider can initialize."""
    return ServiceConfig(
        primary=ProviderConfig(kind=ProviderKind.DEEPSEEK, api_key=None),
        fallback=ProviderConfig(kind=ProviderKind.OPENAI, api_key=None),
        mock=ProviderConfig(kind=ProviderKind.MOCK, seed=42),
        degradation_strategy=[ProviderKind.DEEPSEEK, ProviderKind.OPENAI, ProviderKind.MOCK],
        monitoring=MonitoringConfig(enabled=False),
    )


@pytest.fixture
def mock_service(mock_only_config: ServiceConfig) -> AIService:
    """Uninitialized service backed by the mock provider only."""
    return AIService(mock_only_config, monitor=UsageMonitor(), retry_backoff=0)


@pytest.fixture
def sample_analysis() -> ProjectAnalysis:
    """Analysis of a small Python CLI project."""
    return ProjectAnalysis(
        metadata=ProjectMetadata(
            name="quickdocs",
            description="Generate API documentation from docstrings",
            version="2.1.0",
            author="Jane Developer",
            repository_url="https://github.com/example/quickdocs",
            keywords=["documentation", "cli"],
        ),
        tech_stack=[
            TechStack(language="Python", category="backend", confidence=0.9),
            TechStack(language="Python", framework="Click", category="tool"),
        ],
        features=[
            ProjectFeature(name="Docstring parsing", description="Docstring parsing for Google style"),
            ProjectFeature(name="Markdown output", description="Markdown output for static sites"),
        ],
    )


@pytest.fixture
def rich_analysis(sample_analysis: ProjectAnalysis) -> ProjectAnalysis:
    """Analysis with enough features to warrant a blog post."""
    features = [
        ProjectFeature(name=f"Feature {i}", description=f"Feature number {i} description")
        for i in range(5)
    ]
    return sample_analysis.model_copy(update={"features": features})
