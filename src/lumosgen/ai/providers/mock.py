"""Mock provider: deterministic local stand-in for the remote backends."""

import asyncio
import math
import random

import structlog

from lumosgen.ai.errors import ErrorKind, ProviderError
from lumosgen.ai.providers import mock_content
from lumosgen.ai.providers.base import Provider
from lumosgen.ai.types import (
    GenerationRequest,
    GenerationResponse,
    ProviderConfig,
    ProviderKind,
    TokenUsage,
)

logger = structlog.get_logger()

# Checked in order against the lowercased last message
KEYWORD_RESPONSES: list[tuple[tuple[str, ...], str]] = [
    (("homepage", "landing page"), mock_content.HOMEPAGE),
    (("about", "company"), mock_content.ABOUT),
    (("blog", "article"), mock_content.BLOG),
    (("faq", "questions"), mock_content.FAQ),
    (("seo", "keywords"), mock_content.SEO),
    (("analyze", "project"), mock_content.PROJECT_ANALYSIS),
    (("hello", "hi"), mock_content.GREETING),
]


def estimate_tokens(text: str) -> int:
    """Rough token estimate of about four characters per token."""
    return math.ceil(len(text) / 4)


def select_content(text: str) -> str:
    """Pick a canned response by keyword matching."""
    lowered = text.lower()
    for keywords, content in KEYWORD_RESPONSES:
        if any(keyword in lowered for keyword in keywords):
            return content
    return mock_content.DEFAULT.format(request=text)


class MockProvider(Provider):
    """Free provider returning canned marketing content."""

    kind = ProviderKind.MOCK
    name = "Mock"
    default_model = "mock-model"

    def __init__(self, config: ProviderConfig | None = None):
        super().__init__(config)
        self._rng = random.Random(self.config.seed)

    async def initialize(self, config: ProviderConfig | None = None) -> None:
        if config is not None:
            self.config = config
            self._rng = random.Random(config.seed)
        self._initialized = True
        logger.info("provider_initialized", provider=self.kind.value, model=self.model)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        if not self.is_available():
            raise ProviderError(
                ErrorKind.UNKNOWN, self.kind.value, "Mock provider is not available"
            )

        if self.config.response_delay > 0:
            await asyncio.sleep(self.config.response_delay)

        if self.config.simulate_errors and self._rng.random() < self.config.error_rate:
            self._record_failure()
            raise ProviderError(
                ErrorKind.NETWORK, self.kind.value, "Simulated mock provider error"
            )

        content = select_content(request.messages[-1].content)
        response = GenerationResponse(
            content=content,
            model=request.model or self.model,
            usage=TokenUsage(
                input=estimate_tokens(request.prompt_text()),
                output=estimate_tokens(content),
            ),
            provider=self.kind,
            cost=0.0,
        )
        self._record_success(response)
        return response

    async def test_connection(self) -> bool:
        return self.is_available()

    def get_cost_estimate(self, token_count: int) -> float:
        return 0.0
