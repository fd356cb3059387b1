"""Base provider contract."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime

import structlog

from lumosgen.ai.types import (
    GenerationRequest,
    GenerationResponse,
    ProviderConfig,
    ProviderKind,
    UsageStats,
)

logger = structlog.get_logger()


class Provider(ABC):
    """Base class for text generation backends.

    A provider turns a GenerationRequest into a GenerationResponse or raises a
    classified ProviderError. Each provider keeps its own cumulative usage.
    """

    kind: ProviderKind
    name: str
    default_model: str

    def __init__(self, config: ProviderConfig | None = None):
        """Initialize provider.

        Args:
            config: Initial configuration (defaults for this provider kind if None)
        """
        self.config = config or ProviderConfig(kind=self.kind)
        self._stats = UsageStats(provider=self.kind.value)
        self._initialized = False

    @abstractmethod
    async def initialize(self, config: ProviderConfig | None = None) -> None:
        """Apply configuration and verify the backend can be reached.

        Raises:
            ProviderError: If the provider cannot be used
        """
        pass

    def is_available(self) -> bool:
        """Whether the provider is initialized and enabled."""
        return self._initialized and self.config.enabled

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Produce a completion for the request.

        Raises:
            ProviderError: On any failure
        """
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Probe the backend with a minimal request."""
        pass

    @abstractmethod
    def get_cost_estimate(self, token_count: int) -> float:
        """Estimated cost in USD for a token budget."""
        pass

    def get_usage_stats(self) -> UsageStats:
        """Copy of this provider's cumulative usage."""
        return self._stats.model_copy(deep=True)

    def reset_stats(self) -> None:
        self._stats = UsageStats(provider=self.kind.value)

    async def close(self) -> None:
        """Release any held resources."""
        self._initialized = False

    @property
    def model(self) -> str:
        return self.config.model or self.default_model

    def _record_success(self, response: GenerationResponse) -> None:
        stats = self._stats.model_copy(deep=True)
        stats.requests += 1
        stats.tokens.input += response.usage.input
        stats.tokens.output += response.usage.output
        stats.tokens.total += response.usage.total
        stats.cost += response.cost or 0.0
        stats.last_used = datetime.now(UTC)
        self._stats = stats

    def _record_failure(self) -> None:
        stats = self._stats.model_copy(deep=True)
        stats.requests += 1
        stats.errors += 1
        stats.last_used = datetime.now(UTC)
        self._stats = stats
        logger.debug("provider_failure_recorded", provider=self.kind.value, errors=stats.errors)
