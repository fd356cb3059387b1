"""Data models shared by providers, the usage monitor and the AI service."""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class ProviderKind(str, Enum):
    """Closed set of supported providers."""

    DEEPSEEK = "deepseek"
    OPENAI = "openai"
    MOCK = "mock"


class ChatMessage(BaseModel):
    """A single role-tagged message in a conversation."""

    role: Literal["system", "user", "assistant"]
    content: str


class GenerationRequest(BaseModel):
    """Request for a chat completion."""

    messages: list[ChatMessage]
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    stream: bool = False

    @field_validator("messages")
    @classmethod
    def validate_messages(cls, value: list[ChatMessage]) -> list[ChatMessage]:
        """Requests must carry at least one message."""
        if not value:
            raise ValueError("messages must not be empty")
        return value

    def prompt_text(self) -> str:
        """All message contents joined with spaces."""
        return " ".join(message.content for message in self.messages)


class TokenUsage(BaseModel):
    """Token counts for one completion. ``total`` is always input + output."""

    input: int = 0
    output: int = 0
    total: int = 0

    @model_validator(mode="after")
    def derive_total(self) -> "TokenUsage":
        self.total = self.input + self.output
        return self


class GenerationResponse(BaseModel):
    """Generated text plus accounting information."""

    content: str
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    provider: ProviderKind
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    cost: float | None = None


class ProviderConfig(BaseModel):
    """Provider descriptor built from settings at startup."""

    kind: ProviderKind
    enabled: bool = True
    api_key: str | None = None
    endpoint: str | None = None
    model: str | None = None
    timeout: float = 30.0

    # OpenAI only
    organization: str | None = None

    # DeepSeek only
    use_discount_pricing: bool = True

    # Mock only
    response_delay: float = 0.0
    simulate_errors: bool = False
    error_rate: float = 0.05
    seed: int | None = None


class MonitoringConfig(BaseModel):
    """Which usage data the service records."""

    enabled: bool = True
    track_costs: bool = True
    track_usage: bool = True


class ServiceConfig(BaseModel):
    """Configuration consumed by the AI service."""

    primary: ProviderConfig
    fallback: ProviderConfig | None = None
    mock: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(kind=ProviderKind.MOCK)
    )
    degradation_strategy: list[ProviderKind] = Field(
        default_factory=lambda: [ProviderKind.DEEPSEEK, ProviderKind.OPENAI, ProviderKind.MOCK]
    )
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    def provider_configs(self) -> list[ProviderConfig]:
        """Configured providers in primary, fallback, mock order."""
        configs = [self.primary]
        if self.fallback is not None:
            configs.append(self.fallback)
        configs.append(self.mock)
        return configs


class TokenCounts(BaseModel):
    """Cumulative token counters."""

    input: int = 0
    output: int = 0
    total: int = 0


class UsageStats(BaseModel):
    """Cumulative usage for one provider (or one provider-day)."""

    provider: str
    requests: int = 0
    tokens: TokenCounts = Field(default_factory=TokenCounts)
    cost: float = 0.0
    errors: int = 0
    last_used: datetime | None = None


class DetailedUsageStats(UsageStats):
    """Usage record kept by the monitor, with derived metrics."""

    average_response_time: float = 0.0
    p95_response_time: float = 0.0
    success_rate: float = 100.0
    cost_per_request: float = 0.0
    cost_per_token: float = 0.0
    response_times: list[float] = Field(default_factory=list)
    daily_usage: dict[str, UsageStats] = Field(default_factory=dict)


class CostAlert(BaseModel):
    """A cost threshold that has been crossed."""

    scope: Literal["daily", "total"]
    threshold: float
    provider: str
    current: float
    triggered: bool = True
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PerformanceMetrics(BaseModel):
    """Latency and error snapshot for one provider."""

    average_latency: float = 0.0
    p95_latency: float = 0.0
    error_rate: float = 0.0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CostSavings(BaseModel):
    """Estimated savings of DeepSeek usage against a reference OpenAI model."""

    amount: float = 0.0
    percentage: float = 0.0
    comparison: str = "No comparison data available"


class ProviderHealth(BaseModel):
    """Availability summary for one provider."""

    available: bool
    last_used: datetime | None = None
    errors: int = 0


class HealthReport(BaseModel):
    """Aggregate health of the AI service."""

    status: Literal["healthy", "degraded", "unhealthy"]
    providers: dict[str, ProviderHealth] = Field(default_factory=dict)
    current_provider: str | None = None
