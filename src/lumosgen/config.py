"""Configuration management for LumosGen."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lumosgen.ai.types import MonitoringConfig, ProviderConfig, ProviderKind, ServiceConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # DeepSeek (primary) Configuration
    deepseek_api_key: str | None = Field(default=None, description="DeepSeek API key")
    deepseek_endpoint: str = Field(
        default="https://api.deepseek.com", description="DeepSeek API base URL"
    )
    deepseek_model: str = Field(default="deepseek-chat", description="DeepSeek model")
    deepseek_discount_pricing: bool = Field(
        default=True, description="Apply off-peak discount pricing to cost estimates"
    )

    # OpenAI (fallback) Configuration
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_endpoint: str = Field(
        default="https://api.openai.com/v1", description="OpenAI API base URL"
    )
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI model")
    openai_organization: str | None = Field(
        default=None, description="Optional OpenAI organization header"
    )

    # Mock (local) Configuration
    mock_enabled: bool = Field(default=True, description="Enable the local mock provider")
    mock_response_delay: float = Field(
        default=0.0, description="Simulated mock latency in seconds"
    )
    mock_simulate_errors: bool = Field(default=False, description="Simulate mock failures")
    mock_error_rate: float = Field(default=0.05, description="Mock failure probability")

    # Orchestration Configuration
    degradation_strategy: str = Field(
        default="deepseek,openai,mock",
        description="Comma separated provider order tried by the orchestrator",
    )
    request_timeout: float = Field(default=30.0, description="Per-request HTTP timeout (seconds)")
    retry_backoff_seconds: float = Field(
        default=1.0, description="Delay before retrying a retryable provider failure"
    )

    # Workflow / Content Configuration
    workflow_task_timeout: float = Field(
        default=60.0, description="Maximum seconds a single workflow task may run"
    )
    max_content_retries: int = Field(
        default=2, description="Extra generation attempts when content scores poorly"
    )

    # Monitoring Configuration
    monitoring_enabled: bool = Field(default=True, description="Record usage statistics")
    daily_cost_threshold: float = Field(default=10.0, description="Daily cost alert (USD)")
    total_cost_threshold: float = Field(default=100.0, description="Total cost alert (USD)")
    usage_retention_days: int = Field(default=30, description="Days of daily usage to keep")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format: json or console")

    @field_validator("degradation_strategy")
    @classmethod
    def validate_strategy(cls, value: str) -> str:
        """Ensure every entry in the strategy names a known provider."""
        known = {kind.value for kind in ProviderKind}
        entries = [entry.strip().lower() for entry in value.split(",") if entry.strip()]
        if not entries:
            raise ValueError("degradation_strategy must name at least one provider")
        unknown = [entry for entry in entries if entry not in known]
        if unknown:
            raise ValueError(f"Unknown providers in degradation_strategy: {', '.join(unknown)}")
        return ",".join(entries)

    @property
    def strategy(self) -> list[ProviderKind]:
        """Degradation strategy as provider kinds, in priority order."""
        return [ProviderKind(entry) for entry in self.degradation_strategy.split(",")]


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def build_service_config(settings: Settings | None = None) -> ServiceConfig:
    """Create the orchestrator configuration from settings.

    The primary provider is the first remote provider in the strategy and the
    fallback the second one. The mock provider is always configured.

    Args:
        settings: Settings instance (uses global if None)

    Returns:
        ServiceConfig consumed by AIService
    """
    if settings is None:
        settings = get_settings()

    remote = {
        ProviderKind.DEEPSEEK: ProviderConfig(
            kind=ProviderKind.DEEPSEEK,
            api_key=settings.deepseek_api_key,
            endpoint=settings.deepseek_endpoint,
            model=settings.deepseek_model,
            use_discount_pricing=settings.deepseek_discount_pricing,
            timeout=settings.request_timeout,
        ),
        ProviderKind.OPENAI: ProviderConfig(
            kind=ProviderKind.OPENAI,
            api_key=settings.openai_api_key,
            endpoint=settings.openai_endpoint,
            model=settings.openai_model,
            organization=settings.openai_organization,
            timeout=settings.request_timeout,
        ),
    }

    ordered_remote = [kind for kind in settings.strategy if kind in remote]
    for kind in remote:
        if kind not in ordered_remote:
            ordered_remote.append(kind)

    return ServiceConfig(
        primary=remote[ordered_remote[0]],
        fallback=remote[ordered_remote[1]],
        mock=ProviderConfig(
            kind=ProviderKind.MOCK,
            enabled=settings.mock_enabled,
            response_delay=settings.mock_response_delay,
            simulate_errors=settings.mock_simulate_errors,
            error_rate=settings.mock_error_rate,
        ),
        degradation_strategy=settings.strategy,
        monitoring=MonitoringConfig(enabled=settings.monitoring_enabled),
    )
