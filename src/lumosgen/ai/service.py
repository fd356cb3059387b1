"""AI service orchestrator.

Owns the provider registry and the degradation strategy. ``generate`` walks the
strategy in order, giving each available provider one retry for retryable
failures, and raises AllProvidersFailedError only when every provider is
exhausted.
"""

import asyncio
import time
from datetime import date
from enum import Enum

import httpx
import structlog

from lumosgen.ai.errors import AllProvidersFailedError, ErrorKind, ProviderError
from lumosgen.ai.monitor import UsageMonitor
from lumosgen.ai.providers import Provider, create_provider
from lumosgen.ai.types import (
    DetailedUsageStats,
    GenerationRequest,
    GenerationResponse,
    HealthReport,
    MonitoringConfig,
    ProviderConfig,
    ProviderHealth,
    ProviderKind,
    ServiceConfig,
)
from lumosgen.config import Settings, build_service_config, get_settings

logger = structlog.get_logger()

MAX_ATTEMPTS_PER_PROVIDER = 2


class AttemptState(str, Enum):
    """States of the per-provider attempt machine."""

    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    EXHAUSTED = "exhausted"
    SUCCEEDED = "succeeded"


class AIService:
    """Provider selection, degradation and retry around text generation."""

    def __init__(
        self,
        config: ServiceConfig,
        monitor: UsageMonitor | None = None,
        retry_backoff: float = 1.0,
        attempt_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        providers: dict[ProviderKind, Provider] | None = None,
    ):
        """Initialize the service.

        Args:
            config: Provider and strategy configuration
            monitor: Usage monitor (a fresh one if None)
            retry_backoff: Seconds to wait before the single retry of a provider
            attempt_timeout: Upper bound in seconds for one attempt (None disables)
            transport: httpx transport handed to remote providers
            providers: Pre-built providers keyed by kind (built from config if None)
        """
        self._config = config.model_copy(deep=True)
        self.monitor = monitor or UsageMonitor()
        self.retry_backoff = retry_backoff
        self.attempt_timeout = attempt_timeout
        self._transport = transport
        if providers is None:
            providers = {
                cfg.kind: create_provider(cfg, transport) for cfg in self._config.provider_configs()
            }
        self._providers: dict[ProviderKind, Provider] = dict(providers)
        self._retired: list[Provider] = []
        self._current: ProviderKind | None = None
        self._config_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AIService":
        """Build a service (and its monitor) from application settings."""
        if settings is None:
            settings = get_settings()
        monitor = UsageMonitor(
            daily_threshold=settings.daily_cost_threshold,
            total_threshold=settings.total_cost_threshold,
            retention_days=settings.usage_retention_days,
        )
        return cls(
            build_service_config(settings),
            monitor=monitor,
            retry_backoff=settings.retry_backoff_seconds,
            transport=transport,
        )

    @property
    def current_provider(self) -> ProviderKind | None:
        """Provider that served the last successful request."""
        return self._current

    async def initialize(self) -> None:
        """Initialize every configured provider concurrently.

        Provider failures are logged, not raised. The current provider becomes
        the first available one in strategy order.
        """
        providers = dict(self._providers)
        results = await asyncio.gather(
            *(self._initialize_provider(kind, provider) for kind, provider in providers.items())
        )

        available = self.get_available_providers()
        self._current = available[0] if available else None
        if self._config.monitoring.enabled:
            self.monitor.start()

        logger.info(
            "ai_service_initialized",
            initialized=sum(results),
            configured=len(results),
            available=[kind.value for kind in available],
            current_provider=self._current.value if self._current else None,
        )

    async def _initialize_provider(self, kind: ProviderKind, provider: Provider) -> bool:
        if not provider.config.enabled:
            logger.info("provider_disabled", provider=kind.value)
            return False
        try:
            await provider.initialize()
        except ProviderError as e:
            logger.warning(
                "provider_initialization_failed",
                provider=kind.value,
                kind=e.kind.value,
                error=e.message,
            )
            return False
        return True

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Generate a completion, degrading across providers.

        Args:
            request: Generation request

        Returns:
            Response from the first provider that succeeds

        Raises:
            AllProvidersFailedError: If every provider in the strategy failed
        """
        strategy = list(self._config.degradation_strategy)
        providers = dict(self._providers)
        errors: dict[str, ProviderError] = {}

        for kind in strategy:
            provider = providers.get(kind)
            if provider is None or not provider.is_available():
                logger.debug("provider_skipped", provider=kind.value)
                continue

            response, error = await self._run_attempts(provider, request)
            if response is not None:
                self._current = kind
                return response

            errors[kind.value] = error
            logger.warning(
                "provider_exhausted",
                provider=kind.value,
                kind=error.kind.value,
                error=error.message,
            )

        self._current = None
        logger.error("all_providers_failed", providers=list(errors))
        raise AllProvidersFailedError(errors)

    async def _run_attempts(
        self, provider: Provider, request: GenerationRequest
    ) -> tuple[GenerationResponse | None, ProviderError | None]:
        state = AttemptState.ATTEMPTING
        attempts = 0
        response: GenerationResponse | None = None
        last_error: ProviderError | None = None

        while True:
            if state is AttemptState.ATTEMPTING:
                attempts += 1
                try:
                    response = await self._attempt(provider, request)
                    state = AttemptState.SUCCEEDED
                except ProviderError as e:
                    last_error = e
                    if e.retryable and attempts < MAX_ATTEMPTS_PER_PROVIDER:
                        state = AttemptState.BACKOFF
                    else:
                        state = AttemptState.EXHAUSTED

            elif state is AttemptState.BACKOFF:
                logger.info(
                    "provider_retry_scheduled",
                    provider=provider.kind.value,
                    attempt=attempts,
                    backoff=self.retry_backoff,
                )
                await asyncio.sleep(self.retry_backoff)
                state = AttemptState.ATTEMPTING

            elif state is AttemptState.SUCCEEDED:
                return response, None

            else:
                return None, last_error

    async def _attempt(self, provider: Provider, request: GenerationRequest) -> GenerationResponse:
        start = time.perf_counter()
        try:
            if self.attempt_timeout is not None:
                response = await asyncio.wait_for(
                    provider.generate(request), timeout=self.attempt_timeout
                )
            else:
                response = await provider.generate(request)
        except TimeoutError as e:
            error = ProviderError(
                ErrorKind.NETWORK,
                provider.kind.value,
                f"Attempt exceeded {self.attempt_timeout}s",
            )
            self._record(provider.kind, None, start, error)
            raise error from e
        except ProviderError as e:
            self._record(provider.kind, None, start, e)
            raise

        self._record(provider.kind, response, start)
        return response

    def _record(
        self,
        kind: ProviderKind,
        response: GenerationResponse | None,
        start: float,
        error: ProviderError | None = None,
    ) -> None:
        monitoring = self._config.monitoring
        if not (monitoring.enabled and monitoring.track_usage):
            return
        if response is not None and not monitoring.track_costs:
            response = response.model_copy(update={"cost": 0.0})
        elapsed_ms = (time.perf_counter() - start) * 1000
        self.monitor.record_request(kind, response, elapsed_ms, error)

    async def test_connection(self, kind: ProviderKind | None = None) -> bool:
        """Probe one provider (the current one by default)."""
        target = kind or self._current
        if target is None:
            return False
        provider = self._providers.get(target)
        if provider is None:
            return False
        return await provider.test_connection()

    def get_available_providers(self) -> list[ProviderKind]:
        """Available providers in strategy order."""
        providers = dict(self._providers)
        return [
            kind
            for kind in self._config.degradation_strategy
            if kind in providers and providers[kind].is_available()
        ]

    async def health_check(self) -> HealthReport:
        """Summarize provider availability.

        Returns:
            HealthReport: healthy with two or more available providers,
            degraded with one, unhealthy with none
        """
        providers: dict[str, ProviderHealth] = {}
        for kind, provider in dict(self._providers).items():
            stats = provider.get_usage_stats()
            providers[kind.value] = ProviderHealth(
                available=provider.is_available(),
                last_used=stats.last_used,
                errors=stats.errors,
            )

        available = sum(1 for health in providers.values() if health.available)
        if available >= 2:
            status = "healthy"
        elif available == 1:
            status = "degraded"
        else:
            status = "unhealthy"

        return HealthReport(
            status=status,
            providers=providers,
            current_provider=self._current.value if self._current else None,
        )

    def get_usage_stats(self) -> dict[str, DetailedUsageStats]:
        return self.monitor.get_stats()

    def get_total_cost(self) -> float:
        return self.monitor.get_total_cost()

    def get_daily_cost(self, day: str | date | None = None) -> float:
        return self.monitor.get_daily_cost(day)

    def get_cost_estimate(self, token_count: int, kind: ProviderKind | None = None) -> float:
        """Estimated cost of a token budget on one provider.

        Args:
            token_count: Total token budget
            kind: Provider to price (current, else first in strategy, if None)

        Returns:
            Estimated cost in USD
        """
        target = kind or self._current or self._config.degradation_strategy[0]
        provider = self._providers.get(target)
        if provider is None:
            return 0.0
        return provider.get_cost_estimate(token_count)

    def get_config(self) -> ServiceConfig:
        return self._config.model_copy(deep=True)

    async def update_config(
        self,
        primary: ProviderConfig | None = None,
        fallback: ProviderConfig | None = None,
        mock: ProviderConfig | None = None,
        degradation_strategy: list[ProviderKind] | None = None,
        monitoring: MonitoringConfig | None = None,
    ) -> ServiceConfig:
        """Apply a configuration change.

        Providers whose configuration changed are rebuilt and initialized
        before being swapped in. Requests already in flight keep using the
        providers they started with.

        Returns:
            The new configuration
        """
        async with self._config_lock:
            updates = {
                "primary": primary,
                "fallback": fallback,
                "mock": mock,
                "degradation_strategy": degradation_strategy,
                "monitoring": monitoring,
            }
            new_config = self._config.model_copy(
                update={key: value for key, value in updates.items() if value is not None},
                deep=True,
            )

            old_configs = {cfg.kind: cfg for cfg in self._config.provider_configs()}
            new_providers = dict(self._providers)
            changed = []
            for cfg in new_config.provider_configs():
                if old_configs.get(cfg.kind) == cfg and cfg.kind in new_providers:
                    continue
                provider = create_provider(cfg, self._transport)
                await self._initialize_provider(cfg.kind, provider)
                if cfg.kind in new_providers:
                    self._retired.append(new_providers[cfg.kind])
                new_providers[cfg.kind] = provider
                changed.append(cfg.kind.value)

            self._providers = new_providers
            self._config = new_config
            if self._current is not None and self._current not in self.get_available_providers():
                available = self.get_available_providers()
                self._current = available[0] if available else None

            logger.info("ai_service_config_updated", rebuilt=changed)
            return self.get_config()

    async def close(self) -> None:
        """Close provider HTTP clients and stop the monitor sweep."""
        for provider in [*self._providers.values(), *self._retired]:
            await provider.close()
        self._retired.clear()
        await self.monitor.stop()
        logger.info("ai_service_closed")
