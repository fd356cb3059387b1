"""Tests for the AI service orchestrator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import chat_completion, json_transport

from lumosgen.ai.errors import AllProvidersFailedError, ErrorKind, ProviderError
from lumosgen.ai.monitor import UsageMonitor
from lumosgen.ai.providers.base import Provider
from lumosgen.ai.service import AIService
from lumosgen.ai.types import (
    ChatMessage,
    GenerationRequest,
    GenerationResponse,
    MonitoringConfig,
    ProviderConfig,
    ProviderKind,
    ServiceConfig,
    TokenUsage,
)
from lumosgen.config import Settings

STRATEGY = [ProviderKind.DEEPSEEK, ProviderKind.OPENAI, ProviderKind.MOCK]


def make_request(text: str = "Write a landing page") -> GenerationRequest:
    return GenerationRequest(messages=[ChatMessage(role="user", content=text)])


def make_response(kind: ProviderKind, content: str = "ok", cost: float = 0.001) -> GenerationResponse:
    return GenerationResponse(
        content=content,
        model="test-model",
        usage=TokenUsage(input=10, output=5),
        provider=kind,
        cost=cost,
    )


def fake_provider(kind: ProviderKind, generate=None, available: bool = True) -> MagicMock:
    """Provider double with scripted generate behavior."""
    provider = MagicMock(spec=Provider)
    provider.kind = kind
    provider.config = ProviderConfig(kind=kind)
    provider.is_available.return_value = available
    provider.initialize = AsyncMock()
    provider.close = AsyncMock()
    provider.test_connection = AsyncMock(return_value=available)
    provider.generate = AsyncMock(side_effect=generate)
    provider.get_cost_estimate.return_value = 0.0
    return provider


def service_config(**overrides) -> ServiceConfig:
    values = {
        "primary": ProviderConfig(kind=ProviderKind.DEEPSEEK, api_key="sk-ds"),
        "fallback": ProviderConfig(kind=ProviderKind.OPENAI, api_key="sk-oa"),
        "mock": ProviderConfig(kind=ProviderKind.MOCK),
        "degradation_strategy": STRATEGY,
    }
    values.update(overrides)
    return ServiceConfig(**values)


def build_service(providers: dict[ProviderKind, MagicMock], **kwargs) -> AIService:
    return AIService(service_config(), retry_backoff=0, providers=providers, **kwargs)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_primary_success(self):
        deepseek = fake_provider(ProviderKind.DEEPSEEK, [make_response(ProviderKind.DEEPSEEK)])
        openai = fake_provider(ProviderKind.OPENAI)
        service = build_service({ProviderKind.DEEPSEEK: deepseek, ProviderKind.OPENAI: openai})

        response = await service.generate(make_request())

        assert response.provider == ProviderKind.DEEPSEEK
        assert service.current_provider == ProviderKind.DEEPSEEK
        openai.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_retryable_failure_falls_through_without_retry(self):
        deepseek = fake_provider(
            ProviderKind.DEEPSEEK,
            ProviderError(ErrorKind.UNAUTHORIZED, "deepseek", "bad key"),
        )
        openai = fake_provider(ProviderKind.OPENAI, [make_response(ProviderKind.OPENAI)])
        service = build_service({ProviderKind.DEEPSEEK: deepseek, ProviderKind.OPENAI: openai})

        response = await service.generate(make_request())

        assert response.provider == ProviderKind.OPENAI
        assert service.current_provider == ProviderKind.OPENAI
        assert deepseek.generate.await_count == 1

    @pytest.mark.asyncio
    async def test_retryable_failure_retried_once(self):
        deepseek = fake_provider(
            ProviderKind.DEEPSEEK,
            [
                ProviderError(ErrorKind.RATE_LIMITED, "deepseek", "slow down"),
                make_response(ProviderKind.DEEPSEEK),
            ],
        )
        openai = fake_provider(ProviderKind.OPENAI)
        service = build_service({ProviderKind.DEEPSEEK: deepseek, ProviderKind.OPENAI: openai})

        response = await service.generate(make_request())

        assert response.provider == ProviderKind.DEEPSEEK
        assert deepseek.generate.await_count == 2
        openai.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_retryable_failure_exhausts_after_two_attempts(self):
        deepseek = fake_provider(
            ProviderKind.DEEPSEEK,
            ProviderError(ErrorKind.NETWORK, "deepseek", "reset"),
        )
        mock = fake_provider(ProviderKind.MOCK, [make_response(ProviderKind.MOCK)])
        service = build_service({ProviderKind.DEEPSEEK: deepseek, ProviderKind.MOCK: mock})

        response = await service.generate(make_request())

        assert response.provider == ProviderKind.MOCK
        assert deepseek.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_unavailable_providers_are_skipped(self):
        deepseek = fake_provider(ProviderKind.DEEPSEEK, available=False)
        mock = fake_provider(ProviderKind.MOCK, [make_response(ProviderKind.MOCK)])
        service = build_service({ProviderKind.DEEPSEEK: deepseek, ProviderKind.MOCK: mock})

        response = await service.generate(make_request())

        assert response.provider == ProviderKind.MOCK
        deepseek.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_providers_failed(self):
        providers = {
            kind: fake_provider(kind, ProviderError(ErrorKind.QUOTA_EXCEEDED, kind.value, "quota"))
            for kind in STRATEGY
        }
        service = build_service(providers)
        service._current = ProviderKind.DEEPSEEK

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await service.generate(make_request())

        assert set(exc_info.value.errors) == {"deepseek", "openai", "mock"}
        assert exc_info.value.retryable is False
        assert service.current_provider is None

    @pytest.mark.asyncio
    async def test_no_available_provider(self):
        service = build_service({ProviderKind.MOCK: fake_provider(ProviderKind.MOCK, available=False)})

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await service.generate(make_request())

        assert exc_info.value.errors == {}

    @pytest.mark.asyncio
    async def test_attempt_timeout_becomes_network_error(self):
        async def slow(request):
            await asyncio.sleep(1)
            return make_response(ProviderKind.DEEPSEEK)

        deepseek = fake_provider(ProviderKind.DEEPSEEK, slow)
        mock = fake_provider(ProviderKind.MOCK, [make_response(ProviderKind.MOCK)])
        service = build_service(
            {ProviderKind.DEEPSEEK: deepseek, ProviderKind.MOCK: mock}, attempt_timeout=0.01
        )

        response = await service.generate(make_request())

        assert response.provider == ProviderKind.MOCK
        # timeout is retryable, so the provider was tried twice
        assert deepseek.generate.await_count == 2
        assert service.monitor.get_stats(ProviderKind.DEEPSEEK).errors == 2

    @pytest.mark.asyncio
    async def test_attempts_recorded_in_monitor(self):
        deepseek = fake_provider(
            ProviderKind.DEEPSEEK,
            [
                ProviderError(ErrorKind.RATE_LIMITED, "deepseek", "slow down"),
                make_response(ProviderKind.DEEPSEEK, cost=0.5),
            ],
        )
        service = build_service({ProviderKind.DEEPSEEK: deepseek})

        await service.generate(make_request())

        stats = service.get_usage_stats()["deepseek"]
        assert stats.requests == 2
        assert stats.errors == 1
        assert service.get_total_cost() == pytest.approx(0.5)
        assert service.get_daily_cost() == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_monitoring_disabled_records_nothing(self):
        deepseek = fake_provider(ProviderKind.DEEPSEEK, [make_response(ProviderKind.DEEPSEEK)])
        service = AIService(
            service_config(monitoring=MonitoringConfig(enabled=False)),
            retry_backoff=0,
            providers={ProviderKind.DEEPSEEK: deepseek},
        )

        await service.generate(make_request())

        assert service.get_usage_stats()["deepseek"].requests == 0

    @pytest.mark.asyncio
    async def test_track_costs_disabled_zeroes_cost(self):
        deepseek = fake_provider(ProviderKind.DEEPSEEK, [make_response(ProviderKind.DEEPSEEK, cost=2.0)])
        service = AIService(
            service_config(monitoring=MonitoringConfig(track_costs=False)),
            retry_backoff=0,
            providers={ProviderKind.DEEPSEEK: deepseek},
        )

        await service.generate(make_request())

        assert service.get_usage_stats()["deepseek"].requests == 1
        assert service.get_total_cost() == 0.0


class TestInitialize:
    @pytest.mark.asyncio
    async def test_mock_only_environment(self, mock_service):
        await mock_service.initialize()
        try:
            assert mock_service.get_available_providers() == [ProviderKind.MOCK]
            assert mock_service.current_provider == ProviderKind.MOCK

            response = await mock_service.generate(make_request("Create a homepage"))
            assert response.provider == ProviderKind.MOCK
        finally:
            await mock_service.close()

    @pytest.mark.asyncio
    async def test_remote_providers_initialize_over_http(self):
        transport = json_transport(lambda request: (200, chat_completion("Hi there")))
        config = service_config(monitoring=MonitoringConfig(enabled=False))
        service = AIService(config, retry_backoff=0, transport=transport)

        await service.initialize()
        try:
            assert service.get_available_providers() == STRATEGY
            assert service.current_provider == ProviderKind.DEEPSEEK

            response = await service.generate(make_request())
            assert response.content == "Hi there"
            assert response.provider == ProviderKind.DEEPSEEK
        finally:
            await service.close()

    @pytest.mark.asyncio
    async def test_malformed_usage_falls_back_to_mock(self):
        ready = {"value": False}

        def handler(request):
            if not ready["value"]:
                return 200, chat_completion("pong")
            return 200, {"choices": [{"message": {"content": "hi"}}], "usage": "n/a"}

        config = service_config(
            degradation_strategy=[ProviderKind.OPENAI, ProviderKind.MOCK],
            monitoring=MonitoringConfig(enabled=False),
        )
        service = AIService(config, retry_backoff=0, transport=json_transport(handler))

        await service.initialize()
        ready["value"] = True
        try:
            response = await service.generate(make_request("Create a homepage"))

            assert response.provider == ProviderKind.MOCK
            assert service.current_provider == ProviderKind.MOCK
            assert service._providers[ProviderKind.OPENAI].get_usage_stats().errors == 1
        finally:
            await service.close()

    @pytest.mark.asyncio
    async def test_initialization_failures_are_not_raised(self):
        deepseek = fake_provider(ProviderKind.DEEPSEEK, available=False)
        deepseek.initialize.side_effect = ProviderError(ErrorKind.UNAUTHORIZED, "deepseek", "no key")
        mock = fake_provider(ProviderKind.MOCK)
        service = build_service({ProviderKind.DEEPSEEK: deepseek, ProviderKind.MOCK: mock})

        await service.initialize()
        try:
            assert service.current_provider == ProviderKind.MOCK
        finally:
            await service.close()


class TestHealthAndCosts:
    @pytest.mark.asyncio
    async def test_health_status(self):
        def provider_with_stats(kind, available):
            provider = fake_provider(kind, available=available)
            provider.get_usage_stats.return_value = MagicMock(last_used=None, errors=0)
            return provider

        healthy = build_service(
            {
                ProviderKind.DEEPSEEK: provider_with_stats(ProviderKind.DEEPSEEK, True),
                ProviderKind.MOCK: provider_with_stats(ProviderKind.MOCK, True),
            }
        )
        degraded = build_service({ProviderKind.MOCK: provider_with_stats(ProviderKind.MOCK, True)})
        unhealthy = build_service({ProviderKind.MOCK: provider_with_stats(ProviderKind.MOCK, False)})

        assert (await healthy.health_check()).status == "healthy"
        assert (await degraded.health_check()).status == "degraded"
        report = await unhealthy.health_check()
        assert report.status == "unhealthy"
        assert report.providers["mock"].available is False

    @pytest.mark.asyncio
    async def test_health_with_mock_only(self, mock_service):
        await mock_service.initialize()
        try:
            report = await mock_service.health_check()
            assert report.status == "degraded"
            assert report.current_provider == "mock"
        finally:
            await mock_service.close()

    def test_cost_estimate_uses_strategy_head(self):
        config = service_config(
            fallback=ProviderConfig(kind=ProviderKind.OPENAI, api_key="sk", model="gpt-4"),
            degradation_strategy=[ProviderKind.OPENAI, ProviderKind.MOCK],
        )
        service = AIService(config)

        assert service.get_cost_estimate(1000) == pytest.approx((800 * 30 + 200 * 60) / 1_000_000)
        assert service.get_cost_estimate(1000, ProviderKind.MOCK) == 0.0

    @pytest.mark.asyncio
    async def test_test_connection_without_current(self):
        service = build_service({ProviderKind.MOCK: fake_provider(ProviderKind.MOCK)})
        assert await service.test_connection() is False
        assert await service.test_connection(ProviderKind.MOCK) is True


class TestUpdateConfig:
    @pytest.mark.asyncio
    async def test_changed_provider_is_rebuilt(self, mock_service):
        await mock_service.initialize()
        old_mock = mock_service._providers[ProviderKind.MOCK]

        try:
            config = await mock_service.update_config(
                mock=ProviderConfig(kind=ProviderKind.MOCK, response_delay=0.0, seed=1)
            )

            assert config.mock.seed == 1
            assert mock_service._providers[ProviderKind.MOCK] is not old_mock
            assert mock_service.get_available_providers() == [ProviderKind.MOCK]
        finally:
            await mock_service.close()

    @pytest.mark.asyncio
    async def test_unchanged_providers_are_kept(self, mock_service):
        await mock_service.initialize()
        old_mock = mock_service._providers[ProviderKind.MOCK]

        try:
            await mock_service.update_config(
                degradation_strategy=[ProviderKind.MOCK],
                monitoring=MonitoringConfig(enabled=True),
            )

            assert mock_service._providers[ProviderKind.MOCK] is old_mock
            assert mock_service.get_config().degradation_strategy == [ProviderKind.MOCK]
            assert mock_service.get_config().monitoring.enabled is True
        finally:
            await mock_service.close()

    @pytest.mark.asyncio
    async def test_disabling_current_provider_clears_it(self, mock_service):
        await mock_service.initialize()
        try:
            await mock_service.update_config(
                mock=ProviderConfig(kind=ProviderKind.MOCK, enabled=False)
            )

            assert mock_service.current_provider is None
            with pytest.raises(AllProvidersFailedError):
                await mock_service.generate(make_request())
        finally:
            await mock_service.close()

    @pytest.mark.asyncio
    async def test_in_flight_request_keeps_old_provider(self, mock_only_config):
        slow_config = mock_only_config.model_copy(
            update={"mock": ProviderConfig(kind=ProviderKind.MOCK, seed=42, response_delay=0.2)}
        )
        service = AIService(slow_config, retry_backoff=0)
        await service.initialize()
        old_mock = service._providers[ProviderKind.MOCK]

        try:
            in_flight = asyncio.create_task(service.generate(make_request("Create a homepage")))
            await asyncio.sleep(0.05)
            await service.update_config(mock=ProviderConfig(kind=ProviderKind.MOCK, seed=7))
            new_mock = service._providers[ProviderKind.MOCK]

            response = await in_flight

            assert new_mock is not old_mock
            assert response.provider == ProviderKind.MOCK
            assert old_mock.get_usage_stats().requests == 1
            assert new_mock.get_usage_stats().requests == 0
        finally:
            await service.close()

    def test_get_config_returns_copy(self):
        service = AIService(service_config())
        config = service.get_config()
        config.degradation_strategy.clear()

        assert service.get_config().degradation_strategy == STRATEGY


def test_from_settings_uses_thresholds():
    settings = Settings(
        _env_file=None,
        daily_cost_threshold=5.0,
        total_cost_threshold=50.0,
        retry_backoff_seconds=0.5,
    )
    service = AIService.from_settings(settings)

    assert isinstance(service.monitor, UsageMonitor)
    assert service.monitor.daily_threshold == 5.0
    assert service.monitor.total_threshold == 50.0
    assert service.retry_backoff == 0.5
