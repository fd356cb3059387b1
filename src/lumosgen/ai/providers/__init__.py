"""Provider implementations keyed by ProviderKind."""

import httpx

from lumosgen.ai.providers.base import Provider
from lumosgen.ai.providers.deepseek import DeepSeekProvider
from lumosgen.ai.providers.mock import MockProvider
from lumosgen.ai.providers.openai import OpenAIProvider
from lumosgen.ai.providers.remote import RemoteProvider, classify_status
from lumosgen.ai.types import ProviderConfig, ProviderKind

PROVIDER_CLASSES: dict[ProviderKind, type[Provider]] = {
    ProviderKind.DEEPSEEK: DeepSeekProvider,
    ProviderKind.OPENAI: OpenAIProvider,
    ProviderKind.MOCK: MockProvider,
}


def create_provider(
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Provider:
    """Instantiate the provider class for ``config.kind``.

    Args:
        config: Provider configuration
        transport: httpx transport handed to remote providers

    Returns:
        Uninitialized provider
    """
    provider_cls = PROVIDER_CLASSES[config.kind]
    if issubclass(provider_cls, RemoteProvider):
        return provider_cls(config, transport=transport)
    return provider_cls(config)


__all__ = [
    "PROVIDER_CLASSES",
    "DeepSeekProvider",
    "MockProvider",
    "OpenAIProvider",
    "Provider",
    "RemoteProvider",
    "classify_status",
    "create_provider",
]
