"""Provider orchestration, usage monitoring and pricing."""

from lumosgen.ai.errors import AllProvidersFailedError, ErrorKind, LumosGenError, ProviderError
from lumosgen.ai.monitor import UsageMonitor
from lumosgen.ai.types import (
    ChatMessage,
    GenerationRequest,
    GenerationResponse,
    ProviderConfig,
    ProviderKind,
    ServiceConfig,
    TokenUsage,
)

__all__ = [
    "AllProvidersFailedError",
    "ChatMessage",
    "ErrorKind",
    "GenerationRequest",
    "GenerationResponse",
    "LumosGenError",
    "ProviderConfig",
    "ProviderError",
    "ProviderKind",
    "ServiceConfig",
    "TokenUsage",
    "UsageMonitor",
]
