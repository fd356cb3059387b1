"""HTTP provider for OpenAI-compatible chat completion APIs."""

import json
from typing import Any

import httpx
import structlog

from lumosgen.ai.errors import ErrorKind, ProviderError
from lumosgen.ai.pricing import calculate_cost, estimate_cost
from lumosgen.ai.providers.base import Provider
from lumosgen.ai.types import (
    ChatMessage,
    GenerationRequest,
    GenerationResponse,
    ProviderConfig,
    TokenUsage,
)

logger = structlog.get_logger()

QUOTA_MARKERS = ("insufficient_quota", "quota")


def classify_status(status_code: int, body: str) -> ErrorKind:
    """Map an HTTP error status (and body) onto an ErrorKind.

    Args:
        status_code: HTTP response status
        body: Raw response body, inspected for quota markers

    Returns:
        Classified error kind
    """
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 402:
        return ErrorKind.QUOTA_EXCEEDED
    if status_code == 429:
        lowered = body.lower()
        if any(marker in lowered for marker in QUOTA_MARKERS):
            return ErrorKind.QUOTA_EXCEEDED
        return ErrorKind.RATE_LIMITED
    if status_code >= 500:
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN


class RemoteProvider(Provider):
    """Provider that POSTs to ``<endpoint>/chat/completions``."""

    default_endpoint: str
    supports_discount = False

    def __init__(
        self,
        config: ProviderConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize remote provider.

        Args:
            config: Initial configuration
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        super().__init__(config)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def endpoint(self) -> str:
        return (self.config.endpoint or self.default_endpoint).rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def initialize(self, config: ProviderConfig | None = None) -> None:
        """Apply configuration, require an API key and probe the backend.

        Raises:
            ProviderError: ``unauthorized`` without an API key, retryable
                ``network`` when the probe fails
        """
        if config is not None:
            await self.close()
            self.config = config
        self._initialized = False

        if not self.config.api_key:
            raise ProviderError(
                ErrorKind.UNAUTHORIZED,
                self.kind.value,
                f"{self.name} API key is required",
            )

        if not await self.test_connection():
            raise ProviderError(
                ErrorKind.NETWORK,
                self.kind.value,
                f"Failed to initialize {self.name} provider",
                retryable=True,
            )

        self._initialized = True
        logger.info("provider_initialized", provider=self.kind.value, model=self.model)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        if not self.is_available():
            raise ProviderError(
                ErrorKind.UNKNOWN,
                self.kind.value,
                f"{self.name} provider is not available",
            )

        try:
            response = await self._call(request)
        except ProviderError:
            self._record_failure()
            raise

        self._record_success(response)
        return response

    async def test_connection(self) -> bool:
        probe = GenerationRequest(
            messages=[ChatMessage(role="user", content="Hello")],
            max_tokens=10,
        )
        try:
            await self._call(probe)
        except ProviderError as e:
            logger.warning(
                "provider_connection_test_failed",
                provider=self.kind.value,
                kind=e.kind.value,
                error=e.message,
            )
            return False
        return True

    def get_cost_estimate(self, token_count: int) -> float:
        return estimate_cost(self.model, token_count, self._use_discount())

    def _use_discount(self) -> bool:
        return self.supports_discount and self.config.use_discount_pricing

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def _call(self, request: GenerationRequest) -> GenerationResponse:
        """Issue one chat completion call and translate failures.

        Raises:
            ProviderError: Classified failure
        """
        model = request.model or self.model
        payload = {
            "model": model,
            "messages": [message.model_dump() for message in request.messages],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "stream": request.stream,
        }

        try:
            response = await self._get_client().post(
                f"{self.endpoint}/chat/completions",
                json=payload,
                headers=self._headers(),
            )
        except httpx.TimeoutException as e:
            raise ProviderError(
                ErrorKind.NETWORK, self.kind.value, f"Request timed out: {e}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                ErrorKind.NETWORK, self.kind.value, f"Connection failed: {e}"
            ) from e

        if response.status_code >= 400:
            kind = classify_status(response.status_code, response.text)
            logger.warning(
                "provider_http_error",
                provider=self.kind.value,
                status_code=response.status_code,
                kind=kind.value,
            )
            raise ProviderError(
                kind,
                self.kind.value,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderError(
                ErrorKind.MALFORMED_RESPONSE, self.kind.value, f"Invalid JSON body: {e}"
            ) from e

        content = self._extract_content(data)
        usage = self._extract_usage(data)
        cost = calculate_cost(model, usage.input, usage.output, self._use_discount())

        return GenerationResponse(
            content=content,
            model=model,
            usage=usage,
            provider=self.kind,
            cost=cost,
        )

    def _extract_content(self, data: Any) -> str:
        try:
            message = data["choices"][0]["message"]
            content = message["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                ErrorKind.MALFORMED_RESPONSE,
                self.kind.value,
                f"Invalid response format from {self.name} API",
            ) from e
        if not isinstance(content, str):
            raise ProviderError(
                ErrorKind.MALFORMED_RESPONSE,
                self.kind.value,
                f"{self.name} API returned non-text content",
            )
        return content

    def _extract_usage(self, data: dict[str, Any]) -> TokenUsage:
        usage_data = data.get("usage") or {}
        try:
            if not isinstance(usage_data, dict):
                raise TypeError(f"usage is {type(usage_data).__name__}, not an object")
            return TokenUsage(
                input=int(usage_data.get("prompt_tokens") or 0),
                output=int(usage_data.get("completion_tokens") or 0),
            )
        except (TypeError, ValueError) as e:
            raise ProviderError(
                ErrorKind.MALFORMED_RESPONSE,
                self.kind.value,
                f"Invalid token usage from {self.name} API: {e}",
            ) from e
