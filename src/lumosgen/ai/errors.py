"""Exception hierarchy for AI provider failures."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classified provider failure kinds."""

    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    NETWORK = "network"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.NETWORK)


class LumosGenError(Exception):
    """Base class for all LumosGen errors."""


class ProviderError(LumosGenError):
    """A single provider failed to produce a response."""

    def __init__(
        self,
        kind: ErrorKind,
        provider: str,
        message: str,
        retryable: bool | None = None,
        status_code: int | None = None,
    ):
        """Initialize provider error.

        Args:
            kind: Classified failure kind
            provider: Provider id that failed
            message: Human readable description
            retryable: Override of the kind's default retryability
            status_code: HTTP status when the failure came from a response
        """
        super().__init__(f"[{provider}] {kind.value}: {message}")
        self.kind = kind
        self.provider = provider
        self.message = message
        self.retryable = kind.retryable if retryable is None else retryable
        self.status_code = status_code


class AllProvidersFailedError(ProviderError):
    """Every provider in the degradation strategy failed."""

    def __init__(self, errors: dict[str, ProviderError]):
        self.errors = dict(errors)
        if errors:
            summary = "; ".join(f"{name}: {err.kind.value}" for name, err in errors.items())
        else:
            summary = "no provider available"
        super().__init__(
            ErrorKind.UNKNOWN,
            provider="all",
            message=f"All providers failed ({summary})",
            retryable=False,
        )
