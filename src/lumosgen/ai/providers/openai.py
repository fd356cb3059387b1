"""OpenAI provider (secondary remote backend)."""

from lumosgen.ai.providers.remote import RemoteProvider
from lumosgen.ai.types import ProviderKind


class OpenAIProvider(RemoteProvider):
    """OpenAI chat completions with an optional organization header."""

    kind = ProviderKind.OPENAI
    name = "OpenAI"
    default_model = "gpt-4o-mini"
    default_endpoint = "https://api.openai.com/v1"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self.config.organization:
            headers["OpenAI-Organization"] = self.config.organization
        return headers
