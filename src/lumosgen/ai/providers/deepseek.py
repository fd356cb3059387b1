"""DeepSeek provider (primary remote backend)."""

from datetime import datetime

from lumosgen.ai.pricing import PRICING, is_discount_window
from lumosgen.ai.providers.remote import RemoteProvider
from lumosgen.ai.types import ProviderKind


class DeepSeekProvider(RemoteProvider):
    """DeepSeek chat completions with off-peak discount pricing."""

    kind = ProviderKind.DEEPSEEK
    name = "DeepSeek"
    default_model = "deepseek-chat"
    default_endpoint = "https://api.deepseek.com"
    supports_discount = True

    def current_pricing(self, now: datetime | None = None) -> dict[str, float]:
        """Per-1M-token prices in effect at ``now`` for the configured model."""
        price = PRICING.get(self.model)
        if price is None:
            return {"input": 0.0, "output": 0.0}
        if self._use_discount() and price.discount_input is not None and is_discount_window(now):
            return {"input": price.discount_input, "output": price.discount_output or price.output}
        return {"input": price.input, "output": price.output}
