"""Per-model price table and cost calculation.

Prices are USD per one million tokens. DeepSeek models carry a discounted
price that applies during the off-peak window (16:00 to 01:00 UTC).
"""

from datetime import UTC, datetime

from pydantic import BaseModel


class ModelPrice(BaseModel):
    """Input/output prices for one model."""

    input: float
    output: float
    discount_input: float | None = None
    discount_output: float | None = None


PRICING: dict[str, ModelPrice] = {
    "deepseek-chat": ModelPrice(
        input=0.27, output=1.10, discount_input=0.135, discount_output=0.55
    ),
    "deepseek-reasoner": ModelPrice(
        input=0.55, output=2.19, discount_input=0.135, discount_output=0.55
    ),
    "gpt-4o-mini": ModelPrice(input=0.15, output=0.60),
    "gpt-3.5-turbo": ModelPrice(input=0.50, output=1.50),
    "gpt-4": ModelPrice(input=30.0, output=60.0),
}

TOKENS_PER_UNIT = 1_000_000

# Share of an estimated token budget attributed to input tokens
ESTIMATE_INPUT_SHARE = 0.8


def is_discount_window(now: datetime | None = None) -> bool:
    """Whether ``now`` falls inside the 16:00-01:00 UTC off-peak window."""
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is not None:
        now = now.astimezone(UTC)
    return now.hour >= 16 or now.hour < 1


def calculate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    use_discount: bool = False,
    now: datetime | None = None,
) -> float:
    """Compute the cost of a completion.

    Args:
        model: Model name (unknown models cost nothing)
        input_tokens: Prompt tokens
        output_tokens: Completion tokens
        use_discount: Apply off-peak pricing when inside the window
        now: Clock override for the discount window

    Returns:
        Cost in USD
    """
    price = PRICING.get(model)
    if price is None:
        return 0.0

    input_price, output_price = price.input, price.output
    if (
        use_discount
        and price.discount_input is not None
        and price.discount_output is not None
        and is_discount_window(now)
    ):
        input_price, output_price = price.discount_input, price.discount_output

    return (input_tokens * input_price + output_tokens * output_price) / TOKENS_PER_UNIT


def estimate_cost(
    model: str,
    token_count: int,
    use_discount: bool = False,
    now: datetime | None = None,
) -> float:
    """Estimate the cost of a token budget split 80% input / 20% output."""
    input_tokens = int(token_count * ESTIMATE_INPUT_SHARE)
    output_tokens = token_count - input_tokens
    return calculate_cost(model, input_tokens, output_tokens, use_discount, now)
