"""Dollar cost of a language model request."""

import logging

from .config import LOCAL_MODEL_RATE, MODEL_RATES
from .exceptions import CostError
from .models import TokenUsage

logger = logging.getLogger(__name__)


def rates_for_model(model: str) -> dict[str, float]:
    """Per-1K-token rates for a model; models without a listed family are free."""
    for prefix in sorted(MODEL_RATES, key=len, reverse=True):
        if model.startswith(prefix):
            return MODEL_RATES[prefix]
    return LOCAL_MODEL_RATE


def calculate_cost(usage: TokenUsage, model: str) -> float:
    """
    Price a request.

    Args:
        usage: Prompt and completion token counts
        model: Model name as reported by the provider

    Returns:
        Cost in dollars

    Raises:
        CostError: If usage or model is invalid
    """
    if not isinstance(usage, TokenUsage) or usage.prompt_tokens < 0 or usage.completion_tokens < 0:
        raise CostError("Invalid usage object")
    if not model or not isinstance(model, str):
        raise CostError("Invalid model string")

    rates = rates_for_model(model)
    prompt_cost = usage.prompt_tokens / 1000 * rates["prompt"]
    completion_cost = usage.completion_tokens / 1000 * rates["completion"]
    total = prompt_cost + completion_cost

    logger.debug(
        f"Cost for {model}: {usage.prompt_tokens} prompt + "
        f"{usage.completion_tokens} completion tokens = ${total:.4f}"
    )
    return total
