"""Tests for language model cost calculation."""

import pytest

from task_inbox.task_parsing.cost import calculate_cost, rates_for_model
from task_inbox.task_parsing.exceptions import CostError
from task_inbox.task_parsing.models import TokenUsage


@pytest.mark.unit
class TestRatesForModel:
    """Test model family lookup."""

    @pytest.mark.parametrize(
        ("model", "prompt_rate"),
        [
            ("gpt-4-0613", 0.03),
            ("gpt-4-32k-0613", 0.06),
            ("gpt-3.5-turbo-0125", 0.002),
        ],
    )
    def test_hosted_models(self, model: str, prompt_rate: float) -> None:
        assert rates_for_model(model)["prompt"] == pytest.approx(prompt_rate)

    def test_local_models_are_free(self) -> None:
        assert rates_for_model("llama3.2:3b") == {"prompt": 0.0, "completion": 0.0}


@pytest.mark.unit
class TestCalculateCost:
    """Test request pricing."""

    def test_gpt4_pricing(self) -> None:
        usage = TokenUsage(prompt_tokens=1000, completion_tokens=500)

        assert calculate_cost(usage, "gpt-4") == pytest.approx(0.03 + 0.03)

    def test_local_model_costs_nothing(self) -> None:
        usage = TokenUsage(prompt_tokens=812, completion_tokens=95)

        assert calculate_cost(usage, "llama3.2:3b") == 0.0

    def test_total_tokens(self) -> None:
        assert TokenUsage(prompt_tokens=3, completion_tokens=4).total_tokens == 7

    def test_negative_usage_rejected(self) -> None:
        with pytest.raises(CostError, match="Invalid usage"):
            calculate_cost(TokenUsage(prompt_tokens=-1, completion_tokens=0), "gpt-4")

    def test_non_usage_rejected(self) -> None:
        with pytest.raises(CostError, match="Invalid usage"):
            calculate_cost({"prompt_tokens": 1}, "gpt-4")  # type: ignore[arg-type]

    def test_empty_model_rejected(self) -> None:
        with pytest.raises(CostError, match="Invalid model"):
            calculate_cost(TokenUsage(prompt_tokens=1, completion_tokens=1), "")
