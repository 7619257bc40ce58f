"""Request validation, LLM task parsing and cost accounting."""

from .cost import calculate_cost
from .llm_parser import LLMTaskParser
from .models import ParsedTasks, TaskRequest, TokenUsage
from .validation import parse_llm_response, validate_request

__all__ = [
    "LLMTaskParser",
    "ParsedTasks",
    "TaskRequest",
    "TokenUsage",
    "calculate_cost",
    "parse_llm_response",
    "validate_request",
]
