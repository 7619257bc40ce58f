"""LLM task parser splitting free-text requests into tasks using Ollama."""

import asyncio
import logging
import time

import ollama

from .config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_OLLAMA_MAX_RETRIES,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OLLAMA_TEMPERATURE,
    DEFAULT_OLLAMA_TIMEOUT,
    DEFAULT_PARSING_PROMPT,
    MAX_PROMPT_TEXT_LENGTH,
)
from .exceptions import LLMParsingError, ResponseParseError
from .models import ParsedTasks, TaskRequest, TokenUsage
from .validation import parse_llm_response

logger = logging.getLogger(__name__)


class LLMTaskParser:
    """Structures a request into raw tasks using a local LLM via Ollama."""

    def __init__(
        self,
        model: str = DEFAULT_OLLAMA_MODEL,
        base_url: str = DEFAULT_OLLAMA_BASE_URL,
        timeout: float = DEFAULT_OLLAMA_TIMEOUT,
        max_retries: int = DEFAULT_OLLAMA_MAX_RETRIES,
        temperature: float = DEFAULT_OLLAMA_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        """
        Initialize LLM task parser.

        Args:
            model: Ollama model name
            base_url: Ollama service URL
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts
            temperature: LLM temperature for generation
            max_tokens: Maximum tokens to generate (capped at the default)
        """
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.temperature = temperature
        self.max_tokens = min(max_tokens, DEFAULT_MAX_TOKENS)
        self._client = ollama.AsyncClient(host=base_url)

    def _generate_prompt(self, request: TaskRequest) -> str:
        """
        Generate the task splitting prompt.

        Args:
            request: Validated request

        Returns:
            Formatted prompt string
        """
        # Sanitize input to prevent prompt injection
        sanitized = request.task.replace("\n", " ").replace('"', "'")[:MAX_PROMPT_TEXT_LENGTH]
        today = request.date.date()

        return DEFAULT_PARSING_PROMPT.format(
            requester=request.name,
            today=today.isoformat(),
            day_name=today.strftime("%A"),
            text=sanitized,
        )

    async def parse(self, request: TaskRequest) -> ParsedTasks:
        """
        Split a request into raw tasks.

        Args:
            request: Validated request

        Returns:
            ParsedTasks with the tasks, token usage and model name

        Raises:
            LLMParsingError: If the model cannot be reached
            ResponseParseError: If the reply holds no usable JSON
        """
        prompt = self._generate_prompt(request)
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.wait_for(
                    self._client.chat(
                        model=self.model,
                        messages=[{"role": "user", "content": prompt}],
                        options={
                            "temperature": self.temperature,
                            "num_predict": self.max_tokens,
                        },
                    ),
                    timeout=self.timeout,
                )
            except TimeoutError as e:
                logger.error(f"Timeout on attempt {attempt + 1}/{self.max_retries}: {e}")
                if attempt < self.max_retries - 1:
                    # Exponential backoff
                    await asyncio.sleep(2**attempt)
                    continue
                raise LLMParsingError(
                    f"Max retries exceeded after {self.max_retries} attempts"
                ) from e
            except ConnectionError as e:
                logger.error(f"Connection error: {e}")
                raise LLMParsingError(f"Connection failed: {e}") from e
            except Exception as e:
                logger.error(f"Task parsing error: {e}")
                raise LLMParsingError(f"Task parsing failed: {e}") from e

            content = response["message"]["content"]
            tasks = parse_llm_response(content)
            usage = TokenUsage(
                prompt_tokens=response.get("prompt_eval_count") or 0,
                completion_tokens=response.get("eval_count") or 0,
            )
            inference_time = time.time() - start_time

            logger.info(
                f"Parsed {len(tasks)} task(s) from request in {inference_time:.3f}s "
                f"({usage.total_tokens} tokens)"
            )
            if not tasks:
                raise ResponseParseError("The language model returned no tasks.")

            return ParsedTasks(
                tasks=tasks,
                usage=usage,
                model=response.get("model") or self.model,
                metadata={"inference_time": inference_time, "raw_response": content},
            )

        raise LLMParsingError(f"Max retries exceeded after {self.max_retries} attempts")
