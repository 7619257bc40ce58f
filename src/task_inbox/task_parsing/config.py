"""Configuration constants for request validation and LLM task parsing."""

# LLM Configuration
DEFAULT_OLLAMA_MODEL = "llama3.2:3b"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_OLLAMA_TIMEOUT = 30.0  # seconds
DEFAULT_OLLAMA_MAX_RETRIES = 3
DEFAULT_OLLAMA_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 2000

# Request validation
MAX_REQUESTER_NAME_LENGTH = 50
TASK_TEXT_PATTERN = r"^[a-zA-Z0-9.,!?;$ ]*$"
MAX_PROMPT_TEXT_LENGTH = 2000

# Cost per 1K tokens, in dollars, keyed by model family prefix (longest first)
MODEL_RATES: dict[str, dict[str, float]] = {
    "gpt-4-32k": {"prompt": 0.06, "completion": 0.12},
    "gpt-4": {"prompt": 0.03, "completion": 0.06},
    "gpt-3.5-turbo": {"prompt": 0.002, "completion": 0.002},
}
LOCAL_MODEL_RATE = {"prompt": 0.0, "completion": 0.0}

# LLM Prompt Template
# Placeholders: {requester}, {today}, {day_name}, {text}
DEFAULT_PARSING_PROMPT = """Split the request below into individual tasks.

Output a JSON array only, one object per task:
[{{"task_name": "short actionable title", "assignee": "person name or null", "project": "project name or null", "due_date": "YYYY-MM-DD or null"}}]

Rules:
- The request was sent by {requester} on {today} ({day_name})
- Resolve relative dates ("tomorrow", "next Friday") against that date
- Only set assignee or project when the request names one
- Never invent people or projects

Example:
Input: "Ask Jon to draft the proposal by May 1st and remind me to call the bank"
Output: [{{"task_name": "Draft proposal", "assignee": "Jon", "project": null, "due_date": "2024-05-01"}}, {{"task_name": "Call the bank", "assignee": null, "project": null, "due_date": null}}]

Now split this request:
"{text}"
"""
