"""LLM provider clients and runtime configuration helpers."""

from .env_utils import getenv_any, getenv_choice, load_dotenv, require_env_any
from .provider_clients import (
    AnthropicMessagesClient,
    GeminiClient,
    LLMClient,
    OllamaClient,
    OpenAIChatClient,
)

__all__ = [
    "AnthropicMessagesClient",
    "GeminiClient",
    "LLMClient",
    "OllamaClient",
    "OpenAIChatClient",
    "getenv_any",
    "getenv_choice",
    "load_dotenv",
    "require_env_any",
]
