"""Provider-specific LLM clients sharing the `complete()` protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .env_utils import getenv_any, require_env_any
from .http_utils import post_json

DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"


class LLMClient(Protocol):
    """Minimal protocol for LLM API adapters."""

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        """Return a model response for a prompt."""


def _anthropic_messages_url(base_url: str) -> str:
    normalized = (base_url or "https://api.anthropic.com").rstrip("/")
    if normalized.endswith("/v1/messages"):
        return normalized
    if normalized.endswith("/v1"):
        return f"{normalized}/messages"
    return f"{normalized}/v1/messages"


def _chat_messages(prompt: str, system_prompt: str | None) -> list[dict[str, str]]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _extract_openai_content(response: dict[str, Any]) -> str:
    choices = response.get("choices", [])
    if not choices:
        raise ValueError("Provider response did not include choices.")
    content = choices[0].get("message", {}).get("content")
    if isinstance(content, list):
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    if not isinstance(content, str):
        raise ValueError("Provider response message content was not a string.")
    return content


def _extract_gemini_text(response: dict[str, Any]) -> str:
    candidates = response.get("candidates", [])
    if not candidates:
        feedback = response.get("promptFeedback")
        raise ValueError(f"Gemini response did not include candidates (feedback={feedback!r}).")
    parts = candidates[0].get("content", {}).get("parts", [])
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
    if not text:
        raise ValueError("Gemini response contained no text parts.")
    return text


@dataclass(frozen=True)
class GeminiClient:
    """Google Gemini `generateContent` client.

    When `response_schema` is set the request asks for `application/json`
    output constrained to that schema.
    """

    model: str = DEFAULT_GEMINI_MODEL
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_sec: float = 30.0
    temperature: float = 0.7
    response_schema: dict[str, Any] | None = None
    api_key_env: tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        api_key = require_env_any(*self.api_key_env)
        model = getenv_any("GEMINI_MODEL", default=self.model) or self.model
        generation_config: dict[str, Any] = {"temperature": self.temperature}
        if self.response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = self.response_schema
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        response = post_json(
            url=f"{self.base_url.rstrip('/')}/models/{model}:generateContent",
            payload=payload,
            headers={"x-goog-api-key": api_key},
            timeout_sec=self.timeout_sec,
        )
        return _extract_gemini_text(response)


@dataclass(frozen=True)
class OpenAIChatClient:
    """OpenAI Chat Completions API client."""

    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    timeout_sec: float = 30.0
    temperature: float = 0.7
    max_tokens: int | None = None
    json_mode: bool = False
    api_key_env: tuple[str, ...] = ("OPENAI_API_KEY",)

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        api_key = require_env_any(*self.api_key_env)
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_prompt),
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        if self.json_mode:
            payload["response_format"] = {"type": "json_object"}
        response = post_json(
            url=f"{self.base_url.rstrip('/')}/chat/completions",
            payload=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout_sec=self.timeout_sec,
        )
        return _extract_openai_content(response)


@dataclass(frozen=True)
class AnthropicMessagesClient:
    """Anthropic Messages API client."""

    model: str = DEFAULT_ANTHROPIC_MODEL
    base_url: str = "https://api.anthropic.com"
    timeout_sec: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 512
    anthropic_version: str = "2023-06-01"
    api_key_env: tuple[str, ...] = ("ANTHROPIC_API_KEY",)

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        api_key = require_env_any(*self.api_key_env)
        model = getenv_any("ANTHROPIC_MODEL", default=self.model) or self.model
        base_url = getenv_any("ANTHROPIC_BASE_URL", default=self.base_url) or self.base_url
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt
        response = post_json(
            url=_anthropic_messages_url(base_url),
            payload=payload,
            headers={"x-api-key": api_key, "anthropic-version": self.anthropic_version},
            timeout_sec=self.timeout_sec,
        )
        text_parts = [
            block.get("text", "")
            for block in response.get("content", [])
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        joined = "".join(text_parts).strip()
        if not joined:
            raise ValueError("Anthropic response contained no text content.")
        return joined


@dataclass(frozen=True)
class OllamaClient:
    """Local Ollama chat client."""

    model: str = "llama3.1"
    base_url: str = "http://127.0.0.1:11434"
    timeout_sec: float = 60.0
    temperature: float = 0.7

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        payload = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_prompt),
            "stream": False,
            "format": "json",
            "options": {"temperature": self.temperature},
        }
        response = post_json(
            url=f"{self.base_url.rstrip('/')}/api/chat",
            payload=payload,
            headers={},
            timeout_sec=self.timeout_sec,
        )
        content = response.get("message", {}).get("content")
        if not isinstance(content, str):
            raise ValueError("Ollama response did not include message.content.")
        return content
