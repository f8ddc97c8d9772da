"""Optional LLM insight for a concept/context pairing.

`InsightService.request_insight` never raises: any provider, network or parse
failure resolves to a fixed fallback insight.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import json
import logging
import re
from typing import Any

from engine.clients.env_utils import getenv_any, getenv_choice
from engine.clients.provider_clients import (
    AnthropicMessagesClient,
    GeminiClient,
    LLMClient,
    OllamaClient,
    OpenAIChatClient,
)
from engine.errors import InsightUnavailableError
from engine.serialize import to_serializable

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Você é um assistente de teologia bíblica para um jogo de grupo. "
    "Responda apenas com um objeto JSON, sem markdown."
)
MISSING_EXPLANATION = "Sem explicação disponível."
MISSING_WORD = "Sem sugestão disponível."
MISSING_VERSE = "Referência não encontrada."


class InsightMode(str, Enum):
    """Shape of the insight requested from the provider."""

    EXPLANATION = "explanation"
    WORD = "word"


@dataclass(frozen=True)
class Insight:
    """Provider answer: an explanation or a connecting word, plus a verse."""

    verse: str
    explanation: str | None = None
    word: str | None = None
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in to_serializable(self).items() if value is not None}


FALLBACK_INSIGHTS: dict[InsightMode, Insight] = {
    InsightMode.EXPLANATION: Insight(
        explanation="Não foi possível carregar o insight teológico agora.",
        verse="Tente novamente mais tarde.",
        fallback=True,
    ),
    InsightMode.WORD: Insight(
        word="Não foi possível sugerir uma palavra agora.",
        verse="Tente novamente mais tarde.",
        fallback=True,
    ),
}

RESPONSE_SCHEMAS: dict[InsightMode, dict[str, Any]] = {
    InsightMode.EXPLANATION: {
        "type": "OBJECT",
        "properties": {
            "explanation": {"type": "STRING", "description": "Breve explicação teológica."},
            "verse": {"type": "STRING", "description": "Referência e texto de um versículo bíblico."},
        },
        "required": ["explanation", "verse"],
    },
    InsightMode.WORD: {
        "type": "OBJECT",
        "properties": {
            "word": {"type": "STRING", "description": "Uma palavra que conecta os dois termos."},
            "verse": {"type": "STRING", "description": "Referência e texto de um versículo bíblico."},
        },
        "required": ["word", "verse"],
    },
}


def build_prompt(mode: InsightMode, concept: str, context: str) -> str:
    if mode is InsightMode.WORD:
        return (
            f'Sugira uma única palavra que conecte o conceito teológico "{concept}" ao contexto "{context}". '
            "Forneça também um versículo bíblico relevante.\n"
            'Formato: {"word": "...", "verse": "..."}'
        )
    return (
        f'Explique brevemente a conexão teológica entre o conceito "{concept}" e o contexto "{context}". '
        "Forneça também um versículo bíblico relevante.\n"
        'Formato: {"explanation": "...", "verse": "..."}'
    )


def extract_json_object(raw: str) -> dict[str, Any]:
    """Return the JSON object in a model response, tolerating surrounding prose."""
    text = raw.strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        raise InsightUnavailableError("No JSON object found in insight response.")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise InsightUnavailableError(f"Malformed insight JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InsightUnavailableError("Insight JSON must be an object.")
    return parsed


def _text_field(payload: dict[str, Any], key: str, default: str) -> str:
    value = payload.get(key)
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def parse_insight(mode: InsightMode, raw: str) -> Insight:
    """Parse provider text into an Insight, filling missing fields with defaults."""
    payload = extract_json_object(raw)
    verse = _text_field(payload, "verse", MISSING_VERSE)
    if mode is InsightMode.WORD:
        return Insight(word=_text_field(payload, "word", MISSING_WORD), verse=verse)
    return Insight(explanation=_text_field(payload, "explanation", MISSING_EXPLANATION), verse=verse)


class InsightService:
    """Asks an LLM client for insights and converts every failure to a fallback."""

    def __init__(
        self,
        client: LLMClient | None,
        *,
        mode: InsightMode = InsightMode.EXPLANATION,
        system_prompt: str | None = SYSTEM_PROMPT,
    ):
        self.client = client
        self.mode = mode
        self.system_prompt = system_prompt

    @property
    def fallback(self) -> Insight:
        return FALLBACK_INSIGHTS[self.mode]

    def fetch(self, concept: str, context: str) -> Insight:
        """Blocking fetch; raises InsightUnavailableError on any failure."""
        if self.client is None:
            raise InsightUnavailableError("No insight provider configured.")
        prompt = build_prompt(self.mode, concept, context)
        try:
            raw = self.client.complete(prompt, system_prompt=self.system_prompt)
        except (RuntimeError, ValueError, OSError) as exc:
            raise InsightUnavailableError(f"Insight request failed: {exc}") from exc
        return parse_insight(self.mode, raw)

    async def request_insight(self, concept: str, context: str) -> Insight:
        """Fetch off the event loop; resolves to the fallback instead of raising."""
        try:
            return await asyncio.to_thread(self.fetch, concept, context)
        except Exception as exc:
            logger.warning("Insight for %s + %s unavailable: %s", concept, context, exc)
            return self.fallback


PROVIDERS = ("gemini", "openai", "anthropic", "ollama", "none")


def client_for_provider(provider: str, mode: InsightMode) -> LLMClient | None:
    """Build the LLM client named by `provider`, or None for `none`."""
    name = provider.strip().lower()
    if name == "gemini":
        return GeminiClient(response_schema=RESPONSE_SCHEMAS[mode])
    if name == "openai":
        return OpenAIChatClient(
            model=getenv_any("OPENAI_MODEL", default="gpt-4o-mini") or "gpt-4o-mini",
            json_mode=True,
        )
    if name == "anthropic":
        return AnthropicMessagesClient()
    if name == "ollama":
        return OllamaClient(
            model=getenv_any("OLLAMA_MODEL", default="llama3.1") or "llama3.1",
            base_url=getenv_any("OLLAMA_BASE_URL", default="http://127.0.0.1:11434") or "http://127.0.0.1:11434",
        )
    if name == "none":
        return None
    raise ValueError(f"Unsupported insight provider: {provider!r}")


def default_insight_service() -> InsightService:
    """Configure the service from LINHAS_INSIGHT_PROVIDER and LINHAS_INSIGHT_MODE."""
    mode = InsightMode(getenv_choice("LINHAS_INSIGHT_MODE", [item.value for item in InsightMode], "explanation"))
    provider = getenv_choice("LINHAS_INSIGHT_PROVIDER", PROVIDERS, "gemini")
    return InsightService(client_for_provider(provider, mode), mode=mode)
