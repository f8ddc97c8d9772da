"""Tests for provider clients and environment helpers."""

from __future__ import annotations

import os

import pytest

from engine.clients import env_utils
from engine.clients.provider_clients import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_GEMINI_MODEL,
    AnthropicMessagesClient,
    GeminiClient,
    OllamaClient,
    OpenAIChatClient,
)


def test_load_dotenv_sets_missing_vars(tmp_path, monkeypatch) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text("GEMINI_API_KEY='test-key'\n# comment\nexport LINHAS_INSIGHT_MODE=word\n", encoding="utf-8")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("LINHAS_INSIGHT_MODE", raising=False)
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", False)
    env_utils.load_dotenv(dotenv)
    assert os.getenv("GEMINI_API_KEY") == "test-key"
    assert os.getenv("LINHAS_INSIGHT_MODE") == "word"


def test_load_dotenv_keeps_existing_values_and_skips_malformed_lines(tmp_path, monkeypatch) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text('LINHAS_INSIGHT_PROVIDER="ollama"\nnot a setting\n=orphan\nOLLAMA_MODEL = llama3 \n', encoding="utf-8")
    monkeypatch.setenv("LINHAS_INSIGHT_PROVIDER", "gemini")
    monkeypatch.delenv("OLLAMA_MODEL", raising=False)
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", False)
    env_utils.load_dotenv(dotenv)
    assert os.getenv("LINHAS_INSIGHT_PROVIDER") == "gemini"
    assert os.getenv("OLLAMA_MODEL") == "llama3"
    assert env_utils._DOTENV_LOADED is True


def test_getenv_choice_normalizes_and_validates(monkeypatch) -> None:
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", True)
    monkeypatch.setenv("LINHAS_INSIGHT_MODE", " Word ")
    assert env_utils.getenv_choice("LINHAS_INSIGHT_MODE", ("explanation", "word"), "explanation") == "word"
    monkeypatch.delenv("LINHAS_INSIGHT_MODE")
    assert env_utils.getenv_choice("LINHAS_INSIGHT_MODE", ("explanation", "word"), "explanation") == "explanation"
    monkeypatch.setenv("LINHAS_INSIGHT_MODE", "poem")
    with pytest.raises(ValueError, match="LINHAS_INSIGHT_MODE='poem'"):
        env_utils.getenv_choice("LINHAS_INSIGHT_MODE", ("explanation", "word"), "explanation")


def test_require_env_any_names_every_candidate(monkeypatch) -> None:
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", True)
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ValueError, match="GEMINI_API_KEY, GOOGLE_API_KEY, API_KEY"):
        env_utils.require_env_any("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def test_gemini_client_requests_json_schema_and_joins_parts(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=30.0):  # noqa: ANN001
        captured.update({"url": url, "payload": payload, "headers": headers})
        return {"candidates": [{"content": {"parts": [{"text": '{"verse":'}, {"text": ' "Jo 3:16"}'}]}}]}

    monkeypatch.setattr("engine.clients.provider_clients.post_json", fake_post_json)
    schema = {"type": "OBJECT", "properties": {"verse": {"type": "STRING"}}}
    out = GeminiClient(response_schema=schema).complete("hello", system_prompt="sys")

    assert out == '{"verse": "Jo 3:16"}'
    assert captured["url"] == (
        f"https://generativelanguage.googleapis.com/v1beta/models/{DEFAULT_GEMINI_MODEL}:generateContent"
    )
    assert captured["headers"] == {"x-goog-api-key": "g-key"}
    payload = captured["payload"]
    assert isinstance(payload, dict)
    assert payload["generationConfig"]["responseMimeType"] == "application/json"
    assert payload["generationConfig"]["responseSchema"] == schema
    assert payload["systemInstruction"] == {"parts": [{"text": "sys"}]}


def test_gemini_client_raises_without_candidates(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")

    def fake_post_json(url, payload, headers, timeout_sec=30.0):  # noqa: ANN001
        return {"promptFeedback": {"blockReason": "SAFETY"}}

    monkeypatch.setattr("engine.clients.provider_clients.post_json", fake_post_json)
    with pytest.raises(ValueError, match="SAFETY"):
        GeminiClient().complete("hello")


def test_openai_client_extracts_content_and_sets_json_mode(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=30.0):  # noqa: ANN001
        captured["payload"] = payload
        return {"choices": [{"message": {"content": '{"word":"Paz"}'}}]}

    monkeypatch.setattr("engine.clients.provider_clients.post_json", fake_post_json)
    client = OpenAIChatClient(model="gpt-4o-mini", json_mode=True)
    assert client.complete("hello", system_prompt="sys").strip() == '{"word":"Paz"}'
    payload = captured["payload"]
    assert isinstance(payload, dict)
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["messages"][0] == {"role": "system", "content": "sys"}


def test_anthropic_client_uses_v1_messages_path_and_text_blocks(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "x")
    monkeypatch.delenv("ANTHROPIC_MODEL", raising=False)
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=30.0):  # noqa: ANN001
        captured["url"] = url
        captured["payload"] = payload
        return {"content": [{"type": "text", "text": '{"verse":"Sl 23:1"}'}]}

    monkeypatch.setattr("engine.clients.provider_clients.post_json", fake_post_json)
    out = AnthropicMessagesClient(base_url="https://api.anthropic.com").complete("hello")
    assert out == '{"verse":"Sl 23:1"}'
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert isinstance(captured["payload"], dict)
    assert captured["payload"]["model"] == DEFAULT_ANTHROPIC_MODEL


def test_ollama_client_reads_message_content(monkeypatch) -> None:
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        captured["url"] = url
        captured["payload"] = payload
        return {"message": {"role": "assistant", "content": '{"word":"Luz"}'}}

    monkeypatch.setattr("engine.clients.provider_clients.post_json", fake_post_json)
    out = OllamaClient(base_url="http://127.0.0.1:11434/").complete("hello")
    assert out == '{"word":"Luz"}'
    assert captured["url"] == "http://127.0.0.1:11434/api/chat"
    assert isinstance(captured["payload"], dict)
    assert captured["payload"]["format"] == "json"
