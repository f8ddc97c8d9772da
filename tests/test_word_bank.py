"""Tests for word bank persistence and the editor gate."""

from __future__ import annotations

import json

import pytest

from engine.errors import UnauthorizedEditError
from linhas.linhas_words import (
    CONTEXT_KEY,
    DEFAULT_CONCEPTS,
    DEFAULT_CONTEXTS,
    THEOLOGY_KEY,
    JsonKeyValueStore,
    WordBank,
    check_editor_secret,
    parse_word_list,
)


def test_missing_file_loads_defaults(tmp_path) -> None:
    bank = WordBank.load(JsonKeyValueStore(path=tmp_path / "data" / "bank.json"))
    assert bank.concepts == list(DEFAULT_CONCEPTS)
    assert bank.contexts == list(DEFAULT_CONTEXTS)
    assert len(bank.concepts) == len(bank.contexts) == 25


def test_parse_word_list_trims_and_drops_empty_entries() -> None:
    assert parse_word_list(" Graça ,Paz,, ,Amor ") == ["Graça", "Paz", "Amor"]
    assert parse_word_list("") == []


def test_save_persists_under_stable_keys(tmp_path) -> None:
    path = tmp_path / "bank.json"
    bank = WordBank.load(JsonKeyValueStore(path=path))
    bank.save("Graça, Paz, Amor", "Cruz,Rocha")

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[THEOLOGY_KEY] == ["Graça", "Paz", "Amor"]
    assert raw[CONTEXT_KEY] == ["Cruz", "Rocha"]

    reloaded = WordBank.load(JsonKeyValueStore(path=path))
    assert reloaded.concepts == ["Graça", "Paz", "Amor"]
    assert reloaded.editor_text() == {"concepts": "Graça, Paz, Amor", "contexts": "Cruz, Rocha"}


def test_reset_restores_defaults_and_forgets_saved_lists(tmp_path) -> None:
    path = tmp_path / "bank.json"
    bank = WordBank.load(JsonKeyValueStore(path=path))
    bank.save("a,b", "c,d")
    bank.reset()

    assert bank.concepts == list(DEFAULT_CONCEPTS)
    assert json.loads(path.read_text(encoding="utf-8")) == {}
    assert WordBank.load(JsonKeyValueStore(path=path)).contexts == list(DEFAULT_CONTEXTS)


def test_unreadable_or_malformed_values_fall_back_to_defaults(tmp_path) -> None:
    path = tmp_path / "bank.json"
    path.write_text("{not json", encoding="utf-8")
    assert WordBank.load(JsonKeyValueStore(path=path)).concepts == list(DEFAULT_CONCEPTS)

    path.write_text(json.dumps({THEOLOGY_KEY: "Graça, Paz", CONTEXT_KEY: ["Cruz"]}), encoding="utf-8")
    bank = WordBank.load(JsonKeyValueStore(path=path))
    assert bank.concepts == list(DEFAULT_CONCEPTS)
    assert bank.contexts == ["Cruz"]


def test_from_env_reads_path(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({CONTEXT_KEY: ["Mar", "Vento"]}), encoding="utf-8")
    monkeypatch.setenv("LINHAS_WORD_BANK_PATH", str(path))
    assert WordBank.from_env().contexts == ["Mar", "Vento"]


def test_editor_secret_gate(monkeypatch) -> None:
    monkeypatch.delenv("LINHAS_EDITOR_SECRET", raising=False)
    check_editor_secret("989833")
    with pytest.raises(UnauthorizedEditError, match="Senha incorreta"):
        check_editor_secret("1234")

    monkeypatch.setenv("LINHAS_EDITOR_SECRET", "amen")
    check_editor_secret("amen")
    with pytest.raises(UnauthorizedEditError):
        check_editor_secret("989833")
    check_editor_secret("x", expected="x")
