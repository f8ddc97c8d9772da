"""Smoke tests for the local FastAPI Linhas API."""

from __future__ import annotations

import asyncio

from fastapi import HTTPException
import pytest

from linhas.linhas_insight import InsightService
from linhas.linhas_words import JsonKeyValueStore, WordBank
import server.main as main_module
from server.main import (
    dismiss_cell,
    get_events,
    get_match,
    get_options,
    get_word_bank,
    health,
    mark_result,
    request_insight,
    reset_word_bank,
    return_to_config,
    save_word_bank,
    select_cell,
    start_match,
    unlock_word_bank,
)
from server.schemas import (
    MarkResultRequest,
    ResetWordBankRequest,
    SaveWordBankRequest,
    SelectCellRequest,
    StartMatchRequest,
    UnlockRequest,
)
from server.session import LinhasSession


@pytest.fixture(autouse=True)
def _isolated_session(tmp_path, monkeypatch) -> LinhasSession:
    monkeypatch.delenv("LINHAS_EDITOR_SECRET", raising=False)
    session = LinhasSession(
        word_bank=WordBank.load(JsonKeyValueStore(path=tmp_path / "bank.json")),
        insight_service=InsightService(None),
    )
    monkeypatch.setattr(main_module, "session", session)
    return session


def _start(payload: dict) -> dict:
    return asyncio.run(start_match(StartMatchRequest.model_validate(payload)))


def _select(coordinate: str) -> dict:
    return asyncio.run(select_cell(SelectCellRequest.model_validate({"coordinate": coordinate})))


def _mark(result: str) -> dict:
    return asyncio.run(mark_result(MarkResultRequest.model_validate({"result": result})))


def _events() -> list[dict]:
    return asyncio.run(get_events(format="array"))


def _expect_http_error(fn, expected_status: int) -> object:
    try:
        fn()
    except HTTPException as exc:
        assert exc.status_code == expected_status
        return exc.detail
    raise AssertionError("Expected HTTPException to be raised.")


def test_health_and_options() -> None:
    assert asyncio.run(health()) == {"status": "ok"}
    options = asyncio.run(get_options())
    assert [item["label"] for item in options["grid_sizes"]] == ["Iniciante", "Padrão", "Hardcore"]
    assert options["turn_times"] == [30, 60, 90, "inf"]


def test_match_api_flow_start_select_mark_events() -> None:
    configuring = asyncio.run(get_match(player_id=None))
    assert configuring["phase"] == "CONFIGURING"
    assert configuring["word_bank"] == {"concepts": 25, "contexts": 25}

    started = _start({"seed": 123, "grid_size": 2, "player_count": 2, "turn_time": 30})
    assert started["phase"] == "IN_PROGRESS"
    assert len(started["grid_x"]) == 2
    assert started["current_player_id"] == 1
    assert started["timers"]["remaining_turn_seconds"] == 30
    assert [player["name"] for player in started["players"]] == ["Jerusalém", "Judeia"]

    target = started["players"][0]["hand"][0]["coordinate"]
    selected = _select(target)
    assert selected["active_cell"] == target
    assert set(selected["active_words"]) == {"concept", "context"}
    assert [move["type"] for move in selected["legal_moves"]] == ["MarkResult", "MarkResult", "DismissCell"]

    marked = _mark("correct")
    assert marked["results"] == {target: "correct"}
    assert marked["current_player_id"] == 2
    assert marked["report"]["score"] == 25

    observed = asyncio.run(get_match(player_id=2))
    assert observed["observation"]["player_id"] == 2

    event_types = [event["event_type"] for event in _events()]
    assert event_types == ["match_start", "cell_selected", "result_marked"]

    jsonl = asyncio.run(get_events(format="jsonl"))
    assert jsonl.media_type == "application/jsonl"


def test_ignored_transitions_return_unchanged_view() -> None:
    _start({"seed": 5, "grid_size": 2})
    before = _mark("wrong")
    assert before["results"] == {}
    dismissed = asyncio.run(dismiss_cell())
    assert dismissed["active_cell"] is None

    _select("A1")
    again = _select("B1")
    assert again["active_cell"] == "A1"


def test_return_to_config_discards_match() -> None:
    _start({"seed": 5, "grid_size": 3, "turn_time": "inf"})
    view = asyncio.run(return_to_config())
    assert view["phase"] == "CONFIGURING"
    assert "grid_x" not in view
    assert _events() == []


def test_invalid_configuration_and_coordinates_return_400() -> None:
    detail = _expect_http_error(lambda: _start({"grid_size": 5}), expected_status=400)
    assert isinstance(detail, dict)
    assert detail["type"] == "MatchConfigurationError"

    _start({"seed": 1, "grid_size": 2})
    _expect_http_error(lambda: _select("??"), expected_status=400)
    _expect_http_error(lambda: asyncio.run(get_match(player_id=7)), expected_status=400)


def test_word_bank_editor_flow_and_insufficient_bank() -> None:
    _expect_http_error(
        lambda: asyncio.run(unlock_word_bank(UnlockRequest.model_validate({"secret": "nope"}))),
        expected_status=403,
    )
    unlocked = asyncio.run(unlock_word_bank(UnlockRequest.model_validate({"secret": "989833"})))
    assert unlocked["contexts"].startswith("Cruz, Deserto")

    saved = asyncio.run(
        save_word_bank(
            SaveWordBankRequest.model_validate(
                {"secret": "989833", "concepts": "Graça, Paz", "contexts": "Cruz,, Mar "}
            )
        )
    )
    assert saved == {"concepts": "Graça, Paz", "contexts": "Cruz, Mar"}
    assert asyncio.run(get_word_bank()) == {"concepts": 2, "contexts": 2}

    detail = _expect_http_error(lambda: _start({"grid_size": 3}), expected_status=409)
    assert isinstance(detail, dict)
    assert detail["type"] == "InsufficientWordBankError"
    assert asyncio.run(get_match(player_id=None))["phase"] == "CONFIGURING"

    asyncio.run(reset_word_bank(ResetWordBankRequest.model_validate({"secret": "989833"})))
    assert asyncio.run(get_word_bank()) == {"concepts": 25, "contexts": 25}


def test_insight_endpoint_falls_back_without_provider() -> None:
    assert asyncio.run(request_insight())["insight"] is None

    _start({"seed": 9, "grid_size": 2, "turn_time": "inf"})
    _select("B2")
    payload = asyncio.run(request_insight())
    assert payload["insight"]["fallback"] is True
    assert payload["insight"]["verse"] == "Tente novamente mais tarde."
    assert payload["view"]["insight"] == payload["insight"]
