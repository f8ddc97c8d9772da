"""FastAPI server exposing the Linhas match on the shared local device."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from engine.errors import InsufficientWordBankError, MatchConfigurationError, UnauthorizedEditError
from engine.serialize import json_dumps
from linhas.linhas_clocks import WallClockTicker
from linhas.linhas_state import DEFAULT_MAX_PLAYERS, EXTENDED_MAX_PLAYERS, GRID_SIZES, MIN_PLAYERS, TURN_TIME_CHOICES
from server.schemas import (
    MarkResultRequest,
    ResetWordBankRequest,
    SaveWordBankRequest,
    SelectCellRequest,
    StartMatchRequest,
    UnlockRequest,
)
from server.session import LinhasSession

logger = logging.getLogger(__name__)

GRID_LABELS = {2: "Iniciante", 3: "Padrão", 4: "Hardcore"}

session = LinhasSession.from_env(ticker_factory=WallClockTicker)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    session.shutdown()


app = FastAPI(title="Linhas Local API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, InsufficientWordBankError):
        return HTTPException(status_code=409, detail=exc.to_dict())
    if isinstance(exc, MatchConfigurationError):
        return HTTPException(status_code=400, detail=exc.to_dict())
    if isinstance(exc, UnauthorizedEditError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    logger.exception("Unexpected error handling request")
    return HTTPException(status_code=500, detail=str(exc))


@app.get("/api/health")
async def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


@app.get("/api/options")
async def get_options() -> dict[str, Any]:
    """Choices offered on the configuration screen."""
    return {
        "grid_sizes": [{"value": size, "label": GRID_LABELS.get(size, f"{size}x{size}")} for size in GRID_SIZES],
        "turn_times": [*TURN_TIME_CHOICES, "inf"],
        "min_players": MIN_PLAYERS,
        "max_players": DEFAULT_MAX_PLAYERS,
        "extended_max_players": EXTENDED_MAX_PLAYERS,
    }


@app.get("/api/match")
async def get_match(player_id: int | None = Query(default=None, ge=0)) -> dict:
    """Current session view, optionally with one seat's observation."""
    try:
        return session.view(player_id)
    except Exception as exc:
        raise _http_error(exc) from exc


@app.post("/api/match/start")
async def start_match(request: StartMatchRequest) -> dict:
    """Deal a new match. Ignored unless the session is on the configuration screen."""
    try:
        session.start_match(request.config(), seed=request.seed)
    except Exception as exc:
        raise _http_error(exc) from exc
    return session.view()


@app.post("/api/match/select")
async def select_cell(request: SelectCellRequest) -> dict:
    try:
        session.select_cell(request.coordinate)
    except Exception as exc:
        raise _http_error(exc) from exc
    return session.view()


@app.post("/api/match/mark")
async def mark_result(request: MarkResultRequest) -> dict:
    try:
        session.mark_result(request.result)
    except Exception as exc:
        raise _http_error(exc) from exc
    return session.view()


@app.post("/api/match/dismiss")
async def dismiss_cell() -> dict:
    session.dismiss_cell()
    return session.view()


@app.post("/api/match/return")
async def return_to_config() -> dict:
    session.return_to_config()
    return session.view()


@app.post("/api/match/insight")
async def request_insight() -> dict[str, Any]:
    """Fetch the insight for the selected cell; `insight` is null when stale or nothing is selected."""
    insight = await session.request_insight()
    return {"insight": insight.to_dict() if insight is not None else None, "view": session.view()}


@app.get("/api/match/events", response_model=None)
async def get_events(format: str = Query(default="array")) -> Any:
    """Return the current match's event history as array (default) or JSONL text."""
    events = session.all_events()
    if format == "jsonl":
        text = "\n".join(json_dumps(event) for event in events)
        return PlainTextResponse(content=text, media_type="application/jsonl")
    return events


@app.get("/api/word-bank")
async def get_word_bank() -> dict[str, Any]:
    """Pool sizes only; the lists themselves need the editor secret."""
    return {"concepts": len(session.word_bank.concepts), "contexts": len(session.word_bank.contexts)}


@app.post("/api/word-bank/unlock")
async def unlock_word_bank(request: UnlockRequest) -> dict[str, str]:
    try:
        return session.unlock_word_bank(request.secret)
    except Exception as exc:
        raise _http_error(exc) from exc


@app.put("/api/word-bank")
async def save_word_bank(request: SaveWordBankRequest) -> dict[str, str]:
    try:
        return session.save_word_bank(request.secret, request.concepts, request.contexts)
    except Exception as exc:
        raise _http_error(exc) from exc


@app.post("/api/word-bank/reset")
async def reset_word_bank(request: ResetWordBankRequest) -> dict[str, str]:
    try:
        return session.reset_word_bank(request.secret)
    except Exception as exc:
        raise _http_error(exc) from exc


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=True)
