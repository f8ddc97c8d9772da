"""Pydantic request schemas for the Linhas API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class StartMatchRequest(BaseModel):
    """Request body for dealing a new match from the configuration screen."""

    seed: int | None = None
    grid_size: int = 3
    player_count: int = 2
    turn_time: int | Literal["inf"] | None = 60
    rotate_turns: bool = True
    max_players: int = 4

    def config(self) -> dict[str, object]:
        return self.model_dump(exclude={"seed"})


class SelectCellRequest(BaseModel):
    coordinate: str = Field(min_length=2)


class MarkResultRequest(BaseModel):
    result: Literal["correct", "wrong"]


class UnlockRequest(BaseModel):
    """Editor secret entered before the word bank can be changed."""

    secret: str


class SaveWordBankRequest(BaseModel):
    """Comma-separated lists as typed in the editor."""

    secret: str
    concepts: str
    contexts: str


class ResetWordBankRequest(BaseModel):
    secret: str
