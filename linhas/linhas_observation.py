"""Observation model for one player's view of the board."""

from __future__ import annotations

from dataclasses import dataclass

from engine.state import Observation

from .linhas_state import CellResult, Coordinate, Phase


@dataclass(frozen=True)
class HandView:
    """Another player's hand as seen by the viewer: revealed cells plus a count."""

    player_id: int
    name: str
    revealed: tuple[Coordinate, ...]
    hidden_count: int


@dataclass(frozen=True)
class LinhasObservation(Observation):
    """Player-specific Linhas view; other players' unrevealed cells stay hidden."""

    player_id: int
    name: str
    hand: tuple[Coordinate, ...]
    others: tuple[HandView, ...]
    grid_x: tuple[str, ...]
    grid_y: tuple[str, ...]
    results: dict[Coordinate, CellResult]
    current_player_id: int | None
    active_cell: Coordinate | None
    elapsed_seconds: int
    remaining_turn_seconds: int | None
    phase: Phase
    timed_out: bool
    turn_index: int
