"""Core game interface for deterministic, state-based party games."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Sequence, TypeVar

from .move import Move
from .state import Observation

StateT = TypeVar("StateT")
MoveT = TypeVar("MoveT", bound=Move)
ObservationT = TypeVar("ObservationT", bound=Observation)
ReportT = TypeVar("ReportT")


class Game(ABC, Generic[StateT, MoveT, ObservationT, ReportT]):
    """Abstract interface a game implementation satisfies.

    Moves are applied to immutable states and return the next state. Games on
    a shared local device have no per-seat move ownership, so moves carry no
    player id; `current_player` only reports whose turn it is.
    """

    game_name: str = "game"

    @abstractmethod
    def new_game(self, seed: int, config: Mapping[str, Any] | None = None) -> StateT:
        """Create a fresh state for a seeded match."""

    @abstractmethod
    def player_ids(self, state: StateT) -> Sequence[int]:
        """Return all player ids seated in the match."""

    @abstractmethod
    def current_player(self, state: StateT) -> int | None:
        """Return the id of the player whose turn it is, if any."""

    @abstractmethod
    def legal_moves(self, state: StateT) -> Sequence[MoveT]:
        """Return the user-triggered moves currently accepted."""

    @abstractmethod
    def is_legal(self, state: StateT, move: MoveT) -> tuple[bool, str | None]:
        """Return whether a move is valid and an optional reason when it is not."""

    @abstractmethod
    def apply_move(self, state: StateT, move: MoveT) -> StateT:
        """Apply a valid move and return the next state."""

    @abstractmethod
    def is_terminal(self, state: StateT) -> bool:
        """Return whether the match has finished."""

    @abstractmethod
    def outcome(self, state: StateT) -> ReportT:
        """Return the final report for a state."""

    @abstractmethod
    def observation(self, state: StateT, player_id: int) -> ObservationT:
        """Return a player-specific view."""

    @abstractmethod
    def render(self, state: StateT) -> str:
        """Render the state for debugging."""

    def parse_move(self, data: Mapping[str, Any]) -> MoveT:
        """Parse a move payload produced by an external caller."""
        raise NotImplementedError(f"{self.__class__.__name__} does not implement parse_move().")
