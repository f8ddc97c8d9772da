"""Structured exceptions shared by the game engine, session and API."""

from __future__ import annotations

from typing import Any


class LinhasError(Exception):
    """Base class for Linhas exceptions."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class MatchConfigurationError(LinhasError):
    """Raised when a match is configured incorrectly."""


class InsufficientWordBankError(MatchConfigurationError):
    """Raised when a word pool cannot fill one grid axis."""

    def __init__(self, grid_size: int, concept_count: int, context_count: int):
        self.grid_size = grid_size
        self.concept_count = concept_count
        self.context_count = context_count
        super().__init__(
            "Banco de dados insuficiente para este tamanho de grade: "
            f"grid_size={grid_size} requires {grid_size} concepts and {grid_size} contexts, "
            f"found {concept_count} and {context_count}."
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update(
            {
                "grid_size": self.grid_size,
                "concept_count": self.concept_count,
                "context_count": self.context_count,
            }
        )
        return payload


class InvalidTransitionError(LinhasError):
    """Raised when a move is applied outside its valid phase."""

    def __init__(self, move: Any, reason: str):
        self.move = move
        self.reason = reason
        move_type = getattr(move, "move_type", type(move).__name__)
        super().__init__(f"Invalid transition {move_type}: {reason}")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"move": getattr(self.move, "to_dict", lambda: self.move)(), "reason": self.reason})
        return payload


class InsightUnavailableError(LinhasError):
    """Raised when the insight provider fails or answers with malformed output."""


class UnauthorizedEditError(LinhasError):
    """Raised when the word-bank editor secret does not match."""
