"""In-memory event log entries for one match."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from time import time
from typing import Any

from .serialize import to_serializable


class EventType(str, Enum):
    """Event types emitted by a match session."""

    MATCH_START = "match_start"
    CELL_SELECTED = "cell_selected"
    CELL_DISMISSED = "cell_dismissed"
    RESULT_MARKED = "result_marked"
    TURN_TIMEOUT = "turn_timeout"
    INSIGHT = "insight"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class MatchEvent:
    """Single replay event emitted during a match."""

    event_type: EventType
    match_id: str
    turn: int
    timestamp_ms: int
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Return JSON-serializable event data."""
        return {
            "event_type": self.event_type.value,
            "match_id": self.match_id,
            "turn": self.turn,
            "timestamp_ms": self.timestamp_ms,
            "payload": to_serializable(self.payload),
        }

    @classmethod
    def create(cls, event_type: EventType, match_id: str, turn: int, payload: dict[str, Any]) -> "MatchEvent":
        """Construct an event with the current wall-clock timestamp."""
        return cls(
            event_type=event_type,
            match_id=match_id,
            turn=turn,
            timestamp_ms=int(time() * 1000),
            payload=payload,
        )
