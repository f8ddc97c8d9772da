"""Engine exports for state-based party games."""

from .errors import (
    InsightUnavailableError,
    InsufficientWordBankError,
    InvalidTransitionError,
    LinhasError,
    MatchConfigurationError,
    UnauthorizedEditError,
)
from .events import EventType, MatchEvent
from .game import Game
from .move import Move
from .state import Observation, State

__all__ = [
    "EventType",
    "Game",
    "InsightUnavailableError",
    "InsufficientWordBankError",
    "InvalidTransitionError",
    "LinhasError",
    "MatchConfigurationError",
    "MatchEvent",
    "Move",
    "Observation",
    "State",
    "UnauthorizedEditError",
]
