"""Linhas package exports."""

from .linhas_clocks import VirtualClock, WallClockTicker
from .linhas_deck import Deck, build_deck, deal
from .linhas_game import LinhasGame
from .linhas_insight import Insight, InsightMode, InsightService
from .linhas_moves import DismissCell, MarkResult, MoveType, SelectCell, Tick
from .linhas_observation import LinhasObservation
from .linhas_scoring import RANKS, MatchReport, Rank, rank_for, score
from .linhas_state import CellResult, ClockName, Coordinate, LinhasState, MatchConfig, Phase, Player
from .linhas_words import JsonKeyValueStore, WordBank

__all__ = [
    "CellResult",
    "ClockName",
    "Coordinate",
    "Deck",
    "DismissCell",
    "Insight",
    "InsightMode",
    "InsightService",
    "JsonKeyValueStore",
    "LinhasGame",
    "LinhasObservation",
    "LinhasState",
    "MarkResult",
    "MatchConfig",
    "MatchReport",
    "MoveType",
    "Phase",
    "Player",
    "RANKS",
    "Rank",
    "SelectCell",
    "Tick",
    "VirtualClock",
    "WallClockTicker",
    "WordBank",
    "build_deck",
    "deal",
    "rank_for",
    "score",
]
