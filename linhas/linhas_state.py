"""State, configuration and value types for Linhas."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from engine.errors import MatchConfigurationError
from engine.state import State

GRID_SIZES: tuple[int, ...] = (2, 3, 4)
MIN_PLAYERS = 2
DEFAULT_MAX_PLAYERS = 4
EXTENDED_MAX_PLAYERS = 8
TURN_TIME_CHOICES: tuple[int, ...] = (30, 60, 90)
UNLIMITED_TURN_TIME_TOKENS = {"inf", "unlimited", "none", "∞"}
TRUE_TOKENS = {"true", "1", "yes", "on"}
FALSE_TOKENS = {"false", "0", "no", "off"}


class Phase(str, Enum):
    """Match phases."""

    CONFIGURING = "CONFIGURING"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


class CellResult(str, Enum):
    """Group verdict for one revealed coordinate."""

    CORRECT = "correct"
    WRONG = "wrong"


class ClockName(str, Enum):
    """Named clocks owned by a match."""

    ELAPSED = "elapsed"
    TURN = "turn"


@dataclass(frozen=True, order=True)
class Coordinate:
    """Grid cell: 0-based column (concept axis) and row (context axis)."""

    column: int
    row: int

    def __post_init__(self) -> None:
        if self.column < 0 or self.row < 0:
            raise ValueError(f"Coordinate indices must be >= 0, got ({self.column}, {self.row}).")
        if self.column >= 26:
            raise ValueError("Coordinate column must fit a single letter.")

    @property
    def label(self) -> str:
        return f"{chr(ord('A') + self.column)}{self.row + 1}"

    def to_token(self) -> str:
        return self.label

    def __str__(self) -> str:
        return self.label

    def in_grid(self, grid_size: int) -> bool:
        return self.column < grid_size and self.row < grid_size

    @classmethod
    def parse(cls, label: str) -> "Coordinate":
        """Parse `A1`-style labels (case-insensitive)."""
        text = label.strip().upper()
        if len(text) < 2 or not ("A" <= text[0] <= "Z") or not text[1:].isdigit():
            raise ValueError(f"Invalid coordinate label: {label!r}")
        row_number = int(text[1:])
        if row_number < 1:
            raise ValueError(f"Invalid coordinate label: {label!r}")
        return cls(column=ord(text[0]) - ord("A"), row=row_number - 1)


@dataclass(frozen=True)
class Player:
    """Seat at the shared device with the coordinates dealt to it."""

    id: int
    name: str
    hand: tuple[Coordinate, ...]


@dataclass(frozen=True)
class MatchConfig:
    """Options chosen on the configuration screen; immutable during a match."""

    grid_size: int = 3
    player_count: int = 2
    turn_time: int | None = 60
    rotate_turns: bool = True
    max_players: int = DEFAULT_MAX_PLAYERS

    def __post_init__(self) -> None:
        if self.grid_size not in GRID_SIZES:
            raise MatchConfigurationError(f"grid_size must be one of {list(GRID_SIZES)}, got {self.grid_size!r}.")
        if self.max_players not in (DEFAULT_MAX_PLAYERS, EXTENDED_MAX_PLAYERS):
            raise MatchConfigurationError(
                f"max_players must be {DEFAULT_MAX_PLAYERS} or {EXTENDED_MAX_PLAYERS}, got {self.max_players!r}."
            )
        if not MIN_PLAYERS <= self.player_count <= self.max_players:
            raise MatchConfigurationError(
                f"player_count must be between {MIN_PLAYERS} and {self.max_players}, got {self.player_count!r}."
            )
        if self.turn_time is not None and self.turn_time <= 0:
            raise MatchConfigurationError(f"turn_time must be positive or unlimited, got {self.turn_time!r}.")

    @property
    def total_cells(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def has_turn_clock(self) -> bool:
        return self.turn_time is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "MatchConfig":
        """Build a config from a loosely typed payload (API body, tests)."""
        cfg = dict(data or {})
        try:
            return cls(
                grid_size=int(cfg.get("grid_size", cls.grid_size)),
                player_count=int(cfg.get("player_count", cls.player_count)),
                turn_time=parse_turn_time(cfg.get("turn_time", cls.turn_time)),
                rotate_turns=parse_flag(cfg.get("rotate_turns", cls.rotate_turns)),
                max_players=int(cfg.get("max_players", cls.max_players)),
            )
        except (TypeError, ValueError) as exc:
            raise MatchConfigurationError(f"Invalid match configuration: {exc}") from exc


def parse_turn_time(raw: Any) -> int | None:
    """Return seconds per turn, or None for an unlimited turn."""
    if raw is None:
        return None
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in UNLIMITED_TURN_TIME_TOKENS:
            return None
        return int(token)
    if isinstance(raw, bool):
        raise ValueError("turn_time must be an integer or 'inf'.")
    return int(raw)


def parse_flag(raw: Any) -> bool:
    """Read a boolean from JSON or form input; "false" is False."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in TRUE_TOKENS:
            return True
        if token in FALSE_TOKENS:
            return False
    raise ValueError(f"Expected a boolean flag, got {raw!r}.")


@dataclass(frozen=True)
class LinhasState(State):
    """Immutable match state.

    `results` only ever gains entries; a coordinate absent from it is
    unplayed. `remaining_turn_seconds` is None when turns are unlimited.
    """

    seed: int
    config: MatchConfig
    grid_x: tuple[str, ...]
    grid_y: tuple[str, ...]
    deck: tuple[Coordinate, ...]
    players: tuple[Player, ...]
    results: dict[Coordinate, CellResult] = field(default_factory=dict)
    current_player_index: int = 0
    active_cell: Coordinate | None = None
    elapsed_seconds: int = 0
    remaining_turn_seconds: int | None = None
    phase: Phase = Phase.IN_PROGRESS
    timed_out: bool = False
    turn_index: int = 0
    last_move: dict[str, Any] | None = None

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def is_resolved(self, coordinate: Coordinate) -> bool:
        return coordinate in self.results

    def unresolved_in_hand(self, player: Player) -> tuple[Coordinate, ...]:
        """Return the player's unresolved coordinates in hand order."""
        return tuple(coordinate for coordinate in player.hand if coordinate not in self.results)

    def words_for(self, coordinate: Coordinate) -> tuple[str, str]:
        """Return the (concept, context) pair behind a coordinate."""
        return self.grid_x[coordinate.column], self.grid_y[coordinate.row]

    def result_counts(self) -> dict[str, int]:
        counts = {CellResult.CORRECT.value: 0, CellResult.WRONG.value: 0}
        for result in self.results.values():
            counts[result.value] += 1
        return counts
