"""Deck construction and round-robin dealing."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Sequence, TypeVar

from engine.errors import InsufficientWordBankError

from .linhas_state import Coordinate, Player

T = TypeVar("T")

PLAYER_NAMES: tuple[str, ...] = ("Jerusalém", "Judeia", "Samaria", "Mundo")


@dataclass(frozen=True)
class Deck:
    """Axis labels plus the shuffled coordinate deck for one match."""

    grid_x: tuple[str, ...]
    grid_y: tuple[str, ...]
    coordinates: tuple[Coordinate, ...]


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a uniformly shuffled copy (Fisher-Yates via `Random.shuffle`)."""
    result = list(items)
    rng.shuffle(result)
    return result


def grid_coordinates(grid_size: int) -> list[Coordinate]:
    """Return every coordinate of a square grid, column-major (A1, A2, ..., B1, ...)."""
    return [Coordinate(column=column, row=row) for column in range(grid_size) for row in range(grid_size)]


def build_deck(
    concepts: Sequence[str],
    contexts: Sequence[str],
    grid_size: int,
    rng: random.Random | None = None,
) -> Deck:
    """Sample `grid_size` labels per axis and build the shuffled coordinate deck.

    Axis labels are the prefix of an independent full shuffle of each pool, so
    every label is equally likely. The deck is shuffled separately.
    """
    if grid_size < 1:
        raise ValueError("grid_size must be >= 1.")
    if len(concepts) < grid_size or len(contexts) < grid_size:
        raise InsufficientWordBankError(grid_size, len(concepts), len(contexts))

    rng = rng or random.Random()
    grid_x = tuple(shuffled(concepts, rng)[:grid_size])
    grid_y = tuple(shuffled(contexts, rng)[:grid_size])
    coordinates = tuple(shuffled(grid_coordinates(grid_size), rng))
    return Deck(grid_x=grid_x, grid_y=grid_y, coordinates=coordinates)


def player_names(player_count: int) -> list[str]:
    """Positional display names: the city pool when it is large enough."""
    if player_count <= len(PLAYER_NAMES):
        return list(PLAYER_NAMES[:player_count])
    return [f"Jogador {index + 1}" for index in range(player_count)]


def deal(
    deck: Sequence[Coordinate],
    player_count: int,
    names: Sequence[str] | None = None,
) -> tuple[Player, ...]:
    """Deal deck[i] to player i mod player_count; each hand is sorted afterwards."""
    if player_count < 1:
        raise ValueError("player_count must be >= 1.")
    seat_names = list(names) if names is not None else player_names(player_count)
    if len(seat_names) < player_count:
        raise ValueError(f"Expected {player_count} player names, got {len(seat_names)}.")

    hands: list[list[Coordinate]] = [[] for _ in range(player_count)]
    for index, coordinate in enumerate(deck):
        hands[index % player_count].append(coordinate)

    return tuple(
        Player(id=index + 1, name=seat_names[index], hand=tuple(sorted(hand)))
        for index, hand in enumerate(hands)
    )
