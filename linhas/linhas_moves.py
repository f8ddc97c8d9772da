"""Move definitions for Linhas."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from engine.move import Move

from .linhas_state import CellResult, ClockName, Coordinate


class MoveType(str, Enum):
    """Supported move discriminators."""

    SELECT_CELL = "SelectCell"
    MARK_RESULT = "MarkResult"
    DISMISS_CELL = "DismissCell"
    TICK = "Tick"


@dataclass(frozen=True)
class SelectCell(Move):
    """Open the decision for one unresolved coordinate."""

    coordinate: Coordinate
    move_type = MoveType.SELECT_CELL.value

    def __post_init__(self) -> None:
        if isinstance(self.coordinate, str):
            object.__setattr__(self, "coordinate", Coordinate.parse(self.coordinate))


@dataclass(frozen=True)
class MarkResult(Move):
    """Record the group's verdict for the selected coordinate."""

    result: CellResult
    move_type = MoveType.MARK_RESULT.value

    def __post_init__(self) -> None:
        if not isinstance(self.result, CellResult):
            object.__setattr__(self, "result", CellResult(str(self.result).strip().lower()))


@dataclass(frozen=True)
class DismissCell(Move):
    """Close the pending decision without recording a verdict."""

    move_type = MoveType.DISMISS_CELL.value


@dataclass(frozen=True)
class Tick(Move):
    """One second elapsed on a named clock."""

    clock: ClockName
    move_type = MoveType.TICK.value

    def __post_init__(self) -> None:
        if not isinstance(self.clock, ClockName):
            object.__setattr__(self, "clock", ClockName(str(self.clock).strip().lower()))


def move_from_dict(data: Mapping[str, Any]) -> Move:
    """Parse a Linhas move from a JSON payload."""
    move_type = data.get("type") or data.get("move_type")
    if move_type == MoveType.SELECT_CELL.value:
        if "coordinate" not in data and "coord" in data:
            return SelectCell(coordinate=data["coord"])
        return SelectCell.from_dict(data)
    if move_type == MoveType.MARK_RESULT.value:
        if "result" not in data and "status" in data:
            return MarkResult(result=data["status"])
        return MarkResult.from_dict(data)
    if move_type == MoveType.DISMISS_CELL.value:
        return DismissCell()
    if move_type == MoveType.TICK.value:
        return Tick.from_dict(data)
    raise ValueError(f"Unknown Linhas move type: {move_type!r}")
