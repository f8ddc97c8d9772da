"""Immutable state and per-player view bases."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Self

from .serialize import digest, to_serializable


@dataclass(frozen=True)
class State:
    """Frozen game state; transitions build the next one with `evolve`."""

    def evolve(self, **changes: Any) -> Self:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return to_serializable(self)

    def state_digest(self) -> str:
        """Stable SHA256 of the serialized state, recorded with result events."""
        return digest(self.to_dict())


@dataclass(frozen=True)
class Observation:
    """Base observation; subclasses add the fields one viewer may see."""

    def to_dict(self) -> dict[str, Any]:
        return to_serializable(self)
