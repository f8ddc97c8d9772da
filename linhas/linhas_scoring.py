"""Score, rank table and end-of-match report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from engine.serialize import to_serializable

from .linhas_state import CellResult, LinhasState, Phase


@dataclass(frozen=True)
class Rank:
    """One qualitative tier of the rank table."""

    threshold: int
    title: str
    description: str
    tier: str


RANKS: tuple[Rank, ...] = (
    Rank(100, "Symphonia Dei", "Harmonia Perfeita! Nós temos a mente de Cristo.", "gold"),
    Rank(75, "Obreiro Aprovado", "Maneja bem a palavra da verdade.", "green"),
    Rank(50, "Nobres Bereanos", "Examinando as Escrituras diariamente.", "blue"),
    Rank(0, "Leite Espiritual", "Desejai o genuíno leite espiritual para crescimento.", "gray"),
)


def score(results: Mapping[Any, CellResult], grid_size: int) -> int:
    """Percentage of correct cells over the whole grid, rounded half up."""
    total = grid_size * grid_size
    if total <= 0:
        raise ValueError("grid_size must be >= 1.")
    correct = sum(1 for result in results.values() if result is CellResult.CORRECT)
    # Integer form of floor(100 * correct / total + 0.5).
    return (200 * correct + total) // (2 * total)


def rank_for(value: int) -> Rank:
    """Return the first rank whose threshold is <= value."""
    for rank in RANKS:
        if value >= rank.threshold:
            return rank
    return RANKS[-1]


def format_elapsed(seconds: int) -> str:
    """Render seconds as MM:SS."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class MatchReport:
    """Final (or running) tally of a match."""

    score: int
    rank: Rank
    correct_count: int
    wrong_count: int
    total_cells: int
    elapsed_seconds: int
    finished: bool

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.elapsed_seconds)

    def to_dict(self) -> dict[str, Any]:
        payload = to_serializable(self)
        payload["elapsed_display"] = self.elapsed_display
        return payload


def build_report(state: LinhasState) -> MatchReport:
    counts = state.result_counts()
    value = score(state.results, state.config.grid_size)
    return MatchReport(
        score=value,
        rank=rank_for(value),
        correct_count=counts[CellResult.CORRECT.value],
        wrong_count=counts[CellResult.WRONG.value],
        total_cells=state.config.total_cells,
        elapsed_seconds=state.elapsed_seconds,
        finished=state.phase is Phase.FINISHED,
    )
