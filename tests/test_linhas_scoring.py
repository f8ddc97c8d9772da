"""Score, rank and elapsed-time formatting tests."""

from __future__ import annotations

from linhas.linhas_scoring import RANKS, format_elapsed, rank_for, score
from linhas.linhas_state import CellResult, Coordinate


def _results(correct: int, wrong: int = 0) -> dict[Coordinate, CellResult]:
    cells = [Coordinate(column, row) for column in range(4) for row in range(4)]
    results = {cells[i]: CellResult.CORRECT for i in range(correct)}
    results.update({cells[correct + i]: CellResult.WRONG for i in range(wrong)})
    return results


def test_score_bounds_and_extreme_ranks() -> None:
    assert score({}, 3) == 0
    assert rank_for(score({}, 3)).title == "Leite Espiritual"
    assert score(_results(9), 3) == 100
    assert rank_for(100).title == "Symphonia Dei"
    assert rank_for(100).tier == "gold"


def test_score_rounds_half_up() -> None:
    assert score(_results(1, 8), 3) == 11
    assert score(_results(5, 4), 3) == 56
    assert score(_results(1), 4) == 6
    assert score(_results(2), 4) == 13


def test_wrong_and_unplayed_cells_count_the_same() -> None:
    assert score(_results(2, 2), 2) == score(_results(2), 2) == 50


def test_score_is_monotonic_in_correct_count() -> None:
    values = [score(_results(correct), 4) for correct in range(17)]
    assert values == sorted(values)
    assert values[0] == 0 and values[-1] == 100


def test_rank_thresholds() -> None:
    assert [rank.threshold for rank in RANKS] == [100, 75, 50, 0]
    assert rank_for(99).title == "Obreiro Aprovado"
    assert rank_for(75).title == "Obreiro Aprovado"
    assert rank_for(74).title == "Nobres Bereanos"
    assert rank_for(50).title == "Nobres Bereanos"
    assert rank_for(49).title == "Leite Espiritual"


def test_format_elapsed() -> None:
    assert format_elapsed(0) == "00:00"
    assert format_elapsed(75) == "01:15"
    assert format_elapsed(3600) == "60:00"
