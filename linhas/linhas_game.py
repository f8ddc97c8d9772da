"""Linhas game implementation: pure transitions over immutable match states."""

from __future__ import annotations

import random
from typing import Any, Mapping, Sequence

from engine.errors import InvalidTransitionError
from engine.game import Game
from engine.move import Move

from .linhas_deck import build_deck, deal
from .linhas_moves import DismissCell, MarkResult, SelectCell, Tick, move_from_dict
from .linhas_observation import HandView, LinhasObservation
from .linhas_scoring import MatchReport, build_report, format_elapsed
from .linhas_state import CellResult, ClockName, Coordinate, LinhasState, MatchConfig, Phase
from .linhas_words import DEFAULT_CONCEPTS, DEFAULT_CONTEXTS, WordBank

RESULT_MARKS = {CellResult.CORRECT: "✓", CellResult.WRONG: "✕"}


class LinhasGame(Game[LinhasState, Move, LinhasObservation, MatchReport]):
    """Concept x context grid where players take turns revealing coordinates."""

    game_name = "linhas"

    def __init__(self, word_bank: WordBank | None = None, default_config: Mapping[str, Any] | None = None):
        self.word_bank = word_bank
        self.default_config = dict(default_config or {})

    def new_game(self, seed: int, config: MatchConfig | Mapping[str, Any] | None = None) -> LinhasState:
        """Build the deck, deal hands and return the opening state.

        Raises InsufficientWordBankError (before anything else happens) when a
        word pool is smaller than the grid.
        """
        if isinstance(config, MatchConfig):
            match_config = config
            overrides: Mapping[str, Any] = {}
        else:
            cfg = dict(self.default_config)
            cfg.update(config or {})
            match_config = MatchConfig.from_dict(cfg)
            overrides = cfg

        concepts, contexts = self._word_pools(overrides)
        rng = random.Random(seed)
        deck = build_deck(concepts, contexts, match_config.grid_size, rng)
        players = deal(deck.coordinates, match_config.player_count)

        return LinhasState(
            seed=seed,
            config=match_config,
            grid_x=deck.grid_x,
            grid_y=deck.grid_y,
            deck=deck.coordinates,
            players=players,
            results={},
            current_player_index=0,
            active_cell=None,
            elapsed_seconds=0,
            remaining_turn_seconds=match_config.turn_time,
            phase=Phase.IN_PROGRESS,
        )

    def player_ids(self, state: LinhasState) -> Sequence[int]:
        return tuple(player.id for player in state.players)

    def current_player(self, state: LinhasState) -> int | None:
        if self.is_terminal(state):
            return None
        return state.current_player.id

    def legal_moves(self, state: LinhasState) -> list[Move]:
        """Return user moves available now; clock ticks are not listed."""
        if self.is_terminal(state):
            return []
        if state.active_cell is not None:
            return [MarkResult(CellResult.CORRECT), MarkResult(CellResult.WRONG), DismissCell()]
        return [SelectCell(coordinate) for coordinate in sorted(state.deck) if not state.is_resolved(coordinate)]

    def is_legal(self, state: LinhasState, move: Move) -> tuple[bool, str | None]:
        """Validate a move against the current phase and selection."""
        if state.phase is not Phase.IN_PROGRESS:
            return False, "Match is not in progress."

        if isinstance(move, SelectCell):
            if not move.coordinate.in_grid(state.config.grid_size):
                return False, f"{move.coordinate} is outside the {state.config.grid_size}x{state.config.grid_size} grid."
            if state.is_resolved(move.coordinate):
                return False, f"{move.coordinate} is already resolved."
            if state.active_cell is not None:
                return False, f"{state.active_cell} is awaiting a verdict."
            return True, None

        if isinstance(move, (MarkResult, DismissCell)):
            if state.active_cell is None:
                return False, "No cell is selected."
            return True, None

        if isinstance(move, Tick):
            if move.clock is ClockName.TURN and not state.config.has_turn_clock:
                return False, "Turn time is unlimited."
            return True, None

        return False, f"Unsupported move type: {type(move).__name__}."

    def apply_move(self, state: LinhasState, move: Move) -> LinhasState:
        """Apply a valid move and return the next immutable state."""
        legal, reason = self.is_legal(state, move)
        if not legal:
            raise InvalidTransitionError(move, reason or "invalid move")

        if isinstance(move, SelectCell):
            return state.evolve(
                active_cell=move.coordinate,
                timed_out=False,
                turn_index=state.turn_index + 1,
                last_move=move.to_dict(),
            )

        if isinstance(move, MarkResult):
            return self._mark(state, move)

        if isinstance(move, DismissCell):
            next_state = state.evolve(
                active_cell=None,
                timed_out=False,
                turn_index=state.turn_index + 1,
                last_move=move.to_dict(),
            )
            return self._enforce_timeout(next_state)

        if isinstance(move, Tick):
            if move.clock is ClockName.ELAPSED:
                return state.evolve(elapsed_seconds=state.elapsed_seconds + 1)
            remaining = max(0, (state.remaining_turn_seconds or 0) - 1)
            return self._enforce_timeout(state.evolve(remaining_turn_seconds=remaining))

        raise InvalidTransitionError(move, "unsupported move")

    def is_terminal(self, state: LinhasState) -> bool:
        return state.phase is Phase.FINISHED

    def outcome(self, state: LinhasState) -> MatchReport:
        return build_report(state)

    def observation(self, state: LinhasState, player_id: int) -> LinhasObservation:
        """Return the view for one seat: own hand in full, others only as revealed."""
        viewer = next((player for player in state.players if player.id == player_id), None)
        if viewer is None:
            raise ValueError(f"Unknown Linhas player_id: {player_id!r}")

        others = tuple(
            HandView(
                player_id=player.id,
                name=player.name,
                revealed=tuple(coordinate for coordinate in player.hand if state.is_resolved(coordinate)),
                hidden_count=len(state.unresolved_in_hand(player)),
            )
            for player in state.players
            if player.id != player_id
        )
        return LinhasObservation(
            player_id=viewer.id,
            name=viewer.name,
            hand=viewer.hand,
            others=others,
            grid_x=state.grid_x,
            grid_y=state.grid_y,
            results=dict(state.results),
            current_player_id=self.current_player(state),
            active_cell=state.active_cell,
            elapsed_seconds=state.elapsed_seconds,
            remaining_turn_seconds=state.remaining_turn_seconds,
            phase=state.phase,
            timed_out=state.timed_out,
            turn_index=state.turn_index,
        )

    def render(self, state: LinhasState) -> str:
        """Render the board for debugging."""
        width = max(len(word) for word in (*state.grid_x, *state.grid_y, "  "))
        lines = [" " * width + " | " + " | ".join(word.ljust(width) for word in state.grid_x)]
        for row, context in enumerate(state.grid_y):
            cells = []
            for column in range(state.config.grid_size):
                coordinate = Coordinate(column=column, row=row)
                result = state.results.get(coordinate)
                token = RESULT_MARKS[result] if result is not None else coordinate.label
                if coordinate == state.active_cell:
                    token = f"*{token}"
                cells.append(token.ljust(width))
            lines.append(context.ljust(width) + " | " + " | ".join(cells))

        turn = "inf" if state.remaining_turn_seconds is None else f"{state.remaining_turn_seconds}s"
        header = (
            f"phase={state.phase.value} player={state.current_player.name} "
            f"elapsed={format_elapsed(state.elapsed_seconds)} turn={turn} active={state.active_cell}"
        )
        return header + "\n" + "\n".join(lines)

    def parse_move(self, data: Mapping[str, Any]) -> Move:
        return move_from_dict(data)

    def _word_pools(self, overrides: Mapping[str, Any]) -> tuple[Sequence[str], Sequence[str]]:
        if self.word_bank is not None:
            concepts: Sequence[str] = self.word_bank.concepts
            contexts: Sequence[str] = self.word_bank.contexts
        else:
            concepts, contexts = DEFAULT_CONCEPTS, DEFAULT_CONTEXTS
        return tuple(overrides.get("concepts", concepts)), tuple(overrides.get("contexts", contexts))

    def _mark(self, state: LinhasState, move: MarkResult) -> LinhasState:
        if state.active_cell is None:
            raise InvalidTransitionError(move, "No cell is selected.")
        results = dict(state.results)
        results[state.active_cell] = move.result
        finished = len(results) >= state.config.total_cells
        next_index = state.current_player_index
        if state.config.rotate_turns:
            next_index = (next_index + 1) % len(state.players)
        return state.evolve(
            results=results,
            active_cell=None,
            timed_out=False,
            current_player_index=next_index,
            remaining_turn_seconds=state.config.turn_time,
            phase=Phase.FINISHED if finished else Phase.IN_PROGRESS,
            turn_index=state.turn_index + 1,
            last_move=move.to_dict(),
        )

    def _enforce_timeout(self, state: LinhasState) -> LinhasState:
        """Force the current player's first unresolved coordinate once the turn clock hits zero."""
        if (
            state.phase is not Phase.IN_PROGRESS
            or state.remaining_turn_seconds != 0
            or state.active_cell is not None
        ):
            return state
        pending = state.unresolved_in_hand(state.current_player)
        if not pending:
            return state
        return state.evolve(active_cell=pending[0], timed_out=True)
