"""In-memory session for the shared local device: one match at a time."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping
from uuid import uuid4

from engine.errors import InvalidTransitionError
from engine.events import EventType, MatchEvent
from engine.move import Move
from engine.serialize import to_serializable
from linhas.linhas_clocks import Ticker, TickerFactory, VirtualClock
from linhas.linhas_game import LinhasGame
from linhas.linhas_insight import Insight, InsightService, default_insight_service
from linhas.linhas_moves import DismissCell, MarkResult, SelectCell, Tick
from linhas.linhas_scoring import format_elapsed
from linhas.linhas_state import CellResult, ClockName, Coordinate, LinhasState, MatchConfig, Phase
from linhas.linhas_words import WordBank, check_editor_secret

logger = logging.getLogger(__name__)

TIME_RUNNING_OUT_SECONDS = 10
USER_MOVES = (SelectCell, MarkResult, DismissCell)

InsightToken = tuple[int, Coordinate]


def _time_based_seed() -> int:
    """Generate a positive time-derived seed when the caller does not provide one."""
    seed = int(time.time_ns() & 0x7FFFFFFF)
    return seed if seed != 0 else 1


def _move_summary(move: Move, before: LinhasState, after: LinhasState) -> str:
    if isinstance(move, SelectCell):
        concept, context = after.words_for(move.coordinate)
        return f"{before.current_player.name} revealed {move.coordinate} ({concept} + {context})."
    if isinstance(move, MarkResult) and before.active_cell is not None:
        return f"{before.active_cell} marked {move.result.value}."
    if isinstance(move, DismissCell):
        return f"{before.active_cell} closed without a verdict."
    return f"{move.move_type} applied."


class LinhasSession:
    """Owns the live match state, its two clocks and the pending insight.

    Every mutation goes through this object on a single event loop. Moves the
    game rejects are logged and ignored; the methods return False for them.
    """

    def __init__(
        self,
        *,
        word_bank: WordBank,
        insight_service: InsightService,
        ticker_factory: TickerFactory | None = None,
        game: LinhasGame | None = None,
    ):
        self.word_bank = word_bank
        self.insight_service = insight_service
        self.ticker_factory = ticker_factory
        self.game = game or LinhasGame(word_bank=word_bank)
        self.config = MatchConfig()
        self.state: LinhasState | None = None
        self.match_id: str | None = None
        self.events: list[MatchEvent] = []
        self.clocks: dict[ClockName, VirtualClock] = self._fresh_clocks()
        self._tickers: dict[ClockName, Ticker] = {}
        self.insight: Insight | None = None
        self._insight_token: InsightToken | None = None
        self._insight_generation = 0
        self._pending_insight: tuple[InsightToken, asyncio.Future[Insight]] | None = None

    @classmethod
    def from_env(cls, *, ticker_factory: TickerFactory | None = None) -> "LinhasSession":
        return cls(
            word_bank=WordBank.from_env(),
            insight_service=default_insight_service(),
            ticker_factory=ticker_factory,
        )

    @property
    def phase(self) -> Phase:
        if self.state is None:
            return Phase.CONFIGURING
        return self.state.phase

    @property
    def elapsed_clock(self) -> VirtualClock:
        return self.clocks[ClockName.ELAPSED]

    @property
    def turn_clock(self) -> VirtualClock:
        return self.clocks[ClockName.TURN]

    def start_match(self, config: MatchConfig | Mapping[str, Any] | None = None, *, seed: int | None = None) -> bool:
        """Deal a new match; only valid while configuring.

        InsufficientWordBankError and MatchConfigurationError propagate to
        the caller before any session state changes.
        """
        if self.state is not None:
            logger.debug("Ignoring start_match: a match is already %s", self.state.phase.value)
            return False

        match_config = config if isinstance(config, MatchConfig) else MatchConfig.from_dict(config)
        match_seed = seed if seed is not None else _time_based_seed()
        state = self.game.new_game(match_seed, match_config)

        self.config = match_config
        self.state = state
        self.match_id = f"match-{uuid4().hex[:10]}"
        self._reset_insight()
        self.events = [
            MatchEvent.create(
                event_type=EventType.MATCH_START,
                match_id=self.match_id,
                turn=0,
                payload={
                    "seed": match_seed,
                    "config": to_serializable(match_config),
                    "grid_x": list(state.grid_x),
                    "grid_y": list(state.grid_y),
                    "players": [{"id": player.id, "name": player.name} for player in state.players],
                },
            )
        ]
        self.clocks = self._fresh_clocks()
        self._start_clock(ClockName.ELAPSED)
        if match_config.has_turn_clock:
            self._start_clock(ClockName.TURN)
        logger.info(
            "Started %s: grid=%d players=%d turn_time=%s seed=%d",
            self.match_id,
            match_config.grid_size,
            match_config.player_count,
            match_config.turn_time if match_config.has_turn_clock else "inf",
            match_seed,
        )
        return True

    def select_cell(self, coordinate: Coordinate | str) -> bool:
        return self._dispatch(SelectCell(coordinate))

    def mark_result(self, result: CellResult | str) -> bool:
        return self._dispatch(MarkResult(result))

    def dismiss_cell(self) -> bool:
        return self._dispatch(DismissCell())

    def tick(self, clock: ClockName) -> bool:
        """Clock callback: one second passed on `clock`."""
        return self._dispatch(Tick(clock))

    def return_to_config(self) -> bool:
        """Stop the clocks and discard the match (valid while in progress or finished)."""
        if self.state is None:
            logger.debug("Ignoring return_to_config: already configuring")
            return False
        self._stop_clocks()
        logger.info("Returned to configuration from %s (%s)", self.match_id, self.state.phase.value)
        self.state = None
        self.match_id = None
        self.events = []
        self._reset_insight()
        return True

    def shutdown(self) -> None:
        """Stop background tickers; used when the hosting app exits."""
        self._stop_clocks()

    async def request_insight(self) -> Insight | None:
        """Fetch an insight for the selected cell.

        The response is applied only if the same selection is still active
        when it arrives; otherwise it is dropped and None is returned.
        Concurrent calls for one selection share a single request.
        """
        state = self.state
        if state is None or state.active_cell is None:
            return None
        token: InsightToken = (self._insight_generation, state.active_cell)
        if self._insight_token == token and self.insight is not None:
            return self.insight

        pending = self._pending_insight
        if pending is not None and pending[0] == token and not pending[1].cancelled():
            future = pending[1]
        else:
            concept, context = state.words_for(state.active_cell)
            future = asyncio.ensure_future(self.insight_service.request_insight(concept, context))
            self._pending_insight = (token, future)

        # A cancelled caller must not cancel the request the other callers share.
        try:
            insight = await asyncio.shield(future)
        finally:
            if future.done() and self._pending_insight is not None and self._pending_insight[1] is future:
                self._pending_insight = None

        if self._current_insight_token() != token:
            logger.debug("Discarding stale insight for %s", token[1])
            return None

        self.insight = insight
        self._insight_token = token
        self._record(EventType.INSIGHT, {"coordinate": token[1], "insight": insight.to_dict()})
        return insight

    def view(self, player_id: int | None = None) -> dict[str, Any]:
        """Read-only projection of the session for a client to render."""
        payload: dict[str, Any] = {
            "phase": self.phase.value,
            "match_id": self.match_id,
            "config": to_serializable(self.config),
            "word_bank": {"concepts": len(self.word_bank.concepts), "contexts": len(self.word_bank.contexts)},
        }
        state = self.state
        if state is None:
            return payload

        remaining = state.remaining_turn_seconds
        active_words = None
        if state.active_cell is not None:
            concept, context = state.words_for(state.active_cell)
            active_words = {"concept": concept, "context": context}

        payload.update(
            {
                "grid_x": list(state.grid_x),
                "grid_y": list(state.grid_y),
                "results": to_serializable(state.results),
                "active_cell": to_serializable(state.active_cell),
                "active_words": active_words,
                "current_player_id": self.game.current_player(state),
                "players": [
                    {
                        "id": player.id,
                        "name": player.name,
                        "hand": [
                            {"coordinate": coordinate.label, "resolved": state.is_resolved(coordinate)}
                            for coordinate in player.hand
                        ],
                    }
                    for player in state.players
                ],
                "timers": {
                    "elapsed_seconds": state.elapsed_seconds,
                    "elapsed_display": format_elapsed(state.elapsed_seconds),
                    "remaining_turn_seconds": remaining,
                    "time_running_out": remaining is not None and 0 < remaining <= TIME_RUNNING_OUT_SECONDS,
                    "timed_out": state.timed_out,
                },
                "legal_moves": [move.to_dict() for move in self.game.legal_moves(state)],
                "insight": self.insight.to_dict() if self.insight is not None else None,
                "report": self.game.outcome(state).to_dict(),
                "turn_index": state.turn_index,
            }
        )
        if player_id is not None:
            payload["observation"] = self.game.observation(state, player_id).to_dict()
        return payload

    def all_events(self) -> list[dict[str, Any]]:
        return [event.to_dict() for event in self.events]

    def unlock_word_bank(self, secret: str) -> dict[str, str]:
        """Return the editable comma-separated lists once the secret checks out."""
        check_editor_secret(secret)
        return self.word_bank.editor_text()

    def save_word_bank(self, secret: str, concepts: str, contexts: str) -> dict[str, str]:
        """Persist edited lists; a match already dealt keeps its own labels."""
        check_editor_secret(secret)
        self.word_bank.save(concepts, contexts)
        return self.word_bank.editor_text()

    def reset_word_bank(self, secret: str) -> dict[str, str]:
        check_editor_secret(secret)
        self.word_bank.reset()
        return self.word_bank.editor_text()

    def _dispatch(self, move: Move) -> bool:
        before = self.state
        if before is None:
            logger.debug("Ignoring %s: no match in progress", move.move_type)
            return False
        try:
            after = self.game.apply_move(before, move)
        except InvalidTransitionError as exc:
            logger.debug("Ignoring %s", exc)
            return False

        self.state = after
        if isinstance(move, USER_MOVES) or before.active_cell != after.active_cell:
            self._reset_insight()

        if isinstance(move, USER_MOVES):
            event_type = {
                SelectCell: EventType.CELL_SELECTED,
                MarkResult: EventType.RESULT_MARKED,
                DismissCell: EventType.CELL_DISMISSED,
            }[type(move)]
            self._record(
                event_type,
                {
                    "move": move.to_dict(),
                    "summary": _move_summary(move, before, after),
                    "state_digest": after.state_digest(),
                },
            )
        if after.timed_out and (not before.timed_out or isinstance(move, DismissCell)):
            self._record(
                EventType.TURN_TIMEOUT,
                {"player_id": after.current_player.id, "coordinate": after.active_cell},
            )

        if self.game.is_terminal(after) and not self.game.is_terminal(before):
            self._stop_clocks()
            report = self.game.outcome(after)
            self._record(EventType.TERMINAL, {"report": report.to_dict()})
            logger.info(
                "Finished %s: score=%d rank=%s time=%s",
                self.match_id,
                report.score,
                report.rank.title,
                report.elapsed_display,
            )
        return True

    def _record(self, event_type: EventType, payload: dict[str, Any]) -> None:
        if self.match_id is None or self.state is None:
            return
        self.events.append(
            MatchEvent.create(event_type=event_type, match_id=self.match_id, turn=self.state.turn_index, payload=payload)
        )

    def _current_insight_token(self) -> InsightToken | None:
        if self.state is None or self.state.active_cell is None:
            return None
        return self._insight_generation, self.state.active_cell

    def _reset_insight(self) -> None:
        self._insight_generation += 1
        self.insight = None
        self._insight_token = None
        self._pending_insight = None

    def _fresh_clocks(self) -> dict[ClockName, VirtualClock]:
        return {name: VirtualClock(name, self.tick) for name in ClockName}

    def _start_clock(self, name: ClockName) -> None:
        clock = self.clocks[name]
        clock.start()
        if self.ticker_factory is not None:
            ticker = self.ticker_factory(clock)
            ticker.start()
            self._tickers[name] = ticker

    def _stop_clocks(self) -> None:
        for clock in self.clocks.values():
            clock.stop()
        for ticker in self._tickers.values():
            ticker.stop()
        self._tickers.clear()
