"""Reveal/match state machine for one game session."""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Callable, List, Sequence, Tuple

from esper import World

from pairs.components.board import Board
from pairs.components.game_session import GameSession
from pairs.components.tile import Tile
from pairs.constants import COMPLETION_NOTICE_DELAY, FLIP_BACK_DELAY, MATCH_CHECK_DELAY
from pairs.errors import ConfigurationError, InvalidMove
from pairs.events.bus import (
    EVENT_COMPLETION_NOTICE,
    EVENT_CONFIGURATION_ERROR,
    EVENT_GAME_COMPLETED,
    EVENT_GAME_READY,
    EVENT_GAME_STARTED,
    EVENT_MOVE_COUNTED,
    EVENT_NEW_GAME_REQUEST,
    EVENT_PAIR_MATCHED,
    EVENT_PAIR_MISMATCHED,
    EVENT_REVEAL_REJECTED,
    EVENT_REVEAL_REQUEST,
    EVENT_STATE_CHANGED,
    EVENT_TILE_REVEALED,
    EVENT_TILES_HIDDEN,
    EventBus,
)
from pairs.factories.deck import build_deck, spawn_deck
from pairs.systems.scheduler_system import ScheduledCall, SchedulerSystem
from pairs.utils.board_shape import parse_board_shape
from pairs.utils.session import clear_tiles, find_session, tile_by_id
from pairs.utils.time_format import format_elapsed

if TYPE_CHECKING:
    from pairs.persistence.codec import DecodedSession

logger = logging.getLogger(__name__)


class TurnSystem:
    """Owns the GameSession and every transition of its tiles.

    Two revealed tiles lock input and schedule a comparison after
    ``match_check_delay``. A match unlocks at once; a mismatch stays locked for
    ``flip_back_delay`` and then hides both tiles. Scheduled work carries the
    session generation it was created for and is discarded once a newer deck
    has been dealt.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        scheduler: SchedulerSystem,
        *,
        rng: random.Random | None = None,
        match_check_delay: float = MATCH_CHECK_DELAY,
        flip_back_delay: float = FLIP_BACK_DELAY,
        completion_notice_delay: float = COMPLETION_NOTICE_DELAY,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.scheduler = scheduler
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self.match_check_delay = match_check_delay
        self.flip_back_delay = flip_back_delay
        self.completion_notice_delay = completion_notice_delay
        self._state_entity: int | None = None
        self._generation = 0
        self._scheduled: List[ScheduledCall] = []
        self.event_bus.subscribe(EVENT_REVEAL_REQUEST, self._on_reveal_request)
        self.event_bus.subscribe(EVENT_NEW_GAME_REQUEST, self._on_new_game_request)

    # Commands -------------------------------------------------------------

    def new_game(self, rows: int, cols: int) -> GameSession:
        """Deal a fresh deck, discarding whatever session was in progress.

        The deck is built before anything is torn down, so a
        ConfigurationError leaves the current session untouched.
        """
        tiles = build_deck(rows, cols, rng=self._rng)
        session = GameSession(total_pairs=len(tiles) // 2)
        board = Board(rows=rows, cols=cols)
        self._install(board, session, tiles)
        logger.info("new %s game dealt (generation %s)", board.difficulty, session.generation)
        self.event_bus.emit(
            EVENT_GAME_READY,
            rows=rows,
            cols=cols,
            difficulty=board.difficulty,
            restored=False,
        )
        self.event_bus.emit(EVENT_STATE_CHANGED, reason="new_game")
        return session

    def restore(self, decoded: "DecodedSession") -> GameSession:
        """Install a previously persisted session verbatim.

        Face-up unmatched tiles become the pending reveals again; when two are
        face-up the comparison is re-scheduled as if they had just been turned.
        """
        tiles = [Tile(id=t.id, symbol=t.symbol, revealed=t.revealed, matched=t.matched) for t in decoded.tiles]
        pending = [tile.id for tile in sorted(tiles, key=lambda t: t.id) if tile.revealed and not tile.matched]
        session = GameSession(
            total_pairs=decoded.total_pairs,
            matched_pairs=decoded.matched_pairs,
            move_count=decoded.move_count,
            elapsed_seconds=decoded.elapsed_seconds,
            started=decoded.started,
            complete=decoded.matched_pairs == decoded.total_pairs,
            pending_reveals=pending,
        )
        board = Board(rows=decoded.rows, cols=decoded.cols)
        self._install(board, session, tiles)
        if len(pending) == 2 and not session.complete:
            session.input_locked = True
            self._schedule(self.match_check_delay, self._resolve, "match_check")
        logger.info(
            "restored %s game: %s/%s pairs, %s moves, %ss",
            board.difficulty,
            session.matched_pairs,
            session.total_pairs,
            session.move_count,
            session.elapsed_seconds,
        )
        self.event_bus.emit(
            EVENT_GAME_READY,
            rows=board.rows,
            cols=board.cols,
            difficulty=board.difficulty,
            restored=True,
        )
        self.event_bus.emit(EVENT_STATE_CHANGED, reason="restored")
        return session

    def reveal(self, tile_id: int) -> bool:
        """Turn a tile face-up. Returns False (and emits a rejection) for invalid moves."""
        try:
            session, tile = self._validate_reveal(tile_id)
        except InvalidMove as exc:
            logger.debug("%s", exc)
            self.event_bus.emit(EVENT_REVEAL_REJECTED, tile_id=tile_id, reason=exc.reason)
            return False

        first_reveal = not session.started
        session.started = True
        tile.revealed = True
        session.pending_reveals.append(tile.id)
        pair_complete = len(session.pending_reveals) == 2
        if pair_complete:
            session.move_count += 1
            session.input_locked = True
            self._schedule(self.match_check_delay, self._resolve, "match_check")

        if first_reveal:
            self.event_bus.emit(EVENT_GAME_STARTED, elapsed_seconds=session.elapsed_seconds)
        if pair_complete:
            self.event_bus.emit(EVENT_MOVE_COUNTED, move_count=session.move_count)
        self.event_bus.emit(
            EVENT_TILE_REVEALED,
            tile_id=tile.id,
            symbol=tile.symbol,
            pending=list(session.pending_reveals),
        )
        self.event_bus.emit(EVENT_STATE_CHANGED, reason="reveal")
        return True

    def _validate_reveal(self, tile_id) -> Tuple[GameSession, Tile]:
        session = find_session(self.world)
        if session is None:
            raise InvalidMove(tile_id, InvalidMove.NO_SESSION)
        if session.complete:
            raise InvalidMove(tile_id, InvalidMove.COMPLETE)
        if session.input_locked:
            raise InvalidMove(tile_id, InvalidMove.LOCKED)
        if isinstance(tile_id, bool) or not isinstance(tile_id, int):
            raise InvalidMove(tile_id, InvalidMove.OUT_OF_RANGE)
        tile = tile_by_id(self.world, tile_id)
        if tile is None:
            raise InvalidMove(tile_id, InvalidMove.OUT_OF_RANGE)
        if tile.matched:
            raise InvalidMove(tile_id, InvalidMove.ALREADY_MATCHED)
        if tile.revealed:
            raise InvalidMove(tile_id, InvalidMove.ALREADY_REVEALED)
        return session, tile

    # Resolution ---------------------------------------------------------

    def _resolve(self) -> None:
        session = find_session(self.world)
        if session is None or len(session.pending_reveals) != 2:
            return
        first = tile_by_id(self.world, session.pending_reveals[0])
        second = tile_by_id(self.world, session.pending_reveals[1])
        if first is None or second is None:
            return
        tile_ids = (first.id, second.id)

        if first.symbol != second.symbol:
            logger.debug("mismatch %s/%s", first.symbol, second.symbol)
            self._schedule(self.flip_back_delay, self._hide_mismatch, "flip_back")
            self.event_bus.emit(EVENT_PAIR_MISMATCHED, tile_ids=tile_ids)
            self.event_bus.emit(EVENT_STATE_CHANGED, reason="mismatch")
            return

        first.matched = second.matched = True
        session.matched_pairs += 1
        session.pending_reveals.clear()
        session.input_locked = False
        if session.matched_pairs == session.total_pairs:
            session.complete = True
        logger.debug("matched %s (%s/%s)", first.symbol, session.matched_pairs, session.total_pairs)

        self.event_bus.emit(
            EVENT_PAIR_MATCHED,
            tile_ids=tile_ids,
            symbol=first.symbol,
            matched_pairs=session.matched_pairs,
        )
        if session.complete:
            self._complete(session)
        self.event_bus.emit(EVENT_STATE_CHANGED, reason="match")

    def _hide_mismatch(self) -> None:
        session = find_session(self.world)
        if session is None:
            return
        tile_ids = tuple(session.pending_reveals)
        for tile_id in tile_ids:
            tile = tile_by_id(self.world, tile_id)
            if tile is not None and not tile.matched:
                tile.revealed = False
        session.pending_reveals.clear()
        session.input_locked = False
        self.event_bus.emit(EVENT_TILES_HIDDEN, tile_ids=tile_ids)
        self.event_bus.emit(EVENT_STATE_CHANGED, reason="hidden")

    def _complete(self, session: GameSession) -> None:
        stats = dict(
            moves=session.move_count,
            seconds=session.elapsed_seconds,
            formatted_time=format_elapsed(session.elapsed_seconds),
        )
        logger.info("game complete in %s moves, %s", stats["moves"], stats["formatted_time"])
        self.event_bus.emit(EVENT_GAME_COMPLETED, **stats)
        self._schedule(
            self.completion_notice_delay,
            lambda: self.event_bus.emit(EVENT_COMPLETION_NOTICE, **stats),
            "completion_notice",
        )

    # Scheduling ---------------------------------------------------------

    def _schedule(self, delay: float, callback: Callable[[], None], label: str) -> None:
        generation = self._generation

        def guarded() -> None:
            session = find_session(self.world)
            if session is None or session.generation != generation:
                logger.debug("dropping stale %s for generation %s", label, generation)
                return
            callback()

        self._scheduled = [call for call in self._scheduled if call.active]
        self._scheduled.append(self.scheduler.call_later(delay, guarded, label=label))

    def _cancel_scheduled(self) -> None:
        for call in self._scheduled:
            call.cancel()
        self._scheduled.clear()

    def _install(self, board: Board, session: GameSession, tiles: Sequence[Tile]) -> None:
        self._cancel_scheduled()
        self._generation += 1
        session.generation = self._generation
        if self._state_entity is not None and self.world.entity_exists(self._state_entity):
            self.world.delete_entity(self._state_entity, immediate=True)
        clear_tiles(self.world)
        self._state_entity = self.world.create_entity(session, board)
        spawn_deck(self.world, tiles)

    # Event handlers -----------------------------------------------------

    def _on_reveal_request(self, sender, **payload) -> None:
        self.reveal(payload.get("tile_id"))

    def _on_new_game_request(self, sender, **payload) -> None:
        try:
            difficulty = payload.get("difficulty")
            if difficulty is not None:
                rows, cols = parse_board_shape(difficulty)
            else:
                rows, cols = payload.get("rows"), payload.get("cols")
            self.new_game(rows, cols)
        except ConfigurationError as exc:
            logger.warning("new game rejected: %s", exc)
            self.event_bus.emit(EVENT_CONFIGURATION_ERROR, message=str(exc))
