"""Read-only views of a session for renderers and tests."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from esper import World

from pairs.components.cross_tab_totals import CrossTabTotals
from pairs.components.game_session import TurnPhase
from pairs.utils.board_shape import format_board_shape
from pairs.utils.session import find_session, get_board, tiles_in_order
from pairs.utils.time_format import format_elapsed


@dataclass(frozen=True, slots=True)
class TileView:
    id: int
    symbol: str
    revealed: bool
    matched: bool


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    tiles: Tuple[TileView, ...]
    rows: int
    cols: int
    total_pairs: int
    matched_pairs: int
    move_count: int
    elapsed_seconds: int
    started: bool
    complete: bool
    input_locked: bool
    pending_reveals: Tuple[int, ...]
    phase: TurnPhase
    total_moves_across_tabs: int = 0

    @property
    def difficulty(self) -> str:
        return format_board_shape(self.rows, self.cols)

    @property
    def formatted_time(self) -> str:
        return format_elapsed(self.elapsed_seconds)


def take_snapshot(world: World) -> SessionSnapshot | None:
    session = find_session(world)
    if session is None:
        return None
    board = get_board(world)
    totals = [comp.total_moves for _, comp in world.get_component(CrossTabTotals)]
    return SessionSnapshot(
        tiles=tuple(
            TileView(id=tile.id, symbol=tile.symbol, revealed=tile.revealed, matched=tile.matched)
            for tile in tiles_in_order(world)
        ),
        rows=board.rows,
        cols=board.cols,
        total_pairs=session.total_pairs,
        matched_pairs=session.matched_pairs,
        move_count=session.move_count,
        elapsed_seconds=session.elapsed_seconds,
        started=session.started,
        complete=session.complete,
        input_locked=session.input_locked,
        pending_reveals=tuple(session.pending_reveals),
        phase=session.phase,
        total_moves_across_tabs=totals[0] if totals else 0,
    )
