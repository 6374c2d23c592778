"""Persisted snapshot format.

Layout of one saved session::

    {"tiles": [{"id": 0, "symbol": "⚽", "isFlipped": false, "isMatched": false}, ...],
     "matchedPairs": 0, "totalPairs": 8, "moves": 0, "gameStarted": false,
     "seconds": 0, "difficulty": "4x4"}

Decoding is strict: anything that could not have been produced by a real
session raises PersistenceMiss, and the caller falls back to a new game.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from esper import World

from pairs.errors import ConfigurationError, PersistenceMiss
from pairs.snapshot import TileView
from pairs.utils.board_shape import parse_board_shape
from pairs.utils.session import get_board, get_session, tiles_in_order


@dataclass(frozen=True, slots=True)
class DecodedSession:
    rows: int
    cols: int
    tiles: Tuple[TileView, ...]
    total_pairs: int
    matched_pairs: int
    move_count: int
    elapsed_seconds: int
    started: bool


def encode_session(world: World) -> dict:
    session = get_session(world)
    board = get_board(world)
    return {
        "tiles": [
            {"id": tile.id, "symbol": tile.symbol, "isFlipped": tile.revealed, "isMatched": tile.matched}
            for tile in tiles_in_order(world)
        ],
        "matchedPairs": session.matched_pairs,
        "totalPairs": session.total_pairs,
        "moves": session.move_count,
        "gameStarted": session.started,
        "seconds": session.elapsed_seconds,
        "difficulty": board.difficulty,
    }


def dumps_session(world: World) -> str:
    return json.dumps(encode_session(world), ensure_ascii=False)


def decode_session(payload: str | Mapping[str, Any] | None) -> DecodedSession:
    if payload is None:
        raise PersistenceMiss("no snapshot stored")
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise PersistenceMiss(f"snapshot is not valid JSON: {exc}") from None
    if not isinstance(payload, Mapping):
        raise PersistenceMiss("snapshot is not a JSON object")

    try:
        rows, cols = parse_board_shape(payload.get("difficulty"))
    except ConfigurationError as exc:
        raise PersistenceMiss(f"bad difficulty: {exc}") from None

    total_pairs = _int_field(payload, "totalPairs")
    matched_pairs = _int_field(payload, "matchedPairs")
    moves = _int_field(payload, "moves")
    seconds = _int_field(payload, "seconds")
    started = payload.get("gameStarted")
    if not isinstance(started, bool):
        raise PersistenceMiss("gameStarted must be a boolean")

    raw_tiles = payload.get("tiles")
    if not isinstance(raw_tiles, list):
        raise PersistenceMiss("tiles must be a list")
    tiles = tuple(sorted((_decode_tile(raw) for raw in raw_tiles), key=lambda tile: tile.id))

    size = rows * cols
    if len(tiles) != size:
        raise PersistenceMiss(f"{len(tiles)} tiles stored for a {rows}x{cols} board")
    if [tile.id for tile in tiles] != list(range(size)):
        raise PersistenceMiss("tile ids must be exactly 0..N-1")
    if total_pairs != size // 2:
        raise PersistenceMiss(f"totalPairs={total_pairs} does not fit a {rows}x{cols} board")

    by_symbol: dict[str, list[TileView]] = {}
    for tile in tiles:
        by_symbol.setdefault(tile.symbol, []).append(tile)
    if any(len(group) != 2 for group in by_symbol.values()):
        raise PersistenceMiss("every symbol must appear exactly twice")
    for group in by_symbol.values():
        if group[0].matched != group[1].matched:
            raise PersistenceMiss("matched flags split across a pair")

    if any(tile.matched and not tile.revealed for tile in tiles):
        raise PersistenceMiss("matched tile stored face-down")
    matched_tiles = sum(1 for tile in tiles if tile.matched)
    if not 0 <= matched_pairs <= total_pairs or matched_tiles != matched_pairs * 2:
        raise PersistenceMiss(f"matchedPairs={matched_pairs} disagrees with {matched_tiles} matched tiles")
    face_up = sum(1 for tile in tiles if tile.revealed and not tile.matched)
    if face_up > 2:
        raise PersistenceMiss(f"{face_up} unmatched tiles face-up")
    # A face-up pair has already been counted as a move.
    if moves < matched_pairs + (1 if face_up == 2 else 0):
        raise PersistenceMiss(f"moves={moves} is too few for the recorded progress")
    if not started and (moves or seconds or face_up or matched_tiles):
        raise PersistenceMiss("progress recorded for a game that never started")

    return DecodedSession(
        rows=rows,
        cols=cols,
        tiles=tiles,
        total_pairs=total_pairs,
        matched_pairs=matched_pairs,
        move_count=moves,
        elapsed_seconds=seconds,
        started=started,
    )


def _int_field(payload: Mapping[str, Any], name: str) -> int:
    value = payload.get(name)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PersistenceMiss(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _decode_tile(raw: Any) -> TileView:
    if not isinstance(raw, Mapping):
        raise PersistenceMiss("tile entries must be objects")
    tile_id = raw.get("id")
    symbol = raw.get("symbol")
    flipped = raw.get("isFlipped")
    matched = raw.get("isMatched")
    if isinstance(tile_id, bool) or not isinstance(tile_id, int):
        raise PersistenceMiss(f"tile id must be an integer, got {tile_id!r}")
    if not isinstance(symbol, str) or not symbol:
        raise PersistenceMiss(f"tile {tile_id} has no symbol")
    if not isinstance(flipped, bool) or not isinstance(matched, bool):
        raise PersistenceMiss(f"tile {tile_id} flags must be booleans")
    return TileView(id=tile_id, symbol=symbol, revealed=flipped, matched=matched)
