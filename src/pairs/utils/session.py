"""Lookup helpers for the per-tab session resources stored in the world."""
from __future__ import annotations

from typing import List

from esper import World

from pairs.components.board import Board
from pairs.components.cross_tab_totals import CrossTabTotals
from pairs.components.game_session import GameSession
from pairs.components.tile import Tile


def get_session(world: World) -> GameSession:
    for _, session in world.get_component(GameSession):
        return session
    raise RuntimeError("GameSession not found")


def find_session(world: World) -> GameSession | None:
    for _, session in world.get_component(GameSession):
        return session
    return None


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def get_or_create_totals(world: World) -> CrossTabTotals:
    """Return the shared totals component, creating it if absent."""
    existing = list(world.get_component(CrossTabTotals))
    if existing:
        return existing[0][1]
    totals = CrossTabTotals()
    world.create_entity(totals)
    return totals


def tiles_in_order(world: World) -> List[Tile]:
    return sorted((tile for _, tile in world.get_component(Tile)), key=lambda tile: tile.id)


def tile_by_id(world: World, tile_id: int) -> Tile | None:
    for _, tile in world.get_component(Tile):
        if tile.id == tile_id:
            return tile
    return None


def clear_tiles(world: World) -> None:
    for ent, _ in list(world.get_component(Tile)):
        world.delete_entity(ent, immediate=True)


def check_invariants(world: World) -> List[str]:
    """Return human-readable violations of the session invariants (empty when sound)."""
    problems: List[str] = []
    session = find_session(world)
    if session is None:
        return ["no session"]
    board = get_board(world)
    tiles = tiles_in_order(world)
    if len(tiles) != board.size:
        problems.append(f"{len(tiles)} tiles on a {board.difficulty} board")
    if len(tiles) % 2:
        problems.append("odd tile count")
    if [tile.id for tile in tiles] != list(range(len(tiles))):
        problems.append("tile ids are not 0..N-1")
    matched = sum(1 for tile in tiles if tile.matched)
    if matched != session.matched_pairs * 2:
        problems.append(f"matched_pairs={session.matched_pairs} but {matched} tiles matched")
    if any(tile.matched and not tile.revealed for tile in tiles):
        problems.append("matched tile face-down")
    if len(session.pending_reveals) > 2:
        problems.append("more than two pending reveals")
    if session.complete != (session.matched_pairs == session.total_pairs):
        problems.append("complete flag disagrees with matched pairs")
    if session.move_count < 0 or session.elapsed_seconds < 0:
        problems.append("negative counter")
    return problems
