"""Deck construction: paired symbols, Fisher-Yates shuffled."""
from __future__ import annotations

import random
from typing import List, MutableSequence, Sequence, TypeVar

from esper import World

from pairs.components.tile import Tile
from pairs.constants import SYMBOLS
from pairs.utils.board_shape import validate_board_shape

T = TypeVar("T")


def shuffle_in_place(items: MutableSequence[T], rng: random.Random | None = None) -> None:
    """Uniform Fisher-Yates shuffle: walk from the end, swapping with ``[0, i]``."""
    rng = rng or random.Random()
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def build_deck(
    rows: int,
    cols: int,
    *,
    rng: random.Random | None = None,
    alphabet: Sequence[str] = SYMBOLS,
) -> List[Tile]:
    """Return ``rows * cols`` tiles, each symbol exactly twice, ids ascending in dealt order.

    The first ``rows * cols / 2`` symbols of ``alphabet`` are used, so the
    symbol subset is deterministic and only the placement is random.
    """
    total_pairs = validate_board_shape(rows, cols, alphabet_size=len(alphabet))
    chosen = list(alphabet[:total_pairs])
    symbols = chosen + chosen
    shuffle_in_place(symbols, rng)
    return [Tile(id=index, symbol=symbol) for index, symbol in enumerate(symbols)]


def spawn_deck(world: World, tiles: Sequence[Tile]) -> List[int]:
    """Create one entity per tile; the caller clears any previous deck first."""
    return [world.create_entity(tile) for tile in tiles]
