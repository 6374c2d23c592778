import random
from collections import Counter

import pytest

from pairs.constants import SYMBOLS
from pairs.errors import ConfigurationError
from pairs.factories.deck import build_deck, shuffle_in_place

EVEN_SHAPES = [(r, c) for r in range(1, 9) for c in range(1, 9) if (r * c) % 2 == 0]


@pytest.mark.parametrize("rows,cols", EVEN_SHAPES)
def test_build_deck_pairs_every_symbol(rows, cols):
    tiles = build_deck(rows, cols, rng=random.Random(rows * 10 + cols))
    total_pairs = rows * cols // 2

    assert len(tiles) == rows * cols
    counts = Counter(tile.symbol for tile in tiles)
    assert len(counts) == total_pairs
    assert set(counts.values()) == {2}
    assert [tile.id for tile in tiles] == list(range(rows * cols))
    assert not any(tile.revealed or tile.matched for tile in tiles)


def test_build_deck_uses_leading_symbols():
    tiles = build_deck(2, 4, rng=random.Random(1))
    assert {tile.symbol for tile in tiles} == set(SYMBOLS[:4])


@pytest.mark.parametrize("rows,cols", [(3, 3), (1, 1), (0, 2), (2, 0), (5, 7)])
def test_build_deck_rejects_odd_or_empty_boards(rows, cols):
    with pytest.raises(ConfigurationError):
        build_deck(rows, cols)


def test_build_deck_rejects_boards_larger_than_alphabet():
    with pytest.raises(ConfigurationError):
        build_deck(2, 4, alphabet=("a", "b", "c"))
    with pytest.raises(ConfigurationError):
        build_deck(6, 11)


def test_shuffle_is_a_permutation():
    items = list("aabbccddeeff")
    shuffled = list(items)
    shuffle_in_place(shuffled, random.Random(3))
    assert sorted(shuffled) == sorted(items)


def test_shuffle_orderings_vary():
    rng = random.Random(11)
    orderings = set()
    for _ in range(20):
        deck = build_deck(4, 4, rng=rng)
        orderings.add(tuple(tile.symbol for tile in deck))
    assert len(orderings) > 15


def test_shuffle_is_roughly_uniform():
    # Each of the 6 permutations of three items should appear about 1/6 of the time.
    rng = random.Random(2024)
    counts = Counter()
    trials = 6000
    for _ in range(trials):
        items = [0, 1, 2]
        shuffle_in_place(items, rng)
        counts[tuple(items)] += 1
    assert len(counts) == 6
    for count in counts.values():
        assert abs(count - trials / 6) < trials * 0.03


def test_shuffle_handles_tiny_sequences():
    empty = []
    single = ["x"]
    shuffle_in_place(empty, random.Random(0))
    shuffle_in_place(single, random.Random(0))
    assert empty == [] and single == ["x"]
