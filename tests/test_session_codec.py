import json

import pytest

from pairs.errors import PersistenceMiss
from pairs.persistence.codec import decode_session, dumps_session, encode_session
from tests.helpers import advance, find_pair, make_engine


def _payload(**overrides):
    payload = {
        "tiles": [
            {"id": 0, "symbol": "A", "isFlipped": True, "isMatched": True},
            {"id": 1, "symbol": "B", "isFlipped": True, "isMatched": False},
            {"id": 2, "symbol": "A", "isFlipped": True, "isMatched": True},
            {"id": 3, "symbol": "B", "isFlipped": False, "isMatched": False},
        ],
        "matchedPairs": 1,
        "totalPairs": 2,
        "moves": 3,
        "gameStarted": True,
        "seconds": 12,
        "difficulty": "2x2",
    }
    payload.update(overrides)
    return payload


def test_encode_uses_persisted_field_names():
    engine = make_engine(2, 2)
    first, second = find_pair(engine.world)
    engine.turns.reveal(first)
    engine.turns.reveal(second)
    advance(engine.bus, 1.0)

    payload = encode_session(engine.world)

    assert set(payload) == {"tiles", "matchedPairs", "totalPairs", "moves", "gameStarted", "seconds", "difficulty"}
    assert payload["difficulty"] == "2x2"
    assert payload["matchedPairs"] == 1
    assert payload["moves"] == 1
    assert payload["gameStarted"] is True
    assert payload["seconds"] == 1
    assert [tile["id"] for tile in payload["tiles"]] == [0, 1, 2, 3]
    assert set(payload["tiles"][0]) == {"id", "symbol", "isFlipped", "isMatched"}


def test_dumps_then_decode_round_trips():
    engine = make_engine(4, 4)
    engine.turns.reveal(5)
    text = dumps_session(engine.world)

    decoded = decode_session(text)

    assert (decoded.rows, decoded.cols) == (4, 4)
    assert decoded.started is True
    assert [tile.symbol for tile in decoded.tiles] == [tile["symbol"] for tile in json.loads(text)["tiles"]]
    assert [tile.id for tile in decoded.tiles if tile.revealed] == [5]


def test_decode_accepts_valid_mapping():
    decoded = decode_session(_payload())
    assert (decoded.rows, decoded.cols) == (2, 2)
    assert decoded.matched_pairs == 1
    assert decoded.move_count == 3
    assert decoded.elapsed_seconds == 12


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "not json",
        "[]",
        _payload(difficulty="3x3"),
        _payload(difficulty=None),
        _payload(moves=-1),
        _payload(seconds="12"),
        _payload(gameStarted="yes"),
        _payload(totalPairs=3),
        _payload(matchedPairs=2),
        _payload(moves=0),
        _payload(tiles="nope"),
        _payload(tiles=_payload()["tiles"][:3]),
        _payload(gameStarted=False),
    ],
)
def test_decode_rejects_invalid_snapshots(payload):
    with pytest.raises(PersistenceMiss):
        decode_session(payload)


@pytest.mark.parametrize(
    "tile_patch",
    [
        {"id": 7},
        {"id": True},
        {"symbol": ""},
        {"symbol": "C"},
        {"isFlipped": "true"},
        {"isFlipped": False, "isMatched": False},
    ],
)
def test_decode_rejects_bad_tiles(tile_patch):
    payload = _payload()
    payload["tiles"][0] = {**payload["tiles"][0], **tile_patch}
    with pytest.raises(PersistenceMiss):
        decode_session(payload)


def test_decode_rejects_matched_tile_face_down():
    payload = _payload()
    payload["tiles"][0]["isFlipped"] = False
    with pytest.raises(PersistenceMiss):
        decode_session(payload)


def test_decode_rejects_three_face_up_tiles():
    payload = {
        "tiles": [
            {"id": 0, "symbol": "A", "isFlipped": True, "isMatched": False},
            {"id": 1, "symbol": "B", "isFlipped": True, "isMatched": False},
            {"id": 2, "symbol": "A", "isFlipped": True, "isMatched": False},
            {"id": 3, "symbol": "B", "isFlipped": False, "isMatched": False},
        ],
        "matchedPairs": 0,
        "totalPairs": 2,
        "moves": 1,
        "gameStarted": True,
        "seconds": 1,
        "difficulty": "2x2",
    }
    with pytest.raises(PersistenceMiss):
        decode_session(payload)


def test_decode_rejects_face_up_pair_without_a_counted_move():
    payload = _payload(matchedPairs=0, moves=0, seconds=1)
    payload["tiles"] = [
        {"id": 0, "symbol": "A", "isFlipped": True, "isMatched": False},
        {"id": 1, "symbol": "B", "isFlipped": False, "isMatched": False},
        {"id": 2, "symbol": "A", "isFlipped": True, "isMatched": False},
        {"id": 3, "symbol": "B", "isFlipped": False, "isMatched": False},
    ]
    with pytest.raises(PersistenceMiss):
        decode_session(payload)

    payload["moves"] = 1
    assert decode_session(payload).move_count == 1
