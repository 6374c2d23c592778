import pytest

from pairs.errors import ConfigurationError
from pairs.utils.board_shape import format_board_shape, parse_board_shape, validate_board_shape
from pairs.utils.time_format import format_elapsed


@pytest.mark.parametrize("text,expected", [("4x4", (4, 4)), ("2X3", (2, 3)), (" 8x8 ", (8, 8)), ("1x2", (1, 2))])
def test_parse_board_shape_accepts_even_shapes(text, expected):
    assert parse_board_shape(text) == expected


@pytest.mark.parametrize("text", ["3x3", "0x4", "4", "axb", "4x4x4", "-2x2", "10x10", ""])
def test_parse_board_shape_rejects_unplayable_shapes(text):
    with pytest.raises(ConfigurationError):
        parse_board_shape(text)


def test_parse_board_shape_rejects_non_strings():
    with pytest.raises(ConfigurationError):
        parse_board_shape(None)


def test_validate_board_shape_respects_alphabet_size():
    assert validate_board_shape(8, 8) == 32
    assert validate_board_shape(2, 2, alphabet_size=2) == 2
    with pytest.raises(ConfigurationError):
        validate_board_shape(2, 4, alphabet_size=3)


def test_format_board_shape():
    assert format_board_shape(4, 5) == "4x5"


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "00:00"), (7, "00:07"), (60, "01:00"), (754, "12:34"), (3600, "60:00"), (6001, "100:01")],
)
def test_format_elapsed_has_no_hour_rollover(seconds, expected):
    assert format_elapsed(seconds) == expected
