"""Parsing and validation of ``"RxC"`` board shapes."""
from __future__ import annotations

from typing import Tuple

from pairs.constants import SYMBOLS
from pairs.errors import ConfigurationError


def parse_board_shape(text: str) -> Tuple[int, int]:
    """Parse ``"4x4"`` style text into ``(rows, cols)`` and validate it."""
    if not isinstance(text, str):
        raise ConfigurationError(f"board shape must be a string like '4x4', got {text!r}")
    parts = text.strip().lower().split('x')
    if len(parts) != 2:
        raise ConfigurationError(f"board shape must look like 'RxC', got {text!r}")
    try:
        rows, cols = int(parts[0]), int(parts[1])
    except ValueError:
        raise ConfigurationError(f"board shape must look like 'RxC', got {text!r}") from None
    validate_board_shape(rows, cols)
    return rows, cols


def format_board_shape(rows: int, cols: int) -> str:
    return f"{rows}x{cols}"


def validate_board_shape(rows: int, cols: int, alphabet_size: int = len(SYMBOLS)) -> int:
    """Return the pair count for a playable shape or raise ConfigurationError."""
    if isinstance(rows, bool) or isinstance(cols, bool) or not isinstance(rows, int) or not isinstance(cols, int):
        raise ConfigurationError(f"board dimensions must be integers, got {rows!r}x{cols!r}")
    if rows < 1 or cols < 1:
        raise ConfigurationError(f"board dimensions must be positive, got {rows}x{cols}")
    tiles = rows * cols
    if tiles % 2:
        raise ConfigurationError(f"board {rows}x{cols} has an odd number of tiles ({tiles})")
    pairs = tiles // 2
    if pairs > alphabet_size:
        raise ConfigurationError(
            f"board {rows}x{cols} needs {pairs} symbols but only {alphabet_size} are available"
        )
    return pairs
