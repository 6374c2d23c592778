from dataclasses import dataclass

@dataclass(slots=True)
class Tile:
    """One face-down/face-up game piece.

    ``id`` doubles as the tile's position on the board (row-major) and stays
    stable for the lifetime of the deck. Only TurnSystem flips the flags.
    """
    id: int
    symbol: str
    revealed: bool = False
    matched: bool = False
