from dataclasses import dataclass

from pairs.utils.board_shape import format_board_shape

@dataclass(slots=True)
class Board:
    rows: int
    cols: int

    @property
    def size(self) -> int:
        return self.rows * self.cols

    @property
    def difficulty(self) -> str:
        return format_board_shape(self.rows, self.cols)
