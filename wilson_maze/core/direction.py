from enum import Enum
from typing import NamedTuple


class Position(NamedTuple):
    row: int
    col: int

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    def __str__(self) -> str:
        return self.value


OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# (d_row, d_col)
DELTA = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}

# Order used to map a draw of randrange(4) to a direction
DRAW_ORDER = (Direction.UP, Direction.LEFT, Direction.DOWN, Direction.RIGHT)


def is_reverse(prev: Direction, curr: Direction) -> bool:
    return OPPOSITE[prev] is curr


def random_direction(rng) -> Direction:
    """Uniform draw of one of the four directions from an injected rng."""
    return DRAW_ORDER[rng.randrange(4)]


def apply_move(pos: Position, direction: Direction) -> Position:
    dr, dc = DELTA[direction]
    return Position(pos.row + dr, pos.col + dc)
