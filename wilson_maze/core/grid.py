from array import array
from typing import Iterator

from wilson_maze.core.direction import Direction, Position, OPPOSITE, apply_move
from wilson_maze.core.errors import MazeConfigError, MazeInvariantError

# Largest width/height accepted. Coordinates beyond this would not fit
# the 16-bit fields renderers and tools expect.
MAX_DIMENSION = 0xFFFF


class Grid:
    # Connectivity bits: a set bit means a passage towards that neighbor
    CONNECT_TOP    = 0b0001
    CONNECT_LEFT   = 0b0010
    CONNECT_BOTTOM = 0b0100
    CONNECT_RIGHT  = 0b1000

    ALL_PASSAGES = CONNECT_TOP | CONNECT_LEFT | CONNECT_BOTTOM | CONNECT_RIGHT

    DIRECTION_BIT = {
        Direction.UP: CONNECT_TOP,
        Direction.LEFT: CONNECT_LEFT,
        Direction.DOWN: CONNECT_BOTTOM,
        Direction.RIGHT: CONNECT_RIGHT,
    }

    __slots__ = ('width', 'height', 'cells', '_col_bits')

    def __init__(self, width: int, height: int):
        if not isinstance(width, int) or not isinstance(height, int):
            raise MazeConfigError(f"Dimensions must be integers, got {width!r}x{height!r}")
        if width <= 0 or height <= 0:
            raise MazeConfigError(f"Dimensions must be positive, got {width}x{height}")
        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise MazeConfigError(
                f"Dimensions {width}x{height} exceed the maximum of {MAX_DIMENSION}"
            )

        self.width = width
        self.height = height
        # No passages yet, 1 byte per cell
        self.cells = array('B', [0] * (width * height))
        # Enough bits to hold any column index of this grid
        self._col_bits = max(1, (width - 1).bit_length())

    def is_in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def cell_index(self, row: int, col: int) -> int:
        """Dense storage index into `cells`."""
        if 0 <= row < self.height and 0 <= col < self.width:
            return row * self.width + col
        raise IndexError(f"Coordinate ({row}, {col}) out of bounds")

    def cell_hash(self, row: int, col: int) -> int:
        """
        Lookup key for a coordinate. Unique over this grid's dimensions but
        sparse, so it must never be used to index `cells`.
        """
        return (row << self._col_bits) | col

    def get_cell(self, row: int, col: int) -> int:
        return self.cells[self.cell_index(row, col)]

    def connect(self, pos_a: Position, pos_b: Position, direction: Direction):
        """
        Opens the passage from pos_a towards `direction` and the reciprocal
        passage on pos_b. Setting an already open passage is a no-op.
        """
        if not self.is_in_bounds(pos_a.row, pos_a.col) or not self.is_in_bounds(pos_b.row, pos_b.col):
            raise MazeInvariantError(f"connect() out of bounds: {pos_a} -> {pos_b}")
        if apply_move(pos_a, direction) != pos_b:
            raise MazeInvariantError(f"connect() on non-adjacent cells: {pos_a} -{direction}-> {pos_b}")

        self.cells[pos_a.row * self.width + pos_a.col] |= self.DIRECTION_BIT[direction]
        self.cells[pos_b.row * self.width + pos_b.col] |= self.DIRECTION_BIT[OPPOSITE[direction]]

    def has_passage(self, row: int, col: int, direction: Direction) -> bool:
        return (self.get_cell(row, col) & self.DIRECTION_BIT[direction]) != 0

    def get_open_neighbors(self, row: int, col: int) -> Iterator[Position]:
        """
        Yields neighbors reachable through an open passage.
        """
        val = self.get_cell(row, col)

        if (val & self.CONNECT_TOP) and row > 0:
            yield Position(row - 1, col)
        if (val & self.CONNECT_BOTTOM) and row < self.height - 1:
            yield Position(row + 1, col)
        if (val & self.CONNECT_LEFT) and col > 0:
            yield Position(row, col - 1)
        if (val & self.CONNECT_RIGHT) and col < self.width - 1:
            yield Position(row, col + 1)

    def positions(self) -> Iterator[Position]:
        """Row-major iteration over every cell."""
        for row in range(self.height):
            for col in range(self.width):
                yield Position(row, col)
