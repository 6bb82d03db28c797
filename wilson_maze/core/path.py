from typing import Dict, Iterator, List, Optional, Tuple

from wilson_maze.core.direction import Direction, Position
from wilson_maze.core.errors import MazeInvariantError
from wilson_maze.core.grid import Grid


class Path:
    """
    The walk in progress: positions visited in order, the direction taken
    between each consecutive pair, and a side table from coordinate hash to
    index so self-intersections are found in O(1).

    directions[i] is the step from positions[i] to positions[i + 1].
    """

    __slots__ = ('grid', 'positions', 'directions', '_index')

    def __init__(self, grid: Grid, start: Position):
        self.grid = grid
        self.positions: List[Position] = []
        self.directions: List[Direction] = []
        self._index: Dict[int, int] = {}
        self.start(start)

    def _hash(self, pos: Position) -> int:
        return self.grid.cell_hash(pos.row, pos.col)

    def start(self, pos: Position):
        self.positions = [pos]
        self.directions = []
        self._index = {self._hash(pos): 0}

    def push(self, pos: Position, direction: Direction):
        key = self._hash(pos)
        if key in self._index:
            raise MazeInvariantError(f"{pos} is already on the path; truncate first")
        self.positions.append(pos)
        self.directions.append(direction)
        self._index[key] = len(self.positions) - 1

    def truncate_to(self, pos: Position) -> List[Position]:
        """
        Drops everything after `pos` so that it becomes the last element.
        Returns the dropped positions in walk order.
        """
        idx = self._index.get(self._hash(pos))
        if idx is None:
            raise MazeInvariantError(f"truncate_to({pos}): position not on the path")

        num_delete = len(self.positions) - idx - 1
        removed = []
        for _ in range(num_delete):
            p = self.positions.pop()
            self.directions.pop()
            del self._index[self._hash(p)]
            removed.append(p)
        removed.reverse()
        return removed

    def index_of(self, pos: Position) -> Optional[int]:
        return self._index.get(self._hash(pos))

    @property
    def last(self) -> Position:
        return self.positions[-1]

    @property
    def last_direction(self) -> Optional[Direction]:
        return self.directions[-1] if self.directions else None

    def steps(self) -> Iterator[Tuple[Position, Position, Direction]]:
        """Yields (from, to, direction) for each step of the path."""
        for i, direction in enumerate(self.directions):
            yield self.positions[i], self.positions[i + 1], direction

    def indexed_hashes(self) -> Dict[int, int]:
        return dict(self._index)

    def describe(self) -> str:
        cells = ", ".join(str(p) for p in self.positions)
        moves = ", ".join(str(d) for d in self.directions)
        return f"[{cells}] via [{moves}]"

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, pos: Position) -> bool:
        return self._hash(pos) in self._index

    def __iter__(self) -> Iterator[Position]:
        return iter(self.positions)
