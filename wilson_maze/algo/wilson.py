import logging
from enum import Enum
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional

from wilson_maze.algo.base import Generator
from wilson_maze.core.direction import (
    DRAW_ORDER, Direction, Position, apply_move, is_reverse, random_direction,
)
from wilson_maze.core.errors import MazeConfigError, MazeInvariantError
from wilson_maze.core.grid import Grid
from wilson_maze.core.path import Path

logger = logging.getLogger(__name__)

# Generation gives up after this many iterations and keeps whatever it built
MAX_ITERATIONS = 50_000_000
STATUS_INTERVAL = 100


class CellState(Enum):
    UNVISITED = 0
    IN_WALK = 1
    IN_TREE = 2


class Membership(NamedTuple):
    state: CellState
    walk_id: int


class RemainingCells:
    """
    Cells not yet in the tree. Uniform random pick and O(1) removal
    (swap with the last element, like Prim's frontier list).
    """

    def __init__(self, positions: Iterable[Position]):
        self._cells: List[Position] = list(positions)
        self._slot: Dict[Position, int] = {p: i for i, p in enumerate(self._cells)}

    def pick(self, rng) -> Position:
        return self._cells[rng.randrange(len(self._cells))]

    def remove(self, pos: Position):
        idx = self._slot.pop(pos, None)
        if idx is None:
            raise MazeInvariantError(f"{pos} is not in the remaining pool")
        last = self._cells.pop()
        if idx < len(self._cells):
            self._cells[idx] = last
            self._slot[last] = idx

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, pos: Position) -> bool:
        return pos in self._slot


class WilsonsAlgorithm(Generator):
    """
    Wilson's algorithm: loop-erased random walks from cells outside the tree,
    each grafted onto the tree once it runs into it.

    One run() iteration either starts a walk or takes one step of the current
    walk. Steps never immediately reverse the previous step unless that is
    the only way out of a dead end (1-wide grids).
    """

    def __init__(self, grid: Grid, seed: int = None, rng=None,
                 max_iterations: int = MAX_ITERATIONS, origin: Position = None):
        super().__init__(grid, seed=seed, rng=rng)

        if not isinstance(max_iterations, int) or max_iterations <= 0:
            raise MazeConfigError(f"max_iterations must be a positive integer, got {max_iterations!r}")
        if origin is None:
            origin = Position(0, 0)
        origin = Position(*origin)
        if not grid.is_in_bounds(origin.row, origin.col):
            raise MazeConfigError(f"Origin {origin} is outside the {grid.width}x{grid.height} grid")

        self.max_iterations = max_iterations
        self.origin = origin

        self.remaining = RemainingCells(grid.positions())
        self.membership: Dict[int, Membership] = {}
        self.walk_id = 0
        self.path: Optional[Path] = None
        # Last step actually taken, which after a loop erasure differs from path.last_direction
        self.previous_direction: Optional[Direction] = None

        self.walks_committed = 0
        self.cells_erased = 0

        # The origin is the initial tree and can never be a walk start
        self._tag(origin, CellState.IN_TREE)
        self.remaining.remove(origin)

    @property
    def remaining_count(self) -> int:
        return len(self.remaining)

    @property
    def is_complete(self) -> bool:
        return len(self.remaining) == 0

    def classify(self, pos: Position) -> CellState:
        entry = self.membership.get(self.grid.cell_hash(pos.row, pos.col))
        if entry is None:
            return CellState.UNVISITED
        return entry.state

    def _tag(self, pos: Position, state: CellState):
        self.membership[self.grid.cell_hash(pos.row, pos.col)] = Membership(state, self.walk_id)

    def _untag(self, pos: Position):
        del self.membership[self.grid.cell_hash(pos.row, pos.col)]

    def run(self) -> Iterator[str]:
        logger.debug(
            "Wilson generation on %dx%d grid (origin %s, cap %d)",
            self.grid.width, self.grid.height, self.origin, self.max_iterations,
        )

        while self.remaining and self.step_count < self.max_iterations:
            self.step()
            self.step_count += 1

            if self.step_count % STATUS_INTERVAL == 0:
                path_len = len(self.path) if self.path else 0
                yield f"Walk {self.walk_id}: path {path_len}, remaining {len(self.remaining)}"

        if self.remaining:
            logger.warning(
                "Iteration cap %d reached with %d cells outside the maze",
                self.max_iterations, len(self.remaining),
            )
            yield "Incomplete"
        else:
            logger.info(
                "Maze complete: %d walks, %d iterations, %d cells erased in loops",
                self.walks_committed, self.step_count, self.cells_erased,
            )
            yield "Done"

    def step(self) -> str:
        if self.path is None:
            if not self.remaining:
                return "Done"
            self._start_walk()
            return "Start"
        return self._extend_walk()

    def _start_walk(self):
        start = self.remaining.pick(self.rng)
        self.walk_id += 1
        self.path = Path(self.grid, start)
        self.previous_direction = None
        self._tag(start, CellState.IN_WALK)
        logger.debug("Walk %d starts at %s", self.walk_id, start)

    def candidate_directions(self, pos: Position) -> List[Direction]:
        """
        Directions a step from `pos` may take: in bounds and not a reversal,
        falling back to the reversal when it is the only in-bounds move.
        """
        in_bounds = [d for d in DRAW_ORDER if self.grid.is_in_bounds(*apply_move(pos, d))]
        if not in_bounds:
            raise MazeInvariantError(f"No neighbors around {pos}")
        if self.previous_direction is None:
            return in_bounds
        forward = [d for d in in_bounds if not is_reverse(self.previous_direction, d)]
        return forward or in_bounds

    def _draw_direction(self, candidates: List[Direction]) -> Direction:
        # candidates is never empty
        while True:
            direction = random_direction(self.rng)
            if direction in candidates:
                return direction

    def _extend_walk(self) -> str:
        path = self.path
        direction = self._draw_direction(self.candidate_directions(path.last))
        self.previous_direction = direction
        nxt = apply_move(path.last, direction)

        state = self.classify(nxt)
        if state is CellState.UNVISITED:
            path.push(nxt, direction)
            self._tag(nxt, CellState.IN_WALK)
            return "Walking"

        if state is CellState.IN_WALK:
            # Loop: erase everything walked since the first visit of nxt
            removed = path.truncate_to(nxt)
            for pos in removed:
                self._untag(pos)
            self.cells_erased += len(removed)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Walk %d erased loop of %d at %s: %s",
                             self.walk_id, len(removed), nxt, path.describe())
            return "Erased"

        path.push(nxt, direction)
        self._commit_walk()
        return "Committed"

    def _commit_walk(self):
        path = self.path
        for src, dst, direction in path.steps():
            self.grid.connect(src, dst, direction)

        # Last cell already belongs to the tree
        for pos in path.positions[:-1]:
            self._tag(pos, CellState.IN_TREE)
            self.remaining.remove(pos)

        self.walks_committed += 1
        logger.debug("Walk %d joined the maze at %s (%d cells, %d remaining)",
                     self.walk_id, path.last, len(path) - 1, len(self.remaining))
        self.path = None
        self.previous_direction = None


def generate_maze(width: int, height: int, seed: int = None, rng=None,
                  max_iterations: int = MAX_ITERATIONS) -> Grid:
    """
    Builds a perfect maze on a width x height grid. If the iteration cap is
    hit the partially carved grid is returned; MazeAnalyzer.is_perfect()
    tells the two apart.
    """
    grid = Grid(width, height)
    WilsonsAlgorithm(grid, seed=seed, rng=rng, max_iterations=max_iterations).run_all()
    return grid
