from collections import deque

import numpy as np

from wilson_maze.core.direction import Position
from wilson_maze.core.grid import Grid


class MazeAnalyzer:
    """Read-only checks and statistics over a finished (or partial) grid."""

    @staticmethod
    def _masks(grid: Grid) -> np.ndarray:
        # Zero-copy view of the cell buffer, shape (height, width)
        return np.frombuffer(grid.cells, dtype=np.uint8).reshape(grid.height, grid.width)

    @staticmethod
    def _degrees(grid: Grid) -> np.ndarray:
        masks = MazeAnalyzer._masks(grid)
        shifts = np.arange(4, dtype=np.uint8)
        return ((masks[..., None] >> shifts) & 1).sum(axis=-1)

    @staticmethod
    def count_passages(grid: Grid) -> int:
        # Every passage is stored on both of its cells
        return int(MazeAnalyzer._degrees(grid).sum()) // 2

    @staticmethod
    def is_symmetric(grid: Grid) -> bool:
        m = MazeAnalyzer._masks(grid)

        def bit(a, b):
            return (a & b) != 0

        # Nothing leads off the edge of the grid
        if bit(m[0, :], Grid.CONNECT_TOP).any() or bit(m[-1, :], Grid.CONNECT_BOTTOM).any():
            return False
        if bit(m[:, 0], Grid.CONNECT_LEFT).any() or bit(m[:, -1], Grid.CONNECT_RIGHT).any():
            return False

        horizontal = np.array_equal(bit(m[:, :-1], Grid.CONNECT_RIGHT), bit(m[:, 1:], Grid.CONNECT_LEFT))
        vertical = np.array_equal(bit(m[:-1, :], Grid.CONNECT_BOTTOM), bit(m[1:, :], Grid.CONNECT_TOP))
        return horizontal and vertical

    @staticmethod
    def reachable_count(grid: Grid, start: Position = Position(0, 0)) -> int:
        seen = bytearray(grid.width * grid.height)
        seen[grid.cell_index(*start)] = 1
        queue = deque([start])
        count = 1

        while queue:
            row, col = queue.popleft()
            for nxt in grid.get_open_neighbors(row, col):
                idx = nxt.row * grid.width + nxt.col
                if not seen[idx]:
                    seen[idx] = 1
                    count += 1
                    queue.append(nxt)
        return count

    @staticmethod
    def is_connected(grid: Grid) -> bool:
        return MazeAnalyzer.reachable_count(grid) == grid.width * grid.height

    @staticmethod
    def is_perfect(grid: Grid) -> bool:
        """Spanning tree: connected with exactly one fewer passage than cells."""
        cells = grid.width * grid.height
        return (
            MazeAnalyzer.count_passages(grid) == cells - 1
            and MazeAnalyzer.is_symmetric(grid)
            and MazeAnalyzer.is_connected(grid)
        )

    @staticmethod
    def calculate_stats(grid: Grid):
        degrees = MazeAnalyzer._degrees(grid)
        total = grid.width * grid.height

        dead_ends = int((degrees == 1).sum())
        corridors = int((degrees == 2).sum())
        junctions = int((degrees >= 3).sum())
        isolated = int((degrees == 0).sum())

        return {
            "passages": int(degrees.sum()) // 2,
            "dead_ends": dead_ends,
            "corridors": corridors,
            "junctions": junctions,
            "isolated": isolated,
            "dead_end_percent": (dead_ends / total) * 100 if total > 0 else 0,
        }
