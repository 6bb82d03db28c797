import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wilson_maze.core.direction import Direction, Position
from wilson_maze.core.errors import MazeConfigError
from wilson_maze.core.grid import Grid
from wilson_maze.core.analysis import MazeAnalyzer
from wilson_maze.algo.wilson import CellState, RemainingCells, WilsonsAlgorithm, generate_maze

class ScriptedRandom:
    """Returns a fixed sequence from randrange(); fails loudly when exhausted."""
    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randrange(self, n):
        value = self.values.pop(0)
        if not 0 <= value < n:
            raise AssertionError(f"scripted value {value} outside randrange({n})")
        self.calls += 1
        return value

class TestGenerators(unittest.TestCase):
    def test_spanning_tree(self):
        for (w, h), seed in [((20, 20), 42), ((15, 10), 1), ((2, 9), 7), ((7, 7), 1234)]:
            grid = Grid(w, h)
            algo = WilsonsAlgorithm(grid, seed=seed)
            algo.run_all()

            self.assertTrue(algo.is_complete)
            self.assertEqual(algo.remaining_count, 0)
            self.assertEqual(MazeAnalyzer.count_passages(grid), w * h - 1)
            self.assertTrue(MazeAnalyzer.is_symmetric(grid), f"{w}x{h} passages not mirrored")
            self.assertTrue(MazeAnalyzer.is_connected(grid), f"{w}x{h} not connected")

    def test_every_cell_in_tree(self):
        grid = Grid(6, 5)
        algo = WilsonsAlgorithm(grid, seed=3)
        algo.run_all()
        for pos in grid.positions():
            self.assertIs(algo.classify(pos), CellState.IN_TREE)
        # Every walk that started was committed
        self.assertEqual(algo.walk_id, algo.walks_committed)
        self.assertIsNone(algo.path)

    def test_determinism(self):
        w, h = 12, 9
        grid1 = Grid(w, h)
        WilsonsAlgorithm(grid1, seed=12345).run_all()

        grid2 = Grid(w, h)
        gen = WilsonsAlgorithm(grid2, seed=12345)
        for _ in gen.run(): pass

        self.assertEqual(grid1.cells.tobytes(), grid2.cells.tobytes())

    def test_scripted_two_by_two(self):
        # Pool after the origin (0,0) is removed: [(1,1), (0,1), (1,0)]
        rng = ScriptedRandom([
            0,     # walk 1 starts at (1,1)
            0,     # UP to (0,1)
            1,     # LEFT to (0,0), joins the tree
            0,     # walk 2 starts at (1,0)
            2,     # DOWN is off the grid, redraw
            3,     # RIGHT to (1,1), joins the tree
        ])
        grid = Grid(2, 2)
        algo = WilsonsAlgorithm(grid, rng=rng)
        statuses = list(algo.run())

        self.assertEqual(statuses[-1], "Done")
        self.assertEqual(rng.values, [])
        self.assertEqual(algo.step_count, 5)
        self.assertEqual(grid.get_cell(0, 0), Grid.CONNECT_RIGHT)
        self.assertEqual(grid.get_cell(0, 1), Grid.CONNECT_LEFT | Grid.CONNECT_BOTTOM)
        self.assertEqual(grid.get_cell(1, 0), Grid.CONNECT_RIGHT)
        self.assertEqual(grid.get_cell(1, 1), Grid.CONNECT_TOP | Grid.CONNECT_LEFT)
        self.assertEqual(MazeAnalyzer.count_passages(grid), 3)

    def test_single_cell(self):
        rng = ScriptedRandom([])
        grid = Grid(1, 1)
        algo = WilsonsAlgorithm(grid, rng=rng)
        statuses = list(algo.run())

        self.assertEqual(statuses, ["Done"])
        self.assertEqual(rng.calls, 0)
        self.assertEqual(algo.step_count, 0)
        self.assertEqual(grid.get_cell(0, 0), 0)
        self.assertTrue(MazeAnalyzer.is_perfect(grid))

    def test_loop_erasure(self):
        # Pool after the origin is removed starts with (2,2)
        rng = ScriptedRandom([
            0,     # start at (2,2)
            0,     # UP    (1,2)
            1,     # LEFT  (1,1)
            0,     # UP    (0,1)
            3,     # RIGHT (0,2)
            2,     # DOWN  back onto (1,2)
        ])
        grid = Grid(3, 3)
        algo = WilsonsAlgorithm(grid, rng=rng)
        for _ in range(6):
            algo.step()

        self.assertEqual(algo.path.positions, [Position(2, 2), Position(1, 2)])
        self.assertEqual(algo.path.directions, [Direction.UP])
        self.assertEqual(algo.previous_direction, Direction.DOWN)
        self.assertEqual(algo.cells_erased, 3)
        for pos in (Position(1, 1), Position(0, 1), Position(0, 2)):
            self.assertIs(algo.classify(pos), CellState.UNVISITED)
        self.assertIs(algo.classify(Position(1, 2)), CellState.IN_WALK)
        # Nothing carved until the walk reaches the tree
        self.assertEqual(grid.cells.tobytes(), bytes(9))

    def test_dead_end_reversal_on_single_row(self):
        # width 4, height 1; pool after the origin is removed: [(0,3), (0,1), (0,2)]
        rng = ScriptedRandom([
            1,     # start at (0,1)
            3,     # RIGHT (0,2)
            3,     # RIGHT (0,3), dead end
            1,     # LEFT is the only way out: back onto (0,2)
        ])
        grid = Grid(4, 1)
        algo = WilsonsAlgorithm(grid, rng=rng)
        for _ in range(4):
            algo.step()

        self.assertEqual(algo.path.positions, [Position(0, 1), Position(0, 2)])
        self.assertIs(algo.classify(Position(0, 3)), CellState.UNVISITED)

    def test_one_wide_grids_terminate(self):
        for w, h in [(1, 30), (30, 1), (1, 2)]:
            grid = generate_maze(w, h, seed=5)
            self.assertTrue(MazeAnalyzer.is_perfect(grid), f"{w}x{h} not a spanning tree")

    def test_no_immediate_reversal(self):
        grid = Grid(3, 3)
        algo = WilsonsAlgorithm(grid, seed=0)
        algo.previous_direction = Direction.UP
        candidates = algo.candidate_directions(Position(1, 1))
        self.assertNotIn(Direction.DOWN, candidates)
        self.assertEqual(len(candidates), 3)
        # Corner: only in-bounds moves
        algo.previous_direction = None
        self.assertEqual(set(algo.candidate_directions(Position(0, 0))), {Direction.DOWN, Direction.RIGHT})

    def test_iteration_cap(self):
        grid = Grid(20, 20)
        algo = WilsonsAlgorithm(grid, seed=9, max_iterations=10)
        with self.assertLogs("wilson_maze.algo.wilson", level="WARNING"):
            statuses = list(algo.run())

        self.assertEqual(statuses[-1], "Incomplete")
        self.assertEqual(algo.step_count, 10)
        self.assertFalse(algo.is_complete)
        self.assertGreater(algo.remaining_count, 0)
        self.assertFalse(MazeAnalyzer.is_perfect(grid))
        # Partial grid still only holds committed, mirrored passages
        self.assertTrue(MazeAnalyzer.is_symmetric(grid))

    def test_completion_logged(self):
        with self.assertLogs("wilson_maze.algo.wilson", level="INFO") as cm:
            WilsonsAlgorithm(Grid(4, 4), seed=1).run_all()
        self.assertTrue(any("Maze complete" in line for line in cm.output))

    def test_custom_origin(self):
        grid = Grid(5, 4)
        algo = WilsonsAlgorithm(grid, seed=11, origin=Position(3, 2))
        self.assertNotIn(Position(3, 2), algo.remaining)
        self.assertEqual(algo.remaining_count, 19)
        algo.run_all()
        self.assertTrue(MazeAnalyzer.is_perfect(grid))

    def test_invalid_config(self):
        grid = Grid(3, 3)
        with self.assertRaises(MazeConfigError):
            WilsonsAlgorithm(grid, max_iterations=0)
        with self.assertRaises(MazeConfigError):
            WilsonsAlgorithm(grid, origin=Position(3, 0))
        with self.assertRaises(MazeConfigError):
            generate_maze(0, 4)

    def test_generate_maze(self):
        grid = generate_maze(16, 8, seed=2024)
        self.assertEqual((grid.width, grid.height), (16, 8))
        self.assertTrue(MazeAnalyzer.is_perfect(grid))

class TestRemainingCells(unittest.TestCase):
    def test_swap_remove(self):
        pool = RemainingCells([Position(0, i) for i in range(4)])
        pool.remove(Position(0, 0))
        self.assertEqual(len(pool), 3)
        self.assertNotIn(Position(0, 0), pool)

        rng = ScriptedRandom([0, 2])
        self.assertEqual(pool.pick(rng), Position(0, 3))
        self.assertEqual(pool.pick(rng), Position(0, 2))

        for i in (1, 2, 3):
            pool.remove(Position(0, i))
        self.assertEqual(len(pool), 0)

    def test_remove_twice_fails(self):
        pool = RemainingCells([Position(0, 0), Position(0, 1)])
        pool.remove(Position(0, 1))
        with self.assertRaises(AssertionError):
            pool.remove(Position(0, 1))

if __name__ == '__main__':
    unittest.main()
