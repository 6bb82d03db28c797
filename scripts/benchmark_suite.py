import sys
import os
import time

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wilson_maze.core.grid import Grid
from wilson_maze.algo.wilson import WilsonsAlgorithm
from wilson_maze.core.analysis import MazeAnalyzer

def benchmark_size(width: int, height: int):
    print(f"\n--- Benchmarking {width}x{height} ({width*height/1e6:.2f}M cells) ---")

    # 1. Memory
    start_time = time.time()
    grid = Grid(width, height)
    mem_mb = (width * height) / (1024 * 1024) # Theoretical
    print(f"Grid Init: {time.time() - start_time:.4f}s")
    print(f"Memory (Grid Data): ~{mem_mb:.2f} MB")

    # 2. Generation
    print("Generating...")
    algo = WilsonsAlgorithm(grid, seed=42)

    gen_start = time.time()
    algo.run_all()
    gen_time = time.time() - gen_start

    print(f"Generation Time: {gen_time:.4f}s")
    print(f"Speed: {(width*height)/gen_time:,.0f} cells/sec")
    print(f"Walks: {algo.walks_committed:,}  Iterations: {algo.step_count:,}  Erased: {algo.cells_erased:,}")

    # 3. Validation
    check_start = time.time()
    perfect = MazeAnalyzer.is_perfect(grid)
    print(f"Perfect: {perfect} (checked in {time.time() - check_start:.4f}s)")

def run_suite():
    # Wilson's early walks are long on big grids, keep sizes modest
    sizes = [
        (50, 50),
        (100, 100),
        (250, 250),
        (500, 500),
    ]

    for w, h in sizes:
        benchmark_size(w, h)

if __name__ == "__main__":
    run_suite()
