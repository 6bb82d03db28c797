import argparse
import sys
import os
import time
import logging

# Ensure project root is in path so we can import 'wilson_maze' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wilson_maze.algo.wilson import MAX_ITERATIONS, WilsonsAlgorithm
from wilson_maze.core.analysis import MazeAnalyzer
from wilson_maze.core.errors import MazeConfigError
from wilson_maze.core.grid import Grid

logger = logging.getLogger("wilson_maze")

def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wilson Maze: perfect maze generator (loop-erased random walks)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new maze")
    gen_parser.add_argument("--width", type=int, default=128, help="Maze Width")
    gen_parser.add_argument("--height", type=int, default=64, help="Maze Height")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    gen_parser.add_argument("--max-iterations", type=int, default=MAX_ITERATIONS,
                            help="Stop after this many walk iterations and keep the partial maze")

    # Benchmark Command
    bench_parser = subparsers.add_parser("benchmark", help="Time generation at a given size")
    bench_parser.add_argument("--size", type=int, default=200, help="Benchmark size")
    bench_parser.add_argument("--seed", type=int, default=123, help="Random Seed")

    return parser

def generate(width: int, height: int, seed=None, max_iterations: int = MAX_ITERATIONS):
    grid = Grid(width, height)
    generator = WilsonsAlgorithm(grid, seed=seed, max_iterations=max_iterations)

    t0 = time.time()
    generator.run_all()
    elapsed = time.time() - t0

    return grid, generator, elapsed

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")

    try:
        if args.command == "generate":
            logger.info(f"Generating {args.width}x{args.height} maze (seed={args.seed})...")
            grid, generator, elapsed = generate(args.width, args.height, args.seed, args.max_iterations)

            if not generator.is_complete:
                logger.warning(f"Maze is incomplete: {generator.remaining_count} cells were never reached")

            stats = MazeAnalyzer.calculate_stats(grid)
            logger.info(f"Generation finished in {elapsed:.4f}s after {generator.step_count} iterations")
            logger.info(f"Stats: {stats}")
            logger.info(f"Perfect maze: {MazeAnalyzer.is_perfect(grid)}")

        elif args.command == "benchmark":
            size = args.size
            logger.info(f"Benchmarking {size}x{size} ({size * size:,} cells)...")
            grid, generator, elapsed = generate(size, size, args.seed)

            print(f"\n{'SIZE':<12} | {'TIME (s)':<10} | {'CELLS/SEC':<12} | {'WALKS':<10} | {'ERASED':<10}")
            print("-" * 66)
            rate = (size * size) / elapsed if elapsed > 0 else float("inf")
            print(f"{f'{size}x{size}':<12} | {elapsed:<10.4f} | {rate:<12,.0f} | "
                  f"{generator.walks_committed:<10} | {generator.cells_erased:<10}")

    except MazeConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    return 0

if __name__ == "__main__":
    sys.exit(main())
