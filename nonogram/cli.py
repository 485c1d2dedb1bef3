"""Command-line interface for the nonogram solver."""

import argparse
import json
import logging
import sys
from typing import Dict, List

from tqdm import tqdm

from .core.clues import format_clue, parse_clue_text
from .core.grid import Grid
from .core.validator import SolutionCounter
from .puzzles import get_puzzle, list_puzzles
from .solvers import BacktrackingSolver, BaseSolver, LineSolver, RandomSolver, SearchLimits

logger = logging.getLogger(__name__)

ALGORITHMS = ["line", "backtracking", "random"]


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Nonogram solver and uniqueness checker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve a catalogue puzzle
  nonogram solve --puzzle diamond

  # Solve clues given on the command line
  nonogram solve --rows "1, 3, 5, 3, 1" --cols "1, 3, 5, 3, 1" -a all

  # Check that a clue set has exactly one solution
  nonogram check --rows "1, 1, 1" --cols "1, 1, 1"

  # Solve every puzzle in a JSON file
  nonogram batch puzzles.json --algorithm backtracking
        """
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a nonogram")
    _add_clue_arguments(solve_parser)
    solve_parser.add_argument(
        "--algorithm", "-a",
        choices=ALGORITHMS + ["all"],
        default="backtracking",
        help="Solving algorithm to use (default: backtracking)"
    )
    _add_limit_arguments(solve_parser)
    solve_parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show detailed solving statistics"
    )

    # Check command
    check_parser = subparsers.add_parser("check", help="Check that clues have a unique solution")
    _add_clue_arguments(check_parser)

    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Solve puzzles from a JSON file")
    batch_parser.add_argument(
        "file", type=str,
        help='JSON list of {"name": ..., "rows": [[...]], "cols": [[...]]} objects'
    )
    batch_parser.add_argument(
        "--algorithm", "-a", choices=ALGORITHMS, default="backtracking",
        help="Solving algorithm to use (default: backtracking)"
    )
    _add_limit_arguments(batch_parser)
    batch_parser.add_argument(
        "--output", "-o", type=str, default=None,
        help="Write per-puzzle statistics to this JSON file"
    )

    # List command
    subparsers.add_parser("list", help="List catalogue puzzles")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "solve":
        return cmd_solve(args)
    elif args.command == "check":
        return cmd_check(args)
    elif args.command == "batch":
        return cmd_batch(args)
    elif args.command == "list":
        return cmd_list(args)


def _add_clue_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--puzzle", "-p", type=str, default=None,
        help="Name of a catalogue puzzle (see 'list')"
    )
    parser.add_argument(
        "--rows", "-r", type=str, default=None,
        help='Row clues, lines separated by commas: "1 1, 3, 0"'
    )
    parser.add_argument(
        "--cols", "-c", type=str, default=None,
        help="Column clues, same format as --rows"
    )


def _add_limit_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-backtracks", type=int, default=SearchLimits.max_backtracks,
        help=f"Backtrack budget (default: {SearchLimits.max_backtracks})"
    )
    parser.add_argument(
        "--time-limit", type=float, default=SearchLimits.time_limit_seconds,
        help=f"Wall-clock budget in seconds (default: {SearchLimits.time_limit_seconds})"
    )


def _grid_from_args(args) -> Grid:
    """Build a grid from --puzzle or --rows/--cols; exits on bad input."""
    try:
        if args.puzzle:
            return get_puzzle(args.puzzle).to_grid()
        if not args.rows or not args.cols:
            raise ValueError("Give either --puzzle or both --rows and --cols")
        return Grid.from_clues(parse_clue_text(args.rows), parse_clue_text(args.cols))
    except (KeyError, ValueError) as e:
        print(f"Error parsing puzzle: {e}")
        sys.exit(1)


def _make_solver(name: str, args) -> BaseSolver:
    if name == "line":
        return LineSolver()
    if name == "random":
        return RandomSolver()
    limits = SearchLimits(
        max_backtracks=args.max_backtracks,
        time_limit_seconds=args.time_limit,
    )
    return BacktrackingSolver(limits=limits)


def cmd_solve(args):
    """Handle the solve command."""
    grid = _grid_from_args(args)

    print(f"Input puzzle ({grid.width}x{grid.height}):")
    print("  rows:", ", ".join(format_clue(c) for c in grid.row_clues))
    print("  cols:", ", ".join(format_clue(c) for c in grid.col_clues))
    print()

    names = ALGORITHMS if args.algorithm == "all" else [args.algorithm]
    all_solved = True

    for name in names:
        solver = _make_solver(name, args)
        work = grid.copy()
        print(f"Solving with {solver.name}...")
        stats = solver.solve(work)

        if stats.solved:
            print(f"✓ Solved in {stats.time_seconds:.4f}s")
        else:
            all_solved = False
            print(f"✗ Failed to solve ({stats.failure_reason.value})")
        if args.verbose:
            print(f"  Steps: {stats.steps:,}")
            print(f"  Backtracks: {stats.backtracks:,}")
            print(f"  Deduced cells: {stats.deduced_cells}")
            print(f"  Guessed cells: {stats.guessed_cells}")
            print(f"  Completion: {stats.completion_pct:.1f}%")
            print(f"  Memory: {stats.memory_bytes / 1024:.2f} KB")
        print(work)
        print()

    return 0 if all_solved else 2


def cmd_check(args):
    """Handle the check command."""
    grid = _grid_from_args(args)
    counter = SolutionCounter(grid.row_clues, grid.col_clues)
    found = counter.count(limit=2)

    if found == 1:
        print("Unique solution")
    elif found == 0:
        print("No solution")
    else:
        print("Multiple solutions (stopped counting at 2)")
    print(f"  Row placements explored: {counter.nodes:,}")
    return 0 if found == 1 else 2


def _load_batch(path: str) -> List[Dict]:
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Batch file must contain a JSON list")
    return data


def cmd_batch(args):
    """Handle the batch command."""
    try:
        entries = _load_batch(args.file)
    except (OSError, ValueError) as e:
        print(f"Error reading {args.file}: {e}")
        sys.exit(1)

    results = []
    for i, entry in enumerate(tqdm(entries, desc="Solving", unit="puzzle")):
        if not isinstance(entry, dict):
            name = f"puzzle_{i + 1}"
            error = f"expected an object, got {type(entry).__name__}"
            logger.warning("Skipping %s: %s", name, error)
            results.append({"name": name, "error": error})
            continue

        name = str(entry.get("name", f"puzzle_{i + 1}"))
        try:
            grid = Grid.from_clues(entry["rows"], entry["cols"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping %s: %s", name, e)
            results.append({"name": name, "error": str(e)})
            continue

        stats = _make_solver(args.algorithm, args).solve(grid)
        results.append({"name": name, "grid": grid.to_string(), **stats.to_dict()})

    solved = sum(1 for r in results if r.get("solved"))
    print("\n" + "=" * 60)
    print(f"{'Puzzle':<20} {'Solved':<8} {'Time (s)':>10} {'Backtracks':>12}")
    print("-" * 60)
    for r in results:
        if "error" in r:
            print(f"{r['name']:<20} {'error':<8}")
            continue
        mark = "yes" if r["solved"] else "no"
        print(f"{r['name']:<20} {mark:<8} {r['time_seconds']:>10.4f} {r['backtracks']:>12,}")
    print("=" * 60)
    print(f"Solved {solved}/{len(results)}")

    if args.output:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"Results saved to {args.output}")

    return 0 if solved == len(results) else 2


def cmd_list(args):
    """Handle the list command."""
    for puzzle in list_puzzles():
        print(f"{puzzle.name:<12} {puzzle.width}x{puzzle.height}  {puzzle.description}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
