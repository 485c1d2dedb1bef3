"""Core module for nonogram grid representation, line combinatorics and validation."""

from .cell import Axis, CellState
from .clues import clues_from_solution, line_runs, normalize_clue, parse_clue_text
from .errors import CellConflictError, InvalidClueError
from .grid import Grid
from .lines import generate_line_possibilities, grid_has_contradiction, line_has_contradiction
from .validator import count_solutions, has_unique_solution, SolutionCounter

__all__ = [
    "Axis",
    "CellState",
    "CellConflictError",
    "Grid",
    "InvalidClueError",
    "SolutionCounter",
    "clues_from_solution",
    "count_solutions",
    "generate_line_possibilities",
    "grid_has_contradiction",
    "has_unique_solution",
    "line_has_contradiction",
    "line_runs",
    "normalize_clue",
    "parse_clue_text",
]
