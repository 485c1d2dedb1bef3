"""Nonogram (Picross) solving engine and clue-set uniqueness validator."""

from .core import (
    CellState,
    Grid,
    InvalidClueError,
    count_solutions,
    has_unique_solution,
)
from .solvers import (
    BacktrackingSolver,
    BaseSolver,
    FailureReason,
    LineSolver,
    RandomSolver,
    SearchLimits,
    SolverStats,
)

__version__ = "1.0.0"

__all__ = [
    "BacktrackingSolver",
    "BaseSolver",
    "CellState",
    "FailureReason",
    "Grid",
    "InvalidClueError",
    "LineSolver",
    "RandomSolver",
    "SearchLimits",
    "SolverStats",
    "count_solutions",
    "has_unique_solution",
]
