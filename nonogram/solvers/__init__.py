"""Solvers module for nonogram puzzles."""

from .base_solver import BaseSolver, FailureReason, SearchLimits, SolverStats
from .propagation import LineDeduction, LinePropagator, PropagationResult
from .heuristics import CellChoice, select_branch_cell
from .line_solver import LineSolver
from .backtracking_solver import BacktrackingSolver
from .random_solver import RandomSolver

__all__ = [
    "BaseSolver",
    "SolverStats",
    "FailureReason",
    "SearchLimits",
    "LineDeduction",
    "LinePropagator",
    "PropagationResult",
    "CellChoice",
    "select_branch_cell",
    "LineSolver",
    "BacktrackingSolver",
    "RandomSolver"
]
