"""Branching-cell selection for the backtracking search."""

from __future__ import annotations
from typing import NamedTuple, Optional, TYPE_CHECKING

from ..core.grid import Grid
from ..core.lines import fill_probabilities

if TYPE_CHECKING:
    from .propagation import LinePropagator


class CellChoice(NamedTuple):
    """A cell to branch on and the evidence behind it."""
    row: int
    col: int
    bias: float   # estimated probability that the cell is FILLED
    score: float  # lower is better


def score_cell(row_count: int, col_count: int, bias: float) -> float:
    """
    Most-constrained-variable score.

    Small possibility sets and a bias far from 0.5 both lower the score.
    """
    return (row_count + col_count) / 2.0 * (1.0 - abs(bias - 0.5))


def select_branch_cell(grid: Grid, propagator: LinePropagator) -> Optional[CellChoice]:
    """
    Pick the UNDETERMINED cell to guess next.

    Every row's and column's possibility set is computed once. For each open
    cell the bias is the smaller of its row and column FILLED fractions. The
    lowest score wins; ties go to the first cell in row-major order.

    Returns:
        The chosen cell, or None if no cell is open or some line has no
        possibility left.
    """
    row_options = [propagator.possibilities(grid.row_clues[r], grid.row(r))
                   for r in range(grid.height)]
    col_options = [propagator.possibilities(grid.col_clues[c], grid.column(c))
                   for c in range(grid.width)]
    if not all(row_options) or not all(col_options):
        return None

    row_probs = [fill_probabilities(opts, grid.width) for opts in row_options]
    col_probs = [fill_probabilities(opts, grid.height) for opts in col_options]

    best = None
    for row, col in grid.undetermined_cells():
        bias = min(row_probs[row][col], col_probs[col][row])
        score = score_cell(len(row_options[row]), len(col_options[col]), bias)
        if best is None or score < best.score:
            best = CellChoice(row, col, bias, score)
    return best
