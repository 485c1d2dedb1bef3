"""Uniqueness validation for nonogram clue sets."""

from __future__ import annotations
import logging
from typing import List, Sequence, TYPE_CHECKING

import numpy as np

from .cell import CellState
from .clues import Clue, clues_from_solution, line_matches_clue, normalize_clue, to_filled_mask
from .errors import InvalidClueError
from .lines import generate_line_possibilities

if TYPE_CHECKING:
    from .grid import Grid

logger = logging.getLogger(__name__)


class SolutionCounter:
    """
    Row-by-row depth-first enumerator that counts full solutions of a clue set.

    Each row is drawn from its clue's possibility set; after a row is placed
    every column prefix is checked against its clue so that dead branches
    are cut before the next row. Counting stops once ``limit`` solutions
    have been found.
    """

    def __init__(self, row_clues: Sequence[Sequence[int]], col_clues: Sequence[Sequence[int]]):
        self.height = len(row_clues)
        self.width = len(col_clues)
        if self.height == 0 or self.width == 0:
            raise InvalidClueError("A puzzle needs at least one row and one column")
        self.row_clues: List[Clue] = [normalize_clue(c, self.width) for c in row_clues]
        self.col_clues: List[Clue] = [normalize_clue(c, self.height) for c in col_clues]
        self.grid = np.full((self.height, self.width), CellState.EXCLUDED, dtype=np.int8)
        self.solutions = 0
        self.nodes = 0
        self.first_solution = None
        self._limit = 2

    def count(self, limit: int = 2) -> int:
        """
        Count solutions, stopping at ``limit``.

        Returns:
            Number of solutions found (never more than ``limit``).

        Raises:
            ValueError: If ``limit`` is below 1.
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self.solutions = 0
        self.nodes = 0
        self.first_solution = None
        self._limit = limit

        row_options = [generate_line_possibilities(clue, self.width) for clue in self.row_clues]
        self._search(0, row_options)
        logger.debug("Counted %d solution(s) over %d row placements", self.solutions, self.nodes)
        return self.solutions

    def _search(self, row: int, row_options) -> bool:
        """Returns True once the limit is reached."""
        if row == self.height:
            if self._columns_match():
                self.solutions += 1
                if self.first_solution is None:
                    self.first_solution = self.grid.copy()
            return self.solutions >= self._limit

        for line in row_options[row]:
            self.nodes += 1
            self.grid[row, :] = line
            if self._columns_feasible(row):
                if self._search(row + 1, row_options):
                    return True
        return False

    def _columns_match(self) -> bool:
        return all(
            line_matches_clue(self.grid[:, col], self.col_clues[col])
            for col in range(self.width)
        )

    def _columns_feasible(self, up_to_row: int) -> bool:
        for col in range(self.width):
            if not column_prefix_feasible(self.grid[:up_to_row + 1, col], self.col_clues[col], self.height):
                return False
        return True


def column_prefix_feasible(prefix: Sequence[int], clue: Sequence[int], length: int) -> bool:
    """
    Check whether a fully determined line prefix can still grow into ``clue``.

    Closed runs must equal the clue's first blocks exactly. A run still open
    at the end of the prefix needs a block left for it and may not exceed
    that block. The cells after the prefix must be able to hold what is left.

    Args:
        prefix: The first cells of the line, FILLED or EXCLUDED only.
        clue: The line's clue.
        length: Full line length.
    """
    closed = []
    count = 0
    for cell in prefix:
        if cell == CellState.FILLED:
            count += 1
        elif count > 0:
            closed.append(count)
            count = 0

    if len(closed) > len(clue):
        return False
    for i, run in enumerate(closed):
        if run != clue[i]:
            return False

    remaining = length - len(prefix)
    k = len(closed)
    if count > 0:
        if k >= len(clue) or count > clue[k]:
            return False
        rest = clue[k + 1:]
        needed = (clue[k] - count) + sum(rest) + len(rest)
    else:
        rest = clue[k:]
        needed = sum(rest) + len(rest) - 1 if rest else 0
    return needed <= remaining


def count_solutions(row_clues, col_clues, limit: int = 2) -> int:
    """
    Count the solutions of a clue set (up to limit).

    Args:
        row_clues: One clue per row.
        col_clues: One clue per column.
        limit: Maximum solutions to count before stopping.

    Returns:
        Number of solutions found (up to limit).
    """
    return SolutionCounter(row_clues, col_clues).count(limit)


def has_unique_solution(row_clues, col_clues, width: int = None, height: int = None) -> bool:
    """
    Check if a clue set admits exactly one grid.

    ``width`` and ``height`` are optional; when given they must agree with
    the clue counts. "No solution" and "several solutions" both give False,
    and so do malformed clues; use :func:`count_solutions` to tell them
    apart.
    """
    if width is not None and width != len(col_clues):
        logger.warning("Expected %d column clues, got %d", width, len(col_clues))
        return False
    if height is not None and height != len(row_clues):
        logger.warning("Expected %d row clues, got %d", height, len(row_clues))
        return False
    try:
        counter = SolutionCounter(row_clues, col_clues)
    except InvalidClueError as e:
        logger.warning("Rejecting clue set: %s", e)
        return False
    return counter.count(limit=2) == 1


def has_unique_solution_for(grid: Grid) -> bool:
    """Uniqueness check for the clues of an existing grid (cells are ignored)."""
    return count_solutions(grid.row_clues, grid.col_clues, limit=2) == 1


def validate_solution(grid: Grid, picture) -> bool:
    """
    Check that a picture satisfies every clue of a grid.

    Args:
        grid: Grid supplying the clues.
        picture: 2D array-like (0/1, bool or CellState values).
    """
    mask = to_filled_mask(picture)
    if mask.shape != (grid.height, grid.width):
        return False
    row_clues, col_clues = clues_from_solution(mask)
    return row_clues == grid.row_clues and col_clues == grid.col_clues
