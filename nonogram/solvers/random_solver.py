"""Randomized sampling strategy."""

from __future__ import annotations
from typing import Optional
import logging
import random

from .base_solver import BaseSolver, FailureReason, StepGenerator
from ..core.cell import CellState
from ..core.grid import Grid
from ..core.lines import generate_line_possibilities

logger = logging.getLogger(__name__)


class RandomSolver(BaseSolver):
    """
    Randomized solver.

    Each attempt draws one filling per row uniformly from that row's
    possibility set (respecting cells already determined on the grid) and
    keeps it if every column matches its clue. Rows are therefore always
    valid; only the columns are left to chance. Mostly useful as a baseline
    on tiny grids. Each step is one attempt.
    """

    name = "Random Sampling"

    def __init__(self, max_attempts: int = 10_000, seed: Optional[int] = None,
                 track_memory: bool = True):
        """
        Initialize the random solver.

        Args:
            max_attempts: Attempts before giving up.
            seed: Random seed for reproducibility.
            track_memory: Record peak memory with tracemalloc during solve().
        """
        super().__init__(track_memory)
        self.max_attempts = max_attempts
        self.seed = seed

    def _steps(self, grid: Grid) -> StepGenerator:
        rng = random.Random(self.seed)
        self.stats.extra["attempts"] = 0

        row_options = [generate_line_possibilities(grid.row_clues[r], grid.width, grid.row(r))
                       for r in range(grid.height)]
        if not all(row_options):
            return FailureReason.CONTRADICTION

        base = grid.snapshot()
        open_cells = grid.undetermined_cells()

        for attempt in range(1, self.max_attempts + 1):
            grid.restore(base)
            picks = [rng.choice(options) for options in row_options]
            for row, col in open_cells:
                grid.assign(row, col, picks[row][col])
            self.stats.extra["attempts"] = attempt
            yield

            if grid.is_solved():
                self.stats.guessed_cells = len(open_cells)
                logger.debug("Random attempt %d matched every column", attempt)
                return None

        grid.restore(base)
        return FailureReason.ATTEMPT_LIMIT_EXCEEDED
