"""Pure line-propagation strategy: deduction only, never guesses."""

from __future__ import annotations
import logging

from .base_solver import BaseSolver, FailureReason, StepGenerator
from .propagation import LinePropagator
from ..core.grid import Grid

logger = logging.getLogger(__name__)


class LineSolver(BaseSolver):
    """
    Solver that only applies line propagation to a fixed point.

    Sound but incomplete: puzzles that need case splits end STALLED with
    the forced cells filled in. Each step solves one row or column.
    """

    name = "Line Propagation"

    def __init__(self, track_memory: bool = True):
        super().__init__(track_memory)
        self.propagator = LinePropagator()

    def reset_stats(self) -> None:
        super().reset_stats()
        self.propagator.clear_cache()

    def _steps(self, grid: Grid) -> StepGenerator:
        result = yield from self.propagator.iter_propagate(grid)
        self.stats.extra["sweeps"] = result.sweeps

        if result.contradiction:
            return FailureReason.CONTRADICTION
        if grid.is_solved():
            return None
        logger.debug("Line propagation stalled with %d open cells", grid.count_undetermined())
        return FailureReason.STALLED
