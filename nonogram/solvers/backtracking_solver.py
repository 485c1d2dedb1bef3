"""Line propagation followed by backtracking search with an MRV-style heuristic."""

from __future__ import annotations
from typing import Generator, NamedTuple, Optional
import logging
import time

from .base_solver import BaseSolver, FailureReason, SearchLimits, StepGenerator
from .heuristics import select_branch_cell
from .propagation import LinePropagator
from ..core.cell import CellState
from ..core.grid import Grid
from ..core.lines import grid_has_contradiction

logger = logging.getLogger(__name__)


class SearchResult(NamedTuple):
    """Result of one search node."""
    solved: bool
    reason: Optional[FailureReason] = None
    guesses: int = 0


SearchGenerator = Generator[object, None, SearchResult]


class BacktrackingSolver(BaseSolver):
    """
    Propagation + backtracking solver.

    Features:
    - Line propagation to a fixed point before any guess
    - Most-constrained cell selection, guessing the likelier value first
    - Contradiction pruning on partially assigned lines
    - Backtrack, wall-clock and depth budgets from :class:`SearchLimits`
    """

    name = "Propagation+Backtracking"

    def __init__(self, limits: Optional[SearchLimits] = None, track_memory: bool = True):
        """
        Initialize the backtracking solver.

        Args:
            limits: Search budgets. Defaults to ``SearchLimits()``.
            track_memory: Record peak memory with tracemalloc during solve().
        """
        super().__init__(track_memory)
        self.limits = limits if limits is not None else SearchLimits()
        self.propagator = LinePropagator()

    def reset_stats(self) -> None:
        super().reset_stats()
        self.propagator.clear_cache()

    def _steps(self, grid: Grid) -> StepGenerator:
        self.stats.extra["nodes_explored"] = 0
        self.stats.extra["max_depth_reached"] = 0
        deadline = time.perf_counter() + self.limits.time_limit_seconds

        # Phase 1: pure deduction
        result = yield from self.propagator.iter_propagate(grid, deadline)
        self.stats.extra["initial_deductions"] = result.committed
        if result.contradiction:
            return FailureReason.CONTRADICTION
        if grid.is_solved():
            logger.debug("Solved by propagation alone")
            return None
        if result.timed_out:
            return FailureReason.TIMEOUT

        # Phase 2: search
        logger.debug("Propagation stalled with %d open cells, searching",
                     grid.count_undetermined())
        outcome = yield from self._search(grid, 0, deadline, self.limits.depth_ceiling(grid))
        if outcome.solved:
            self.stats.guessed_cells = outcome.guesses
            return None
        return outcome.reason

    def _budget_exceeded(self, depth: int, deadline: float, max_depth: int) -> Optional[FailureReason]:
        if time.perf_counter() > deadline:
            return FailureReason.TIMEOUT
        if self.stats.backtracks > self.limits.max_backtracks:
            return FailureReason.BACKTRACK_LIMIT_EXCEEDED
        if depth > max_depth:
            return FailureReason.DEPTH_LIMIT_EXCEEDED
        return None

    def _search(self, grid: Grid, depth: int, deadline: float, max_depth: int) -> SearchGenerator:
        """
        Recursive search node.

        Returns a :class:`SearchResult`. On failure the caller restores its
        snapshot; a resource-limit failure is passed straight up without
        trying the sibling branch.
        """
        self.stats.extra["nodes_explored"] += 1
        self.stats.extra["max_depth_reached"] = max(self.stats.extra["max_depth_reached"], depth)
        yield

        if grid.is_solved():
            return SearchResult(True, guesses=depth)

        reason = self._budget_exceeded(depth, deadline, max_depth)
        if reason is not None:
            logger.debug("Search stopped at depth %d: %s", depth, reason.value)
            return SearchResult(False, reason)

        if grid_has_contradiction(grid):
            return SearchResult(False, FailureReason.CONTRADICTION_EXHAUSTED)

        # Cheap wins before guessing
        propagated = yield from self.propagator.iter_propagate(grid, deadline)
        if propagated.contradiction:
            return SearchResult(False, FailureReason.CONTRADICTION_EXHAUSTED)
        if grid.is_solved():
            return SearchResult(True, guesses=depth)
        if propagated.timed_out:
            return SearchResult(False, FailureReason.TIMEOUT)
        if grid_has_contradiction(grid):
            return SearchResult(False, FailureReason.CONTRADICTION_EXHAUSTED)

        choice = select_branch_cell(grid, self.propagator)
        if choice is None:
            return SearchResult(False, FailureReason.CONTRADICTION_EXHAUSTED)

        snapshot = grid.snapshot()
        first = CellState.FILLED if choice.bias > 0.5 else CellState.EXCLUDED

        for value in (first, first.opposite()):
            grid.assign(choice.row, choice.col, value)
            logger.debug("Depth %d: guess (%d, %d) = %s (bias %.2f)",
                         depth, choice.row, choice.col, value.name, choice.bias)

            result = yield from self._search(grid, depth + 1, deadline, max_depth)
            if result.solved:
                return result

            grid.restore(snapshot)
            if result.reason is not None and result.reason.is_resource_limit:
                return result
            self.stats.backtracks += 1

        return SearchResult(False, FailureReason.CONTRADICTION_EXHAUSTED)
