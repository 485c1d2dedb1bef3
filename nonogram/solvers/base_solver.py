"""Base solver interface and common utilities."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generator, Optional
import logging
import time
import tracemalloc

from ..core.grid import Grid

logger = logging.getLogger(__name__)


class FailureReason(Enum):
    """Why a solve ended without a solution."""
    TIMEOUT = "timeout"
    BACKTRACK_LIMIT_EXCEEDED = "backtrack_limit_exceeded"
    DEPTH_LIMIT_EXCEEDED = "depth_limit_exceeded"
    ATTEMPT_LIMIT_EXCEEDED = "attempt_limit_exceeded"
    CONTRADICTION_EXHAUSTED = "contradiction_exhausted"
    CONTRADICTION = "contradiction"
    STALLED = "stalled"

    @property
    def is_resource_limit(self) -> bool:
        """True for budget failures, as opposed to proven dead ends."""
        return self in _RESOURCE_LIMITS


_RESOURCE_LIMITS = frozenset({
    FailureReason.TIMEOUT,
    FailureReason.BACKTRACK_LIMIT_EXCEEDED,
    FailureReason.DEPTH_LIMIT_EXCEEDED,
    FailureReason.ATTEMPT_LIMIT_EXCEEDED,
})


@dataclass(frozen=True)
class SearchLimits:
    """
    Budgets for a backtracking search.

    ``max_depth`` of None means ``width * height`` of the grid being solved.
    """
    max_backtracks: int = 100_000
    time_limit_seconds: float = 120.0
    max_depth: Optional[int] = None

    def depth_ceiling(self, grid: Grid) -> int:
        if self.max_depth is None:
            return grid.width * grid.height
        return self.max_depth


@dataclass
class SolverStats:
    """Statistics from a solver run."""
    # Core metrics
    solved: bool = False
    time_seconds: float = 0.0
    memory_bytes: int = 0
    steps: int = 0

    # Algorithm-specific metrics
    backtracks: int = 0
    deduced_cells: int = 0
    guessed_cells: int = 0
    completion_pct: float = 0.0
    failure_reason: Optional[FailureReason] = None

    # Additional metadata
    algorithm: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "solved": self.solved,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "steps": self.steps,
            "backtracks": self.backtracks,
            "deduced_cells": self.deduced_cells,
            "guessed_cells": self.guessed_cells,
            "completion_pct": self.completion_pct,
            "failure_reason": self.failure_reason.value if self.failure_reason else None,
            "algorithm": self.algorithm,
            **self.extra
        }


StepGenerator = Generator[Any, None, Optional[FailureReason]]


class BaseSolver(ABC):
    """
    Abstract base class for nonogram solving strategies.

    Subclasses implement :meth:`_steps`, a generator that performs one unit
    of work per ``yield`` and returns None on success or a
    :class:`FailureReason`. :meth:`solve` runs it to the end; step mode runs
    it one ``yield`` per :meth:`execute_next_step` call.
    """

    name: str = "BaseSolver"

    def __init__(self, track_memory: bool = True):
        self.track_memory = track_memory
        self.step_mode = False
        self.stats = SolverStats(algorithm=self.name)
        self._step_iter: Optional[StepGenerator] = None
        self._step_grid: Optional[Grid] = None
        self._step_start = 0.0
        self._finished = False

    def solve(self, grid: Grid) -> SolverStats:
        """
        Solve a puzzle in place with timing and memory tracking.

        Args:
            grid: The puzzle to solve. Its cells are mutated.

        Returns:
            The run statistics; ``stats.solved`` tells whether it worked.
        """
        self.reset_stats()

        # Start memory tracking
        started_tracing = self.track_memory and not tracemalloc.is_tracing()
        if started_tracing:
            tracemalloc.start()

        # Start timing
        start_time = time.perf_counter()

        try:
            reason = self._drive(self._steps(grid))
        finally:
            # End timing
            self.stats.time_seconds = time.perf_counter() - start_time

            # Get memory usage
            if started_tracing:
                _, peak = tracemalloc.get_traced_memory()
                tracemalloc.stop()
                self.stats.memory_bytes = peak

        self._finish(grid, reason)
        return self.stats

    def _drive(self, steps: StepGenerator) -> Optional[FailureReason]:
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return stop.value
            self.stats.steps += 1

    def _finish(self, grid: Grid, reason: Optional[FailureReason]) -> None:
        solved = reason is None and grid.is_solved()
        if solved:
            # A target match can leave cells open; they are all blank.
            grid.exclude_remaining()
        self.stats.solved = solved
        self.stats.failure_reason = None if solved else reason
        self.stats.completion_pct = grid.completion_pct()
        self.stats.deduced_cells = grid.count_determined() - self.stats.guessed_cells
        self._finished = True

        if solved:
            logger.info("%s solved %dx%d grid in %.4fs (%d backtracks)",
                        self.name, grid.width, grid.height,
                        self.stats.time_seconds, self.stats.backtracks)
        else:
            logger.info("%s failed on %dx%d grid: %s",
                        self.name, grid.width, grid.height,
                        reason.value if reason else "unsolved")

    @abstractmethod
    def _steps(self, grid: Grid) -> StepGenerator:
        """
        Generator doing the actual work on ``grid``.

        Yields once per step; returns None when solved, else the failure reason.
        """

    def reset_stats(self) -> None:
        """Reset solver statistics and any in-progress step run."""
        self.stats = SolverStats(algorithm=self.name)
        self._step_iter = None
        self._step_grid = None
        self._finished = False

    def set_step_mode(self, enabled: bool) -> None:
        """Enable or disable step-by-step execution."""
        self.step_mode = enabled
        self.reset_stats()

    def execute_next_step(self, grid: Grid) -> bool:
        """
        Run one step on ``grid``.

        Returns:
            True if more steps remain, False once the run has finished (or
            step mode is off).
        """
        if not self.step_mode or self._finished:
            return False
        if self._step_iter is None or self._step_grid is not grid:
            self.reset_stats()
            self._step_iter = self._steps(grid)
            self._step_grid = grid
            self._step_start = time.perf_counter()

        try:
            next(self._step_iter)
        except StopIteration as stop:
            self.stats.time_seconds = time.perf_counter() - self._step_start
            self._finish(grid, stop.value)
            self._step_iter = None
            return False
        self.stats.steps += 1
        self.stats.time_seconds = time.perf_counter() - self._step_start
        self.stats.completion_pct = grid.completion_pct()
        return True

    def has_next_step(self) -> bool:
        """True while step mode is on and the current run has not finished."""
        return self.step_mode and not self._finished

    @property
    def current_step(self) -> int:
        return self.stats.steps
