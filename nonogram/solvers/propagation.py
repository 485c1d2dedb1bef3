"""Fixed-point line propagation: commit every cell a line's clue forces."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Optional, Sequence, Tuple
import logging
import time

from ..core.cell import Axis, CellState
from ..core.grid import Grid, Line
from ..core.lines import Possibility, common_values, generate_line_possibilities

logger = logging.getLogger(__name__)

Commitment = Tuple[int, int, CellState]


@dataclass
class LineDeduction:
    """Outcome of solving one line against its clue."""
    axis: Axis
    index: int
    committed: List[Commitment] = field(default_factory=list)
    contradiction: bool = False


@dataclass
class PropagationResult:
    """Outcome of a propagation run."""
    committed: int = 0
    sweeps: int = 0
    contradiction: bool = False
    timed_out: bool = False


class LinePropagator:
    """
    Line solver applied to every row and column until nothing changes.

    Each line's possibility set is computed under the current partial state;
    a cell is committed only when every possibility agrees on it. An empty
    set means the line is unsatisfiable and is reported as a contradiction.

    Possibility sets are memoised per (clue, line contents) until
    :meth:`clear_cache`; the cache is an optimisation only.
    """

    def __init__(self, max_cache_entries: int = 50_000):
        self.max_cache_entries = max_cache_entries
        self._cache: Dict[Tuple[Tuple[int, ...], Line], List[Possibility]] = {}
        self.cache_hits = 0
        self.cache_misses = 0

    def clear_cache(self) -> None:
        self._cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0

    def possibilities(self, clue: Sequence[int], line: Line) -> List[Possibility]:
        """Possibility set of ``line`` under ``clue``, memoised."""
        key = (tuple(clue), line)
        cached = self._cache.get(key)
        if cached is not None:
            self.cache_hits += 1
            return cached
        self.cache_misses += 1
        if len(self._cache) >= self.max_cache_entries:
            self._cache.clear()
        result = generate_line_possibilities(clue, len(line), line)
        self._cache[key] = result
        return result

    def solve_line(self, grid: Grid, axis: Axis, index: int) -> LineDeduction:
        """Commit every cell of one line that all of its possibilities agree on."""
        line = grid.line(axis, index)
        deduction = LineDeduction(axis, index)
        if CellState.UNDETERMINED not in line:
            # Fully assigned; still unsatisfiable if it does not match.
            if not self.possibilities(grid.line_clue(axis, index), line):
                deduction.contradiction = True
            return deduction

        options = self.possibilities(grid.line_clue(axis, index), line)
        if not options:
            deduction.contradiction = True
            return deduction

        agreed = common_values(options, len(line))
        for pos, (row, col) in enumerate(grid.line_cells(axis, index)):
            value = agreed[pos]
            if value is not None and line[pos] is CellState.UNDETERMINED:
                grid.assign(row, col, value)
                deduction.committed.append((row, col, value))
        return deduction

    def iter_sweep(self, grid: Grid) -> Generator[LineDeduction, None, None]:
        """
        Solve every row, then every column, yielding after each line.

        Stops early after a contradicting line.
        """
        for axis, index in grid.iter_lines():
            deduction = self.solve_line(grid, axis, index)
            yield deduction
            if deduction.contradiction:
                return

    def iter_propagate(
        self, grid: Grid, deadline: Optional[float] = None
    ) -> Generator[LineDeduction, None, PropagationResult]:
        """
        Sweep until a fixed point, yielding after each line.

        Args:
            grid: Grid to propagate on; mutated in place.
            deadline: Optional ``time.perf_counter()`` value; checked after
                each sweep.

        Returns:
            A :class:`PropagationResult` (as the generator's return value).
        """
        result = PropagationResult()
        while not grid.is_solved():
            sweep_committed = 0
            for deduction in self.iter_sweep(grid):
                sweep_committed += len(deduction.committed)
                yield deduction
                if deduction.contradiction:
                    result.committed += sweep_committed
                    result.contradiction = True
                    logger.debug("Contradiction in %s %d", deduction.axis.value, deduction.index)
                    return result
            result.sweeps += 1
            result.committed += sweep_committed

            if deadline is not None and time.perf_counter() > deadline and not grid.is_solved():
                result.timed_out = True
                return result
            if sweep_committed == 0:
                break
        return result

    def propagate(self, grid: Grid, deadline: Optional[float] = None) -> PropagationResult:
        """Run :meth:`iter_propagate` to completion."""
        steps = self.iter_propagate(grid, deadline)
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return stop.value
