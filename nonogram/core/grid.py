"""Nonogram grid: cell-state matrix, clues and an optional known answer."""

from __future__ import annotations
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .cell import Axis, CellState
from .clues import Clue, line_matches_clue, normalize_clue, to_filled_mask
from .errors import CellConflictError, InvalidClueError

Line = Tuple[CellState, ...]


class Grid:
    """
    Mutable ``height x width`` matrix of cell states plus its clues.

    Cells start UNDETERMINED. Forward writes go through :meth:`assign`, which
    refuses to flip a determined cell; only :meth:`clear`, :meth:`reset` and
    :meth:`restore` move a cell back to UNDETERMINED. A grid is owned by one
    solve at a time.
    """

    def __init__(
        self,
        width: int,
        height: int,
        row_clues: Sequence[Iterable[int]],
        col_clues: Sequence[Iterable[int]],
        target=None,
    ):
        """
        Initialize a grid.

        Args:
            width: Number of columns.
            height: Number of rows.
            row_clues: One clue per row, top to bottom.
            col_clues: One clue per column, left to right.
            target: Optional known answer (2D 0/1, bool or CellState values).
                Only used to short-circuit :meth:`is_solved`.

        Raises:
            InvalidClueError: If a clue is malformed or the clue counts do not
                match the dimensions.
            ValueError: If the target has the wrong shape.
        """
        if width <= 0 or height <= 0:
            raise InvalidClueError(f"Grid dimensions must be positive, got {width}x{height}")
        row_clues = list(row_clues)
        col_clues = list(col_clues)
        if len(row_clues) != height:
            raise InvalidClueError(f"Expected {height} row clues, got {len(row_clues)}")
        if len(col_clues) != width:
            raise InvalidClueError(f"Expected {width} column clues, got {len(col_clues)}")

        self.width = width
        self.height = height
        self.row_clues: Tuple[Clue, ...] = tuple(normalize_clue(c, width) for c in row_clues)
        self.col_clues: Tuple[Clue, ...] = tuple(normalize_clue(c, height) for c in col_clues)
        self.cells = np.zeros((height, width), dtype=np.int8)

        self.target: Optional[np.ndarray] = None
        if target is not None:
            mask = to_filled_mask(target)
            if mask.shape != (height, width):
                raise ValueError(f"Target shape must be ({height}, {width}), got {mask.shape}")
            self.target = mask

    @classmethod
    def from_clues(cls, row_clues, col_clues, target=None) -> Grid:
        """Create a grid sized from the clue counts."""
        return cls(len(col_clues), len(row_clues), row_clues, col_clues, target)

    def copy(self) -> Grid:
        """Create an independent copy with the same clues, target and cells."""
        new_grid = Grid(self.width, self.height, self.row_clues, self.col_clues)
        new_grid.target = None if self.target is None else self.target.copy()
        new_grid.cells = self.cells.copy()
        return new_grid

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Position ({row}, {col}) outside {self.height}x{self.width} grid")

    def get(self, row: int, col: int) -> CellState:
        """Get the state at (row, col)."""
        self._check_bounds(row, col)
        return CellState(int(self.cells[row, col]))

    def is_undetermined(self, row: int, col: int) -> bool:
        return self.get(row, col) is CellState.UNDETERMINED

    def assign(self, row: int, col: int, state: CellState) -> bool:
        """
        Commit FILLED or EXCLUDED to a cell.

        Returns:
            True if the cell changed, False if it already held ``state``.

        Raises:
            CellConflictError: If the cell already holds the opposite value.
        """
        state = CellState(state)
        if state is CellState.UNDETERMINED:
            raise ValueError("Use clear() or restore() to reset a cell")
        current = self.get(row, col)
        if current is state:
            return False
        if current is not CellState.UNDETERMINED:
            raise CellConflictError(row, col, current, state)
        self.cells[row, col] = state
        return True

    def clear(self, row: int, col: int) -> None:
        """Return a cell to UNDETERMINED."""
        self._check_bounds(row, col)
        self.cells[row, col] = CellState.UNDETERMINED

    def reset(self) -> None:
        """Return every cell to UNDETERMINED."""
        self.cells.fill(CellState.UNDETERMINED)

    def snapshot(self) -> np.ndarray:
        """Full copy of the cell matrix, for a later :meth:`restore`."""
        return self.cells.copy()

    def restore(self, snapshot: np.ndarray) -> None:
        """Overwrite every cell with a previously taken snapshot."""
        if snapshot.shape != self.cells.shape:
            raise ValueError(f"Snapshot shape {snapshot.shape} does not match grid {self.cells.shape}")
        self.cells[...] = snapshot

    def row(self, index: int) -> Line:
        """Row ``index`` as a tuple of states."""
        return tuple(CellState(int(v)) for v in self.cells[index, :])

    def column(self, index: int) -> Line:
        """Column ``index`` as a tuple of states."""
        return tuple(CellState(int(v)) for v in self.cells[:, index])

    def line(self, axis: Axis, index: int) -> Line:
        return self.row(index) if axis is Axis.ROW else self.column(index)

    def line_clue(self, axis: Axis, index: int) -> Clue:
        return self.row_clues[index] if axis is Axis.ROW else self.col_clues[index]

    def line_length(self, axis: Axis) -> int:
        return self.width if axis is Axis.ROW else self.height

    def line_count(self, axis: Axis) -> int:
        return self.height if axis is Axis.ROW else self.width

    def line_cells(self, axis: Axis, index: int):
        """(row, col) positions of a line, in line order."""
        if axis is Axis.ROW:
            return [(index, c) for c in range(self.width)]
        return [(r, index) for r in range(self.height)]

    def iter_lines(self):
        """Yield (axis, index) for every row, then every column."""
        for r in range(self.height):
            yield Axis.ROW, r
        for c in range(self.width):
            yield Axis.COLUMN, c

    def undetermined_cells(self):
        """List of (row, col) positions still UNDETERMINED, row-major."""
        rows, cols = np.nonzero(self.cells == CellState.UNDETERMINED)
        return list(zip(rows.tolist(), cols.tolist()))

    def count_undetermined(self) -> int:
        return int(np.sum(self.cells == CellState.UNDETERMINED))

    def count_determined(self) -> int:
        return self.width * self.height - self.count_undetermined()

    def count_filled(self) -> int:
        return int(np.sum(self.cells == CellState.FILLED))

    def completion_pct(self) -> float:
        """Share of determined cells, in percent."""
        return 100.0 * self.count_determined() / (self.width * self.height)

    def is_complete(self) -> bool:
        """Check if no cell is UNDETERMINED."""
        return self.count_undetermined() == 0

    def filled_mask(self) -> np.ndarray:
        return self.cells == CellState.FILLED

    def matches_clues(self) -> bool:
        """Check every row and column run list against its clue."""
        for r in range(self.height):
            if not line_matches_clue(self.cells[r, :], self.row_clues[r]):
                return False
        for c in range(self.width):
            if not line_matches_clue(self.cells[:, c], self.col_clues[c]):
                return False
        return True

    def is_solved(self) -> bool:
        """
        Check if the puzzle is solved.

        With a target, compares the FILLED pattern against it. Without one,
        every cell must be determined and every line must match its clue.
        """
        if self.target is not None:
            return bool(np.array_equal(self.filled_mask(), self.target))
        return self.is_complete() and self.matches_clues()

    def exclude_remaining(self) -> int:
        """Mark every UNDETERMINED cell EXCLUDED. Returns how many changed."""
        mask = self.cells == CellState.UNDETERMINED
        self.cells[mask] = CellState.EXCLUDED
        return int(np.sum(mask))

    def to_string(self) -> str:
        """Compact form: rows joined by '/', '#' filled, '.' excluded, '?' undetermined."""
        return '/'.join(''.join(s.symbol for s in self.row(r)) for r in range(self.height))

    def load_string(self, s: str) -> None:
        """
        Load cell states written by :meth:`to_string`.

        Raises:
            ValueError: If the layout does not match the grid.
        """
        rows = s.strip().split('/')
        if len(rows) != self.height or any(len(r) != self.width for r in rows):
            raise ValueError(f"Layout does not match a {self.height}x{self.width} grid")
        for i, text in enumerate(rows):
            for j, ch in enumerate(text):
                self.cells[i, j] = CellState.from_symbol(ch)

    def __str__(self) -> str:
        """Pretty-print the grid with its row clues."""
        lines = []
        for r in range(self.height):
            cells = ' '.join(s.symbol for s in self.row(r))
            clue = ' '.join(str(b) for b in self.row_clues[r]) or '0'
            lines.append(f"{cells}  | {clue}")
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (f"Grid(width={self.width}, height={self.height}, "
                f"determined={self.count_determined()})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return False
        return (self.row_clues == other.row_clues
                and self.col_clues == other.col_clues
                and np.array_equal(self.cells, other.cells))

    __hash__ = None
