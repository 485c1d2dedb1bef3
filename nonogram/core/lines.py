"""
Single-line combinatorics shared by the solvers and the uniqueness validator.

A *possibility* is a full filling of one line (FILLED / EXCLUDED only) that
realizes a clue's blocks in order and agrees with every determined cell of
a partial line.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from .cell import CellState
from .clues import line_runs

if TYPE_CHECKING:
    from .grid import Grid

FILLED = CellState.FILLED
EXCLUDED = CellState.EXCLUDED
UNDETERMINED = CellState.UNDETERMINED

Possibility = Tuple[CellState, ...]


def generate_line_possibilities(
    clue: Sequence[int],
    length: int,
    partial: Optional[Sequence[CellState]] = None,
) -> List[Possibility]:
    """
    Enumerate every filling of a line consistent with a clue.

    Blocks are placed left to right. For block ``i`` every start offset from
    the current position up to ``length - min_space_needed`` is tried, where
    ``min_space_needed`` covers block ``i`` and every later block with its
    separator. Results come out ordered by block start offsets.

    Args:
        clue: Block lengths (already normalised, ``()`` for an empty line).
        length: Number of cells in the line.
        partial: Optional current state of the line. FILLED and EXCLUDED
            cells must be matched; UNDETERMINED cells are free.

    Returns:
        List of fillings, each a tuple of FILLED/EXCLUDED states.
    """
    if partial is not None and len(partial) != length:
        raise ValueError(f"Partial line has {len(partial)} cells, expected {length}")

    results: List[Possibility] = []
    line = [EXCLUDED] * length

    # Suffix sums: space_needed[i] = room blocks i.. need including separators.
    k = len(clue)
    space_needed = [0] * (k + 1)
    for i in range(k - 1, -1, -1):
        space_needed[i] = clue[i] + (space_needed[i + 1] + 1 if i < k - 1 else 0)

    def allows(pos: int, state: CellState) -> bool:
        return partial is None or partial[pos] == UNDETERMINED or partial[pos] == state

    def place(block_index: int, pos: int) -> None:
        if block_index == k:
            for i in range(pos, length):
                if not allows(i, EXCLUDED):
                    return
                line[i] = EXCLUDED
            results.append(tuple(line))
            return

        block = clue[block_index]
        last_block = block_index == k - 1
        for start in range(pos, length - space_needed[block_index] + 1):
            # Every cell from pos to start-1 is a gap; stop once a gap hits a FILLED cell.
            if start > pos:
                if not allows(start - 1, EXCLUDED):
                    break
                line[start - 1] = EXCLUDED

            if not all(allows(i, FILLED) for i in range(start, start + block)):
                continue
            end = start + block
            if not last_block and not allows(end, EXCLUDED):
                continue

            for i in range(start, end):
                line[i] = FILLED
            next_pos = end
            if not last_block:
                line[end] = EXCLUDED
                next_pos += 1
            place(block_index + 1, next_pos)

    place(0, 0)
    return results


def count_line_possibilities(
    clue: Sequence[int],
    length: int,
    partial: Optional[Sequence[CellState]] = None,
) -> int:
    """Number of fillings :func:`generate_line_possibilities` would return."""
    return len(generate_line_possibilities(clue, length, partial))


def fill_probabilities(possibilities: Sequence[Possibility], length: int) -> List[float]:
    """Per position, the fraction of possibilities in which the cell is FILLED."""
    if not possibilities:
        return [0.0] * length
    counts = [0] * length
    for line in possibilities:
        for i, state in enumerate(line):
            if state == FILLED:
                counts[i] += 1
    total = len(possibilities)
    return [c / total for c in counts]


def common_values(possibilities: Sequence[Possibility], length: int) -> List[Optional[CellState]]:
    """
    Per position, the value all possibilities agree on, or None.

    An empty possibility set yields all None.
    """
    if not possibilities:
        return [None] * length
    agreed: List[Optional[CellState]] = list(possibilities[0])
    for line in possibilities[1:]:
        for i in range(length):
            if agreed[i] is not None and line[i] != agreed[i]:
                agreed[i] = None
    return agreed


def _prefix_violation(cells: Sequence[CellState], clue: Sequence[int]) -> bool:
    """
    Check the determined prefix of a line (cells before the first UNDETERMINED).

    Runs closed inside the prefix are the first blocks of the line in every
    completion, so they must equal the clue's prefix. A run touching the
    first UNDETERMINED cell will become the next block and may not already
    be longer than it.
    """
    closed = []
    count = 0
    for cell in cells:
        if cell == UNDETERMINED:
            break
        if cell == FILLED:
            count += 1
        elif count > 0:
            closed.append(count)
            count = 0
    else:
        # No UNDETERMINED cell: the whole line is determined.
        if count > 0:
            closed.append(count)
        return closed != list(clue)

    if len(closed) > len(clue) or closed != list(clue[:len(closed)]):
        return True
    if count > 0:
        if len(closed) == len(clue):
            return True
        if count > clue[len(closed)]:
            return True
    return False


def line_has_contradiction(cells: Sequence[CellState], clue: Sequence[int]) -> bool:
    """
    Return True if a (possibly partial) line can no longer satisfy its clue.

    A complete line must match the clue exactly. For a partial line the
    determined prefix is checked from the left against the clue and the
    determined suffix from the right against the reversed clue, and no
    FILLED run may be longer than the largest block.
    """
    runs = line_runs(cells)
    if not clue:
        return bool(runs)
    if runs and max(runs) > max(clue):
        return True
    if _prefix_violation(cells, clue):
        return True
    return _prefix_violation(list(reversed(cells)), list(reversed(clue)))


def grid_has_contradiction(grid: Grid) -> bool:
    """Check every row and column of a grid for a contradiction."""
    for axis, index in grid.iter_lines():
        if line_has_contradiction(grid.line(axis, index), grid.line_clue(axis, index)):
            return True
    return False
