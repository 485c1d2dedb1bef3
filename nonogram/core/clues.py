"""Clue normalisation, run extraction and clue derivation."""

from __future__ import annotations
import numbers
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .cell import CellState
from .errors import InvalidClueError

Clue = Tuple[int, ...]


def normalize_clue(clue: Iterable[int], length: Optional[int] = None) -> Clue:
    """
    Validate a clue and return it as a tuple of block lengths.

    A lone ``0`` is the usual way of writing an empty line and becomes ``()``.

    Args:
        clue: Block lengths, left to right.
        length: Length of the line the clue describes. When given, the
            blocks plus their mandatory separators must fit in it.

    Raises:
        InvalidClueError: On non-integer, zero or negative blocks, or when
            the clue does not fit the line.
    """
    if isinstance(clue, (str, bytes)):
        raise InvalidClueError(f"Clue must be a sequence of integers, got {clue!r}")
    try:
        blocks = list(clue)
    except TypeError:
        raise InvalidClueError(f"Clue must be a sequence of integers, got {clue!r}") from None

    for block in blocks:
        if isinstance(block, bool) or not isinstance(block, numbers.Integral):
            raise InvalidClueError(f"Clue blocks must be integers, got {block!r}")

    if len(blocks) == 1 and blocks[0] == 0:
        blocks = []

    for block in blocks:
        if block <= 0:
            raise InvalidClueError(f"Clue blocks must be positive, got {tuple(blocks)}")

    result = tuple(int(b) for b in blocks)
    if length is not None and min_line_length(result) > length:
        raise InvalidClueError(
            f"Clue {result} needs {min_line_length(result)} cells, line has {length}"
        )
    return result


def normalize_clues(clues: Iterable[Iterable[int]], length: Optional[int] = None) -> Tuple[Clue, ...]:
    """Normalise a list of clues that all describe lines of ``length`` cells."""
    return tuple(normalize_clue(c, length) for c in clues)


def min_line_length(clue: Sequence[int]) -> int:
    """Smallest line that can hold the clue: blocks plus one gap between each."""
    if not clue:
        return 0
    return sum(clue) + len(clue) - 1


def line_runs(cells: Iterable[int]) -> List[int]:
    """
    Lengths of the maximal FILLED runs of a line, left to right.

    UNDETERMINED and EXCLUDED cells both terminate a run.
    """
    runs = []
    count = 0
    for cell in cells:
        if cell == CellState.FILLED:
            count += 1
        elif count > 0:
            runs.append(count)
            count = 0
    if count > 0:
        runs.append(count)
    return runs


def line_matches_clue(cells: Iterable[int], clue: Sequence[int]) -> bool:
    """True if the FILLED runs of ``cells`` are exactly ``clue``."""
    return line_runs(cells) == list(clue)


def clues_from_solution(solution) -> Tuple[Tuple[Clue, ...], Tuple[Clue, ...]]:
    """
    Derive row and column clues from a picture.

    Args:
        solution: 2D array-like. Truthy / 1 / ``CellState.FILLED`` cells are
            filled; 0, False and ``CellState.EXCLUDED`` are not.

    Returns:
        Tuple of (row_clues, col_clues).
    """
    filled = to_filled_mask(solution)
    row_clues = tuple(tuple(line_runs(_mask_line(row))) for row in filled)
    col_clues = tuple(tuple(line_runs(_mask_line(col))) for col in filled.T)
    return row_clues, col_clues


def to_filled_mask(picture) -> np.ndarray:
    """Boolean matrix that is True where a picture has a filled cell."""
    arr = np.asarray(picture)
    if arr.ndim != 2:
        raise ValueError(f"Picture must be two-dimensional, got shape {arr.shape}")
    if arr.dtype == bool:
        return arr.copy()
    return arr.astype(np.int64) == int(CellState.FILLED)


def _mask_line(mask_line) -> List[CellState]:
    return [CellState.FILLED if v else CellState.EXCLUDED for v in mask_line]


def parse_clue_text(text: str) -> List[Clue]:
    """
    Parse clues written as text.

    Lines are separated by commas or semicolons, blocks by whitespace.
    ``0`` or ``-`` on its own marks an empty line.

    >>> parse_clue_text("1 1, 3, -")
    [(1, 1), (3,), ()]
    """
    clues = []
    for part in text.replace(';', ',').split(','):
        part = part.strip()
        if part in ('', '-', '0'):
            clues.append(())
            continue
        try:
            blocks = [int(tok) for tok in part.split()]
        except ValueError:
            raise InvalidClueError(f"Cannot parse clue {part!r}") from None
        clues.append(normalize_clue(blocks))
    return clues


def format_clue(clue: Sequence[int]) -> str:
    """Inverse of a single entry of :func:`parse_clue_text`."""
    return ' '.join(str(b) for b in clue) if clue else '0'
