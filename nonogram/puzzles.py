"""Named sample puzzles."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .core.cell import CellState
from .core.clues import Clue, clues_from_solution
from .core.grid import Grid


@dataclass(frozen=True)
class Puzzle:
    """A catalogue entry: clues plus, when known, the intended picture."""
    name: str
    row_clues: Tuple[Clue, ...]
    col_clues: Tuple[Clue, ...]
    solution: Optional[Tuple[str, ...]] = None
    description: str = ""

    @property
    def width(self) -> int:
        return len(self.col_clues)

    @property
    def height(self) -> int:
        return len(self.row_clues)

    def solution_matrix(self) -> Optional[List[List[int]]]:
        """The picture as 0/1 rows, or None."""
        if self.solution is None:
            return None
        return [[1 if CellState.from_symbol(ch) is CellState.FILLED else 0 for ch in row]
                for row in self.solution]

    def to_grid(self, with_target: bool = False) -> Grid:
        """Build a fresh grid; optionally attach the picture as target."""
        target = self.solution_matrix() if with_target else None
        return Grid(self.width, self.height, self.row_clues, self.col_clues, target)


def _from_picture(name: str, rows: Tuple[str, ...], description: str = "") -> Puzzle:
    matrix = [[1 if ch == '#' else 0 for ch in row] for row in rows]
    row_clues, col_clues = clues_from_solution(matrix)
    return Puzzle(name, row_clues, col_clues, rows, description)


_CATALOGUE: Dict[str, Puzzle] = {}


def _register(puzzle: Puzzle) -> None:
    _CATALOGUE[puzzle.name] = puzzle


_register(_from_picture("diamond", (
    "..#..",
    ".###.",
    "#####",
    ".###.",
    "..#..",
), "5x5 diamond, solved by line propagation alone"))

_register(_from_picture("cross", (
    "..#..",
    "..#..",
    "#####",
    "..#..",
    "..#..",
), "5x5 plus sign"))

_register(_from_picture("block", (
    "###",
    "###",
    "###",
), "3x3 fully filled"))

_register(Puzzle(
    "ambiguous",
    row_clues=((1,),) * 5,
    col_clues=((1,),) * 5,
    description="5x5 with a single cell per line: every permutation matrix fits",
))

_register(_from_picture("smile", (
    ".#..#.",
    ".#..#.",
    "......",
    "#....#",
    ".#..#.",
    "..##..",
), "6x6 face"))

_register(_from_picture("arrow", (
    "...#...",
    "..###..",
    ".#####.",
    "#######",
    "..###..",
    "..###..",
    "..###..",
), "7x7 arrow pointing up"))

_register(_from_picture("empty", (
    "....",
    "....",
    "....",
), "4x3 blank grid, every clue empty"))


def get_puzzle(name: str) -> Puzzle:
    """
    Look up a catalogue puzzle by name.

    Raises:
        KeyError: If no puzzle has that name.
    """
    try:
        return _CATALOGUE[name]
    except KeyError:
        raise KeyError(f"Unknown puzzle {name!r}; available: {', '.join(sorted(_CATALOGUE))}") from None


def list_puzzles() -> List[Puzzle]:
    return list(_CATALOGUE.values())
