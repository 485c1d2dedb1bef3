"""Cell states and line orientation."""

from enum import Enum, IntEnum


class CellState(IntEnum):
    """State of a single nonogram cell."""
    UNDETERMINED = 0
    FILLED = 1
    EXCLUDED = 2

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, char: str) -> "CellState":
        """Parse one display character ('#', '.', '?' and a few aliases)."""
        try:
            return _PARSE[char]
        except KeyError:
            raise ValueError(f"Unknown cell symbol {char!r}") from None

    def opposite(self) -> "CellState":
        if self is CellState.FILLED:
            return CellState.EXCLUDED
        if self is CellState.EXCLUDED:
            return CellState.FILLED
        raise ValueError("UNDETERMINED has no opposite")


_SYMBOLS = {
    CellState.UNDETERMINED: '?',
    CellState.FILLED: '#',
    CellState.EXCLUDED: '.',
}

_PARSE = {
    '?': CellState.UNDETERMINED,
    '#': CellState.FILLED,
    '1': CellState.FILLED,
    '.': CellState.EXCLUDED,
    'x': CellState.EXCLUDED,
    '0': CellState.EXCLUDED,
}


class Axis(Enum):
    """Orientation of a line in the grid."""
    ROW = "row"
    COLUMN = "column"
