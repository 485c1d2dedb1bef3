"""Exceptions raised by the nonogram core."""


class InvalidClueError(ValueError):
    """A clue is malformed or does not fit the grid it was given for."""


class CellConflictError(ValueError):
    """A forward write tried to flip a cell that is already determined."""

    def __init__(self, row: int, col: int, current, requested):
        self.row = row
        self.col = col
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cell ({row}, {col}) is already {current.name}, cannot set {requested.name}"
        )
