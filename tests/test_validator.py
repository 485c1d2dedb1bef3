"""Tests for solution counting and uniqueness validation."""

from collections import Counter
import itertools

import numpy as np
import pytest

from nonogram.core.cell import CellState
from nonogram.core.clues import clues_from_solution
from nonogram.core.errors import InvalidClueError
from nonogram.core.grid import Grid
from nonogram.core.validator import (
    SolutionCounter,
    column_prefix_feasible,
    count_solutions,
    has_unique_solution,
    has_unique_solution_for,
    validate_solution,
)

F = CellState.FILLED
X = CellState.EXCLUDED

DIAMOND = [
    [0, 0, 1, 0, 0],
    [0, 1, 1, 1, 0],
    [1, 1, 1, 1, 1],
    [0, 1, 1, 1, 0],
    [0, 0, 1, 0, 0],
]


class TestUniqueness:
    """Tests for has_unique_solution and count_solutions."""

    def test_diamond_is_unique(self):
        rows, cols = clues_from_solution(DIAMOND)
        assert has_unique_solution(rows, cols)
        assert has_unique_solution(rows, cols, width=5, height=5)

    def test_permutation_clues_are_ambiguous(self):
        """All-[1] clues admit every permutation matrix."""
        clues = [[1]] * 5
        assert not has_unique_solution(clues, clues)
        assert count_solutions(clues, clues, limit=2) == 2

    def test_count_respects_limit(self):
        clues = [[1]] * 5
        assert count_solutions(clues, clues, limit=10) == 10

    def test_count_all_permutations(self):
        clues = [[1]] * 4
        assert count_solutions(clues, clues, limit=1000) == 24

    def test_no_solution(self):
        rows = [[2], [2]]
        cols = [[1], [1]]
        assert count_solutions(rows, cols) == 0
        assert not has_unique_solution(rows, cols)

    def test_empty_clues_unique(self):
        """An all-empty clue set has exactly one (blank) solution."""
        assert has_unique_solution([[0]] * 3, [[]] * 4)

    def test_malformed_clue_returns_false(self):
        assert not has_unique_solution([[3]], [[1], [1]])
        assert not has_unique_solution([[1, 0]], [[1], [1]])

    def test_dimension_mismatch_returns_false(self):
        rows, cols = clues_from_solution(DIAMOND)
        assert not has_unique_solution(rows, cols, width=4, height=5)
        assert not has_unique_solution(rows, cols, width=5, height=6)

    def test_count_solutions_raises_on_bad_clues(self):
        with pytest.raises(InvalidClueError):
            count_solutions([[3]], [[1], [1]])
        with pytest.raises(InvalidClueError):
            count_solutions([], [[1]])

    def test_limit_must_be_positive(self):
        clues = [[1]] * 3
        with pytest.raises(ValueError):
            count_solutions(clues, clues, limit=0)
        with pytest.raises(ValueError):
            SolutionCounter(clues, clues).count(limit=-1)
        assert count_solutions(clues, clues, limit=1) == 1

    def test_first_solution_recorded(self):
        rows, cols = clues_from_solution(DIAMOND)
        counter = SolutionCounter(rows, cols)
        assert counter.count() == 1
        assert np.array_equal(counter.first_solution == F, np.array(DIAMOND, dtype=bool))
        assert counter.nodes > 0

    def test_for_grid(self):
        rows, cols = clues_from_solution(DIAMOND)
        grid = Grid(5, 5, rows, cols)
        assert has_unique_solution_for(grid)

    @pytest.mark.parametrize("height,width", [(3, 3), (2, 4), (4, 2)])
    def test_counts_match_brute_force(self, height, width):
        """Every clue set of a small grid counts exactly its preimages."""
        preimages = Counter()
        for bits in itertools.product((0, 1), repeat=height * width):
            picture = np.array(bits).reshape(height, width)
            preimages[clues_from_solution(picture)] += 1

        for (rows, cols), expected in preimages.items():
            assert count_solutions(rows, cols, limit=1000) == expected
            assert has_unique_solution(rows, cols) == (expected == 1)


class TestColumnPrefix:
    """Tests for column_prefix_feasible."""

    def test_empty_prefix(self):
        assert column_prefix_feasible([], (2, 1), 4)

    def test_closed_run_must_match(self):
        assert column_prefix_feasible([F, F, X], (2, 1), 5)
        assert not column_prefix_feasible([F, X], (2, 1), 5)

    def test_open_run_within_block(self):
        assert column_prefix_feasible([X, F], (2,), 3)

    def test_open_run_too_long(self):
        assert not column_prefix_feasible([F, F, F], (2,), 5)

    def test_open_run_after_last_block(self):
        """A run started after every block has closed can never match."""
        assert not column_prefix_feasible([F, X, F], (1,), 5)

    def test_remaining_space(self):
        """The rest of the line must still hold the unplaced blocks."""
        assert not column_prefix_feasible([X, X, X], (3,), 5)
        assert column_prefix_feasible([X, X], (3,), 5)

    def test_open_run_needs_room_to_finish(self):
        assert column_prefix_feasible([X, F], (2,), 3)
        assert not column_prefix_feasible([X, X, F], (2,), 3)

    def test_empty_clue(self):
        assert column_prefix_feasible([X, X], (), 3)
        assert not column_prefix_feasible([X, F], (), 3)


class TestValidateSolution:
    """Tests for validate_solution."""

    def test_accepts_picture(self):
        rows, cols = clues_from_solution(DIAMOND)
        grid = Grid(5, 5, rows, cols)
        assert validate_solution(grid, DIAMOND)

    def test_accepts_cell_states(self):
        """EXCLUDED cells count as blank, not as filled."""
        rows, cols = clues_from_solution(DIAMOND)
        grid = Grid(5, 5, rows, cols)
        states = [[F if v else X for v in row] for row in DIAMOND]
        assert validate_solution(grid, states)

    def test_rejects_wrong_picture(self):
        rows, cols = clues_from_solution(DIAMOND)
        grid = Grid(5, 5, rows, cols)
        wrong = [row[:] for row in DIAMOND]
        wrong[0][0] = 1
        assert not validate_solution(grid, wrong)

    def test_rejects_wrong_shape(self):
        rows, cols = clues_from_solution(DIAMOND)
        grid = Grid(5, 5, rows, cols)
        assert not validate_solution(grid, [[1, 0], [0, 1]])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
