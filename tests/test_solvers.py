"""Tests for the nonogram solvers."""

import numpy as np
import pytest

from nonogram.core.cell import CellState
from nonogram.core.clues import clues_from_solution
from nonogram.core.grid import Grid
from nonogram.core.validator import has_unique_solution
from nonogram.puzzles import get_puzzle
from nonogram.solvers import (
    BacktrackingSolver,
    FailureReason,
    LineSolver,
    RandomSolver,
    SearchLimits,
)

IDENTITY_5 = np.eye(5, dtype=int)


def ambiguous_with_identity():
    """All-[1] 5x5 clues whose accepted answer is the identity matrix."""
    return Grid(5, 5, [[1]] * 5, [[1]] * 5, target=IDENTITY_5)


class TestLineSolver:
    """Tests for the pure propagation solver."""

    def test_solves_block(self):
        grid = get_puzzle("block").to_grid()
        stats = LineSolver().solve(grid)
        assert stats.solved
        assert stats.failure_reason is None
        assert stats.backtracks == 0
        assert stats.deduced_cells == 9
        assert stats.guessed_cells == 0
        assert stats.completion_pct == 100.0

    def test_solves_diamond(self):
        puzzle = get_puzzle("diamond")
        grid = puzzle.to_grid()
        assert LineSolver().solve(grid).solved
        assert np.array_equal(grid.filled_mask(), np.array(puzzle.solution_matrix(), dtype=bool))

    def test_stalls_on_ambiguous(self):
        grid = get_puzzle("ambiguous").to_grid()
        stats = LineSolver().solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.STALLED
        assert stats.completion_pct == 0.0

    def test_contradiction(self):
        grid = Grid(2, 2, [[2], [2]], [[1], [1]])
        stats = LineSolver().solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.CONTRADICTION

    def test_empty_puzzle(self):
        grid = get_puzzle("empty").to_grid()
        assert LineSolver().solve(grid).solved
        assert grid.count_filled() == 0

    def test_stats_recorded(self):
        grid = get_puzzle("diamond").to_grid()
        solver = LineSolver()
        stats = solver.solve(grid)
        assert stats.algorithm == "Line Propagation"
        assert stats.time_seconds > 0
        assert stats.steps > 0
        assert stats.extra["sweeps"] >= 1


class TestBacktrackingSolver:
    """Tests for the propagation + backtracking solver."""

    def test_pure_propagation_needs_no_backtracking(self):
        grid = get_puzzle("block").to_grid()
        stats = BacktrackingSolver().solve(grid)
        assert stats.solved
        assert stats.backtracks == 0
        assert stats.guessed_cells == 0
        assert stats.extra["initial_deductions"] == 9

    @pytest.mark.parametrize("name", ["diamond", "cross", "smile", "arrow", "empty"])
    def test_unique_puzzles_solved_exactly(self, name):
        puzzle = get_puzzle(name)
        grid = puzzle.to_grid()
        stats = BacktrackingSolver().solve(grid)
        assert stats.solved
        assert grid.is_complete()
        if has_unique_solution(puzzle.row_clues, puzzle.col_clues):
            assert np.array_equal(grid.filled_mask(),
                                  np.array(puzzle.solution_matrix(), dtype=bool))
        else:
            assert grid.matches_clues()

    def test_ambiguous_finds_a_solution(self):
        grid = get_puzzle("ambiguous").to_grid()
        stats = BacktrackingSolver().solve(grid)
        assert stats.solved
        assert grid.is_complete()
        assert grid.matches_clues()
        assert stats.guessed_cells >= 1

    def test_two_by_two_with_target(self):
        """Two solutions fit; the target picks the diagonal."""
        grid = Grid(2, 2, [[1], [1]], [[1], [1]], target=[[1, 0], [0, 1]])
        stats = BacktrackingSolver().solve(grid)
        assert stats.solved
        assert grid.to_string() == "#./.#"
        assert stats.backtracks == 1

    def test_target_reached_after_backtracking(self):
        grid = ambiguous_with_identity()
        stats = BacktrackingSolver().solve(grid)
        assert stats.solved
        assert np.array_equal(grid.filled_mask(), IDENTITY_5.astype(bool))
        assert stats.backtracks > 0
        assert stats.extra["nodes_explored"] > stats.backtracks

    def test_backtrack_limit(self):
        grid = ambiguous_with_identity()
        stats = BacktrackingSolver(limits=SearchLimits(max_backtracks=2)).solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.BACKTRACK_LIMIT_EXCEEDED
        assert stats.failure_reason.is_resource_limit
        assert stats.backtracks > 2

    def test_backtrack_limit_zero(self):
        grid = Grid(2, 2, [[1], [1]], [[1], [1]], target=[[1, 0], [0, 1]])
        stats = BacktrackingSolver(limits=SearchLimits(max_backtracks=0)).solve(grid)
        assert stats.failure_reason == FailureReason.BACKTRACK_LIMIT_EXCEEDED

    def test_failed_search_restores_grid(self):
        """A budget failure leaves only the initial deductions on the grid."""
        grid = ambiguous_with_identity()
        BacktrackingSolver(limits=SearchLimits(max_backtracks=2)).solve(grid)
        assert grid.count_determined() == 0

    def test_timeout(self):
        grid = ambiguous_with_identity()
        stats = BacktrackingSolver(limits=SearchLimits(time_limit_seconds=0.0)).solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.TIMEOUT

    def test_solved_grid_is_not_a_timeout(self):
        """Propagation that completes the grid past the deadline still counts as solved."""
        grid = get_puzzle("block").to_grid()
        stats = BacktrackingSolver(limits=SearchLimits(time_limit_seconds=0.0)).solve(grid)
        assert stats.solved
        assert stats.failure_reason is None
        assert grid.is_solved()

    def test_depth_limit(self):
        grid = ambiguous_with_identity()
        stats = BacktrackingSolver(limits=SearchLimits(max_depth=0)).solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.DEPTH_LIMIT_EXCEEDED

    def test_default_depth_is_cell_count(self):
        grid = get_puzzle("smile").to_grid()
        assert SearchLimits().depth_ceiling(grid) == 36
        assert SearchLimits(max_depth=4).depth_ceiling(grid) == 4

    def test_unsolvable(self):
        grid = Grid(2, 2, [[2], [2]], [[1], [1]])
        stats = BacktrackingSolver().solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.CONTRADICTION
        assert not stats.failure_reason.is_resource_limit

    def test_unsolvable_after_search(self):
        """No line is contradictory alone, but the lines cannot agree."""
        # Rows force two filled cells in total, columns force three.
        grid = Grid(3, 3, [[1], [0], [1]], [[1], [1], [1]])
        stats = BacktrackingSolver().solve(grid)
        assert not stats.solved
        assert stats.failure_reason in (FailureReason.CONTRADICTION,
                                        FailureReason.CONTRADICTION_EXHAUSTED)

    @pytest.mark.parametrize("seed", range(8))
    def test_random_pictures(self, seed):
        """Solutions satisfy every clue and reproduce unique pictures exactly."""
        rng = np.random.default_rng(seed)
        picture = (rng.random((6, 6)) < 0.55).astype(int)
        rows, cols = clues_from_solution(picture)
        grid = Grid(6, 6, rows, cols)
        stats = BacktrackingSolver().solve(grid)
        assert stats.solved
        assert grid.matches_clues()
        if has_unique_solution(rows, cols):
            assert np.array_equal(grid.filled_mask(), picture.astype(bool))


class TestRandomSolver:
    """Tests for the random sampling solver."""

    def test_single_possibility_rows(self):
        grid = get_puzzle("block").to_grid()
        stats = RandomSolver(seed=1).solve(grid)
        assert stats.solved
        assert stats.extra["attempts"] == 1

    def test_tiny_grid(self):
        grid = Grid(2, 2, [[1], [1]], [[1], [1]])
        stats = RandomSolver(max_attempts=200, seed=7).solve(grid)
        assert stats.solved
        assert grid.matches_clues()

    def test_same_seed_same_result(self):
        results = []
        for _ in range(2):
            grid = Grid(3, 3, [[1], [1], [1]], [[1], [1], [1]])
            stats = RandomSolver(max_attempts=500, seed=42).solve(grid)
            results.append((stats.extra["attempts"], grid.to_string()))
        assert results[0] == results[1]

    def test_attempt_limit(self):
        """Rows always fit; columns never can."""
        grid = Grid(2, 2, [[1], [1]], [[2], [2]])
        stats = RandomSolver(max_attempts=20, seed=0).solve(grid)
        assert not stats.solved
        assert stats.failure_reason == FailureReason.ATTEMPT_LIMIT_EXCEEDED
        assert stats.extra["attempts"] == 20
        assert grid.count_determined() == 0

    def test_keeps_determined_cells(self):
        puzzle = get_puzzle("diamond")
        grid = puzzle.to_grid()
        grid.assign(0, 2, CellState.FILLED)
        grid.assign(4, 2, CellState.FILLED)
        stats = RandomSolver(max_attempts=5000, seed=3).solve(grid)
        assert grid.get(0, 2) is CellState.FILLED
        if stats.solved:
            assert grid.matches_clues()


class TestStepMode:
    """Tests for step-by-step execution."""

    def test_steps_match_solve(self):
        """Step mode performs the same steps solve() counts."""
        solver = LineSolver()
        expected = solver.solve(get_puzzle("block").to_grid()).steps

        grid = get_puzzle("block").to_grid()
        solver.set_step_mode(True)
        taken = 0
        while solver.execute_next_step(grid):
            taken += 1
        assert taken == expected == 6
        assert solver.current_step == taken
        assert solver.stats.solved
        assert not solver.has_next_step()
        assert not solver.execute_next_step(grid)

    def test_progress_visible_between_steps(self):
        grid = get_puzzle("block").to_grid()
        solver = LineSolver()
        solver.set_step_mode(True)
        assert solver.has_next_step()
        solver.execute_next_step(grid)
        assert grid.count_determined() == 3
        assert solver.stats.completion_pct == pytest.approx(100.0 / 3)

    def test_off_by_default(self):
        grid = get_puzzle("block").to_grid()
        solver = LineSolver()
        assert not solver.execute_next_step(grid)
        assert grid.count_determined() == 0

    def test_backtracking_in_steps(self):
        grid = ambiguous_with_identity()
        solver = BacktrackingSolver()
        solver.set_step_mode(True)
        for _ in range(100_000):
            if not solver.execute_next_step(grid):
                break
        assert solver.stats.solved
        assert np.array_equal(grid.filled_mask(), IDENTITY_5.astype(bool))

    def test_solve_ignores_step_mode(self):
        solver = LineSolver()
        solver.set_step_mode(True)
        stats = solver.solve(get_puzzle("diamond").to_grid())
        assert stats.solved

    def test_reset_stats(self):
        solver = LineSolver()
        solver.solve(get_puzzle("block").to_grid())
        solver.reset_stats()
        assert solver.stats.steps == 0
        assert not solver.stats.solved


class TestSolverStats:
    """Tests for SolverStats."""

    def test_to_dict(self):
        stats = BacktrackingSolver().solve(get_puzzle("diamond").to_grid())
        d = stats.to_dict()
        assert d["solved"] is True
        assert d["failure_reason"] is None
        assert d["algorithm"] == "Propagation+Backtracking"
        assert "nodes_explored" in d

    def test_failure_reason_serialised(self):
        grid = Grid(2, 2, [[2], [2]], [[1], [1]])
        d = LineSolver().solve(grid).to_dict()
        assert d["failure_reason"] == "contradiction"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
