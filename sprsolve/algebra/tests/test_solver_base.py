"""
Tests of the scratch arena and of the input validation shared by all solvers.
"""

import logging

import pytest
import numpy as np
import scipy.sparse as sps

from sprsolve.algebra.solver import ScratchArena, SolverResult
from sprsolve.algebra.errors import IncompatibleMatrixFormat, InsufficientIterNum, SolverError, SolverErrorMsg
from sprsolve.common.flog import Logger
from sprsolve.algebra.solvers import BiCGStabSolver, MinresSolver

# --- Helper Functions ---

def create_tridiagonal(n, dtype=np.float64):
    """Symmetric, strictly diagonally dominant tridiagonal matrix."""
    return sps.diags([-1.0, 4.0, -1.0], [-1, 0, 1], shape=(n, n), format='csr', dtype=dtype)

# --- Scratch arena ---

class TestScratchArena:

    def test_windows_are_views_of_one_buffer(self):
        arena = ScratchArena(4, np.float64, ('a', 'b', 'c'))
        assert arena.buffer.shape == (12,)
        for role in ('a', 'b', 'c'):
            assert np.shares_memory(arena.view(role), arena.buffer)
            assert arena.view(role).shape == (4,)

    def test_rotate_moves_windows_without_copying(self):
        arena           = ScratchArena(3, np.float64, ('v_old', 'v', 'v_new'))
        v_old, v, v_new = arena.views('v_old', 'v', 'v_new')
        v_old[:], v[:], v_new[:] = 1.0, 2.0, 3.0
        arena.rotate('v_old', 'v', 'v_new')
        assert arena.view('v_old') is v
        assert arena.view('v') is v_new
        assert arena.view('v_new') is v_old
        assert np.all(arena.view('v') == 3.0)

    def test_roles_never_share_a_window(self):
        arena = ScratchArena(2, np.complex128, ('r', 's', 't', 'u'))
        for k in range(7):
            arena.rotate('r', 's', 't')
            if k % 2:
                arena.rotate('t', 'u')
            slots = [arena.slot(role) for role in arena.roles]
            assert sorted(slots) == list(range(4))

    def test_reset_and_zero(self):
        arena = ScratchArena(2, np.float32, ('p', 'q'))
        arena.view('p')[:] = 7.0
        arena.rotate('p', 'q')
        arena.reset()
        assert arena.slot('p') == 0 and arena.slot('q') == 1
        arena.zero('p')
        assert not np.any(arena.buffer)

    def test_duplicate_roles(self):
        with pytest.raises(ValueError):
            ScratchArena(2, np.float64, ('r', 'r'))

# --- Solver construction and validation ---

@pytest.mark.parametrize("solver_cls", [BiCGStabSolver, MinresSolver])
class TestSolverValidation:

    def test_size_mismatch_at_construction(self, solver_cls):
        with pytest.raises(IncompatibleMatrixFormat):
            solver_cls(create_tridiagonal(5), 6)

    def test_non_square_operator(self, solver_cls):
        with pytest.raises(IncompatibleMatrixFormat):
            solver_cls(sps.random(4, 5, density=0.5, format='csr'))

    def test_unsupported_scalar_type(self, solver_cls):
        with pytest.raises(IncompatibleMatrixFormat):
            solver_cls(create_tridiagonal(5), dtype=np.float16)

    def test_rhs_length_mismatch_leaves_x_untouched(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(5))
        x       = np.arange(5, dtype=np.float64)
        with pytest.raises(IncompatibleMatrixFormat):
            solver.solve(np.ones(4), x)
        assert np.array_equal(x, np.arange(5))

    def test_x_length_mismatch(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(5))
        x       = np.zeros(4)
        with pytest.raises(IncompatibleMatrixFormat):
            solver.solve(np.ones(5), x)
        assert not np.any(x)

    def test_x_dtype_mismatch(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(5))
        x       = np.zeros(5, dtype=np.float32)
        with pytest.raises(IncompatibleMatrixFormat):
            solver.solve(np.ones(5), x)

    def test_complex_rhs_into_real_solver(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(5))
        with pytest.raises(IncompatibleMatrixFormat):
            solver.solve(np.ones(5, dtype=np.complex128), np.zeros(5))

    def test_x_not_writeable(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(5))
        x       = np.zeros(5)
        x.flags.writeable = False
        with pytest.raises(IncompatibleMatrixFormat):
            solver.solve(np.ones(5), x)

    def test_invalid_budget(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(5))
        with pytest.raises(SolverError) as e:
            solver.solve(np.ones(5), np.zeros(5), maxiter=-1)
        assert e.value.code == SolverErrorMsg.INVALID_INPUT

    def test_arena_reused_between_calls(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(30))
        buffer  = solver.arena.buffer
        for seed in range(3):
            b       = np.random.default_rng(seed).standard_normal(30)
            x       = np.zeros(30)
            result  = solver.solve(b, x, maxiter=200, tol=1e-10)
            assert isinstance(result, SolverResult)
            assert solver.arena.buffer is buffer
            assert solver.last_iterations == result.iterations
            assert solver.last_residual_norm == result.residual_norm

    def test_defaults_from_constructor(self, solver_cls):
        solver  = solver_cls(create_tridiagonal(20), eps=1e-12, maxiter=500)
        b       = np.ones(20)
        x       = np.zeros(20)
        its, rel = solver.solve(b, x)
        assert rel <= 1e-12 * (1 + 1e-6)
        assert its <= 500

def test_failures_are_logged(capsys):
    logger  = Logger(name="sprsolve.test", lvl=logging.DEBUG)
    solver  = BiCGStabSolver(create_tridiagonal(30), logger=logger)
    with pytest.raises(InsufficientIterNum):
        solver.solve(np.ones(30), np.zeros(30), maxiter=2, tol=1e-15)
    out     = capsys.readouterr().out
    assert "[DEBUG] BiCGStabSolver: n=30" in out
    assert "[WARNING]" in out and "Not converged within 2 iterations" in out

def test_file_log_has_no_colour_codes(tmp_path, monkeypatch):
    monkeypatch.setenv("PYLOGFILE", "1")
    monkeypatch.chdir(tmp_path)
    logger  = Logger(name="sprsolve.filetest", logfile="run.log", lvl="debug")
    logger.has_colors = True
    logger.warning("budget exhausted", lvl=1)
    for h in logger.logger.handlers:
        h.flush()
    text    = (tmp_path / "log" / "run.log").read_text()
    assert "[WARNING] \t->budget exhausted" in text
    assert "\x1b[" not in text
