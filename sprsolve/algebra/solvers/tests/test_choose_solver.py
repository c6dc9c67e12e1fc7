"""
Tests for the solver factory and for properties shared by the Krylov solvers.
"""

import pytest
import numpy as np
import scipy.sparse as sps

import sprsolve
from sprsolve.algebra import solvers
from sprsolve.algebra.solvers import choose_solver, SolverType

# --- Helper Functions ---

def create_random_spd(n, seed=0):
    """Dense SPD matrix with eigenvalues in [1, 2]."""
    rng     = np.random.default_rng(seed)
    q, _    = np.linalg.qr(rng.standard_normal((n, n)))
    return (q * np.linspace(1.0, 2.0, n)) @ q.T

# --- Factory ---

class TestChooseSolver:

    @pytest.mark.parametrize("solver_id, name", [
        ('bicgstab',                'BiCGStabSolver'),
        ('MINRES',                  'MinresSolver'),
        ('gauss-seidel',            'GaussSeidelSolver'),
        (SolverType.MINRES,         'MinresSolver'),
        (SolverType.BICGSTAB.value, 'BiCGStabSolver'),
        ('MinresSolver',            'MinresSolver'),
    ])
    def test_identifiers(self, solver_id, name):
        solver = choose_solver(solver_id, sps.identity(4, format='csr'))
        assert solver.__class__.__name__ == name

    def test_class_identifier_and_kwargs(self):
        solver = choose_solver(sprsolve.BiCGStabSolver, np.eye(3), 3, backend='numba', maxiter=7)
        assert isinstance(solver, sprsolve.BiCGStabSolver)
        assert solver.solver_type is SolverType.BICGSTAB
        assert solver.size == 3

    def test_unknown_identifier(self):
        with pytest.raises(ValueError):
            choose_solver('conjugate-gradient', np.eye(2))

    def test_lazy_attributes(self):
        assert solvers.MinresSolver.__name__ == 'MinresSolver'
        with pytest.raises(AttributeError):
            solvers.NoSuchSolver

# --- Shared properties ---

@pytest.mark.parametrize("solver_id", ['bicgstab', 'minres'])
def test_identity_at_most_one_iteration(solver_id):
    b       = np.array([3.0, -1.0, 0.5, 2.0, 7.0])
    x       = np.zeros(5)
    its, rel = choose_solver(solver_id, sps.identity(5, format='csr')).solve(b, x, maxiter=10, tol=1e-12)
    assert its <= 1
    assert np.allclose(x, b)

@pytest.mark.parametrize("solver_id", ['bicgstab', 'minres'])
def test_mismatched_lengths_leave_x_untouched(solver_id):
    solver  = choose_solver(solver_id, sps.identity(5, format='csr'))
    x       = np.full(5, 3.0)
    with pytest.raises(sprsolve.IncompatibleMatrixFormat):
        solver.solve(np.ones(6), x)
    assert np.array_equal(x, np.full(5, 3.0))

def test_bicgstab_and_minres_agree_on_spd():
    n       = 40
    tol     = 1e-10
    a       = create_random_spd(n, seed=1)
    b       = np.random.default_rng(2).standard_normal(n)

    x_bicg  = np.zeros(n)
    x_minr  = np.zeros(n)
    choose_solver('bicgstab', a).solve(b, x_bicg, maxiter=200, tol=tol)
    choose_solver('minres', a).solve(b, x_minr, maxiter=200, tol=tol)

    # ||A^-1|| = 1, so each solution lies within ||r|| <= tol ||b|| of the exact one
    assert np.linalg.norm(x_bicg - x_minr) <= 2 * tol * np.linalg.norm(b) * 1.01
