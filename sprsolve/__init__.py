# sprsolve/__init__.py

"""
sprsolve - Krylov-subspace iterative solvers for large sparse linear systems A x = b.

Provides the stabilized biconjugate gradient method (BiCGSTAB) for general
operators, the minimum residual method (MINRES) for symmetric/Hermitian
indefinite operators and a Gauss-Seidel relaxation, over real and complex
single/double precision data.

Examples:
---------
>>> import numpy as np
>>> import scipy.sparse as sps
>>> from sprsolve import BiCGStabSolver
>>> a       = sps.random(100, 100, density=0.05, format='csr') + 10 * sps.eye(100)
>>> b       = np.ones(100)
>>> x       = np.zeros(100)
>>> solver  = BiCGStabSolver(a)
>>> its, rel_res = solver.solve(b, x, maxiter=200, tol=1e-10)

Version : 0.1.0
License : MIT
"""

__version__         = "0.1.0"
__license__         = "MIT"

from .algebra import (
    SolverErrorMsg, SolverError, DimensionMismatch,
    IncompatibleMatrixFormat, BreakDown, InsufficientIterNum,
    VecAlg, get_vecalg,
    LinearOperator, CsrOperator, DenseOperator, MatVecOperator, aslinearoperator,
    Solver, SolverResult, SolverType, ScratchArena, choose_solver,
)
from .algebra.solvers.bicgstab import BiCGStabSolver
from .algebra.solvers.minres import MinresSolver
from .algebra.solvers.gauss_seidel import GaussSeidelSolver

__all__ = [
    'SolverErrorMsg', 'SolverError', 'DimensionMismatch',
    'IncompatibleMatrixFormat', 'BreakDown', 'InsufficientIterNum',
    'VecAlg', 'get_vecalg',
    'LinearOperator', 'CsrOperator', 'DenseOperator', 'MatVecOperator', 'aslinearoperator',
    'Solver', 'SolverResult', 'SolverType', 'ScratchArena', 'choose_solver',
    'BiCGStabSolver', 'MinresSolver', 'GaussSeidelSolver',
]
