'''
Linear algebra layer: vector operations, linear operators and the iterative solvers.

Modules:
--------
- utils      : Environment configuration and scalar-type helpers
- errors     : Error taxonomy of the solvers
- vecalg     : Vector algebra on BLAS, numpy or numba backends
- linop      : Linear operators (CSR, dense, matrix-free)
- solver     : Solver base class, scratch arena and result type
- solvers    : BiCGSTAB, MINRES and Gauss-Seidel solvers, solver factory
'''

from .errors import (
    SolverErrorMsg, SolverError, DimensionMismatch,
    IncompatibleMatrixFormat, BreakDown, InsufficientIterNum
)
from .vecalg import VecAlg, get_vecalg
from .linop import LinearOperator, CsrOperator, DenseOperator, MatVecOperator, aslinearoperator
from .solver import Solver, SolverResult, SolverType, ScratchArena
from .solvers import choose_solver

__all__ = [
    'SolverErrorMsg', 'SolverError', 'DimensionMismatch',
    'IncompatibleMatrixFormat', 'BreakDown', 'InsufficientIterNum',
    'VecAlg', 'get_vecalg',
    'LinearOperator', 'CsrOperator', 'DenseOperator', 'MatVecOperator', 'aslinearoperator',
    'Solver', 'SolverResult', 'SolverType', 'ScratchArena', 'choose_solver',
]
