'''
file        : sprsolve/algebra/solvers/gauss_seidel.py

Gauss-Seidel relaxation for sparse systems Ax = b stored in CSR.

One forward sweep updates the unknowns in order, each one using the values
already updated in the same sweep:

    x_i <- (b_i - sum_{j != i} a_ij x_j) / a_ii

The method converges for strictly diagonally dominant and for symmetric
positive definite matrices. The residual ||Ax - b|| is evaluated before every
sweep, so each iteration costs one sweep and one product.
'''

import numba
import numpy as np

from ..linop import CsrOperator
from ..solver import Solver, SolverResult, SolverType, IncompatibleMatrixFormat, InsufficientIterNum
from ..utils import machine_eps

# -----------------------------------------------------------------------------

@numba.njit(cache=True)
def _gauss_seidel_sweep_nb(indptr, indices, data, diag, rhs, x):
    for i in range(x.shape[0]):
        acc = rhs[i]
        for k in range(indptr[i], indptr[i + 1]):
            j = indices[k]
            if j != i:
                acc -= data[k] * x[j]
        x[i] = acc / diag[i]

# -----------------------------------------------------------------------------
#! Gauss-Seidel Solver Class
# -----------------------------------------------------------------------------

class GaussSeidelSolver(Solver):
    '''
    Forward Gauss-Seidel sweeps on a CSR operator.

    Raises:
        IncompatibleMatrixFormat:
            If the operator is not sparse or has a zero diagonal entry.
    '''
    _solver_type    = SolverType.GAUSS_SEIDEL
    _roles          = ('r',)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not isinstance(self._op, CsrOperator):
            raise IncompatibleMatrixFormat(f"Gauss-Seidel needs a sparse CSR operator, got {self._op.__class__.__name__}")
        self._diag = np.ascontiguousarray(self._op.diagonal(), dtype=self._dtype)
        if np.any(self._diag == 0):
            raise IncompatibleMatrixFormat(f"Zero diagonal entry at row {int(np.flatnonzero(self._diag == 0)[0])}")

    def _solve(self, rhs: np.ndarray, x: np.ndarray, maxiter: int, tol: float) -> SolverResult:
        ops         = self._ops
        op          = self._op
        r           = self._arena.view('r')

        rhs_norm    = ops.norm2(rhs)
        if rhs_norm <= machine_eps(self._dtype):
            ops.zero(x)
            return SolverResult(iterations=0, residual_norm=rhs_norm)
        threshold   = tol * rhs_norm

        it          = 0
        while True:
            op._mul_vec(x, r)
            ops.axpy(-1.0, rhs, r)
            r_norm  = ops.norm2(r)
            if r_norm <= threshold:
                return SolverResult(iterations=it, residual_norm=r_norm / rhs_norm)
            if it == maxiter:
                raise InsufficientIterNum(maxiter)
            _gauss_seidel_sweep_nb(op.indptr, op.indices, op.data, self._diag, rhs, x)
            it     += 1
