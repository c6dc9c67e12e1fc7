'''
file        : sprsolve/algebra/solvers/minres.py

Implements the Minimum Residual (MINRES) iterative algorithm for solving linear systems
Ax = b where A is symmetric (real) or Hermitian (complex), not necessarily positive definite.

MINRES uses a Lanczos process combined with Givens rotations to minimize the residual
norm ||Ax - b||_2 over the Krylov subspace.

Mathematical Background:
-----------------------
Given a symmetric matrix A, right-hand side b and initial guess x0:

1. Lanczos process generates orthonormal basis vectors v_k of the Krylov subspace,
   A v_k = beta_{k-1} v_{k-1} + alpha_k v_k + beta_k v_{k+1}
2. Givens rotations maintain the QR factorization of the tridiagonal matrix T_k,
   one new column [0, beta_{k-1}, alpha_k, beta_k] per step
3. Solution x_k minimizes ||Ax - b||_2 over x0 + span{v_1, ..., v_k}; the residual
   norm is the product of the rotation sines times ||b - A x0||, so it is never
   recomputed explicitly

The symmetry of A is assumed, not verified. A non-symmetric operator gives a wrong answer
without any error.

References:
-----------
- Paige, C. C., & Saunders, M. A. (1975). Solution of Sparse Indefinite Systems of Linear Equations.
  SIAM Journal on Numerical Analysis, 12(4), 617-629.
- Golub, G. H., & Van Loan, C. F. (2013). Matrix Computations (4th ed.), Section 11.4.
'''

import numpy as np

from ..solver import Solver, SolverResult, SolverType, BreakDown, InsufficientIterNum
from ..utils import machine_eps

# -----------------------------------------------------------------------------
#! MINRES Solver Class
# -----------------------------------------------------------------------------

class MinresSolver(Solver):
    '''
    Minimum Residual (MINRES) Solver for symmetric/Hermitian, possibly indefinite operators.
    Uses the Lanczos process with Givens rotations to minimize the residual norm.

    The three Lanczos vectors and the three update directions live in the arena
    and change roles every iteration by rotation, not by copying.
    '''
    _solver_type    = SolverType.MINRES
    _roles          = ('v_old', 'v', 'v_new', 'p_oold', 'p_old', 'p')

    def _solve(self, rhs: np.ndarray, x: np.ndarray, maxiter: int, tol: float) -> SolverResult:
        ops         = self._ops
        op          = self._op
        arena       = self._arena
        eps         = machine_eps(self._dtype)

        rhs_norm    = ops.norm2(rhs)
        if rhs_norm <= eps:
            # when rhs = 0, x is set to zero
            ops.zero(x)
            return SolverResult(iterations=0, residual_norm=rhs_norm)
        threshold   = tol * rhs_norm

        # Givens rotation history and update scaling
        c, c_old    = 1.0, 1.0
        s, s_old    = 0.0, 0.0
        eta         = 1.0

        # v_new = (b - A x) / beta_1, v_old is only scratch here
        v_old, v_new = arena.views('v_old', 'v_new')
        ops.copy(rhs, v_new)
        op._mul_vec(x, v_old)
        ops.axpy(-1.0, v_old, v_new)
        res_norm    = ops.norm2(v_new)
        if res_norm <= threshold:
            return SolverResult(iterations=0, residual_norm=res_norm / rhs_norm)
        beta_new    = res_norm
        beta_one    = res_norm
        ops.rscale(1.0 / beta_new, v_new)
        arena.zero('v', 'p_old', 'p')

        for it in range(maxiter):
            beta    = beta_new
            # v_old <- v, v <- v_new, v_new <- v_old
            arena.rotate('v_old', 'v', 'v_new')
            v_old, v, v_new = arena.views('v_old', 'v', 'v_new')

            # Lanczos step in the stable order: alpha = v^H A v fused with the product,
            # then v_new = A v - beta v_old - alpha v
            alpha   = op._mul_vec_dot(v, v_new)
            ops.axpy(-beta, v_old, v_new)
            ops.axpy(-alpha, v, v_new)
            beta_new = ops.norm2(v_new)
            if beta_new > 0.0:
                ops.rscale(1.0 / beta_new, v_new)
            # beta_new == 0: invariant Krylov subspace, s becomes 0 below and the solve ends

            # previous two rotations applied to the column [0, beta, alpha]
            r3      = s_old * beta
            tr      = c_old * beta
            r2      = alpha * s + c * tr
            r1_hat  = c * alpha - tr * s

            # new rotation annihilating beta_new
            r1      = float(np.hypot(abs(r1_hat), beta_new))
            if r1 == 0.0:
                raise BreakDown(it + 1)
            c_old   = c
            s_old   = s
            c       = r1_hat / r1
            s       = beta_new / r1

            # p = (v - r2 p_old - r3 p_oold) / r1
            arena.rotate('p_oold', 'p_old', 'p')
            p_oold, p_old, p = arena.views('p_oold', 'p_old', 'p')
            ops.copy(v, p)
            ops.axpy(-r2, p_old, p)
            ops.axpy(-r3, p_oold, p)
            ops.rscale(1.0 / r1, p)

            ops.axpy(c * eta * beta_one, p, x)

            res_norm *= abs(s)
            if res_norm < threshold:
                return SolverResult(iterations=it + 1, residual_norm=res_norm / rhs_norm)
            eta     = -s * eta

        raise InsufficientIterNum(maxiter)

# -----------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------
