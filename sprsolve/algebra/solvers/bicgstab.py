r'''
file:       sprsolve/algebra/solvers/bicgstab.py

Implements the stabilized biconjugate gradient method (BiCGSTAB) for general,
non-symmetric square systems :math:`Ax = b`, without preconditioner.

The residual is kept with the sign convention :math:`r = Ax - b`, so the
solution updates subtract the search directions.

Iteration (van der Vorst), with shadow residual :math:`\hat r_0`:
    *   :math:`\rho_k = \hat r_0^H r_k`
    *   :math:`\beta = (\rho_k / \rho_{k-1}) (\alpha / \omega)`
    *   :math:`y = r_k + \beta (y - \omega v)`,      :math:`v = A y`
    *   :math:`\alpha = \rho_k / (\hat r_0^H v)`
    *   :math:`s = r_k - \alpha v`,                  :math:`t = A s`
    *   :math:`\omega = (t^H s) / (t^H t)`
    *   :math:`x_{k+1} = x_k - \alpha y - \omega s`, :math:`r_{k+1} = s - \omega t`

Two breakdowns are handled:
    - :math:`\rho_k` collapsing against :math:`\|r_0\|^2 \epsilon^2`: the residual is
      recomputed from scratch and taken as the new shadow residual (silent restart),
    - :math:`\hat r_0^H v = 0`: unrecoverable, raises `BreakDown`.

References:
-----------
    - van der Vorst, H. A. (1992). Bi-CGSTAB: A Fast and Smoothly Converging Variant of Bi-CG
        for the Solution of Nonsymmetric Linear Systems. SIAM J. Sci. Stat. Comput., 13(2), 631-644.
    - Saad, Y. (2003). Iterative Methods for Sparse Linear Systems (2nd ed.). SIAM. Chapter 7.
'''

import numpy as np

from ..solver import Solver, SolverResult, SolverType, BreakDown, InsufficientIterNum
from ..utils import machine_eps

# -----------------------------------------------------------------------------
#! BiCGSTAB Solver Class
# -----------------------------------------------------------------------------

class BiCGStabSolver(Solver):
    '''
    Unpreconditioned BiCGSTAB for general square operators.

    Working vectors live in six arena windows: the residual `r`, the shadow
    residual `r0`, the stabilized correction `s`, the direction `y` and the
    products `v = A y`, `t = A s`.

    Example:
        >>> solver  = BiCGStabSolver(a)
        >>> x       = np.zeros(a.shape[0])
        >>> its, rel_res = solver.solve(b, x, maxiter=100, tol=1e-10)
    '''
    _solver_type    = SolverType.BICGSTAB
    _roles          = ('r', 'r0', 's', 'y', 'v', 't')

    def _solve(self, rhs: np.ndarray, x: np.ndarray, maxiter: int, tol: float) -> SolverResult:
        ops                 = self._ops
        op                  = self._op
        eps                 = machine_eps(self._dtype)
        r, r0, s, y, v, t   = self._arena.views(*self._roles)

        rhs_norm            = ops.norm2(rhs)
        if rhs_norm <= eps:
            ops.zero(x)
            return SolverResult(iterations=0, residual_norm=rhs_norm)
        threshold           = tol * rhs_norm

        # r = A x - b, r0 = r
        op._mul_vec(x, r)
        ops.axpy(-1.0, rhs, r)
        ops.copy(r, r0)
        r0_norm             = ops.norm2(r0)
        if r0_norm <= threshold:
            return SolverResult(iterations=0, residual_norm=r0_norm / rhs_norm)
        rho_tol             = (r0_norm * eps) ** 2

        # first step, unrolled: y = r
        w                   = 1.0
        rho                 = r0_norm * r0_norm
        ops.copy(r, y)
        op._mul_vec(y, v)
        denom               = ops.conj_dot(r0, v)
        if abs(denom) <= 0.0:
            raise BreakDown(0)
        alpha               = rho / denom
        ops.copy(r, s)
        ops.axpy(-alpha, v, s)
        op._mul_vec(s, t)
        tt                  = ops.conj_dot(t, t)
        if tt.real > 0.0:
            w = ops.conj_dot(t, s) / tt
        ops.axpy(-alpha, y, x)
        ops.axpy(-w, s, x)
        ops.copy(s, r)
        ops.axpy(-w, t, r)

        for it in range(1, maxiter):
            r_norm          = ops.norm2(r)
            if r_norm <= threshold:
                return SolverResult(iterations=it, residual_norm=r_norm / rhs_norm)

            rho_old         = rho
            rho             = ops.conj_dot(r0, r)
            if abs(rho) < rho_tol:
                # r0 has become orthogonal to r: restart from the true residual
                self._logger.debug(f"BiCGSTAB: restarting the shadow residual at iteration {it}", lvl=1)
                op._mul_vec(x, r)
                ops.axpy(-1.0, rhs, r)
                ops.copy(r, r0)
                rho         = ops.conj_dot(r, r)
                rho_tol     = rho.real * eps * eps

            if w == 0.0:
                raise BreakDown(it)
            beta            = (rho / rho_old) * (alpha / w)
            # y = r + beta * (y - w v)
            ops.axpy(-w, v, y)
            ops.axpby(1.0, r, beta, y)
            op._mul_vec(y, v)

            denom           = ops.conj_dot(r0, v)
            if abs(denom) <= 0.0:
                raise BreakDown(it)
            alpha           = rho / denom

            # s = r - alpha v, t = A s
            ops.copy(r, s)
            ops.axpy(-alpha, v, s)
            op._mul_vec(s, t)
            tt              = ops.conj_dot(t, t)
            if tt.real > 0.0:
                w = ops.conj_dot(t, s) / tt

            ops.axpy(-alpha, y, x)
            ops.axpy(-w, s, x)
            ops.copy(s, r)
            ops.axpy(-w, t, r)

        raise InsufficientIterNum(maxiter)

# -----------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------
