'''
file:       sprsolve/algebra/solver.py

Defines the interface and helper structures shared by the iterative solvers for

$$
Ax = b,
$$

where A is a square linear operator of fixed dimension n.

A solver is built once for an operator and then `solve`d any number of times.
Every instance owns a `ScratchArena`, a single buffer split into windows of
length n, so that repeated calls do not allocate working vectors. The windows
are addressed by role names; a solver may rotate the roles between iterations,
which only changes the bookkeeping and never copies vector contents.
'''

from abc import ABC, abstractmethod
from enum import Enum, auto, unique
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .errors import (
    SolverErrorMsg, SolverError, DimensionMismatch,
    IncompatibleMatrixFormat, BreakDown, InsufficientIterNum
)
from .linop import LinearOperator, aslinearoperator
from .vecalg import VecAlg, get_vecalg
from ..common.flog import Logger, get_global_logger

# -----------------------------------------------------------------------------

@unique
class SolverType(Enum):
    """
    Enumeration class for the different types of solvers.
    """
    BICGSTAB        = auto() # Stabilized biconjugate gradient
    MINRES          = auto() # Minimum residual, symmetric/Hermitian operators
    GAUSS_SEIDEL    = auto() # Gauss-Seidel relaxation, CSR operators

class SolverResult(NamedTuple):
    '''
    Result of a successful `solve` call. Unpacks as (iterations, residual_norm).

    Attributes:
        iterations (int):
            The number of iterations performed.
        residual_norm (float):
            The relative residual ||Ax - b|| / ||b|| reached.
    '''
    iterations      : int
    residual_norm   : float

# -----------------------------------------------------------------------------
#! Scratch memory
# -----------------------------------------------------------------------------

class ScratchArena:
    '''
    Fixed working memory of a solver: one flat buffer of `len(roles) * n`
    scalars, split into windows of length n addressed by role names.

    The role -> window map is a permutation, so two roles never share a window.

    Example:
        >>> arena = ScratchArena(4, np.float64, ('v_old', 'v', 'v_new'))
        >>> arena.rotate('v_old', 'v', 'v_new')     # v_old <- v, v <- v_new, v_new <- v_old
    '''

    def __init__(self, n: int, dtype: Any, roles: Sequence[str]):
        if len(set(roles)) != len(roles):
            raise ValueError(f"Duplicate roles in {roles}")
        self.n          = int(n)
        self.dtype      = np.dtype(dtype)
        self.roles      = tuple(roles)
        self.buffer     = np.zeros(len(self.roles) * self.n, dtype=self.dtype)
        self._windows   : List[np.ndarray]  = [self.buffer[i * self.n:(i + 1) * self.n] for i in range(len(self.roles))]
        self._slots     : Dict[str, int]    = {}
        self.reset()

    def __len__(self):
        return len(self.roles)

    def reset(self):
        '''Restore the initial role -> window assignment.'''
        self._slots = {role: i for i, role in enumerate(self.roles)}

    def slot(self, role: str) -> int:
        return self._slots[role]

    def view(self, role: str) -> np.ndarray:
        return self._windows[self._slots[role]]

    def views(self, *roles: str) -> Tuple[np.ndarray, ...]:
        return tuple(self._windows[self._slots[r]] for r in roles)

    def rotate(self, *roles: str):
        '''
        Each role takes over the window of the role following it, the last role
        takes the window of the first one.
        '''
        slots = [self._slots[r] for r in roles]
        for role, slot in zip(roles, slots[1:] + slots[:1]):
            self._slots[role] = slot

    def zero(self, *roles: str):
        for role in roles:
            self._windows[self._slots[role]].fill(0)

# -----------------------------------------------------------------------------
#! General Solver Abstract Base Class
# -----------------------------------------------------------------------------

class Solver(ABC):
    '''
    Abstract base class for iterative solvers of

    $$
    Ax = b.
    $$

    Concrete solvers declare the arena roles they need and implement `_solve`,
    which runs on inputs already validated by `solve`.

    A solver instance is not reentrant: the arena is shared by all calls, so
    concurrent `solve` calls on the same instance must be serialized by the caller.
    '''
    _solver_type    : Optional[SolverType]  = None  # To be set by concrete subclasses
    _roles          : Tuple[str, ...]       = ()    # Arena windows of the solver

    def __init__(self,
                a               : Any,
                size            : Optional[int]     = None,
                *,
                backend         : Any               = None,
                dtype           : Optional[Any]     = None,
                eps             : float             = 1e-8,
                maxiter         : int               = 1000,
                logger          : Optional[Logger]  = None):
        '''
        Binds the solver to an operator and allocates its working memory.

        Args:
            a:
                The operator: a `LinearOperator`, a scipy.sparse matrix, a 2-D array
                or a scipy LinearOperator (see `aslinearoperator`).
            size (int, optional):
                Expected system size. Must match the operator dimension.
            backend:
                Vector algebra backend ('blas', 'numpy', 'numba') or a `VecAlg`.
            dtype (optional):
                Scalar type, defaults to the operator's.
            eps (float):
                Default tolerance used when `solve` gets none.
            maxiter (int):
                Default iteration budget used when `solve` gets none.
            logger (Logger, optional):
                Logger, defaults to the global one.

        Raises:
            IncompatibleMatrixFormat:
                If the operator is not square or its size differs from `size`.
        '''
        self._op        : LinearOperator    = aslinearoperator(a, dtype=dtype)
        if size is not None and int(size) != self._op.size:
            raise IncompatibleMatrixFormat(f"Operator of size {self._op.size} does not match the requested size {size}")

        self._size                          = self._op.size
        self._dtype                         = self._op.dtype
        self._ops       : VecAlg            = get_vecalg(backend)
        self._arena                         = ScratchArena(self._size, self._dtype, self._roles)
        self._logger    : Logger            = logger if logger is not None else get_global_logger()

        self._default_eps                   = eps
        self._default_maxiter               = maxiter

        # Store results from last solve call
        self._last_iterations   : Optional[int]     = None
        self._last_residual_norm: Optional[float]   = None

        self._logger.debug(f"{self.__class__.__name__}: n={self._size}, dtype={self._dtype.name}, "
                           f"operator={self._op.__class__.__name__}, backend={self._ops.backend_name}")

    # -------------------------------------------------------------------------

    @property
    def solver_type(self) -> Optional[SolverType]:
        return self._solver_type

    @property
    def operator(self) -> LinearOperator:
        return self._op

    @property
    def size(self) -> int:
        return self._size

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def arena(self) -> ScratchArena:
        return self._arena

    @property
    def last_iterations(self) -> Optional[int]:
        return self._last_iterations

    @property
    def last_residual_norm(self) -> Optional[float]:
        return self._last_residual_norm

    # -------------------------------------------------------------------------

    def _check_inputs(self, rhs: Any, x: Any) -> np.ndarray:
        '''
        Validates the call before anything is written. Returns rhs as a
        contiguous array of the solver dtype.
        '''
        n   = self._size
        rhs = np.asarray(rhs)
        if rhs.ndim != 1:
            raise IncompatibleMatrixFormat(f"rhs must be 1-D, got shape {rhs.shape}")
        if rhs.shape[0] != n:
            raise IncompatibleMatrixFormat(f"Input vec dimension {rhs.shape[0]} doesn't match the matrix size {n}")
        if not isinstance(x, np.ndarray) or x.ndim != 1:
            raise IncompatibleMatrixFormat("x must be a 1-D numpy array")
        if x.shape[0] != n:
            raise IncompatibleMatrixFormat(f"Input and output vec dimension do not match ({n} != {x.shape[0]})")
        if x.dtype != self._dtype:
            raise IncompatibleMatrixFormat(f"x has dtype {x.dtype}, the solver works in {self._dtype}")
        if not (x.flags.c_contiguous and x.flags.writeable):
            raise IncompatibleMatrixFormat("x must be a writeable contiguous array")
        if not np.can_cast(rhs.dtype, self._dtype, casting='same_kind'):
            raise IncompatibleMatrixFormat(f"rhs of dtype {rhs.dtype} cannot be cast to {self._dtype}")
        return np.ascontiguousarray(rhs, dtype=self._dtype)

    def solve(self,
            rhs     : Any,
            x       : np.ndarray,
            maxiter : Optional[int]     = None,
            tol     : Optional[float]   = None) -> SolverResult:
        '''
        Solves A x = rhs in place, using the content of `x` as initial guess.

        Args:
            rhs:
                Right-hand side of length n.
            x (np.ndarray):
                Initial guess on input, solution on output. Must be a writeable
                contiguous 1-D array of the solver dtype.
            maxiter (int, optional):
                Maximum number of iterations.
            tol (float, optional):
                Relative tolerance, convergence when ||Ax - rhs|| <= tol ||rhs||.

        Returns:
            SolverResult:
                (iterations, relative residual).

        Raises:
            IncompatibleMatrixFormat:
                Wrong lengths or dtypes; `x` is left untouched.
            BreakDown:
                Unrecoverable breakdown; `x` holds the last valid iterate.
            InsufficientIterNum:
                Budget exhausted; `x` holds the last iterate.
        '''
        maxiter = self._default_maxiter if maxiter is None else int(maxiter)
        tol     = self._default_eps if tol is None else float(tol)
        if maxiter < 0 or not tol >= 0.0:
            raise SolverError(SolverErrorMsg.INVALID_INPUT, f"Invalid maxiter={maxiter} or tol={tol}")

        rhs     = self._check_inputs(rhs, x)
        self._arena.reset()
        try:
            result = self._solve(rhs, x, maxiter, tol)
        except BreakDown as e:
            self._logger.error(f"{self.__class__.__name__}: {e.message}")
            raise
        except InsufficientIterNum as e:
            self._logger.warning(f"{self.__class__.__name__}: {e.message}")
            raise

        self._last_iterations       = result.iterations
        self._last_residual_norm    = result.residual_norm
        self._logger.debug(f"{self.__class__.__name__}: converged in {result.iterations} iterations, "
                           f"relative residual {result.residual_norm:.3e}")
        return result

    @abstractmethod
    def _solve(self, rhs: np.ndarray, x: np.ndarray, maxiter: int, tol: float) -> SolverResult:
        '''
        Algorithm body. Inputs are validated, the arena roles are reset.
        '''
        raise NotImplementedError(str(SolverErrorMsg.METHOD_NOT_IMPL))

    def __repr__(self):
        return f"{self.__class__.__name__}(n={self._size}, dtype={self._dtype.name}, backend={self._ops.backend_name})"

__all__ = [
    'SolverType', 'SolverResult', 'ScratchArena', 'Solver',
    'SolverErrorMsg', 'SolverError', 'DimensionMismatch',
    'IncompatibleMatrixFormat', 'BreakDown', 'InsufficientIterNum',
]
