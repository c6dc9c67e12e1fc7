'''
Solver module for the iterative sparse solvers.

Initialization file for the solvers module. Exports solver classes,
the SolverType enum, and the choose_solver factory function.
----------------------------------------------------------------
File        : sprsolve/algebra/solvers/__init__.py
Description : Factory choosing and instantiating a solver from a name, an integer
              code, a SolverType member or a solver class. The solver classes are
              imported lazily, on first request.
----------------------------------------------------------------
'''

import importlib
from typing import Any, Optional, Type, Union

from ..solver import (
    Solver, SolverResult, SolverType, ScratchArena,
    SolverError, SolverErrorMsg, IncompatibleMatrixFormat, BreakDown, InsufficientIterNum
)

# -----------------------------------------------------------------------------
# Lazy Loading Configuration
# -----------------------------------------------------------------------------

_LAZY_MODULES = {
    'BiCGStabSolver'        : '.bicgstab',
    'MinresSolver'          : '.minres',
    'GaussSeidelSolver'     : '.gauss_seidel',
}

_TYPE_TO_CLASS = {
    SolverType.BICGSTAB     : 'BiCGStabSolver',
    SolverType.MINRES       : 'MinresSolver',
    SolverType.GAUSS_SEIDEL : 'GaussSeidelSolver',
}

# -----------------------------------------------------------------------------

def _resolve_class(solver_id: Union[str, int, SolverType, Type[Solver]]) -> Type[Solver]:
    if isinstance(solver_id, type) and issubclass(solver_id, Solver):
        return solver_id

    solver_type = None
    if isinstance(solver_id, SolverType):
        solver_type = solver_id
    elif isinstance(solver_id, int):
        solver_type = SolverType(solver_id)
    elif isinstance(solver_id, str):
        key = solver_id.upper().replace('-', '_')
        if key in SolverType.__members__:
            solver_type = SolverType[key]
        elif solver_id in _LAZY_MODULES:
            return __getattr__(solver_id)

    if solver_type is None:
        raise ValueError(f"Unknown solver identifier: {solver_id}")
    return __getattr__(_TYPE_TO_CLASS[solver_type])

def choose_solver(solver_id     : Union[str, int, SolverType, Type[Solver]],
                a               : Any,
                size            : Optional[int] = None,
                **kwargs) -> Solver:
    """
    Factory function to select and instantiate a solver based on identifier.
    Uses lazy loading to import specific solver classes only when requested.

    Parameters
    ----------
    solver_id : Union[str, int, SolverType, Type[Solver]]
        Identifier for the solver: 'bicgstab', 'minres', 'gauss_seidel', the
        integer value of a SolverType, a SolverType member or a Solver subclass.
    a : Any
        The operator, see `sprsolve.algebra.linop.aslinearoperator`.
    size : int, optional
        Expected system size.
    **kwargs
        Passed on to the solver constructor (backend, dtype, eps, maxiter, logger).

    Returns
    -------
    Solver
        An instance of the selected solver class.

    Examples
    --------
    >>> solver = choose_solver("bicgstab", a, backend="numba")
    >>> solver = choose_solver(SolverType.MINRES, a, size=a.shape[0])
    """
    target_class = _resolve_class(solver_id)
    return target_class(a, size, **kwargs)

# -----------------------------------------------------------------------------
# Module-level __getattr__ for Lazy Imports
# -----------------------------------------------------------------------------

def __getattr__(name):
    """
    Lazy import of solver classes when accessed directly (e.g. solvers.MinresSolver).
    """
    if name in _LAZY_MODULES:
        module = importlib.import_module(_LAZY_MODULES[name], package=__name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'Solver', 'SolverResult', 'SolverType', 'ScratchArena', 'SolverError', 'SolverErrorMsg',
    'IncompatibleMatrixFormat', 'BreakDown', 'InsufficientIterNum', 'choose_solver',
    'BiCGStabSolver', 'MinresSolver', 'GaussSeidelSolver'
]
