'''
file:       sprsolve/algebra/errors.py

Error taxonomy shared by the vector algebra, the linear operators and the solvers.

Every failure of a `solve` call is one of three terminal errors:
    - IncompatibleMatrixFormat  : dimension mismatch or wrong structure, raised before `x` is touched,
    - BreakDown                 : unrecoverable zero denominator, `x` holds the last valid iterate,
    - InsufficientIterNum       : iteration budget exhausted, `x` holds the last iterate.
'''

from enum import Enum
from typing import Optional

# -----------------------------------------------------------------------------
#! Errors
# -----------------------------------------------------------------------------

class SolverErrorMsg(Enum):
    '''
    Enumeration class for solver error messages.
    '''
    DIM_MISMATCH        = 106
    INCOMPATIBLE_FORMAT = 114
    BREAKDOWN           = 115
    INSUFFICIENT_ITER   = 116
    INVALID_INPUT       = 112
    METHOD_NOT_IMPL     = 109

    def __str__(self):
        return self.name.replace('_', ' ').title()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}: '{str(self)}'>"

class SolverError(Exception):
    '''
    Base class for exceptions in the solver module.
    '''
    def __init__(self, code: SolverErrorMsg, message: Optional[str] = None):
        self.code       = code
        self.message    = message if message else str(code)
        super().__init__(self.message)

    def __str__(self):
        return f"[SolverError {self.code.name} ({self.code.value})]: {self.message}"

    def __repr__(self):
        return self.__str__()

class DimensionMismatch(SolverError):
    '''
    Raised by the vector algebra and by the checked operator products
    when the buffers do not have matching lengths.
    '''
    def __init__(self, message: str):
        super().__init__(SolverErrorMsg.DIM_MISMATCH, message)

class IncompatibleMatrixFormat(SolverError):
    '''
    The operator or the vectors handed to a solver do not fit together
    (not square, wrong length, wrong dtype, unsupported storage).
    '''
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(SolverErrorMsg.INCOMPATIBLE_FORMAT, detail)

class BreakDown(SolverError):
    '''
    An unrecoverable zero denominator was met at the given iteration.
    '''
    def __init__(self, iteration: int):
        self.iteration = iteration
        super().__init__(SolverErrorMsg.BREAKDOWN, f"Breakdown at iteration {iteration}")

class InsufficientIterNum(SolverError):
    '''
    The iteration budget was exhausted before the tolerance was met.
    '''
    def __init__(self, max_iter: int):
        self.max_iter = max_iter
        super().__init__(SolverErrorMsg.INSUFFICIENT_ITER, f"Not converged within {max_iter} iterations")
