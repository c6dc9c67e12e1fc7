'''
file:       sprsolve/algebra/linop.py

Linear operators consumed by the iterative solvers.

An operator only has to provide the product y = A x written into a caller owned
buffer, and the fused variant returning conj(x)^T (A x) computed in the same pass.
Each public product validates the buffer lengths; the underscore variants skip the
validation and are meant for the solvers, which check the dimensions once when a
`solve` call starts.

Provided operators:
    - CsrOperator       : scipy.sparse matrix stored in CSR, numba product kernels,
    - DenseOperator     : 2-D numpy array,
    - MatVecOperator    : any callable x -> A x (including scipy LinearOperator).
'''

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Tuple, Union

import numba
import numpy as np
import scipy.sparse as sps
import scipy.sparse.linalg as spsla

from .errors import DimensionMismatch, IncompatibleMatrixFormat
from .utils import inexact_dtype

# -----------------------------------------------------------------------------
#! CSR kernels
# -----------------------------------------------------------------------------

@numba.njit(cache=True)
def _csr_mul_vec_nb(indptr, indices, data, x, y):
    for i in range(y.shape[0]):
        acc = 0.0
        for k in range(indptr[i], indptr[i + 1]):
            acc += data[k] * x[indices[k]]
        y[i] = acc

@numba.njit(cache=True)
def _csr_mul_vec_dot_nb(indptr, indices, data, x, y):
    dot = 0.0
    for i in range(y.shape[0]):
        acc = 0.0
        for k in range(indptr[i], indptr[i + 1]):
            acc += data[k] * x[indices[k]]
        y[i] = acc
        dot += x[i].conjugate() * acc
    return dot

# -----------------------------------------------------------------------------
#! Abstract operator
# -----------------------------------------------------------------------------

class LinearOperator(ABC):
    '''
    Square linear operator of fixed dimension n acting on buffers of its dtype.

    Subclasses implement `_mul_vec` and may override `_mul_vec_dot` when the
    product and the dot can be fused.
    '''

    def __init__(self, shape: Tuple[int, int], dtype: Any):
        shape = tuple(int(s) for s in shape)
        if len(shape) != 2 or shape[0] != shape[1]:
            raise IncompatibleMatrixFormat(f"Not a square matrix: shape {shape}")
        self.shape  = shape
        self.dtype  = inexact_dtype(dtype)

    @property
    def size(self) -> int:
        return self.shape[0]

    def __repr__(self):
        return f"{self.__class__.__name__}(size={self.size}, dtype={self.dtype.name})"

    # -------------------------------------------------------------------------

    def _check(self, x: np.ndarray, y: np.ndarray):
        n = self.size
        if x.shape[0] != n or y.shape[0] != n:
            raise DimensionMismatch(f"Operator of size {n} applied to vectors of lengths "
                                    f"{x.shape[0]} -> {y.shape[0]}")

    def mul_vec(self, x: np.ndarray, y: np.ndarray):
        '''
        y = A x. `y` must not alias `x`.
        '''
        self._check(x, y)
        self._mul_vec(x, y)

    def mul_vec_dot(self, x: np.ndarray, y: np.ndarray):
        '''
        y = A x and return conj(x)^T y.
        '''
        self._check(x, y)
        return self._mul_vec_dot(x, y)

    # -------------------------------------------------------------------------

    @abstractmethod
    def _mul_vec(self, x: np.ndarray, y: np.ndarray):
        raise NotImplementedError

    def _mul_vec_dot(self, x: np.ndarray, y: np.ndarray):
        self._mul_vec(x, y)
        return np.vdot(x, y)

# -----------------------------------------------------------------------------
#! Concrete operators
# -----------------------------------------------------------------------------

class CsrOperator(LinearOperator):
    '''
    Sparse matrix in compressed sparse row storage.

    Any scipy.sparse matrix or array is accepted and converted to CSR with an
    inexact dtype (integer data are promoted to float64).
    '''

    def __init__(self, a: Any, dtype: Optional[Any] = None):
        if not sps.issparse(a):
            raise IncompatibleMatrixFormat(f"Expected a scipy.sparse matrix, got {type(a).__name__}")
        dtype       = inexact_dtype(a.dtype if dtype is None else dtype)
        super().__init__(a.shape, dtype)
        a           = sps.csr_matrix(a, dtype=self.dtype, copy=True)
        a.sum_duplicates()
        self.matrix  = a
        self.indptr  = np.ascontiguousarray(a.indptr)
        self.indices = np.ascontiguousarray(a.indices)
        self.data    = np.ascontiguousarray(a.data)

    @property
    def nnz(self) -> int:
        return self.data.shape[0]

    def diagonal(self) -> np.ndarray:
        return self.matrix.diagonal()

    def _mul_vec(self, x, y):
        _csr_mul_vec_nb(self.indptr, self.indices, self.data, x, y)

    def _mul_vec_dot(self, x, y):
        return _csr_mul_vec_dot_nb(self.indptr, self.indices, self.data, x, y)

class DenseOperator(LinearOperator):
    '''
    Dense matrix, products through `np.dot` into the output buffer.
    '''

    def __init__(self, a: Any, dtype: Optional[Any] = None):
        a           = np.asarray(a)
        if a.ndim != 2:
            raise IncompatibleMatrixFormat(f"Expected a 2-D array, got {a.ndim} dimensions")
        super().__init__(a.shape, a.dtype if dtype is None else dtype)
        self.matrix = np.ascontiguousarray(a, dtype=self.dtype)

    def _mul_vec(self, x, y):
        np.dot(self.matrix, x, out=y)

class MatVecOperator(LinearOperator):
    '''
    Matrix-free operator defined by a function x -> A x.
    The result is copied into the output buffer.
    '''

    def __init__(self, matvec: Callable[[np.ndarray], np.ndarray], shape: Tuple[int, int], dtype: Any = np.float64):
        if not callable(matvec):
            raise IncompatibleMatrixFormat("matvec must be callable")
        super().__init__(shape, dtype)
        self.matvec = matvec

    def _mul_vec(self, x, y):
        y[...] = np.ravel(self.matvec(x))

# -----------------------------------------------------------------------------
#! Conversion
# -----------------------------------------------------------------------------

def aslinearoperator(a          : Union[LinearOperator, Any],
                     dtype      : Optional[Any]                 = None,
                     shape      : Optional[Tuple[int, int]]     = None) -> LinearOperator:
    """
    Wrap `a` into a `LinearOperator`.

    Parameters
    ----------
    a : LinearOperator, scipy.sparse matrix, array-like, scipy LinearOperator or callable
        The operator. Callables need `shape`.
    dtype : optional
        Scalar type of the operator. Defaults to the dtype of `a`.
    shape : tuple, optional
        Shape of a matrix-free callable operator.

    Raises
    ------
    IncompatibleMatrixFormat
        If `a` is not square or cannot be interpreted as an operator.
    """
    if isinstance(a, LinearOperator):
        return a
    if sps.issparse(a):
        return CsrOperator(a, dtype=dtype)
    if isinstance(a, spsla.LinearOperator):
        return MatVecOperator(a.matvec, a.shape, a.dtype if dtype is None else dtype)
    if callable(a):
        if shape is None:
            raise IncompatibleMatrixFormat("A matrix-free operator needs an explicit shape")
        return MatVecOperator(a, shape, np.float64 if dtype is None else dtype)
    return DenseOperator(a, dtype=dtype)
