'''
Provides the vector-algebra layer consumed by the iterative solvers: dot products,
norms, scalings and the BLAS-style accumulations, all working in place on
equal-length 1-D buffers.

The same operations are available on three backends:
    - 'blas'  : typed BLAS routines from `scipy.linalg.blas`, the s/d/c/z variant
                being picked from the dtype of the buffers. Short vectors
                (below `SPRSOLVE_BLAS_CUTOFF`) go through numpy instead,
    - 'numpy' : vectorised numpy expressions,
    - 'numba' : plain loops compiled with `numba.njit`.

The solvers only talk to a `VecAlg` instance and never know which backend is active.

File:       sprsolve/algebra/vecalg.py
Desc:       Backend-agnostic vector operations for the Krylov solvers.
'''

from typing import Any, Callable, Dict, Optional, Tuple, Union

import numba
import numpy as np
from scipy.linalg.blas import get_blas_funcs

from .errors import DimensionMismatch
from .utils import BACKENDS, PY_BACKEND, PY_BLAS_CUTOFF

Scalar = Union[float, complex, np.number]

# ============================================================================
#! Numba kernels
# ============================================================================

@numba.njit(cache=True)
def _dot_nb(x, y):
    acc = 0.0
    for i in range(x.shape[0]):
        acc += x[i] * y[i]
    return acc

@numba.njit(cache=True)
def _conj_dot_nb(x, y):
    acc = 0.0
    for i in range(x.shape[0]):
        acc += x[i].conjugate() * y[i]
    return acc

@numba.njit(cache=True)
def _norm2_nb(x):
    acc = 0.0
    for i in range(x.shape[0]):
        acc += x[i].real * x[i].real + x[i].imag * x[i].imag
    return np.sqrt(acc)

@numba.njit(cache=True)
def _scale_nb(a, x):
    for i in range(x.shape[0]):
        x[i] *= a

@numba.njit(cache=True)
def _conj_nb(x, out):
    for i in range(x.shape[0]):
        out[i] = x[i].conjugate()

@numba.njit(cache=True)
def _axpy_nb(a, x, y):
    for i in range(x.shape[0]):
        y[i] += a * x[i]

@numba.njit(cache=True)
def _axpby_nb(a, x, b, y):
    for i in range(x.shape[0]):
        y[i] = a * x[i] + b * y[i]

# ============================================================================
#! Helpers
# ============================================================================

def _check_len(op: str, x: np.ndarray, y: np.ndarray):
    if x.shape[0] != y.shape[0]:
        raise DimensionMismatch(f"{op}: vector lengths differ ({x.shape[0]} != {y.shape[0]})")

# ============================================================================
#! Vector algebra
# ============================================================================

class VecAlg:
    """
    Vector operations bound to one backend.

    All operations act on 1-D arrays. Binary operations require equal lengths
    and raise `DimensionMismatch` otherwise; results that are vectors are written
    into the output argument, never returned as new arrays.

    Example:
        >>> ops = VecAlg('numba')
        >>> x   = np.ones(10)
        >>> ops.axpy(2.0, x, x)
        >>> ops.norm2(x)
    """

    def __init__(self, backend: Optional[str] = None, blas_cutoff: Optional[int] = None):
        """
        Args:
            backend:
                One of 'blas', 'numpy', 'numba'. Defaults to `SPRSOLVE_BACKEND`.
            blas_cutoff:
                Vector length from which the 'blas' backend calls BLAS.
                Defaults to `SPRSOLVE_BLAS_CUTOFF`.
        """
        backend = (backend or PY_BACKEND).lower()
        if backend not in BACKENDS:
            raise ValueError(f"Unknown vector algebra backend: {backend}")
        self.backend_name                           = backend
        self.cutoff                                 = PY_BLAS_CUTOFF if blas_cutoff is None else int(blas_cutoff)
        self._blas_cache : Dict[Tuple[str, str], Callable] = {}

    def __repr__(self):
        return f"VecAlg(backend={self.backend_name!r})"

    # ------------------------------------------------------------------------

    def _use_blas(self, x: np.ndarray) -> bool:
        return self.backend_name == 'blas' and x.shape[0] >= self.cutoff

    def _use_numba(self) -> bool:
        return self.backend_name == 'numba'

    def _blas(self, name: str, dtype: np.dtype) -> Callable:
        """
        BLAS routine `name` for the given dtype. Real types have no separate
        conjugated/unconjugated dot, so 'dotu' and 'dotc' collapse to 'dot'.
        """
        dtype   = np.dtype(dtype)
        key     = (name, dtype.char)
        func    = self._blas_cache.get(key)
        if func is None:
            if name in ('dotu', 'dotc') and dtype.kind != 'c':
                name = 'dot'
            func                    = get_blas_funcs(name, dtype=dtype)
            self._blas_cache[key]   = func
        return func

    # ------------------------------------------------------------------------
    #! Reductions
    # ------------------------------------------------------------------------

    def dot(self, x: np.ndarray, y: np.ndarray) -> Scalar:
        """
        x^T y. No conjugation is taken for complex vectors.
        """
        _check_len('dot', x, y)
        if self._use_blas(x):
            return self._blas('dotu', np.result_type(x, y))(x, y)
        if self._use_numba():
            return _dot_nb(x, y)
        return np.dot(x, y)

    def conj_dot(self, x: np.ndarray, y: np.ndarray) -> Scalar:
        """
        x^H y, conjugate-linear in the first argument and linear in the second.
        """
        _check_len('conj_dot', x, y)
        if self._use_blas(x):
            return self._blas('dotc', np.result_type(x, y))(x, y)
        if self._use_numba():
            return _conj_dot_nb(x, y)
        return np.vdot(x, y)

    def norm2(self, x: np.ndarray) -> float:
        """Euclidean norm, always real."""
        if self._use_blas(x):
            return float(self._blas('nrm2', x.dtype)(x))
        if self._use_numba():
            return float(_norm2_nb(x))
        return float(np.linalg.norm(x))

    # ------------------------------------------------------------------------
    #! In-place updates
    # ------------------------------------------------------------------------

    def scale(self, a: Scalar, x: np.ndarray):
        """x = a * x"""
        if self._use_blas(x):
            out = self._blas('scal', x.dtype)(a, x)
            if out is not x:
                x[...] = out
        elif self._use_numba():
            _scale_nb(a, x)
        else:
            np.multiply(x, a, out=x)

    def rscale(self, a: float, x: np.ndarray):
        """x = a * x with a real factor, also for complex x."""
        self.scale(float(np.real(a)), x)

    def conj(self, x: np.ndarray, out: np.ndarray):
        """out = conj(x)"""
        _check_len('conj', x, out)
        if self._use_numba():
            _conj_nb(x, out)
        else:
            np.conjugate(x, out=out)

    def axpy(self, a: Scalar, x: np.ndarray, y: np.ndarray):
        """y = y + a * x"""
        _check_len('axpy', x, y)
        if self._use_blas(x):
            out = self._blas('axpy', y.dtype)(x, y, a=a)
            if out is not y:
                y[...] = out
        elif self._use_numba():
            _axpy_nb(a, x, y)
        else:
            y += a * x

    def axpby(self, a: Scalar, x: np.ndarray, b: Scalar, y: np.ndarray):
        """y = a * x + b * y"""
        _check_len('axpby', x, y)
        if self._use_blas(x):
            # no axpby in reference BLAS: scal followed by axpy
            self.scale(b, y)
            self.axpy(a, x, y)
        elif self._use_numba():
            _axpby_nb(a, x, b, y)
        else:
            np.multiply(y, b, out=y)
            y += a * x

    def copy(self, x: np.ndarray, y: np.ndarray):
        """y = x"""
        _check_len('copy', x, y)
        np.copyto(y, x)

    @staticmethod
    def zero(x: np.ndarray):
        x.fill(0)

# ============================================================================
#! Shared instances
# ============================================================================

_VECALG_INSTANCES : Dict[str, VecAlg] = {}

def get_vecalg(backend: Union[str, VecAlg, None] = None) -> VecAlg:
    """
    Get the shared vector algebra instance for a backend.

    Args:
        backend:
            'blas', 'numpy', 'numba', an existing `VecAlg` (returned as is),
            or None for the configured default.

    Example:
        >>> ops = get_vecalg('numpy')
        >>> ops.conj_dot(x, y)
    """
    if isinstance(backend, VecAlg):
        return backend
    name = (backend or PY_BACKEND).lower()
    if name not in _VECALG_INSTANCES:
        _VECALG_INSTANCES[name] = VecAlg(name)
    return _VECALG_INSTANCES[name]
