# file        :   sprsolve/algebra/utils.py

'''
Configuration and scalar-type helpers of the algebra layer.

- The environment variables below are read once at import and fix the default
vector-algebra backend and the BLAS cutoff length.

- The dtype helpers describe the scalar field of a linear system: the four
supported inexact types (real/complex x single/double precision), the
associated magnitude type and its machine epsilon.
'''

import os
from typing import Any

import numpy as np

from .errors import IncompatibleMatrixFormat

# ---------------------------------------------------------------------
#! Enviroment variable names
# ---------------------------------------------------------------------

PY_BACKEND_STR          : str               = "SPRSOLVE_BACKEND"
PY_BLAS_CUTOFF_STR      : str               = "SPRSOLVE_BLAS_CUTOFF"

# ---------------------------------------------------------------------

BACKENDS                : tuple             = ("blas", "numpy", "numba")
DEFAULT_BACKEND         : str               = "blas"
DEFAULT_BLAS_CUTOFF     : int               = 64

PY_BACKEND              : str               = os.environ.get(PY_BACKEND_STR, DEFAULT_BACKEND).lower()
if PY_BACKEND not in BACKENDS:
    raise ValueError(f"{PY_BACKEND_STR}={PY_BACKEND!r} is not one of {BACKENDS}")

PY_BLAS_CUTOFF          : int               = int(os.environ.get(PY_BLAS_CUTOFF_STR, str(DEFAULT_BLAS_CUTOFF)))

SUPPORTED_DTYPES        : tuple             = (np.float32, np.float64, np.complex64, np.complex128)

# ---------------------------------------------------------------------
#! Scalar field helpers
# ---------------------------------------------------------------------

def inexact_dtype(dtype: Any) -> np.dtype:
    """
    Map a dtype onto one of the supported scalar fields.

    Integer and boolean data are promoted to float64, the four inexact types
    are kept as they are.

    Raises
    ------
    IncompatibleMatrixFormat
        For any other dtype (float16, longdouble, object, ...).
    """
    try:
        dtype = np.dtype(dtype)
    except TypeError as e:
        raise IncompatibleMatrixFormat(f"Not a scalar type: {dtype!r}") from e
    if dtype.kind in "biu":
        return np.dtype(np.float64)
    if dtype.type not in SUPPORTED_DTYPES:
        raise IncompatibleMatrixFormat(f"Unsupported scalar type {dtype}, expected one of "
                                       f"{[np.dtype(t).name for t in SUPPORTED_DTYPES]}")
    return dtype

def machine_eps(dtype: Any) -> float:
    """Machine epsilon of the magnitude type."""
    return float(np.finfo(np.dtype(dtype)).eps)
