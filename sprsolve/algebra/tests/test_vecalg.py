"""
Tests of the vector algebra layer on every backend and scalar type.
"""

import pytest
import numpy as np

from sprsolve.algebra.vecalg import VecAlg, get_vecalg
from sprsolve.algebra.errors import DimensionMismatch

BACKENDS    = ['blas', 'numpy', 'numba']
DTYPES      = [np.float32, np.float64, np.complex64, np.complex128]

# --- Helper Functions ---

def make_ops(backend):
    """BLAS backend with cutoff 0 so that the BLAS routines are really called."""
    return VecAlg(backend, blas_cutoff=0)

def random_vec(n, dtype, seed):
    rng = np.random.default_rng(seed)
    v   = rng.standard_normal(n)
    if np.dtype(dtype).kind == 'c':
        v = v + 1j * rng.standard_normal(n)
    return v.astype(dtype)

def rtol_for(dtype):
    return 1e-4 if np.dtype(dtype) in (np.dtype(np.float32), np.dtype(np.complex64)) else 1e-12

def scalar_for(dtype):
    return (0.5 - 1.5j) if np.dtype(dtype).kind == 'c' else -1.25

# --- Tests ---

@pytest.mark.parametrize("backend", BACKENDS)
@pytest.mark.parametrize("dtype", DTYPES)
class TestVecAlgBackends:

    def test_dot_is_unconjugated(self, backend, dtype):
        ops     = make_ops(backend)
        x, y    = random_vec(37, dtype, 1), random_vec(37, dtype, 2)
        ref     = np.dot(x.astype(np.complex128), y.astype(np.complex128))
        assert np.isclose(complex(ops.dot(x, y)), ref, rtol=rtol_for(dtype))

    def test_conj_dot(self, backend, dtype):
        ops     = make_ops(backend)
        x, y    = random_vec(37, dtype, 3), random_vec(37, dtype, 4)
        ref     = np.vdot(x.astype(np.complex128), y.astype(np.complex128))
        assert np.isclose(complex(ops.conj_dot(x, y)), ref, rtol=rtol_for(dtype))

    def test_norm2(self, backend, dtype):
        ops     = make_ops(backend)
        x       = random_vec(51, dtype, 5)
        norm    = ops.norm2(x)
        assert isinstance(norm, float)
        assert np.isclose(norm, np.linalg.norm(x.astype(np.complex128)), rtol=rtol_for(dtype))

    def test_scale_in_place(self, backend, dtype):
        ops     = make_ops(backend)
        x       = random_vec(20, dtype, 6)
        ref     = x.astype(np.complex128) * scalar_for(dtype)
        ops.scale(scalar_for(dtype), x)
        assert x.dtype == np.dtype(dtype)
        assert np.allclose(x, ref, rtol=rtol_for(dtype))

    def test_rscale_in_place(self, backend, dtype):
        ops     = make_ops(backend)
        x       = random_vec(20, dtype, 7)
        ref     = x.astype(np.complex128) * 3.0
        ops.rscale(3.0, x)
        assert np.allclose(x, ref, rtol=rtol_for(dtype))

    def test_conj(self, backend, dtype):
        ops     = make_ops(backend)
        x       = random_vec(15, dtype, 8)
        out     = np.zeros_like(x)
        ops.conj(x, out)
        assert np.array_equal(out, np.conj(x))

    def test_axpy(self, backend, dtype):
        ops     = make_ops(backend)
        x, y    = random_vec(33, dtype, 9), random_vec(33, dtype, 10)
        a       = scalar_for(dtype)
        ref     = y.astype(np.complex128) + a * x.astype(np.complex128)
        ops.axpy(a, x, y)
        assert np.allclose(y, ref, rtol=rtol_for(dtype), atol=rtol_for(dtype))

    def test_axpby(self, backend, dtype):
        ops     = make_ops(backend)
        x, y    = random_vec(33, dtype, 11), random_vec(33, dtype, 12)
        a, b    = scalar_for(dtype), 2.0
        ref     = a * x.astype(np.complex128) + b * y.astype(np.complex128)
        ops.axpby(a, x, b, y)
        assert np.allclose(y, ref, rtol=rtol_for(dtype), atol=rtol_for(dtype))

    def test_copy_and_zero(self, backend, dtype):
        ops     = make_ops(backend)
        x, y    = random_vec(9, dtype, 13), np.zeros(9, dtype=dtype)
        ops.copy(x, y)
        assert np.array_equal(x, y)
        ops.zero(y)
        assert not np.any(y)

@pytest.mark.parametrize("backend", BACKENDS)
class TestVecAlgDimensions:

    @pytest.mark.parametrize("op", ['dot', 'conj_dot'])
    def test_reductions_reject_mismatch(self, backend, op):
        ops = make_ops(backend)
        with pytest.raises(DimensionMismatch):
            getattr(ops, op)(np.ones(4), np.ones(5))

    def test_axpy_rejects_mismatch_without_writing(self, backend):
        ops = make_ops(backend)
        y   = np.ones(5)
        with pytest.raises(DimensionMismatch):
            ops.axpy(2.0, np.ones(4), y)
        assert np.array_equal(y, np.ones(5))

    def test_axpby_and_conj_reject_mismatch(self, backend):
        ops = make_ops(backend)
        with pytest.raises(DimensionMismatch):
            ops.axpby(1.0, np.ones(3), 1.0, np.ones(2))
        with pytest.raises(DimensionMismatch):
            ops.conj(np.ones(3), np.ones(2))

def test_blas_cutoff_falls_back_to_numpy():
    """Short vectors on the BLAS backend give the same results as long ones."""
    ops = VecAlg('blas', blas_cutoff=1000)
    x   = random_vec(10, np.complex128, 14)
    y   = random_vec(10, np.complex128, 15)
    assert np.isclose(ops.conj_dot(x, y), np.vdot(x, y))
    ops.axpy(1.0 + 1.0j, x, y)

def test_get_vecalg_is_shared():
    assert get_vecalg('numba') is get_vecalg('numba')
    ops = VecAlg('numpy')
    assert get_vecalg(ops) is ops
    with pytest.raises(ValueError):
        VecAlg('fortran')
