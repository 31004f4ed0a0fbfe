# mvgauss/utils/matrix_ops.py
"""
Matrix Operations Module

Dense linear algebra used by the distribution models: in-place Cholesky
factorization and Cholesky-based inversion of symmetric positive definite
matrices, the symmetric matrix-vector product and the vector dot product.
All routines work on row-major float64 NumPy buffers indexed as ``A[i, j]``
and call SciPy's LAPACK/BLAS wrappers directly.

Functions:
    cholesky_factor: Lower Cholesky factorization, in place
    cholesky_inverse: Inverse of a matrix from its lower Cholesky factor, in place
    symv: Symmetric matrix-vector product reading the lower triangle
    dot: Vector dot product
"""

import logging
from typing import Optional

import numpy as np
from scipy.linalg import blas, lapack

from mvgauss.core.types import Matrix, Vector, TriangularMatrix
from mvgauss.core.exceptions import raise_dimension_error, raise_numeric_error

# Set up module-level logger
logger = logging.getLogger("mvgauss.utils.matrix_ops")


def _check_square_buffer(a: np.ndarray, name: str) -> None:
    if not isinstance(a, np.ndarray) or a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise_dimension_error(
            "Input must be a square matrix",
            array_name=name,
            expected_shape="(n, n)",
            actual_shape=getattr(a, "shape", None)
        )
    if a.dtype != np.float64 or not a.flags.writeable:
        raise TypeError(f"{name} must be a writeable float64 array for in-place operation")


def cholesky_factor(a: Matrix) -> int:
    """
    Factor a symmetric positive definite matrix as ``L @ L.T``, in place.

    Only the lower triangle of ``a`` is read. On return ``a`` holds the lower
    triangular factor ``L`` with its strict upper triangle set to zero.

    Args:
        a: Square float64 matrix, overwritten with its Cholesky factor

    Returns:
        The LAPACK status code (always 0 on return)

    Raises:
        DimensionError: If ``a`` is not square
        NumericError: If ``a`` is not positive definite

    Examples:
        >>> import numpy as np
        >>> from mvgauss.utils.matrix_ops import cholesky_factor
        >>> A = np.array([[4.0, 2.0], [2.0, 2.0]])
        >>> cholesky_factor(A)
        0
        >>> A
        array([[2., 0.],
               [1., 1.]])
    """
    _check_square_buffer(a, "a")

    c, info = lapack.dpotrf(a, lower=1, clean=1)

    if info > 0:
        raise_numeric_error(
            "Matrix is not positive definite",
            operation="cholesky_factor",
            values=a,
            error_type="not positive definite",
            details=f"The leading minor of order {info} is not positive"
        )
    if info < 0:
        raise_numeric_error(
            "Illegal argument passed to the Cholesky factorization",
            operation="cholesky_factor",
            error_type="illegal argument",
            details=f"LAPACK dpotrf argument {-info} had an illegal value"
        )

    a[...] = c
    return info


def cholesky_inverse(a: TriangularMatrix) -> int:
    """
    Replace a lower Cholesky factor ``L`` by ``(L @ L.T)^{-1}``, in place.

    LAPACK only fills the lower triangle of the inverse; it is mirrored so that
    ``a`` holds the full symmetric inverse on return.

    Args:
        a: Square float64 matrix holding a lower Cholesky factor

    Returns:
        The LAPACK status code (always 0 on return)

    Raises:
        DimensionError: If ``a`` is not square
        NumericError: If the factor is singular
    """
    _check_square_buffer(a, "a")

    inv, info = lapack.dpotri(a, lower=1)

    if info != 0:
        raise_numeric_error(
            "Failed to invert matrix from its Cholesky factor",
            operation="cholesky_inverse",
            values=a,
            error_type="singular factor" if info > 0 else "illegal argument",
            details=f"LAPACK dpotri returned info={info}"
        )

    lower = np.tril(inv)
    a[...] = lower + np.tril(lower, -1).T
    return info


def symv(alpha: float,
         a: Matrix,
         x: Vector,
         beta: float = 0.0,
         y: Optional[Vector] = None) -> Vector:
    """
    Compute ``alpha * A @ x + beta * y`` for symmetric ``A``.

    Only the lower triangle of ``a`` is referenced.

    Args:
        alpha: Scale applied to ``A @ x``
        a: Square symmetric matrix
        x: Vector of length n
        beta: Scale applied to ``y``
        y: Optional vector of length n; not modified

    Returns:
        The resulting vector

    Raises:
        DimensionError: If shapes are incompatible
    """
    a = np.asarray(a, dtype=np.float64)
    x = np.asarray(x, dtype=np.float64)

    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise_dimension_error(
            "Input must be a square matrix",
            array_name="a",
            expected_shape="(n, n)",
            actual_shape=a.shape
        )
    n = a.shape[0]
    if x.shape != (n,):
        raise_dimension_error(
            "Vector length does not match matrix dimension",
            array_name="x",
            expected_shape=(n,),
            actual_shape=x.shape
        )

    if y is None:
        return blas.dsymv(alpha, a, x, beta=0.0, lower=1)

    y = np.array(y, dtype=np.float64)
    if y.shape != (n,):
        raise_dimension_error(
            "Vector length does not match matrix dimension",
            array_name="y",
            expected_shape=(n,),
            actual_shape=y.shape
        )
    return blas.dsymv(alpha, a, x, beta=beta, y=y, lower=1)


def dot(x: Vector, y: Vector) -> float:
    """
    Dot product of two vectors of equal length.

    Raises:
        DimensionError: If the vectors differ in length
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.ndim != 1 or x.shape != y.shape:
        raise_dimension_error(
            "Vectors must be one-dimensional and of equal length",
            array_name="y",
            expected_shape=x.shape,
            actual_shape=y.shape
        )
    return float(blas.ddot(x, y))
