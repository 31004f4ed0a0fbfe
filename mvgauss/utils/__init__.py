"""
Utility functions for mvgauss.

matrix_ops provides the dense linear algebra (Cholesky factorization and
inversion, symmetric matrix-vector product, dot product) used by the models.
"""

from mvgauss.utils.matrix_ops import (
    cholesky_factor,
    cholesky_inverse,
    dot,
    symv,
)

__all__ = [
    'cholesky_factor',
    'cholesky_inverse',
    'symv',
    'dot',
]
