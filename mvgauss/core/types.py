# mvgauss/core/types.py

"""
Core type annotations for mvgauss.

Type aliases shared by the linear algebra helpers, the feature sources and
the distribution models. They document intent (a covariance matrix versus an
arbitrary matrix) rather than enforce shapes at runtime.
"""

from typing import Any, Dict, Literal, Sequence, Tuple, Union

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array

# Specialized array types
CovarianceMatrix = np.ndarray  # Symmetric positive definite matrix
TriangularMatrix = np.ndarray  # Lower Cholesky factor

# Anything convertible to a float64 vector or matrix
VectorLike = Union[np.ndarray, Sequence[float], pd.Series]
MatrixLike = Union[np.ndarray, Sequence[Sequence[float]], pd.DataFrame]
FeatureData = Union[np.ndarray, pd.DataFrame]

# Empirical estimate returned by dot-product feature sources: (mean, cov, dim)
MeanCovEstimate = Tuple[Vector, CovarianceMatrix, int]

# Serialized model record
ParameterRecord = Dict[str, Any]

# Configuration types
ConfigDict = Dict[str, Any]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
