"""
Dense real-valued feature source backed by a NumPy array.
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from mvgauss.core.config import get_numerical_config
from mvgauss.core.exceptions import raise_data_error
from mvgauss.core.types import FeatureData, MeanCovEstimate, Vector
from mvgauss.features.base import DotFeatures

logger = logging.getLogger("mvgauss.features.dense")


class DenseFeatures(DotFeatures):
    """Examples stored as the rows of an ``(n, d)`` float64 matrix.

    A pandas DataFrame is accepted as well; its column labels are kept as
    ``feature_names``. A one-dimensional input is read as ``n`` examples of a
    single feature.

    Args:
        data: Feature matrix with one example per row
        feature_names: Optional names for the columns

    Raises:
        DataError: If the data is empty, not two-dimensional or not finite

    Examples:
        >>> import numpy as np
        >>> from mvgauss.features import DenseFeatures
        >>> feats = DenseFeatures(np.array([[0.0, 1.0], [2.0, 3.0]]))
        >>> feats.get_num_vectors(), feats.get_dim_feature_space()
        (2, 2)
    """

    def __init__(self, data: FeatureData, feature_names: Optional[List[str]] = None):
        if isinstance(data, pd.DataFrame):
            if feature_names is None:
                feature_names = [str(c) for c in data.columns]
            matrix = data.to_numpy(dtype=np.float64)
        else:
            matrix = np.array(data, dtype=np.float64)

        if matrix.ndim == 1:
            matrix = matrix.reshape(-1, 1)

        if matrix.ndim != 2:
            raise_data_error(
                f"Feature data must be 2-dimensional, got {matrix.ndim} dimensions",
                data_name="data",
                issue="wrong number of dimensions"
            )
        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            raise_data_error(
                f"Feature data must not be empty, got shape {matrix.shape}",
                data_name="data",
                issue="empty"
            )
        if get_numerical_config().check_finite and not np.all(np.isfinite(matrix)):
            bad_row = int(np.where(~np.all(np.isfinite(matrix), axis=1))[0][0])
            raise_data_error(
                "Feature data contains NaN or infinite values",
                data_name="data",
                issue="non-finite values",
                index=bad_row
            )
        if feature_names is not None and len(feature_names) != matrix.shape[1]:
            raise_data_error(
                f"Expected {matrix.shape[1]} feature names, got {len(feature_names)}",
                data_name="feature_names",
                issue="length mismatch"
            )

        self._matrix = matrix
        self.feature_names = feature_names
        logger.debug(f"Created dense features with shape {matrix.shape}")

    @property
    def matrix(self) -> np.ndarray:
        """Read-only view of the underlying ``(n, d)`` matrix."""
        view = self._matrix.view()
        view.flags.writeable = False
        return view

    def get_num_vectors(self) -> int:
        return int(self._matrix.shape[0])

    def get_dim_feature_space(self) -> int:
        return int(self._matrix.shape[1])

    def get_feature_vector(self, index: int) -> Vector:
        n = self._matrix.shape[0]
        if not 0 <= index < n:
            raise IndexError(f"Example index {index} out of range for {n} examples")
        return self._matrix[index].copy()

    def get_mean_cov(self) -> MeanCovEstimate:
        mean = self._matrix.mean(axis=0)
        cov = np.atleast_2d(np.cov(self._matrix, rowvar=False, bias=True))
        return mean, cov, self.get_dim_feature_space()

    def to_dataframe(self) -> pd.DataFrame:
        """Return the examples as a DataFrame with ``feature_names`` as columns."""
        return pd.DataFrame(self._matrix.copy(), columns=self.feature_names)
