'''
Pytest configuration and fixtures for the mvgauss test suite.

Provides seeded data generators, ready-made models and feature sources, and
hypothesis strategies for symmetric positive definite matrices.
'''

from typing import Tuple

import numpy as np
import pytest
from hypothesis import strategies as st

from mvgauss.core.config import reset_config
from mvgauss.features.base import FeatureProperty, Features
from mvgauss.features.dense import DenseFeatures
from mvgauss.models.distributions.gaussian import Gaussian


# ---- Configuration isolation ----

@pytest.fixture(autouse=True)
def _restore_config():
    """Restore the default configuration after every test."""
    yield
    reset_config()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sample_size() -> int:
    """Default sample size for test data."""
    return 500


@pytest.fixture
def mean_2d() -> np.ndarray:
    return np.array([1.0, -2.0])


@pytest.fixture
def cov_2d() -> np.ndarray:
    return np.array([[2.0, 0.5],
                     [0.5, 1.0]])


@pytest.fixture
def gaussian_2d(mean_2d: np.ndarray, cov_2d: np.ndarray) -> Gaussian:
    """Two-dimensional Gaussian with correlated components."""
    return Gaussian(mean=mean_2d, cov=cov_2d)


@pytest.fixture
def multivariate_normal_data(rng: np.random.Generator, sample_size: int,
                             mean_2d: np.ndarray, cov_2d: np.ndarray) -> np.ndarray:
    """Generate bivariate normal random data for testing."""
    return rng.multivariate_normal(mean_2d, cov_2d, size=sample_size)


@pytest.fixture
def dense_features(multivariate_normal_data: np.ndarray) -> DenseFeatures:
    return DenseFeatures(multivariate_normal_data)


@pytest.fixture
def spd_matrix(rng: np.random.Generator) -> np.ndarray:
    """Random 4x4 symmetric positive definite matrix."""
    a = rng.standard_normal((4, 4))
    return a @ a.T + 4 * np.eye(4)


# ---- Feature sources without dot-product access ----

class StreamingFeatures(Features):
    """Feature source that only supports sequential access."""

    properties = frozenset({FeatureProperty.STREAMING})

    def __init__(self, data: np.ndarray):
        self._data = np.asarray(data, dtype=np.float64)

    def get_num_vectors(self) -> int:
        return self._data.shape[0]

    def get_feature_vector(self, index: int) -> np.ndarray:
        return self._data[index].copy()


@pytest.fixture
def streaming_features(multivariate_normal_data: np.ndarray) -> StreamingFeatures:
    return StreamingFeatures(multivariate_normal_data)


# ---- Hypothesis strategies ----

@st.composite
def spd_matrices(draw, min_dim: int = 1, max_dim: int = 6) -> np.ndarray:
    """Strategy producing well-conditioned symmetric positive definite matrices."""
    n = draw(st.integers(min_value=min_dim, max_value=max_dim))
    entries = draw(st.lists(
        st.floats(min_value=-2.0, max_value=2.0, allow_nan=False, allow_infinity=False),
        min_size=n * n, max_size=n * n
    ))
    a = np.array(entries).reshape(n, n)
    return a @ a.T + n * np.eye(n)


@st.composite
def gaussian_parameters(draw, min_dim: int = 1, max_dim: int = 5) -> Tuple[np.ndarray, np.ndarray]:
    """Strategy producing (mean, covariance) pairs."""
    cov = draw(spd_matrices(min_dim=min_dim, max_dim=max_dim))
    n = cov.shape[0]
    mean = np.array(draw(st.lists(
        st.floats(min_value=-10.0, max_value=10.0, allow_nan=False, allow_infinity=False),
        min_size=n, max_size=n
    )))
    return mean, cov
