# mvgauss/core/parameters.py

"""
Parameter containers and validation for mvgauss.

Parameters are held in dataclasses that validate themselves on construction.
The flat array layout used by ``to_array``/``from_array`` is the mean vector
followed by the densely stored, row-major covariance matrix, which is also
the indexing used by the model-parameter introspection hooks.
"""

from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Dict, Type, TypeVar

import numpy as np

from .config import get_numerical_config
from .exceptions import ParameterError

P = TypeVar('P', bound='ParameterBase')


class ParameterBase:
    """Base class for all parameter containers.

    Provides the validation, serialization and copy interface shared by
    parameter types.
    """

    def validate(self) -> None:
        """Validate parameter constraints.

        Raises:
            ParameterError: If parameter constraints are violated
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of parameters
        """
        if is_dataclass(self):
            return asdict(self)
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    def to_array(self) -> np.ndarray:
        """Convert parameters to a NumPy array.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("to_array must be implemented by subclass")

    @classmethod
    def from_array(cls: Type[P], array: np.ndarray, **kwargs: Any) -> P:
        """Create parameters from a NumPy array.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("from_array must be implemented by subclass")

    def copy(self: P) -> P:
        """Create a copy of the parameter object.

        Returns:
            P: Copy of the parameter object
        """
        return type(self)(**self.to_dict())


def validate_finite(array: np.ndarray, param_name: str) -> np.ndarray:
    """Validate that every entry of an array is finite.

    Raises:
        ParameterError: If the array contains NaN or infinite values
    """
    if not np.all(np.isfinite(array)):
        raise ParameterError(
            f"Parameter {param_name} contains NaN or infinite values",
            param_name=param_name,
            constraint="finite"
        )
    return array


def validate_symmetric(matrix: np.ndarray, param_name: str, tol: float = 1e-8) -> np.ndarray:
    """Validate that a square matrix is symmetric within ``tol``.

    Raises:
        ParameterError: If the matrix differs from its transpose
    """
    if not np.allclose(matrix, matrix.T, rtol=tol, atol=tol):
        raise ParameterError(
            f"Matrix {param_name} must be symmetric",
            param_name=param_name,
            constraint="symmetric",
            details=f"max |A - A'| = {np.max(np.abs(matrix - matrix.T)):.3e}"
        )
    return matrix


@dataclass
class GaussianParams(ParameterBase):
    """Parameters of a multivariate Gaussian distribution.

    Attributes:
        mean: Mean vector, shape (d,)
        covariance: Covariance matrix, shape (d, d); symmetric positive definite
    """

    mean: np.ndarray
    covariance: np.ndarray

    def __post_init__(self) -> None:
        """Coerce to float64 arrays and validate."""
        self.mean = np.array(self.mean, dtype=np.float64)
        self.covariance = np.array(self.covariance, dtype=np.float64)

        # A scalar variance is accepted for the one-dimensional case
        if self.mean.ndim == 0:
            self.mean = self.mean.reshape(1)
        if self.covariance.ndim == 0:
            self.covariance = self.covariance.reshape(1, 1)
        elif self.covariance.ndim == 1 and self.covariance.size == self.mean.size ** 2:
            # Flat row-major storage
            self.covariance = self.covariance.reshape(self.mean.size, self.mean.size)

        self.validate()

    @property
    def dim(self) -> int:
        return int(self.mean.shape[0])

    def validate(self) -> None:
        """Validate Gaussian parameter constraints.

        Positive definiteness is not checked here; it is established by the
        Cholesky factorization when a model is initialized.

        Raises:
            ParameterError: If parameter constraints are violated
        """
        if self.mean.ndim != 1 or self.mean.shape[0] == 0:
            raise ParameterError(
                f"Mean must be a non-empty 1-dimensional vector, got shape {self.mean.shape}",
                param_name="mean",
                param_value=self.mean.shape
            )

        if self.covariance.ndim != 2 or self.covariance.shape[0] != self.covariance.shape[1]:
            raise ParameterError(
                f"Covariance must be a square matrix, got shape {self.covariance.shape}",
                param_name="covariance",
                param_value=self.covariance.shape
            )

        if self.covariance.shape[0] != self.mean.shape[0]:
            raise ParameterError(
                f"Mean length ({self.mean.shape[0]}) must match covariance dimension "
                f"({self.covariance.shape[0]})",
                param_name="mean, covariance",
                param_value=(self.mean.shape, self.covariance.shape)
            )

        numerical = get_numerical_config()
        if numerical.check_finite:
            validate_finite(self.mean, "mean")
            validate_finite(self.covariance, "covariance")
        if numerical.check_symmetry:
            validate_symmetric(self.covariance, "covariance", numerical.symmetry_tolerance)

    def to_array(self) -> np.ndarray:
        """Flatten to ``[mean_0, ..., mean_{d-1}, cov_00, cov_01, ..., cov_{d-1,d-1}]``.

        The covariance is stored densely, so the array has d * (d + 1) entries.
        """
        return np.concatenate([self.mean, self.covariance.ravel()])

    @classmethod
    def from_array(cls, array: np.ndarray, dim: int, **kwargs: Any) -> 'GaussianParams':
        """Create parameters from the layout produced by ``to_array``.

        Args:
            array: Flat parameter array of length dim * (dim + 1)
            dim: Dimensionality of the distribution

        Raises:
            ParameterError: If the array length does not match ``dim``
        """
        array = np.asarray(array, dtype=np.float64).ravel()
        expected = dim * (dim + 1)
        if array.shape[0] != expected:
            raise ParameterError(
                f"Parameter array must have {expected} entries for dimension {dim}, "
                f"got {array.shape[0]}",
                param_name="array",
                param_value=array.shape
            )
        return cls(mean=array[:dim], covariance=array[dim:].reshape(dim, dim))

    def copy(self) -> 'GaussianParams':
        return GaussianParams(mean=self.mean.copy(), covariance=self.covariance.copy())
