# mvgauss/models/distributions/gaussian.py
"""
Multivariate Gaussian distribution model.

The model owns a mean vector, a covariance matrix and the inverse of that
covariance, together with the normalizing constant of the density. All
derived quantities come from a single Cholesky factorization performed when
the parameters are set, so that evaluating the density at a point costs one
symmetric matrix-vector product and one dot product:

    p(x) = c * exp(-0.5 * (x - mu)' Sigma^{-1} (x - mu)),
    c = (2 pi)^{-d/2} / prod(diag(L)),  Sigma = L L'

Parameters are set by construction, by closed-form maximum-likelihood
training against a dot-product feature source, or by deserializing a
previously serialized record.
"""

import logging
import math
from typing import Any, Optional, Tuple

import numpy as np
from numba import jit

from mvgauss.core.base import DistributionBase
from mvgauss.core.config import get_config
from mvgauss.core.exceptions import (
    DistributionError, ParameterError, raise_data_error, raise_dimension_error,
    raise_parameter_error, warn_numeric
)
from mvgauss.core.parameters import GaussianParams
from mvgauss.core.types import MatrixLike, ParameterRecord, Vector, VectorLike
from mvgauss.features.base import FeatureProperty, Features
from mvgauss.utils.matrix_ops import cholesky_factor, cholesky_inverse, dot, symv

logger = logging.getLogger("mvgauss.models.distributions.gaussian")

_LOG_2PI = math.log(2.0 * math.pi)

# Agreement required between stored and derived fields when deserializing
_RECORD_RTOL = 1e-8
_RECORD_ATOL = 1e-12

RECORD_FIELDS = (
    "covariance",
    "covariance_inverse",
    "mean",
    "dimensionality",
    "normalizing_constant",
)


@jit(nopython=True, cache=True)
def _gaussian_logpdf(x: np.ndarray, mean: np.ndarray, cov_inverse: np.ndarray,
                     log_constant: float) -> np.ndarray:
    """Numba-accelerated log density for a batch of points.

    Args:
        x: Points (n_samples, n_dim)
        mean: Mean vector (n_dim,)
        cov_inverse: Inverse covariance matrix (n_dim, n_dim)
        log_constant: Log of the normalizing constant

    Returns:
        np.ndarray: Log density values (n_samples,)
    """
    n_samples, n_dim = x.shape
    out = np.empty(n_samples)
    diff = np.empty(n_dim)

    for i in range(n_samples):
        for j in range(n_dim):
            diff[j] = x[i, j] - mean[j]

        mahalanobis = 0.0
        for j in range(n_dim):
            temp = 0.0
            for k in range(n_dim):
                temp += cov_inverse[j, k] * diff[k]
            mahalanobis += diff[j] * temp

        out[i] = log_constant - 0.5 * mahalanobis

    return out


class Gaussian(DistributionBase):
    """Multivariate Gaussian distribution.

    Constructed without arguments the model is the standard normal in one
    dimension. Given only ``dim`` it is the standard normal in ``dim``
    dimensions.

    Args:
        mean: Mean vector of length d
        cov: Covariance matrix (d, d), symmetric positive definite
        dim: Dimensionality; inferred from ``mean`` when omitted
        name: A descriptive name for the distribution

    Raises:
        ParameterError: If the parameters are malformed
        NumericError: If the covariance matrix is not positive definite

    Examples:
        >>> import numpy as np
        >>> from mvgauss import Gaussian
        >>> g = Gaussian()
        >>> round(g.compute_pdf(np.array([0.0])), 6)
        0.398942
        >>> g = Gaussian(mean=[1.0, -1.0], cov=[[2.0, 0.5], [0.5, 1.0]])
        >>> g.get_num_model_parameters()
        6
    """

    def __init__(self,
                 mean: Optional[VectorLike] = None,
                 cov: Optional[MatrixLike] = None,
                 dim: Optional[int] = None,
                 name: str = "Gaussian"):
        super().__init__(name=name)

        self._dim = 0
        self._mean = np.empty(0)
        self._cov = np.empty((0, 0))
        self._cov_inverse = np.empty((0, 0))
        self._normalizing_constant = 0.0
        self._log_constant = -np.inf

        if mean is None and cov is None:
            d = 1 if dim is None else int(dim)
            if d <= 0:
                raise ParameterError(
                    f"Dimensionality must be positive, got {dim}",
                    param_name="dim",
                    param_value=dim
                )
            mean, cov, dim = np.zeros(d), np.eye(d), d
        elif mean is None or cov is None:
            raise ParameterError(
                "Mean and covariance must be given together",
                param_name="mean" if mean is None else "cov"
            )

        self._initialize(mean, cov, dim)

    # ---- initialization ----

    def _initialize(self, mean: VectorLike, cov: MatrixLike, dim: Optional[int] = None) -> None:
        """Set the parameters and derive the inverse and normalizing constant.

        The covariance is copied into a scratch buffer and factored in place
        as ``L L'``. The normalizing constant is taken from the diagonal of
        ``L`` before the same buffer is overwritten, in place, by the inverse
        computed from ``L``. Nothing is committed until every step succeeds.

        Raises:
            ParameterError: If the parameters are malformed
            NumericError: If the covariance matrix is not positive definite
        """
        params = GaussianParams(mean=mean, covariance=cov)

        if dim is None:
            dim = params.dim
        if int(dim) != params.dim or int(dim) <= 0:
            raise ParameterError(
                f"Dimensionality {dim} does not match mean length {params.dim}",
                param_name="dim",
                param_value=dim
            )
        dim = int(dim)

        cov_inverse, constant, log_constant = self._derive(params.covariance, "initialize")
        self._commit(params, cov_inverse, constant, log_constant)

        logger.debug(f"Initialized {self._name} with dimensionality {dim}")

    @staticmethod
    def _derive(cov: np.ndarray, operation: str) -> Tuple[np.ndarray, float, float]:
        """Inverse, normalizing constant and log constant of ``cov``.

        Returns:
            Tuple of (covariance inverse, constant, log constant)

        Raises:
            NumericError: If ``cov`` is not positive definite
        """
        dim = cov.shape[0]
        cov_inverse = cov.copy()

        # Step 1: lower Cholesky factor
        cholesky_factor(cov_inverse)

        # Step 2: constant from the factor's diagonal
        diagonal = np.diag(cov_inverse)
        constant = 1.0 / np.prod(diagonal) * (2.0 * math.pi) ** (-dim / 2.0)
        log_constant = -float(np.sum(np.log(diagonal))) - 0.5 * dim * _LOG_2PI
        if constant == 0.0 or not np.isfinite(constant):
            warn_numeric(
                "Normalizing constant is not representable; use log-space evaluation",
                operation=operation,
                issue="underflow" if constant == 0.0 else "overflow",
                value=log_constant
            )

        # Step 3: inverse from the factor
        cholesky_inverse(cov_inverse)

        return cov_inverse, float(constant), log_constant

    def _commit(self, params: GaussianParams, cov_inverse: np.ndarray,
                constant: float, log_constant: float) -> None:
        self._mean = params.mean
        self._cov = params.covariance
        self._cov_inverse = cov_inverse
        self._normalizing_constant = constant
        self._log_constant = log_constant
        self._dim = params.dim

    # ---- training ----

    def train(self, data: Optional[Features] = None) -> bool:
        """Estimate mean and covariance by maximum likelihood.

        Args:
            data: Optional feature source supporting dot-product access; when
                given it becomes the associated source

        Returns:
            bool: True on success

        Raises:
            DistributionError: If ``data`` does not support dot-product access
            DataError: If no feature source is given or associated
            NumericError: If the empirical covariance is not positive definite
        """
        if data is not None:
            has_property = getattr(data, "has_property", None)
            if has_property is None or not has_property(FeatureProperty.DOT):
                raise DistributionError(
                    "Specified features do not support dot-product access",
                    distribution_type=self._name,
                    parameter="data",
                    value=type(data).__name__,
                    issue="missing DOT feature property"
                )
            features = data
        else:
            features = self._require_data("train")

        mean, cov, dim = features.get_mean_cov()
        self._initialize(mean, cov, dim)

        if data is not None:
            self.set_data(data)

        logger.info(
            f"Trained {self._name} on {features.get_num_vectors()} examples "
            f"of dimensionality {dim}"
        )
        return True

    # ---- density evaluation ----

    def _difference(self, point: VectorLike) -> np.ndarray:
        point = np.asarray(point, dtype=np.float64)
        if point.ndim != 1 or point.shape[0] != self._dim:
            raise_dimension_error(
                "Point length does not match the dimensionality of the distribution",
                array_name="point",
                expected_shape=(self._dim,),
                actual_shape=point.shape
            )
        return point - self._mean

    def compute_pdf(self, point: VectorLike) -> float:
        """Density at a single point.

        Args:
            point: Vector of length ``dimensionality``

        Returns:
            float: ``c * exp(-0.5 * (x - mu)' Sigma^{-1} (x - mu))``

        Raises:
            DimensionError: If the point length differs from the dimensionality
        """
        difference = self._difference(point)
        result = symv(-0.5, self._cov_inverse, difference)
        return self._normalizing_constant * math.exp(dot(difference, result))

    def compute_log_pdf(self, point: VectorLike) -> float:
        """Log density at a single point, evaluated in log space.

        Raises:
            DimensionError: If the point length differs from the dimensionality
        """
        difference = self._difference(point)
        result = symv(-0.5, self._cov_inverse, difference)
        return self._log_constant + dot(difference, result)

    def get_log_likelihood_example(self, index: int) -> float:
        """``log(compute_pdf(x))`` for example ``index`` of the associated source.

        Raises:
            DataError: If no feature source is associated
            IndexError: If ``index`` is out of range
        """
        data = self._require_data("get_log_likelihood_example")
        point = data.get_feature_vector(index)
        with np.errstate(divide='ignore'):
            return float(np.log(self.compute_pdf(point)))

    def _as_points(self, x: Any) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.ndim == 1:
            x = x.reshape(1, -1)
        if x.ndim != 2 or x.shape[1] != self._dim:
            raise_dimension_error(
                "Input dimension doesn't match distribution dimension",
                array_name="x",
                expected_shape=f"(n, {self._dim})",
                actual_shape=x.shape
            )
        if get_config("numerical", "check_finite", True) and not np.all(np.isfinite(x)):
            raise_data_error(
                "Input contains NaN or infinite values",
                data_name="x",
                issue="non-finite values"
            )
        return np.ascontiguousarray(x)

    def logpdf(self, x: Any) -> np.ndarray:
        """Log density of each row of ``x``.

        Args:
            x: A point (d,) or points (n, d)

        Returns:
            np.ndarray: Log density values (n,)
        """
        x = self._as_points(x)

        if get_config("core", "enable_numba", True):
            return _gaussian_logpdf(x, self._mean, self._cov_inverse, self._log_constant)

        diff = x - self._mean
        mahalanobis = np.einsum('ij,jk,ik->i', diff, self._cov_inverse, diff)
        return self._log_constant - 0.5 * mahalanobis

    def pdf(self, x: Any) -> np.ndarray:
        """Density of each row of ``x``."""
        return np.exp(self.logpdf(x))

    def loglikelihood(self, x: Any) -> float:
        """Total log-likelihood of the rows of ``x``."""
        return float(np.sum(self.logpdf(x)))

    # ---- model-parameter introspection ----

    def get_num_model_parameters(self) -> int:
        """``d * (d + 1)``: the mean plus the densely stored covariance.

        Symmetric off-diagonal covariance entries are counted twice.
        """
        return self._dim * (self._dim + 1)

    def get_log_model_parameter(self, index: int) -> float:
        """Log of the mean entry ``index`` or of the row-major covariance
        entry ``index - d``.

        Non-positive entries give ``-inf`` or ``nan`` rather than an error.

        Raises:
            IndexError: If ``index`` is outside ``[0, d * (d + 1))``
        """
        if not 0 <= index < self.get_num_model_parameters():
            raise IndexError(
                f"Parameter index {index} out of range for "
                f"{self.get_num_model_parameters()} parameters"
            )

        if index < self._dim:
            value = self._mean[index]
        else:
            value = self._cov.ravel()[index - self._dim]

        with np.errstate(divide='ignore', invalid='ignore'):
            return float(np.log(value))

    def get_log_derivative(self, param_index: int, example_index: int) -> float:
        # Gradients are not implemented
        return 0.0

    # ---- accessors ----

    @property
    def dimensionality(self) -> int:
        return self._dim

    @property
    def mean(self) -> Vector:
        return self._mean.copy()

    @property
    def covariance(self) -> np.ndarray:
        return self._cov.copy()

    @property
    def covariance_inverse(self) -> np.ndarray:
        return self._cov_inverse.copy()

    @property
    def normalizing_constant(self) -> float:
        return self._normalizing_constant

    @property
    def log_normalizing_constant(self) -> float:
        return self._log_constant

    @property
    def params(self) -> GaussianParams:
        """Mean and covariance as a parameter container."""
        return GaussianParams(mean=self._mean.copy(), covariance=self._cov.copy())

    # ---- persistence ----

    def serialize(self) -> ParameterRecord:
        """Write the named fields into a JSON-compatible record.

        Returns:
            dict: Record with keys ``covariance``, ``covariance_inverse``,
            ``mean``, ``dimensionality`` and ``normalizing_constant``
        """
        return {
            "covariance": self._cov.tolist(),
            "covariance_inverse": self._cov_inverse.tolist(),
            "mean": self._mean.tolist(),
            "dimensionality": self._dim,
            "normalizing_constant": self._normalizing_constant,
        }

    def deserialize(self, record: ParameterRecord) -> None:
        """Restore the named fields from a record produced by ``serialize``.

        Mean and covariance are validated like constructor arguments, and the
        inverse and normalizing constant are derived from the covariance again.
        The stored inverse and constant must agree with the derived ones; the
        model is left unchanged when anything fails.

        Raises:
            ParameterError: If a field is missing, malformed or inconsistent
            NumericError: If the stored covariance is not positive definite
        """
        missing = [f for f in RECORD_FIELDS if f not in record]
        if missing:
            raise_parameter_error(
                f"Record is missing fields: {', '.join(missing)}",
                param_name="record",
                param_value=sorted(record)
            )

        try:
            dim = int(record["dimensionality"])
            params = GaussianParams(mean=record["mean"], covariance=record["covariance"])
            stored_inverse = np.array(record["covariance_inverse"], dtype=np.float64)
            stored_constant = float(record["normalizing_constant"])
        except (TypeError, ValueError) as e:
            raise ParameterError(
                "Record contains malformed values",
                param_name="record",
                details=str(e)
            ) from e

        if dim != params.dim:
            raise_parameter_error(
                f"Dimensionality {dim} does not match mean length {params.dim}",
                param_name="dimensionality",
                param_value=dim
            )
        if stored_inverse.size != dim * dim:
            raise_parameter_error(
                f"covariance_inverse must have {dim * dim} entries, got {stored_inverse.size}",
                param_name="covariance_inverse",
                param_value=stored_inverse.shape
            )
        stored_inverse = stored_inverse.reshape(dim, dim)

        cov_inverse, constant, log_constant = self._derive(params.covariance, "deserialize")

        if not np.allclose(stored_inverse, cov_inverse, rtol=_RECORD_RTOL, atol=_RECORD_ATOL):
            raise_parameter_error(
                "Stored covariance inverse does not match the stored covariance",
                param_name="covariance_inverse",
                constraint="inverse of covariance"
            )
        if not np.isclose(stored_constant, constant, rtol=_RECORD_RTOL, atol=0.0):
            raise_parameter_error(
                "Stored normalizing constant does not match the stored covariance",
                param_name="normalizing_constant",
                param_value=stored_constant,
                constraint=f"{constant!r}"
            )

        self._commit(params, cov_inverse, constant, log_constant)

        logger.debug(f"Restored {self._name} with dimensionality {dim}")

    @classmethod
    def from_record(cls, record: ParameterRecord, name: str = "Gaussian") -> 'Gaussian':
        """Create a model from a record produced by ``serialize``."""
        model = cls(name=name)
        model.deserialize(record)
        return model

    # ---- representation ----

    def summary(self) -> str:
        """Text summary of the parameters."""
        with np.printoptions(precision=4, suppress=True):
            lines = [
                f"Distribution: {self._name}",
                "=" * (len(self._name) + 14),
                f"Dimensionality: {self._dim}",
                f"Mean: {self._mean}",
                "Covariance:",
                str(self._cov),
                f"Log normalizing constant: {self._log_constant:.6f}",
            ]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self._name}', dimensionality={self._dim})"
