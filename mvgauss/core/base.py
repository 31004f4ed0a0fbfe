'''
Abstract base classes for mvgauss.

DistributionBase establishes the contract every distribution model follows:
a training lifecycle against an associated feature source, per-example
log-likelihood scoring, model-parameter introspection for model selection
and complexity accounting, and an explicit serialize/deserialize pair for
persisting the model's named fields.
'''

import abc
import logging
import math
import weakref
from typing import Optional

import numpy as np

from mvgauss.core.exceptions import raise_data_error
from mvgauss.core.types import ParameterRecord, Vector
from mvgauss.features.base import Features

logger = logging.getLogger("mvgauss.core.base")


class DistributionBase(abc.ABC):
    """Abstract base class for probability distributions.

    A distribution may be associated with a feature source. The association
    is a weak back reference: the model never extends the lifetime of the
    source and never mutates it.
    """

    def __init__(self, name: str = "Distribution"):
        """Initialize the probability distribution.

        Args:
            name: A descriptive name for the distribution
        """
        self._name = name
        self._data_ref: Optional[weakref.ReferenceType] = None

    @property
    def name(self) -> str:
        """Get the distribution name."""
        return self._name

    # ---- data association ----

    def set_data(self, data: Optional[Features]) -> None:
        """Associate a feature source with the distribution.

        Args:
            data: The feature source, or None to drop the association
        """
        self._data_ref = weakref.ref(data) if data is not None else None

    def get_data(self) -> Optional[Features]:
        """Return the associated feature source, or None.

        A source that has been garbage collected reads as None.
        """
        if self._data_ref is None:
            return None
        return self._data_ref()

    def _require_data(self, operation: str) -> Features:
        data = self.get_data()
        if data is None:
            raise_data_error(
                f"No feature source is associated with {self._name}",
                data_name="features",
                issue="missing association",
                details=f"Pass a feature source to train() or set_data() before calling {operation}()"
            )
        return data

    # ---- training lifecycle ----

    @abc.abstractmethod
    def train(self, data: Optional[Features] = None) -> bool:
        """Estimate the distribution parameters from data.

        Args:
            data: Optional feature source; when given it becomes the
                associated source

        Returns:
            bool: True on success
        """
        pass

    # ---- scoring ----

    @abc.abstractmethod
    def get_log_likelihood_example(self, index: int) -> float:
        """Log-likelihood of example ``index`` of the associated source."""
        pass

    def get_log_likelihood(self) -> Vector:
        """Log-likelihood of every example of the associated source.

        Returns:
            np.ndarray: Vector of per-example log-likelihoods
        """
        data = self._require_data("get_log_likelihood")
        return np.array(
            [self.get_log_likelihood_example(i) for i in range(data.get_num_vectors())],
            dtype=np.float64
        )

    def get_log_likelihood_sample(self) -> float:
        """Sum of the log-likelihoods of every example of the associated source."""
        return float(np.sum(self.get_log_likelihood()))

    # ---- model-parameter introspection ----

    @abc.abstractmethod
    def get_num_model_parameters(self) -> int:
        """Number of model parameters."""
        pass

    @abc.abstractmethod
    def get_log_model_parameter(self, index: int) -> float:
        """Logarithm of model parameter ``index``."""
        pass

    @abc.abstractmethod
    def get_log_derivative(self, param_index: int, example_index: int) -> float:
        """Logarithm of the derivative of the likelihood of an example with
        respect to a model parameter."""
        pass

    def get_model_parameter(self, index: int) -> float:
        """Model parameter ``index``, i.e. ``exp(get_log_model_parameter(index))``."""
        return math.exp(self.get_log_model_parameter(index))

    def get_derivative(self, param_index: int, example_index: int) -> float:
        """``exp(get_log_derivative(param_index, example_index))``."""
        return math.exp(self.get_log_derivative(param_index, example_index))

    # ---- persistence ----

    @abc.abstractmethod
    def serialize(self) -> ParameterRecord:
        """Write the model's named fields into a JSON-compatible record."""
        pass

    @abc.abstractmethod
    def deserialize(self, record: ParameterRecord) -> None:
        """Restore the model's named fields from a record produced by ``serialize``."""
        pass

    def __str__(self) -> str:
        return f"Distribution: {self._name}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self._name}')"
