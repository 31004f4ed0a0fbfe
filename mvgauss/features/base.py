"""
Feature source abstractions.

A feature source holds a collection of examples and hands them to models by
index. Models query a source's capabilities through ``has_property`` before
relying on vector access; sources that support dot-product access derive
from :class:`DotFeatures` and can also report an empirical mean and
covariance over everything they hold.
"""

import abc
from enum import Enum
from typing import FrozenSet

from mvgauss.core.types import MeanCovEstimate, Vector


class FeatureProperty(Enum):
    """Capabilities a feature source may advertise."""
    DOT = "dot"
    STREAMING = "streaming"


class Features(abc.ABC):
    """Abstract base class for all feature sources.

    Attributes:
        properties: Capabilities advertised by the source
    """

    properties: FrozenSet[FeatureProperty] = frozenset()

    def has_property(self, prop: FeatureProperty) -> bool:
        """Whether the source advertises ``prop``."""
        return prop in self.properties

    @abc.abstractmethod
    def get_num_vectors(self) -> int:
        """Number of examples held by the source."""
        pass

    @abc.abstractmethod
    def get_feature_vector(self, index: int) -> Vector:
        """Return a copy of example ``index`` as a float64 vector.

        Raises:
            IndexError: If ``index`` is out of range
        """
        pass

    def __len__(self) -> int:
        return self.get_num_vectors()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(num_vectors={self.get_num_vectors()})"


class DotFeatures(Features):
    """Feature source with real-valued vectors supporting dot products."""

    properties = frozenset({FeatureProperty.DOT})

    @abc.abstractmethod
    def get_dim_feature_space(self) -> int:
        """Length of every feature vector."""
        pass

    @abc.abstractmethod
    def get_mean_cov(self) -> MeanCovEstimate:
        """Empirical mean vector, covariance matrix and dimensionality.

        The covariance is the maximum-likelihood estimate (divisor N).

        Returns:
            Tuple of (mean, covariance, dim)
        """
        pass

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(num_vectors={self.get_num_vectors()}, "
                f"dim={self.get_dim_feature_space()})")
