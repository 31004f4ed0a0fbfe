"""
Feature sources supplying examples to distribution models.
"""

from mvgauss.features.base import DotFeatures, FeatureProperty, Features
from mvgauss.features.dense import DenseFeatures

__all__ = [
    'Features',
    'DotFeatures',
    'DenseFeatures',
    'FeatureProperty',
]
