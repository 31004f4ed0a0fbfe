# mvgauss/__init__.py
"""
mvgauss - Multivariate Gaussian distribution model for Python

Provides a multivariate Gaussian density with closed-form maximum-likelihood
training against a feature source, per-example log-likelihood scoring,
model-parameter introspection and explicit serialization of its fields.

Logging goes to the ``mvgauss`` logger. Its level defaults to WARNING and
can be changed with the ``MVGAUSS_LOG_LEVEL`` environment variable, the
configuration file or :func:`set_log_level`.
"""

import logging
from typing import Union

from .version import __version__
from .core import config as _config
from .core.exceptions import (
    ConfigurationError, DataError, DimensionError, DistributionError,
    MVGaussError, MVGaussWarning, NumericError, NumericWarning, ParameterError
)
from .features import DenseFeatures, DotFeatures, FeatureProperty, Features
from .models import Gaussian

logger = logging.getLogger("mvgauss")

_config.initialize_config()


def get_version() -> str:
    """
    Return the version of mvgauss.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for mvgauss.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING',
               'ERROR', 'CRITICAL') or as an integer constant from the
               logging module
    """
    if isinstance(level, int):
        level = logging.getLevelName(level)
    _config.set_config("logging", "log_level", str(level).upper())
    logger.info(f"Log level set to {level}")


__all__ = [
    'Gaussian',
    'Features',
    'DotFeatures',
    'DenseFeatures',
    'FeatureProperty',
    'MVGaussError',
    'ParameterError',
    'DimensionError',
    'NumericError',
    'DataError',
    'DistributionError',
    'ConfigurationError',
    'MVGaussWarning',
    'NumericWarning',
    'get_version',
    'set_log_level',
    '__version__',
]

logger.debug(f"mvgauss v{__version__} initialized")
