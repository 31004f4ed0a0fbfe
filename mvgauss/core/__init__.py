# mvgauss/core/__init__.py
"""
Core components: exceptions, configuration, type aliases, parameter
containers and the abstract distribution base class.
"""

from .exceptions import (
    ConfigurationError, DataError, DimensionError, DistributionError,
    MVGaussError, MVGaussWarning, NumericError, NumericWarning, ParameterError
)
from .config import (
    get_config, get_config_manager, initialize_config, reset_config,
    save_config, set_config
)
from .parameters import GaussianParams, ParameterBase
from .base import DistributionBase

__all__ = [
    'MVGaussError',
    'ParameterError',
    'DimensionError',
    'NumericError',
    'DataError',
    'DistributionError',
    'ConfigurationError',
    'MVGaussWarning',
    'NumericWarning',
    'initialize_config',
    'get_config_manager',
    'get_config',
    'set_config',
    'reset_config',
    'save_config',
    'ParameterBase',
    'GaussianParams',
    'DistributionBase',
]
