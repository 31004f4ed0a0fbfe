'''
Custom exception classes for mvgauss.

This module defines the exception and warning hierarchy used throughout the
package. Each exception carries a primary message, optional details and a
context dictionary, and the formatted message records the location that
raised it so that numerical failures deep inside a factorization can be
traced back to the calling model.

The hierarchy is rooted at MVGaussError; warnings are rooted at MVGaussWarning.
'''

from typing import Any, Dict, Optional, Tuple, Union
import inspect
import warnings
import numpy as np
from pathlib import Path


def _format_message(message: str,
                    details: Optional[str],
                    context: Optional[Dict[str, Any]],
                    frame: Any) -> str:
    full_message = message
    if details:
        full_message += f"\n\nDetails: {details}"

    if context:
        context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
        full_message += f"\n\nContext:\n{context_str}"

    if frame:
        caller_info = inspect.getframeinfo(frame)
        full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"

    return full_message


class MVGaussError(Exception):
    """Base exception class for all mvgauss errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the MVGaussError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        frame = inspect.currentframe()
        try:
            caller = frame.f_back if frame else None
            full_message = _format_message(message, details, context, caller)
        finally:
            del frame  # Avoid reference cycles

        super().__init__(full_message)


class ParameterError(MVGaussError):
    """Exception raised for invalid distribution parameters.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class DimensionError(MVGaussError):
    """Exception raised when array dimensions do not match the model.

    Attributes:
        array_name: The name of the array that caused the error
        expected_shape: The expected shape of the array
        actual_shape: The actual shape of the array
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape

        super().__init__(message, details, context_dict)


class NumericError(MVGaussError):
    """Exception raised for numerical computation errors.

    Used when a factorization or inversion fails, most commonly because a
    covariance matrix is not positive definite.

    Attributes:
        operation: The operation that caused the error
        values: The values that caused the error
        error_type: The type of numerical error
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if values is not None:
            if isinstance(values, np.ndarray) and values.size > 10:
                # Truncate large arrays for readability
                context_dict["Values"] = f"Array with shape {values.shape}"
            else:
                context_dict["Values"] = values
        if error_type:
            context_dict["Error Type"] = error_type

        super().__init__(message, details, context_dict)


class DataError(MVGaussError):
    """Exception raised for missing or unusable input data.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: The index or location where the issue was detected
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class DistributionError(MVGaussError):
    """Exception raised for errors related to probability distributions.

    Attributes:
        distribution_type: The type of distribution
        parameter: The parameter that caused the error
        value: The offending value
        issue: Description of the issue with the distribution
    """

    def __init__(self,
                 message: str,
                 distribution_type: Optional[str] = None,
                 parameter: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.distribution_type = distribution_type
        self.parameter = parameter
        self.value = value
        self.issue = issue

        context_dict = context or {}
        if distribution_type:
            context_dict["Distribution"] = distribution_type
        if parameter:
            context_dict["Parameter"] = parameter
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class ConfigurationError(MVGaussError):
    """Exception raised for invalid configuration sections, options or values.

    Attributes:
        section: The configuration section
        option: The configuration option
        value: The rejected value
    """

    def __init__(self,
                 message: str,
                 section: Optional[str] = None,
                 option: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.section = section
        self.option = option
        self.value = value

        context_dict = context or {}
        if section:
            context_dict["Section"] = section
        if option:
            context_dict["Option"] = option
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


class MVGaussWarning(Warning):
    """Base warning class for all mvgauss warnings.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        frame = inspect.currentframe()
        try:
            caller = frame.f_back if frame else None
            full_message = _format_message(message, details, context, caller)
        finally:
            del frame

        super().__init__(full_message)


class NumericWarning(MVGaussWarning):
    """Warning for numerical issues that do not prevent computation.

    Attributes:
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


# Helper functions for raising exceptions with consistent formatting

def raise_parameter_error(message: str,
                          param_name: Optional[str] = None,
                          param_value: Optional[Any] = None,
                          constraint: Optional[str] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a ParameterError with consistent formatting.

    Raises:
        ParameterError: The formatted parameter error
    """
    raise ParameterError(message, param_name, param_value, constraint, details, context)


def raise_dimension_error(message: str,
                          array_name: Optional[str] = None,
                          expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                          actual_shape: Optional[Tuple[int, ...]] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DimensionError with consistent formatting.

    Raises:
        DimensionError: The formatted dimension error
    """
    raise DimensionError(message, array_name, expected_shape, actual_shape, details, context)


def raise_numeric_error(message: str,
                        operation: Optional[str] = None,
                        values: Optional[Any] = None,
                        error_type: Optional[str] = None,
                        details: Optional[str] = None,
                        context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a NumericError with consistent formatting.

    Raises:
        NumericError: The formatted numeric error
    """
    raise NumericError(message, operation, values, error_type, details, context)


def raise_data_error(message: str,
                     data_name: Optional[str] = None,
                     issue: Optional[str] = None,
                     index: Optional[Union[int, Tuple[int, ...], str]] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DataError with consistent formatting.

    Raises:
        DataError: The formatted data error
    """
    raise DataError(message, data_name, issue, index, details, context)


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting."""
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context),
        stacklevel=2
    )
