# tests/test_core.py
"""
Tests for the core layer: exceptions, parameter containers, configuration
and package-level helpers.
"""

import json
import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

import mvgauss
from mvgauss.core.config import (
    ConfigManager, get_config, get_config_manager, get_core_config,
    get_logging_config, get_numerical_config, reset_config, set_config
)
from mvgauss.core.exceptions import (
    ConfigurationError, DataError, DimensionError, DistributionError, MVGaussError,
    MVGaussWarning, NumericError, NumericWarning, ParameterError, raise_dimension_error,
    raise_parameter_error, warn_numeric
)
from mvgauss.core.parameters import GaussianParams
from mvgauss.version import get_version_components, get_version_info, is_compatible_with


class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize("exc_type", [
        ParameterError, DimensionError, NumericError, DataError,
        DistributionError, ConfigurationError
    ])
    def test_hierarchy(self, exc_type):
        assert issubclass(exc_type, MVGaussError)
        with pytest.raises(MVGaussError):
            raise exc_type("failure")

    def test_message_includes_context(self):
        err = ParameterError("Bad value", param_name="mean", param_value=3,
                             constraint="finite", details="more")
        text = str(err)
        assert "Bad value" in text
        assert "Details: more" in text
        assert "Parameter: mean" in text
        assert "Constraint: finite" in text
        assert err.message == "Bad value"
        assert err.param_name == "mean"

    def test_raise_helper(self):
        with pytest.raises(DimensionError) as exc_info:
            raise_dimension_error("Mismatch", array_name="x",
                                  expected_shape=(2,), actual_shape=(3,))
        assert exc_info.value.expected_shape == (2,)
        assert exc_info.value.actual_shape == (3,)

    def test_raise_parameter_helper(self):
        with pytest.raises(ParameterError) as exc_info:
            raise_parameter_error("Bad record", param_name="record",
                                  param_value=["mean"], constraint="complete")
        assert exc_info.value.param_name == "record"
        assert exc_info.value.constraint == "complete"
        assert "Constraint: complete" in str(exc_info.value)

    def test_large_arrays_are_summarized(self):
        err = NumericError("Failed", values=np.zeros((5, 5)))
        assert "Array with shape (5, 5)" in str(err)

    def test_warning(self):
        assert issubclass(NumericWarning, MVGaussWarning)
        with pytest.warns(NumericWarning) as record:
            warn_numeric("Underflow", operation="initialize", issue="underflow")
        assert record[0].message.operation == "initialize"


class TestGaussianParams:
    """Tests for the Gaussian parameter container."""

    def test_coercion(self):
        params = GaussianParams(mean=[1, 2], covariance=[[2, 0], [0, 1]])
        assert params.mean.dtype == np.float64
        assert params.covariance.dtype == np.float64
        assert params.dim == 2

    def test_scalar_and_flat_inputs(self):
        params = GaussianParams(mean=0.0, covariance=4.0)
        assert params.mean.shape == (1,)
        assert params.covariance.shape == (1, 1)

        params = GaussianParams(mean=[0.0, 0.0], covariance=[1.0, 0.2, 0.2, 1.0])
        assert_array_equal(params.covariance, [[1.0, 0.2], [0.2, 1.0]])

    def test_array_layout(self):
        params = GaussianParams(mean=[1.0, 2.0], covariance=[[3.0, 4.0], [4.0, 5.0]])
        flat = params.to_array()
        assert_array_equal(flat, [1.0, 2.0, 3.0, 4.0, 4.0, 5.0])
        restored = GaussianParams.from_array(flat, dim=2)
        assert_array_equal(restored.covariance, params.covariance)
        with pytest.raises(ParameterError):
            GaussianParams.from_array(flat, dim=3)

    def test_copy_is_independent(self):
        params = GaussianParams(mean=[1.0], covariance=[[1.0]])
        clone = params.copy()
        clone.mean[0] = 5.0
        assert params.mean[0] == 1.0

    def test_validation(self):
        with pytest.raises(ParameterError):
            GaussianParams(mean=np.zeros((2, 2)), covariance=np.eye(2))
        with pytest.raises(ParameterError):
            GaussianParams(mean=[], covariance=np.empty((0, 0)))
        with pytest.raises(ParameterError):
            GaussianParams(mean=[0.0, 0.0], covariance=np.ones((2, 3)))
        with pytest.raises(ParameterError):
            GaussianParams(mean=[0.0, 0.0], covariance=[[1.0, 0.1], [0.2, 1.0]])

    def test_symmetry_check_can_be_disabled(self):
        set_config("numerical", "check_symmetry", False)
        params = GaussianParams(mean=[0.0, 0.0], covariance=[[1.0, 0.1], [0.2, 1.0]])
        assert params.covariance[0, 1] == 0.1


class TestConfig:
    """Tests for the layered configuration."""

    def test_defaults(self):
        assert get_core_config().enable_numba is True
        assert get_numerical_config().check_finite is True
        assert get_numerical_config().symmetry_tolerance == 1e-8
        assert get_logging_config().log_level == "WARNING"

    def test_set_and_reset(self):
        set_config("numerical", "symmetry_tolerance", "1e-6")
        assert get_config("numerical", "symmetry_tolerance") == 1e-6
        assert get_config_manager().is_modified("numerical", "symmetry_tolerance")
        reset_config("numerical", "symmetry_tolerance")
        assert get_config("numerical", "symmetry_tolerance") == 1e-8
        assert not get_config_manager().is_modified("numerical", "symmetry_tolerance")

    def test_bool_coercion(self):
        set_config("core", "enable_numba", "no")
        assert get_config("core", "enable_numba") is False

    def test_unknown_keys(self):
        assert get_config("nonexistent", "option", "fallback") == "fallback"
        with pytest.raises(ConfigurationError):
            set_config("nonexistent", "option", 1)
        with pytest.raises(ConfigurationError):
            set_config("core", "nonexistent", 1)
        with pytest.raises(ConfigurationError):
            set_config("numerical", "symmetry_tolerance", "not a number")

    def test_logging_section_configures_logger(self):
        set_config("logging", "log_level", "DEBUG")
        assert logging.getLogger("mvgauss").level == logging.DEBUG
        set_config("logging", "log_level", "bogus")
        assert get_logging_config().log_level == "WARNING"

    def test_file_and_environment_layers(self, tmp_path, monkeypatch):
        config_file = tmp_path / "mvgauss_config.json"
        config_file.write_text(json.dumps({
            "numerical": {"symmetry_tolerance": 1e-4, "check_symmetry": False},
            "unknown": {"x": 1},
        }))
        monkeypatch.setenv("MVGAUSS_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("MVGAUSS_NUMERICAL_CHECK_SYMMETRY", "true")
        monkeypatch.setenv("MVGAUSS_LOG_LEVEL", "error")

        manager = ConfigManager()
        manager.initialize()

        assert manager.get_config_file() == config_file
        assert manager.get("numerical", "symmetry_tolerance") == 1e-4
        assert manager.get("numerical", "check_symmetry") is True
        assert manager.get("logging", "log_level") == "ERROR"

    def test_save_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MVGAUSS_CONFIG_DIR", str(tmp_path))
        manager = ConfigManager()
        manager.initialize()
        manager.set("core", "enable_numba", False)
        manager.save_user_config()

        saved = json.loads((tmp_path / "mvgauss_config.json").read_text())
        assert saved["core"]["enable_numba"] is False
        assert saved["core"]["user_config_dir"] == str(tmp_path)


class TestPackage:
    """Tests for package-level helpers."""

    def test_version(self):
        assert mvgauss.get_version() == mvgauss.__version__
        assert get_version_components() == (1, 0, 0)
        assert is_compatible_with("1.0.0")
        assert not is_compatible_with("2.0")
        assert not is_compatible_with("1.1.0")
        assert not is_compatible_with("garbage")

    def test_version_info(self):
        info = get_version_info()
        assert info["version"] == mvgauss.__version__
        assert (info["major"], info["minor"], info["patch"]) == get_version_components()
        assert set(info["dependencies"]) == {"numpy", "scipy", "pandas", "numba"}

    def test_set_log_level(self):
        mvgauss.set_log_level("info")
        assert logging.getLogger("mvgauss").level == logging.INFO
        mvgauss.set_log_level(logging.ERROR)
        assert get_logging_config().log_level == "ERROR"

    def test_public_api(self):
        g = mvgauss.Gaussian()
        assert isinstance(g, mvgauss.Gaussian)
        assert_allclose(g.compute_pdf([0.0]), 0.3989422804014327)
