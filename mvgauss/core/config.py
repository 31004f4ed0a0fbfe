'''
Configuration management for mvgauss.

The configuration follows a layered approach:
1. Default configurations built into the package
2. An optional user configuration file
3. Environment variables
4. Runtime modifications

Sections are plain dataclasses; the ConfigManager resolves the layers and
offers get/set/reset access by section and option name.
'''

import os
import json
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError
from .types import ConfigDict, LogLevel

# Set up module-level logger
logger = logging.getLogger("mvgauss.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "MVGAUSS_"
DEFAULT_CONFIG_FILENAME = "mvgauss_config.json"
USER_CONFIG_DIR_ENV = "MVGAUSS_CONFIG_DIR"
LOG_LEVEL_ENV = "MVGAUSS_LOG_LEVEL"


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    CORE = "core"
    NUMERICAL = "numerical"
    LOGGING = "logging"


@dataclass
class CoreConfig:
    """
    Core configuration settings.

    Attributes:
        version: The version of the configuration format
        user_config_dir: Directory searched for the user configuration file
        enable_numba: Whether vectorized density evaluation uses the Numba kernel
    """
    version: str = "1.0.0"
    user_config_dir: Path = field(default_factory=lambda: Path.home() / ".mvgauss")
    enable_numba: bool = True


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings.

    Attributes:
        symmetry_tolerance: Absolute/relative tolerance for the covariance symmetry check
        check_finite: Whether parameters and feature data are checked for NaN/inf
        check_symmetry: Whether covariance matrices are checked for symmetry
    """
    symmetry_tolerance: float = 1e-8
    check_finite: bool = True
    check_symmetry: bool = True


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Level of the package logger
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to the console
    """
    log_level: LogLevel = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True


@dataclass
class MVGaussConfig:
    """
    Complete configuration combining all sections.
    """
    core: CoreConfig = field(default_factory=CoreConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTION_TYPES = {
    ConfigSection.CORE.value: CoreConfig,
    ConfigSection.NUMERICAL.value: NumericalConfig,
    ConfigSection.LOGGING.value: LoggingConfig,
}


class ConfigManager:
    """
    Configuration manager for mvgauss.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the configuration manager has been initialized
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = MVGaussConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        Loads the user configuration file when present, applies environment
        variable overrides, validates the result and configures logging.
        """
        if self._initialized:
            return

        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            self._config.core.user_config_dir = Path(env_config_dir)
        self._config_file = self._config.core.user_config_dir / DEFAULT_CONFIG_FILENAME

        self._load_user_config()
        self._apply_env_overrides()

        # Shorthand for MVGAUSS_LOGGING_LOG_LEVEL
        log_level = os.environ.get(LOG_LEVEL_ENV)
        if log_level:
            self._config.logging.log_level = log_level.upper()

        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _load_user_config(self) -> None:
        """Load the user configuration file if it exists."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """
        Apply MVGAUSS_<SECTION>_<OPTION> environment variables.
        """
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX):
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            if section not in _SECTION_TYPES:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                setattr(section_obj, option, self._coerce(getattr(section_obj, option), value))
                logger.debug(f"Applied environment override: {env_var}={value}")
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")

    @staticmethod
    def _coerce(current_value: Any, value: Any) -> Any:
        """Convert ``value`` to the type of ``current_value``."""
        value_type = type(current_value)
        if value_type is bool and isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'y')
        if isinstance(current_value, Path):
            return Path(value)
        if value_type is not type(value):
            return value_type(value)
        return value

    def _setup_logging(self) -> None:
        """Configure the package logger from the logging section."""
        root_logger = logging.getLogger("mvgauss")

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        root_logger.setLevel(getattr(logging, self._config.logging.log_level))

        if self._config.logging.console_logging:
            formatter = logging.Formatter(
                fmt=self._config.logging.log_format,
                datefmt=self._config.logging.log_date_format
            )
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

    def _validate_config(self) -> None:
        """Reset invalid values to their defaults, logging a warning for each."""
        numerical = self._config.numerical
        if numerical.symmetry_tolerance < 0:
            logger.warning(
                f"Invalid symmetry_tolerance: {numerical.symmetry_tolerance}, must be non-negative"
            )
            numerical.symmetry_tolerance = NumericalConfig.symmetry_tolerance

        level = str(self._config.logging.log_level).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.warning(f"Invalid log_level: {level}, using WARNING")
            level = "WARNING"
        self._config.logging.log_level = level

    def _update_from_dict(self, config_dict: ConfigDict) -> None:
        """
        Update the configuration from a nested ``{section: {option: value}}`` dict.
        """
        for section_name, section_dict in config_dict.items():
            if section_name not in _SECTION_TYPES:
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)
            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue
                try:
                    setattr(section, option_name,
                            self._coerce(getattr(section, option_name), option_value))
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to set {section_name}.{option_name}: {e}")

    def save_user_config(self) -> None:
        """Write the current configuration to the user configuration file."""
        if not self._config_file:
            raise ConfigurationError("No user configuration file path available")

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved user configuration to {self._config_file}")

    def to_dict(self) -> ConfigDict:
        """
        Convert the configuration to a JSON-compatible dictionary.
        """
        result = {}
        for section_name in _SECTION_TYPES:
            section = getattr(self._config, section_name)
            section_dict = {}
            for f in fields(section):
                value = getattr(section, f.name)
                if isinstance(value, Path):
                    value = str(value)
                section_dict[f.name] = value
            result[section_name] = section_dict
        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value, or ``default`` if the option is unknown.
        """
        if section not in _SECTION_TYPES:
            return default
        return getattr(getattr(self._config, section), option, default)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Raises:
            ConfigurationError: If the section or option is not found, or the
                value cannot be converted to the option's type
        """
        section_obj = self.get_section(section)

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                section=section,
                option=option,
                value=value
            )

        try:
            typed_value = self._coerce(getattr(section_obj, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                section=section,
                option=option,
                value=value,
                details=str(e)
            ) from e

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")

        if section == ConfigSection.LOGGING.value:
            self._validate_config()
            self._setup_logging()

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The section to reset, or None to reset everything
            option: The option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = MVGaussConfig()
            self._modified_keys.clear()
            self._setup_logging()
            logger.debug("Reset all configuration to defaults")
            return

        section_obj = self.get_section(section)
        defaults = _SECTION_TYPES[section]()

        if option is None:
            setattr(self._config, section, defaults)
            self._modified_keys = {k for k in self._modified_keys
                                   if not k.startswith(f"{section}.")}
        else:
            if not hasattr(section_obj, option):
                raise ConfigurationError(
                    f"Unknown configuration option: {section}.{option}",
                    section=section,
                    option=option
                )
            setattr(section_obj, option, getattr(defaults, option))
            self._modified_keys.discard(f"{section}.{option}")

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

    def is_modified(self, section: str, option: str) -> bool:
        """Whether an option was changed at runtime."""
        return f"{section}.{option}" in self._modified_keys

    def get_section(self, section: str) -> Any:
        """
        Get a configuration section object.

        Raises:
            ConfigurationError: If the section is not found
        """
        if section not in _SECTION_TYPES:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                section=section
            )
        return getattr(self._config, section)

    def get_config_file(self) -> Optional[Path]:
        return self._config_file


# Singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """
    Initialize the configuration system.
    """
    _config_manager.initialize()


def get_config_manager() -> ConfigManager:
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    return get_config_manager().get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    get_config_manager().set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    get_config_manager().reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    get_config_manager().save_user_config()


def get_core_config() -> CoreConfig:
    return get_config_manager().get_section("core")


def get_numerical_config() -> NumericalConfig:
    return get_config_manager().get_section("numerical")


def get_logging_config() -> LoggingConfig:
    return get_config_manager().get_section("logging")
