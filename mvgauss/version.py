# mvgauss/version.py
"""
mvgauss Version Information

Version tracking for the package, accessible programmatically via
``mvgauss.__version__``. The package follows semantic versioning
(MAJOR.MINOR.PATCH).
"""

from typing import Any, Dict, Tuple

# Version components
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Package metadata
__title__ = "mvgauss"
__description__ = "Multivariate Gaussian distribution model"
__license__ = "MIT"

__python_requires__ = ">=3.10"

__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
}


def get_version_info() -> Dict[str, Any]:
    """
    Get detailed version information.

    Returns:
        Dict containing the version string, its components, the supported
        Python versions and the runtime dependencies.
    """
    return {
        "version": __version__,
        "major": VERSION_MAJOR,
        "minor": VERSION_MINOR,
        "patch": VERSION_PATCH,
        "python_requires": __python_requires__,
        "dependencies": __dependencies__,
        "license": __license__,
    }


def get_version_components() -> Tuple[int, int, int]:
    return (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH)


def is_compatible_with(version: str) -> bool:
    """
    Check if the current version is compatible with ``version``.

    Compatible means the same major version and an equal or higher
    minor/patch version. Malformed version strings are incompatible.
    """
    try:
        parts = version.split(".")
        major = int(parts[0])
        minor = int(parts[1] if len(parts) > 1 else 0)
        patch = int(parts[2] if len(parts) > 2 else 0)
    except (ValueError, IndexError):
        return False

    if VERSION_MAJOR != major:
        return False
    return (VERSION_MINOR, VERSION_PATCH) >= (minor, patch)
