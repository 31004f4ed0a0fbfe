# mvgauss/models/__init__.py
"""
Statistical models.
"""

from .distributions import Gaussian

__all__ = ['Gaussian']
