# mvgauss/models/distributions/__init__.py
"""
Probability distribution models.

Gaussian: Multivariate Gaussian with closed-form maximum-likelihood training
"""

from .gaussian import Gaussian

__all__ = ['Gaussian']
