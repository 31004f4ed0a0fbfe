"""
mvgauss Test Suite

Tests for the multivariate Gaussian model, its feature sources, the dense
linear algebra wrappers and the configuration layer.
"""
