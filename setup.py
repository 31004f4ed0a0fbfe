#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Minimal setup.py for mvgauss; all configuration lives in pyproject.toml.
Kept for packaging tools that still invoke setup.py directly.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
