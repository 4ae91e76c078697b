"""
Statistical utilities for isotope-ratio data.

This subpackage provides numerical routines for weighted means and straight
line regression with uncertainties. All functions operate on arrays, primitive
types or :class:`~isoplot.measurement.UncertainValue`; no geochronology is
included.

Modules:
    weighted:
        Inverse-variance weighted mean (with optional MSWD correction) and
        the MSWD statistic.

    regression:
        Least-squares seed fit and the York (1968) fit with uncertainties in
        both x and y.

Design Principle:
    This subpackage has no dependencies on geochron/. It provides pure
    numerical utilities that can be independently tested.
"""

from .regression import (
    DEFAULT_YORK_ITERATIONS,
    YorkFit,
    lsqfit,
    yorkfit,
)
from .weighted import awmean, gwmean, mswd, wmean

__all__ = [
    "DEFAULT_YORK_ITERATIONS",
    "YorkFit",
    "lsqfit",
    "yorkfit",
    "awmean",
    "gwmean",
    "mswd",
    "wmean",
]
