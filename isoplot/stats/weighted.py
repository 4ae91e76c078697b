"""Inverse-variance weighted means and the MSWD statistic.

The Mean Square of Weighted Deviates (MSWD, the reduced chi-squared
statistic) measures how well a population of measurements agrees with a
single weighted mean given their stated uncertainties:

    MSWD = Σ (μ_i − wμ)² / σ_i² / (n − 1)

An MSWD near 1 indicates scatter consistent with the stated uncertainties;
values well above 1 indicate excess dispersion.

All uncertainties are one-sigma.
"""

from __future__ import annotations

import warnings
from typing import Sequence, Tuple, Union

import numpy as np

from ..exceptions import InsufficientData
from ..measurement import UncertainValue


def _split_measurements(
    values: Sequence, stddevs: Sequence | None
) -> Tuple[np.ndarray, np.ndarray, bool]:
    """Return ``(means, sigmas, packed)`` from either supported input form."""
    if stddevs is None:
        values = list(values)
        if not all(isinstance(v, UncertainValue) for v in values):
            raise TypeError(
                "stddevs may only be omitted when values are UncertainValue objects."
            )
        mu = np.array([v.mean for v in values], dtype=float)
        sigma = np.array([v.stddev for v in values], dtype=float)
        return mu, sigma, True

    mu = np.asarray(values, dtype=float).ravel()
    sigma = np.asarray(stddevs, dtype=float).ravel()
    if mu.shape != sigma.shape:
        raise ValueError(
            f"values and stddevs must be the same length, got {mu.size} and {sigma.size}."
        )
    return mu, sigma, False


def _weights(mu: np.ndarray, sigma: np.ndarray) -> np.ndarray:
    n = int(mu.size)
    if n < 2:
        raise InsufficientData(
            f"A weighted mean and MSWD need at least 2 measurements, got {n}."
        )
    if not np.all(np.isfinite(sigma)) or np.any(sigma <= 0):
        bad = np.flatnonzero(~np.isfinite(sigma) | (sigma <= 0))
        raise ValueError(
            f"Standard deviations must be finite and positive; invalid at indices {bad.tolist()}."
        )
    return 1.0 / sigma**2


def _chi_squared(mu: np.ndarray, w: np.ndarray) -> Tuple[float, float]:
    wmu = float(np.sum(w * mu) / np.sum(w))
    chi2 = float(np.sum(w * (mu - wmu) ** 2))
    return wmu, chi2


def wmean(
    values: Sequence,
    stddevs: Sequence | None = None,
    corrected: bool = False,
) -> Union[Tuple[float, float, float], Tuple[UncertainValue, float]]:
    """Inverse-variance weighted mean, with optional MSWD correction.

    Args:
        values: Measured values, or a sequence of :class:`UncertainValue`
            when ``stddevs`` is omitted.
        stddevs: One-sigma uncertainties parallel to ``values``.
        corrected: If ``True``, inflate the uncertainty by the observed
            scatter, ``sqrt(mswd / Σw)`` (the geochronologist's MSWD
            correction). Defaults to the formal ``sqrt(1 / Σw)``.

    Returns:
        ``(wμ, wσ, mswd)`` for array input, or ``(UncertainValue(wμ, wσ),
        mswd)`` for a sequence of :class:`UncertainValue`.

    Raises:
        InsufficientData: If fewer than two measurements are supplied.
        ValueError: If lengths differ or any σ is non-positive/non-finite.
    """
    mu, sigma, packed = _split_measurements(values, stddevs)
    w = _weights(mu, sigma)
    sum_of_weights = float(np.sum(w))
    wmu, chi2 = _chi_squared(mu, w)

    mswd_value = chi2 / (mu.size - 1)
    if corrected:
        if mu.size == 2:
            warnings.warn(
                "wmean: MSWD correction from 2 measurements rests on a single "
                "degree of freedom; the inflated uncertainty is poorly constrained.",
                RuntimeWarning,
                stacklevel=2,
            )
        wsigma = float(np.sqrt(mswd_value / sum_of_weights))
    else:
        wsigma = float(np.sqrt(1.0 / sum_of_weights))

    if packed:
        return UncertainValue(wmu, wsigma), mswd_value
    return wmu, wsigma, mswd_value


def awmean(values: Sequence, stddevs: Sequence | None = None):
    """Weighted mean without MSWD correction (legacy name)."""
    return wmean(values, stddevs, corrected=False)


def gwmean(values: Sequence, stddevs: Sequence | None = None):
    """Weighted mean with MSWD correction (legacy name)."""
    return wmean(values, stddevs, corrected=True)


def mswd(values: Sequence, stddevs: Sequence | None = None) -> float:
    """Return the MSWD (reduced chi-squared) of a set of measurements.

    Accepts the same two input forms as :func:`wmean`.

    Raises:
        InsufficientData: If fewer than two measurements are supplied.
    """
    mu, sigma, _ = _split_measurements(values, stddevs)
    w = _weights(mu, sigma)
    _, chi2 = _chi_squared(mu, w)
    return chi2 / (mu.size - 1)
