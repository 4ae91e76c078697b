"""Straight-line regressions for isochron and discordia fits.

This module supports:
- an unweighted least-squares fit of ``y = a + b·x``, used to seed the
  iterative fit, and
- the York (1968) two-dimensional least-squares fit, which accounts for
  uncertainties in both ``x`` and ``y``.

References:
    York, D. (1968) Least squares fitting of a straight line with correlated
    errors. Earth and Planetary Science Letters 5, 320-324.
    doi:10.1016/S0012-821X(68)80059-7
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

import numpy as np

from ..exceptions import DomainError, InsufficientData
from ..measurement import UncertainValue, means, stddevs

logger = logging.getLogger(__name__)

DEFAULT_YORK_ITERATIONS = 10


def lsqfit(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    """Return ``(a, b)`` for an unweighted least-squares fit of ``y = a + b·x``."""
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    b, a = np.polyfit(x_arr, y_arr, 1)
    return float(a), float(b)


@dataclass(frozen=True)
class YorkFit:
    """Result of a York regression ``y = a + b·x``.

    Attributes:
        intercept: Intercept ``a`` with its one-sigma uncertainty.
        slope: Slope ``b`` with its one-sigma uncertainty.
        mswd: Mean square of weighted deviates of the points about the line.
        n: Number of points used after rows with missing data were dropped.
    """

    intercept: UncertainValue
    slope: UncertainValue
    mswd: float
    n: int

    def __str__(self) -> str:
        return (
            "YorkFit:\n"
            "Least-squares linear fit of the form y = a + bx where\n"
            f"  intercept a : {self.intercept} (1σ)\n"
            f"  slope b     : {self.slope} (1σ)\n"
            f"  MSWD        : {self.mswd}\n"
            f"  n           : {self.n}"
        )


class _YorkState(NamedTuple):
    a: float
    b: float
    W: np.ndarray
    U: np.ndarray
    V: np.ndarray
    X_bar: float
    degenerate: bool


def _york_weights(
    b: float,
    omega_x: np.ndarray,
    omega_y: np.ndarray,
    alpha: np.ndarray,
    r: float,
) -> Tuple[np.ndarray, bool]:
    scale = b**2 * omega_y + omega_x
    denom = scale - 2.0 * b * r * alpha
    # Floor at machine precision: perfectly correlated, noise-free data would
    # otherwise give infinite weights.
    floor = np.finfo(float).eps * scale
    degenerate = bool(np.any(denom < floor))
    return omega_x * omega_y / np.maximum(denom, floor), degenerate


def _york_iterate(x, y, omega_x, omega_y, alpha, r, b, iterations) -> _YorkState:
    degenerate = False
    for _ in range(iterations):
        W, hit_floor = _york_weights(b, omega_x, omega_y, alpha, r)
        degenerate |= hit_floor

        X_bar = np.sum(W * x) / np.sum(W)
        Y_bar = np.sum(W * y) / np.sum(W)

        U = x - X_bar
        V = y - Y_bar

        sV = W**2 * V * (U / omega_y + b * V / omega_x - r * V / alpha)
        sU = W**2 * U * (U / omega_y + b * V / omega_x - b * r * U / alpha)
        b = float(np.sum(sV) / np.sum(sU))

        a = float(Y_bar - b * X_bar)

    return _YorkState(a, b, W, U, V, float(X_bar), degenerate)


def yorkfit(
    x: Sequence,
    sigma_x: Sequence,
    y: Sequence | None = None,
    sigma_y: Sequence | None = None,
    iterations: int = DEFAULT_YORK_ITERATIONS,
) -> YorkFit:
    """York (1968) two-dimensional least-squares fit of ``y = a + b·x``.

    May be called as ``yorkfit(x, σx, y, σy)`` with parallel arrays, or as
    ``yorkfit(xs, ys)`` with two sequences of :class:`UncertainValue`.

    Args:
        x: Independent-variable values.
        sigma_x: One-sigma uncertainties of ``x``.
        y: Dependent-variable values.
        sigma_y: One-sigma uncertainties of ``y``.
        iterations: Number of slope-update iterations. The count is fixed;
            there is no convergence test. Defaults to ``10``.

    Returns:
        YorkFit: Intercept and slope (with one-sigma uncertainties), MSWD and
        the number of points used.

    Raises:
        InsufficientData: If fewer than two rows remain after dropping rows
            with a NaN in any of ``x``, ``σx``, ``y`` or ``σy``.
        ValueError: If array lengths differ, ``iterations < 1`` or ``x`` has
            no spread.
        DomainError: If the adjusted points have no spread, so the slope
            uncertainty is undefined.

    Note:
        The Pearson correlation of the data themselves is used as the x/y
        error correlation of every point. When that correlation makes a
        weight denominator vanish (collinear data whose slope equals
        ``σy/σx``), the fit is repeated with uncorrelated errors and a
        ``RuntimeWarning`` is issued.
    """
    if y is None and sigma_y is None:
        xs, ys = list(x), list(sigma_x)
        if not all(isinstance(v, UncertainValue) for v in xs + ys):
            raise TypeError(
                "yorkfit(xs, ys) requires two sequences of UncertainValue objects."
            )
        x, sigma_x, y, sigma_y = means(xs), stddevs(xs), means(ys), stddevs(ys)
    elif y is None or sigma_y is None:
        raise TypeError("yorkfit requires either (x, σx, y, σy) or (xs, ys).")

    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}.")

    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    sigma_x = np.asarray(sigma_x, dtype=float).ravel()
    sigma_y = np.asarray(sigma_y, dtype=float).ravel()
    if not (x.size == y.size == sigma_x.size == sigma_y.size):
        raise ValueError(
            "x, σx, y and σy must have equal lengths, got "
            f"{x.size}, {sigma_x.size}, {y.size}, {sigma_y.size}."
        )

    keep = ~(np.isnan(x) | np.isnan(y) | np.isnan(sigma_x) | np.isnan(sigma_y))
    if not np.all(keep):
        logger.debug("yorkfit: dropped %d rows with missing data", int(np.sum(~keep)))
    x, y, sigma_x, sigma_y = x[keep], y[keep], sigma_x[keep], sigma_y[keep]

    n = int(x.size)
    if n < 2:
        raise InsufficientData(
            f"yorkfit needs at least 2 rows without missing data, got {n}."
        )
    if np.ptp(x) == 0:
        raise ValueError("yorkfit requires at least two distinct x values.")

    # Ordinary least squares for a first slope estimate
    _, b0 = lsqfit(x, y)

    omega_x = 1.0 / sigma_x**2
    omega_y = 1.0 / sigma_y**2
    alpha = np.sqrt(omega_x * omega_y)

    xc = x - np.mean(x)
    yc = y - np.mean(y)
    r = float(np.sum(xc * yc) / (np.sqrt(np.sum(xc**2)) * np.sqrt(np.sum(yc**2))))
    if not np.isfinite(r):
        # y has no spread: the data carry no x/y correlation
        r = 0.0

    state = _york_iterate(x, y, omega_x, omega_y, alpha, r, b0, iterations)
    if state.degenerate:
        warnings.warn(
            f"yorkfit: weight denominators vanished for error correlation r={r:.6g}; "
            "refitting with uncorrelated errors.",
            RuntimeWarning,
            stacklevel=2,
        )
        r = 0.0
        state = _york_iterate(x, y, omega_x, omega_y, alpha, r, b0, iterations)
    a, b, W, U, V, X_bar = state.a, state.b, state.W, state.U, state.V, state.X_bar

    # Adjusted points and parameter uncertainties
    beta = W * (U / omega_y + b * V / omega_x - (b * U + V) * r / alpha)
    u = X_bar + beta

    xm = np.sum(W * u) / np.sum(W)
    spread = float(np.sum(W * (u - xm) ** 2))
    if not spread > 0:
        raise DomainError(
            "yorkfit: adjusted x values have no spread; slope uncertainty is undefined."
        )
    sigma_b = float(np.sqrt(1.0 / spread))
    sigma_a = float(np.sqrt(1.0 / np.sum(W) + xm**2 * sigma_b**2))

    mswd = float(np.sum((y - a - b * x) ** 2 / (sigma_y**2 + b**2 * sigma_x**2)) / n)

    logger.debug("yorkfit: n=%d a=%g b=%g mswd=%g", n, a, b, mswd)
    return YorkFit(UncertainValue(a, sigma_a), UncertainValue(b, sigma_b), mswd, n)
