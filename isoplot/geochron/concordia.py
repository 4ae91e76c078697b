"""Concordia intercepts and confidence-ellipse coordinates.

A population of U-Pb analyses that lost (or gained) Pb at a single time lies
on a discordia line in Wetherill space (x = ²⁰⁷Pb/²³⁵U, y = ²⁰⁶Pb/²³⁸U). The
line crosses concordia at the crystallization age (upper intercept) and the
disturbance age (lower intercept).

Intercept uncertainties are estimated by Monte Carlo: every analysis is
resampled from its bivariate normal distribution, the resampled population is
York-fitted, and the crossing ages of each fitted line are collected.

Only coordinates are computed here; drawing is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np
from scipy.optimize import brentq
from scipy.stats import chi2

from ..exceptions import InsufficientData, NoConvergence
from ..measurement import UncertainValue
from ..stats.regression import yorkfit
from .analysis import TwoComponentAnalysis, UPbAnalysis
from .decay import DEFAULT_235, DEFAULT_238, Selector, decay_constant

logger = logging.getLogger(__name__)

# Radius (in σ) of the 95% confidence region of a bivariate normal
SIGMA_2D_95 = float(np.sqrt(chi2.ppf(0.95, 2)))

DEFAULT_NRESAMPLINGS = 1000
# Search window (Ma) and grid resolution for concordia crossings
CONCORDIA_WINDOW = (-1000.0, 5000.0)
CONCORDIA_GRID_POINTS = 6001


def ellipse(
    analysis: TwoComponentAnalysis,
    sigmalevel: float = SIGMA_2D_95,
    npoints: int = 50,
) -> Tuple[np.ndarray, np.ndarray]:
    """Outline of the confidence ellipse of a two-component analysis.

    Args:
        analysis: Any two-component analysis.
        sigmalevel: Radius of the ellipse in standard deviations. Defaults
            to the 95% confidence radius of a bivariate normal (≈2.448).
        npoints: Number of outline points. The outline is closed (the first
            point is repeated at the end).

    Returns:
        tuple[numpy.ndarray, numpy.ndarray]: ``x`` and ``y`` coordinates.
    """
    if npoints < 3:
        raise ValueError(f"npoints must be at least 3, got {npoints}.")
    evals, evecs = np.linalg.eigh(analysis.cov)
    theta = np.linspace(0.0, 2.0 * np.pi, npoints)
    circle = np.vstack([np.cos(theta), np.sin(theta)])
    outline = evecs @ (np.sqrt(np.clip(evals, 0.0, None))[:, None] * circle)
    outline = sigmalevel * outline + analysis.mu[:, None]
    return outline[0], outline[1]


def concordia_intercepts(
    intercept: float,
    slope: float,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
    window: Tuple[float, float] = CONCORDIA_WINDOW,
    npoints: int = CONCORDIA_GRID_POINTS,
) -> np.ndarray:
    """Ages (Ma) at which ``y = intercept + slope·x`` crosses concordia.

    The window is scanned on a regular grid for sign changes, each of which
    is refined with Brent's method.

    Returns:
        numpy.ndarray: Sorted crossing ages; empty if the line misses
        concordia within ``window``.
    """
    l235 = decay_constant(decayconstant235).mean
    l238 = decay_constant(decayconstant238).mean
    a = float(intercept)
    b = float(slope)

    def distance(t):
        return np.expm1(l238 * t) - (a + b * np.expm1(l235 * t))

    grid = np.linspace(window[0], window[1], npoints)
    sign = np.sign(distance(grid))

    roots = list(grid[sign == 0])
    for i in np.flatnonzero(sign[:-1] * sign[1:] < 0):
        roots.append(brentq(distance, grid[i], grid[i + 1]))
    return np.unique(np.asarray(roots, dtype=float))


def _intercept_samples(
    analyses: Sequence[UPbAnalysis],
    nresamplings: int,
    seed,
    decayconstant235: Selector,
    decayconstant238: Selector,
) -> Tuple[np.ndarray, np.ndarray]:
    analyses = list(analyses)
    if len(analyses) < 2:
        raise InsufficientData(
            f"Concordia intercepts need at least 2 analyses, got {len(analyses)}."
        )
    for d in analyses:
        if not isinstance(d, UPbAnalysis):
            raise TypeError(
                f"Concordia intercepts require UPbAnalysis objects, got {type(d).__name__}."
            )
    if nresamplings < 2:
        raise ValueError(f"nresamplings must be at least 2, got {nresamplings}.")

    rng = np.random.default_rng(seed)
    # (nresamplings, nanalyses, 2)
    draws = np.stack([d.rand(nresamplings, rng) for d in analyses], axis=1)
    sigma_x = np.array([d.sigma[0] for d in analyses])
    sigma_y = np.array([d.sigma[1] for d in analyses])

    lower, upper = [], []
    for sample in draws:
        fit = yorkfit(sample[:, 0], sigma_x, sample[:, 1], sigma_y)
        roots = concordia_intercepts(
            fit.intercept.mean, fit.slope.mean, decayconstant235, decayconstant238
        )
        if roots.size >= 2:
            lower.append(roots[0])
            upper.append(roots[-1])

    logger.info(
        "Concordia intercepts: %d of %d resamplings crossed concordia twice",
        len(upper),
        nresamplings,
    )
    if len(upper) < 2:
        raise NoConvergence(
            f"Only {len(upper)} of {nresamplings} resampled discordia lines "
            "crossed concordia twice within the search window."
        )
    return np.asarray(lower), np.asarray(upper)


def _summarize(samples: np.ndarray) -> UncertainValue:
    return UncertainValue(float(np.mean(samples)), float(np.std(samples, ddof=1)))


def intercepts(
    analyses: Sequence[UPbAnalysis],
    nresamplings: int = DEFAULT_NRESAMPLINGS,
    seed=None,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
) -> Tuple[UncertainValue, UncertainValue]:
    """Monte Carlo ``(lower, upper)`` concordia intercept ages in Ma.

    Args:
        analyses: At least two :class:`UPbAnalysis` on a common discordia.
        nresamplings: Number of Monte Carlo resamplings.
        seed: Seed for :func:`numpy.random.default_rng`, for reproducibility.

    Returns:
        tuple[UncertainValue, UncertainValue]: Mean ± standard deviation of
        the lower and upper intercept ages over accepted resamplings.

    Raises:
        InsufficientData: If fewer than two analyses are supplied.
        NoConvergence: If fewer than two resampled lines cross concordia
            twice.
    """
    lower, upper = _intercept_samples(
        analyses, nresamplings, seed, decayconstant235, decayconstant238
    )
    return _summarize(lower), _summarize(upper)


def upper_intercept(
    analyses: Sequence[UPbAnalysis],
    nresamplings: int = DEFAULT_NRESAMPLINGS,
    seed=None,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
) -> UncertainValue:
    """Monte Carlo upper concordia intercept age; see :func:`intercepts`."""
    _, upper = _intercept_samples(
        analyses, nresamplings, seed, decayconstant235, decayconstant238
    )
    return _summarize(upper)


def lower_intercept(
    analyses: Sequence[UPbAnalysis],
    nresamplings: int = DEFAULT_NRESAMPLINGS,
    seed=None,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
) -> UncertainValue:
    """Monte Carlo lower concordia intercept age; see :func:`intercepts`."""
    lower, _ = _intercept_samples(
        analyses, nresamplings, seed, decayconstant235, decayconstant238
    )
    return _summarize(lower)
