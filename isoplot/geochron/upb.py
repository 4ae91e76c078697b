"""U-Pb and Pb-Pb ages, discordance and the Stacey-Kramers common-lead model.

Isotopic age equation for a parent P decaying to radiogenic daughter D*:

    t = ln(1 + D*/P) / λ

The ²⁰⁶Pb/²³⁸U and ²⁰⁷Pb/²³⁵U ages are two independent estimates of the same
crystallization age; a closed, common-lead-free system plots on concordia
where they agree. Ages are in Ma when decay constants are in 1/Myr.

Uncertainty on each age combines the ratio uncertainty and the decay-constant
uncertainty to first order (see :mod:`isoplot.measurement`).
"""

from __future__ import annotations

import logging
from typing import Tuple, Union

import numpy as np
from scipy.optimize import brentq

from ..exceptions import DomainError, NoConvergence
from ..measurement import UncertainValue, log1p
from .analysis import PbPbAnalysis, TwoComponentAnalysis, UPbAnalysis
from .decay import DEFAULT_235, DEFAULT_238, R238_235, Selector, decay_constant

logger = logging.getLogger(__name__)

# Stacey & Kramers (1975) two-stage model reservoirs:
# (t0 [Ma], ²⁰⁶Pb/²⁰⁴Pb, ²⁰⁷Pb/²⁰⁴Pb, ²³⁸U/²⁰⁴Pb)
STACEY_KRAMERS_STAGE1 = (3700.0, 11.152, 12.998, 7.19)
STACEY_KRAMERS_STAGE2 = (0.0, 18.700, 15.628, 9.74)
EARTH_AGE = 4570.0

Analysis = Union[UPbAnalysis, PbPbAnalysis]


def _ratio_206_238(analysis: TwoComponentAnalysis) -> UncertainValue:
    if isinstance(analysis, UPbAnalysis):
        return UncertainValue(analysis.mu[1], analysis.sigma[1])
    if isinstance(analysis, PbPbAnalysis):
        return UncertainValue(analysis.mu[0], analysis.sigma[0])
    raise TypeError(
        f"age68 requires a UPbAnalysis or PbPbAnalysis, got {type(analysis).__name__}."
    )


def age68(analysis: Analysis, decayconstant: Selector = DEFAULT_238) -> UncertainValue:
    """²⁰⁶Pb/²³⁸U age, ``ln(1 + ²⁰⁶Pb/²³⁸U) / λ238``.

    Args:
        analysis: A :class:`UPbAnalysis` (second component) or a
            :class:`PbPbAnalysis` (first component).
        decayconstant: Registry label or number for λ238, in 1/Myr.

    Raises:
        InvalidSelector: If ``decayconstant`` is not recognised.
        DomainError: If ``1 + ratio`` is not positive.
    """
    lam = decay_constant(decayconstant)
    return log1p(_ratio_206_238(analysis)) / lam


def age75(analysis: UPbAnalysis, decayconstant: Selector = DEFAULT_235) -> UncertainValue:
    """²⁰⁷Pb/²³⁵U age, ``ln(1 + ²⁰⁷Pb/²³⁵U) / λ235``.

    Raises:
        TypeError: If ``analysis`` is not a :class:`UPbAnalysis`.
        InvalidSelector: If ``decayconstant`` is not recognised.
        DomainError: If ``1 + ratio`` is not positive.
    """
    if not isinstance(analysis, UPbAnalysis):
        raise TypeError(
            f"age75 requires a UPbAnalysis, got {type(analysis).__name__}."
        )
    lam = decay_constant(decayconstant)
    ratio = UncertainValue(analysis.mu[0], analysis.sigma[0])
    return log1p(ratio) / lam


def age(
    analysis: UPbAnalysis,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
) -> Tuple[UncertainValue, UncertainValue]:
    """Return ``(age75, age68)``, two independent ages of the same analysis."""
    return (
        age75(analysis, decayconstant=decayconstant235),
        age68(analysis, decayconstant=decayconstant238),
    )


def discordance(
    analysis: UPbAnalysis,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
) -> float:
    """Percent discordance ``100·(t75 − t68)/t75`` from central ages only.

    Discordance is a diagnostic percentage and carries no uncertainty.

    Raises:
        DomainError: If the ²⁰⁷Pb/²³⁵U age is zero, which happens for a
            zero ²⁰⁷Pb/²³⁵U ratio.
    """
    t75, t68 = age(analysis, decayconstant235, decayconstant238)
    if t75.mean == 0:
        raise DomainError(
            "Discordance is undefined for a zero ²⁰⁷Pb/²³⁵U age "
            f"(²⁰⁷Pb/²³⁵U = {analysis.mu[0]!r})."
        )
    return (t75.mean - t68.mean) / t75.mean * 100


def ratio_pbpb(t, lambda235: float, lambda238: float):
    """Radiogenic ²⁰⁷Pb/²⁰⁶Pb of a closed system of age ``t`` (Ma).

    Accepts a scalar or a numpy array of ages. At ``t == 0`` the limit
    ``λ235 / (λ238 · ²³⁸U/²³⁵U)`` is returned.
    """
    t = np.asarray(t, dtype=float)
    with np.errstate(invalid="ignore"):
        growth = np.expm1(lambda235 * t) / np.expm1(lambda238 * t)
    growth = np.where(t == 0, lambda235 / lambda238, growth)
    out = growth / R238_235.mean
    return float(out) if out.ndim == 0 else out


def age76(
    analysis: PbPbAnalysis,
    t_min: float,
    t_max: float,
    decayconstant235: Selector = "jaffey-235",
    decayconstant238: Selector = DEFAULT_238,
) -> float:
    """²⁰⁷Pb/²⁰⁶Pb age found by root-finding on ``[t_min, t_max]``.

    Solves ``ratio_pbpb(t) = ²⁰⁷Pb/²⁰⁶Pb`` with Brent's method. The caller
    must supply a bracket that contains the physically sensible root.

    Raises:
        TypeError: If ``analysis`` is not a :class:`PbPbAnalysis`.
        ValueError: If ``t_min >= t_max``.
        NoConvergence: If the bracket does not contain a sign change or the
            solver fails to converge.
    """
    if not isinstance(analysis, PbPbAnalysis):
        raise TypeError(f"age76 requires a PbPbAnalysis, got {type(analysis).__name__}.")
    t_min = float(t_min)
    t_max = float(t_max)
    if not t_min < t_max:
        raise ValueError(f"t_min must be less than t_max, got [{t_min}, {t_max}].")

    l235 = decay_constant(decayconstant235).mean
    l238 = decay_constant(decayconstant238).mean
    target = float(analysis.mu[1])

    def residual(t: float) -> float:
        return ratio_pbpb(t, l235, l238) - target

    f_lo, f_hi = residual(t_min), residual(t_max)
    if not (np.isfinite(f_lo) and np.isfinite(f_hi)) or f_lo * f_hi > 0:
        raise NoConvergence(
            f"²⁰⁷Pb/²⁰⁶Pb = {target!r} is not bracketed by ages [{t_min}, {t_max}] Ma."
        )

    try:
        root, result = brentq(residual, t_min, t_max, full_output=True, disp=False)
    except (ValueError, RuntimeError) as exc:
        raise NoConvergence(f"age76 root finding failed: {exc}") from exc
    if not result.converged:
        raise NoConvergence(
            f"age76 did not converge after {result.iterations} iterations "
            f"on [{t_min}, {t_max}] Ma."
        )
    logger.debug("age76: %d iterations, t=%g Ma", result.iterations, root)
    return float(root)


def stacey_kramers(t, decayconstant238: Selector = DEFAULT_238):
    """Stacey-Kramers (1975) common-lead ²⁰⁶Pb/²⁰⁴Pb and ²⁰⁷Pb/²⁰⁴Pb at ``t`` Ma.

    Two-stage model: for 3700 ≤ t < 4570 the first-stage reservoir applies,
    for t < 3700 the second. Radiogenic ingrowth between the reservoir time
    and ``t`` is subtracted from the reservoir composition.

    Args:
        t: Age in Ma; a scalar or numpy array.
        decayconstant238: λ238 selector. Only the central value is used.

    Returns:
        tuple: ``(r206_204, r207_204)`` as floats for scalar ``t`` or arrays
        for array ``t``. Both are NaN for ``t >= 4570`` (before accretion).
    """
    lam = decay_constant(decayconstant238).mean
    t_arr = np.asarray(t, dtype=float)

    stage1 = (t_arr >= STACEY_KRAMERS_STAGE1[0]) & (t_arr < EARTH_AGE)
    stage2 = t_arr < STACEY_KRAMERS_STAGE1[0]

    t0 = np.full(t_arr.shape, np.nan)
    r64 = np.full(t_arr.shape, np.nan)
    r74 = np.full(t_arr.shape, np.nan)
    u_pb = np.full(t_arr.shape, np.nan)
    for mask, (res_t0, res_64, res_74, res_mu) in (
        (stage1, STACEY_KRAMERS_STAGE1),
        (stage2, STACEY_KRAMERS_STAGE2),
    ):
        t0[mask] = res_t0
        r64[mask] = res_64
        r74[mask] = res_74
        u_pb[mask] = res_mu

    ingrowth = np.expm1(lam * t_arr) - np.expm1(lam * t0)
    r64 = r64 - ingrowth * u_pb
    r74 = r74 - ingrowth * u_pb / R238_235.mean

    if t_arr.ndim == 0:
        return float(r64), float(r74)
    return r64, r74


def concordia_ratios(
    t,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
):
    """²⁰⁷Pb/²³⁵U and ²⁰⁶Pb/²³⁸U of a concordant system of age ``t`` (Ma)."""
    l235 = decay_constant(decayconstant235).mean
    l238 = decay_constant(decayconstant238).mean
    t_arr = np.asarray(t, dtype=float)
    r75 = np.expm1(l235 * t_arr)
    r68 = np.expm1(l238 * t_arr)
    if t_arr.ndim == 0:
        return float(r75), float(r68)
    return r75, r68

