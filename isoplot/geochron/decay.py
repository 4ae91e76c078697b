"""Decay constants and the selector used by the age equations.

Constants are in 1/Myr so that ages come out in Ma. Each constant is an
:class:`~isoplot.measurement.UncertainValue` with a one-sigma uncertainty.

Sources:
    - ²³⁸U: Jaffey et al. (1971), half-life 4468.3 ± 2.4 Myr.
    - ²³⁵U: Schoene et al. (2006), 9.8569e-4 ± 0.0110e-4 (2σ) 1/Myr; the
      "internal" variant carries only the internal 0.0017e-4 (2σ).
    - ²³⁵U: Jaffey et al. (1971), half-life 703.81 ± 0.48 Myr.
    - ²³⁸U/²³⁵U: Hiess et al. (2012), 137.818 ± 0.0225.
"""

from __future__ import annotations

import math
from numbers import Real
from types import MappingProxyType
from typing import Mapping, Union

from ..exceptions import InvalidSelector
from ..measurement import UncertainValue

LAMBDA_238U = math.log(2) / UncertainValue(4.4683e3, 0.0024e3)
LAMBDA_235U = UncertainValue(9.8569e-4, 0.0110e-4 / 2)
LAMBDA_235U_INTERNAL = UncertainValue(9.8569e-4, 0.0017e-4 / 2)
LAMBDA_235U_JAFFEY = math.log(2) / UncertainValue(7.0381e2, 0.0048e2)

R238_235 = UncertainValue(137.818, 0.0225)

DECAY_CONSTANTS: Mapping[str, UncertainValue] = MappingProxyType(
    {
        "jaffey-238": LAMBDA_238U,
        "schoene-235": LAMBDA_235U,
        "schoene-235-internal": LAMBDA_235U_INTERNAL,
        "jaffey-235": LAMBDA_235U_JAFFEY,
    }
)

DEFAULT_238 = "jaffey-238"
DEFAULT_235 = "schoene-235"

Selector = Union[str, Real, UncertainValue]


def decay_constant(selector: Selector, uncertainty: float = 0.0) -> UncertainValue:
    """Resolve a decay-constant selector to an uncertain value.

    Args:
        selector: A registry label (``"jaffey-238"``, ``"schoene-235"``,
            ``"schoene-235-internal"``, ``"jaffey-235"``; case-insensitive,
            underscores accepted in place of hyphens), a plain number in
            1/Myr, or an :class:`UncertainValue` returned unchanged.
        uncertainty: One-sigma uncertainty attached to a plain number.
            Ignored for labels. Defaults to ``0.0``.

    Returns:
        UncertainValue: The decay constant in 1/Myr.

    Raises:
        InvalidSelector: If ``selector`` is an unknown label or an
            unsupported type.
    """
    if isinstance(selector, UncertainValue):
        return selector
    if isinstance(selector, str):
        key = selector.strip().lower().replace("_", "-")
        try:
            return DECAY_CONSTANTS[key]
        except KeyError:
            raise InvalidSelector(
                f"{selector!r} is not a valid decay constant; "
                f"choose one of {sorted(DECAY_CONSTANTS)} or pass a number."
            ) from None
    if isinstance(selector, Real) and not isinstance(selector, bool):
        return UncertainValue(float(selector), uncertainty)
    raise InvalidSelector(
        f"Decay constant selector must be a label or a number, got {type(selector).__name__}."
    )
