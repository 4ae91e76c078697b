"""First-order (linearized) uncertainty propagation for scalar measurements.

An :class:`UncertainValue` carries a central value and a one-sigma standard
deviation. Arithmetic between two values assumes they are independent; when
two quantities share an error source (for example two ages computed with the
same decay constant) use :func:`add`, :func:`subtract`, :func:`multiply` or
:func:`divide` with an explicit correlation coefficient ``rho``.

Propagation rules (first-order Taylor expansion):
- Addition/subtraction: σ² = σa² + σb² ± 2ρσaσb
- Multiplication/division: (σ/y)² = (σa/a)² + (σb/b)² ± 2ρ(σa/a)(σb/b)
- log(x): σ = σx / x
- exp(x): σ = exp(x)·σx
- x**k: σ = |k·x^(k-1)|·σx

Note:
    Linearized propagation is exact only for linear combinations of jointly
    normal variables. For strongly nonlinear transforms of values with large
    relative uncertainty the result is an approximation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Iterable, Iterator, Union

import numpy as np

from .exceptions import DomainError
from .reporting import format_value_with_uncertainty


@dataclass(frozen=True)
class UncertainValue:
    """A central value with a one-sigma standard deviation.

    Attributes:
        mean: Central (best-estimate) value.
        stddev: One-sigma standard deviation, always stored as non-negative.
            It may be non-finite only when ``mean`` is.

    Raises:
        DomainError: If ``stddev`` is NaN or infinite for a finite ``mean``.
    """

    mean: float
    stddev: float = 0.0

    def __post_init__(self) -> None:
        mean = float(self.mean)
        stddev = abs(float(self.stddev))
        if math.isfinite(mean) and not math.isfinite(stddev):
            raise DomainError(
                f"Standard deviation of a finite value must be finite, got {mean!r} ± {stddev!r}."
            )
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "stddev", stddev)

    @property
    def variance(self) -> float:
        return self.stddev**2

    @property
    def relative(self) -> float:
        """Relative (fractional) uncertainty σ/|mean|; ``nan`` for a zero mean."""
        if self.mean == 0:
            return math.nan
        return self.stddev / abs(self.mean)

    def __iter__(self) -> Iterator[float]:
        yield self.mean
        yield self.stddev

    def __float__(self) -> float:
        return self.mean

    def __str__(self) -> str:
        return format_value_with_uncertainty(self.mean, self.stddev)

    def __neg__(self) -> "UncertainValue":
        return UncertainValue(-self.mean, self.stddev)

    def __pos__(self) -> "UncertainValue":
        return self

    def __abs__(self) -> "UncertainValue":
        return UncertainValue(abs(self.mean), self.stddev)

    def __add__(self, other):
        if isinstance(other, UncertainValue):
            return add(self, other)
        if isinstance(other, Real):
            return UncertainValue(self.mean + float(other), self.stddev)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, UncertainValue):
            return subtract(self, other)
        if isinstance(other, Real):
            return UncertainValue(self.mean - float(other), self.stddev)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, Real):
            return UncertainValue(float(other) - self.mean, self.stddev)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, UncertainValue):
            return multiply(self, other)
        if isinstance(other, Real):
            c = float(other)
            return UncertainValue(self.mean * c, self.stddev * abs(c))
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, UncertainValue):
            return divide(self, other)
        if isinstance(other, Real):
            c = float(other)
            return UncertainValue(self.mean / c, self.stddev / abs(c))
        return NotImplemented

    def __rtruediv__(self, other):
        if isinstance(other, Real):
            c = float(other)
            return UncertainValue(c / self.mean, abs(c) * self.stddev / self.mean**2)
        return NotImplemented

    def __pow__(self, exponent):
        if isinstance(exponent, UncertainValue):
            return NotImplemented
        if not isinstance(exponent, Real):
            return NotImplemented
        return power(self, float(exponent))

    def __rpow__(self, base):
        if not isinstance(base, Real):
            return NotImplemented
        c = float(base)
        if c <= 0:
            raise DomainError(
                f"Base of an uncertain exponent must be positive, got {c!r}."
            )
        out = c**self.mean
        return UncertainValue(out, abs(out * math.log(c)) * self.stddev)


Number = Union[Real, UncertainValue]


def _as_uncertain(x: Number) -> UncertainValue:
    if isinstance(x, UncertainValue):
        return x
    if isinstance(x, Real):
        return UncertainValue(float(x), 0.0)
    raise TypeError(f"Expected a number or UncertainValue, got {type(x).__name__}.")


def _check_rho(rho: float) -> float:
    rho = float(rho)
    if not -1.0 <= rho <= 1.0:
        raise ValueError(f"Correlation coefficient must lie in [-1, 1], got {rho!r}.")
    return rho


def _from_variance(mean: float, variance: float) -> UncertainValue:
    # Rounding can push a fully cancelled variance slightly below zero.
    return UncertainValue(mean, math.sqrt(max(variance, 0.0)))


def add(a: Number, b: Number, rho: float = 0.0) -> UncertainValue:
    """Return ``a + b`` with σ² = σa² + σb² + 2ρσaσb."""
    a, b = _as_uncertain(a), _as_uncertain(b)
    rho = _check_rho(rho)
    var = a.variance + b.variance + 2.0 * rho * a.stddev * b.stddev
    return _from_variance(a.mean + b.mean, var)


def subtract(a: Number, b: Number, rho: float = 0.0) -> UncertainValue:
    """Return ``a - b`` with σ² = σa² + σb² - 2ρσaσb.

    With ``rho=1`` and equal standard deviations the shared error cancels
    completely.
    """
    a, b = _as_uncertain(a), _as_uncertain(b)
    rho = _check_rho(rho)
    var = a.variance + b.variance - 2.0 * rho * a.stddev * b.stddev
    return _from_variance(a.mean - b.mean, var)


def multiply(a: Number, b: Number, rho: float = 0.0) -> UncertainValue:
    """Return ``a * b``; relative variances add, plus the 2ρ cross term."""
    a, b = _as_uncertain(a), _as_uncertain(b)
    rho = _check_rho(rho)
    # Derivative form of the relative-variance rule, valid for zero means.
    var = (
        (b.mean * a.stddev) ** 2
        + (a.mean * b.stddev) ** 2
        + 2.0 * rho * a.mean * b.mean * a.stddev * b.stddev
    )
    return _from_variance(a.mean * b.mean, var)


def divide(a: Number, b: Number, rho: float = 0.0) -> UncertainValue:
    """Return ``a / b``; relative variances add, minus the 2ρ cross term.

    Raises:
        ZeroDivisionError: If the central value of ``b`` is zero.
    """
    a, b = _as_uncertain(a), _as_uncertain(b)
    rho = _check_rho(rho)
    if b.mean == 0:
        raise ZeroDivisionError("Cannot divide by an uncertain value with zero mean.")
    q = a.mean / b.mean
    var = (
        (a.stddev / b.mean) ** 2
        + (q * b.stddev / b.mean) ** 2
        - 2.0 * rho * q * a.stddev * b.stddev / b.mean**2
    )
    return _from_variance(q, var)


def power(x: Number, exponent: float) -> UncertainValue:
    """Return ``x ** exponent`` for a plain numeric exponent.

    Raises:
        DomainError: For a negative base with a non-integer exponent, or a
            zero base where the derivative is undefined (exponent < 1).
    """
    x = _as_uncertain(x)
    k = float(exponent)
    if k == 0:
        return UncertainValue(1.0, 0.0)
    if x.mean < 0 and not k.is_integer():
        raise DomainError(
            f"Non-integer power {k!r} of negative value {x.mean!r} is undefined."
        )
    if x.mean == 0 and k < 1:
        raise DomainError(f"Power {k!r} of zero has an undefined derivative.")
    out = x.mean**k
    return UncertainValue(out, abs(k * x.mean ** (k - 1.0)) * x.stddev)


def log(x: Number) -> UncertainValue:
    """Natural logarithm; σ = σx / x.

    Raises:
        DomainError: If the central value is not positive.
    """
    x = _as_uncertain(x)
    if not x.mean > 0:
        raise DomainError(f"log requires a positive value, got {x.mean!r}.")
    return UncertainValue(math.log(x.mean), x.stddev / x.mean)


def log1p(x: Number) -> UncertainValue:
    """``log(1 + x)``; σ = σx / (1 + x).

    This is the form used by the isotopic age equation, where ``x`` is a
    radiogenic daughter/parent ratio.

    Raises:
        DomainError: If ``1 + x`` is not positive.
    """
    x = _as_uncertain(x)
    if not 1.0 + x.mean > 0:
        raise DomainError(
            f"log(1 + x) requires 1 + x > 0, got x = {x.mean!r}."
        )
    return UncertainValue(math.log1p(x.mean), x.stddev / (1.0 + x.mean))


def exp(x: Number) -> UncertainValue:
    """Exponential; σ = exp(x)·σx."""
    x = _as_uncertain(x)
    out = math.exp(x.mean)
    return UncertainValue(out, out * x.stddev)


def sqrt(x: Number) -> UncertainValue:
    """Square root; σ = σx / (2·sqrt(x)).

    Raises:
        DomainError: If the central value is negative, or zero with a
            non-zero standard deviation.
    """
    x = _as_uncertain(x)
    if x.mean < 0:
        raise DomainError(f"sqrt requires a non-negative value, got {x.mean!r}.")
    out = math.sqrt(x.mean)
    if out == 0:
        if x.stddev > 0:
            raise DomainError("sqrt of zero with non-zero uncertainty is undefined.")
        return UncertainValue(0.0, 0.0)
    return UncertainValue(out, x.stddev / (2.0 * out))


def means(values: Iterable[UncertainValue]) -> np.ndarray:
    return np.array([v.mean for v in values], dtype=float)


def stddevs(values: Iterable[UncertainValue]) -> np.ndarray:
    return np.array([v.stddev for v in values], dtype=float)
