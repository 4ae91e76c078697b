"""Bivariate isotope-ratio analyses with a full 2×2 covariance matrix.

A single spot or grain analysis reports two ratios, their one-sigma
uncertainties and the correlation coefficient between them. The covariance
matrix is always built from those inputs, so it is symmetric and positive
semi-definite by construction:

    Σ = [[σx²,      ρ·σx·σy],
         [ρ·σx·σy,  σy²    ]]

Two concrete analysis types are provided:
    - :class:`UPbAnalysis`: μ = [²⁰⁷Pb/²³⁵U, ²⁰⁶Pb/²³⁸U] (Wetherill concordia)
    - :class:`PbPbAnalysis`: μ = [²⁰⁶Pb/²³⁸U, ²⁰⁷Pb/²⁰⁶Pb]

Analyses are immutable; their arrays are flagged read-only.
"""

from __future__ import annotations

from typing import Iterator, Optional

import numpy as np


def _frozen(values, shape) -> np.ndarray:
    arr = np.array(values, dtype=float).reshape(shape)
    arr.setflags(write=False)
    return arr


def _restore(cls, mu, sigma, cov):
    # Bypasses the ratio-based __init__ of the subclasses so a stored
    # covariance is kept exactly.
    obj = cls.__new__(cls)
    TwoComponentAnalysis.__init__(obj, mu, sigma, cov)
    return obj


def _rebrand(cls, base: "TwoComponentAnalysis"):
    return _restore(cls, base.mu, base.sigma, base.cov)


class TwoComponentAnalysis:
    """Mean vector, standard deviations and covariance of two ratios.

    Attributes:
        mu: Length-2 mean vector.
        sigma: Length-2 one-sigma vector; ``sigma**2 == diag(cov)``.
        cov: 2×2 covariance matrix.
    """

    __slots__ = ("mu", "sigma", "cov")

    def __init__(self, mu, sigma, cov) -> None:
        object.__setattr__(self, "mu", _frozen(mu, (2,)))
        object.__setattr__(self, "sigma", _frozen(sigma, (2,)))
        object.__setattr__(self, "cov", _frozen(cov, (2, 2)))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        # pickle and copy would otherwise restore slots through __setattr__
        return (_restore, (type(self), self.mu, self.sigma, self.cov))

    @classmethod
    def from_ratios(
        cls, x: float, sigma_x: float, y: float, sigma_y: float, correlation: float
    ) -> "TwoComponentAnalysis":
        """Build an analysis from two ratios, their 1σ and their correlation.

        Raises:
            ValueError: If a standard deviation is negative or the
                correlation lies outside [-1, 1].
        """
        sx = float(sigma_x)
        sy = float(sigma_y)
        rho = float(correlation)
        if sx < 0 or sy < 0:
            raise ValueError(
                f"Standard deviations must be non-negative, got {sx!r} and {sy!r}."
            )
        if not -1.0 <= rho <= 1.0:
            raise ValueError(f"Correlation must lie in [-1, 1], got {rho!r}.")
        cov = sx * sy * rho
        return cls([x, y], [sx, sy], [[sx**2, cov], [cov, sy**2]])

    @classmethod
    def from_covariance(cls, mu, cov) -> "TwoComponentAnalysis":
        """Build an analysis from a mean vector and covariance matrix."""
        cov = np.asarray(cov, dtype=float).reshape(2, 2)
        if not np.allclose(cov, cov.T):
            raise ValueError("Covariance matrix must be symmetric.")
        if np.any(np.diag(cov) < 0):
            raise ValueError("Covariance matrix has a negative variance.")
        return cls(mu, np.sqrt(np.diag(cov)), cov)

    @property
    def correlation(self) -> float:
        denom = self.sigma[0] * self.sigma[1]
        if denom == 0:
            return 0.0
        return float(self.cov[0, 1] / denom)

    def rand(
        self, n: Optional[int] = None, rng: Optional[np.random.Generator] = None
    ) -> np.ndarray:
        """Draw from the bivariate normal distribution of this analysis.

        Returns:
            numpy.ndarray: Shape ``(2,)`` when ``n`` is ``None``, otherwise
            ``(n, 2)``.
        """
        rng = np.random.default_rng() if rng is None else rng
        return rng.multivariate_normal(self.mu, self.cov, size=n)

    def samples(self, seed: Optional[int] = None) -> "AnalysisSamples":
        """Return a lazy, restartable stream of draws for Monte Carlo use."""
        return AnalysisSamples(self, seed)

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(
            np.array_equal(self.mu, other.mu)
            and np.array_equal(self.sigma, other.sigma)
            and np.array_equal(self.cov, other.cov)
        )

    def __hash__(self) -> int:
        return hash((type(self), self.mu.tobytes(), self.cov.tobytes()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mu={self.mu.tolist()}, cov={self.cov.tolist()})"


class AnalysisSamples:
    """Iterable of bivariate-normal draws from one analysis.

    Each call to ``iter()`` starts a new generator from the same seed, so a
    seeded stream replays identically. The stream is infinite; slice it with
    :func:`itertools.islice`.
    """

    def __init__(self, analysis: TwoComponentAnalysis, seed: Optional[int] = None):
        self.analysis = analysis
        self.seed = seed

    def __iter__(self) -> Iterator[np.ndarray]:
        rng = np.random.default_rng(self.seed)
        while True:
            yield rng.multivariate_normal(self.analysis.mu, self.analysis.cov)


class UPbAnalysis(TwoComponentAnalysis):
    """U-Pb analysis with μ = [²⁰⁷Pb/²³⁵U, ²⁰⁶Pb/²³⁸U].

    Examples:
        >>> d = UPbAnalysis(22.6602, 0.0175, 0.40864, 0.00017, 0.83183)
        >>> d.mu.tolist()
        [22.6602, 0.40864]
    """

    __slots__ = ()

    def __init__(
        self,
        r207_235: float,
        sigma_207_235: float,
        r206_238: float,
        sigma_206_238: float,
        correlation: float,
    ) -> None:
        built = TwoComponentAnalysis.from_ratios(
            r207_235, sigma_207_235, r206_238, sigma_206_238, correlation
        )
        super().__init__(built.mu, built.sigma, built.cov)

    @classmethod
    def from_ratios(cls, x, sigma_x, y, sigma_y, correlation) -> "UPbAnalysis":
        return cls(x, sigma_x, y, sigma_y, correlation)

    @classmethod
    def from_covariance(cls, mu, cov) -> "UPbAnalysis":
        return _rebrand(cls, TwoComponentAnalysis.from_covariance(mu, cov))

    @property
    def r207_235(self) -> float:
        return float(self.mu[0])

    @property
    def r206_238(self) -> float:
        return float(self.mu[1])


class PbPbAnalysis(TwoComponentAnalysis):
    """U-Pb-Pb analysis with μ = [²⁰⁶Pb/²³⁸U, ²⁰⁷Pb/²⁰⁶Pb]."""

    __slots__ = ()

    def __init__(
        self,
        r206_238: float,
        sigma_206_238: float,
        r207_206: float,
        sigma_207_206: float,
        correlation: float,
    ) -> None:
        built = TwoComponentAnalysis.from_ratios(
            r206_238, sigma_206_238, r207_206, sigma_207_206, correlation
        )
        super().__init__(built.mu, built.sigma, built.cov)

    @classmethod
    def from_ratios(cls, x, sigma_x, y, sigma_y, correlation) -> "PbPbAnalysis":
        return cls(x, sigma_x, y, sigma_y, correlation)

    @classmethod
    def from_covariance(cls, mu, cov) -> "PbPbAnalysis":
        return _rebrand(cls, TwoComponentAnalysis.from_covariance(mu, cov))

    @property
    def r206_238(self) -> float:
        return float(self.mu[0])

    @property
    def r207_206(self) -> float:
        return float(self.mu[1])


def make_upb_analysis(
    r75: float, sigma_75: float, r68: float, sigma_68: float, correlation: float
) -> UPbAnalysis:
    return UPbAnalysis(r75, sigma_75, r68, sigma_68, correlation)


def make_pbpb_analysis(
    r68: float, sigma_68: float, r76: float, sigma_76: float, correlation: float
) -> PbPbAnalysis:
    return PbPbAnalysis(r68, sigma_68, r76, sigma_76, correlation)

