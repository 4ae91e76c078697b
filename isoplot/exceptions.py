"""Exception types raised by the isoplot numerical core.

Every exception derives from :class:`IsoplotError` and from the closest
built-in exception, so callers may catch either the package-specific type or
the standard one (``ValueError``/``RuntimeError``).
"""

from __future__ import annotations


class IsoplotError(Exception):
    """Base class for all isoplot errors."""


class InvalidSelector(IsoplotError, ValueError):
    """Decay-constant selector is neither a known label nor a number."""


class DomainError(IsoplotError, ValueError):
    """A log, sqrt or power was evaluated outside its real domain."""


class InsufficientData(IsoplotError, ValueError):
    """Too few usable points remain to compute a statistic."""


class NoConvergence(IsoplotError, RuntimeError):
    """A root finder could not bracket or converge on a solution."""
