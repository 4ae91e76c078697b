"""
A Python package for radiometric ages and uncertainty propagation.

Computes U-Pb and Pb-Pb ages with propagated uncertainties from isotope
ratios, and fits weighted means and York isochrons to populations of
uncertain measurements.

Modules:
    - measurement: Values with uncertainties and first-order propagation.
    - stats: Weighted mean, MSWD, ordinary least squares and York regression.
    - geochron: Decay constants, two-component analyses, ages, discordance,
      Stacey-Kramers common lead and concordia intercepts.
    - batch: Age tables and weighted-mean summaries as pandas DataFrames.
    - reporting: Value ± uncertainty rounding and formatting.
"""

__version__ = "1.0.0"

from .exceptions import (
    DomainError,
    InsufficientData,
    InvalidSelector,
    IsoplotError,
    NoConvergence,
)
from .geochron import (
    PbPbAnalysis,
    UPbAnalysis,
    age,
    age68,
    age75,
    age76,
    decay_constant,
    discordance,
    ellipse,
    intercepts,
    lower_intercept,
    make_pbpb_analysis,
    make_upb_analysis,
    stacey_kramers,
    upper_intercept,
)
from .measurement import UncertainValue
from .stats import YorkFit, awmean, gwmean, mswd, wmean, yorkfit

__all__ = [
    # Errors
    "DomainError",
    "InsufficientData",
    "InvalidSelector",
    "IsoplotError",
    "NoConvergence",
    # Measurements
    "UncertainValue",
    # Statistics
    "YorkFit",
    "awmean",
    "gwmean",
    "mswd",
    "wmean",
    "yorkfit",
    # Geochronology
    "PbPbAnalysis",
    "UPbAnalysis",
    "age",
    "age68",
    "age75",
    "age76",
    "decay_constant",
    "discordance",
    "ellipse",
    "intercepts",
    "lower_intercept",
    "make_pbpb_analysis",
    "make_upb_analysis",
    "stacey_kramers",
    "upper_intercept",
]
