"""
Geochronology models for U-Pb and Pb-Pb isotope-ratio data.

Modules:
    decay:
        Decay-constant registry (λ238U, λ235U) and the selector used by the
        age equations to pick a constant by label or by number.

    analysis:
        Two-component analyses (ratio means, standard deviations and a 2×2
        covariance matrix) for U-Pb and Pb-Pb data, with Monte Carlo sampling.

    upb:
        ²⁰⁶Pb/²³⁸U, ²⁰⁷Pb/²³⁵U and ²⁰⁷Pb/²⁰⁶Pb ages, percent discordance, and
        the Stacey-Kramers common-lead evolution model.

    concordia:
        Concordia intercepts of discordia populations and confidence-ellipse
        coordinates.

Interpretation Guardrails:
    Each ratio yields an independent age; the two are never reconciled here.
    Discordance is reported from central values only. Ages are in Ma when
    decay constants are given in 1/Myr.

Design Principle:
    This subpackage performs no plotting or file I/O. It depends only on
    isoplot.stats and isoplot.measurement.
"""

from .analysis import (
    AnalysisSamples,
    PbPbAnalysis,
    TwoComponentAnalysis,
    UPbAnalysis,
    make_pbpb_analysis,
    make_upb_analysis,
)
from .concordia import (
    SIGMA_2D_95,
    concordia_intercepts,
    ellipse,
    intercepts,
    lower_intercept,
    upper_intercept,
)
from .decay import (
    DECAY_CONSTANTS,
    LAMBDA_235U,
    LAMBDA_235U_INTERNAL,
    LAMBDA_235U_JAFFEY,
    LAMBDA_238U,
    R238_235,
    decay_constant,
)
from .upb import (
    age,
    age68,
    age75,
    age76,
    concordia_ratios,
    discordance,
    ratio_pbpb,
    stacey_kramers,
)

__all__ = [
    # Analyses
    "AnalysisSamples",
    "PbPbAnalysis",
    "TwoComponentAnalysis",
    "UPbAnalysis",
    "make_pbpb_analysis",
    "make_upb_analysis",
    # Decay constants
    "DECAY_CONSTANTS",
    "LAMBDA_235U",
    "LAMBDA_235U_INTERNAL",
    "LAMBDA_235U_JAFFEY",
    "LAMBDA_238U",
    "R238_235",
    "decay_constant",
    # Ages
    "age",
    "age68",
    "age75",
    "age76",
    "concordia_ratios",
    "discordance",
    "ratio_pbpb",
    "stacey_kramers",
    # Concordia
    "SIGMA_2D_95",
    "concordia_intercepts",
    "ellipse",
    "intercepts",
    "lower_intercept",
    "upper_intercept",
]
