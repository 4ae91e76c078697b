"""Tabulate ages for many analyses and summarize them with a weighted mean.

This module is the bridge between per-analysis numerics and tabular output.
It performs no I/O; results are pandas DataFrames ready for export by the
caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from .geochron.decay import DEFAULT_235, DEFAULT_238, Selector
from .geochron.upb import age, discordance
from .stats.weighted import wmean

logger = logging.getLogger(__name__)

AGE_75_COL = "Age 207/235 (Ma)"
AGE_75_UNC_COL = "± 207/235"
AGE_68_COL = "Age 206/238 (Ma)"
AGE_68_UNC_COL = "± 206/238"
DISCORDANCE_COL = "Discordance (%)"


def age_table(
    analyses: Iterable,
    names: Optional[Sequence[str]] = None,
    decayconstant235: Selector = DEFAULT_235,
    decayconstant238: Selector = DEFAULT_238,
) -> pd.DataFrame:
    """Compute ²⁰⁷Pb/²³⁵U and ²⁰⁶Pb/²³⁸U ages and discordance per analysis.

    Args:
        analyses: Iterable of :class:`~isoplot.geochron.UPbAnalysis`.
        names: Optional labels, one per analysis. Defaults to ``"1"``,
            ``"2"``, ...
        decayconstant235: λ235 selector.
        decayconstant238: λ238 selector.

    Returns:
        pandas.DataFrame: One row per analysis with columns ``Analysis``,
        ``Age 207/235 (Ma)``, ``± 207/235``, ``Age 206/238 (Ma)``,
        ``± 206/238`` and ``Discordance (%)``. Uncertainties are one-sigma.

    Raises:
        ValueError: If ``names`` does not match the number of analyses.
        DomainError: If an analysis has a zero ²⁰⁷Pb/²³⁵U ratio, for which
            discordance is undefined.
    """
    analyses = list(analyses)
    if names is None:
        names = [str(i + 1) for i in range(len(analyses))]
    elif len(names) != len(analyses):
        raise ValueError(
            f"Got {len(names)} names for {len(analyses)} analyses."
        )

    rows = []
    for name, d in zip(names, analyses):
        t75, t68 = age(d, decayconstant235, decayconstant238)
        rows.append(
            {
                "Analysis": name,
                AGE_75_COL: t75.mean,
                AGE_75_UNC_COL: t75.stddev,
                AGE_68_COL: t68.mean,
                AGE_68_UNC_COL: t68.stddev,
                DISCORDANCE_COL: discordance(d, decayconstant235, decayconstant238),
            }
        )

    logger.debug("age_table: %d analyses", len(rows))
    return pd.DataFrame(
        rows,
        columns=[
            "Analysis",
            AGE_75_COL,
            AGE_75_UNC_COL,
            AGE_68_COL,
            AGE_68_UNC_COL,
            DISCORDANCE_COL,
        ],
    )


def weighted_mean_summary(
    df: pd.DataFrame,
    value_col: str = AGE_68_COL,
    unc_col: str = AGE_68_UNC_COL,
    corrected: bool = False,
) -> pd.DataFrame:
    """Weighted mean of one value/uncertainty column pair of a table.

    Rows where either column is missing or non-numeric are dropped first.

    Returns:
        pandas.DataFrame: One row with ``Weighted mean``, ``Uncertainty``,
        ``MSWD`` and ``n``.

    Raises:
        KeyError: If a column is missing.
        InsufficientData: If fewer than two usable rows remain.
    """
    for col in (value_col, unc_col):
        if col not in df.columns:
            raise KeyError(f"Missing column '{col}' for weighted mean.")

    values = pd.to_numeric(df[value_col], errors="coerce").to_numpy(dtype=float)
    uncs = pd.to_numeric(df[unc_col], errors="coerce").to_numpy(dtype=float)
    valid = np.isfinite(values) & np.isfinite(uncs)
    if not np.all(valid):
        logger.info(
            "weighted_mean_summary: dropped %d rows with missing values",
            int(np.sum(~valid)),
        )

    wmu, wsigma, mswd = wmean(values[valid], uncs[valid], corrected=corrected)
    return pd.DataFrame(
        [
            {
                "Weighted mean": wmu,
                "Uncertainty": wsigma,
                "MSWD": mswd,
                "n": int(np.sum(valid)),
            }
        ]
    )
