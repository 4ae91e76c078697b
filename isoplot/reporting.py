"""Round and format values with uncertainties for age tables.

An uncertainty is reported to one significant figure, or two when its
leading digit is 1, and the paired value is reported to the same decimal
place. Ages in Ma commonly carry sub-unit uncertainties (``1234.568 ±
0.012``) while Ga-scale model ages round to tens (``4560 ± 20``); both
follow from the same rule.

These helpers only affect presentation; numeric columns are never replaced.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd


def reporting_decimals(uncertainty: float) -> Optional[int]:
    """Decimal place to which ``uncertainty`` and its value are reported.

    Negative results mean rounding to tens, hundreds, and so on. Returns
    ``None`` for a zero or non-finite uncertainty, which has no significant
    figures to round to.
    """
    u = abs(float(uncertainty))
    if u == 0 or not math.isfinite(u):
        return None
    mantissa, exponent = f"{u:e}".split("e")
    figures = 2 if mantissa[0] == "1" else 1
    return figures - 1 - int(exponent)


def round_value_to_uncertainty(value: float, uncertainty: float) -> Tuple[float, float]:
    """Return ``(value, uncertainty)`` rounded for reporting.

    Values with a zero or non-finite uncertainty are returned unrounded.
    """
    decimals = reporting_decimals(uncertainty)
    if decimals is None:
        return float(value), abs(float(uncertainty))
    # + 0.0 turns a rounded -0.0 into 0.0
    return round(float(value), decimals) + 0.0, round(abs(float(uncertainty)), decimals)


def format_value_with_uncertainty(
    value: float, uncertainty: float, unit: str = ""
) -> str:
    """Format ``value ± uncertainty`` with the reporting rounding rule.

    Examples:
        >>> format_value_with_uncertainty(2208.7134, 1.234, "Ma")
        '2208.7 ± 1.2 Ma'
        >>> format_value_with_uncertainty(4567.3, 23.0)
        '4570 ± 20'
    """
    decimals = reporting_decimals(uncertainty)
    if decimals is None:
        text = f"{float(value):.6g} ± {abs(float(uncertainty)):g}"
    else:
        v, u = round_value_to_uncertainty(value, uncertainty)
        places = max(decimals, 0)
        text = f"{v:.{places}f} ± {u:.{places}f}"
    return f"{text} {unit}".rstrip()


def _numeric_pair(
    df: pd.DataFrame, value_col: str, unc_col: str
) -> Tuple[pd.Series, pd.Series]:
    for col in (value_col, unc_col):
        if col not in df.columns:
            raise KeyError(f"Missing column '{col}' for reporting '{value_col}'.")

    values = pd.to_numeric(df[value_col], errors="coerce")
    uncs = pd.to_numeric(df[unc_col], errors="coerce")
    # A finite value is only reportable with a finite, non-negative uncertainty
    unusable = np.isfinite(values) & (~np.isfinite(uncs) | (uncs < 0))
    if bool(unusable.any()):
        rows = df.index[unusable.to_numpy()].tolist()
        raise ValueError(
            f"'{value_col}' has values without a usable uncertainty in "
            f"'{unc_col}' at rows {rows[:5]}."
        )
    return values, uncs


def add_formatted_reporting_columns(
    df: pd.DataFrame,
    value_uncertainty_pairs: Iterable[tuple[str, str]],
    suffix: str = " (reported)",
) -> pd.DataFrame:
    """Add ``"value ± uncertainty"`` string columns to a copy of ``df``.

    Args:
        df (pandas.DataFrame): Input numeric table.
        value_uncertainty_pairs (Iterable[tuple[str, str]]): Sequence of
            ``(value_column, uncertainty_column)`` pairs to format.
        suffix (str, optional): Suffix appended to the value column name for
            the generated column. Defaults to ``" (reported)"``.

    Returns:
        pandas.DataFrame: Copy of ``df`` with one formatted column per pair.
        Rows without a finite value get an empty string.

    Raises:
        KeyError: If a column is missing.
        ValueError: If a finite value has a missing, negative or non-finite
            uncertainty.
    """
    columns = {
        value_col: _numeric_pair(df, value_col, unc_col)
        for value_col, unc_col in value_uncertainty_pairs
    }

    out = df.copy()
    for value_col, (values, uncs) in columns.items():
        out[f"{value_col}{suffix}"] = [
            format_value_with_uncertainty(v, u) if np.isfinite(v) else ""
            for v, u in zip(values, uncs)
        ]
    return out
