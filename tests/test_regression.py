import math

import numpy as np
import pytest

from isoplot.exceptions import InsufficientData
from isoplot.measurement import UncertainValue
from isoplot.stats.regression import YorkFit, lsqfit, yorkfit


def test_lsqfit_recovers_identity_line():
    a, b = lsqfit(np.arange(1, 11), np.arange(1, 11))
    assert a == pytest.approx(0.0, abs=1e-12)
    assert b == pytest.approx(1.0, abs=1e-12)


def test_yorkfit_identity_line():
    x = np.arange(1.0, 11.0)
    # Collinear data with slope σy/σx make every weight denominator vanish.
    with pytest.warns(RuntimeWarning, match="uncorrelated errors"):
        fit = yorkfit(x, np.ones(10), x.copy(), np.ones(10))
    assert isinstance(fit, YorkFit)
    assert fit.n == 10
    assert fit.intercept.mean == pytest.approx(0.0, abs=1e-8)
    assert fit.slope.mean == pytest.approx(1.0, abs=1e-10)
    assert fit.mswd == pytest.approx(0.0, abs=1e-12)
    # Uncorrelated York uncertainties: W = 1/2, Σ W (x - x̄)² = 41.25
    assert fit.slope.stddev == pytest.approx(1.0 / math.sqrt(41.25), rel=1e-9)
    assert fit.intercept.stddev == pytest.approx(
        math.sqrt(1.0 / 5.0 + 5.5**2 / 41.25), rel=1e-9
    )


def test_yorkfit_exact_line_with_unequal_errors():
    x = np.arange(1.0, 9.0)
    y = 3.0 + 2.0 * x
    sigma_x = np.full(8, 0.1)
    sigma_y = np.linspace(0.25, 0.5, 8)
    fit = yorkfit(x, sigma_x, y, sigma_y)
    assert fit.intercept.mean == pytest.approx(3.0, abs=1e-9)
    assert fit.slope.mean == pytest.approx(2.0, abs=1e-9)
    assert fit.mswd == pytest.approx(0.0, abs=1e-12)
    assert fit.slope.stddev > 0
def test_yorkfit_noisy_data():
    rng = np.random.default_rng(0)
    t = np.arange(1.0, 101.0)
    x = t + rng.normal(size=100)
    y = 2.0 * t + rng.normal(size=100)
    fit = yorkfit(x, np.ones(100), y, np.ones(100))
    assert abs(fit.slope.mean - 2.0) < 5 * fit.slope.stddev + 0.01
    assert 0 < fit.slope.stddev < 0.05
    assert 0 < fit.intercept.stddev < 1.0
    assert 0.5 < fit.mswd < 1.5


def test_yorkfit_drops_missing_rows():
    x = np.array([1.0, 2.0, 3.0, np.nan, 4.0, 5.0])
    y = np.array([2.1, 3.9, 6.2, 7.0, 8.1, 9.8])
    sx = np.array([0.1, 0.1, 0.1, 0.1, np.nan, 0.1])
    sy = np.full(6, 0.2)
    fit = yorkfit(x, sx, y, sy)
    keep = [0, 1, 2, 5]
    expected = yorkfit(x[keep], sx[keep], y[keep], sy[keep])
    assert fit == expected
    assert fit.n == 4


def test_yorkfit_accepts_uncertain_values():
    x = [1.0, 2.0, 3.0, 4.0, 5.0]
    y = [2.1, 3.9, 6.2, 8.1, 9.8]
    xs = [UncertainValue(v, 0.1) for v in x]
    ys = [UncertainValue(v, 0.2) for v in y]
    assert yorkfit(xs, ys) == yorkfit(x, [0.1] * 5, y, [0.2] * 5)


def test_yorkfit_iteration_count_is_fixed():
    x = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    y = np.array([2.1, 3.9, 6.2, 8.1, 9.8])
    one = yorkfit(x, np.full(5, 0.1), y, np.full(5, 0.2), iterations=1)
    ten = yorkfit(x, np.full(5, 0.1), y, np.full(5, 0.2))
    assert one.slope.mean != ten.slope.mean
    with pytest.raises(ValueError, match="iterations"):
        yorkfit(x, np.full(5, 0.1), y, np.full(5, 0.2), iterations=0)


def test_yorkfit_insufficient_rows():
    with pytest.raises(InsufficientData, match="at least 2"):
        yorkfit([1.0, np.nan], [0.1, 0.1], [1.0, 2.0], [0.1, 0.1])


def test_yorkfit_length_mismatch():
    with pytest.raises(ValueError, match="equal lengths"):
        yorkfit([1.0, 2.0, 3.0], [0.1, 0.1], [1.0, 2.0, 3.0], [0.1, 0.1, 0.1])


def test_yorkfit_str_summary():
    fit = YorkFit(UncertainValue(-0.29, 0.2), UncertainValue(2.0072, 0.0036), 0.81, 12)
    text = str(fit)
    assert "intercept a : -0.3 ± 0.2" in text
    assert "slope b     : 2.007 ± 0.004" in text
    assert math.isclose(fit.mswd, 0.81)
    assert "n           : 12" in text
