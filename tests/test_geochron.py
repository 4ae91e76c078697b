import copy
import itertools
import math
import pickle

import numpy as np
import pytest

from isoplot.exceptions import DomainError, InvalidSelector, NoConvergence
from isoplot.geochron.analysis import (
    PbPbAnalysis,
    TwoComponentAnalysis,
    UPbAnalysis,
    make_pbpb_analysis,
    make_upb_analysis,
)
from isoplot.geochron.decay import (
    DECAY_CONSTANTS,
    LAMBDA_235U_JAFFEY,
    LAMBDA_238U,
    decay_constant,
)
from isoplot.geochron.upb import (
    age,
    age68,
    age75,
    age76,
    concordia_ratios,
    discordance,
    ratio_pbpb,
    stacey_kramers,
)
from isoplot.measurement import UncertainValue


class TestDecayConstants:
    def test_registry_labels(self):
        assert set(DECAY_CONSTANTS) == {
            "jaffey-238",
            "schoene-235",
            "schoene-235-internal",
            "jaffey-235",
        }

    def test_jaffey_238_from_half_life(self):
        lam = decay_constant("jaffey-238")
        assert math.isclose(lam.mean, math.log(2) / 4468.3)
        assert math.isclose(lam.stddev, lam.mean * 2.4 / 4468.3)

    def test_schoene_235_uses_one_sigma(self):
        assert decay_constant("schoene-235") == UncertainValue(9.8569e-4, 0.0110e-4 / 2)
        internal = decay_constant("SCHOENE_235_INTERNAL")
        assert math.isclose(internal.stddev, 0.0017e-4 / 2)

    def test_numeric_selector(self):
        assert decay_constant(1.5e-4) == UncertainValue(1.5e-4, 0.0)
        assert decay_constant(1.5e-4, uncertainty=1e-7).stddev == 1e-7
        lam = UncertainValue(1.0e-4, 1.0e-7)
        assert decay_constant(lam) is lam

    def test_invalid_selectors(self):
        with pytest.raises(InvalidSelector, match="jaffey-238"):
            decay_constant("steiger")
        with pytest.raises(InvalidSelector):
            decay_constant(None)
        with pytest.raises(InvalidSelector):
            decay_constant(True)
        # InvalidSelector is also a ValueError
        with pytest.raises(ValueError):
            age68(UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.5), decayconstant="bogus")

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            DECAY_CONSTANTS["jaffey-238"] = UncertainValue(1.0, 0.0)


class TestAnalysis:
    def test_upb_covariance_from_ratios(self):
        d = UPbAnalysis(22.6602, 0.0175, 0.40864, 0.00017, 0.83183)
        expected = np.array(
            [
                [0.00030625000000000004, 2.4746942500000003e-6],
                [2.4746942500000003e-6, 2.8900000000000004e-8],
            ]
        )
        assert np.allclose(d.cov, expected, rtol=1e-14, atol=0.0)
        assert d.cov[0, 1] == d.cov[1, 0]
        assert d.mu.tolist() == [22.6602, 0.40864]
        assert math.isclose(d.correlation, 0.83183)

    def test_sigma_round_trip_is_exact(self):
        d = make_upb_analysis(22.6602, 0.0175, 0.40864, 0.00017, 0.83183)
        assert np.sqrt(np.diag(d.cov)).tolist() == [0.0175, 0.00017]
        assert d.sigma.tolist() == [0.0175, 0.00017]

    def test_pbpb_component_order(self):
        d = make_pbpb_analysis(0.3, 0.001, 0.12, 0.0005, -0.2)
        assert isinstance(d, PbPbAnalysis)
        assert d.r206_238 == 0.3
        assert d.r207_206 == 0.12
        assert math.isclose(d.cov[0, 1], 0.001 * 0.0005 * -0.2)

    def test_from_covariance(self):
        cov = [[4e-4, 1e-5], [1e-5, 9e-6]]
        d = UPbAnalysis.from_covariance([2.0, 0.2], cov)
        assert isinstance(d, UPbAnalysis)
        assert np.allclose(d.sigma, [0.02, 0.003])
        assert np.array_equal(d.cov, np.array(cov))
        with pytest.raises(ValueError, match="symmetric"):
            TwoComponentAnalysis.from_covariance([1.0, 1.0], [[1.0, 0.5], [0.0, 1.0]])

    def test_invalid_construction(self):
        with pytest.raises(ValueError, match="Correlation"):
            UPbAnalysis(1.0, 0.01, 0.2, 0.001, 1.2)
        with pytest.raises(ValueError, match="non-negative"):
            UPbAnalysis(1.0, -0.01, 0.2, 0.001, 0.5)

    def test_immutable(self):
        d = UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.5)
        with pytest.raises(AttributeError):
            d.mu = np.array([0.0, 0.0])
        with pytest.raises(ValueError):
            d.mu[0] = 5.0
        with pytest.raises(ValueError):
            d.cov[0, 0] = 5.0

    @pytest.mark.parametrize(
        "analysis",
        [
            UPbAnalysis(22.6602, 0.0175, 0.40864, 0.00017, 0.83183),
            PbPbAnalysis(0.26, 0.001, 0.092, 0.0001, 0.5),
            UPbAnalysis.from_covariance([2.0, 0.2], [[4e-4, 1e-5], [1e-5, 9e-6]]),
        ],
    )
    def test_pickle_and_deepcopy(self, analysis):
        for clone in (pickle.loads(pickle.dumps(analysis)), copy.deepcopy(analysis)):
            assert type(clone) is type(analysis)
            assert clone == analysis
            assert np.array_equal(clone.cov, analysis.cov)
            with pytest.raises(ValueError):
                clone.mu[0] = 0.0
            with pytest.raises(AttributeError):
                clone.cov = None

    def test_equality(self):
        a = UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.5)
        assert a == UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.5)
        assert a != UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.4)
        assert a != PbPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.5)

    def test_rand_shapes_and_moments(self):
        d = UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.8)
        rng = np.random.default_rng(1)
        assert d.rand(rng=rng).shape == (2,)
        draws = d.rand(20000, rng=rng)
        assert draws.shape == (20000, 2)
        assert np.allclose(draws.mean(axis=0), d.mu, atol=5e-4)
        assert abs(np.corrcoef(draws.T)[0, 1] - 0.8) < 0.02

    def test_samples_are_lazy_and_restartable(self):
        d = UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.8)
        stream = d.samples(seed=7)
        first = list(itertools.islice(stream, 5))
        second = list(itertools.islice(stream, 5))
        assert len(first) == 5
        assert all(np.array_equal(a, b) for a, b in zip(first, second))


class TestAges:
    D = UPbAnalysis(22.6602, 0.0175, 0.40864, 0.00017, 0.83183)

    def test_age68_value_and_uncertainty(self):
        t = age68(self.D)
        lam = math.log(2) / 4468.3
        expected = math.log1p(0.40864) / lam
        assert math.isclose(t.mean, expected, rel_tol=1e-12)
        sigma_log = 0.00017 / 1.40864
        expected_sigma = math.hypot(sigma_log / lam, expected * 2.4 / 4468.3)
        assert math.isclose(t.stddev, expected_sigma, rel_tol=1e-9)

    def test_age75_value(self):
        t = age75(self.D)
        assert math.isclose(t.mean, math.log1p(22.6602) / 9.8569e-4, rel_tol=1e-12)
        assert t.stddev > 0

    def test_age_returns_independent_pair(self):
        t75, t68 = age(self.D)
        assert t75 == age75(self.D)
        assert t68 == age68(self.D)
        t75_j, _ = age(self.D, decayconstant235="jaffey-235")
        assert t75_j == age75(self.D, decayconstant="jaffey-235")

    def test_discordance(self):
        t75, t68 = age(self.D)
        expected = (t75.mean - t68.mean) / t75.mean * 100
        assert discordance(self.D) == expected

    def test_discordance_zero_when_ages_agree(self):
        d = UPbAnalysis(0.5, 0.001, 0.5, 0.001, 0.0)
        assert discordance(d, decayconstant235=1e-3, decayconstant238=1e-3) == 0.0

    def test_discordance_of_zero_207_235_ratio(self):
        d = UPbAnalysis(0.0, 0.001, 0.0, 0.001, 0.0)
        with pytest.raises(DomainError, match="undefined for a zero"):
            discordance(d)

    def test_concordant_analysis_has_negligible_discordance(self):
        r75, r68 = concordia_ratios(1000.0)
        d = UPbAnalysis(r75, 0.001, r68, 0.0001, 0.9)
        assert discordance(d) == pytest.approx(0.0, abs=1e-9)
        assert age68(d).mean == pytest.approx(1000.0, rel=1e-12)

    def test_ages_increase_with_ratio(self):
        ratios = [0.05, 0.1, 0.2, 0.4, 0.8]
        ages = [age68(UPbAnalysis(1.0, 0.01, r, 0.001, 0.5)).mean for r in ratios]
        assert all(b > a for a, b in zip(ages, ages[1:]))
        ages75 = [age75(UPbAnalysis(r, 0.01, 0.1, 0.001, 0.5)).mean for r in ratios]
        assert all(b > a for a, b in zip(ages75, ages75[1:]))

    def test_ages_decrease_with_decay_constant(self):
        lambdas = [1.0e-4, 1.5e-4, 2.0e-4]
        ages = [age68(self.D, decayconstant=lam).mean for lam in lambdas]
        assert all(b < a for a, b in zip(ages, ages[1:]))

    def test_pbpb_age68_uses_first_component(self):
        d = PbPbAnalysis(0.40864, 0.00017, 0.13, 0.001, 0.1)
        assert age68(d) == age68(self.D)
        with pytest.raises(TypeError):
            age75(d)

    def test_domain_error_for_ratio_below_minus_one(self):
        d = UPbAnalysis(-1.5, 0.01, 0.2, 0.001, 0.0)
        with pytest.raises(DomainError):
            age75(d)


class TestAge76:
    L235 = LAMBDA_235U_JAFFEY.mean
    L238 = LAMBDA_238U.mean

    def test_recovers_synthetic_age(self):
        r76 = ratio_pbpb(1500.0, self.L235, self.L238)
        d = PbPbAnalysis(0.26, 0.001, r76, 0.0001, 0.5)
        assert age76(d, 1.0, 4500.0) == pytest.approx(1500.0, abs=1e-6)

    def test_ratio_at_zero_age_is_the_limit(self):
        expected = self.L235 / self.L238 / 137.818
        assert ratio_pbpb(0.0, self.L235, self.L238) == pytest.approx(expected, rel=1e-12)
        assert ratio_pbpb(1e-6, self.L235, self.L238) == pytest.approx(expected, rel=1e-6)
        r = ratio_pbpb(np.array([0.0, 1000.0]), self.L235, self.L238)
        assert np.all(np.isfinite(r))

    def test_bracket_may_start_at_zero(self):
        d = PbPbAnalysis(0.26, 0.001, 0.092, 0.0001, 0.5)
        t = age76(d, 0.0, 4500.0)
        assert 0.0 < t < 4500.0
        assert ratio_pbpb(t, self.L235, self.L238) == pytest.approx(0.092, rel=1e-9)

    def test_ratio_increases_with_age(self):
        r = ratio_pbpb(np.array([100.0, 1000.0, 2000.0, 3000.0]), self.L235, self.L238)
        assert np.all(np.diff(r) > 0)

    def test_unbracketed_root_raises(self):
        d = PbPbAnalysis(0.26, 0.001, 5.0, 0.0001, 0.5)
        with pytest.raises(NoConvergence, match="not bracketed"):
            age76(d, 1.0, 4500.0)

    def test_invalid_bracket(self):
        d = PbPbAnalysis(0.26, 0.001, 0.1, 0.0001, 0.5)
        with pytest.raises(ValueError, match="t_min"):
            age76(d, 3000.0, 1000.0)

    def test_requires_pbpb_analysis(self):
        with pytest.raises(TypeError):
            age76(UPbAnalysis(1.0, 0.01, 0.2, 0.001, 0.5), 1.0, 4500.0)


class TestStaceyKramers:
    def test_present_day_reservoir(self):
        assert stacey_kramers(0.0) == (18.700, 15.628)

    def test_first_stage_reservoir(self):
        assert stacey_kramers(3700.0) == (11.152, 12.998)

    def test_undefined_before_accretion(self):
        for t in (4570.0, 5000.0):
            r64, r74 = stacey_kramers(t)
            assert math.isnan(r64) and math.isnan(r74)

    def test_ingrowth_is_subtracted(self):
        lam = LAMBDA_238U.mean
        r64, r74 = stacey_kramers(1000.0)
        ingrowth = math.expm1(lam * 1000.0)
        assert math.isclose(r64, 18.700 - ingrowth * 9.74)
        assert math.isclose(r74, 15.628 - ingrowth * 9.74 / 137.818)

    def test_array_input(self):
        t = np.array([0.0, 1000.0, 3800.0, 4600.0])
        r64, r74 = stacey_kramers(t)
        assert r64.shape == (4,)
        for i, ti in enumerate(t[:3]):
            assert r64[i] == pytest.approx(stacey_kramers(ti)[0])
            assert r74[i] == pytest.approx(stacey_kramers(ti)[1])
        assert np.isnan(r64[3]) and np.isnan(r74[3])
        assert r64[0] > r64[1] > r64[2]
