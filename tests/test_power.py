import math

import numpy as np
import pytest

from sem_power import power
from sem_power.exceptions import InvalidArgument
from sem_power.models import FitResult


class TestCriticalValue:

    def test_df1_alpha05(self):
        assert power.critical_value(0.05, 1) == pytest.approx(3.8415, abs=1e-3)

    def test_df3_alpha01(self):
        assert power.critical_value(0.01, 3) == pytest.approx(11.345, abs=1e-3)

    @pytest.mark.parametrize("alpha", [0.0, 1.0, -0.1, 1.5, None, math.nan, "0.05"])
    def test_rejects_alpha_outside_unit_interval(self, alpha):
        with pytest.raises(InvalidArgument):
            power.critical_value(alpha, 1)

    @pytest.mark.parametrize("df", [0, -1, 1.5, None, math.nan, math.inf, "2", True])
    def test_rejects_bad_df(self, df):
        with pytest.raises(InvalidArgument):
            power.critical_value(0.05, df)


class TestPower:

    @pytest.mark.parametrize("df", [1, 2, 5, 10])
    @pytest.mark.parametrize("alpha", [0.01, 0.05, 0.2])
    def test_zero_ncp_returns_alpha(self, df, alpha):
        assert power.power(0, df, alpha) == pytest.approx(alpha, abs=1e-9)

    def test_zero_ncp_df1_alpha05(self):
        assert power.power(0.0, 1, 0.05) == pytest.approx(0.05, abs=1e-9)

    @pytest.mark.parametrize("df", [1, 3, 8])
    def test_monotone_in_ncp(self, df):
        values = [power.power(ncp, df, 0.05) for ncp in np.linspace(0, 40, 81)]
        assert all(b >= a - 1e-12 for a, b in zip(values, values[1:]))

    def test_rule_of_thumb_anchor(self):
        assert power.power(7.849, 1, 0.05) == pytest.approx(0.80, abs=0.01)

    def test_bounded(self):
        assert power.power(500.0, 1, 0.05) <= 1.0
        assert power.power(0.1, 4, 0.05) >= 0.0

    def test_default_alpha(self):
        assert power.power(0.0, 2) == pytest.approx(0.05, abs=1e-9)

    @pytest.mark.parametrize("ncp", [-0.5, math.inf, math.nan, None, "3.0"])
    def test_rejects_bad_ncp(self, ncp):
        with pytest.raises(InvalidArgument):
            power.power(ncp, 1, 0.05)


class TestRequiredNcp:

    def test_df1_eighty_percent(self):
        # (z_.975 + z_.80)^2
        assert power.required_ncp(0.8, 1, 0.05) == pytest.approx(7.849, abs=1e-3)

    @pytest.mark.parametrize("target", [0.5, 0.8, 0.95])
    @pytest.mark.parametrize("df", [1, 4])
    def test_hits_target(self, target, df):
        ncp = power.required_ncp(target, df, 0.05)
        assert power.power(ncp, df, 0.05) == pytest.approx(target, abs=1e-6)

    @pytest.mark.parametrize("target", [0.05, 0.01, 1.0])
    def test_rejects_unreachable_target(self, target):
        with pytest.raises(InvalidArgument):
            power.required_ncp(target, 1, 0.05)


class TestSampleSizeMultiplier:

    def test_critical_value_ncp_roughly_doubles(self):
        m = power.sample_size_multiplier(3.8415, 0.8, 1)
        assert m == pytest.approx(2.04, abs=0.02)

    @pytest.mark.parametrize("ncp", [1.0, 3.8415, 12.0])
    def test_scaled_ncp_reaches_eighty_percent(self, ncp):
        m = power.sample_size_multiplier(ncp, 0.8, 1)
        assert power.power(m * ncp, 1, 0.05) == pytest.approx(0.80, abs=0.01)

    def test_exact_method_any_target(self):
        m = power.sample_size_multiplier(3.0, 0.9, 2, alpha=0.01, method='exact')
        assert power.power(m * 3.0, 2, 0.01) == pytest.approx(0.9, abs=1e-6)

    def test_rule_of_thumb_only_covers_eighty_percent(self):
        with pytest.raises(InvalidArgument):
            power.sample_size_multiplier(3.0, 0.9, 1)

    @pytest.mark.parametrize("alpha", [0.01, 0.1])
    def test_rule_of_thumb_rejects_other_alpha(self, alpha):
        with pytest.raises(InvalidArgument):
            power.sample_size_multiplier(3.0, 0.8, 1, alpha=alpha)

    def test_rule_of_thumb_accepts_default_alpha(self):
        explicit = power.sample_size_multiplier(3.0, 0.8, 1, alpha=0.05)
        assert explicit == power.sample_size_multiplier(3.0, 0.8, 1)

    def test_rejects_zero_ncp(self):
        with pytest.raises(InvalidArgument):
            power.sample_size_multiplier(0.0, 0.8, 1)

    def test_rejects_unknown_method(self):
        with pytest.raises(InvalidArgument):
            power.sample_size_multiplier(3.0, 0.8, 1, method='bisection')


class TestFitHelpers:

    def test_scale_ncp_linear_in_n(self):
        assert power.scale_ncp(10.0, 50, 100) == pytest.approx(20.0)

    def test_power_from_fit_rescaled(self):
        fit = FitResult(chi_square=3.8415, degrees_of_freedom=1, n_samples=50)
        assert power.power_from_fit(fit, 0.05) == pytest.approx(0.50, abs=0.01)
        assert power.power_from_fit(fit, 0.05, n_samples=100) == pytest.approx(
            power.power(7.683, 1, 0.05), abs=1e-6)

    def test_power_from_fit_without_n_cannot_rescale(self):
        fit = FitResult(chi_square=3.0, degrees_of_freedom=1)
        with pytest.raises(InvalidArgument):
            power.power_from_fit(fit, 0.05, n_samples=100)

    def test_required_sample_size_exact_is_minimal(self):
        fit = FitResult(chi_square=3.8415, degrees_of_freedom=1, n_samples=50)
        plan = power.required_sample_size(fit, 0.8, 0.05, method='exact')

        assert plan['achieved_power'] >= 0.8
        assert power.power_from_fit(fit, 0.05, plan['n_required'] - 1) < 0.8
        assert plan['n_required'] == 103

    def test_required_sample_size_rule_of_thumb(self):
        fit = FitResult(chi_square=3.8415, degrees_of_freedom=1, n_samples=50)
        plan = power.required_sample_size(fit, 0.8, 0.05, method='rule-of-thumb')

        assert plan['method'] == 'rule-of-thumb'
        assert plan['n_required'] == math.ceil(50 * plan['multiplier'])
        assert plan['achieved_power'] == pytest.approx(0.80, abs=0.01)

    def test_power_curve(self):
        fit = FitResult(chi_square=5.0, degrees_of_freedom=2, n_samples=40)
        curve = power.power_curve(fit, [20, 40, 80], 0.05)

        assert list(curve.columns) == ['n', 'ncp', 'power']
        assert curve['ncp'].tolist() == pytest.approx([2.5, 5.0, 10.0])
        assert curve['power'].is_monotonic_increasing
        assert curve.loc[1, 'power'] == pytest.approx(power.power(5.0, 2, 0.05))
