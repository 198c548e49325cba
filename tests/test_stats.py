import numpy as np
import pytest

from sem_power import data, power, stats
from sem_power.exceptions import InvalidArgument


@pytest.mark.parametrize("p_value, marker", [
    (0.0001, "***"), (0.005, "**"), (0.03, "*"), (0.2, ""),
])
def test_sig_marker(p_value, marker):
    assert stats.sig_marker(p_value) == marker


def test_contrast_matrix():
    np.testing.assert_array_equal(
        stats.contrast_matrix(3), [[1.0, -1.0, 0.0], [0.0, 1.0, -1.0]])
    with pytest.raises(InvalidArgument):
        stats.contrast_matrix(1)


class TestLikelihoodRatio:

    def test_one_sample_matches_t(self):
        n = 30
        sample = data.empirical_sample(0.5, 1.0, n, ['y'])
        t_result = stats.run_one_sample_t(sample['y'])

        assert t_result['t_squared'] == pytest.approx(7.5)
        chi2 = stats.lr_chi2_one_sample([0.5], [[1.0]], n)
        assert chi2 == pytest.approx(n * np.log(1 + t_result['t_squared'] / (n - 1)))
        assert chi2 < t_result['t_squared']

    def test_paired_matches_t(self):
        n = 25
        means = [0.0, 0.4]
        cov = data.covariance_from_correlation(1.0, 0.6, n_vars=2)
        sample = data.empirical_sample(means, cov, n, ['pre', 'post'])
        t_result = stats.run_paired_t(sample['pre'], sample['post'])

        chi2 = stats.lr_chi2_contrast(means, cov, n, stats.contrast_matrix(2))
        assert chi2 == pytest.approx(n * np.log(1 + t_result['t_squared'] / (n - 1)))

    def test_two_group_matches_t(self):
        sample = data.two_group_sample(0.0, 0.5, 1.0, 20, 20)
        t_result = stats.run_independent_t(
            sample.loc[sample['group'] == 0, 'y'], sample.loc[sample['group'] == 1, 'y'])

        chi2 = stats.lr_chi2_two_group(0.0, 0.5, 1.0, 20, 20)
        assert chi2 == pytest.approx(40 * np.log(1 + t_result['t_squared'] / 38))

    def test_no_effect_gives_zero(self):
        assert stats.lr_chi2_one_sample([1.0, 2.0], np.eye(2), 20, mu0=[1.0, 2.0]) == 0.0

    def test_n_must_exceed_variables(self):
        with pytest.raises(InvalidArgument):
            stats.lr_chi2_one_sample([1.0, 2.0], np.eye(2), 2)


def test_rm_anova_two_levels_equals_paired_t_squared():
    cov = data.covariance_from_correlation(1.0, 0.5, n_vars=2)
    sample = data.empirical_sample([0.0, 0.5], cov, 20, ['t1', 't2'])
    long_df = data.long_format(sample, ['t1', 't2'])

    anova = stats.run_rm_anova(long_df)
    paired = stats.run_paired_t(sample['t1'], sample['t2'])

    assert anova['num_df'] == 1
    assert anova['den_df'] == 19
    assert anova['f_statistic'] == pytest.approx(paired['t_squared'])
    assert anova['p_value'] == pytest.approx(paired['p_value'])


class TestTextbookPower:

    def test_two_group_classic(self):
        assert stats.ttest_power(0.5, 64, 0.05, 'two-group') == pytest.approx(0.80, abs=0.02)

    def test_increases_with_n(self):
        values = [stats.ttest_power(0.5, n, 0.05, 'one-sample') for n in (10, 20, 40, 80)]
        assert values == sorted(values)

    def test_chi_square_power_close_to_t_power(self):
        ncp = stats.lr_chi2_one_sample([0.5], [[1.0]], 30)
        assert power.power(ncp, 1, 0.05) == pytest.approx(
            stats.ttest_power(0.5, 30, 0.05, 'one-sample'), abs=0.03)

    def test_unknown_design(self):
        with pytest.raises(InvalidArgument):
            stats.ttest_power(0.5, 30, 0.05, 'anova')


def test_paired_effect_size():
    assert stats.paired_effect_size(0.5, 1.0, 0.5) == pytest.approx(0.5)
    assert stats.paired_effect_size(0.5, 1.0, 0.0) == pytest.approx(0.5 / np.sqrt(2))
