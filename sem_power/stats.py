"""
Classical Tests Module
======================

Classical counterparts of the SEM designs: t-tests, repeated-measures ANOVA,
closed-form likelihood-ratio chi-squares and textbook t-test power.
Used to check that constrained SEM fits reproduce the classical tests.
"""

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats
from statsmodels.stats.anova import AnovaRM
from statsmodels.stats.power import TTestIndPower, TTestPower

from . import config
from .exceptions import InvalidArgument


def sig_marker(p_value: float) -> str:
    """Significance stars for a p-value."""
    if p_value < 0.001:
        return "***"
    elif p_value < 0.01:
        return "**"
    elif p_value < 0.05:
        return "*"
    return ""


def _t_result(t_stat: float, p_value: float, df: float, n: int, alpha: float) -> dict:
    return {
        't_statistic': float(t_stat),
        't_squared': float(t_stat) ** 2,
        'p_value': float(p_value),
        'df': float(df),
        'n': n,
        'significant': p_value < alpha,
        'sig_marker': sig_marker(p_value),
    }


def run_one_sample_t(x: np.ndarray, mu0: float = 0.0, alpha: float = None) -> dict:
    """
    One-sample t-test of mean(x) = mu0.

    Returns:
        Dictionary with t-statistic, p-value, df and significance
    """
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    x = np.asarray(x, dtype=float)
    t_stat, p_value = scipy_stats.ttest_1samp(x, mu0)
    return _t_result(t_stat, p_value, len(x) - 1, len(x), alpha)


def run_paired_t(x1: np.ndarray, x2: np.ndarray, alpha: float = None) -> dict:
    """Paired t-test of equal means on two occasions."""
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)
    t_stat, p_value = scipy_stats.ttest_rel(x1, x2)
    return _t_result(t_stat, p_value, len(x1) - 1, len(x1), alpha)


def run_independent_t(
    x1: np.ndarray,
    x2: np.ndarray,
    equal_var: bool = True,
    alpha: float = None
) -> dict:
    """Independent-samples t-test (Student's by default, Welch's if equal_var=False)."""
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)
    t_stat, p_value = scipy_stats.ttest_ind(x1, x2, equal_var=equal_var)
    return _t_result(t_stat, p_value, len(x1) + len(x2) - 2, len(x1) + len(x2), alpha)


def run_rm_anova(
    df: pd.DataFrame,
    subject_col: str = 'subject',
    within_col: str = 'occasion',
    value_col: str = 'value',
    alpha: float = None
) -> dict:
    """
    One-way repeated-measures ANOVA on long-format data.

    Parameters:
        df: Long-format DataFrame (see data.long_format)
        subject_col: Subject identifier column
        within_col: Within-subject factor column
        value_col: Outcome column

    Returns:
        Dictionary with F-statistic, degrees of freedom and p-value
    """
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    result = AnovaRM(df, depvar=value_col, subject=subject_col, within=[within_col]).fit()
    row = result.anova_table.iloc[0]
    p_value = float(row['Pr > F'])

    return {
        'f_statistic': float(row['F Value']),
        'num_df': float(row['Num DF']),
        'den_df': float(row['Den DF']),
        'p_value': p_value,
        'significant': p_value < alpha,
        'sig_marker': sig_marker(p_value),
    }


# =============================================================================
# LIKELIHOOD-RATIO CHI-SQUARES (unrestricted covariance)
# =============================================================================
def contrast_matrix(k: int) -> np.ndarray:
    """Successive-difference contrasts (k-1 x k): row i is e_i - e_(i+1)."""
    if k < 2:
        raise InvalidArgument(f"need at least 2 levels for contrasts, got {k}", 'k')
    contrasts = np.zeros((k - 1, k))
    for i in range(k - 1):
        contrasts[i, i] = 1.0
        contrasts[i, i + 1] = -1.0
    return contrasts


def lr_chi2_contrast(means, cov, n: int, contrast: np.ndarray) -> float:
    """
    Likelihood-ratio chi-square for H0: C mu = 0 with free covariance.

    With the ML covariance S = cov * (n-1) / n the statistic is
    n * ln(1 + (C m)' (C S C')^-1 (C m)), the normal-theory ML chi-square a
    constrained SEM fit reports for the same hypothesis.

    Parameters:
        means: Sample mean vector
        cov: Sample covariance ((n-1) denominator)
        n: Sample size
        contrast: Contrast matrix C (q x p)

    Returns:
        Chi-square with q degrees of freedom
    """
    means = np.atleast_1d(np.asarray(means, dtype=float))
    cov = np.atleast_2d(np.asarray(cov, dtype=float))
    contrast = np.atleast_2d(np.asarray(contrast, dtype=float))

    if n <= means.size:
        raise InvalidArgument(f"n must exceed the number of variables, got {n}", 'n')

    cov_ml = cov * (n - 1) / n
    diff = contrast @ means
    middle = contrast @ cov_ml @ contrast.T
    quad = float(diff @ np.linalg.solve(middle, diff))
    return float(n * np.log1p(quad))


def lr_chi2_one_sample(means, cov, n: int, mu0=0.0) -> float:
    """Likelihood-ratio chi-square for H0: mu = mu0 with free covariance."""
    means = np.atleast_1d(np.asarray(means, dtype=float))
    centered = means - np.broadcast_to(np.asarray(mu0, dtype=float), means.shape)
    return lr_chi2_contrast(centered, cov, n, np.eye(means.size))


def lr_chi2_two_group(mean1: float, mean2: float, sd: float, n1: int, n2: int) -> float:
    """
    Likelihood-ratio chi-square for equal means in two groups with a common SD.

    Equals N * ln(1 + t^2 / (N - 2)), the ML chi-square of a zero regression
    on a group dummy.
    """
    if sd <= 0:
        raise InvalidArgument(f"sd must be > 0, got {sd}", 'sd')
    n_total = n1 + n2
    t_squared = (mean1 - mean2) ** 2 / (sd ** 2 * (1 / n1 + 1 / n2))
    return float(n_total * np.log1p(t_squared / (n_total - 2)))


# =============================================================================
# TEXTBOOK POWER
# =============================================================================
def ttest_power(
    effect_size: float,
    n: int,
    alpha: float = None,
    design: str = 'one-sample'
) -> float:
    """
    Power of a two-sided t-test from the non-central t distribution.

    Parameters:
        effect_size: Cohen's d (for paired designs: mean difference / SD of differences)
        n: Sample size (per group for 'two-group')
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA
        design: 'one-sample', 'paired' or 'two-group'

    Returns:
        Power in [0, 1]
    """
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    if design in ('one-sample', 'paired'):
        return float(TTestPower().power(effect_size=effect_size, nobs=n, alpha=alpha,
                                        alternative='two-sided'))
    elif design == 'two-group':
        return float(TTestIndPower().power(effect_size=effect_size, nobs1=n, alpha=alpha,
                                           ratio=1.0, alternative='two-sided'))
    raise InvalidArgument(f"unknown t-test design '{design}'", 'design')


def paired_effect_size(mean_diff: float, sd: float, corr: float) -> float:
    """Cohen's d_z for two occasions with equal SD and correlation corr."""
    sd_diff = sd * np.sqrt(2 * (1 - corr))
    return float(mean_diff / sd_diff)
