"""
Power Calculator Module
=======================

Statistical power from a non-centrality parameter (Satorra-Saris method).

The chi-square of a constrained model fitted to population moments is the
non-centrality parameter (ncp) of the test of that constraint. Power is the
probability that a non-central chi-square with that ncp exceeds the central
critical value.
"""

import math

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats
from scipy.optimize import brentq

from . import config
from .exceptions import InvalidArgument


# =============================================================================
# VALIDATION
# =============================================================================
def check_alpha(alpha: float) -> float:
    try:
        valid = 0.0 < alpha < 1.0
    except TypeError:
        valid = False
    if not valid:
        raise InvalidArgument(f"alpha must lie in (0, 1), got {alpha}", 'alpha')
    return float(alpha)


def _is_whole(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return int(value) == value
    except (TypeError, ValueError, OverflowError):
        return False


def check_df(df: int) -> int:
    if not _is_whole(df) or df < 1:
        raise InvalidArgument(f"degrees of freedom must be an integer >= 1, got {df}", 'df')
    return int(df)


def check_ncp(ncp: float) -> float:
    try:
        valid = math.isfinite(ncp) and ncp >= 0
    except TypeError:
        valid = False
    if not valid:
        raise InvalidArgument(f"ncp must be a finite value >= 0, got {ncp}", 'ncp')
    return float(ncp)


def check_sample_size(n, name: str = 'n') -> int:
    if not _is_whole(n) or n < 1:
        raise InvalidArgument(f"{name} must be a positive integer, got {n}", name)
    return int(n)


# =============================================================================
# CORE CALCULATOR
# =============================================================================
def critical_value(alpha: float, df: int) -> float:
    """
    Central chi-square value exceeded with probability alpha.

    Parameters:
        alpha: Significance level in (0, 1)
        df: Degrees of freedom (>= 1)

    Returns:
        x such that P(X <= x) = 1 - alpha for X ~ chi2(df)
    """
    alpha = check_alpha(alpha)
    df = check_df(df)
    return float(scipy_stats.chi2.ppf(1 - alpha, df))


def power(ncp: float, df: int, alpha: float = None) -> float:
    """
    Power of a chi-square test with the given non-centrality.

    Parameters:
        ncp: Non-centrality parameter (chi-square of the constrained fit)
        df: Degrees of freedom of the tested constraint
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA

    Returns:
        Probability of rejecting H0, in [0, 1]. Equals alpha when ncp = 0.
    """
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    ncp = check_ncp(ncp)
    crit = critical_value(alpha, df)

    # ncx2 with nc=0 is the central distribution
    if ncp == 0:
        result = scipy_stats.chi2.sf(crit, df)
    else:
        result = scipy_stats.ncx2.sf(crit, df, ncp)

    return float(min(max(result, 0.0), 1.0))


def required_ncp(target_power: float = None, df: int = 1, alpha: float = None) -> float:
    """
    Exact ncp at which power(ncp, df, alpha) equals target_power.

    Parameters:
        target_power: Desired power in (alpha, 1). Defaults to config.DEFAULT_TARGET_POWER
        df: Degrees of freedom
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA

    Returns:
        Non-centrality parameter reaching the target power
    """
    if target_power is None:
        target_power = config.DEFAULT_TARGET_POWER
    if alpha is None:
        alpha = config.DEFAULT_ALPHA

    alpha = check_alpha(alpha)
    df = check_df(df)
    if not (alpha < target_power < 1.0):
        raise InvalidArgument(
            f"target power must lie in (alpha, 1) = ({alpha}, 1), got {target_power}",
            'target_power',
        )

    upper = max(critical_value(alpha, df), 1.0)
    while power(upper, df, alpha) < target_power:
        upper *= 2
        if upper > config.MAX_NCP_SEARCH:
            raise InvalidArgument(f"target power {target_power} is not reachable", 'target_power')

    return float(brentq(lambda x: power(x, df, alpha) - target_power, 0.0, upper, xtol=1e-10))


def sample_size_multiplier(
    current_ncp: float,
    target_power: float = None,
    df: int = 1,
    alpha: float = None,
    method: str = 'rule-of-thumb'
) -> float:
    """
    Factor by which N must grow to reach the target power.

    The ncp grows linearly with N, so the multiplier is desired_ncp / current_ncp.

    Methods:
    - 'rule-of-thumb': desired ncp ~ chi-square quantile at p=0.995.
      Calibrated for 80% power at alpha=0.05 and df=1; other targets or alpha
      values are rejected. Re-check the achieved power after rounding sample
      sizes.
    - 'exact': desired ncp solved numerically with required_ncp()

    Parameters:
        current_ncp: ncp at the current sample size (> 0)
        target_power: Desired power. Defaults to config.DEFAULT_TARGET_POWER
        df: Degrees of freedom
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA (the only
            level the rule of thumb accepts)
        method: 'rule-of-thumb' or 'exact'

    Returns:
        Sample-size multiplier
    """
    if target_power is None:
        target_power = config.DEFAULT_TARGET_POWER

    current_ncp = check_ncp(current_ncp)
    if current_ncp == 0:
        raise InvalidArgument("current ncp must be > 0 to scale the sample size", 'current_ncp')
    df = check_df(df)

    if method == 'rule-of-thumb':
        if not math.isclose(target_power, config.RULE_OF_THUMB_POWER, abs_tol=1e-6):
            raise InvalidArgument(
                f"the rule of thumb only covers power {config.RULE_OF_THUMB_POWER}; "
                f"use method='exact' for {target_power}",
                'target_power',
            )
        if alpha is not None and not math.isclose(alpha, config.DEFAULT_ALPHA):
            raise InvalidArgument(
                f"the rule of thumb is calibrated for alpha={config.DEFAULT_ALPHA}; "
                f"use method='exact' for alpha={alpha}",
                'alpha',
            )
        desired = float(scipy_stats.chi2.ppf(config.RULE_OF_THUMB_QUANTILE, df))
    elif method == 'exact':
        desired = required_ncp(target_power, df, alpha)
    else:
        raise InvalidArgument(f"unknown method '{method}'", 'method')

    return desired / current_ncp


# =============================================================================
# FIT-LEVEL HELPERS
# =============================================================================
def scale_ncp(ncp: float, n_current: int, n_new: int) -> float:
    """Rescale an ncp computed at n_current observations to n_new."""
    ncp = check_ncp(ncp)
    n_current = check_sample_size(n_current, 'n_current')
    n_new = check_sample_size(n_new, 'n_new')
    return ncp * n_new / n_current


def power_from_fit(fit, alpha: float = None, n_samples: int = None) -> float:
    """
    Power of the constraint tested by a fitted model.

    Parameters:
        fit: FitResult of the constrained model
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA
        n_samples: Optional total N to rescale the ncp to

    Returns:
        Power at the fit's sample size, or at n_samples
    """
    ncp = fit.chi_square
    if n_samples is not None:
        if fit.n_samples is None:
            raise InvalidArgument("fit has no sample size; cannot rescale ncp", 'n_samples')
        ncp = scale_ncp(ncp, fit.n_samples, n_samples)
    return power(ncp, fit.degrees_of_freedom, alpha)


def required_sample_size(
    fit,
    target_power: float = None,
    alpha: float = None,
    method: str = 'exact'
) -> dict:
    """
    Total N needed for the constraint in `fit` to reach target power.

    The multiplier is applied to fit.n_samples and rounded up. With the exact
    method N is then increased until the achieved power reaches the target;
    the rule-of-thumb result is reported as is, with its achieved power.

    Parameters:
        fit: FitResult with n_samples set
        target_power: Desired power. Defaults to config.DEFAULT_TARGET_POWER
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA
        method: 'exact' or 'rule-of-thumb'

    Returns:
        Dictionary with n_required, multiplier, achieved_power and inputs
    """
    if target_power is None:
        target_power = config.DEFAULT_TARGET_POWER
    if alpha is None:
        alpha = config.DEFAULT_ALPHA
    if fit.n_samples is None:
        raise InvalidArgument("fit has no sample size; cannot plan N", 'n_samples')

    df = fit.degrees_of_freedom
    multiplier = sample_size_multiplier(fit.chi_square, target_power, df, alpha, method)
    n_required = max(int(math.ceil(fit.n_samples * multiplier - 1e-9)), 1)
    achieved = power_from_fit(fit, alpha, n_required)

    if method == 'exact':
        while achieved < target_power - config.POWER_TOLERANCE:
            n_required += 1
            achieved = power_from_fit(fit, alpha, n_required)

    return {
        'n_current': fit.n_samples,
        'n_required': n_required,
        'multiplier': multiplier,
        'achieved_power': achieved,
        'target_power': target_power,
        'alpha': alpha,
        'df': df,
        'method': method,
    }


def power_curve(fit, sample_sizes: list[int] = None, alpha: float = None) -> pd.DataFrame:
    """
    Power across a grid of total sample sizes.

    Parameters:
        fit: FitResult with n_samples set
        sample_sizes: Total N values. Defaults to config.DEFAULT_SAMPLE_SIZES
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA

    Returns:
        DataFrame with columns n, ncp, power
    """
    if sample_sizes is None:
        sample_sizes = config.DEFAULT_SAMPLE_SIZES
    if fit.n_samples is None:
        raise InvalidArgument("fit has no sample size; cannot build a power curve", 'n_samples')

    ns = np.asarray(sample_sizes, dtype=int)
    ncps = [scale_ncp(fit.chi_square, fit.n_samples, int(n)) for n in ns]
    powers = [power(ncp, fit.degrees_of_freedom, alpha) for ncp in ncps]

    return pd.DataFrame({'n': ns, 'ncp': ncps, 'power': powers})
