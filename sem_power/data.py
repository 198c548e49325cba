"""
Data Preparation Module
=======================

Functions for loading raw data, summarizing it, and turning summary
statistics (means, covariances, sample sizes) into samples that an SEM
solver can fit.
"""

import numpy as np
import pandas as pd
from typing import Optional, Union

from . import config
from .exceptions import InvalidArgument


def load_csv(filepath: str) -> pd.DataFrame:
    """
    Load CSV file with basic reporting.

    Parameters:
        filepath: Path to CSV file

    Returns:
        DataFrame with loaded data
    """
    df = pd.read_csv(filepath)
    print(f"Loaded {len(df):,} records with {len(df.columns)} columns from {filepath}")
    return df


def covariance_from_correlation(
    sds: Union[float, list[float], np.ndarray],
    corr: Union[float, np.ndarray],
    n_vars: int = None
) -> np.ndarray:
    """
    Build a covariance matrix from standard deviations and correlations.

    A scalar correlation gives compound symmetry (same correlation between
    every pair of variables).

    Parameters:
        sds: Standard deviation(s). A scalar is repeated n_vars times
        corr: Scalar correlation or full correlation matrix
        n_vars: Number of variables when both sds and corr are scalars

    Returns:
        Covariance matrix (n_vars x n_vars)
    """
    sds = np.atleast_1d(np.asarray(sds, dtype=float))
    corr = np.asarray(corr, dtype=float)

    if corr.ndim == 2:
        size = corr.shape[0]
    elif sds.size > 1:
        size = sds.size
    elif n_vars is not None:
        size = n_vars
    else:
        raise InvalidArgument("n_vars is required when sds and corr are both scalars", 'n_vars')

    if sds.size == 1:
        sds = np.repeat(sds, size)
    if sds.size != size:
        raise InvalidArgument(f"expected {size} standard deviations, got {sds.size}", 'sds')
    if np.any(sds <= 0):
        raise InvalidArgument("standard deviations must be > 0", 'sds')

    if corr.ndim == 0:
        corr = np.full((size, size), float(corr))
        np.fill_diagonal(corr, 1.0)

    if not np.allclose(corr, corr.T):
        raise InvalidArgument("correlation matrix must be symmetric", 'corr')

    cov = corr * np.outer(sds, sds)
    if np.min(np.linalg.eigvalsh(cov)) <= 0:
        raise InvalidArgument("covariance matrix is not positive definite", 'corr')
    return cov


def empirical_sample(
    means: Union[float, list[float], np.ndarray],
    cov: Union[float, np.ndarray],
    n: int,
    columns: list[str] = None,
    seed: int = None
) -> pd.DataFrame:
    """
    Generate n observations whose sample moments equal the given ones exactly.

    Random normal draws are centered and whitened, then mapped through the
    Cholesky factor of `cov`. The resulting sample mean equals `means` and the
    (n-1)-denominator sample covariance equals `cov` up to rounding.

    Parameters:
        means: Mean vector (or scalar for one variable)
        cov: Covariance matrix (or variance for one variable)
        n: Number of observations (must exceed the number of variables)
        columns: Column names. Defaults to y1..yp
        seed: Random seed. Defaults to config.DEFAULT_SEED

    Returns:
        DataFrame with n rows and one column per variable
    """
    if seed is None:
        seed = config.DEFAULT_SEED

    means = np.atleast_1d(np.asarray(means, dtype=float))
    cov = np.atleast_2d(np.asarray(cov, dtype=float))
    p = means.size

    if cov.shape != (p, p):
        raise InvalidArgument(f"covariance must be {p}x{p}, got {cov.shape}", 'cov')
    if n <= p:
        raise InvalidArgument(f"n must exceed the number of variables ({p}), got {n}", 'n')
    if columns is None:
        columns = [f'y{i+1}' for i in range(p)]
    if len(columns) != p:
        raise InvalidArgument(f"expected {p} column names, got {len(columns)}", 'columns')

    try:
        chol_target = np.linalg.cholesky(cov)
    except np.linalg.LinAlgError as exc:
        raise InvalidArgument("covariance matrix is not positive definite", 'cov') from exc

    rng = np.random.default_rng(seed)
    draws = rng.standard_normal((n, p))
    draws -= draws.mean(axis=0)

    # Whiten so the sample covariance is the identity
    chol_draws = np.linalg.cholesky(np.cov(draws, rowvar=False, ddof=1).reshape(p, p))
    white = draws @ np.linalg.inv(chol_draws).T

    values = white @ chol_target.T + means
    return pd.DataFrame(values, columns=columns)


def two_group_sample(
    mean1: float,
    mean2: float,
    sd: Union[float, tuple[float, float]],
    n1: int,
    n2: int,
    outcome: str = 'y',
    group: str = 'group',
    seed: int = None
) -> pd.DataFrame:
    """
    Stack exact-moment samples for two independent groups.

    Parameters:
        mean1, mean2: Group means
        sd: Common standard deviation, or (sd1, sd2)
        n1, n2: Group sizes
        outcome: Outcome column name
        group: Name of the 0/1 group dummy column (1 = second group)
        seed: Random seed. Defaults to config.DEFAULT_SEED

    Returns:
        DataFrame with outcome and group columns (n1 + n2 rows)
    """
    if seed is None:
        seed = config.DEFAULT_SEED

    sd1, sd2 = (sd, sd) if np.isscalar(sd) else sd
    first = empirical_sample(mean1, sd1 ** 2, n1, [outcome], seed)
    second = empirical_sample(mean2, sd2 ** 2, n2, [outcome], seed + 1)
    first[group] = 0.0
    second[group] = 1.0

    return pd.concat([first, second], ignore_index=True)


def long_format(
    df: pd.DataFrame,
    value_cols: list[str],
    subject_col: str = 'subject',
    within_col: str = 'occasion',
    value_name: str = 'value'
) -> pd.DataFrame:
    """
    Reshape wide repeated-measures data (one column per occasion) to long form.

    Returns:
        DataFrame with subject, occasion and value columns
    """
    wide = df[value_cols].copy()
    wide[subject_col] = np.arange(len(wide))
    return wide.melt(id_vars=subject_col, value_vars=value_cols,
                     var_name=within_col, value_name=value_name)


def group_summary(
    df: pd.DataFrame,
    value_cols: list[str],
    group_col: Optional[str] = None
) -> dict:
    """
    Summarize raw data into the moments an SEM fit depends on.

    Parameters:
        df: Input DataFrame
        value_cols: Observed variables
        group_col: Optional grouping column

    Returns:
        Dictionary mapping group label (or 'all') to means, cov (n-1 denominator) and n
    """
    if group_col is None:
        groups = [('all', df)]
    else:
        groups = list(df.groupby(group_col))

    summary = {}
    for name, group in groups:
        data = group[value_cols].dropna()
        summary[name] = {
            'means': data.mean().to_numpy(),
            'cov': np.atleast_2d(data.cov().to_numpy()),
            'n': len(data),
        }
        print(f"  {name}: n={len(data):,}, means={np.round(summary[name]['means'], 3).tolist()}")

    return summary
