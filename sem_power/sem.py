"""
SEM Fitting Module
==================

Boundary to the SEM estimation engine (semopy). Fits model descriptions to
raw or summary data and hands chi-square statistics to the power calculator.

The solver is treated as a black box: failures and non-finite statistics are
reported as UpstreamFitFailure and never retried, since they point at a
malformed model description.
"""

import math
from typing import Callable, NamedTuple, Optional

import numpy as np
import pandas as pd
from semopy import Model, ModelMeans, calc_stats

from . import config
from . import data as data_prep
from . import power as power_calc
from .designs import Design
from .exceptions import InvalidArgument, UpstreamFitFailure
from .models import FitResult


class FitStatistics(NamedTuple):
    """Raw fit statistics; dof may be 0 for saturated models."""
    chi_square: float
    dof: int
    n_samples: int


Fitter = Callable[[str, pd.DataFrame, bool], FitStatistics]


def fit_statistics(
    description: str,
    data: pd.DataFrame,
    mean_structure: bool = False,
    obj: str = None,
    solver: str = None
) -> FitStatistics:
    """
    Fit a model description with semopy and read chi-square and DoF.

    Mean-structure descriptions are fitted with ModelMeans, covariance-only
    descriptions with Model. ModelMeans reports a per-observation FIML
    chi-square and leaves the p observed means out of its DoF, so its
    statistics are rescaled to the likelihood-ratio chi-square on N
    observations and the moment count is completed with the means.

    Parameters:
        description: semopy model description
        data: Raw observations, one column per observed variable of the model
        mean_structure: Fit intercepts (ModelMeans). Set by Design.mean_structure
        obj: Objective for covariance models. Defaults to config.DEFAULT_OBJECTIVE
        solver: Optimizer. Defaults to config.DEFAULT_SOLVER

    Returns:
        FitStatistics(chi_square, dof, n_samples)
    """
    if obj is None:
        obj = config.DEFAULT_OBJECTIVE
    if solver is None:
        solver = config.DEFAULT_SOLVER

    try:
        if mean_structure:
            model = ModelMeans(description)
            result = model.fit(data, solver=solver)
        else:
            model = Model(description)
            result = model.fit(data, obj=obj, solver=solver)
        stats = calc_stats(model)
    except Exception as exc:
        raise UpstreamFitFailure(f"SEM fit failed: {exc}", description) from exc

    if not result.success:
        raise UpstreamFitFailure(f"SEM solver did not converge: {result.message}", description)

    row = stats.iloc[0]
    chi_square = float(row['chi2'])
    dof = int(round(float(row['DoF'])))
    if not math.isfinite(chi_square):
        raise UpstreamFitFailure(f"SEM fit returned non-finite chi-square: {chi_square}", description)

    if mean_structure:
        chi_square *= len(data)
        dof += data.shape[1]

    return FitStatistics(chi_square=chi_square, dof=dof, n_samples=len(data))


def fit_model(
    description: str,
    data: pd.DataFrame,
    mean_structure: bool = False,
    fitter: Fitter = None
) -> FitResult:
    """
    Fit a constrained model and return its chi-square test against the saturated model.

    Parameters:
        description: semopy model description (must have DoF >= 1)
        data: Raw observations
        mean_structure: Whether the description fits intercepts
        fitter: Fitting function. Defaults to fit_statistics

    Returns:
        FitResult of the fitted model
    """
    if fitter is None:
        fitter = fit_statistics

    stats = fitter(description, data, mean_structure)
    return FitResult(
        chi_square=max(stats.chi_square, 0.0),
        degrees_of_freedom=stats.dof,
        n_samples=stats.n_samples,
    )


def compare_fits(
    constrained: FitStatistics,
    baseline: FitStatistics,
    df: int = None
) -> FitResult:
    """
    Chi-square difference test of a constrained model against a baseline.

    Parameters:
        constrained: Statistics of the more restricted model
        baseline: Statistics of the less restricted model
        df: Known number of constraints. Defaults to the DoF difference

    Returns:
        FitResult with the chi-square difference and its degrees of freedom
    """
    for stats in (constrained, baseline):
        if not math.isfinite(stats.chi_square):
            raise UpstreamFitFailure(f"non-finite chi-square in comparison: {stats.chi_square}")

    dof_diff = constrained.dof - baseline.dof
    if df is None:
        df = dof_diff
    elif dof_diff != df:
        print(f"  Note: fitted DoF difference {dof_diff} differs from design df {df}; using {df}")

    if df < 1:
        raise InvalidArgument(
            f"constrained model must have more DoF than the baseline (difference {df})", 'df'
        )

    # Solver noise can push a tiny difference below zero
    chi_diff = max(constrained.chi_square - baseline.chi_square, 0.0)
    return FitResult(chi_square=chi_diff, degrees_of_freedom=df, n_samples=constrained.n_samples)


def _check_columns(design: Design, data: pd.DataFrame) -> None:
    missing = [v for v in design.variables if v not in data.columns]
    if missing:
        raise InvalidArgument(f"data is missing design variables: {missing}", 'data')


def design_fit(design: Design, data: pd.DataFrame, fitter: Fitter = None) -> FitResult:
    """
    Fit both models of a design and return the ncp of its constraint.

    When `data` holds the population moments (see summary_sample) the
    resulting chi-square is the non-centrality parameter at that N.

    Parameters:
        design: Design to fit
        data: Raw or exact-moment observations
        fitter: Fitting function. Defaults to fit_statistics

    Returns:
        FitResult with chi-square difference, design df and N
    """
    if fitter is None:
        fitter = fit_statistics

    _check_columns(design, data)
    observed = data[list(design.variables)]

    baseline = fitter(design.unconstrained, observed, design.mean_structure)
    constrained = fitter(design.constrained, observed, design.mean_structure)
    return compare_fits(constrained, baseline, df=design.df)


def summary_sample(
    design: Design,
    means,
    cov,
    n: int,
    seed: int = None
) -> pd.DataFrame:
    """Exact-moment sample over a design's variables from summary statistics."""
    return data_prep.empirical_sample(means, cov, n, list(design.variables), seed)


def run_design(
    design: Design,
    data: pd.DataFrame,
    alpha: float = None,
    target_power: float = None,
    fitter: Fitter = None,
    method: str = 'exact'
) -> dict:
    """
    Fit a design, compute its power and the N needed for the target power.

    Parameters:
        design: Design to fit
        data: Raw or exact-moment observations
        alpha: Significance level. Defaults to config.DEFAULT_ALPHA
        target_power: Desired power. Defaults to config.DEFAULT_TARGET_POWER
        fitter: Fitting function. Defaults to fit_statistics
        method: Sample-size method passed to required_sample_size

    Returns:
        Dictionary with fit, ncp, power, label and sample-size plan
    """
    if alpha is None:
        alpha = config.DEFAULT_ALPHA
    if target_power is None:
        target_power = config.DEFAULT_TARGET_POWER

    fit = design_fit(design, data, fitter)
    achieved = power_calc.power_from_fit(fit, alpha)

    print("\n" + "=" * 60)
    print(f"SEM POWER: {design.name.upper()}")
    print("=" * 60)
    print(f"\nH0: {design.hypothesis}")
    print(f"  N: {fit.n_samples:,}")
    print(f"  ncp (chi-square): {fit.chi_square:.4f}")
    print(f"  df: {fit.degrees_of_freedom}")
    print(f"  Critical value: {power_calc.critical_value(alpha, fit.degrees_of_freedom):.4f}")
    print(f"  Power: {achieved:.4f} ({config.get_power_label(achieved)})")

    plan: Optional[dict] = None
    if fit.chi_square > 0:
        plan = power_calc.required_sample_size(fit, target_power, alpha, method)
        print(f"\n  N for {target_power:.0%} power ({method}): {plan['n_required']:,} "
              f"(x{plan['multiplier']:.2f}, achieved {plan['achieved_power']:.4f})")

    return {
        'design': design.name,
        'hypothesis': design.hypothesis,
        'fit': fit,
        'n': fit.n_samples,
        'ncp': fit.chi_square,
        'df': fit.degrees_of_freedom,
        'alpha': alpha,
        'power': achieved,
        'power_label': config.get_power_label(achieved),
        'plan': plan,
    }


def results_table(results: list[dict]) -> pd.DataFrame:
    """Flatten run_design() results into a DataFrame."""
    rows = []
    for res in results:
        plan = res['plan'] or {}
        rows.append({
            'design': res['design'],
            'n': res['n'],
            'ncp': res['ncp'],
            'df': res['df'],
            'alpha': res['alpha'],
            'power': res['power'],
            'power_label': res['power_label'],
            'n_required': plan.get('n_required', np.nan),
            'achieved_power': plan.get('achieved_power', np.nan),
        })
    return pd.DataFrame(rows)
