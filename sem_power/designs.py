"""
Model Designs Module
====================

Builders for the constrained / unconstrained model pairs that express
classical tests as SEM fits. Descriptions use semopy's lavaan-style syntax:

    y ~ x         regression
    y ~ 1         intercept (mean structure)
    y1 ~~ y2      (co)variance
    a*x, 0*x      labelled (shared) or fixed parameter

Each design's degrees of freedom is the number of independent constraints
that separate the two models.
"""

from dataclasses import dataclass
from itertools import combinations

from .exceptions import InvalidArgument


@dataclass(frozen=True)
class Design:
    """A hypothesis expressed as a pair of nested SEM descriptions."""

    name: str
    hypothesis: str
    variables: tuple
    unconstrained: str
    constrained: str
    df: int
    mean_structure: bool = False

    def describe(self) -> str:
        lines = [
            f"Design: {self.name}",
            f"H0: {self.hypothesis} (df={self.df})",
            "Unconstrained model:",
            *[f"  {line}" for line in self.unconstrained.splitlines()],
            "Constrained model:",
            *[f"  {line}" for line in self.constrained.splitlines()],
        ]
        return "\n".join(lines)


def _check_names(variables, minimum: int) -> tuple:
    variables = tuple(variables)
    if len(variables) < minimum:
        raise InvalidArgument(f"design needs at least {minimum} variables, got {len(variables)}", 'variables')
    if len(set(variables)) != len(variables):
        raise InvalidArgument(f"variable names must be unique: {variables}", 'variables')
    for var in variables:
        if not var.isidentifier():
            raise InvalidArgument(f"'{var}' is not a valid variable name", 'variables')
    return variables


def _variances(variables, label: str = None) -> list[str]:
    prefix = f"{label}*" if label else ""
    return [f"{v} ~~ {prefix}{v}" for v in variables]


def _covariances(variables) -> list[str]:
    return [f"{a} ~~ {b}" for a, b in combinations(variables, 2)]


def _format_value(value: float) -> str:
    return f"{float(value):g}"


def one_sample_design(var: str = 'y', mu0: float = 0.0) -> Design:
    """One-sample t-test: H0 mean(var) = mu0."""
    (var,) = _check_names([var], 1)
    variance = _variances([var])

    return Design(
        name='one-sample',
        hypothesis=f"mean({var}) = {_format_value(mu0)}",
        variables=(var,),
        unconstrained="\n".join([f"{var} ~ 1", *variance]),
        constrained="\n".join([f"{var} ~ {_format_value(mu0)}*1", *variance]),
        df=1,
        mean_structure=True,
    )


def repeated_measures_design(variables: list[str]) -> Design:
    """
    Repeated-measures test: H0 all occasion means are equal.

    The covariance matrix is left unrestricted, so no sphericity assumption
    is made. Equal means are imposed through a shared intercept label.
    """
    variables = _check_names(variables, 2)
    moments = _variances(variables) + _covariances(variables)

    return Design(
        name='repeated-measures' if len(variables) > 2 else 'paired',
        hypothesis=" = ".join(f"mean({v})" for v in variables),
        variables=variables,
        unconstrained="\n".join([f"{v} ~ 1" for v in variables] + moments),
        constrained="\n".join([f"{v} ~ mu*1" for v in variables] + moments),
        df=len(variables) - 1,
        mean_structure=True,
    )


def paired_design(var1: str = 'y1', var2: str = 'y2') -> Design:
    """Paired t-test: H0 equal means on two correlated occasions."""
    return repeated_measures_design([var1, var2])


def two_group_design(outcome: str = 'y', group: str = 'group') -> Design:
    """
    Independent-samples t-test as a regression on a 0/1 group dummy.

    A zero slope means equal group means. Residual variance is shared by
    both groups, as in Student's t-test.
    """
    outcome, group = _check_names([outcome, group], 2)

    return Design(
        name='two-group',
        hypothesis=f"mean({outcome} | {group}=0) = mean({outcome} | {group}=1)",
        variables=(outcome, group),
        unconstrained=f"{outcome} ~ {group}",
        constrained=f"{outcome} ~ 0*{group}",
        df=1,
    )


def correlation_design(var1: str = 'x', var2: str = 'y') -> Design:
    """Test of zero covariance between two variables."""
    var1, var2 = _check_names([var1, var2], 2)
    variances = _variances([var1, var2])

    return Design(
        name='correlation',
        hypothesis=f"cov({var1}, {var2}) = 0",
        variables=(var1, var2),
        unconstrained="\n".join([f"{var1} ~~ {var2}", *variances]),
        constrained="\n".join([f"{var1} ~~ 0*{var2}", *variances]),
        df=1,
    )


def equal_variance_design(variables: list[str]) -> Design:
    """Test of equal variances across variables, covariances free."""
    variables = _check_names(variables, 2)
    covariances = _covariances(variables)

    return Design(
        name='equal-variance',
        hypothesis=" = ".join(f"var({v})" for v in variables),
        variables=variables,
        unconstrained="\n".join(_variances(variables) + covariances),
        constrained="\n".join(_variances(variables, 'v') + covariances),
        df=len(variables) - 1,
    )
