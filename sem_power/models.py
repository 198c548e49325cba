"""
Value Objects Module
====================

Immutable results passed between the SEM fit boundary and the power
calculator.
"""

import math
from dataclasses import dataclass
from typing import Optional

from . import config
from . import power as power_calc
from .exceptions import InvalidArgument, UpstreamFitFailure


@dataclass(frozen=True)
class FitResult:
    """Chi-square and degrees of freedom of a fitted constrained model."""

    chi_square: float
    degrees_of_freedom: int
    n_samples: Optional[int] = None

    def __post_init__(self):
        if not math.isfinite(self.chi_square):
            raise UpstreamFitFailure(f"non-finite chi-square from fit: {self.chi_square}")
        if self.chi_square < 0:
            raise InvalidArgument(f"chi-square must be >= 0, got {self.chi_square}", 'chi_square')
        power_calc.check_df(self.degrees_of_freedom)
        if self.n_samples is not None:
            power_calc.check_sample_size(self.n_samples, 'n_samples')

    @property
    def ncp(self) -> float:
        """The chi-square of a population-level fit is the test's ncp."""
        return self.chi_square

    def to_dict(self) -> dict:
        return {
            'chi_square': self.chi_square,
            'degrees_of_freedom': self.degrees_of_freedom,
            'n_samples': self.n_samples,
        }


@dataclass(frozen=True)
class PowerQuery:
    """A single power question: alpha, degrees of freedom and ncp."""

    alpha: float
    degrees_of_freedom: int
    ncp: float

    def __post_init__(self):
        power_calc.check_alpha(self.alpha)
        power_calc.check_df(self.degrees_of_freedom)
        power_calc.check_ncp(self.ncp)

    @classmethod
    def from_fit(cls, fit: FitResult, alpha: float = None) -> 'PowerQuery':
        if alpha is None:
            alpha = config.DEFAULT_ALPHA
        return cls(alpha=alpha, degrees_of_freedom=fit.degrees_of_freedom, ncp=fit.chi_square)

    def critical_value(self) -> float:
        return power_calc.critical_value(self.alpha, self.degrees_of_freedom)

    def power(self) -> float:
        return power_calc.power(self.ncp, self.degrees_of_freedom, self.alpha)
