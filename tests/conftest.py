import numpy as np
import pandas as pd
import pytest

from sem_power import designs
from sem_power.sem import FitStatistics


class FakeFitter:
    """Stands in for semopy: returns canned (chi2, dof) per model description."""

    def __init__(self, table: dict):
        self.table = table
        self.calls = []

    def __call__(self, description, data, mean_structure=False):
        self.calls.append((description, list(data.columns), mean_structure))
        chi_square, dof = self.table[description]
        return FitStatistics(chi_square=chi_square, dof=dof, n_samples=len(data))


@pytest.fixture
def paired_design():
    return designs.paired_design('pre', 'post')


@pytest.fixture
def paired_data():
    rng = np.random.default_rng(0)
    return pd.DataFrame(rng.standard_normal((40, 2)), columns=['pre', 'post'])


@pytest.fixture
def fake_fitter(paired_design):
    return FakeFitter({
        paired_design.unconstrained: (0.0, 0),
        paired_design.constrained: (6.5, 1),
    })
