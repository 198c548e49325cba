import pytest

from sem_power import designs
from sem_power.exceptions import InvalidArgument


def test_one_sample_design():
    design = designs.one_sample_design('score', mu0=100)

    assert design.df == 1
    assert design.mean_structure
    assert design.unconstrained.splitlines() == ['score ~ 1', 'score ~~ score']
    assert design.constrained.splitlines() == ['score ~ 100*1', 'score ~~ score']
    assert design.hypothesis == 'mean(score) = 100'


def test_paired_design(paired_design):
    assert paired_design.name == 'paired'
    assert paired_design.df == 1
    assert paired_design.variables == ('pre', 'post')
    assert 'pre ~ mu*1' in paired_design.constrained
    assert 'post ~ mu*1' in paired_design.constrained
    assert 'pre ~~ post' in paired_design.constrained
    assert 'pre ~ 1' in paired_design.unconstrained


def test_repeated_measures_design():
    design = designs.repeated_measures_design(['t1', 't2', 't3', 't4'])

    assert design.name == 'repeated-measures'
    assert design.df == 3
    lines = design.constrained.splitlines()
    assert sum(line.endswith('mu*1') for line in lines) == 4
    # 4 variances + 6 covariances
    assert sum('~~' in line for line in lines) == 10


def test_two_group_design():
    design = designs.two_group_design('y', 'treated')

    assert design.unconstrained == 'y ~ treated'
    assert design.constrained == 'y ~ 0*treated'
    assert not design.mean_structure


def test_correlation_design():
    design = designs.correlation_design('x', 'y')
    assert 'x ~~ 0*y' in design.constrained
    assert 'x ~~ y' in design.unconstrained
    assert design.df == 1


def test_equal_variance_design():
    design = designs.equal_variance_design(['a', 'b', 'c'])
    assert design.df == 2
    assert 'a ~~ v*a' in design.constrained
    assert 'a ~~ a' in design.unconstrained


@pytest.mark.parametrize("variables", [['t1'], ['t1', 't1'], ['t1', 'bad name']])
def test_invalid_variables(variables):
    with pytest.raises(InvalidArgument):
        designs.repeated_measures_design(variables)


def test_describe(paired_design):
    text = paired_design.describe()
    assert text.startswith('Design: paired')
    assert 'H0: mean(pre) = mean(post) (df=1)' in text
    assert '  pre ~ mu*1' in text
