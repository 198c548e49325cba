"""
SEM Power Library
=================

Statistical power for t-tests and repeated-measures designs from constrained
structural-equation-model fits (Satorra-Saris method).

Modules:
    config     - Global configuration parameters
    exceptions - InvalidArgument, UpstreamFitFailure
    models     - FitResult and PowerQuery value objects
    power      - Critical values, power, sample-size planning
    designs    - Constrained / unconstrained model pairs
    data       - Summary statistics and exact-moment samples
    sem        - semopy fitting boundary
    stats      - Classical test counterparts
    viz        - Plot style and power curves
    output     - Output naming and saving
"""

from . import config
from . import exceptions
from . import models
from . import power
from . import designs
from . import data
from . import sem
from . import stats
from . import viz
from . import output

from .exceptions import InvalidArgument, UpstreamFitFailure
from .models import FitResult, PowerQuery
from .power import critical_value, power as chi2_power, sample_size_multiplier

__version__ = '1.0.0'

__all__ = [
    'config',
    'exceptions',
    'models',
    'power',
    'designs',
    'data',
    'sem',
    'stats',
    'viz',
    'output',
    'InvalidArgument',
    'UpstreamFitFailure',
    'FitResult',
    'PowerQuery',
    'critical_value',
    'chi2_power',
    'sample_size_multiplier',
]
