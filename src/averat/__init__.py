"""
Average time-resolved LA-ICP-MS isotope signals into P/D and d/D ratios with propagated uncertainties
"""

__author__    = 'averat contributors'
__copyright__ = 'Copyright (c) 2026 averat contributors'
__license__   = 'MIT License - https://opensource.org/licenses/MIT'
__date__      = '2026-10-18'
__version__   = '0.0.1'


from .errors import ReductionError, ConfigurationError, NumericalError, InputShapeError
from .settings import Config, config, load_methods, getPDd, get_channel
from .samples import Pars, Sample, polyval, polyfac, atomic
from .variance import var_timeseries, estimate_covariance
from .model import averatD, averat_residuals, SSaverat
from .covariance import (
	numerical_hessian,
	hessian2xyerr,
	covariance2xyerr,
	covmat_averat,
	CovarianceStrategy,
	NumericalHessian,
	BlockElimination,
	covariance_strategy,
)
from .transforms import TRANSFORMS, register_transform, get_transform, ReciprocalTransform
from .core import fit_averat, linear_averat, averat_atomic, averat_sample, averat, Run
