"""
Numerical defaults, method table and channel lookup
"""

import yaml
from pathlib import Path

from .errors import ConfigurationError


class Config():
	def __init__(
		self,
		variance_window   = None,            # None: one variance per series
		hessian_step      = 1e-4,            # relative central-difference step
		fit_method        = 'least_squares', # any lmfit minimizer, e.g. 'nelder'
		max_nfev          = None,            # None: lmfit default
		robust_covariance = False,           # MinCovDet in the linear fallback
		workers           = None,            # >1: thread pool over samples
		methods_file      = None,            # None: methods.yaml next to this module
	):
		self.variance_window = variance_window
		self.hessian_step = hessian_step
		self.fit_method = fit_method
		self.max_nfev = max_nfev
		self.robust_covariance = robust_covariance
		self.workers = workers
		self.methods_file = methods_file

	@property
	def methods_path(self):
		if self.methods_file is None:
			return Path(__file__).resolve().parent / 'methods.yaml'
		return Path(self.methods_file)

config = Config()


def load_methods(path = None):
	"""
	Read the method table, i.e. a dict of the form:
	methods = {
		'Rb-Sr': {'P': 'Rb87', 'D': 'Sr87', 'd': 'Sr86'}, ...
	}
	"""
	path = config.methods_path if path is None else Path(path)

	if not path.is_file():
		raise FileNotFoundError(f'Method table not found at: {path}')

	with open(path, 'r', encoding = 'utf-8') as f:
		methods = yaml.safe_load(f) or {}

	return methods


def getPDd(method, methods = None):
	"""
	Return the (P, D, d) isotopes of `method`
	"""
	if methods is None:
		methods = load_methods()
	if method not in methods:
		raise ConfigurationError(
			f"Unknown method '{method}'. Known methods are {sorted(methods)}."
		)
	try:
		return tuple(methods[method][role] for role in ('P', 'D', 'd'))
	except (KeyError, TypeError):
		raise ConfigurationError(
			f"Method '{method}' must define the isotopes P, D and d."
		) from None


def get_channel(channels, role):
	"""
	Return the channel mapped to `role` ('P', 'D' or 'd')
	"""
	if role not in channels or channels[role] is None:
		raise ConfigurationError(f"No channel is mapped to role '{role}'.")
	return channels[role]
