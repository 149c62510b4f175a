"""
Exceptions raised while reducing LA-ICP-MS ratios
"""


class ReductionError(ValueError):
	"""
	Base class for all reduction failures.

	`sample` is the name of the sample being processed (set by the batch
	driver) and `stage` is one of 'atomic', 'variance', 'optimization',
	'covariance' or 'reparameterization'.
	"""

	def __init__(self, message, sample = None, stage = None):
		super().__init__(message)
		self.message = message
		self.sample = sample
		self.stage = stage

	def __str__(self):
		where = []
		if self.sample is not None:
			where.append(f"sample '{self.sample}'")
		if self.stage is not None:
			where.append(f'stage {self.stage}')
		if where:
			return f"[{', '.join(where)}] {self.message}"
		return self.message


class ConfigurationError(ReductionError):
	"""Unmapped channel role, unknown method or method/schema mismatch"""


class NumericalError(ReductionError):
	"""Failed fit, singular matrix or non-finite result"""


class InputShapeError(ReductionError):
	"""Series of unequal length or too short for the variance estimator"""
