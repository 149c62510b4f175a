"""
Dispersion of time-resolved signals
"""

import numpy
from sklearn.covariance import MinCovDet

from .errors import InputShapeError


def var_timeseries(series, window = None):
	"""
	Sampling variance of each sweep of a time series.

	The variance is estimated as half the mean squared successive
	difference, which is insensitive to the slow signal decay of a
	laser ablation pit. With `window = None` a single estimate is computed
	over the whole series and broadcast to every sweep; otherwise the
	estimate for each sweep uses the `window` sweeps centred on it
	(shifted inward at both ends of the series).
	"""
	y = numpy.asarray(series, dtype = float)
	n = y.size

	if window is None:
		if n < 2:
			raise InputShapeError(
				f'At least 2 sweeps are needed to estimate a variance, got {n}.',
				stage = 'variance',
			)
		return numpy.full(n, numpy.sum(numpy.diff(y)**2) / (2 * (n - 1)))

	window = int(window)
	if window < 2:
		raise InputShapeError(f'The variance window must span at least 2 sweeps, got {window}.', stage = 'variance')
	if n < window:
		raise InputShapeError(
			f'The variance window ({window} sweeps) is longer than the series ({n} sweeps).',
			stage = 'variance',
		)

	sq = numpy.diff(y)**2
	out = numpy.empty(n)
	for i in range(n):
		lo = min(max(i - window // 2, 0), n - window)
		out[i] = sq[lo:lo + window - 1].sum() / (2 * (window - 1))
	return out


def estimate_covariance(X, robust = False, support_fraction = None, assume_centered = False):
	# X.shape must be (N, k), one column per variable
	if robust:
		return MinCovDet(
			support_fraction = support_fraction,
			assume_centered = assume_centered
		).fit(X).covariance_
	else:
		return numpy.cov(numpy.asarray(X, dtype = float).T)
