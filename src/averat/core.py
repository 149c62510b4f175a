"""
Average the 'atomic' isotopic ratios of LA-ICP-MS samples
"""

import lmfit
import numpy
import pandas
import logging
from concurrent.futures import ThreadPoolExecutor

from .settings import config, getPDd
from .covariance import covariance_strategy, covariance2xyerr
from .errors import ConfigurationError, InputShapeError, NumericalError, ReductionError
from .model import averat_residuals
from .samples import Sample, atomic
from .transforms import get_transform
from .variance import var_timeseries, estimate_covariance

logger = logging.getLogger(__name__)


def _as_series(Phat, Dhat, dhat):
	Phat, Dhat, dhat = (numpy.asarray(_, dtype = float) for _ in (Phat, Dhat, dhat))
	if Phat.ndim != 1 or Dhat.ndim != 1 or dhat.ndim != 1:
		raise InputShapeError('Phat, Dhat and dhat must be one-dimensional.', stage = 'atomic')
	if not Phat.size == Dhat.size == dhat.size:
		raise InputShapeError(
			f'Phat, Dhat and dhat have unequal lengths ({Phat.size}, {Dhat.size}, {dhat.size}).',
			stage = 'atomic',
		)
	if Phat.size == 0:
		raise InputShapeError('No sweeps to average.', stage = 'atomic')
	if not all(numpy.all(numpy.isfinite(_)) for _ in (Phat, Dhat, dhat)):
		raise NumericalError('Phat, Dhat and dhat must be finite.', stage = 'atomic')
	return Phat, Dhat, dhat


def _check_variance(v, label):
	if not numpy.all(numpy.isfinite(v)) or numpy.any(v <= 0):
		raise NumericalError(
			f'The variance of {label} must be strictly positive, got min = {numpy.min(v)}.',
			stage = 'variance',
		)


def fit_averat(Phat, Dhat, dhat, vP, vD, vd):
	"""
	Minimize SSaverat over (x, y), starting from the ratios of the sums
	"""
	with numpy.errstate(divide = 'ignore', invalid = 'ignore'):
		init = numpy.array([numpy.sum(Phat), numpy.sum(dhat)]) / numpy.sum(Dhat)
	if not numpy.all(numpy.isfinite(init)):
		raise NumericalError('Cannot compute the initial ratios (sum of Dhat is zero).', stage = 'optimization')

	fitparams = lmfit.Parameters()
	fitparams.add('x', value = init[0])
	fitparams.add('y', value = init[1])

	def residuals(p):
		return averat_residuals(p['x'].value, p['y'].value, Phat, Dhat, dhat, vP, vD, vd)

	try:
		fitresult = lmfit.minimize(
			residuals,
			fitparams,
			method = config.fit_method,
			max_nfev = config.max_nfev,
			calc_covar = False,
		)
	except ValueError as e:
		raise NumericalError(f'The fit failed: {e}', stage = 'optimization') from e

	if not fitresult.success:
		raise NumericalError(f'The fit did not converge: {fitresult.message}', stage = 'optimization')

	x, y = fitresult.params['x'].value, fitresult.params['y'].value
	if not numpy.isfinite(x) or not numpy.isfinite(y):
		raise NumericalError(f'The fit converged to non-finite ratios ({x}, {y}).', stage = 'optimization')
	return x, y


def linear_averat(Phat, Dhat, dhat, robust = None):
	"""
	Ratios of the sums, with standard errors propagated from the
	covariance of the three signals (delta method)
	"""
	robust = config.robust_covariance if robust is None else robust
	n = Phat.size
	if n < 2:
		raise InputShapeError(f'At least 2 sweeps are needed to estimate a covariance, got {n}.', stage = 'covariance')

	sP, sD, sd = numpy.sum(Phat), numpy.sum(Dhat), numpy.sum(dhat)
	if sD == 0:
		raise NumericalError('Cannot compute ratios (sum of Dhat is zero).', stage = 'covariance')

	try:
		E = n * estimate_covariance(numpy.column_stack((Phat, Dhat, dhat)), robust = robust)
	except ValueError as e:
		raise NumericalError(f'Cannot estimate the covariance of the signals: {e}', stage = 'covariance') from e
	J = numpy.array([
		[1 / sD, -sP / sD**2, 0.],
		[0., -sd / sD**2, 1 / sD],
	])
	covmat = J @ E @ J.T
	if not numpy.all(numpy.isfinite(covmat)):
		raise NumericalError('The propagated covariance matrix is not finite.', stage = 'covariance')

	# J @ E @ J.T is positive semi-definite, negative variances are round-off
	sx = max(covmat[0, 0], 0.)**.5
	sy = max(covmat[1, 1], 0.)**.5
	rho = float(numpy.clip(covmat[0, 1] / (sx * sy), -1, 1)) if sx * sy > 0 else 0.
	return sP / sD, sx, sd / sD, sy, rho


def averat_atomic(Phat, Dhat, dhat, physics = True, numerical = True, robust = None):
	"""
	Estimate x = P/D and y = d/D from the atomic signals of one sample.

	Returns
	-------
	x, sx, y, sy, rho
	"""
	Phat, Dhat, dhat = _as_series(Phat, Dhat, dhat)

	if not physics:
		return linear_averat(Phat, Dhat, dhat, robust = robust)

	vP = var_timeseries(Phat, config.variance_window)
	vD = var_timeseries(Dhat, config.variance_window)
	vd = var_timeseries(dhat, config.variance_window)
	for v, label in ((vP, 'Phat'), (vD, 'Dhat'), (vd, 'dhat')):
		_check_variance(v, label)

	x, y = fit_averat(Phat, Dhat, dhat, vP, vD, vd)
	E = covariance_strategy(numerical).compute(x, y, Phat, Dhat, dhat, vP, vD, vd)
	sx, sy, rho = covariance2xyerr(E)
	return x, sx, y, sy, rho


def averat_sample(samp, channels, blank, pars, physics = True, numerical = True):
	Phat, Dhat, dhat = atomic(samp, channels, blank, pars)
	return averat_atomic(Phat, Dhat, dhat, physics = physics, numerical = numerical)


def averat(
	run,
	channels,
	blank,
	pars,
	method = None,
	physics = True,
	numerical = True,
	workers = None,
):
	"""
	Average the atomic ratios of every sample in `run`.

	Returns a pandas.DataFrame with one row per sample, in the order of
	`run`, and the columns 'name', P/D, s[P/D], d/D, s[d/D] and 'rho'
	(or 'name', 'x', 's[x]', 'y', 's[y]', 'rho' if `method` is None),
	followed by the columns of the transform registered for `method`,
	if any. The first failing sample aborts the whole run.
	"""
	samples = list(run)

	if method is None:
		xlab, ylab = 'x', 'y'
		transform = None
	else:
		P, D, d = getPDd(method)
		xlab, ylab = f'{P}/{D}', f'{d}/{D}'
		transform = get_transform(method)
		if transform is not None:
			transform.check(method)

	columns = ['name', xlab, f's[{xlab}]', ylab, f's[{ylab}]', 'rho']
	if transform is not None:
		columns += transform.columns

	def process(samp):
		try:
			estimate = averat_sample(samp, channels, blank, pars, physics = physics, numerical = numerical)
			row = [samp.name, *(float(_) for _ in estimate)]
			if transform is not None:
				row += transform(*estimate)
		except ReductionError as e:
			if e.sample is None:
				e.sample = samp.name
			logger.error(str(e))
			raise
		if logger.isEnabledFor(logging.DEBUG):
			logger.debug('%s: %s', samp.name, dict(zip(columns[1:], row[1:])))
		return row

	workers = config.workers if workers is None else workers
	logger.info(
		f'Averaging {len(samples)} samples (method = {method}, physics = {physics}, numerical = {numerical})'
	)
	if workers is not None and workers > 1:
		with ThreadPoolExecutor(max_workers = workers) as ex:
			rows = list(ex.map(process, samples))
	else:
		rows = [process(samp) for samp in samples]
	logger.info(f'Averaged {len(rows)} samples')

	return pandas.DataFrame(rows, columns = columns)


class Run:

	def __init__(self, data = [], sample_field = 'Sample'):
		"""
		Hold the samples of an LA-ICP-MS session, either as a list of
		Sample objects or as a long-format pandas.DataFrame with one
		`sample_field` column
		"""
		if isinstance(data, pandas.DataFrame):
			if sample_field not in data:
				raise ConfigurationError(f"The data have no '{sample_field}' column.")
			missing = data[sample_field].isna()
			if missing.any():
				raise ConfigurationError(
					f"Rows {data.index[missing].tolist()} have no '{sample_field}' name."
				)
			self.samples = [
				Sample(name, df.drop(columns = sample_field).reset_index(drop = True))
				for name, df in data.groupby(sample_field, sort = False)
			]
		elif isinstance(data, list):
			self.samples = list(data)
		else:
			raise ValueError("Invalid data type. Allowed data types are pandas.DataFrame and list of Sample.")

	def __len__(self):
		return len(self.samples)

	def __iter__(self):
		return iter(self.samples)

	def averat(self, channels, blank, pars, method = None, physics = True, numerical = True, workers = None):
		"""
		Average the atomic ratios of all samples and store them in `self.ratios`
		"""
		self.ratios = averat(
			self.samples, channels, blank, pars,
			method = method,
			physics = physics,
			numerical = numerical,
			workers = workers,
		)
		return self.ratios
