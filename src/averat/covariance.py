"""
Covariance matrix of the fitted ratios

Two interchangeable strategies are provided. `NumericalHessian` inverts
the Hessian of `SSaverat` obtained by central differences.
`BlockElimination` builds the exact Hessian of the full likelihood over
(x, y, D[1..n]) and eliminates the per-sweep D's by block matrix
inversion. The profile Hessian and the Schur complement are identical,
so both strategies return the same matrix to within the truncation
error of the finite differences.
"""

import numpy
import scipy.linalg

from .settings import config
from .errors import NumericalError
from .model import averatD, SSaverat


def numerical_hessian(f, par, step = None):
	"""
	Central-difference Hessian of the scalar function `f` at `par`.

	The step along each parameter is `step * |par[i]|` (or `step` if
	par[i] is zero), with `step` defaulting to `config.hessian_step`. The
	truncation error is of order step**2 relative to the exact Hessian.
	"""
	step = config.hessian_step if step is None else step
	p = numpy.asarray(par, dtype = float)
	h = step * numpy.where(p != 0, numpy.abs(p), 1.)
	k = p.size
	E = numpy.diag(h)
	H = numpy.empty((k, k))
	f0 = f(p)
	for i in range(k):
		H[i, i] = (f(p + E[i]) - 2 * f0 + f(p - E[i])) / h[i]**2
		for j in range(i):
			H[i, j] = H[j, i] = (
				f(p + E[i] + E[j])
				- f(p + E[i] - E[j])
				- f(p - E[i] + E[j])
				+ f(p - E[i] - E[j])
			) / (4 * h[i] * h[j])
	return H


def invert(M, what = 'matrix'):
	M = numpy.asarray(M, dtype = float)
	if not numpy.all(numpy.isfinite(M)):
		raise NumericalError(f'The {what} contains non-finite values.', stage = 'covariance')
	try:
		return scipy.linalg.inv(M)
	except scipy.linalg.LinAlgError:
		raise NumericalError(f'The {what} is singular.', stage = 'covariance') from None


def covariance2xyerr(E):
	"""
	Standard errors and error correlation from a 2x2 covariance matrix
	"""
	if not numpy.all(numpy.isfinite(E)) or E[0, 0] <= 0 or E[1, 1] <= 0:
		raise NumericalError('The covariance matrix is not positive definite.', stage = 'covariance')
	sx = E[0, 0]**.5
	sy = E[1, 1]**.5
	rho = E[0, 1] / (sx * sy)
	if abs(rho) > 1:
		raise NumericalError(f'Error correlation out of range (rho = {rho}).', stage = 'covariance')
	return sx, sy, rho


def hessian2xyerr(H):
	return covariance2xyerr(invert(H, 'Hessian matrix'))


def covmat_averat(x, y, Phat, Dhat, dhat, vP, vD, vd):
	"""
	Covariance matrix of (x, y) by block matrix inversion of the Hessian
	of the full likelihood, whose lower-right block is diagonal.
	"""
	D = averatD(x, y, Phat, Dhat, dhat, vP, vD, vd)
	O11 = numpy.sum(D**2 / vP)
	O22 = numpy.sum(D**2 / vd)
	O13 = (2 * D * x - Phat) / vP
	O23 = (2 * D * y - dhat) / vd
	O33 = y**2 / vd + x**2 / vP + 1 / vD

	H11 = numpy.array([[O11, 0.], [0., O22]])
	H12 = numpy.vstack((O13, O23))
	H21 = H12.T
	S = H11 - H12 @ (H21 / O33[:, None])
	return invert(S, 'Schur complement of the Hessian')


class CovarianceStrategy:
	"""
	Compute the 2x2 covariance matrix of the fitted (x, y)
	"""
	name = None

	def compute(self, x, y, Phat, Dhat, dhat, vP, vD, vd):
		raise NotImplementedError

	def __repr__(self):
		return f'{type(self).__name__}()'


class NumericalHessian(CovarianceStrategy):
	name = 'numerical'

	def __init__(self, step = None):
		self.step = step

	def compute(self, x, y, Phat, Dhat, dhat, vP, vD, vd):
		H = numerical_hessian(
			lambda par: SSaverat(par[0], par[1], Phat, Dhat, dhat, vP, vD, vd),
			[x, y],
			step = self.step,
		)
		return invert(H, 'Hessian matrix')


class BlockElimination(CovarianceStrategy):
	name = 'analytical'

	def compute(self, x, y, Phat, Dhat, dhat, vP, vD, vd):
		return covmat_averat(x, y, Phat, Dhat, dhat, vP, vD, vd)


def covariance_strategy(numerical = True):
	return NumericalHessian() if numerical else BlockElimination()
