"""
Errors-in-variables model of the P, D and d signals
"""

import numpy


def averatD(x, y, Phat, Dhat, dhat, vP, vD, vd):
	"""
	Best estimate of the true D signal of each sweep given the ratios
	x = P/D and y = d/D, i.e. the inverse-variance weighted mean of Dhat,
	Phat/x and dhat/y.
	"""
	return (
		(dhat * vD * vP * y + Phat * vD * vd * x + Dhat * vP * vd)
		/ (vD * vP * y**2 + vD * vd * x**2 + vP * vd)
	)


def averat_residuals(x, y, Phat, Dhat, dhat, vP, vD, vd):
	"""
	Normalized residuals of the d, P and D signals, stacked in that order
	"""
	D = averatD(x, y, Phat, Dhat, dhat, vP, vD, vd)
	return numpy.hstack((
		(D * y - dhat) / vd**.5,
		(D * x - Phat) / vP**.5,
		(D - Dhat) / vD**.5,
	))


def SSaverat(x, y, Phat, Dhat, dhat, vP, vD, vd):
	"""
	Negative log-likelihood of (x, y), up to a constant
	"""
	D = averatD(x, y, Phat, Dhat, dhat, vP, vD, vd)
	return numpy.sum(
		(D * y - dhat)**2 / vd
		+ (D * x - Phat)**2 / vP
		+ (D - Dhat)**2 / vD
	) / 2
