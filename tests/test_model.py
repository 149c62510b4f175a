import numpy
import pytest

from averat import averatD, averat_residuals, SSaverat


def random_inputs(n = 30, seed = 0):
	rng = numpy.random.default_rng(seed)
	Phat = rng.uniform(50., 150., n)
	Dhat = rng.uniform(500., 1500., n)
	dhat = rng.uniform(20., 80., n)
	vP = rng.uniform(1., 10., n)
	vD = rng.uniform(10., 100., n)
	vd = rng.uniform(0.5, 5., n)
	return Phat, Dhat, dhat, vP, vD, vd


@pytest.mark.parametrize('x, y', [(0.1, 0.05), (0.2, 0.01), (1.5, 3.0)])
def test_averatD_is_a_weighted_average(x, y):
	Phat, Dhat, dhat, vP, vD, vd = random_inputs()
	D = averatD(x, y, Phat, Dhat, dhat, vP, vD, vd)
	candidates = numpy.vstack((Dhat, Phat / x, dhat / y))
	assert numpy.all(D >= candidates.min(axis = 0) - 1e-9)
	assert numpy.all(D <= candidates.max(axis = 0) + 1e-9)


def test_averatD_reduces_to_Dhat_for_zero_ratios():
	Phat, Dhat, dhat, vP, vD, vd = random_inputs(seed = 1)
	D = averatD(0., 0., Phat, Dhat, dhat, vP, vD, vd)
	assert numpy.allclose(D, Dhat)


def test_averatD_returns_nan_for_zero_variances():
	Phat, Dhat, dhat, vP, vD, vd = random_inputs(n = 5, seed = 2)
	zeros = numpy.zeros(5)
	with numpy.errstate(invalid = 'ignore', divide = 'ignore'):
		D = averatD(0.1, 0.05, Phat, Dhat, dhat, zeros, zeros, zeros)
	assert numpy.all(numpy.isnan(D))


def test_averatD_matches_its_definition_for_one_sweep():
	D = averatD(0.5, 0.25, numpy.array([50.]), numpy.array([110.]), numpy.array([24.]),
		numpy.array([2.]), numpy.array([4.]), numpy.array([1.]))
	num = 24 * 4 * 2 * 0.25 + 50 * 4 * 1 * 0.5 + 110 * 2 * 1
	den = 4 * 2 * 0.25**2 + 4 * 1 * 0.5**2 + 2 * 1
	assert D[0] == pytest.approx(num / den)


def test_SSaverat_is_half_the_sum_of_squared_residuals():
	Phat, Dhat, dhat, vP, vD, vd = random_inputs(seed = 3)
	r = averat_residuals(0.1, 0.05, Phat, Dhat, dhat, vP, vD, vd)
	assert r.size == 3 * Phat.size
	assert SSaverat(0.1, 0.05, Phat, Dhat, dhat, vP, vD, vd) == pytest.approx(numpy.sum(r**2) / 2)


def test_SSaverat_vanishes_on_noiseless_data():
	D = numpy.linspace(1000., 800., 20)
	v = numpy.ones(20)
	assert SSaverat(0.3, 0.07, 0.3 * D, D, 0.07 * D, v, v, v) == pytest.approx(0., abs = 1e-18)
	assert SSaverat(0.31, 0.07, 0.3 * D, D, 0.07 * D, v, v, v) > 0
