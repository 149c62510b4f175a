import numpy
import pytest

from averat import var_timeseries, estimate_covariance, InputShapeError


def test_global_variance_is_half_the_mean_squared_successive_difference():
	v = var_timeseries([10, 11, 9, 10, 10])
	assert v.shape == (5,)
	assert numpy.allclose(v, (1 + 4 + 1 + 0) / 4 / 2)


def test_global_variance_ignores_a_linear_trend():
	rng = numpy.random.default_rng(0)
	noise = rng.normal(0, 2., 5000)
	trend = numpy.linspace(1000., 500., 5000)
	v = var_timeseries(trend + noise)
	assert v[0] == pytest.approx(4., rel = 0.1)


def test_windowed_variance_follows_changing_noise():
	rng = numpy.random.default_rng(1)
	y = numpy.hstack((rng.normal(100, 1., 200), rng.normal(100, 5., 200)))
	v = var_timeseries(y, window = 21)
	assert v.shape == y.shape
	assert numpy.median(v[:180]) < 3.
	assert numpy.median(v[220:]) > 10.


def test_windowed_variance_with_full_window_equals_global_variance():
	y = numpy.array([3., 5., 4., 8., 6., 7.])
	assert numpy.allclose(var_timeseries(y, window = 6), var_timeseries(y))


@pytest.mark.parametrize('series, window', [([1.], None), ([], None), ([1., 2., 3.], 4), ([1., 2., 3.], 1)])
def test_short_series_are_rejected(series, window):
	with pytest.raises(InputShapeError) as excinfo:
		var_timeseries(series, window = window)
	assert excinfo.value.stage == 'variance'


def test_constant_series_has_zero_variance():
	assert numpy.all(var_timeseries(numpy.full(10, 7.)) == 0)


def test_estimate_covariance_matches_numpy():
	rng = numpy.random.default_rng(2)
	X = rng.normal(size = (50, 3))
	assert numpy.allclose(estimate_covariance(X), numpy.cov(X.T))


def test_robust_covariance_resists_outliers():
	rng = numpy.random.default_rng(3)
	X = rng.normal(size = (200, 3))
	X[:5] += 100.
	classical = estimate_covariance(X)
	robust = estimate_covariance(X, robust = True)
	assert robust[0, 0] < 2.
	assert classical[0, 0] > 10.
