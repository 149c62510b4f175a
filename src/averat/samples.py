"""
Samples, drift parameters and blank-corrected 'atomic' signals
"""

import numpy
import pandas
from collections import namedtuple

from .settings import get_channel
from .errors import ConfigurationError


Pars = namedtuple('Pars', ['drift', 'down', 'mfrac'], defaults = [(0.,), (0.,), 0.])
Pars.__doc__ = """
Method parameters: log-polynomial drift coefficients in t, log-polynomial
down-hole fractionation coefficients in t - t0, and log mass fractionation.
"""


class Sample:

	def __init__(self, name, data, t0 = None, window = None, group = None):
		"""
		Hold the baseline-corrected time series of one ablation spot.

		`data` must have a time column 't' (in seconds) and one column per
		channel; `window` is an optional list of (start, stop) intervals
		selecting the signal sweeps.
		"""
		if not isinstance(data, pandas.DataFrame):
			data = pandas.DataFrame(data)
		if 't' not in data:
			raise ConfigurationError(f"Sample '{name}' has no time column 't'.")
		self.name = name
		self.data = data
		self.window = window
		self.group = group
		if t0 is None:
			sig = self.signal()
			t0 = float(sig['t'].iloc[0]) if len(sig) else 0.
		self.t0 = t0

	def __repr__(self):
		return f"Sample('{self.name}', {len(self.data)} sweeps)"

	def signal(self):
		"""
		Return the rows that fall within the signal window(s)
		"""
		if self.window is None:
			return self.data
		t = self.data['t']
		selected = numpy.zeros(len(t), dtype = bool)
		for start, stop in self.window:
			selected |= ((t >= start) & (t <= stop)).to_numpy()
		return self.data[selected]


def polyval(coefficients, t):
	return numpy.polynomial.polynomial.polyval(
		numpy.asarray(t, dtype = float),
		numpy.asarray(coefficients, dtype = float),
	)

def polyfac(coefficients, t):
	return numpy.exp(polyval(coefficients, t))


def atomic(samp, channels, blank, pars):
	"""
	Blank- and drift-corrected P, D and d signals of `samp`.

	Parameters
	----------
	samp : Sample
	channels : dict
		Maps the roles 'P', 'D' and 'd' to columns of `samp.data`.
	blank : pandas.DataFrame
		One column per channel holding polynomial coefficients in t,
		constant term first.
	pars : Pars

	Returns
	-------
	Phat, Dhat, dhat : arrays of equal length
	"""
	dat = samp.signal()
	names = []
	for role in ('P', 'D', 'd'):
		try:
			ch = get_channel(channels, role)
		except ConfigurationError as e:
			e.stage = 'atomic'
			raise
		if ch not in dat:
			raise ConfigurationError(f"Channel '{ch}' is missing from the data.", stage = 'atomic')
		if ch not in blank:
			raise ConfigurationError(f"Channel '{ch}' is missing from the blank table.", stage = 'atomic')
		names.append(ch)
	P, D, d = names

	try:
		t = dat['t'].to_numpy(dtype = float)
		ft = polyfac(pars.drift, t)
		FT = polyfac(pars.down, t - samp.t0)
		mf = numpy.exp(pars.mfrac)

		Phat = (dat[P].to_numpy(dtype = float) - polyval(blank[P].dropna(), t)) / (ft * FT)
		Dhat = dat[D].to_numpy(dtype = float) - polyval(blank[D].dropna(), t)
		dhat = (dat[d].to_numpy(dtype = float) - polyval(blank[d].dropna(), t)) * mf
	except (ValueError, TypeError) as e:
		raise ConfigurationError(f'Non-numeric data, blank or parameters: {e}', stage = 'atomic') from e

	return Phat, Dhat, dhat
