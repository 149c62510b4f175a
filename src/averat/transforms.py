"""
Method-specific post-processing of the fitted ratios

A transform maps the base estimate (x, sx, y, sy, rho) of a method to
additional columns of the output table. Transforms are looked up by
method name, so that new decay systems only need to be registered.
"""

import numpy

from .settings import getPDd
from .errors import ConfigurationError, NumericalError


TRANSFORMS = {}


def register_transform(method, transform):
	TRANSFORMS[method] = transform
	return transform

def get_transform(method):
	return TRANSFORMS.get(method)


class ReciprocalTransform:
	"""
	Convert x = P/D and y = d/D into P/d and D/d.

	D/d = 1/y and P/d = x * D/d, with their standard errors:
		s[D/d] = sy * (D/d)**2
		s[P/d] = P/d * ((sx/x)**2 + (s[D/d]/(D/d))**2 + 2 * rho * (sx/x) * (s[D/d]/(D/d)))**.5
	"""

	def __init__(self, P, D, d):
		self.P = P
		self.D = D
		self.d = d

	def __repr__(self):
		return f"ReciprocalTransform('{self.P}', '{self.D}', '{self.d}')"

	@property
	def labels(self):
		return f'{self.P}/{self.d}', f'{self.D}/{self.d}'

	@property
	def columns(self):
		Pd, Dd = self.labels
		return [Pd, f's[{Pd}]', Dd, f's[{Dd}]']

	def check(self, method, methods = None):
		"""
		Make sure that `method` measures the isotopes this transform expects
		"""
		PDd = getPDd(method, methods)
		if PDd != (self.P, self.D, self.d):
			raise ConfigurationError(
				f"Columns {self.columns} cannot be computed for method '{method}' "
				f"with isotopes {PDd}; expected {(self.P, self.D, self.d)}."
			)

	def __call__(self, x, sx, y, sy, rho):
		x, sx, y, sy, rho = numpy.array([x, sx, y, sy, rho], dtype = float)
		with numpy.errstate(divide = 'ignore', invalid = 'ignore'):
			Dd = 1 / y
			s_Dd = sy * Dd**2
			Pd = x * Dd
			s_Pd = Pd * numpy.sqrt(
				(sx / x)**2 + (s_Dd / Dd)**2 + 2 * rho * (sx / x) * (s_Dd / Dd)
			)
		out = tuple(float(v) for v in (Pd, s_Pd, Dd, s_Dd))
		if not numpy.all(numpy.isfinite(out)):
			raise NumericalError(
				f'Non-finite {self.columns} computed from x = {x}, y = {y}.',
				stage = 'reparameterization',
			)
		return out


register_transform('Rb-Sr', ReciprocalTransform('Rb87', 'Sr87', 'Sr86'))
