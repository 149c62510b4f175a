import pytest

from averat import Config, config, load_methods, getPDd, get_channel, ConfigurationError


def test_default_method_table():
	methods = load_methods()
	assert {'Lu-Hf', 'Rb-Sr', 'K-Ca', 'Re-Os', 'U-Pb'} <= set(methods)
	assert getPDd('Rb-Sr') == ('Rb87', 'Sr87', 'Sr86')
	assert getPDd('Lu-Hf') == ('Lu176', 'Hf176', 'Hf177')


def test_unknown_method():
	with pytest.raises(ConfigurationError) as excinfo:
		getPDd('Sm-Nd')
	assert 'Sm-Nd' in str(excinfo.value)


def test_incomplete_method():
	with pytest.raises(ConfigurationError):
		getPDd('Sm-Nd', {'Sm-Nd': {'P': 'Sm147', 'D': 'Nd143'}})


def test_custom_method_file(tmp_path):
	path = tmp_path / 'methods.yaml'
	path.write_text('Sm-Nd:\n  P: Sm147\n  D: Nd143\n  d: Nd144\n', encoding = 'utf-8')
	assert getPDd('Sm-Nd', load_methods(path)) == ('Sm147', 'Nd143', 'Nd144')
	cfg = Config(methods_file = str(path))
	assert cfg.methods_path == path


def test_missing_method_file(tmp_path):
	with pytest.raises(FileNotFoundError):
		load_methods(tmp_path / 'nope.yaml')


def test_get_channel():
	channels = {'P': 'Lu175', 'D': 'Hf176', 'd': None}
	assert get_channel(channels, 'P') == 'Lu175'
	with pytest.raises(ConfigurationError):
		get_channel(channels, 'd')
	with pytest.raises(ConfigurationError):
		get_channel({'P': 'Lu175'}, 'D')


def test_config_defaults():
	assert config.variance_window is None
	assert config.fit_method == 'least_squares'
	assert config.methods_path.name == 'methods.yaml'
