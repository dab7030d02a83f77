import json

import pytest

from fractory.api import RenderConfig
from fractory.core.fractal_types import BurningShipParameters, ColourMapKind
from fractory.io.config import DEFAULT_CONFIG, ConfigManager, EnvironmentConfig


def test_defaults_without_file():
    config = ConfigManager(environ={}).load_config()
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_file_merges_over_defaults(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'render': {'width': 64, 'fractal': 'newton'}, 'zoom': {'frames': 3}}))

    config = ConfigManager(environ={}).load_config(path)
    assert config['render']['width'] == 64
    assert config['render']['height'] == DEFAULT_CONFIG['render']['height']
    assert config['render']['fractal'] == 'newton'
    assert config['zoom']['frames'] == 3
    assert config['zoom']['max_zoom'] == DEFAULT_CONFIG['zoom']['max_zoom']


def test_defaults_not_mutated(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'render': {'width': 7}}))
    ConfigManager(environ={}).load_config(path)
    assert DEFAULT_CONFIG['render']['width'] == 1024


def test_invalid_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{"render": ')
    with pytest.raises(ValueError, match='Invalid configuration'):
        ConfigManager(environ={}).load_config(path)


def test_non_object_json(tmp_path):
    path = tmp_path / 'list.json'
    path.write_text('[1, 2]')
    with pytest.raises(ValueError):
        ConfigManager(environ={}).load_config(path)


def test_environment_overrides(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'render': {'width': 64}}))
    environ = {'FRACTORY_WIDTH': '32', 'FRACTORY_PROCESSES': '3'}

    config = ConfigManager(environ=environ).load_config(path)
    assert config['render']['width'] == 32
    assert config['render']['num_processes'] == 3


def test_invalid_environment_value():
    with pytest.raises(ValueError, match='FRACTORY_HEIGHT'):
        EnvironmentConfig.render_overrides({'FRACTORY_HEIGHT': 'tall'})


def test_save_and_reload(tmp_path):
    manager = ConfigManager(environ={})
    path = tmp_path / 'saved.json'
    manager.save_config({'render': {'max_iterations': 42}}, path)
    assert manager.load_config(path)['render']['max_iterations'] == 42


def test_render_config_from_loaded_file(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'render': {'width': 16, 'height': 8, 'colour_map': 'grayscale'}}))
    config = RenderConfig.from_dict(ConfigManager(environ={}).load_config(path)['render'])
    config.validate()
    assert config.resolution == (16, 8)
    assert config.build_fractal().colour_map.value == 'grayscale'


def test_create_render_config_applies_overrides(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'render': {'width': 16, 'height': 8}}))
    manager = ConfigManager(environ={})
    config = manager.create_render_config(manager.load_config(path), height=12, max_iterations=None)
    assert isinstance(config, RenderConfig)
    assert config.resolution == (16, 12)
    assert config.max_iterations == DEFAULT_CONFIG['render']['max_iterations']


def test_create_render_config_validates():
    manager = ConfigManager(environ={})
    with pytest.raises(ValueError):
        manager.create_render_config(manager.load_config(), bounds=(1.0, -1.0, 0.0, 1.0))


def test_create_fractal():
    manager = ConfigManager(environ={})
    config, fractal = manager.create_fractal(manager.load_config(), fractal='burning_ship', max_iterations=30)
    assert config.fractal == 'burning_ship'
    assert fractal == BurningShipParameters(30, 4.0, ColourMapKind.TRCM)
