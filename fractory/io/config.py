"""
Configuration loading for renders and zoom animations.

Configuration files are JSON documents with a ``render`` section (image
size, bounds, fractal parameters, performance options) and an optional
``zoom`` section. Values from the environment override the file.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..api import RenderConfig
from ..core.fractal_types import FractalSpec

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'render': {
        'width': 1024,
        'height': 1024,
        'bounds': [-2.0, 0.47, -1.12, 1.12],
        'fractal': 'mandelbrot',
        'max_iterations': 200,
        'escape_threshold': 4.0,
        'colour_map': 'trcm',
        'parallel': False,
        'num_processes': None,
        'band_height': 32,
        'save_metadata': True,
    },
    'zoom': {
        'centre': [-0.77568377, 0.13646737],
        'max_iterations': 100,
        'max_zoom': 1200.0,
        'frames': 200,
    },
}


class EnvironmentConfig:
    """Overrides read from ``FRACTORY_*`` environment variables."""

    PREFIX = "FRACTORY_"

    _variables = {
        'WIDTH': ('width', int),
        'HEIGHT': ('height', int),
        'PROCESSES': ('num_processes', int),
    }

    @classmethod
    def render_overrides(cls, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Collect render overrides present in the environment."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for suffix, (key, convert) in cls._variables.items():
            raw = environ.get(cls.PREFIX + suffix)
            if raw is None:
                continue
            try:
                overrides[key] = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {cls.PREFIX + suffix}: {raw!r}") from None
        if overrides:
            logger.debug(f"Environment overrides: {overrides}")
        return overrides


def _merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Load configuration files and merge them over the defaults."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self.environ = environ

    def load_config(self, filepath: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load a configuration file merged over the defaults.

        Args:
            filepath: JSON configuration file, or None for defaults only

        Returns:
            Complete configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        if filepath is not None:
            filepath = Path(filepath)
            try:
                with open(filepath, 'r') as f:
                    loaded = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid configuration file {filepath}: {e}") from e
            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration file {filepath} must contain a JSON object")
            config = _merge(config, loaded)
            logger.info(f"Loaded configuration: {filepath}")

        config['render'] = _merge(config['render'], EnvironmentConfig.render_overrides(self.environ))
        return config

    def save_config(self, config: Dict[str, Any], filepath: Union[str, Path]) -> None:
        """Write a configuration dictionary as JSON."""
        with open(filepath, 'w') as f:
            json.dump(config, f, indent=2)
        logger.info(f"Saved configuration: {filepath}")

    def create_render_config(self, config: Dict[str, Any], **overrides) -> RenderConfig:
        """
        Build a validated RenderConfig from a loaded configuration.

        Args:
            config: Dictionary returned by :meth:`load_config`
            **overrides: Render options that replace the file's values;
                ``None`` values are ignored

        Returns:
            RenderConfig for the ``render`` section
        """
        settings = dict(config.get('render', {}))
        settings.update({k: v for k, v in overrides.items() if v is not None})
        render_config = RenderConfig.from_dict(settings)
        render_config.validate()
        return render_config

    def create_fractal(self, config: Dict[str, Any], **overrides) -> Tuple[RenderConfig, FractalSpec]:
        """Build the RenderConfig and the fractal specification it describes."""
        render_config = self.create_render_config(config, **overrides)
        return render_config, render_config.build_fractal()
