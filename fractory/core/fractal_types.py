"""
Fractal type definitions and parameter management.

Each fractal family is a small frozen parameter record. Together they form
the closed set of variants accepted by the evaluator, which dispatches on
the record type rather than on behaviour carried by the record itself.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, Tuple, Union
import logging

logger = logging.getLogger(__name__)


class ColourMapKind(Enum):
    """Available value-to-colour mappings for escape-time fractals."""

    # Tom's rainbow colour map: three Gaussian bumps, one per channel
    TRCM = "trcm"
    GRAYSCALE = "grayscale"

    @classmethod
    def from_name(cls, name: Union[str, "ColourMapKind"]) -> "ColourMapKind":
        """Look up a colour map by its name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            available = ', '.join(kind.value for kind in cls)
            raise ValueError(f"Unknown colour map '{name}'. Available: {available}") from None


def _validate_iterations(max_iterations: int) -> None:
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int):
        raise ValueError(f"max_iterations must be an integer, got {max_iterations!r}")
    if max_iterations <= 0:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")


def _validate_threshold(escape_threshold: float) -> None:
    if not isinstance(escape_threshold, (int, float)) or isinstance(escape_threshold, bool):
        raise ValueError(f"escape_threshold must be numeric, got {escape_threshold!r}")
    if not escape_threshold > 0:
        raise ValueError(f"escape_threshold must be positive, got {escape_threshold}")


@dataclass(frozen=True)
class EscapeTimeParameters:
    """Shared parameters of the escape-time families."""

    max_iterations: int = 100
    escape_threshold: float = 4.0
    colour_map: ColourMapKind = ColourMapKind.TRCM

    def __post_init__(self):
        _validate_iterations(self.max_iterations)
        _validate_threshold(self.escape_threshold)
        # Accept names so that configuration files can say "grayscale"
        object.__setattr__(self, 'colour_map', ColourMapKind.from_name(self.colour_map))

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a JSON-friendly dictionary."""
        data = asdict(self)
        data['colour_map'] = self.colour_map.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EscapeTimeParameters':
        """Create parameters from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class MandelbrotParameters(EscapeTimeParameters):
    """Mandelbrot set: z <- z^2 + c from z = 0."""

    name = "mandelbrot"


@dataclass(frozen=True)
class BurningShipParameters(EscapeTimeParameters):
    """Burning Ship: z <- (|Re z| + i|Im z|)^2 + c from z = 0."""

    name = "burning_ship"


@dataclass(frozen=True)
class NewtonParameters:
    """Newton basins of z^3 - 1 = 0, coloured by the root reached."""

    max_iterations: int = 15

    name = "newton"

    def __post_init__(self):
        _validate_iterations(self.max_iterations)

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a JSON-friendly dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NewtonParameters':
        """Create parameters from dictionary."""
        return cls(**data)


FractalSpec = Union[MandelbrotParameters, BurningShipParameters, NewtonParameters]


class FractalRegistry:
    """Registry mapping fractal names to their parameter records."""

    _fractals: Dict[str, type] = {
        'mandelbrot': MandelbrotParameters,
        'burning_ship': BurningShipParameters,
        'newton': NewtonParameters,
    }

    _descriptions: Dict[str, str] = {
        'mandelbrot': "Mandelbrot: z_{n+1} = z_n^2 + c, z_0 = 0",
        'burning_ship': "Burning Ship: z_{n+1} = (|Re(z_n)| + i|Im(z_n)|)^2 + c",
        'newton': "Newton basins of z^3 - 1 = 0",
    }

    @classmethod
    def get(cls, name: str) -> type:
        """
        Get a parameter class by name.

        Args:
            name: Fractal identifier

        Returns:
            Parameter dataclass for the fractal
        """
        fractal_class = cls._fractals.get(name.lower())
        if fractal_class is None:
            available = ', '.join(cls._fractals.keys())
            raise ValueError(f"Unknown fractal type '{name}'. Available: {available}")
        return fractal_class

    @classmethod
    def list_fractals(cls) -> Dict[str, str]:
        """Get a dictionary of available fractals and their descriptions."""
        return dict(cls._descriptions)

    @classmethod
    def create_fractal(cls, name: str, **kwargs) -> FractalSpec:
        """
        Create a fractal specification with the given parameters.

        Unknown keyword arguments are rejected so that typos in configuration
        files do not silently fall back to defaults.
        """
        fractal_class = cls.get(name)
        try:
            spec = fractal_class.from_dict(kwargs)
        except TypeError as e:
            raise ValueError(f"Invalid parameters for '{name}': {e}") from e
        logger.debug(f"Created fractal spec: {spec}")
        return spec

    @classmethod
    def name_of(cls, spec: FractalSpec) -> str:
        """Get the registry name of a fractal specification."""
        for name, fractal_class in cls._fractals.items():
            if type(spec) is fractal_class:
                return name
        raise TypeError(f"Not a fractal specification: {spec!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FractalSpec:
        """Rebuild a specification from ``{'type': name, **parameters}``."""
        data = dict(data)
        try:
            name = data.pop('type')
        except KeyError:
            raise ValueError("Fractal description is missing its 'type'") from None
        return cls.create_fractal(name, **data)

    @classmethod
    def to_dict(cls, spec: FractalSpec) -> Dict[str, Any]:
        """Serialize a specification together with its type name."""
        data = {'type': cls.name_of(spec)}
        data.update(spec.to_dict())
        return data


@dataclass(frozen=True)
class ScenePreset:
    """A ready-made render: region, fractal and resolution."""

    bounds: Tuple[float, float, float, float]
    fractal: FractalSpec
    resolution: Tuple[int, int] = (2048, 2048)


# A Misiurewicz point, used as the default zoom target
MISIUREWICZ_POINT = (-0.77568377, 0.13646737)

# Overview of the Mandelbrot set; zoom viewports are kept inside it
MANDELBROT_BOUNDS = (-2.0, 0.47, -1.12, 1.12)

EXAMPLE_PRESETS: Dict[str, ScenePreset] = {
    'mandelbrot': ScenePreset(
        bounds=MANDELBROT_BOUNDS,
        fractal=MandelbrotParameters(200, 4.0, ColourMapKind.GRAYSCALE),
    ),
    'burning_ship': ScenePreset(
        bounds=(-1.8, -1.7, -0.09, 0.01),
        fractal=BurningShipParameters(200, 4.0, ColourMapKind.TRCM),
    ),
    'newton': ScenePreset(
        bounds=(-2.0, 2.0, -2.0, 2.0),
        fractal=NewtonParameters(15),
    ),
}
