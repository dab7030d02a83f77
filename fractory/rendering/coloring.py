"""
Colour mapping for fractal rendering.

Escape-time fractals produce a normalized value in [0, 1] which is turned
into an 8-bit RGB triple by one of the colour maps below. Newton basins
are coloured directly from a fixed palette.
"""

import math
from typing import Callable, Dict, Tuple

from ..core.fractal_types import ColourMapKind

RGB = Tuple[int, int, int]

# Basin colours for the roots 1, -1/2 + i*sqrt(3)/2 and -1/2 - i*sqrt(3)/2
BASIN_COLOURS: Tuple[RGB, RGB, RGB] = (
    (173, 133, 186),
    (116, 161, 142),
    (114, 76, 52),
)

NON_CONVERGED_COLOUR: RGB = (10, 10, 15)

# Gaussian centres for the red, green and blue channels of TRCM
TRCM_CENTRES = (0.75, 0.5, 0.2)
TRCM_VARIANCE = 0.0625


def _to_channel(intensity: float) -> int:
    """Truncate a 0-255 intensity to an 8-bit channel."""
    return min(255, max(0, int(intensity)))


def _gaussian(value: float, centre: float) -> float:
    return math.exp(-0.5 * (value - centre) ** 2 / TRCM_VARIANCE)


def trcm(value: float) -> RGB:
    """Tom's rainbow colour map: one Gaussian bump per channel."""
    return tuple(_to_channel(255.0 * _gaussian(value, centre)) for centre in TRCM_CENTRES)


def grayscale(value: float) -> RGB:
    """Flat grey whose brightness grows linearly with the value."""
    v = _to_channel(math.floor(255.0 * value))
    return (v, v, v)


_COLOUR_MAPS: Dict[ColourMapKind, Callable[[float], RGB]] = {
    ColourMapKind.TRCM: trcm,
    ColourMapKind.GRAYSCALE: grayscale,
}


def colour_map(kind: ColourMapKind, value: float) -> RGB:
    """
    Map a normalized value to an RGB triple.

    Args:
        kind: Which colour map to apply
        value: Normalized value, must lie in [0, 1]

    Returns:
        RGB triple with channels in [0, 255]

    Raises:
        ValueError: if the value is outside [0, 1] or NaN. Callers are
            expected to normalize upstream, so this is never clamped.
    """
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Colour map value must be between 0 and 1, got {value}")
    try:
        mapper = _COLOUR_MAPS[kind]
    except KeyError:
        raise ValueError(f"Unknown colour map: {kind!r}") from None
    return mapper(value)


def list_colour_maps():
    """Get the names of the available colour maps."""
    return [kind.value for kind in ColourMapKind]
