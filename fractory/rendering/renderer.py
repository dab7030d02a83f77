"""
Pixel sweep that turns a fractal specification into an RGB image grid.
"""

import logging
import time
from typing import Tuple, Union

import numpy as np

from ..core.fractal_types import BurningShipParameters, FractalSpec, MandelbrotParameters
from ..core.math_functions import (
    ComplexPlane,
    Viewport,
    escape_iterations_grid,
    escape_palette,
    evaluate,
)

logger = logging.getLogger(__name__)

Bounds = Union[Viewport, Tuple[float, float, float, float]]


def as_viewport(region: Bounds) -> Viewport:
    """Accept either a Viewport or an ``(xmin, xmax, ymin, ymax)`` tuple."""
    if isinstance(region, Viewport):
        return region
    return Viewport.from_tuple(region)


def render_rows(plane: ComplexPlane, spec: FractalSpec, row_start: int, row_end: int) -> np.ndarray:
    """
    Evaluate rows ``row_start`` (inclusive) to ``row_end`` (exclusive).

    Escape-time fractals are iterated over the whole band at once; Newton
    basins are evaluated point by point. Both produce exactly the colours
    :func:`evaluate` gives for each pixel.

    Returns:
        uint8 array of shape (row_end - row_start, width, 3)
    """
    if isinstance(spec, (MandelbrotParameters, BurningShipParameters)):
        c = plane.create_complex_array(row_start, row_end)
        burning = isinstance(spec, BurningShipParameters)
        iterations = escape_iterations_grid(c, spec.max_iterations, spec.escape_threshold, burning)
        return escape_palette(spec)[iterations]

    band = np.zeros((row_end - row_start, plane.width, 3), dtype=np.uint8)
    for py in range(row_start, row_end):
        row = band[py - row_start]
        for px, point in plane.row_coordinates(py):
            row[px] = evaluate(spec, point)
    return band


def render(region: Bounds, resolution: Tuple[int, int], spec: FractalSpec) -> np.ndarray:
    """
    Render a fractal over a plane region.

    Args:
        region: Plane region as a Viewport or (xmin, xmax, ymin, ymax)
        resolution: Image size as (width, height)
        spec: Fractal variant and parameters

    Returns:
        uint8 array of shape (height, width, 3); ``grid[py, px]`` is the
        colour of pixel (px, py)
    """
    width, height = resolution
    plane = ComplexPlane(as_viewport(region), width, height)

    start_time = time.time()
    logger.info(f"Rendering {type(spec).__name__} at {width}x{height} over {plane.viewport.as_tuple()}")

    grid = render_rows(plane, spec, 0, height)

    logger.info(f"Render complete: {time.time() - start_time:.2f}s")
    return grid
