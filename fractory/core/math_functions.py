"""
Core mathematical functions for fractal iteration.

This module provides the per-point iteration algorithms and the plane
geometry shared by the renderer and the zoom planner. Every kernel is a
pure function of its arguments and is bounded by ``max_iterations``, so
NaN or infinite coordinates terminate like any other point.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .fractal_types import (
    BurningShipParameters,
    EscapeTimeParameters,
    FractalSpec,
    MandelbrotParameters,
    NewtonParameters,
)
from ..rendering.coloring import (
    BASIN_COLOURS,
    NON_CONVERGED_COLOUR,
    RGB,
    colour_map,
)

PlanePoint = Tuple[float, float]

NEWTON_TOLERANCE = 0.25

NEWTON_ROOTS = (
    np.complex128(1.0 + 0.0j),
    np.complex128(complex(-0.5, 0.5 * math.sqrt(3.0))),
    np.complex128(complex(-0.5, -0.5 * math.sqrt(3.0))),
)


@dataclass(frozen=True)
class Viewport:
    """Rectangular region of the plane mapped onto an image."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def __post_init__(self):
        if not (self.x_min < self.x_max and self.y_min < self.y_max):
            raise ValueError(
                "Invalid bounds: min values must be less than max values, "
                f"got {self.as_tuple()}"
            )

    @classmethod
    def from_tuple(cls, bounds) -> 'Viewport':
        """Create a viewport from ``(x_min, x_max, y_min, y_max)``."""
        if len(bounds) != 4:
            raise ValueError("bounds must be (xmin, xmax, ymin, ymax)")
        return cls(*(float(b) for b in bounds))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x_min, self.x_max, self.y_min, self.y_max)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def centre(self) -> PlanePoint:
        return ((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    def contains(self, point: PlanePoint) -> bool:
        """Check whether a point lies inside the closed rectangle."""
        x, y = point
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


class ComplexPlane:
    """A viewport sampled at a pixel resolution."""

    def __init__(self, viewport: Viewport, width: int, height: int):
        """
        Initialize plane bounds and resolution.

        Args:
            viewport: Plane region covered by the image
            width, height: Image resolution in pixels
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Width and height must be positive, got {width}x{height}")
        self.viewport = viewport
        self.width = width
        self.height = height

    def pixel_to_plane(self, px: int, py: int) -> PlanePoint:
        """
        Convert pixel coordinates to a plane coordinate.

        Sampling is anchored at the top-left corner of each pixel, so pixel
        (0, 0) lands exactly on (x_min, y_min) and the far edge is never
        reached.
        """
        vp = self.viewport
        x = (px / self.width) * (vp.x_max - vp.x_min) + vp.x_min
        y = (py / self.height) * (vp.y_max - vp.y_min) + vp.y_min
        return x, y

    def row_coordinates(self, py: int):
        """Yield ``(px, point)`` for every pixel of row ``py``."""
        for px in range(self.width):
            yield px, self.pixel_to_plane(px, py)

    def create_coordinate_arrays(self, row_start: int = 0, row_end=None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create real and imaginary coordinate arrays for a band of rows.

        Each entry equals :meth:`pixel_to_plane` for the same pixel.

        Returns:
            Tuple of (real_coords, imag_coords) arrays of shape (rows, width)
        """
        row_end = self.height if row_end is None else row_end
        vp = self.viewport
        x = (np.arange(self.width, dtype=np.float64) / self.width) * (vp.x_max - vp.x_min) + vp.x_min
        y = (np.arange(row_start, row_end, dtype=np.float64) / self.height) * (vp.y_max - vp.y_min) + vp.y_min
        return np.meshgrid(x, y)

    def create_complex_array(self, row_start: int = 0, row_end=None) -> np.ndarray:
        """Complex128 coordinates of a band of rows, shape (rows, width)."""
        x, y = self.create_coordinate_arrays(row_start, row_end)
        c = np.empty(x.shape, dtype=np.complex128)
        c.real = x
        c.imag = y
        return c


def escape_iterations(c_real: float, c_imag: float, max_iterations: int,
                      escape_threshold: float, burning: bool = False) -> int:
    """
    Count iterations of z <- z^2 + c before |z|^2 reaches the threshold.

    With ``burning`` set, both components of z are folded to their absolute
    values before squaring (the Burning Ship map).
    """
    zr = 0.0
    zi = 0.0
    iteration = 0
    while iteration < max_iterations and zr * zr + zi * zi < escape_threshold:
        if burning:
            zr = abs(zr)
            zi = abs(zi)
        # z = z^2 + c
        zr, zi = zr * zr - zi * zi + c_real, 2.0 * zr * zi + c_imag
        iteration += 1
    return iteration


def escape_iterations_grid(c: np.ndarray, max_iterations: int, escape_threshold: float,
                           burning: bool = False) -> np.ndarray:
    """
    Array form of :func:`escape_iterations` over a grid of points.

    Args:
        c: Complex parameter array
        max_iterations: Iteration bound
        escape_threshold: Squared escape radius
        burning: Fold z to absolute components before squaring

    Returns:
        int32 array of iteration counts, same shape as ``c``
    """
    c = np.asarray(c, dtype=np.complex128)
    c_real = c.real
    c_imag = c.imag
    # Components are kept apart so each point sees the same float
    # operations as the scalar kernel
    zr = np.zeros(c.shape, dtype=np.float64)
    zi = np.zeros(c.shape, dtype=np.float64)
    iterations = np.zeros(c.shape, dtype=np.int32)
    active = np.ones(c.shape, dtype=bool)

    with np.errstate(over='ignore', invalid='ignore'):
        for _ in range(max_iterations):
            active &= zr * zr + zi * zi < escape_threshold
            if not np.any(active):
                break
            ar = zr[active]
            ai = zi[active]
            if burning:
                ar = np.abs(ar)
                ai = np.abs(ai)
            # z = z^2 + c
            zr[active] = ar * ar - ai * ai + c_real[active]
            zi[active] = 2.0 * ar * ai + c_imag[active]
            iterations[active] += 1
    return iterations


def normalized_escape(iterations: int, max_iterations: int) -> float:
    """
    Rescale an escape count to [0, 1].

    0.0 means the point never escaped; values near 1.0 escaped at once.
    """
    return (max_iterations - iterations) / max_iterations


def escape_palette(spec: EscapeTimeParameters) -> np.ndarray:
    """
    Colour of every possible escape count of an escape-time spec.

    Returns:
        uint8 array of shape (max_iterations + 1, 3); row ``n`` is the
        colour of a point that ran ``n`` iterations
    """
    return np.array([colour_map(spec.colour_map, normalized_escape(n, spec.max_iterations))
                     for n in range(spec.max_iterations + 1)], dtype=np.uint8)


def mandelbrot_escape(spec: MandelbrotParameters, point: PlanePoint) -> float:
    """Normalized escape value of a point under the Mandelbrot map."""
    x, y = point
    done = escape_iterations(x, y, spec.max_iterations, spec.escape_threshold)
    return normalized_escape(done, spec.max_iterations)


def burning_ship_escape(spec: BurningShipParameters, point: PlanePoint) -> float:
    """Normalized escape value of a point under the Burning Ship map."""
    x, y = point
    done = escape_iterations(x, y, spec.max_iterations, spec.escape_threshold, burning=True)
    return normalized_escape(done, spec.max_iterations)


def _matching_root(z: np.complex128) -> int:
    # Only the first two roots are tested; the third is the fallback basin
    for n in range(2):
        if abs(z - NEWTON_ROOTS[n]) < NEWTON_TOLERANCE:
            return n
    return -1


def newton_basin(spec: NewtonParameters, point: PlanePoint) -> RGB:
    """
    Colour a point by the root of z^3 - 1 its Newton orbit settles near.

    The orbit is tested before the first step and after every step. The
    step is ``z <- (z^3 - 1) / (3 z^2)``; a zero denominator produces NaN,
    which never matches a root and so reports the non-converged colour.

    The check before the first step means a seed already within tolerance
    of root 1 or 2 takes that root's colour even when its first step would
    leave the basin. The step-then-test ordering alone renders such seeds
    differently, e.g. (0.9, 0) there does not report root 1.
    """
    z = np.complex128(complex(point[0], point[1]))
    root = NEWTON_ROOTS[0]
    with np.errstate(all='ignore'):
        n = _matching_root(z)
        if n >= 0:
            return BASIN_COLOURS[n]
        for _ in range(spec.max_iterations):
            z = (z ** 3 - root) / (3.0 * z ** 2)
            n = _matching_root(z)
            if n >= 0:
                return BASIN_COLOURS[n]
    return NON_CONVERGED_COLOUR


def evaluate(spec: FractalSpec, point: PlanePoint) -> RGB:
    """
    Evaluate a fractal at a single plane point.

    Args:
        spec: Fractal variant and its parameters
        point: ``(re, im)`` coordinate

    Returns:
        RGB triple with channels in [0, 255]
    """
    if isinstance(spec, MandelbrotParameters):
        return colour_map(spec.colour_map, mandelbrot_escape(spec, point))
    if isinstance(spec, BurningShipParameters):
        return colour_map(spec.colour_map, burning_ship_escape(spec, point))
    if isinstance(spec, NewtonParameters):
        return newton_basin(spec, point)
    raise TypeError(f"Unsupported fractal specification: {spec!r}")
