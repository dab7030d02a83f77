"""Viewport geometry and frame planning for Mandelbrot zoom animations."""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple, Union

from ..core.fractal_types import (
    ColourMapKind,
    MANDELBROT_BOUNDS,
    MandelbrotParameters,
)
from ..core.math_functions import PlanePoint, Viewport

logger = logging.getLogger(__name__)

# Half-width of the viewport at zoom 1, matching the overview bounds
BASE_RADIUS = 1.235

DEFAULT_THRESHOLD = 4.0


@dataclass(frozen=True)
class ZoomFrame:
    """One planned frame of a zoom animation."""

    index: int
    zoom: float
    viewport: Viewport
    spec: MandelbrotParameters

    @property
    def filename(self) -> str:
        return f"frame_{self.index}.png"


def _shift_into(low: float, high: float, bound_low: float, bound_high: float) -> Tuple[float, float]:
    # One-sided: a window wider than the bound is only pushed off the low edge
    if low < bound_low:
        dist = bound_low - low
        return low + dist, high + dist
    if high > bound_high:
        dist = bound_high - high
        return low + dist, high + dist
    return low, high


def compute_viewport(centre: PlanePoint, zoom: float,
                     outer_bound: Union[Viewport, Tuple[float, float, float, float]] = MANDELBROT_BOUNDS) -> Viewport:
    """
    Compute the square viewport for a zoom level around a centre point.

    The window has half-width ``1.235 / zoom``. When it crosses the outer
    bound it is translated back inside, never rescaled, and each axis is
    corrected on one side only.

    Raises:
        ValueError: if ``zoom < 1`` or the centre lies outside the bound.
    """
    if not isinstance(outer_bound, Viewport):
        outer_bound = Viewport.from_tuple(outer_bound)
    if not zoom >= 1.0:
        raise ValueError(f"zoom must be >= 1.0, got {zoom}")
    if not outer_bound.contains(centre):
        raise ValueError(f"Centre {centre} lies outside bounds {outer_bound.as_tuple()}")

    radius = BASE_RADIUS * (1.0 / zoom)
    x, y = centre
    x_min, x_max = _shift_into(x - radius, x + radius, outer_bound.x_min, outer_bound.x_max)
    y_min, y_max = _shift_into(y - radius, y + radius, outer_bound.y_min, outer_bound.y_max)
    return Viewport(x_min, x_max, y_min, y_max)


def zoom_schedule(max_zoom: float, max_frames: int) -> List[float]:
    """
    Geometric zoom progression: ``exp(frame / max_frames * ln(max_zoom))``.

    The first entry is always 1.0 and the last falls one step short of
    ``max_zoom``.
    """
    if max_frames < 0:
        raise ValueError(f"max_frames must be non-negative, got {max_frames}")
    if not max_zoom >= 1.0:
        raise ValueError(f"max_zoom must be >= 1.0, got {max_zoom}")
    log_zoom = math.log(max_zoom)
    return [math.exp(frame / max_frames * log_zoom) for frame in range(max_frames)]


def frame_iterations(max_iterations: int, zoom: float) -> int:
    """Iteration budget of a zoom-phase frame: grows with the zoom level."""
    return max_iterations + int(math.floor(zoom))


def plan_zoom_frames(centre: PlanePoint, max_iterations: int, max_zoom: float, max_frames: int,
                     outer_bound=MANDELBROT_BOUNDS, threshold: float = DEFAULT_THRESHOLD,
                     colour_map: ColourMapKind = ColourMapKind.TRCM) -> List[ZoomFrame]:
    """
    Plan every frame of a zoom animation without rendering anything.

    Frames ``1 .. max_iterations - 1`` reveal the set at zoom 1 with an
    iteration count equal to the frame index. Frames ``max_iterations``
    onwards zoom in geometrically towards ``max_zoom`` while the iteration
    count grows with the zoom.

    Args:
        centre: Point to zoom into; must lie inside ``outer_bound``
        max_iterations: Iteration count at the end of the reveal phase
        max_zoom: Zoom factor approached by the last frame
        max_frames: Number of frames in the zoom phase
        outer_bound: Region the viewport must stay inside
        threshold: Squared escape radius for every frame
        colour_map: Colour map for every frame

    Returns:
        List of ZoomFrame in index order
    """
    if max_iterations <= 0:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")

    frames = []
    overview = compute_viewport(centre, 1.0, outer_bound)
    for iteration in range(1, max_iterations):
        spec = MandelbrotParameters(iteration, threshold, colour_map)
        frames.append(ZoomFrame(iteration, 1.0, overview, spec))

    for frame, zoom in enumerate(zoom_schedule(max_zoom, max_frames)):
        spec = MandelbrotParameters(frame_iterations(max_iterations, zoom), threshold, colour_map)
        viewport = compute_viewport(centre, zoom, outer_bound)
        frames.append(ZoomFrame(frame + max_iterations, zoom, viewport, spec))

    logger.info(f"Planned {len(frames)} frames around {centre} up to zoom {max_zoom}")
    return frames
