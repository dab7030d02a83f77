"""
Escape-time and Newton fractal rendering.

This library evaluates Mandelbrot, Burning Ship and Newton basin fractals
over a region of the plane and renders the result as an RGB grid, with
helpers for planning and writing Mandelbrot zoom animations.

Example usage:
    >>> from fractory import render, MandelbrotParameters, ColourMapKind
    >>> spec = MandelbrotParameters(200, 4.0, ColourMapKind.GRAYSCALE)
    >>> grid = render((-2.0, 0.47, -1.12, 1.12), (512, 512), spec)
"""

__version__ = "1.0.0"
__author__ = "fractory developers"

from fractory.core.fractal_types import (
    BurningShipParameters,
    ColourMapKind,
    FractalRegistry,
    MandelbrotParameters,
    NewtonParameters,
)
from fractory.core.math_functions import Viewport, evaluate
from fractory.rendering.coloring import colour_map
from fractory.rendering.renderer import render
from fractory.rendering.image_output import ImageExporter, ImageExportError, RenderMetadata
from fractory.tools.zoom import ZoomFrame, compute_viewport, plan_zoom_frames, zoom_schedule

# Main API classes
from fractory.api import FractalRenderer, RenderConfig, write_zoom_frames

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "MandelbrotParameters",
    "BurningShipParameters",
    "NewtonParameters",
    "ColourMapKind",
    "FractalRegistry",
    "Viewport",
    "evaluate",
    "colour_map",
    "render",
    "ImageExporter",
    "ImageExportError",
    "RenderMetadata",
    "ZoomFrame",
    "compute_viewport",
    "plan_zoom_frames",
    "zoom_schedule",
    "write_zoom_frames",
]
