"""
Main API classes for fractal generation.

This module ties the evaluator, the pixel sweep, the zoom planner and the
image sink together into a small set of easy-to-use entry points.
"""

import logging
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from .acceleration.multiprocessing import ParallelRenderer
from .core.fractal_types import (
    EXAMPLE_PRESETS,
    MISIUREWICZ_POINT,
    MANDELBROT_BOUNDS,
    FractalRegistry,
    FractalSpec,
    MandelbrotParameters,
    ColourMapKind,
    ScenePreset,
)
from .core.math_functions import Viewport
from .rendering.image_output import ImageExporter, RenderMetadata
from .rendering.renderer import render
from .tools.zoom import ZoomFrame, compute_viewport

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Image parameters
    width: int = 1024
    height: int = 1024
    bounds: Tuple[float, float, float, float] = MANDELBROT_BOUNDS  # xmin, xmax, ymin, ymax

    # Fractal parameters
    fractal: str = 'mandelbrot'
    max_iterations: int = 200
    escape_threshold: float = 4.0
    colour_map: str = 'trcm'

    # Performance
    parallel: bool = False
    num_processes: Optional[int] = None
    band_height: int = 32

    # Output
    save_metadata: bool = True

    def validate(self):
        """Validate configuration parameters."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")

        if len(self.bounds) != 4:
            raise ValueError("bounds must be (xmin, xmax, ymin, ymax)")

        # Raises for inverted bounds, unknown fractals and bad parameters
        Viewport.from_tuple(self.bounds)
        self.build_fractal()

        if self.band_height <= 0:
            raise ValueError("band_height must be positive")

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def viewport(self) -> Viewport:
        return Viewport.from_tuple(self.bounds)

    def build_fractal(self) -> FractalSpec:
        """Create the fractal specification described by this configuration."""
        if self.fractal.lower() == 'newton':
            return FractalRegistry.create_fractal(self.fractal, max_iterations=self.max_iterations)
        return FractalRegistry.create_fractal(
            self.fractal,
            max_iterations=self.max_iterations,
            escape_threshold=self.escape_threshold,
            colour_map=self.colour_map,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderConfig':
        """Create a configuration from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown render options: {', '.join(sorted(unknown))}")
        values = {k: v for k, v in data.items() if k in known}
        if 'bounds' in values:
            values['bounds'] = tuple(values['bounds'])
        return cls(**values)


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, config: Optional[RenderConfig] = None,
                 exporter: Optional[ImageExporter] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
            exporter: Image sink used when an output path is given
        """
        self.config = config or RenderConfig()
        self.config.validate()
        self.image_exporter = exporter or ImageExporter()

        self.parallel_renderer = None
        if self.config.parallel:
            self.parallel_renderer = ParallelRenderer(self.config.num_processes, self.config.band_height)

        logger.info(f"FractalRenderer initialized: {self.config.width}x{self.config.height}, "
                    f"parallel={self.config.parallel}")

    def render(self, fractal: Optional[FractalSpec] = None,
               bounds: Optional[Union[Viewport, Tuple[float, float, float, float]]] = None,
               output_path: Optional[Union[str, Path]] = None) -> np.ndarray:
        """
        Render a fractal to an image grid.

        Args:
            fractal: Fractal to render (defaults to the configured one)
            bounds: Plane region (defaults to the configured bounds)
            output_path: Optional output file path

        Returns:
            uint8 array of shape (height, width, 3)
        """
        fractal = fractal if fractal is not None else self.config.build_fractal()
        bounds = bounds if bounds is not None else self.config.viewport

        start_time = time.time()
        if self.parallel_renderer is not None:
            grid = self.parallel_renderer.render(bounds, self.config.resolution, fractal)
        else:
            grid = render(bounds, self.config.resolution, fractal)
        render_time = time.time() - start_time

        if output_path:
            self._save_image(grid, Path(output_path), fractal, bounds, render_time)

        return grid

    def _save_image(self, grid: np.ndarray, output_path: Path, fractal: FractalSpec,
                    bounds, render_time: float) -> None:
        metadata = None
        if self.config.save_metadata:
            if isinstance(bounds, Viewport):
                bounds = bounds.as_tuple()
            metadata = RenderMetadata(
                fractal_type=FractalRegistry.name_of(fractal),
                bounds=tuple(bounds),
                resolution=self.config.resolution,
                fractal_parameters=fractal.to_dict(),
                render_time_seconds=render_time,
                parallel=self.config.parallel,
            )
        self.image_exporter.save_image(grid, output_path, metadata)

    def render_frame(self, frame: ZoomFrame, output_path: Optional[Union[str, Path]] = None) -> np.ndarray:
        """Render one planned zoom frame."""
        return self.render(frame.spec, frame.viewport, output_path)


def write_zoom_frames(frames: List[ZoomFrame], output_dir: Union[str, Path],
                      renderer: Optional[FractalRenderer] = None,
                      progress_callback: Optional[Callable[[int, int, ZoomFrame], None]] = None) -> List[Path]:
    """
    Render planned zoom frames and save them as ``frame_{index}.png``.

    Args:
        frames: Frames from :func:`fractory.tools.zoom.plan_zoom_frames`
        output_dir: Directory that receives the images (created if missing)
        renderer: Renderer supplying resolution and sink (defaults to RenderConfig())
        progress_callback: Called with (done, total, frame) after each save

    Returns:
        List of saved file paths
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    renderer = renderer or FractalRenderer()

    saved_paths = []
    for done, frame in enumerate(frames, start=1):
        path = output_dir / frame.filename
        renderer.render_frame(frame, path)
        saved_paths.append(path)
        logger.info(f"frame {frame.index}/{len(frames)} zoom={frame.zoom:.3f}")
        if progress_callback:
            progress_callback(done, len(frames), frame)

    logger.info(f"Saved {len(saved_paths)} frames to {output_dir}")
    return saved_paths


def get_example(name: str) -> ScenePreset:
    """
    Get one of the bundled example scenes.

    ``mandelbrot_zoomed`` looks at a Misiurewicz point at zoom 1200.
    """
    if name == 'mandelbrot_zoomed':
        return ScenePreset(
            bounds=compute_viewport(MISIUREWICZ_POINT, 1200.0, MANDELBROT_BOUNDS).as_tuple(),
            fractal=MandelbrotParameters(500, 4.0, ColourMapKind.TRCM),
        )
    try:
        return EXAMPLE_PRESETS[name]
    except KeyError:
        available = ', '.join(list_examples())
        raise ValueError(f"Unknown example '{name}'. Available: {available}") from None


def list_examples() -> List[str]:
    """Get the names of the bundled example scenes."""
    return sorted(list(EXAMPLE_PRESETS) + ['mandelbrot_zoomed'])
