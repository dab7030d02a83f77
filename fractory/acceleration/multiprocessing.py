"""
Multiprocessing-based parallel rendering.

The image is cut into horizontal bands of rows which are evaluated in
worker processes and stitched back together. Each pixel is computed by the
same kernel as the sequential sweep, so the assembled grid is identical to
the output of :func:`fractory.rendering.renderer.render`.
"""

import logging
import multiprocessing as mp
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..core.fractal_types import FractalSpec
from ..core.math_functions import ComplexPlane
from ..rendering.renderer import Bounds, as_viewport, render_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandSpec:
    """Specification for a band of rows in parallel rendering."""
    band_id: int
    row_start: int
    row_end: int

    @property
    def height(self) -> int:
        return self.row_end - self.row_start


@dataclass
class BandResult:
    """Result from processing a single band."""
    band_id: int
    row_start: int
    pixels: np.ndarray
    processing_time: float


def create_band_grid(height: int, band_height: int = 32) -> List[BandSpec]:
    """
    Split an image of the given height into bands of rows.

    Args:
        height: Total image height
        band_height: Target number of rows per band

    Returns:
        List of BandSpec objects covering every row exactly once
    """
    if band_height <= 0:
        raise ValueError(f"band_height must be positive, got {band_height}")

    bands = []
    for band_id, row_start in enumerate(range(0, height, band_height)):
        bands.append(BandSpec(band_id, row_start, min(row_start + band_height, height)))

    logger.debug(f"Created {len(bands)} bands of up to {band_height} rows")
    return bands


def process_band(args: Tuple[ComplexPlane, FractalSpec, BandSpec]) -> BandResult:
    """Evaluate one band in a worker process."""
    plane, spec, band = args
    start_time = time.time()
    pixels = render_rows(plane, spec, band.row_start, band.row_end)
    return BandResult(
        band_id=band.band_id,
        row_start=band.row_start,
        pixels=pixels,
        processing_time=time.time() - start_time,
    )


def assemble_bands(band_results: List[BandResult], width: int, height: int) -> np.ndarray:
    """Place band results into a full (height, width, 3) grid."""
    grid = np.zeros((height, width, 3), dtype=np.uint8)
    for result in band_results:
        rows = result.pixels.shape[0]
        grid[result.row_start:result.row_start + rows] = result.pixels
    return grid


class ParallelRenderer:
    """Render fractals across a pool of worker processes."""

    def __init__(self, num_processes: Optional[int] = None, band_height: int = 32):
        """
        Initialize the parallel renderer.

        Args:
            num_processes: Number of worker processes (None for optimal count)
            band_height: Rows per unit of work
        """
        if num_processes is None:
            self.num_processes = get_optimal_process_count()
        else:
            self.num_processes = max(1, num_processes)
        if band_height <= 0:
            raise ValueError(f"band_height must be positive, got {band_height}")

        self.band_height = band_height
        logger.info(f"Parallel renderer: {self.num_processes} processes, {band_height}-row bands")

    def render(self, region: Bounds, resolution: Tuple[int, int], spec: FractalSpec) -> np.ndarray:
        """
        Render a fractal using band-parallel processing.

        Args:
            region: Plane region as a Viewport or (xmin, xmax, ymin, ymax)
            resolution: Image size as (width, height)
            spec: Fractal variant and parameters

        Returns:
            uint8 array of shape (height, width, 3)
        """
        width, height = resolution
        plane = ComplexPlane(as_viewport(region), width, height)
        bands = create_band_grid(height, self.band_height)

        start_time = time.time()
        logger.info(f"Processing {len(bands)} bands with {self.num_processes} processes")

        band_results = []
        with ProcessPoolExecutor(max_workers=self.num_processes) as executor:
            futures = [executor.submit(process_band, (plane, spec, band)) for band in bands]

            completed = 0
            for future in as_completed(futures):
                # Worker failures are not recoverable; let them propagate
                band_results.append(future.result())
                completed += 1

                if completed % max(1, len(bands) // 10) == 0:
                    progress = (completed / len(bands)) * 100
                    logger.info(f"Completed {completed}/{len(bands)} bands ({progress:.1f}%)")

        grid = assemble_bands(band_results, width, height)

        total_time = time.time() - start_time
        processing_time = sum(result.processing_time for result in band_results)
        logger.info(f"Parallel rendering complete: {total_time:.2f}s total, "
                    f"{processing_time:.2f}s processing time")
        return grid


def get_optimal_process_count() -> int:
    """Get optimal number of processes for fractal computation."""
    # Leave one core for the system
    return max(1, mp.cpu_count() - 1)
