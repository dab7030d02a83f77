"""
Image export for rendered fractal grids.

This module writes (height, width, 3) uint8 grids to PNG, TIFF or JPEG
through Pillow, embedding the render parameters so an image can be traced
back to the fractal that produced it.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
from PIL import Image, PngImagePlugin

from .. import __version__

logger = logging.getLogger(__name__)

METADATA_KEY = "FractalMetadata"

# TIFF tags used for metadata
TIFF_IMAGE_DESCRIPTION = 270
TIFF_SOFTWARE = 305
TIFF_DATETIME = 306


class ImageExportError(RuntimeError):
    """Raised when a grid cannot be encoded or written."""


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    fractal_type: str
    bounds: Tuple[float, float, float, float]  # xmin, xmax, ymin, ymax
    resolution: Tuple[int, int]  # width, height
    fractal_parameters: Dict[str, Any] = field(default_factory=dict)

    render_time_seconds: float = 0.0
    parallel: bool = False

    timestamp: str = ""
    software_version: str = __version__

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()
        self.bounds = tuple(self.bounds)
        self.resolution = tuple(self.resolution)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


class ImageExporter:
    """Write rendered grids to disk with optional metadata."""

    def __init__(self):
        self.supported_formats = {
            '.png': self._save_png,
            '.tiff': self._save_tiff,
            '.tif': self._save_tiff,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, grid: np.ndarray, filepath: Union[str, Path],
                   metadata: Optional[RenderMetadata] = None, quality: int = 95) -> Path:
        """
        Save an RGB grid to file.

        Args:
            grid: uint8 array of shape (height, width, 3)
            filepath: Output file path; the suffix selects the format
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written

        Raises:
            ImageExportError: if the format is unsupported, the grid is
                malformed, or encoding/writing fails
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ImageExportError(f"Unsupported format '{suffix}'. Supported: {supported}")

        pil_image = Image.fromarray(self._prepare_grid(grid))

        save_method = self.supported_formats[suffix]
        try:
            save_method(pil_image, filepath, metadata, quality)
        except (OSError, ValueError) as e:
            raise ImageExportError(f"Could not write {filepath}: {e}") from e

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _prepare_grid(self, grid: np.ndarray) -> np.ndarray:
        """Validate a grid and convert it to contiguous uint8."""
        grid = np.asarray(grid)
        if grid.ndim != 3 or grid.shape[2] != 3:
            raise ImageExportError(f"Expected RGB grid (H, W, 3), got {grid.shape}")
        if grid.shape[0] == 0 or grid.shape[1] == 0:
            raise ImageExportError(f"Cannot save an empty grid of shape {grid.shape}")
        if grid.dtype != np.uint8:
            grid = np.clip(grid, 0, 255).astype(np.uint8)
        return np.ascontiguousarray(grid)

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as PNG with metadata in text chunks."""
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.fractal_type}")
            pnginfo.add_text("Software", f"fractory v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text(METADATA_KEY, metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_tiff(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as LZW-compressed TIFF with metadata in the description tag."""
        save_kwargs = {'format': 'TIFF', 'compression': 'tiff_lzw'}

        if metadata:
            save_kwargs['tiffinfo'] = {
                TIFF_IMAGE_DESCRIPTION: metadata.to_json(),
                TIFF_SOFTWARE: f"fractory v{metadata.software_version}",
                TIFF_DATETIME: metadata.timestamp,
            }

        pil_image.save(filepath, **save_kwargs)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as JPEG; metadata goes to a companion JSON file."""
        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            with open(json_path, 'w') as f:
                f.write(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def extract_metadata_from_image(self, filepath: Union[str, Path]) -> Optional[RenderMetadata]:
        """
        Extract fractal metadata from a saved image.

        Args:
            filepath: Path to image file

        Returns:
            Extracted metadata or None if the image carries none
        """
        filepath = Path(filepath)

        if filepath.suffix.lower() in ['.jpg', '.jpeg']:
            json_path = filepath.with_suffix('.json')
            if json_path.exists():
                with open(json_path, 'r') as f:
                    return RenderMetadata.from_json(f.read())
            return None

        with Image.open(filepath) as img:
            text = getattr(img, 'text', {})
            if METADATA_KEY in text:
                return RenderMetadata.from_json(text[METADATA_KEY])

            tags = getattr(img, 'tag_v2', {})
            if TIFF_IMAGE_DESCRIPTION in tags:
                try:
                    return RenderMetadata.from_json(tags[TIFF_IMAGE_DESCRIPTION])
                except (ValueError, TypeError) as e:
                    logger.warning(f"Could not parse metadata from {filepath}: {e}")

        return None
