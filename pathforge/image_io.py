"""
Writing rendered pixel buffers to disk.

`.ppm` files are written as plain-text P3; every other extension is
handed to Pillow.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _check_size(pixels: Sequence[Tuple[int, int, int]], width: int, height: int) -> None:
    if len(pixels) != width * height:
        raise ValueError(
            f"Pixel buffer holds {len(pixels)} pixels, expected {width}x{height}={width * height}"
        )


def to_array(pixels: Sequence[Tuple[int, int, int]], width: int, height: int) -> np.ndarray:
    """Reshape a flat pixel buffer into a (height, width, 3) uint8 array."""
    _check_size(pixels, width, height)
    data = np.clip(np.asarray(pixels, dtype=np.int64), 0, 255)
    return data.astype(np.uint8).reshape(height, width, 3)


def write_ppm(filename: PathLike, pixels: Sequence[Tuple[int, int, int]], width: int, height: int) -> None:
    """Write a plain-text PPM (P3) file, one "R G B" line per pixel.

    Args:
        filename: Output path
        pixels: Flat row-major buffer, top row first
        width: Image width
        height: Image height
    """
    _check_size(pixels, width, height)
    with open(filename, 'w', encoding='ascii') as f:
        f.write(f"P3\n{width} {height}\n255\n")
        f.writelines(f"{r} {g} {b}\n" for r, g, b in pixels)


def save_image(filename: PathLike, pixels: Sequence[Tuple[int, int, int]], width: int, height: int) -> None:
    """Save image to file.

    Args:
        filename: Output filename (extension determines format)
        pixels: Flat row-major buffer, top row first
        width: Image width
        height: Image height
    """
    path = Path(filename)
    if path.suffix.lower() == '.ppm':
        write_ppm(path, pixels, width, height)
    else:
        PILImage.fromarray(to_array(pixels, width, height)).save(path)
    logger.info(f"Saved {width}x{height} image to {path}")
