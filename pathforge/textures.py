"""
Image textures for the path tracer.

An ImageTexture holds a decoded 8-bit RGB pixel buffer together with the
tiling scale used when it is laid over a surface.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class TextureError(Exception):
    """An image file exists but could not be decoded."""
    pass


def _check_scale(scale: float) -> None:
    if not scale > 0:
        raise ValueError(f"Texture scale must be positive, got {scale}")


class ImageTexture:
    """A texture loaded from an image file."""

    def __init__(self, filename: Union[str, Path], scale: float = 1.0):
        """Load a texture from an image file.

        Args:
            filename: Path to the image file
            scale: World units covered by one copy of the image

        Raises:
            FileNotFoundError: If the file does not exist
            TextureError: If the file cannot be decoded as an image
            ValueError: If scale is not positive
        """
        _check_scale(scale)
        self.filename = str(filename)
        self.scale = scale
        self._data = self._load_image(Path(filename))
        self._height, self._width = self._data.shape[:2]
        logger.debug(f"Loaded texture {self.filename}: {self._width}x{self._height}")

    @classmethod
    def from_array(cls, pixels: np.ndarray, scale: float = 1.0) -> ImageTexture:
        """Create a texture from an in-memory (height, width, 3) array of 0-255 values."""
        data = np.asarray(pixels, dtype=np.uint8)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected a (height, width, 3) array, got shape {data.shape}")
        _check_scale(scale)
        tex = cls.__new__(cls)
        tex.filename = "<array>"
        tex.scale = scale
        tex._data = data
        tex._height, tex._width = data.shape[:2]
        return tex

    @staticmethod
    def _load_image(path: Path) -> np.ndarray:
        if not path.exists():
            raise FileNotFoundError(f"Texture file not found: {path}")

        try:
            with Image.open(path) as img:
                return np.array(img.convert('RGB'), dtype=np.uint8)
        except (UnidentifiedImageError, OSError) as e:
            raise TextureError(f"Cannot decode texture {path}: {e}") from e

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        """Return the (r, g, b) value at column x, row y (row 0 is the top)."""
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self._width}x{self._height} texture")
        r, g, b = self._data[y, x]
        return int(r), int(g), int(b)

    def __repr__(self) -> str:
        return f"ImageTexture({self.filename!r}, {self._width}x{self._height}, scale={self.scale})"
