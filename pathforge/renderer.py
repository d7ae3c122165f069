"""
Renderer module - the heart of the path tracer.

Implements:
- Recursive radiance integration with a bounce limit
- Sky gradient background
- Jittered multi-sample antialiasing with square-root gamma
- Optional scanline-parallel rendering with per-row random streams
"""

from __future__ import annotations
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable

logger = logging.getLogger(__name__)

Pixel = Tuple[int, int, int]

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


@dataclass
class RenderSettings:
    """Configuration for the renderer.

    `height` is derived from `width / aspect_ratio` (floored) when not given.
    `num_threads` of 0 means one worker per CPU. A `seed` of None draws
    fresh entropy for every render.
    """
    width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    height: int = 0
    samples_per_pixel: int = 100
    max_depth: int = 50
    epsilon: float = 0.001
    num_threads: int = 1
    seed: Optional[int] = None

    def __post_init__(self):
        if self.height == 0:
            self.height = int(self.width / self.aspect_ratio)
        if self.width < 2 or self.height < 2:
            raise ValueError(f"Image must be at least 2x2 pixels, got {self.width}x{self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must not be negative, got {self.seed}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


def sky_color(ray: Ray) -> Color:
    """Generate a sky gradient background.

    Args:
        ray: The ray direction to use for gradient

    Returns:
        White at the nadir blending to sky blue at the zenith
    """
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t


def ray_color(
    ray: Ray,
    scene: Hittable,
    depth: int,
    rng: np.random.Generator,
    t_min: float = 0.001
) -> Color:
    """Compute the radiance carried back along a ray.

    Args:
        ray: The ray to trace
        scene: The scene to trace against
        depth: Remaining bounce budget
        rng: Random generator for material sampling
        t_min: Smallest accepted hit distance (avoids self-intersection)

    Returns:
        The computed color for this ray
    """
    if depth <= 0:
        return BLACK

    hit_record = scene.hit(ray, t_min, float('inf'))
    if hit_record is None:
        return sky_color(ray)

    if hit_record.material is None:
        # Bare geometry: show the normal mapped into [0, 1]
        return (hit_record.normal + WHITE) * 0.5

    result = hit_record.material.scatter(ray, hit_record, rng)
    return result.attenuation * ray_color(result.scattered_ray, scene, depth - 1, rng, t_min)


class Renderer:
    """Path tracing renderer producing an 8-bit RGB pixel buffer."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> List[Pixel]:
        """Render the scene.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            Flat list of (r, g, b) triples in row-major order, top row first
        """
        width = self.settings.width
        height = self.settings.height
        seed = self.settings.seed
        if seed is None:
            seed = np.random.SeedSequence().entropy

        logger.info(
            f"Rendering {width}x{height}, {self.settings.samples_per_pixel} spp, "
            f"depth {self.settings.max_depth}, {self.settings.num_threads} thread(s)"
        )
        start = time.perf_counter()

        # Scanlines run from the top of the image (y = height - 1) down to 0
        rows = list(range(height - 1, -1, -1))

        def render_row(y: int) -> List[Pixel]:
            rng = np.random.default_rng([seed, y])
            return self._render_row(scene, camera, y, rng)

        image: List[Pixel] = []
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                for done, row in enumerate(executor.map(render_row, rows), start=1):
                    image.extend(row)
                    self._report(done, height)
        else:
            for done, y in enumerate(rows, start=1):
                image.extend(render_row(y))
                self._report(done, height)

        logger.info(f"Render finished in {time.perf_counter() - start:.2f}s")
        return image

    def _render_row(
        self,
        scene: Hittable,
        camera: Camera,
        y: int,
        rng: np.random.Generator
    ) -> List[Pixel]:
        """Render one scanline with its own random stream."""
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth
        epsilon = self.settings.epsilon

        row = np.zeros((width, 3), dtype=np.float64)
        for x in range(width):
            pixel_color = BLACK
            for _ in range(samples):
                u = (x + rng.random()) / (width - 1)
                v = (y + rng.random()) / (height - 1)
                ray = camera.get_ray(u, v)
                pixel_color = pixel_color + ray_color(ray, scene, max_depth, rng, epsilon)
            row[x] = pixel_color.to_array() / samples

        return [tuple(int(c) for c in px) for px in self.to_ldr(row)]

    @staticmethod
    def to_ldr(linear: np.ndarray) -> np.ndarray:
        """Convert averaged linear radiance to 0-255 integers.

        Applies gamma 2 (square root) and truncates toward zero.
        """
        corrected = np.sqrt(np.clip(linear, 0.0, 1.0))
        return (corrected * 255.0).astype(np.int64)

    def _report(self, done: int, total: int) -> None:
        if self._progress_callback:
            self._progress_callback(done / total)
