"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)
- Textured Lambertian (albedo read from an image texture)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import math

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .textures import ImageTexture

if TYPE_CHECKING:
    from .shapes import HitRecord


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    scattered_ray: Ray
    attenuation: Color


class Material(ABC):
    """Abstract base class for materials.

    Materials are shared between shapes and must not change after the
    scene is built.
    """

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded
            rng: Random generator owned by the calling worker

        Returns:
            ScatterResult with the outgoing ray and its attenuation
        """
        pass


def _diffuse_direction(normal: Vec3, rng: np.random.Generator) -> Vec3:
    scatter_direction = normal + Vec3.random_unit_vector(rng)

    # Catch degenerate scatter direction
    if scatter_direction.near_zero():
        return normal
    return scatter_direction


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        scattered = Ray(hit.point, _diffuse_direction(hit.normal, rng))
        return ScatterResult(scattered_ray=scattered, attenuation=self.albedo)

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class TexturedLambertian(Material):
    """Diffuse material whose albedo is read from an image laid over the XZ plane."""

    def __init__(self, texture: ImageTexture):
        """Create a textured Lambertian material.

        Args:
            texture: The decoded image; its scale is the world size of one tile
        """
        self.texture = texture

    def albedo_at(self, point: Vec3) -> Color:
        """Look up the albedo for a world-space point."""
        tex = self.texture
        i = int(abs(point.x) * tex.width / tex.scale) % tex.width
        j = int(abs(point.z) * tex.height / tex.scale) % tex.height
        r, g, b = tex.get_pixel(i, j)
        return Color(r, g, b) / 255.0

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        scattered = Ray(hit.point, _diffuse_direction(hit.normal, rng))
        return ScatterResult(scattered_ray=scattered, attenuation=self.albedo_at(hit.point))

    def __repr__(self) -> str:
        return f"TexturedLambertian(texture={self.texture!r})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Radius of the random perturbation (0 = mirror, 1 = very rough)
        """
        self.albedo = albedo
        self.fuzz = min(fuzz, 1.0)

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        reflected = ray_in.direction.reflect(hit.normal)

        if self.fuzz > 0:
            reflected = reflected + Vec3.random_in_unit_sphere(rng) * self.fuzz

        return ScatterResult(scattered_ray=Ray(hit.point, reflected), attenuation=self.albedo)

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.ior = ior

    def scatter(self, ray_in: Ray, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        attenuation = Color(1.0, 1.0, 1.0)

        # Determine refraction ratio based on whether we're entering or exiting
        refraction_ratio = 1.0 / self.ior if hit.front_face else self.ior

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(hit.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = refraction_ratio * sin_theta > 1.0

        # Use Schlick's approximation for reflectance
        if cannot_refract or self.reflectance(cos_theta, refraction_ratio) > rng.random():
            direction = unit_direction.reflect(hit.normal)
        else:
            direction = unit_direction.refract(hit.normal, refraction_ratio)

        return ScatterResult(scattered_ray=Ray(hit.point, direction), attenuation=attenuation)

    @staticmethod
    def reflectance(cosine: float, ref_idx: float) -> float:
        """Schlick's approximation for reflectance."""
        # Matched indices: no interface to reflect from
        if ref_idx == 1.0:
            return 0.0
        r0 = (1 - ref_idx) / (1 + ref_idx)
        r0 = r0 * r0
        return r0 + (1 - r0) * pow(1 - cosine, 5)

    def __repr__(self) -> str:
        return f"Dielectric(ior={self.ior})"
