"""
PathForge - A Python Path Tracer

A small CPU path tracer for spheres and an infinite ground plane with:
- Diffuse, metal, glass and image-textured materials
- Jittered multi-sample antialiasing
- Reproducible seeded rendering, optionally scanline-parallel
- PPM and PNG output
"""

__version__ = "0.1.0"
__author__ = "PathForge Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Sphere, Plane, HittableList, HitRecord, Hittable
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric, TexturedLambertian
from .textures import ImageTexture, TextureError
from .camera import Camera
from .renderer import Renderer, RenderSettings, ray_color, sky_color
from .image_io import save_image, write_ppm, to_array
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
