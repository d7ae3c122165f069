"""
Camera module for generating primary rays.

Supports:
- Perspective projection
- Configurable vertical field of view
- Orientation by pitch and yaw angles
"""

from __future__ import annotations
import math
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera oriented by pitch and yaw."""

    def __init__(
        self,
        aspect_ratio: float = 16.0 / 9.0,
        vfov: float = 60.0,
        origin: Point3 = Point3(0, 0, 0),
        pitch: float = 0.0,
        yaw: float = 0.0
    ):
        """Create a camera.

        Args:
            aspect_ratio: Width / Height ratio
            vfov: Vertical field of view in degrees
            origin: Camera position in world space
            pitch: Rotation about the X axis in degrees (positive looks up)
            yaw: Rotation about the Y axis in degrees (positive turns left)
        """
        vup = Vec3(0, 1, 0)
        theta = math.radians(vfov)
        h = math.tan(theta / 2)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        # Compute orthonormal camera basis
        back = Vec3(0, 0, 1).rotate_x(math.radians(pitch)).rotate_y(math.radians(yaw))
        self.w = back.normalize()                    # Points backward from camera
        right = vup.cross(self.w)
        if right.near_zero():
            raise ValueError(f"Camera cannot look straight up or down (pitch={pitch})")
        self.u = right.normalize()                   # Points right
        self.v = self.w.cross(self.u)                # Points up

        self.origin = origin
        self.horizontal = self.u * viewport_width
        self.vertical = self.v * viewport_height
        self.lower_left_corner = (
            self.origin
            - self.horizontal / 2
            - self.vertical / 2
            - self.w
        )

    def get_ray(self, s: float, t: float) -> Ray:
        """Generate a ray for the given offsets on the image plane.

        Offsets outside [0, 1] extrapolate past the frame.

        Args:
            s: Horizontal coordinate (0 = left, 1 = right)
            t: Vertical coordinate (0 = bottom, 1 = top)

        Returns:
            A ray from the camera through the specified point
        """
        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.origin
        )
        return Ray(self.origin, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"
