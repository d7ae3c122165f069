"""
Three-component vectors shared by geometry and shading.

One class covers positions (`Point3`), directions and linear RGB
radiance (`Color`); the aliases only document intent.
"""

from __future__ import annotations
import math
from typing import Union
import numpy as np


class Vec3:
    """An immutable triple of float64 components.

    Arithmetic is element-wise and always yields a fresh Vec3. Scalars
    broadcast on either side of `+ - * /`.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Build a Vec3 from any length-3 sequence; the values are copied."""
        return cls._wrap(np.array(arr, dtype=np.float64))

    @classmethod
    def _wrap(cls, data: np.ndarray) -> Vec3:
        # Takes ownership of a freshly computed array without copying it
        v = cls.__new__(cls)
        v._data = data
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Channel names when the vector holds a color
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return np.allclose(self._data, other._data)

    def __hash__(self) -> int:
        return hash(tuple(self._data))

    def __neg__(self) -> Vec3:
        return Vec3._wrap(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data + other._data)
        return Vec3._wrap(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3._wrap(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data - other._data)
        return Vec3._wrap(self._data - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3._wrap(other - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data * other._data)
        return Vec3._wrap(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3._wrap(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data / other._data)
        return Vec3._wrap(self._data / other)

    def __getitem__(self, index: int) -> float:
        # numpy would silently accept -1..-3
        if index not in (0, 1, 2):
            raise IndexError(f"Vec3 index out of range: {index!r}")
        return float(self._data[index])

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Scale to length 1. The zero vector stays zero."""
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3._wrap(self._data / length)

    def dot(self, other: Vec3) -> float:
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Right-handed cross product `self × other`."""
        return Vec3._wrap(np.cross(self._data, other._data))

    def rotate_x(self, angle: float) -> Vec3:
        """Rotate around the X axis by `angle` radians (right-handed)."""
        c, s = math.cos(angle), math.sin(angle)
        return Vec3(self.x, self.y * c - self.z * s, self.y * s + self.z * c)

    def rotate_y(self, angle: float) -> Vec3:
        """Rotate around the Y axis by `angle` radians (right-handed)."""
        c, s = math.cos(angle), math.sin(angle)
        return Vec3(self.x * c + self.z * s, self.y, -self.x * s + self.z * c)

    def reflect(self, normal: Vec3) -> Vec3:
        """Mirror this direction about the plane whose unit normal is given."""
        return self - normal * 2 * self.dot(normal)

    def refract(self, normal: Vec3, eta_ratio: float) -> Vec3:
        """Bend this unit direction through an interface (Snell's law).

        Args:
            normal: Unit normal on the side the direction arrives from
            eta_ratio: Incident index over transmitted index

        Returns:
            The transmitted direction. Total internal reflection is not
            detected here; callers decide that first.
        """
        cos_theta = min(-self.dot(normal), 1.0)
        r_out_perp = (self + normal * cos_theta) * eta_ratio
        r_out_parallel = normal * (-math.sqrt(abs(1.0 - r_out_perp.length_squared())))
        return r_out_perp + r_out_parallel

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """True when every component has magnitude below `epsilon`."""
        return bool(np.all(np.abs(self._data) < epsilon))

    def to_array(self) -> np.ndarray:
        """A writable copy of the components."""
        return self._data.copy()

    @staticmethod
    def random(rng: np.random.Generator, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Three independent uniform draws from [min_val, max_val)."""
        return Vec3._wrap(rng.uniform(min_val, max_val, 3))

    @staticmethod
    def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
        """Rejection-sample the cube [-1, 1)^3 until a point lands inside the ball."""
        while True:
            p = Vec3.random(rng, -1, 1)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_unit_vector(rng: np.random.Generator) -> Vec3:
        """A direction drawn uniformly over the unit sphere."""
        while True:
            p = Vec3.random_in_unit_sphere(rng)
            # A sample this close to the centre has no usable direction
            if not p.near_zero():
                return p.normalize()


Point3 = Vec3
Color = Vec3
