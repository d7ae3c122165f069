"""
Scene geometry: spheres, the ground plane and the scene aggregate.

Every shape answers `hit(ray, t_min, t_max)` with a HitRecord or None.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


# Rays closer than this to parallel with a plane are treated as misses
PLANE_EPSILON = 1e-8


@dataclass(frozen=True)
class HitRecord:
    """Where a ray met a surface, and how to shade it.

    Attributes:
        point: World-space position of the hit
        normal: Unit normal, flipped so it faces the incoming ray
        t: Ray parameter of the hit
        front_face: False when the ray arrived from inside or behind the surface
        material: Shading rule of the surface. Shapes built without one are
            shaded by their normal, which is useful when checking geometry
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Optional[Material] = None

    @classmethod
    def from_outward_normal(
        cls,
        ray: Ray,
        t: float,
        point: Point3,
        outward_normal: Vec3,
        material: Optional[Material] = None
    ) -> HitRecord:
        """Build a record whose normal points against the ray direction.

        Args:
            ray: The incoming ray
            t: The ray parameter at intersection
            point: The intersection point
            outward_normal: The geometric normal pointing outward from surface
            material: The material at the hit point
        """
        front_face = ray.direction.dot(outward_normal) < 0
        return cls(
            point=point,
            normal=outward_normal if front_face else -outward_normal,
            t=t,
            front_face=front_face,
            material=material
        )


class Hittable(ABC):
    """Anything a ray can be intersected with."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Nearest intersection with parameter in [t_min, t_max], or None.

        `t_min` keeps secondary rays from re-hitting the surface they
        leave; `t_max` lets an aggregate skip anything farther than its
        current best hit.
        """
        pass


class Sphere(Hittable):
    """A solid ball. The outward normal is (P - C) / radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is solved in its half-b form.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Find the nearest root in the acceptable range
        root = (-half_b - sqrtd) / a
        if root < t_min or root > t_max:
            root = (-half_b + sqrtd) / a
            if root < t_min or root > t_max:
                return None

        point = ray.at(root)
        outward_normal = (point - self.center) / self.radius
        return HitRecord.from_outward_normal(ray, root, point, outward_normal, self.material)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Plane(Hittable):
    """An infinite horizontal plane at height `y`.

    Only rays travelling downward (against the +Y axis) can hit it. The
    intersection parameter is taken as an absolute value, so a downward ray
    that starts below the plane still reports a hit, mirrored below its
    origin.
    """

    NORMAL = Vec3(0, -1, 0)

    def __init__(self, y: float, material: Optional[Material] = None):
        """Create a plane.

        Args:
            y: Height of the plane
            material: Material for shading
        """
        self.y = y
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-plane intersection."""
        denom = ray.direction.dot(self.NORMAL)
        if denom < PLANE_EPSILON:
            return None

        point_on_plane = Point3(0, self.y, 0)
        t = abs((point_on_plane - ray.origin).dot(self.NORMAL) / denom)

        if t < t_min or t > t_max:
            return None

        return HitRecord.from_outward_normal(ray, t, ray.at(t), self.NORMAL, self.material)

    def __repr__(self) -> str:
        return f"Plane(y={self.y})"


class HittableList(Hittable):
    """The scene: an ordered group of hittables queried as one.

    Insertion order never changes which hit is reported, only the
    nearest one in range is kept.
    """

    def __init__(self, objects: Optional[list[Hittable]] = None):
        self.objects: list[Hittable] = objects if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Append a member."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Empty the scene."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Nearest hit over all members, narrowing `t_max` as hits are found."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)
