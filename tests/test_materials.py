"""Tests for material system."""

import pytest
import math
import numpy as np

from pathforge.vec3 import Vec3, Point3, Color
from pathforge.ray import Ray
from pathforge.shapes import HitRecord, Sphere
from pathforge.materials import (
    Lambertian, Metal, Dielectric, TexturedLambertian, ScatterResult
)
from pathforge.textures import ImageTexture


def make_hit(ray, point, outward_normal, material=None, t=1.0):
    return HitRecord.from_outward_normal(ray, t, point, outward_normal, material)


class TestLambertian:
    """Test Lambertian diffuse material."""

    def test_scatter_always_succeeds(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        hit = make_hit(ray_in, Point3(0, 0, -1), Vec3(0, 0, 1), mat)

        for _ in range(100):
            result = mat.scatter(ray_in, hit, rng)
            assert isinstance(result, ScatterResult)

    def test_scattered_from_hit_point(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        hit = make_hit(ray_in, Point3(0, 0, -1), Vec3(0, 0, 1), mat)
        result = mat.scatter(ray_in, hit, rng)
        assert result.scattered_ray.origin == Point3(0, 0, -1)

    def test_scattered_in_hemisphere(self, rng):
        mat = Lambertian(Color(0.5, 0.5, 0.5))
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        normal = Vec3(0, 1, 0)
        hit = make_hit(ray_in, Point3(0, 0, 0), normal, mat)

        for _ in range(100):
            result = mat.scatter(ray_in, hit, rng)
            # normal + unit vector never points below the surface
            assert result.scattered_ray.direction.dot(normal) >= -1e-12
            assert not result.scattered_ray.direction.near_zero()

    def test_attenuation_matches_albedo(self, rng):
        albedo = Color(0.8, 0.2, 0.3)
        mat = Lambertian(albedo)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)

        for _ in range(20):
            result = mat.scatter(ray_in, hit, rng)
            assert result.attenuation.to_array().tolist() == albedo.to_array().tolist()


class TestMetal:
    """Test Metal material."""

    def test_perfect_reflection_is_exact(self, rng):
        mat = Metal(Color(1, 1, 1), fuzz=0.0)
        incoming = Vec3(1, -1, 0.25)
        ray_in = Ray(Point3(-1, 1, 0), incoming)
        normal = Vec3(0, 1, 0)
        hit = make_hit(ray_in, Point3(0, 0, 0.25), normal, mat)

        result = mat.scatter(ray_in, hit, rng)
        expected = incoming.reflect(hit.normal)
        assert result.scattered_ray.direction.to_array().tolist() == expected.to_array().tolist()
        assert result.scattered_ray.direction == Vec3(1, 1, 0.25)

    def test_mirror_draws_no_random_numbers(self):
        mat = Metal(Color(1, 1, 1), fuzz=0.0)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)

        rng = np.random.default_rng(3)
        mat.scatter(ray_in, hit, rng)
        assert rng.random() == np.random.default_rng(3).random()

    def test_fuzz_adds_spread(self, rng):
        mat = Metal(Color(1, 1, 1), fuzz=0.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)

        mirror = Vec3(0, 1, 0)
        directions = [mat.scatter(ray_in, hit, rng).scattered_ray.direction for _ in range(50)]
        assert any(d != directions[0] for d in directions[1:])
        # Perturbation stays within the fuzz ball around the mirror direction
        for d in directions:
            assert (d - mirror).length() < 0.5 + 1e-12

    def test_fuzz_clamped(self):
        assert Metal(Color(1, 1, 1), fuzz=3.0).fuzz == 1.0

    def test_attenuation(self, rng):
        albedo = Color(0.2, 0.2, 0.7)
        mat = Metal(albedo, fuzz=0.3)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)
        assert mat.scatter(ray_in, hit, rng).attenuation is albedo


class TestDielectric:
    """Test Dielectric (glass) material."""

    def test_always_scatters_colorless(self, rng):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0.3, -1, 0))
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)

        for _ in range(50):
            result = mat.scatter(ray_in, hit, rng)
            assert result.attenuation == Color(1, 1, 1)
            assert result.scattered_ray.origin == Point3(0, 0, 0)

    @pytest.mark.parametrize("direction", [
        (0, -1, 0),
        (0.5, -1, 0),
        (3, -1, 0.5),
        (-10, -0.1, 2),
    ])
    def test_index_one_never_bends(self, rng, direction):
        mat = Dielectric(1.0)
        unit = Vec3(*direction).normalize()
        ray_in = Ray(Point3(0, 1, 0), unit)

        for front in (Vec3(0, 1, 0), Vec3(0, -1, 0)):
            hit = make_hit(ray_in, Point3(0, 0, 0), front, mat)
            for _ in range(20):
                out = mat.scatter(ray_in, hit, rng).scattered_ray.direction
                assert np.allclose(out.to_array(), unit.to_array(), atol=1e-12)

    def test_total_internal_reflection(self, rng):
        # Exiting glass at a grazing angle: 1.5 * sin(theta) > 1
        mat = Dielectric(1.5)
        incoming = Vec3(0.9, 0.1, 0).normalize()
        ray_in = Ray(Point3(0, -1, 0), incoming)
        # Outward normal points up, ray travels up from inside -> back face
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)
        assert hit.front_face is False

        expected = incoming.reflect(hit.normal)
        for _ in range(20):
            out = mat.scatter(ray_in, hit, rng).scattered_ray.direction
            assert out == expected

    def test_normal_incidence_mostly_refracts(self, rng):
        mat = Dielectric(1.5)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)

        down = 0
        for _ in range(400):
            out = mat.scatter(ray_in, hit, rng).scattered_ray.direction
            if out.y < 0:
                down += 1
            else:
                assert out == Vec3(0, 1, 0)
        # Schlick gives 4% reflectance at normal incidence for glass
        assert 340 < down < 400

    def test_refraction_follows_snell(self):
        mat = Dielectric(1.5)
        incoming = Vec3(1, -1, 0).normalize()
        ray_in = Ray(Point3(-1, 1, 0), incoming)
        hit = make_hit(ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), mat)

        # Collect refracted outcomes only
        rng = np.random.default_rng(11)
        refracted = []
        for _ in range(100):
            out = mat.scatter(ray_in, hit, rng).scattered_ray.direction
            if out.y < 0:
                refracted.append(out)
        assert refracted
        for out in refracted:
            sin_out = out.x / out.length()
            assert abs(sin_out - math.sin(math.pi / 4) / 1.5) < 1e-10

    def test_reflectance(self):
        assert abs(Dielectric.reflectance(1.0, 1 / 1.5) - 0.04) < 1e-12
        assert Dielectric.reflectance(0.0, 1.5) == pytest.approx(1.0)
        assert Dielectric.reflectance(0.3, 1.0) == 0.0


class TestTexturedLambertian:
    """Test image-textured diffuse material."""

    @pytest.fixture
    def texture(self):
        # 2x2: red, green / blue, white (row 0 is the top)
        pixels = np.array([
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ], dtype=np.uint8)
        return ImageTexture.from_array(pixels, scale=1.0)

    def test_albedo_lookup(self, texture):
        mat = TexturedLambertian(texture)
        assert mat.albedo_at(Point3(0.1, 0, 0.1)) == Color(1, 0, 0)
        assert mat.albedo_at(Point3(0.6, 0, 0.1)) == Color(0, 1, 0)
        assert mat.albedo_at(Point3(0.1, 0, 0.6)) == Color(0, 0, 1)
        assert mat.albedo_at(Point3(0.6, 0, 0.6)) == Color(1, 1, 1)

    def test_tiles_repeat(self, texture):
        mat = TexturedLambertian(texture)
        assert mat.albedo_at(Point3(3.6, 0, 7.1)) == mat.albedo_at(Point3(0.6, 0, 0.1))

    def test_negative_coordinates_use_absolute_value(self, texture):
        mat = TexturedLambertian(texture)
        assert mat.albedo_at(Point3(-0.6, 0, -0.1)) == mat.albedo_at(Point3(0.6, 0, 0.1))

    def test_scale_stretches_tiles(self):
        pixels = np.zeros((1, 2, 3), dtype=np.uint8)
        pixels[0, 1] = [255, 255, 255]
        mat = TexturedLambertian(ImageTexture.from_array(pixels, scale=4.0))
        assert mat.albedo_at(Point3(1.9, 0, 0)) == Color(0, 0, 0)
        assert mat.albedo_at(Point3(2.1, 0, 0)) == Color(1, 1, 1)

    def test_y_is_ignored(self, texture):
        mat = TexturedLambertian(texture)
        assert mat.albedo_at(Point3(0.6, -5, 0.6)) == mat.albedo_at(Point3(0.6, 5, 0.6))

    def test_scatter_uses_texture_color(self, texture, rng):
        mat = TexturedLambertian(texture)
        ray_in = Ray(Point3(0.6, 1, 0.1), Vec3(0, -1, 0))
        hit = make_hit(ray_in, Point3(0.6, 0, 0.1), Vec3(0, 1, 0), mat)
        result = mat.scatter(ray_in, hit, rng)

        assert result.attenuation == Color(0, 1, 0)
        assert result.scattered_ray.direction.dot(hit.normal) >= -1e-12
        # Attenuation never exceeds 1
        assert max(result.attenuation) <= 1.0

    def test_through_sphere_hit(self, texture, rng):
        mat = TexturedLambertian(texture)
        sphere = Sphere(Point3(0.1, 0, 0.1), 0.05, mat)
        ray = Ray(Point3(0.1, 1, 0.1), Vec3(0, -1, 0))
        hit = sphere.hit(ray, 0.001, float('inf'))
        result = hit.material.scatter(ray, hit, rng)
        assert result.attenuation == Color(1, 0, 0)
