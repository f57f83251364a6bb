"""Unit tests for primitive distance functions.

Tests cover:
- Sign convention (negative inside, zero on the surface, positive outside)
- Exact exterior and interior distances for each primitive
- Box and cylinder edge/corner regions
"""

import math

import pytest
import taichi as ti


def _eval_sphere(point, radius):
    from sdfmarch.core.ray import vec3
    from sdfmarch.geometry.primitives import sd_sphere

    @ti.kernel
    def k(x: ti.f32, y: ti.f32, z: ti.f32, r: ti.f32) -> ti.f32:
        return sd_sphere(vec3(x, y, z), r)

    return k(point[0], point[1], point[2], radius)


def _eval_box(point, half_extents):
    from sdfmarch.core.ray import vec3
    from sdfmarch.geometry.primitives import sd_box

    @ti.kernel
    def k(x: ti.f32, y: ti.f32, z: ti.f32, bx: ti.f32, by: ti.f32, bz: ti.f32) -> ti.f32:
        return sd_box(vec3(x, y, z), vec3(bx, by, bz))

    return k(point[0], point[1], point[2], half_extents[0], half_extents[1], half_extents[2])


def _eval_cylinder(point, radius, half_height):
    from sdfmarch.core.ray import vec3
    from sdfmarch.geometry.primitives import sd_cylinder

    @ti.kernel
    def k(x: ti.f32, y: ti.f32, z: ti.f32, r: ti.f32, h: ti.f32) -> ti.f32:
        return sd_cylinder(vec3(x, y, z), r, h)

    return k(point[0], point[1], point[2], radius, half_height)


def _eval_torus(point, major, minor):
    from sdfmarch.core.ray import vec3
    from sdfmarch.geometry.primitives import sd_torus

    @ti.kernel
    def k(x: ti.f32, y: ti.f32, z: ti.f32, big_r: ti.f32, small_r: ti.f32) -> ti.f32:
        return sd_torus(vec3(x, y, z), big_r, small_r)

    return k(point[0], point[1], point[2], major, minor)


class TestSphere:
    """Tests for sd_sphere."""

    @pytest.mark.parametrize(
        "point",
        [(2.0, 0.0, 0.0), (0.0, -3.0, 0.0), (1.0, 1.0, 1.0)],
    )
    def test_positive_outside(self, point):
        """Test points beyond the radius have positive distance."""
        d = _eval_sphere(point, 1.0)
        expected = math.sqrt(sum(c * c for c in point)) - 1.0
        assert d > 0.0
        assert abs(d - expected) < 1e-5

    @pytest.mark.parametrize(
        "point",
        [(0.0, 0.0, 0.0), (0.5, 0.0, 0.0), (0.3, 0.3, 0.3)],
    )
    def test_negative_inside(self, point):
        """Test points within the radius have negative distance."""
        d = _eval_sphere(point, 1.0)
        assert d < 0.0

    def test_zero_on_surface(self):
        """Test points at exactly the radius have zero distance."""
        s = 1.0 / math.sqrt(3.0)
        assert abs(_eval_sphere((0.6, 0.0, 0.0), 0.6)) < 1e-6
        assert abs(_eval_sphere((s, s, s), 1.0)) < 1e-6


class TestBox:
    """Tests for sd_box."""

    def test_face_distance_outside(self):
        """Test distance to a face along an axis."""
        assert abs(_eval_box((2.0, 0.0, 0.0), (1.0, 1.0, 1.0)) - 1.0) < 1e-6

    def test_edge_distance_outside(self):
        """Test Euclidean distance to an edge is exact, not a bound."""
        d = _eval_box((2.0, 2.0, 0.0), (1.0, 1.0, 1.0))
        assert abs(d - math.sqrt(2.0)) < 1e-5

    def test_corner_distance_outside(self):
        """Test Euclidean distance to a corner."""
        d = _eval_box((2.0, 3.0, 1.5), (1.0, 1.0, 1.0))
        assert abs(d - math.sqrt(1.0 + 4.0 + 0.25)) < 1e-5

    def test_inside_is_distance_to_nearest_face(self):
        """Test the interior term picks the nearest face."""
        assert abs(_eval_box((0.0, 0.0, 0.0), (1.0, 2.0, 3.0)) + 1.0) < 1e-6
        assert abs(_eval_box((0.5, 0.0, 0.0), (1.0, 1.0, 1.0)) + 0.5) < 1e-6

    def test_zero_on_surface(self):
        """Test points on a face have zero distance."""
        assert abs(_eval_box((1.0, 0.3, -0.2), (1.0, 1.0, 1.0))) < 1e-6


class TestCylinder:
    """Tests for sd_cylinder (capped, Y-aligned)."""

    def test_radial_distance(self):
        """Test distance from the side of the cylinder."""
        assert abs(_eval_cylinder((2.0, 0.0, 0.0), 0.5, 1.0) - 1.5) < 1e-6
        assert abs(_eval_cylinder((0.0, 0.5, -2.0), 0.5, 1.0) - 1.5) < 1e-6

    def test_cap_distance(self):
        """Test distance from a cap along the axis."""
        assert abs(_eval_cylinder((0.0, 3.0, 0.0), 0.5, 1.0) - 2.0) < 1e-6
        assert abs(_eval_cylinder((0.0, -3.0, 0.0), 0.5, 1.0) - 2.0) < 1e-6

    def test_rim_distance(self):
        """Test distance to the circular rim combines both excesses."""
        d = _eval_cylinder((1.5, 2.0, 0.0), 0.5, 1.0)
        assert abs(d - math.sqrt(2.0)) < 1e-5

    def test_inside(self):
        """Test interior distance picks the nearer of side and cap."""
        assert abs(_eval_cylinder((0.0, 0.0, 0.0), 0.5, 1.0) + 0.5) < 1e-6
        assert abs(_eval_cylinder((0.0, 0.9, 0.0), 0.5, 1.0) + 0.1) < 1e-5


class TestTorus:
    """Tests for sd_torus (XZ plane)."""

    def test_inside_tube(self):
        """Test the tube center is minor_radius inside."""
        assert abs(_eval_torus((1.0, 0.0, 0.0), 1.0, 0.25) + 0.25) < 1e-6
        assert abs(_eval_torus((0.0, 0.0, -1.0), 1.0, 0.25) + 0.25) < 1e-6

    def test_center_hole(self):
        """Test the center of the hole is outside the solid."""
        assert abs(_eval_torus((0.0, 0.0, 0.0), 1.0, 0.25) - 0.75) < 1e-6

    def test_above_tube(self):
        """Test distance above the tube along Y."""
        assert abs(_eval_torus((1.0, 1.0, 0.0), 1.0, 0.25) - 0.75) < 1e-6

    def test_lies_in_xz_plane(self):
        """Test the ring does not extend along Y."""
        assert _eval_torus((0.0, 1.0, 0.0), 1.0, 0.25) > 0.0
