"""Signed distance functions for the primitive shapes.

Every primitive takes a point already expressed in the primitive's local
frame plus its shape parameters, and returns a signed distance: negative
inside the solid, zero on the boundary, positive outside. Primitives carry
no color; the scene attaches one with set_color() before combining.

The box and cylinder use the same exterior/interior split:
    length(max(q, 0)) + min(max_component(q), 0)
The first term is the Euclidean distance outside the shape, the second the
(non-positive) distance to the nearest face inside it.

Example:
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     return sd_sphere(vec3(0.0, 0.0, 2.0), 1.0)  # 1.0
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import vec2, vec3


@ti.func
def sd_sphere(p: vec3, radius: ti.f32) -> ti.f32:
    """Sphere of the given radius centered at the local origin."""
    return tm.length(p) - radius


@ti.func
def sd_box(p: vec3, half_extents: vec3) -> ti.f32:
    """Exact distance to an axis-aligned box.

    Args:
        p: Sample point in the box's local frame.
        half_extents: Half of the box size along each axis.

    Returns:
        The signed Euclidean distance to the box surface.
    """
    q = ti.abs(p) - half_extents
    outside = tm.length(tm.max(q, vec3(0.0, 0.0, 0.0)))
    inside = ti.min(ti.max(q.x, ti.max(q.y, q.z)), 0.0)
    return outside + inside


@ti.func
def sd_cylinder(p: vec3, radius: ti.f32, half_height: ti.f32) -> ti.f32:
    """Capped cylinder aligned with the local Y axis.

    The radial excess (distance from the Y axis minus the radius) and the
    axial excess (|y| minus the half height) are combined exactly like the
    per-axis excess of sd_box.

    Args:
        p: Sample point in the cylinder's local frame.
        radius: Cylinder radius.
        half_height: Half of the cylinder height; the caps sit at +/- this.

    Returns:
        The signed distance to the capped cylinder.
    """
    d = ti.abs(vec2(tm.length(vec2(p.x, p.z)), p.y)) - vec2(radius, half_height)
    outside = tm.length(tm.max(d, vec2(0.0, 0.0)))
    inside = ti.min(ti.max(d.x, d.y), 0.0)
    return outside + inside


@ti.func
def sd_torus(p: vec3, major_radius: ti.f32, minor_radius: ti.f32) -> ti.f32:
    """Torus lying in the local XZ plane, centered at the origin.

    Args:
        p: Sample point in the torus's local frame.
        major_radius: Distance from the center to the middle of the tube.
        minor_radius: Radius of the tube.
    """
    q = vec2(tm.length(vec2(p.x, p.z)) - major_radius, p.y)
    return tm.length(q) - minor_radius
