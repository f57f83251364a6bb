"""Ray data structure and vector utilities for the ray marcher.

All helpers are Taichi functions so they can be inlined into the tracing
and shading kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 3.5)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 2.9)  # Point 2.9 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3

# Smallest gradient magnitude accepted by safe_normalize
NORMALIZE_FLOOR = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Callers normalize
            before tracing; the marcher does not renormalize.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The input must be non-zero. Use safe_normalize() for gradients that can
    vanish.
    """
    return tm.normalize(v)


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector, clamping its magnitude to NORMALIZE_FLOOR.

    A zero vector stays zero instead of producing NaN, which keeps the
    renderer stable at creases and other non-smooth points of a distance
    field.

    Args:
        v: The input vector.

    Returns:
        v divided by max(length(v), NORMALIZE_FLOOR).
    """
    return v / ti.max(tm.length(v), NORMALIZE_FLOOR)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def mix(x, y, a: ti.f32):
    """Linear blend x * (1 - a) + y * a for scalars or vectors."""
    return x * (1.0 - a) + y * a


@ti.func
def clamp01(x: ti.f32) -> ti.f32:
    """Clamp a scalar to [0, 1]."""
    return ti.min(ti.max(x, 0.0), 1.0)
