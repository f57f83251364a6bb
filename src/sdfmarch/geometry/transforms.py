"""Point transforms applied before evaluating a primitive.

A transform maps a world-space sample point into a primitive's local frame.
Nothing is accumulated into a matrix: each call is an independent map, and
transforms compose by nesting calls, innermost applied last:

    sd_torus(rotate_x(translate(p, offset), angle), 0.4, 0.1)

Because these act on the sample point, they move the frame rather than the
shape. Placing a shape at `offset` means evaluating it at translate(p, offset),
and rotating a shape by theta means evaluating it at rotate_*(p, -theta).
"""

import taichi as ti

from sdfmarch.core.ray import vec3


@ti.func
def rotate_x(p: vec3, angle: ti.f32) -> vec3:
    """Rotate a point about the X axis by angle radians."""
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(p.x, c * p.y - s * p.z, s * p.y + c * p.z)


@ti.func
def rotate_y(p: vec3, angle: ti.f32) -> vec3:
    """Rotate a point about the Y axis by angle radians."""
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(c * p.x + s * p.z, p.y, -s * p.x + c * p.z)


@ti.func
def rotate_z(p: vec3, angle: ti.f32) -> vec3:
    """Rotate a point about the Z axis by angle radians."""
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(c * p.x - s * p.y, s * p.x + c * p.y, p.z)


@ti.func
def translate(p: vec3, offset: vec3) -> vec3:
    """Move the local frame so that its origin sits at offset."""
    return p - offset


@ti.func
def mirror_x(p: vec3) -> vec3:
    """Fold space across the YZ plane, duplicating geometry at -x."""
    return vec3(ti.abs(p.x), p.y, p.z)


@ti.func
def mirror_y(p: vec3) -> vec3:
    """Fold space across the XZ plane, duplicating geometry at -y."""
    return vec3(p.x, ti.abs(p.y), p.z)


@ti.func
def mirror_z(p: vec3) -> vec3:
    """Fold space across the XY plane, duplicating geometry at -z."""
    return vec3(p.x, p.y, ti.abs(p.z))
