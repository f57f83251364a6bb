"""Constructive solid geometry combinators over color-tagged samples.

Combinators operate on SdfSample pairs rather than raw distances so the
material color follows whichever branch geometrically wins. The smooth
variants use the polynomial smooth minimum with blend radius k:

    h = clamp(0.5 + 0.5 * (b.d - a.d) / k, 0, 1)
    d = mix(b.d, a.d, h) - k * h * (1 - h)

Preconditions:
    k > 0 for the smooth variants. k == 0 divides by zero; the combinators
    do not check it since they sit in the innermost marching loop.

Exact distance ties in union() and intersect() resolve to either operand.
Nothing may depend on which one.

Example:
    >>> @ti.func
    ... def scene(p):
    ...     body = make_sample(sd_box(p, vec3(1.0, 0.2, 0.5)), vec3(0.8, 0.8, 0.8))
    ...     ball = make_sample(sd_sphere(p, 0.4), vec3(0.9, 0.2, 0.2))
    ...     return op_smooth_union(body, ball, 0.1)
"""

import taichi as ti

from sdfmarch.core.ray import clamp01, mix, vec3


@ti.dataclass
class SdfSample:
    """Result of evaluating a distance field at one point.

    Attributes:
        distance: Signed distance; negative inside, positive outside.
        color: Material color of the nearest surface on this branch. Only
            meaningful for branches a combinator selects as nearest.
    """

    distance: ti.f32
    color: vec3


@ti.func
def make_sample(distance: ti.f32, color: vec3) -> SdfSample:
    """Create an SdfSample from a distance and a color."""
    return SdfSample(distance=distance, color=color)


@ti.func
def set_color(sample: SdfSample, color: vec3) -> SdfSample:
    """Return a copy of sample with its color replaced."""
    return SdfSample(distance=sample.distance, color=color)


@ti.func
def op_union(a: SdfSample, b: SdfSample) -> SdfSample:
    """Hard union: the sample with the smaller distance, unchanged."""
    d = a.distance
    c = a.color
    if b.distance < a.distance:
        d = b.distance
        c = b.color
    return SdfSample(distance=d, color=c)


@ti.func
def op_smooth_union(a: SdfSample, b: SdfSample, k: ti.f32) -> SdfSample:
    """Smooth union blending both distance and color over radius k.

    Converges to op_union() as k approaches zero and stays continuous
    where a.distance crosses b.distance.

    Args:
        a: First operand.
        b: Second operand.
        k: Blend radius, strictly positive.

    Returns:
        The blended sample. The color uses the same weight h as the distance.
    """
    h = clamp01(0.5 + 0.5 * (b.distance - a.distance) / k)
    d = mix(b.distance, a.distance, h) - k * h * (1.0 - h)
    c = mix(b.color, a.color, h)
    return SdfSample(distance=d, color=c)


@ti.func
def op_subtract(a: SdfSample, b: SdfSample) -> SdfSample:
    """Carve b out of a. The result always keeps a's color."""
    return SdfSample(distance=ti.max(a.distance, -b.distance), color=a.color)


@ti.func
def op_smooth_subtract(a: SdfSample, b: SdfSample, k: ti.f32) -> SdfSample:
    """Smoothly carve b out of a over radius k, keeping a's color."""
    h = clamp01(0.5 - 0.5 * (b.distance + a.distance) / k)
    d = mix(a.distance, -b.distance, h) + k * h * (1.0 - h)
    return SdfSample(distance=d, color=a.color)


@ti.func
def op_intersect(a: SdfSample, b: SdfSample) -> SdfSample:
    """Hard intersection: the sample with the larger distance, unchanged."""
    d = a.distance
    c = a.color
    if b.distance > a.distance:
        d = b.distance
        c = b.color
    return SdfSample(distance=d, color=c)

