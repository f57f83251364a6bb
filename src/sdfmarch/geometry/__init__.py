"""Geometry module for implicit-surface building blocks.

Components:
    primitives: Signed distance functions (sphere, box, cylinder, torus)
    transforms: Rotations, translation and mirroring of sample points
    csg: SdfSample and the color-tagged CSG combinators

Scene functions are composed from these pieces:
    sample = op_union(make_sample(sd_sphere(p, r), color), ...)
"""

from .csg import (
    SdfSample,
    make_sample,
    op_intersect,
    op_smooth_subtract,
    op_smooth_union,
    op_subtract,
    op_union,
    set_color,
)
from .primitives import sd_box, sd_cylinder, sd_sphere, sd_torus
from .transforms import (
    mirror_x,
    mirror_y,
    mirror_z,
    rotate_x,
    rotate_y,
    rotate_z,
    translate,
)

__all__ = [
    "SdfSample",
    "make_sample",
    "set_color",
    "op_union",
    "op_smooth_union",
    "op_subtract",
    "op_smooth_subtract",
    "op_intersect",
    "sd_sphere",
    "sd_box",
    "sd_cylinder",
    "sd_torus",
    "rotate_x",
    "rotate_y",
    "rotate_z",
    "translate",
    "mirror_x",
    "mirror_y",
    "mirror_z",
]
