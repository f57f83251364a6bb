"""Preview module: host-side output helpers.

Components:
    export: PNG export, uint8/RGBA conversion, image comparison

Window management and interactive editing belong to the host application;
this module only turns rendered buffers into files and arrays.
"""

from sdfmarch.preview.export import (
    add_alpha,
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "add_alpha",
    "compute_rmse",
]
