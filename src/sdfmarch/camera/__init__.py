"""Camera module for viewport mapping and primary ray generation.

Components:
    pinhole: Camera basis, viewport rectangle, NDC mapping and view rays

Camera responsibilities:
    - Map screen pixels (plus sub-pixel offsets) to aspect-corrected NDC
    - Flip the vertical axis between screen and world conventions
    - Build normalized view rays from an externally supplied basis
"""

from .pinhole import (
    FOCAL_LENGTH,
    CameraBasis,
    ViewportRect,
    camera_ray,
    get_camera_info,
    get_camera_position,
    get_ray,
    pixel_angle,
    pixel_position,
    pixel_to_ndc,
    setup_camera,
    setup_viewport,
)

__all__ = [
    "FOCAL_LENGTH",
    "CameraBasis",
    "ViewportRect",
    "setup_camera",
    "setup_viewport",
    "get_camera_info",
    "pixel_to_ndc",
    "pixel_position",
    "camera_ray",
    "get_ray",
    "pixel_angle",
    "get_camera_position",
]
