"""Pinhole camera: viewport mapping and primary ray generation.

The camera consumes an already-resolved orthonormal basis (position, right,
up, forward). Pose computation belongs to the host; the basis is not
re-orthonormalized here.

Pixel to ray mapping:
    1. A screen-space pixel position (y grows downward) is mapped into
       normalized device coordinates relative to the viewport rectangle:
           uv = ((pixel - origin) / size * 2 - 1) * (aspect, -1)
       so u spans [-aspect, aspect] left to right and v spans [-1, 1]
       bottom to top.
    2. The view ray is normalize(u * right + v * up + FOCAL_LENGTH * forward)
       starting at the camera position.

Camera and viewport state live in 0-D Taichi fields written once per frame
from Python, before any kernel reads them.

Example:
    >>> setup_camera(CameraBasis(position=(0.0, 0.0, 3.5)))
    >>> setup_viewport(ViewportRect(origin=(0.0, 0.0), size=(640.0, 480.0)))
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(320, 240, 480, vec2(0.0, 0.0))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import Ray, make_ray, vec2, vec3

# Distance from the eye to the image plane, in units of half the viewport height
FOCAL_LENGTH = 1.8

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraBasis:
    """Camera position and orthonormal orientation.

    The defaults describe the fixed camera: three and a half units up the
    +Z axis, looking down -Z with +Y up.

    Attributes:
        position: Eye position in world space.
        right: Unit vector pointing right in the image.
        up: Unit vector pointing up in the image.
        forward: Unit viewing direction.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 3.5)
    right: tuple[float, float, float] = (1.0, 0.0, 0.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    forward: tuple[float, float, float] = (0.0, 0.0, -1.0)


@dataclass(frozen=True)
class ViewportRect:
    """Screen-space rectangle the renderer draws into.

    Attributes:
        origin: Top-left corner in screen pixels.
        size: Width and height in screen pixels.
    """

    origin: tuple[float, float] = (0.0, 0.0)
    size: tuple[float, float] = (512.0, 512.0)

    def __post_init__(self) -> None:
        if self.size[0] <= 0.0 or self.size[1] <= 0.0:
            raise ValueError(f"Viewport size must be positive, got {self.size}")

    @property
    def aspect(self) -> float:
        """Width divided by height."""
        return self.size[0] / self.size[1]

    @property
    def pixel_dimensions(self) -> tuple[int, int]:
        """Width and height in whole pixels (at least 1 each)."""
        return max(1, int(round(self.size[0]))), max(1, int(round(self.size[1])))


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())

_viewport_origin = ti.Vector.field(2, dtype=ti.f32, shape=())
_viewport_size = ti.Vector.field(2, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per frame)
# =============================================================================


def setup_camera(basis: CameraBasis) -> None:
    """Publish the camera basis for the next frame.

    Args:
        basis: Camera position and orientation. Orthonormality is the
            caller's responsibility.
    """
    _camera_position[None] = list(basis.position)
    _camera_right[None] = list(basis.right)
    _camera_up[None] = list(basis.up)
    _camera_forward[None] = list(basis.forward)


def setup_viewport(viewport: ViewportRect) -> None:
    """Publish the viewport rectangle used for NDC mapping."""
    _viewport_origin[None] = list(viewport.origin)
    _viewport_size[None] = list(viewport.size)


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera and viewport state for debugging.

    Returns:
        Dictionary with position, right, up, forward, viewport_origin and
        viewport_size.
    """
    return {
        "position": tuple(float(x) for x in _camera_position[None]),
        "right": tuple(float(x) for x in _camera_right[None]),
        "up": tuple(float(x) for x in _camera_up[None]),
        "forward": tuple(float(x) for x in _camera_forward[None]),
        "viewport_origin": tuple(float(x) for x in _viewport_origin[None]),
        "viewport_size": tuple(float(x) for x in _viewport_size[None]),
    }


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def pixel_to_ndc(pixel_pos: vec2) -> vec2:
    """Map a screen-space position to aspect-corrected device coordinates.

    Args:
        pixel_pos: Position in screen pixels, y growing downward.

    Returns:
        (u, v) with v flipped so that +v points up in the world.
    """
    rect_min = _viewport_origin[None]
    rect_size = _viewport_size[None]
    aspect = rect_size.x / rect_size.y
    uv = (pixel_pos - rect_min) / rect_size * 2.0 - 1.0
    return uv * vec2(aspect, -1.0)


@ti.func
def pixel_position(pixel_i: ti.i32, pixel_j: ti.i32, height: ti.i32, offset: vec2) -> vec2:
    """Screen position of a sub-pixel sample.

    Render buffers index rows bottom-up (j = 0 is the bottom row) while
    screen space grows downward, so the row is flipped here.

    Args:
        pixel_i: Column index (0 = left).
        pixel_j: Buffer row index (0 = bottom).
        height: Buffer height in pixels.
        offset: Sub-pixel offset in pixel units, each component in
            [-0.5, 0.5).
    """
    row = ti.cast(height - 1 - pixel_j, ti.f32)
    col = ti.cast(pixel_i, ti.f32)
    return _viewport_origin[None] + vec2(col + 0.5, row + 0.5) + offset


@ti.func
def camera_ray(uv: vec2) -> Ray:
    """Build the view ray through device coordinates uv."""
    direction = tm.normalize(
        uv.x * _camera_right[None] + uv.y * _camera_up[None] + FOCAL_LENGTH * _camera_forward[None]
    )
    return make_ray(_camera_position[None], direction)


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, height: ti.i32, offset: vec2) -> Ray:
    """Generate the view ray for one sub-sample of a pixel.

    Args:
        pixel_i: Column index (0 = left).
        pixel_j: Buffer row index (0 = bottom).
        height: Buffer height in pixels.
        offset: Sub-pixel offset in pixel units.

    Returns:
        A normalized ray from the camera position through the sample.
    """
    return camera_ray(pixel_to_ndc(pixel_position(pixel_i, pixel_j, height, offset)))


@ti.func
def pixel_angle() -> ti.f32:
    """Approximate angle subtended by one pixel, in radians.

    One pixel spans 2 / height device units, and device units sit
    FOCAL_LENGTH away from the eye.
    """
    return 2.0 / (_viewport_size[None].y * FOCAL_LENGTH)


@ti.func
def get_camera_position() -> vec3:
    """Get the camera position in world space."""
    return _camera_position[None]
