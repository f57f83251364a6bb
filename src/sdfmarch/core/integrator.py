"""Render kernels: sphere tracing, shading and supersampled accumulation.

For every output pixel the render kernel:
    1. Partitions the pixel into an N x N grid and offsets each sub-sample
       by (cell + 0.5) / N - 0.5 pixel units.
    2. Builds the sub-sample's view ray from the camera basis.
    3. Sphere-traces the ray against the scene function.
    4. On a hit, estimates the normal and shades the surface; on a miss,
       shades the background and ground grid.
    5. Writes the unweighted mean of the N * N colors to the color buffer.

Pixels are independent: the outer loop over the image is Taichi's parallel
for, and each sub-sample only reads the per-frame snapshot (camera,
viewport, frame time, config) published to fields before launch. Summation
order inside a pixel does not affect the result beyond float rounding.

The kernels close over one scene function, so they are built per scene by
build_render_kernels() and compiled on first launch.

Example:
    >>> kernels = build_render_kernels(my_scene)
    >>> setup_render_target(640, 480)
    >>> setup_render_config(RenderConfig())
    >>> kernels.render(640, 480)
"""

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from sdfmarch.camera.pinhole import camera_ray, get_ray, pixel_angle
from sdfmarch.core.config import RenderConfig
from sdfmarch.core.marcher import make_normal_estimator, make_sphere_tracer
from sdfmarch.core.ray import vec2, vec3
from sdfmarch.core.shading import shade_miss, shade_surface
from sdfmarch.scene.contract import SceneFunction, check_scene_function

logger = logging.getLogger(__name__)

# =============================================================================
# Render Configuration (per-frame snapshot)
# =============================================================================

_max_march_steps = ti.field(dtype=ti.i32, shape=())
_hit_epsilon = ti.field(dtype=ti.f32, shape=())
_max_distance = ti.field(dtype=ti.f32, shape=())
_normal_epsilon = ti.field(dtype=ti.f32, shape=())
_supersample_grid = ti.field(dtype=ti.i32, shape=())


def setup_render_config(config: RenderConfig) -> None:
    """Publish tracer and sampling parameters for the next frame."""
    _max_march_steps[None] = config.max_march_steps
    _hit_epsilon[None] = config.hit_epsilon
    _max_distance[None] = config.max_distance
    _normal_epsilon[None] = config.normal_epsilon
    _supersample_grid[None] = config.supersample_grid


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Final pixel colors, indexed [column, row] with row 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Renderer whose frame currently occupies the color buffer
_render_target_owner = None


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the color buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()
    logger.debug("Render target set to %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Clear the buffer and mark the render target as uninitialized."""
    global _render_target_owner
    clear_render_target()
    _render_target_initialized[None] = 0
    _render_target_owner = None


def claim_render_target(owner: object, width: int, height: int) -> None:
    """Resize the render target for owner and record it as the buffer holder.

    There is a single preallocated color buffer, so a claim invalidates
    whatever frame a previous owner left in it.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    global _render_target_owner
    setup_render_target(width, height)
    _render_target_owner = owner


def render_target_owner() -> object:
    """Get the object that last claimed the render target (or None)."""
    return _render_target_owner


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the full preallocated color buffer.

    Use get_image_dimensions() to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Returns:
        Array of shape (height, width, 3), row 0 at the top, values clamped
        to [0, 1]. Colors are otherwise used as-is (no tonemapping).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then bottom-left origin to top-left
    image = np.flipud(np.transpose(image, (1, 0, 2)))

    return np.clip(image, 0.0, 1.0).astype(np.float32)


# =============================================================================
# Render Kernels
# =============================================================================


@dataclass(frozen=True)
class RenderKernels:
    """Compiled entry points bound to one scene function.

    Attributes:
        scene_fn: The scene function the kernels were built for.
        render: Kernel render(width, height) filling the color buffer.
        shade_pixel: Kernel shade_pixel(i, j, height, ox, oy) -> vec3 for one
            sub-sample of one pixel.
        trace_ndc: Kernel trace_ndc(u, v) writing hit, t, steps, normal and
            color of one view ray to the debug fields.
    """

    scene_fn: SceneFunction
    render: Any
    shade_pixel: Any
    trace_ndc: Any


# Outputs of the trace_ndc debug kernel
_debug_hit = ti.field(dtype=ti.i32, shape=())
_debug_t = ti.field(dtype=ti.f32, shape=())
_debug_steps = ti.field(dtype=ti.i32, shape=())
_debug_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_debug_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def get_debug_trace() -> tuple[bool, float, int]:
    """(hit, t, steps) written by the last trace_ndc call."""
    return bool(_debug_hit[None]), float(_debug_t[None]), int(_debug_steps[None])


def get_debug_normal() -> tuple[float, float, float]:
    """Normal written by the last trace_ndc call (zero on a miss)."""
    n = _debug_normal[None]
    return float(n[0]), float(n[1]), float(n[2])


def get_debug_color() -> tuple[float, float, float]:
    """Material color written by the last trace_ndc call (zero on a miss)."""
    c = _debug_color[None]
    return float(c[0]), float(c[1]), float(c[2])


def build_render_kernels(scene_fn: SceneFunction) -> RenderKernels:
    """Build the render kernels for a scene function.

    Args:
        scene_fn: Taichi function mapping a point to an SdfSample.

    Returns:
        The kernels, bound to scene_fn. Compilation happens on first call.

    Raises:
        TypeError: If scene_fn is not callable.
    """
    check_scene_function(scene_fn)
    sphere_trace = make_sphere_tracer(scene_fn)
    estimate_normal = make_normal_estimator(scene_fn)

    @ti.func
    def shade_ray(origin: vec3, direction: vec3) -> vec3:
        """Trace one ray and shade the result."""
        march = sphere_trace(
            origin,
            direction,
            _max_march_steps[None],
            _hit_epsilon[None],
            _max_distance[None],
        )

        color = vec3(0.0, 0.0, 0.0)
        if march.hit == 1:
            p = origin + direction * march.t
            n = estimate_normal(p, _normal_epsilon[None])
            color = shade_surface(p, n, -direction, march.color)
        else:
            color = shade_miss(origin, direction, _max_distance[None], pixel_angle())
        return color

    @ti.func
    def shade_sample(pixel_i: ti.i32, pixel_j: ti.i32, height: ti.i32, offset: vec2) -> vec3:
        """Shade one sub-sample of one pixel."""
        ray = get_ray(pixel_i, pixel_j, height, offset)
        return shade_ray(ray.origin, ray.direction)

    @ti.kernel
    def render(width: ti.i32, height: ti.i32):
        """Render every pixel as the mean of its N x N sub-samples."""
        for i, j in ti.ndrange(width, height):
            n = _supersample_grid[None]
            inv_n = 1.0 / ti.cast(n, ti.f32)
            total = vec3(0.0, 0.0, 0.0)

            for sy in range(n):
                for sx in range(n):
                    cell = vec2(ti.cast(sx, ti.f32), ti.cast(sy, ti.f32))
                    offset = (cell + 0.5) * inv_n - 0.5
                    total += shade_sample(i, j, height, offset)

            _color_buffer[i, j] = total * (inv_n * inv_n)

    @ti.kernel
    def shade_pixel(
        pixel_i: ti.i32, pixel_j: ti.i32, height: ti.i32, offset_x: ti.f32, offset_y: ti.f32
    ) -> vec3:
        """Shade a single sub-sample; used for testing and debugging."""
        return shade_sample(pixel_i, pixel_j, height, vec2(offset_x, offset_y))

    @ti.kernel
    def trace_ndc(u: ti.f32, v: ti.f32):
        """Trace the view ray through (u, v) into the debug fields."""
        ray = camera_ray(vec2(u, v))
        march = sphere_trace(
            ray.origin,
            ray.direction,
            _max_march_steps[None],
            _hit_epsilon[None],
            _max_distance[None],
        )

        normal = vec3(0.0, 0.0, 0.0)
        color = vec3(0.0, 0.0, 0.0)
        if march.hit == 1:
            normal = estimate_normal(ray.origin + ray.direction * march.t, _normal_epsilon[None])
            color = march.color
        _debug_normal[None] = normal
        _debug_color[None] = color
        _debug_hit[None] = march.hit
        _debug_t[None] = march.t
        _debug_steps[None] = march.steps

    logger.debug("Built render kernels for scene %s", getattr(scene_fn, "__name__", scene_fn))
    return RenderKernels(
        scene_fn=scene_fn,
        render=render,
        shade_pixel=shade_pixel,
        trace_ndc=trace_ndc,
    )
