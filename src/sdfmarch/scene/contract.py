"""Scene-function contract and per-frame scene parameters.

A scene function is a Taichi function with the signature

    map(p: vec3) -> SdfSample

composed from the primitives, transforms and combinators in
sdfmarch.geometry. It must be deterministic for a fixed frame snapshot and
must not write to any field. The renderer treats it as an opaque strategy:
it calls it, reads distance and color, and never inspects its body.

Animated scenes read the elapsed time through frame_time(), which the
renderer publishes once per frame before the render kernel launches.

Example:
    >>> @ti.func
    ... def pulsing_sphere(p):
    ...     radius = 0.6 + 0.1 * ti.sin(frame_time())
    ...     return make_sample(sd_sphere(p, radius), vec3(0.2, 0.55, 1.0))
    >>> renderer = SdfRenderer(pulsing_sphere, viewport)
"""

import logging
from collections.abc import Callable
from typing import Any

import taichi as ti

logger = logging.getLogger(__name__)

# Type alias for injected scene functions (Taichi functions: vec3 -> SdfSample)
SceneFunction = Callable[..., Any]

# Elapsed time snapshot for the current frame (read-only inside kernels)
_frame_time = ti.field(dtype=ti.f32, shape=())


def set_frame_time(time: float) -> None:
    """Publish the elapsed time for the next frame.

    Args:
        time: Elapsed time in seconds, as owned by the host.
    """
    _frame_time[None] = time


def get_frame_time() -> float:
    """Get the currently published elapsed time."""
    return float(_frame_time[None])


@ti.func
def frame_time() -> ti.f32:
    """Elapsed time of the frame being rendered, for use in scene functions."""
    return _frame_time[None]


def check_scene_function(scene_fn: Any) -> SceneFunction:
    """Check that scene_fn can be plugged into the renderer.

    Only the calling convention is checked; the composition of the scene is
    never inspected.

    Args:
        scene_fn: The candidate scene function.

    Returns:
        The same function, for chaining.

    Raises:
        TypeError: If scene_fn is not callable.
    """
    if not callable(scene_fn):
        raise TypeError(f"Scene function must be callable, got {type(scene_fn).__name__}")

    if not getattr(scene_fn, "_is_taichi_function", False):
        logger.warning(
            "Scene function %r is not decorated with @ti.func; kernel compilation may fail",
            getattr(scene_fn, "__name__", scene_fn),
        )
    return scene_fn
