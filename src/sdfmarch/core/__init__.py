"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    config: RenderConfig, SupersampleLevel and the FrameParams snapshot
    marcher: Sphere tracer and central-difference normal estimator
    shading: Local lighting model and ground-grid background
    integrator: Render target and the supersampling render kernels
    renderer: SdfRenderer, the per-scene frame renderer

The integrator and renderer build kernels around an injected scene
function; everything else is scene-independent.
"""

from .ray import (
    Ray,
    clamp01,
    cross,
    dot,
    length,
    make_ray,
    mix,
    normalize,
    ray_at,
    reflect,
    safe_normalize,
    vec2,
    vec3,
)

# Note: config, integrator and renderer are NOT imported here to avoid circular
# imports (they depend on the camera, which depends on ray). Import directly:
#   from sdfmarch.core.config import RenderConfig
#   from sdfmarch.core.renderer import SdfRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "length",
    "dot",
    "cross",
    "normalize",
    "safe_normalize",
    "reflect",
    "mix",
    "clamp01",
]
