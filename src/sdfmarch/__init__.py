"""Taichi-based signed-distance-field ray marcher.

This package renders scenes described as implicit surfaces, with support for:
- Distance-only primitives (sphere, box, capped cylinder, torus)
- Color-tagged CSG combinators with smooth blending
- Sphere tracing with bounded step counts
- Local lighting (diffuse, specular, fresnel rim) and a ground-plane grid
- Supersampled anti-aliasing on an N x N sub-pixel grid

Subpackages:
    core: Vector utilities, sphere tracer, shading, render kernels
    geometry: Primitive distance functions, transforms, CSG combinators
    camera: Camera basis, viewport mapping and primary ray generation
    scene: Scene-function contract and per-frame scene parameters
    preview: Image export helpers for the host application
"""

__version__ = "0.1.0"
