"""Sphere tracer and normal estimator.

Both routines are bound to one scene function. The factories below close
over the scene function and return Taichi functions, so the compiled
kernels call the scene directly with no indirection.

Sphere tracing walks a ray by the unsigned distance estimate until it is
within hit_epsilon of the surface (HIT), travels past max_distance (MISS),
or exhausts max_steps (also MISS). The absolute value lets rays that start
inside a solid march out to its boundary.

Example:
    >>> trace = make_sphere_tracer(my_scene)
    >>> normal_at = make_normal_estimator(my_scene)
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     result = trace(vec3(0.0, 0.0, 3.5), vec3(0.0, 0.0, -1.0), 128, 1e-4, 100.0)
    ...     return result.t
"""

import taichi as ti

from sdfmarch.core.ray import safe_normalize, vec3
from sdfmarch.scene.contract import SceneFunction, check_scene_function


@ti.dataclass
class MarchResult:
    """Outcome of tracing one ray.

    Attributes:
        hit: 1 if the ray reached the surface, 0 otherwise.
        t: Distance traveled along the ray. On a hit this replaces the
            residual signed distance of the final sample.
        color: Material color of the final sample. Only valid if hit == 1.
        steps: Number of scene evaluations performed.
    """

    hit: ti.i32
    t: ti.f32
    color: vec3
    steps: ti.i32


def make_sphere_tracer(scene_fn: SceneFunction):
    """Create a sphere tracer for a scene function.

    Args:
        scene_fn: Taichi function mapping a point to an SdfSample.

    Returns:
        A Taichi function
        trace(origin, direction, max_steps, hit_epsilon, max_distance)
        returning a MarchResult.
    """
    check_scene_function(scene_fn)

    @ti.func
    def sphere_trace(
        origin: vec3,
        direction: vec3,
        max_steps: ti.i32,
        hit_epsilon: ti.f32,
        max_distance: ti.f32,
    ) -> MarchResult:
        """March along a ray to the first surface crossing.

        Args:
            origin: Ray origin.
            direction: Unit ray direction.
            max_steps: Iteration cap; exceeding it is a miss.
            hit_epsilon: Surface proximity that counts as a hit.
            max_distance: Travel distance beyond which the ray misses.

        Returns:
            A MarchResult; t is the distance traveled.
        """
        t = 0.0
        hit = 0
        steps = 0
        color = vec3(0.0, 0.0, 0.0)

        # Active flag instead of break so the loop stays bounded and uniform
        active = 1

        for _ in range(max_steps):
            if active == 1:
                sample = scene_fn(origin + direction * t)
                steps += 1
                if ti.abs(sample.distance) < hit_epsilon:
                    hit = 1
                    color = sample.color
                    active = 0
                elif t > max_distance:
                    active = 0
                else:
                    t += ti.abs(sample.distance)

        return MarchResult(hit=hit, t=t, color=color, steps=steps)

    return sphere_trace


def make_normal_estimator(scene_fn: SceneFunction):
    """Create a central-difference normal estimator for a scene function.

    Each estimate costs six scene evaluations and should only be computed
    for rays that hit.

    Args:
        scene_fn: Taichi function mapping a point to an SdfSample.

    Returns:
        A Taichi function estimate_normal(p, epsilon) returning a unit vec3.
    """
    check_scene_function(scene_fn)

    @ti.func
    def estimate_normal(p: vec3, epsilon: ti.f32) -> vec3:
        """Gradient of the distance field at p, normalized.

        The gradient magnitude is floored before normalizing, so a vanishing
        gradient at a crease yields a zero vector rather than NaN.
        """
        ex = vec3(epsilon, 0.0, 0.0)
        ey = vec3(0.0, epsilon, 0.0)
        ez = vec3(0.0, 0.0, epsilon)
        gradient = vec3(
            scene_fn(p + ex).distance - scene_fn(p - ex).distance,
            scene_fn(p + ey).distance - scene_fn(p - ey).distance,
            scene_fn(p + ez).distance - scene_fn(p - ez).distance,
        )
        return safe_normalize(gradient)

    return estimate_normal
