"""Local lighting model and ground-grid background.

Surface shading for a hit at point p with normal n, view direction v
(pointing back toward the eye) and material color c:

    l        = normalize(LIGHT_POSITION - p)
    diffuse  = max(dot(n, l), 0)
    specular = max(dot(v, reflect(-l, n)), 0) ** SHININESS
    fresnel  = (1 - max(dot(n, v), 0)) ** 5 * RIM_STRENGTH
    color    = c * (diffuse + AMBIENT) + SPECULAR_COLOR * specular
               + RIM_COLOR * fresnel

Rays that miss see a vertical background gradient with an analytic grid on
the plane y = 0 blended over it. Grid lines are measured in units of the
pixel footprint on the plane so they keep a constant on-screen width under
perspective, fade with exp(-t * GRID_DECAY), and never exceed
GRID_ALPHA_MAX opacity. The lines x = 0 and z = 0 are tinted as axes.
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import clamp01, mix, reflect, vec3

# =============================================================================
# Lighting Constants
# =============================================================================

LIGHT_POSITION = vec3(4.0, 6.0, 5.0)

# Floor on lit color so grazing and unlit surfaces never go pure black
AMBIENT = 0.1

SHININESS = 32.0
SPECULAR_COLOR = vec3(0.5, 0.5, 0.5)

RIM_STRENGTH = 0.25
RIM_COLOR = vec3(1.0, 1.0, 1.0)

# =============================================================================
# Background and Ground Grid Constants
# =============================================================================

BACKGROUND_TOP = vec3(0.32, 0.36, 0.42)
BACKGROUND_BOTTOM = vec3(0.12, 0.13, 0.15)

GRID_COLOR = vec3(0.6, 0.6, 0.6)
AXIS_X_COLOR = vec3(0.85, 0.25, 0.25)  # line z == 0
AXIS_Z_COLOR = vec3(0.25, 0.45, 0.9)  # line x == 0

GRID_SPACING = 1.0
GRID_LINE_WIDTH = 1.0  # in pixels
GRID_ALPHA_MAX = 0.3
GRID_DECAY = 0.08

# Rays flatter than this never reach the plane in a useful way
GRID_MIN_SLOPE = 1e-4
GRID_MIN_FOOTPRINT = 1e-5


@ti.dataclass
class GridSample:
    """Ground-grid contribution for one ray.

    Attributes:
        alpha: Opacity of the grid over the background, in [0, GRID_ALPHA_MAX].
        color: Line color (plain grid or an axis tint).
        t_plane: Distance to the plane, or -1 if the ray does not reach it.
    """

    alpha: ti.f32
    color: vec3
    t_plane: ti.f32


@ti.func
def shade_surface(p: vec3, n: vec3, view_dir: vec3, albedo: vec3) -> vec3:
    """Shade a surface hit.

    Args:
        p: Hit point.
        n: Unit surface normal.
        view_dir: Unit vector from the hit point toward the eye.
        albedo: Material color from the scene function.

    Returns:
        The lit color (not tonemapped).
    """
    light_dir = tm.normalize(LIGHT_POSITION - p)

    diffuse = ti.max(tm.dot(n, light_dir), 0.0)
    specular = ti.pow(ti.max(tm.dot(view_dir, reflect(-light_dir, n)), 0.0), SHININESS)
    fresnel = ti.pow(1.0 - ti.max(tm.dot(n, view_dir), 0.0), 5.0) * RIM_STRENGTH

    return albedo * (diffuse + AMBIENT) + SPECULAR_COLOR * specular + RIM_COLOR * fresnel


@ti.func
def ground_grid(
    origin: vec3, direction: vec3, max_distance: ti.f32, pixel_angle: ti.f32
) -> GridSample:
    """Intersect a ray with the plane y = 0 and evaluate the grid there.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.
        max_distance: Plane hits at or beyond this distance are ignored.
        pixel_angle: Angle subtended by one pixel, used to size the lines.

    Returns:
        A GridSample; alpha is zero when the plane is not hit in
        (0, max_distance).
    """
    alpha = 0.0
    color = GRID_COLOR
    t_plane = -1.0

    if ti.abs(direction.y) > GRID_MIN_SLOPE:
        t = -origin.y / direction.y
        if t > 0.0 and t < max_distance:
            t_plane = t
            hit = origin + direction * t

            # World-space size of one pixel on the plane, stretched at grazing angles
            footprint = ti.max(t * pixel_angle / ti.abs(direction.y), GRID_MIN_FOOTPRINT)
            width = footprint * GRID_LINE_WIDTH / GRID_SPACING

            cx = hit.x / GRID_SPACING
            cz = hit.z / GRID_SPACING
            line_x = ti.abs(tm.fract(cx - 0.5) - 0.5) / width
            line_z = ti.abs(tm.fract(cz - 0.5) - 0.5) / width
            line = 1.0 - ti.min(ti.min(line_x, line_z), 1.0)

            fade = ti.exp(-t * GRID_DECAY)
            alpha = GRID_ALPHA_MAX * line * fade

            if ti.abs(cx) < width:
                color = AXIS_Z_COLOR
            elif ti.abs(cz) < width:
                color = AXIS_X_COLOR

    return GridSample(alpha=alpha, color=color, t_plane=t_plane)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical gradient from BACKGROUND_BOTTOM to BACKGROUND_TOP."""
    return mix(BACKGROUND_BOTTOM, BACKGROUND_TOP, clamp01(0.5 + 0.5 * direction.y))


@ti.func
def shade_miss(origin: vec3, direction: vec3, max_distance: ti.f32, pixel_angle: ti.f32) -> vec3:
    """Color of a ray that hit nothing: background with the grid blended on top."""
    grid = ground_grid(origin, direction, max_distance, pixel_angle)
    return mix(background_color(direction), grid.color, grid.alpha)
