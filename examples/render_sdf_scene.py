#!/usr/bin/env python3
"""Render a demo SDF scene to a PNG file.

This script plays the host application: it authors a scene function from
the geometry library, derives a camera basis from yaw and pitch, renders
one or more frames and saves the result.

Usage:
    python examples/render_sdf_scene.py [options]

Options:
    --scene NAME        One of: sphere, car, blend (default: car)
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 480)
    --ssaa N            Sub-pixel grid size: 1, 2, 4 or 8 (default: 2)
    --time SECONDS      Elapsed time of the first frame (default: 0.0)
    --frames COUNT      Number of frames, 1/30 s apart (default: 1)
    --output OUTPUT     Output file path (default: sdf_scene.png)
    --quiet             Suppress progress output

Example:
    python examples/render_sdf_scene.py --scene blend --ssaa 8 --frames 30
"""

from __future__ import annotations

import argparse
import math
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti

SCENES = ("sphere", "car", "blend")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a demo SDF scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=SCENES, default="car", help="Scene to render")
    parser.add_argument(
        "--width", type=int, default=640, help="Image width in pixels (default: 640)"
    )
    parser.add_argument(
        "--height", type=int, default=480, help="Image height in pixels (default: 480)"
    )
    parser.add_argument(
        "--ssaa",
        type=int,
        choices=(1, 2, 4, 8),
        default=2,
        help="Sub-pixel grid size (default: 2)",
    )
    parser.add_argument(
        "--time", type=float, default=0.0, help="Elapsed time of the first frame"
    )
    parser.add_argument("--frames", type=int, default=1, help="Number of frames (default: 1)")
    parser.add_argument(
        "--output",
        type=str,
        default="sdf_scene.png",
        help="Output file path (default: sdf_scene.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def camera_from_yaw_pitch(position, yaw: float, pitch: float):
    """Build an orthonormal camera basis from a position and view angles.

    Args:
        position: Eye position.
        yaw: Heading in radians, measured in the XZ plane from +X toward +Z.
        pitch: Elevation in radians, positive looking up.
    """
    from sdfmarch.camera.pinhole import CameraBasis

    forward = np.array(
        [math.cos(yaw) * math.cos(pitch), math.sin(pitch), math.sin(yaw) * math.cos(pitch)]
    )
    forward /= np.linalg.norm(forward)
    right = np.cross(forward, np.array([0.0, 1.0, 0.0]))
    right /= np.linalg.norm(right)
    up = np.cross(right, forward)

    return CameraBasis(
        position=tuple(float(x) for x in position),
        right=tuple(float(x) for x in right),
        up=tuple(float(x) for x in up),
        forward=tuple(float(x) for x in forward),
    )


def orbit_camera(distance: float, height: float):
    """Camera on the diagonal looking at the origin."""
    position = np.array([distance, height, distance])
    direction = -position / np.linalg.norm(position)
    yaw = math.atan2(direction[2], direction[0])
    pitch = math.asin(direction[1])
    return camera_from_yaw_pitch(position, yaw, pitch)


def build_scene(name: str):
    """Author one of the demo scene functions."""
    from sdfmarch.core.ray import vec3
    from sdfmarch.geometry import (
        make_sample,
        mirror_x,
        mirror_z,
        op_smooth_subtract,
        op_smooth_union,
        op_subtract,
        op_union,
        rotate_x,
        rotate_y,
        sd_box,
        sd_cylinder,
        sd_sphere,
        sd_torus,
        translate,
    )
    from sdfmarch.scene import frame_time

    @ti.func
    def sphere_scene(p):
        return make_sample(sd_sphere(p, 0.6), vec3(0.2, 0.55, 1.0))

    @ti.func
    def car_scene(p):
        lifted = translate(p, vec3(0.0, 0.4, 0.0))
        body = make_sample(sd_box(lifted, vec3(1.0, 0.2, 0.5)), vec3(0.8, 0.8, 0.8))
        cabin = make_sample(sd_box(translate(lifted, vec3(-0.1, 0.3, 0.0)), vec3(0.5, 0.15, 0.4)),
                            vec3(0.7, 0.75, 0.8))
        window = make_sample(sd_cylinder(rotate_x(translate(lifted, vec3(-0.1, 0.3, 0.0)),
                                                  -0.5 * math.pi), 0.12, 0.5),
                             vec3(0.0, 0.0, 0.0))
        # Torus stands upright after a quarter turn about X
        wheel_p = rotate_x(translate(mirror_z(mirror_x(lifted)), vec3(0.6, -0.2, 0.6)),
                           -0.5 * math.pi)
        wheels = make_sample(sd_torus(wheel_p, 0.18, 0.08), vec3(0.2, 0.2, 0.2))
        shell = op_smooth_union(body, op_subtract(cabin, window), 0.05)
        return op_union(shell, wheels)

    @ti.func
    def blend_scene(p):
        t = frame_time()
        left = make_sample(sd_sphere(translate(p, vec3(-0.5 * ti.cos(t), 0.6, 0.0)), 0.45),
                           vec3(0.95, 0.45, 0.2))
        right = make_sample(sd_sphere(translate(p, vec3(0.5 * ti.cos(t), 0.6, 0.0)), 0.45),
                            vec3(0.2, 0.55, 1.0))
        notch = make_sample(sd_box(rotate_y(translate(p, vec3(0.0, 1.05, 0.0)), t), vec3(0.2, 0.2, 0.6)),
                            vec3(1.0, 1.0, 1.0))
        return op_smooth_subtract(op_smooth_union(left, right, 0.3), notch, 0.05)

    return {"sphere": sphere_scene, "car": car_scene, "blend": blend_scene}[name]


def render_scene(
    scene: str = "car",
    width: int = 640,
    height: int = 480,
    ssaa: int = 2,
    start_time: float = 0.0,
    frames: int = 1,
    output_path: str = "sdf_scene.png",
    quiet: bool = False,
) -> Path:
    """Render the chosen scene and save the last frame.

    Args:
        scene: Name of the demo scene.
        width: Image width in pixels.
        height: Image height in pixels.
        ssaa: Sub-pixel grid size.
        start_time: Elapsed time of the first frame.
        frames: Number of frames to render, 1/30 s apart.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from sdfmarch.camera.pinhole import ViewportRect
    from sdfmarch.core.config import FrameParams, RenderConfig
    from sdfmarch.core.renderer import SdfRenderer
    from sdfmarch.preview.export import save_png

    viewport = ViewportRect(origin=(0.0, 0.0), size=(float(width), float(height)))
    config = RenderConfig().with_supersampling(ssaa)
    camera = orbit_camera(distance=2.6, height=2.0)

    if not quiet:
        print(f"Building '{scene}' scene ({width}x{height}, {ssaa}x{ssaa} SSAA)...")

    renderer = SdfRenderer(build_scene(scene), viewport, config)

    start = time.time()
    snapshots = (
        FrameParams(viewport=viewport, time=start_time + k / 30.0, camera=camera)
        for k in range(frames)
    )
    for count in renderer.render_frames(snapshots):
        if not quiet:
            elapsed = time.time() - start
            fps = count / elapsed if elapsed > 0 else 0.0
            print(f"\r  Frame {count}/{frames} - {fps:.1f} fps", end="", flush=True)

    if not quiet:
        print()

    output_file = Path(output_path)
    save_png(renderer, str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_scene(
            scene=args.scene,
            width=args.width,
            height=args.height,
            ssaa=args.ssaa,
            start_time=args.time,
            frames=args.frames,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
