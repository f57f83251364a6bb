"""Frame renderer wrapping the render kernels for one scene.

SdfRenderer owns the render target size and the kernels compiled for its
scene function. Each frame publishes an immutable FrameParams snapshot
(viewport, camera, time) and the RenderConfig to Taichi fields, then runs
the render kernel over every pixel in parallel.

A frame is also the unit of cancellation: render_frames() renders one
snapshot per iteration, so a host that stops iterating simply discards
the remaining frames.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from sdfmarch.core.renderer import SdfRenderer
    >>>
    >>> renderer = SdfRenderer(my_scene, ViewportRect(size=(640.0, 480.0)))
    >>> renderer.render(FrameParams(viewport=renderer.viewport, time=0.0))
    >>> image = renderer.get_image_rgba_numpy()
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from sdfmarch.camera.pinhole import ViewportRect, setup_camera, setup_viewport
from sdfmarch.core.config import FrameParams, RenderConfig
from sdfmarch.core.integrator import (
    build_render_kernels,
    claim_render_target,
    get_debug_color,
    get_debug_normal,
    get_debug_trace,
    get_image,
    get_normalized_image_numpy,
    render_target_owner,
    setup_render_config,
)
from sdfmarch.scene.contract import SceneFunction, set_frame_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceInfo:
    """Result of tracing a single view ray from Python.

    Attributes:
        hit: Whether the ray reached a surface.
        t: Distance traveled along the ray.
        steps: Number of scene evaluations performed.
        normal: Unit surface normal at the hit (zero on a miss).
        color: Material color at the hit (zero on a miss).
    """

    hit: bool
    t: float
    steps: int
    normal: tuple[float, float, float]
    color: tuple[float, float, float]


class SdfRenderer:
    """Renders frames of one scene function.

    The scene function is the renderer's single extension point. Rendering a
    different scene means constructing a renderer with a different function;
    nothing else changes.

    All renderers share one preallocated color buffer. The renderer that last
    claimed it (on construction, resize or render) owns it; a renderer whose
    frame was overwritten must render again before reading its image.

    Attributes:
        scene_fn: The injected scene function.
        config: Tracer and sampling parameters.
        viewport: The viewport of the current render target.
    """

    def __init__(
        self,
        scene_fn: SceneFunction,
        viewport: ViewportRect | None = None,
        config: RenderConfig | None = None,
    ) -> None:
        """Initialize the renderer and its render target.

        Args:
            scene_fn: Taichi function mapping a point to an SdfSample.
            viewport: Initial viewport (default 512 x 512).
            config: Render configuration (default RenderConfig()).

        Raises:
            TypeError: If scene_fn is not callable.
            ValueError: If the viewport exceeds the maximum image size.
        """
        self._kernels = build_render_kernels(scene_fn)
        self._config = config if config is not None else RenderConfig()
        self._viewport = viewport if viewport is not None else ViewportRect()
        self._frames_rendered = 0
        self._has_image = False
        self._resize_target(self._viewport)

    @property
    def scene_fn(self) -> SceneFunction:
        """Get the scene function the kernels are bound to."""
        return self._kernels.scene_fn

    @property
    def config(self) -> RenderConfig:
        """Get the render configuration."""
        return self._config

    @config.setter
    def config(self, config: RenderConfig) -> None:
        """Replace the render configuration for subsequent frames."""
        self._config = config

    @property
    def viewport(self) -> ViewportRect:
        """Get the viewport of the render target."""
        return self._viewport

    @property
    def width(self) -> int:
        """Get the image width in pixels."""
        return self._viewport.pixel_dimensions[0]

    @property
    def height(self) -> int:
        """Get the image height in pixels."""
        return self._viewport.pixel_dimensions[1]

    @property
    def frames_rendered(self) -> int:
        """Get the number of frames rendered so far."""
        return self._frames_rendered

    def _owns_target(self) -> bool:
        return render_target_owner() is self

    def _resize_target(self, viewport: ViewportRect) -> None:
        """Claim the render target and size it to cover viewport."""
        width, height = viewport.pixel_dimensions
        claim_render_target(self, width, height)
        self._viewport = viewport
        self._has_image = False

    def _publish(self, frame: FrameParams) -> None:
        """Write the frame snapshot and config to the kernel-visible fields."""
        if not self._owns_target():
            self._resize_target(frame.viewport)
        elif frame.viewport.pixel_dimensions != (self.width, self.height):
            logger.debug(
                "Viewport changed from %s to %s",
                self._viewport.size,
                frame.viewport.size,
            )
            self._resize_target(frame.viewport)
        elif frame.viewport != self._viewport:
            self._viewport = frame.viewport

        setup_viewport(frame.viewport)
        setup_camera(frame.camera)
        set_frame_time(frame.time)
        setup_render_config(self._config)

    def render(self, frame: FrameParams | None = None) -> None:
        """Render one frame into the color buffer.

        Args:
            frame: Per-frame snapshot. Defaults to the current viewport, the
                default camera and time zero.
        """
        if frame is None:
            frame = FrameParams(viewport=self._viewport)

        self._publish(frame)
        width, height = self.width, self.height
        self._kernels.render(width, height)
        self._frames_rendered += 1
        self._has_image = True
        logger.debug(
            "Rendered frame %d (%dx%d, %d spp, t=%.3f)",
            self._frames_rendered,
            width,
            height,
            self._config.samples_per_pixel,
            frame.time,
        )

    def render_frames(self, frames: Iterable[FrameParams]) -> Generator[int, None, None]:
        """Render a sequence of frames, yielding after each one.

        Stopping iteration abandons the remaining frames; a frame is never
        interrupted halfway.

        Yields:
            The number of frames rendered so far.
        """
        for frame in frames:
            self.render(frame)
            yield self._frames_rendered

    def shade_pixel(
        self,
        pixel_i: int,
        pixel_j: int,
        offset: tuple[float, float] = (0.0, 0.0),
        frame: FrameParams | None = None,
    ) -> tuple[float, float, float]:
        """Shade a single sub-sample of one pixel without touching the buffer.

        Args:
            pixel_i: Column index (0 = left).
            pixel_j: Buffer row index (0 = bottom).
            offset: Sub-pixel offset in pixel units.
            frame: Snapshot to publish first; defaults to the current
                viewport, default camera and time zero.

        Returns:
            Tuple of (R, G, B).
        """
        self._publish(frame if frame is not None else FrameParams(viewport=self._viewport))
        color = self._kernels.shade_pixel(pixel_i, pixel_j, self.height, offset[0], offset[1])
        return (float(color[0]), float(color[1]), float(color[2]))

    def trace_ndc(self, u: float, v: float, frame: FrameParams | None = None) -> TraceInfo:
        """Trace the view ray through device coordinates (u, v).

        Args:
            u: Horizontal device coordinate (0 at the center).
            v: Vertical device coordinate (0 at the center, +1 at the top).
            frame: Snapshot to publish first.

        Returns:
            TraceInfo describing the hit or miss.
        """
        self._publish(frame if frame is not None else FrameParams(viewport=self._viewport))
        self._kernels.trace_ndc(u, v)
        hit, t, steps = get_debug_trace()
        return TraceInfo(
            hit=hit,
            t=t,
            steps=steps,
            normal=get_debug_normal(),
            color=get_debug_color(),
        )

    def _check_image(self) -> None:
        if self._frames_rendered == 0:
            raise RuntimeError("No frame rendered yet. Call render() first.")
        if not self._owns_target() or not self._has_image:
            raise RuntimeError(
                "The render target was claimed or resized since the last frame. "
                "Call render() again."
            )

    def get_image(self):
        """Get the raw Taichi color buffer field (full preallocated size).

        Raises:
            RuntimeError: If this renderer does not hold a current frame.
        """
        self._check_image()
        return get_image()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the last frame as a (height, width, 3) float32 array in [0, 1].

        Raises:
            RuntimeError: If no frame has been rendered yet, or another
                renderer has claimed the render target since.
        """
        self._check_image()
        return get_normalized_image_numpy()

    def get_image_rgba_numpy(self) -> npt.NDArray[np.float32]:
        """Get the last frame as (height, width, 4) with alpha fixed to 1."""
        from sdfmarch.preview.export import add_alpha

        return add_alpha(self.get_image_numpy())

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the last frame as an 8-bit (height, width, 3) array."""
        from sdfmarch.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str) -> None:
        """Save the last frame to an image file (format from the extension)."""
        from sdfmarch.preview.export import save_png_from_array

        save_png_from_array(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"SdfRenderer(width={self.width}, height={self.height}, "
            f"spp={self._config.samples_per_pixel}, frames={self._frames_rendered})"
        )
