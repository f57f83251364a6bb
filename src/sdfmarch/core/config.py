"""Render configuration and per-frame parameter snapshot.

RenderConfig governs tracer termination and anti-aliasing density. It is
fixed for a render call and never mutated mid-trace. FrameParams is the
immutable snapshot the host publishes before each frame.

Example:
    >>> config = RenderConfig.quality()
    >>> config.supersample_grid
    8
    >>> frame = FrameParams(viewport=ViewportRect(size=(640.0, 480.0)), time=1.5)
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum

from sdfmarch.camera.pinhole import CameraBasis, ViewportRect

# Largest supported sub-pixel grid (N x N samples per pixel)
MAX_SUPERSAMPLE_GRID = 16


class SupersampleLevel(IntEnum):
    """Common sub-pixel grid sizes.

    The value is N for an N x N grid of samples per pixel.
    """

    NONE = 1
    X2 = 2
    X4 = 4
    X8 = 8


@dataclass(frozen=True)
class RenderConfig:
    """Tracer termination and sampling parameters.

    Attributes:
        max_march_steps: Hard cap on sphere-tracing iterations per ray.
            Running out of steps is a miss, not an error.
        hit_epsilon: A sample closer than this to the surface is a hit.
        max_distance: Rays that travel farther than this are misses.
        normal_epsilon: Offset for the central-difference gradient.
        supersample_grid: N for an N x N sub-pixel grid.
    """

    max_march_steps: int = 128
    hit_epsilon: float = 1e-4
    max_distance: float = 100.0
    normal_epsilon: float = 5e-4
    supersample_grid: int = int(SupersampleLevel.X2)

    def __post_init__(self) -> None:
        if self.max_march_steps < 1:
            raise ValueError(f"max_march_steps must be >= 1, got {self.max_march_steps}")
        if self.hit_epsilon <= 0.0:
            raise ValueError(f"hit_epsilon must be positive, got {self.hit_epsilon}")
        if self.max_distance <= 0.0:
            raise ValueError(f"max_distance must be positive, got {self.max_distance}")
        if self.normal_epsilon <= 0.0:
            raise ValueError(f"normal_epsilon must be positive, got {self.normal_epsilon}")
        if not 1 <= self.supersample_grid <= MAX_SUPERSAMPLE_GRID:
            raise ValueError(
                f"supersample_grid must be in [1, {MAX_SUPERSAMPLE_GRID}], "
                f"got {self.supersample_grid}"
            )

    @classmethod
    def preview(cls) -> "RenderConfig":
        """Configuration of the lightweight variant (2 x 2 samples)."""
        return cls(supersample_grid=int(SupersampleLevel.X2))

    @classmethod
    def quality(cls) -> "RenderConfig":
        """Configuration of the full variant (8 x 8 samples)."""
        return cls(supersample_grid=int(SupersampleLevel.X8))

    def with_supersampling(self, level: int) -> "RenderConfig":
        """Return a copy with a different sub-pixel grid size."""
        return replace(self, supersample_grid=int(level))

    @property
    def samples_per_pixel(self) -> int:
        """Number of sub-samples averaged into each pixel."""
        return self.supersample_grid * self.supersample_grid


@dataclass(frozen=True)
class FrameParams:
    """Immutable per-frame snapshot supplied by the host.

    Attributes:
        viewport: Where in screen space the frame is drawn.
        time: Elapsed time, consumed only by the scene function.
        camera: Camera position and orientation.
    """

    viewport: ViewportRect = field(default_factory=ViewportRect)
    time: float = 0.0
    camera: CameraBasis = field(default_factory=CameraBasis)
