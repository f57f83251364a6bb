"""Image export utilities for rendered frames.

The renderer's colors are display colors: there is no tonemapping or gamma
stage, only clamping to [0, 1] and quantization to 8 bits.

Supported formats:
    - PNG (8-bit RGB or RGBA via Pillow)

Example:
    >>> from sdfmarch.preview.export import save_png
    >>> renderer.render(frame)
    >>> save_png(renderer, "frame.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from sdfmarch.core.renderer import SdfRenderer


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8.

    Args:
        image: Image array of shape (H, W, 3) or (H, W, 4). Values outside
            [0, 1] are clamped.

    Returns:
        8-bit image array with the same shape.
    """
    clamped = np.clip(image, 0.0, 1.0)
    return np.round(clamped * 255.0).astype(np.uint8)


def add_alpha(image: npt.NDArray[np.float32], alpha: float = 1.0) -> npt.NDArray[np.float32]:
    """Append a constant alpha channel to an (H, W, 3) image."""
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    channel = np.full(image.shape[:2] + (1,), alpha, dtype=np.float32)
    return np.concatenate([image.astype(np.float32), channel], axis=2)


def save_png_from_array(image: npt.NDArray[np.floating], filepath: str) -> None:
    """Save a float image as an 8-bit PNG.

    Args:
        image: Array of shape (H, W, 3) or (H, W, 4) with values in [0, 1].
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the image does not have 3 or 4 channels.
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")

    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)


def save_png(renderer: SdfRenderer, filepath: str, *, with_alpha: bool = False) -> None:
    """Save the renderer's last frame as a PNG file.

    Args:
        renderer: The renderer holding the frame.
        filepath: Output file path (should end in .png).
        with_alpha: Write an RGBA image with alpha fixed to 1.
    """
    if with_alpha:
        image = renderer.get_image_rgba_numpy()
    else:
        image = renderer.get_image_numpy()
    save_png_from_array(image, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
