"""Integration tests for SdfRenderer.

Tests cover:
- Rendering small frames end to end
- Debug probes (trace_ndc, shade_pixel)
- Supersampling as the mean of sub-pixel samples
- Frame parameters (time, viewport resize) and render_frames
- Error handling before the first frame
"""

import logging
import math

import numpy as np
import pytest

from sdf_scenes import SPHERE_COLOR, unit_scenes

SIZE = 32


def _make_renderer(scene_name="sphere_at_origin", size=SIZE, config=None):
    from sdfmarch.camera.pinhole import ViewportRect
    from sdfmarch.core.renderer import SdfRenderer

    return SdfRenderer(
        unit_scenes()[scene_name],
        ViewportRect(size=(float(size), float(size))),
        config,
    )


class TestRendererSetup:
    """Tests for renderer construction and validation."""

    def test_dimensions_follow_viewport(self):
        """Test the render target matches the viewport in pixels."""
        from sdfmarch.camera.pinhole import ViewportRect
        from sdfmarch.core.renderer import SdfRenderer

        renderer = SdfRenderer(unit_scenes()["sphere_at_origin"], ViewportRect(size=(48.0, 24.0)))
        assert renderer.width == 48
        assert renderer.height == 24
        assert renderer.frames_rendered == 0

    def test_non_callable_scene_rejected(self):
        """Test a non-callable scene function raises TypeError."""
        from sdfmarch.core.renderer import SdfRenderer

        with pytest.raises(TypeError):
            SdfRenderer(None)

    def test_oversized_viewport_rejected(self):
        """Test viewports beyond the maximum image size raise ValueError."""
        from sdfmarch.camera.pinhole import ViewportRect
        from sdfmarch.core.renderer import SdfRenderer

        with pytest.raises(ValueError):
            SdfRenderer(unit_scenes()["sphere_at_origin"], ViewportRect(size=(4096.0, 16.0)))

    def test_image_before_render_raises(self):
        """Test reading the image before any frame raises RuntimeError."""
        renderer = _make_renderer()
        with pytest.raises(RuntimeError):
            renderer.get_image_numpy()

    def test_repr(self):
        """Test the repr reports size and sampling."""
        renderer = _make_renderer()
        assert "width=32" in repr(renderer)
        assert "spp=4" in repr(renderer)


class TestRendering:
    """End-to-end rendering tests."""

    def test_render_produces_valid_image(self):
        """Test a frame has the right shape, dtype and range."""
        renderer = _make_renderer()
        renderer.render()

        image = renderer.get_image_numpy()
        assert image.shape == (SIZE, SIZE, 3)
        assert image.dtype == np.float32
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)
        assert np.all(image <= 1.0)
        assert renderer.frames_rendered == 1

    def test_sphere_covers_center_not_corner(self):
        """Test the centered sphere is visible in the middle of the frame."""
        renderer = _make_renderer()
        renderer.render()
        image = renderer.get_image_numpy()

        center = image[SIZE // 2, SIZE // 2]
        corner = image[0, 0]
        # The sphere is blue, the background is nearly gray
        assert center[2] - center[0] > 0.3
        assert corner[2] - corner[0] < 0.2

    def test_image_rows_are_top_down(self):
        """Test a sphere above the horizon appears in the upper rows."""
        renderer = _make_renderer("offset_sphere", size=64, config=_config(1))
        renderer.render()
        image = renderer.get_image_numpy()

        # The sphere center projects to device (0.277, 0.554)
        column = int((1.8 / 6.5 + 1.0) / 2.0 * 64)
        top_row = int((1.0 - 3.6 / 6.5) / 2.0 * 64)
        upper = image[top_row, column]
        lower = image[63 - top_row, column]
        assert upper[2] - upper[0] > 0.3
        assert lower[2] - lower[0] < 0.2

    def test_render_is_deterministic(self):
        """Test the same frame renders identically twice."""
        renderer = _make_renderer("sphere_and_box")
        renderer.render()
        first = renderer.get_image_numpy().copy()
        renderer.render()
        second = renderer.get_image_numpy()
        np.testing.assert_array_equal(first, second)

    def test_rgba_and_uint8_views(self):
        """Test the derived image formats."""
        renderer = _make_renderer()
        renderer.render()

        rgba = renderer.get_image_rgba_numpy()
        assert rgba.shape == (SIZE, SIZE, 4)
        assert np.all(rgba[:, :, 3] == 1.0)

        pixels = renderer.get_image_uint8()
        assert pixels.dtype == np.uint8
        assert pixels.shape == (SIZE, SIZE, 3)

    def test_render_logs_frame(self, caplog):
        """Test each frame is logged at debug level."""
        renderer = _make_renderer()
        with caplog.at_level(logging.DEBUG, logger="sdfmarch.core.renderer"):
            renderer.render()
        assert any("Rendered frame 1" in record.getMessage() for record in caplog.records)


def _config(grid):
    from sdfmarch.core.config import RenderConfig

    return RenderConfig(supersample_grid=grid)


class TestSupersampling:
    """Tests for the N x N sub-pixel mean."""

    # Buffer coordinates near the sphere edge, at its center, and in the background
    PIXELS = [(20, 16), (16, 16), (3, 29)]

    @pytest.mark.parametrize("pixel", PIXELS)
    def test_single_sample_matches_pixel_center(self, pixel):
        """Test N = 1 is exactly the shade of the pixel center."""
        renderer = _make_renderer(config=_config(1))
        renderer.render()
        image = renderer.get_image_numpy()

        i, j = pixel
        expected = np.clip(renderer.shade_pixel(i, j), 0.0, 1.0)
        np.testing.assert_allclose(image[SIZE - 1 - j, i], expected, atol=1e-5)

    @pytest.mark.parametrize("pixel", PIXELS)
    def test_two_by_two_is_mean_of_sub_samples(self, pixel):
        """Test N = 2 averages the four quarter-offset samples."""
        renderer = _make_renderer(config=_config(2))
        renderer.render()
        image = renderer.get_image_numpy()

        i, j = pixel
        samples = [
            renderer.shade_pixel(i, j, (ox, oy))
            for oy in (-0.25, 0.25)
            for ox in (-0.25, 0.25)
        ]
        expected = np.clip(np.mean(np.array(samples), axis=0), 0.0, 1.0)
        np.testing.assert_allclose(image[SIZE - 1 - j, i], expected, atol=1e-4)

    def test_supersampling_smooths_silhouette(self):
        """Test more samples change edge pixels but not flat background."""
        coarse = _make_renderer(config=_config(1))
        coarse.render()
        coarse_image = coarse.get_image_numpy().copy()

        fine = _make_renderer(config=_config(4))
        fine.render()
        fine_image = fine.get_image_numpy()

        assert not np.allclose(coarse_image, fine_image, atol=1e-3)
        # Background far from the sphere varies smoothly, so it barely moves
        np.testing.assert_allclose(coarse_image[0, 0], fine_image[0, 0], atol=1e-2)


class TestDebugProbes:
    """Tests for trace_ndc and shade_pixel."""

    def test_center_probe_hits_sphere(self):
        """Test the center ray reports distance, normal and color."""
        renderer = _make_renderer()
        info = renderer.trace_ndc(0.0, 0.0)

        assert info.hit is True
        assert abs(info.t - 2.9) < 1e-3
        assert 1 <= info.steps <= 128
        assert abs(info.normal[2] - 1.0) < 1e-3
        for c, expected in zip(info.color, SPHERE_COLOR):
            assert abs(c - expected) < 1e-6

    def test_corner_probe_misses(self):
        """Test a ray far from the sphere reports a miss with zero normal."""
        renderer = _make_renderer()
        info = renderer.trace_ndc(0.9, 0.9)

        assert info.hit is False
        assert info.normal == (0.0, 0.0, 0.0)

    def test_probe_respects_step_budget(self):
        """Test the probe reports at most max_march_steps evaluations."""
        from sdfmarch.core.config import RenderConfig

        renderer = _make_renderer("constant_near_miss", config=RenderConfig(max_march_steps=16))
        info = renderer.trace_ndc(0.0, 0.0)

        assert info.hit is False
        assert info.steps == 16

    def test_offset_sphere_normal_faces_camera(self):
        """Test the normal at the aimed hit points back along the ray."""
        renderer = _make_renderer("offset_sphere")
        info = renderer.trace_ndc(1.8 / 6.5, 3.6 / 6.5)

        length = math.sqrt(1.0 + 4.0 + 6.5 * 6.5)
        toward_eye = (-1.0 / length, -2.0 / length, 6.5 / length)
        assert info.hit is True
        assert abs(info.t - (length - 1.0)) < 1e-3
        assert sum(n * e for n, e in zip(info.normal, toward_eye)) > 0.999


class TestFrames:
    """Tests for frame parameters and frame sequences."""

    def test_frame_time_reaches_scene(self):
        """Test the scene sees the time of the frame being rendered."""
        from sdfmarch.core.config import FrameParams
        from sdfmarch.scene import get_frame_time

        renderer = _make_renderer("time_sphere")
        small = renderer.trace_ndc(0.0, 0.0, FrameParams(viewport=renderer.viewport, time=0.5))
        large = renderer.trace_ndc(0.0, 0.0, FrameParams(viewport=renderer.viewport, time=1.0))

        assert abs(small.t - 3.0) < 1e-3
        assert abs(large.t - 2.5) < 1e-3
        assert get_frame_time() == 1.0

    def test_viewport_change_resizes_target(self):
        """Test a frame with a new viewport resizes the image."""
        from sdfmarch.camera.pinhole import ViewportRect
        from sdfmarch.core.config import FrameParams

        renderer = _make_renderer()
        renderer.render(FrameParams(viewport=ViewportRect(size=(40.0, 20.0))))

        assert (renderer.width, renderer.height) == (40, 20)
        assert renderer.viewport.size == (40.0, 20.0)
        assert renderer.get_image_numpy().shape == (20, 40, 3)

    def test_render_frames_yields_after_each_frame(self):
        """Test render_frames renders lazily and counts frames."""
        from sdfmarch.core.config import FrameParams

        renderer = _make_renderer("time_sphere", size=16)
        frames = [FrameParams(viewport=renderer.viewport, time=0.2 * k) for k in range(1, 6)]

        counts = []
        for count in renderer.render_frames(frames):
            counts.append(count)
            if count == 3:
                break

        assert counts == [1, 2, 3]
        assert renderer.frames_rendered == 3

    def test_camera_from_frame_params(self):
        """Test the frame's camera replaces the default one."""
        from sdfmarch.camera.pinhole import CameraBasis
        from sdfmarch.core.config import FrameParams

        renderer = _make_renderer()
        side_camera = CameraBasis(
            position=(3.5, 0.0, 0.0),
            right=(0.0, 0.0, -1.0),
            up=(0.0, 1.0, 0.0),
            forward=(-1.0, 0.0, 0.0),
        )
        info = renderer.trace_ndc(
            0.0, 0.0, FrameParams(viewport=renderer.viewport, camera=side_camera)
        )

        assert info.hit is True
        assert abs(info.normal[0] - 1.0) < 1e-3

    def test_save_image(self, tmp_path):
        """Test saving the frame writes a PNG of the right size."""
        from PIL import Image

        renderer = _make_renderer()
        renderer.render()
        path = tmp_path / "frame.png"
        renderer.save_image(str(path))

        with Image.open(path) as image:
            assert image.size == (SIZE, SIZE)
            assert image.mode == "RGB"


class TestSharedRenderTarget:
    """Tests for several renderers sharing the color buffer."""

    def test_second_renderer_invalidates_first_image(self):
        """Test a renderer never returns pixels another renderer wrote."""
        from sdfmarch.camera.pinhole import ViewportRect
        from sdfmarch.core.renderer import SdfRenderer

        first = SdfRenderer(unit_scenes()["sphere_at_origin"], ViewportRect(size=(16.0, 16.0)))
        first.render()
        assert first.get_image_numpy().shape == (16, 16, 3)

        second = SdfRenderer(unit_scenes()["sphere_and_box"], ViewportRect(size=(8.0, 4.0)))

        assert (first.width, first.height) == (16, 16)
        assert (second.width, second.height) == (8, 4)
        with pytest.raises(RuntimeError):
            first.get_image_numpy()
        with pytest.raises(RuntimeError):
            first.get_image()

    def test_render_reclaims_target(self):
        """Test rendering again restores a renderer's own image."""
        from sdfmarch.camera.pinhole import ViewportRect
        from sdfmarch.core.renderer import SdfRenderer

        first = SdfRenderer(unit_scenes()["sphere_at_origin"], ViewportRect(size=(16.0, 16.0)))
        first.render()
        expected = first.get_image_numpy().copy()

        second = SdfRenderer(unit_scenes()["sphere_and_box"], ViewportRect(size=(8.0, 4.0)))
        second.render()
        assert second.get_image_numpy().shape == (4, 8, 3)

        first.render()
        np.testing.assert_array_equal(first.get_image_numpy(), expected)
        with pytest.raises(RuntimeError):
            second.get_image_numpy()

    def test_debug_calls_keep_own_image(self):
        """Test debug probes on the owning renderer keep its frame readable."""
        renderer = _make_renderer()
        renderer.render()
        before = renderer.get_image_numpy().copy()

        renderer.trace_ndc(0.0, 0.0)
        renderer.shade_pixel(3, 3)

        np.testing.assert_array_equal(renderer.get_image_numpy(), before)
