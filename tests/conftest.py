"""Pytest configuration for ray marcher tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def reset_frame_state():
    """Reset per-frame state before each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized first
    from sdfmarch.camera.pinhole import CameraBasis, ViewportRect, setup_camera, setup_viewport
    from sdfmarch.core.integrator import reset_render_target
    from sdfmarch.scene.contract import set_frame_time

    def _reset():
        reset_render_target()
        set_frame_time(0.0)
        setup_camera(CameraBasis())
        setup_viewport(ViewportRect())

    _reset()
    yield
    _reset()
