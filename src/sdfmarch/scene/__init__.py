"""Scene module: the single extension point of the renderer.

Components:
    contract: Scene-function type, validation, and the frame-time snapshot

The renderer depends only on the scene function's signature
(vec3 -> SdfSample). Scene authoring itself belongs to the host.
"""

from .contract import (
    SceneFunction,
    check_scene_function,
    frame_time,
    get_frame_time,
    set_frame_time,
)

__all__ = [
    "SceneFunction",
    "check_scene_function",
    "frame_time",
    "get_frame_time",
    "set_frame_time",
]
