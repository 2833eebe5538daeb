"""
Layer masks and content routing

Bit masks controlling what each camera renders; combine with bitwise OR,
e.g. SCENE | HMD = 0x3.

View-dependent translucent content (point or splat clouds) is sorted back
to front for one viewpoint. With several cameras active at once a single
sort order cannot be right for all of them, so every camera role gets its
own exclusive splat bit and is paired with an independently sorted copy of
that content.
"""

from enum import Enum, IntFlag

from ..viewport.compositor import DisplayMode


class LayerMask(IntFlag):
    NONE = 0x0
    SCENE = 0x1           # Primitives
    HMD = 0x2             # Headset body meshes
    FRUSTUM = 0x4         # Frustum overlays
    UI = 0x8
    SPLAT_MAIN = 0x10
    SPLAT_LEFT = 0x20
    SPLAT_RIGHT = 0x40


LAYER_SCENE_HMD_FRUSTUM = LayerMask.SCENE | LayerMask.HMD | LayerMask.FRUSTUM
LAYER_SCENE_FRUSTUM = LayerMask.SCENE | LayerMask.FRUSTUM


class CameraRole(Enum):
    MAIN = "main"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    GUI = "gui"


_ROUTING_TAGS = {
    CameraRole.MAIN: LayerMask.SPLAT_MAIN,
    CameraRole.LEFT_EYE: LayerMask.SPLAT_LEFT,
    CameraRole.RIGHT_EYE: LayerMask.SPLAT_RIGHT,
    CameraRole.GUI: LayerMask.NONE,
}


def content_routing_tag(role: CameraRole) -> LayerMask:
    """Exclusive tag for the sorted translucent-content copy of a camera"""
    return _ROUTING_TAGS[role]


def camera_layer_mask(role: CameraRole, mode: DisplayMode = DisplayMode.SIMULATION,
                      eyes_enabled: bool = True) -> LayerMask:
    """
    Full layer mask for a camera.

    Eye cameras never see the headset body or frustum overlays. In VR mode
    the main camera renders nothing so the eye views fill the screen.
    """
    if role is CameraRole.GUI:
        return LayerMask.UI
    if role is CameraRole.MAIN:
        if mode is DisplayMode.VR:
            return LayerMask.NONE
        return LAYER_SCENE_HMD_FRUSTUM | content_routing_tag(role)
    if not eyes_enabled:
        return LayerMask.NONE
    return LayerMask.SCENE | content_routing_tag(role)
