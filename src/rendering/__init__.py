"""
Rendering interface - frustum geometry, eye camera records, overlays and
layer masks handed to the external renderer.
"""

from .frustum import (
    EDGES,
    FrustumCorners,
    FrustumGeometry,
    corners,
    edges,
    invert_checked,
    near_plane_extent,
)
from .layers import (
    LayerMask,
    CameraRole,
    content_routing_tag,
    camera_layer_mask,
)
from .camera import EyeCamera
from .overlay import FrustumOverlay

__all__ = [
    'EDGES',
    'FrustumCorners',
    'FrustumGeometry',
    'corners',
    'edges',
    'invert_checked',
    'near_plane_extent',
    'LayerMask',
    'CameraRole',
    'content_routing_tag',
    'camera_layer_mask',
    'EyeCamera',
    'FrustumOverlay',
]
