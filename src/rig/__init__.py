"""
Rig module - headset pose to per-eye world poses and view matrices.
"""

from .pose import HMDPose
from .eye_rig import (
    EyePose,
    EyePoseRig,
    ComponentLayout,
    DEFAULT_LENS_DIAMETER,
    component_layout,
    look_at_lh,
)

__all__ = [
    'HMDPose',
    'EyePose',
    'EyePoseRig',
    'ComponentLayout',
    'DEFAULT_LENS_DIAMETER',
    'component_layout',
    'look_at_lh',
]
