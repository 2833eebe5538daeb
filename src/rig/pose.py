"""
HMD pose

World position plus orientation. The rotation vector is stored as
(pitch, yaw, roll) about (X, Y, Z), matching how free-camera rotations are
stored by the renderer.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Tuple

from ..utils.math_utils import as_vector3, local_axes


@dataclass
class HMDPose:
    """Headset pose in world space (left-handed, +Y up, +Z forward)."""
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.1, -0.5]))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.position = as_vector3(self.position)
        self.rotation = as_vector3(self.rotation)
        if not np.all(np.isfinite(self.position)) or not np.all(np.isfinite(self.rotation)):
            raise ValueError("HMD pose must be finite")

    @property
    def pitch(self) -> float:
        return float(self.rotation[0])

    @property
    def yaw(self) -> float:
        return float(self.rotation[1])

    @property
    def roll(self) -> float:
        return float(self.rotation[2])

    def orientation_axes(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(right, up, forward) of the headset in world space"""
        return local_axes(self.yaw, self.pitch, self.roll)

    def copy(self) -> 'HMDPose':
        return HMDPose(self.position.copy(), self.rotation.copy())

    def to_dict(self) -> dict:
        return {
            'position': self.position.tolist(),
            'rotation': self.rotation.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'HMDPose':
        data = data or {}
        return cls(
            position=data.get('position', [0.0, 0.1, -0.5]),
            rotation=data.get('rotation', [0.0, 0.0, 0.0]),
        )
