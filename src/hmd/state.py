"""
Optical state snapshot
"""

from dataclasses import dataclass
from typing import Dict

from ..optics.config import OpticalConfig
from ..optics.solver import DerivedOptics, EyeProjection
from ..rig.eye_rig import EyePose
from ..viewport.compositor import ViewportLayout


@dataclass(frozen=True)
class OpticalState:
    """
    Everything downstream of one accepted configuration.

    Replaced as a whole on every accepted edit, pose change or resize, so a
    reader holding a snapshot never sees half of an update.
    """
    config: OpticalConfig
    derived: DerivedOptics
    projection: EyeProjection
    eye_pose: EyePose
    layout: ViewportLayout
    revision: int = 0

    def to_dict(self) -> Dict:
        return {
            'revision': self.revision,
            'params': self.config.to_dict(),
            'calculated': self.derived.to_dict(),
            'projection': {
                'left': self.projection.left.tolist(),
                'right': self.projection.right.tolist(),
                'depth_range': self.projection.depth_range.value,
            },
            'eyes': self.eye_pose.to_dict(),
            'viewport': self.layout.to_dict(),
        }
