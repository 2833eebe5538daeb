"""
Eye Pose Rig

Derives both eye cameras from the single headset pose:

    eyePos = hmdPos -/+ right * (ipd / 2) + forward * (-distEye2Display)

``right`` and ``forward`` are the headset's own axes, so translating and
rotating the headset carries the IPD offset with it. Each eye looks straight
down the lens axis (one unit along forward, up = headset up); eyes are not
independently aimable.
"""

import numpy as np
import pyrr
from dataclasses import dataclass
from typing import Dict, Tuple

from ..core.exceptions import SingularMatrixError
from ..optics.config import OpticalConfig
from ..optics.solver import DerivedOptics, Eye
from ..utils.logging import get_rig_logger
from .pose import HMDPose


logger = get_rig_logger()

DEFAULT_LENS_DIAMETER = 0.034


def look_at_lh(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """
    Left-handed look-at view matrix (row-vector convention).

    Raises:
        SingularMatrixError: eye == target, or up parallel to the view direction
    """
    eye = np.asarray(eye, dtype=np.float64)
    z_axis = np.asarray(target, dtype=np.float64) - eye
    if np.linalg.norm(z_axis) < 1e-12:
        raise SingularMatrixError("view", "eye and target coincide")
    z_axis = pyrr.vector.normalise(z_axis)

    x_axis = pyrr.vector3.cross(np.asarray(up, dtype=np.float64), z_axis)
    if np.linalg.norm(x_axis) < 1e-12:
        raise SingularMatrixError("view", "up vector is parallel to the view direction")
    x_axis = pyrr.vector.normalise(x_axis)
    y_axis = pyrr.vector3.cross(z_axis, x_axis)

    view = np.eye(4, dtype=np.float64)
    view[:3, 0] = x_axis
    view[:3, 1] = y_axis
    view[:3, 2] = z_axis
    view[3, 0] = -np.dot(x_axis, eye)
    view[3, 1] = -np.dot(y_axis, eye)
    view[3, 2] = -np.dot(z_axis, eye)
    return view


@dataclass(frozen=True)
class EyePose:
    """World-space eye positions and view matrices for one frame."""
    eye_pos_l: np.ndarray
    eye_pos_r: np.ndarray
    view_l: np.ndarray
    view_r: np.ndarray
    right: np.ndarray
    up: np.ndarray
    forward: np.ndarray

    def position(self, eye: Eye) -> np.ndarray:
        return self.eye_pos_l if eye is Eye.LEFT else self.eye_pos_r

    def view(self, eye: Eye) -> np.ndarray:
        return self.view_l if eye is Eye.LEFT else self.view_r

    def to_dict(self) -> Dict:
        return {
            'eyePosL': self.eye_pos_l.tolist(),
            'eyePosR': self.eye_pos_r.tolist(),
            'right': self.right.tolist(),
            'up': self.up.tolist(),
            'forward': self.forward.tolist(),
        }


class EyePoseRig:
    """Computes eye poses from the headset pose; holds no per-frame state."""

    @staticmethod
    def eye_position(hmd_pose: HMDPose, eye: Eye, ipd: float,
                     dist_eye2display: float) -> np.ndarray:
        right, _, forward = hmd_pose.orientation_axes()
        return (hmd_pose.position
                + right * (eye.sign * ipd / 2.0)
                + forward * (-dist_eye2display))

    @staticmethod
    def compute_view(eye_position: np.ndarray, up: np.ndarray,
                     forward: np.ndarray) -> np.ndarray:
        """View matrix looking one unit along the lens axis"""
        return look_at_lh(eye_position, eye_position + forward, up)

    def update_pose(self, hmd_pose: HMDPose, ipd: float,
                    dist_eye2display: float) -> EyePose:
        """Recompute both eyes; call on every pose or optics change."""
        right, up, forward = hmd_pose.orientation_axes()
        offset_right = right * (ipd / 2.0)
        offset_forward = forward * (-dist_eye2display)

        eye_pos_l = hmd_pose.position - offset_right + offset_forward
        eye_pos_r = hmd_pose.position + offset_right + offset_forward

        pose = EyePose(
            eye_pos_l=eye_pos_l,
            eye_pos_r=eye_pos_r,
            view_l=self.compute_view(eye_pos_l, up, forward),
            view_r=self.compute_view(eye_pos_r, up, forward),
            right=right,
            up=up,
            forward=forward,
        )
        for array in (pose.eye_pos_l, pose.eye_pos_r, pose.view_l, pose.view_r):
            array.setflags(write=False)
        return pose

    def update_from_optics(self, hmd_pose: HMDPose, config: OpticalConfig,
                           derived: DerivedOptics) -> EyePose:
        return self.update_pose(hmd_pose, config.ipd, derived.dist_eye2display)


@dataclass(frozen=True)
class ComponentLayout:
    """
    Headset body parts relative to the display anchor (local HMD space).

    Lenses sit ``distLens2Display`` and eyes ``distEye2Display`` behind the
    display, each offset by half the IPD. Both lenses are discs of
    ``lens_diameter`` facing along the headset forward axis.
    """
    display_size: Tuple[float, float]
    lens_l: np.ndarray
    lens_r: np.ndarray
    eye_l: np.ndarray
    eye_r: np.ndarray
    lens_diameter: float = DEFAULT_LENS_DIAMETER

    def to_world(self, hmd_pose: HMDPose) -> Dict[str, np.ndarray]:
        """Positions of each part for a given headset pose"""
        right, up, forward = hmd_pose.orientation_axes()
        basis = np.vstack([right, up, forward])
        return {
            'display': hmd_pose.position.copy(),
            'lens_l': hmd_pose.position + self.lens_l @ basis,
            'lens_r': hmd_pose.position + self.lens_r @ basis,
            'eye_l': hmd_pose.position + self.eye_l @ basis,
            'eye_r': hmd_pose.position + self.eye_r @ basis,
        }


def component_layout(config: OpticalConfig,
                     lens_diameter: float = DEFAULT_LENS_DIAMETER) -> ComponentLayout:
    if not lens_diameter > 0:
        raise ValueError(f"Lens diameter must be positive, got {lens_diameter!r}")
    half_ipd = config.ipd / 2.0
    dist_eye2display = config.eye_relief + config.dist_lens2display
    return ComponentLayout(
        display_size=(config.display_width, config.display_height),
        lens_l=np.array([-half_ipd, 0.0, -config.dist_lens2display]),
        lens_r=np.array([half_ipd, 0.0, -config.dist_lens2display]),
        eye_l=np.array([-half_ipd, 0.0, -dist_eye2display]),
        eye_r=np.array([half_ipd, 0.0, -dist_eye2display]),
        lens_diameter=float(lens_diameter),
    )
