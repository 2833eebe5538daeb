"""
Optical Solver

Thin-lens model of an HMD eyepiece. The eye is treated as a pinhole sitting
``distEye2Display`` in front of the display; the lens forms a magnified,
upright virtual image of the display (f > distLens2Display, magnifying-glass
regime). The frustum is fitted to that virtual image and then scaled back to
the near plane, giving each eye an asymmetric (off-axis) projection:

    distEye2Display = eyeRelief + distLens2Display
    magnification   = f / (f - distLens2Display)
    imgHeight       = displayHeight * magnification
    distLens2Img    = |1 / (1/f - 1/distLens2Display)|
    distEye2Img     = distLens2Img + eyeRelief
    near            = distEye2Display
    far             = near + farFromNear

The nasal half of each eye's view spans ipd/2 of the display and the
temporal half spans (displayWidth - ipd)/2, so left and right eyes get
mirrored horizontal extents.

The virtual image is only used to derive the frustum; it is never rendered.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from ..core.exceptions import InvalidOpticalConfig
from ..utils.logging import get_optics_logger, timed
from .config import OpticalConfig
from .projection import DepthRange, off_axis_projection


logger = get_optics_logger()


class Eye(Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def sign(self) -> float:
        """Lateral direction of the eye along the HMD right axis"""
        return -1.0 if self is Eye.LEFT else 1.0


@dataclass(frozen=True)
class DerivedOptics:
    """Scalar optics recomputed whenever the configuration changes."""
    magnification: float
    img_height: float
    dist_lens2img: float
    dist_eye2display: float
    dist_eye2img: float
    near: float
    far: float
    fov_vertical: float
    fov_h_nasal: float
    fov_h_temporal: float
    fov_horizontal: float
    display_aspect_ratio: float
    top: float
    bottom: float
    img_width_nasal: float
    img_width_temporal: float
    left_for_left_eye: float
    right_for_left_eye: float
    left_for_right_eye: float
    right_for_right_eye: float

    @property
    def aspect_ratio_eye(self) -> float:
        """Width / height of an eye's near-plane rectangle"""
        return (self.right_for_left_eye - self.left_for_left_eye) / (self.top - self.bottom)

    def frustum_planes(self, eye: Eye) -> Tuple[float, float, float, float, float, float]:
        """(left, right, bottom, top, near, far) for one eye"""
        if eye is Eye.LEFT:
            left, right = self.left_for_left_eye, self.right_for_left_eye
        else:
            left, right = self.left_for_right_eye, self.right_for_right_eye
        return left, right, self.bottom, self.top, self.near, self.far

    def to_dict(self) -> Dict[str, float]:
        """Calculated values keyed the way the stats panel labels them"""
        values = asdict(self)
        return {
            'magnification': values['magnification'],
            'imgHeight': values['img_height'],
            'distLens2Img': values['dist_lens2img'],
            'distEye2Display': values['dist_eye2display'],
            'distEye2Img': values['dist_eye2img'],
            'near': values['near'],
            'far': values['far'],
            'fovVertical': values['fov_vertical'],
            'fovHNasal': values['fov_h_nasal'],
            'fovHTemporal': values['fov_h_temporal'],
            'fovHorizontal': values['fov_horizontal'],
            'aspectRatio': values['display_aspect_ratio'],
            'aspectRatioEye': self.aspect_ratio_eye,
            'top': values['top'],
            'bottom': values['bottom'],
            'imgWidthNasal': values['img_width_nasal'],
            'imgWidthTemporal': values['img_width_temporal'],
            'leftForLeftEye': values['left_for_left_eye'],
            'rightForLeftEye': values['right_for_left_eye'],
            'leftForRightEye': values['left_for_right_eye'],
            'rightForRightEye': values['right_for_right_eye'],
        }


@dataclass(frozen=True)
class EyeProjection:
    """Per-eye off-axis projection matrices (read-only arrays)."""
    left: np.ndarray
    right: np.ndarray
    depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE

    def for_eye(self, eye: Eye) -> np.ndarray:
        return self.left if eye is Eye.LEFT else self.right


def _frozen(matrix: np.ndarray) -> np.ndarray:
    matrix = np.array(matrix, dtype=np.float64)
    matrix.setflags(write=False)
    return matrix


def derive_optics(config: OpticalConfig) -> DerivedOptics:
    """Compute the scalar optics for a validated configuration."""
    config.validate()

    f = config.f
    ipd = config.ipd

    dist_eye2display = config.eye_relief + config.dist_lens2display
    magnification = f / (f - config.dist_lens2display)
    img_height = config.display_height * magnification
    dist_lens2img = abs(1.0 / (1.0 / f - 1.0 / config.dist_lens2display))
    dist_eye2img = dist_lens2img + config.eye_relief

    near = dist_eye2display
    far = near + config.far_from_near

    img_width_nasal = magnification * ipd / 2.0
    img_width_temporal = magnification * (config.display_width - ipd) / 2.0

    fov_vertical = 2.0 * math.atan(img_height / 2.0 / dist_eye2img)
    fov_h_nasal = math.atan(img_width_nasal / dist_eye2img)
    fov_h_temporal = math.atan(img_width_temporal / dist_eye2img)

    # Virtual-image half extents scaled back to the near plane
    top = near * img_height / (2.0 * dist_eye2img)

    derived = DerivedOptics(
        magnification=magnification,
        img_height=img_height,
        dist_lens2img=dist_lens2img,
        dist_eye2display=dist_eye2display,
        dist_eye2img=dist_eye2img,
        near=near,
        far=far,
        fov_vertical=math.degrees(fov_vertical),
        fov_h_nasal=math.degrees(fov_h_nasal),
        fov_h_temporal=math.degrees(fov_h_temporal),
        fov_horizontal=math.degrees(fov_h_nasal + fov_h_temporal),
        display_aspect_ratio=config.display_width / config.display_height,
        top=top,
        bottom=-top,
        img_width_nasal=img_width_nasal,
        img_width_temporal=img_width_temporal,
        left_for_left_eye=-dist_eye2display * img_width_temporal / dist_eye2img,
        right_for_left_eye=dist_eye2display * img_width_nasal / dist_eye2img,
        left_for_right_eye=-dist_eye2display * img_width_nasal / dist_eye2img,
        right_for_right_eye=dist_eye2display * img_width_temporal / dist_eye2img,
    )
    _check_derived(derived)
    return derived


def _check_derived(derived: DerivedOptics):
    for name, value in asdict(derived).items():
        if not math.isfinite(value):
            raise InvalidOpticalConfig(name, value, "derived value is not finite")
    if not derived.near < derived.far:
        raise InvalidOpticalConfig("farFromNear", derived.far - derived.near,
                                   "far plane must lie beyond the near plane")
    if derived.top == derived.bottom:
        raise InvalidOpticalConfig("displayHeight", derived.img_height,
                                   "top == bottom, zero-height frustum")
    for eye in Eye:
        left, right, *_ = derived.frustum_planes(eye)
        if right <= left:
            raise InvalidOpticalConfig(
                "ipd", None,
                f"{eye.value} eye frustum is degenerate (left={left}, right={right})"
            )
    if not derived.aspect_ratio_eye > 0:
        raise InvalidOpticalConfig("aspectRatioEye", derived.aspect_ratio_eye,
                                   "must be positive")


def build_projection(derived: DerivedOptics,
                     depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE) -> EyeProjection:
    """Off-axis projection per eye from the derived frustum planes."""
    matrices = {
        eye: _frozen(off_axis_projection(*derived.frustum_planes(eye), depth_range=depth_range))
        for eye in Eye
    }
    return EyeProjection(left=matrices[Eye.LEFT], right=matrices[Eye.RIGHT],
                         depth_range=depth_range)


@timed(logger)
def solve(config: OpticalConfig,
          depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE) -> Tuple[DerivedOptics, EyeProjection]:
    """
    Pure solver: configuration -> (derived optics, per-eye projection).

    Raises:
        InvalidOpticalConfig: before any matrix is built, or if a frustum is
            degenerate. Nothing partial is ever returned.
    """
    derived = derive_optics(config)
    projection = build_projection(derived, depth_range)
    return derived, projection


class OpticalSolver:
    """
    Caches the last valid solution.

    ``update`` either replaces the cached result entirely or raises and
    leaves it untouched.
    """

    def __init__(self, config: Optional[OpticalConfig] = None,
                 depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE):
        self.depth_range = depth_range
        self.config = config or OpticalConfig()
        self.derived, self.projection = solve(self.config, depth_range)

    def update(self, config: OpticalConfig) -> Tuple[DerivedOptics, EyeProjection]:
        try:
            derived, projection = solve(config, self.depth_range)
        except InvalidOpticalConfig as exc:
            logger.warning(f"Rejected optical config: {exc}")
            raise
        self.config = config
        self.derived = derived
        self.projection = projection
        logger.debug(
            f"Solved optics: magnification={derived.magnification:.3f} "
            f"near={derived.near:.4f} far={derived.far:.4f} "
            f"aspect_eye={derived.aspect_ratio_eye:.4f}"
        )
        return derived, projection
