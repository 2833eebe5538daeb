"""
Frustum Geometry

Reconstructs the 8 world-space corners of a camera frustum by unprojecting
the clip-space cube through inverse(projection) and inverse(view), and
provides the fixed 12-edge topology used to draw it.

Corner order (near 0-3, far 4-7):
    0 top-left, 1 top-right, 2 bottom-left, 3 bottom-right

The same reconstruction doubles as a check on the optical solver: the
near-plane rectangle measured in view space must equal the solver's
(left, right, bottom, top).
"""

import numpy as np
import pyrr
from dataclasses import dataclass
from typing import List, Tuple

from ..core.exceptions import SingularMatrixError
from ..optics.projection import DepthRange


# 12 edges: near loop, far loop, near-to-far connections
EDGES: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 3), (3, 2), (2, 0),
    (4, 5), (5, 7), (7, 6), (6, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
)

_CONDITION_LIMIT = 1.0 / np.finfo(np.float64).eps


def edges() -> List[Tuple[int, int]]:
    """The 12 corner index pairs of a frustum"""
    return list(EDGES)


def clip_corners(depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE) -> np.ndarray:
    """Clip-cube corners as homogeneous row vectors (8x4)"""
    zn = depth_range.near_ndc
    return np.array([
        [-1.0, 1.0, zn, 1.0],
        [1.0, 1.0, zn, 1.0],
        [-1.0, -1.0, zn, 1.0],
        [1.0, -1.0, zn, 1.0],
        [-1.0, 1.0, 1.0, 1.0],
        [1.0, 1.0, 1.0, 1.0],
        [-1.0, -1.0, 1.0, 1.0],
        [1.0, -1.0, 1.0, 1.0],
    ])


def invert_checked(matrix: np.ndarray, which: str) -> np.ndarray:
    """
    Invert a 4x4 matrix or raise SingularMatrixError.

    Non-finite entries and numerically singular matrices are rejected rather
    than producing NaN or inf downstream. For an affine matrix (last column
    0, 0, 0, 1) only the 3x3 linear block is conditioned, so a large
    translation alone never makes a view singular.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise SingularMatrixError(which, f"expected 4x4, got {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise SingularMatrixError(which, "non-finite entries")
    if np.linalg.cond(_linear_part(matrix)) > _CONDITION_LIMIT:
        raise SingularMatrixError(which, "not invertible")
    try:
        inverse = pyrr.matrix44.inverse(matrix)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError(which, str(exc)) from exc
    if not np.all(np.isfinite(inverse)):
        raise SingularMatrixError(which, "inverse has non-finite entries")
    return inverse


def _linear_part(matrix: np.ndarray) -> np.ndarray:
    if np.array_equal(matrix[:, 3], [0.0, 0.0, 0.0, 1.0]):
        return matrix[:3, :3]
    return matrix


def _dehomogenize(points: np.ndarray, which: str) -> np.ndarray:
    w = points[:, 3:4]
    if np.any(np.abs(w) < 1e-12):
        raise SingularMatrixError(which, "corner maps to infinity (w == 0)")
    return points[:, :3] / w


@dataclass(frozen=True)
class FrustumCorners:
    """Eight world-space frustum corners."""
    points: np.ndarray

    @property
    def near_corners(self) -> np.ndarray:
        return self.points[:4]

    @property
    def far_corners(self) -> np.ndarray:
        return self.points[4:]

    def segments(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        """Start/end points of the 12 edges"""
        return [(self.points[a], self.points[b]) for a, b in EDGES]


def corners(proj: np.ndarray, view: np.ndarray,
            depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE) -> FrustumCorners:
    """
    World-space frustum corners for a projection/view pair.

    Raises:
        SingularMatrixError: either matrix is not invertible
    """
    inv_proj = invert_checked(proj, "projection")
    inv_view = invert_checked(view, "view")

    view_space = _dehomogenize(clip_corners(depth_range) @ inv_proj, "projection")
    homogeneous = np.hstack([view_space, np.ones((8, 1))])
    world = _dehomogenize(homogeneous @ inv_view, "view")

    if not np.all(np.isfinite(world)):
        raise SingularMatrixError("view", "corners are not finite")
    world.setflags(write=False)
    return FrustumCorners(points=world)


def near_plane_extent(frustum: FrustumCorners, view: np.ndarray) -> Tuple[float, float, float, float, float]:
    """
    Measure the near-plane rectangle back in view space.

    Returns:
        (left, right, bottom, top, near)
    """
    homogeneous = np.hstack([frustum.near_corners, np.ones((4, 1))])
    local = _dehomogenize(homogeneous @ np.asarray(view, dtype=np.float64), "view")
    return (
        float(local[[0, 2], 0].mean()),
        float(local[[1, 3], 0].mean()),
        float(local[[2, 3], 1].mean()),
        float(local[[0, 1], 1].mean()),
        float(local[:, 2].mean()),
    )


class FrustumGeometry:
    """Object form of the reconstruction, bound to one depth convention."""

    EDGES = EDGES

    def __init__(self, depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE):
        self.depth_range = depth_range

    def corners(self, proj: np.ndarray, view: np.ndarray) -> FrustumCorners:
        return corners(proj, view, self.depth_range)

    @staticmethod
    def edges() -> List[Tuple[int, int]]:
        return edges()
