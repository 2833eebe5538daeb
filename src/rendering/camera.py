"""
Eye Camera Record

What the renderer consumes per eye: a frozen off-axis projection, a view
matrix, a viewport rectangle and a layer mask. The core writes these values;
it never calls into the renderer.

Convention: row vectors, ``clip = v @ view @ proj`` (left-handed).
"""

import numpy as np
from typing import Optional, Tuple

from ..optics.projection import DepthRange
from ..optics.solver import Eye
from .layers import LayerMask


class EyeCamera:
    """
    Renderer-facing camera for one eye.

    Features:
    - Frozen projection (never derived from a generic FOV)
    - Cached view-projection
    - Frustum plane extraction for culling
    """

    def __init__(self, name: str, eye: Eye, layer_mask: LayerMask = LayerMask.SCENE,
                 depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE):
        self.name = name
        self.eye = eye
        self.layer_mask = layer_mask
        self.depth_range = depth_range

        self.view_matrix = np.eye(4, dtype=np.float64)
        self.proj_matrix = np.eye(4, dtype=np.float64)
        self.viewport = None  # ViewportRect, written by the compositor
        self.position = np.zeros(3, dtype=np.float64)

        self._vp_matrix: Optional[np.ndarray] = None
        # Frustum planes [left, right, bottom, top, near, far]
        self._frustum_planes: Optional[np.ndarray] = None

    def freeze_projection(self, matrix: np.ndarray):
        """Store a read-only copy of the projection matrix."""
        frozen = np.array(matrix, dtype=np.float64)
        frozen.setflags(write=False)
        self.proj_matrix = frozen
        self._invalidate()

    def set_view(self, view_matrix: np.ndarray, position: np.ndarray):
        self.view_matrix = np.array(view_matrix, dtype=np.float64)
        self.position = np.array(position, dtype=np.float64)
        self._invalidate()

    def _invalidate(self):
        self._vp_matrix = None
        self._frustum_planes = None

    def get_view_matrix(self) -> np.ndarray:
        return self.view_matrix

    def get_projection_matrix(self) -> np.ndarray:
        return self.proj_matrix

    def get_view_projection_matrix(self) -> np.ndarray:
        """Combined view-projection matrix (cached)."""
        if self._vp_matrix is None:
            self._vp_matrix = self.view_matrix @ self.proj_matrix
        return self._vp_matrix

    def get_frustum_planes(self) -> np.ndarray:
        """
        Extract world-space frustum planes.

        Returns:
            6x4 array of plane equations [A, B, C, D] where Ax + By + Cz + D >= 0
            inside the frustum
        """
        if self._frustum_planes is not None:
            return self._frustum_planes

        vp = self.get_view_projection_matrix()
        cols = vp.T
        planes = np.zeros((6, 4), dtype=np.float64)

        planes[0] = cols[3] + cols[0]  # Left
        planes[1] = cols[3] - cols[0]  # Right
        planes[2] = cols[3] + cols[1]  # Bottom
        planes[3] = cols[3] - cols[1]  # Top
        if self.depth_range is DepthRange.ZERO_TO_ONE:
            planes[4] = cols[2]        # Near
        else:
            planes[4] = cols[3] + cols[2]
        planes[5] = cols[3] - cols[2]  # Far

        for i in range(6):
            norm = np.linalg.norm(planes[i, :3])
            if norm > 0:
                planes[i] /= norm

        self._frustum_planes = planes
        return planes

    def is_point_in_frustum(self, point: np.ndarray) -> bool:
        """Check if a world-space point is inside the view frustum."""
        planes = self.get_frustum_planes()
        for plane in planes:
            if np.dot(plane[:3], point) + plane[3] < 0:
                return False
        return True

    def is_sphere_in_frustum(self, center: np.ndarray, radius: float) -> bool:
        """Check if a sphere intersects the view frustum."""
        planes = self.get_frustum_planes()
        for plane in planes:
            dist = np.dot(plane[:3], center) + plane[3]
            if dist < -radius:
                return False
        return True

    def get_forward_vector(self) -> np.ndarray:
        """Camera forward direction in world space (+Z in view space)."""
        return self.view_matrix[:3, 2].copy()

    def get_right_vector(self) -> np.ndarray:
        return self.view_matrix[:3, 0].copy()

    def get_up_vector(self) -> np.ndarray:
        return self.view_matrix[:3, 1].copy()

    def viewport_pixels(self, canvas_size: Tuple[int, int]):
        """Pixel rectangle of the current viewport, or None before layout."""
        if self.viewport is None:
            return None
        return self.viewport.to_pixels(canvas_size)
