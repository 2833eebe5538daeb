"""
Frustum overlay resource

Visualization state for one eye's frustum: 12 edge segments drawn as thin
tubes with an unlit emissive color. Owned by the controller and torn down
explicitly on environment switch.
"""

import numpy as np
from typing import List, Optional, Tuple

from ..core.exceptions import SingularMatrixError
from ..optics.projection import DepthRange
from ..utils.logging import get_rendering_logger
from .frustum import FrustumCorners, corners
from .layers import LayerMask


logger = get_rendering_logger()

MIN_TUBE_RADIUS = 1e-6


class FrustumOverlay:
    """Edge geometry and style of one frustum visualization."""

    DEFAULT_RADIUS = 0.0015

    def __init__(self, name: str, color: Tuple[float, float, float] = (1.0, 1.0, 1.0),
                 depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE):
        self.name = name
        self.color = tuple(float(c) for c in color)
        self.depth_range = depth_range
        self.tube_radius = self.DEFAULT_RADIUS
        self.tessellation = 8
        self.layer_mask = LayerMask.FRUSTUM
        self.rendering_group_id = 0
        self.visible = True

        self.corners: Optional[FrustumCorners] = None
        self.stale = False
        self.disposed = False

    def update(self, proj: np.ndarray, view: np.ndarray) -> bool:
        """
        Recompute the corners; returns False when the matrices are singular.

        On failure the previous geometry is kept and marked stale so it is
        skipped for this frame.
        """
        self._check_alive()
        try:
            self.corners = corners(proj, view, self.depth_range)
        except SingularMatrixError as exc:
            logger.warning(f"Skipping frustum overlay '{self.name}': {exc}")
            self.stale = True
            return False
        self.stale = False
        return True

    def segments(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        if self.corners is None or self.disposed:
            return []
        return self.corners.segments()

    @property
    def is_drawable(self) -> bool:
        return self.visible and not self.stale and not self.disposed and self.corners is not None

    def set_thickness(self, radius: float):
        self.tube_radius = max(MIN_TUBE_RADIUS, float(radius))

    def set_emissive_color(self, color: Tuple[float, float, float]):
        self.color = tuple(float(c) for c in color)

    def set_visibility(self, visible: bool):
        self.visible = bool(visible)

    def toggle_visibility(self) -> bool:
        self.visible = not self.visible
        return self.visible

    def set_rendering_group_id(self, group_id: int):
        self.rendering_group_id = int(group_id)

    def set_layer_mask(self, mask: LayerMask):
        self.layer_mask = LayerMask(mask)

    def dispose(self):
        self.corners = None
        self.disposed = True

    def _check_alive(self):
        if self.disposed:
            raise RuntimeError(f"Frustum overlay '{self.name}' has been disposed")
