"""
Off-axis perspective projection.

Left-handed, row-vector matrices (``clip = v @ M``) with a homogeneous
divide by ``w = z_view``:

    | 2n/(r-l)        0               0   0 |
    | 0               2n/(t-b)        0   0 |
    | -(r+l)/(r-l)    -(t+b)/(t-b)    c   1 |
    | 0               0               d   0 |

For clip depth [-1, 1]: c = (f+n)/(f-n), d = -2fn/(f-n).
For clip depth [0, 1]:  c = f/(f-n),     d = -fn/(f-n).

With these signs a view-space point on the near plane at x = r maps to
x_ndc = +1 and x = l maps to -1, so the frustum recovered by unprojecting
the clip cube has exactly the (l, r, b, t) rectangle at the near plane.
"""

import math
from enum import Enum

import numpy as np

from ..core.exceptions import InvalidOpticalConfig


class DepthRange(Enum):
    """Clip-space depth convention"""
    MINUS_ONE_TO_ONE = "[-1,1]"
    ZERO_TO_ONE = "[0,1]"

    @property
    def near_ndc(self) -> float:
        return -1.0 if self is DepthRange.MINUS_ONE_TO_ONE else 0.0


def off_axis_projection(left: float, right: float, bottom: float, top: float,
                        near: float, far: float,
                        depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE) -> np.ndarray:
    """
    Build an asymmetric frustum projection matrix.

    Raises:
        InvalidOpticalConfig: zero-width/height/depth frustum or non-finite input
    """
    for name, value in (("left", left), ("right", right), ("bottom", bottom),
                        ("top", top), ("near", near), ("far", far)):
        if not math.isfinite(value):
            raise InvalidOpticalConfig(name, value, "frustum plane is not finite")
    if right == left:
        raise InvalidOpticalConfig("right", right, "right == left, zero-width frustum")
    if top == bottom:
        raise InvalidOpticalConfig("top", top, "top == bottom, zero-height frustum")
    if near <= 0:
        raise InvalidOpticalConfig("near", near, "near plane must be in front of the eye")
    if far <= near:
        raise InvalidOpticalConfig("far", far, "far plane must lie beyond the near plane")

    width = right - left
    height = top - bottom
    depth = far - near

    if depth_range is DepthRange.ZERO_TO_ONE:
        c = far / depth
        d = -far * near / depth
    else:
        c = (far + near) / depth
        d = -2.0 * far * near / depth

    proj = np.zeros((4, 4), dtype=np.float64)
    proj[0, 0] = 2.0 * near / width
    proj[1, 1] = 2.0 * near / height
    proj[2, 0] = -(right + left) / width
    proj[2, 1] = -(top + bottom) / height
    proj[2, 2] = c
    proj[2, 3] = 1.0
    proj[3, 2] = d

    if not np.all(np.isfinite(proj)):
        raise InvalidOpticalConfig("projection", None, "matrix has non-finite entries")
    return proj
