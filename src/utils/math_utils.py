"""
Math helpers

Left-handed, row-vector conventions throughout (+X right, +Y up, +Z forward,
points transform as ``v @ M``).
"""

import numpy as np
import pyrr
from typing import Tuple


def is_finite(*values) -> bool:
    """True when every value (scalar or array) is finite"""
    return all(bool(np.all(np.isfinite(v))) for v in values)


def as_vector3(value) -> np.ndarray:
    """Coerce a 3-sequence into a float64 vector"""
    vec = np.asarray(value, dtype=np.float64).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"Expected 3 components, got {vec.shape[0]}")
    return vec.copy()


def normalize(vec: np.ndarray) -> np.ndarray:
    """Unit vector; raises on zero length"""
    length = float(np.linalg.norm(vec))
    if length < 1e-12 or not np.isfinite(length):
        raise ValueError("Cannot normalize a zero-length vector")
    return pyrr.vector.normalise(np.asarray(vec, dtype=np.float64))


def rotation_x(angle: float) -> np.ndarray:
    """Rotation about X (pitch); positive pitch tilts forward downwards"""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, s],
        [0.0, -s, c],
    ])


def rotation_y(angle: float) -> np.ndarray:
    """Rotation about Y (yaw); positive yaw turns forward towards +X"""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, 0.0, -s],
        [0.0, 1.0, 0.0],
        [s, 0.0, c],
    ])


def rotation_z(angle: float) -> np.ndarray:
    """Rotation about Z (roll)"""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, s, 0.0],
        [-s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])


def yaw_pitch_roll_matrix(yaw: float, pitch: float, roll: float) -> np.ndarray:
    """
    3x3 orientation matrix, roll applied first, then pitch, then yaw.

    Rows are the images of the local basis: row 0 = right, row 1 = up,
    row 2 = forward.
    """
    return rotation_z(roll) @ rotation_x(pitch) @ rotation_y(yaw)


def local_axes(yaw: float, pitch: float, roll: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """(right, up, forward) world-space unit vectors for an orientation"""
    rot = yaw_pitch_roll_matrix(yaw, pitch, roll)
    return rot[0].copy(), rot[1].copy(), rot[2].copy()


def transform_point(point: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """
    Transform a 3D point by a 4x4 row-vector matrix with homogeneous divide.

    Raises ZeroDivisionError when w is (numerically) zero.
    """
    vec4 = pyrr.matrix44.apply_to_vector(
        np.asarray(matrix, dtype=np.float64),
        np.append(np.asarray(point, dtype=np.float64), 1.0),
    )
    w = vec4[3]
    if abs(w) < 1e-12 or not np.isfinite(w):
        raise ZeroDivisionError("Homogeneous w is zero")
    return vec4[:3] / w
