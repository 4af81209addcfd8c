"""Homogeneous 4x4 transform helpers.

Matrices are numpy arrays indexed as ``matrix[row, column]`` and act on
column vectors, so a point ``p`` is transformed as ``matrix @ p``.
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "translate",
    "rotate",
    "triangle_normal",
    "to_rotation_translation",
    "from_rotation_translation",
]


def _as_matrix4(matrix) -> np.ndarray:
    array = np.asarray(matrix, dtype=float)
    if array.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {array.shape}")
    return array


def _as_vector3(vector, name: str) -> np.ndarray:
    array = np.asarray(vector, dtype=float)
    if array.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {array.shape}")
    return array


def translate(matrix, offset) -> np.ndarray:
    """Return ``matrix`` post-multiplied by a translation of ``offset``."""
    base = _as_matrix4(matrix)
    step = np.eye(4)
    step[:3, 3] = _as_vector3(offset, "offset")
    return base @ step


def rotate(matrix, angle: float, axis) -> np.ndarray:
    """Return ``matrix`` post-multiplied by a rotation of ``angle`` radians about ``axis``."""
    base = _as_matrix4(matrix)
    direction = _as_vector3(axis, "axis")
    length = np.linalg.norm(direction)
    if length == 0.0:
        raise ValueError("rotation axis must not be the zero vector")
    x, y, z = direction / length
    c = np.cos(angle)
    s = np.sin(angle)
    outer = np.outer((x, y, z), (x, y, z))
    skew = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    step = np.eye(4)
    step[:3, :3] = c * np.eye(3) + (1.0 - c) * outer + s * skew
    return base @ step


def triangle_normal(p1, p2, p3) -> np.ndarray:
    """Unit normal of the triangle ``p1, p2, p3``.

    Points may have three or four components (only x, y, z are used) and may
    be stacked along leading axes to compute many normals at once. A
    degenerate triangle yields NaN components.
    """
    a = np.asarray(p1, dtype=float)[..., :3]
    b = np.asarray(p2, dtype=float)[..., :3]
    c = np.asarray(p3, dtype=float)[..., :3]
    normal = np.cross(a - b, a - c)
    length = np.linalg.norm(normal, axis=-1, keepdims=True)
    with np.errstate(invalid="ignore", divide="ignore"):
        return normal / length


def to_rotation_translation(matrix) -> tuple[np.ndarray, np.ndarray]:
    """Split a rigid transform into its 3x3 rotation and 3-vector translation."""
    array = _as_matrix4(matrix)
    return array[:3, :3].copy(), array[:3, 3].copy()


def from_rotation_translation(rotation, translation) -> np.ndarray:
    """Build a 4x4 rigid transform from a 3x3 rotation and a translation."""
    rot = np.asarray(rotation, dtype=float)
    if rot.shape != (3, 3):
        raise ValueError(f"rotation must be 3x3, got shape {rot.shape}")
    result = np.eye(4)
    result[:3, :3] = rot
    result[:3, 3] = _as_vector3(translation, "translation")
    return result