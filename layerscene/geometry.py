"""Triangle mesh generators for basic solids.

Every generator returns a :class:`Mesh` of unindexed triangles: each run of
three consecutive vertices forms one face, and each vertex carries a
homogeneous position and a face normal whose fourth component is 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .transforms import triangle_normal

__all__ = [
    "Mesh",
    "circle_point_count",
    "circle_positions",
    "circle",
    "cone",
    "cylinder_side",
    "cylinder",
    "arrow",
    "sphere",
]

_MIN_POINTS_NUM = 8
_MIN_CIRCLES_NUM = 8
_CIRCLE_PRECISION = 0.5
_SPHERE_PRECISION = 0.25
_PI_APPROX = 3.1415926


def _as_rows4(data, name: str) -> np.ndarray:
    array = np.asarray(data, dtype=float)
    if array.size == 0:
        return np.zeros((0, 4))
    if array.ndim != 2 or array.shape[1] != 4:
        raise ValueError(f"{name} must have shape (n, 4), got {array.shape}")
    return array


@dataclass(frozen=True, eq=False)
class Mesh:
    """Vertex positions and normals of a triangle list."""

    positions: np.ndarray
    normals: np.ndarray

    def __post_init__(self):
        positions = _as_rows4(self.positions, "positions")
        normals = _as_rows4(self.normals, "normals")
        if len(positions) != len(normals):
            raise ValueError("positions and normals must have the same length")
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "normals", normals)

    @classmethod
    def concat(cls, *args: "Mesh") -> "Mesh":
        """Join meshes in order into one."""
        if not args:
            return cls(np.zeros((0, 4)), np.zeros((0, 4)))
        return cls(
            np.concatenate([mesh.positions for mesh in args]),
            np.concatenate([mesh.normals for mesh in args]),
        )

    def __len__(self) -> int:
        return len(self.positions)

    def flipped_normals(self) -> "Mesh":
        """The same mesh with every normal reversed, for the back face."""
        normals = -self.normals
        normals[:, 3] = 1.0
        return Mesh(self.positions.copy(), normals)

    def scaled(self, xscale: float, yscale: float, zscale: float) -> "Mesh":
        """The mesh with positions scaled per axis; normals are kept."""
        positions = self.positions * np.array([xscale, yscale, zscale, 1.0])
        return Mesh(positions, self.normals.copy())

    def interleaved(self) -> np.ndarray:
        """Vertex data as ``float32`` rows of position then normal, shape (n, 8)."""
        return np.hstack([self.positions, self.normals]).astype(np.float32)


def _as_pose(pose) -> np.ndarray:
    if pose is None:
        return np.eye(4)
    array = np.asarray(pose, dtype=float)
    if array.shape == (3,):
        result = np.eye(4)
        result[:3, 3] = array
        return result
    if array.shape != (4, 4):
        raise ValueError(f"pose must be a 4x4 matrix or a 3-vector origin, got {array.shape}")
    return array.copy()


def _origin(pose: np.ndarray) -> np.ndarray:
    return np.array([pose[0, 3], pose[1, 3], pose[2, 3], 1.0])


def _end_pose(pose: np.ndarray, length: float) -> np.ndarray:
    end = pose.copy()
    end[:3, 3] += length * pose[:3, 2]
    return end


def _assemble(corners, normals) -> Mesh:
    count = len(corners[0])
    ones = np.ones((count, 1))
    positions = np.stack([np.broadcast_to(c, (count, 4)) for c in corners], axis=1)
    normal_rows = np.stack([np.hstack([n, ones]) for n in normals], axis=1)
    return Mesh(positions.reshape(-1, 4), normal_rows.reshape(-1, 4))


def _triangles(a, b, c, normal) -> Mesh:
    return _assemble([a, b, c], [normal, normal, normal])


def _band(lower: np.ndarray, upper: np.ndarray, inward: bool = False) -> Mesh:
    a, b = lower, np.roll(lower, -1, axis=0)
    c, d = upper, np.roll(upper, -1, axis=0)
    first = triangle_normal(a, d, c)
    second = triangle_normal(a, b, d)
    if inward:
        first, second = -first, -second
    return _assemble([a, d, c, a, b, d], [first, first, first, second, second, second])


def circle_point_count(radius: float) -> int:
    """Number of rim points used for a circle of ``radius``."""
    count = int(int(radius) * _PI_APPROX * 2 / _CIRCLE_PRECISION)
    return max(count, _MIN_POINTS_NUM)


def circle_positions(radius: float, points_num: int, pose=None) -> np.ndarray:
    """Homogeneous rim points of a circle in the pose's local xy plane."""
    if points_num <= 0:
        raise ValueError("points_num must be positive")
    frame = _as_pose(pose)
    angles = (2.0 * math.pi / points_num) * np.arange(points_num)
    local = np.column_stack(
        [
            radius * np.cos(angles),
            radius * np.sin(angles),
            np.zeros(points_num),
            np.ones(points_num),
        ]
    )
    return local @ frame.T


def circle(radius: float, pose=None, points_num: int | None = None) -> Mesh:
    """Filled disc as a fan of triangles around the pose origin."""
    frame = _as_pose(pose)
    if points_num is None:
        points_num = circle_point_count(radius)
    rim = circle_positions(radius, points_num, frame)
    following = np.roll(rim, -1, axis=0)
    centre = _origin(frame)
    return _triangles(rim, following, centre, triangle_normal(rim, centre, following))


def cone(height: float, radius: float, pose=None) -> Mesh:
    """Cone standing on the pose's xy plane with its apex at local z = ``height``."""
    frame = _as_pose(pose)
    rim = circle_positions(radius, circle_point_count(radius), frame)
    following = np.roll(rim, -1, axis=0)
    apex = frame @ np.array([0.0, 0.0, height, 1.0])
    side = _triangles(rim, following, apex, triangle_normal(rim, following, apex))
    return Mesh.concat(side, circle(radius, frame))


def cylinder_side(length: float, radius: float, pose=None) -> Mesh:
    """Lateral surface of a cylinder along the pose's z axis, without end faces."""
    frame = _as_pose(pose)
    count = circle_point_count(radius)
    lower = circle_positions(radius, count, frame)
    upper = circle_positions(radius, count, _end_pose(frame, length))
    return _band(lower, upper)


def cylinder(length: float, radius: float, pose=None) -> Mesh:
    """Closed cylinder along the pose's z axis.

    ``pose`` may be a 4x4 matrix or a 3-vector giving just the origin.
    """
    frame = _as_pose(pose)
    return Mesh.concat(
        cylinder_side(length, radius, frame),
        circle(radius, frame),
        circle(radius, _end_pose(frame, length)),
    )


def arrow(length: float, radius: float, cone_height: float, cone_radius: float, pose=None) -> Mesh:
    """Cylindrical shaft of ``length`` capped with a cone, along the pose's z axis."""
    frame = _as_pose(pose)
    return Mesh.concat(
        cylinder(length, radius, frame),
        cone(cone_height, cone_radius, _end_pose(frame, length)),
    )


def sphere(radius: float, pose=None) -> Mesh:
    """Sphere built from stacked circles between two polar caps.

    The circles are placed at absolute heights along z in the pose frame,
    replacing the pose's own z translation.
    """
    frame = _as_pose(pose)
    points_num = max(int(int(radius) * _PI_APPROX * 2 / _SPHERE_PRECISION), _MIN_POINTS_NUM)
    circles_num = max(int(int(radius) * 2 / _SPHERE_PRECISION), _MIN_CIRCLES_NUM)
    gap = radius * 2.0 / circles_num

    top = frame @ np.array([0.0, 0.0, radius, 1.0])
    bottom = frame @ np.array([0.0, 0.0, -radius, 1.0])

    centre_pose = frame.copy()
    rings = []
    for i in range(1, circles_num):
        height = radius - i * gap
        ring_radius = math.sqrt(max(radius * radius - height * height, 0.0))
        centre_pose[2, 3] = height
        rings.append(circle_positions(ring_radius, points_num, centre_pose))

    first = rings[0]
    first_next = np.roll(first, -1, axis=0)
    top_cap = _triangles(first, first_next, top, triangle_normal(first, first_next, top))

    last = rings[-1]
    last_next = np.roll(last, -1, axis=0)
    bottom_cap = _triangles(last, bottom, last_next, triangle_normal(last, bottom, last_next))

    bands = [_band(lower, upper, inward=True) for lower, upper in zip(rings, rings[1:])]
    return Mesh.concat(top_cap, bottom_cap, *bands)