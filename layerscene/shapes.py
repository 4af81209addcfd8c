"""Layers that render basic solids: circle, cone, cylinder, sphere and axes."""

from __future__ import annotations

import math

import numpy as np

from .geometry import arrow, circle, cone, cylinder, sphere
from .layers import DrawCall, LayerType, ModelLayer
from .transforms import rotate

__all__ = [
    "CircleLayer",
    "ConeLayer",
    "CylinderLayer",
    "SphereLayer",
    "CoordinateLayer",
]

_RED = np.array([1.0, 0.0, 0.0])
_GREEN = np.array([0.0, 1.0, 0.0])
_BLUE = np.array([0.0, 0.0, 1.0])


def _pose(pose) -> np.ndarray:
    if pose is None:
        return np.eye(4)
    array = np.array(pose, dtype=float)
    if array.shape != (4, 4):
        raise ValueError(f"pose must be a 4x4 matrix, got shape {array.shape}")
    return array


class CircleLayer(ModelLayer):
    """A filled disc in the pose's xy plane."""

    def __init__(self, radius: float, color, pose=None):
        super().__init__(LayerType.CIRCLE, color)
        self._pose = _pose(pose)
        self._radius = float(radius)
        self.set_property(self._radius, self._pose)

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def pose(self) -> np.ndarray:
        return self._pose.copy()

    def set_property(self, radius: float, pose=None) -> None:
        """Rebuild the disc.

        Without a pose the stored pose is used and the new radius is kept;
        with a pose the disc is rebuilt once and the stored values stay.
        """
        if pose is None:
            self._radius = float(radius)
            frame = self._pose
        else:
            frame = _pose(pose)
        self._set_mesh(circle(radius, frame))


class ConeLayer(ModelLayer):
    """A cone standing on the pose's xy plane."""

    def __init__(self, height: float, radius: float, color, pose=None):
        super().__init__(LayerType.CONE, color)
        self._pose = _pose(pose)
        self._radius = float(radius)
        self._height = float(height)
        self.set_property(self._height, self._radius, self._pose)

    @property
    def height(self) -> float:
        return self._height

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def pose(self) -> np.ndarray:
        return self._pose.copy()

    def set_property(self, height: float, radius: float, pose=None) -> None:
        """Rebuild the cone from the given values without storing them."""
        self._set_mesh(cone(height, radius, self._pose if pose is None else _pose(pose)))

    def set_height(self, height: float) -> None:
        """Change the height, keeping the stored radius and pose."""
        self._height = float(height)
        self.set_property(self._height, self._radius, self._pose)


class CylinderLayer(ModelLayer):
    """A closed cylinder along the pose's z axis."""

    def __init__(self, length: float, radius: float, color, pose=None):
        super().__init__(LayerType.CYLINDER, color)
        self._pose = _pose(pose)
        self._length = float(length)
        self._radius = float(radius)
        self.set_property(self._length, self._radius, self._pose)

    @property
    def length(self) -> float:
        return self._length

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def pose(self) -> np.ndarray:
        return self._pose.copy()

    def set_property(self, length: float, radius: float | None = None, pose=None) -> None:
        """Rebuild the cylinder; omitted radius and pose keep their stored values."""
        self._pose = self._pose if pose is None else _pose(pose)
        self._length = float(length)
        if radius is not None:
            self._radius = float(radius)
        self._set_mesh(cylinder(self._length, self._radius, self._pose))

    def set_scale_factors(self, xscale: float, yscale: float | None = None,
                          zscale: float | None = None) -> None:
        """Rebuild the cylinder with its positions scaled per axis."""
        scales = self._resolve_scales(xscale, yscale, zscale)
        self._set_mesh(cylinder(self._length, self._radius, self._pose).scaled(*scales))


class SphereLayer(ModelLayer):
    """A sphere centred on the pose's xy plane."""

    def __init__(self, radius: float, color, pose=None):
        super().__init__(LayerType.CONE, color)
        self._pose = _pose(pose)
        self._radius = float(radius)
        self.set_property(self._radius, self._pose)

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def pose(self) -> np.ndarray:
        return self._pose.copy()

    def set_property(self, radius: float, pose=None) -> None:
        """Rebuild the sphere from the given values without storing them."""
        self._set_mesh(sphere(radius, self._pose if pose is None else _pose(pose)))

    def set_scale_factors(self, xscale: float, yscale: float | None = None,
                          zscale: float | None = None) -> None:
        """Rebuild the sphere with its positions scaled per axis."""
        scales = self._resolve_scales(xscale, yscale, zscale)
        self._set_mesh(sphere(self._radius, self._pose).scaled(*scales))


class CoordinateLayer(ModelLayer):
    """Three arrows for the x (red), y (green) and z (blue) axes of a frame."""

    def __init__(self, length: float, radius: float, pose=None):
        super().__init__(LayerType.COORDINATE, _BLUE)
        frame = _pose(pose)
        cone_radius = radius * 2.0
        cone_height = cone_radius * 2.2

        def axis(axis_pose: np.ndarray) -> np.ndarray:
            return arrow(length, radius, cone_height, cone_radius, axis_pose).interleaved()

        self._set_mesh(arrow(length, radius, cone_height, cone_radius, frame))
        self._vertices_x = axis(rotate(frame, math.radians(90.0), (0.0, 1.0, 0.0)))
        self._vertices_y = axis(rotate(frame, math.radians(-90.0), (1.0, 0.0, 0.0)))

    def draw(self) -> list[DrawCall]:
        """One draw call per axis: z, then x, then y."""
        frame = self._frame_uniforms()
        calls = []
        for color, vertices in (
            (self._color, self._vertices),
            (_RED, self._vertices_x),
            (_GREEN, self._vertices_y),
        ):
            uniforms = {
                "object_color": np.array(color, dtype=float),
                "light_color": np.array(self.light_color, dtype=float),
                "light_pos": np.array(self.light_pos, dtype=float),
                **{name: np.array(value) for name, value in frame.items()},
            }
            calls.append(
                DrawCall(self.shader, "triangles", len(vertices), uniforms, vertices.copy())
            )
        return calls