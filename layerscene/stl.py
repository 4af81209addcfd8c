"""Binary STL reading, including the bundled end-effector models."""

from __future__ import annotations

import math
from enum import Enum
from pathlib import Path

import numpy as np

from .geometry import Mesh

__all__ = ["StlModel", "read_stl", "read_builtin"]

_HEADER_SIZE = 80
_PREAMBLE_SIZE = _HEADER_SIZE + 4
_FACE_DTYPE = np.dtype(
    [
        ("normal", "<f4", (3,)),
        ("vertices", "<f4", (3, 3)),
        ("attribute", "<u2"),
    ]
)


def _columns(*values: float) -> np.ndarray:
    """Build a 3x3 matrix from nine values given column by column."""
    return np.array(values, dtype=float).reshape(3, 3).T


def _about_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return _columns(1, 0, 0, 0, c, s, 0, -s, c)


def _about_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return _columns(c, 0, -s, 0, 1, 0, s, 0, c)


class StlModel(Enum):
    """The STL models shipped with the end-effector layer, by file name."""

    NH_0_SIMPLIFIED = "nh_0_simplified.STL"
    NH_1_SIMPLIFIED = "nh_1_simplified.STL"
    NH_0 = "nh_0.STL"
    NH_1 = "nh_1.STL"
    BGF_0 = "bgf_0.STL"
    BGF_1 = "bgf_1.STL"
    TGF_0 = "tgf_0.STL"
    TGF_1 = "tgf_1.STL"
    TGF_2 = "tgf_2.STL"

    @property
    def filename(self) -> str:
        """Name of the model file inside the models directory."""
        return self.value

    @property
    def rotation(self) -> np.ndarray:
        """Rotation applied to every vertex when the model is read."""
        return _PLACEMENTS[self][0].copy()

    @property
    def translation(self) -> np.ndarray:
        """Translation added to every vertex after the rotation."""
        return _PLACEMENTS[self][1].copy()


_PLACEMENTS: dict[StlModel, tuple[np.ndarray, np.ndarray]] = {
    StlModel.NH_0_SIMPLIFIED: (_about_x(math.pi), np.array([-2.636925, 3.0, 14.68])),
    StlModel.NH_1_SIMPLIFIED: (_about_x(-math.pi / 2), np.array([-1.8, -2.534, 14.68])),
    StlModel.NH_0: (_about_x(math.pi), np.array([-2.637, 3.0, 15.08])),
    StlModel.NH_1: (_about_x(-math.pi / 2), np.array([-1.8, -2.427, 15.08])),
    StlModel.BGF_0: (_about_y(-math.pi), np.array([3.467, -3.337, 26.65])),
    StlModel.BGF_1: (_about_y(-math.pi), np.array([0.973, -2.2782, 26.65])),
    StlModel.TGF_0: (_about_y(-math.pi / 2), np.array([3.283, -3.287, -3.0])),
    StlModel.TGF_1: (_about_y(-math.pi / 2), np.array([1.6275, -2.7078, -2.9957])),
    StlModel.TGF_2: (_about_y(-math.pi / 2), np.array([3.0972, -2.7078, -2.997])),
}


def read_stl(path, rotation=None, translation=None) -> Mesh:
    """Read a binary STL file into a triangle mesh.

    Each vertex ``p`` becomes ``rotation @ p + translation``; face normals are
    taken as stored. Raises ``FileNotFoundError`` if the file is missing and
    ``ValueError`` if it is shorter than its face count requires.
    """
    rot = np.eye(3) if rotation is None else np.asarray(rotation, dtype=float)
    if rot.shape != (3, 3):
        raise ValueError(f"rotation must be 3x3, got shape {rot.shape}")
    shift = np.zeros(3) if translation is None else np.asarray(translation, dtype=float)
    if shift.shape != (3,):
        raise ValueError(f"translation must have 3 components, got shape {shift.shape}")

    data = Path(path).read_bytes()
    if len(data) < _PREAMBLE_SIZE:
        raise ValueError(f"{path}: too short to be a binary STL file")
    face_count = int.from_bytes(data[_HEADER_SIZE:_PREAMBLE_SIZE], "little")
    needed = _PREAMBLE_SIZE + face_count * _FACE_DTYPE.itemsize
    if len(data) < needed:
        raise ValueError(
            f"{path}: expected {face_count} faces ({needed} bytes), found {len(data)} bytes"
        )
    if face_count == 0:
        return Mesh.concat()

    faces = np.frombuffer(data, dtype=_FACE_DTYPE, count=face_count, offset=_PREAMBLE_SIZE)
    corners = faces["vertices"].astype(float).reshape(-1, 3)
    ones = np.ones((len(corners), 1))
    positions = np.hstack([corners @ rot.T + shift, ones])
    normals = np.hstack([np.repeat(faces["normal"].astype(float), 3, axis=0), ones])
    return Mesh(positions, normals)


def read_builtin(model: StlModel, models_dir="./models") -> Mesh:
    """Read one of the bundled models from ``models_dir`` with its placement."""
    model = StlModel(model)
    rotation, translation = _PLACEMENTS[model]
    return read_stl(Path(models_dir) / model.filename, rotation, translation)