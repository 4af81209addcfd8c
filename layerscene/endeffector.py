"""Surgical end-effector layer built from bundled STL parts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from .geometry import cylinder
from .layers import DrawCall, LayerType, ModelLayer
from .stl import StlModel, read_builtin
from .transforms import rotate, translate

__all__ = ["EndEffectorType", "EndEffectorLayer"]


class EndEffectorType(IntEnum):
    """Supported end-effector models."""

    NEEDLE_HOLDER_SIMPLIFIED = 0
    NEEDLE_HOLDER = 1
    BIPOLAR_GRASPING_FORCEPS = 2
    TISSUE_GRASPING_FORCEPS = 3


@dataclass(frozen=True)
class _Spec:
    parts: tuple
    pivot: tuple
    axis: tuple
    body_origin: tuple
    body_length: float
    body_radius: float


_SPECS = {
    EndEffectorType.NEEDLE_HOLDER_SIMPLIFIED: _Spec(
        (StlModel.NH_0_SIMPLIFIED, StlModel.NH_1_SIMPLIFIED),
        (0.0, -1.2, 5.7), (1.0, 0.0, 0.0),
        (0.0, 0.0, -1.9 + 1.42 - 4.0), 8.0, 3.7,
    ),
    EndEffectorType.NEEDLE_HOLDER: _Spec(
        (StlModel.NH_0, StlModel.NH_1),
        (0.0, -1.201, 6.10), (1.0, 0.0, 0.0),
        (0.0, 0.0, -3.1), 3.05 + 0.36, 3.0 + 0.2,
    ),
    EndEffectorType.BIPOLAR_GRASPING_FORCEPS: _Spec(
        (StlModel.BGF_0, StlModel.BGF_1),
        (-1.899, 0.0, 5.753), (0.0, 1.0, 0.0),
        (0.0, 0.0, -3.0), 3.05 + 0.1, 3.55,
    ),
    EndEffectorType.TISSUE_GRASPING_FORCEPS: _Spec(
        (StlModel.TGF_0, StlModel.TGF_1, StlModel.TGF_2),
        (0.0, 0.0, 8.703), (0.0, 1.0, 0.0),
        (0.0, 0.0, -3.0), 3.05 + 0.1, 3.25,
    ),
}


class EndEffectorLayer(ModelLayer):
    """A fixed jaw, one or two jaws that open about a pivot, and a plain tool body."""

    def __init__(self, color, effector_type: EndEffectorType, models_dir="./models"):
        super().__init__(LayerType.END_EFFECTOR, color)
        self.effector_type = EndEffectorType(effector_type)
        self.ignore_shader = "model_ignore"
        spec = _SPECS[self.effector_type]
        self._angle = 0.0
        self._pivot = np.array(spec.pivot, dtype=float)
        self._axis = np.array(spec.axis, dtype=float)

        meshes = [read_builtin(part, models_dir) for part in spec.parts]
        self._set_mesh(meshes[0])
        self._vertices_active = meshes[1].interleaved()
        self._vertices_active2 = (
            meshes[2].interleaved() if len(meshes) > 2 else np.zeros((0, 8), np.float32)
        )
        self._vertices_ignore = cylinder(
            spec.body_length, spec.body_radius, spec.body_origin
        ).interleaved()

    @property
    def angle(self) -> float:
        return self._angle

    @property
    def pivot(self) -> np.ndarray:
        return self._pivot.copy()

    @property
    def axis(self) -> np.ndarray:
        return self._axis.copy()

    @property
    def active_vertices(self) -> np.ndarray:
        return self._vertices_active.copy()

    @property
    def second_active_vertices(self) -> np.ndarray:
        return self._vertices_active2.copy()

    @property
    def body_vertices(self) -> np.ndarray:
        return self._vertices_ignore.copy()

    def set_angle(self, angle: float) -> None:
        """Set the jaw opening angle in radians (reversed for bipolar forceps)."""
        if self.effector_type is EndEffectorType.BIPOLAR_GRASPING_FORCEPS:
            angle = -angle
        self._angle = float(angle)

    def _hinged(self, model: np.ndarray, angle: float) -> np.ndarray:
        mat = translate(model, self._pivot)
        mat = rotate(mat, angle, self._axis)
        return translate(mat, -self._pivot)

    def draw(self) -> list[DrawCall]:
        """Fixed part, moving part(s), then the tool body with its own shader."""
        model = self._global @ self._model
        base = {
            **self.shader_uniforms,
            "projection": self._projection.copy(),
            "view": self._view.copy(),
        }

        def call(matrix, vertices):
            return DrawCall(
                self.shader, "triangles", len(vertices),
                {**base, "model": matrix}, vertices.copy(),
            )

        calls = [
            call(model, self._vertices),
            call(self._hinged(model, self._angle), self._vertices_active),
        ]
        if self.effector_type is EndEffectorType.TISSUE_GRASPING_FORCEPS:
            calls.append(call(self._hinged(model, -self._angle), self._vertices_active2))
        calls.append(
            DrawCall(
                self.ignore_shader,
                "triangles",
                len(self._vertices_ignore),
                {
                    "projection": self._projection.copy(),
                    "model": model.copy(),
                    "view": self._view.copy(),
                },
                self._vertices_ignore.copy(),
            )
        )
        return calls