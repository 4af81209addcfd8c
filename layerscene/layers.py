"""Layer base classes: transforms, shader state and draw descriptions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum

import numpy as np

from .geometry import Mesh

__all__ = [
    "LayerType",
    "ViewPort",
    "DrawCall",
    "Layer",
    "ModelLayer",
    "Texture3DLayer",
]

_UINT16_MAX = 0xFFFF
_POINT_SIZE = 2.0


class LayerType(IntEnum):
    """Kind of content a layer renders."""

    BACKGROUND = 0
    CIRCLE = 1
    CYLINDER = 2
    SEGMENT = 3
    CONE = 4
    COORDINATE = 5
    END_EFFECTOR = 6
    TEXTURE3D = 7
    UNKNOWN = 8


@dataclass(frozen=True)
class ViewPort:
    """Rectangle of the window that layers are drawn into."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if not 0 <= value <= _UINT16_MAX:
                raise ValueError(f"viewport {name} must be in [0, {_UINT16_MAX}], got {value}")


@dataclass(frozen=True, eq=False)
class DrawCall:
    """One draw of a vertex buffer with a shader program and its uniforms."""

    shader: str
    primitive: str
    vertex_count: int
    uniforms: dict = field(default_factory=dict)
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 8), np.float32))
    textures: tuple = ()
    point_size: float | None = None
    viewport: ViewPort | None = None


def _matrix4(matrix) -> np.ndarray:
    array = np.array(matrix, dtype=float)
    if array.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {array.shape}")
    return array


def _vector3(vector, name: str) -> np.ndarray:
    array = np.array(vector, dtype=float)
    if array.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {array.shape}")
    return array


def _rows4(data, name: str) -> np.ndarray:
    array = np.asarray(data, dtype=float)
    if array.ndim != 2 or array.shape[1] not in (3, 4):
        raise ValueError(f"{name} must have shape (n, 3) or (n, 4), got {array.shape}")
    if array.shape[1] == 3:
        array = np.hstack([array, np.ones((len(array), 1))])
    return array


class Layer:
    """Something drawn into a viewport with a global transform."""

    def __init__(self, layer_type: LayerType):
        self.type = LayerType(layer_type)
        self._global = np.eye(4)
        self._model = np.eye(4)
        self._projection = np.eye(4)
        self._view = np.eye(4)

    @property
    def global_matrix(self) -> np.ndarray:
        return self._global.copy()

    @property
    def model(self) -> np.ndarray:
        return self._model.copy()

    @property
    def view(self) -> np.ndarray:
        return self._view.copy()

    @property
    def projection(self) -> np.ndarray:
        return self._projection.copy()

    def render(self, viewport: ViewPort) -> list[DrawCall]:
        """The layer's draw calls, targeted at ``viewport``."""
        if not isinstance(viewport, ViewPort):
            raise TypeError("viewport must be a ViewPort")
        return [replace(call, viewport=viewport) for call in self.draw()]

    def set_model(self, model) -> None:
        """Accept a model matrix; plain layers have none and ignore it."""
        _matrix4(model)

    def set_view(self, view) -> None:
        """Accept a view matrix; plain layers have none and ignore it."""
        _matrix4(view)

    def set_projection(self, projection) -> None:
        """Accept a projection matrix; plain layers have none and ignore it."""
        _matrix4(projection)

    def set_global(self, global_matrix) -> None:
        """Set the world-frame transform applied before the model matrix."""
        self._global = _matrix4(global_matrix)

    def draw(self) -> list[DrawCall]:
        """Draw calls for this layer; a plain layer draws nothing."""
        return []


class ModelLayer(Layer):
    """A lit, coloured triangle model with model, view and projection matrices."""

    def __init__(self, layer_type: LayerType, color):
        super().__init__(layer_type)
        self.shader = "texture_3d" if self.type is LayerType.TEXTURE3D else "model"
        self._color = _vector3(color, "color")
        self.light_color = np.ones(3)
        self.light_pos = np.zeros(3)
        self._vertices = np.zeros((0, 8), dtype=np.float32)

    @property
    def color(self) -> np.ndarray:
        return self._color.copy()

    @property
    def vertices(self) -> np.ndarray:
        """Interleaved vertex buffer, one row of 8 floats per vertex."""
        return self._vertices.copy()

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def shader_uniforms(self) -> dict:
        """Uniforms that persist on the shader between draws."""
        return {
            "object_color": self._color.copy(),
            "light_color": np.array(self.light_color, dtype=float),
            "light_pos": np.array(self.light_pos, dtype=float),
        }

    def set_model(self, model) -> None:
        self._model = _matrix4(model)

    def set_view(self, view) -> None:
        self._view = _matrix4(view)

    def set_projection(self, projection) -> None:
        self._projection = _matrix4(projection)

    def set_color(self, color) -> None:
        """Change the object colour."""
        self._color = _vector3(color, "color")

    def set_scale_factors(self, xscale: float, yscale: float | None = None,
                          zscale: float | None = None) -> None:
        """Scale the model per axis; one factor scales all three.

        Shapes that can be scaled override this; the base model ignores it.
        """
        self._resolve_scales(xscale, yscale, zscale)

    @staticmethod
    def _resolve_scales(xscale, yscale, zscale) -> tuple[float, float, float]:
        if yscale is None and zscale is None:
            return float(xscale), float(xscale), float(xscale)
        if yscale is None or zscale is None:
            raise ValueError("give one scale factor or all three")
        return float(xscale), float(yscale), float(zscale)

    def _set_mesh(self, mesh: Mesh) -> None:
        self._vertices = mesh.interleaved()

    def _frame_uniforms(self) -> dict:
        return {
            "projection": self._projection.copy(),
            "model": self._global @ self._model,
            "view": self._view.copy(),
            "view_pos": self._view[:3, 3].copy(),
        }

    def draw(self) -> list[DrawCall]:
        uniforms = {**self.shader_uniforms, **self._frame_uniforms()}
        return [
            DrawCall(self.shader, "triangles", self.vertex_count, uniforms, self._vertices.copy())
        ]


class Texture3DLayer(ModelLayer):
    """Coloured vertices drawn as a triangle mesh or as a point cloud."""

    def __init__(self):
        super().__init__(LayerType.TEXTURE3D, (0.0, 0.0, 0.0))
        self._primitive = "points"

    @property
    def primitive(self) -> str:
        return self._primitive

    def _load(self, positions, colors) -> None:
        pos = _rows4(positions, "positions")
        col = _rows4(colors, "colors")
        if len(pos) != len(col):
            raise ValueError("positions and colors must have the same length")
        if len(pos) == 0:
            raise ValueError("at least one vertex is required")
        self._vertices = np.hstack([pos, col]).astype(np.float32)

    def update_vertex3d(self, positions, colors) -> None:
        """Load a triangle mesh where each run of three vertices is one face."""
        self._load(positions, colors)
        self._primitive = "triangles"

    def update_vertex(self, positions, colors) -> None:
        """Load a coloured point cloud."""
        self._load(positions, colors)
        self._primitive = "points"

    def draw(self) -> list[DrawCall]:
        uniforms = {**self.shader_uniforms, **self._frame_uniforms()}
        point_size = _POINT_SIZE if self._primitive == "points" else None
        return [
            DrawCall(
                self.shader,
                self._primitive,
                self.vertex_count,
                uniforms,
                self._vertices.copy(),
                point_size=point_size,
            )
        ]