"""Textured background layers: a full-window image or a plane in the scene."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .layers import DrawCall, Layer, LayerType

__all__ = ["BackgroundImage", "BackgroundLayer", "PlaneBackgroundLayer"]

_UINT16_MAX = 0xFFFF
_UINT8_MAX = 0xFF
_QUAD_INDICES = np.array([0, 1, 3, 1, 2, 3], dtype=np.uint32)
_IMAGE_UNIT = 0
_MASK_UNIT = 1


def _matrix4(matrix) -> np.ndarray:
    array = np.array(matrix, dtype=float)
    if array.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {array.shape}")
    return array


def _quad(half_width: float, half_height: float, depth: float) -> np.ndarray:
    """Four corners with texture coordinates: top right, bottom right, bottom left, top left."""
    return np.array(
        [
            [half_width, half_height, depth, 1.0, 1.0],
            [half_width, -half_height, depth, 1.0, 0.0],
            [-half_width, -half_height, depth, 0.0, 0.0],
            [-half_width, half_height, depth, 0.0, 1.0],
        ],
        dtype=np.float32,
    )


@dataclass(frozen=True, eq=False)
class BackgroundImage:
    """Raw 8-bit image data with its size; ``data`` may be ``None`` for no image."""

    data: np.ndarray | None = None
    width: int = 0
    height: int = 0
    channels: int = 0

    def __post_init__(self):
        for name, limit in (("width", _UINT16_MAX), ("height", _UINT16_MAX),
                            ("channels", _UINT8_MAX)):
            value = getattr(self, name)
            if not 0 <= value <= limit:
                raise ValueError(f"{name} must be in [0, {limit}], got {value}")
        if self.data is not None:
            pixels = np.asarray(self.data, dtype=np.uint8).reshape(-1)
            expected = self.width * self.height * self.channels
            if pixels.size != expected:
                raise ValueError(
                    f"image data holds {pixels.size} bytes, expected {expected}"
                )
            object.__setattr__(self, "data", pixels)

    @classmethod
    def from_array(cls, array) -> "BackgroundImage":
        """Wrap an array of shape (height, width) or (height, width, channels)."""
        pixels = np.asarray(array, dtype=np.uint8)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3:
            raise ValueError(f"expected a 2D or 3D image array, got shape {pixels.shape}")
        height, width, channels = pixels.shape
        return cls(pixels, width, height, channels)

    @property
    def pixels(self) -> np.ndarray | None:
        """The data as an array of shape (height, width, channels)."""
        if self.data is None:
            return None
        return self.data.reshape(self.height, self.width, self.channels)


class BackgroundLayer(Layer):
    """An image, with an optional single-channel mask, covering the whole viewport."""

    def __init__(self):
        super().__init__(LayerType.BACKGROUND)
        self.shader = "texture"
        self._quad = _quad(1.0, 1.0, 1.0)
        self._texture = {"unit": _IMAGE_UNIT, "format": "RGB", "image": None}
        self._mask = {"unit": _MASK_UNIT, "format": "RED", "image": None}

    @property
    def quad(self) -> np.ndarray:
        """Corner vertices as rows of x, y, z, u, v."""
        return self._quad.copy()

    @property
    def indices(self) -> np.ndarray:
        """Element indices of the two triangles covering the quad."""
        return _QUAD_INDICES.copy()

    @property
    def texture(self) -> dict:
        return dict(self._texture)

    @property
    def mask(self) -> dict:
        return dict(self._mask)

    def update_data(self, image: BackgroundImage) -> None:
        """Upload a new background image; an image without data changes nothing."""
        if image.data is None:
            return
        fmt = "RGBA" if image.channels == 4 else "RGB"
        self._texture = {"unit": _IMAGE_UNIT, "format": fmt, "image": image}

    def update_mask(self, image: BackgroundImage) -> None:
        """Upload a single-channel mask of the same size as the image."""
        if image.channels != 1:
            raise ValueError(f"mask must have exactly 1 channel, got {image.channels}")
        if image.data is None:
            return
        self._mask = {"unit": _MASK_UNIT, "format": "RED", "image": image}

    def _uniforms(self) -> dict:
        return {"image": _IMAGE_UNIT, "mask": _MASK_UNIT}

    def draw(self) -> list[DrawCall]:
        return [
            DrawCall(
                self.shader,
                "triangles",
                len(_QUAD_INDICES),
                self._uniforms(),
                self._quad[_QUAD_INDICES].copy(),
                textures=(dict(self._texture), dict(self._mask)),
            )
        ]


class PlaneBackgroundLayer(BackgroundLayer):
    """A textured rectangle placed in the scene at a given depth."""

    def __init__(self, width: float, height: float, depth: float):
        super().__init__()
        self.shader = "texture3d"
        self._quad = _quad(width / 2.0, height / 2.0, depth)

    def set_model(self, model) -> None:
        self._model = _matrix4(model)

    def set_view(self, view) -> None:
        self._view = _matrix4(view)

    def set_projection(self, projection) -> None:
        self._projection = _matrix4(projection)

    def _uniforms(self) -> dict:
        return {
            **super()._uniforms(),
            "projection": self._projection.copy(),
            "model": self._global @ self._model,
            "view": self._view.copy(),
        }

    def draw(self) -> list[DrawCall]:
        return super().draw()