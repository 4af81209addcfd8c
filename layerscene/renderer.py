"""Multi-viewport scene renderer: viewports, per-viewport transforms and layers."""

from __future__ import annotations

import itertools
import math
from enum import Enum, IntEnum
from typing import Callable

import numpy as np

from .layers import DrawCall, Layer, ViewPort
from .transforms import rotate, translate

__all__ = ["RenderMode", "Key", "LayerRenderer", "create_viewports"]

_UINT16_MAX = 0xFFFF
_UINT8_MAX = 0xFF
_DEFAULT_WIDTH = 1920
_DEFAULT_HEIGHT = 1080
_WINDOW_NAME = "layerRenderer"
_STEP = 1.0
_ANGLE_STEP = math.radians(1.5 * _STEP)

_DEFAULT_CAMERA_VIEW = rotate(np.eye(4), math.radians(180.0), (1.0, 0.0, 0.0))


class RenderMode(IntEnum):
    """Left or right monocular view, or a side-by-side stereo pair."""

    LEFT = 0
    RIGHT = 1
    STEREO = 2


class Key(Enum):
    """Keys understood by the keyboard control of the global transform."""

    ESCAPE = "escape"
    W = "w"
    S = "s"
    A = "a"
    D = "d"
    Q = "q"
    E = "e"
    I = "i"  # noqa: E741
    O = "o"  # noqa: E741
    K = "k"
    L = "l"
    COMMA = ","
    PERIOD = "."
    TAB = "tab"
    B = "b"
    V = "v"


_TRANSLATIONS = {
    Key.W: (0.0, _STEP, 0.0),
    Key.S: (0.0, -_STEP, 0.0),
    Key.A: (-_STEP, 0.0, 0.0),
    Key.D: (_STEP, 0.0, 0.0),
    Key.Q: (0.0, 0.0, _STEP),
    Key.E: (0.0, 0.0, -_STEP),
}

_ROTATIONS = {
    Key.I: (-_ANGLE_STEP, (1.0, 0.0, 0.0)),
    Key.O: (_ANGLE_STEP, (1.0, 0.0, 0.0)),
    Key.K: (-_ANGLE_STEP, (0.0, 1.0, 0.0)),
    Key.L: (_ANGLE_STEP, (0.0, 1.0, 0.0)),
    Key.COMMA: (-_ANGLE_STEP, (0.0, 0.0, 1.0)),
    Key.PERIOD: (_ANGLE_STEP, (0.0, 0.0, 1.0)),
}

_window_counter = itertools.count()


def _next_window_name() -> str:
    count = next(_window_counter)
    return _WINDOW_NAME if count == 0 else f"{_WINDOW_NAME} {count}"


def _matrix4(matrix) -> np.ndarray:
    array = np.array(matrix, dtype=float)
    if array.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {array.shape}")
    return array


def _check_size(name: str, value: int) -> int:
    value = int(value)
    if not 0 <= value <= _UINT16_MAX:
        raise ValueError(f"{name} must be in [0, {_UINT16_MAX}], got {value}")
    return value


def _ask_viewport(count: int) -> int:
    """Prompt on the terminal for the viewport to control."""
    answer = input(f"LayerRenderer: Specify a viewport index (0-{count - 1}) to control: ")
    return int(answer)


def create_viewports(width: int, height: int, count: int) -> list[ViewPort]:
    """One full-window viewport, two side-by-side halves, or none for other counts."""
    if count == 1:
        return [ViewPort(0, 0, width, height)]
    if count == 2:
        half = width // 2
        return [ViewPort(0, 0, half, height), ViewPort(half, 0, half, height)]
    return []


class LayerRenderer:
    """Holds viewports, their transforms and layers, and produces draw calls."""

    def __init__(self, projection, mode: RenderMode = RenderMode.LEFT,
                 window_width: int = _DEFAULT_WIDTH, window_height: int = _DEFAULT_HEIGHT):
        mode = RenderMode(mode)
        width = _check_size("window_width", window_width)
        height = _check_size("window_height", window_height)
        count = max(int(mode), 1)
        self._setup(projection, create_viewports(width, height, count), width, height,
                    control_all=True)

    @classmethod
    def with_viewports(cls, projection, viewports, window_width: int = _DEFAULT_WIDTH,
                       window_height: int = _DEFAULT_HEIGHT) -> "LayerRenderer":
        """A renderer with explicitly given viewports, each keyboard-controlled alone."""
        renderer = cls.__new__(cls)
        renderer._setup(
            projection,
            list(viewports),
            _check_size("window_width", window_width),
            _check_size("window_height", window_height),
            control_all=False,
        )
        return renderer

    def _setup(self, projection, viewports: list[ViewPort], width: int, height: int,
               control_all: bool) -> None:
        for viewport in viewports:
            if not isinstance(viewport, ViewPort):
                raise TypeError("viewports must be ViewPort instances")
        proj = _matrix4(projection)
        self.window_name = _next_window_name()
        self.window_width = width
        self.window_height = height
        self._viewports = viewports
        count = len(viewports)
        self._globals = [np.eye(4) for _ in range(count)]
        self._views = [_DEFAULT_CAMERA_VIEW.copy() for _ in range(count)]
        self._projections = [proj.copy() for _ in range(count)]
        self._layers: list[list[Layer]] = [[] for _ in range(count)]
        self._keyboard_control = True
        self._control_all = control_all
        self._controlled = 0
        self._should_close = False
        self._background_color = (0, 0, 0, _UINT8_MAX)
        self.viewport_prompt: Callable[[int], int] = _ask_viewport

    # ------------------------------------------------------------------ state

    @property
    def viewports(self) -> list[ViewPort]:
        return list(self._viewports)

    @property
    def viewport_count(self) -> int:
        return len(self._viewports)

    @property
    def controlled_viewport(self) -> int:
        return self._controlled

    @property
    def should_close(self) -> bool:
        return self._should_close

    @property
    def background_color(self) -> tuple[int, int, int, int]:
        return self._background_color

    @property
    def keyboard_control(self) -> bool:
        return self._keyboard_control

    @property
    def keyboard_on_all_viewports(self) -> bool:
        return self._control_all

    def global_matrix(self, viewport_idx: int) -> np.ndarray:
        return self._globals[self._index(viewport_idx)].copy()

    def view(self, viewport_idx: int) -> np.ndarray:
        return self._views[self._index(viewport_idx)].copy()

    def projection(self, viewport_idx: int) -> np.ndarray:
        return self._projections[self._index(viewport_idx)].copy()

    def layers(self, viewport_idx: int) -> list[Layer]:
        return list(self._layers[self._index(viewport_idx)])

    def _index(self, viewport_idx: int) -> int:
        index = int(viewport_idx)
        if not 0 <= index < len(self._viewports):
            raise IndexError(
                f"viewport index {index} is out of range "
                f"[0, {len(self._viewports) - 1}]"
            )
        return index

    # --------------------------------------------------------------- setters

    def set_global(self, global_matrix, viewport_idx: int | None = None) -> None:
        """Set the global transform of one viewport, or of all when no index is given."""
        matrix = _matrix4(global_matrix)
        if viewport_idx is None:
            self._globals = [matrix.copy() for _ in self._globals]
        else:
            self._globals[self._index(viewport_idx)] = matrix

    def set_view(self, view, viewport_idx: int | None = None) -> None:
        """Set the view of one viewport, or of all when no index is given."""
        matrix = _matrix4(view)
        if viewport_idx is None:
            self._views = [matrix.copy() for _ in self._views]
        else:
            self._views[self._index(viewport_idx)] = matrix

    def set_projection(self, projection, viewport_idx: int) -> None:
        """Set the projection of one viewport."""
        self._projections[self._index(viewport_idx)] = _matrix4(projection)

    def add_layer(self, layer: Layer, viewport_idx: int | None = None) -> None:
        """Add a layer to one viewport, or to every viewport when no index is given."""
        if not isinstance(layer, Layer):
            raise TypeError("layer must be a Layer")
        if viewport_idx is None:
            for layers in self._layers:
                layers.append(layer)
        else:
            self._layers[self._index(viewport_idx)].append(layer)

    def clear_layers(self, viewport_idx: int) -> None:
        """Remove every layer from one viewport."""
        self._layers[self._index(viewport_idx)].clear()

    def set_background_color(self, r: int, g: int, b: int, a: int = _UINT8_MAX) -> None:
        """Set the window clear colour as 8-bit components."""
        components = (int(r), int(g), int(b), int(a))
        for value in components:
            if not 0 <= value <= _UINT8_MAX:
                raise ValueError(f"colour components must be in [0, {_UINT8_MAX}], got {value}")
        self._background_color = components

    def set_keyboard_control(self, flag: bool) -> None:
        """Turn keyboard control of the global transform on or off."""
        self._keyboard_control = bool(flag)

    def set_keyboard_on_all_viewports(self, flag: bool) -> None:
        """Make keyboard control move every viewport's global transform together."""
        self._control_all = bool(flag)

    def select_viewport(self, index: int) -> None:
        """Choose the viewport whose global transform the keyboard moves."""
        self._controlled = self._index(index)

    # --------------------------------------------------------------- control

    def handle_key(self, key: Key) -> None:
        """Apply one key press to the controlled global transform."""
        key = Key(key)
        if not self._viewports or not self._keyboard_control:
            return
        n = self._controlled
        pose = self._globals[n]

        if key is Key.ESCAPE:
            self._should_close = True
        elif key in _TRANSLATIONS:
            pose = translate(pose, _TRANSLATIONS[key])
        elif key in _ROTATIONS:
            angle, axis = _ROTATIONS[key]
            pose = rotate(pose, angle, axis)
        elif key is Key.TAB:
            count = len(self._viewports)
            if count > 1 and not self._control_all:
                while True:
                    try:
                        choice = int(self.viewport_prompt(count))
                    except ValueError:
                        continue
                    if 0 <= choice < count:
                        self._controlled = choice
                        print(f"\tviewport {choice} is under controled.")
                        break
        elif key is Key.B:
            print("Model:")
            print(pose)
        elif key is Key.V:
            print("Model:")
            print(pose.T)

        self._globals[n] = pose
        if self._control_all:
            self.set_global(pose)

    def refresh(self) -> list[DrawCall]:
        """Push each viewport's transforms into its layers and collect their draw calls."""
        calls: list[DrawCall] = []
        for viewport, layers, proj, view, glob in zip(
            self._viewports, self._layers, self._projections, self._views, self._globals
        ):
            for layer in layers:
                layer.set_projection(proj)
                layer.set_view(view)
                layer.set_global(glob)
                calls.extend(layer.render(viewport))
        return calls