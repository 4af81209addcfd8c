"""Layered 3D scene description: transforms, mesh generators, STL reading, layers and multi-viewport draw calls."""

__version__ = "1.2.0"

__all__ = [
    "background",
    "endeffector",
    "geometry",
    "layers",
    "renderer",
    "shapes",
    "stl",
    "transforms",
]