[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "layerscene"
version = "1.2.0"
description = "Layered 3D scene description: mesh generators, STL reading, layers and multi-viewport draw-call assembly."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "rendering",
    "mesh",
    "geometry",
    "stl",
    "viewport",
    "layers",
    "3d",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["layerscene"]

[tool.hatch.build.targets.sdist]
include = [
    "layerscene",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
