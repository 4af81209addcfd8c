# layerscene

`layerscene` describes a 3D scene as a stack of *layers*: basic solids,
coordinate frames, surgical end-effector models, coloured point clouds and
image backgrounds. It keeps the model, view, projection and global matrices
of each layer and viewport, builds the triangle meshes, and turns everything
into a list of `DrawCall` records that a graphics back end can execute.

All geometry is plain NumPy arrays. Matrices are 4×4, indexed
`matrix[row, column]`, and act on column vectors (`matrix @ point`).

## Installation

```
pip install .
pip install .[test]   # with pytest for the test suite
```

## Modules

| Module | Contents |
| --- | --- |
| `layerscene.transforms` | `translate`, `rotate`, `triangle_normal`, `to_rotation_translation`, `from_rotation_translation`. |
| `layerscene.geometry` | The `Mesh` container and the generators `circle`, `cone`, `cylinder`, `cylinder_side`, `arrow`, `sphere`, plus `circle_point_count` and `circle_positions`. |
| `layerscene.stl` | `read_stl` for binary STL files, and `StlModel` / `read_builtin` for the end-effector parts. |
| `layerscene.layers` | `Layer`, `ModelLayer`, `Texture3DLayer`, `LayerType`, `ViewPort`, `DrawCall`. |
| `layerscene.shapes` | `CircleLayer`, `ConeLayer`, `CylinderLayer`, `SphereLayer`, `CoordinateLayer`. |
| `layerscene.background` | `BackgroundImage`, `BackgroundLayer`, `PlaneBackgroundLayer`. |
| `layerscene.endeffector` | `EndEffectorLayer`, `EndEffectorType`. |
| `layerscene.renderer` | `LayerRenderer`, `RenderMode`, `Key`, `create_viewports`. |

## Transforms

`translate(matrix, offset)` and `rotate(matrix, angle, axis)` return the
matrix post-multiplied by a translation or by a rotation of `angle` radians
about `axis` (which is normalised; a zero axis raises `ValueError`).
`triangle_normal(p1, p2, p3)` gives the unit normal of a triangle, accepting
3- or 4-component points and stacked arrays of points. A pose splits into a
3×3 rotation and a translation with `to_rotation_translation` and is rebuilt
with `from_rotation_translation`.

## Meshes

Every generator returns a `Mesh` of unindexed triangles: three consecutive
vertices form one face, and each vertex has a homogeneous position and a face
normal whose fourth component is 1. The `pose` argument is a 4×4 matrix
(`None` means identity); `cylinder` also accepts a 3-vector origin.

```python
import numpy as np
from layerscene import geometry

pose = np.eye(4)

tube = geometry.cylinder(8.0, 3.0, pose)
tip = geometry.cone(4.0, 3.0, pose)
ball = geometry.sphere(5.0, pose)

print(len(tube))                          # number of vertices
both = geometry.Mesh.concat(tube, tip)
squashed = ball.scaled(1.0, 1.0, 0.5)     # positions scaled, normals kept
back = tube.flipped_normals()
buffer = both.interleaved()               # float32, shape (n, 8): position, normal
```

- `circle_point_count(radius)` is the number of rim points for a circle; it is
  at least eight. `circle_positions(radius, points_num, pose)` gives just the
  rim points.
- `circle` is a triangle fan around the pose origin; `cone` adds its base disc;
  `cylinder` is `cylinder_side` plus both end discs; `arrow` is a cylinder
  capped with a cone.
- `sphere` stacks circles between two polar caps. The circles are placed at
  absolute heights along z in the pose frame, replacing the pose's own z
  translation.

## Reading STL files

```python
import numpy as np
from layerscene.stl import read_stl

mesh = read_stl("part.stl", np.eye(3), np.zeros(3))
```

Each vertex `p` becomes `rotation @ p + translation`; normals are taken as
stored. A missing file raises `FileNotFoundError`, a truncated one
`ValueError`.

`StlModel` names the nine end-effector part files (`nh_0.STL`, `tgf_2.STL`
and so on); each member has `filename`, `rotation` and `translation`.
`read_builtin(model, models_dir="./models")` reads one of them with its
placement applied.

## Layers

`Layer.render(viewport)` returns the layer's draw calls, each tagged with the
`ViewPort` (`x`, `y`, `width`, `height`). A `DrawCall` records the shader
name, primitive (`"triangles"` or `"points"`), vertex count, uniforms, the
vertex data, textures, point size and viewport.

- `ModelLayer` holds a colour, light colour and light position, and model,
  view and projection matrices. Its uniforms include `model` (global × model)
  and `view_pos` (the view matrix's translation column). `set_color` changes
  the object colour.
- `Texture3DLayer` takes positions and per-vertex colours:
  `update_vertex3d(positions, colors)` draws them as triangles,
  `update_vertex(positions, colors)` as points of size 2.
- `CircleLayer`, `ConeLayer` (with `set_height`), `CylinderLayer` and
  `SphereLayer` rebuild their meshes through `set_property`. `CylinderLayer`
  and `SphereLayer` support `set_scale_factors(x, y, z)` or a single uniform
  factor.
- `CoordinateLayer(length, radius, pose)` draws three arrows: z in blue, then
  x in red and y in green.
- `BackgroundLayer` covers the viewport with an image and an optional
  single-channel mask; `update_data` takes a `BackgroundImage` (build one
  with `BackgroundImage.from_array`) and picks RGBA for four channels, RGB
  otherwise. `update_mask` raises `ValueError` unless the image has one
  channel. `PlaneBackgroundLayer(width, height, depth)` places the textured
  rectangle in the scene and uses model, view and projection matrices.
- `EndEffectorLayer(color, effector_type, models_dir="./models")` loads the
  fixed part and moving jaw(s) from the models directory and adds a cylinder
  as the tool body, drawn with its own shader. `set_angle` opens the jaws
  about their pivot; the tissue grasping forceps open a second jaw in the
  opposite sense, and the bipolar forceps reverse the angle.

## Building a scene

```python
import numpy as np
from layerscene.renderer import LayerRenderer, create_viewports
from layerscene.shapes import CoordinateLayer, CylinderLayer

projection = np.eye(4)   # your projection matrix
viewports = create_viewports(1920, 1080, 2)
renderer = LayerRenderer.with_viewports(projection, viewports, 1920, 1080)

frame = CoordinateLayer(10.0, 0.2, np.eye(4))
body = CylinderLayer(8.0, 3.0, (1.0, 0.0, 1.0), np.eye(4))

renderer.add_layer(frame, 0)
renderer.add_layer(frame, 1)
renderer.add_layer(body, 0)

calls = renderer.refresh()
```

`LayerRenderer(projection, mode, window_width, window_height)` builds the
viewports from a `RenderMode`: `LEFT` and `RIGHT` give one full-window
viewport, `STEREO` two side-by-side halves. `create_viewports` returns an
empty list for counts other than 1 and 2.

Each viewport has its own global transform (identity at first), view (a
180° rotation about x at first) and projection. `set_global`, `set_view` and
`add_layer` apply to every viewport when no index is given;
`set_projection` and `clear_layers` take an index. An index outside the
viewport range raises `IndexError`. `refresh()` hands each viewport's
matrices to its layers and returns all their draw calls in order.

### Keyboard-style control

`handle_key(Key.…)` changes the global pose of the controlled viewport:
W/S, A/D and Q/E translate by 1 along y, x and z; I/O, K/L and COMMA/PERIOD
rotate by 1.5° about x, y and z; ESCAPE sets `should_close`; B and V print
the pose and its transpose. With `set_keyboard_on_all_viewports(True)` (the
default for mode-built renderers) the new pose is copied to every viewport.
Otherwise `select_viewport(index)` chooses the viewport, and TAB asks for one
through `renderer.viewport_prompt`, which by default reads from the terminal.
`set_keyboard_control(False)` turns key handling off.

## What it does not do

`layerscene` opens no window and talks to no graphics API: shader programs
are only named, textures are recorded rather than uploaded, and `refresh`
returns draw calls instead of drawing. There is no render loop, no screenshot
of the window, and key presses must be fed in by the caller. There is no
layer for bent continuum segments, even though `LayerType.SEGMENT` exists.