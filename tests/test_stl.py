import math
import struct

import numpy as np
import pytest

from layerscene.stl import StlModel, read_builtin, read_stl


def _write_stl(path, faces, header=b"test model"):
    """faces: iterable of (normal, p1, p2, p3) triples of 3-tuples."""
    faces = list(faces)
    with open(path, "wb") as handle:
        handle.write(header.ljust(80, b"\0"))
        handle.write(struct.pack("<I", len(faces)))
        for normal, p1, p2, p3 in faces:
            handle.write(struct.pack("<12f", *normal, *p1, *p2, *p3))
            handle.write(b"\0\0")


FACES = [
    ((0.0, 0.0, 1.0), (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    ((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)),
]


def test_read_without_transform_keeps_vertices(tmp_path):
    path = tmp_path / "part.STL"
    _write_stl(path, FACES)
    mesh = read_stl(path)
    assert len(mesh) == 3 * len(FACES)
    expected = np.array([p for _, *points in FACES for p in points])
    np.testing.assert_allclose(mesh.positions[:, :3], expected)
    assert np.all(mesh.positions[:, 3] == 1.0)


def test_normals_repeat_per_vertex_with_unit_w(tmp_path):
    path = tmp_path / "part.STL"
    _write_stl(path, FACES)
    mesh = read_stl(path)
    for index, (normal, *_rest) in enumerate(FACES):
        for row in mesh.normals[3 * index : 3 * index + 3]:
            np.testing.assert_allclose(row[:3], normal)
            assert row[3] == 1.0


def test_translation_is_added(tmp_path):
    path = tmp_path / "part.STL"
    _write_stl(path, FACES[:1])
    mesh = read_stl(path, translation=(1.0, 2.0, 3.0))
    np.testing.assert_allclose(mesh.positions[0, :3], (1.0, 2.0, 3.0))


def test_rotation_leaves_normals_untouched(tmp_path):
    path = tmp_path / "part.STL"
    _write_stl(path, FACES)
    plain = read_stl(path)
    turned = read_stl(path, rotation=StlModel.NH_0.rotation)
    np.testing.assert_allclose(turned.normals, plain.normals)
    lengths_before = np.linalg.norm(plain.positions[:, :3], axis=1)
    lengths_after = np.linalg.norm(turned.positions[:, :3], axis=1)
    np.testing.assert_allclose(lengths_after, lengths_before, atol=1e-12)


def test_empty_file_gives_empty_mesh(tmp_path):
    path = tmp_path / "empty.STL"
    _write_stl(path, [])
    assert len(read_stl(path)) == 0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_stl(tmp_path / "absent.STL")


def test_truncated_faces_raise(tmp_path):
    path = tmp_path / "cut.STL"
    _write_stl(path, FACES)
    path.write_bytes(path.read_bytes()[:-10])
    with pytest.raises(ValueError):
        read_stl(path)


def test_short_header_raises(tmp_path):
    path = tmp_path / "tiny.STL"
    path.write_bytes(b"solid")
    with pytest.raises(ValueError):
        read_stl(path)


def test_bad_rotation_shape_raises(tmp_path):
    path = tmp_path / "part.STL"
    _write_stl(path, FACES)
    with pytest.raises(ValueError):
        read_stl(path, rotation=np.eye(4))


def test_builtin_places_origin_at_translation(tmp_path):
    _write_stl(tmp_path / "bgf_0.STL", FACES[:1])
    mesh = read_builtin(StlModel.BGF_0, tmp_path)
    np.testing.assert_allclose(mesh.positions[0, :3], (3.467, -3.337, 26.65))


def test_builtin_rotation_flips_y_for_needle_holder(tmp_path):
    _write_stl(tmp_path / "nh_0.STL", [((0, 0, 1), (0, 1, 0), (0, 1, 0), (0, 1, 0))])
    mesh = read_builtin(StlModel.NH_0, tmp_path)
    offset = mesh.positions[0, :3] - StlModel.NH_0.translation
    np.testing.assert_allclose(offset, (0.0, -1.0, 0.0), atol=1e-12)


def test_builtin_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_builtin(StlModel.TGF_2, tmp_path)


def test_model_file_names(tmp_path):
    assert StlModel.TGF_2.filename == "tgf_2.STL"
    assert StlModel.NH_1_SIMPLIFIED.filename == "nh_1_simplified.STL"
    _write_stl(tmp_path / "tgf_2.STL", FACES)
    mesh = read_builtin(StlModel.TGF_2, tmp_path)
    assert len(mesh) == 3 * len(FACES)


@pytest.mark.parametrize("model", list(StlModel))
def test_model_rotations_are_proper(model, tmp_path):
    rotation = model.rotation
    np.testing.assert_allclose(rotation @ rotation.T, np.eye(3), atol=1e-12)
    assert np.linalg.det(rotation) == pytest.approx(1.0)

    point = (1.0, 2.0, 3.0)
    _write_stl(tmp_path / model.filename, [((0, 0, 1), point, point, point)])
    mesh = read_builtin(model, tmp_path)
    offset = mesh.positions[0, :3] - np.asarray(model.translation)
    assert np.linalg.norm(offset) == pytest.approx(math.sqrt(14.0), abs=1e-5)
    np.testing.assert_allclose(offset, rotation @ np.array(point), atol=1e-5)