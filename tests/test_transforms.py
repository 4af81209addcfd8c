import math

import numpy as np
import pytest

from layerscene.transforms import (
    from_rotation_translation,
    rotate,
    to_rotation_translation,
    translate,
    triangle_normal,
)


def test_translate_identity_sets_translation_column():
    result = translate(np.eye(4), (1.0, 2.0, 3.0))
    assert np.allclose(result[:3, 3], (1.0, 2.0, 3.0))
    assert np.allclose(result[:3, :3], np.eye(3))
    assert np.allclose(result[3], (0.0, 0.0, 0.0, 1.0))


def test_translate_moves_along_local_axes():
    base = rotate(np.eye(4), 0.7, (0.0, 0.0, 1.0))
    moved = translate(base, (2.0, 0.0, 0.0))
    assert np.allclose(moved[:3, 3], 2.0 * base[:3, 0])


def test_translations_compose():
    once = translate(translate(np.eye(4), (1.0, 2.0, 3.0)), (4.0, 5.0, 6.0))
    together = translate(np.eye(4), (5.0, 7.0, 9.0))
    assert np.allclose(once, together)


def test_translate_rejects_bad_shapes():
    with pytest.raises(ValueError):
        translate(np.eye(3), (1.0, 2.0, 3.0))
    with pytest.raises(ValueError):
        translate(np.eye(4), (1.0, 2.0))


def test_rotate_is_orthonormal():
    result = rotate(np.eye(4), 1.1, (1.0, 2.0, -0.5))
    rot = result[:3, :3]
    assert np.allclose(rot @ rot.T, np.eye(3))
    assert math.isclose(np.linalg.det(rot), 1.0)
    assert np.allclose(result[:3, 3], 0.0)


def test_rotate_inverse_returns_identity():
    axis = (0.3, -0.4, 0.8)
    there = rotate(np.eye(4), 0.9, axis)
    back = rotate(there, -0.9, axis)
    assert np.allclose(back, np.eye(4))


def test_rotate_axis_is_normalised():
    a = rotate(np.eye(4), 0.5, (0.0, 3.0, 0.0))
    b = rotate(np.eye(4), 0.5, (0.0, 1.0, 0.0))
    assert np.allclose(a, b)


def test_rotate_keeps_axis_fixed():
    axis = np.array([1.0, 1.0, 0.0]) / math.sqrt(2.0)
    result = rotate(np.eye(4), 2.0, axis)
    assert np.allclose(result[:3, :3] @ axis, axis)


def test_rotate_half_turn_about_x_flips_y_and_z():
    result = rotate(np.eye(4), math.radians(180.0), (1.0, 0.0, 0.0))
    assert np.allclose(np.diag(result), (1.0, -1.0, -1.0, 1.0))


def test_rotate_zero_axis_raises():
    with pytest.raises(ValueError):
        rotate(np.eye(4), 1.0, (0.0, 0.0, 0.0))


def test_triangle_normal_of_xy_triangle():
    normal = triangle_normal((0, 0, 0), (1, 0, 0), (0, 1, 0))
    assert np.allclose(normal, (0.0, 0.0, 1.0))


def test_triangle_normal_is_unit_and_orthogonal():
    p1, p2, p3 = np.array([1.0, 2.0, 3.0]), np.array([-2.0, 0.5, 4.0]), np.array([0.0, 5.0, -1.0])
    normal = triangle_normal(p1, p2, p3)
    assert math.isclose(np.linalg.norm(normal), 1.0)
    assert math.isclose(np.dot(normal, p2 - p1), 0.0, abs_tol=1e-12)
    assert math.isclose(np.dot(normal, p3 - p1), 0.0, abs_tol=1e-12)


def test_triangle_normal_flips_with_winding():
    p1, p2, p3 = (0.5, 0.1, 2.0), (1.0, -1.0, 0.0), (3.0, 2.0, 1.0)
    assert np.allclose(triangle_normal(p1, p2, p3), -triangle_normal(p1, p3, p2))


def test_triangle_normal_ignores_w_and_vectorises():
    a = np.array([[0.0, 0.0, 0.0, 1.0], [1.0, 1.0, 1.0, 1.0]])
    b = np.array([[1.0, 0.0, 0.0, 1.0], [2.0, 1.0, 1.0, 1.0]])
    c = np.array([[0.0, 1.0, 0.0, 1.0], [1.0, 2.0, 1.0, 1.0]])
    normals = triangle_normal(a, b, c)
    assert normals.shape == (2, 3)
    assert np.allclose(normals[0], normals[1])
    assert np.allclose(normals[0], triangle_normal(a[0, :3], b[0, :3], c[0, :3]))


def test_degenerate_triangle_gives_nan():
    normal = triangle_normal((0, 0, 0), (1, 1, 1), (2, 2, 2))
    assert normal.shape == (3,)
    np.testing.assert_array_equal(np.isnan(normal), [True, True, True])


def test_rotation_translation_round_trip():
    matrix = translate(rotate(np.eye(4), 0.4, (0.2, 0.9, -0.1)), (3.0, -1.0, 7.5))
    rot, trans = to_rotation_translation(matrix)
    assert np.allclose(from_rotation_translation(rot, trans), matrix)


def test_to_rotation_translation_returns_copies():
    matrix = np.eye(4)
    rot, trans = to_rotation_translation(matrix)
    rot[0, 0] = 5.0
    trans[0] = 5.0
    assert matrix[0, 0] == 1.0
    assert matrix[0, 3] == 0.0


def test_from_rotation_translation_rejects_bad_shapes():
    with pytest.raises(ValueError):
        from_rotation_translation(np.eye(4), (0.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        from_rotation_translation(np.eye(3), (0.0, 0.0))