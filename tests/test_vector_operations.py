import numpy as np
import pytest

from utils.vector_operations import (
    apply_matrix4,
    color_to_uint8,
    compose_matrix,
    invert_matrix,
    look_at_rotation,
    make_scale_matrix,
    normalize_vector,
    orthographic_matrix,
    perspective_matrix,
    quaternion_to_matrix,
    transform_direction,
    transform_normal,
)

HALF_SQRT2 = np.sqrt(0.5)


def test_normalize_vector():
    assert np.allclose(normalize_vector([3.0, 0.0, 4.0]), [0.6, 0.0, 0.8])
    with pytest.raises(ValueError):
        normalize_vector([0.0, 0.0, 0.0])


def test_quaternion_rotation_about_y():
    rotation = quaternion_to_matrix([0.0, HALF_SQRT2, 0.0, HALF_SQRT2])
    assert np.allclose(rotation @ np.array([1.0, 0.0, 0.0]), [0.0, 0.0, -1.0])


def test_compose_matrix_identity_rotation():
    matrix = compose_matrix([1.0, 2.0, 3.0], [0.0, 0.0, 0.0, 1.0], [2.0, 3.0, 4.0])
    expected = np.diag([2.0, 3.0, 4.0, 1.0])
    expected[:3, 3] = [1.0, 2.0, 3.0]
    assert np.allclose(matrix, expected)


def test_apply_matrix4_translation_and_scale():
    matrix = compose_matrix([1.0, 0.0, 0.0], [0.0, 0.0, 0.0, 1.0], [2.0, 2.0, 2.0])
    assert np.allclose(apply_matrix4(matrix, [1.0, 1.0, 1.0]), [3.0, 2.0, 2.0])


def test_transform_direction_ignores_translation():
    matrix = compose_matrix([5.0, 5.0, 5.0], [0.0, 0.0, 0.0, 1.0], [3.0, 1.0, 1.0])
    assert np.allclose(transform_direction(matrix, [1.0, 0.0, 0.0]), [1.0, 0.0, 0.0])


def test_transform_normal_stays_perpendicular_under_non_uniform_scale():
    forward = make_scale_matrix(2.0, 1.0, 1.0)
    normal = transform_normal(invert_matrix(forward), normalize_vector([1.0, 1.0, 0.0]))
    tangent = forward[:3, :3] @ np.array([1.0, -1.0, 0.0])
    assert abs(np.dot(normal, tangent)) < 1e-9
    assert np.isclose(np.linalg.norm(normal), 1.0)


def test_invert_singular_matrix_raises():
    with pytest.raises(ValueError):
        invert_matrix(make_scale_matrix(0.0, 1.0, 1.0))


def test_look_at_rotation_axes():
    rotation = look_at_rotation([0.0, 0.0, 5.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0])
    assert np.allclose(rotation, np.identity(3))


def test_orthographic_depth_midpoint_is_camera_plane():
    near, far = 0.5, 20.0
    clip = orthographic_matrix(-1.0, 1.0, 1.0, -1.0, near, far) @ np.array([0.0, 0.0, 0.0, 1.0])
    assert np.isclose(clip[2], (near + far) / (near - far))


def test_perspective_maps_near_plane_to_minus_one():
    projection = perspective_matrix(60.0, 1.5, 0.1, 100.0)
    clip = projection @ np.array([0.0, 0.0, -0.1, 1.0])
    assert np.isclose(clip[2] / clip[3], -1.0)


def test_color_to_uint8_rounds_and_clamps():
    assert color_to_uint8(np.array([0.0, 0.5, 2.0])).tolist() == [0, 128, 255]
