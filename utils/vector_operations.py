from __future__ import annotations

from math import radians, tan

import numpy as np

EPSILON: float = 1e-5 # small epsilon value for floating point comparisons (to handle edge cases in vector normalization)


def vector_length(v: np.ndarray) -> float: #Euclidean length (magnitude) of a vector
    vector_array = np.asarray(v, dtype=float)
    return float(np.linalg.norm(vector_array))


def normalize_vector(v: np.ndarray) -> np.ndarray:
    vector_array = np.asarray(v, dtype=float)
    magnitude = np.linalg.norm(vector_array)
    if magnitude < EPSILON:
        raise ValueError("Cannot normalize near-zero vector")
    return vector_array / magnitude


def vector_dot(a: np.ndarray, b: np.ndarray) -> float:
    vector_a = np.asarray(a, dtype=float)
    vector_b = np.asarray(b, dtype=float)
    return float(np.dot(vector_a, vector_b))


def vector_cross(a: np.ndarray, b: np.ndarray) -> np.ndarray: #cross product of two vectors (3D)
    vector_a = np.asarray(a, dtype=float)
    vector_b = np.asarray(b, dtype=float)
    return np.cross(vector_a, vector_b)


def apply_matrix4(matrix: np.ndarray, point: np.ndarray) -> np.ndarray:
    """Transforms a 3D point by a 4x4 matrix, including the divide by w."""
    homogeneous = np.append(np.asarray(point, dtype=float), 1.0)
    transformed = np.asarray(matrix, dtype=float) @ homogeneous
    w = transformed[3]
    if abs(w) < 1e-12:
        return transformed[:3]
    return transformed[:3] / w


def transform_direction(matrix: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """Rotates/scales a direction by the upper 3x3 of a matrix (no translation) and renormalizes it."""
    linear_part = np.asarray(matrix, dtype=float)[:3, :3]
    return normalize_vector(linear_part @ np.asarray(direction, dtype=float))


def transform_normal(inverse_matrix: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Maps a surface normal through a transform, given that transform's inverse.
    Normals go through the inverse-transpose so they stay perpendicular under non-uniform scale."""
    linear_part = np.asarray(inverse_matrix, dtype=float)[:3, :3]
    return normalize_vector(linear_part.T @ np.asarray(normal, dtype=float))


def quaternion_to_matrix(quaternion: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix of a unit quaternion stored as (x, y, z, w)."""
    x, y, z, w = (float(component) for component in quaternion)
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=float,
    )


def compose_matrix(position: np.ndarray, quaternion: np.ndarray, scale: np.ndarray) -> np.ndarray:
    """translate(position) * rotate(quaternion) * scale(scale) as one 4x4 matrix."""
    matrix = np.identity(4, dtype=float)
    matrix[:3, :3] = quaternion_to_matrix(quaternion) * np.asarray(scale, dtype=float)
    matrix[:3, 3] = np.asarray(position, dtype=float)
    return matrix


def make_scale_matrix(sx: float, sy: float, sz: float) -> np.ndarray:
    matrix = np.identity(4, dtype=float)
    matrix[0, 0] = sx
    matrix[1, 1] = sy
    matrix[2, 2] = sz
    return matrix


def invert_matrix(matrix: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.inv(np.asarray(matrix, dtype=float))
    except np.linalg.LinAlgError as exc:
        raise ValueError("Cannot invert a singular transform") from exc


def look_at_rotation(position: np.ndarray, look_at: np.ndarray, up_vector: np.ndarray) -> np.ndarray:
    """Camera-to-world rotation whose local -Z axis points from position toward look_at.
    Columns are right, true_up and -forward."""
    forward = normalize_vector(np.asarray(look_at, dtype=float) - np.asarray(position, dtype=float))
    right = normalize_vector(vector_cross(forward, up_vector)) # horizontal axis
    true_up = vector_cross(right, forward) # vertical axis
    return np.column_stack((right, true_up, -forward))


def perspective_matrix(fov_deg: float, aspect: float, z_near: float, z_far: float) -> np.ndarray:
    f = 1.0 / tan(radians(fov_deg) / 2.0)
    m = np.zeros((4, 4), dtype=float)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (z_far + z_near) / (z_near - z_far)
    m[2, 3] = (2.0 * z_far * z_near) / (z_near - z_far)
    m[3, 2] = -1.0
    return m


def orthographic_matrix(left: float, right: float, top: float, bottom: float, z_near: float, z_far: float) -> np.ndarray:
    m = np.identity(4, dtype=float)
    m[0, 0] = 2.0 / (right - left)
    m[1, 1] = 2.0 / (top - bottom)
    m[2, 2] = -2.0 / (z_far - z_near)
    m[0, 3] = -(right + left) / (right - left)
    m[1, 3] = -(top + bottom) / (top - bottom)
    m[2, 3] = -(z_far + z_near) / (z_far - z_near)
    return m


def clamp_color01(color_rgb: np.ndarray) -> np.ndarray:
    """Clamps an RGB color array to the range [0.0, 1.0]."""
    color_array = np.asarray(color_rgb, dtype=float)
    return np.clip(color_array, 0.0, 1.0)


def color_to_uint8(color_rgb: np.ndarray) -> np.ndarray:
    """Converts a floating-point RGB color array (clamped to [0, 1]) to 8-bit integer [0, 255]."""
    clamped_color = clamp_color01(color_rgb)
    return (clamped_color * 255.0 + 0.5).astype(np.uint8) # 0.5 before conversion ensures correct rounding
