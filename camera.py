from __future__ import annotations

from typing import Tuple

import numpy as np

from ray import Ray
from utils.vector_operations import (
    apply_matrix4,
    invert_matrix,
    look_at_rotation,
    normalize_vector,
    orthographic_matrix,
    perspective_matrix,
    transform_direction,
)

CAMERA_FORWARD: np.ndarray = np.array([0.0, 0.0, -1.0])


class UnsupportedCameraType(TypeError):
    pass


class Camera:
    """Base for pick cameras. Subclasses provide projection_matrix and ray_from_screen_position."""

    is_perspective_camera: bool = False
    is_orthographic_camera: bool = False

    def __init__(
        self,
        position: np.ndarray,
        look_at: np.ndarray,
        up_vector: np.ndarray,
        near: float,
        far: float,
    ) -> None:
        self.position = np.asarray(position, dtype=float)
        self.look_at = np.asarray(look_at, dtype=float)
        self.up_vector = np.asarray(up_vector, dtype=float)
        self.near = float(near)
        self.far = float(far)

    @property
    def matrix_world(self) -> np.ndarray:
        """Camera-to-world transform; the camera looks down its local -Z axis."""
        matrix = np.identity(4, dtype=float)
        matrix[:3, :3] = look_at_rotation(self.position, self.look_at, self.up_vector)
        matrix[:3, 3] = self.position
        return matrix

    @property
    def projection_matrix(self) -> np.ndarray:
        raise NotImplementedError

    def unproject(self, ndc_point: np.ndarray) -> np.ndarray:
        """Clip-space point to world space: camera world matrix times inverse projection, then divide by w."""
        clip_to_world = self.matrix_world @ invert_matrix(self.projection_matrix)
        return apply_matrix4(clip_to_world, ndc_point)

    @staticmethod
    def screen_to_ndc(screen_position: Tuple[float, float], screen_dimensions: Tuple[float, float]) -> Tuple[float, float]:
        screen_x, screen_y = (float(value) for value in screen_position)
        width, height = (float(value) for value in screen_dimensions)
        if width <= 0.0 or height <= 0.0:
            raise ValueError(f"Screen dimensions must be positive, got {width}x{height}")
        # screen space is top-down, NDC is bottom-up
        ndc_x = screen_x / width * 2.0 - 1.0
        ndc_y = (height - screen_y) / height * 2.0 - 1.0
        return ndc_x, ndc_y

    def ray_from_screen_position(
        self, screen_position: Tuple[float, float], screen_dimensions: Tuple[float, float]
    ) -> Ray:
        raise NotImplementedError


class PerspectiveCamera(Camera):
    is_perspective_camera = True

    def __init__(
        self,
        position: np.ndarray,
        look_at: np.ndarray,
        up_vector: np.ndarray,
        fov: float = 50.0,
        aspect: float = 1.0,
        near: float = 0.1,
        far: float = 2000.0,
    ) -> None:
        super().__init__(position, look_at, up_vector, near, far)
        self.fov = float(fov)
        self.aspect = float(aspect)

    @property
    def projection_matrix(self) -> np.ndarray:
        return perspective_matrix(self.fov, self.aspect, self.near, self.far)

    def ray_from_screen_position(
        self, screen_position: Tuple[float, float], screen_dimensions: Tuple[float, float]
    ) -> Ray:
        ndc_x, ndc_y = self.screen_to_ndc(screen_position, screen_dimensions)
        origin = self.matrix_world[:3, 3].copy()
        target = self.unproject(np.array([ndc_x, ndc_y, 0.5]))
        return Ray(origin=origin, direction=normalize_vector(target - origin))


class OrthographicCamera(Camera):
    is_orthographic_camera = True

    def __init__(
        self,
        position: np.ndarray,
        look_at: np.ndarray,
        up_vector: np.ndarray,
        left: float = -1.0,
        right: float = 1.0,
        top: float = 1.0,
        bottom: float = -1.0,
        near: float = 0.1,
        far: float = 2000.0,
    ) -> None:
        super().__init__(position, look_at, up_vector, near, far)
        self.left = float(left)
        self.right = float(right)
        self.top = float(top)
        self.bottom = float(bottom)

    @property
    def projection_matrix(self) -> np.ndarray:
        return orthographic_matrix(self.left, self.right, self.top, self.bottom, self.near, self.far)

    def ray_from_screen_position(
        self, screen_position: Tuple[float, float], screen_dimensions: Tuple[float, float]
    ) -> Ray:
        ndc_x, ndc_y = self.screen_to_ndc(screen_position, screen_dimensions)
        # this clip depth maps back onto the camera plane (view z = 0)
        depth_midpoint = (self.near + self.far) / (self.near - self.far)
        origin = self.unproject(np.array([ndc_x, ndc_y, depth_midpoint]))
        direction = transform_direction(self.matrix_world, CAMERA_FORWARD)
        return Ray(origin=origin, direction=direction)
