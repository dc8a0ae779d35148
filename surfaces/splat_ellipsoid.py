from __future__ import annotations

from math import log10
from typing import Tuple

import numpy as np

from hit import Hit
from ray import Ray
from utils.spatial_structures import AABB
from utils.vector_operations import (
    EPSILON,
    apply_matrix4,
    compose_matrix,
    invert_matrix,
    make_scale_matrix,
    normalize_vector,
    transform_normal,
    vector_length,
)

SCALE_EPSILON: float = 1e-7
SPHERE_ORIGIN: np.ndarray = np.zeros(3, dtype=float)


def opacity_uniform_scale(opacity: float) -> float | None:
    """Uniform factor k = 2 * log10(opacity) applied on top of a splat's own scale.

    Opacity below 1 gives a negative k, whose magnitude sets the effective radius; the sign only
    mirrors the ellipsoid through its center. At opacity 1, k vanishes and the factor falls back to 1
    so the bare rotated/scaled ellipsoid is used. Non-positive opacity has no logarithm: None.
    """
    if opacity <= 0.0:
        return None
    uniform_scale = 2.0 * log10(opacity)
    if abs(uniform_scale) < EPSILON:
        return 1.0
    return uniform_scale


class SplatEllipsoid:
    def __init__(
        self,
        center: np.ndarray,
        rotation: np.ndarray,
        scale: np.ndarray,
        opacity: float,
        splat_index: int | None = None,
    ) -> None:
        self.center: np.ndarray = np.asarray(center, dtype=float)
        self.rotation: np.ndarray = np.asarray(rotation, dtype=float)
        self.scale: np.ndarray = np.asarray(scale, dtype=float)
        self.opacity: float = float(opacity)
        self.splat_index: int | None = None if splat_index is None else int(splat_index)

    def is_degenerate(self, scale_epsilon: float = SCALE_EPSILON) -> bool:
        return bool(np.any(self.scale <= scale_epsilon))

    def sphere_space_matrices(self) -> Tuple[np.ndarray, np.ndarray] | None:
        """(from_sphere_space, to_sphere_space) for this splat, centering excluded."""
        uniform_scale = opacity_uniform_scale(self.opacity)
        if uniform_scale is None:
            return None
        local_transform = compose_matrix(SPHERE_ORIGIN, self.rotation, self.scale)
        from_sphere_space = make_scale_matrix(uniform_scale, uniform_scale, uniform_scale) @ local_transform
        return from_sphere_space, invert_matrix(from_sphere_space)

    def bounds(self) -> AABB:
        """Conservative box around the opacity-scaled ellipsoid."""
        uniform_scale = opacity_uniform_scale(self.opacity)
        if uniform_scale is None:
            return AABB(self.center, self.center)
        radius = float(np.max(np.abs(self.scale))) * abs(uniform_scale)
        return AABB(self.center - radius, self.center + radius)

    def intersect(self, ray: Ray, scale_epsilon: float = SCALE_EPSILON) -> Hit | None:
        if self.is_degenerate(scale_epsilon):
            return None
        matrices = self.sphere_space_matrices()
        if matrices is None:
            return None
        from_sphere_space, to_sphere_space = matrices

        # Directions cannot just be rotated into sphere space since the transform scales
        # non-uniformly; derive the direction from two transformed points instead.
        sphere_origin = apply_matrix4(to_sphere_space, ray.origin - self.center)
        sphere_target = apply_matrix4(to_sphere_space, ray.origin + ray.direction - self.center)
        sphere_ray = Ray(origin=sphere_origin, direction=normalize_vector(sphere_target - sphere_origin))

        sphere_hit = sphere_ray.intersect_sphere(SPHERE_ORIGIN, 1.0)
        if sphere_hit is None:
            return None

        hit_point = apply_matrix4(from_sphere_space, sphere_hit.point) + self.center
        surface_normal = transform_normal(to_sphere_space, sphere_hit.normal)
        # sphere-space t is not a world distance: the transform does not preserve lengths
        return Hit(
            distance=vector_length(hit_point - ray.origin),
            point=hit_point,
            normal=surface_normal,
            splat_index=self.splat_index,
        )
