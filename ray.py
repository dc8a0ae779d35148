from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from hit import Hit
from utils.spatial_structures import AABB
from utils.vector_operations import EPSILON, normalize_vector, vector_dot


@dataclass(frozen=True, slots=True)
class Ray:
    """Origin plus direction. The direction is expected to be unit length; callers normalize."""

    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", np.asarray(self.origin, dtype=float))
        object.__setattr__(self, "direction", np.asarray(self.direction, dtype=float))

    def at(self, t: float) -> np.ndarray:
        return self.origin + t * self.direction

    def intersect_box(self, box: AABB) -> np.ndarray | None:
        """Entry point of the ray into the box, or the origin itself when it starts inside."""
        hit_interval = box.hit(self, 0.0)
        if hit_interval is None:
            return None
        return self.at(hit_interval[0])

    def intersects_box(self, box: AABB) -> bool:
        return box.hit(self, 0.0) is not None

    def intersect_sphere(self, center: np.ndarray, radius: float) -> Hit | None:
        sphere_center = np.asarray(center, dtype=float)

        origin_to_center = self.origin - sphere_center
        quadratic_a = vector_dot(self.direction, self.direction)
        quadratic_b = 2.0 * vector_dot(origin_to_center, self.direction)
        quadratic_c = vector_dot(origin_to_center, origin_to_center) - radius * radius

        discriminant = quadratic_b * quadratic_b - 4.0 * quadratic_a * quadratic_c
        if discriminant < 0.0:
            return None

        sqrt_discriminant = float(np.sqrt(discriminant))
        inverse_2a = 1.0 / (2.0 * quadratic_a)

        t_near = (-quadratic_b - sqrt_discriminant) * inverse_2a
        t_far = (-quadratic_b + sqrt_discriminant) * inverse_2a
        if t_near > t_far:
            t_near, t_far = t_far, t_near

        # origin inside the sphere reports the exit point
        hit_distance = t_near if t_near > EPSILON else t_far
        if hit_distance <= EPSILON:
            return None

        hit_point = self.at(hit_distance)
        surface_normal = normalize_vector(hit_point - sphere_center)
        return Hit(distance=float(hit_distance), point=hit_point, normal=surface_normal)
