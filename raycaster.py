from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

import numpy as np

from camera import Camera, UnsupportedCameraType
from hit import Hit
from ray import Ray
from splat_mesh import SplatMesh
from surfaces.splat_ellipsoid import SCALE_EPSILON, SplatEllipsoid
from utils.splat_tree import SplatTree, SplatTreeNode
from utils.vector_operations import (
    apply_matrix4,
    invert_matrix,
    transform_direction,
    transform_normal,
    vector_length,
)


class Raycaster:
    """Picks Gaussian splats along a ray.

    The ray lives in world space. intersect_splat_mesh moves it into each subtree's local space,
    walks the subtree's octree with box culling, tests the splat ellipsoids it reaches, and
    returns every hit in world space sorted front to back.
    """

    def __init__(
        self,
        origin: np.ndarray | None = None,
        direction: np.ndarray | None = None,
        scale_epsilon: float = SCALE_EPSILON,
    ) -> None:
        self.ray = Ray(
            origin=np.zeros(3) if origin is None else origin,
            direction=np.array([0.0, 0.0, -1.0]) if direction is None else direction,
        )
        self.camera: Camera | None = None
        self.scale_epsilon = float(scale_epsilon)

    def set_from_camera_and_screen_position(
        self,
        camera: Camera,
        screen_position: Tuple[float, float],
        screen_dimensions: Tuple[float, float],
    ) -> Ray:
        if not (getattr(camera, "is_perspective_camera", False) or getattr(camera, "is_orthographic_camera", False)):
            raise UnsupportedCameraType(
                f"Raycaster.set_from_camera_and_screen_position: unsupported camera type {type(camera).__name__}"
            )
        ray = camera.ray_from_screen_position(screen_position, screen_dimensions)
        self.ray = ray
        self.camera = camera
        return ray

    def intersect_splat_mesh(self, splat_mesh: SplatMesh, out_hits: List[Hit] | None = None) -> List[Hit]:
        if out_hits is None:
            out_hits = []
        splat_tree = splat_mesh.get_splat_tree()

        for sub_tree in splat_tree.sub_trees:
            if sub_tree.root_node is None:
                continue
            from_local = splat_mesh.matrix_world @ splat_mesh.get_scene_transform(sub_tree.scene_index)
            to_local = invert_matrix(from_local)

            local_ray = Ray(
                origin=apply_matrix4(to_local, self.ray.origin),
                direction=transform_direction(to_local, self.ray.direction),
            )
            for local_hit in self.cast_ray_at_splat_tree_node(local_ray, splat_tree, sub_tree.root_node):
                world_point = apply_matrix4(from_local, local_hit.point)
                # local distances do not survive a scaled subtree transform
                out_hits.append(
                    replace(
                        local_hit,
                        point=world_point,
                        normal=transform_normal(to_local, local_hit.normal),
                        distance=vector_length(world_point - self.ray.origin),
                    )
                )

        out_hits.sort(key=lambda hit: hit.distance)
        return out_hits

    def closest_hit(self, splat_mesh: SplatMesh) -> Hit | None:
        hits = self.intersect_splat_mesh(splat_mesh)
        return hits[0] if hits else None

    def cast_ray_at_splat_tree_node(
        self,
        ray: Ray,
        splat_tree: SplatTree,
        node: SplatTreeNode,
        out_hits: List[Hit] | None = None,
    ) -> List[Hit]:
        """Hits of a subtree-local ray against every splat below node, in traversal order."""
        if out_hits is None:
            out_hits = []
        splat_mesh = splat_tree.splat_mesh

        stack = [node]
        while stack:
            current = stack.pop()
            if not ray.intersects_box(current.bounding_box):
                continue
            for splat_index in current.indexes:
                scale, rotation = splat_mesh.get_splat_scale_and_rotation(splat_index)
                ellipsoid = SplatEllipsoid(
                    splat_mesh.get_splat_center(splat_index),
                    rotation,
                    scale,
                    splat_mesh.get_splat_color(splat_index)[3],
                    splat_index,
                )
                hit = ellipsoid.intersect(ray, self.scale_epsilon)
                if hit is not None:
                    out_hits.append(hit)
            # reversed so children pop in their stored order
            stack.extend(reversed(current.children))
        return out_hits
