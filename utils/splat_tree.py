from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, List, Sequence

import numpy as np

from surfaces.splat_ellipsoid import SplatEllipsoid
from utils.spatial_structures import AABB

if TYPE_CHECKING:
    from splat_mesh import SplatMesh


@dataclass(slots=True)
class SplatTreeConfig:
    max_depth: int = 8
    max_centers_per_node: int = 4


class SplatTreeNode:
    """Octree node. bounding_box is the culling box and encloses every splat ellipsoid below it."""

    __slots__ = ("bounding_box", "indexes", "children", "depth")

    def __init__(
        self,
        bounding_box: AABB,
        indexes: Sequence[int] | None = None,
        children: Sequence["SplatTreeNode"] | None = None,
        depth: int = 0,
    ) -> None:
        self.bounding_box = bounding_box
        self.indexes: List[int] = list(indexes) if indexes else []
        self.children: List[SplatTreeNode] = list(children) if children else []
        self.depth = depth

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def iter_nodes(self) -> Iterator["SplatTreeNode"]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class SplatSubTree:
    __slots__ = ("root_node", "scene_index")

    def __init__(self, root_node: SplatTreeNode | None, scene_index: int) -> None:
        self.root_node = root_node
        self.scene_index = scene_index

    @property
    def node_count(self) -> int:
        if self.root_node is None:
            return 0
        return sum(1 for _ in self.root_node.iter_nodes())


class SplatTree:
    def __init__(self, splat_mesh: SplatMesh, sub_trees: Sequence[SplatSubTree]) -> None:
        self.splat_mesh = splat_mesh
        self.sub_trees: List[SplatSubTree] = list(sub_trees)

    @property
    def node_count(self) -> int:
        return sum(sub_tree.node_count for sub_tree in self.sub_trees)


def _splat_bounds(splat_mesh: SplatMesh, global_index: int) -> AABB:
    scale, rotation = splat_mesh.get_splat_scale_and_rotation(global_index)
    ellipsoid = SplatEllipsoid(
        splat_mesh.get_splat_center(global_index),
        rotation,
        scale,
        splat_mesh.get_splat_color(global_index)[3],
    )
    return ellipsoid.bounds()


def _subdivide(region: AABB) -> List[AABB]:
    min_point = region.min
    max_point = region.max
    center = region.centroid
    children = []
    for dx in (0, 1):
        for dy in (0, 1):
            for dz in (0, 1):
                child_min = np.array(
                    [
                        min_point[0] if dx == 0 else center[0],
                        min_point[1] if dy == 0 else center[1],
                        min_point[2] if dz == 0 else center[2],
                    ],
                    dtype=float,
                )
                child_max = np.array(
                    [
                        center[0] if dx == 0 else max_point[0],
                        center[1] if dy == 0 else max_point[1],
                        center[2] if dz == 0 else max_point[2],
                    ],
                    dtype=float,
                )
                children.append(AABB(child_min, child_max))
    return children


def _octant(center: np.ndarray, split_point: np.ndarray) -> int:
    # matches the dx, dy, dz nesting order of _subdivide
    dx, dy, dz = (int(center[axis] >= split_point[axis]) for axis in range(3))
    return dx * 4 + dy * 2 + dz


def _build_node(
    region: AABB,
    indexes: List[int],
    centers: Dict[int, np.ndarray],
    splat_boxes: Dict[int, AABB],
    depth: int,
    config: SplatTreeConfig,
) -> SplatTreeNode:
    should_split = depth < config.max_depth and len(indexes) > config.max_centers_per_node
    if not should_split:
        return SplatTreeNode(AABB.from_boxes([splat_boxes[i] for i in indexes]), indexes=indexes, depth=depth)

    child_regions = _subdivide(region)
    split_point = region.centroid
    buckets: List[List[int]] = [[] for _ in range(8)]
    for index in indexes:
        buckets[_octant(centers[index], split_point)].append(index)

    children = [
        _build_node(child_regions[octant], bucket, centers, splat_boxes, depth + 1, config)
        for octant, bucket in enumerate(buckets)
        if bucket
    ]
    bounding_box = AABB.from_boxes([child.bounding_box for child in children])
    return SplatTreeNode(bounding_box, children=children, depth=depth)


def build_splat_tree(splat_mesh: SplatMesh, config: SplatTreeConfig | None = None) -> SplatTree:
    """One octree per mesh scene, built over the scene's splats in scene-local space."""
    config = config or SplatTreeConfig()
    sub_trees: List[SplatSubTree] = []
    offsets = splat_mesh.scene_offsets()
    for scene_index, scene in enumerate(splat_mesh.scenes):
        if scene.splat_count == 0:
            sub_trees.append(SplatSubTree(None, scene_index))
            continue
        first = int(offsets[scene_index])
        indexes = list(range(first, first + scene.splat_count))
        centers = {index: scene.centers[index - first] for index in indexes}
        splat_boxes = {index: _splat_bounds(splat_mesh, index) for index in indexes}

        # cube region so octants stay cubic
        center_bounds = AABB.from_points(scene.centers)
        half_extent = max(float(np.max(center_bounds.size)) * 0.5, 1e-6)
        region = AABB(center_bounds.centroid - half_extent, center_bounds.centroid + half_extent)

        root_node = _build_node(region, indexes, centers, splat_boxes, 0, config)
        sub_trees.append(SplatSubTree(root_node, scene_index))
    return SplatTree(splat_mesh, sub_trees)
