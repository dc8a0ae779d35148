from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from utils.splat_tree import SplatTree, SplatTreeConfig, build_splat_tree
from utils.vector_operations import apply_matrix4, compose_matrix

IDENTITY_QUATERNION: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)


def _as_rows(values: np.ndarray, width: int, name: str) -> np.ndarray:
    rows = np.asarray(values, dtype=float)
    if rows.size == 0:
        return np.zeros((0, width), dtype=float)
    if rows.ndim != 2 or rows.shape[1] != width:
        raise ValueError(f"{name} must have shape (N, {width}), got {rows.shape}")
    return rows


class SplatScene:
    """Splat attribute arrays for one scene, stored in the scene's local space.

    Rotations are quaternions in (x, y, z, w) order and colors are RGBA in [0, 1];
    the alpha channel carries opacity.
    """

    def __init__(
        self,
        centers: np.ndarray,
        scales: np.ndarray,
        rotations: np.ndarray,
        colors: np.ndarray,
        position: np.ndarray = (0.0, 0.0, 0.0),
        quaternion: np.ndarray = IDENTITY_QUATERNION,
        scale: np.ndarray = (1.0, 1.0, 1.0),
    ) -> None:
        self.centers: np.ndarray = _as_rows(centers, 3, "centers")
        self.scales: np.ndarray = _as_rows(scales, 3, "scales")
        self.rotations: np.ndarray = _as_rows(rotations, 4, "rotations")
        self.colors: np.ndarray = _as_rows(colors, 4, "colors")
        counts = {len(self.centers), len(self.scales), len(self.rotations), len(self.colors)}
        if len(counts) != 1:
            raise ValueError("centers, scales, rotations and colors must have the same length")

        self.position: np.ndarray = np.asarray(position, dtype=float)
        self.quaternion: np.ndarray = np.asarray(quaternion, dtype=float)
        self.scale: np.ndarray = np.asarray(scale, dtype=float)

    @property
    def splat_count(self) -> int:
        return len(self.centers)

    @property
    def transform(self) -> np.ndarray:
        return compose_matrix(self.position, self.quaternion, self.scale)


class SplatMesh:
    def __init__(self, scenes: Sequence[SplatScene] = (), matrix_world: np.ndarray | None = None) -> None:
        self.scenes: List[SplatScene] = list(scenes)
        self.matrix_world: np.ndarray = (
            np.identity(4, dtype=float) if matrix_world is None else np.asarray(matrix_world, dtype=float)
        )
        self.splat_tree: SplatTree | None = None
        self._scene_offsets: np.ndarray | None = None
        self._splat_count: int | None = None

    def add_scene(self, scene: SplatScene) -> int:
        self.scenes.append(scene)
        self.splat_tree = None
        self._scene_offsets = None
        self._splat_count = None
        return len(self.scenes) - 1

    @property
    def scene_count(self) -> int:
        return len(self.scenes)

    @property
    def splat_count(self) -> int:
        if self._splat_count is None:
            self._splat_count = sum(scene.splat_count for scene in self.scenes)
        return self._splat_count

    def scene_offsets(self) -> np.ndarray:
        """Global index of the first splat of every scene. Cached until add_scene; read-only."""
        if self._scene_offsets is None:
            counts = [scene.splat_count for scene in self.scenes]
            offsets = np.concatenate(([0], np.cumsum(counts)[:-1])).astype(int) if counts else np.zeros(0, dtype=int)
            offsets.flags.writeable = False
            self._scene_offsets = offsets
        return self._scene_offsets

    def get_scene_index_for_splat(self, global_index: int) -> Tuple[int, int]:
        """(scene index, index local to that scene) for a global splat index."""
        if global_index < 0 or global_index >= self.splat_count:
            raise IndexError(f"splat index {global_index} out of range for {self.splat_count} splats")
        offsets = self.scene_offsets()
        # side="right" lands past empty scenes that share an offset
        scene_index = int(np.searchsorted(offsets, global_index, side="right")) - 1
        return scene_index, int(global_index - offsets[scene_index])

    def get_scene_transform(self, scene_index: int) -> np.ndarray:
        return self.scenes[scene_index].transform

    def get_splat_center(self, global_index: int, apply_scene_transform: bool = False) -> np.ndarray:
        scene_index, local_index = self.get_scene_index_for_splat(global_index)
        center = self.scenes[scene_index].centers[local_index].copy()
        if apply_scene_transform:
            return apply_matrix4(self.get_scene_transform(scene_index), center)
        return center

    def get_splat_scale_and_rotation(self, global_index: int) -> Tuple[np.ndarray, np.ndarray]:
        scene_index, local_index = self.get_scene_index_for_splat(global_index)
        scene = self.scenes[scene_index]
        return scene.scales[local_index].copy(), scene.rotations[local_index].copy()

    def get_splat_color(self, global_index: int) -> np.ndarray:
        scene_index, local_index = self.get_scene_index_for_splat(global_index)
        return self.scenes[scene_index].colors[local_index].copy()

    def build_splat_tree(self, config: SplatTreeConfig | None = None) -> SplatTree:
        self.splat_tree = build_splat_tree(self, config)
        return self.splat_tree

    def get_splat_tree(self) -> SplatTree:
        if self.splat_tree is None:
            return self.build_splat_tree()
        return self.splat_tree
