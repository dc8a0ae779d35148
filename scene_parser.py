from typing import List, Tuple

import numpy as np

from camera import Camera, OrthographicCamera, PerspectiveCamera
from scene_settings import SceneSettings
from splat_mesh import SplatMesh, SplatScene
from utils.vector_operations import compose_matrix

EXPECTED_PARAMS = {"pcam": 12, "ocam": 15, "set": 3, "mesh": 10, "scn": 10, "spl": 14}


class _SceneBuffer:
    """Splat rows collected for one scene until the file is fully read."""

    def __init__(self, position: np.ndarray, quaternion: np.ndarray, scale: np.ndarray) -> None:
        self.position = position
        self.quaternion = quaternion
        self.scale = scale
        self.rows: List[List[float]] = []

    def to_scene(self) -> SplatScene:
        rows = np.asarray(self.rows, dtype=float).reshape(-1, 14)
        return SplatScene(
            centers=rows[:, 0:3],
            scales=rows[:, 3:6],
            rotations=rows[:, 6:10],
            colors=rows[:, 10:14],
            position=self.position,
            quaternion=self.quaternion,
            scale=self.scale,
        )


def parse_scene_file(file_path: str) -> Tuple[Camera | None, SceneSettings | None, SplatMesh]:
    camera: Camera | None = None
    scene_settings: SceneSettings | None = None
    mesh_transform: np.ndarray | None = None
    scene_buffers: List[_SceneBuffer] = []
    with open(file_path, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            obj_type = parts[0]
            if obj_type not in EXPECTED_PARAMS:
                raise ValueError("unknown object type: {}".format(obj_type))
            params = [float(p) for p in parts[1:]]
            if len(params) != EXPECTED_PARAMS[obj_type]:
                raise ValueError(
                    "line {}: '{}' expects {} values, got {}".format(
                        line_number, obj_type, EXPECTED_PARAMS[obj_type], len(params)
                    )
                )
            if obj_type == "pcam":
                camera = PerspectiveCamera(
                    np.asarray(params[:3], dtype=float),
                    np.asarray(params[3:6], dtype=float),
                    np.asarray(params[6:9], dtype=float),
                    fov=params[9],
                    near=params[10],
                    far=params[11],
                )
            elif obj_type == "ocam":
                camera = OrthographicCamera(
                    np.asarray(params[:3], dtype=float),
                    np.asarray(params[3:6], dtype=float),
                    np.asarray(params[6:9], dtype=float),
                    *params[9:15],
                )
            elif obj_type == "set":
                scene_settings = SceneSettings(params[0], params[1], params[2])
            elif obj_type == "mesh":
                mesh_transform = compose_matrix(params[:3], params[3:7], params[7:10])
            elif obj_type == "scn":
                scene_buffers.append(
                    _SceneBuffer(
                        np.asarray(params[:3], dtype=float),
                        np.asarray(params[3:7], dtype=float),
                        np.asarray(params[7:10], dtype=float),
                    )
                )
            elif obj_type == "spl":
                if not scene_buffers:
                    scene_buffers.append(_SceneBuffer(np.zeros(3), np.array([0.0, 0.0, 0.0, 1.0]), np.ones(3)))
                scene_buffers[-1].rows.append(params)
    mesh = SplatMesh([buffer.to_scene() for buffer in scene_buffers], matrix_world=mesh_transform)
    return camera, scene_settings, mesh
