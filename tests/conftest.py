import numpy as np
import pytest

from splat_mesh import SplatScene

IDENTITY_ROTATION = [0.0, 0.0, 0.0, 1.0]


def build_scene(centers, scales=None, opacities=None, rotations=None, **transform):
    centers = np.asarray(centers, dtype=float).reshape(-1, 3)
    count = len(centers)
    scales = np.ones((count, 3)) if scales is None else np.asarray(scales, dtype=float).reshape(-1, 3)
    rotations = np.tile(IDENTITY_ROTATION, (count, 1)) if rotations is None else np.asarray(rotations, dtype=float)
    opacities = np.ones(count) if opacities is None else np.asarray(opacities, dtype=float)
    colors = np.column_stack((np.full((count, 3), 0.5), opacities))
    return SplatScene(centers, scales, rotations, colors, **transform)


@pytest.fixture
def make_scene():
    return build_scene
