import numpy as np
from PIL import Image

from camera import Camera
from raycaster import Raycaster
from splat_mesh import SplatMesh
from utils.vector_operations import clamp_color01, color_to_uint8

RENDER_MODES = ("color", "depth")
BACKGROUND_COLOR = (0.0, 0.0, 0.0)


def save_image(image_array: np.ndarray, output_path: str) -> None:
    image = Image.fromarray(color_to_uint8(image_array))
    image.save(output_path)


def render_pick_image(
    camera: Camera,
    splat_mesh: SplatMesh,
    width: int,
    height: int,
    mode: str = "color",
    background_color: np.ndarray | None = None,
    raycaster: Raycaster | None = None,
) -> np.ndarray:
    """
    Casts one pick ray through every pixel center.
    "color" shows the RGB of the nearest splat hit; "depth" shows nearer hits brighter.
    """
    if mode not in RENDER_MODES:
        raise ValueError(f"Unknown render mode: {mode}")
    raycaster = raycaster or Raycaster()
    splat_mesh.get_splat_tree()

    if background_color is None:
        background_color = BACKGROUND_COLOR
    image = np.tile(np.asarray(background_color, dtype=float), (height, width, 1))
    distances = np.full((height, width), np.inf)
    for i in range(height):
        for j in range(width):
            raycaster.set_from_camera_and_screen_position(camera, (j + 0.5, i + 0.5), (width, height))
            best_hit = raycaster.closest_hit(splat_mesh)
            if best_hit is None:
                continue
            distances[i, j] = best_hit.distance
            if mode == "color":
                image[i, j, :] = splat_mesh.get_splat_color(best_hit.splat_index)[:3]

    if mode == "depth":
        hit_mask = np.isfinite(distances)
        if np.any(hit_mask):
            near = float(distances[hit_mask].min())
            far = float(distances[hit_mask].max())
            span = far - near if far > near else 1.0
            # nearest hit is white, farthest keeps a faint grey so it differs from misses
            brightness = 1.0 - 0.8 * (distances[hit_mask] - near) / span
            image[hit_mask] = brightness[:, None]

    return clamp_color01(image)
