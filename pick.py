import argparse
import time
from typing import List, Sequence

from hit import Hit
from raycaster import Raycaster
from renderer import RENDER_MODES, render_pick_image, save_image
from scene_parser import parse_scene_file
from scene_settings import SceneSettings


def log_phase(label: str, seconds: float) -> None:
    print(f"[phase] {label}: {seconds:.2f}s")


def format_hit(rank: int, hit: Hit) -> str:
    x, y, z = (float(component) for component in hit.point)
    return f"[hit] #{rank} splat={hit.splat_index} distance={hit.distance:.4f} point=({x:.4f}, {y:.4f}, {z:.4f})"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Gaussian splat picker')
    parser.add_argument('scene_file', type=str, help='Path to the scene file')
    parser.add_argument('screen_x', type=float, help='Pick position, pixels from the left edge')
    parser.add_argument('screen_y', type=float, help='Pick position, pixels from the top edge')
    parser.add_argument('--width', type=int, default=500, help='Viewport width')
    parser.add_argument('--height', type=int, default=500, help='Viewport height')
    parser.add_argument('--max-hits', type=int, default=10, help='Number of hits to print')
    parser.add_argument('--max-depth', type=int, default=None, help='Override the splat tree maximum depth')
    parser.add_argument('--leaf-size', type=int, default=None, help='Override the splat tree centers per node')
    parser.add_argument('--output-image', type=str, default=None, help='Also write a per-pixel pick image here')
    parser.add_argument('--mode', choices=RENDER_MODES, default='color', help='Pick image mode')
    return parser


def main(argv: Sequence[str] | None = None) -> List[Hit]:
    args = build_parser().parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        raise ValueError(f"Viewport size must be positive, got {args.width}x{args.height}")

    parse_start = time.perf_counter()
    camera, scene_settings, splat_mesh = parse_scene_file(args.scene_file)
    log_phase("parse_scene", time.perf_counter() - parse_start)

    if camera is None:
        raise ValueError("Scene file is missing a camera ('pcam' or 'ocam' line)")
    if scene_settings is None:
        scene_settings = SceneSettings()
    if args.max_depth is not None:
        scene_settings.max_depth = args.max_depth
    if args.leaf_size is not None:
        scene_settings.max_centers_per_node = args.leaf_size
    if camera.is_perspective_camera:
        camera.aspect = args.width / args.height

    tree_start = time.perf_counter()
    splat_tree = splat_mesh.build_splat_tree(scene_settings.tree_config())
    log_phase("build_tree", time.perf_counter() - tree_start)

    raycaster = Raycaster(scale_epsilon=scene_settings.scale_epsilon)
    pick_start = time.perf_counter()
    raycaster.set_from_camera_and_screen_position(camera, (args.screen_x, args.screen_y), (args.width, args.height))
    hits = raycaster.intersect_splat_mesh(splat_mesh)
    log_phase("pick", time.perf_counter() - pick_start)

    for rank, hit in enumerate(hits[: args.max_hits]):
        print(format_hit(rank, hit))
    print(
        "[stats] splats={}, subtrees={}, nodes={}, hits={}".format(
            splat_mesh.splat_count, len(splat_tree.sub_trees), splat_tree.node_count, len(hits)
        )
    )

    if args.output_image:
        render_start = time.perf_counter()
        image_array = render_pick_image(camera, splat_mesh, args.width, args.height, args.mode, raycaster=raycaster)
        log_phase("render", time.perf_counter() - render_start)

        save_start = time.perf_counter()
        save_image(image_array, args.output_image)
        log_phase("save_image", time.perf_counter() - save_start)

    return hits


def run(argv: Sequence[str] | None = None) -> int:
    """Console entry point: main() wrapped in the [timer] lines, exit status 0."""
    program_start = time.time()
    readable_start = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(program_start))
    print(f"[timer] Program started at {readable_start}")
    try:
        main(argv)
    finally:
        program_end = time.time()
        readable_end = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(program_end))
        elapsed = program_end - program_start
        print(f"[timer] Program ended at {readable_end} (elapsed {elapsed:.2f}s)")
    return 0


if __name__ == '__main__':
    raise SystemExit(run())
