import numpy as np
import pytest
from PIL import Image

from camera import OrthographicCamera
from pick import main, run
from renderer import render_pick_image
from splat_mesh import SplatMesh, SplatScene

PICK_SCENE = """
pcam 0 0 5  0 0 0  0 1 0  60 0.1 100
set 1e-7 8 4
spl 0 0 0  1 1 1  0 0 0 1  1 0 0 1
spl 0 0 -5  1 1 1  0 0 0 1  0 0 1 1
"""


def red_splat_mesh():
    return SplatMesh([SplatScene([[0.0, 0.0, 0.0]], [[1.0, 1.0, 1.0]], [[0.0, 0.0, 0.0, 1.0]], [[1.0, 0.0, 0.0, 1.0]])])


def front_camera():
    return OrthographicCamera([0.0, 0.0, 5.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0], -2.0, 2.0, 2.0, -2.0, 0.1, 50.0)


def test_render_color_mode():
    image = render_pick_image(front_camera(), red_splat_mesh(), 9, 9, "color")
    assert image.shape == (9, 9, 3)
    assert np.allclose(image[4, 4], [1.0, 0.0, 0.0])
    assert np.allclose(image[0, 0], [0.0, 0.0, 0.0])


def test_render_depth_mode():
    image = render_pick_image(front_camera(), red_splat_mesh(), 9, 9, "depth")
    assert np.all(image[4, 4] > 0.0)
    assert np.allclose(image[0, 0], 0.0)


def test_pick_prints_hits_front_to_back(tmp_path, capsys):
    scene_path = tmp_path / "scene.txt"
    scene_path.write_text(PICK_SCENE)

    hits = main([str(scene_path), "50", "50", "--width", "100", "--height", "100"])

    assert [hit.splat_index for hit in hits] == [0, 1]
    output = capsys.readouterr().out
    assert "[hit] #0 splat=0 distance=4.0000" in output
    assert "[hit] #1 splat=1 distance=9.0000" in output
    assert "[stats] splats=2, subtrees=1" in output


def test_pick_writes_image(tmp_path):
    scene_path = tmp_path / "scene.txt"
    scene_path.write_text(PICK_SCENE)
    image_path = tmp_path / "pick.png"

    main([str(scene_path), "4", "4", "--width", "8", "--height", "8", "--output-image", str(image_path), "--mode", "depth"])

    with Image.open(image_path) as image:
        assert image.size == (8, 8)


def test_run_wraps_main_with_timer_and_exits_cleanly(tmp_path, capsys):
    scene_path = tmp_path / "scene.txt"
    scene_path.write_text(PICK_SCENE)

    status = run([str(scene_path), "50", "50", "--width", "100", "--height", "100"])

    assert not status
    output = capsys.readouterr().out
    assert "[timer] Program started at" in output
    assert "[timer] Program ended at" in output
    assert "[hit] #0 splat=0" in output


@pytest.mark.parametrize("width, height", [("100", "0"), ("0", "100"), ("-5", "100")])
def test_non_positive_viewport_is_rejected(tmp_path, width, height):
    scene_path = tmp_path / "scene.txt"
    scene_path.write_text(PICK_SCENE)

    with pytest.raises(ValueError, match="Viewport size must be positive"):
        main([str(scene_path), "0", "0", "--width", width, "--height", height])


def test_render_fills_misses_with_background_color():
    default_image = render_pick_image(front_camera(), red_splat_mesh(), 5, 5, "color")
    assert np.allclose(default_image[0, 0], [0.0, 0.0, 0.0])

    blue_image = render_pick_image(front_camera(), red_splat_mesh(), 5, 5, "color", background_color=[0.0, 0.0, 1.0])
    assert np.allclose(blue_image[0, 0], [0.0, 0.0, 1.0])
    assert np.allclose(blue_image[2, 2], [1.0, 0.0, 0.0])

    again = render_pick_image(front_camera(), red_splat_mesh(), 5, 5, "color")
    assert np.allclose(again[0, 0], [0.0, 0.0, 0.0])
